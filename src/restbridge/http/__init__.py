# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request building and client registry exports."""

from .builder import (
    attach_body,
    build_file_attachment,
    build_request,
    derive_host_key,
    get_body_content_type,
    string_body,
)
from .models import (
    EMPTY_BODY,
    Body,
    BodyKind,
    EmptyBody,
    FileAttachment,
    Headers,
    HttpMethod,
    RequestDescriptor,
    StreamBody,
    StringBody,
)
from .registry import AdvancedResponseWriter, ClientHandle, ClientRegistry, ResponseWriter
from .serializer import BodySerializer, JsonSerializer

__all__ = [
    "AdvancedResponseWriter",
    "Body",
    "BodyKind",
    "BodySerializer",
    "ClientHandle",
    "ClientRegistry",
    "EMPTY_BODY",
    "EmptyBody",
    "FileAttachment",
    "Headers",
    "HttpMethod",
    "JsonSerializer",
    "RequestDescriptor",
    "ResponseWriter",
    "StreamBody",
    "StringBody",
    "attach_body",
    "build_file_attachment",
    "build_request",
    "derive_host_key",
    "get_body_content_type",
    "string_body",
]
