# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
restbridge package entrypoint.

Issue REST calls from scripts through httpx: requests are described with
small validated descriptors, executed by per-host clients cached in an
explicitly owned ClientRegistry, and JSON bodies go through a pluggable
serializer chosen when the registry is built.
"""

from .config import HttpSettings, load_http_settings
from .errors import (
    ArgumentErrorKind,
    ArgumentOutOfRangeError,
    ErrorCategory,
    InvalidArgumentError,
    MalformedArgumentError,
    MissingArgumentError,
)
from .http import (
    BodyKind,
    ClientHandle,
    ClientRegistry,
    FileAttachment,
    HttpMethod,
    JsonSerializer,
    RequestDescriptor,
    StringBody,
    build_file_attachment,
    build_request,
    derive_host_key,
    get_body_content_type,
)
from .log import setup_logging
from .runtime import RestBridge, rest, rest_file
from .utils.context import rest_context
from .version import __version__

__all__ = [
    "ArgumentErrorKind",
    "ArgumentOutOfRangeError",
    "BodyKind",
    "ClientHandle",
    "ClientRegistry",
    "ErrorCategory",
    "FileAttachment",
    "HttpMethod",
    "HttpSettings",
    "InvalidArgumentError",
    "JsonSerializer",
    "MalformedArgumentError",
    "MissingArgumentError",
    "RequestDescriptor",
    "RestBridge",
    "StringBody",
    "__version__",
    "build_file_attachment",
    "build_request",
    "derive_host_key",
    "get_body_content_type",
    "load_http_settings",
    "rest",
    "rest_context",
    "rest_file",
    "setup_logging",
]
