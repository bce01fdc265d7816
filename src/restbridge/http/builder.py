# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Request construction helpers.

Everything here is pure: inputs are validated and turned into a
RequestDescriptor (or a body variant) without touching the network. Host
resolution is shared with ClientRegistry through `derive_host_key`.
"""

from __future__ import annotations

import io
import re
from collections.abc import Mapping
from typing import IO, Any

import httpx

from ..errors import ArgumentOutOfRangeError, InvalidArgumentError, MalformedArgumentError, MissingArgumentError
from .models import (
    EMPTY_BODY,
    Body,
    BodyKind,
    EmptyBody,
    FileAttachment,
    HttpMethod,
    RequestDescriptor,
    StringBody,
)

_CONTENT_TYPES: dict[BodyKind, str] = {
    BodyKind.XML: "text/xml",
    BodyKind.JSON: "application/json",
    BodyKind.PLAIN_TEXT: "text/plain",
    BodyKind.URL_ENCODED_FORM: "application/x-www-form-urlencoded",
}

_NAME_SEPARATORS_RE = re.compile(r"[-_\s]")
MAX_PORT = 65535


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_absolute_url(value: Any, param_name: str) -> httpx.URL:
    """Parse `value` into an absolute httpx.URL or raise naming `param_name`."""
    if value is None:
        raise MissingArgumentError(param_name)
    if _is_blank(str(value)):
        raise MissingArgumentError(param_name, value=value)
    if isinstance(value, httpx.URL):
        url = value
    else:
        try:
            url = httpx.URL(str(value).strip())
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            raise MalformedArgumentError(param_name, f"Invalid URI: {exc}", value=value) from exc
    if not url.is_absolute_url or not url.host:
        raise MalformedArgumentError(param_name, "Expected an absolute URI with scheme and host", value=value)
    if url.port is not None and not 0 < url.port <= MAX_PORT:
        raise MalformedArgumentError(param_name, f"Port {url.port} is out of range", value=value)
    return url


def derive_host_key(endpoint: Any) -> str:
    """
    Return the scheme+host+port portion of `endpoint`.

    Default ports are omitted so `http://h` and `http://h:80/x` share a key.
    """
    url = parse_absolute_url(endpoint, "endpoint")
    return host_key_from_url(url)


def host_key_from_url(url: httpx.URL) -> str:
    host = url.raw_host.decode("ascii").lower()
    if ":" in host:
        host = f"[{host}]"
    port = f":{url.port}" if url.port is not None else ""
    return f"{url.scheme.lower()}://{host}{port}"


def parse_method(method: Any) -> HttpMethod:
    if isinstance(method, HttpMethod):
        return method
    if _is_blank(method):
        raise MissingArgumentError("method", value=method)
    try:
        return HttpMethod(str(method).strip().upper())
    except ValueError:
        raise ArgumentOutOfRangeError("method", "Method not supported by the HTTP transport", value=method) from None


def build_request(method: Any, endpoint: Any, headers: Mapping[str, str] | None = None) -> RequestDescriptor:
    """
    Validate inputs and build a body-less RequestDescriptor.

    The descriptor keeps only the path and query of `endpoint`; the authority
    becomes `host_key` and is resolved by ClientRegistry.
    """
    parsed_method = parse_method(method)
    url = parse_absolute_url(endpoint, "endpoint")
    path_and_query = url.raw_path.decode("ascii") or "/"
    return RequestDescriptor(
        method=parsed_method,
        host_key=host_key_from_url(url),
        path_and_query=path_and_query,
        headers={key: value for key, value in headers.items()} if headers else {},
    )


def resolve_body_kind(body_kind: Any) -> BodyKind:
    """Accept a BodyKind or its name/value as written in a dynamically typed script."""
    if isinstance(body_kind, BodyKind):
        return body_kind
    if isinstance(body_kind, str):
        try:
            return BodyKind(body_kind.strip().lower())
        except ValueError:
            pass
        wanted = _NAME_SEPARATORS_RE.sub("", body_kind).lower()
        for kind in BodyKind:
            if kind.name.replace("_", "").lower() == wanted:
                return kind
    raise ArgumentOutOfRangeError("body_kind", value=body_kind)


def get_body_content_type(body_kind: Any) -> str:
    """Return the MIME type for a string body of the given kind."""
    return _CONTENT_TYPES[resolve_body_kind(body_kind)]


def _measure_stream(stream: IO[bytes]) -> tuple[int, int]:
    """Return (current position, bytes remaining) leaving the stream where it was."""
    try:
        position = stream.tell()
        end = stream.seek(0, io.SEEK_END)
        stream.seek(position)
    except (AttributeError, OSError, ValueError) as exc:
        raise MalformedArgumentError("body_stream", "Stream must support length inspection") from exc
    return position, max(0, end - position)


def build_file_attachment(
    file_name: str | None,
    body_stream: IO[bytes] | None,
    content_type: str | None,
    *,
    name: str | None = None,
) -> FileAttachment:
    """
    Wrap `body_stream` as a file attachment.

    `file_name` is only used for the Content-Disposition header. The length is
    measured now; the bytes are copied from the stream when the request is sent.
    """
    if body_stream is None:
        raise MissingArgumentError("body_stream")
    if _is_blank(content_type):
        raise MissingArgumentError("content_type", value=content_type)
    offset, length = _measure_stream(body_stream)
    return FileAttachment(
        name=name or content_type,
        file_name=file_name,
        content_type=content_type,
        content_length=length,
        stream=body_stream,
        offset=offset,
    )


def string_body(body_kind: Any, content: Any) -> Body:
    """Build a StringBody, or EMPTY_BODY when there is no content."""
    if content is None:
        return EMPTY_BODY
    kind = resolve_body_kind(body_kind)
    if kind is not BodyKind.JSON and not isinstance(content, str):
        raise InvalidArgumentError("body", f"{kind.name} bodies must be strings", value=content)
    return StringBody(kind=kind, content=content)


def attach_body(descriptor: RequestDescriptor, body: Body | None) -> RequestDescriptor:
    if body is None:
        return descriptor.with_body(EMPTY_BODY)
    if not isinstance(body, (EmptyBody, StringBody, FileAttachment)):
        raise InvalidArgumentError("body", f"Unsupported body type {type(body).__name__}", value=body)
    return descriptor.with_body(body)


__all__ = [
    "attach_body",
    "build_file_attachment",
    "build_request",
    "derive_host_key",
    "get_body_content_type",
    "host_key_from_url",
    "parse_absolute_url",
    "parse_method",
    "resolve_body_kind",
    "string_body",
]
