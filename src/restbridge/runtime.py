# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level restbridge facade: build a request, pick a client, execute."""

from __future__ import annotations

from collections.abc import Mapping
from contextlib import suppress
from typing import IO, Any

import httpx

from .config import HttpSettings
from .http.builder import attach_body, build_file_attachment, build_request, string_body
from .http.models import EMPTY_BODY, BodyKind
from .http.registry import AdvancedResponseWriter, ClientRegistry, ResponseWriter
from .utils.context import get_registry, get_rest_context


class RestBridge:
    """
    Convenience wrapper that sends REST requests through a ClientRegistry.

    A registry passed in is shared and left open on `close()`; one created
    here is owned by the bridge and closed with it.
    """

    def __init__(
        self,
        registry: ClientRegistry | None = None,
        *,
        settings: HttpSettings | None = None,
        transport: httpx.BaseTransport | None = None,
        default_headers: Mapping[str, str] | None = None,
    ):
        self._owns_registry = registry is None
        self.registry = registry if registry is not None else ClientRegistry(settings=settings, transport=transport)
        self.default_headers = dict(default_headers or {})

    def _headers(self, headers: Mapping[str, str] | None) -> dict[str, str] | None:
        if not self.default_headers:
            return dict(headers) if headers else None
        merged = dict(self.default_headers)
        merged.update(headers or {})
        return merged

    def rest(
        self,
        method: str,
        endpoint: Any,
        headers: Mapping[str, str] | None = None,
        *,
        body_kind: BodyKind | str = BodyKind.PLAIN_TEXT,
        body: Any = None,
        response_writer: ResponseWriter | None = None,
        advanced_response_writer: AdvancedResponseWriter | None = None,
    ) -> httpx.Response:
        """Send a request with an empty or string body and return the httpx response."""
        request = build_request(method, endpoint, self._headers(headers))
        request = attach_body(request, string_body(body_kind, body))
        has_writer = response_writer is not None or advanced_response_writer is not None
        client = self.registry.get_client(request.host_key, buffered_read=not has_writer)
        return client.execute(
            request,
            response_writer=response_writer,
            advanced_response_writer=advanced_response_writer,
        )

    def rest_file(
        self,
        method: str,
        endpoint: Any,
        headers: Mapping[str, str] | None,
        content_type: str,
        file_name: str | None,
        body_stream: IO[bytes] | None,
        *,
        response_writer: ResponseWriter | None = None,
        advanced_response_writer: AdvancedResponseWriter | None = None,
    ) -> httpx.Response:
        """
        Upload `body_stream` as a file part and return the httpx response.

        Request writes are never buffered here; large blobs are streamed from
        `body_stream` as the request is sent.
        """
        request = build_request(method, endpoint, self._headers(headers))
        body = EMPTY_BODY if body_stream is None else build_file_attachment(file_name, body_stream, content_type)
        request = attach_body(request, body)
        has_writer = response_writer is not None or advanced_response_writer is not None
        client = self.registry.get_client(request.host_key, buffered_read=not has_writer, buffered_write=False)
        return client.execute(
            request,
            response_writer=response_writer,
            advanced_response_writer=advanced_response_writer,
        )

    def close(self) -> None:
        if not self._owns_registry:
            return
        with suppress(Exception):
            self.registry.close()

    def __enter__(self) -> "RestBridge":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()


def _ambient_bridge() -> RestBridge:
    context = get_rest_context()
    return RestBridge(registry=get_registry(), default_headers=context.default_headers)


def rest(
    method: str,
    endpoint: Any,
    headers: Mapping[str, str] | None = None,
    *,
    body_kind: BodyKind | str = BodyKind.PLAIN_TEXT,
    body: Any = None,
    response_writer: ResponseWriter | None = None,
    advanced_response_writer: AdvancedResponseWriter | None = None,
) -> httpx.Response:
    """`RestBridge.rest` using the registry from the ambient rest_context()."""
    return _ambient_bridge().rest(
        method,
        endpoint,
        headers,
        body_kind=body_kind,
        body=body,
        response_writer=response_writer,
        advanced_response_writer=advanced_response_writer,
    )


def rest_file(
    method: str,
    endpoint: Any,
    headers: Mapping[str, str] | None,
    content_type: str,
    file_name: str | None,
    body_stream: IO[bytes] | None,
    *,
    response_writer: ResponseWriter | None = None,
    advanced_response_writer: AdvancedResponseWriter | None = None,
) -> httpx.Response:
    """`RestBridge.rest_file` using the registry from the ambient rest_context()."""
    return _ambient_bridge().rest_file(
        method,
        endpoint,
        headers,
        content_type,
        file_name,
        body_stream,
        response_writer=response_writer,
        advanced_response_writer=advanced_response_writer,
    )


__all__ = ["RestBridge", "rest", "rest_file"]
