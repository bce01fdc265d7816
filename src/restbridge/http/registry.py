# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Per-host httpx client cache.

A ClientRegistry owns one httpx.Client per host key for its whole lifetime.
`get_client` hands out lightweight ClientHandle objects that pair the shared
client with the buffering mode requested by that call; the shared client is
never reconfigured, so concurrent callers with different buffering needs do
not step on each other.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx

from ..config import HttpSettings, load_http_settings
from ..errors import InvalidArgumentError
from .builder import get_body_content_type, host_key_from_url, parse_absolute_url
from .models import BodyKind, EmptyBody, FileAttachment, RequestDescriptor, StringBody
from .serializer import BodySerializer, JsonSerializer

logger = logging.getLogger(__name__)

T = TypeVar("T")

ResponseWriter = Callable[[Iterator[bytes]], Any]
AdvancedResponseWriter = Callable[[Iterator[bytes], httpx.Response], Any]


@dataclass(frozen=True)
class ClientHandle:
    """Shared httpx client plus the buffering mode of a single `get_client` call."""

    host_key: str
    client: httpx.Client
    serializer: BodySerializer
    settings: HttpSettings
    buffered_read: bool = True
    buffered_write: bool = True

    def execute(
        self,
        request: RequestDescriptor,
        *,
        response_writer: ResponseWriter | None = None,
        advanced_response_writer: AdvancedResponseWriter | None = None,
    ) -> httpx.Response:
        """
        Send `request` and return the httpx response unmodified.

        Transport errors propagate as raised by httpx. With a writer, the body
        is streamed into it and the response is closed before returning. With
        `buffered_read=False` and no writer, the response is returned open and
        the caller is responsible for closing it.
        """
        if response_writer is not None and advanced_response_writer is not None:
            raise InvalidArgumentError(
                "response_writer", "Pass either response_writer or advanced_response_writer, not both"
            )
        if request.host_key != self.host_key:
            raise InvalidArgumentError(
                "request", f"Request targets {request.host_key}, client is bound to {self.host_key}"
            )

        http_request = self._build_http_request(request)
        has_writer = response_writer is not None or advanced_response_writer is not None
        stream = has_writer or not self.buffered_read
        logger.debug(
            "%s %s (buffered_read=%s, buffered_write=%s, writer=%s)",
            request.method.value,
            request.url,
            self.buffered_read,
            self.buffered_write,
            has_writer,
        )

        response = self.client.send(http_request, stream=stream, follow_redirects=self.settings.allow_redirects)
        if not has_writer:
            return response

        try:
            chunks = response.iter_bytes(chunk_size=self.settings.chunk_size)
            if advanced_response_writer is not None:
                advanced_response_writer(chunks, response)
            else:
                response_writer(chunks)  # type: ignore[misc]
        finally:
            response.close()
        return response

    def deserialize(self, response: httpx.Response, into: Callable[[Any], T] | None = None) -> Any:
        return self.serializer.deserialize(response, into)

    def _build_http_request(self, request: RequestDescriptor) -> httpx.Request:
        headers = httpx.Headers(request.headers)
        body = request.body
        method = request.method.value
        url = request.path_and_query

        if isinstance(body, EmptyBody):
            return self.client.build_request(method, url, headers=headers)

        if isinstance(body, StringBody):
            if "content-type" not in headers:
                headers["Content-Type"] = get_body_content_type(body.kind)
            if body.kind is BodyKind.JSON:
                text = self.serializer.serialize_parameter(body.content)
            elif isinstance(body.content, str):
                text = body.content
            else:
                raise InvalidArgumentError("body", f"{body.kind.name} bodies must be strings", value=body.content)
            return self.client.build_request(method, url, headers=headers, content=text.encode("utf-8"))

        if isinstance(body, FileAttachment):
            if self.buffered_write:
                payload: Any = b"".join(body.iter_chunks(self.settings.chunk_size))
            else:
                payload = body.reader()
            files = {body.name: (body.file_name, payload, body.content_type)}
            return self.client.build_request(method, url, headers=headers, files=files)

        raise InvalidArgumentError("request", f"Unsupported body type {type(body).__name__}", value=body)


class ClientRegistry:
    """
    Owns the host-keyed httpx clients used to execute requests.

    Construct one per session and close it (or use it as a context manager)
    when done; every cached client is closed with it.
    """

    def __init__(
        self,
        settings: HttpSettings | None = None,
        serializer: BodySerializer | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.settings = settings or load_http_settings()
        self.serializer: BodySerializer = serializer or JsonSerializer()
        self._transport = transport
        self._clients: dict[str, httpx.Client] = {}
        self._lock = threading.Lock()
        self._closed = False

    def get_client(self, host: Any, buffered_read: bool = True, buffered_write: bool = True) -> ClientHandle:
        """Return a handle bound to the cached client for `host`, creating it on first use."""
        url = parse_absolute_url(host, "host")
        key = host_key_from_url(url)

        with self._lock:
            if self._closed:
                raise RuntimeError("ClientRegistry is closed")
            client = self._clients.get(key)
            if client is None:
                client = self._create_client(key)
                self._clients[key] = client
                logger.debug("Created HTTP client for %s", key)

        return ClientHandle(
            host_key=key,
            client=client,
            serializer=self.serializer,
            settings=self.settings,
            buffered_read=buffered_read,
            buffered_write=buffered_write,
        )

    def _create_client(self, host_key: str) -> httpx.Client:
        return httpx.Client(
            base_url=host_key,
            headers={"User-Agent": self.settings.user_agent},
            timeout=self.settings.timeout,
            follow_redirects=self.settings.allow_redirects,
            transport=self._transport,
        )

    def hosts(self) -> list[str]:
        with self._lock:
            return sorted(self._clients)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        with self._lock:
            clients = list(self._clients.items())
            self._clients.clear()
            self._closed = True
        for key, client in clients:
            logger.debug("Closing HTTP client for %s", key)
            client.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def __contains__(self, host: object) -> bool:
        try:
            key = host_key_from_url(parse_absolute_url(host, "host"))
        except InvalidArgumentError:
            return False
        with self._lock:
            return key in self._clients

    def __enter__(self) -> "ClientRegistry":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()


__all__ = [
    "AdvancedResponseWriter",
    "ClientHandle",
    "ClientRegistry",
    "ResponseWriter",
]
