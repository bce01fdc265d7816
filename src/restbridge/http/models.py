# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request data models used across restbridge."""

from __future__ import annotations

import io
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import IO, Any, Union

Headers = dict[str, str]


class HttpMethod(str, Enum):
    """HTTP verbs accepted by `build_request`."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    PATCH = "PATCH"
    MERGE = "MERGE"
    COPY = "COPY"


class BodyKind(str, Enum):
    """Content categories for string request bodies."""

    XML = "xml"
    JSON = "json"
    PLAIN_TEXT = "plain-text"
    URL_ENCODED_FORM = "url-encoded-form"


@dataclass(frozen=True)
class EmptyBody:
    """Request without a body."""


@dataclass(frozen=True)
class StringBody:
    """
    In-memory body tagged with a BodyKind.

    `content` is normally a string. JSON bodies may also carry any JSON-able
    value, which is rendered by the registry's serializer at send time.
    """

    kind: BodyKind
    content: Any


@dataclass
class FileAttachment:
    """
    Stream-backed body sent as a multipart file part.

    The stream is not read until the request is sent. `content_length` and
    `offset` are captured when the attachment is built, so the part always
    covers the bytes that were remaining at that point.
    """

    name: str
    file_name: str | None
    content_type: str
    content_length: int
    stream: IO[bytes]
    offset: int = 0

    def iter_chunks(self, chunk_size: int) -> Iterator[bytes]:
        """Yield the attachment contents in chunks without buffering the whole body."""
        reader = self.reader()
        while True:
            chunk = reader.read(chunk_size)
            if not chunk:
                return
            yield chunk

    def write_to(self, sink: IO[bytes], chunk_size: int) -> int:
        written = 0
        for chunk in self.iter_chunks(chunk_size):
            sink.write(chunk)
            written += len(chunk)
        return written

    def reader(self) -> AttachmentReader:
        return AttachmentReader(self.stream, self.offset, self.content_length)


class AttachmentReader(io.RawIOBase):
    """
    Seekable window over `stream[offset:offset + length]`.

    httpx rewinds file objects before uploading them and measures them with
    seek/tell; this view keeps both operations inside the attachment bounds.
    """

    def __init__(self, stream: IO[bytes], offset: int, length: int):
        super().__init__()
        self._stream = stream
        self._offset = offset
        self._length = length
        self._position = 0

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def tell(self) -> int:
        return self._position

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            target = offset
        elif whence == io.SEEK_CUR:
            target = self._position + offset
        elif whence == io.SEEK_END:
            target = self._length + offset
        else:
            raise ValueError(f"invalid whence ({whence!r})")
        self._position = min(max(0, target), self._length)
        return self._position

    def readinto(self, buffer: Any) -> int:
        remaining = self._length - self._position
        if remaining <= 0:
            return 0
        self._stream.seek(self._offset + self._position)
        data = self._stream.read(min(len(buffer), remaining))
        size = len(data)
        buffer[:size] = data
        self._position += size
        return size


StreamBody = FileAttachment

Body = Union[EmptyBody, StringBody, FileAttachment]

EMPTY_BODY = EmptyBody()


@dataclass(frozen=True)
class RequestDescriptor:
    """Transport-independent request, resolved against a host by ClientRegistry."""

    method: HttpMethod
    host_key: str
    path_and_query: str
    headers: Headers = field(default_factory=dict)
    body: Body = EMPTY_BODY

    @property
    def url(self) -> str:
        return f"{self.host_key}{self.path_and_query}"

    def with_body(self, body: Body) -> RequestDescriptor:
        return replace(self, body=body)


__all__ = [
    "Body",
    "BodyKind",
    "EMPTY_BODY",
    "EmptyBody",
    "AttachmentReader",
    "FileAttachment",
    "Headers",
    "HttpMethod",
    "RequestDescriptor",
    "StreamBody",
    "StringBody",
]
