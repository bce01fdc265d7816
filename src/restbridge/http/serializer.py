# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""JSON body codec plugged into every ClientRegistry."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any, Protocol, TypeVar

import httpx

T = TypeVar("T")


class BodySerializer(Protocol):
    """What ClientHandle needs from a body codec."""

    content_type: str
    supported_content_types: tuple[str, ...]

    def serialize(self, value: Any) -> str: ...

    def serialize_parameter(self, value: Any) -> str: ...

    def deserialize(self, response: httpx.Response, into: Callable[[Any], T] | None = None) -> Any: ...


class JsonSerializer:
    """json-module codec for request and response bodies."""

    supported_content_types: tuple[str, ...] = (
        "application/json",
        "text/json",
        "text/x-json",
        "text/javascript",
        "*+json",
    )

    def __init__(self, content_type: str = "application/json", **dumps_kwargs: Any):
        self.content_type = content_type
        self._dumps_kwargs = dumps_kwargs

    def serialize(self, value: Any) -> str:
        return json.dumps(value, **self._dumps_kwargs)

    def serialize_parameter(self, value: Any) -> str:
        """
        Render a value that is the entire request body.

        Strings are taken as an already-rendered JSON document and sent as-is.
        """
        if isinstance(value, (bytes, bytearray)):
            return bytes(value).decode("utf-8")
        if isinstance(value, str):
            return value
        return self.serialize(value)

    def deserialize(self, response: httpx.Response, into: Callable[[Any], T] | None = None) -> Any:
        data = json.loads(response.text)
        return into(data) if into is not None else data

    def handles(self, content_type: str | None) -> bool:
        """True when `content_type` (parameters ignored) is one this codec reads."""
        if not content_type:
            return False
        mime = content_type.split(";", 1)[0].strip().lower()
        if mime in self.supported_content_types:
            return True
        return "*+json" in self.supported_content_types and mime.endswith("+json")


__all__ = ["BodySerializer", "JsonSerializer"]
