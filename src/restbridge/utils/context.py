# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Ambient REST context.

A ContextVar-backed RestContext carries the ClientRegistry (and optional
default headers) for code that calls the module-level `rest()` helpers
instead of passing a registry explicitly. Nothing here creates a registry;
callers inject one with `rest_context(registry=...)`.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, replace
from typing import Any

from ..http.registry import ClientRegistry


@dataclass(frozen=True)
class RestContext:
    registry: ClientRegistry | None = None
    default_headers: dict[str, str] | None = None


_current_rest_context: ContextVar[RestContext | None] = ContextVar("restbridge_rest_context", default=None)


def get_rest_context() -> RestContext:
    """Return the current ambient REST context."""
    return _current_rest_context.get() or RestContext()


def get_registry() -> ClientRegistry:
    registry = get_rest_context().registry
    if registry is None:
        raise RuntimeError("No ClientRegistry configured; wrap the call in rest_context(registry=...)")
    return registry


@contextmanager
def rest_context(**overrides: Any) -> Iterator[RestContext]:
    """
    Context manager that layers overrides onto the ambient RestContext.

    None-valued overrides are ignored to preserve outer context values.
    """
    current = get_rest_context()
    filtered = {key: value for key, value in overrides.items() if value is not None}
    new_context = replace(current, **filtered) if filtered else current
    token = _current_rest_context.set(new_context)
    try:
        yield new_context
    finally:
        _current_rest_context.reset(token)


__all__ = [
    "RestContext",
    "get_registry",
    "get_rest_context",
    "rest_context",
]
