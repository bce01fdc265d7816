# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for restbridge."""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = os.getenv("RESTBRIDGE_LOG_LEVEL", "WARNING").upper()

# httpx and httpcore log every request at INFO/DEBUG; keep them quiet unless asked.
TRANSPORT_LOGGERS = ("httpx", "httpcore")


def _resolve_level(level: str | None) -> int:
    effective_level = (level or DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, effective_level, logging.WARNING)


def setup_logging(level: str | None = None, *, transport_level: str | None = None) -> None:
    """
    Configure standard logging for CLI/library use.

    `transport_level` controls the httpx/httpcore loggers separately; it
    defaults to WARNING so request-level chatter only shows up on demand.
    """
    logging.basicConfig(
        level=_resolve_level(level),
        format="%(levelname)s %(name)s: %(message)s",
    )
    transport = getattr(logging, (transport_level or "WARNING").upper(), logging.WARNING)
    for name in TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport)


__all__ = ["setup_logging"]
