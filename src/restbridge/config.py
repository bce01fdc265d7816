# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for restbridge."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"restbridge/{__version__}"
DEFAULT_CHUNK_SIZE = 64 * 1024


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class HttpSettings:
    """Defaults applied to every httpx client created by a ClientRegistry."""

    timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    chunk_size: int = DEFAULT_CHUNK_SIZE

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        chunk_size = _int_env("RESTBRIDGE_STREAM_CHUNK_SIZE", cls.chunk_size)
        if chunk_size <= 0:
            chunk_size = cls.chunk_size
        return cls(
            timeout=_float_env("RESTBRIDGE_HTTP_TIMEOUT", cls.timeout),
            user_agent=os.getenv("RESTBRIDGE_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("RESTBRIDGE_HTTP_REDIRECTS", cls.allow_redirects),
            chunk_size=chunk_size,
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()
