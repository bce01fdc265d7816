# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ArgumentErrorKind(str, Enum):
    MISSING = "MISSING"
    MALFORMED = "MALFORMED"
    OUT_OF_RANGE = "OUT_OF_RANGE"


class InvalidArgumentError(ValueError):
    """
    Raised synchronously when a caller-supplied value is rejected.

    `param_name` always names the offending parameter so scripts can report
    exactly which argument was wrong.
    """

    kind: ArgumentErrorKind = ArgumentErrorKind.MALFORMED

    def __init__(self, param_name: str, message: str | None = None, *, value: Any = None):
        self.param_name = param_name
        self.value = value
        self.message = message or self._default_message()
        super().__init__(f"{self.message} (parameter: {param_name})")

    def _default_message(self) -> str:
        return "Invalid argument"


class MissingArgumentError(InvalidArgumentError):
    """Required value is absent, empty or whitespace-only."""

    kind = ArgumentErrorKind.MISSING

    def _default_message(self) -> str:
        return "Value cannot be null, empty or whitespace"


class MalformedArgumentError(InvalidArgumentError):
    """Value is present but cannot be parsed (e.g. not an absolute URI)."""

    kind = ArgumentErrorKind.MALFORMED

    def _default_message(self) -> str:
        return "Value is malformed"


class ArgumentOutOfRangeError(InvalidArgumentError):
    """Value parses but is not one of the supported choices."""

    kind = ArgumentErrorKind.OUT_OF_RANGE

    def _default_message(self) -> str:
        return f"Unsupported value {self.value!r}"


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    PROTOCOL_ERROR = "PROTOCOL_ERROR"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.

    Used for reporting only; library code lets transport errors propagate.
    """
    import socket
    import ssl as ssl_module

    import httpx

    if isinstance(exc, InvalidArgumentError):
        return ErrorCategory.INVALID_ARGUMENT

    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (httpx.RemoteProtocolError, httpx.LocalProtocolError)):
        return ErrorCategory.PROTOCOL_ERROR

    cause = exc.__cause__ or exc.__context__
    if isinstance(exc, httpx.ConnectError) and isinstance(cause, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Request timed out",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.PROTOCOL_ERROR: "Malformed HTTP exchange",
        ErrorCategory.INVALID_ARGUMENT: "Invalid argument",
        ErrorCategory.UNKNOWN_ERROR: "Request failed",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "Request failed")


__all__ = [
    "ArgumentErrorKind",
    "ArgumentOutOfRangeError",
    "ErrorCategory",
    "InvalidArgumentError",
    "MalformedArgumentError",
    "MissingArgumentError",
    "categorize_exception",
    "error_category_to_reason",
]
