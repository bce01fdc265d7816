# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Utility exports."""

from .context import RestContext, get_registry, get_rest_context, rest_context

__all__ = [
    "RestContext",
    "get_registry",
    "get_rest_context",
    "rest_context",
]
