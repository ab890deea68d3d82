# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for restfilter."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"restfilter/{__version__}"
MAX_HEADERS = 64
CONNECT_TIMEOUT = 200.0
DEFAULT_CHUNK_SIZE = 16 * 1024


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
class ClientSettings:
    """Per-client transport defaults."""

    connect_timeout: float = CONNECT_TIMEOUT
    max_headers: int = MAX_HEADERS
    verify_ssl: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    chunk_size: int = DEFAULT_CHUNK_SIZE

    @classmethod
    def from_env(cls) -> "ClientSettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_headers = _int_env("RESTFILTER_MAX_HEADERS", cls.max_headers)
        if max_headers <= 0:
            max_headers = cls.max_headers
        chunk_size = _int_env("RESTFILTER_CHUNK_SIZE", cls.chunk_size)
        if chunk_size <= 0:
            chunk_size = cls.chunk_size
        connect_timeout = _float_env("RESTFILTER_CONNECT_TIMEOUT", cls.connect_timeout)
        if connect_timeout <= 0:
            connect_timeout = cls.connect_timeout
        return cls(
            connect_timeout=connect_timeout,
            max_headers=max_headers,
            verify_ssl=_bool_env("RESTFILTER_VERIFY_SSL", cls.verify_ssl),
            user_agent=os.getenv("RESTFILTER_USER_AGENT", cls.user_agent),
            chunk_size=chunk_size,
        )


def load_client_settings() -> ClientSettings:
    """Load client settings from environment with sensible defaults."""
    return ClientSettings.from_env()
