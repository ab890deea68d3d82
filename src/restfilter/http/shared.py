# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Cross-request transport state shared by every request of one client.

Connection pools, the TLS context (and therefore its session cache) and the
cookie jar are the only things concurrent requests mutate together. All of it
sits behind a single plain mutex which transports take through the
``lock(data, access)`` / ``unlock(data)`` callbacks, holding it only for the
exact stretch where they touch the shared objects.
"""

from __future__ import annotations

import logging
import ssl
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

import httpx

logger = logging.getLogger(__name__)


class SharedData(str, Enum):
    COOKIE = "COOKIE"
    DNS = "DNS"
    SSL_SESSION = "SSL_SESSION"
    CONNECT = "CONNECT"


class LockAccess(str, Enum):
    SHARED = "SHARED"
    SINGLE = "SINGLE"


@dataclass(frozen=True)
class PoolKey:
    """Connections can only be reused between requests with the same routing and TLS policy."""

    proxy: str | None = None
    verify_ssl: bool = True
    proxy_auth: tuple[str, str] | None = field(default=None, repr=False)


TransportFactory = Callable[..., httpx.BaseTransport]


def default_transport_factory(*, verify: ssl.SSLContext, proxy: httpx.Proxy | None) -> httpx.BaseTransport:
    return httpx.HTTPTransport(verify=verify, proxy=proxy)


class SharedTransportState:
    """Connection pools, TLS contexts and cookies reused across requests."""

    def __init__(self, transport_factory: TransportFactory | None = None):
        self._mutex = threading.Lock()
        self._transport_factory = transport_factory or default_transport_factory
        self._pools: dict[PoolKey, httpx.BaseTransport] = {}
        self._ssl_contexts: dict[bool, ssl.SSLContext] = {}
        self.cookies = httpx.Cookies()
        self.shared = frozenset(SharedData)
        self.closed = False

    def lock(self, data: SharedData, access: LockAccess = LockAccess.SINGLE) -> None:  # noqa: ARG002
        self._mutex.acquire()

    def unlock(self, data: SharedData) -> None:  # noqa: ARG002
        self._mutex.release()

    @contextmanager
    def locked(self, data: SharedData, access: LockAccess = LockAccess.SINGLE) -> Iterator[SharedTransportState]:
        self.lock(data, access)
        try:
            yield self
        finally:
            self.unlock(data)

    @property
    def pool_count(self) -> int:
        return len(self._pools)

    def ssl_context(self, verify_ssl: bool) -> ssl.SSLContext:
        """Return the TLS context for a verification policy. Caller must hold the lock."""
        context = self._ssl_contexts.get(verify_ssl)
        if context is None:
            context = httpx.create_ssl_context(verify=verify_ssl)
            self._ssl_contexts[verify_ssl] = context
        return context

    def connection_pool(self, key: PoolKey, proxy: httpx.Proxy | None = None) -> httpx.BaseTransport:
        """Return (creating on first use) the pool for ``key``. Caller must hold the lock."""
        if self.closed:
            raise RuntimeError("shared transport state is closed")
        pool = self._pools.get(key)
        if pool is None:
            logger.debug("Creating connection pool for %s", key)
            pool = self._transport_factory(verify=self.ssl_context(key.verify_ssl), proxy=proxy)
            self._pools[key] = pool
        return pool

    def close(self) -> None:
        """Close every pool; calling it again is a no-op."""
        with self._mutex:
            if self.closed:
                return
            self.closed = True
            pools = list(self._pools.values())
            self._pools.clear()
            self._ssl_contexts.clear()
            self.cookies.clear()
        for pool in pools:
            pool.close()


__all__ = [
    "LockAccess",
    "PoolKey",
    "SharedData",
    "SharedTransportState",
    "TransportFactory",
    "default_transport_factory",
]
