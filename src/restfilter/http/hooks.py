# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Client configuration hooks.

A hook receives the client and the transfer handle right before the transfer
and returns True to abort it. Hooks run in registration order and may be
called from many threads at once, so they must not keep per-call state.
Transport-specific knobs live here; filters never touch them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from .transport import TransferHandle

if TYPE_CHECKING:
    from .client import RestClient

ConfigHook = Callable[["RestClient", TransferHandle], bool]


def proxy_config(client: RestClient, handle: TransferHandle) -> bool:
    """Route through the client's proxy when one is set. Registered by default."""
    if client.proxy_host is not None:
        handle.proxy = client.proxy_host
        handle.proxy_port = client.proxy_port
        if client.proxy_user is not None:
            handle.proxy_user = client.proxy_user
            handle.proxy_password = client.proxy_pass
    return False


def shared_state_config(client: RestClient, handle: TransferHandle) -> bool:
    """Attach the client's shared connections, TLS sessions and cookies. Registered by default."""
    if client.shared_state is not None:
        handle.share = client.shared_state
    return False


def verbose_config(client: RestClient, handle: TransferHandle) -> bool:  # noqa: ARG001
    """Log the request and response lines of every transfer at INFO level."""
    handle.verbose = True
    return False


def disable_ssl_cert_check(client: RestClient, handle: TransferHandle) -> bool:  # noqa: ARG001
    """
    Turn off certificate and host name validation.

    This is insecure and trivially open to man-in-the-middle attacks; use it
    only against test servers with self-signed certificates.
    """
    handle.verify_peer = False
    handle.verify_host = False
    return False


DEFAULT_CONFIG_HOOKS: tuple[ConfigHook, ...] = (proxy_config, shared_state_config)


__all__ = [
    "ConfigHook",
    "DEFAULT_CONFIG_HOOKS",
    "disable_ssl_cert_check",
    "proxy_config",
    "shared_state_config",
    "verbose_config",
]
