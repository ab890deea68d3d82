# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers.

Caller mistakes (an empty filter chain, too many request headers) raise
``RestFilterError`` subclasses. Everything that goes wrong on the wire is
recorded on the response as a ``TransportError`` and never raised.
"""

from __future__ import annotations

import socket
import ssl
from enum import Enum
from typing import Optional

import httpx


class RestFilterError(Exception):
    """Base class for caller/programming errors."""


class EmptyFilterChainError(RestFilterError):
    """Raised when a request is executed without any filters."""


class HeaderLimitError(RestFilterError):
    """Raised when a header collection would exceed its fixed maximum."""


class TransportError(str, Enum):
    NONE = "NONE"
    UNSUPPORTED_PROTOCOL = "UNSUPPORTED_PROTOCOL"
    URL_MALFORMAT = "URL_MALFORMAT"
    PROXY_ERROR = "PROXY_ERROR"
    COULDNT_RESOLVE_HOST = "COULDNT_RESOLVE_HOST"
    COULDNT_CONNECT = "COULDNT_CONNECT"
    WRITE_ERROR = "WRITE_ERROR"
    READ_ERROR = "READ_ERROR"
    OPERATION_TIMEDOUT = "OPERATION_TIMEDOUT"
    SSL_CONNECT_ERROR = "SSL_CONNECT_ERROR"
    ABORTED_BY_CALLBACK = "ABORTED_BY_CALLBACK"
    SEND_ERROR = "SEND_ERROR"
    RECV_ERROR = "RECV_ERROR"
    PROTOCOL_ERROR = "PROTOCOL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


def _causes(exc: BaseException):
    seen: set[int] = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _categorize_connect_error(exc: BaseException) -> TransportError:
    for cause in _causes(exc):
        if isinstance(cause, (socket.gaierror, socket.herror)):
            return TransportError.COULDNT_RESOLVE_HOST
        if isinstance(cause, (ssl.SSLError, ssl.CertificateError)):
            return TransportError.SSL_CONNECT_ERROR
    message = str(exc).lower()
    if "name or service not known" in message or "nodename nor servname" in message or "getaddrinfo" in message:
        return TransportError.COULDNT_RESOLVE_HOST
    if "ssl" in message or "certificate" in message:
        return TransportError.SSL_CONNECT_ERROR
    return TransportError.COULDNT_CONNECT


def categorize_exception(exc: BaseException) -> TransportError:
    """
    Map Python/httpx exceptions to TransportError.
    """
    if isinstance(exc, httpx.TimeoutException):
        return TransportError.OPERATION_TIMEDOUT

    if isinstance(exc, httpx.ProxyError):
        return TransportError.PROXY_ERROR

    if isinstance(exc, httpx.UnsupportedProtocol):
        return TransportError.UNSUPPORTED_PROTOCOL

    if isinstance(exc, httpx.InvalidURL):
        return TransportError.URL_MALFORMAT

    if isinstance(exc, httpx.ConnectError):
        return _categorize_connect_error(exc)

    if isinstance(exc, httpx.WriteError):
        return TransportError.SEND_ERROR

    if isinstance(exc, httpx.ReadError):
        return TransportError.RECV_ERROR

    if isinstance(exc, httpx.ProtocolError):
        return TransportError.PROTOCOL_ERROR

    if isinstance(exc, httpx.NetworkError):
        return TransportError.COULDNT_CONNECT

    if isinstance(exc, (ssl.SSLError, ssl.CertificateError)):
        return TransportError.SSL_CONNECT_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return TransportError.COULDNT_RESOLVE_HOST

    if isinstance(exc, socket.timeout):
        return TransportError.OPERATION_TIMEDOUT

    if isinstance(exc, ConnectionError):
        return TransportError.COULDNT_CONNECT

    return TransportError.UNKNOWN_ERROR


def error_to_message(error: Optional[TransportError]) -> str:
    """User-facing reason string."""
    mapping = {
        TransportError.NONE: "",
        TransportError.UNSUPPORTED_PROTOCOL: "Unsupported protocol",
        TransportError.URL_MALFORMAT: "URL using bad/illegal format",
        TransportError.PROXY_ERROR: "Proxy handshake error",
        TransportError.COULDNT_RESOLVE_HOST: "Could not resolve host name",
        TransportError.COULDNT_CONNECT: "Could not connect to server",
        TransportError.WRITE_ERROR: "Failed writing received data",
        TransportError.READ_ERROR: "Failed reading request body",
        TransportError.OPERATION_TIMEDOUT: "Timeout was reached",
        TransportError.SSL_CONNECT_ERROR: "TLS/certificate issue",
        TransportError.ABORTED_BY_CALLBACK: "Operation was aborted by an application callback",
        TransportError.SEND_ERROR: "Failed sending data to the peer",
        TransportError.RECV_ERROR: "Failure when receiving data from the peer",
        TransportError.PROTOCOL_ERROR: "HTTP protocol violation",
        TransportError.UNKNOWN_ERROR: "Network error during transfer",
        None: "",
    }
    return mapping.get(error, "Transfer failed due to network error")


__all__ = [
    "EmptyFilterChainError",
    "HeaderLimitError",
    "RestFilterError",
    "TransportError",
    "categorize_exception",
    "error_to_message",
]
