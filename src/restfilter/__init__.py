# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
restfilter package entrypoint.

This package executes HTTP requests through ordered, composable filter chains.
The network itself sits behind a small transport port (httpx by default),
while requests, responses and their streaming bodies are modeled as plain
Python objects owned by the caller.
"""

from .config import ClientSettings, load_client_settings
from .errors import EmptyFilterChainError, HeaderLimitError, RestFilterError, TransportError
from .http import (
    FilterChain,
    HttpMethod,
    HttpxTransport,
    RestClient,
    RestRequest,
    RestResponse,
    create_default_chain,
    execute_transport_request,
    set_content_headers,
)
from .log import setup_logging
from .version import __version__

__all__ = [
    "ClientSettings",
    "EmptyFilterChainError",
    "FilterChain",
    "HeaderLimitError",
    "HttpMethod",
    "HttpxTransport",
    "RestClient",
    "RestFilterError",
    "RestRequest",
    "RestResponse",
    "TransportError",
    "create_default_chain",
    "execute_transport_request",
    "load_client_settings",
    "set_content_headers",
    "setup_logging",
    "__version__",
]
