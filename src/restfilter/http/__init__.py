# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP filter-chain exports."""

from .body import (
    BodySink,
    BodySource,
    BufferSink,
    FixedBufferSink,
    MemoryBodySource,
    StreamBodySource,
    StreamSink,
)
from .chain import Filter, FilterChain, FilterLink, add_filter, execute_request
from .client import RestClient, create_default_chain
from .filters import execute_transport_request, set_content_headers
from .headers import HTTP_HEADER_CONTENT_LENGTH, HTTP_HEADER_CONTENT_TYPE, HeaderList
from .hooks import ConfigHook, disable_ssl_cert_check, proxy_config, shared_state_config, verbose_config
from .httpx_transport import HttpxTransport
from .models import HttpMethod, RestRequest, RestResponse
from .shared import SharedTransportState
from .transport import TransferHandle, TransferResult, Transport
from .url import build_endpoint_url, encode_uri

__all__ = [
    "HTTP_HEADER_CONTENT_LENGTH",
    "HTTP_HEADER_CONTENT_TYPE",
    "BodySink",
    "BodySource",
    "BufferSink",
    "ConfigHook",
    "Filter",
    "FilterChain",
    "FilterLink",
    "FixedBufferSink",
    "HeaderList",
    "HttpMethod",
    "HttpxTransport",
    "MemoryBodySource",
    "RestClient",
    "RestRequest",
    "RestResponse",
    "SharedTransportState",
    "StreamBodySource",
    "StreamSink",
    "TransferHandle",
    "TransferResult",
    "Transport",
    "add_filter",
    "build_endpoint_url",
    "create_default_chain",
    "disable_ssl_cert_check",
    "encode_uri",
    "execute_request",
    "execute_transport_request",
    "proxy_config",
    "set_content_headers",
    "shared_state_config",
    "verbose_config",
]
