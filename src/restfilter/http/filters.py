# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Standard filters: content headers and the terminal transport filter."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..errors import TransportError
from .chain import FilterLink
from .headers import HTTP_HEADER_CONTENT_LENGTH, HTTP_HEADER_CONTENT_TYPE, header_line_value, header_matches
from .models import HttpMethod, RestRequest, RestResponse
from .transport import ABORTED_BY_HOOK_MESSAGE, HeaderFunction, TransferHandle
from .url import build_endpoint_url

if TYPE_CHECKING:
    from .client import RestClient

logger = logging.getLogger(__name__)

# Declared sizes always go out as Content-Length; never wait for 100-continue.
SUPPRESSED_REQUEST_HEADERS = ("Expect:", "Transfer-Encoding:")


def set_content_headers(link: FilterLink, client: RestClient, request: RestRequest, response: RestResponse) -> None:
    """
    Set Content-Type (or an explicit zero Content-Length) on the request and
    parse Content-Type back out of the response headers.
    """
    if request.body is not None:
        if request.body.content_type is not None:
            request.add_header(f"{HTTP_HEADER_CONTENT_TYPE}: {request.body.content_type}")
    elif request.method.carries_body:
        request.add_header(f"{HTTP_HEADER_CONTENT_LENGTH}:0")

    link.forward(client, request, response)

    for header in response.headers:
        if header_matches(header, HTTP_HEADER_CONTENT_TYPE):
            response.content_type = header_line_value(header)
            break


def configure_method(handle: TransferHandle, request: RestRequest) -> None:
    """Translate the request method (and body, if any) into transfer modes."""
    method = request.method
    if method == HttpMethod.POST:
        handle.post = True
        handle.upload_size = 0
    elif method == HttpMethod.PUT:
        handle.upload = True
        handle.upload_size = 0
    elif method == HttpMethod.DELETE:
        handle.custom_request = "DELETE"
    elif method == HttpMethod.HEAD:
        handle.no_body = True
    elif method == HttpMethod.OPTIONS:
        handle.custom_request = "OPTIONS"
    elif method == HttpMethod.PATCH:
        handle.post = True
        handle.upload_size = 0
        handle.custom_request = "PATCH"

    body = request.body
    if body is not None and not handle.no_body:
        body.reset()
        handle.upload_size = body.size
        handle.read_function = lambda max_bytes: body.read(max_bytes, request)


def capture_headers(response: RestResponse) -> HeaderFunction:
    """
    Build the header callback for ``response``.

    Line endings are stripped whatever they are, and the blank line that ends
    the header block is dropped. Overflowing the header limit fails the
    transfer, not the process.
    """

    def header_function(raw: bytes) -> int:
        line = raw.decode("latin-1").rstrip("\r\n")
        if not line:
            return len(raw)
        if response.headers.full:
            logger.warning("Header limit of %d reached parsing response", response.headers.max_headers)
            return 0
        response.headers.add(line)
        return len(raw)

    return header_function


def parse_status_line(line: str | None) -> str | None:
    """Return the reason phrase of ``<protocol> <code> <reason>``, i.e. everything after the second space."""
    if not line:
        return None
    parts = line.split(" ", 2)
    if len(parts) < 3:
        return None
    return parts[2]


def build_transfer_handle(client: RestClient, request: RestRequest, response: RestResponse) -> TransferHandle:
    settings = client.settings
    handle = TransferHandle(
        url=build_endpoint_url(client.host, client.port, request.uri, encoded=request.uri_encoded),
        headers=[*request.headers, *SUPPRESSED_REQUEST_HEADERS],
        connect_timeout=settings.connect_timeout,
        chunk_size=settings.chunk_size,
        user_agent=settings.user_agent,
        verify_peer=settings.verify_ssl,
        verify_host=settings.verify_ssl,
    )
    configure_method(handle, request)
    handle.write_function = response.sink.write
    handle.header_function = capture_headers(response)
    return handle


def execute_transport_request(
    link: FilterLink,  # noqa: ARG001
    client: RestClient,
    request: RestRequest,
    response: RestResponse,
) -> None:
    """Terminal filter: run the transfer through the client's transport."""
    handle = build_transfer_handle(client, request, response)

    for hook in client.config_hooks:
        if hook(client, handle):
            logger.warning("Request %s %s aborted by %s", request.method.value, request.uri, getattr(hook, "__name__", hook))
            response.status_code = 0
            response.error = TransportError.ABORTED_BY_CALLBACK
            response.error_message = ABORTED_BY_HOOK_MESSAGE
            return

    response.sink.begin()
    try:
        result = client.transport.perform(handle)
    finally:
        response.sink.finish()

    response.error = result.error
    response.error_message = result.error_message
    response.status_code = result.status_code
    if result.content_type is not None:
        response.content_type = result.content_type

    if response.headers:
        status = parse_status_line(response.headers[0])
        if status is not None:
            response.status = status


__all__ = [
    "SUPPRESSED_REQUEST_HEADERS",
    "build_transfer_handle",
    "capture_headers",
    "configure_method",
    "execute_transport_request",
    "parse_status_line",
    "set_content_headers",
]
