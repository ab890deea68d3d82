# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed Transport implementation."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import httpx

from ..errors import TransportError, categorize_exception, error_to_message
from .shared import PoolKey, SharedData, SharedTransportState, TransportFactory, default_transport_factory
from .transport import TransferHandle, TransferResult

logger = logging.getLogger(__name__)

DEFAULT_PROXY_PORT = 1080


class _TransferAborted(Exception):
    """Raised from inside the transfer when a callback refuses data."""

    def __init__(self, error: TransportError, message: str):
        super().__init__(message)
        self.error = error


def build_proxy(handle: TransferHandle) -> tuple[httpx.Proxy | None, PoolKey]:
    """Return the httpx proxy for a handle together with the pool key it routes through."""
    if not handle.proxy:
        return None, PoolKey(verify_ssl=handle.verify_ssl)

    url = handle.proxy if "://" in handle.proxy else f"http://{handle.proxy}"
    parsed = httpx.URL(url)
    if handle.proxy_port != -1:
        url = str(parsed.copy_with(port=handle.proxy_port))
    elif parsed.port is None:
        url = str(parsed.copy_with(port=DEFAULT_PROXY_PORT))

    auth = None
    if handle.proxy_user is not None:
        auth = (handle.proxy_user, handle.proxy_password or "")
    return httpx.Proxy(url, auth=auth), PoolKey(proxy=url, verify_ssl=handle.verify_ssl, proxy_auth=auth)


def _request_headers(handle: TransferHandle) -> list[tuple[str, str]]:
    """
    Turn header lines into pairs.

    A bare ``Name:`` line suppresses that header instead of sending it empty.
    """
    pairs: list[tuple[str, str]] = []
    suppressed: set[str] = set()
    for line in handle.headers:
        name, sep, value = line.partition(":")
        name = name.strip()
        value = value.strip()
        if not name:
            continue
        if sep and not value:
            suppressed.add(name.lower())
            continue
        pairs.append((name, value))

    present = {name.lower() for name, _ in pairs}
    if handle.upload_size is not None and not handle.no_body and "content-length" not in present:
        pairs.append(("Content-Length", str(handle.upload_size)))
    if handle.user_agent and "user-agent" not in present and "user-agent" not in suppressed:
        pairs.append(("User-Agent", handle.user_agent))
    return pairs


def _upload_stream(handle: TransferHandle) -> Iterator[bytes]:
    read = handle.read_function
    remaining = handle.upload_size or 0
    while read is not None and remaining > 0:
        chunk = read(min(handle.chunk_size, remaining))
        if chunk is None:
            raise _TransferAborted(TransportError.ABORTED_BY_CALLBACK, error_to_message(TransportError.ABORTED_BY_CALLBACK))
        if not chunk:
            raise _TransferAborted(TransportError.READ_ERROR, f"Request body ended {remaining} bytes early")
        remaining -= len(chunk)
        yield chunk


class HttpxTransport:
    """Runs transfers over httpx connection pools, shared when the handle carries a SharedTransportState."""

    def __init__(self, transport_factory: TransportFactory | None = None):
        self._transport_factory = transport_factory or default_transport_factory

    def build_request(self, handle: TransferHandle) -> httpx.Request:
        content = None
        if handle.read_function is not None and handle.upload_size and not handle.no_body:
            content = _upload_stream(handle)
        return httpx.Request(
            handle.method,
            handle.url,
            headers=_request_headers(handle),
            content=content,
            extensions={"timeout": httpx.Timeout(None, connect=handle.connect_timeout).as_dict()},
        )

    def perform(self, handle: TransferHandle) -> TransferResult:
        result = TransferResult()
        private_pool: httpx.BaseTransport | None = None
        try:
            proxy, key = build_proxy(handle)
            request = self.build_request(handle)
            share = handle.share
            if share is not None:
                with share.locked(SharedData.CONNECT):
                    pool = share.connection_pool(key, proxy)
                with share.locked(SharedData.COOKIE):
                    share.cookies.set_cookie_header(request)
            else:
                private_pool = self._transport_factory(
                    verify=httpx.create_ssl_context(verify=handle.verify_ssl),
                    proxy=proxy,
                )
                pool = private_pool

            if handle.verbose:
                self._log_request(request)
            response = pool.handle_request(request)
            try:
                response.request = request
                result.status_code = response.status_code
                result.content_type = response.headers.get("content-type")
                self._deliver_headers(handle, response)
                if share is not None:
                    self._store_cookies(share, response)
                if not handle.no_body:
                    self._deliver_body(handle, response)
            finally:
                response.close()
        except _TransferAborted as exc:
            result.error = exc.error
            result.error_message = str(exc)
        except Exception as exc:  # noqa: BLE001
            result.error = categorize_exception(exc)
            result.error_message = str(exc) or error_to_message(result.error)
        finally:
            if private_pool is not None:
                private_pool.close()

        if result.error != TransportError.NONE:
            logger.debug("Transfer to %s failed: %s (%s)", handle.url, result.error.value, result.error_message)
        return result

    @staticmethod
    def _store_cookies(share: SharedTransportState, response: httpx.Response) -> None:
        with share.locked(SharedData.COOKIE):
            share.cookies.extract_cookies(response)

    @staticmethod
    def _log_request(request: httpx.Request) -> None:
        logger.info("> %s %s", request.method, request.url)
        for name, value in request.headers.multi_items():
            logger.info("> %s: %s", name, value)

    def _deliver_headers(self, handle: TransferHandle, response: httpx.Response) -> None:
        status_line = f"{response.http_version} {response.status_code} {response.reason_phrase}"
        lines = [status_line]
        lines.extend(f"{name.decode('latin-1')}: {value.decode('latin-1')}" for name, value in response.headers.raw)
        lines.append("")
        for line in lines:
            if handle.verbose and line:
                logger.info("< %s", line)
            if handle.header_function is None:
                continue
            raw = f"{line}\r\n".encode("latin-1", errors="replace")
            if handle.header_function(raw) != len(raw):
                raise _TransferAborted(TransportError.WRITE_ERROR, "Failed writing header")

    def _deliver_body(self, handle: TransferHandle, response: httpx.Response) -> None:
        for chunk in response.stream:
            if not chunk or handle.write_function is None:
                continue
            accepted = handle.write_function(chunk)
            if accepted != len(chunk):
                raise _TransferAborted(
                    TransportError.WRITE_ERROR,
                    f"Failed writing body ({accepted} != {len(chunk)})",
                )


__all__ = ["HttpxTransport", "build_proxy"]
