# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport port: the one seam between filter chains and the network."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from ..config import CONNECT_TIMEOUT, DEFAULT_CHUNK_SIZE, DEFAULT_USER_AGENT
from ..errors import TransportError
from .shared import SharedTransportState

# max_bytes -> chunk; b"" ends the body, None aborts the transfer
ReadFunction = Callable[[int], Optional[bytes]]
# chunk -> bytes accepted; anything short of len(chunk) fails with WRITE_ERROR
WriteFunction = Callable[[bytes], int]
# raw header line (CRLF included) -> bytes accepted
HeaderFunction = Callable[[bytes], int]

ABORTED_BY_HOOK_MESSAGE = "Request aborted by request handler"


@dataclass
class TransferHandle:
    """
    Everything a transport needs for one transfer.

    Filters fill it in, hooks may adjust it, and Transport.perform() consumes
    it. The verb is derived from the mode flags unless ``custom_request``
    overrides it.
    """

    url: str = ""
    headers: list[str] = field(default_factory=list)
    post: bool = False
    upload: bool = False
    no_body: bool = False
    custom_request: str | None = None
    upload_size: int | None = None
    read_function: ReadFunction | None = None
    write_function: WriteFunction | None = None
    header_function: HeaderFunction | None = None
    connect_timeout: float = CONNECT_TIMEOUT
    chunk_size: int = DEFAULT_CHUNK_SIZE
    user_agent: str | None = DEFAULT_USER_AGENT
    proxy: str | None = None
    proxy_port: int = -1
    proxy_user: str | None = None
    proxy_password: str | None = None
    verify_peer: bool = True
    verify_host: bool = True
    verbose: bool = False
    share: SharedTransportState | None = None

    @property
    def method(self) -> str:
        if self.custom_request:
            return self.custom_request
        if self.no_body:
            return "HEAD"
        if self.upload:
            return "PUT"
        if self.post:
            return "POST"
        return "GET"

    @property
    def verify_ssl(self) -> bool:
        return self.verify_peer and self.verify_host


@dataclass
class TransferResult:
    error: TransportError = TransportError.NONE
    error_message: str = ""
    status_code: int = 0
    content_type: str | None = None


class Transport(Protocol):
    """Synchronous transfer executor."""

    def perform(self, handle: TransferHandle) -> TransferResult: ...


__all__ = [
    "ABORTED_BY_HOOK_MESSAGE",
    "HeaderFunction",
    "ReadFunction",
    "TransferHandle",
    "TransferResult",
    "Transport",
    "WriteFunction",
]
