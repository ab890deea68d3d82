# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request/response data models executed by filter chains."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Protocol

from ..config import MAX_HEADERS
from ..errors import TransportError
from .body import (
    BodySink,
    BodySource,
    BufferSink,
    DataFilter,
    FixedBufferSink,
    MemoryBodySource,
    StreamBodySource,
    StreamSink,
)
from .headers import HeaderList

CLASS_DESTROYED = "<<Destroyed>>"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    PATCH = "PATCH"

    @property
    def carries_body(self) -> bool:
        return self in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH)


class Destroyable(Protocol):
    """Named entity with an explicit, idempotent teardown."""

    @property
    def class_name(self) -> str: ...

    @property
    def destroyed(self) -> bool: ...

    def destroy(self) -> None: ...


def _class_name(obj: object, destroyed: bool) -> str:
    return CLASS_DESTROYED if destroyed else type(obj).__name__


@dataclass
class RestRequest:
    """A single request; owned by one caller and never shared across threads."""

    uri: str
    method: HttpMethod = HttpMethod.GET
    uri_encoded: bool = False
    max_headers: int = MAX_HEADERS
    headers: HeaderList = field(init=False)
    body: BodySource | None = field(default=None, init=False)
    _destroyed: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        self.method = HttpMethod(self.method)
        self.headers = HeaderList(max_headers=self.max_headers)

    @property
    def class_name(self) -> str:
        return _class_name(self, self._destroyed)

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def add_header(self, header: str, value: str | None = None) -> None:
        """Add ``"Name: Value"`` (or a name/value pair); raises HeaderLimitError when full."""
        self.headers.add(header, value)

    def get_header(self, name: str) -> str | None:
        return self.headers.get(name)

    def get_header_value(self, name: str) -> str | None:
        return self.headers.get_value(name)

    def set_memory_body(
        self,
        data: bytes | bytearray | memoryview | str,
        content_type: str | None = None,
        size: int | None = None,
    ) -> MemoryBodySource:
        self.body = MemoryBodySource(data, content_type, size=size)
        return self.body

    def set_stream_body(
        self,
        stream: BinaryIO,
        size: int,
        content_type: str | None = None,
        data_filter: DataFilter | None = None,
    ) -> StreamBodySource:
        self.body = StreamBodySource(stream, size, content_type, data_filter=data_filter)
        return self.body

    def set_data_filter(self, data_filter: DataFilter | None) -> None:
        """Install a per-chunk filter on a streaming body; ignored when there is none."""
        if isinstance(self.body, StreamBodySource):
            self.body.data_filter = data_filter

    def destroy(self) -> None:
        if self._destroyed:
            return
        self.headers.clear()
        self.body = None
        self.uri = ""
        self._destroyed = True


@dataclass
class RestResponse:
    """
    Result of executing a request.

    ``status_code`` is 0 when nothing usable came back from the server. Always
    check ``error`` as well: a body write can fail (full buffer, aborted
    callback, disk full) after a perfectly good status line arrived.
    """

    max_headers: int = MAX_HEADERS
    status_code: int = 0
    status: str = ""
    error: TransportError = TransportError.NONE
    error_message: str = ""
    content_type: str | None = None
    headers: HeaderList = field(init=False)
    sink: BodySink = field(default_factory=BufferSink)
    _destroyed: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        self.headers = HeaderList(max_headers=self.max_headers)

    @property
    def class_name(self) -> str:
        return _class_name(self, self._destroyed)

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def ok(self) -> bool:
        return self.error == TransportError.NONE and self.status_code != 0

    @property
    def content_length(self) -> int:
        return self.sink.content_length

    @property
    def body(self) -> bytes | None:
        """Body bytes for buffer sinks; None when streaming to a file."""
        return self.sink.getvalue()

    @property
    def text(self) -> str:
        raw = self.body or b""
        return raw.decode("utf-8", errors="replace")

    def add_header(self, header: str, value: str | None = None) -> None:
        self.headers.add(header, value)

    def get_header(self, name: str) -> str | None:
        return self.headers.get(name)

    def get_header_value(self, name: str) -> str | None:
        return self.headers.get_value(name)

    def use_buffer(self, buffer: bytearray | memoryview, capacity: int | None = None) -> None:
        """Fill a caller-owned buffer instead of growing one; it is never released by destroy()."""
        self.sink.release()
        self.sink = FixedBufferSink(buffer, capacity)

    def use_stream(self, stream: BinaryIO) -> None:
        """Write the body to ``stream``; it is neither closed nor rewound afterwards."""
        self.sink.release()
        self.sink = StreamSink(stream)

    def destroy(self) -> None:
        if self._destroyed:
            return
        if self.sink.owned:
            self.sink.release()
        self.headers.clear()
        self.content_type = None
        self._destroyed = True


__all__ = [
    "CLASS_DESTROYED",
    "Destroyable",
    "HttpMethod",
    "RestRequest",
    "RestResponse",
]
