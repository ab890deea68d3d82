# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request body sources and response body sinks.

A source declares its total size up front so Content-Length is known before
the transfer starts, then hands out chunks on demand. A sink receives the
response body: a growable buffer owned by the response, a caller-supplied
fixed-capacity buffer, or a binary stream such as an open file.
"""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Callable, Optional

# (request, chunk) -> keep going?
DataFilter = Callable[[Any, bytes], bool]


def _tell(stream: Any) -> int | None:
    try:
        return stream.tell()
    except (AttributeError, OSError, ValueError, io.UnsupportedOperation):
        return None


class BodySource(ABC):
    """Pull-style request body with a declared size."""

    def __init__(self, size: int, content_type: str | None = None):
        if size < 0:
            raise ValueError("body size must be >= 0")
        self.size = size
        self.content_type = content_type
        self.bytes_written = 0
        self.bytes_remaining = size

    @abstractmethod
    def _read(self, size: int) -> bytes: ...

    def _accept(self, request: Any, chunk: bytes) -> bool:  # noqa: ARG002
        return True

    def read(self, max_bytes: int, request: Any = None) -> Optional[bytes]:
        """
        Return the next chunk of at most ``max_bytes`` bytes.

        Returns ``b""`` once the declared size has been consumed and ``None``
        when a data filter rejected the chunk (the transfer must abort).
        """
        if self.bytes_remaining <= 0 or max_bytes <= 0:
            return b""
        chunk = self._read(min(max_bytes, self.bytes_remaining))
        if not chunk:
            return b""
        if not self._accept(request, chunk):
            return None
        self.bytes_written += len(chunk)
        self.bytes_remaining -= len(chunk)
        return chunk

    @property
    def exhausted(self) -> bool:
        return self.bytes_remaining <= 0

    def reset(self) -> None:
        """Rewind so the body can be sent again."""
        self.bytes_written = 0
        self.bytes_remaining = self.size


class MemoryBodySource(BodySource):
    """Body backed by an in-memory bytes-like object."""

    def __init__(self, data: bytes | bytearray | memoryview | str, content_type: str | None = None, size: int | None = None):
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._data = memoryview(data).cast("B")
        if size is None:
            size = len(self._data)
        if size > len(self._data):
            raise ValueError(f"declared size {size} exceeds the {len(self._data)} bytes available")
        super().__init__(size, content_type)

    def _read(self, size: int) -> bytes:
        return bytes(self._data[self.bytes_written : self.bytes_written + size])


class StreamBodySource(BodySource):
    """Body read lazily from a binary stream, optionally passed through a data filter."""

    def __init__(
        self,
        stream: BinaryIO,
        size: int,
        content_type: str | None = None,
        data_filter: DataFilter | None = None,
    ):
        super().__init__(size, content_type)
        self.stream = stream
        self.data_filter = data_filter
        self._start = _tell(stream)

    def _read(self, size: int) -> bytes:
        return self.stream.read(size) or b""

    def _accept(self, request: Any, chunk: bytes) -> bool:
        if self.data_filter is None:
            return True
        return bool(self.data_filter(request, chunk))

    def reset(self) -> None:
        # A rejected chunk was already consumed without counting as written.
        if self._start is not None and _tell(self.stream) != self._start:
            self.stream.seek(self._start)
        super().reset()


class BodySink(ABC):
    """Destination for response body bytes."""

    #: True when the response owns (and releases) the storage.
    owned = False

    def __init__(self) -> None:
        self.content_length = 0

    def begin(self) -> None:
        """Called immediately before the transfer starts."""

    @abstractmethod
    def write(self, chunk: bytes) -> int:
        """Store ``chunk``; return the number of bytes accepted."""

    def finish(self) -> None:
        """Called once the transfer is over, successful or not."""

    def getvalue(self) -> bytes | None:
        return None

    def release(self) -> None:
        """Drop any storage the response owns."""


class BufferSink(BodySink):
    """Growable buffer owned by the response."""

    owned = True

    def __init__(self) -> None:
        super().__init__()
        self._buffer = bytearray()

    def write(self, chunk: bytes) -> int:
        self._buffer.extend(chunk)
        self.content_length = len(self._buffer)
        return len(chunk)

    def getvalue(self) -> bytes:
        return bytes(self._buffer)

    def release(self) -> None:
        self._buffer = bytearray()
        self.content_length = 0


class FixedBufferSink(BodySink):
    """
    Caller-supplied buffer with a hard capacity.

    A chunk that does not fit is rejected whole: nothing is copied past
    ``capacity`` and ``content_length`` keeps counting only accepted bytes.
    The buffer belongs to the caller and is left untouched by release().
    """

    def __init__(self, buffer: bytearray | memoryview, capacity: int | None = None):
        super().__init__()
        view = memoryview(buffer)
        if view.readonly:
            raise ValueError("response buffer must be writable")
        self.buffer = buffer
        self._view = view.cast("B")
        if capacity is None:
            capacity = len(self._view)
        if capacity < 0 or capacity > len(self._view):
            raise ValueError(f"capacity {capacity} does not fit a buffer of {len(self._view)} bytes")
        self.capacity = capacity

    def write(self, chunk: bytes) -> int:
        size = len(chunk)
        if self.content_length + size > self.capacity:
            return 0
        self._view[self.content_length : self.content_length + size] = chunk
        self.content_length += size
        return size

    def getvalue(self) -> bytes:
        return bytes(self._view[: self.content_length])


class StreamSink(BodySink):
    """
    Sink writing straight to a binary stream.

    ``content_length`` is the stream offset after the transfer minus the
    offset captured by begin(); streams that cannot tell() fall back to
    counting written bytes. The stream is never closed or rewound.
    """

    def __init__(self, stream: BinaryIO):
        super().__init__()
        self.stream = stream
        self.start_offset: int | None = None
        self._written = 0

    def begin(self) -> None:
        self.start_offset = _tell(self.stream)
        self._written = 0
        self.content_length = 0

    def write(self, chunk: bytes) -> int:
        written = self.stream.write(chunk)
        if written is None:
            written = len(chunk)
        self._written += written
        self.content_length = self._written
        return written

    def finish(self) -> None:
        if self.start_offset is None:
            return
        offset = _tell(self.stream)
        if offset is not None:
            self.content_length = offset - self.start_offset


__all__ = [
    "BodySink",
    "BodySource",
    "BufferSink",
    "DataFilter",
    "FixedBufferSink",
    "MemoryBodySource",
    "StreamBodySource",
    "StreamSink",
]
