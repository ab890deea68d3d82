# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import io

import pytest

from restfilter.http.body import (
    BufferSink,
    FixedBufferSink,
    MemoryBodySource,
    StreamBodySource,
    StreamSink,
)

PAYLOAD = bytes(range(256)) * 5


def _drain(source, chunk_size):
    chunks = []
    while True:
        assert source.bytes_written + source.bytes_remaining == source.size
        chunk = source.read(chunk_size)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


@pytest.mark.parametrize("chunk_size", [1, 7, 64, 1280, 5000])
def test_memory_source_round_trip(chunk_size):
    source = MemoryBodySource(PAYLOAD, "application/octet-stream")
    assert _drain(source, chunk_size) == PAYLOAD
    assert source.exhausted
    assert source.bytes_written == len(PAYLOAD)
    assert source.read(chunk_size) == b""


def test_memory_source_honors_declared_size():
    source = MemoryBodySource(b"hello world", "text/plain", size=5)
    assert _drain(source, 3) == b"hello"
    with pytest.raises(ValueError):
        MemoryBodySource(b"abc", size=4)


def test_memory_source_accepts_text():
    source = MemoryBodySource("héllo", "text/plain")
    assert source.size == len("héllo".encode("utf-8"))


def test_stream_source_stops_at_declared_size():
    stream = io.BytesIO(b"0123456789")
    source = StreamBodySource(stream, 4)
    assert _drain(source, 3) == b"0123"
    assert stream.tell() == 4


def test_stream_source_filter_sees_chunks_and_can_abort():
    seen = []

    def data_filter(request, chunk):
        seen.append((request, chunk))
        return len(seen) < 2

    source = StreamBodySource(io.BytesIO(b"abcdef"), 6, data_filter=data_filter)
    assert source.read(2, "req") == b"ab"
    assert source.read(2, "req") is None
    assert seen == [("req", b"ab"), ("req", b"cd")]
    # The rejected chunk is not counted as sent.
    assert source.bytes_written == 2
    assert source.bytes_remaining == 4


def test_stream_source_reset_rewinds_stream():
    stream = io.BytesIO(b"xxabcdef")
    stream.seek(2)
    source = StreamBodySource(stream, 6)
    assert source.read(4) == b"abcd"
    source.reset()
    assert source.bytes_written == 0
    assert source.bytes_remaining == 6
    assert _drain(source, 100) == b"abcdef"


def test_stream_source_reset_after_rejected_first_chunk_replays_everything():
    payload = bytes(range(100))
    verdicts = iter([False])
    source = StreamBodySource(io.BytesIO(payload), len(payload), data_filter=lambda req, chunk: next(verdicts, True))

    assert source.read(16) is None
    assert source.bytes_written == 0

    source.reset()
    assert _drain(source, 16) == payload
    assert source.bytes_written == 100


def test_short_stream_keeps_invariant():
    source = StreamBodySource(io.BytesIO(b"abc"), 10)
    assert _drain(source, 4) == b"abc"
    assert source.bytes_written == 3
    assert source.bytes_remaining == 7


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        StreamBodySource(io.BytesIO(), -1)


def test_buffer_sink_grows_and_releases():
    sink = BufferSink()
    assert sink.write(b"abc") == 3
    assert sink.write(b"def") == 3
    assert sink.content_length == 6
    assert sink.getvalue() == b"abcdef"
    sink.release()
    assert sink.getvalue() == b""
    assert sink.content_length == 0


def test_fixed_buffer_sink_rejects_overflow_without_partial_write():
    buffer = bytearray(b"\x00" * 8)
    sink = FixedBufferSink(buffer)
    assert sink.write(b"12345") == 5
    assert sink.write(b"6789") == 0
    assert sink.content_length == 5
    assert bytes(buffer) == b"12345\x00\x00\x00"
    assert sink.write(b"678") == 3
    assert sink.getvalue() == b"12345678"


def test_fixed_buffer_sink_validates_capacity():
    with pytest.raises(ValueError):
        FixedBufferSink(bytearray(2), capacity=3)
    with pytest.raises(ValueError):
        FixedBufferSink(b"readonly")


def test_stream_sink_uses_offset_delta():
    stream = io.BytesIO()
    stream.write(b"existing")
    sink = StreamSink(stream)
    sink.begin()
    sink.write(b"hello")
    sink.write(b" world")
    sink.finish()
    assert sink.content_length == 11
    assert stream.getvalue() == b"existinghello world"
    assert sink.getvalue() is None


def test_stream_sink_without_tell_counts_bytes():
    class Pipe:
        def __init__(self):
            self.data = bytearray()

        def write(self, chunk):
            self.data.extend(chunk)
            return len(chunk)

    pipe = Pipe()
    sink = StreamSink(pipe)
    sink.begin()
    sink.write(b"abc")
    sink.finish()
    assert sink.start_offset is None
    assert sink.content_length == 3
