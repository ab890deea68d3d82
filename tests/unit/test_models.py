# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import io

import pytest

from restfilter.config import ClientSettings
from restfilter.errors import HeaderLimitError, TransportError
from restfilter.http.body import BufferSink, FixedBufferSink, StreamBodySource, StreamSink
from restfilter.http.client import RestClient
from restfilter.http.models import CLASS_DESTROYED, HttpMethod, RestRequest, RestResponse

TEST_HEADER = "THIS IS A HEADER"
TEST_CONTENT_TYPE = "text/plain"


def test_rest_request_headers_and_body():
    req = RestRequest("/", HttpMethod.GET)
    assert req.class_name == "RestRequest"

    req.add_header(TEST_HEADER)
    assert len(req.headers) == 1
    assert req.headers[0] == TEST_HEADER

    body = req.set_memory_body(TEST_HEADER, TEST_CONTENT_TYPE)
    assert req.body is body
    assert body.size == len(TEST_HEADER)
    assert body.content_type == TEST_CONTENT_TYPE

    req.destroy()
    assert req.body is None
    assert len(req.headers) == 0
    assert req.uri == ""
    assert req.class_name == CLASS_DESTROYED


def test_rest_request_method_coercion():
    assert RestRequest("/x", "PATCH").method is HttpMethod.PATCH
    with pytest.raises(ValueError):
        RestRequest("/x", "BREW")


def test_rest_request_header_limit_is_caller_error():
    req = RestRequest("/", max_headers=1)
    req.add_header("Accept", "text/plain")
    with pytest.raises(HeaderLimitError):
        req.add_header("X-Too-Many: 1")


def test_set_data_filter_only_applies_to_stream_bodies():
    req = RestRequest("/upload", HttpMethod.PUT)
    req.set_data_filter(lambda request, chunk: True)
    assert req.body is None

    req.set_memory_body(b"abc")
    req.set_data_filter(lambda request, chunk: True)
    assert not hasattr(req.body, "data_filter")

    stream_body = req.set_stream_body(io.BytesIO(b"abc"), 3, "text/plain")
    assert isinstance(stream_body, StreamBodySource)

    def data_filter(request, chunk):
        return True

    req.set_data_filter(data_filter)
    assert stream_body.data_filter is data_filter


def test_destroy_twice_is_noop():
    req = RestRequest("/")
    req.destroy()
    req.destroy()
    assert req.destroyed

    res = RestResponse()
    res.destroy()
    res.destroy()
    assert res.destroyed

    client = RestClient("http://example.org")
    client.destroy()
    client.destroy()
    assert client.destroyed
    assert client.class_name == CLASS_DESTROYED


def test_response_defaults():
    res = RestResponse()
    assert res.class_name == "RestResponse"
    assert res.status_code == 0
    assert res.error == TransportError.NONE
    assert not res.ok
    assert isinstance(res.sink, BufferSink)
    assert res.content_length == 0
    assert res.body == b""
    assert res.get_header("Content-Type") is None


def test_response_headers_lookup():
    res = RestResponse()
    res.add_header("HTTP/1.1 200 OK")
    res.add_header("Content-Type: text/html")
    res.add_header("X-Foobar: 1")
    assert res.get_header("content-type") == "Content-Type: text/html"
    assert res.get_header_value("CONTENT-TYPE") == "text/html"
    assert res.get_header("X-Foo") is None


def test_response_use_buffer_is_not_released_on_destroy():
    buffer = bytearray(16)
    res = RestResponse()
    res.use_buffer(buffer)
    assert isinstance(res.sink, FixedBufferSink)
    res.sink.write(b"data")
    assert res.body == b"data"
    assert res.content_length == 4

    res.destroy()
    assert bytes(buffer[:4]) == b"data"


def test_response_use_stream_reports_no_body():
    out = io.BytesIO()
    res = RestResponse()
    res.use_stream(out)
    assert isinstance(res.sink, StreamSink)
    assert res.body is None
    assert res.text == ""
    res.destroy()
    assert not out.closed


def test_response_text_decodes_body():
    res = RestResponse()
    res.sink.write("héllo".encode("utf-8"))
    assert res.text == "héllo"


def test_client_factories_use_max_headers_setting():
    client = RestClient("http://example.org", settings=ClientSettings(max_headers=2))
    try:
        request = client.new_request("/x", "post", uri_encoded=True)
        response = client.new_response()
    finally:
        client.destroy()

    assert request.method == HttpMethod.POST
    assert request.uri_encoded is True
    assert request.headers.max_headers == 2
    assert response.headers.max_headers == 2
    request.add_header("A: 1")
    request.add_header("B: 2")
    with pytest.raises(HeaderLimitError):
        request.add_header("C: 3")
