# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import functools
import json

import httpx
import pytest

from restfilter.cli import main as cli_main
from restfilter.cli.main import _split_proxy, _truncate_text_bytes, build_parser, main
from restfilter.http.client import RestClient


def _install_server(monkeypatch, handler):
    factory = lambda **kwargs: httpx.MockTransport(handler)  # noqa: E731
    monkeypatch.setattr(cli_main, "RestClient", functools.partial(RestClient, transport_factory=factory))


def test_build_parser_defaults():
    args = build_parser().parse_args(["example.org"])
    assert args.host == "example.org"
    assert args.uri == "/"
    assert args.method == "GET"
    assert args.port == 0
    assert args.header == []


def test_build_parser_rejects_both_body_sources():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["example.org", "-d", "x", "--data-file", "f"])


@pytest.mark.parametrize(
    ("value", "expected"),
    [("proxy.local:3128", ("proxy.local", 3128)), ("proxy.local", ("proxy.local", -1)), ("http://p:8080", ("http://p", 8080))],
)
def test_split_proxy(value, expected):
    assert _split_proxy(value) == expected


def test_truncate_text_bytes():
    assert _truncate_text_bytes("short", 100) == "short"
    truncated = _truncate_text_bytes("x" * 100, 20)
    assert truncated.endswith("...[truncated]")
    assert len(truncated.encode("utf-8")) <= 20


def test_main_json_output(monkeypatch, capsys):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(201, headers={"Content-Type": "application/json"}, content=b'{"id": 1}')

    _install_server(monkeypatch, handler)
    rc = main(["http://example.org", "/items", "-X", "post", "-d", '{"name": "a"}', "--content-type", "application/json", "-H", "X-Trace: 1", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert rc == 0
    assert payload["status_code"] == 201
    assert payload["status"] == "Created"
    assert payload["error"] == "NONE"
    assert payload["content_type"] == "application/json"
    assert payload["body"] == '{"id": 1}'
    assert seen[0].method == "POST"
    assert seen[0].headers["x-trace"] == "1"
    assert seen[0].content == b'{"name": "a"}'


def test_main_writes_output_file(monkeypatch, tmp_path, capsys):
    _install_server(monkeypatch, lambda request: httpx.Response(200, content=b"file body"))
    out = tmp_path / "body.bin"
    rc = main(["http://example.org", "-o", str(out)])

    assert rc == 0
    assert out.read_bytes() == b"file body"
    assert "HTTP/1.1 200 OK" in capsys.readouterr().out


def test_main_streams_data_file(monkeypatch, tmp_path, capsys):
    seen = []

    def handler(request):
        seen.append(request.content)
        return httpx.Response(204)

    _install_server(monkeypatch, handler)
    data = tmp_path / "upload.bin"
    data.write_bytes(b"0123456789")
    rc = main(["http://example.org", "/upload", "-X", "PUT", "--data-file", str(data)])

    capsys.readouterr()
    assert rc == 0
    assert seen == [b"0123456789"]


def test_main_reports_transport_failure(monkeypatch, capsys):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    _install_server(monkeypatch, handler)
    rc = main(["http://example.org", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert rc == 1
    assert payload["status_code"] == 0
    assert payload["error"] == "COULDNT_CONNECT"
    assert payload["error_message"] == "connection refused"


def test_main_applies_max_headers_setting(monkeypatch, capsys):
    monkeypatch.setenv("RESTFILTER_MAX_HEADERS", "2")
    _install_server(monkeypatch, lambda request: httpx.Response(200, headers={"X-A": "1", "X-B": "2"}, content=b"ok"))
    rc = main(["http://example.org", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert rc == 1
    assert payload["error"] == "WRITE_ERROR"
    assert payload["status_code"] == 200
    assert len(payload["headers"]) == 2
