# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""restfilter CLI."""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any

from ..config import ClientSettings, load_client_settings
from ..errors import TransportError
from ..http import (
    HttpMethod,
    RestClient,
    RestResponse,
    create_default_chain,
    disable_ssl_cert_check,
    verbose_config,
)
from ..log import setup_logging

CLI_TEXT_TRUNCATION_BYTES = 4096


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Execute a single HTTP request through the default filter chain")
    parser.add_argument("host", help="Server host, optionally prefixed with http:// or https://")
    parser.add_argument("uri", nargs="?", default="/", help="Request URI (default: /)")
    parser.add_argument("-X", "--method", default="GET", type=str.upper, choices=[m.value for m in HttpMethod])
    parser.add_argument("-p", "--port", type=int, default=0, help="Server port (default: scheme default; 443 selects https without a scheme)")
    parser.add_argument("-H", "--header", action="append", default=[], help='Extra request header, "Name: Value"')
    body = parser.add_mutually_exclusive_group()
    body.add_argument("-d", "--data", help="Request body")
    body.add_argument("--data-file", help="Stream the request body from this file")
    parser.add_argument("--content-type", default="application/octet-stream", help="Content type of the request body")
    parser.add_argument("-o", "--output", help="Write the response body to this file")
    parser.add_argument("--encoded", action="store_true", help="URI is already percent-encoded")
    parser.add_argument("--proxy", help="Proxy host[:port]")
    parser.add_argument("--proxy-user", help="Proxy user name")
    parser.add_argument("--proxy-pass", help="Proxy password")
    parser.add_argument("-k", "--insecure", action="store_true", help="Skip TLS verification (lab/self-signed servers only)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log the request and response lines")
    parser.add_argument("--json", action="store_true", help="Output JSON instead of the raw response")
    return parser


def _split_proxy(value: str) -> tuple[str, int]:
    host, sep, port = value.rpartition(":")
    if sep and port.isdigit():
        return host, int(port)
    return value, -1


def _truncate_text_bytes(text: str, max_bytes: int) -> str:
    raw = text.encode("utf-8")
    if len(raw) <= max_bytes:
        return text
    suffix = "...[truncated]"
    keep = max_bytes - len(suffix.encode("utf-8"))
    if keep <= 0:
        return suffix.encode("utf-8")[:max_bytes].decode("utf-8", errors="ignore")
    return raw[:keep].decode("utf-8", errors="ignore") + suffix


def response_to_dict(response: RestResponse) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "status_code": response.status_code,
        "status": response.status,
        "error": response.error.value,
        "error_message": response.error_message,
        "content_type": response.content_type,
        "content_length": response.content_length,
        "headers": list(response.headers),
    }
    body = response.body
    if body is not None:
        payload["body"] = _truncate_text_bytes(response.text, CLI_TEXT_TRUNCATION_BYTES)
    return payload


def _print_json(response: RestResponse) -> None:
    json.dump(response_to_dict(response), sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def _pretty_print(response: RestResponse) -> None:
    for line in response.headers:
        print(line)
    print()
    body = response.body
    if body:
        sys.stdout.write(response.text)
        if not response.text.endswith("\n"):
            sys.stdout.write("\n")
    if response.error != TransportError.NONE:
        print(f"[restfilter] {response.error.value}: {response.error_message}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        setup_logging("INFO")

    settings: ClientSettings = load_client_settings()
    data_file = None
    output = None
    try:
        with RestClient(args.host, args.port, settings=settings) as client:
            request = client.new_request(args.uri, HttpMethod(args.method), uri_encoded=args.encoded)
            response = client.new_response()
            for header in args.header:
                request.add_header(header)
            if args.data is not None:
                request.set_memory_body(args.data, args.content_type)
            elif args.data_file:
                data_file = open(args.data_file, "rb")
                request.set_stream_body(data_file, os.fstat(data_file.fileno()).st_size, args.content_type)
            if args.output:
                output = open(args.output, "wb")
                response.use_stream(output)

            if args.proxy:
                proxy_host, proxy_port = _split_proxy(args.proxy)
                client.set_proxy(proxy_host, proxy_port, args.proxy_user, args.proxy_pass)
            if args.insecure:
                client.add_config_hook(disable_ssl_cert_check)
            if args.verbose:
                client.add_config_hook(verbose_config)
            client.execute(create_default_chain(), request, response)
    finally:
        if data_file is not None:
            data_file.close()
        if output is not None:
            output.close()

    if args.json:
        _print_json(response)
    else:
        _pretty_print(response)

    return 0 if response.error == TransportError.NONE else 1


if __name__ == "__main__":
    raise SystemExit(main())
