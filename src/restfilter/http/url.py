# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URI encoding and endpoint URL construction."""

from __future__ import annotations

from urllib.parse import quote, urlsplit

DEFAULT_PORTS = {"http": 80, "https": 443}


def encode_uri(uri: str) -> str:
    """
    Percent-encode a request URI one path segment at a time.

    ``/`` is copied through as-is; from the first ``?`` on, the rest of the
    string is copied verbatim, so the query string must already be encoded by
    the caller.

    Example:
      /a b/c?x=1 2 -> /a%20b/c?x=1 2
    """
    path, sep, query = uri.partition("?")
    encoded = "/".join(quote(segment, safe="") for segment in path.split("/"))
    return f"{encoded}{sep}{query}"


def resolve_uri(uri: str, *, encoded: bool) -> str:
    return uri if encoded else encode_uri(uri)


def build_base_url(host: str, port: int | None = None) -> str:
    """
    Turn a client host (optionally carrying ``http://`` or ``https://``) into a base URL.

    Without a scheme, port 443 selects https and anything else http. The port
    is only spelled out when it differs from the scheme default.
    """
    raw = str(host or "").strip().rstrip("/")
    if "://" in raw:
        parts = urlsplit(raw)
        scheme = parts.scheme.lower()
        netloc = parts.netloc
        if port and port > 0 and parts.port is None and DEFAULT_PORTS.get(scheme) != port:
            netloc = f"{netloc}:{port}"
        return f"{scheme}://{netloc}{parts.path}"

    scheme = "https" if port == 443 else "http"
    if port and port > 0 and DEFAULT_PORTS[scheme] != port:
        return f"{scheme}://{raw}:{port}"
    return f"{scheme}://{raw}"


def build_endpoint_url(host: str, port: int | None, uri: str, *, encoded: bool = False) -> str:
    """Concatenate the client's base URL with the (encoded) request URI."""
    return f"{build_base_url(host, port)}{resolve_uri(uri, encoded=encoded)}"


__all__ = ["build_base_url", "build_endpoint_url", "encode_uri", "resolve_uri"]
