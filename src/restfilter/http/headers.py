# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header line collections.

Headers are kept the way they travel on the wire: one ``Name: Value`` string
per line, in arrival order, duplicates allowed. Field names are
case-insensitive (RFC 9110), so lookups compare names without regard to case
and then insist on a colon right after the name; ``X-Foo`` must never match
``X-Foobar: 1``.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from ..config import MAX_HEADERS
from ..errors import HeaderLimitError

HTTP_HEADER_CONTENT_TYPE = "Content-Type"
HTTP_HEADER_CONTENT_LENGTH = "Content-Length"
HTTP_HEADER_RANGE = "Range"
HTTP_HEADER_CONTENT_RANGE = "Content-Range"
HTTP_HEADER_ACCEPT = "Accept"
HTTP_HEADER_DATE = "Date"
HTTP_HEADER_LOCATION = "Location"


def header_matches(line: str | None, name: str) -> bool:
    """Return True when ``line`` starts with ``name`` (any case) followed by a colon."""
    if not line or not name:
        return False
    size = len(name)
    if len(line) <= size:
        return False
    return line[:size].lower() == name.lower() and line[size] == ":"


def header_line_value(line: str | None) -> str | None:
    """Return everything past the first colon, leading spaces trimmed."""
    if line is None:
        return None
    _, sep, value = line.partition(":")
    if not sep:
        return None
    return value.lstrip(" ")


def format_header(name: str, value: str | None = None) -> str:
    if value is None:
        return name
    return f"{name}: {value}"


class HeaderList:
    """Ordered, bounded list of raw header lines."""

    def __init__(self, lines: Iterable[str] | None = None, *, max_headers: int = MAX_HEADERS):
        self.max_headers = max_headers
        self._lines: list[str] = []
        for line in lines or ():
            self.add(line)

    def add(self, header: str, value: str | None = None) -> None:
        """
        Append a header line.

        Accepts either a complete ``"Name: Value"`` line or a name/value pair.
        Raises HeaderLimitError once ``max_headers`` lines are stored.
        """
        if len(self._lines) >= self.max_headers:
            raise HeaderLimitError(f"header limit of {self.max_headers} reached")
        self._lines.append(format_header(str(header), value))

    def get(self, name: str) -> str | None:
        """Return the first full line for ``name`` or None."""
        for line in self._lines:
            if header_matches(line, name):
                return line
        return None

    def get_value(self, name: str) -> str | None:
        """Like get(), but only the value portion."""
        return header_line_value(self.get(name))

    def get_all(self, name: str) -> list[str]:
        return [line for line in self._lines if header_matches(line, name)]

    def as_pairs(self) -> list[tuple[str, str]]:
        """Split every line into a ``(name, value)`` pair; lines without a colon get an empty value."""
        pairs: list[tuple[str, str]] = []
        for line in self._lines:
            name, _, value = line.partition(":")
            pairs.append((name.strip(), value.strip()))
        return pairs

    def clear(self) -> None:
        self._lines.clear()

    @property
    def full(self) -> bool:
        return len(self._lines) >= self.max_headers

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self._lines)

    def __getitem__(self, index: int) -> str:
        return self._lines[index]

    def __bool__(self) -> bool:
        return bool(self._lines)

    def __repr__(self) -> str:
        return f"HeaderList({self._lines!r})"


__all__ = [
    "HTTP_HEADER_ACCEPT",
    "HTTP_HEADER_CONTENT_LENGTH",
    "HTTP_HEADER_CONTENT_RANGE",
    "HTTP_HEADER_CONTENT_TYPE",
    "HTTP_HEADER_DATE",
    "HTTP_HEADER_LOCATION",
    "HTTP_HEADER_RANGE",
    "HeaderList",
    "format_header",
    "header_line_value",
    "header_matches",
]
