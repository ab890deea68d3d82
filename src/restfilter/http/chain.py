# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Filter chain execution protocol.

A filter is a callable ``filter(link, client, request, response)``. It does
its pre-processing, hands the request to ``link.next`` (``None`` on the last
link), then post-processes the populated response. Requests flow through the
chain like an onion: whatever runs first on the way in runs last on the way
out.

Chains are built by prepending, so the filter added last runs first::

    chain = FilterChain()
    chain.add(transport_filter)        # terminal, runs last
    chain.add(set_content_headers)     # runs first

A filter that decides not to forward must still leave the response
well-formed (error fields set), because nothing after it will run.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Optional, Protocol

from ..errors import EmptyFilterChainError
from .models import RestRequest, RestResponse

if TYPE_CHECKING:
    from .client import RestClient


class Filter(Protocol):
    def __call__(
        self,
        link: FilterLink,
        client: RestClient,
        request: RestRequest,
        response: RestResponse,
    ) -> None: ...


class FilterLink:
    """One filter plus the link to forward to."""

    __slots__ = ("func", "next")

    def __init__(self, func: Filter, next: Optional[FilterLink] = None):  # noqa: A002
        self.func = func
        self.next = next

    def __call__(self, client: RestClient, request: RestRequest, response: RestResponse) -> None:
        self.func(self, client, request, response)

    def forward(self, client: RestClient, request: RestRequest, response: RestResponse) -> bool:
        """Run the rest of the chain; returns False when this is the last link."""
        if self.next is None:
            return False
        self.next(client, request, response)
        return True

    def __iter__(self) -> Iterator[Filter]:
        link: Optional[FilterLink] = self
        while link is not None:
            yield link.func
            link = link.next


def add_filter(head: Optional[FilterLink], func: Filter) -> FilterLink:
    """Prepend ``func`` to the chain starting at ``head`` and return the new head."""
    return FilterLink(func, head)


class FilterChain:
    """Reusable filter chain; executing it does not mutate it, so one chain can serve many threads."""

    def __init__(self) -> None:
        self.head: Optional[FilterLink] = None

    @classmethod
    def of(cls, *filters: Filter) -> FilterChain:
        """Build a chain from filters listed in execution order (first runs first)."""
        chain = cls()
        for func in reversed(filters):
            chain.add(func)
        return chain

    def add(self, func: Filter) -> FilterChain:
        """Prepend a filter; it will run before every filter added earlier."""
        self.head = add_filter(self.head, func)
        return self

    def __iter__(self) -> Iterator[Filter]:
        if self.head is None:
            return iter(())
        return iter(self.head)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return self.head is not None

    def clear(self) -> None:
        self.head = None


def execute_request(
    client: RestClient,
    chain: FilterChain | FilterLink | None,
    request: RestRequest,
    response: RestResponse,
) -> None:
    """
    Invoke the head of the chain.

    An empty chain has no terminal transport stage and can never produce a
    response, so it raises EmptyFilterChainError instead of returning.
    """
    head = chain.head if isinstance(chain, FilterChain) else chain
    if head is None:
        raise EmptyFilterChainError("execute_request called with no filters")
    head(client, request, response)


__all__ = ["Filter", "FilterChain", "FilterLink", "add_filter", "execute_request"]
