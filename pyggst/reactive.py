# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Reactive Streams support for the pyggst SDK.

Provides RxPY-based streams over catalog pages so matches can be processed
as each page arrives instead of after the whole batch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import reactivex as rx
from reactivex import Observable, operators as ops
from reactivex.abc import SchedulerBase

from .exceptions import InvalidParametersError, ParseError
from .models import QueryParameters
from .protocol import MAX_PAGES, MAX_REPLAYS_PER_PAGE
from .types import Match, PageResult

if TYPE_CHECKING:
    from .client import GGSTClient


class ReplayStream:
    """
    Replay catalog pages as Observable streams.

    Pages are requested one after another when subscribed. A transport
    failure terminates the stream with ``on_error``; pages already emitted
    are not retracted, so collect with ``ops.to_list()`` when the caller
    needs the all-or-nothing behaviour of ``GGSTClient.get_replays``.

    Example:
        >>> stream = ReplayStream(client)
        >>> stream.matches(pages=5, replays_per_page=100).pipe(
        ...     ops.filter(lambda m: m.floor == Floor.CELESTIAL),
        ...     ops.map(lambda m: m.winner().name),
        ... ).subscribe(on_next=print)
    """

    def __init__(self, client: GGSTClient, scheduler: SchedulerBase | None = None) -> None:
        """
        Initialize the stream.

        Args:
            client: Client used to fetch pages.
            scheduler: Optional scheduler pages are fetched on. Defaults to
                the subscribing thread.
        """
        self._client = client
        self._scheduler = scheduler

    def pages(
        self,
        pages: int,
        replays_per_page: int,
        query: QueryParameters | None = None,
    ) -> Observable[PageResult]:
        """
        Get observable stream of decoded pages.

        Raises:
            InvalidParametersError: Immediately, on bad bounds.
        """
        if not 1 <= pages <= MAX_PAGES:
            raise InvalidParametersError(f"pages must be between 1 and {MAX_PAGES}", "pages", pages)
        if not 1 <= replays_per_page <= MAX_REPLAYS_PER_PAGE:
            raise InvalidParametersError(
                f"replays_per_page must be between 1 and {MAX_REPLAYS_PER_PAGE}",
                "replays_per_page",
                replays_per_page,
            )

        base = (query or QueryParameters()).with_replays_per_page(replays_per_page)
        queries = [base.with_page(i) for i in range(pages)]
        return rx.from_iterable(queries, scheduler=self._scheduler).pipe(
            ops.map(self._client.get_replay_page),
        )

    def matches(
        self,
        pages: int,
        replays_per_page: int,
        query: QueryParameters | None = None,
    ) -> Observable[Match]:
        """Get observable stream of unique matches, deduplicated by identity."""
        return self.pages(pages, replays_per_page, query).pipe(
            ops.flat_map(lambda page: rx.from_iterable(page.matches)),
            ops.distinct(key_mapper=_identity),
        )

    def parse_errors(
        self,
        pages: int,
        replays_per_page: int,
        query: QueryParameters | None = None,
    ) -> Observable[ParseError]:
        """Get observable stream of records that failed to decode."""
        return self.pages(pages, replays_per_page, query).pipe(
            ops.flat_map(lambda page: rx.from_iterable(page.errors)),
        )


def _identity(match: Match) -> Any:
    return match.identity
