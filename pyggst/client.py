# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
pyggst Python Client.

A client for the GGST replay catalog with support for:
- Multi-page replay queries with deduplication
- Per-record parse failure reporting
- Floor and character filters
- Concurrent page fetches
- Player profile lookup by Steam id

Usage Patterns:

    # Pattern 1: Simple usage (recommended for scripts)
    from pyggst import get_replays
    matches, errors = get_replays(TOKEN, pages=3, replays_per_page=50)

    # Pattern 2: Context manager (recommended for applications)
    from pyggst import GGSTClient
    with GGSTClient(TOKEN) as client:
        batch = client.get_replays(pages=3, replays_per_page=50)

    # Pattern 3: Explicit lifecycle management
    client = GGSTClient(TOKEN)
    try:
        batch = client.get_replays(pages=3, replays_per_page=50)
    finally:
        client.close()
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from .binary import (
    decode_page,
    decode_user_id_response,
    decode_user_stats_response,
    encode_replay_request,
    encode_user_stats_request,
)
from .exceptions import InvalidParametersError
from .models import ClientConfig, QueryParameters
from .protocol import (
    FORM_FIELD,
    MAX_PAGES,
    MAX_REPLAYS_PER_PAGE,
    REPLAY_CATALOG_PATH,
    USER_STATS_PATH,
    Envelope,
    encode_form_value,
)
from .tls import TLSConfig
from .transport import HTTPTransport, Transport
from .types import Match, PageResult, ReplayBatch, User

logger = logging.getLogger(__name__)


class GGSTClient:
    """
    Client for the GGST replay catalog and statistics API.

    The client handles:
    - Request envelope and query encoding
    - Page segmentation and record decoding
    - Deduplication of matches seen on more than one page
    - Collection of records that failed to decode

    Example:
        >>> client = GGSTClient(TOKEN)
        >>> query = QueryParameters().with_floor_range(Floor.F10, Floor.CELESTIAL)
        >>> matches, errors = client.get_replays(pages=2, replays_per_page=100, query=query)
        >>> client.close()
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        config: ClientConfig | None = None,
        transport: Transport | None = None,
        tls: TLSConfig | None = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the client.

        Args:
            token: Hex-encoded session token.
            config: Optional ClientConfig object.
            transport: Optional Transport; defaults to HTTPTransport.
            tls: Optional TLSConfig for the default transport.
            **kwargs: Override config options (base_url, max_workers, etc.)
        """
        if config is None:
            if token is None:
                raise InvalidParametersError("A session token or a ClientConfig is required", "token")
            config = ClientConfig(token=token, **kwargs)
        else:
            config = config.model_copy()
            if token is not None:
                config.token = token
            for key, value in kwargs.items():
                if hasattr(config, key):
                    setattr(config, key, value)

        if tls:
            config.tls_ca_file = tls.ca_file
            config.tls_insecure_skip_verify = tls.insecure_skip_verify

        self._config = config
        self._envelope = Envelope(token=config.token_bytes())
        self._transport = transport or HTTPTransport.from_config(config)
        self._owns_transport = transport is None
        self._closed = False

    @property
    def config(self) -> ClientConfig:
        return self._config

    def close(self) -> None:
        """Release the transport if this client created it."""
        if self._closed:
            return
        self._closed = True
        if self._owns_transport:
            self._transport.close()

    def __enter__(self) -> GGSTClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()

    # =========================================================================
    # Replay Catalog
    # =========================================================================

    def get_replay_page(self, query: QueryParameters) -> PageResult:
        """
        Fetch and decode a single catalog page.

        Args:
            query: Page index, page size and filters.

        Returns:
            PageResult with decoded matches and per-record failures.

        Raises:
            InvalidParametersError: If the query cannot be encoded.
            TransportError: If the request fails.
        """
        payload = encode_replay_request(self._envelope, query)
        url = f"{self._config.base_url}{REPLAY_CATALOG_PATH}"
        logger.debug(f"Requesting page {query.page_index} ({query.replays_per_page} replays)")
        raw = self._transport.post_form(url, {FORM_FIELD: encode_form_value(payload)})
        return decode_page(raw, query.page_index)

    def get_replays(
        self,
        pages: int,
        replays_per_page: int,
        query: QueryParameters | None = None,
    ) -> ReplayBatch:
        """
        Fetch several catalog pages and merge them.

        Matches are deduplicated by timestamp and player ids, so the result
        may hold fewer than ``pages * replays_per_page`` entries. Every
        record that failed to decode is returned in ``errors`` in page
        order, then record order, also when pages are fetched concurrently.

        Args:
            pages: Number of pages to fetch, starting at page 0 (1-100).
            replays_per_page: Replays requested per page (1-127).
            query: Floor and character filters. Its page fields are ignored.

        Returns:
            ReplayBatch of unique matches and parse errors.

        Raises:
            InvalidParametersError: Before any request, on bad bounds.
            TransportError: If any page fails; no partial result is returned.

        Example:
            >>> matches, errors = client.get_replays(pages=5, replays_per_page=127)
            >>> print(f"{len(matches)} matches, {len(errors)} unreadable records")
        """
        if not isinstance(pages, int) or not 1 <= pages <= MAX_PAGES:
            raise InvalidParametersError(
                f"pages must be between 1 and {MAX_PAGES}, got {pages!r}",
                "pages",
                pages,
            )
        if not isinstance(replays_per_page, int) or not 1 <= replays_per_page <= MAX_REPLAYS_PER_PAGE:
            raise InvalidParametersError(
                f"replays_per_page must be between 1 and {MAX_REPLAYS_PER_PAGE}, got {replays_per_page!r}",
                "replays_per_page",
                replays_per_page,
            )

        base = (query or QueryParameters()).with_replays_per_page(replays_per_page)
        queries = [base.with_page(i) for i in range(pages)]

        results = self._fetch_pages(queries)
        batch = merge_pages(results)
        logger.info(
            f"Fetched {pages} pages: {len(batch.matches)} unique matches, "
            f"{len(batch.errors)} parse errors"
        )
        return batch

    def _fetch_pages(self, queries: list[QueryParameters]) -> list[PageResult]:
        workers = min(self._config.max_workers, len(queries))
        if workers <= 1:
            return [self.get_replay_page(q) for q in queries]

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pyggst-page") as executor:
            futures = [executor.submit(self.get_replay_page, q) for q in queries]
            try:
                return [f.result() for f in futures]
            except BaseException:
                for f in futures:
                    f.cancel()
                raise

    # =========================================================================
    # Users
    # =========================================================================

    def user_id_from_steam_id(self, steam_id: str) -> str:
        """
        Look up the service user id for a Steam id.

        Raises:
            UnexpectedResponseError: If the lookup has no ``UserID``.
        """
        url = f"{self._config.utils_base_url}/{steam_id}.json"
        return decode_user_id_response(self._transport.get(url))

    def get_user(self, steam_id: str) -> User:
        """
        Fetch the public profile of a player.

        Args:
            steam_id: 17-digit Steam id.

        Returns:
            User with the service user id, nickname and profile comment.
        """
        user_id = self.user_id_from_steam_id(steam_id)
        payload = encode_user_stats_request(self._envelope, user_id)
        url = f"{self._config.base_url}{USER_STATS_PATH}"
        raw = self._transport.post_form(url, {FORM_FIELD: encode_form_value(payload)})
        return decode_user_stats_response(raw, user_id)


# =============================================================================
# Module-level convenience functions
# =============================================================================

def merge_pages(results: list[PageResult]) -> ReplayBatch:
    """
    Merge decoded pages into one batch.

    The first occurrence of each match identity wins; errors keep the
    order of ``results``.
    """
    unique: dict[tuple, Match] = {}
    errors = []
    for page in results:
        for match in page.matches:
            unique.setdefault(match.identity, match)
        errors.extend(page.errors)
    return ReplayBatch(matches=tuple(unique.values()), errors=tuple(errors), pages=len(results))


def connect(
    token: str,
    *,
    base_url: str | None = None,
    tls: TLSConfig | None = None,
    **kwargs: Any,
) -> GGSTClient:
    """
    Create a GGST client.

    Args:
        token: Hex-encoded session token.
        base_url: Optional API host override.
        tls: TLSConfig for the default HTTPS transport.
        **kwargs: Additional configuration options.

    Examples:
        >>> client = connect(TOKEN)
        >>> client = connect(TOKEN, base_url="http://localhost:8080", max_workers=4)
    """
    if base_url is not None:
        kwargs["base_url"] = base_url
    return GGSTClient(token, tls=tls, **kwargs)


def get_replays(
    context: str | ClientConfig | GGSTClient,
    pages: int,
    replays_per_page: int,
    query: QueryParameters | None = None,
) -> ReplayBatch:
    """
    Fetch and decode replays in one call.

    Args:
        context: A token, a ClientConfig or an existing GGSTClient.
        pages: Number of pages (1-100).
        replays_per_page: Replays per page (1-127).
        query: Optional floor and character filters.

    Returns:
        ReplayBatch that unpacks as ``(matches, errors)``.
    """
    if isinstance(context, GGSTClient):
        return context.get_replays(pages, replays_per_page, query)

    if isinstance(context, ClientConfig):
        client = GGSTClient(config=context)
    else:
        client = GGSTClient(context)
    with client:
        return client.get_replays(pages, replays_per_page, query)
