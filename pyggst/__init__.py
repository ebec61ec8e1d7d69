# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
pyggst - Python Client SDK for the GGST replay catalog.

A client library for the game service's binary replay catalog with support for:
- Binary request encoding with floor and character filters
- Best-effort response decoding with per-record failure reports
- Multi-page queries with match deduplication
- Concurrent page fetches
- Reactive streams of matches
- Player profile lookup

Quick Start (Simplest):
    >>> from pyggst import get_replays
    >>>
    >>> matches, errors = get_replays(TOKEN, pages=2, replays_per_page=50)
    >>> for match in matches:
    ...     print(match.floor, match.winner().name, "beat", match.loser().name)

Context Manager (Recommended for applications):
    >>> from pyggst import GGSTClient, QueryParameters, Floor, Character
    >>>
    >>> query = (
    ...     QueryParameters()
    ...     .with_floor_range(Floor.F10, Floor.CELESTIAL)
    ...     .with_character(Character.SOL)
    ... )
    >>> with GGSTClient(TOKEN) as client:
    ...     batch = client.get_replays(pages=5, replays_per_page=127, query=query)
    ...     print(f"{len(batch.matches)} matches, {len(batch.errors)} unreadable records")

Inspecting Failures:
    >>> for err in batch.errors:
    ...     print(err.reason.value, err.raw.hex())

Reactive Streams:
    >>> from pyggst import ReplayStream
    >>> ReplayStream(client).matches(pages=3, replays_per_page=100).subscribe(
    ...     on_next=lambda m: print(m.identity)
    ... )
"""

from .binary import decode_match, decode_page, encode_replay_query, encode_replay_request
from .client import GGSTClient, connect, get_replays, merge_pages
from .exceptions import (
    GGSTError,
    HTTPStatusError,
    InvalidParametersError,
    ParseError,
    ParseReason,
    TransportError,
    TransportTimeoutError,
    UnexpectedResponseError,
    UnrecognizedEnumValueError,
)
from .models import ClientConfig, QueryParameters
from .protocol import MAX_PAGES, MAX_REPLAYS_PER_PAGE, Envelope, segment_page
from .reactive import ReplayStream
from .tls import TLSConfig
from .transport import HTTPTransport, Transport
from .types import Character, Floor, Match, PageResult, Player, ReplayBatch, User, Winner

__version__ = "0.3.0"
__author__ = "Firefly Software Solutions Inc."
__license__ = "Apache-2.0"

__all__ = [
    # Client
    "GGSTClient",
    "connect",
    "get_replays",
    "merge_pages",
    # Reactive
    "ReplayStream",
    # Transport
    "Transport",
    "HTTPTransport",
    "TLSConfig",
    # Codec
    "Envelope",
    "encode_replay_query",
    "encode_replay_request",
    "segment_page",
    "decode_match",
    "decode_page",
    "MAX_PAGES",
    "MAX_REPLAYS_PER_PAGE",
    # Configuration (Pydantic models)
    "ClientConfig",
    "QueryParameters",
    # Types
    "Floor",
    "Character",
    "Winner",
    "Player",
    "Match",
    "User",
    "PageResult",
    "ReplayBatch",
    # Exceptions
    "GGSTError",
    "InvalidParametersError",
    "TransportError",
    "TransportTimeoutError",
    "HTTPStatusError",
    "UnexpectedResponseError",
    "ParseError",
    "ParseReason",
    "UnrecognizedEnumValueError",
]
