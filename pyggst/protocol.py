# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
GGST Replay Catalog Wire Protocol.

Request Format (MessagePack-shaped, sent hex-encoded as form field ``data``):
    +------+------+---------------+------+------+---------+------+--------+
    | 0x92 | 0x95 | Token (N)     | 0x02 | 0xA5 | "0.0.8" | 0x03 | Body   |
    +------+------+---------------+------+------+---------+------+--------+

Response Page Format:
    +---------------------------------------------------------------+
    |                 Page header (60 bytes, ignored)               |
    +---------------------------------------------------------------+
    |  Record 1 ... | 01 00 00 00 |  Record 2 ... | 01 00 00 00 |...|
    +---------------------------------------------------------------+
    |                 Footer (anything after the last terminator)   |
    +---------------------------------------------------------------+

Every record ends with the timestamp terminator ``01 00 00 00``. Records
are variable length (player names), so the terminator is the only way to
find record boundaries. Names are not escaped: a name that happens to
contain a delimiter byte produces a record the decoder rejects.

Record layout and field widths are documented in ``pyggst.binary``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Envelope constants
ENVELOPE_PREFIX: bytes = b"\x92\x95"
CLIENT_VERSION: bytes = b"0.0.8"
ENVELOPE_SUFFIX: bytes = b"\x02\xa5" + CLIENT_VERSION + b"\x03"

# Endpoints
REPLAY_CATALOG_PATH: str = "/api/catalog/get_replay"
USER_STATS_PATH: str = "/api/statistics/get"
FORM_FIELD: str = "data"

# Query limits
MAX_PAGES: int = 100
MAX_PAGE_INDEX: int = MAX_PAGES - 1
MAX_REPLAYS_PER_PAGE: int = 127

# Response framing
PAGE_HEADER_SIZE: int = 60
RECORD_TERMINATOR: bytes = b"\x01\x00\x00\x00"


@dataclass(frozen=True)
class Envelope:
    """Fixed request prefix carrying the caller's session token."""

    token: bytes

    def to_bytes(self) -> bytes:
        """Serialize envelope to bytes."""
        return ENVELOPE_PREFIX + self.token + ENVELOPE_SUFFIX

    def wrap(self, body: bytes) -> bytes:
        """Prepend the envelope to a request body."""
        return self.to_bytes() + body

    @classmethod
    def from_hex(cls, token: str) -> Envelope:
        """Build an envelope from a hex token string."""
        return cls(token=bytes.fromhex(token))


def encode_form_value(payload: bytes) -> str:
    """Hex-encode a request payload for the ``data`` form field."""
    return payload.hex()


def segment_page(raw: bytes) -> list[bytes]:
    """
    Split one response page into raw record slices.

    The page header is skipped, then the buffer is cut after every
    occurrence of RECORD_TERMINATOR. Each slice includes its terminator.
    Only structural boundaries are located here; field contents are
    never inspected.

    Args:
        raw: Full response body for one page.

    Returns:
        Record slices in the order they appear in the buffer. Empty when
        the buffer is empty, header-only, or holds no terminator.
    """
    if len(raw) <= PAGE_HEADER_SIZE:
        return []

    records: list[bytes] = []
    pos = PAGE_HEADER_SIZE
    while True:
        idx = raw.find(RECORD_TERMINATOR, pos)
        if idx < 0:
            break
        end = idx + len(RECORD_TERMINATOR)
        records.append(bytes(raw[pos:end]))
        pos = end

    if pos < len(raw):
        logger.debug(f"Discarding {len(raw) - pos} footer bytes after {len(records)} records")

    return records
