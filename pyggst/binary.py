# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
GGST Binary Payload Encoding/Decoding.

This module turns query parameters into request bodies and raw record
slices into Match values.

Binary Format Conventions:
- Single-byte integers and MessagePack-style type markers
- Player ids are 18 ASCII digits behind a 0xB2 marker
- Names are raw UTF-8 that runs up to the first 0xB1 byte
- Timestamps are 19 ASCII characters ("YYYY-MM-DD HH:MM:SS", UTC)
"""

from __future__ import annotations

import json
import logging
import struct
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from .exceptions import (
    InvalidParametersError,
    ParseError,
    ParseReason,
    UnexpectedResponseError,
    UnrecognizedEnumValueError,
)
from .protocol import (
    MAX_PAGE_INDEX,
    MAX_REPLAYS_PER_PAGE,
    RECORD_TERMINATOR,
    Envelope,
    segment_page,
)
from .types import Character, Floor, Match, PageResult, Player, User, Winner

if TYPE_CHECKING:
    from .models import QueryParameters

logger = logging.getLogger(__name__)


# =============================================================================
# Replay Catalog Request
# =============================================================================

CATALOG_KIND_REPLAYS: int = 0x01
UINT8_MARKER: int = 0xCC
FILTER_ARRAY_MARKER: int = 0x9A
FILTER_RESERVED_HEAD: bytes = b"\xff\x00"
FILTER_RESERVED_TAIL: bytes = b"\x00\x00\x00\x00\x01"
EMPTY_ARRAY: int = 0x90
SINGLE_ARRAY: int = 0x91


def _check_query(params: QueryParameters) -> None:
    """Reject parameters the service cannot represent."""
    page_index = params.page_index
    if not isinstance(page_index, int) or not 0 <= page_index <= MAX_PAGE_INDEX:
        raise InvalidParametersError(
            f"page_index must be between 0 and {MAX_PAGE_INDEX}, got {page_index!r}",
            "page_index",
            page_index,
        )

    count = params.replays_per_page
    if not isinstance(count, int) or not 1 <= count <= MAX_REPLAYS_PER_PAGE:
        raise InvalidParametersError(
            f"replays_per_page must be between 1 and {MAX_REPLAYS_PER_PAGE}, got {count!r}",
            "replays_per_page",
            count,
            hint="Request more pages instead of more replays per page",
        )

    if not isinstance(params.min_floor, Floor) or not isinstance(params.max_floor, Floor):
        raise InvalidParametersError("Floor bounds must be Floor values", "min_floor")
    if params.min_floor > params.max_floor:
        raise InvalidParametersError(
            f"min_floor {params.min_floor} is above max_floor {params.max_floor}",
            "min_floor",
            params.min_floor,
        )

    if params.character is not None and not isinstance(params.character, Character):
        raise InvalidParametersError(
            f"character must be a Character, got {params.character!r}",
            "character",
            params.character,
        )


def encode_replay_query(params: QueryParameters) -> bytes:
    """
    Encode the replay catalog query body.

    Format:
        [0x94][0x01][0xCC][1B page][1B count]
        [0x9A][FF 00][1B min floor][1B max floor][char filter][00 00 00 00 01]

    The character filter is 0x90 (no filter) or 0x91 followed by the
    character byte.

    Raises:
        InvalidParametersError: If any value is outside the protocol limits.
    """
    _check_query(params)

    if params.character is None:
        character_filter = bytes([EMPTY_ARRAY])
    else:
        character_filter = bytes([SINGLE_ARRAY, params.character.to_byte()])

    parts = [
        struct.pack(">BB", 0x94, CATALOG_KIND_REPLAYS),
        struct.pack(">BB", UINT8_MARKER, params.page_index),
        struct.pack(">B", params.replays_per_page),
        struct.pack(">B", FILTER_ARRAY_MARKER),
        FILTER_RESERVED_HEAD,
        struct.pack(">BB", params.min_floor.to_byte(), params.max_floor.to_byte()),
        character_filter,
        FILTER_RESERVED_TAIL,
    ]
    return b"".join(parts)


def encode_replay_request(envelope: Envelope, params: QueryParameters) -> bytes:
    """Encode a complete replay catalog request (envelope + query body)."""
    return envelope.wrap(encode_replay_query(params))


# =============================================================================
# User Statistics Request/Response
# =============================================================================

USER_ID_LENGTH: int = 18
USER_STATS_TRAILER: bytes = b"\x07\x01\x01\xff\xff\xff"


def encode_user_stats_request(envelope: Envelope, user_id: str) -> bytes:
    """
    Encode a user statistics request.

    Format: [envelope][0x96][0xB2][18B user id][07 01 01 FF FF FF]
    """
    if len(user_id) != USER_ID_LENGTH or not user_id.isdigit():
        raise InvalidParametersError(
            f"user id must be {USER_ID_LENGTH} digits, got {user_id!r}",
            "user_id",
            user_id,
        )
    body = b"\x96\xb2" + user_id.encode("ascii") + USER_STATS_TRAILER
    return envelope.wrap(body)


def decode_user_stats_response(data: bytes, user_id: str) -> User:
    """
    Decode a user statistics response.

    The body starts with binary noise followed by a JSON object; everything
    before the first ``{`` is dropped.
    """
    start = data.find(b"{")
    if start < 0:
        raise UnexpectedResponseError("no JSON object in statistics response", data)
    try:
        payload = json.loads(data[start:].decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise UnexpectedResponseError(f"statistics body is not valid JSON: {e}", data) from e

    name = _require_str(payload, "NickName", data)
    comment = _require_str(payload, "PublicComment", data)
    return User(user_id=user_id, name=name, comment=comment)


def decode_user_id_response(data: bytes) -> str:
    """Extract ``UserID`` from the steam id lookup response."""
    try:
        payload = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise UnexpectedResponseError(f"user id lookup is not valid JSON: {e}", data) from e
    return _require_str(payload, "UserID", data)


def _require_str(payload: Any, key: str, data: bytes) -> str:
    if not isinstance(payload, dict):
        raise UnexpectedResponseError(f"expected a JSON object, got {type(payload).__name__}", data)
    value = payload.get(key)
    if not isinstance(value, str):
        raise UnexpectedResponseError(f"missing string field {key!r}", data)
    return value


# =============================================================================
# Replay Record Decoding
# =============================================================================

RECORD_MARKER: bytes = b"\x9d\xcf"
REPLAY_ID_SIZE: int = 8
PLAYER_ID_MARKER: int = 0xB2
NAME_TERMINATOR: int = 0xB1  # also the steam id marker
STEAM_ID_LENGTH: int = 17
ONLINE_ID_MARKER: int = 0xB0
ONLINE_ID_LENGTH: int = 16
PLAYER2_SENTINEL: bytes = b"\x00\x07"
TIMESTAMP_MARKER: int = 0xB3
TIMESTAMP_LENGTH: int = 19
TIMESTAMP_FORMAT: str = "%Y-%m-%d %H:%M:%S"

_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")
_DIGITS = frozenset(b"0123456789")


class RecordReader:
    """
    Left-to-right cursor over one raw record slice.

    Every read either returns the requested field or raises ParseError
    carrying the whole slice, so the first bad field aborts the record.
    """

    def __init__(self, raw: bytes) -> None:
        self.raw = raw
        self.pos = 0

    def fail(self, reason: ParseReason, detail: str = "") -> ParseError:
        return ParseError(self.raw, reason, detail, self.pos)

    def take(self, size: int, what: str) -> bytes:
        if self.pos + size > len(self.raw):
            raise self.fail(
                ParseReason.TRUNCATED_RECORD,
                f"need {size} bytes for {what}, {len(self.raw) - self.pos} left",
            )
        chunk = self.raw[self.pos:self.pos + size]
        self.pos += size
        return chunk

    def byte(self, what: str) -> int:
        return self.take(1, what)[0]

    def expect(self, marker: bytes, reason: ParseReason, what: str) -> None:
        start = self.pos
        found = self.take(len(marker), what)
        if found != marker:
            self.pos = start
            raise self.fail(reason, f"expected {marker.hex()} for {what}, got {found.hex()}")

    def until(self, delimiter: int, what: str) -> bytes:
        idx = self.raw.find(bytes([delimiter]), self.pos)
        if idx < 0:
            raise self.fail(
                ParseReason.MALFORMED_NAME_BOUNDARY,
                f"no 0x{delimiter:02x} after {what}",
            )
        chunk = self.raw[self.pos:idx]
        self.pos = idx
        return chunk

    def enum(self, enum_type: Any, reason: ParseReason) -> Any:
        start = self.pos
        value = self.byte(enum_type.__name__)
        try:
            return enum_type.from_byte(value)
        except ValueError:
            raise UnrecognizedEnumValueError(self.raw, reason, enum_type.__name__, value, start) from None

    def ascii_field(self, marker: int, length: int, allowed: frozenset[int], reason: ParseReason, what: str) -> str:
        self.expect(bytes([marker]), reason, f"{what} marker")
        start = self.pos
        value = self.take(length, what)
        if not all(b in allowed for b in value):
            self.pos = start
            raise self.fail(reason, f"{what} contains invalid characters: {value.hex()}")
        return value.decode("ascii")


def _read_player(reader: RecordReader, character: Character) -> Player:
    """
    Read one player block.

    Format: [0xB2][18B id][name...][0xB1][17B steam id][0xB0][16B online id]
    """
    player_id = int(
        reader.ascii_field(
            PLAYER_ID_MARKER, USER_ID_LENGTH, _DIGITS, ParseReason.MALFORMED_PLAYER_ID, "player id"
        )
    )

    name_start = reader.pos
    name_bytes = reader.until(NAME_TERMINATOR, "player name")
    try:
        name = name_bytes.decode("utf-8")
    except UnicodeDecodeError as e:
        reader.pos = name_start + e.start
        raise reader.fail(ParseReason.INVALID_NAME_TEXT, f"name bytes {name_bytes.hex()}: {e.reason}") from None

    # Steam and online ids are framing only; they are not part of the domain.
    reader.ascii_field(
        NAME_TERMINATOR, STEAM_ID_LENGTH, _DIGITS, ParseReason.MALFORMED_AUX_FIELD, "steam id"
    )
    reader.ascii_field(
        ONLINE_ID_MARKER, ONLINE_ID_LENGTH, _HEX_DIGITS, ParseReason.MALFORMED_AUX_FIELD, "online id"
    )
    return Player(id=player_id, name=name, character=character)


def _read_timestamp(reader: RecordReader) -> datetime:
    text = reader.ascii_field(
        TIMESTAMP_MARKER,
        TIMESTAMP_LENGTH,
        frozenset(b"0123456789-: "),
        ParseReason.MALFORMED_TIMESTAMP,
        "timestamp",
    )
    layout = "".join("d" if c.isdigit() else c for c in text)
    if layout != "dddd-dd-dd dd:dd:dd":
        raise reader.fail(ParseReason.MALFORMED_TIMESTAMP, f"unexpected layout {text!r}")
    try:
        return datetime.strptime(text, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError as e:
        raise reader.fail(ParseReason.TIMESTAMP_OUT_OF_RANGE, f"{text!r}: {e}") from None


def decode_match(raw: bytes) -> Match:
    """
    Decode one record slice into a Match.

    Format:
        [0x9D 0xCF][8B replay id][1B floor][1B p1 char][1B p2 char]
        [player 1 block][0x00 0x07][player 2 block]
        [1B winner][0xB3][19B timestamp][01 00 00 00]

    Raises:
        ParseError: On the first field that does not match the layout.
        UnrecognizedEnumValueError: If a floor, character or winner byte
            is not a known value.
    """
    reader = RecordReader(bytes(raw))

    reader.expect(RECORD_MARKER, ParseReason.MALFORMED_RECORD_MARKER, "record marker")
    reader.take(REPLAY_ID_SIZE, "replay id")

    floor = reader.enum(Floor, ParseReason.UNRECOGNIZED_FLOOR)
    p1_character = reader.enum(Character, ParseReason.UNRECOGNIZED_CHARACTER)
    p2_character = reader.enum(Character, ParseReason.UNRECOGNIZED_CHARACTER)

    player1 = _read_player(reader, p1_character)
    reader.expect(PLAYER2_SENTINEL, ParseReason.MISSING_PLAYER_SENTINEL, "player 2 sentinel")
    player2 = _read_player(reader, p2_character)

    winner = reader.enum(Winner, ParseReason.UNRECOGNIZED_WINNER)
    timestamp = _read_timestamp(reader)

    if reader.raw[reader.pos:] != RECORD_TERMINATOR:
        raise reader.fail(
            ParseReason.MALFORMED_TERMINATOR,
            f"expected {RECORD_TERMINATOR.hex()}, got {reader.raw[reader.pos:].hex()}",
        )

    return Match(
        floor=floor,
        timestamp=timestamp,
        players=(player1, player2),
        winner_side=winner,
    )


def decode_page(raw: bytes, page_index: int = 0) -> PageResult:
    """
    Decode every record on one response page.

    Records that fail are collected as ParseError values; they never stop
    the remaining records from being decoded.
    """
    matches: list[Match] = []
    errors: list[ParseError] = []

    for position, record in enumerate(segment_page(raw)):
        try:
            matches.append(decode_match(record))
        except ParseError as e:
            logger.debug(f"Page {page_index} record {position}: {e.reason.value} ({e.detail})")
            errors.append(e)

    if errors:
        logger.warning(f"Page {page_index}: {len(errors)} of {len(matches) + len(errors)} records failed to parse")

    return PageResult(page_index=page_index, matches=matches, errors=errors)
