# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Custom exceptions for the pyggst SDK.

All exceptions inherit from GGSTError, making it easy to catch every
pyggst-related error with a single except clause:

    try:
        batch = client.get_replays(pages=5, replays_per_page=50)
    except GGSTError as e:
        print(f"pyggst error: {e}")

Record-level decode failures (ParseError) are different: the replay
aggregator never raises them. They are collected and handed back next to
the successfully decoded matches:

    matches, errors = client.get_replays(pages=5, replays_per_page=50)
    for err in errors:
        print(err.reason, err.raw.hex())
"""

from __future__ import annotations

from enum import Enum


class GGSTError(Exception):
    """
    Base exception for all pyggst errors.

    All pyggst exceptions inherit from this class, allowing you to catch
    all pyggst-related errors with a single except clause.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        self.hint = hint
        if hint:
            message = f"{message}\n\n  Hint: {hint}"
        super().__init__(message)


class InvalidParametersError(GGSTError):
    """
    Raised when caller-supplied values violate protocol limits.

    Raised before any network call is made. Common causes:
    - replays_per_page above 127
    - more than 100 pages requested
    - min_floor above max_floor
    - a token that is not valid hex
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: object = None,
        *,
        hint: str | None = None,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message, hint=hint)


class TransportError(GGSTError):
    """
    Raised when the HTTP layer fails for a request.

    Fatal for a whole replay batch: partial results are never returned.
    """

    def __init__(self, message: str, url: str | None = None, *, hint: str | None = None) -> None:
        self.url = url
        if hint is None and url:
            hint = f"Check that the service at {url} is reachable"
        super().__init__(message, hint=hint)


class TransportTimeoutError(TransportError):
    """Raised when a request times out."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(
            message,
            url,
            hint="Try increasing request_timeout_ms or check network connectivity",
        )


class HTTPStatusError(TransportError):
    """Raised when the service answers with a non-2xx status."""

    def __init__(self, status: int, url: str | None = None, reason: str = "") -> None:
        self.status = status
        message = f"HTTP {status} from {url}"
        if reason:
            message += f": {reason}"
        hint = None
        if status in (401, 403):
            hint = "The session token may have expired. Obtain a fresh token."
        super().__init__(message, url, hint=hint)


class UnexpectedResponseError(GGSTError):
    """
    Raised when a non-replay endpoint returns a body of the wrong shape.

    For example a statistics response without a JSON object, or a user id
    lookup without a ``UserID`` key.
    """

    def __init__(self, message: str, body: bytes = b"") -> None:
        self.body = body
        super().__init__(f"Unexpected response from API, {message}")


class ParseReason(str, Enum):
    """Reason tags attached to record parse failures."""

    TRUNCATED_RECORD = "truncated record"
    MALFORMED_RECORD_MARKER = "malformed record marker"
    UNRECOGNIZED_FLOOR = "unrecognized floor byte"
    UNRECOGNIZED_CHARACTER = "unrecognized character byte"
    UNRECOGNIZED_WINNER = "unrecognized winner byte"
    MALFORMED_PLAYER_ID = "malformed player id"
    MALFORMED_NAME_BOUNDARY = "malformed name boundary"
    INVALID_NAME_TEXT = "invalid name text"
    MALFORMED_AUX_FIELD = "malformed auxiliary field"
    MISSING_PLAYER_SENTINEL = "missing player sentinel"
    MALFORMED_TIMESTAMP = "malformed timestamp"
    TIMESTAMP_OUT_OF_RANGE = "timestamp out of range"
    MALFORMED_TERMINATOR = "malformed record terminator"


class ParseError(GGSTError):
    """
    A single replay record could not be decoded.

    Carries the raw, undecoded record bytes so the failure can be
    diagnosed later. Never fatal for a batch.

    Attributes:
        raw: The full raw record slice as handed to the decoder.
        reason: Machine-readable reason tag.
        detail: Human-readable detail.
        offset: Position inside ``raw`` where decoding stopped.
    """

    def __init__(
        self,
        raw: bytes,
        reason: ParseReason,
        detail: str = "",
        offset: int | None = None,
    ) -> None:
        self.raw = bytes(raw)
        self.reason = reason
        self.detail = detail
        self.offset = offset
        message = f"Could not parse replay: {reason.value}"
        if detail:
            message += f" ({detail})"
        if offset is not None:
            message += f" at byte {offset}"
        message += f"\n  bytes: {self.raw.hex()}"
        super().__init__(message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseError):
            return NotImplemented
        return (self.raw, self.reason, self.offset) == (other.raw, other.reason, other.offset)

    def __hash__(self) -> int:
        return hash((self.raw, self.reason, self.offset))


class UnrecognizedEnumValueError(ParseError):
    """
    A byte did not map to any known Floor, Character or winner value.

    Kept apart from structural framing errors so that new characters or
    tiers added by the service show up as such instead of as corrupt data.
    """

    def __init__(self, raw: bytes, reason: ParseReason, enum_name: str, value: int, offset: int) -> None:
        self.enum_name = enum_name
        self.value = value
        super().__init__(raw, reason, f"0x{value:02x} is not a valid {enum_name} code", offset)
