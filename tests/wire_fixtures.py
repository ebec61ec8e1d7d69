# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Byte-level builders for replay catalog test data."""

from __future__ import annotations

import struct
import threading

from pyggst.exceptions import HTTPStatusError
from pyggst.protocol import (
    FORM_FIELD,
    PAGE_HEADER_SIZE,
    RECORD_TERMINATOR,
    USER_STATS_PATH,
    Envelope,
)
from pyggst.transport import Transport

PAGE_HEADER = b"\x93" + b"\xaa" * (PAGE_HEADER_SIZE - 1)

# One record exactly as the service lays it out.
KNOWN_GOOD_RECORD = (
    b"\x9d\xcf" b"\x00\x00\x01\x7c\x1a\x2b\x3c\x4d"
    b"\x63\x00\x0b"
    b"\xb2" b"210611132841904307" b"enemy fungus"
    b"\xb1" b"76561198045733267" b"\xb0" b"0110000100000001"
    b"\x00\x07"
    b"\xb2" b"210627113123008384" b"Nago Enjoyer"
    b"\xb1" b"76561198000000001" b"\xb0" b"01100001a0b1c2d3"
    b"\x02"
    b"\xb3" b"2021-09-24 22:19:32"
    b"\x01\x00\x00\x00"
)


def player_block(
    player_id: int,
    name: str | bytes,
    steam_id: str = "76561198045733267",
    online_id: str = "0110000100000001",
) -> bytes:
    name_bytes = name.encode("utf-8") if isinstance(name, str) else name
    return (
        b"\xb2" + f"{player_id:018d}".encode("ascii")
        + name_bytes
        + b"\xb1" + steam_id.encode("ascii")
        + b"\xb0" + online_id.encode("ascii")
    )


def build_record(
    *,
    replay_id: int = 0x1122334455667788,
    floor: int = 0x63,
    p1: tuple[int, str | bytes, int] = (210611132841904307, "enemy fungus", 0),
    p2: tuple[int, str | bytes, int] = (210627113123008384, "Nago Enjoyer", 11),
    winner: int = 1,
    timestamp: str = "2021-09-24 22:19:32",
) -> bytes:
    """Build one record; characters are given as wire bytes."""
    return b"".join([
        b"\x9d\xcf",
        struct.pack(">Q", replay_id),
        bytes([floor, p1[2], p2[2]]),
        player_block(p1[0], p1[1]),
        b"\x00\x07",
        player_block(p2[0], p2[1]),
        bytes([winner]),
        b"\xb3" + timestamp.encode("ascii"),
        RECORD_TERMINATOR,
    ])


def numbered_record(n: int, **overrides: object) -> bytes:
    """A distinct well-formed record; ``n`` selects the minute and the player ids."""
    values: dict[str, object] = {
        "replay_id": 0x1122334455667788 + n * 0x0101,
        "p1": (210611132841900000 + n, f"Player{n}A", n % 18),
        "p2": (210627113123000000 + n, f"Player{n}B", (n + 5) % 18),
        "winner": 1 + n % 2,
        "timestamp": f"2021-09-24 22:{n % 60:02d}:32",
    }
    values.update(overrides)
    return build_record(**values)  # type: ignore[arg-type]


def build_page(records: list[bytes], footer: bytes = b"") -> bytes:
    return PAGE_HEADER + b"".join(records) + footer


TOKEN = "b2323131303237313133313233303038333834ad36313930643632363837393737"
ENVELOPE_SIZE = len(Envelope.from_hex(TOKEN).to_bytes())


class FakeTransport(Transport):
    """In-memory transport serving canned pages by page index."""

    def __init__(self, pages: dict[int, bytes] | None = None, fail_on: int | None = None) -> None:
        self.pages = pages or {}
        self.fail_on = fail_on
        self.posts: list[tuple[str, bytes]] = []
        self.gets: list[str] = []
        self.responses: dict[str, bytes] = {}
        self.closed = False
        self._lock = threading.Lock()

    def post_form(self, url: str, fields: dict[str, str]) -> bytes:
        payload = bytes.fromhex(fields[FORM_FIELD])
        with self._lock:
            self.posts.append((url, payload))
        if url.endswith(USER_STATS_PATH):
            return self.responses[url]
        page_index = payload[ENVELOPE_SIZE + 3]
        if page_index == self.fail_on:
            raise HTTPStatusError(503, url, "Service Unavailable")
        return self.pages.get(page_index, b"")

    def get(self, url: str) -> bytes:
        self.gets.append(url)
        return self.responses[url]

    def close(self) -> None:
        self.closed = True


def scenario_pages() -> dict[int, bytes]:
    """Page 0: five good records. Page 1: three good, one with a delimiter in a name."""
    broken = numbered_record(20, p1=(210611132841900020, "Sol ± Main", 0))
    return {
        0: build_page([numbered_record(n) for n in range(5)]),
        1: build_page([numbered_record(5), broken, numbered_record(6), numbered_record(7)]),
    }
