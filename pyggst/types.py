# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Domain types for the pyggst SDK."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Iterator

from .exceptions import InvalidParametersError, ParseError


class Floor(IntEnum):
    """
    Skill tier a match was played on.

    Values are the wire codes. Ordering follows the code, so
    ``Floor.F10 < Floor.CELESTIAL``.
    """

    F1 = 0x00
    F2 = 0x01
    F3 = 0x02
    F4 = 0x03
    F5 = 0x04
    F6 = 0x05
    F7 = 0x06
    F8 = 0x07
    F9 = 0x08
    F10 = 0x09
    CELESTIAL = 0x63

    @classmethod
    def from_byte(cls, value: int) -> Floor:
        """Map a wire byte to a Floor, raising ValueError for unknown codes."""
        return cls(value)

    def to_byte(self) -> int:
        return int(self)

    @property
    def display_name(self) -> str:
        if self is Floor.CELESTIAL:
            return "Celestial"
        return f"Floor {self.value + 1}"

    def __str__(self) -> str:
        return self.display_name


class Character(IntEnum):
    """Playable characters, valued by their wire byte."""

    SOL = 0
    KY = 1
    MAY = 2
    AXL = 3
    CHIPP = 4
    POTEMKIN = 5
    FAUST = 6
    MILLIA = 7
    ZATO = 8
    RAMLETHAL = 9
    LEO = 10
    NAGORIYUKI = 11
    GIOVANNA = 12
    ANJI = 13
    INO = 14
    GOLDLEWIS = 15
    JACKO = 16
    HAPPY_CHAOS = 17

    @classmethod
    def from_byte(cls, value: int) -> Character:
        """Map a wire byte to a Character, raising ValueError for unknown codes."""
        return cls(value)

    @classmethod
    def from_code(cls, code: str) -> Character:
        """Look up a character by its three-letter code (e.g. ``"SOL"``)."""
        for character, known in _CHARACTER_CODES.items():
            if known == code:
                return character
        raise InvalidParametersError(
            f"{code} is not a valid character code",
            "character",
            code,
            hint=f"Valid codes: {', '.join(_CHARACTER_CODES.values())}",
        )

    def to_byte(self) -> int:
        return int(self)

    @property
    def code(self) -> str:
        return _CHARACTER_CODES[self]

    @property
    def display_name(self) -> str:
        return _CHARACTER_NAMES[self]

    def __str__(self) -> str:
        return self.display_name


_CHARACTER_CODES: dict[Character, str] = {
    Character.SOL: "SOL",
    Character.KY: "KYK",
    Character.MAY: "MAY",
    Character.AXL: "AXL",
    Character.CHIPP: "CHP",
    Character.POTEMKIN: "POT",
    Character.FAUST: "FAU",
    Character.MILLIA: "MLL",
    Character.ZATO: "ZAT",
    Character.RAMLETHAL: "RAM",
    Character.LEO: "LEO",
    Character.NAGORIYUKI: "NAG",
    Character.GIOVANNA: "GIO",
    Character.ANJI: "ANJ",
    Character.INO: "INO",
    Character.GOLDLEWIS: "GLD",
    Character.JACKO: "JKO",
    Character.HAPPY_CHAOS: "COS",
}

_CHARACTER_NAMES: dict[Character, str] = {
    Character.SOL: "Sol Badguy",
    Character.KY: "Ky Kiske",
    Character.MAY: "May",
    Character.AXL: "Axl Low",
    Character.CHIPP: "Chipp Zanuff",
    Character.POTEMKIN: "Potemkin",
    Character.FAUST: "Faust",
    Character.MILLIA: "Millia Rage",
    Character.ZATO: "Zato=1",
    Character.RAMLETHAL: "Ramlethal Valentine",
    Character.LEO: "Leo Whitefang",
    Character.NAGORIYUKI: "Nagoriyuki",
    Character.GIOVANNA: "Giovanna",
    Character.ANJI: "Anji Mito",
    Character.INO: "I-No",
    Character.GOLDLEWIS: "Goldlewis Dickinson",
    Character.JACKO: "Jack-O",
    Character.HAPPY_CHAOS: "Happy Chaos",
}


class Winner(IntEnum):
    """Which side won a match, valued by its wire byte."""

    PLAYER1 = 0x01
    PLAYER2 = 0x02

    @classmethod
    def from_byte(cls, value: int) -> Winner:
        return cls(value)

    @property
    def index(self) -> int:
        """Index into ``Match.players``."""
        return self.value - 1


@dataclass(frozen=True, eq=False)
class Player:
    """
    One side of a match.

    Identity is the numeric id alone: two Player values with the same id
    and different names (a nickname change) are equal and hash the same.
    """

    id: int
    name: str
    character: Character

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Player):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True, eq=False)
class Match:
    """
    Metadata of one replay.

    Two Match values describe the same real match when their timestamp and
    both player ids agree; ``identity`` exposes that key.
    """

    floor: Floor
    timestamp: datetime
    players: tuple[Player, Player]
    winner_side: Winner

    @property
    def identity(self) -> tuple[datetime, int, int]:
        return (self.timestamp, self.players[0].id, self.players[1].id)

    @property
    def player1(self) -> Player:
        return self.players[0]

    @property
    def player2(self) -> Player:
        return self.players[1]

    def winner(self) -> Player:
        return self.players[self.winner_side.index]

    def loser(self) -> Player:
        return self.players[1 - self.winner_side.index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Match):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)


@dataclass(frozen=True)
class User:
    """Public profile of a player as returned by the statistics endpoint."""

    user_id: str
    name: str
    comment: str = ""


@dataclass(frozen=True)
class PageResult:
    """Decoded content of one response page."""

    page_index: int
    matches: list[Match] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)

    @property
    def record_count(self) -> int:
        return len(self.matches) + len(self.errors)


@dataclass(frozen=True)
class ReplayBatch:
    """
    Result of a multi-page replay query.

    ``matches`` holds unique matches in first-seen order; ``errors`` holds
    every record-level failure in encounter order. Unpacks as a pair:

        >>> matches, errors = client.get_replays(pages=2, replays_per_page=10)
    """

    matches: tuple[Match, ...] = ()
    errors: tuple[ParseError, ...] = ()
    pages: int = 0

    def __iter__(self) -> Iterator[tuple[Match, ...] | tuple[ParseError, ...]]:
        yield self.matches
        yield self.errors

    @property
    def ok(self) -> bool:
        """True when no record on any page failed to decode."""
        return not self.errors
