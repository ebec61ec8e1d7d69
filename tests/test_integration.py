# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Integration tests for pyggst SDK.

These tests talk to the live replay catalog. They are skipped unless a
session token is provided in GGST_TOKEN.

Run with: GGST_TOKEN=... pytest tests/test_integration.py -v
"""

import os

import pytest

from pyggst import Character, Floor, GGSTClient, QueryParameters

# Configuration from environment
GGST_TOKEN = os.environ.get("GGST_TOKEN", "")
GGST_BASE_URL = os.environ.get("GGST_BASE_URL", "")
GGST_STEAM_ID = os.environ.get("GGST_STEAM_ID", "")

# Skip all tests if no token is configured
pytestmark = pytest.mark.skipif(
    not GGST_TOKEN,
    reason="GGST_TOKEN not set",
)


@pytest.fixture
def client() -> GGSTClient:
    """Create a GGST client for testing."""
    kwargs = {"base_url": GGST_BASE_URL} if GGST_BASE_URL else {}
    c = GGSTClient(GGST_TOKEN, **kwargs)
    yield c
    c.close()


class TestReplayCatalog:
    """Tests against the live replay catalog."""

    def test_single_page(self, client: GGSTClient) -> None:
        """Test one page decodes without transport errors."""
        page = client.get_replay_page(QueryParameters(replays_per_page=10))
        assert len(page.matches) + len(page.errors) <= 10
        for match in page.matches:
            assert match.winner() in match.players

    def test_multi_page_unique(self, client: GGSTClient) -> None:
        """Test a multi-page batch holds no duplicate matches."""
        matches, _ = client.get_replays(pages=2, replays_per_page=20)
        assert len({m.identity for m in matches}) == len(matches)

    def test_character_filter(self, client: GGSTClient) -> None:
        """Test a character filter only returns matches with that character."""
        query = QueryParameters().with_floor_range(Floor.F10, Floor.CELESTIAL).with_character(Character.SOL)
        matches, _ = client.get_replays(pages=1, replays_per_page=20, query=query)
        for match in matches:
            assert Character.SOL in (match.player1.character, match.player2.character)


@pytest.mark.skipif(not GGST_STEAM_ID, reason="GGST_STEAM_ID not set")
class TestUsers:
    """Tests for live profile lookup."""

    def test_get_user(self, client: GGSTClient) -> None:
        """Test a Steam id resolves to a profile."""
        user = client.get_user(GGST_STEAM_ID)
        assert len(user.user_id) == 18
        assert user.name
