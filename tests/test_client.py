# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Tests for GGSTClient and the replay aggregator."""

from __future__ import annotations

import pytest

from pyggst import get_replays
from pyggst.client import GGSTClient, merge_pages
from pyggst.exceptions import (
    HTTPStatusError,
    InvalidParametersError,
    ParseReason,
    TransportError,
)
from pyggst.models import ClientConfig, QueryParameters
from pyggst.protocol import (
    REPLAY_CATALOG_PATH,
    USER_STATS_PATH,
    Envelope,
)
from pyggst.types import Character, Floor, PageResult

from wire_fixtures import (
    ENVELOPE_SIZE,
    TOKEN,
    FakeTransport,
    build_page,
    numbered_record,
    scenario_pages,
)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport(scenario_pages())


@pytest.fixture
def client(transport: FakeTransport) -> GGSTClient:
    c = GGSTClient(TOKEN, transport=transport, base_url="http://ggst.test")
    yield c
    c.close()


class TestClientConstruction:
    """Tests for client setup."""

    def test_requires_token(self) -> None:
        """Test a client needs a token or a config."""
        with pytest.raises(InvalidParametersError):
            GGSTClient()

    def test_config_is_copied(self) -> None:
        """Test keyword overrides do not change the caller's config."""
        config = ClientConfig(token=TOKEN)
        client = GGSTClient(config=config, transport=FakeTransport(), max_workers=4)
        assert client.config.max_workers == 4
        assert config.max_workers == 1

    def test_injected_transport_not_closed(self) -> None:
        """Test the client only closes transports it created."""
        transport = FakeTransport()
        with GGSTClient(TOKEN, transport=transport):
            pass
        assert not transport.closed


class TestGetReplayPage:
    """Tests for get_replay_page."""

    def test_request_shape(self, client: GGSTClient, transport: FakeTransport) -> None:
        """Test the page request is posted as hex form data."""
        query = QueryParameters(page_index=1, replays_per_page=4, character=Character.SOL)
        client.get_replay_page(query)

        url, payload = transport.posts[0]
        assert url == f"http://ggst.test{REPLAY_CATALOG_PATH}"
        assert payload.startswith(Envelope.from_hex(TOKEN).to_bytes())
        assert payload[ENVELOPE_SIZE:ENVELOPE_SIZE + 5] == b"\x94\x01\xcc\x01\x04"

    def test_page_result(self, client: GGSTClient) -> None:
        """Test a page decodes into matches and errors."""
        page = client.get_replay_page(QueryParameters(page_index=1))
        assert page.page_index == 1
        assert len(page.matches) == 3
        assert len(page.errors) == 1


class TestGetReplays:
    """Tests for the multi-page aggregator."""

    def test_end_to_end(self, client: GGSTClient) -> None:
        """Test two pages give eight unique matches and one parse error."""
        matches, errors = client.get_replays(pages=2, replays_per_page=5)

        assert len(matches) == 8
        assert len(set(matches)) == 8
        assert len(errors) == 1
        assert errors[0].reason is ParseReason.INVALID_NAME_TEXT
        assert "Sol ".encode() + b"\xc2\xb1" in errors[0].raw

    def test_matches_in_first_seen_order(self, client: GGSTClient) -> None:
        """Test matches keep page order, then record order."""
        batch = client.get_replays(pages=2, replays_per_page=5)
        assert [m.player1.name for m in batch.matches] == [f"Player{n}A" for n in range(8)]
        assert batch.pages == 2

    def test_duplicates_across_pages_collapse(self) -> None:
        """Test the same match on two pages is returned once."""
        renamed = numbered_record(2, p1=(210611132841900002, "Renamed", 2))
        transport = FakeTransport({
            0: build_page([numbered_record(1), numbered_record(2)]),
            1: build_page([renamed, numbered_record(3)]),
        })
        client = GGSTClient(TOKEN, transport=transport)
        matches, errors = client.get_replays(pages=2, replays_per_page=2)

        assert len(matches) == 3
        assert errors == ()
        # first occurrence wins
        assert [m.player1.name for m in matches] == ["Player1A", "Player2A", "Player3A"]

    def test_short_final_page(self) -> None:
        """Test empty pages are not errors."""
        transport = FakeTransport({0: build_page([numbered_record(1)]), 1: build_page([])})
        batch = GGSTClient(TOKEN, transport=transport).get_replays(pages=3, replays_per_page=1)
        assert len(batch.matches) == 1
        assert batch.ok

    def test_filters_forwarded(self, client: GGSTClient, transport: FakeTransport) -> None:
        """Test floor and character filters reach every page request."""
        query = QueryParameters().with_floor_range(Floor.F10, Floor.CELESTIAL).with_character(Character.KY)
        client.get_replays(pages=2, replays_per_page=9, query=query)

        pages = []
        for _, payload in transport.posts:
            body = payload[ENVELOPE_SIZE:]
            pages.append(body[3])
            assert body[4] == 9
            assert body[8:12] == b"\x09\x63\x91\x01"
        assert pages == [0, 1]

    @pytest.mark.parametrize("pages", [0, 101])
    def test_page_count_limit(self, client: GGSTClient, transport: FakeTransport, pages: int) -> None:
        """Test page counts outside 1-100 fail before any request."""
        with pytest.raises(InvalidParametersError) as exc_info:
            client.get_replays(pages=pages, replays_per_page=10)
        assert exc_info.value.field == "pages"
        assert transport.posts == []

    def test_replays_per_page_limit(self, client: GGSTClient, transport: FakeTransport) -> None:
        """Test more than 127 replays per page fails before any request."""
        with pytest.raises(InvalidParametersError) as exc_info:
            client.get_replays(pages=1, replays_per_page=128)
        assert exc_info.value.field == "replays_per_page"
        assert transport.posts == []

    def test_transport_failure_is_fatal(self) -> None:
        """Test a failing page aborts the whole batch."""
        transport = FakeTransport(scenario_pages(), fail_on=1)
        client = GGSTClient(TOKEN, transport=transport)
        with pytest.raises(TransportError) as exc_info:
            client.get_replays(pages=3, replays_per_page=5)
        assert isinstance(exc_info.value, HTTPStatusError)
        assert exc_info.value.status == 503

    def test_concurrent_fetch_same_result(self) -> None:
        """Test concurrent page fetches merge to the same batch."""
        sequential = GGSTClient(TOKEN, transport=FakeTransport(scenario_pages()))
        concurrent = GGSTClient(TOKEN, transport=FakeTransport(scenario_pages()), max_workers=4)

        a = sequential.get_replays(pages=2, replays_per_page=5)
        b = concurrent.get_replays(pages=2, replays_per_page=5)

        assert a.matches == b.matches
        assert [e.raw for e in a.errors] == [e.raw for e in b.errors]

    def test_concurrent_failure_is_fatal(self) -> None:
        """Test a failing page aborts a concurrent batch too."""
        transport = FakeTransport(scenario_pages(), fail_on=0)
        client = GGSTClient(TOKEN, transport=transport, max_workers=4)
        with pytest.raises(HTTPStatusError):
            client.get_replays(pages=4, replays_per_page=5)

    def test_module_level_get_replays(self, client: GGSTClient) -> None:
        """Test the convenience function accepts a client as context."""
        matches, errors = get_replays(client, 2, 5)
        assert len(matches) == 8
        assert len(errors) == 1


class TestMergePages:
    """Tests for merge_pages function."""

    def test_errors_in_page_order(self) -> None:
        """Test errors are concatenated page by page."""
        transport = FakeTransport(scenario_pages())
        client = GGSTClient(TOKEN, transport=transport)
        first = client.get_replay_page(QueryParameters(page_index=1))
        second = client.get_replay_page(QueryParameters(page_index=0))

        batch = merge_pages([first, second])
        assert len(batch.errors) == 1
        assert batch.matches[0].player1.name == "Player5A"

    def test_empty(self) -> None:
        """Test merging nothing gives an empty batch."""
        batch = merge_pages([PageResult(page_index=0)])
        assert batch.matches == ()
        assert batch.errors == ()


class TestGetUser:
    """Tests for user lookup."""

    def test_get_user(self) -> None:
        """Test steam id lookup followed by the statistics request."""
        transport = FakeTransport()
        transport.responses["http://utils.test/76561198045733267.json"] = b'{"UserID": "210611132841904307"}'
        transport.responses[f"http://ggst.test{USER_STATS_PATH}"] = (
            b"\x95\x00garbage{\"NickName\": \"enemy fungus\", \"PublicComment\": \"hello\"}"
        )
        client = GGSTClient(
            TOKEN,
            transport=transport,
            base_url="http://ggst.test",
            utils_base_url="http://utils.test",
        )

        user = client.get_user("76561198045733267")

        assert user.user_id == "210611132841904307"
        assert user.name == "enemy fungus"
        assert user.comment == "hello"
        _, payload = transport.posts[0]
        assert payload[ENVELOPE_SIZE:ENVELOPE_SIZE + 20] == b"\x96\xb2210611132841904307"
