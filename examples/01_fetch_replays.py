#!/usr/bin/env python3
"""
01_fetch_replays.py - Fetching Replays

This example demonstrates:
- Creating a client from a session token
- Fetching several catalog pages in one call
- Filtering by floor and character
- Reading match metadata

Prerequisites:
    - A session token in GGST_TOKEN
    - pyggst installed

Run with:
    GGST_TOKEN=... python 01_fetch_replays.py
"""

import os

from pyggst import Character, Floor, GGSTClient, QueryParameters, get_replays


def simple_fetch(token):
    """One-call fetch"""
    print("Simple Fetch")
    print("-" * 50)

    matches, errors = get_replays(token, pages=2, replays_per_page=20)
    print(f"✓ {len(matches)} unique matches, {len(errors)} unreadable records")

    for match in matches[:5]:
        winner, loser = match.winner(), match.loser()
        print(
            f"  [{match.floor}] {match.timestamp:%Y-%m-%d %H:%M} "
            f"{winner.name} ({winner.character.code}) beat {loser.name} ({loser.character.code})"
        )


def filtered_fetch(token):
    """Floor and character filters"""
    print("\nFiltered Fetch")
    print("-" * 50)

    query = (
        QueryParameters()
        .with_floor_range(Floor.F10, Floor.CELESTIAL)
        .with_character(Character.NAGORIYUKI)
    )

    with GGSTClient(token, max_workers=4) as client:
        batch = client.get_replays(pages=5, replays_per_page=50, query=query)

    print(f"✓ {len(batch.matches)} matches across {batch.pages} pages")
    wins = sum(1 for m in batch.matches if m.winner().character is Character.NAGORIYUKI)
    print(f"  Nagoriyuki won {wins} of them")


def main():
    print("=" * 50)
    print("pyggst Fetch Replays Example")
    print("=" * 50)

    token = os.environ.get("GGST_TOKEN")
    if not token:
        print("✗ Set GGST_TOKEN to run this example")
        return

    simple_fetch(token)
    filtered_fetch(token)

    print("\n" + "=" * 50)
    print("✓ Fetch examples completed!")


if __name__ == "__main__":
    main()
