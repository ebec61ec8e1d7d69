#!/usr/bin/env python3
"""
02_reactive_streams.py - Reactive Match Streams

This example demonstrates:
- Streaming matches page by page
- Filtering and transforming with RxPY operators
- Watching parse failures as they occur
- All-or-nothing collection with to_list

Prerequisites:
    - A session token in GGST_TOKEN
    - pyggst installed

Run with:
    GGST_TOKEN=... python 02_reactive_streams.py
"""

import os
from collections import Counter

from reactivex import operators as ops

from pyggst import Floor, GGSTClient, ReplayStream


def character_usage(stream):
    """Count winning characters on Celestial"""
    print("Celestial Winners")
    print("-" * 50)

    counts = Counter()
    stream.matches(pages=3, replays_per_page=100).pipe(
        ops.filter(lambda m: m.floor is Floor.CELESTIAL),
        ops.map(lambda m: m.winner().character.display_name),
    ).subscribe(
        on_next=counts.update,
        on_error=lambda e: print(f"✗ Stream failed: {e}"),
    )

    for name, wins in Counter(counts).most_common(5):
        print(f"  {name}: {wins}")


def watch_failures(stream):
    """Print records that failed to decode"""
    print("\nParse Failures")
    print("-" * 50)

    stream.parse_errors(pages=3, replays_per_page=100).subscribe(
        on_next=lambda err: print(f"  {err.reason.value}: {len(err.raw)} bytes"),
        on_completed=lambda: print("✓ Done"),
    )


def collect_all(stream):
    """Collect every match or none"""
    print("\nCollect All")
    print("-" * 50)

    stream.matches(pages=2, replays_per_page=50).pipe(ops.to_list()).subscribe(
        on_next=lambda matches: print(f"✓ Collected {len(matches)} matches"),
        on_error=lambda e: print(f"✗ Nothing collected: {e}"),
    )


def main():
    print("=" * 50)
    print("pyggst Reactive Streams Example")
    print("=" * 50)

    token = os.environ.get("GGST_TOKEN")
    if not token:
        print("✗ Set GGST_TOKEN to run this example")
        return

    with GGSTClient(token) as client:
        stream = ReplayStream(client)
        character_usage(stream)
        watch_failures(stream)
        collect_all(stream)


if __name__ == "__main__":
    main()
