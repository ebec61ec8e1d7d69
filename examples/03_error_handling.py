#!/usr/bin/env python3
"""
03_error_handling.py - Error Handling Patterns

This example demonstrates:
- Parameter validation before any request
- Transport and HTTP status errors
- Inspecting records that failed to decode
- Decoding a captured page offline

Prerequisites:
    - A session token in GGST_TOKEN (for the network parts)
    - pyggst installed

Run with:
    GGST_TOKEN=... python 03_error_handling.py
"""

import os

from pyggst import GGSTClient, QueryParameters, decode_page
from pyggst.exceptions import (
    HTTPStatusError,
    InvalidParametersError,
    TransportError,
    TransportTimeoutError,
)

DUMMY_TOKEN = "b2323131303237313133313233303038333834ad36313930643632363837393737"


def parameter_errors():
    """Bad bounds are rejected locally"""
    print("Parameter Errors")
    print("-" * 50)

    with GGSTClient(DUMMY_TOKEN) as client:
        try:
            client.get_replays(pages=101, replays_per_page=10)
        except InvalidParametersError as e:
            print(f"✓ Caught InvalidParametersError on '{e.field}': {e}")

    try:
        QueryParameters().with_replays_per_page(500)
    except InvalidParametersError as e:
        print(f"✓ Caught InvalidParametersError: {e}")


def transport_errors():
    """Network failures abort the whole batch"""
    print("\nTransport Errors")
    print("-" * 50)

    with GGSTClient(DUMMY_TOKEN, base_url="http://localhost:19999", request_timeout_ms=2000) as client:
        try:
            client.get_replays(pages=2, replays_per_page=10)
        except TransportTimeoutError as e:
            print(f"✓ Caught timeout: {e}")
        except HTTPStatusError as e:
            print(f"✓ Caught HTTP {e.status}: {e}")
        except TransportError as e:
            print(f"✓ Caught transport error: {e}")


def parse_failures(token):
    """Unreadable records are reported, not raised"""
    print("\nParse Failures")
    print("-" * 50)

    with GGSTClient(token) as client:
        matches, errors = client.get_replays(pages=3, replays_per_page=100)

    print(f"✓ {len(matches)} matches decoded")
    for err in errors:
        print(f"  {err.reason.value} at byte {err.offset}: {err.raw[:24].hex()}...")


def offline_decode(path):
    """Decode a page captured to disk"""
    print("\nOffline Decode")
    print("-" * 50)

    with open(path, "rb") as f:
        page = decode_page(f.read())
    print(f"✓ {len(page.matches)} matches, {len(page.errors)} failures in {path}")


def main():
    print("=" * 50)
    print("pyggst Error Handling Example")
    print("=" * 50)

    parameter_errors()
    transport_errors()

    token = os.environ.get("GGST_TOKEN")
    if token:
        parse_failures(token)

    capture = os.environ.get("GGST_CAPTURE")
    if capture:
        offline_decode(capture)

    print("\n" + "=" * 50)
    print("✓ Error handling examples completed!")
    print("\nBest Practices:")
    print("  - Always use context managers (with statement)")
    print("  - Check batch.errors after every query")
    print("  - Keep raw bytes of failed records for bug reports")


if __name__ == "__main__":
    main()
