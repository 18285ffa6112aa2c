#!/usr/bin/env python3
"""
Blinded contact discovery end to end.

Builds a server from a synthetic enrollment set, then looks up a mix of
registered and unregistered phone numbers through the four-message exchange.
"""
import sys
import argparse
import logging
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from zkcds.client.search import LookupClient
from zkcds.server.compute import Server, create_mock_enrollment
from zkcds.shared.utils import Timer


def run_demo(num_users: int = 200, num_queries: int = 10, seed: int = 42):
    print("=" * 70)
    print("zkcds - Blinded Contact Discovery")
    print("=" * 70)
    print(f"\nConfiguration:")
    print(f"  Enrolled users: {num_users:,}")
    print(f"  Queries:        {num_queries}")

    # =========================================================================
    # BUILD PHASE
    # =========================================================================
    print("\n[1] Generating enrollment set...")
    users = create_mock_enrollment(num_users, seed=seed)

    print("\n[2] Blinding enrollment into buckets...")
    with Timer() as t:
        server = Server.from_enrollment(users)
    table = server.table
    print(f"    {table.num_rows:,} rows in {table.num_buckets:,} buckets in {t.elapsed_ms:.0f}ms")
    print(f"    Largest bucket: {table.largest_bucket} rows")

    # =========================================================================
    # QUERY PHASE
    # =========================================================================
    registered = list(users)[: num_queries // 2]
    unregistered = [1000000000 + i for i in range(num_queries - len(registered))]
    unregistered = [p for p in unregistered if p not in users]

    client = LookupClient()
    print("\n[3] Looking up phone numbers...")
    correct = 0
    for phone_number in registered + unregistered:
        result = client.lookup(phone_number, server.handle_request, server.handle_unblind)
        expected = users.get(phone_number)
        ok = result.identifier == expected
        correct += ok
        shown = str(result.identifier) if result.found else "not registered"
        print(
            f"    {phone_number}: {shown:<36} "
            f"{result.timing['total_ms']:7.1f}ms {'OK' if ok else 'MISMATCH'}"
        )

    print(f"\n{correct}/{len(registered) + len(unregistered)} lookups correct")
    return correct == len(registered) + len(unregistered)


def main():
    parser = argparse.ArgumentParser(description="Blinded contact discovery demo")
    parser.add_argument("--users", type=int, default=200, help="Enrollment size")
    parser.add_argument("--queries", type=int, default=10, help="Number of lookups")
    parser.add_argument("--seed", type=int, default=42, help="Enrollment seed")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    ok = run_demo(args.users, args.queries, args.seed)
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
