"""Bookstore data management CLI.

Provides commands to seed, reset and summarize the persisted collections.

Usage:
    python src/manage.py seed-data                 # Seed an empty data directory
    python src/manage.py reset-data                # Delete all persisted collections
    python src/manage.py stats                     # Print order and revenue figures
    python src/manage.py stats --data-dir ./data   # Use another data directory
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path


def _settings(data_dir):
    from bookstore.config import Settings

    settings = Settings.from_env()
    if data_dir:
        settings = replace(settings, data_dir=Path(data_dir))
    return settings


def seed_data(data_dir=None):
    """Write the seed catalogue unless the data directory already holds data."""
    from bookstore.context import open_state
    from bookstore.persistence.snapshot import LedgerSnapshotter
    from bookstore.persistence.store import FileBlobStore

    settings = replace(_settings(data_dir), seed_on_first_run=True)
    store = FileBlobStore(settings.data_dir)
    if LedgerSnapshotter(store).has_data():
        print(f"{settings.data_dir} already holds data; nothing to seed.")
        return

    state, _ = open_state(store=store, settings=settings)
    print(f"Seeded {len(state.ledger)} items into {settings.data_dir}.")


def reset_data(data_dir=None):
    """Delete every persisted collection."""
    from bookstore.persistence.snapshot import COLLECTIONS
    from bookstore.persistence.store import FileBlobStore

    settings = _settings(data_dir)
    store = FileBlobStore(settings.data_dir)
    for collection in COLLECTIONS:
        store.delete(collection)
        print(f"  {collection} removed.")

    print("Done.")


def print_stats(data_dir=None):
    from bookstore.facade import BookstoreFacade
    from bookstore.persistence.store import FileBlobStore

    settings = _settings(data_dir)
    facade = BookstoreFacade.open(store=FileBlobStore(settings.data_dir), settings=settings)

    print(f"Orders:   {facade.total_orders_count()} ({len(facade.pending_orders())} pending)")
    print(f"Revenue:  {facade.total_revenue():.2f}")
    for category, quantity in sorted(facade.category_sales().items()):
        print(f"  {category}: {quantity} sold")
    print("Top sellers:")
    for item in facade.top_selling_items(5):
        print(f"  {item.item_id} {item.title} ({item.popularity})")


def main():
    parser = argparse.ArgumentParser(description="Bookstore data management")
    parser.add_argument("--data-dir", help="Data directory (default: $BOOKSTORE_DATA_DIR or ./bookstore_data)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("seed-data", help="Seed the default catalogue into an empty data directory")
    subparsers.add_parser("reset-data", help="Delete all persisted collections")
    subparsers.add_parser("stats", help="Print order, revenue and top seller figures")

    args = parser.parse_args()

    from bookstore.utils.logging import add_context, clear_context

    add_context(command=args.command)
    try:
        _run(parser, args)
    finally:
        clear_context()


def _run(parser, args):
    if args.command == "seed-data":
        seed_data(args.data_dir)
    elif args.command == "reset-data":
        reset_data(args.data_dir)
    elif args.command == "stats":
        print_stats(args.data_dir)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
