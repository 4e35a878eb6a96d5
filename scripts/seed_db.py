"""
Seed script for the Community Services Portal mock DB or Firestore.

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to configured DB: python scripts/seed_db.py --apply
  - Force mock DB even if FIREBASE configured: python scripts/seed_db.py --apply --force-mock

Behavior:
  - Loads `db_seed.json` from repo root: {collection: [fields, ...]}.
  - Gets the store via `app.config.firebase.get_store()`.
  - Creates one document per entry; ids and created_at are assigned by the store.

NOTE: When applying to real Firestore, ensure `FIREBASE_CREDENTIALS_PATH` and `USE_MOCK_DB=false` are set in `.env`.
"""

import argparse
import json
import os

from app.config.firebase import get_store
from app.core.settings import settings
from app.store.base import RemoteStore, TransientStoreError


def load_seed(path: str = "./db_seed.json") -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_to_store(store: RemoteStore, seed: dict, apply: bool = False):
    for collection, entries in seed.items():
        for fields in entries:
            label = fields.get("title") or fields.get("name") or fields.get("message") or "document"
            print(f"Preparing: {collection} <- {label}")
            if not apply:
                continue
            try:
                doc_id = store.write(collection, fields)
                print(f"Wrote: {collection}/{doc_id}")
            except TransientStoreError as e:
                print(f"Failed to write {collection} <- {label}: {e}")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write seed to the DB instead of dry-run")
    parser.add_argument("--force-mock", action="store_true", help="Force use of mock DB even if FIREBASE configured")
    args = parser.parse_args()

    seed_path = os.path.join(os.getcwd(), "db_seed.json")
    if not os.path.exists(seed_path):
        print(f"Seed file not found: {seed_path}")
        return

    seed = load_seed(seed_path)

    if args.force_mock:
        settings.USE_MOCK_DB = True

    store = get_store()
    print(f"Using store: {store.get_name()}")
    write_to_store(store, seed, apply=args.apply)

    if not args.apply:
        print("Dry run complete. Re-run with --apply to write.")


if __name__ == "__main__":
    main()
