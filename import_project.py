"""
Import a folder of frames as a new project.

Run this from the repository root:

    (.venv) python import_project.py alice "Walk cycle" ./frames --password secret

The user is registered first if `--password` is given and the name is free;
otherwise it must already exist. jpg/jpeg/png files are imported in file-name
order and any file that cannot be decoded is reported and skipped.
"""

import argparse
import logging
from typing import List, Optional

from stopmotion.core.errors import DuplicateUsername, StoreError
from stopmotion.services.project_store import ProjectStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("username")
    parser.add_argument("project_name")
    parser.add_argument("directory")
    parser.add_argument("--password", help="register the user with this password if it does not exist")
    parser.add_argument("--database-url", help="defaults to STOPMOTION_DATABASE_URL")
    parser.add_argument("--workers", type=int, default=None, help="parallel decode threads")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    try:
        with ProjectStore(database_url=args.database_url, ingest_workers=args.workers) as store:
            if args.password is not None:
                try:
                    store.register_user(args.username, args.password)
                    print(f"[INFO] Registered user {args.username}")
                except DuplicateUsername:
                    store.authenticate(args.username, args.password)

            result = store.create_project(args.username, args.project_name, args.directory)
    except StoreError as e:
        print(f"[ERROR] {e}")
        return 1

    print(f"[INFO] Created project {result.name!r} (id={result.id}) with {result.image_count} frame(s)")
    for skipped in result.skipped:
        print(f"[WARN] Skipped {skipped.filename}: {skipped.reason}")
    print("[INFO] Done.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
