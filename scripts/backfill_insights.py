#!/usr/bin/env python3
"""Regenerate insight documents for assessments that lack them.

Usage:
    python scripts/backfill_insights.py [--force] [--dry-run]

Rows that already carry a populated insight document are skipped unless
--force is given. --dry-run reports what would change without writing.
Exits 0 when every row succeeded, 1 otherwise.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.db.session import SessionLocal
from app.services.backfill import backfill_insights


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Backfill SAFE-8 insight documents.")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Regenerate every row, including rows that already have insights.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute and count changes without writing them.",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    db = SessionLocal()
    try:
        summary = backfill_insights(db, force=args.force, dry_run=args.dry_run)
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print(
        f"total={summary.total} updated={summary.updated} "
        f"skipped={summary.skipped} failed={summary.failed}"
        + (" (dry run)" if args.dry_run else "")
    )
    if summary.failed_ids:
        print(f"failed_ids={','.join(str(i) for i in summary.failed_ids)}", file=sys.stderr)
    return 0 if summary.failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
