#!/usr/bin/env python3
"""List assessments stored without pillar scores.

Usage:
    python scripts/find_missing_pillars.py

Such rows render "not available" placeholders in reports; the backfill still
gives them an overall-score-only insight document.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.db.session import SessionLocal
from app.services.backfill import find_rows_missing_pillars


def main() -> int:
    db = SessionLocal()
    try:
        audit = find_rows_missing_pillars(db)
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()

    for row in audit.missing:
        print(f"id={row.id} type={row.assessment_type} score={row.overall_score:.1f} no_pillars")
    print(
        f"total={audit.total} with_pillars={audit.with_pillars} "
        f"missing_pillars={len(audit.missing)}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
