#!/usr/bin/env python3
"""
Import Fixtures from CSV
------------------------
Reads fixtures (and optionally their status and final score) from a CSV file
and pushes them through the same path as the match data source: new fixtures
are imported, status changes are ingested and finished matches get scored in
every game of their competition.

Columns: competition_code, season_code, matchday, home_team, away_team,
kickoff (ISO 8601), home_team_odds, away_team_odds, draw_odds, status,
home_goals, away_goals. Odds, status and goals may be left empty.
"""

import csv
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlmodel import Session
from ligain.config import LOG_DIR, LOG_LEVEL
from ligain.database import engine, create_db_and_tables
from ligain.errors import LigainError
from ligain.logging_config import setup_logging
from ligain.models import MatchStatus, new_season_match
from ligain.services.matches import import_match, ingest_match_update


def _optional_float(value: str) -> float:
    value = (value or "").strip()
    return float(value) if value else 0.0


def _optional_int(value: str):
    value = (value or "").strip()
    return int(value) if value else None


def import_fixtures_from_csv(db: Session, csv_file: str) -> tuple[int, list[str]]:
    """
    Import every row of the file.

    Returns the number of rows imported and the errors met on the others.
    """
    imported = 0
    errors = []

    with open(csv_file, "r", encoding="utf-8") as csvfile:
        reader = csv.DictReader(csvfile)

        for line, row in enumerate(reader, start=2):
            try:
                match = new_season_match(
                    home_team=row["home_team"].strip(),
                    away_team=row["away_team"].strip(),
                    season_code=row["season_code"].strip(),
                    competition_code=row["competition_code"].strip(),
                    kickoff=datetime.fromisoformat(row["kickoff"].strip()),
                    matchday=int(row["matchday"]),
                    home_team_odds=_optional_float(row.get("home_team_odds")),
                    away_team_odds=_optional_float(row.get("away_team_odds")),
                    draw_odds=_optional_float(row.get("draw_odds")),
                )
                match = import_match(db, match)

                status = (row.get("status") or "").strip()
                if status and status != MatchStatus.SCHEDULED.value:
                    ingest_match_update(
                        db,
                        match.id,
                        status=MatchStatus(status),
                        home_goals=_optional_int(row.get("home_goals")),
                        away_goals=_optional_int(row.get("away_goals")),
                    )
            except (KeyError, ValueError, LigainError) as exc:
                db.rollback()
                errors.append(f"line {line}: {exc}")
                continue

            imported += 1
            print(f"✅ {match.id}: {match.status.value}")

    return imported, errors


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python scripts/import_fixtures.py <fixtures.csv>")
        sys.exit(2)

    setup_logging(LOG_LEVEL, LOG_DIR)
    create_db_and_tables()

    with Session(engine) as db:
        try:
            imported, errors = import_fixtures_from_csv(db, sys.argv[1])
        except FileNotFoundError:
            print(f"❌ CSV file not found: {sys.argv[1]}")
            sys.exit(1)

    print(f"\nImported: {imported}  Errors: {len(errors)}")
    for error in errors:
        print(f"  - {error}")
    sys.exit(0 if not errors else 1)
