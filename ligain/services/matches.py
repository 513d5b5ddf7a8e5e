import logging
from datetime import datetime, timedelta, UTC
from typing import Optional

from sqlmodel import Session, select

from ..config import ODDS_FREEZE_MINUTES
from ..errors import InvalidTransitionError, MatchNotFinishedError, UnknownMatchError
from ..models import GameRecord, MatchStatus, SeasonMatch
from ..models.match import as_utc
from . import games
from .game_service import GameService

logger = logging.getLogger(__name__)


def get_match(db: Session, match_id: str) -> SeasonMatch:
    match = db.get(SeasonMatch, match_id)
    if match is None:
        raise UnknownMatchError(match_id)
    return match


def odds_frozen(match: SeasonMatch, now: datetime) -> bool:
    """Odds stop moving shortly before kickoff so every bet is scored on the same odds."""
    return as_utc(match.kickoff) < as_utc(now) + timedelta(minutes=ODDS_FREEZE_MINUTES)


def adjust_odds(
    match: SeasonMatch,
    home_team_odds: float,
    away_team_odds: float,
    draw_odds: float,
    now: datetime,
) -> bool:
    """Apply new odds unless they are frozen. Returns whether they changed."""
    if odds_frozen(match, now):
        logger.info("Odds of match %s are frozen, keeping %.2f/%.2f/%.2f", match.id,
                    match.home_team_odds, match.away_team_odds, match.draw_odds)
        return False
    match.set_odds(home_team_odds, away_team_odds, draw_odds)
    return True


def import_match(db: Session, match: SeasonMatch, now: Optional[datetime] = None) -> SeasonMatch:
    """
    Insert a fixture, or refresh it when it is already known.

    Only the kickoff time and the odds of a scheduled match are refreshed;
    status and score changes go through ingest_match_update.
    """
    now = now or datetime.now(UTC)
    existing = db.get(SeasonMatch, match.id)

    if existing is None:
        db.add(match)
        db.commit()
        db.refresh(match)
        logger.info("Imported match %s", match.id)
        return match

    if existing.status == MatchStatus.SCHEDULED:
        existing.kickoff = match.kickoff
        adjust_odds(existing, match.home_team_odds, match.away_team_odds, match.draw_odds, now)
        existing.updated_at = now
        db.add(existing)
        db.commit()
        db.refresh(existing)
    return existing


def ingest_match_update(
    db: Session,
    match_id: str,
    status: Optional[MatchStatus] = None,
    home_goals: Optional[int] = None,
    away_goals: Optional[int] = None,
    home_team_odds: Optional[float] = None,
    away_team_odds: Optional[float] = None,
    draw_odds: Optional[float] = None,
    now: Optional[datetime] = None,
) -> SeasonMatch:
    """
    Apply an update from the match data source and fan it out to every game
    played on the match's competition and season.

    Sending the same final score twice is a no-op. A different final score
    for a finished match is rejected.
    """
    now = now or datetime.now(UTC)
    match = get_match(db, match_id)

    if home_team_odds is not None and away_team_odds is not None and draw_odds is not None:
        adjust_odds(match, home_team_odds, away_team_odds, draw_odds, now)

    if status == MatchStatus.SCHEDULED and match.status != MatchStatus.SCHEDULED:
        raise InvalidTransitionError(f"match {match.id} is {match.status.value} and cannot be rescheduled")
    if status == MatchStatus.IN_PROGRESS:
        match.start()
    elif status == MatchStatus.FINISHED:
        if home_goals is None or away_goals is None:
            raise ValueError("a finished match needs both goal counts")
        if not match.is_finished():
            match.finish(home_goals, away_goals)
        elif (match.home_goals, match.away_goals) != (home_goals, away_goals):
            raise InvalidTransitionError(
                f"match {match.id} already finished {match.home_goals} - {match.away_goals}"
            )

    match.updated_at = now
    db.add(match)
    db.commit()
    db.refresh(match)

    for record in games.games_for_match(db, match):
        GameService(db, record.id, time_func=lambda: now).handle_match_updates([match])
    return match


def finish_competition(db: Session, competition_code: str, season_code: str) -> list[str]:
    """
    Close a competition season: every game played on it is finished.

    Refused while a known match of the season is not finished yet. Returns
    the ids of the games that were finished.
    """
    statement = select(SeasonMatch).where(
        SeasonMatch.competition_code == competition_code,
        SeasonMatch.season_code == season_code
    )
    for match in db.exec(statement).all():
        if not match.is_finished():
            raise MatchNotFinishedError(match.id)

    statement = select(GameRecord).where(
        GameRecord.competition_code == competition_code,
        GameRecord.season_code == season_code
    )
    game_ids = [record.id for record in db.exec(statement).all()]
    for game_id in game_ids:
        GameService(db, game_id).finish()
    logger.info("Competition %s %s is over, finished %d game(s)", competition_code, season_code, len(game_ids))
    return game_ids
