import logging
from dataclasses import dataclass, field
from datetime import datetime, UTC
from enum import Enum
from typing import Protocol

from sqlmodel import SQLModel, Field

from ..errors import InvalidTransitionError

logger = logging.getLogger(__name__)

DRAW = "Draw"


class MatchStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


def match_key(competition_code: str, season_code: str, home_team: str, away_team: str, matchday: int) -> str:
    """Stable identity of a fixture, identical across re-imports."""
    return f"{competition_code}-{season_code}-{home_team}-{away_team}-{matchday}"


def as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo, stored values are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _check_goals(home_goals: int, away_goals: int) -> None:
    if home_goals < 0 or away_goals < 0:
        raise ValueError(f"goals must be non-negative, got {home_goals} - {away_goals}")


def _check_odds(*odds: float) -> None:
    # 0 means the odds are unknown
    if any(value < 0 for value in odds):
        raise ValueError(f"odds must be positive or 0 when unknown, got {odds}")


class Match(Protocol):
    """Capabilities every match variant offers to bets, games and scorers."""

    id: str
    home_team: str
    away_team: str
    home_goals: int
    away_goals: int
    home_team_odds: float
    away_team_odds: float
    draw_odds: float
    status: MatchStatus
    season_code: str
    competition_code: str
    kickoff: datetime
    matchday: int

    def start(self) -> None: ...
    def finish(self, home_goals: int, away_goals: int) -> None: ...
    def set_odds(self, home_team_odds: float, away_team_odds: float, draw_odds: float) -> None: ...
    def is_finished(self) -> bool: ...
    def is_in_progress(self) -> bool: ...
    def is_before_kickoff(self, now: datetime) -> bool: ...
    def get_winner(self) -> str: ...
    def absolute_goal_difference(self) -> int: ...
    def is_draw(self) -> bool: ...
    def total_goals(self) -> int: ...
    def has_odds(self) -> bool: ...
    def absolute_difference_odds_between_home_and_away(self) -> float: ...


class MatchOperations:
    """
    Status transitions and scoreline queries shared by every match variant.

    Goals are 0 until the match is finished, so scoreline queries only mean
    something once is_finished() is true.
    """

    def start(self) -> None:
        """Scheduled -> InProgress. Starting twice is ignored."""
        if self.status == MatchStatus.FINISHED:
            raise InvalidTransitionError(f"match {self.id} is finished and cannot be started")
        if self.status == MatchStatus.IN_PROGRESS:
            logger.debug("Match %s is already in progress", self.id)
            return
        self.status = MatchStatus.IN_PROGRESS
        logger.info("Match %s has started", self.id)

    def finish(self, home_goals: int, away_goals: int) -> None:
        """Set the final score. A finished match cannot be finished again."""
        if self.status == MatchStatus.FINISHED:
            raise InvalidTransitionError(
                f"match {self.id} is already finished ({self.home_goals} - {self.away_goals})"
            )
        _check_goals(home_goals, away_goals)
        self.home_goals = home_goals
        self.away_goals = away_goals
        self.status = MatchStatus.FINISHED
        logger.info("Match %s finished %d - %d", self.id, home_goals, away_goals)

    def set_odds(self, home_team_odds: float, away_team_odds: float, draw_odds: float) -> None:
        _check_odds(home_team_odds, away_team_odds, draw_odds)
        self.home_team_odds = home_team_odds
        self.away_team_odds = away_team_odds
        self.draw_odds = draw_odds

    def is_finished(self) -> bool:
        return self.status == MatchStatus.FINISHED

    def is_in_progress(self) -> bool:
        return self.status == MatchStatus.IN_PROGRESS

    def is_before_kickoff(self, now: datetime) -> bool:
        return as_utc(now) < as_utc(self.kickoff)

    def get_winner(self) -> str:
        """Winning team name, or "Draw". Gate on is_finished() first."""
        if self.home_goals > self.away_goals:
            return self.home_team
        if self.away_goals > self.home_goals:
            return self.away_team
        return DRAW

    def absolute_goal_difference(self) -> int:
        return abs(self.home_goals - self.away_goals)

    def is_draw(self) -> bool:
        return self.home_goals == self.away_goals

    def total_goals(self) -> int:
        return self.home_goals + self.away_goals

    def has_odds(self) -> bool:
        return self.home_team_odds > 0 and self.away_team_odds > 0

    def absolute_difference_odds_between_home_and_away(self) -> float:
        return abs(self.home_team_odds - self.away_team_odds)


class SeasonMatch(SQLModel, MatchOperations, table=True):
    __tablename__ = "matches"

    # match_key(), never reassigned
    id: str = Field(primary_key=True)
    season_code: str = Field(index=True)
    competition_code: str = Field(index=True)
    matchday: int = Field(index=True)

    home_team: str
    away_team: str
    kickoff: datetime

    # Final score, meaningful once status is finished
    home_goals: int = Field(default=0)
    away_goals: int = Field(default=0)

    # Decimal odds, 0 when unknown
    home_team_odds: float = Field(default=0.0)
    away_team_odds: float = Field(default=0.0)
    draw_odds: float = Field(default=0.0)

    status: MatchStatus = Field(default=MatchStatus.SCHEDULED, index=True)

    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


@dataclass(eq=False)
class SimpleMatch(MatchOperations):
    """Lightweight match with canned values, kept out of the database."""

    home_team: str = "home"
    away_team: str = "away"
    kickoff: datetime = field(default_factory=lambda: datetime.now(UTC))
    home_goals: int = 0
    away_goals: int = 0
    home_team_odds: float = 1.5
    away_team_odds: float = 2.5
    draw_odds: float = 3.0
    status: MatchStatus = MatchStatus.SCHEDULED
    season_code: str = "2024"
    competition_code: str = "TEST"
    matchday: int = 1
    id: str = ""

    def __post_init__(self):
        _check_goals(self.home_goals, self.away_goals)
        _check_odds(self.home_team_odds, self.away_team_odds, self.draw_odds)
        if not self.id:
            self.id = match_key(
                self.competition_code, self.season_code, self.home_team, self.away_team, self.matchday
            )


def new_season_match(
    home_team: str,
    away_team: str,
    season_code: str,
    competition_code: str,
    kickoff: datetime,
    matchday: int,
    home_team_odds: float = 0.0,
    away_team_odds: float = 0.0,
    draw_odds: float = 0.0,
) -> SeasonMatch:
    """Create a scheduled fixture as imported from the match data source."""
    if not home_team or not away_team:
        raise ValueError("both team names are required")
    _check_odds(home_team_odds, away_team_odds, draw_odds)
    return SeasonMatch(
        id=match_key(competition_code, season_code, home_team, away_team, matchday),
        home_team=home_team,
        away_team=away_team,
        season_code=season_code,
        competition_code=competition_code,
        kickoff=kickoff,
        matchday=matchday,
        home_team_odds=home_team_odds,
        away_team_odds=away_team_odds,
        draw_odds=draw_odds,
        status=MatchStatus.SCHEDULED,
    )


def new_finished_season_match(
    home_team: str,
    away_team: str,
    home_goals: int,
    away_goals: int,
    season_code: str,
    competition_code: str,
    kickoff: datetime,
    matchday: int,
    home_team_odds: float = 0.0,
    away_team_odds: float = 0.0,
    draw_odds: float = 0.0,
) -> SeasonMatch:
    match = new_season_match(
        home_team, away_team, season_code, competition_code, kickoff, matchday,
        home_team_odds, away_team_odds, draw_odds,
    )
    match.finish(home_goals, away_goals)
    return match
