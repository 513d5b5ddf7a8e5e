from datetime import datetime, UTC
from typing import Any, Mapping, Optional

from sqlmodel import SQLModel, Field, UniqueConstraint

from ..errors import UnknownMatchError
from .match import DRAW, Match


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


class Bet:
    """
    A player's predicted scoreline for one match.

    The bet keeps a reference to the match rather than a copy, so once the
    match is finished every outstanding bet sees the final score.
    """

    def __init__(self, match: Match, predicted_home_goals: int, predicted_away_goals: int):
        if predicted_home_goals < 0 or predicted_away_goals < 0:
            raise ValueError(
                f"predicted goals must be non-negative, got {predicted_home_goals} - {predicted_away_goals}"
            )
        self.match = match
        self.predicted_home_goals = predicted_home_goals
        self.predicted_away_goals = predicted_away_goals

    def __repr__(self) -> str:
        return f"Bet({self.match.id!r}, {self.predicted_home_goals}, {self.predicted_away_goals})"

    def is_bet_correct(self) -> bool:
        """Home win, away win or draw predicted right. The exact score does not matter."""
        actual = _sign(self.match.home_goals - self.match.away_goals)
        predicted = _sign(self.predicted_home_goals - self.predicted_away_goals)
        return actual == predicted

    def is_bet_perfect(self) -> bool:
        return (
            self.predicted_home_goals == self.match.home_goals
            and self.predicted_away_goals == self.match.away_goals
        )

    def absolute_goal_difference(self) -> int:
        return abs(self.predicted_home_goals - self.predicted_away_goals)

    def absolute_difference_goal_difference_with_match(self) -> int:
        return abs(self.match.absolute_goal_difference() - self.absolute_goal_difference())

    def is_goal_difference_the_same_as_match(self) -> bool:
        return self.absolute_difference_goal_difference_with_match() == 0

    def total_predicted_goals(self) -> int:
        return self.predicted_home_goals + self.predicted_away_goals

    def absolute_difference_total_goals_with_match(self) -> int:
        return abs(self.total_predicted_goals() - self.match.total_goals())

    def get_predicted_result(self) -> str:
        """Team the player expects to win, or "Draw"."""
        if self.predicted_home_goals > self.predicted_away_goals:
            return self.match.home_team
        if self.predicted_away_goals > self.predicted_home_goals:
            return self.match.away_team
        return DRAW

    def is_modifiable(self, now: datetime) -> bool:
        if self.match.is_finished() or self.match.is_in_progress():
            return False
        return self.match.is_before_kickoff(now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "match_id": self.match.id,
            "predicted_home_goals": self.predicted_home_goals,
            "predicted_away_goals": self.predicted_away_goals,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], matches: Mapping[str, Match]) -> "Bet":
        """Rebuild a bet, resolving its match by identity."""
        match = matches.get(data["match_id"])
        if match is None:
            raise UnknownMatchError(data["match_id"])
        return cls(match, int(data["predicted_home_goals"]), int(data["predicted_away_goals"]))


class BetRecord(SQLModel, table=True):
    __tablename__ = "bets"
    __table_args__ = (UniqueConstraint("game_id", "match_id", "player_id", name="unique_game_match_player_bet"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    game_id: str = Field(foreign_key="games.id", index=True)
    match_id: str = Field(foreign_key="matches.id", index=True)
    player_id: str = Field(foreign_key="players.id", index=True)

    predicted_home_goals: int
    predicted_away_goals: int

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
