from typing import Mapping, Optional

from ..errors import MatchAlreadyScoredError, PartialScoringError
from .bet import Bet
from .match import Match


class MatchResult:
    """
    A match joined with every bet placed on it and, once applied, the
    points each bettor earned.

    Scores are either absent or cover exactly the players who bet.
    """

    def __init__(
        self,
        match: Match,
        bets: Optional[Mapping[str, Bet]] = None,
        scores: Optional[Mapping[str, int]] = None,
    ):
        self.match = match
        self.bets: dict[str, Bet] = dict(bets or {})
        self.scores: Optional[dict[str, int]] = None
        if scores is not None:
            self.set_scores(scores)

    def __repr__(self) -> str:
        return f"MatchResult({self.match.id!r}, bets={len(self.bets)}, scored={self.is_scored()})"

    def is_scored(self) -> bool:
        return self.scores is not None

    def add_bet(self, player_id: str, bet: Bet) -> None:
        """Insert or replace the bet of a player."""
        if self.is_scored():
            raise MatchAlreadyScoredError(self.match.id)
        self.bets[player_id] = bet

    def remove_bet(self, player_id: str) -> None:
        if self.is_scored():
            raise MatchAlreadyScoredError(self.match.id)
        self.bets.pop(player_id, None)

    def set_scores(self, scores: Mapping[str, int]) -> None:
        if self.is_scored():
            raise MatchAlreadyScoredError(self.match.id)
        missing = self.bets.keys() - scores.keys()
        extra = scores.keys() - self.bets.keys()
        if missing or extra:
            raise PartialScoringError(
                f"scores for match {self.match.id} do not match its bets "
                f"(missing: {sorted(missing)}, unexpected: {sorted(extra)})"
            )
        self.scores = dict(scores)

    def rebind(self, match: Match) -> None:
        """Point the result and all its bets at a fresher copy of the same match."""
        self.match = match
        for bet in self.bets.values():
            bet.match = match
