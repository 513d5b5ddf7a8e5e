import logging
from datetime import datetime, UTC
from typing import Iterable, Mapping, Optional

from .errors import (
    BetNotModifiableError,
    GameFinishedError,
    MatchAlreadyScoredError,
    PlayerAlreadyInGameError,
    UnknownMatchError,
    UnknownPlayerError,
)
from .models import Bet, GameStatus, Match, MatchResult, Player
from .scoring import OriginalScorer, Scorer

logger = logging.getLogger(__name__)


class Game:
    """
    One competition instance played by a group of players.

    Keeps a MatchResult per match of the season. A result stays "incoming"
    until its scores are applied, then it becomes a past result. Player
    totals are always recomputed from the scored results.

    Fixtures keep arriving matchday by matchday, so scoring every known
    match does not end the game. It ends when finish() is called once the
    competition is over.
    """

    def __init__(
        self,
        season_code: str,
        competition_code: str,
        name: str,
        players: Iterable[Player] = (),
        matches: Iterable[Match] = (),
        scorer: Optional[Scorer] = None,
        status: GameStatus = GameStatus.IN_PROGRESS,
    ):
        self.season_code = season_code
        self.competition_code = competition_code
        self.name = name
        self.scorer = scorer or OriginalScorer()
        self.status = status
        self._players: dict[str, Player] = {}
        self._results: dict[str, MatchResult] = {}

        for player in players:
            self._players[player.id] = player
        for match in matches:
            self._results[match.id] = MatchResult(match)

    @classmethod
    def restore(
        cls,
        season_code: str,
        competition_code: str,
        name: str,
        players: Iterable[Player],
        matches: Iterable[Match],
        bets: Mapping[str, Mapping[str, Bet]],
        scores: Mapping[str, Mapping[str, int]],
        scorer: Optional[Scorer] = None,
        status: GameStatus = GameStatus.IN_PROGRESS,
    ) -> "Game":
        """Rebuild a started game from stored bets and scores, both keyed by match id then player id."""
        game = cls(season_code, competition_code, name, players, matches, scorer, status)
        for match_id, result in game._results.items():
            for player_id, bet in bets.get(match_id, {}).items():
                bet.match = result.match
                result.bets[player_id] = bet
            if match_id in scores:
                result.set_scores(scores[match_id])
        return game

    def __repr__(self) -> str:
        return f"Game({self.name!r}, {self.competition_code} {self.season_code}, {self.status.value})"

    # Players

    def get_players(self) -> list[Player]:
        return list(self._players.values())

    def has_player(self, player: Player) -> bool:
        return player.id in self._players

    def add_player(self, player: Player) -> None:
        if self.has_player(player):
            raise PlayerAlreadyInGameError(player.id)
        self._players[player.id] = player

    def remove_player(self, player: Player) -> None:
        """Remove a player and the bets they placed on matches not scored yet."""
        if not self.has_player(player):
            raise UnknownPlayerError(player.id)
        del self._players[player.id]
        for result in self._results.values():
            if not result.is_scored():
                result.remove_bet(player.id)

    # Matches

    def get_match_by_id(self, match_id: str) -> Match:
        return self._get_result(match_id).match

    def _get_result(self, match_id: str) -> MatchResult:
        result = self._results.get(match_id)
        if result is None:
            raise UnknownMatchError(match_id)
        return result

    def _get_incoming_result(self, match_id: str) -> MatchResult:
        result = self._get_result(match_id)
        if result.is_scored():
            raise MatchAlreadyScoredError(match_id)
        return result

    def update_match(self, match: Match) -> None:
        """Swap in a fresher copy of a known match, keeping its bets."""
        self._get_incoming_result(match.id).rebind(match)

    def get_incoming_match_ids(self) -> list[str]:
        return [match_id for match_id, result in self._results.items() if not result.is_scored()]

    def get_past_results(self) -> dict[str, MatchResult]:
        return {match_id: result for match_id, result in self._results.items() if result.is_scored()}

    def get_incoming_matches(self, player: Player) -> dict[str, MatchResult]:
        """
        Unscored matches as seen by one player.

        Before kickoff only the player's own bet is visible. Once a match is
        in progress (or finished but not scored) everyone's bets are.
        """
        incoming = {}
        for match_id, result in self._results.items():
            if result.is_scored():
                continue
            match = result.match
            if match.is_in_progress() or match.is_finished():
                bets = dict(result.bets)
            else:
                bets = {player_id: bet for player_id, bet in result.bets.items() if player_id == player.id}
            incoming[match_id] = MatchResult(match, bets)
        return incoming

    # Bets

    def check_player_bet_validity(self, player: Player, bet: Bet, now: datetime) -> None:
        """Raise if the player may not place this bet at this time."""
        if self.is_finished():
            raise GameFinishedError(self.name)
        self._get_result(bet.match.id)
        if not self.has_player(player):
            raise UnknownPlayerError(player.id)
        if not bet.is_modifiable(now):
            raise BetNotModifiableError(bet.match.id)

    def add_player_bet(self, player: Player, bet: Bet, now: Optional[datetime] = None) -> None:
        """Insert or replace a player's bet on a match."""
        self.check_player_bet_validity(player, bet, now or datetime.now(UTC))
        result = self._get_incoming_result(bet.match.id)
        # The game's copy of the match is authoritative
        bet.match = result.match
        result.add_bet(player.id, bet)
        logger.debug("Player %s bet %s on match %s", player.id, bet, bet.match.id)

    def get_player_bet(self, player: Player, match_id: str) -> Optional[Bet]:
        return self._get_result(match_id).bets.get(player.id)

    # Scores

    def calculate_match_scores(self, match: Match) -> dict[str, int]:
        """
        Points for every player who bet on the match. Nothing is stored.

        Players without a bet are handed to the scorer as None so they count
        in the share of correct bets, but they get no score entry.
        """
        result = self._get_incoming_result(match.id)

        player_ids = list(self._players) + [player_id for player_id in result.bets if player_id not in self._players]
        entries = []
        for player_id in player_ids:
            bet = result.bets.get(player_id)
            if bet is not None:
                bet = Bet(match, bet.predicted_home_goals, bet.predicted_away_goals)
            entries.append(bet)

        points = self.scorer.score(match, entries)
        return {player_id: score for player_id, score in zip(player_ids, points) if player_id in result.bets}

    def apply_match_scores(self, match: Match, scores: Mapping[str, int]) -> None:
        """Store the scores of a match, all at once."""
        result = self._get_incoming_result(match.id)
        result.set_scores(scores)
        logger.info("Applied scores for match %s: %s", match.id, dict(scores))

    def get_players_points(self) -> dict[str, int]:
        """Totals of the current players. Scores of players who left are kept but not counted."""
        points = {player_id: 0 for player_id in self._players}
        for result in self._results.values():
            if not result.is_scored():
                continue
            for player_id, score in result.scores.items():
                if player_id in points:
                    points[player_id] += score
        return points

    # Status

    def is_finished(self) -> bool:
        return self.status == GameStatus.FINISHED

    def finish(self) -> None:
        if not self.is_finished():
            logger.info("Game %s is finished", self.name)
        self.status = GameStatus.FINISHED

    def get_winner(self) -> list[Player]:
        """Every player holding the highest total. Ties give several winners."""
        totals = self.get_players_points()
        if not totals:
            return []
        best = max(totals.values())
        return [self._players[player_id] for player_id, total in totals.items() if total == best]
