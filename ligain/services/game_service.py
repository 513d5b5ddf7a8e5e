import logging
import threading
import weakref
from contextlib import contextmanager
from datetime import datetime, UTC
from typing import Callable, Iterable, Optional

from sqlmodel import Session

from ..errors import UnknownPlayerError
from ..game import Game
from ..models import Bet, Match, MatchResult, Player
from ..scoring import Scorer
from . import games

logger = logging.getLogger(__name__)

# An entry lives only while some caller holds or waits on its lock
_game_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
_game_locks_guard = threading.Lock()


@contextmanager
def game_lock(game_id: str):
    """Serialise writes on one game: bets and score application never interleave."""
    with _game_locks_guard:
        lock = _game_locks.get(game_id)
        if lock is None:
            lock = threading.Lock()
            _game_locks[game_id] = lock
    with lock:
        yield


class GameService:
    """Runs game operations against the database for a single game."""

    def __init__(
        self,
        db: Session,
        game_id: str,
        scorer: Optional[Scorer] = None,
        time_func: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db
        self.game_id = game_id
        self.scorer = scorer
        self.time_func = time_func or (lambda: datetime.now(UTC))

    def get_game(self) -> Game:
        return games.load_game(self.db, self.game_id, self.scorer)

    def _get_player(self, game: Game, player_id: str) -> Player:
        for player in game.get_players():
            if player.id == player_id:
                return player
        raise UnknownPlayerError(player_id)

    def get_match_results(self) -> dict[str, MatchResult]:
        return self.get_game().get_past_results()

    def get_incoming_matches(self, player_id: str) -> dict[str, MatchResult]:
        game = self.get_game()
        return game.get_incoming_matches(self._get_player(game, player_id))

    def get_players_points(self) -> dict[str, int]:
        return self.get_game().get_players_points()

    def get_winners(self) -> list[Player]:
        return self.get_game().get_winner()

    def add_player(self, player: Player) -> None:
        with game_lock(self.game_id):
            game = self.get_game()
            game.add_player(player)
            games.join_game(self.db, self.game_id, player)

    def remove_player(self, player_id: str) -> None:
        with game_lock(self.game_id):
            game = self.get_game()
            game.remove_player(self._get_player(game, player_id))
            games.leave_game(self.db, self.game_id, player_id, game.get_incoming_match_ids())

    def update_player_bet(
        self,
        player_id: str,
        match_id: str,
        predicted_home_goals: int,
        predicted_away_goals: int,
        now: Optional[datetime] = None,
    ) -> Bet:
        """Validate and store a player's bet, replacing any previous one."""
        now = now or self.time_func()
        with game_lock(self.game_id):
            game = self.get_game()
            player = self._get_player(game, player_id)
            bet = Bet(game.get_match_by_id(match_id), predicted_home_goals, predicted_away_goals)

            game.check_player_bet_validity(player, bet, now)
            games.save_bet(self.db, self.game_id, player_id, bet)
            game.add_player_bet(player, bet, now)
            logger.info("Player %s bet %d - %d on match %s", player_id,
                        predicted_home_goals, predicted_away_goals, match_id)
            return bet

    def handle_match_updates(self, updates: Iterable[Match]) -> Game:
        """
        Push fresh match states into the game.

        Finished matches that were not scored yet get scored, and the scores
        are stored before the game applies them. Matches already scored are
        skipped, so replaying an update is harmless.
        """
        with game_lock(self.game_id):
            game = self.get_game()
            if game.is_finished():
                logger.info("Game %s is finished, ignoring match updates", self.game_id)
                return game
            past = game.get_past_results()

            for match in updates:
                if match.id in past:
                    logger.debug("Match %s already scored in game %s, skipping", match.id, self.game_id)
                    continue
                logger.info("Handling update for match %s in game %s", match.id, self.game_id)
                game.update_match(match)
                if match.is_finished():
                    logger.info("Match %s is finished with score %d - %d, handling score update",
                                match.id, match.home_goals, match.away_goals)
                    self._handle_score_update(game, match)

            return game

    def finish(self) -> Game:
        """End the game, typically once its competition is over, and store the status."""
        with game_lock(self.game_id):
            game = self.get_game()
            if game.is_finished():
                return game
            game.finish()
            games.save_game_status(self.db, self.game_id, game.status)
            winners = [player.id for player in game.get_winner()]
            logger.info("Game %s is finished, with winner(s) %s", self.game_id, winners)
            return game

    def _handle_score_update(self, game: Game, match: Match) -> None:
        scores = game.calculate_match_scores(match)
        games.save_scores(self.db, self.game_id, match.id, scores)
        game.apply_match_scores(match, scores)
        for player_id, points in scores.items():
            logger.info("Player %s has earned %d points for match %s", player_id, points, match.id)
