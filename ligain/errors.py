class LigainError(Exception):
    """Base class for every error raised by the game core."""


class InvalidTransitionError(LigainError):
    """A match status change that breaks Scheduled -> InProgress -> Finished."""


class UnknownEntityError(LigainError):
    pass


class UnknownPlayerError(UnknownEntityError):
    def __init__(self, player_id: str):
        super().__init__(f"player {player_id} not found")
        self.player_id = player_id


class UnknownMatchError(UnknownEntityError):
    def __init__(self, match_id: str):
        super().__init__(f"match {match_id} not found")
        self.match_id = match_id


class UnknownGameError(UnknownEntityError):
    def __init__(self, game_id: str):
        super().__init__(f"game {game_id} not found")
        self.game_id = game_id


class PlayerAlreadyInGameError(LigainError):
    def __init__(self, player_id: str):
        super().__init__(f"player {player_id} is already in the game")
        self.player_id = player_id


class BetNotModifiableError(LigainError):
    def __init__(self, match_id: str):
        super().__init__(f"too late to bet on match {match_id}")
        self.match_id = match_id


class MatchNotFinishedError(LigainError):
    def __init__(self, match_id: str):
        super().__init__(f"match {match_id} is not finished")
        self.match_id = match_id


class MatchAlreadyScoredError(LigainError):
    def __init__(self, match_id: str):
        super().__init__(f"match {match_id} has already been scored")
        self.match_id = match_id


class PartialScoringError(LigainError):
    """Scores must cover exactly the players who bet on the match."""


class GameFinishedError(LigainError):
    def __init__(self, game_name: str):
        super().__init__(f"game {game_name} is finished and no longer accepts bets")
        self.game_name = game_name
