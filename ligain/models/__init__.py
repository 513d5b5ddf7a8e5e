from .match import Match, MatchStatus, SeasonMatch, SimpleMatch, match_key, new_season_match, new_finished_season_match
from .bet import Bet, BetRecord
from .match_result import MatchResult
from .player import Player, SimplePlayer, PlayerRecord, GamePlayer
from .game import GameStatus, GameRecord
from .score import ScoreRecord

__all__ = [
    "Match",
    "MatchStatus",
    "SeasonMatch",
    "SimpleMatch",
    "match_key",
    "new_season_match",
    "new_finished_season_match",
    "Bet",
    "BetRecord",
    "MatchResult",
    "Player",
    "SimplePlayer",
    "PlayerRecord",
    "GamePlayer",
    "GameStatus",
    "GameRecord",
    "ScoreRecord",
]
