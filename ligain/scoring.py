from typing import Callable, Optional, Protocol, Sequence

from .errors import MatchNotFinishedError
from .models import Bet, Match

PERFECT_POINTS = 500
CLOSE_POINTS = 400
CORRECT_POINTS = 300

# A bet is "close" when the margin is right and the goal total is at most this far off
CLOSE_TOTAL_GOALS_DELTA = 2

# Home/away odds gap from which one side counts as the clear favourite
UPSET_ODDS_GAP = 3.0
UPSET_WIN_MULTIPLIER = 2.0
UPSET_DRAW_MULTIPLIER = 1.5

# (max share of correct bets, multiplier), checked in order
RARITY_MULTIPLIERS = ((0.25, 1.25), (0.5, 1.1))


class Scorer(Protocol):
    """Given a finished match and every player's bet, returns each bet's points."""

    def score(self, match: Match, bets: Sequence[Optional[Bet]]) -> list[int]: ...


def _ensure_finished(match: Match) -> None:
    if not match.is_finished():
        raise MatchNotFinishedError(match.id)


class BetScorer:
    """Turns a plain (bet, match) -> points function into a Scorer."""

    def __init__(self, compute_score: Callable[[Bet, Match], int]):
        self.compute_score = compute_score

    def score(self, match: Match, bets: Sequence[Optional[Bet]]) -> list[int]:
        _ensure_finished(match)
        return [0 if bet is None else self.compute_score(bet, match) for bet in bets]


def base_points(bet: Bet) -> int:
    """
    Points earned by a bet before multipliers.

    Rules:
    - Exact score: 500
    - Correct outcome, same goal difference, total goals within 2: 400
    - Correct outcome: 300
    - Anything else: 0
    """
    if not bet.is_bet_correct():
        return 0
    if bet.is_bet_perfect():
        return PERFECT_POINTS
    if (bet.is_goal_difference_the_same_as_match()
            and bet.absolute_difference_total_goals_with_match() <= CLOSE_TOTAL_GOALS_DELTA):
        return CLOSE_POINTS
    return CORRECT_POINTS


def rarity_multiplier(correct_bets: int, total_bets: int) -> float:
    """Reward finding a result few other players found."""
    if total_bets == 0 or correct_bets == 0:
        return 1.0
    share = correct_bets / total_bets
    for max_share, multiplier in RARITY_MULTIPLIERS:
        if share <= max_share:
            return multiplier
    return 1.0


def odds_multiplier(match: Match) -> float:
    """Reward an upset when one side was the clear favourite."""
    if not match.has_odds():
        return 1.0
    if match.absolute_difference_odds_between_home_and_away() < UPSET_ODDS_GAP:
        return 1.0
    if match.is_draw():
        return UPSET_DRAW_MULTIPLIER

    home_is_favourite = match.home_team_odds < match.away_team_odds
    home_won = match.home_goals > match.away_goals
    if home_won != home_is_favourite:
        return UPSET_WIN_MULTIPLIER
    return 1.0


class OriginalScorer:
    """
    The standard Ligain scoring.

    Base points depend on the bet alone, then get scaled by how rare the
    correct result was among players and by how unlikely the bookmakers
    thought it was. A player without a bet (None) scores 0.
    """

    def score(self, match: Match, bets: Sequence[Optional[Bet]]) -> list[int]:
        _ensure_finished(match)

        base = [0 if bet is None else base_points(bet) for bet in bets]
        correct = sum(1 for points in base if points > 0)
        multiplier = rarity_multiplier(correct, len(bets)) * odds_multiplier(match)

        return [round(points * multiplier) for points in base]
