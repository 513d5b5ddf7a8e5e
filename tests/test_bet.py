from datetime import datetime, timedelta, timezone

import pytest

from ligain.errors import UnknownMatchError
from ligain.models import Bet, SimpleMatch

NOW = datetime(2024, 3, 9, 12, 0, tzinfo=timezone.utc)


def finished_match(home_goals, away_goals):
    match = SimpleMatch(home_team="Manchester United", away_team="Liverpool")
    match.finish(home_goals, away_goals)
    return match


def test_home_team_wins():
    # Match 3-1, bet 1-0
    bet = Bet(finished_match(3, 1), 1, 0)
    assert bet.is_bet_correct()
    assert not bet.is_bet_perfect()


def test_away_team_wins():
    bet = Bet(finished_match(0, 2), 0, 2)
    assert bet.is_bet_correct()
    assert bet.is_bet_perfect()


def test_draw():
    bet = Bet(finished_match(1, 1), 0, 0)
    assert bet.is_bet_correct()
    assert bet.is_goal_difference_the_same_as_match()
    assert not bet.is_bet_perfect()


def test_home_team_wins_but_predicted_wrong():
    assert not Bet(finished_match(3, 1), 0, 2).is_bet_correct()


def test_away_team_wins_but_predicted_wrong():
    assert not Bet(finished_match(0, 2), 2, 0).is_bet_correct()


def test_draw_but_predicted_wrong():
    assert not Bet(finished_match(1, 1), 1, 0).is_bet_correct()


def test_perfect_implies_correct():
    for home_goals in range(4):
        for away_goals in range(4):
            match = finished_match(home_goals, away_goals)
            for predicted_home in range(4):
                for predicted_away in range(4):
                    bet = Bet(match, predicted_home, predicted_away)
                    if bet.is_bet_perfect():
                        assert bet.is_bet_correct()


def test_goal_difference_metrics():
    match = finished_match(1, 3)
    bet = Bet(match, 4, 1)
    assert bet.absolute_goal_difference() == 3
    assert bet.absolute_difference_goal_difference_with_match() == 1
    assert not bet.is_goal_difference_the_same_as_match()
    # Same margin, other side
    assert Bet(match, 2, 0).is_goal_difference_the_same_as_match()


def test_total_goals_metrics():
    bet = Bet(finished_match(2, 4), 0, 2)
    assert bet.total_predicted_goals() == 2
    assert bet.absolute_difference_total_goals_with_match() == 4


def test_predicted_result_ignores_the_match_outcome():
    match = finished_match(0, 3)
    assert Bet(match, 2, 1).get_predicted_result() == "Manchester United"
    assert Bet(match, 1, 2).get_predicted_result() == "Liverpool"
    assert Bet(match, 1, 1).get_predicted_result() == "Draw"


def test_modifiable_until_kickoff():
    match = SimpleMatch(kickoff=NOW + timedelta(hours=1))
    bet = Bet(match, 2, 1)
    assert bet.is_modifiable(NOW)
    assert not bet.is_modifiable(match.kickoff)
    assert not bet.is_modifiable(match.kickoff + timedelta(minutes=1))


def test_not_modifiable_once_started_or_finished():
    match = SimpleMatch(kickoff=NOW + timedelta(hours=1))
    bet = Bet(match, 2, 1)
    match.start()
    assert not bet.is_modifiable(NOW)
    match.finish(0, 0)
    assert not bet.is_modifiable(NOW)


def test_bet_sees_the_match_finish():
    match = SimpleMatch()
    bet = Bet(match, 2, 0)
    match.finish(2, 0)
    assert bet.is_bet_perfect()


def test_negative_prediction_is_rejected():
    with pytest.raises(ValueError):
        Bet(SimpleMatch(), -1, 0)


def test_to_dict_from_dict():
    match = SimpleMatch(home_team="Arsenal", away_team="Chelsea")
    bet = Bet(match, 3, 2)
    restored = Bet.from_dict(bet.to_dict(), {match.id: match})
    assert restored.predicted_home_goals == 3
    assert restored.predicted_away_goals == 2
    assert restored.match is match


def test_from_dict_unknown_match():
    data = {"match_id": "nope", "predicted_home_goals": 1, "predicted_away_goals": 0}
    with pytest.raises(UnknownMatchError):
        Bet.from_dict(data, {})
