from datetime import datetime, timedelta, timezone

import pytest

from ligain.errors import InvalidTransitionError
from ligain.models import MatchStatus, SimpleMatch, match_key, new_finished_season_match, new_season_match

KICKOFF = datetime(2024, 1, 1, 15, 0, tzinfo=timezone.utc)


def finished(home_goals, away_goals, home_team="Manchester United", away_team="Liverpool"):
    return new_finished_season_match(home_team, away_team, home_goals, away_goals, "2024", "Premier League", KICKOFF, 1)


def test_home_team_wins():
    assert finished(3, 1).get_winner() == "Manchester United"


def test_away_team_wins():
    assert finished(0, 2, "Arsenal", "Chelsea").get_winner() == "Chelsea"


def test_draw():
    match = finished(1, 1, "Tottenham", "West Ham")
    assert match.get_winner() == "Draw"
    assert match.is_draw()


@pytest.mark.parametrize("home_goals,away_goals", [(0, 0), (2, 2), (3, 1), (0, 4), (5, 4)])
def test_zero_goal_difference_means_draw(home_goals, away_goals):
    match = finished(home_goals, away_goals)
    assert (match.absolute_goal_difference() == 0) == match.is_draw()


def test_goal_queries():
    match = finished(1, 4)
    assert match.absolute_goal_difference() == 3
    assert match.total_goals() == 5


def test_scheduled_match_has_no_meaningful_winner():
    match = new_season_match("Arsenal", "Chelsea", "2024", "Premier League", KICKOFF, 3)
    # Goals default to 0, only is_finished() tells the draw is not real
    assert match.get_winner() == "Draw"
    assert not match.is_finished()
    assert match.status == MatchStatus.SCHEDULED


def test_identity_is_deterministic():
    first = new_season_match("Arsenal", "Chelsea", "2024", "PL", KICKOFF, 3)
    again = new_season_match("Arsenal", "Chelsea", "2024", "PL", KICKOFF + timedelta(days=1), 3)
    assert first.id == again.id == match_key("PL", "2024", "Arsenal", "Chelsea", 3)
    assert first.id == "PL-2024-Arsenal-Chelsea-3"


def test_start_then_finish():
    match = new_season_match("Arsenal", "Chelsea", "2024", "PL", KICKOFF, 3)
    match.start()
    assert match.is_in_progress()
    match.finish(2, 0)
    assert match.is_finished()
    assert not match.is_in_progress()
    assert (match.home_goals, match.away_goals) == (2, 0)


def test_start_twice_is_ignored():
    match = SimpleMatch()
    match.start()
    match.start()
    assert match.status == MatchStatus.IN_PROGRESS


def test_finish_without_start():
    match = SimpleMatch()
    match.finish(1, 0)
    assert match.is_finished()


def test_finished_match_cannot_start():
    match = finished(1, 0)
    with pytest.raises(InvalidTransitionError):
        match.start()
    assert match.is_finished()


def test_finished_match_cannot_be_finished_again():
    match = finished(1, 0)
    with pytest.raises(InvalidTransitionError):
        match.finish(2, 2)
    assert (match.home_goals, match.away_goals) == (1, 0)


def test_negative_goals_are_rejected():
    match = SimpleMatch()
    with pytest.raises(ValueError):
        match.finish(-1, 0)
    assert match.status == MatchStatus.SCHEDULED


def test_odds():
    match = new_season_match("Bastia", "Real Madrid", "2024", "PL", KICKOFF, 1, 8.0, 1.1, 6.0)
    assert match.has_odds()
    assert match.absolute_difference_odds_between_home_and_away() == pytest.approx(6.9)


def test_unknown_odds():
    match = new_season_match("Arsenal", "Chelsea", "2024", "PL", KICKOFF, 3)
    assert not match.has_odds()


def test_negative_odds_are_rejected():
    with pytest.raises(ValueError):
        new_season_match("Arsenal", "Chelsea", "2024", "PL", KICKOFF, 3, home_team_odds=-1.0)
    with pytest.raises(ValueError):
        SimpleMatch().set_odds(1.2, -3.0, 2.0)


def test_simple_match_defaults():
    match = SimpleMatch()
    assert match.id == "TEST-2024-home-away-1"
    assert match.absolute_difference_odds_between_home_and_away() == pytest.approx(1.0)


def test_naive_kickoff_is_treated_as_utc():
    match = SimpleMatch(kickoff=datetime(2024, 1, 1, 15, 0))
    assert match.is_before_kickoff(KICKOFF - timedelta(minutes=1))
    assert not match.is_before_kickoff(KICKOFF)
