from datetime import datetime, timedelta, timezone


def create_match(client, home_team="Arsenal", away_team="Chelsea", matchday=1, kickoff=None):
    kickoff = kickoff or datetime.now(timezone.utc) + timedelta(days=1)
    response = client.post("/api/matches", json={
        "home_team": home_team,
        "away_team": away_team,
        "season_code": "2024",
        "competition_code": "PL",
        "kickoff": kickoff.isoformat(),
        "matchday": matchday,
        "home_team_odds": 1.5,
        "away_team_odds": 2.5,
        "draw_odds": 3.0,
    })
    assert response.status_code == 200
    return response.json()


def create_game(client):
    response = client.post("/api/games", json={
        "name": "Friends",
        "season_code": "2024",
        "competition_code": "PL",
        "players": [{"id": "alice", "name": "Alice"}, {"id": "bob", "name": "Bob"}],
    })
    assert response.status_code == 201
    return response.json()


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_create_match(client):
    match = create_match(client)
    assert match["id"] == "PL-2024-Arsenal-Chelsea-1"
    assert match["status"] == "scheduled"
    assert match["winner"] is None

    response = client.get(f"/api/matches/{match['id']}")
    assert response.status_code == 200
    assert response.json()["home_team"] == "Arsenal"


def test_unknown_match(client):
    response = client.get("/api/matches/nope")
    assert response.status_code == 404


def test_full_game_flow(client):
    match = create_match(client)
    game = create_game(client)
    assert game["status"] == "in progress"

    response = client.put(f"/api/games/{game['id']}/bets/{match['id']}", json={
        "player_id": "alice", "predicted_home_goals": 2, "predicted_away_goals": 1
    })
    assert response.status_code == 200
    assert response.json() == {
        "player_id": "alice", "match_id": match["id"], "predicted_home_goals": 2, "predicted_away_goals": 1
    }
    client.put(f"/api/games/{game['id']}/bets/{match['id']}", json={
        "player_id": "bob", "predicted_home_goals": 0, "predicted_away_goals": 1
    })

    # Before kickoff a player only sees their own bet
    response = client.get(f"/api/games/{game['id']}/matches", params={"player_id": "alice"})
    assert response.status_code == 200
    assert list(response.json()[match["id"]]["bets"]) == ["alice"]

    response = client.put(f"/api/matches/{match['id']}", json={"status": "finished", "home_goals": 2, "away_goals": 1})
    assert response.status_code == 200
    assert response.json()["winner"] == "Arsenal"

    response = client.get(f"/api/games/{game['id']}/results")
    assert response.status_code == 200
    assert response.json()[match["id"]]["scores"] == {"alice": 550, "bob": 0}

    response = client.get(f"/api/games/{game['id']}/leaderboard")
    data = response.json()
    assert data["status"] == "in progress"
    assert data["standings"][0] == {"player_id": "alice", "name": "Alice", "points": 550}
    assert data["winners"] == []

    response = client.post("/api/matches/competitions/PL/2024/finish")
    assert response.status_code == 200
    assert response.json()["finished_games"] == [game["id"]]

    data = client.get(f"/api/games/{game['id']}/leaderboard").json()
    assert data["status"] == "finished"
    assert data["winners"] == ["alice"]

    response = client.put(f"/api/games/{game['id']}/bets/{match['id']}", json={
        "player_id": "bob", "predicted_home_goals": 2, "predicted_away_goals": 1
    })
    assert response.status_code == 409


def test_bet_from_unknown_player(client):
    match = create_match(client)
    game = create_game(client)
    response = client.put(f"/api/games/{game['id']}/bets/{match['id']}", json={
        "player_id": "carol", "predicted_home_goals": 1, "predicted_away_goals": 0
    })
    assert response.status_code == 404


def test_bet_after_kickoff(client):
    match = create_match(client, kickoff=datetime.now(timezone.utc) - timedelta(minutes=5))
    game = create_game(client)
    response = client.put(f"/api/games/{game['id']}/bets/{match['id']}", json={
        "player_id": "alice", "predicted_home_goals": 1, "predicted_away_goals": 0
    })
    assert response.status_code == 400


def test_negative_bet_is_invalid(client):
    match = create_match(client)
    game = create_game(client)
    response = client.put(f"/api/games/{game['id']}/bets/{match['id']}", json={
        "player_id": "alice", "predicted_home_goals": -1, "predicted_away_goals": 0
    })
    assert response.status_code == 422


def test_final_score_cannot_change(client):
    match = create_match(client)
    client.put(f"/api/matches/{match['id']}", json={"status": "finished", "home_goals": 1, "away_goals": 0})
    response = client.put(f"/api/matches/{match['id']}", json={"status": "finished", "home_goals": 1, "away_goals": 1})
    assert response.status_code == 409


def test_finished_update_needs_goals(client):
    match = create_match(client)
    response = client.put(f"/api/matches/{match['id']}", json={"status": "finished"})
    assert response.status_code == 422


def test_join_game_twice(client):
    game = create_game(client)
    response = client.post(f"/api/games/{game['id']}/players", json={"id": "carol", "name": "Carol"})
    assert response.status_code == 201
    response = client.post(f"/api/games/{game['id']}/players", json={"id": "carol", "name": "Carol"})
    assert response.status_code == 400


def test_unknown_game(client):
    response = client.get("/api/games/nope/leaderboard")
    assert response.status_code == 404


def test_competition_cannot_finish_before_its_matches(client):
    create_match(client)
    game = create_game(client)
    response = client.post("/api/matches/competitions/PL/2024/finish")
    assert response.status_code == 409

    response = client.post(f"/api/games/{game['id']}/finish")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "finished"
    assert sorted(data["winners"]) == ["alice", "bob"]
