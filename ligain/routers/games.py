from typing import List
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlmodel import Session

from ..database import get_session
from ..errors import LigainError
from ..models import GameStatus, MatchResult, SimplePlayer
from ..services import games
from ..services.game_service import GameService
from . import http_error
from .matches import match_to_dict

router = APIRouter(prefix="/api/games", tags=["games"])


class PlayerIn(BaseModel):
    id: str
    name: str


class GameCreate(BaseModel):
    name: str
    season_code: str
    competition_code: str
    players: List[PlayerIn] = []


class BetIn(BaseModel):
    player_id: str
    predicted_home_goals: int = Field(ge=0)
    predicted_away_goals: int = Field(ge=0)


def result_to_dict(result: MatchResult) -> dict:
    return {
        "match": match_to_dict(result.match),
        "bets": {player_id: bet.to_dict() for player_id, bet in result.bets.items()},
        "scores": result.scores,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_game(
    game_data: GameCreate,
    db: Session = Depends(get_session)
):
    players = [SimplePlayer(id=p.id, name=p.name) for p in game_data.players]
    record = games.create_game(
        db,
        name=game_data.name,
        season_code=game_data.season_code,
        competition_code=game_data.competition_code,
        players=players
    )
    return {
        "id": record.id,
        "name": record.name,
        "season_code": record.season_code,
        "competition_code": record.competition_code,
        "status": record.status.value,
    }


@router.post("/{game_id}/players", status_code=status.HTTP_201_CREATED)
async def join_game(
    game_id: str,
    player_data: PlayerIn,
    db: Session = Depends(get_session)
):
    try:
        GameService(db, game_id).add_player(SimplePlayer(id=player_data.id, name=player_data.name))
    except LigainError as exc:
        raise http_error(exc)
    return {"game_id": game_id, "player_id": player_data.id}


@router.delete("/{game_id}/players/{player_id}")
async def leave_game(
    game_id: str,
    player_id: str,
    db: Session = Depends(get_session)
):
    try:
        GameService(db, game_id).remove_player(player_id)
    except LigainError as exc:
        raise http_error(exc)
    return {"game_id": game_id, "player_id": player_id}


@router.put("/{game_id}/bets/{match_id}")
async def submit_bet(
    game_id: str,
    match_id: str,
    bet_data: BetIn,
    db: Session = Depends(get_session)
):
    """Create or replace a player's bet, until kickoff."""
    try:
        bet = GameService(db, game_id).update_player_bet(
            bet_data.player_id,
            match_id,
            bet_data.predicted_home_goals,
            bet_data.predicted_away_goals
        )
    except LigainError as exc:
        raise http_error(exc)
    return {"player_id": bet_data.player_id, **bet.to_dict()}


@router.get("/{game_id}/matches")
async def incoming_matches(
    game_id: str,
    player_id: str,
    db: Session = Depends(get_session)
):
    """Matches still to be scored, with the bets this player may see."""
    try:
        incoming = GameService(db, game_id).get_incoming_matches(player_id)
    except LigainError as exc:
        raise http_error(exc)
    return {match_id: result_to_dict(result) for match_id, result in incoming.items()}


@router.get("/{game_id}/results")
async def past_results(
    game_id: str,
    db: Session = Depends(get_session)
):
    try:
        results = GameService(db, game_id).get_match_results()
    except LigainError as exc:
        raise http_error(exc)
    return {match_id: result_to_dict(result) for match_id, result in results.items()}


@router.get("/{game_id}/leaderboard")
async def leaderboard(
    game_id: str,
    db: Session = Depends(get_session)
):
    """Players ranked by points, plus the winners once the game is finished."""
    try:
        game = GameService(db, game_id).get_game()
    except LigainError as exc:
        raise http_error(exc)

    points = game.get_players_points()
    standings = [
        {"player_id": player.id, "name": player.name, "points": points.get(player.id, 0)}
        for player in game.get_players()
    ]
    standings.sort(key=lambda row: (-row["points"], row["name"]))

    winners = []
    if game.status == GameStatus.FINISHED:
        winners = [player.id for player in game.get_winner()]

    return {"status": game.status.value, "standings": standings, "winners": winners}


@router.post("/{game_id}/finish")
async def finish_game(
    game_id: str,
    db: Session = Depends(get_session)
):
    """End the game and name its winners. Bets are refused from then on."""
    try:
        game = GameService(db, game_id).finish()
    except LigainError as exc:
        raise http_error(exc)
    return {"status": game.status.value, "winners": [player.id for player in game.get_winner()]}
