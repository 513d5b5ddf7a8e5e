from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlmodel import Session

from ..database import get_session
from ..errors import LigainError
from ..models import MatchStatus, new_season_match
from ..services.matches import finish_competition, get_match, import_match, ingest_match_update
from . import http_error

router = APIRouter(prefix="/api/matches", tags=["matches"])


class MatchCreate(BaseModel):
    home_team: str
    away_team: str
    season_code: str
    competition_code: str
    kickoff: datetime
    matchday: int
    home_team_odds: float = Field(default=0.0, ge=0)
    away_team_odds: float = Field(default=0.0, ge=0)
    draw_odds: float = Field(default=0.0, ge=0)


class MatchUpdate(BaseModel):
    status: Optional[MatchStatus] = None
    home_goals: Optional[int] = Field(default=None, ge=0)
    away_goals: Optional[int] = Field(default=None, ge=0)
    home_team_odds: Optional[float] = Field(default=None, ge=0)
    away_team_odds: Optional[float] = Field(default=None, ge=0)
    draw_odds: Optional[float] = Field(default=None, ge=0)


def match_to_dict(match) -> dict:
    return {
        "id": match.id,
        "home_team": match.home_team,
        "away_team": match.away_team,
        "home_goals": match.home_goals,
        "away_goals": match.away_goals,
        "home_team_odds": match.home_team_odds,
        "away_team_odds": match.away_team_odds,
        "draw_odds": match.draw_odds,
        "status": match.status.value,
        "season_code": match.season_code,
        "competition_code": match.competition_code,
        "kickoff": match.kickoff.isoformat(),
        "matchday": match.matchday,
        "winner": match.get_winner() if match.is_finished() else None,
    }


@router.post("")
async def create_match(
    match_data: MatchCreate,
    db: Session = Depends(get_session)
):
    """Import a fixture, or refresh it if it already exists."""
    try:
        match = new_season_match(**match_data.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return match_to_dict(import_match(db, match))


@router.get("/{match_id}")
async def read_match(
    match_id: str,
    db: Session = Depends(get_session)
):
    try:
        return match_to_dict(get_match(db, match_id))
    except LigainError as exc:
        raise http_error(exc)


@router.put("/{match_id}")
async def update_match(
    match_id: str,
    update: MatchUpdate,
    db: Session = Depends(get_session)
):
    """Apply a status, score or odds update and score the games it finishes."""
    try:
        match = ingest_match_update(db, match_id, **update.model_dump())
    except LigainError as exc:
        raise http_error(exc)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return match_to_dict(match)


@router.post("/competitions/{competition_code}/{season_code}/finish")
async def close_competition(
    competition_code: str,
    season_code: str,
    db: Session = Depends(get_session)
):
    """Mark a competition season as over, finishing every game played on it."""
    try:
        game_ids = finish_competition(db, competition_code, season_code)
    except LigainError as exc:
        raise http_error(exc)
    return {"competition_code": competition_code, "season_code": season_code, "finished_games": game_ids}
