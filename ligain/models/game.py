from datetime import datetime, UTC
from enum import Enum

from sqlmodel import SQLModel, Field


class GameStatus(str, Enum):
    NOT_STARTED = "not started"
    IN_PROGRESS = "in progress"
    FINISHED = "finished"


class GameRecord(SQLModel, table=True):
    __tablename__ = "games"

    id: str = Field(primary_key=True)
    name: str
    season_code: str = Field(index=True)
    competition_code: str = Field(index=True)
    status: GameStatus = Field(default=GameStatus.IN_PROGRESS)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
