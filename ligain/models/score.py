from datetime import datetime, UTC
from typing import Optional

from sqlmodel import SQLModel, Field, UniqueConstraint


class ScoreRecord(SQLModel, table=True):
    __tablename__ = "scores"
    __table_args__ = (UniqueConstraint("game_id", "match_id", "player_id", name="unique_game_match_player_score"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    game_id: str = Field(foreign_key="games.id", index=True)
    match_id: str = Field(foreign_key="matches.id", index=True)
    player_id: str = Field(foreign_key="players.id", index=True)
    points: int = Field(default=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
