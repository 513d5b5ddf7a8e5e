from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Protocol

from sqlmodel import SQLModel, Field


class Player(Protocol):
    """The only player fields the game rules need."""

    id: str
    name: str


@dataclass(frozen=True)
class SimplePlayer:
    id: str
    name: str


class PlayerRecord(SQLModel, table=True):
    __tablename__ = "players"

    id: str = Field(primary_key=True)
    name: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def to_simple_player(self) -> SimplePlayer:
        return SimplePlayer(id=self.id, name=self.name)


class GamePlayer(SQLModel, table=True):
    __tablename__ = "game_players"

    game_id: str = Field(foreign_key="games.id", primary_key=True)
    player_id: str = Field(foreign_key="players.id", primary_key=True)
    joined_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
