from enum import Enum

from sqlmodel import Field

from winey.db.models.base import BaseModelDB


class PlayerStatus(str, Enum):
    ACTIVE = "active"
    KICKED = "kicked"


class Player(BaseModelDB, table=True):
    game_id: str = Field(foreign_key="game.id", index=True)

    display_name: str = Field(nullable=False)
    score: int = Field(default=0, nullable=False)
    is_host: bool = Field(default=False, nullable=False)
    status: PlayerStatus = Field(default=PlayerStatus.ACTIVE, nullable=False)
