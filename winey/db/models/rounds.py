from typing import List

from sqlmodel import Field
from sqlalchemy import JSON, Column, UniqueConstraint

from winey.db.models.base import BaseModelDB

class Round(BaseModelDB, table=True):
    __table_args__ = (
        UniqueConstraint("game_id", "index", name="uq_rounds_game_index"),
    )

    game_id: str = Field(foreign_key="game.id", index=True)
    index: int = Field(nullable=False)  # 0-based
    bottle_ids: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    revealed: bool = Field(default=False, nullable=False)
