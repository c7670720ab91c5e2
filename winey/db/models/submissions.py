from typing import Dict, List

from sqlmodel import Field
from sqlalchemy import JSON, Column, UniqueConstraint

from winey.db.models.base import BaseModelDB

class Submission(BaseModelDB, table=True):
    __table_args__ = (
        UniqueConstraint("player_id", "round_index", name="uq_submissions_player_round"),
    )

    player_id: str = Field(foreign_key="player.id", index=True)
    game_id: str = Field(foreign_key="game.id", index=True)
    round_index: int = Field(nullable=False)

    # bottle_id -> note libre
    tasting_notes: Dict[str, str] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    # bottle_ids du plus cher au moins cher (selon le joueur)
    ranking: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    locked: bool = Field(default=False, nullable=False)
    points: int = Field(default=0, nullable=False)
