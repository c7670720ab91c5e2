from sqlmodel import Field

from winey.db.models.base import BaseModelDB

class GambitSubmission(BaseModelDB, table=True):
    __tablename__ = "gambit_submission"

    # une seule prédiction par joueur (donc par partie)
    player_id: str = Field(foreign_key="player.id", index=True, unique=True)
    game_id: str = Field(foreign_key="game.id", index=True)

    most_expensive_id: str = Field(nullable=False)
    least_expensive_id: str = Field(nullable=False)
    favorite_id: str = Field(nullable=False)  # informatif, jamais noté

    points: int = Field(default=0, nullable=False)
