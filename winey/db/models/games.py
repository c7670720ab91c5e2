from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlmodel import Field

from winey.db.models.base import BaseModelDB


class GameStatus(str, Enum):
    SETUP = "setup"
    LOBBY = "lobby"
    IN_ROUND = "in_round"
    REVEAL = "reveal"
    GAMBIT = "gambit"
    FINAL = "final"


@dataclass(frozen=True)
class GameConfig:
    """Configuration complète d'une partie (les 6 champs sont posés ensemble)."""
    max_players: int
    total_bottles: int
    total_rounds: int
    bottles_per_round: int
    bottle_eq_per_person: float
    oz_per_person_per_bottle: float


class Game(BaseModelDB, table=True):
    # id = code de partie partageable (ex: K7Q2ZD)
    status: GameStatus = Field(default=GameStatus.SETUP, nullable=False)
    current_round: int = Field(default=0, nullable=False)  # 0 = pas commencé, sinon 1-based
    host_token: str = Field(nullable=False)

    host_name: Optional[str] = None
    host_email: Optional[str] = None

    # configuration : tout à None tant que le setup n'est pas fait
    max_players: Optional[int] = None
    total_bottles: Optional[int] = None
    total_rounds: Optional[int] = None
    bottles_per_round: Optional[int] = None
    bottle_eq_per_person: Optional[float] = None
    oz_per_person_per_bottle: Optional[float] = None

    @property
    def config(self) -> Optional[GameConfig]:
        """None (non configurée) ou GameConfig ; jamais de configuration partielle."""
        values = (
            self.max_players,
            self.total_bottles,
            self.total_rounds,
            self.bottles_per_round,
            self.bottle_eq_per_person,
            self.oz_per_person_per_bottle,
        )
        if any(v is None for v in values):
            return None
        return GameConfig(*values)
