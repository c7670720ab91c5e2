from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from winey.db.models.games import GameStatus
from winey.db.models.players import PlayerStatus


# -----------------------------
# Helpers prix
# -----------------------------

def to_minor_units(price: float) -> int:
    """12.5 -> 1250 (stockage en centimes)."""
    return int(round(price * 100))


def from_minor_units(cents: int) -> float:
    return cents / 100


# -----------------------------
# Game creation / join
# -----------------------------

class GameCreateIn(BaseModel):
    # longueur vérifiée par le service (ValidationError métier)
    host_display_name: str = Field(examples=["Sophie"])


class JoinGameIn(BaseModel):
    # absent => spectateur (aucun joueur créé)
    display_name: Optional[str] = Field(default=None, examples=["Marco"])


class GameConfigIn(BaseModel):
    host_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    host_email: Optional[str] = Field(default=None, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    max_players: int = Field(ge=10, le=22)
    total_bottles: int = Field(ge=9, le=20)
    total_rounds: int = Field(ge=3, le=5)
    bottles_per_round: int = Field(ge=3, le=4)
    bottle_eq_per_person: float = Field(ge=0.1, le=1.0)
    oz_per_person_per_bottle: float = Field(ge=1.0, le=3.0)


# -----------------------------
# Bottles
# -----------------------------

class BottleIn(BaseModel):
    label_name: str = Field(min_length=1, max_length=60)
    fun_name: Optional[str] = Field(default=None, max_length=40)
    price: float = Field(gt=0, description="Prix en unités majeures (ex: 24.90)")
    round_index: Optional[int] = Field(default=None, ge=0)


class BottlesIn(BaseModel):
    bottles: List[BottleIn] = Field(min_length=1, max_length=20)


class RoundAssignmentIn(BaseModel):
    round_index: int = Field(ge=0)
    bottle_ids: List[str]


class OrganizeRoundsIn(BaseModel):
    """Liste vide => toutes les affectations sont effacées (auto-répartition au start)."""
    rounds: List[RoundAssignmentIn]


# -----------------------------
# Rounds / submissions
# -----------------------------

class SubmitTastingIn(BaseModel):
    tasting_notes: Dict[str, str]
    ranking: List[str]
    # False => brouillon modifiable, True => verrouillé définitivement
    lock: bool = True


class GambitIn(BaseModel):
    most_expensive_id: str
    least_expensive_id: str
    favorite_id: str


# -----------------------------
# Outputs
# -----------------------------

class GameOut(BaseModel):
    id: str
    status: GameStatus
    current_round: int
    host_name: Optional[str] = None
    max_players: Optional[int] = None
    total_bottles: Optional[int] = None
    total_rounds: Optional[int] = None
    bottles_per_round: Optional[int] = None
    bottle_eq_per_person: Optional[float] = None
    oz_per_person_per_bottle: Optional[float] = None

    model_config = {"from_attributes": True}


class PlayerOut(BaseModel):
    id: str
    display_name: str
    score: int
    is_host: bool
    status: PlayerStatus

    model_config = {"from_attributes": True}


class GameCreateOut(BaseModel):
    game: GameOut
    host_token: str
    host_player_id: str


class JoinGameOut(BaseModel):
    player: Optional[PlayerOut] = None
    spectator: bool = False
    player_count: int


class BottleOut(BaseModel):
    id: str
    label_name: str
    fun_name: Optional[str] = None
    # None tant que le prix est caché au demandeur
    price: Optional[float] = None
    round_index: Optional[int] = None
    order_index: int

    @classmethod
    def from_entity(cls, bottle, *, show_price: bool) -> "BottleOut":
        return cls(
            id=bottle.id,
            label_name=bottle.label_name,
            fun_name=bottle.fun_name,
            price=from_minor_units(bottle.price) if show_price else None,
            round_index=bottle.round_index,
            order_index=bottle.order_index,
        )


class RoundOut(BaseModel):
    id: str
    index: int
    bottle_ids: List[str]
    revealed: bool

    model_config = {"from_attributes": True}


class SubmissionOut(BaseModel):
    id: str
    player_id: str
    round_index: int
    tasting_notes: Dict[str, str]
    ranking: List[str]
    locked: bool
    points: int

    model_config = {"from_attributes": True}


class GambitSubmissionOut(BaseModel):
    id: str
    player_id: str
    most_expensive_id: str
    least_expensive_id: str
    favorite_id: str
    points: int

    model_config = {"from_attributes": True}


class CloseRoundOut(BaseModel):
    round_index: int
    correct_order: List[str]


class GameStateOut(BaseModel):
    game: GameOut
    players: List[PlayerOut]
    bottles: List[BottleOut]
    rounds: List[RoundOut]


class RoundViewOut(BaseModel):
    round: RoundOut
    bottles: List[BottleOut]
    # présents seulement une fois le round révélé
    correct_order: Optional[List[str]] = None
    submissions: List[SubmissionOut] = []
    submitted_player_ids: List[str] = []


class LeaderboardEntryOut(BaseModel):
    player_id: str
    display_name: str
    score: int
    round_points: List[int]
    gambit_points: int


class LeaderboardOut(BaseModel):
    leaderboard: List[LeaderboardEntryOut]
    current_round: int
    total_rounds: Optional[int] = None


class SetupOptionOut(BaseModel):
    id: str
    label: str
    players: int
    bottles: int
    rounds: int
    bottles_per_round: int
    bottle_eq_per_person: float
    oz_per_person_per_bottle: float


class SetupsOut(BaseModel):
    player_counts: List[int]
    options: List[SetupOptionOut]
