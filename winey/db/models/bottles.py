from typing import Optional

from sqlmodel import Field

from winey.db.models.base import BaseModelDB


class Bottle(BaseModelDB, table=True):
    game_id: str = Field(foreign_key="game.id", index=True)

    label_name: str = Field(nullable=False)
    fun_name: Optional[str] = None
    price: int = Field(nullable=False)  # unités mineures (centimes)

    # None tant que la bouteille n'est pas rangée dans un round
    round_index: Optional[int] = Field(default=None)
    order_index: int = Field(nullable=False)  # ordre de saisie
