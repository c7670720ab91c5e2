from typing import Optional

from sqlmodel import select

from winey.db.repositories.base import BaseRepository

from winey.db.models.games import Game

class GameRepository(BaseRepository[Game]):
    model = Game

    def get_for_update(self, game_id: str) -> Optional[Game]:
        """
        Charge la partie en verrouillant la ligne (SELECT ... FOR UPDATE).
        Toutes les mutations d'une même partie se sérialisent derrière ce verrou.
        (SQLite ignore la clause : les écritures y sont déjà sérialisées.)
        """
        stmt = select(Game).where(Game.id == game_id).with_for_update()
        return self.session.exec(stmt).first()
