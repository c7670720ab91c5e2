from typing import Sequence

from sqlmodel import select

from winey.db.repositories.base import BaseRepository

from winey.db.models.bottles import Bottle

class BottleRepository(BaseRepository[Bottle]):
    model = Bottle

    def list_by_game(self, game_id: str) -> Sequence[Bottle]:
        stmt = select(Bottle).where(Bottle.game_id == game_id).order_by(Bottle.order_index.asc())
        return self.session.exec(stmt).all()

    def list_by_ids(self, ids: Sequence[str]) -> Sequence[Bottle]:
        if not ids:
            return []
        stmt = select(Bottle).where(Bottle.id.in_(list(ids)))
        return self.session.exec(stmt).all()
