from typing import Optional, Sequence

from sqlmodel import select

from winey.db.repositories.base import BaseRepository

from winey.db.models.rounds import Round

class RoundRepository(BaseRepository[Round]):
    model = Round

    def list_by_game(self, game_id: str) -> Sequence[Round]:
        stmt = select(Round).where(Round.game_id == game_id).order_by(Round.index.asc())
        return self.session.exec(stmt).all()

    def get_by_index(self, game_id: str, index: int) -> Optional[Round]:
        stmt = select(Round).where(Round.game_id == game_id, Round.index == index)
        return self.session.exec(stmt).first()
