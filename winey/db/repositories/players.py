from typing import Optional, Sequence

from sqlmodel import select

from winey.db.repositories.base import BaseRepository

from winey.db.models.players import Player

class PlayerRepository(BaseRepository[Player]):
    model = Player

    def list_by_game(self, game_id: str) -> Sequence[Player]:
        stmt = select(Player).where(Player.game_id == game_id).order_by(Player.created_at.asc())
        return self.session.exec(stmt).all()

    def get_in_game(self, game_id: str, player_id: str) -> Optional[Player]:
        """Le joueur seulement s'il appartient à cette partie."""
        stmt = select(Player).where(Player.id == player_id, Player.game_id == game_id)
        return self.session.exec(stmt).first()
