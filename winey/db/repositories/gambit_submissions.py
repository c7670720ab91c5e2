from typing import Optional, Sequence

from sqlmodel import select

from winey.db.repositories.base import BaseRepository

from winey.db.models.gambit_submissions import GambitSubmission

class GambitSubmissionRepository(BaseRepository[GambitSubmission]):
    model = GambitSubmission

    def list_by_game(self, game_id: str) -> Sequence[GambitSubmission]:
        stmt = (
            select(GambitSubmission)
            .where(GambitSubmission.game_id == game_id)
            .order_by(GambitSubmission.created_at.asc())
        )
        return self.session.exec(stmt).all()

    def get_for_player(self, player_id: str) -> Optional[GambitSubmission]:
        stmt = select(GambitSubmission).where(GambitSubmission.player_id == player_id)
        return self.session.exec(stmt).first()
