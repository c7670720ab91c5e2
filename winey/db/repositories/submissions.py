from typing import Optional, Sequence

from sqlmodel import select

from winey.db.repositories.base import BaseRepository

from winey.db.models.submissions import Submission

class SubmissionRepository(BaseRepository[Submission]):
    model = Submission

    def list_by_game(self, game_id: str) -> Sequence[Submission]:
        stmt = (
            select(Submission)
            .where(Submission.game_id == game_id)
            .order_by(Submission.round_index.asc(), Submission.created_at.asc())
        )
        return self.session.exec(stmt).all()

    def list_by_round(self, game_id: str, round_index: int) -> Sequence[Submission]:
        stmt = (
            select(Submission)
            .where(Submission.game_id == game_id, Submission.round_index == round_index)
            .order_by(Submission.created_at.asc())
        )
        return self.session.exec(stmt).all()

    def get_for_player_round(self, player_id: str, round_index: int) -> Optional[Submission]:
        stmt = select(Submission).where(
            Submission.player_id == player_id,
            Submission.round_index == round_index,
        )
        return self.session.exec(stmt).first()
