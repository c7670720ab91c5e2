from typing import List, Sequence

from winey.db.models.players import PlayerStatus


def leaderboard(players: Sequence) -> List:
    """
    Joueurs actifs, score décroissant puis display_name croissant.

    Projection pure : Player.score est déjà le cumul maintenu par close_round / finish_game.
    """
    active = [p for p in players if p.status == PlayerStatus.ACTIVE]
    return sorted(active, key=lambda p: (-p.score, p.display_name))
