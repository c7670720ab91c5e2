from typing import List, Sequence, Tuple

from winey.core.config import settings
from winey.core.errors import Violation


def extremes(bottles: Sequence) -> Tuple[str, str]:
    """(id le plus cher, id le moins cher) sur toutes les bouteilles de la partie."""
    most = min(bottles, key=lambda b: (-b.price, b.id))
    least = min(bottles, key=lambda b: (b.price, b.id))
    return most.id, least.id


def validate_prediction(
    bottle_ids: Sequence[str],
    most_expensive_id: str,
    least_expensive_id: str,
    favorite_id: str,
) -> List[Violation]:
    violations: List[Violation] = []
    if most_expensive_id == least_expensive_id:
        violations.append(
            Violation("SAME_BOTTLE", "Most and least expensive cannot be the same bottle")
        )
    known = set(bottle_ids)
    for field, value in (
        ("most_expensive", most_expensive_id),
        ("least_expensive", least_expensive_id),
        ("favorite", favorite_id),
    ):
        if value not in known:
            violations.append(
                Violation("UNKNOWN_BOTTLE", f"{field}: bottle id '{value}' does not belong to this game")
            )
    return violations


def score_gambit(bottles: Sequence, submission) -> int:
    """+2 par extrême trouvé (max 4). Le favori n'est jamais noté."""
    if not bottles:
        return 0
    most, least = extremes(bottles)
    points = 0
    if submission.most_expensive_id == most:
        points += settings.GAMBIT_POINTS
    if submission.least_expensive_id == least:
        points += settings.GAMBIT_POINTS
    return points
