"""
➡️ But : Règles de validité du setup (bouteilles + répartition en rounds).

Fonctions pures, sans accès DB : elles reçoivent des bouteilles (tout objet avec
id / label_name / price / round_index) et renvoient la liste COMPLÈTE des violations.
Le service décide ensuite de lever ValidationError.

🔹 Avantages :

Testables sans base.

Réutilisées par organize_rounds et start_game (mêmes règles, mêmes messages).
"""

from collections import Counter, defaultdict
from typing import Dict, List, Optional, Sequence

from winey.core.errors import Violation


def _norm_label(label: Optional[str]) -> str:
    return (label or "").strip().lower()


def validate_bottle_set(bottles: Sequence) -> List[Violation]:
    """
    - étiquette non vide
    - étiquette unique (insensible à la casse, espaces ignorés)
    - prix > 0
    - prix unique
    """
    violations: List[Violation] = []

    for b in bottles:
        if not _norm_label(b.label_name):
            violations.append(Violation("LABEL_EMPTY", "A bottle has an empty label name"))
        if b.price is None or b.price <= 0:
            violations.append(
                Violation("PRICE_NOT_POSITIVE", f"Bottle '{b.label_name}' must have a positive price", label=b.label_name)
            )

    labels = Counter(_norm_label(b.label_name) for b in bottles if _norm_label(b.label_name))
    for b in bottles:
        key = _norm_label(b.label_name)
        if labels.get(key, 0) > 1:
            violations.append(
                Violation("DUPLICATE_LABEL", f"Label '{b.label_name.strip()}' is used more than once", label=b.label_name)
            )
            labels[key] = 0  # une seule violation par étiquette

    prices = Counter(b.price for b in bottles if b.price is not None and b.price > 0)
    for b in bottles:
        if prices.get(b.price, 0) > 1:
            same = [o.label_name for o in bottles if o.price == b.price]
            violations.append(
                Violation(
                    "DUPLICATE_PRICE",
                    f"Bottles {', '.join(repr(s) for s in same)} share the same price",
                    label=b.label_name,
                )
            )
            prices[b.price] = 0

    return violations


def validate_bottle_count(bottles: Sequence, total_bottles: int) -> List[Violation]:
    if len(bottles) != total_bottles:
        return [
            Violation(
                "BOTTLE_COUNT_MISMATCH",
                f"Expected {total_bottles} bottles, found {len(bottles)}",
            )
        ]
    return []


def validate_round_assignment(
    bottles: Sequence,
    total_rounds: int,
    bottles_per_round: int,
    assignment: Optional[Dict[int, Sequence[str]]] = None,
) -> List[Violation]:
    """
    Vérifie une répartition bouteilles -> rounds.

    - `assignment` absent : on lit bottle.round_index (état stocké)
    - `assignment` fourni : {round_index: [bottle_id, ...]} tel qu'envoyé par le client

    Règles :
    - aucune bouteille assignée = répartition vide, valide (auto-assignation plus tard)
    - sinon toutes assignées, index dans [0, total_rounds)
    - chaque round contient exactement bottles_per_round bouteilles
    - une bouteille n'apparaît qu'une fois, et appartient à la partie
    """
    violations: List[Violation] = []
    by_id = {b.id: b for b in bottles}

    if assignment is None:
        rounds_of: Dict[str, List[int]] = {
            b.id: [b.round_index] for b in bottles if b.round_index is not None
        }
    else:
        rounds_of = defaultdict(list)
        for round_index, bottle_ids in assignment.items():
            for bottle_id in bottle_ids:
                if bottle_id not in by_id:
                    violations.append(
                        Violation(
                            "UNKNOWN_BOTTLE",
                            f"Bottle id '{bottle_id}' does not belong to this game",
                            round=round_index + 1,
                        )
                    )
                    continue
                rounds_of[bottle_id].append(round_index)

    if not rounds_of and not violations:
        return []

    for bottle_id, idxs in rounds_of.items():
        label = by_id[bottle_id].label_name
        if len(idxs) > 1:
            violations.append(
                Violation(
                    "BOTTLE_ASSIGNED_TWICE",
                    f"Bottle '{label}' is assigned more than once (rounds {', '.join(str(i + 1) for i in idxs)})",
                    label=label,
                )
            )
        for i in idxs:
            if i < 0 or i >= total_rounds:
                violations.append(
                    Violation(
                        "ROUND_OUT_OF_RANGE",
                        f"Bottle '{label}' is assigned to round {i + 1}, only {total_rounds} rounds exist",
                        label=label,
                        round=i + 1,
                    )
                )

    for b in bottles:
        if b.id not in rounds_of:
            violations.append(
                Violation("BOTTLE_UNASSIGNED", f"Bottle '{b.label_name}' is not assigned to a round", label=b.label_name)
            )

    counts = Counter(i for idxs in rounds_of.values() for i in idxs)
    for i in range(total_rounds):
        if counts.get(i, 0) != bottles_per_round:
            violations.append(
                Violation(
                    "ROUND_SIZE_MISMATCH",
                    f"Round {i + 1} has {counts.get(i, 0)} bottles, expected {bottles_per_round}",
                    round=i + 1,
                )
            )

    return violations
