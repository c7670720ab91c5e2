"""
Configurations recommandées (joueurs, bouteilles, rounds...) proposées à l'hôte.

Chaque ligne : (joueurs, bouteilles, rounds, bouteilles/round, équivalent bouteille/personne, oz/personne/bouteille)
"""

from typing import Dict, List, Tuple

from winey.features.games.schemas import SetupOptionOut

SetupRow = Tuple[int, int, int, int, float, float]

WINEY_SETUPS: List[SetupRow] = [
    (22, 20, 5, 4, 0.91, 1.15),
    (20, 20, 5, 4, 1.0, 1.27),
    (20, 16, 4, 4, 0.8, 1.27),
    (20, 15, 5, 3, 0.75, 1.27),
    (20, 12, 4, 3, 0.6, 1.27),
    (20, 12, 3, 4, 0.6, 1.27),
    (20, 9, 3, 3, 0.45, 1.27),
    (18, 16, 4, 4, 0.89, 1.41),
    (16, 16, 4, 4, 1.0, 1.58),
    (16, 15, 5, 3, 0.94, 1.58),
    (16, 12, 4, 3, 0.75, 1.58),
    (16, 12, 3, 4, 0.75, 1.58),
    (16, 9, 3, 3, 0.56, 1.58),
    (14, 12, 4, 3, 0.86, 1.81),
    (14, 12, 3, 4, 0.86, 1.81),
    (12, 12, 3, 4, 1.0, 2.11),
    (12, 12, 4, 3, 1.0, 2.11),
    (12, 9, 3, 3, 0.75, 2.11),
    (10, 9, 3, 3, 0.9, 2.54),
]


def _to_option(row: SetupRow, option_id: str, label: str) -> SetupOptionOut:
    players, bottles, rounds, per_round, eq, oz = row
    return SetupOptionOut(
        id=option_id,
        label=label,
        players=players,
        bottles=bottles,
        rounds=rounds,
        bottles_per_round=per_round,
        bottle_eq_per_person=eq,
        oz_per_person_per_bottle=oz,
    )


def player_counts() -> List[int]:
    """Nombres de joueurs disponibles, décroissant."""
    return sorted({row[0] for row in WINEY_SETUPS}, reverse=True)


def bottle_options(players: int) -> List[SetupOptionOut]:
    """
    Une option par nombre de bouteilles pour `players` joueurs ;
    à nombre de bouteilles égal, on garde celle qui a le plus de rounds.
    """
    best: Dict[int, Tuple[int, SetupRow]] = {}
    rows = [row for row in WINEY_SETUPS if row[0] == players]
    for index, row in enumerate(rows):
        bottles = row[1]
        if bottles not in best or best[bottles][1][2] < row[2]:
            best[bottles] = (index, row)

    options = [
        _to_option(row, f"option-{players}-{row[1]}-{index}", f"{row[1]} bottles ({row[2]} rounds)")
        for index, row in best.values()
    ]
    return sorted(options, key=lambda o: o.bottles, reverse=True)


def round_options(players: int, bottles: int) -> List[SetupOptionOut]:
    """Toutes les répartitions en rounds pour (players, bottles), plus de rounds d'abord."""
    rows = [row for row in WINEY_SETUPS if row[0] == players and row[1] == bottles]
    options = [
        _to_option(row, f"round-{players}-{bottles}-{index}", f"{row[2]} rounds ({row[3]} bottles/round)")
        for index, row in enumerate(rows)
    ]
    return sorted(options, key=lambda o: o.rounds, reverse=True)
