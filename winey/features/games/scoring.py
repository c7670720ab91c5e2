from typing import List, Sequence


def correct_order(bottles: Sequence) -> List[str]:
    """
    Ordre de référence d'un round : prix décroissant.
    Les prix sont uniques (validation du setup) ; l'id ne sert qu'à rendre le tri total.
    """
    return [b.id for b in sorted(bottles, key=lambda b: (-b.price, b.id))]


def score(correct: Sequence[str], ranking: Sequence[str]) -> int:
    """
    Nombre de positions exactes : +1 quand ranking[i] == correct[i].

    Pas de crédit partiel pour une bouteille "presque" bien placée.
    Fonction totale : un classement mal formé est refusé en amont (soumission),
    pas ici.
    """
    return sum(1 for expected, given in zip(correct, ranking) if expected == given)
