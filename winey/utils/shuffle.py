"""
➡️ But : Mélange déterministe d'une liste, graine = identifiant de partie.

Sert à l'auto-répartition des bouteilles dans les rounds : même partie => même répartition,
ce qui rend start_game rejouable à l'identique.

PRNG explicite (Park–Miller, "minimal standard") plutôt que random.shuffle :
le résultat ne dépend pas de la version de Python.
"""

import hashlib
from typing import List, Sequence, TypeVar

T = TypeVar("T")

MODULUS = 2_147_483_647  # 2^31 - 1
MULTIPLIER = 16_807


def seed_from(key: str) -> int:
    """Graine dans [1, MODULUS - 1] dérivée d'un SHA-256 de la clé."""
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    seed = int.from_bytes(digest[:8], "big") % MODULUS
    return seed or 1


class SeededRandom:
    """Générateur congruentiel linéaire (Lehmer)."""

    def __init__(self, key: str):
        self.state = seed_from(key)

    def next_int(self) -> int:
        self.state = (self.state * MULTIPLIER) % MODULUS
        return self.state

    def below(self, n: int) -> int:
        """Entier dans [0, n)."""
        return (self.next_int() * n) // MODULUS


def deterministic_shuffle(items: Sequence[T], key: str) -> List[T]:
    """Fisher–Yates piloté par SeededRandom(key). Ne modifie pas `items`."""
    arr = list(items)
    rng = SeededRandom(key)
    for i in range(len(arr) - 1, 0, -1):
        j = rng.below(i + 1)
        arr[i], arr[j] = arr[j], arr[i]
    return arr


def chunk(items: Sequence[T], size: int) -> List[List[T]]:
    """Découpe en groupes consécutifs de `size` éléments."""
    return [list(items[i:i + size]) for i in range(0, len(items), size)]
