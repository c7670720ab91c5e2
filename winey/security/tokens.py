import secrets
import string
from typing import Optional

from winey.core.config import settings

# ==========================================================
# 🧩 Génération des identifiants
# ==========================================================

GAME_CODE_ALPHABET = string.ascii_uppercase + string.digits


def new_id() -> str:
    """Identifiant opaque d'entité (bouteille, joueur, round, soumission)."""
    return secrets.token_hex(16)


def new_game_code(length: int = settings.GAME_CODE_LENGTH) -> str:
    """
    Code de partie court, partageable à l'oral.
    Exemple: K7Q2ZD
    """
    return "".join(secrets.choice(GAME_CODE_ALPHABET) for _ in range(length))


# ==========================================================
# 🎟️ Token hôte
# ==========================================================

def new_host_token(n_bytes: int = settings.HOST_TOKEN_BYTES) -> str:
    """Secret opaque qui autorise les actions de l'hôte (Authorization: Bearer ...)."""
    return secrets.token_hex(n_bytes)


def tokens_match(expected: str, provided: Optional[str]) -> bool:
    """Comparaison en temps constant ; un token absent ne matche jamais."""
    if not provided or not expected:
        return False
    return secrets.compare_digest(expected.encode(), provided.encode())
