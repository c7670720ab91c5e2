"""
➡️ But : Définir les erreurs métier du jeu, indépendantes du web.

Les services lèvent ces exceptions ; les routers les traduisent en HTTPException.

🔹 Avantages :

Les services restent testables sans FastAPI.

Un seul endroit pour savoir quelles erreurs existent.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class Violation:
    """
    Une règle violée, avec assez de contexte pour un message utilisateur.
    - label : étiquette de la bouteille concernée (si applicable)
    - round : numéro de round 1-based (si applicable)
    """
    code: str
    message: str
    label: Optional[str] = None
    round: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


class GameError(Exception):
    """Erreur métier de base : porte un code machine."""

    def __init__(self, code: str, message: Optional[str] = None):
        super().__init__(message or code)
        self.code = code


class NotFoundError(GameError, LookupError):
    """Partie / round / joueur inconnu."""
    pass


class UnauthorizedError(GameError):
    """Token hôte invalide (ou joueur exclu)."""
    pass


class InvalidStateError(GameError):
    """Opération interdite dans la phase courante."""
    pass


class AlreadySubmittedError(GameError):
    """Soumission déjà verrouillée."""
    pass


class ConflictError(GameError):
    """Conflit métier (bouteilles déjà saisies, partie pleine, code déjà pris...)."""
    pass


class ValidationError(GameError, ValueError):
    """Entrée incohérente : porte TOUTES les violations, pas seulement la première."""

    def __init__(self, violations: Sequence[Violation], code: str = "VALIDATION_FAILED"):
        self.violations: List[Violation] = list(violations)
        super().__init__(code, "; ".join(v.message for v in self.violations) or code)

    def to_list(self) -> List[Dict[str, Any]]:
        return [v.to_dict() for v in self.violations]
