"""
➡️ But : Centraliser les dépendances réutilisables des routes.

get_game_service() : crée un GameService (et ses repositories) à partir d'une session DB.

get_host_token() / get_optional_host_token() : jeton hôte via `Authorization: Bearer <token>`.

get_player_id() : identité joueur via l'en-tête `X-Player-Id`.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from winey.db.session import get_session

from winey.db.repositories.games import GameRepository
from winey.db.repositories.bottles import BottleRepository
from winey.db.repositories.players import PlayerRepository
from winey.db.repositories.rounds import RoundRepository
from winey.db.repositories.submissions import SubmissionRepository
from winey.db.repositories.gambit_submissions import GambitSubmissionRepository

from winey.features.games.services import GameService


# -----------------------------
# Games
# -----------------------------
def get_game_service(session: Session = Depends(get_session)) -> GameService:
    return GameService(
        session,
        GameRepository(session),
        BottleRepository(session),
        PlayerRepository(session),
        RoundRepository(session),
        SubmissionRepository(session),
        GambitSubmissionRepository(session),
    )


# -----------------------------
# Identité (hôte / joueur)
# -----------------------------
# auto_error=False : un jeton absent est traité par le service (403), comme un jeton faux
bearer_scheme = HTTPBearer(auto_error=False)


def get_optional_host_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> Optional[str]:
    if not credentials:
        return None
    if credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth scheme")
    return credentials.credentials


def get_host_token(token: Optional[str] = Depends(get_optional_host_token)) -> str:
    return token or ""


def get_player_id(
    x_player_id: str = Header(..., alias="X-Player-Id", min_length=1),
) -> str:
    return x_player_id
