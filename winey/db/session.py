"""
➡️ But : Configurer la base et gérer les sessions de base de données.

engine : connexion à la base (sqlite:///winey.db par défaut).

init_db() : crée les tables à partir des modèles SQLModel.

get_session() : dépendance FastAPI qui ouvre une session, la fournit aux routes, puis la ferme proprement.

🔹 Avantages :

Un seul endroit pour gérer les connexions DB.

Réutilisable par injection (Depends(get_session)).
"""

from typing import Dict, Any
from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.engine import Engine

# Import all models for creating all tables
from winey.db.models.games import Game
from winey.db.models.bottles import Bottle
from winey.db.models.players import Player
from winey.db.models.rounds import Round
from winey.db.models.submissions import Submission
from winey.db.models.gambit_submissions import GambitSubmission

from winey.core.config import settings

def _build_engine() -> Engine:
    url = settings.DATABASE_URL
    assert url, "DATABASE_URL must be set"

    is_sqlite = url.startswith("sqlite:")

    connect_args: Dict[str, Any] = {}
    if is_sqlite:
        # Requis pour SQLite quand utilisé dans un app serveur (multi-threads)
        connect_args["check_same_thread"] = False

    # echo seulement en dev pour ne pas polluer les logs en prod
    engine = create_engine(
        url,
        echo=(settings.ENV == "dev"),
        connect_args=connect_args,
        pool_pre_ping=not is_sqlite,  # ping utile pour Postgres/MySQL ; inutile pour SQLite
    )
    return engine

engine: Engine = _build_engine()

def init_db(bind: Engine = engine) -> None:
    """
    Crée les tables si elles n'existent pas (usage dev/demo).
    En prod avec Alembic, préfère des migrations.
    """
    SQLModel.metadata.create_all(bind)


def get_session():
    """
    Dépendance FastAPI : fournit une session par requête.
    Chaque opération de service = une transaction (commit unique en fin d'opération) ;
    si une erreur remonte avant le commit, la fermeture de session annule tout.
    """
    with Session(engine) as session:
        yield session
