"""
➡️ But : Centraliser tous les paramètres configurables (nom d'app, chemin DB, règles du jeu, logs...)

Utilise pydantic-settings pour charger automatiquement les variables d'environnement (.env, variables système…).

Fournit un objet settings unique, que tu importes ailleurs :

from winey.core.config import settings
print(settings.APP_NAME)


🔹 Avantages :

Plus propre que des constantes éparpillées dans le code.

Facilite le passage entre environnements (dev / prod / test).
"""

from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # -----------------------------
    # App
    # -----------------------------
    APP_NAME: str = "Winey-Back"
    ENV: str = "dev"  # dev | prod | test
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    # -----------------------------
    # DB
    # -----------------------------
    SQLITE_PATH: str = "winey.db"  # fichier SQLite
    # Si tu veux forcer une URL différente (ex: Postgres), définis DATABASE_URL dans l'env.
    DATABASE_URL: Optional[str] = None

    # -----------------------------
    # Identifiants / tokens
    # -----------------------------
    GAME_CODE_LENGTH: int = 6
    GAME_CODE_MAX_TRIES: int = 10
    HOST_TOKEN_BYTES: int = 32

    # -----------------------------
    # Règles du jeu
    # -----------------------------
    DISPLAY_NAME_MIN: int = 3
    DISPLAY_NAME_MAX: int = 15
    MIN_NOTE_LENGTH: int = 10
    MAX_NOTE_LENGTH: int = 300
    GAMBIT_POINTS: int = 2  # par extrême trouvé (max 2 x 2)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    # -----------------------------
    # Post-process values
    # -----------------------------
    def model_post_init(self, __context): # appelée automatiquement
        # DATABASE_URL par défaut depuis SQLITE_PATH si non fourni
        if not self.DATABASE_URL:
            object.__setattr__(self, "DATABASE_URL", f"sqlite:///{self.SQLITE_PATH}")


# Instance globale importable partout
settings = Settings()
