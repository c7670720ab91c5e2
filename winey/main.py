"""
➡️ But : assembler toutes les pièces du puzzle.

Crée l'instance FastAPI (app), configure le logging, CORS, le schéma OpenAPI,
inclut les routers (/api/v1/games) et initialise la base au démarrage.

Point unique d'exécution : uvicorn winey.main:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from winey.core.config import settings
from winey.core.logging import configure_logging
from winey.core.openapi import custom_openapi
from winey.db.session import init_db

from winey.api.v1.routers import games

import uvicorn

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version="0.0.1",
    openapi_tags=[
        {"name": "games", "description": "Parties, bouteilles, rounds, gambit et classement"},
    ],
)

# CORS (ajustez selon vos besoins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS, allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)

# Routers
app.include_router(games.router, prefix="/api/v1")

app.openapi = lambda: custom_openapi(app)

# Démarrage
@app.on_event("startup")
def on_startup():
    init_db()
    logger.info(f"[startup] {settings.APP_NAME} env={settings.ENV} db={settings.DATABASE_URL}")

if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8080, reload=(settings.ENV == "dev")) # http://localhost:8080
