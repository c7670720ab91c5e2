"""
➡️ But : Personnaliser la documentation Swagger/OpenAPI.

custom_openapi(app) complète le schéma généré par FastAPI avec les conventions
du jeu (authentification hôte, identité joueur, format des erreurs).
"""

from fastapi.openapi.utils import get_openapi


def custom_openapi(app):
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=(
            "API de dégustation à l'aveugle : l'hôte prépare les bouteilles, "
            "les joueurs classent chaque round du plus cher au moins cher.\n\n"
            "### Conventions\n"
            "- Actions hôte : `Authorization: Bearer <host_token>` (renvoyé à la création).\n"
            "- Actions joueur : en-tête `X-Player-Id`.\n"
            "- Prix exprimés en unités majeures (ex: 24.90), cachés jusqu'à la révélation.\n"
            "- Erreurs : `detail = {code, message}` ; validation (422) : `detail = {code, errors: [...]}`.\n"
            "- Index de round à partir de 0 dans les URLs.\n"
        ),
        routes=app.routes,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema
