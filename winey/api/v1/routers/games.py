from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from winey.api.v1.dependencies import (
    get_game_service,
    get_host_token,
    get_optional_host_token,
    get_player_id,
)
from winey.core.errors import (
    AlreadySubmittedError,
    ConflictError,
    GameError,
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from winey.features.games import setups
from winey.features.games.schemas import (
    BottleOut,
    BottlesIn,
    CloseRoundOut,
    GambitIn,
    GambitSubmissionOut,
    GameConfigIn,
    GameCreateIn,
    GameCreateOut,
    GameOut,
    GameStateOut,
    JoinGameIn,
    JoinGameOut,
    LeaderboardOut,
    OrganizeRoundsIn,
    PlayerOut,
    RoundOut,
    RoundViewOut,
    SetupsOut,
    SubmissionOut,
    SubmitTastingIn,
)
from winey.features.games.services import GameService


router = APIRouter(
    prefix="/games",
    tags=["games"],
    responses={404: {"description": "Not Found"}},
)

# -------- Helpers --------

_STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (UnauthorizedError, status.HTTP_403_FORBIDDEN),
    (AlreadySubmittedError, status.HTTP_409_CONFLICT),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (ConflictError, status.HTTP_409_CONFLICT),
)


def _http_error(exc: GameError) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"code": exc.code, "errors": exc.to_list()},
        )
    for cls, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return HTTPException(status_code=status_code, detail={"code": exc.code, "message": str(exc)})
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"code": exc.code, "message": str(exc)})


def _bottles_out(bottles) -> List[BottleOut]:
    # routes hôte uniquement : prix visibles
    return [BottleOut.from_entity(b, show_price=True) for b in bottles]


# -----------------------------
# Catalogue (public)
# -----------------------------
@router.get(
    "/setups",
    summary="Configurations recommandées (joueurs / bouteilles / rounds)",
    response_model=SetupsOut,
)
def list_setups(
    players: Optional[int] = Query(None, ge=1),
    bottles: Optional[int] = Query(None, ge=1),
):
    if players is not None and bottles is not None:
        options = setups.round_options(players, bottles)
    elif players is not None:
        options = setups.bottle_options(players)
    else:
        options = []
    return SetupsOut(player_counts=setups.player_counts(), options=options)

# -----------------------------
# Create / join
# -----------------------------
@router.post(
    "",
    summary="Créer une partie (renvoie le jeton hôte)",
    status_code=status.HTTP_201_CREATED,
    response_model=GameCreateOut,
)
def create_game(
    payload: GameCreateIn,
    svc: GameService = Depends(get_game_service),
):
    try:
        game, host = svc.create_game(payload.host_display_name)
    except GameError as e:
        raise _http_error(e)
    return GameCreateOut(game=GameOut.model_validate(game), host_token=game.host_token, host_player_id=host.id)


@router.post(
    "/{game_id}/join",
    summary="Rejoindre une partie (sans nom : spectateur)",
    response_model=JoinGameOut,
)
def join_game(
    payload: JoinGameIn,
    game_id: str = Path(..., min_length=1, max_length=32),
    svc: GameService = Depends(get_game_service),
):
    try:
        player, count = svc.join_game(game_id, payload.display_name)
    except GameError as e:
        raise _http_error(e)
    if player is None:
        return JoinGameOut(player=None, spectator=True, player_count=count)
    return JoinGameOut(player=PlayerOut.model_validate(player), spectator=False, player_count=count)


@router.post(
    "/{game_id}/players/{player_id}/kick",
    summary="Exclure un joueur (hôte)",
    response_model=PlayerOut,
)
def kick_player(
    game_id: str = Path(..., min_length=1, max_length=32),
    player_id: str = Path(..., min_length=1),
    host_token: str = Depends(get_host_token),
    svc: GameService = Depends(get_game_service),
):
    try:
        return PlayerOut.model_validate(svc.kick_player(game_id, host_token, player_id))
    except GameError as e:
        raise _http_error(e)

# -----------------------------
# Setup (hôte)
# -----------------------------
@router.post(
    "/{game_id}/config",
    summary="Enregistrer la configuration de la partie",
    response_model=GameOut,
)
def set_configuration(
    payload: GameConfigIn,
    game_id: str = Path(..., min_length=1, max_length=32),
    host_token: str = Depends(get_host_token),
    svc: GameService = Depends(get_game_service),
):
    try:
        return GameOut.model_validate(svc.set_configuration(game_id, host_token, payload))
    except GameError as e:
        raise _http_error(e)


@router.post(
    "/{game_id}/bottles",
    summary="Ajouter les bouteilles",
    status_code=status.HTTP_201_CREATED,
    response_model=List[BottleOut],
)
def add_bottles(
    payload: BottlesIn,
    game_id: str = Path(..., min_length=1, max_length=32),
    host_token: str = Depends(get_host_token),
    svc: GameService = Depends(get_game_service),
):
    try:
        return _bottles_out(svc.add_bottles(game_id, host_token, payload.bottles))
    except GameError as e:
        raise _http_error(e)


@router.put(
    "/{game_id}/bottles",
    summary="Remplacer toutes les bouteilles",
    response_model=List[BottleOut],
)
def replace_bottles(
    payload: BottlesIn,
    game_id: str = Path(..., min_length=1, max_length=32),
    host_token: str = Depends(get_host_token),
    svc: GameService = Depends(get_game_service),
):
    try:
        return _bottles_out(svc.replace_bottles(game_id, host_token, payload.bottles))
    except GameError as e:
        raise _http_error(e)


@router.get(
    "/{game_id}/bottles",
    summary="Lister les bouteilles avec prix (hôte)",
    response_model=List[BottleOut],
)
def list_bottles(
    game_id: str = Path(..., min_length=1, max_length=32),
    host_token: str = Depends(get_host_token),
    svc: GameService = Depends(get_game_service),
):
    try:
        return _bottles_out(svc.list_bottles(game_id, host_token))
    except GameError as e:
        raise _http_error(e)


@router.post(
    "/{game_id}/bottles/organize",
    summary="Répartir manuellement les bouteilles dans les rounds",
    response_model=List[BottleOut],
)
def organize_rounds(
    payload: OrganizeRoundsIn,
    game_id: str = Path(..., min_length=1, max_length=32),
    host_token: str = Depends(get_host_token),
    svc: GameService = Depends(get_game_service),
):
    try:
        return _bottles_out(svc.organize_rounds(game_id, host_token, payload.rounds))
    except GameError as e:
        raise _http_error(e)


@router.post(
    "/{game_id}/randomize",
    summary="Répartition aléatoire (déterministe) des bouteilles",
    response_model=List[BottleOut],
)
def randomize_rounds(
    game_id: str = Path(..., min_length=1, max_length=32),
    host_token: str = Depends(get_host_token),
    svc: GameService = Depends(get_game_service),
):
    try:
        return _bottles_out(svc.randomize_rounds(game_id, host_token))
    except GameError as e:
        raise _http_error(e)

# -----------------------------
# Machine à états (hôte)
# -----------------------------
@router.post(
    "/{game_id}/start",
    summary="Valider le setup et ouvrir le lobby",
    response_model=List[RoundOut],
)
def start_game(
    game_id: str = Path(..., min_length=1, max_length=32),
    host_token: str = Depends(get_host_token),
    svc: GameService = Depends(get_game_service),
):
    try:
        return [RoundOut.model_validate(r) for r in svc.start_game(game_id, host_token)]
    except GameError as e:
        raise _http_error(e)


@router.post(
    "/{game_id}/begin",
    summary="Lancer le premier round",
    response_model=GameOut,
)
def begin_round(
    game_id: str = Path(..., min_length=1, max_length=32),
    host_token: str = Depends(get_host_token),
    svc: GameService = Depends(get_game_service),
):
    try:
        return GameOut.model_validate(svc.begin_round(game_id, host_token))
    except GameError as e:
        raise _http_error(e)


@router.post(
    "/{game_id}/rounds/{round_index}/close",
    summary="Fermer le round, noter et révéler",
    response_model=CloseRoundOut,
)
def close_round(
    game_id: str = Path(..., min_length=1, max_length=32),
    round_index: int = Path(..., ge=0),
    host_token: str = Depends(get_host_token),
    svc: GameService = Depends(get_game_service),
):
    try:
        order = svc.close_round(game_id, host_token, round_index)
    except GameError as e:
        raise _http_error(e)
    return CloseRoundOut(round_index=round_index, correct_order=order)


@router.post(
    "/{game_id}/next-round",
    summary="Passer au round suivant (ou au gambit)",
    response_model=GameOut,
)
def advance_round(
    game_id: str = Path(..., min_length=1, max_length=32),
    host_token: str = Depends(get_host_token),
    svc: GameService = Depends(get_game_service),
):
    try:
        return GameOut.model_validate(svc.advance_round(game_id, host_token))
    except GameError as e:
        raise _http_error(e)


@router.post(
    "/{game_id}/finish",
    summary="Terminer la partie",
    response_model=GameOut,
)
def finish_game(
    game_id: str = Path(..., min_length=1, max_length=32),
    host_token: str = Depends(get_host_token),
    svc: GameService = Depends(get_game_service),
):
    try:
        return GameOut.model_validate(svc.finish_game(game_id, host_token))
    except GameError as e:
        raise _http_error(e)

# -----------------------------
# Joueurs
# -----------------------------
@router.post(
    "/{game_id}/rounds/{round_index}/submit",
    summary="Soumettre notes + classement pour un round",
    response_model=SubmissionOut,
)
def submit_tasting(
    payload: SubmitTastingIn,
    game_id: str = Path(..., min_length=1, max_length=32),
    round_index: int = Path(..., ge=0),
    player_id: str = Depends(get_player_id),
    svc: GameService = Depends(get_game_service),
):
    try:
        submission = svc.submit_tasting(
            game_id,
            round_index,
            player_id,
            payload.tasting_notes,
            payload.ranking,
            lock=payload.lock,
        )
    except GameError as e:
        raise _http_error(e)
    return SubmissionOut.model_validate(submission)


@router.post(
    "/{game_id}/gambit",
    summary="Soumettre le gambit (plus cher / moins cher / favori)",
    response_model=GambitSubmissionOut,
)
def submit_gambit(
    payload: GambitIn,
    game_id: str = Path(..., min_length=1, max_length=32),
    player_id: str = Depends(get_player_id),
    svc: GameService = Depends(get_game_service),
):
    try:
        submission = svc.submit_gambit(
            game_id,
            player_id,
            payload.most_expensive_id,
            payload.least_expensive_id,
            payload.favorite_id,
        )
    except GameError as e:
        raise _http_error(e)
    return GambitSubmissionOut.model_validate(submission)

# -----------------------------
# Lecture (polling)
# -----------------------------
@router.get(
    "/{game_id}",
    summary="Etat complet de la partie",
    response_model=GameStateOut,
)
def get_game_state(
    game_id: str = Path(..., min_length=1, max_length=32),
    host_token: Optional[str] = Depends(get_optional_host_token),
    svc: GameService = Depends(get_game_service),
):
    try:
        return svc.get_game_state(game_id, host_token)
    except GameError as e:
        raise _http_error(e)


@router.get(
    "/{game_id}/rounds/{round_index}",
    summary="Vue d'un round (bouteilles, soumissions, ordre une fois révélé)",
    response_model=RoundViewOut,
)
def get_round(
    game_id: str = Path(..., min_length=1, max_length=32),
    round_index: int = Path(..., ge=0),
    host_token: Optional[str] = Depends(get_optional_host_token),
    svc: GameService = Depends(get_game_service),
):
    try:
        return svc.get_round(game_id, round_index, host_token)
    except GameError as e:
        raise _http_error(e)


@router.get(
    "/{game_id}/leaderboard",
    summary="Classement",
    response_model=LeaderboardOut,
)
def get_leaderboard(
    game_id: str = Path(..., min_length=1, max_length=32),
    svc: GameService = Depends(get_game_service),
):
    try:
        return svc.get_leaderboard(game_id)
    except GameError as e:
        raise _http_error(e)
