import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from winey.core.config import settings
from winey.core.errors import (
    AlreadySubmittedError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    Violation,
)
from winey.db.models.bottles import Bottle
from winey.db.models.games import Game, GameConfig, GameStatus
from winey.db.models.players import Player, PlayerStatus
from winey.db.models.rounds import Round
from winey.db.repositories.bottles import BottleRepository
from winey.db.repositories.gambit_submissions import GambitSubmissionRepository
from winey.db.repositories.games import GameRepository
from winey.db.repositories.players import PlayerRepository
from winey.db.repositories.rounds import RoundRepository
from winey.db.repositories.submissions import SubmissionRepository
from winey.features.games import gambit, scoring, validators
from winey.features.games.leaderboard import leaderboard
from winey.features.games.schemas import (
    BottleIn,
    BottleOut,
    GameConfigIn,
    GameOut,
    GameStateOut,
    LeaderboardEntryOut,
    LeaderboardOut,
    PlayerOut,
    RoundAssignmentIn,
    RoundOut,
    RoundViewOut,
    SubmissionOut,
    to_minor_units,
)
from winey.security.tokens import new_game_code, new_host_token, tokens_match
from winey.utils.shuffle import chunk, deterministic_shuffle

logger = logging.getLogger(__name__)

# phases depuis lesquelles l'hôte peut forcer la fin
FINISHABLE = (GameStatus.IN_ROUND, GameStatus.REVEAL, GameStatus.GAMBIT)


class GameService:
    """
    Service métier Game : machine à états de la partie + orchestration des repos.

    setup -> lobby -> in_round -> reveal -> (in_round | gambit) -> final

    - chaque opération qui modifie l'état = une transaction (commit unique à la fin)
    - la ligne Game est verrouillée (FOR UPDATE) avant toute mutation
    - toute la validation passe avant la première écriture
    """
    def __init__(
        self,
        session: Session,
        game_repo: GameRepository,
        bottle_repo: BottleRepository,
        player_repo: PlayerRepository,
        round_repo: RoundRepository,
        submission_repo: SubmissionRepository,
        gambit_repo: GambitSubmissionRepository,
    ):
        self.session = session

        self.games = game_repo
        self.bottles = bottle_repo
        self.players = player_repo
        self.rounds = round_repo
        self.submissions = submission_repo
        self.gambits = gambit_repo

    # -----------------------------------
    # Helpers: lookup & auth
    # -----------------------------------
    def _get_game_or_404(self, game_id: str, *, for_update: bool = False) -> Game:
        code = (game_id or "").strip().upper()
        game = self.games.get_for_update(code) if for_update else self.games.get(code)
        if not game:
            raise NotFoundError("GAME_NOT_FOUND", f"Game '{game_id}' not found")
        return game

    def _get_host_game(self, game_id: str, host_token: Optional[str], *, for_update: bool = True) -> Game:
        game = self._get_game_or_404(game_id, for_update=for_update)
        if not tokens_match(game.host_token, host_token):
            raise UnauthorizedError("INVALID_HOST_TOKEN", "Unauthorized")
        return game

    def _get_active_player(self, game: Game, player_id: Optional[str]) -> Player:
        player = self.players.get_in_game(game.id, player_id) if player_id else None
        if not player:
            raise NotFoundError("PLAYER_NOT_FOUND", "Player not found in this game")
        if player.status != PlayerStatus.ACTIVE:
            raise UnauthorizedError("PLAYER_KICKED", "Player has been removed from this game")
        return player

    @staticmethod
    def _ensure_status(game: Game, *allowed: GameStatus) -> None:
        if game.status not in allowed:
            expected = ", ".join(s.value for s in allowed)
            raise InvalidStateError(
                "INVALID_GAME_STATE",
                f"Game is in '{game.status.value}', expected: {expected}",
            )

    @staticmethod
    def _require_config(game: Game) -> GameConfig:
        config = game.config
        if config is None:
            raise InvalidStateError("GAME_NOT_CONFIGURED", "Game configuration is incomplete")
        return config

    @staticmethod
    def _display_name_violations(name: str) -> List[Violation]:
        if not settings.DISPLAY_NAME_MIN <= len(name) <= settings.DISPLAY_NAME_MAX:
            return [
                Violation(
                    "DISPLAY_NAME_LENGTH",
                    f"Display name must be {settings.DISPLAY_NAME_MIN}-{settings.DISPLAY_NAME_MAX} characters",
                )
            ]
        return []

    # -----------------------------------
    # Helpers: code de partie
    # -----------------------------------
    def _generate_unique_code(self) -> str:
        code = new_game_code()
        tries = 0
        while self.games.get(code):
            tries += 1
            if tries >= settings.GAME_CODE_MAX_TRIES:
                raise ConflictError("GAME_CODE_GENERATION_FAILED")
            code = new_game_code()
        return code

    # ---------------------------------------------------------------------
    # Create / join
    # ---------------------------------------------------------------------

    def create_game(self, host_display_name: str) -> Tuple[Game, Player]:
        name = (host_display_name or "").strip()
        violations = self._display_name_violations(name)
        if violations:
            raise ValidationError(violations)

        game = self.games.create(
            commit=False,
            id=self._generate_unique_code(),
            host_token=new_host_token(),
            status=GameStatus.SETUP,
            current_round=0,
        )
        host = self.players.create(
            commit=False,
            game_id=game.id,
            display_name=name,
            score=0,
            is_host=True,
            status=PlayerStatus.ACTIVE,
        )

        self.session.commit()
        self.session.refresh(game)
        self.session.refresh(host)
        logger.info(f"[create_game] game={game.id} host={host.id}")
        return game, host

    def join_game(self, game_id: str, display_name: Optional[str] = None) -> Tuple[Optional[Player], int]:
        """
        Retourne (joueur, nb de joueurs actifs).
        Sans display_name : spectateur, aucun joueur créé -> (None, nb).
        """
        game = self._get_game_or_404(game_id, for_update=True)
        if game.status not in (GameStatus.SETUP, GameStatus.LOBBY):
            raise InvalidStateError("GAME_ALREADY_STARTED", "Game already started")

        players = self.players.list_by_game(game.id)
        active = [p for p in players if p.status == PlayerStatus.ACTIVE]

        name = (display_name or "").strip()
        if not name:
            return None, len(active)

        violations = self._display_name_violations(name)
        if violations:
            raise ValidationError(violations)

        if game.max_players is not None and len(active) >= game.max_players:
            raise ConflictError("GAME_FULL", f"Game is full ({game.max_players} players)")

        # même nom déjà pris => "Nom #2", "Nom #3"... (base tronquée pour rester <= DISPLAY_NAME_MAX)
        taken = {p.display_name for p in players}
        final_name = name
        counter = 2
        while final_name in taken:
            suffix = f" #{counter}"
            final_name = name[: settings.DISPLAY_NAME_MAX - len(suffix)].rstrip() + suffix
            counter += 1

        player = self.players.create(
            commit=True,
            game_id=game.id,
            display_name=final_name,
            score=0,
            is_host=False,
            status=PlayerStatus.ACTIVE,
        )
        logger.info(f"[join] game={game.id} player={player.id} name={final_name!r}")
        return player, len(active) + 1

    def kick_player(self, game_id: str, host_token: Optional[str], player_id: str) -> Player:
        game = self._get_host_game(game_id, host_token)
        player = self.players.get_in_game(game.id, player_id)
        if not player:
            raise NotFoundError("PLAYER_NOT_FOUND", "Player not found in this game")
        if player.is_host:
            raise ConflictError("CANNOT_KICK_HOST", "The host cannot be removed")
        player = self.players.update(player, commit=True, status=PlayerStatus.KICKED)
        logger.info(f"[kick] game={game.id} player={player.id}")
        return player

    # ---------------------------------------------------------------------
    # Setup : configuration + bouteilles + répartition
    # ---------------------------------------------------------------------

    def set_configuration(self, game_id: str, host_token: Optional[str], payload: GameConfigIn) -> Game:
        game = self._get_host_game(game_id, host_token)
        self._ensure_status(game, GameStatus.SETUP)

        if payload.total_rounds * payload.bottles_per_round != payload.total_bottles:
            raise ValidationError([
                Violation(
                    "CONFIG_INCONSISTENT",
                    f"{payload.total_rounds} rounds x {payload.bottles_per_round} bottles "
                    f"does not make {payload.total_bottles} bottles",
                )
            ])

        # les 6 champs ensemble : jamais de configuration partielle
        game = self.games.update(
            game,
            commit=True,
            host_name=payload.host_name,
            host_email=payload.host_email,
            max_players=payload.max_players,
            total_bottles=payload.total_bottles,
            total_rounds=payload.total_rounds,
            bottles_per_round=payload.bottles_per_round,
            bottle_eq_per_person=payload.bottle_eq_per_person,
            oz_per_person_per_bottle=payload.oz_per_person_per_bottle,
        )
        logger.info(
            f"[config] game={game.id} bottles={game.total_bottles} "
            f"rounds={game.total_rounds}x{game.bottles_per_round}"
        )
        return game

    def _build_bottles(self, game: Game, payload: Sequence[BottleIn]) -> List[Bottle]:
        """Construit (sans persister) puis valide l'ensemble ; lève ValidationError au besoin."""
        candidates = [
            Bottle(
                game_id=game.id,
                label_name=b.label_name.strip(),
                fun_name=(b.fun_name or "").strip() or None,
                price=to_minor_units(b.price),
                round_index=b.round_index,
                order_index=i,
            )
            for i, b in enumerate(payload)
        ]
        violations = validators.validate_bottle_set(candidates)
        if game.total_bottles is not None and len(candidates) > game.total_bottles:
            violations.append(
                Violation(
                    "TOO_MANY_BOTTLES",
                    f"Too many bottles ({len(candidates)}), maximum is {game.total_bottles}",
                )
            )
        if violations:
            raise ValidationError(violations)
        return candidates

    def add_bottles(self, game_id: str, host_token: Optional[str], payload: Sequence[BottleIn]) -> Sequence[Bottle]:
        game = self._get_host_game(game_id, host_token)
        self._ensure_status(game, GameStatus.SETUP)

        if self.bottles.list_by_game(game.id):
            raise ConflictError(
                "BOTTLES_ALREADY_EXIST",
                "Bottles already exist for this game, replace them instead",
            )

        created = self.bottles.add_all(self._build_bottles(game, payload), commit=True)
        logger.info(f"[bottles] game={game.id} added={len(created)}")
        return created

    def replace_bottles(self, game_id: str, host_token: Optional[str], payload: Sequence[BottleIn]) -> Sequence[Bottle]:
        game = self._get_host_game(game_id, host_token)
        self._ensure_status(game, GameStatus.SETUP)

        candidates = self._build_bottles(game, payload)
        for bottle in self.bottles.list_by_game(game.id):
            self.bottles.delete(bottle, commit=False)
        created = self.bottles.add_all(candidates, commit=False)

        self.session.commit()
        for bottle in created:
            self.session.refresh(bottle)
        logger.info(f"[bottles] game={game.id} replaced={len(created)}")
        return created

    def list_bottles(self, game_id: str, host_token: Optional[str]) -> Sequence[Bottle]:
        game = self._get_host_game(game_id, host_token, for_update=False)
        return self.bottles.list_by_game(game.id)

    def organize_rounds(
        self,
        game_id: str,
        host_token: Optional[str],
        assignment: Sequence[RoundAssignmentIn],
    ) -> Sequence[Bottle]:
        """
        Répartition manuelle : remplace toutes les affectations bouteille -> round.
        Une liste vide efface tout (auto-répartition au démarrage).
        """
        game = self._get_host_game(game_id, host_token)
        self._ensure_status(game, GameStatus.SETUP)
        config = self._require_config(game)

        bottles = self.bottles.list_by_game(game.id)
        mapping: Dict[int, List[str]] = defaultdict(list)
        for entry in assignment:
            mapping[entry.round_index].extend(entry.bottle_ids)

        violations = validators.validate_round_assignment(
            bottles, config.total_rounds, config.bottles_per_round, assignment=mapping
        )
        if violations:
            raise ValidationError(violations)

        round_of = {bottle_id: idx for idx, ids in mapping.items() for bottle_id in ids}
        for bottle in bottles:
            self.bottles.update(bottle, commit=False, round_index=round_of.get(bottle.id))
        self.session.commit()
        logger.info(f"[organize] game={game.id} assigned={len(round_of)}")
        return self.bottles.list_by_game(game.id)

    def _auto_assignment(self, game: Game, bottles: Sequence[Bottle], config: GameConfig) -> List[List[str]]:
        """Mélange déterministe (graine = id de partie) puis découpage en rounds."""
        ordered = sorted(bottles, key=lambda b: b.order_index)
        shuffled = deterministic_shuffle([b.id for b in ordered], game.id)
        return chunk(shuffled, config.bottles_per_round)[: config.total_rounds]

    def randomize_rounds(self, game_id: str, host_token: Optional[str]) -> Sequence[Bottle]:
        game = self._get_host_game(game_id, host_token)
        self._ensure_status(game, GameStatus.SETUP)
        config = self._require_config(game)

        bottles = self.bottles.list_by_game(game.id)
        violations = validators.validate_bottle_count(bottles, config.total_bottles)
        if violations:
            raise ValidationError(violations)

        groups = self._auto_assignment(game, bottles, config)
        round_of = {bottle_id: idx for idx, ids in enumerate(groups) for bottle_id in ids}
        for bottle in bottles:
            self.bottles.update(bottle, commit=False, round_index=round_of.get(bottle.id))
        self.session.commit()
        logger.info(f"[randomize] game={game.id} rounds={len(groups)}")
        return self.bottles.list_by_game(game.id)

    # ---------------------------------------------------------------------
    # Machine à états
    # ---------------------------------------------------------------------

    def start_game(self, game_id: str, host_token: Optional[str]) -> Sequence[Round]:
        """
        setup -> lobby. Valide tout (et remonte TOUTES les erreurs d'un coup),
        auto-répartit si aucune bouteille n'est affectée, puis crée les rounds.
        """
        game = self._get_host_game(game_id, host_token)
        self._ensure_status(game, GameStatus.SETUP)

        config = game.config
        if config is None:
            raise ValidationError([
                Violation("CONFIG_INCOMPLETE", "Game configuration is incomplete, complete setup first")
            ])

        bottles = self.bottles.list_by_game(game.id)
        violations: List[Violation] = []
        if config.total_rounds * config.bottles_per_round != config.total_bottles:
            violations.append(
                Violation(
                    "CONFIG_INCONSISTENT",
                    f"{config.total_rounds} rounds x {config.bottles_per_round} bottles "
                    f"does not make {config.total_bottles} bottles",
                )
            )
        violations += validators.validate_bottle_count(bottles, config.total_bottles)
        violations += validators.validate_bottle_set(bottles)

        assigned = any(b.round_index is not None for b in bottles)
        if assigned:
            violations += validators.validate_round_assignment(
                bottles, config.total_rounds, config.bottles_per_round
            )
        if violations:
            raise ValidationError(violations, code="CANNOT_START_GAME")

        if assigned:
            groups = [
                [b.id for b in bottles if b.round_index == idx]
                for idx in range(config.total_rounds)
            ]
        else:
            groups = self._auto_assignment(game, bottles, config)
            round_of = {bottle_id: idx for idx, ids in enumerate(groups) for bottle_id in ids}
            for bottle in bottles:
                self.bottles.update(bottle, commit=False, round_index=round_of[bottle.id])

        rounds = [
            self.rounds.create(commit=False, game_id=game.id, index=idx, bottle_ids=list(ids), revealed=False)
            for idx, ids in enumerate(groups)
        ]
        self.games.update(game, commit=False, status=GameStatus.LOBBY, current_round=0)

        self.session.commit()
        for rnd in rounds:
            self.session.refresh(rnd)
        logger.info(f"[start_game] game={game.id} rounds={len(rounds)} auto_assigned={not assigned}")
        return rounds

    def _open_round(self, game: Game, number: int) -> Game:
        return self.games.update(game, commit=True, status=GameStatus.IN_ROUND, current_round=number)

    def begin_round(self, game_id: str, host_token: Optional[str]) -> Game:
        """lobby -> in_round, premier round (current_round = 1)."""
        game = self._get_host_game(game_id, host_token)
        self._ensure_status(game, GameStatus.LOBBY)
        game = self._open_round(game, 1)
        logger.info(f"[begin_round] game={game.id} round=1")
        return game

    def close_round(self, game_id: str, host_token: Optional[str], round_index: int) -> List[str]:
        """
        in_round -> reveal : note toutes les soumissions du round, crédite les joueurs.
        Idempotent : un round déjà révélé renvoie son ordre sans rien re-noter.
        """
        game = self._get_host_game(game_id, host_token)
        rnd = self.rounds.get_by_index(game.id, round_index)
        if not rnd:
            raise NotFoundError("ROUND_NOT_FOUND", f"Round {round_index + 1} not found")

        order = scoring.correct_order(self.bottles.list_by_ids(rnd.bottle_ids))
        if rnd.revealed:
            logger.info(f"[close_round] game={game.id} round={round_index} already revealed")
            return order

        self._ensure_status(game, GameStatus.IN_ROUND)
        if round_index + 1 != game.current_round:
            raise InvalidStateError(
                "ROUND_NOT_CURRENT",
                f"Round {round_index + 1} is not the current round ({game.current_round})",
            )

        scored = 0
        for sub in self.submissions.list_by_round(game.id, round_index):
            points = scoring.score(order, sub.ranking)
            # les brouillons restent non verrouillés : le round fermé refuse déjà toute écriture
            self.submissions.update(sub, commit=False, points=points)
            player = self.players.get(sub.player_id)
            if player:
                self.players.update(player, commit=False, score=player.score + points)
            scored += 1

        self.rounds.update(rnd, commit=False, revealed=True)
        self.games.update(game, commit=False, status=GameStatus.REVEAL)
        self.session.commit()
        logger.info(f"[close_round] game={game.id} round={round_index} scored={scored}")
        return order

    def advance_round(self, game_id: str, host_token: Optional[str]) -> Game:
        """reveal -> round suivant, ou gambit après le dernier round."""
        game = self._get_host_game(game_id, host_token)
        self._ensure_status(game, GameStatus.REVEAL)
        config = self._require_config(game)

        prev_round = game.current_round
        if game.current_round < config.total_rounds:
            game = self._open_round(game, game.current_round + 1)
            logger.info(f"[next_round] game={game.id} advance round {prev_round} -> {game.current_round}")
        else:
            game = self.games.update(game, commit=True, status=GameStatus.GAMBIT)
            logger.info(f"[gambit] game={game.id} opened after round={prev_round}")
        return game

    def finish_game(self, game_id: str, host_token: Optional[str]) -> Game:
        """
        -> final. Note les gambits (une seule fois). Les rounds jamais fermés
        ne sont jamais notés : fin anticipée voulue par l'hôte.
        Déjà final : no-op.
        """
        game = self._get_host_game(game_id, host_token)
        if game.status == GameStatus.FINAL:
            return game
        self._ensure_status(game, *FINISHABLE)

        # les gambits n'existent que si la phase gambit a été atteinte
        bottles = self.bottles.list_by_game(game.id)
        gambits = self.gambits.list_by_game(game.id)
        for sub in gambits:
            points = gambit.score_gambit(bottles, sub)
            self.gambits.update(sub, commit=False, points=points)
            player = self.players.get(sub.player_id)
            if player:
                self.players.update(player, commit=False, score=player.score + points)

        prev_status = game.status
        game = self.games.update(game, commit=False, status=GameStatus.FINAL)
        self.session.commit()
        self.session.refresh(game)
        logger.info(f"[finish] game={game.id} from={prev_status.value} gambits={len(gambits)}")
        return game

    # ---------------------------------------------------------------------
    # Soumissions joueurs
    # ---------------------------------------------------------------------

    def _tasting_violations(
        self,
        rnd: Round,
        tasting_notes: Dict[str, str],
        ranking: Sequence[str],
        *,
        lock: bool,
    ) -> List[Violation]:
        labels = {b.id: b.label_name for b in self.bottles.list_by_ids(rnd.bottle_ids)}
        expected = set(rnd.bottle_ids)
        violations: List[Violation] = []

        # classement : permutation exacte des bouteilles du round
        seen = set()
        for bottle_id in ranking:
            if bottle_id not in expected:
                violations.append(
                    Violation("RANKING_UNKNOWN_BOTTLE", f"Bottle id '{bottle_id}' is not in this round")
                )
            elif bottle_id in seen:
                violations.append(
                    Violation(
                        "RANKING_DUPLICATE",
                        f"Bottle '{labels.get(bottle_id)}' is ranked more than once",
                        label=labels.get(bottle_id),
                    )
                )
            seen.add(bottle_id)
        for bottle_id in rnd.bottle_ids:
            if bottle_id not in seen:
                violations.append(
                    Violation(
                        "RANKING_INCOMPLETE",
                        f"Bottle '{labels.get(bottle_id)}' is missing from the ranking",
                        label=labels.get(bottle_id),
                    )
                )

        # notes
        for bottle_id, note in tasting_notes.items():
            if bottle_id not in expected:
                violations.append(
                    Violation("NOTE_UNKNOWN_BOTTLE", f"Note for bottle id '{bottle_id}' which is not in this round")
                )
            elif len(note) > settings.MAX_NOTE_LENGTH:
                violations.append(
                    Violation(
                        "NOTE_TOO_LONG",
                        f"Note for '{labels.get(bottle_id)}' exceeds {settings.MAX_NOTE_LENGTH} characters",
                        label=labels.get(bottle_id),
                    )
                )
        if lock:
            for bottle_id in rnd.bottle_ids:
                note = (tasting_notes.get(bottle_id) or "").strip()
                if len(note) < settings.MIN_NOTE_LENGTH:
                    violations.append(
                        Violation(
                            "NOTE_TOO_SHORT",
                            f"Note for '{labels.get(bottle_id)}' needs at least {settings.MIN_NOTE_LENGTH} characters",
                            label=labels.get(bottle_id),
                        )
                    )
        return violations

    def submit_tasting(
        self,
        game_id: str,
        round_index: int,
        player_id: Optional[str],
        tasting_notes: Dict[str, str],
        ranking: Sequence[str],
        *,
        lock: bool = True,
    ):
        """
        Enregistre (ou met à jour, tant qu'elle n'est pas verrouillée) la soumission du joueur.
        Refus global : rien n'est écrit si une seule règle échoue.
        """
        game = self._get_game_or_404(game_id, for_update=True)
        player = self._get_active_player(game, player_id)

        if game.status != GameStatus.IN_ROUND or round_index + 1 != game.current_round:
            raise InvalidStateError("ROUND_NOT_OPEN", f"Round {round_index + 1} is not open for submissions")

        rnd = self.rounds.get_by_index(game.id, round_index)
        if not rnd:
            raise NotFoundError("ROUND_NOT_FOUND", f"Round {round_index + 1} not found")

        existing = self.submissions.get_for_player_round(player.id, round_index)
        if existing and existing.locked:
            raise AlreadySubmittedError("ALREADY_SUBMITTED", "Already submitted")

        violations = self._tasting_violations(rnd, tasting_notes, ranking, lock=lock)
        if violations:
            raise ValidationError(violations)

        fields = dict(
            tasting_notes={k: v.strip() for k, v in tasting_notes.items()},
            ranking=list(ranking),
            locked=lock,
        )
        try:
            if existing:
                submission = self.submissions.update(existing, commit=False, **fields)
            else:
                submission = self.submissions.create(
                    commit=False,
                    player_id=player.id,
                    game_id=game.id,
                    round_index=round_index,
                    points=0,
                    **fields,
                )
            self.session.commit()
        except IntegrityError:
            # (player_id, round_index) déjà inséré par une requête concurrente
            self.session.rollback()
            winner = self.submissions.get_for_player_round(player.id, round_index)
            if winner and winner.locked:
                raise AlreadySubmittedError("ALREADY_SUBMITTED", "Already submitted")
            raise ConflictError("SUBMISSION_CONFLICT", "Concurrent submission, retry")
        self.session.refresh(submission)
        logger.info(f"[submit] game={game.id} round={round_index} player={player.id} locked={lock}")
        return submission

    def submit_gambit(
        self,
        game_id: str,
        player_id: Optional[str],
        most_expensive_id: str,
        least_expensive_id: str,
        favorite_id: str,
    ):
        """Prédiction bonus : modifiable (upsert) jusqu'à finish_game."""
        game = self._get_game_or_404(game_id, for_update=True)
        player = self._get_active_player(game, player_id)
        self._ensure_status(game, GameStatus.GAMBIT)

        bottle_ids = [b.id for b in self.bottles.list_by_game(game.id)]
        violations = gambit.validate_prediction(bottle_ids, most_expensive_id, least_expensive_id, favorite_id)
        if violations:
            raise ValidationError(violations)

        fields = dict(
            most_expensive_id=most_expensive_id,
            least_expensive_id=least_expensive_id,
            favorite_id=favorite_id,
        )
        existing = self.gambits.get_for_player(player.id)
        try:
            if existing:
                submission = self.gambits.update(existing, commit=False, **fields)
            else:
                submission = self.gambits.create(commit=False, player_id=player.id, game_id=game.id, points=0, **fields)
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError("GAMBIT_CONFLICT", "Concurrent gambit submission, retry")
        self.session.refresh(submission)
        logger.info(f"[gambit_submit] game={game.id} player={player.id}")
        return submission

    # ---------------------------------------------------------------------
    # Lecture (polling)
    # ---------------------------------------------------------------------

    def get_game_state(self, game_id: str, host_token: Optional[str] = None) -> GameStateOut:
        """
        Etat complet pour le polling. Les prix restent cachés (sauf pour l'hôte)
        jusqu'à la révélation du round de la bouteille ou la fin de partie.
        """
        game = self._get_game_or_404(game_id)
        is_host = tokens_match(game.host_token, host_token)

        rounds = self.rounds.list_by_game(game.id)
        revealed = {r.index for r in rounds if r.revealed}
        show_all = is_host or game.status == GameStatus.FINAL

        return GameStateOut(
            game=GameOut.model_validate(game),
            players=[PlayerOut.model_validate(p) for p in self.players.list_by_game(game.id)],
            bottles=[
                BottleOut.from_entity(b, show_price=show_all or b.round_index in revealed)
                for b in self.bottles.list_by_game(game.id)
            ],
            rounds=[RoundOut.model_validate(r) for r in rounds],
        )

    def get_round(self, game_id: str, round_index: int, host_token: Optional[str] = None) -> RoundViewOut:
        game = self._get_game_or_404(game_id)
        rnd = self.rounds.get_by_index(game.id, round_index)
        if not rnd:
            raise NotFoundError("ROUND_NOT_FOUND", f"Round {round_index + 1} not found")

        show_prices = rnd.revealed or game.status == GameStatus.FINAL or tokens_match(game.host_token, host_token)
        position = {bottle_id: i for i, bottle_id in enumerate(rnd.bottle_ids)}
        bottles = sorted(self.bottles.list_by_ids(rnd.bottle_ids), key=lambda b: position[b.id])
        submissions = self.submissions.list_by_round(game.id, round_index)

        view = RoundViewOut(
            round=RoundOut.model_validate(rnd),
            bottles=[BottleOut.from_entity(b, show_price=show_prices) for b in bottles],
            submitted_player_ids=[s.player_id for s in submissions if s.locked],
        )
        if rnd.revealed:
            view.correct_order = scoring.correct_order(bottles)
            view.submissions = [SubmissionOut.model_validate(s) for s in submissions]
        return view

    def get_leaderboard(self, game_id: str) -> LeaderboardOut:
        """
        Classement = Player.score (cumul déjà maintenu). Le détail par round / gambit
        est seulement affiché, il ne sert pas à recalculer le total.
        """
        game = self._get_game_or_404(game_id)
        ranked = leaderboard(self.players.list_by_game(game.id))

        n_rounds = game.total_rounds or 0
        per_round: Dict[str, List[int]] = defaultdict(lambda: [0] * n_rounds)
        for sub in self.submissions.list_by_game(game.id):
            if 0 <= sub.round_index < n_rounds:
                per_round[sub.player_id][sub.round_index] = sub.points
        gambit_points = {g.player_id: g.points for g in self.gambits.list_by_game(game.id)}

        return LeaderboardOut(
            leaderboard=[
                LeaderboardEntryOut(
                    player_id=p.id,
                    display_name=p.display_name,
                    score=p.score,
                    round_points=per_round[p.id],
                    gambit_points=gambit_points.get(p.id, 0),
                )
                for p in ranked
            ],
            current_round=game.current_round,
            total_rounds=game.total_rounds,
        )
