import os

# avant tout import de winey : settings lus à l'import
os.environ.setdefault("ENV", "test")
os.environ.setdefault("SQLITE_PATH", ":memory:")

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from winey.db.repositories.bottles import BottleRepository
from winey.db.repositories.gambit_submissions import GambitSubmissionRepository
from winey.db.repositories.games import GameRepository
from winey.db.repositories.players import PlayerRepository
from winey.db.repositories.rounds import RoundRepository
from winey.db.repositories.submissions import SubmissionRepository
from winey.db.session import get_session, init_db
from winey.features.games.schemas import BottleIn, GameConfigIn
from winey.features.games.services import GameService
from winey.main import app


PRICES = [12.5, 20.0, 35.0, 8.0, 60.0, 15.0, 42.0, 27.0, 99.0, 18.0,
          22.0, 31.0, 45.0, 50.0, 9.5, 70.0, 11.0, 24.0, 38.0, 80.0]

NOTE = "Fruits rouges, boisé léger"


def make_bottles(count, start=0):
    return [
        BottleIn(label_name=f"Cuvée {i + 1}", fun_name=f"Mystère {i + 1}", price=PRICES[i])
        for i in range(start, start + count)
    ]


def make_config(total_rounds=3, bottles_per_round=3, max_players=12):
    return GameConfigIn(
        host_name="Sophie",
        max_players=max_players,
        total_bottles=total_rounds * bottles_per_round,
        total_rounds=total_rounds,
        bottles_per_round=bottles_per_round,
        bottle_eq_per_person=0.75,
        oz_per_person_per_bottle=2.11,
    )


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def service(session):
    return GameService(
        session,
        GameRepository(session),
        BottleRepository(session),
        PlayerRepository(session),
        RoundRepository(session),
        SubmissionRepository(session),
        GambitSubmissionRepository(session),
    )


@pytest.fixture()
def client(engine):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_game(service):
    """
    Fabrique une partie configurée + bouteilles saisies (phase setup).
    Retourne un namespace : code, token, host_id, players {nom: id}.
    """
    def _make(total_rounds=3, bottles_per_round=3, players=("Alice", "Bruno"), start=False):
        game, host = service.create_game("Sophie")
        token = game.host_token
        code = game.id
        ids = {}
        for name in players:
            player, _ = service.join_game(code, name)
            ids[name] = player.id
        service.set_configuration(code, token, make_config(total_rounds, bottles_per_round))
        service.add_bottles(code, token, make_bottles(total_rounds * bottles_per_round))
        if start:
            service.start_game(code, token)
        return SimpleNamespace(code=code, token=token, host_id=host.id, players=ids)

    return _make


@pytest.fixture()
def round_order(service):
    """Ordre correct (prix décroissant) des bouteilles d'un round, calculé côté test."""
    def _order(ns, round_index):
        rnd = service.rounds.get_by_index(ns.code, round_index)
        prices = {b.id: b.price for b in service.list_bottles(ns.code, ns.token)}
        return sorted(rnd.bottle_ids, key=lambda bid: -prices[bid])

    return _order
