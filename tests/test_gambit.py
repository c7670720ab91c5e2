from types import SimpleNamespace

from winey.core.config import settings
from winey.features.games.gambit import extremes, score_gambit, validate_prediction

BOTTLES = [
    SimpleNamespace(id="a", price=1200),
    SimpleNamespace(id="b", price=9900),
    SimpleNamespace(id="c", price=800),
    SimpleNamespace(id="d", price=4200),
]


def _prediction(most, least, favorite="a"):
    return SimpleNamespace(most_expensive_id=most, least_expensive_id=least, favorite_id=favorite)


def test_extremes():
    assert extremes(BOTTLES) == ("b", "c")


def test_both_extremes_right():
    assert score_gambit(BOTTLES, _prediction("b", "c")) == 2 * settings.GAMBIT_POINTS


def test_one_extreme_right():
    assert score_gambit(BOTTLES, _prediction("b", "a")) == settings.GAMBIT_POINTS
    assert score_gambit(BOTTLES, _prediction("d", "c")) == settings.GAMBIT_POINTS


def test_favorite_never_scores():
    assert score_gambit(BOTTLES, _prediction("a", "d", favorite="b")) == 0


def test_validate_same_bottle_and_unknown():
    ids = [b.id for b in BOTTLES]
    codes = [v.code for v in validate_prediction(ids, "a", "a", "zzz")]
    assert "SAME_BOTTLE" in codes
    assert codes.count("UNKNOWN_BOTTLE") == 1


def test_validate_ok():
    assert validate_prediction([b.id for b in BOTTLES], "b", "c", "b") == []
