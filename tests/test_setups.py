from winey.features.games.setups import WINEY_SETUPS, bottle_options, player_counts, round_options


def test_player_counts_descending_and_unique():
    counts = player_counts()
    assert counts == sorted(set(counts), reverse=True)
    assert counts[0] == 22
    assert counts[-1] == 10


def test_bottle_options_keep_most_rounds_per_bottle_count():
    options = bottle_options(20)
    assert [o.bottles for o in options] == [20, 16, 15, 12, 9]
    twelve = next(o for o in options if o.bottles == 12)
    assert twelve.rounds == 4
    assert twelve.bottles_per_round == 3


def test_round_options():
    options = round_options(16, 12)
    assert [(o.rounds, o.bottles_per_round) for o in options] == [(4, 3), (3, 4)]
    assert all(o.id.startswith("round-16-12-") for o in options)


def test_unknown_player_count():
    assert bottle_options(7) == []


def test_every_row_is_consistent():
    for players, bottles, rounds, per_round, _eq, _oz in WINEY_SETUPS:
        assert rounds * per_round == bottles
