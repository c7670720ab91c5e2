from conftest import NOTE, PRICES

BASE = "/api/v1/games"

CONFIG = {
    "host_name": "Sophie",
    "max_players": 12,
    "total_bottles": 9,
    "total_rounds": 3,
    "bottles_per_round": 3,
    "bottle_eq_per_person": 0.75,
    "oz_per_person_per_bottle": 2.11,
}


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


def _player(player_id):
    return {"X-Player-Id": player_id}


def _setup_game(client):
    res = client.post(BASE, json={"host_display_name": "Sophie"})
    assert res.status_code == 201
    data = res.json()
    code, token = data["game"]["id"], data["host_token"]

    alice = client.post(f"{BASE}/{code}/join", json={"display_name": "Alice"}).json()["player"]

    assert client.post(f"{BASE}/{code}/config", json=CONFIG, headers=_auth(token)).status_code == 200
    bottles = [{"label_name": f"Cuvée {i + 1}", "price": PRICES[i]} for i in range(9)]
    res = client.post(f"{BASE}/{code}/bottles", json={"bottles": bottles}, headers=_auth(token))
    assert res.status_code == 201
    return code, token, alice["id"]


def test_create_game(client):
    res = client.post(BASE, json={"host_display_name": "Sophie"})
    assert res.status_code == 201
    data = res.json()
    assert data["game"]["status"] == "setup"
    assert data["host_token"]
    assert data["host_player_id"]


def test_create_game_short_name_is_422(client):
    res = client.post(BASE, json={"host_display_name": "Al"})
    assert res.status_code == 422
    assert res.json()["detail"]["errors"][0]["code"] == "DISPLAY_NAME_LENGTH"


def test_join_and_spectate(client):
    code = client.post(BASE, json={"host_display_name": "Sophie"}).json()["game"]["id"]

    res = client.post(f"{BASE}/{code}/join", json={"display_name": "Alice"})
    assert res.status_code == 200
    assert res.json()["player"]["display_name"] == "Alice"
    assert res.json()["player_count"] == 2

    res = client.post(f"{BASE}/{code}/join", json={})
    assert res.json()["spectator"] is True
    assert res.json()["player"] is None


def test_unknown_game_is_404(client):
    res = client.get(f"{BASE}/ZZZZZZ")
    assert res.status_code == 404
    assert res.json()["detail"]["code"] == "GAME_NOT_FOUND"


def test_host_routes_need_token(client):
    code, token, _ = _setup_game(client)
    assert client.post(f"{BASE}/{code}/start").status_code == 403
    assert client.post(f"{BASE}/{code}/start", headers=_auth("nope")).status_code == 403
    assert client.get(f"{BASE}/{code}/bottles").status_code == 403


def test_config_out_of_range_is_422(client):
    code = client.post(BASE, json={"host_display_name": "Sophie"}).json()
    res = client.post(
        f"{BASE}/{code['game']['id']}/config",
        json={**CONFIG, "total_rounds": 9},
        headers=_auth(code["host_token"]),
    )
    assert res.status_code == 422


def test_second_bottle_post_conflicts(client):
    code, token, _ = _setup_game(client)
    bottles = [{"label_name": "Autre", "price": 5}]
    res = client.post(f"{BASE}/{code}/bottles", json={"bottles": bottles}, headers=_auth(token))
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "BOTTLES_ALREADY_EXIST"


def test_round_trip_over_http(client):
    code, token, alice = _setup_game(client)

    res = client.post(f"{BASE}/{code}/start", headers=_auth(token))
    assert res.status_code == 200
    rounds = res.json()
    assert len(rounds) == 3

    game = client.post(f"{BASE}/{code}/begin", headers=_auth(token)).json()
    assert game["status"] == "in_round"
    assert game["current_round"] == 1

    # vue joueur : prix cachés
    state = client.get(f"{BASE}/{code}").json()
    assert all(b["price"] is None for b in state["bottles"])

    prices = {b["id"]: b["price"] for b in client.get(f"{BASE}/{code}/bottles", headers=_auth(token)).json()}
    order = sorted(rounds[0]["bottle_ids"], key=lambda bid: -prices[bid])

    payload = {"tasting_notes": {bid: NOTE for bid in order}, "ranking": order}
    res = client.post(f"{BASE}/{code}/rounds/0/submit", json=payload, headers=_player(alice))
    assert res.status_code == 200
    assert res.json()["locked"] is True

    res = client.post(f"{BASE}/{code}/rounds/0/submit", json=payload, headers=_player(alice))
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "ALREADY_SUBMITTED"

    res = client.post(f"{BASE}/{code}/rounds/0/close", headers=_auth(token))
    assert res.status_code == 200
    assert res.json()["correct_order"] == order

    board = client.get(f"{BASE}/{code}/leaderboard").json()
    assert board["leaderboard"][0]["display_name"] == "Alice"
    assert board["leaderboard"][0]["score"] == 3
    assert board["total_rounds"] == 3

    view = client.get(f"{BASE}/{code}/rounds/0").json()
    assert view["correct_order"] == order
    assert all(b["price"] is not None for b in view["bottles"])

    res = client.post(f"{BASE}/{code}/next-round", headers=_auth(token))
    assert res.json()["current_round"] == 2

    res = client.post(f"{BASE}/{code}/finish", headers=_auth(token))
    assert res.json()["status"] == "final"


def test_submit_validation_errors_are_listed(client):
    code, token, alice = _setup_game(client)
    rounds = client.post(f"{BASE}/{code}/start", headers=_auth(token)).json()
    client.post(f"{BASE}/{code}/begin", headers=_auth(token))

    ids = rounds[0]["bottle_ids"]
    payload = {"tasting_notes": {ids[0]: "court"}, "ranking": ids[:2]}
    res = client.post(f"{BASE}/{code}/rounds/0/submit", json=payload, headers=_player(alice))
    assert res.status_code == 422
    codes = {e["code"] for e in res.json()["detail"]["errors"]}
    assert {"NOTE_TOO_SHORT", "RANKING_INCOMPLETE"} <= codes


def test_setups_catalogue(client):
    res = client.get(f"{BASE}/setups")
    assert res.status_code == 200
    assert res.json()["options"] == []
    assert 22 in res.json()["player_counts"]

    res = client.get(f"{BASE}/setups", params={"players": 16})
    assert [o["bottles"] for o in res.json()["options"]] == [16, 15, 12, 9]

    res = client.get(f"{BASE}/setups", params={"players": 16, "bottles": 12})
    assert len(res.json()["options"]) == 2
