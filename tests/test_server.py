"""Tests for the Flask API."""
import pytest

from minelog.workflows import workflow_id_for

NEW_GAME = {
    "player_name": "alice",
    "width": 2,
    "height": 2,
    "mines_count": 2,
    "mine_locations": [1, 2],
}


def _create(client, **overrides):
    resp = client.post("/api/games", json={**NEW_GAME, **overrides})
    assert resp.status_code == 200
    return resp.get_json()["id"]


def _step(client, game_id, step_number, row, col, result):
    return client.post(f"/api/games/{game_id}/moves", json={
        "step_number": step_number, "row": row, "col": col, "result": result,
    })


class TestCreateGame:
    def test_create_returns_id(self, client, store):
        game_id = _create(client)
        game = store.get_game(game_id)
        assert game.mine_locations == [1, 2]
        assert game.status.value == "playing"

    @pytest.mark.parametrize("payload", [
        {k: v for k, v in NEW_GAME.items() if k != "mine_locations"},
        {**NEW_GAME, "width": "2"},
        {**NEW_GAME, "width": 0},
        {**NEW_GAME, "mines_count": 4},
        {**NEW_GAME, "mine_locations": [9]},
        {**NEW_GAME, "mine_locations": "1,2"},
        {**NEW_GAME, "player_name": None},
    ])
    def test_invalid_payload_creates_nothing(self, client, store, payload):
        resp = client.post("/api/games", json=payload)
        assert resp.status_code == 400
        assert "error" in resp.get_json()
        assert store.list_games() == []

    def test_non_json_body(self, client):
        resp = client.post("/api/games", data="nope", content_type="text/plain")
        assert resp.status_code == 400

    def test_cors_header(self, client):
        resp = client.get("/api/games", headers={"Origin": "http://example.com"})
        assert resp.headers.get("Access-Control-Allow-Origin") in ("*", "http://example.com")


class TestRecordMove:
    def test_move_is_submitted_under_game_workflow_id(self, client, store, temporal):
        game_id = _create(client)
        resp = _step(client, game_id, 1, 0, 0, "ok")

        assert resp.status_code == 200
        assert resp.get_json()["status"] == "ok"
        assert temporal.started[0]["id"] == workflow_id_for(game_id)
        assert temporal.started[0]["game_id"] == game_id
        assert len(store.get_moves(game_id)) == 1

    def test_terminal_move_sets_status(self, client, store):
        game_id = _create(client)
        _step(client, game_id, 1, 0, 0, "ok")
        resp = _step(client, game_id, 2, 1, 1, "won")

        assert resp.get_json()["game_status"] == "won"
        assert store.get_game(game_id).status.value == "won"

    def test_client_label_is_stored_as_sent(self, client, store):
        game_id = _create(client)
        _step(client, game_id, 1, 0, 1, "won")
        assert store.get_game(game_id).status.value == "won"

    def test_moves_after_terminal_are_accepted(self, client, store):
        game_id = _create(client)
        _step(client, game_id, 1, 0, 1, "exploded")
        resp = _step(client, game_id, 2, 0, 0, "ok")

        assert resp.status_code == 200
        assert store.get_game(game_id).status.value == "lost"
        assert len(store.get_moves(game_id)) == 2

    @pytest.mark.parametrize("payload", [
        {"row": 0, "col": 0, "result": "ok"},
        {"step_number": 1, "row": 0, "col": 0, "result": "maybe"},
        {"step_number": 0, "row": 0, "col": 0, "result": "ok"},
        {"step_number": 1, "row": "0", "col": 0, "result": "ok"},
        {"step_number": 1, "row": True, "col": 0, "result": "ok"},
    ])
    def test_malformed_move_rejected(self, client, store, temporal, payload):
        game_id = _create(client)
        resp = client.post(f"/api/games/{game_id}/moves", json=payload)
        assert resp.status_code == 400
        assert store.get_moves(game_id) == []
        assert temporal.started == []

    def test_off_board_move_rejected(self, client, store):
        game_id = _create(client)
        resp = _step(client, game_id, 1, 2, 0, "ok")
        assert resp.status_code == 400
        assert store.get_moves(game_id) == []

    def test_unknown_game(self, client, temporal):
        resp = _step(client, 99, 1, 0, 0, "ok")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Game not found"}
        assert temporal.started == []


class TestReadGames:
    def test_get_game_with_moves(self, client):
        game_id = _create(client)
        _step(client, game_id, 1, 0, 0, "ok")
        _step(client, game_id, 2, 1, 1, "won")

        data = client.get(f"/api/games/{game_id}").get_json()
        assert data["id"] == game_id
        assert data["mine_locations"] == [1, 2]
        assert data["status"] == "won"
        assert data["moves"] == [
            {"step_number": 1, "row": 0, "col": 0, "result": "ok"},
            {"step_number": 2, "row": 1, "col": 1, "result": "won"},
        ]

    def test_get_missing_game(self, client):
        resp = client.get("/api/games/12345")
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Game not found"

    def test_list_games(self, client):
        first = _create(client, player_name="a")
        second = _create(client, player_name="b")

        data = client.get("/api/games").get_json()
        assert [g["id"] for g in data] == [second, first]
        assert "mine_locations" not in data[0]
        assert data[0]["status_label"] == "in progress"

    def test_unknown_route_is_json(self, client):
        resp = client.get("/api/nothing-here")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Not found"}


class TestReplay:
    def test_replay_steps(self, client):
        game_id = _create(client)
        _step(client, game_id, 1, 0, 0, "ok")
        _step(client, game_id, 2, 1, 1, "won")

        data = client.get(f"/api/games/{game_id}/replay").get_json()
        assert len(data["steps"]) == 2
        assert data["steps"][0]["cells"] == [
            {"row": 0, "col": 0, "adjacentMines": 2, "isMine": False},
        ]
        assert data["steps"][1]["status"] == "won"
        assert data["status"] == data["stored_status"] == "won"
        assert data["message"] == "Game over (won)"

    def test_replay_missing_game(self, client):
        resp = client.get("/api/games/5/replay")
        assert resp.status_code == 404


def test_health(client):
    data = client.get("/api/health").get_json()
    assert data["status"] == "OK"
    assert "timestamp" in data
