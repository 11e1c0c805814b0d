"""Tests for the SQLite move log."""
import re
import sqlite3

import pytest

from minelog.errors import GameNotFound
from minelog.store import GameStore
from minelog.types import GameStatus, Move, MoveOutcome


class TestGames:
    def test_create_and_get(self, store):
        game_id = store.create_game(4, 3, 2, [1, 7], "alice")
        game = store.get_game(game_id)

        assert game.id == game_id
        assert (game.width, game.height, game.mines_count) == (4, 3, 2)
        assert game.mine_locations == [1, 7]
        assert game.player_name == "alice"
        assert game.status is GameStatus.PLAYING
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", game.date)

    def test_ids_are_unique(self, store, make_game):
        assert len({make_game() for _ in range(5)}) == 5

    def test_list_most_recent_first(self, store, make_game):
        ids = [make_game(player_name=name) for name in ("a", "b", "c")]
        assert [g.id for g in store.list_games()] == list(reversed(ids))

    def test_missing_game(self, store):
        with pytest.raises(GameNotFound):
            store.get_game(999)

    def test_set_status(self, store, make_game):
        game_id = make_game()
        store.set_game_status(game_id, GameStatus.WON)
        assert store.get_game(game_id).status is GameStatus.WON

    def test_set_status_missing_game(self, store):
        with pytest.raises(GameNotFound):
            store.set_game_status(42, GameStatus.LOST)

    def test_data_survives_reopen(self, store, make_game):
        game_id = make_game()
        reopened = GameStore(store.db_path)
        assert reopened.get_game(game_id).player_name == "alice"


class TestMoves:
    def test_moves_ordered_by_step(self, store, make_game):
        game_id = make_game()
        store.append_move(game_id, 2, 0, 1, MoveOutcome.OK)
        store.append_move(game_id, 1, 0, 0, MoveOutcome.OK)
        store.append_move(game_id, 3, 1, 1, MoveOutcome.EXPLODED)

        assert [m.step_number for m in store.get_moves(game_id)] == [1, 2, 3]
        assert store.get_moves(game_id)[-1].outcome is MoveOutcome.EXPLODED

    def test_moves_belong_to_one_game(self, store, make_game):
        first, second = make_game(), make_game()
        store.append_move(first, 1, 0, 0, MoveOutcome.OK)
        assert store.get_moves(second) == []

    def test_append_to_missing_game_writes_nothing(self, store):
        with pytest.raises(GameNotFound):
            store.append_move(7, 1, 0, 0, MoveOutcome.OK)
        with sqlite3.connect(str(store.db_path)) as conn:
            assert conn.execute("SELECT COUNT(*) FROM moves").fetchone()[0] == 0

    def test_details(self, store, make_game):
        game_id = make_game()
        store.append_move(game_id, 1, 0, 0, MoveOutcome.OK)
        details = store.get_game_details(game_id)
        assert details.game.id == game_id
        assert details.moves == [Move(1, 0, 0, MoveOutcome.OK)]

