"""Tests for the Temporal activities backing the recording workflow."""
import pytest
from temporalio.exceptions import ApplicationError
from temporalio.testing import ActivityEnvironment

from minelog.activities import GameLogActivities
from minelog.types import GameStatus, Move, MoveOutcome


@pytest.fixture
def activities(store):
    return GameLogActivities(store)


@pytest.fixture
def env():
    return ActivityEnvironment()


def test_load_game_returns_record_and_moves(env, activities, store, make_game):
    game_id = make_game()
    store.append_move(game_id, 1, 0, 0, MoveOutcome.OK)

    details = env.run(activities.load_game, game_id)

    assert details.game.id == game_id
    assert details.moves == [Move(1, 0, 0, MoveOutcome.OK)]


def test_append_move(env, activities, store, make_game):
    game_id = make_game()
    env.run(activities.append_move, game_id, Move(1, 2, 2, MoveOutcome.OK))
    assert store.get_moves(game_id) == [Move(1, 2, 2, MoveOutcome.OK)]


def test_set_game_status(env, activities, store, make_game):
    game_id = make_game()
    env.run(activities.set_game_status, game_id, GameStatus.WON)
    assert store.get_game(game_id).status is GameStatus.WON


@pytest.mark.parametrize("name, args", [
    ("load_game", (404,)),
    ("append_move", (404, Move(1, 0, 0, MoveOutcome.OK))),
    ("set_game_status", (404, GameStatus.LOST)),
])
def test_missing_game_is_not_retryable(env, activities, name, args):
    with pytest.raises(ApplicationError) as excinfo:
        env.run(getattr(activities, name), *args)
    assert excinfo.value.type == "GameNotFound"
    assert excinfo.value.non_retryable
