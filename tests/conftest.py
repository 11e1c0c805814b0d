import pytest

from minelog import server
from minelog.store import GameStore
from minelog.types import Move, MoveAck, next_status


class FakeWorkflowHandle:
    """Stands in for a recording workflow by writing straight to the store."""

    def __init__(self, store: GameStore, game_id: int):
        self.store = store
        self.game_id = game_id

    async def execute_update(self, update, move: Move) -> MoveAck:
        self.store.append_move(self.game_id, move.step_number, move.row, move.col, move.outcome)
        status = next_status(self.store.get_game(self.game_id).status, move.outcome)
        if status is not None:
            self.store.set_game_status(self.game_id, status)
        return MoveAck(
            game_id=self.game_id,
            step_number=move.step_number,
            status=self.store.get_game(self.game_id).status,
        )


class FakeTemporalClient:
    def __init__(self, store: GameStore):
        self.store = store
        self.started = []

    async def start_workflow(self, workflow, game_id, *, id, task_queue, id_conflict_policy):
        self.started.append({'game_id': game_id, 'id': id, 'task_queue': task_queue})
        return FakeWorkflowHandle(self.store, game_id)


@pytest.fixture
def store(tmp_path):
    return GameStore(tmp_path / "db" / "database.sqlite")


@pytest.fixture
def temporal(store):
    return FakeTemporalClient(store)


@pytest.fixture
def client(monkeypatch, store, temporal):
    monkeypatch.setattr(server, "store", store)
    monkeypatch.setattr(server, "temporal_client", temporal)
    server.app.config["TESTING"] = True
    with server.app.test_client() as c:
        yield c


@pytest.fixture
def make_game(store):
    def _make(width=3, height=3, mines=(4,), player_name="alice"):
        return store.create_game(width, height, len(mines), list(mines), player_name)
    return _make
