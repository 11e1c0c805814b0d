"""Temporal activities that read and write the game store."""
from temporalio import activity
from temporalio.exceptions import ApplicationError

from minelog.errors import GameNotFound
from minelog.store import GameStore
from minelog.types import GameDetails, GameStatus, Move


def _not_found(error: GameNotFound) -> ApplicationError:
    return ApplicationError(str(error), type='GameNotFound', non_retryable=True)


class GameLogActivities:
    """Move log operations bound to one store.

    The methods are synchronous; the worker runs them on a thread pool.
    """

    def __init__(self, store: GameStore):
        self.store = store

    @activity.defn
    def load_game(self, game_id: int) -> GameDetails:
        """Load a game record and its moves so far."""
        try:
            details = self.store.get_game_details(game_id)
        except GameNotFound as error:
            raise _not_found(error) from error
        activity.logger.info(f"Loaded game {game_id} with {len(details.moves)} moves")
        return details

    @activity.defn
    def append_move(self, game_id: int, move: Move) -> None:
        try:
            self.store.append_move(game_id, move.step_number, move.row, move.col, move.outcome)
        except GameNotFound as error:
            raise _not_found(error) from error

    @activity.defn
    def set_game_status(self, game_id: int, status: GameStatus) -> None:
        try:
            self.store.set_game_status(game_id, status)
        except GameNotFound as error:
            raise _not_found(error) from error
