"""Temporal workflow that records one game's moves."""
import asyncio
from datetime import timedelta
from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from minelog.activities import GameLogActivities
    from minelog.replay import ReplayEngine
    from minelog.session import GameSession
    from minelog.types import GameStatus, Move, MoveAck, next_status

STORE_TIMEOUT = timedelta(seconds=30)
STORE_RETRY_POLICY = RetryPolicy(
    maximum_attempts=5,
    non_retryable_error_types=['GameNotFound'],
)
INACTIVITY_TIMEOUT = timedelta(hours=24)


def workflow_id_for(game_id: int) -> str:
    return f"minelog-game-{game_id}"


@workflow.defn
class GameRecorderWorkflow:
    """Serializes the move log writes of a single game.

    On start the stored moves are replayed into a shadow session, which then
    follows every new move so that client-reported outcomes can be compared
    with what the board says. The client's label is always what gets stored.
    """

    def __init__(self):
        self.game_id: int = 0
        self.session: GameSession | None = None
        self.recorded_status: GameStatus = GameStatus.PLAYING
        self.moves_recorded: int = 0
        self.last_activity_time: float = 0
        self.lock = asyncio.Lock()

    @workflow.run
    async def run(self, game_id: int) -> int:
        """Main workflow entry point. Returns the number of moves stored."""
        self.game_id = game_id
        self.last_activity_time = workflow.time()

        details = await workflow.execute_activity_method(
            GameLogActivities.load_game,
            game_id,
            start_to_close_timeout=STORE_TIMEOUT,
            retry_policy=STORE_RETRY_POLICY,
        )
        engine = ReplayEngine.from_details(details)
        engine.run()
        self.session = engine.session
        self.recorded_status = details.game.status
        self.moves_recorded = len(details.moves)

        while True:
            remaining = INACTIVITY_TIMEOUT.total_seconds() - (workflow.time() - self.last_activity_time)
            if remaining <= 0:
                workflow.logger.info(f"Game {game_id} recorder closing after inactivity")
                break
            seen = self.last_activity_time
            try:
                await workflow.wait_condition(lambda: self.last_activity_time != seen, timeout=remaining)
            except asyncio.TimeoutError:
                pass

        await workflow.wait_condition(workflow.all_handlers_finished)
        workflow.logger.info(f"Game {game_id} recorder completed with {self.moves_recorded} moves")
        return self.moves_recorded

    @workflow.update
    async def record_move_update(self, move: Move) -> MoveAck:
        """Store a move, then the status change a terminal outcome implies."""
        await workflow.wait_condition(lambda: self.session is not None)

        async with self.lock:
            self.last_activity_time = workflow.time()

            await workflow.execute_activity_method(
                GameLogActivities.append_move,
                args=[self.game_id, move],
                start_to_close_timeout=STORE_TIMEOUT,
                retry_policy=STORE_RETRY_POLICY,
            )
            self.moves_recorded += 1

            status = next_status(self.recorded_status, move.outcome)
            if status is not None:
                await workflow.execute_activity_method(
                    GameLogActivities.set_game_status,
                    args=[self.game_id, status],
                    start_to_close_timeout=STORE_TIMEOUT,
                    retry_policy=STORE_RETRY_POLICY,
                )
                self.recorded_status = status

            result = self.session.reveal(move.row, move.col)
            computed = result.move.outcome if result else None
            if computed != move.outcome:
                workflow.logger.warning(
                    f"Game {self.game_id} step {move.step_number}: client reported "
                    f"{move.outcome.value}, board says {computed.value if computed else 'no-op'}"
                )

            return MoveAck(
                game_id=self.game_id,
                step_number=move.step_number,
                status=self.recorded_status,
                outcome_matches=computed == move.outcome,
            )
