"""Temporal worker for the game recording pipeline."""
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor

from temporalio.worker import Worker

from minelog.activities import GameLogActivities
from minelog.client_provider import get_temporal_client
from minelog.settings import Settings
from minelog.store import GameStore
from minelog.workflows import GameRecorderWorkflow

logger = logging.getLogger(__name__)


async def run_worker(settings: Settings) -> None:
    """Connect to Temporal and process recording workflows until stopped."""
    client = await get_temporal_client(settings)
    store_activities = GameLogActivities(GameStore(settings.db_path))

    with ThreadPoolExecutor(max_workers=8) as executor:
        worker = Worker(
            client,
            task_queue=settings.task_queue,
            workflows=[GameRecorderWorkflow],
            activities=[
                store_activities.load_game,
                store_activities.append_move,
                store_activities.set_game_status,
            ],
            activity_executor=executor,
        )

        logger.info("Worker started, connected to Temporal")
        logger.info(f"Listening on task queue: {settings.task_queue}")
        await worker.run()


def main():
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)
    asyncio.run(run_worker(settings))


if __name__ == "__main__":
    main()
