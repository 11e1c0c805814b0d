"""Environment-driven configuration for the server, worker and client."""
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_TASK_QUEUE = 'minelog-task-queue'


@dataclass
class Settings:
    port: int = 3000
    db_path: str = 'db/database.sqlite'
    temporal_address: str = 'localhost:7233'
    temporal_namespace: str = 'default'
    temporal_profile: Optional[str] = None
    task_queue: str = DEFAULT_TASK_QUEUE
    server_url: str = 'http://localhost:3000'
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls) -> 'Settings':
        return cls(
            port=int(os.getenv('PORT', 3000)),
            db_path=os.getenv('MINELOG_DB_PATH', 'db/database.sqlite'),
            temporal_address=os.getenv('TEMPORAL_ADDRESS', 'localhost:7233'),
            temporal_namespace=os.getenv('TEMPORAL_NAMESPACE', 'default'),
            temporal_profile=os.getenv('TEMPORAL_PROFILE') or None,
            task_queue=os.getenv('MINELOG_TASK_QUEUE', DEFAULT_TASK_QUEUE),
            server_url=os.getenv('MINELOG_SERVER_URL', 'http://localhost:3000'),
            log_level=os.getenv('MINELOG_LOG_LEVEL', 'INFO').upper(),
        )
