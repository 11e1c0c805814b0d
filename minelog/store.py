"""SQLite-backed game and move log storage."""
import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Union

from minelog.errors import GameNotFound
from minelog.types import GameDetails, GameRecord, GameStatus, Move, MoveOutcome

logger = logging.getLogger(__name__)

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS games (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    date TEXT,
    player_name TEXT,
    width INTEGER,
    height INTEGER,
    mines_count INTEGER,
    mine_locations TEXT,
    status TEXT
);

CREATE TABLE IF NOT EXISTS moves (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    game_id INTEGER NOT NULL,
    step_number INTEGER,
    row INTEGER,
    col INTEGER,
    result TEXT,
    FOREIGN KEY(game_id) REFERENCES games(id)
);

CREATE INDEX IF NOT EXISTS idx_moves_game_step ON moves(game_id, step_number);
"""


class GameStore:
    """Append-only move log plus one summary row per game."""

    def __init__(self, db_path: Union[str, Path]):
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    @contextmanager
    def _get_conn(self):
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._get_conn() as conn:
            conn.executescript(SCHEMA_SQL)
        logger.info(f"Game store ready at {self._db_path}")

    @staticmethod
    def _row_to_game(row: sqlite3.Row) -> GameRecord:
        return GameRecord(
            id=row['id'],
            date=row['date'],
            player_name=row['player_name'],
            width=row['width'],
            height=row['height'],
            mines_count=row['mines_count'],
            mine_locations=json.loads(row['mine_locations'] or '[]'),
            status=GameStatus(row['status']),
        )

    @staticmethod
    def _row_to_move(row: sqlite3.Row) -> Move:
        return Move(
            step_number=row['step_number'],
            row=row['row'],
            col=row['col'],
            outcome=MoveOutcome(row['result']),
        )

    def create_game(self, width: int, height: int, mines_count: int,
                    mine_locations: Iterable[int], player_name: str) -> int:
        """Insert a new game with status 'playing' and return its id."""
        with self._get_conn() as conn:
            cursor = conn.execute(
                "INSERT INTO games (date, player_name, width, height, mines_count, mine_locations, status) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    datetime.now().strftime(DATE_FORMAT),
                    player_name,
                    width,
                    height,
                    mines_count,
                    json.dumps(list(mine_locations)),
                    GameStatus.PLAYING.value,
                ),
            )
            game_id = cursor.lastrowid
        logger.info(f"Created game {game_id} for {player_name!r} ({width}x{height}, {mines_count} mines)")
        return game_id

    def _require_game(self, conn: sqlite3.Connection, game_id: int) -> None:
        row = conn.execute("SELECT 1 FROM games WHERE id = ?", (game_id,)).fetchone()
        if row is None:
            raise GameNotFound(game_id)

    def append_move(self, game_id: int, step_number: int, row: int, col: int,
                    outcome: MoveOutcome) -> None:
        with self._get_conn() as conn:
            self._require_game(conn, game_id)
            conn.execute(
                "INSERT INTO moves (game_id, step_number, row, col, result) VALUES (?, ?, ?, ?, ?)",
                (game_id, step_number, row, col, MoveOutcome(outcome).value),
            )

    def set_game_status(self, game_id: int, status: GameStatus) -> None:
        with self._get_conn() as conn:
            cursor = conn.execute(
                "UPDATE games SET status = ? WHERE id = ?",
                (GameStatus(status).value, game_id),
            )
            if cursor.rowcount == 0:
                raise GameNotFound(game_id)
        logger.info(f"Game {game_id} marked {GameStatus(status).value}")

    def get_game(self, game_id: int) -> GameRecord:
        with self._get_conn() as conn:
            row = conn.execute("SELECT * FROM games WHERE id = ?", (game_id,)).fetchone()
        if row is None:
            raise GameNotFound(game_id)
        return self._row_to_game(row)

    def get_moves(self, game_id: int) -> List[Move]:
        with self._get_conn() as conn:
            rows = conn.execute(
                "SELECT * FROM moves WHERE game_id = ? ORDER BY step_number ASC, id ASC",
                (game_id,),
            ).fetchall()
        return [self._row_to_move(row) for row in rows]

    def get_game_details(self, game_id: int) -> GameDetails:
        return GameDetails(game=self.get_game(game_id), moves=self.get_moves(game_id))

    def list_games(self) -> List[GameRecord]:
        """All games, most recent first."""
        with self._get_conn() as conn:
            rows = conn.execute("SELECT * FROM games ORDER BY id DESC").fetchall()
        return [self._row_to_game(row) for row in rows]
