"""Per-game state machine for live play and replay."""
import logging
from typing import List, Optional, Set

from minelog.board import Board, flood_fill
from minelog.errors import IllegalMove
from minelog.types import CellState, GameStatus, Move, MoveOutcome, RevealedCell, RevealResult

logger = logging.getLogger(__name__)


class GameSession:
    """Tracks open and flagged cells, the step counter and the game status.

    Only reveals produce moves. Flags are a local annotation: they never
    consume a step and never change which cells a reveal opens, so a stored
    move log replays to the same board whether or not the player used flags.
    """

    def __init__(self, board: Board):
        self.board = board
        self.status = GameStatus.PLAYING
        self.step = 0
        self.exploded: Optional[int] = None
        self._revealed: Set[int] = set()
        self._flagged: Set[int] = set()

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def revealed_count(self) -> int:
        return len(self._revealed)

    @property
    def flag_count(self) -> int:
        return len(self._flagged)

    def cell_state(self, row: int, col: int) -> CellState:
        index = self.board.index(row, col)
        if index in self._revealed:
            return CellState.REVEALED
        if index in self._flagged:
            return CellState.FLAGGED
        return CellState.HIDDEN

    def _rejection_reason(self, row: int, col: int) -> Optional[str]:
        if self.is_terminal:
            return f"game is already {self.status.value}"
        if not self.board.in_bounds(row, col):
            return 'cell is off the board'
        if self.board.index(row, col) in self._revealed:
            return 'cell is already revealed'
        return None

    def require_reveal(self, row: int, col: int) -> RevealResult:
        """Reveal a cell, raising IllegalMove instead of ignoring the request."""
        reason = self._rejection_reason(row, col)
        if reason:
            raise IllegalMove(row, col, reason)
        return self._apply_reveal(row, col)

    def reveal(self, row: int, col: int) -> Optional[RevealResult]:
        """Reveal a cell. Returns None when the request is a no-op."""
        reason = self._rejection_reason(row, col)
        if reason:
            logger.debug(f"Ignoring reveal of ({row}, {col}): {reason}")
            return None
        return self._apply_reveal(row, col)

    def _open(self, index: int) -> RevealedCell:
        self._revealed.add(index)
        self._flagged.discard(index)
        row, col = self.board.coords(index)
        return RevealedCell(
            row=row,
            col=col,
            adjacent_mines=self.board.adjacent_mine_count(row, col),
            is_mine=self.board.is_mine(index),
        )

    def _apply_reveal(self, row: int, col: int) -> RevealResult:
        board = self.board
        index = board.index(row, col)
        cells: List[RevealedCell] = []
        exploded = None

        if board.is_mine(index):
            self.exploded = index
            exploded = self._open(index)
            cells.append(exploded)
            # Reveal all mines
            for mine in sorted(board.mines - self._revealed):
                cells.append(self._open(mine))
            self.status = GameStatus.LOST
            outcome = MoveOutcome.EXPLODED
        else:
            if board.adjacent_mine_count(row, col) == 0:
                opened = flood_fill(board, row, col, self._revealed.__contains__)
            else:
                opened = [index]
            cells.extend(self._open(i) for i in opened)

            # Check win condition
            if self.revealed_count == board.safe_cell_count:
                self.status = GameStatus.WON
                outcome = MoveOutcome.WON
            else:
                outcome = MoveOutcome.OK

        self.step += 1
        move = Move(step_number=self.step, row=row, col=col, outcome=outcome)
        return RevealResult(move=move, cells=cells, status=self.status, exploded=exploded)

    def toggle_flag(self, row: int, col: int) -> bool:
        """Toggle a flag on a hidden cell. Returns whether anything changed."""
        if self.is_terminal or not self.board.in_bounds(row, col):
            return False
        index = self.board.index(row, col)
        if index in self._revealed:
            return False
        if index in self._flagged:
            self._flagged.remove(index)
        else:
            self._flagged.add(index)
        return True
