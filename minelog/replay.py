"""Step-by-step replay of a stored move log."""
from typing import List, Optional, Sequence

from minelog.board import Board
from minelog.errors import MinelogError
from minelog.session import GameSession
from minelog.types import GameDetails, GameStatus, Move, MoveOutcome, StepDelta

FINAL_MESSAGES = {
    MoveOutcome.WON: 'Game over (won)',
    MoveOutcome.EXPLODED: 'Game over (explosion)',
}


class ReplayFinished(MinelogError):
    """Raised when advancing a replay that has no moves left."""


class ReplayEngine:
    """Drives a fresh GameSession through a recorded move sequence.

    The recorded coordinates decide what is shown at every step; the stored
    outcome label of the last move only selects the final status message.
    """

    def __init__(self, board: Board, moves: Sequence[Move]):
        self.board = board
        self.moves: List[Move] = sorted(moves, key=lambda m: m.step_number)
        self.session = GameSession(board)
        self.position = 0

    @classmethod
    def from_details(cls, details: GameDetails) -> 'ReplayEngine':
        game = details.game
        board = Board.from_locations(game.width, game.height, game.mine_locations)
        return cls(board, details.moves)

    @property
    def status(self) -> GameStatus:
        return self.session.status

    def steps_remaining(self) -> int:
        return len(self.moves) - self.position

    def is_finished(self) -> bool:
        return self.position >= len(self.moves)

    def advance(self) -> StepDelta:
        """Replay the next recorded move and return what became visible."""
        if self.is_finished():
            raise ReplayFinished('Replay finished')

        move = self.moves[self.position]
        self.position += 1

        result = self.session.reveal(move.row, move.col)
        if result is None:
            return StepDelta(move=move, cells=[], status=self.session.status, applied=False)
        return StepDelta(
            move=move,
            cells=result.cells,
            status=result.status,
            exploded=result.exploded,
        )

    def run(self) -> List[StepDelta]:
        """Advance through every remaining move."""
        deltas = []
        while not self.is_finished():
            deltas.append(self.advance())
        return deltas

    def rewind(self) -> None:
        self.session = GameSession(self.board)
        self.position = 0

    def final_message(self) -> Optional[str]:
        """Status message once the replay is over, None while moves remain."""
        if not self.is_finished():
            return None
        if not self.moves:
            return 'No moves recorded'
        return FINAL_MESSAGES.get(self.moves[-1].outcome, 'Game not finished')
