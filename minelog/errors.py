"""Errors raised by the game core and the move log."""


class MinelogError(Exception):
    """Base class for minelog errors."""


class InvalidInput(MinelogError):
    """A create or move submission is malformed or missing fields."""


class GameNotFound(MinelogError):
    """No game is stored under the requested id."""

    def __init__(self, game_id):
        super().__init__(f"Game not found: {game_id}")
        self.game_id = game_id


class IllegalMove(MinelogError):
    """A reveal was requested that the session cannot apply."""

    def __init__(self, row: int, col: int, reason: str):
        super().__init__(f"Cannot reveal ({row}, {col}): {reason}")
        self.row = row
        self.col = col
        self.reason = reason
