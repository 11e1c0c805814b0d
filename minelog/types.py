"""Type definitions shared by the game core, the move log and the API."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from minelog.errors import InvalidInput


class GameStatus(str, Enum):
    """Possible game states."""
    PLAYING = 'playing'
    WON = 'won'
    LOST = 'lost'

    @property
    def is_terminal(self) -> bool:
        return self is not GameStatus.PLAYING

    @property
    def label(self) -> str:
        """Human readable status for game listings."""
        return {
            GameStatus.PLAYING: 'in progress',
            GameStatus.WON: 'won',
            GameStatus.LOST: 'lost',
        }[self]


class MoveOutcome(str, Enum):
    """Result label recorded with every move."""
    OK = 'ok'
    EXPLODED = 'exploded'
    WON = 'won'

    @property
    def is_terminal(self) -> bool:
        return self is not MoveOutcome.OK

    @property
    def game_status(self) -> GameStatus:
        """Game status implied by a move with this outcome."""
        if self is MoveOutcome.EXPLODED:
            return GameStatus.LOST
        if self is MoveOutcome.WON:
            return GameStatus.WON
        return GameStatus.PLAYING


def next_status(current: GameStatus, outcome: MoveOutcome) -> Optional[GameStatus]:
    """Status a game moves to after a move with this outcome, None for no change.

    A game leaves 'playing' once, on its first terminal move. Later moves are
    still logged but never change the status again.
    """
    if current.is_terminal or not outcome.is_terminal:
        return None
    return outcome.game_status


class CellState(str, Enum):
    """Visible state of a single cell."""
    HIDDEN = 'hidden'
    REVEALED = 'revealed'
    FLAGGED = 'flagged'


def _require_int(data: Dict[str, Any], key: str, minimum: int = 0) -> int:
    value = data.get(key)
    # bool is an int subclass but never a valid coordinate or size
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidInput(f"Field '{key}' must be an integer")
    if value < minimum:
        raise InvalidInput(f"Field '{key}' must be at least {minimum}")
    return value


def _require_payload(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise InvalidInput('Invalid JSON')
    return data


@dataclass
class Move:
    """A single recorded reveal."""
    step_number: int
    row: int
    col: int
    outcome: MoveOutcome

    @classmethod
    def from_payload(cls, data: Any) -> 'Move':
        """Parse a move submission, raising InvalidInput when malformed."""
        data = _require_payload(data)
        missing = [key for key in ('step_number', 'row', 'col', 'result') if key not in data]
        if missing:
            raise InvalidInput(f"Invalid step data, missing: {', '.join(missing)}")
        try:
            outcome = MoveOutcome(data['result'])
        except ValueError:
            raise InvalidInput(f"Unknown move result: {data['result']!r}")
        return cls(
            step_number=_require_int(data, 'step_number', minimum=1),
            row=_require_int(data, 'row'),
            col=_require_int(data, 'col'),
            outcome=outcome,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'step_number': self.step_number,
            'row': self.row,
            'col': self.col,
            'result': self.outcome.value,
        }


@dataclass
class NewGame:
    """Request to create a new game record."""
    player_name: str
    width: int
    height: int
    mines_count: int
    mine_locations: List[int]

    @classmethod
    def from_payload(cls, data: Any) -> 'NewGame':
        """Parse a create-game submission, raising InvalidInput when malformed."""
        data = _require_payload(data)
        required = ('player_name', 'width', 'height', 'mines_count', 'mine_locations')
        missing = [key for key in required if data.get(key) is None]
        if missing:
            raise InvalidInput(f"Missing required fields: {', '.join(missing)}")

        player_name = data['player_name']
        if not isinstance(player_name, str):
            raise InvalidInput("Field 'player_name' must be a string")

        width = _require_int(data, 'width', minimum=1)
        height = _require_int(data, 'height', minimum=1)
        mines_count = _require_int(data, 'mines_count')
        if mines_count >= width * height:
            raise InvalidInput('Too many mines for the board size')

        locations = data['mine_locations']
        if not isinstance(locations, list):
            raise InvalidInput("Field 'mine_locations' must be a list of cell indices")
        for index in locations:
            if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < width * height:
                raise InvalidInput(f"Mine location out of range: {index!r}")

        return cls(
            player_name=player_name,
            width=width,
            height=height,
            mines_count=mines_count,
            mine_locations=list(locations),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'player_name': self.player_name,
            'width': self.width,
            'height': self.height,
            'mines_count': self.mines_count,
            'mine_locations': list(self.mine_locations),
        }


@dataclass
class GameRecord:
    """Stored game summary."""
    id: int
    date: str
    player_name: str
    width: int
    height: int
    mines_count: int
    mine_locations: List[int]
    status: GameStatus

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameRecord':
        return cls(
            id=int(data['id']),
            date=data['date'],
            player_name=data['player_name'],
            width=int(data['width']),
            height=int(data['height']),
            mines_count=int(data['mines_count']),
            mine_locations=[int(i) for i in data.get('mine_locations') or []],
            status=GameStatus(data['status']),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'date': self.date,
            'player_name': self.player_name,
            'width': self.width,
            'height': self.height,
            'mines_count': self.mines_count,
            'mine_locations': list(self.mine_locations),
            'status': self.status.value,
        }


@dataclass
class GameDetails:
    """A game record together with its ordered move log."""
    game: GameRecord
    moves: List[Move] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameDetails':
        return cls(
            game=GameRecord.from_dict(data),
            moves=[
                Move(
                    step_number=int(m['step_number']),
                    row=int(m['row']),
                    col=int(m['col']),
                    outcome=MoveOutcome(m['result']),
                )
                for m in data.get('moves') or []
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = self.game.to_dict()
        payload['moves'] = [move.to_dict() for move in self.moves]
        return payload


@dataclass
class RevealedCell:
    """A cell that became visible, with what it shows."""
    row: int
    col: int
    adjacent_mines: int
    is_mine: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'row': self.row,
            'col': self.col,
            'adjacentMines': self.adjacent_mines,
            'isMine': self.is_mine,
        }


@dataclass
class RevealResult:
    """Outcome of one successful reveal in a game session."""
    move: Move
    cells: List[RevealedCell]
    status: GameStatus
    exploded: Optional[RevealedCell] = None


@dataclass
class StepDelta:
    """Visible change produced by advancing a replay by one recorded move."""
    move: Move
    cells: List[RevealedCell]
    status: GameStatus
    exploded: Optional[RevealedCell] = None
    applied: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'move': self.move.to_dict(),
            'cells': [cell.to_dict() for cell in self.cells],
            'status': self.status.value,
            'exploded': self.exploded.to_dict() if self.exploded else None,
            'applied': self.applied,
        }


@dataclass
class MoveAck:
    """Returned by the recording workflow once a move is stored."""
    game_id: int
    step_number: int
    status: GameStatus
    outcome_matches: bool = True
