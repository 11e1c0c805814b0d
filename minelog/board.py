"""Board model: mine membership, adjacency counts and flood fill."""
import random
from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterable, Iterator, List, Optional, Set, Tuple

# Moore neighbourhood, cell itself excluded
NEIGHBOUR_OFFSETS: Tuple[Tuple[int, int], ...] = tuple(
    (dr, dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1) if (dr, dc) != (0, 0)
)


@dataclass(frozen=True)
class Board:
    """Fixed-size grid with an immutable set of mine indices."""
    width: int
    height: int
    mines: FrozenSet[int]

    @classmethod
    def from_locations(cls, width: int, height: int, locations: Iterable[int]) -> 'Board':
        return cls(width=width, height=height, mines=frozenset(locations))

    @property
    def cell_count(self) -> int:
        return self.width * self.height

    @property
    def safe_cell_count(self) -> int:
        """Number of cells that must be revealed to win."""
        return self.cell_count - len(self.mines)

    def index(self, row: int, col: int) -> int:
        return row * self.width + col

    def coords(self, index: int) -> Tuple[int, int]:
        return divmod(index, self.width)

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def is_mine(self, index: int) -> bool:
        return index in self.mines

    def neighbours(self, row: int, col: int) -> Iterator[Tuple[int, int]]:
        """Yield the in-bounds neighbours of a cell."""
        for dr, dc in NEIGHBOUR_OFFSETS:
            new_row = row + dr
            new_col = col + dc
            if self.in_bounds(new_row, new_col):
                yield new_row, new_col

    def adjacent_mine_count(self, row: int, col: int) -> int:
        """Count the number of mines in neighbouring cells."""
        return sum(1 for r, c in self.neighbours(row, col) if self.is_mine(self.index(r, c)))


def flood_fill(board: Board, row: int, col: int,
               is_open: Callable[[int], bool]) -> List[int]:
    """Return the indices a reveal of the zero-count cell (row, col) opens.

    Zero-count cells are expanded through all eight neighbours, numbered cells
    are opened but not expanded. Cells for which ``is_open`` is true are never
    re-entered, and each index is returned at most once.
    """
    start = board.index(row, col)
    opened: List[int] = [start]
    seen: Set[int] = {start}
    pending: List[Tuple[int, int]] = [(row, col)]

    while pending:
        r, c = pending.pop()
        for nr, nc in board.neighbours(r, c):
            index = board.index(nr, nc)
            if index in seen or is_open(index):
                continue
            seen.add(index)
            opened.append(index)
            if board.adjacent_mine_count(nr, nc) == 0:
                pending.append((nr, nc))

    return opened


def random_mine_locations(width: int, height: int, mines_count: int,
                          rng: Optional[random.Random] = None) -> List[int]:
    """Pick ``mines_count`` distinct cell indices for a new game."""
    positions = list(range(width * height))
    (rng or random).shuffle(positions)
    return sorted(positions[:min(mines_count, len(positions))])
