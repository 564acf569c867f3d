"""
Board primitives: cells, board sizes and the rectangular grid.

The same types describe both the ground-truth board held by the engine and
the player-visible board handed to the solver. On a player-visible board any
cell that is not revealed reads as ``CellType.UNKNOWN``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from .utils import Point, get_neighborhoods, get_points


class CellType(Enum):
    """What a cell holds, as far as the holder of the board knows."""
    SAFE = "safe"
    MINE = "mine"
    UNKNOWN = "unknown"


class CellState(Enum):
    """How a cell currently appears to the player"""
    HIDDEN = "hidden"
    REVEALED = "revealed"
    FLAGGED = "flagged"


@dataclass(frozen=True)
class Cell:
    """A single cell; ``number`` is the adjacent mine count of a SAFE cell."""
    cell_type: CellType = CellType.SAFE
    state: CellState = CellState.HIDDEN
    number: int = 0

    @classmethod
    def safe(cls, number: int, state: CellState = CellState.HIDDEN) -> "Cell":
        if not 0 <= number <= 8:
            raise ValueError(f"a safe cell's number must be 0-8, got {number}.")
        return cls(CellType.SAFE, state, number)

    @classmethod
    def mine(cls, state: CellState = CellState.HIDDEN) -> "Cell":
        return cls(CellType.MINE, state)

    @classmethod
    def unknown(cls, state: CellState = CellState.HIDDEN) -> "Cell":
        return cls(CellType.UNKNOWN, state)

    @property
    def is_hidden(self) -> bool:
        return self.state == CellState.HIDDEN

    @property
    def is_revealed(self) -> bool:
        return self.state == CellState.REVEALED

    @property
    def is_flagged(self) -> bool:
        return self.state == CellState.FLAGGED

    @property
    def is_mine(self) -> bool:
        return self.cell_type == CellType.MINE

    @property
    def is_safe(self) -> bool:
        return self.cell_type == CellType.SAFE

    @property
    def is_numbered(self) -> bool:
        """True for a revealed safe cell with at least one adjacent mine."""
        return self.is_revealed and self.is_safe and self.number > 0

    def with_state(self, state: CellState) -> "Cell":
        return Cell(self.cell_type, state, self.number)

    def masked(self) -> "Cell":
        """Hide the type of a cell that is not revealed."""
        if self.is_revealed:
            return self
        return Cell(CellType.UNKNOWN, self.state)

    def symbol(self, reveal_all: bool = False) -> str:
        if reveal_all or self.is_revealed:
            if self.cell_type == CellType.SAFE:
                return str(self.number)
            if self.cell_type == CellType.MINE:
                return "M"
            if self.is_revealed:
                return "?"
        if self.is_flagged:
            return "F"
        return "."


class BoardSizeError(ValueError):
    """Raised when a board size cannot describe a playable game."""


@dataclass(frozen=True)
class BoardSize:
    """Declared dimensions and mine count of a board."""
    width: int
    height: int
    mines: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise BoardSizeError(
                f"board size cannot be {self.width} by {self.height}"
            )
        if self.mines <= 0:
            raise BoardSizeError("board cannot have 0 mines")
        if self.mines >= self.width * self.height:
            raise BoardSizeError(
                f"board cannot have {self.mines} mines "
                f"(max: {self.width * self.height})"
            )

    @property
    def cell_count(self) -> int:
        return self.width * self.height

    def contains(self, point: Point) -> bool:
        x, y = point
        return 0 <= x < self.width and 0 <= y < self.height

    def neighbours(self, point: Point) -> Tuple[Point, ...]:
        """Return the up-to-8 grid-adjacent points, clipped at edges and corners."""
        return get_neighborhoods(self.width, self.height)[point]

    def points(self) -> Tuple[Point, ...]:
        """Return every point in row-major order."""
        return get_points(self.width, self.height)


class ConventionalSize(Enum):
    """Standard difficulty levels."""
    BEGINNER = (9, 9, 10)
    INTERMEDIATE = (16, 16, 40)
    EXPERT = (30, 16, 99)

    @property
    def size(self) -> BoardSize:
        width, height, mines = self.value
        return BoardSize(width, height, mines)


EMPTY_CELL = Cell.safe(0)


class Board:
    """
    Rectangular grid of cells, indexed by ``(x, y)`` points.

    Cells are immutable, so ``copy`` only duplicates the row lists; a copy can
    be mutated freely without touching the original.
    """

    def __init__(self, size: BoardSize, cell: Cell = EMPTY_CELL) -> None:
        self._size = size
        self._grid: List[List[Cell]] = [
            [cell for _ in range(size.width)] for _ in range(size.height)
        ]

    @property
    def size(self) -> BoardSize:
        return self._size

    @property
    def width(self) -> int:
        return self._size.width

    @property
    def height(self) -> int:
        return self._size.height

    def __getitem__(self, point: Point) -> Cell:
        x, y = point
        return self._grid[y][x]

    def __setitem__(self, point: Point, cell: Cell) -> None:
        x, y = point
        self._grid[y][x] = cell

    def __iter__(self) -> Iterator[Cell]:
        for row in self._grid:
            yield from row

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._size == other._size and self._grid == other._grid

    def __repr__(self) -> str:
        return f"Board({self._size!r})"

    def __str__(self) -> str:
        return self.format_board()

    def points(self) -> Tuple[Point, ...]:
        return self._size.points()

    def neighbours(self, point: Point) -> Tuple[Point, ...]:
        return self._size.neighbours(point)

    def copy(self) -> "Board":
        board = Board.__new__(Board)
        board._size = self._size
        board._grid = [list(row) for row in self._grid]
        return board

    def hide_mines(self) -> "Board":
        """Return a copy in which every non-revealed cell reads as UNKNOWN."""
        board = Board.__new__(Board)
        board._size = self._size
        board._grid = [[cell.masked() for cell in row] for row in self._grid]
        return board

    def has_won(self) -> bool:
        for cell in self:
            if cell.is_mine and cell.is_revealed:
                return False
            if cell.is_safe and not cell.is_revealed:
                return False
        return True

    def count_flags(self, point: Point) -> int:
        return sum(1 for n in self.neighbours(point) if self[n].is_flagged)

    def find(
        self,
        cell_type: Optional[CellType] = None,
        state: Optional[CellState] = None,
    ) -> List[Point]:
        """Return the row-major points whose cells match the given type/state."""
        return [
            p
            for p in self.points()
            if (cell_type is None or self[p].cell_type == cell_type)
            and (state is None or self[p].state == state)
        ]

    def format_board(self, reveal_all: bool = False) -> str:
        """
        Render the board as a multi-line string with coordinate labels.

        Args:
            reveal_all: If True, show the type of hidden and flagged cells too.
        """
        header = " ".join(f"{x:2d}" for x in range(self.width))
        out = ["   " + header, "   " + "-" * (3 * self.width - 1)]
        for y, row in enumerate(self._grid):
            cells = " ".join(f" {cell.symbol(reveal_all)}" for cell in row)
            out.append(f"{y:2d} |" + cells)
        return "\n".join(out)
