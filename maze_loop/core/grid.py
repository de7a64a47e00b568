import operator
from array import array
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np

from maze_loop.core.errors import InvalidDimension

Position = Tuple[int, int]


@dataclass(frozen=True)
class Cell:
    row: int
    col: int
    north: bool
    south: bool
    east: bool
    west: bool
    visited: bool
    on_path: bool


class Grid:
    # Bitmask Constants
    NORTH = 0b00000001
    EAST  = 0b00000010
    SOUTH = 0b00000100
    WEST  = 0b00001000

    # Flags
    VISITED = 0b00010000
    PATH    = 0b00100000

    # All walls present by default (N|E|S|W) = 15
    ALL_WALLS = NORTH | EAST | SOUTH | WEST
    MARKS = VISITED | PATH

    # Fixed iteration order: N, E, S, W
    DIRECTIONS = (NORTH, EAST, SOUTH, WEST)

    # Direction Helpers (row, col deltas)
    DROW = {NORTH: -1, SOUTH: 1, EAST: 0, WEST: 0}
    DCOL = {NORTH: 0, SOUTH: 0, EAST: 1, WEST: -1}
    OPPOSITE = {NORTH: SOUTH, SOUTH: NORTH, EAST: WEST, WEST: EAST}

    __slots__ = ('rows', 'cols', 'cells', 'start', 'goal')

    def __init__(self, rows: int, cols: int, start: Optional[Position] = None,
                 goal: Optional[Position] = None):
        rows = self._checked_size(rows, "rows")
        cols = self._checked_size(cols, "cols")
        self.rows = rows
        self.cols = cols
        # 1 byte per cell, all walls present
        self.cells = array('B', [self.ALL_WALLS] * (rows * cols))

        self.start = self._checked(start if start is not None else (0, 0), "start")
        self.goal = self._checked(goal if goal is not None else (rows - 1, cols - 1), "goal")

    @staticmethod
    def _checked_size(value, name: str) -> int:
        # Accepts numpy integers, refuses bools and floats
        if isinstance(value, bool):
            raise InvalidDimension(f"{name} must be a positive odd integer, got {value!r}")
        try:
            size = operator.index(value)
        except TypeError:
            raise InvalidDimension(f"{name} must be a positive odd integer, got {value!r}") from None
        if size <= 0 or size % 2 == 0:
            raise InvalidDimension(f"{name} must be a positive odd integer, got {value!r}")
        return size

    def _checked(self, pos: Position, name: str) -> Position:
        row, col = pos
        if not self.in_bounds(row, col):
            raise InvalidDimension(f"{name} {pos} lies outside a {self.rows}x{self.cols} grid")
        return (row, col)

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def get_index(self, row: int, col: int) -> int:
        if self.in_bounds(row, col):
            return row * self.cols + col
        raise IndexError(f"Coordinate ({row}, {col}) out of bounds")

    def neighbor(self, row: int, col: int, dir_bit: int) -> Optional[Position]:
        """Returns the adjacent position in 'dir_bit', or None past the boundary."""
        nrow, ncol = row + self.DROW[dir_bit], col + self.DCOL[dir_bit]
        if self.in_bounds(nrow, ncol):
            return (nrow, ncol)
        return None

    def carve(self, row: int, col: int, dir_bit: int):
        """
        Removes the wall between (row, col) and the neighbor in 'dir_bit'.
        Also removes the OPPOSITE wall from the neighbor.
        """
        target = self.neighbor(row, col, dir_bit)
        if target is None:
            return # Cannot carve into void

        self.cells[self.get_index(row, col)] &= ~dir_bit
        self.cells[self.get_index(*target)] &= ~self.OPPOSITE[dir_bit]

    def add_wall(self, row: int, col: int, dir_bit: int):
        self.cells[self.get_index(row, col)] |= dir_bit

        # Handle neighbor (strict consistency)
        target = self.neighbor(row, col, dir_bit)
        if target is not None:
            self.cells[self.get_index(*target)] |= self.OPPOSITE[dir_bit]

    def has_wall(self, row: int, col: int, dir_bit: int) -> bool:
        return (self.cells[self.get_index(row, col)] & dir_bit) != 0

    def set_visited(self, row: int, col: int, visited: bool = True):
        idx = self.get_index(row, col)
        if visited:
            self.cells[idx] |= self.VISITED
        else:
            self.cells[idx] &= ~self.VISITED

    def is_visited(self, row: int, col: int) -> bool:
        return (self.cells[self.get_index(row, col)] & self.VISITED) != 0

    def set_on_path(self, row: int, col: int, on_path: bool = True):
        idx = self.get_index(row, col)
        if on_path:
            self.cells[idx] |= self.PATH
        else:
            self.cells[idx] &= ~self.PATH

    def is_on_path(self, row: int, col: int) -> bool:
        return (self.cells[self.get_index(row, col)] & self.PATH) != 0

    def clear_marks(self):
        """Drops visited and path flags everywhere, leaving walls untouched."""
        keep = self.ALL_WALLS
        for i in range(len(self.cells)):
            self.cells[i] &= keep

    def neighbors(self, row: int, col: int) -> Iterator[Tuple[int, int, int]]:
        """
        Yields (nrow, ncol, direction_to_neighbor) for all valid grid neighbors.
        Does NOT check walls (that's for pathfinding).
        """
        for dir_bit in self.DIRECTIONS:
            target = self.neighbor(row, col, dir_bit)
            if target is not None:
                yield (target[0], target[1], dir_bit)

    def open_neighbors(self, row: int, col: int) -> Iterator[Tuple[int, int, int]]:
        """
        Same as neighbors(), restricted to those NOT blocked by a wall.
        """
        val = self.cells[self.get_index(row, col)]
        for nrow, ncol, dir_bit in self.neighbors(row, col):
            if not (val & dir_bit):
                yield (nrow, ncol, dir_bit)

    def cell(self, row: int, col: int) -> Cell:
        val = self.cells[self.get_index(row, col)]
        return Cell(
            row=row,
            col=col,
            north=bool(val & self.NORTH),
            south=bool(val & self.SOUTH),
            east=bool(val & self.EAST),
            west=bool(val & self.WEST),
            visited=bool(val & self.VISITED),
            on_path=bool(val & self.PATH),
        )

    def iter_cells(self) -> Iterator[Cell]:
        for row in range(self.rows):
            for col in range(self.cols):
                yield self.cell(row, col)

    def __iter__(self) -> Iterator[Cell]:
        return self.iter_cells()

    def snapshot(self) -> np.ndarray:
        # Copy out of the live buffer so the worker can keep mutating
        arr = np.frombuffer(self.cells, dtype=np.uint8).reshape((self.rows, self.cols)).copy()
        arr.flags.writeable = False
        return arr

    def walls_equal(self, other: "Grid") -> bool:
        if (self.rows, self.cols, self.start, self.goal) != (other.rows, other.cols, other.start, other.goal):
            return False
        mask = self.ALL_WALLS
        return all((a & mask) == (b & mask) for a, b in zip(self.cells, other.cells))

    def __repr__(self):
        return f"Grid(rows={self.rows}, cols={self.cols}, start={self.start}, goal={self.goal})"
