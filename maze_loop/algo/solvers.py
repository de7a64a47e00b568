from abc import ABC, abstractmethod
from array import array
from collections import deque
from typing import Iterator, List, Optional

from maze_loop.core.grid import Grid, Position

class Solver(ABC):
    # Yield a progress update every N expanded cells
    YIELD_EVERY = 10

    def __init__(self, grid: Grid):
        self.grid = grid
        self.path: List[Position] = []
        self.visited_count = 0
        self.parents = None

    @property
    def reachable(self) -> bool:
        return bool(self.path)

    def run(self, start: Optional[Position] = None, end: Optional[Position] = None) -> Iterator[str]:
        """
        Searches from start to end (grid start/goal by default), marking
        visited cells as it goes. Leaves the result in self.path, which stays
        empty when the goal cannot be reached.
        """
        start = start if start is not None else self.grid.start
        end = end if end is not None else self.grid.goal

        self.path = []
        self.grid.clear_marks()
        # Dense parent array: 0 = None, otherwise direction back to the parent
        self.parents = array('B', [0] * (self.grid.rows * self.grid.cols))

        self.grid.set_visited(*start)
        self.visited_count = 1

        found = False
        for status in self.search(start, end):
            if status is True:
                found = True
                break
            yield status

        if found:
            self.reconstruct_path(start, end)
            yield "Solved"
        else:
            yield "Unreachable"

    def solve(self, start: Optional[Position] = None, end: Optional[Position] = None) -> List[Position]:
        for _ in self.run(start, end):
            pass
        return self.path

    @abstractmethod
    def search(self, start: Position, end: Position) -> Iterator:
        """
        Yields progress strings, then True once 'end' has been reached.
        Exhausting without yielding True means unreachable.
        """
        pass

    def expand(self, current: Position) -> Iterator[Position]:
        """Marks and records the parent of every unvisited open neighbor of current."""
        grid = self.grid
        crow, ccol = current
        for nrow, ncol, direction in grid.open_neighbors(crow, ccol):
            if not grid.is_visited(nrow, ncol):
                grid.set_visited(nrow, ncol)
                self.visited_count += 1
                # Store Parent Direction (Inverse)
                self.parents[grid.get_index(nrow, ncol)] = Grid.OPPOSITE[direction]
                yield (nrow, ncol)

    def reconstruct_path(self, start: Position, end: Position):
        curr = end
        while curr != start:
            self.path.append(curr)
            p_dir = self.parents[self.grid.get_index(*curr)]
            curr = (curr[0] + Grid.DROW[p_dir], curr[1] + Grid.DCOL[p_dir])

        self.path.append(start)
        self.path.reverse()

        for row, col in self.path:
            self.grid.set_on_path(row, col)

class DFS(Solver):
    def search(self, start: Position, end: Position) -> Iterator:
        stack = [start]
        count = 0

        while stack:
            current = stack.pop()
            if current == end:
                yield True
                return

            stack.extend(self.expand(current))

            count += 1
            if count % self.YIELD_EVERY == 0:
                yield f"Visited: {self.visited_count}"

class BFS(Solver):
    def search(self, start: Position, end: Position) -> Iterator:
        queue = deque([start])
        count = 0

        while queue:
            current = queue.popleft()
            if current == end:
                yield True
                return

            queue.extend(self.expand(current))

            count += 1
            if count % self.YIELD_EVERY == 0:
                yield f"Visited: {self.visited_count}"
