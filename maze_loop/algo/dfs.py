from typing import Iterator, List

from maze_loop.core.grid import Position
from maze_loop.algo.base import Generator

class RecursiveBacktracker(Generator):
    def run(self) -> Iterator[str]:
        grid = self.grid
        start_row, start_col = self.start
        grid.set_visited(start_row, start_col)

        stack: List[Position] = [(start_row, start_col)]

        while stack:
            crow, ccol = stack[-1]

            # Unvisited neighbors, stride 1
            neighbors = [
                (nrow, ncol, dir_bit)
                for nrow, ncol, dir_bit in grid.neighbors(crow, ccol)
                if not grid.is_visited(nrow, ncol)
            ]

            if neighbors:
                nrow, ncol, dir_bit = self.rng.choice(neighbors)

                grid.carve(crow, ccol, dir_bit)
                grid.set_visited(nrow, ncol)

                stack.append((nrow, ncol))
                self.step_count += 1

                if self.step_count % self.YIELD_EVERY == 0:
                    yield f"Carving... Stack: {len(stack)}"
            else:
                # Backtrack
                stack.pop()

        yield "Done"
