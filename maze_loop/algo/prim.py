from typing import Iterator, List, Set

from maze_loop.core.grid import Position
from maze_loop.algo.base import Generator

class PrimsAlgorithm(Generator):
    """
    Randomized Prim's: grow the maze from the start cell by repeatedly
    picking a random frontier cell and joining it to one visited neighbor.
    """

    def run(self) -> Iterator[str]:
        grid = self.grid
        start_row, start_col = self.start

        # A carved grid has nothing left to join
        if grid.is_visited(start_row, start_col):
            yield "Done"
            return

        grid.set_visited(start_row, start_col)

        # Set for O(1) membership, list for random choice
        frontier_set: Set[Position] = set()
        frontier_list: List[Position] = []

        def extend_frontier(row, col):
            for nrow, ncol, _ in grid.neighbors(row, col):
                if not grid.is_visited(nrow, ncol) and (nrow, ncol) not in frontier_set:
                    frontier_set.add((nrow, ncol))
                    frontier_list.append((nrow, ncol))

        extend_frontier(start_row, start_col)

        while frontier_list:
            # Swap remove for O(1)
            idx = self.rng.randrange(len(frontier_list))
            crow, ccol = frontier_list[idx]
            frontier_list[idx] = frontier_list[-1]
            frontier_list.pop()
            frontier_set.discard((crow, ccol))

            # Carve from the frontier cell TO one of its visited neighbors
            joined = [
                dir_bit
                for nrow, ncol, dir_bit in grid.neighbors(crow, ccol)
                if grid.is_visited(nrow, ncol)
            ]
            grid.carve(crow, ccol, self.rng.choice(joined))
            grid.set_visited(crow, ccol)
            self.step_count += 1

            extend_frontier(crow, ccol)

            if self.step_count % self.YIELD_EVERY == 0:
                yield f"Frontier: {len(frontier_list)}"

        yield "Done"
