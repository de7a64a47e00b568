import random
from abc import ABC, abstractmethod
from typing import Iterator, Optional

from maze_loop.core.grid import Grid, Position

class Generator(ABC):
    # Yield a progress update every N carve/backtrack steps
    YIELD_EVERY = 10

    def __init__(self, grid: Grid, seed: int = None, rng: Optional[random.Random] = None,
                 start: Optional[Position] = None):
        self.grid = grid
        self.seed = seed
        # An injected rng wins over the seed so callers can share one random source
        self.rng = rng if rng is not None else random.Random(seed)
        self.start = start if start is not None else grid.start
        self.step_count = 0

    @abstractmethod
    def run(self) -> Iterator[str]:
        """
        Yields status strings or progress updates.
        The actual grid modifications happen in-place on self.grid.
        """
        pass

    def run_all(self):
        """Helper to run the generator to completion."""
        for _ in self.run():
            pass
