import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from maze_loop.core.grid import Grid

logger = logging.getLogger("maze_loop.view")

# Maze source meaning "carve a fresh maze this cycle"
GENERATE_NEW = "generate-new"


class Mode(Enum):
    FIXED = "fixed"
    RANDOMIZED = "randomized"


class GenerationAlgorithm(Enum):
    DFS_RANDOM = "dfs"
    PRIM = "prim"


class SolveAlgorithm(Enum):
    DFS = "dfs"
    BFS = "bfs"


class MazeView(ABC):
    """
    What the orchestrator needs from whatever draws the maze.
    Implementations are called from the worker thread and must not mutate the grid.
    """

    @abstractmethod
    def current_drawable_size(self) -> Tuple[int, int]:
        pass

    @abstractmethod
    def size_multiplier(self) -> int:
        pass

    @abstractmethod
    def cycle_delay_millis(self) -> int:
        pass

    @abstractmethod
    def selected_mode(self) -> Mode:
        pass

    @abstractmethod
    def selected_generation_algorithm(self) -> GenerationAlgorithm:
        pass

    @abstractmethod
    def selected_solve_algorithm(self) -> SolveAlgorithm:
        pass

    @abstractmethod
    def current_maze_source(self) -> str:
        """A maze file path, or GENERATE_NEW."""
        pass

    @abstractmethod
    def notify_updated(self, grid: Grid):
        pass


@dataclass
class StaticView(MazeView):
    """Fixed-setting view for headless runs and tests."""
    width: int = 800
    height: int = 600
    multiplier: int = 1
    delay_millis: int = 0
    mode: Mode = Mode.FIXED
    generation_algorithm: GenerationAlgorithm = GenerationAlgorithm.DFS_RANDOM
    solve_algorithm: SolveAlgorithm = SolveAlgorithm.BFS
    source: str = GENERATE_NEW
    update_count: int = 0
    last_grid: Optional[Grid] = None

    def current_drawable_size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def size_multiplier(self) -> int:
        return self.multiplier

    def cycle_delay_millis(self) -> int:
        return self.delay_millis

    def selected_mode(self) -> Mode:
        return self.mode

    def selected_generation_algorithm(self) -> GenerationAlgorithm:
        return self.generation_algorithm

    def selected_solve_algorithm(self) -> SolveAlgorithm:
        return self.solve_algorithm

    def current_maze_source(self) -> str:
        return self.source

    def notify_updated(self, grid: Grid):
        self.update_count += 1
        self.last_grid = grid
        logger.debug(f"Update #{self.update_count}: {grid.rows}x{grid.cols}")
