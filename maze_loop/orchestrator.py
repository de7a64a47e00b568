import logging
import random
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Type

from maze_loop.algo.base import Generator
from maze_loop.algo.dfs import RecursiveBacktracker
from maze_loop.algo.prim import PrimsAlgorithm
from maze_loop.algo.solvers import BFS, DFS, Solver
from maze_loop.core.errors import Cancelled, MalformedMazeFile
from maze_loop.core.grid import Grid, Position
from maze_loop.core.view import (
    GENERATE_NEW,
    GenerationAlgorithm,
    MazeView,
    Mode,
    SolveAlgorithm,
)
from maze_loop.io.codec import MazeCodec, is_solved_path, solved_path

logger = logging.getLogger("maze_loop.orchestrator")

GENERATORS: Dict[GenerationAlgorithm, Type[Generator]] = {
    GenerationAlgorithm.DFS_RANDOM: RecursiveBacktracker,
    GenerationAlgorithm.PRIM: PrimsAlgorithm,
}

SOLVERS: Dict[SolveAlgorithm, Type[Solver]] = {
    SolveAlgorithm.DFS: DFS,
    SolveAlgorithm.BFS: BFS,
}

# Rows per multiplier step; columns follow the panel's aspect ratio
ROWS_UNIT = 10


def maze_dimensions(width: float, height: float, multiplier: int) -> Tuple[int, int]:
    """
    Picks (rows, cols) so cells come out roughly square on a width x height panel.
    Both results are odd.
    """
    if width > 0 and height > 0:
        ratio = width / height
    else:
        ratio = 1.0
    cols_unit = int(round(ROWS_UNIT * ratio))
    rows = multiplier * ROWS_UNIT + 1
    cols = multiplier * cols_unit + 1
    if cols % 2 == 0:
        cols -= 1
    return max(rows, 1), max(cols, 1)


class CycleStatus(Enum):
    COMPLETED = "completed"
    SKIPPED_SOLVED = "skipped_solved"
    SKIPPED_MALFORMED = "skipped_malformed"
    SKIPPED_UNREACHABLE = "skipped_unreachable"
    SKIPPED_WRITE_FAILED = "skipped_write_failed"


@dataclass
class CycleResult:
    status: CycleStatus
    source: str
    generation_algorithm: Optional[GenerationAlgorithm] = None
    solve_algorithm: Optional[SolveAlgorithm] = None
    grid: Optional[Grid] = None
    path: List[Position] = field(default_factory=list)
    output_path: Optional[str] = None


class Orchestrator:
    """
    Runs generate -> save -> solve -> save cycles against a view until stopped.

    Meant to live on its own thread (see start()) so the view's event loop
    stays free to repaint; the view only ever reads the grid.
    """

    # Wait between cycles that ended early, in seconds
    IDLE_INTERVAL = 0.1

    def __init__(self, view: MazeView, rng: Optional[random.Random] = None,
                 stop_event: Optional[threading.Event] = None,
                 generated_maze_path: str = "generated_maze.txt",
                 step_delay: float = 0.0,
                 generators: Optional[Dict[GenerationAlgorithm, Type[Generator]]] = None,
                 solvers: Optional[Dict[SolveAlgorithm, Type[Solver]]] = None):
        self.view = view
        self.rng = rng if rng is not None else random.Random()
        self.stop_event = stop_event if stop_event is not None else threading.Event()
        self.generated_maze_path = generated_maze_path
        self.step_delay = step_delay
        self.generators = dict(generators if generators is not None else GENERATORS)
        self.solvers = dict(solvers if solvers is not None else SOLVERS)
        self.cycle_count = 0
        self._thread: Optional[threading.Thread] = None

    # --- Worker lifecycle ---

    def start(self) -> threading.Thread:
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("Orchestrator is already running")
        self.stop_event.clear()
        self._thread = threading.Thread(target=self.run, name="maze-orchestrator", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = None):
        self.stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)

    def run(self, max_cycles: Optional[int] = None):
        """Loops cycles until the stop event is set (or max_cycles have run)."""
        logger.info("Orchestrator started")
        try:
            while not self.stop_event.is_set():
                if max_cycles is not None and self.cycle_count >= max_cycles:
                    break
                result = self.run_cycle()
                if result.status is not CycleStatus.COMPLETED:
                    self._pause(self.IDLE_INTERVAL)
        except Cancelled:
            logger.info("Orchestrator cancelled")
        else:
            logger.info(f"Orchestrator stopped after {self.cycle_count} cycles")

    # --- One cycle ---

    def choose_algorithms(self) -> Tuple[GenerationAlgorithm, SolveAlgorithm]:
        if self.view.selected_mode() is Mode.RANDOMIZED:
            gen_algo = self.rng.choice(list(self.generators))
            solve_algo = self.rng.choice(list(self.solvers))
            return gen_algo, solve_algo
        return self.view.selected_generation_algorithm(), self.view.selected_solve_algorithm()

    def run_cycle(self) -> CycleResult:
        self._check_cancelled()
        self.cycle_count += 1

        gen_algo, solve_algo = self.choose_algorithms()
        source = self.view.current_maze_source()
        delay = self.view.cycle_delay_millis() / 1000.0
        result = CycleResult(CycleStatus.COMPLETED, source, gen_algo, solve_algo)

        if source == GENERATE_NEW:
            result.source = source = self.generated_maze_path
            try:
                grid = self.generate(gen_algo)
            except OSError as e:
                logger.warning(f"Skipping cycle, cannot write {source}: {e}")
                result.status = CycleStatus.SKIPPED_WRITE_FAILED
                return result
            result.grid = grid
            self._pause(delay)
        else:
            result.generation_algorithm = None
            try:
                grid = MazeCodec.load(source)
            except (MalformedMazeFile, OSError) as e:
                logger.warning(f"Skipping cycle, cannot load {source}: {e}")
                result.status = CycleStatus.SKIPPED_MALFORMED
                return result
            result.grid = grid
            self.view.notify_updated(grid)
            if is_solved_path(source):
                logger.debug(f"{source} is already solved, skipping")
                result.status = CycleStatus.SKIPPED_SOLVED
                return result

        result.grid = grid
        result.path = self.solve(grid, solve_algo)
        if not result.path:
            logger.warning(f"No path from {grid.start} to {grid.goal} in {source}, skipping cycle")
            result.status = CycleStatus.SKIPPED_UNREACHABLE
            return result

        output_path = solved_path(source)
        try:
            MazeCodec.save(grid, output_path)
        except OSError as e:
            logger.warning(f"Skipping cycle, cannot write {output_path}: {e}")
            result.status = CycleStatus.SKIPPED_WRITE_FAILED
            return result
        result.output_path = output_path
        logger.info(f"Solved {source} with {solve_algo.name}: path length {len(result.path)}")

        self.view.notify_updated(grid)
        self._pause(delay)
        return result

    def generate(self, gen_algo: GenerationAlgorithm) -> Grid:
        width, height = self.view.current_drawable_size()
        rows, cols = maze_dimensions(width, height, self.view.size_multiplier())
        logger.info(f"Generating {rows}x{cols} maze with {gen_algo.name}...")

        grid = Grid(rows, cols)
        generator = self.generators[gen_algo](grid, rng=self.rng)
        self._drive(generator.run(), grid)

        MazeCodec.save(grid, self.generated_maze_path)
        self.view.notify_updated(grid)
        return grid

    def solve(self, grid: Grid, solve_algo: SolveAlgorithm) -> List[Position]:
        logger.info(f"Solving from {grid.start} to {grid.goal} with {solve_algo.name}...")
        solver = self.solvers[solve_algo](grid)
        self._drive(solver.run(), grid)
        return solver.path

    # --- Pacing & cancellation ---

    def _drive(self, steps: Iterator[str], grid: Grid):
        for status in steps:
            logger.debug(status)
            self.view.notify_updated(grid)
            self._check_cancelled()
            if self.step_delay > 0:
                self._pause(self.step_delay)

    def _pause(self, seconds: float):
        if seconds > 0:
            if self.stop_event.wait(seconds):
                raise Cancelled()
        else:
            self._check_cancelled()

    def _check_cancelled(self):
        if self.stop_event.is_set():
            raise Cancelled()
