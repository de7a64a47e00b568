import argparse
import logging
import random
import sys
import os

# Ensure project root is in path so we can import 'maze_loop' package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from maze_loop.core.errors import MalformedMazeFile
from maze_loop.core.grid import Grid
from maze_loop.core.view import GENERATE_NEW, GenerationAlgorithm, Mode, SolveAlgorithm, StaticView
from maze_loop.io.codec import MazeCodec, solved_path
from maze_loop.orchestrator import GENERATORS, SOLVERS, Orchestrator

def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Maze Loop: generate, solve and persist mazes")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    gen_algos = [a.value for a in GenerationAlgorithm]
    solve_algos = [a.value for a in SolveAlgorithm]

    # Generate Command
    gen_parser = subparsers.add_parser("generate", help="Generate a new maze file")
    gen_parser.add_argument("--rows", type=int, default=21, help="Maze rows (odd)")
    gen_parser.add_argument("--cols", type=int, default=21, help="Maze columns (odd)")
    gen_parser.add_argument("--algo", type=str, default="dfs", choices=gen_algos, help="Generation Algorithm")
    gen_parser.add_argument("--seed", type=int, default=None, help="Random Seed")
    gen_parser.add_argument("--out", type=str, default="generated_maze.txt", help="Output file path")

    # Solve Command
    solve_parser = subparsers.add_parser("solve", help="Solve an existing maze file")
    solve_parser.add_argument("input_file", help="Path to maze file")
    solve_parser.add_argument("--algo", type=str, default="bfs", choices=solve_algos, help="Solver algorithm")

    # Run Command
    run_parser = subparsers.add_parser("run", help="Loop generate/solve cycles until interrupted")
    run_parser.add_argument("--width", type=int, default=800, help="Drawable width the maze is fitted to")
    run_parser.add_argument("--height", type=int, default=600, help="Drawable height the maze is fitted to")
    run_parser.add_argument("--multiplier", type=int, default=1, help="Maze size multiplier")
    run_parser.add_argument("--delay-ms", type=int, default=500, help="Pause after each phase (ms)")
    run_parser.add_argument("--mode", type=str, default="fixed", choices=[m.value for m in Mode], help="Algorithm selection mode")
    run_parser.add_argument("--gen-algo", type=str, default="dfs", choices=gen_algos, help="Generation algorithm in fixed mode")
    run_parser.add_argument("--solve-algo", type=str, default="bfs", choices=solve_algos, help="Solve algorithm in fixed mode")
    run_parser.add_argument("--source", type=str, default=GENERATE_NEW, help=f"Maze file to solve, or '{GENERATE_NEW}'")
    run_parser.add_argument("--out", type=str, default="generated_maze.txt", help="Where generated mazes are written")
    run_parser.add_argument("--seed", type=int, default=None, help="Random Seed")
    run_parser.add_argument("--cycles", type=int, default=None, help="Stop after this many cycles")

    return parser

def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger("maze_loop")

    if args.command is None:
        parser.print_help()
        return 0

    logger.info(f"Running command: {args.command}")

    if args.command == "generate":
        algo = GenerationAlgorithm(args.algo)
        grid = Grid(args.rows, args.cols)
        logger.info(f"Generating {grid.rows}x{grid.cols} maze with {algo.name}...")
        GENERATORS[algo](grid, seed=args.seed).run_all()

        logger.info(f"Saving maze to {args.out}...")
        MazeCodec.save(grid, args.out)
        logger.info("Save complete.")

    elif args.command == "solve":
        logger.info(f"Loading {args.input_file}...")
        try:
            grid = MazeCodec.load(args.input_file)
        except (MalformedMazeFile, OSError) as e:
            logger.error(f"Cannot read {args.input_file}: {e}")
            return 1
        logger.info(f"Loaded {grid.rows}x{grid.cols} maze.")

        algo = SolveAlgorithm(args.algo)
        solver = SOLVERS[algo](grid)
        logger.info(f"Solving with {algo.name} from {grid.start} to {grid.goal}...")
        path = solver.solve()
        if not path:
            logger.warning(f"No path found (visited {solver.visited_count} cells).")
            return 1

        out = solved_path(args.input_file)
        try:
            MazeCodec.save(grid, out)
        except OSError as e:
            logger.error(f"Cannot write {out}: {e}")
            return 1
        logger.info(f"Path length {len(path)}, visited {solver.visited_count}. Saved {out}")

    elif args.command == "run":
        view = StaticView(
            width=args.width,
            height=args.height,
            multiplier=args.multiplier,
            delay_millis=args.delay_ms,
            mode=Mode(args.mode),
            generation_algorithm=GenerationAlgorithm(args.gen_algo),
            solve_algorithm=SolveAlgorithm(args.solve_algo),
            source=args.source,
        )
        orchestrator = Orchestrator(view, rng=random.Random(args.seed), generated_maze_path=args.out)
        try:
            orchestrator.run(max_cycles=args.cycles)
        except KeyboardInterrupt:
            orchestrator.stop()
            logger.info("Interrupted.")

    return 0

if __name__ == "__main__":
    sys.exit(main())
