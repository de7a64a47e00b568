import sys
import os
import time
import argparse

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from maze_loop.core.grid import Grid
from maze_loop.core.view import GenerationAlgorithm, SolveAlgorithm
from maze_loop.orchestrator import GENERATORS, SOLVERS

def run_benchmark():
    parser = argparse.ArgumentParser(description="Solver Benchmark")
    parser.add_argument("--rows", type=int, default=201, help="Maze Rows (odd)")
    parser.add_argument("--cols", type=int, default=201, help="Maze Columns (odd)")
    parser.add_argument("--algo", type=str, default="dfs", choices=[a.value for a in GenerationAlgorithm], help="Generation Algorithm")
    parser.add_argument("--seed", type=int, default=None, help="Random Seed")
    args = parser.parse_args()

    print(f"=== MAZE SOLVER BENCHMARK ===")
    print(f"Size: {args.rows}x{args.cols} | Generator: {args.algo}")
    print("-" * 50)

    # 1. Generate Maze
    t0 = time.time()
    grid = Grid(args.rows, args.cols)
    GENERATORS[GenerationAlgorithm(args.algo)](grid, seed=args.seed).run_all()
    print(f"Generation Complete in {time.time() - t0:.4f}s.")
    print("-" * 50)

    # 2. Race Loop (solvers clear visited/path bits themselves)
    results = []
    for algo in SolveAlgorithm:
        print(f"Running {algo.name}...", end="", flush=True)
        solver = SOLVERS[algo](grid)

        t_start = time.time()
        solver.solve()
        duration = time.time() - t_start

        print(f" Done ({duration:.4f}s) | Path: {len(solver.path)}")
        results.append({
            "name": algo.name,
            "time": duration,
            "path": len(solver.path),
            "visited": solver.visited_count,
        })

    # 3. Leaderboard
    print("=" * 60)
    print(f"{'RANK':<5} | {'ALGORITHM':<20} | {'TIME (s)':<10} | {'PATH':<8} | {'VISITED':<8}")
    print("-" * 60)

    results.sort(key=lambda x: x['time'])

    for i, res in enumerate(results):
        print(f"{i+1:<5} | {res['name']:<20} | {res['time']:<10.4f} | {res['path']:<8} | {res['visited']:<8}")
    print("=" * 60)

if __name__ == "__main__":
    run_benchmark()
