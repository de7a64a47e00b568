import random
import unittest
from unittest import mock
import sys
import os
import tempfile

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from maze_loop.core.errors import MalformedMazeFile
from maze_loop.core.grid import Grid
from maze_loop.algo.dfs import RecursiveBacktracker
from maze_loop.algo.prim import PrimsAlgorithm
from maze_loop.algo.solvers import BFS
from maze_loop.io.codec import MazeCodec, SOLVED_SUFFIX, is_solved_path, solved_path

UNSOLVED_3X3 = (
    "MAZE 3 3\n"
    "9S5.3.\n"
    "8.7.a.\n"
    "c.7.eG\n"
)

SOLVED_3X3 = (
    "MAZE 3 3\n"
    "9S5*3*\n"
    "8.7.a*\n"
    "c.7.eG\n"
)

def build_3x3():
    grid = Grid(3, 3)
    grid.carve(0, 0, Grid.EAST)
    grid.carve(0, 1, Grid.EAST)
    grid.carve(0, 2, Grid.SOUTH)
    grid.carve(1, 2, Grid.SOUTH)
    grid.carve(0, 0, Grid.SOUTH)
    grid.carve(1, 0, Grid.EAST)
    grid.carve(1, 0, Grid.SOUTH)
    grid.carve(2, 0, Grid.EAST)
    return grid

class FirstPick(random.Random):
    """Always takes the first candidate, counting how often it was asked."""

    def __init__(self):
        super().__init__(0)
        self.calls = 0

    def choice(self, seq):
        self.calls += 1
        return seq[0]

# Wall nibbles per row after carving 9x9 from (0,0) with FirstPick:
# east along row 0, then a serpentine down/up the columns from the right
FIRST_PICK_WALLS_9X9 = [
    "d55555553",
    "93939393a",
    "aaaaaaaaa",
    "aaaaaaaaa",
    "aaaaaaaaa",
    "aaaaaaaaa",
    "aaaaaaaaa",
    "aaaaaaaaa",
    "ec6c6c6c6",
]

FIRST_PICK_PATH_9X9 = [(0, col) for col in range(9)] + [(row, 8) for row in range(1, 9)]

FIRST_PICK_SOLVED_9X9 = (
    "MAZE 9 9\n"
    "dS5*5*5*5*5*5*5*3*\n"
    "9.3.9.3.9.3.9.3.a*\n"
    "a.a.a.a.a.a.a.a.a*\n"
    "a.a.a.a.a.a.a.a.a*\n"
    "a.a.a.a.a.a.a.a.a*\n"
    "a.a.a.a.a.a.a.a.a*\n"
    "a.a.a.a.a.a.a.a.a*\n"
    "a.a.a.a.a.a.a.a.a*\n"
    "e.c.6.c.6.c.6.c.6G\n"
)

class TestCodec(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.out_dir = self.tmp.name

    def tearDown(self):
        self.tmp.cleanup()

    def test_encode_fixture(self):
        grid = build_3x3()
        self.assertEqual(MazeCodec.encode(grid), UNSOLVED_3X3)

        BFS(grid).solve()
        self.assertEqual(MazeCodec.encode(grid), SOLVED_3X3)

    def test_decode_fixture(self):
        grid = MazeCodec.decode(SOLVED_3X3)
        self.assertTrue(grid.walls_equal(build_3x3()))
        self.assertEqual(grid.start, (0, 0))
        self.assertEqual(grid.goal, (2, 2))
        self.assertTrue(grid.is_on_path(1, 2))
        self.assertFalse(grid.is_on_path(1, 1))

    def test_text_round_trip(self):
        for text in (UNSOLVED_3X3, SOLVED_3X3):
            self.assertEqual(MazeCodec.encode(MazeCodec.decode(text)), text)

    def test_grid_round_trip(self):
        for cls in (RecursiveBacktracker, PrimsAlgorithm):
            grid = Grid(11, 15)
            cls(grid, seed=21).run_all()
            decoded = MazeCodec.decode(MazeCodec.encode(grid))
            self.assertTrue(grid.walls_equal(decoded))

    def test_custom_start_goal(self):
        grid = Grid(3, 5, start=(1, 2), goal=(0, 4))
        text = MazeCodec.encode(grid)
        self.assertEqual(text.splitlines()[2], "f.f.fSf.f.")
        decoded = MazeCodec.decode(text)
        self.assertEqual(decoded.start, (1, 2))
        self.assertEqual(decoded.goal, (0, 4))

    def test_missing_markers_use_corners(self):
        grid = MazeCodec.decode("MAZE 1 3\nd.5.7.\n")
        self.assertEqual(grid.start, (0, 0))
        self.assertEqual(grid.goal, (0, 2))

    def test_malformed(self):
        cases = {
            "empty": "",
            "bad magic": "MAZ 3 3\n9S5.3.\n8.7.a.\nc.7.eG\n",
            "non numeric": "MAZE three 3\n",
            "too few rows": "MAZE 3 3\n9S5.3.\n8.7.a.\n",
            "too many rows": UNSOLVED_3X3 + "f.f.f.\n",
            "short line": "MAZE 3 3\n9S5.3\n8.7.a.\nc.7.eG\n",
            "unknown wall": "MAZE 3 3\n9S5.x.\n8.7.a.\nc.7.eG\n",
            "uppercase wall": "MAZE 3 3\n9S5.3.\n8.7.A.\nc.7.eG\n",
            "unknown marker": "MAZE 3 3\n9S5?3.\n8.7.a.\nc.7.eG\n",
            "two starts": "MAZE 3 3\n9S5S3.\n8.7.a.\nc.7.eG\n",
            "two goals": "MAZE 3 3\n9S5G3.\n8.7.a.\nc.7.eG\n",
            "asymmetric": "MAZE 3 3\n9S7.3.\n8.7.a.\nc.7.eG\n",
            "open boundary": "MAZE 1 1\neS\n",
            "even size": "MAZE 2 2\nbSd.\nf.fG\n",
        }
        for name, text in cases.items():
            with self.subTest(name):
                with self.assertRaises(MalformedMazeFile):
                    MazeCodec.decode(text)

    def test_error_reports_line(self):
        with self.assertRaises(MalformedMazeFile) as ctx:
            MazeCodec.decode("MAZE 3 3\n9S5.3.\n8.7.a\nc.7.eG\n")
        self.assertEqual(ctx.exception.line, 3)
        self.assertIn("line 3", str(ctx.exception))

    def test_save_and_load(self):
        grid = Grid(9, 9)
        RecursiveBacktracker(grid, seed=9).run_all()
        path = os.path.join(self.out_dir, "maze.txt")
        MazeCodec.save(grid, path)

        with open(path, "r", encoding="utf-8") as f:
            self.assertEqual(f.read(), MazeCodec.encode(grid))
        self.assertTrue(MazeCodec.load(path).walls_equal(grid))
        # No temp files left behind
        self.assertEqual(os.listdir(self.out_dir), ["maze.txt"])

    def test_failed_save_leaves_nothing(self):
        path = os.path.join(self.out_dir, "maze.txt")
        with mock.patch("maze_loop.io.codec.os.replace", side_effect=OSError("disk full")):
            with self.assertRaises(OSError):
                MazeCodec.save(Grid(3, 3), path)
        self.assertEqual(os.listdir(self.out_dir), [])

    def test_save_overwrites_whole_file(self):
        path = os.path.join(self.out_dir, "maze.txt")
        MazeCodec.save(Grid(9, 9), path)
        MazeCodec.save(build_3x3(), path)
        self.assertEqual(MazeCodec.load(path).rows, 3)

    def test_solved_marker(self):
        self.assertEqual(SOLVED_SUFFIX, "_SOLVED.txt")
        self.assertEqual(solved_path("mazes/a.txt"), "mazes/a.txt_SOLVED.txt")
        self.assertTrue(is_solved_path("mazes/a.txt_SOLVED.txt"))
        self.assertTrue(is_solved_path("b_SOLVED.txt"))
        self.assertFalse(is_solved_path("mazes/a.txt"))
        self.assertFalse(is_solved_path("SOLVED.txt"))

    def test_seeded_9x9_is_reproducible(self):
        def build():
            grid = Grid(9, 9)
            RecursiveBacktracker(grid, seed=2024).run_all()
            return grid

        grid = build()
        # Same seed, same maze
        self.assertEqual(grid.cells.tobytes(), build().cells.tobytes())

        path = BFS(grid).solve()
        self.assertEqual(path[0], (0, 0))
        self.assertEqual(path[-1], (8, 8))
        self.assertEqual(path, BFS(build()).solve())

        text = MazeCodec.encode(grid)
        lines = text.splitlines()
        self.assertEqual(lines[0], "MAZE 9 9")
        self.assertEqual(len(lines), 10)
        self.assertTrue(all(len(line) == 18 for line in lines[1:]))
        self.assertEqual(lines[1][1], "S")
        self.assertEqual(lines[9][17], "G")
        self.assertEqual(sum(line.count("*") for line in lines[1:]), len(path) - 2)

        decoded = MazeCodec.decode(text)
        self.assertTrue(decoded.walls_equal(grid))
        self.assertEqual(MazeCodec.encode(decoded), text)
        self.assertEqual(BFS(decoded).solve(), path)

    def test_end_to_end_9x9(self):
        rng = FirstPick()
        grid = Grid(9, 9)
        RecursiveBacktracker(grid, rng=rng).run_all()

        # One draw per carved passage
        self.assertEqual(rng.calls, 80)
        expected_cells = bytes(
            Grid.VISITED | int(ch, 16) for row in FIRST_PICK_WALLS_9X9 for ch in row
        )
        self.assertEqual(grid.cells.tobytes(), expected_cells)

        path = BFS(grid).solve()
        self.assertEqual(path, FIRST_PICK_PATH_9X9)

        text = MazeCodec.encode(grid)
        self.assertEqual(text, FIRST_PICK_SOLVED_9X9)

        decoded = MazeCodec.decode(text)
        self.assertTrue(decoded.walls_equal(grid))
        self.assertEqual(MazeCodec.encode(decoded), FIRST_PICK_SOLVED_9X9)
        self.assertEqual(BFS(decoded).solve(), FIRST_PICK_PATH_9X9)

if __name__ == '__main__':
    unittest.main()
