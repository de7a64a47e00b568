import logging
import os
import tempfile
from typing import List

from maze_loop.core.errors import InvalidDimension, MalformedMazeFile
from maze_loop.core.grid import Grid

logger = logging.getLogger("maze_loop.codec")

# Appended to a maze file path to name its solved copy
SOLVED_SUFFIX = "_SOLVED.txt"


def solved_path(path: str) -> str:
    return path + SOLVED_SUFFIX


def is_solved_path(path: str) -> bool:
    return str(path).endswith(SOLVED_SUFFIX)


class MazeCodec:
    """
    Plain-text maze format.

    Format:
    - Header line: "MAZE <rows> <cols>"
    - One line per grid row, 2 characters per cell:
        1. wall nibble as a lowercase hex digit (N=1, E=2, S=4, W=8)
        2. marker: '.' plain, 'S' start, 'G' goal, '*' on solution path
    Start and goal markers win over the path marker. Lines end with '\n'.
    """
    MAGIC = "MAZE"

    PLAIN = "."
    START = "S"
    GOAL = "G"
    PATH = "*"
    MARKERS = (PLAIN, START, GOAL, PATH)

    HEX_DIGITS = "0123456789abcdef"

    @staticmethod
    def encode(grid: Grid) -> str:
        lines = [f"{MazeCodec.MAGIC} {grid.rows} {grid.cols}"]
        for row in range(grid.rows):
            chunks = []
            for col in range(grid.cols):
                val = grid.cells[grid.get_index(row, col)]
                if (row, col) == grid.start:
                    marker = MazeCodec.START
                elif (row, col) == grid.goal:
                    marker = MazeCodec.GOAL
                elif val & Grid.PATH:
                    marker = MazeCodec.PATH
                else:
                    marker = MazeCodec.PLAIN
                chunks.append(MazeCodec.HEX_DIGITS[val & Grid.ALL_WALLS] + marker)
            lines.append("".join(chunks))
        return "\n".join(lines) + "\n"

    @staticmethod
    def decode(text: str) -> Grid:
        lines = text.split("\n")
        # A trailing newline leaves one empty element behind
        if lines and lines[-1] == "":
            lines.pop()
        if not lines:
            raise MalformedMazeFile("empty maze file")

        rows, cols = MazeCodec._parse_header(lines[0])
        body = lines[1:]
        if len(body) != rows:
            raise MalformedMazeFile(f"declared {rows} rows but found {len(body)}")

        walls: List[int] = []
        paths: List[bool] = []
        start = goal = None

        for row, line in enumerate(body):
            lineno = row + 2
            if len(line) != 2 * cols:
                raise MalformedMazeFile(
                    f"expected {2 * cols} characters for {cols} columns, got {len(line)}", lineno)
            for col in range(cols):
                wall_sym, marker = line[2 * col], line[2 * col + 1]
                if wall_sym not in MazeCodec.HEX_DIGITS:
                    raise MalformedMazeFile(f"unknown wall symbol {wall_sym!r}", lineno)
                if marker not in MazeCodec.MARKERS:
                    raise MalformedMazeFile(f"unknown marker symbol {marker!r}", lineno)

                if marker == MazeCodec.START:
                    if start is not None:
                        raise MalformedMazeFile("more than one start cell", lineno)
                    start = (row, col)
                elif marker == MazeCodec.GOAL:
                    if goal is not None:
                        raise MalformedMazeFile("more than one goal cell", lineno)
                    goal = (row, col)

                walls.append(MazeCodec.HEX_DIGITS.index(wall_sym))
                paths.append(marker == MazeCodec.PATH)

        try:
            grid = Grid(rows, cols, start=start, goal=goal)
        except InvalidDimension as e:
            raise MalformedMazeFile(str(e), 1) from e

        for idx, (wall_bits, on_path) in enumerate(zip(walls, paths)):
            grid.cells[idx] = wall_bits | (Grid.PATH if on_path else 0)

        MazeCodec._check_walls(grid)
        return grid

    @staticmethod
    def _parse_header(line: str):
        parts = line.split()
        if len(parts) != 3 or parts[0] != MazeCodec.MAGIC:
            raise MalformedMazeFile(f"expected '{MazeCodec.MAGIC} <rows> <cols>' header", 1)
        try:
            return int(parts[1]), int(parts[2])
        except ValueError as e:
            raise MalformedMazeFile(f"non-numeric dimensions in header {line!r}", 1) from e

    @staticmethod
    def _check_walls(grid: Grid):
        for row in range(grid.rows):
            for col in range(grid.cols):
                for dir_bit in Grid.DIRECTIONS:
                    target = grid.neighbor(row, col, dir_bit)
                    closed = grid.has_wall(row, col, dir_bit)
                    if target is None:
                        if not closed:
                            raise MalformedMazeFile(f"open boundary wall at ({row}, {col})", row + 2)
                    elif closed != grid.has_wall(target[0], target[1], Grid.OPPOSITE[dir_bit]):
                        raise MalformedMazeFile(
                            f"wall between ({row}, {col}) and {target} differs by side", row + 2)

    @staticmethod
    def save(grid: Grid, filepath: str):
        """
        Writes the encoded grid next to its destination, then swaps it in,
        so readers never see a half-written maze.
        """
        text = MazeCodec.encode(grid)
        directory = os.path.dirname(os.path.abspath(filepath))
        fd, tmp_path = tempfile.mkstemp(prefix=".maze-", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(text)
            os.replace(tmp_path, filepath)
        except BaseException:
            os.unlink(tmp_path)
            raise
        logger.debug(f"Saved {grid.rows}x{grid.cols} maze to {filepath}")

    @staticmethod
    def load(filepath: str) -> Grid:
        with open(filepath, "rb") as f:
            data = f.read()
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedMazeFile(f"not UTF-8 text at byte {e.start}") from e
        return MazeCodec.decode(text)
