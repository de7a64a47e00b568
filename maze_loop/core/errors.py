class MazeError(Exception):
    """Base class for every failure raised by maze_loop."""


class InvalidDimension(MazeError, ValueError):
    """Grid size is non-positive or even, or start/goal fall outside the grid."""


class MalformedMazeFile(MazeError, ValueError):
    def __init__(self, message: str, line: int = None):
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class Cancelled(MazeError):
    """Raised inside the worker when the stop signal is set."""
