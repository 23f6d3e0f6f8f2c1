from typing import Tuple


def in_bounds(row: int, col: int, size: int) -> bool:
    """Check whether a cell lies on the board."""
    return 0 <= row < size and 0 <= col < size


def get_var(row: int, col: int, size: int) -> int:
    """Convert a board position to its CNF variable."""
    # Validate inputs
    if not (0 <= row < size):
        raise ValueError(f"Row must be between 0 and {size-1}")
    if not (0 <= col < size):
        raise ValueError(f"Column must be between 0 and {size-1}")

    return row * size + col + 1


def get_cell(var: int, size: int) -> Tuple[int, int]:
    """Convert a CNF variable back to its (row, column) position."""
    if not (1 <= var <= size * size):
        raise ValueError(f"Variable must be between 1 and {size * size}")

    return (var - 1) // size, (var - 1) % size
