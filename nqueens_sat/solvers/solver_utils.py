from typing import List, Optional

from ..encoder import NQueensEncoder, get_cell, to_dimacs
from .cvc5_solver import CVC5Solver
from .nqueens_error import NQueensError
from .z3_solver import Z3Solver

MAX_QUEENS = 1000
DEFAULT_TIMEOUT = 600

SOLVERS = {
    "z3": Z3Solver,
    "cvc5": CVC5Solver,
}


def validate_size(size, upper_bound: int = MAX_QUEENS) -> int:
    """Validate a board size given as an int or a numeric string."""
    if isinstance(size, bool):
        raise NQueensError(f"Expected an integer board size instead of {size!r}")
    try:
        n = int(size)
    except (TypeError, ValueError):
        raise NQueensError(f"Expected an integer board size instead of {size!r}")
    if isinstance(size, float) and n != size:
        raise NQueensError(f"Expected an integer board size instead of {size!r}")

    if n <= 0 or n > upper_bound:
        raise NQueensError(
            f"Expected integer in range [1, {upper_bound}] instead of {n}"
        )
    return n


def create_solver(name: str, cnf: str, timeout: float = DEFAULT_TIMEOUT):
    """Instantiate the solver adapter registered under name."""
    if name not in SOLVERS:
        raise NQueensError(
            f"Unknown solver '{name}', expected one of {', '.join(SOLVERS)}"
        )
    return SOLVERS[name](cnf, timeout=timeout)


def empty_board(size: int) -> List[List[bool]]:
    return [[False] * size for _ in range(size)]


def decode_model(model: Optional[List[int]], size: int) -> List[List[bool]]:
    """Place a queen on the cell of every positive literal of the model."""
    board = empty_board(size)
    for lit in model or []:
        # Literals outside the board are not ours to decode
        if 0 < lit <= size * size:
            row, col = get_cell(lit, size)
            board[row][col] = True
    return board


def is_valid_board(board: List[List[bool]]) -> bool:
    """Check one queen per row and column and no two queens on a diagonal."""
    if not board:
        return False

    size = len(board)
    if any(len(row) != size for row in board):
        return False

    queens = [(r, c) for r in range(size) for c in range(size) if board[r][c]]
    if len(queens) != size:
        return False

    rows = {r for r, _ in queens}
    cols = {c for _, c in queens}
    diagonals = {r - c for r, c in queens}
    anti_diagonals = {r + c for r, c in queens}
    return len(rows) == len(cols) == len(diagonals) == len(anti_diagonals) == size


def has_three_in_line(board: List[List[bool]]) -> bool:
    """Check whether any three queens lie on one straight line."""
    queens = [
        (r, c) for r, row in enumerate(board) for c, cell in enumerate(row) if cell
    ]
    for i in range(len(queens)):
        for j in range(i + 1, len(queens)):
            for k in range(j + 1, len(queens)):
                (r0, c0), (r1, c1), (r2, c2) = queens[i], queens[j], queens[k]
                if (r1 - r0) * (c2 - c0) == (r2 - r0) * (c1 - c0):
                    return True
    return False


def render_board(board: List[List[bool]]) -> str:
    return "\n".join("".join("Q" if cell else "." for cell in row) for row in board)


def solve_nqueens(
    size: int,
    solver: str = "z3",
    timeout: float = DEFAULT_TIMEOUT,
    symmetry: bool = True,
    collinear: bool = True,
) -> Optional[List[List[bool]]]:
    """Encode, solve and decode a queens instance.

    Returns:
        The board with queens marked True, or None when the instance is
        unsatisfiable

    Raises:
        NQueensError: If the size is invalid, the solver times out or fails
    """
    size = validate_size(size)
    encoder = NQueensEncoder(size)
    encoder.encode(symmetry=symmetry, collinear=collinear)

    model = create_solver(solver, to_dimacs(encoder), timeout=timeout).solve()
    if model is None:
        return None

    board = decode_model(model, size)
    if not is_valid_board(board):
        raise NQueensError("Decoded board is not a valid queens placement")
    return board
