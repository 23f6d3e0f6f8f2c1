from .nqueens_error import NQueensError
from .z3_solver import Z3Solver
from .cvc5_solver import CVC5Solver
from .solver_utils import (
    DEFAULT_TIMEOUT,
    MAX_QUEENS,
    create_solver,
    decode_model,
    empty_board,
    has_three_in_line,
    is_valid_board,
    render_board,
    solve_nqueens,
    validate_size,
)
