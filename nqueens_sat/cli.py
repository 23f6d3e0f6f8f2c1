import argparse
import sys

from .encoder import NQueensEncoder, write_dimacs
from .solvers import (
    DEFAULT_TIMEOUT,
    NQueensError,
    empty_board,
    render_board,
    solve_nqueens,
    validate_size,
)
from .solvers.solver_utils import SOLVERS


def build_parser():
    parser = argparse.ArgumentParser(
        prog="nqueens-sat",
        description="Solve the n-queens problem (variant) with a SAT encoding.",
    )
    parser.add_argument("n", help="board size")
    parser.add_argument(
        "--solver", choices=sorted(SOLVERS), default="z3", help="solver backend"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="solver timeout in seconds",
    )
    parser.add_argument(
        "--no-symmetry",
        action="store_true",
        help="skip the symmetry breaking clauses",
    )
    parser.add_argument(
        "--no-collinear",
        action="store_true",
        help="skip the three-in-line clauses",
    )
    parser.add_argument(
        "--dimacs",
        action="store_true",
        help="print the CNF instead of solving it",
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        n = validate_size(args.n)

        if args.dimacs:
            encoder = NQueensEncoder(n)
            encoder.encode(symmetry=not args.no_symmetry, collinear=not args.no_collinear)
            write_dimacs(encoder, sys.stdout)
            return 0

        board = solve_nqueens(
            n,
            solver=args.solver,
            timeout=args.timeout,
            symmetry=not args.no_symmetry,
            collinear=not args.no_collinear,
        )
    except NQueensError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(render_board(board if board is not None else empty_board(n)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
