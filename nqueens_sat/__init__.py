from .encoder import NQueensEncoder, to_dimacs, parse_dimacs
from .solvers import Z3Solver, CVC5Solver, NQueensError, solve_nqueens
from .benchmarks import BenchmarkRunner
