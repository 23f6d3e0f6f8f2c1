from .nqueens_encoder import NQueensEncoder
from .dimacs import parse_dimacs, to_dimacs, write_dimacs
from .utils import get_cell, get_var, in_bounds
