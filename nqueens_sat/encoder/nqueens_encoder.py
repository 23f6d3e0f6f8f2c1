from typing import List, Sequence

from .utils import get_var, in_bounds


class NQueensEncoder:
    def __init__(self, size: int) -> None:
        if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
            raise ValueError("Size must be a positive integer")

        self.size = size
        self.num_variables = size * size
        self.max_step = (size - 1) // 2
        self.clauses: List[List[int]] = []

    def in_bounds(self, row: int, col: int) -> bool:
        return in_bounds(row, col, self.size)

    def walk(self, row: int, col: int, row_step: int, col_step: int) -> List[int]:
        """Collect the variables on the ray starting at (row, col), start included."""
        variables = []
        while len(variables) < self.size and self.in_bounds(row, col):
            variables.append(get_var(row, col, self.size))
            row += row_step
            col += col_step
        return variables

    def add_clause(self, literals: Sequence[int]) -> None:
        """Append a disjunction of literals to the clause list."""
        for lit in literals:
            if lit == 0 or abs(lit) > self.num_variables:
                raise ValueError(
                    f"Literal {lit} out of range for {self.num_variables} variables"
                )
        self.clauses.append(list(literals))

    def at_least_one_true(self, variables: Sequence[int]) -> None:
        if variables:
            self.add_clause(variables)

    def at_most_one_true(self, variables: Sequence[int]) -> None:
        for i in range(len(variables) - 1):
            for j in range(i + 1, len(variables)):
                self.not_all_true([variables[i], variables[j]])

    def exactly_one_true(self, variables: Sequence[int]) -> None:
        self.at_least_one_true(variables)
        self.at_most_one_true(variables)

    def not_all_true(self, variables: Sequence[int]) -> None:
        self.add_clause([-var for var in variables])

    def encode_rules(self) -> None:
        """Encode the basic queens rules: rows, columns and diagonals."""
        n = self.size
        for i in range(n):
            # Exactly one queen per row and per column
            self.exactly_one_true(self.walk(i, 0, 0, 1))
            self.exactly_one_true(self.walk(0, i, 1, 0))

            # At most one queen per diagonal
            self.at_most_one_true(self.walk(0, i, 1, 1))
            self.at_most_one_true(self.walk(0, i, 1, -1))
            if i > 0:
                self.at_most_one_true(self.walk(i, 0, 1, 1))
                self.at_most_one_true(self.walk(i, n - 1, 1, -1))

    def break_symmetry(self) -> None:
        """Add clauses ruling out some mirrored and rotated solutions."""
        n = self.size

        # Horizontal: the queen of the first row sits in the right half
        self.exactly_one_true(self.walk(0, n // 2, 0, 1))

        # Vertical: a low queen in the first column excludes an earlier
        # queen in the last column
        for i in range(n // 2, n):
            for j in range(i):
                self.not_all_true([get_var(i, 0, n), get_var(j, n - 1, n)])

    def forbid_collinear_triples(self) -> None:
        """Forbid three queens on one line for every step up to max_step.

        For each origin and each direction whose second step stays on the
        board, the origin and its nearest neighbour are paired with every
        further cell on the ray.
        """
        n = self.size
        steps = [s for s in range(-self.max_step, self.max_step + 1) if s != 0]

        for row in range(n):
            for col in range(n):
                origin = get_var(row, col, n)
                for row_step in steps:
                    for col_step in steps:
                        if not self.in_bounds(row + 2 * row_step, col + 2 * col_step):
                            continue
                        nearest = get_var(row + row_step, col + col_step, n)
                        farther = self.walk(
                            row + 2 * row_step, col + 2 * col_step, row_step, col_step
                        )
                        # Equally spaced triples are also produced from the far end
                        if row_step < 0:
                            farther = farther[1:]
                        for var in farther:
                            self.not_all_true([origin, nearest, var])

    def encode(self, symmetry: bool = True, collinear: bool = True) -> List[List[int]]:
        """Generate every clause of the instance and return the clause list."""
        self.encode_rules()
        if symmetry:
            self.break_symmetry()
        if collinear:
            self.forbid_collinear_triples()
        return self.clauses
