import multiprocessing
import time
from z3 import Solver, Bool, BoolVal, Or, Not, is_true, sat, unsat
from ..encoder.dimacs import parse_dimacs
from .nqueens_error import NQueensError


class Z3Solver:
    def __init__(self, cnf, timeout=120) -> None:
        if timeout <= 0:
            raise NQueensError("Timeout must be positive")

        if not cnf or not isinstance(cnf, str):
            raise NQueensError("Invalid CNF: input must be a non-empty DIMACS string")

        self.cnf = cnf
        self.timeout = timeout
        self.solver = None
        self.variables = None
        self.num_variables = 0
        self.clauses = None
        self.solve_time = 0

    def load_cnf(self):
        """Parse the DIMACS text into a variable count and clause list."""
        try:
            self.num_variables, self.clauses = parse_dimacs(self.cnf)
        except ValueError as e:
            raise NQueensError(f"Invalid CNF: {str(e)}")

    def create_variables(self):
        """Set self.variables as a list of Z3 Booleans, index 0 for variable 1."""
        if self.solver is None:
            self.solver = Solver()
        try:
            self.variables = [Bool(f"x_{v}") for v in range(1, self.num_variables + 1)]
        except Exception as e:
            raise NQueensError(f"Failed to create Z3 variables: {str(e)}")

    def _literal(self, lit):
        var = self.variables[abs(lit) - 1]
        return var if lit > 0 else Not(var)

    def encode_clauses(self):
        """Add every clause to the solver."""
        if self.solver is None or self.variables is None or self.clauses is None:
            raise NQueensError("Solver not initialized properly")

        for i, clause in enumerate(self.clauses):
            try:
                if not clause:
                    self.solver.add(BoolVal(False))
                elif len(clause) == 1:
                    self.solver.add(self._literal(clause[0]))
                else:
                    self.solver.add(Or([self._literal(lit) for lit in clause]))
            except Exception as e:
                raise NQueensError(f"Failed to encode clause {i}: {str(e)}")

    def extract_model(self, model):
        """
        Extract a signed literal for every variable from the Z3 model.

        Args:
            model: Z3 model of a satisfiable instance

        Returns:
            List of literals, positive where the variable is true

        Raises:
            NQueensError: If the model or the variables are missing
        """
        if model is None:
            raise NQueensError("Invalid model: model cannot be None")

        if self.variables is None:
            raise NQueensError("Variables not initialized")

        try:
            return [
                v if is_true(model.evaluate(var, model_completion=True)) else -v
                for v, var in enumerate(self.variables, start=1)
            ]
        except Exception as e:
            raise NQueensError(f"Failed to extract model: {str(e)}")

    def validate_model(self, model):
        """Check that the model assigns every variable and satisfies every clause."""
        if not model or len(model) != self.num_variables:
            return False

        true_literals = set(model)
        return all(
            any(lit in true_literals for lit in clause) for clause in self.clauses
        )

    def _solve_task(self):
        """Helper method to run in separate process"""
        try:
            self.solver = Solver()
            self.solver.set("timeout", int(self.timeout * 1000))
            self.load_cnf()
            self.create_variables()
            self.encode_clauses()

            result = self.solver.check()

            if result == sat:
                model = self.extract_model(self.solver.model())
                if not self.validate_model(model):
                    raise NQueensError("Generated model is invalid")
                return model
            if result == unsat:
                return None
            raise NQueensError(
                f"Solver timed out: {self.solver.reason_unknown()}"
            )

        except NQueensError:
            raise
        except Exception as e:
            raise NQueensError(f"Critical solver error: {str(e)}")

    def solve(self):
        """Solve the instance with a multiprocessing-based timeout"""
        start_time = time.time()
        try:
            # Skip multiprocessing if in test mode
            if hasattr(self, "_testing"):
                return self._solve_task()

            # Create a process pool with 1 worker
            with multiprocessing.Pool(1) as pool:
                try:
                    # Run solver in separate process with timeout
                    async_result = pool.apply_async(self._solve_task)
                    return async_result.get(timeout=self.timeout)

                except multiprocessing.TimeoutError:
                    raise NQueensError(f"Solver timed out after {self.timeout} seconds")

        except NQueensError:
            raise
        except Exception as e:
            raise NQueensError(f"Critical solver error: {str(e)}")
        finally:
            self.solve_time = time.time() - start_time
