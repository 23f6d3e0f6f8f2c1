from typing import List, Optional
import time
from cvc5 import Kind, Solver
from ..encoder.dimacs import parse_dimacs
from .nqueens_error import NQueensError


class CVC5Solver:
    def __init__(self, cnf, timeout=120):
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
        try:
            self.num_variables, self.clauses = parse_dimacs(self.cnf)
        except ValueError as e:
            raise NQueensError(f"Invalid CNF: {str(e)}")

    def create_variables(self):
        """Set self.variables as a list containing the CVC5 Boolean constants."""
        self.solver = Solver()
        self.solver.setOption("produce-models", "true")
        self.solver.setOption("tlimit-per", str(int(self.timeout * 1000)))
        self.solver.setLogic("QF_UF")

        boolean_sort = self.solver.getBooleanSort()
        self.variables = [
            self.solver.mkConst(boolean_sort, f"x_{v}")
            for v in range(1, self.num_variables + 1)
        ]

    def _literal(self, lit):
        var = self.variables[abs(lit) - 1]
        return var if lit > 0 else self.solver.mkTerm(Kind.NOT, var)

    def encode_clauses(self):
        """Assert every clause as a disjunction."""
        for clause in self.clauses:
            if not clause:
                self.solver.assertFormula(self.solver.mkFalse())
            elif len(clause) == 1:
                self.solver.assertFormula(self._literal(clause[0]))
            else:
                self.solver.assertFormula(
                    self.solver.mkTerm(
                        Kind.OR, *[self._literal(lit) for lit in clause]
                    )
                )

    def extract_model(self) -> List[int]:
        """Extract a signed literal for every variable from the CVC5 model."""
        return [
            v if self.solver.getValue(var).getBooleanValue() else -v
            for v, var in enumerate(self.variables, start=1)
        ]

    def cleanup(self):
        """Release the CVC5 solver and its terms."""
        self.variables = None
        self.solver = None

    def validate_model(self, model):
        if not model or len(model) != self.num_variables:
            return False

        true_literals = set(model)
        return all(
            any(lit in true_literals for lit in clause) for clause in self.clauses
        )

    def solve(self) -> Optional[List[int]]:
        """Solve the instance, returning None when it is unsatisfiable."""
        start_time = time.time()
        try:
            self.load_cnf()
            self.create_variables()
            self.encode_clauses()

            # tlimit-per makes checkSat answer unknown once the budget is spent
            result = self.solver.checkSat()

            if result.isUnknown():
                raise NQueensError("Solver timed out")

            if result.isSat():
                model = self.extract_model()
                if not self.validate_model(model):
                    raise NQueensError("Generated model is invalid")
                return model
            return None

        except NQueensError:
            raise
        except Exception as e:
            if "timed out" in str(e).lower():
                raise NQueensError("Solver timed out")
            raise NQueensError(f"Critical solver error: {str(e)}")
        finally:
            self.solve_time = time.time() - start_time
            self.cleanup()
