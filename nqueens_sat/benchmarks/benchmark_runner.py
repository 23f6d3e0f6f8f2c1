import csv
import json
import os
import time
from typing import Dict, Iterable

from ..encoder import NQueensEncoder, to_dimacs
from ..solvers import CVC5Solver, Z3Solver, decode_model, is_valid_board


class BenchmarkRunner:
    def __init__(
        self,
        sizes: Iterable[int] = range(4, 13),
        results_dir: str = "benchmarks/results",
        timeout: int = 120,
    ):
        self.sizes = list(sizes)
        self.results_dir = results_dir
        self.timeout = timeout
        self.solvers = {
            "CVC5": CVC5Solver,
            "Z3": Z3Solver,
        }
        # Create results directory if it doesn't exist
        os.makedirs(results_dir, exist_ok=True)

    def encode(self, size: int) -> Dict:
        """Encode a queens instance and time the encoding."""
        start = time.time()
        encoder = NQueensEncoder(size)
        encoder.encode()
        cnf = to_dimacs(encoder)
        return {
            "cnf": cnf,
            "encode_time": time.time() - start,
            "num_clauses": len(encoder.clauses),
        }

    def run_solver(self, solver_name: str, size: int) -> Dict:
        """Run a single solver on one board size and collect results."""
        solver_class = self.solvers[solver_name]
        instance = self.encode(size)
        solver = solver_class(instance["cnf"], timeout=self.timeout)

        try:
            model = solver.solve()
            is_sat = model is not None
            is_correct = is_valid_board(decode_model(model, size)) if is_sat else None

            return {
                "status": "sat" if is_sat else "unsat",
                "encode_time": instance["encode_time"],
                "solve_time": getattr(solver, "solve_time", self.timeout),
                "num_clauses": instance["num_clauses"],
                "is_correct": is_correct,
            }
        except Exception as e:
            return {
                "status": "error",
                "encode_time": instance["encode_time"],
                "solve_time": getattr(solver, "timeout", self.timeout),
                "num_clauses": instance["num_clauses"],
                "is_correct": False,
                "error": str(e),
            }

    def run_benchmarks(self) -> Dict:
        """Run all solvers on all sizes and save results."""
        # Initialize results structure grouped by solver
        results = {
            solver_name: {
                "sizes": {},
                "stats": {
                    "total_instances": 0,
                    "solved_count": 0,
                    "correct_count": 0,
                    "total_time": 0,
                    "avg_time": 0,
                },
            }
            for solver_name in self.solvers
        }

        for size in self.sizes:
            for solver_name in self.solvers:
                print(f"Running {solver_name} on {size} queens")
                result = self.run_solver(solver_name, size)

                # Store individual result
                results[solver_name]["sizes"][str(size)] = result

                # Update solver statistics
                stats = results[solver_name]["stats"]
                stats["total_instances"] += 1
                if result["status"] != "error":
                    stats["solved_count"] += 1
                if result["is_correct"]:
                    stats["correct_count"] += 1
                stats["total_time"] += result["solve_time"]

        # Calculate averages
        for solver_results in results.values():
            stats = solver_results["stats"]
            if stats["total_instances"] > 0:
                stats["avg_time"] = stats["total_time"] / stats["total_instances"]

        # Save results
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        result_path = os.path.join(self.results_dir, f"benchmark_{timestamp}.json")
        with open(result_path, "w") as f:
            json.dump(results, f, indent=2)

        # Save analysis-friendly CSV format
        fieldnames = [
            "solver",
            "size",
            "status",
            "num_clauses",
            "encode_time",
            "solve_time",
            "is_correct",
        ]
        csv_path = os.path.join(self.results_dir, f"benchmark_{timestamp}.csv")
        with open(csv_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
            writer.writeheader()
            for solver_name, solver_results in results.items():
                for size, size_result in solver_results["sizes"].items():
                    writer.writerow({"solver": solver_name, "size": size, **size_result})

        print(f"Benchmark results saved to {result_path} and {csv_path}")
        return results
