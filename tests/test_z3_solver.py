import pytest
import multiprocessing
from unittest.mock import MagicMock, Mock, patch
from z3 import Solver
from nqueens_sat.encoder import NQueensEncoder, to_dimacs
from nqueens_sat.solvers.z3_solver import Z3Solver
from nqueens_sat.solvers.nqueens_error import NQueensError
from nqueens_sat.solvers.solver_utils import decode_model, is_valid_board


def encoded(size):
    encoder = NQueensEncoder(size)
    encoder.encode()
    return to_dimacs(encoder)


@pytest.fixture
def four_queens_cnf():
    return encoded(4)


@pytest.fixture
def z3_solver(four_queens_cnf):
    solver = Z3Solver(four_queens_cnf)
    solver._testing = True  # Enable test mode
    return solver


# Initialization Tests
def test_init_valid(four_queens_cnf):
    solver = Z3Solver(four_queens_cnf)
    assert solver.cnf == four_queens_cnf
    assert solver.timeout == 120
    assert solver.solver is None
    assert solver.solve_time == 0
    assert not hasattr(solver, "propagated_clauses")


def test_init_invalid_timeout(four_queens_cnf):
    with pytest.raises(NQueensError, match="Timeout must be positive"):
        Z3Solver(four_queens_cnf, timeout=0)


@pytest.mark.parametrize("cnf", [None, "", 42, ["p cnf 1 1"]])
def test_init_invalid_cnf(cnf):
    with pytest.raises(NQueensError, match="Invalid CNF"):
        Z3Solver(cnf)


def test_load_cnf(z3_solver):
    z3_solver.load_cnf()
    assert z3_solver.num_variables == 16
    assert len(z3_solver.clauses) > 0


def test_load_cnf_malformed():
    solver = Z3Solver("p cnf 2 2\n1 0\n")
    with pytest.raises(NQueensError, match="Invalid CNF: Expected 2 clauses"):
        solver.load_cnf()


# Variable Creation Tests
def test_create_variables_success(z3_solver):
    z3_solver.load_cnf()
    z3_solver.create_variables()
    assert z3_solver.solver is not None
    assert len(z3_solver.variables) == 16


@patch("nqueens_sat.solvers.z3_solver.Bool", side_effect=Exception("Z3 Error"))
def test_create_variables_failure(mock_bool, z3_solver):
    z3_solver.load_cnf()
    with pytest.raises(NQueensError, match="Failed to create Z3 variables"):
        z3_solver.create_variables()


# Encoding Tests
def test_encode_clauses_uninitialized(z3_solver):
    with pytest.raises(NQueensError, match="Solver not initialized properly"):
        z3_solver.encode_clauses()


@patch.object(Solver, "add", side_effect=Exception("Z3 Error"))
def test_encode_clauses_failure(mock_add, z3_solver):
    z3_solver.load_cnf()
    z3_solver.create_variables()
    with pytest.raises(NQueensError, match="Failed to encode clause 0"):
        z3_solver.encode_clauses()


# Solving Tests
def test_solve_four_queens(z3_solver):
    model = z3_solver.solve()
    assert model is not None
    assert len(model) == 16
    board = decode_model(model, 4)
    assert is_valid_board(board)
    assert [row.index(True) for row in board] == [2, 0, 3, 1]
    assert z3_solver.solve_time >= 0


def test_solve_single_queen():
    solver = Z3Solver(encoded(1))
    solver._testing = True
    assert solver.solve() == [1]


@pytest.mark.parametrize("size", [2, 3])
def test_solve_unsatisfiable(size):
    solver = Z3Solver(encoded(size))
    solver._testing = True
    assert solver.solve() is None


def test_solve_empty_clause():
    solver = Z3Solver("p cnf 1 2\n1 0\n0\n")
    solver._testing = True
    assert solver.solve() is None


@patch.object(Solver, "reason_unknown", return_value="timeout")
@patch.object(Solver, "check", return_value="unknown")
def test_solve_unknown(mock_check, mock_reason, z3_solver):
    with pytest.raises(NQueensError, match="Solver timed out: timeout"):
        z3_solver.solve()


def test_solve_invalid_model(z3_solver):
    with patch.object(z3_solver, "validate_model", return_value=False):
        with pytest.raises(NQueensError, match="Generated model is invalid"):
            z3_solver.solve()


def test_solve_wraps_unexpected_errors(z3_solver):
    with patch.object(z3_solver, "encode_clauses", side_effect=Exception("boom")):
        with pytest.raises(NQueensError, match="Critical solver error: boom"):
            z3_solver.solve()


def test_solve_timeout(four_queens_cnf):
    solver = Z3Solver(four_queens_cnf, timeout=1)

    # Create mock for Pool.apply_async that raises TimeoutError
    mock_async_result = Mock()
    mock_async_result.get.side_effect = multiprocessing.TimeoutError()

    mock_pool = Mock()
    mock_pool.apply_async = Mock(return_value=mock_async_result)

    # Mock Pool context manager
    mock_pool_instance = Mock(return_value=mock_pool)
    mock_pool_instance.__enter__ = Mock(return_value=mock_pool)
    mock_pool_instance.__exit__ = Mock(return_value=None)

    with patch("multiprocessing.Pool", return_value=mock_pool_instance):
        with pytest.raises(NQueensError, match="Solver timed out after 1 seconds"):
            solver.solve()


def test_solve_uses_pool(four_queens_cnf):
    solver = Z3Solver(four_queens_cnf)

    mock_pool = MagicMock()
    mock_async_result = MagicMock()
    mock_async_result.get.return_value = [1, -2]
    mock_pool.__enter__.return_value.apply_async.return_value = mock_async_result

    with patch("multiprocessing.Pool", return_value=mock_pool):
        assert solver.solve() == [1, -2]

    mock_pool.__enter__.return_value.apply_async.assert_called_once_with(
        solver._solve_task
    )
    mock_async_result.get.assert_called_once_with(timeout=120)


def test_solve_pool_failure(four_queens_cnf):
    solver = Z3Solver(four_queens_cnf)
    with patch("multiprocessing.Pool", side_effect=OSError("no processes")):
        with pytest.raises(NQueensError, match="Critical solver error: no processes"):
            solver.solve()


# Model Tests
def test_extract_model_no_model(z3_solver):
    with pytest.raises(NQueensError, match="Invalid model: model cannot be None"):
        z3_solver.extract_model(None)


def test_extract_model_no_variables(z3_solver):
    with pytest.raises(NQueensError, match="Variables not initialized"):
        z3_solver.extract_model(Mock())


def test_validate_model(z3_solver):
    z3_solver.load_cnf()
    valid = [-1, -2, 3, -4, 5, -6, -7, -8, -9, -10, -11, 12, -13, 14, -15, -16]
    assert z3_solver.validate_model(valid)


def test_validate_model_wrong_length(z3_solver):
    z3_solver.load_cnf()
    assert not z3_solver.validate_model(None)
    assert not z3_solver.validate_model([1, 2, 3])


def test_validate_model_violated_clause(z3_solver):
    z3_solver.load_cnf()
    assert not z3_solver.validate_model([-v for v in range(1, 17)])
