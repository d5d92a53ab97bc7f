"""Test numerical helpers."""

import time

import numpy as np
import pytest

from pyconvex.exceptions import (
    DimensionMismatchError,
    InvalidArgumentError,
    NewtonStepError,
)
from pyconvex.numerical_helpers import (
    CholeskySchurKKTSolver,
    KKTSolution,
    KKTSolver,
    SVDSchurKKTSolver,
    cholesky_solver,
    solve_kkt_system,
    svd_solver,
)

KKT_SOLVERS = [CholeskySchurKKTSolver(), SVDSchurKKTSolver()]


def check_kkt_solution(
    H: np.ndarray,
    g: np.ndarray,
    A: np.ndarray,
    h: np.ndarray,
    sol: KKTSolution,
    atol: float = 1e-9,
) -> None:
    """Verify H * v + A^T * w = -g and A * v = -h."""
    v = sol.delta_x
    w = sol.nu_plus
    np.testing.assert_allclose(H @ v + A.T @ w, -g, atol=atol)
    np.testing.assert_allclose(A @ v, -h, atol=atol)


@pytest.mark.parametrize("kkt_solver", KKT_SOLVERS)
def test_kkt_2d(kkt_solver: KKTSolver) -> None:
    """Test a small KKT system."""
    H = np.array([[2.0, 1.0], [1.0, 2.0]])
    A = np.array([[1.0, 1.0]])
    g = np.array([1.0, 2.0])
    h = np.array([3.0])

    sol = kkt_solver.solve(H, g, A, h)
    check_kkt_solution(H, g, A, h, sol)
    assert sol.lambda_squared is None


@pytest.mark.parametrize("kkt_solver", KKT_SOLVERS)
def test_kkt_3d(kkt_solver: KKTSolver) -> None:
    """Test a KKT system with two equality constraints."""
    H = np.array([[2.0, 1.0, 0.0], [1.0, 3.0, 1.0], [0.0, 1.0, 4.0]])
    A = np.array([[1.0, 1.0, 0.0], [0.0, 1.0, -1.0]])
    g = np.array([1.0, -2.0, 3.0])
    h = np.array([5.0, -1.0])

    sol = kkt_solver.solve(H, g, A, h)
    check_kkt_solution(H, g, A, h, sol)


@pytest.mark.parametrize("kkt_solver", KKT_SOLVERS)
@pytest.mark.parametrize(
    "seed,M,p",
    [
        (102, 100, 20),
        (202, 200, 30),
        (302, 50, 5),
        (402, 13, 3),
    ],
)
def test_kkt_random(kkt_solver: KKTSolver, seed: int, M: int, p: int) -> None:
    """Test solving the KKT system against solving the full block system."""
    np.random.seed(seed)
    X = np.random.randn(M, M)
    H = X @ X.T + M * np.eye(M)
    A = np.random.randn(p, M)
    g = np.random.randn(M)
    h = np.random.randn(p)

    st = time.time()
    KKT = np.block([[H, A.T], [A, np.zeros((p, p))]])
    expected = np.linalg.solve(KKT, -np.concatenate((g, h)))
    mt = time.time()
    sol = kkt_solver.solve(H, g, A, h)
    et = time.time()

    print(f"Slow way completed in {1e6 * (mt - st):.03f} us")
    print(f"Fast way completed in {1e6 * (et - mt):.03f} us")

    np.testing.assert_allclose(sol.delta_x, expected[0:M], rtol=1e-7, atol=1e-9)
    np.testing.assert_allclose(sol.nu_plus, expected[M:], rtol=1e-7, atol=1e-9)
    check_kkt_solution(H, g, A, h, sol, atol=1e-8)


@pytest.mark.parametrize("kkt_solver", KKT_SOLVERS)
@pytest.mark.parametrize(
    "seed,M",
    [
        (103, 2),
        (203, 10),
        (303, 50),
    ],
)
def test_newton_step_unconstrained(kkt_solver: KKTSolver, seed: int, M: int) -> None:
    """Without equality constraints, we solve H * v = -g."""
    np.random.seed(seed)
    X = np.random.randn(M, M)
    H = X @ X.T + M * np.eye(M)
    g = np.random.randn(M)

    sol = kkt_solver.solve(H, g)
    np.testing.assert_allclose(H @ sol.delta_x, -g, atol=1e-9)
    assert sol.nu_plus is None
    assert sol.lambda_squared == pytest.approx(g @ np.linalg.solve(H, g))

    # An equality constraint with zero rows is the same as no constraint
    sol_empty = kkt_solver.solve(H, g, np.zeros((0, M)), np.zeros(0))
    np.testing.assert_allclose(sol_empty.delta_x, sol.delta_x)
    assert sol_empty.lambda_squared == pytest.approx(sol.lambda_squared)


def test_cholesky_not_positive_definite() -> None:
    """Cholesky fails on indefinite matrices."""
    H = np.array([[1.0, 0.0], [0.0, -1.0]])
    with pytest.raises(NewtonStepError):
        CholeskySchurKKTSolver().solve(H, np.array([1.0, 1.0]))

    with pytest.raises(NewtonStepError):
        cholesky_solver(np.zeros((2, 2)))


def test_svd_semi_definite() -> None:
    """SVD solver finds the least-squares solution for singular H."""
    H = np.array([[1.0, 0.0], [0.0, 0.0]])
    g = np.array([2.0, 0.0])

    sol = SVDSchurKKTSolver().solve(H, g)
    np.testing.assert_allclose(sol.delta_x, [-2.0, 0.0], atol=1e-12)
    assert sol.lambda_squared == pytest.approx(4.0)


def test_svd_solver_multiple_rhs() -> None:
    """Test solving M * X = Y with a matrix right-hand side."""
    np.random.seed(104)
    X = np.random.randn(6, 6)
    M = X @ X.T + np.eye(6)
    Y = np.random.randn(6, 3)
    np.testing.assert_allclose(M @ svd_solver(M)(Y), Y, atol=1e-9)


def test_solve_kkt_system_dimension_mismatch() -> None:
    """Test dimension checks."""
    A = np.ones((1, 3))
    solve = cholesky_solver(np.eye(3))
    with pytest.raises(DimensionMismatchError):
        solve_kkt_system(A, np.ones(2), np.ones(1), solve, cholesky_solver)
    with pytest.raises(DimensionMismatchError):
        solve_kkt_system(A, np.ones(3), np.ones(2), solve, cholesky_solver)
    with pytest.raises(DimensionMismatchError):
        CholeskySchurKKTSolver().solve(np.eye(2), np.ones(3))


def test_kkt_solution_validation() -> None:
    """Exactly one of nu_plus and lambda_squared must be present."""
    with pytest.raises(InvalidArgumentError):
        KKTSolution(delta_x=np.zeros(2))
    with pytest.raises(InvalidArgumentError):
        KKTSolution(delta_x=np.zeros(2), nu_plus=np.zeros(1), lambda_squared=1.0)
