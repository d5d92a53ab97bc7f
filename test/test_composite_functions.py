"""Test composite convex functions."""

import numpy as np
import pytest

from pyconvex.composite_functions import (
    FeasiblePointConstraintFunction,
    FeasiblePointObjectiveFunction,
    LogBarrierFunction,
    SmoothMaxFunction,
    slack_formulation,
)
from pyconvex.exceptions import DimensionMismatchError, InvalidArgumentError
from pyconvex.functions import ConvexFunction, LinearFunction, QuadraticFunction


def finite_difference_gradient(
    f: ConvexFunction, x: np.ndarray, h: float = 1e-6
) -> np.ndarray:
    """Approximate gradient by central differences."""
    g = np.zeros_like(x)
    for i in range(len(x)):
        e = np.zeros_like(x)
        e[i] = h
        g[i] = (f.value(x + e) - f.value(x - e)) / (2 * h)
    return g


def finite_difference_hessian(
    f: ConvexFunction, x: np.ndarray, h: float = 1e-6
) -> np.ndarray:
    """Approximate Hessian by central differences of the gradient."""
    n = len(x)
    H = np.zeros((n, n))
    for i in range(n):
        e = np.zeros_like(x)
        e[i] = h
        H[:, i] = (f.gradient(x + e) - f.gradient(x - e)) / (2 * h)
    return H


def random_quadratics(n: int, K: int) -> list:
    """Generate K random convex quadratics of dimension n."""
    functions = []
    for _ in range(K):
        X = np.random.randn(n, n)
        A = X @ X.T / n + np.eye(n)
        functions.append(QuadraticFunction(A, np.random.randn(n), np.random.randn()))
    return functions


class TestLogBarrierFunction:
    """Test LogBarrierFunction."""

    def test_value(self) -> None:
        """Test value against direct calculation."""
        f0 = LinearFunction([1.0, 1.0])
        f1 = LinearFunction([-1.0, -1.0], 1.0)
        f2 = QuadraticFunction.n_ball([0.0, 0.0], r=10.0)
        fb = LogBarrierFunction(2.0, f0, [f1, f2])

        x = np.array([1.0, 2.0])
        expected = 2.0 * 3.0 - np.log(-f1.value(x)) - np.log(-f2.value(x))
        assert fb.value(x) == pytest.approx(expected)
        assert fb.dimension == 2

    def test_infeasible(self) -> None:
        """Barrier is infinite outside the feasible region."""
        f0 = LinearFunction([1.0, 1.0])
        f1 = LinearFunction([-1.0, -1.0], 1.0)
        fb = LogBarrierFunction(1.0, f0, [f1])

        assert fb.value(np.array([0.0, 0.0])) == np.inf
        assert fb.value(np.array([0.5, 0.5])) == np.inf
        assert np.isfinite(fb.value(np.array([1.0, 1.0])))

    @pytest.mark.parametrize(
        "seed,n",
        [
            (101, 2),
            (201, 4),
            (301, 7),
        ],
    )
    def test_derivatives(self, seed: int, n: int) -> None:
        """Compare gradient and Hessian to finite differences."""
        np.random.seed(seed)
        f0 = random_quadratics(n, 1)[0]
        x = np.random.randn(n)
        constraints = [
            QuadraticFunction.n_ball(x + 0.1 * np.random.randn(n), r=3.0),
            LinearFunction(np.random.rand(n), -5.0 - np.abs(x).sum()),
        ]
        fb = LogBarrierFunction(3.0, f0, constraints)

        np.testing.assert_allclose(
            fb.gradient(x), finite_difference_gradient(fb, x), rtol=1e-5, atol=1e-6
        )
        np.testing.assert_allclose(
            fb.hessian(x), finite_difference_hessian(fb, x), rtol=1e-5, atol=1e-6
        )

    def test_dimension_mismatch(self) -> None:
        """Constraints must share the objective dimension."""
        with pytest.raises(DimensionMismatchError):
            LogBarrierFunction(
                1.0, LinearFunction([1.0, 1.0]), [LinearFunction([1.0, 1.0, 1.0])]
            )


class TestSmoothMaxFunction:
    """Test SmoothMaxFunction."""

    @pytest.mark.parametrize(
        "seed,n,K,alpha",
        [
            (102, 2, 3, 0.5),
            (202, 5, 2, 1.0),
            (302, 3, 6, 10.0),
        ],
    )
    def test_upper_bound(self, seed: int, n: int, K: int, alpha: float) -> None:
        """Smooth max is never less than the true max."""
        np.random.seed(seed)
        functions = random_quadratics(n, K)
        sm = SmoothMaxFunction(alpha, functions)
        for _ in range(20):
            x = 3.0 * np.random.randn(n)
            fmax = max(f.value(x) for f in functions)
            v = sm.value(x)
            assert v >= fmax
            assert v <= fmax + np.log(K) / alpha + 1e-12

    @pytest.mark.parametrize(
        "seed,n,K",
        [
            (103, 2, 3),
            (203, 4, 2),
            (303, 3, 5),
        ],
    )
    def test_derivatives(self, seed: int, n: int, K: int) -> None:
        """Compare gradient and Hessian to finite differences."""
        np.random.seed(seed)
        sm = SmoothMaxFunction(2.0, random_quadratics(n, K))
        x = 0.5 * np.random.randn(n)

        np.testing.assert_allclose(
            sm.gradient(x), finite_difference_gradient(sm, x), rtol=1e-5, atol=1e-5
        )
        np.testing.assert_allclose(
            sm.hessian(x), finite_difference_hessian(sm, x), rtol=1e-5, atol=1e-5
        )

    def test_no_overflow(self) -> None:
        """Large constraint values should neither overflow nor underflow."""
        functions = [
            LinearFunction([1.0], 1e6),
            LinearFunction([1.0], -1e6),
            LinearFunction([-1.0], 0.0),
        ]
        sm = SmoothMaxFunction(1.0, functions)
        x = np.array([0.0])
        assert sm.value(x) == pytest.approx(1e6)
        np.testing.assert_allclose(sm.gradient(x), [1.0])
        assert np.all(np.isfinite(sm.hessian(x)))

        sm = SmoothMaxFunction(1.0, [LinearFunction([1.0], -1e6)] * 2)
        assert sm.value(x) == pytest.approx(-1e6 + np.log(2.0))

    def test_invalid(self) -> None:
        """Test validation."""
        with pytest.raises(InvalidArgumentError):
            SmoothMaxFunction(1.0, [])
        with pytest.raises(InvalidArgumentError):
            SmoothMaxFunction(0.0, [LinearFunction([1.0])])
        with pytest.raises(DimensionMismatchError):
            SmoothMaxFunction(1.0, [LinearFunction([1.0]), LinearFunction([1.0, 2.0])])


class TestFeasiblePointFunctions:
    """Test the slack formulation of the feasible point problem."""

    def test_objective(self) -> None:
        """Test objective."""
        f = FeasiblePointObjectiveFunction(2)
        x = np.array([1.0, 2.0, 3.0])
        assert f.dimension == 3
        assert f.value(x) == 3.0
        np.testing.assert_allclose(f.gradient(x), [0.0, 0.0, 1.0])
        np.testing.assert_allclose(f.hessian(x), np.zeros((3, 3)))

    def test_constraint(self) -> None:
        """Test constraint."""
        g = QuadraticFunction(2.0 * np.eye(2), [1.0, 0.0])
        f = FeasiblePointConstraintFunction(g)
        x = np.array([1.0, 2.0, 3.0])
        assert f.dimension == 3
        assert f.value(x) == pytest.approx(g.value(x[0:2]) - 3.0)
        np.testing.assert_allclose(f.gradient(x), [3.0, 4.0, -1.0])
        np.testing.assert_allclose(
            f.hessian(x), [[2.0, 0.0, 0.0], [0.0, 2.0, 0.0], [0.0, 0.0, 0.0]]
        )

    def test_slack_formulation(self) -> None:
        """Test building the slack formulation."""
        constraints = [LinearFunction([1.0, 0.0], -5.0), LinearFunction([-1.0, 0.0])]
        objective, slack_constraints = slack_formulation(constraints)
        assert objective.dimension == 3
        assert len(slack_constraints) == 2

        # (x, s) with s = max_k fk(x) lies on the boundary
        x = np.array([1.0, 0.0, -1.0])
        assert max(c.value(x) for c in slack_constraints) == pytest.approx(0.0)

        with pytest.raises(InvalidArgumentError):
            slack_formulation([])
