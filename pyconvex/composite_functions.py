r"""Convex functions built by combining other convex functions.

These are the functions the optimizers construct internally:
- LogBarrierFunction, the objective of each centering step of the barrier method;
- SmoothMaxFunction, a differentiable upper bound on max_k fk(x) used to search for
  feasible points;
- FeasiblePointObjectiveFunction and FeasiblePointConstraintFunction, which augment the
  domain with a slack variable s so that "find x with fk(x) < 0" becomes
     minimize    s
     subject to  fk(x) - s <= 0.

Near constraint boundaries the derivatives of these functions involve terms like
1 / fk(x) and exp(alpha * fk(x)), so care is taken to keep them finite.

"""

from typing import List, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from .exceptions import DimensionMismatchError, InvalidArgumentError
from .functions import ConvexFunction


def _check_dimensions(functions: Sequence[ConvexFunction], n: int) -> None:
    for f in functions:
        if f.dimension != n:
            raise DimensionMismatchError(
                "Functions must share a common dimension",
                actual=f.dimension,
                expected=n,
            )


class LogBarrierFunction(ConvexFunction):
    r"""The barrier objective, ft(x) := t * f0(x) - \sum_k log(-fk(x)).

    ft is defined only where every constraint is strictly satisfied, fk(x) < 0. At other
    points, `value` returns +inf, which signals an infeasible candidate to the line
    search.

    Parameters
    ----------
     t : float
        Barrier parameter. Larger values weight the objective more heavily relative to
        the barrier penalty.
     f0 : ConvexFunction
        Objective.
     constraints : list of ConvexFunction
        Constraint functions, fk(x) < 0. Must have the same dimension as f0.

    Notes
    -----
    The gradient and Hessian are:
       grad_ft = t * grad_f0 - \sum_k grad_fk / fk,
        hess_ft = t * hess_f0 + \sum_k (grad_fk * grad_fk^T / fk^2 - hess_fk / fk).
    Since fk < 0 inside the domain, every constraint contributes a positive
    semi-definite term.

    """

    def __init__(
        self, t: float, f0: ConvexFunction, constraints: Sequence[ConvexFunction]
    ) -> None:
        _check_dimensions(constraints, f0.dimension)
        self.t = float(t)
        self.f0 = f0
        self.constraints: Tuple[ConvexFunction, ...] = tuple(constraints)

    @property
    def dimension(self) -> int:
        """Dimension of the function domain."""
        return self.f0.dimension

    def value(self, x: npt.NDArray[np.float64]) -> float:
        """Evaluate barrier objective at x."""
        x = self.check_point(x)
        v = self.t * self.f0.value(x)
        for fk in self.constraints:
            vk = fk.value(x)
            if vk >= 0.0:
                return np.inf
            v -= np.log(-vk)
        return float(v)

    def gradient(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate gradient of barrier objective at x."""
        x = self.check_point(x)
        g = self.t * self.f0.gradient(x)
        for fk in self.constraints:
            g -= fk.gradient(x) / fk.value(x)
        return g

    def hessian(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate Hessian of barrier objective at x."""
        x = self.check_point(x)
        h = self.t * self.f0.hessian(x)
        for fk in self.constraints:
            vk = fk.value(x)
            gk = fk.gradient(x)
            h += np.outer(gk, gk) / (vk * vk) - fk.hessian(x) / vk
        return h


class SmoothMaxFunction(ConvexFunction):
    r"""Smooth approximation to max_k fk(x).

    Implements
       sm(x) = (1 / alpha) * log(\sum_k exp(alpha * fk(x))),
    which is convex when every fk is convex, satisfies sm(x) >= max_k fk(x), and
    converges to max_k fk(x) as alpha grows.

    Parameters
    ----------
     alpha : float
        Sharpness, > 0.
     functions : list of ConvexFunction
        Non-empty list of functions sharing a common dimension.

    Notes
    -----
    Evaluated naively, exp(alpha * fk) overflows (or underflows to 0 for every k) when
    the fk are large in magnitude. Instead we subtract z = max_k fk(x):
       sm(x) = z + (1 / alpha) * log(\sum_k exp(alpha * (fk(x) - z))).
    Every exponent is then <= 0, and the largest equals 1, so the sum lies in [1, K].

    With weights wk = exp(alpha * (fk - z)) / \sum_j exp(alpha * (fj - z)), the
    gradient is the convex combination
       g = \sum_k wk * grad_fk,
    and the Hessian is
       H = \sum_k wk * (hess_fk + alpha * grad_fk * grad_fk^T) - alpha * g * g^T.

    """

    def __init__(self, alpha: float, functions: Sequence[ConvexFunction]) -> None:
        if len(functions) < 1:
            raise InvalidArgumentError("list of functions must be nonempty")
        if alpha <= 0.0:
            raise InvalidArgumentError("alpha must be > 0")
        _check_dimensions(functions, functions[0].dimension)
        self.alpha = float(alpha)
        self.functions: Tuple[ConvexFunction, ...] = tuple(functions)

    @property
    def dimension(self) -> int:
        """Dimension of the function domain."""
        return self.functions[0].dimension

    def _weights(
        self, x: npt.NDArray[np.float64]
    ) -> Tuple[float, npt.NDArray[np.float64]]:
        """Calculate z = max_k fk(x) and exp(alpha * (fk(x) - z))."""
        fx = np.array([f.value(x) for f in self.functions])
        z = float(np.max(fx))
        return z, np.exp(self.alpha * (fx - z))

    def value(self, x: npt.NDArray[np.float64]) -> float:
        """Evaluate smooth-max at x."""
        x = self.check_point(x)
        z, e = self._weights(x)
        if not np.isfinite(z):
            return z
        return z + float(np.log(np.sum(e))) / self.alpha

    def gradient(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate gradient of smooth-max at x."""
        x = self.check_point(x)
        _, e = self._weights(x)
        w = e / np.sum(e)
        G = np.array([f.gradient(x) for f in self.functions])
        return w @ G

    def hessian(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate Hessian of smooth-max at x."""
        x = self.check_point(x)
        _, e = self._weights(x)
        w = e / np.sum(e)
        n = self.dimension
        h = np.zeros((n, n))
        g = np.zeros(n)
        for wk, f in zip(w, self.functions):
            gk = f.gradient(x)
            h += wk * (f.hessian(x) + self.alpha * np.outer(gk, gk))
            g += wk * gk
        h -= self.alpha * np.outer(g, g)
        return h


class FeasiblePointObjectiveFunction(ConvexFunction):
    """Objective for the slack formulation of the feasible point problem, f(x, s) = s.

    Parameters
    ----------
     n : int
        Dimension of the original problem. The function has dimension n + 1; the last
        entry of its argument is the slack variable.

    """

    def __init__(self, n: int) -> None:
        if n < 1:
            raise InvalidArgumentError("n must be >= 1")
        self.n = n

    @property
    def dimension(self) -> int:
        """Dimension of the function domain."""
        return self.n + 1

    def value(self, x: npt.NDArray[np.float64]) -> float:
        """Evaluate function at x."""
        x = self.check_point(x)
        return float(x[self.n])

    def gradient(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate gradient at x."""
        self.check_point(x)
        g = np.zeros(self.n + 1)
        g[self.n] = 1.0
        return g

    def hessian(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate Hessian at x."""
        self.check_point(x)
        return np.zeros((self.n + 1, self.n + 1))


class FeasiblePointConstraintFunction(ConvexFunction):
    """Constraint for the slack formulation, g(x, s) = f(x) - s.

    Parameters
    ----------
     f : ConvexFunction
        Original constraint, f(x) < 0.

    """

    def __init__(self, f: ConvexFunction) -> None:
        self.f = f
        self.n = f.dimension

    @property
    def dimension(self) -> int:
        """Dimension of the function domain."""
        return self.n + 1

    def value(self, x: npt.NDArray[np.float64]) -> float:
        """Evaluate function at x."""
        x = self.check_point(x)
        return self.f.value(x[0 : self.n]) - x[self.n]

    def gradient(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate gradient at x."""
        x = self.check_point(x)
        g = np.empty(self.n + 1)
        g[0 : self.n] = self.f.gradient(x[0 : self.n])
        g[self.n] = -1.0
        return g

    def hessian(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate Hessian at x."""
        x = self.check_point(x)
        h = np.zeros((self.n + 1, self.n + 1))
        h[0 : self.n, 0 : self.n] = self.f.hessian(x[0 : self.n])
        return h


def slack_formulation(
    constraints: Sequence[ConvexFunction],
) -> Tuple[FeasiblePointObjectiveFunction, List[FeasiblePointConstraintFunction]]:
    """Build the slack formulation of a feasible point problem.

    Returns the objective s and the constraints fk(x) - s, both over (x, s).

    """
    if len(constraints) < 1:
        raise InvalidArgumentError("set of inequality constraints was empty")
    n = constraints[0].dimension
    _check_dimensions(constraints, n)
    return (
        FeasiblePointObjectiveFunction(n),
        [FeasiblePointConstraintFunction(f) for f in constraints],
    )
