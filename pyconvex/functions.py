"""Convex functions built directly from matrix and vector data."""

from abc import ABC, abstractmethod
from typing import Union

import numpy as np
import numpy.typing as npt

from .exceptions import DimensionMismatchError, InvalidArgumentError

ArrayLike = Union[npt.NDArray[np.float64], list, tuple]


class ConvexFunction(ABC):
    r"""Abstract base class for twice-differentiable convex functions.

    A convex function maps a vector x of length n to a scalar, and exposes its gradient
    (a vector of length n) and Hessian (an n-by-n symmetric, positive semi-definite
    matrix) everywhere in its domain. Outside the domain, `value` may return +inf; the
    optimizers treat such points as infeasible candidates.

    Functions are immutable: evaluating one never modifies the function or the vector
    passed in, and every call returns freshly allocated arrays, so results can be
    modified by the caller without affecting later evaluations.

    """

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Dimension of the function domain."""

    @abstractmethod
    def value(self, x: npt.NDArray[np.float64]) -> float:
        """Evaluate function at x."""

    @abstractmethod
    def gradient(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate gradient at x."""

    @abstractmethod
    def hessian(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate Hessian at x."""

    def __call__(self, x: npt.NDArray[np.float64]) -> float:
        """Evaluate function at x."""
        return self.value(x)

    def check_point(self, x: ArrayLike) -> npt.NDArray[np.float64]:
        """Convert x to a float vector and verify it has the right length."""
        x = np.asarray(x, dtype=np.float64)
        if x.ndim != 1 or x.shape[0] != self.dimension:
            raise DimensionMismatchError(
                "Point has the wrong dimension",
                actual=x.shape[0] if x.ndim == 1 else x.size,
                expected=self.dimension,
            )
        return x


class LinearFunction(ConvexFunction):
    """The function f(x) = c + b^T * x.

    The gradient is b and the Hessian is zero.

    Parameters
    ----------
     b : vector
        Coefficients. Must have at least one entry.
     c : float, optional
        Constant offset. Defaults to 0.

    """

    def __init__(self, b: ArrayLike, c: float = 0.0) -> None:
        b = np.array(b, dtype=np.float64)
        if b.ndim != 1 or b.shape[0] < 1:
            raise InvalidArgumentError("b must be a non-empty vector.")
        self.b = b
        self.c = float(c)

    @property
    def dimension(self) -> int:
        """Dimension of the function domain."""
        return self.b.shape[0]

    def value(self, x: npt.NDArray[np.float64]) -> float:
        """Evaluate function at x."""
        x = self.check_point(x)
        return self.c + float(np.dot(self.b, x))

    def gradient(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate gradient at x."""
        self.check_point(x)
        return self.b.copy()

    def hessian(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate Hessian at x."""
        self.check_point(x)
        return np.zeros((self.dimension, self.dimension))


class QuadraticFunction(ConvexFunction):
    """The function f(x) = 0.5 * x^T * A * x + b^T * x + c.

    The gradient is A * x + b, and the Hessian is A.

    Parameters
    ----------
     A : matrix
        Square, symmetric matrix of weights for quadratic terms. Typically expected to
        be positive definite or positive semi-definite.
     b : vector
        Weights for linear terms.
     c : float, optional
        A constant. Defaults to 0.

    """

    symmetry_tolerance: float = 1e-6

    def __init__(self, A: ArrayLike, b: ArrayLike, c: float = 0.0) -> None:
        A = np.array(A, dtype=np.float64)
        b = np.array(b, dtype=np.float64)
        if b.ndim != 1 or b.shape[0] < 1:
            raise InvalidArgumentError("b must be a non-empty vector.")

        n = b.shape[0]
        if A.ndim != 2 or A.shape[0] != A.shape[1]:
            raise InvalidArgumentError(f"A must be a square matrix; got {A.shape=:}.")
        if A.shape[0] != n:
            raise DimensionMismatchError(
                "A and b have inconsistent dimensions", actual=A.shape[0], expected=n
            )
        if not np.allclose(A, A.T, rtol=0.0, atol=self.symmetry_tolerance):
            raise InvalidArgumentError("A must be symmetric.")

        self.A = A
        self.b = b
        self.c = float(c)

    @classmethod
    def n_ball(
        cls, center: ArrayLike, r: float = 1.0, s: float = 1.0
    ) -> "QuadraticFunction":
        r"""Create a constraint function for an n-dimensional ball.

        The function is 0.5 * (s * (x - center)^T * (x - center) - r^2), which is
        negative exactly when x lies strictly inside the ball of radius r (or radius
        r / sqrt(s), when s != 1) around center.

        Parameters
        ----------
         center : vector
            Center of the ball. Must have at least one entry.
         r : float, optional
            Radius, > 0. Defaults to 1.
         s : float, optional
            Scaling factor, > 0. Defaults to 1.

        Returns
        -------
         f : QuadraticFunction
            Quadratic constraint function for the n-ball constraint.

        """
        center = np.array(center, dtype=np.float64)
        if center.ndim != 1 or center.shape[0] < 1:
            raise InvalidArgumentError("center must be a non-empty vector.")
        if s <= 0.0:
            raise InvalidArgumentError("scale s must be > 0")
        if r <= 0.0:
            raise InvalidArgumentError("radius r must be > 0")

        n = center.shape[0]
        A = s * np.eye(n)
        b = -s * center
        c = 0.5 * (s * np.dot(center, center) - r * r)
        return cls(A, b, c)

    @classmethod
    def translated(cls, center: ArrayLike, h: float = 0.0) -> "QuadraticFunction":
        """Create 0.5 * (x - center)^T * (x - center) + h.

        The minimum value, h, is attained at x = center.

        """
        center = np.array(center, dtype=np.float64)
        return cls(
            np.eye(center.shape[0]), -center, h + 0.5 * np.dot(center, center)
        )

    @property
    def dimension(self) -> int:
        """Dimension of the function domain."""
        return self.b.shape[0]

    def value(self, x: npt.NDArray[np.float64]) -> float:
        """Evaluate function at x."""
        x = self.check_point(x)
        return float(0.5 * np.dot(self.A @ x, x) + np.dot(self.b, x) + self.c)

    def gradient(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate gradient at x."""
        x = self.check_point(x)
        return self.A @ x + self.b

    def hessian(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate Hessian at x."""
        self.check_point(x)
        return self.A.copy()


class LinearTransformFunction(ConvexFunction):
    """Applies a linear transform to a function, from f(x) to a * f(x) + b.

    The result is convex whenever a >= 0.

    Parameters
    ----------
     a : float
        The linear coefficient.
     b : float
        A constant.
     f : ConvexFunction
        The function to transform.

    """

    def __init__(self, a: float, b: float, f: ConvexFunction) -> None:
        self.a = float(a)
        self.b = float(b)
        self.f = f

    @property
    def dimension(self) -> int:
        """Dimension of the function domain."""
        return self.f.dimension

    def value(self, x: npt.NDArray[np.float64]) -> float:
        """Evaluate function at x."""
        return self.b + self.a * self.f.value(x)

    def gradient(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate gradient at x."""
        g = self.f.gradient(x)
        if self.a == 1.0:
            return g
        return self.a * g

    def hessian(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate Hessian at x."""
        h = self.f.hessian(x)
        if self.a == 1.0:
            return h
        return self.a * h
