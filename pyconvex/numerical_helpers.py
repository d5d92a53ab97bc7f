"""Numerical linear algebra routines for calculating Newton steps."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import numpy.typing as npt
from scipy import linalg

from .exceptions import DimensionMismatchError, InvalidArgumentError, NewtonStepError

Solver = Callable[[npt.NDArray[np.float64]], npt.NDArray[np.float64]]


@dataclass(frozen=True)
class KKTSolution:
    """Wrapper for the solution of a KKT system.

    Parameters
    ----------
     delta_x : vector
        Newton step.
     nu_plus : vector, optional
        Updated Lagrange multipliers for the equality constraints. Present only when
        solving with equality constraints.
     lambda_squared : float, optional
        Square of the Newton decrement, g^T * H^{-1} * g. Present only when solving
        without equality constraints.

    """

    delta_x: npt.NDArray[np.float64]
    nu_plus: Optional[npt.NDArray[np.float64]] = None
    lambda_squared: Optional[float] = None

    def __post_init__(self) -> None:
        if (self.nu_plus is None) == (self.lambda_squared is None):
            raise InvalidArgumentError(
                "Exactly one of nu_plus and lambda_squared must be specified."
            )


def cholesky_solver(M: npt.NDArray[np.float64]) -> Solver:
    """Factor M via Cholesky and return a function that solves M * x = y.

    The returned function accepts either a vector or a matrix, in which case it solves
    the system for each column.

    Raises
    ------
     NewtonStepError: if M is not strictly positive definite.

    """
    try:
        c, lower = linalg.cho_factor(M, lower=True)
    except (np.linalg.LinAlgError, ValueError):
        raise NewtonStepError("Matrix is not strictly positive definite.") from None

    def solve(y: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        return linalg.cho_solve((c, lower), y)

    return solve


def svd_solver(M: npt.NDArray[np.float64], rcond: float = 1e-12) -> Solver:
    """Factor M via SVD and return a function that solves M * x = y.

    Singular values smaller than rcond times the largest are treated as zero, so the
    returned function computes the least-squares, minimum-norm solution when M is
    singular. This lets us calculate Newton steps when M is only positive
    semi-definite.

    Raises
    ------
     NewtonStepError: if the SVD fails to converge, or M contains non-finite entries.

    """
    try:
        U, s, Vh = linalg.svd(M, full_matrices=False)
    except (np.linalg.LinAlgError, ValueError):
        raise NewtonStepError("SVD did not converge.") from None

    cutoff = rcond * (s[0] if s.shape[0] > 0 else 0.0)
    s_inv = np.zeros_like(s)
    mask = s > cutoff
    s_inv[mask] = 1.0 / s[mask]

    def solve(y: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        if y.ndim == 1:
            return Vh.T @ (s_inv * (U.T @ y))
        return Vh.T @ (s_inv[:, np.newaxis] * (U.T @ y))

    return solve


def solve_kkt_system(
    A: npt.NDArray[np.float64],
    g: npt.NDArray[np.float64],
    h: npt.NDArray[np.float64],
    hessian_solve: Solver,
    factor: Callable[[npt.NDArray[np.float64]], Solver],
) -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """Solve a KKT system of equations.

    Parameters
    ----------
     A : p-by-M matrix.
        Equality constraint weights.
     g : vector of length M
        Gradient.
     h : vector of length p
        Equality constraint residual.
     hessian_solve : Callable
        A function that solves H * x = y. Should accept multiple right-hand-sides.
     factor : Callable
        Factors the Schur complement. Takes a matrix S and returns a function that
        solves S * x = y.

    Returns
    -------
     delta_x : vector of length M
        Solution to system. See Notes.
     nu : vector of length p
        Solution to system. See Notes.

    Notes
    -----
    Solves:
           _       _   _       _       _   _
          | H   A^T | | delta_x |     |  g  |
          | A    0  | |   nu    | = - |  h  |
           -       -   -       -       -   -
    where H is the Hessian.

    Per the discussion in Boyd and Vandenberghe (2004), Algorithm C.4 (page 673):
      1. Form B = H^{-1} * A^T and b = H^{-1} * g. This corresponds to p+1 solves
         against the factorization of H; H is never inverted explicitly.
      2. Form -S = A * B and -c = A * b. -S is positive definite whenever H is and A has
         full row rank.
      3. Solve -S * nu = h - A * b.
      4. Solve H * delta_x = -(g + A^T * nu).
    In total, that's O(M * p^2 + p^3) on top of the cost of factoring H.

    """
    p, M = A.shape
    if len(g) != M:
        raise DimensionMismatchError(
            "g should have one entry for each column of A", actual=len(g), expected=M
        )
    if len(h) != p:
        raise DimensionMismatchError(
            "h should have one entry for each row of A", actual=len(h), expected=p
        )

    # Step 1: form B = H^{-1} * A^T and b = H^{-1} * g
    B = hessian_solve(A.T)
    b = hessian_solve(g)

    # Step 2: form -S = A * B
    neg_S = A @ B

    # Step 3: Solve -S * nu = h - A * b
    nu = factor(neg_S)(h - A @ b)

    # Step 4: Solve H * delta_x = -(g + A^T * nu)
    delta_x = -hessian_solve(g + A.T @ nu)

    return delta_x, nu


class KKTSolver(ABC):
    """Solves the KKT conditions for Newton's method.

    Subclasses choose how the Hessian and the Schur complement are factored.

    """

    @abstractmethod
    def factor(self, M: npt.NDArray[np.float64]) -> Solver:
        """Factor M, returning a function that solves M * x = y."""

    def solve(
        self,
        H: npt.NDArray[np.float64],
        g: npt.NDArray[np.float64],
        A: Optional[npt.NDArray[np.float64]] = None,
        h: Optional[npt.NDArray[np.float64]] = None,
    ) -> KKTSolution:
        """Calculate Newton step.

        Parameters
        ----------
         H : n-by-n matrix
            Hessian.
         g : vector of length n
            Gradient.
         A : k-by-n matrix, optional
            Equality constraint weights. When not specified (or when A has zero rows),
            we solve H * delta_x = -g.
         h : vector of length k, optional
            Equality constraint residual. Required when A has rows.

        Returns
        -------
         sol : KKTSolution
            Newton step, together with either the Newton decrement squared (no
            equality constraints) or updated Lagrange multipliers.

        """
        n = g.shape[0]
        if H.shape != (n, n):
            raise DimensionMismatchError(
                "H must be square with one row for each entry of g",
                actual=H.shape[0],
                expected=n,
            )

        if A is None or A.shape[0] == 0:
            v = self.factor(H)(g)
            return KKTSolution(delta_x=-v, lambda_squared=float(np.dot(g, v)))

        if h is None:
            raise InvalidArgumentError("h is required when A is specified.")

        delta_x, nu_plus = solve_kkt_system(
            A=A, g=g, h=h, hessian_solve=self.factor(H), factor=self.factor
        )
        return KKTSolution(delta_x=delta_x, nu_plus=nu_plus)


class CholeskySchurKKTSolver(KKTSolver):
    """Solve KKT systems by Cholesky factorization of H and of the Schur complement.

    This is the default solver. It requires H to be strictly positive definite, and A
    to have full row rank; otherwise it raises NewtonStepError.

    """

    def factor(self, M: npt.NDArray[np.float64]) -> Solver:
        """Factor M via Cholesky."""
        return cholesky_solver(M)


class SVDSchurKKTSolver(KKTSolver):
    """Solve KKT systems using the SVD of H and of the Schur complement.

    Tolerates positive semi-definite H and rank-deficient A, though whether the
    resulting steps are useful is very problem-dependent. It is also slower than the
    Cholesky solver.

    Parameters
    ----------
     rcond : float, optional
        Relative cutoff below which singular values are treated as zero. Defaults to
        1e-12.

    """

    def __init__(self, rcond: float = 1e-12) -> None:
        if rcond <= 0.0:
            raise InvalidArgumentError("rcond must be > 0")
        self.rcond = rcond

    def factor(self, M: npt.NDArray[np.float64]) -> Solver:
        """Factor M via SVD."""
        return svd_solver(M, rcond=self.rcond)
