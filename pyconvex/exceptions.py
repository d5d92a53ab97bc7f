"""Custom exceptions."""

from typing import Any

import numpy as np
import numpy.typing as npt


class InvalidArgumentError(ValueError):
    """Raised when an optimizer, function, or setting is misconfigured."""

    def __init__(self, message: str) -> None:
        self.message = message

    def __str__(self) -> str:
        """Pretty-print error."""
        return self.message


class DimensionMismatchError(InvalidArgumentError):
    """Raised when vectors or matrices have incompatible dimensions."""

    def __init__(self, message: str, actual: int, expected: int) -> None:
        self.message = message
        self.actual = actual
        self.expected = expected

    def __str__(self) -> str:
        """Pretty-print error."""
        return f"{self.message} (got {self.actual}; expected {self.expected})"


class NumericalFailureError(Exception):
    """Raised when a required matrix factorization fails."""

    def __init__(self, message: str) -> None:
        self.message = message

    def __str__(self) -> str:
        """Pretty-print error."""
        return self.message


class NewtonStepError(NumericalFailureError):
    """Raised when we cannot calculate Newton step.

    Usually this is because the Hessian (or the Schur complement formed from it) is not
    strictly positive definite at the current iterate. The SVD-based KKT solver can
    often still compute a step in that case.

    """


class OptimizationError(Exception):
    """Base class for optimization errors."""

    def __init__(
        self,
        message: str,
        last_iterate: npt.NDArray[np.float64],
    ) -> None:
        self.message = message
        self.last_iterate = last_iterate

    def __str__(self) -> str:
        """Pretty-print error."""
        return self.message


class IterationLimitError(OptimizationError):
    """Raised when an optimizer exceeds its iteration budget."""

    def __init__(
        self,
        message: str,
        last_iterate: npt.NDArray[np.float64],
        nits: int,
    ) -> None:
        super().__init__(message, last_iterate)
        self.nits = nits

    def __str__(self) -> str:
        """Pretty-print error."""
        return f"{self.message} ({self.nits} iterations)"


class ProblemInfeasibleError(Exception):
    """Raised when a Phase I solver could not find a strictly feasible point."""

    def __init__(self, message: str, result: Any = None) -> None:
        self.message = message
        self.result = result

    def __str__(self) -> str:
        """Pretty-print error."""
        return self.message
