"""Linear constraints."""

from typing import Iterable, List, Union

import numpy as np
import numpy.typing as npt

from .exceptions import DimensionMismatchError, InvalidArgumentError
from .functions import ArrayLike, ConvexFunction, LinearFunction


def _as_matrix(A: ArrayLike, name: str = "A") -> npt.NDArray[np.float64]:
    A = np.array(A, dtype=np.float64)
    if A.ndim == 1 and A.shape[0] == 0:
        return A.reshape((0, 0))
    if A.ndim != 2:
        raise InvalidArgumentError(f"{name} must be a matrix; got {A.ndim} dimensions.")
    return A


class EqualityConstraint:
    """A set of linear equality constraints, A * x = b.

    Represents the equations A[i] * x = b[i] for each row of A. A constraint with zero
    rows is allowed; the optimizers treat it as absent.

    Parameters
    ----------
     A : k-by-n matrix
        Linear weights.
     b : vector of length k
        Constants.

    """

    def __init__(self, A: ArrayLike, b: ArrayLike) -> None:
        A = _as_matrix(A)
        b = np.array(b, dtype=np.float64).reshape(-1)
        if b.shape[0] != A.shape[0]:
            raise DimensionMismatchError(
                "b must have one entry for each row of A",
                actual=b.shape[0],
                expected=A.shape[0],
            )
        self.A = A
        self.b = b

    @property
    def num_constraints(self) -> int:
        """Count equality constraints."""
        return self.A.shape[0]

    @property
    def dimension(self) -> int:
        """Dimension of the domain."""
        return self.A.shape[1]

    def residual(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate A * x - b."""
        return self.A @ x - self.b


class LinearInequalityConstraint:
    """A set of linear inequality constraints, A * x < b.

    Each row becomes an individual constraint function, A[j] * x - b[j] < 0, available
    as `functions`. Optimizers accept a LinearInequalityConstraint anywhere they accept
    a list of constraint functions.

    Parameters
    ----------
     A : k-by-n matrix
        Linear weights.
     b : vector of length k
        Upper bounds.

    """

    def __init__(self, A: ArrayLike, b: ArrayLike) -> None:
        A = _as_matrix(A)
        b = np.array(b, dtype=np.float64).reshape(-1)
        if b.shape[0] != A.shape[0]:
            raise DimensionMismatchError(
                "b must have one entry for each row of A",
                actual=b.shape[0],
                expected=A.shape[0],
            )
        self.A = A
        self.b = b
        self.functions: List[LinearFunction] = [
            LinearFunction(A[j, :], -b[j]) for j in range(A.shape[0])
        ]

    def __len__(self) -> int:
        """Count constraints."""
        return len(self.functions)


def flatten_inequality_constraints(
    constraints: Union[
        LinearInequalityConstraint,
        ConvexFunction,
        Iterable[Union[LinearInequalityConstraint, ConvexFunction]],
    ],
) -> List[ConvexFunction]:
    """Collect constraint functions, fk(x) < 0, into a flat list.

    Accepts a single ConvexFunction, a single LinearInequalityConstraint, or an iterable
    mixing the two.

    """
    if isinstance(constraints, (LinearInequalityConstraint, ConvexFunction)):
        constraints = [constraints]

    functions: List[ConvexFunction] = []
    for c in constraints:
        if isinstance(c, LinearInequalityConstraint):
            functions.extend(c.functions)
        elif isinstance(c, ConvexFunction):
            functions.append(c)
        else:
            raise InvalidArgumentError(
                f"Unsupported inequality constraint of type {type(c).__name__}."
            )
    return functions
