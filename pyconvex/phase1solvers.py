"""Phase I solvers."""

import time
from typing import List, Optional, Sequence, Union

import numpy as np
import numpy.typing as npt

from .composite_functions import SmoothMaxFunction
from .constraints import (
    EqualityConstraint,
    LinearInequalityConstraint,
    flatten_inequality_constraints,
)
from .exceptions import DimensionMismatchError, InvalidArgumentError
from .functions import ArrayLike, ConvexFunction, QuadraticFunction
from .numerical_helpers import KKTSolver
from .optimization import (
    FeasibilityResult,
    NewtonOptimizer,
    OptimizationSettings,
    PhaseISolver,
    check_equality_constraint,
    negative_value_halting,
)


class FeasibilitySolver(PhaseISolver):
    r"""Find x with fk(x) < 0 for every constraint, by minimizing a smooth max.

    Parameters
    ----------
     inequality_constraints : list of ConvexFunction or LinearInequalityConstraint
        Constraints, fk(x) < 0. Must be non-empty.
     equality_constraint : EqualityConstraint, optional
        Linear equality constraints the point must also satisfy.
     settings : OptimizationSettings, optional
        Settings. Uses `epsilon` to decide when iterates have stopped moving and
        `max_iterations` to bound the number of rounds.
     inner_settings : OptimizationSettings, optional
        Settings for the inner Newton's method calls. Defaults to `settings`.
     kkt_solver : KKTSolver, optional
        Strategy for calculating Newton steps.
     tolerance : float, optional
        Stop once max_k fk(x) < -tolerance. Defaults to 0.01.
     min_sigma : float, optional
        Smallest radius scale for the n-ball regularizer. Defaults to 10.
     sigma_factor : float, optional
        The n-ball scale grows like sigma_factor * sqrt(max_k fk(x)) when the current
        point is far from feasible. Defaults to 1.5.
     min_n_ball_factor : float, optional
        Negative number controlling how much the n-ball can be washed out by the other
        constraints in the smooth max. Defaults to log(1e-3).
     initial_alpha : float, optional
        Initial smooth-max sharpness. Defaults to 1.
     alpha_growth : float, optional
        Factor by which the sharpness grows after each round. Defaults to 10.

    Notes
    -----
    Since sm(x) := (1 / alpha) * log(\sum_k exp(alpha * fk(x))) >= max_k fk(x), any x
    with sm(x) < 0 is strictly feasible. Minimizing sm alone is not well-posed: if the
    constraints are linear, the Hessian can be singular, and with a single linear
    constraint there is no finite minimum. So each round we add an n-ball constraint
    centered at the current point,
        g(x) = 0.5 * (\| x - x_c \|_2^2 / sigma - 1),
    which keeps the Hessian non-singular and the minimum finite, and we stop Newton's
    method as soon as sm becomes negative. The ball is re-centered at the new point each
    round, and alpha is increased so sm approaches the true max.

    Sigma is scaled with sqrt(max_k fk(x)): the n-ball is essentially a squared
    distance, so far from the feasible region it should be correspondingly wide. Alpha
    is capped so the weight of the n-ball term in the smooth max, relative to the
    largest constraint, never falls below exp(min_n_ball_factor).

    When the iterates stop moving, the n-ball no longer influences the result, and we
    have found the minimax point, whether it is feasible or not.

    See http://erikerlandson.github.io/blog/2018/06/03/solving-feasible-points-with-smooth-max/

    """

    def __init__(
        self,
        inequality_constraints: Union[
            LinearInequalityConstraint,
            ConvexFunction,
            Sequence[Union[LinearInequalityConstraint, ConvexFunction]],
        ],
        equality_constraint: Optional[EqualityConstraint] = None,
        settings: Optional[OptimizationSettings] = None,
        inner_settings: Optional[OptimizationSettings] = None,
        kkt_solver: Optional[KKTSolver] = None,
        tolerance: float = 0.01,
        min_sigma: float = 10.0,
        sigma_factor: float = 1.5,
        min_n_ball_factor: float = np.log(1e-3),
        initial_alpha: float = 1.0,
        alpha_growth: float = 10.0,
    ) -> None:
        super().__init__(settings=settings)
        constraints = flatten_inequality_constraints(inequality_constraints)
        if len(constraints) < 1:
            raise InvalidArgumentError("set of inequality constraints was empty")
        n = constraints[0].dimension
        for fk in constraints:
            if fk.dimension != n:
                raise DimensionMismatchError(
                    "Inequality constraint has the wrong dimension",
                    actual=fk.dimension,
                    expected=n,
                )
        check_equality_constraint(equality_constraint, n)

        if tolerance < 0.0:
            raise InvalidArgumentError("tolerance must be >= 0")
        if min_sigma <= 0.0:
            raise InvalidArgumentError("min_sigma must be > 0")
        if sigma_factor <= 0.0:
            raise InvalidArgumentError("sigma_factor must be > 0")
        if min_n_ball_factor >= 0.0:
            raise InvalidArgumentError("min_n_ball_factor must be < 0")
        if initial_alpha <= 0.0:
            raise InvalidArgumentError("initial_alpha must be > 0")
        if alpha_growth < 1.0:
            raise InvalidArgumentError("alpha_growth must be >= 1")

        self.constraints: List[ConvexFunction] = constraints
        self.equality_constraint = equality_constraint
        self.inner_settings = self.settings if inner_settings is None else inner_settings
        self.kkt_solver = kkt_solver
        self.tolerance = tolerance
        self.min_sigma = min_sigma
        self.sigma_factor = sigma_factor
        self.min_n_ball_factor = min_n_ball_factor
        self.initial_alpha = initial_alpha
        self.alpha_growth = alpha_growth

    @property
    def dimension(self) -> int:
        """Problem dimension."""
        return self.constraints[0].dimension

    @property
    def num_eq_constraints(self) -> int:
        """Count equality constraints."""
        if self.equality_constraint is None:
            return 0
        return self.equality_constraint.num_constraints

    @property
    def num_ineq_constraints(self) -> int:
        """Count inequality constraints."""
        return len(self.constraints)

    def max_violation(self, x: npt.NDArray[np.float64]) -> float:
        """Calculate max_k fk(x)."""
        return max(fk.value(x) for fk in self.constraints)

    def solve(self, x0: Optional[ArrayLike] = None) -> FeasibilityResult:
        """Find a strictly feasible point.

        Parameters
        ----------
         x0 : vector, optional
            Initial guess. Defaults to the zero vector.

        Returns
        -------
         res : FeasibilityResult
            The point found, along with max_k fk at that point. If that value is
            negative, the point is strictly feasible; otherwise the constraints cannot
            be satisfied simultaneously and the point minimizes the largest constraint
            value.

        """
        x = self.initial_point(x0)
        s = self.max_violation(x)
        max_violations = [s]

        # With equality constraints we still run Newton's method to ensure they are
        # satisfied.
        if s < 0.0 and self.num_eq_constraints == 0:
            if self.settings.verbose:
                print("  Initial guess was strictly feasible.")
            return FeasibilityResult(
                solution=x, max_violation=s, nits=0, max_violations=max_violations
            )

        if self.settings.verbose:
            overall_start_time = time.time()
            print(f"  Starting feasible point search; max constraint value = {s}")

        alpha = self.initial_alpha
        nit = 0
        while True:
            nit += 1
            if self.settings.verbose:
                start_time = time.time()

            sigma = self.min_sigma
            if s > 0.0:
                sigma = max(sigma, self.sigma_factor * np.sqrt(s))
            n_ball = QuadraticFunction.n_ball(x, 1.0, 1.0 / sigma)

            # Keep the n-ball from being washed out of the smooth max: its weight,
            # relative to the largest constraint, is exp(alpha * (v0 - s)).
            v0 = n_ball.value(x)
            if (
                v0 < s + self.min_n_ball_factor
                or alpha * (v0 - s) < self.min_n_ball_factor
            ):
                alpha = self.min_n_ball_factor / (v0 - s)

            newton = NewtonOptimizer(
                SmoothMaxFunction(alpha, self.constraints + [n_ball]),
                equality_constraint=self.equality_constraint,
                settings=self.inner_settings,
                kkt_solver=self.kkt_solver,
                halting=negative_value_halting,
            )
            x_prev = x
            x = newton.solve(x).solution
            s = self.max_violation(x)
            max_violations.append(s)

            if self.settings.verbose:
                end_time = time.time()
                print(
                    f"  {nit:02d} Smooth max with {alpha=:.03g} minimized in "
                    f"{1000 * (end_time - start_time):.03f} ms; "
                    f"max constraint value = {s}"
                )

            if s < -self.tolerance:
                break

            delta_x = x - x_prev
            if np.dot(delta_x, delta_x) < self.settings.epsilon:
                break

            self.check_iteration_limit(nit + 1, x)
            alpha *= self.alpha_growth

        if self.settings.verbose:
            overall_end_time = time.time()
            print(
                f"  Feasible point search completed in "
                f"{1000 * (overall_end_time - overall_start_time):.03f} ms"
            )

        return FeasibilityResult(
            solution=x, max_violation=s, nits=nit, max_violations=max_violations
        )
