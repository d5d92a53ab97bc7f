"""Newton's method and the barrier method.

An optimization problem has the form:
    minimize    f0(x)
    subject to  A * x = b
                fi(x) < 0, i=1, ..., m,
with f0 and fi convex and twice differentiable.

NewtonOptimizer handles problems without inequality constraints, using damped Newton
steps with backtracking line search (Boyd and Vandenberghe, Algorithms 9.5 and 10.2).
Its starting point need not satisfy A * x = b.

BarrierOptimizer handles inequality constraints by incorporating them into the
objective with a logarithmic barrier:
    minimize    ft(x) := t * f0(x) - \\sum_{i=1}^m log(-fi(x))
    subject to  A * x = b,
solving a sequence of these "centering" problems with NewtonOptimizer for increasing t
(Algorithm 11.1). Each centering step starts from a strictly feasible point, so the
initial guess must satisfy fi(x0) < 0 for all i, or a Phase I solver must be supplied
to find such a point.

References
----------
- Boyd, Stephen and Vandenberghe, Lieven, Convex Optimization, Cambridge University
  Press, 2004.

"""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import List, Literal, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
import numpy.typing as npt
from matplotlib.axes import Axes

from .composite_functions import LogBarrierFunction
from .constraints import (
    EqualityConstraint,
    LinearInequalityConstraint,
    flatten_inequality_constraints,
)
from .exceptions import (
    DimensionMismatchError,
    InvalidArgumentError,
    IterationLimitError,
    ProblemInfeasibleError,
)
from .functions import ArrayLike, ConvexFunction
from .numerical_helpers import CholeskySchurKKTSolver, KKTSolver

PointValuePair = Tuple[npt.NDArray[np.float64], float]
HaltingCondition = Callable[[int, PointValuePair, PointValuePair], bool]


def negative_value_halting(
    iteration: int, previous: PointValuePair, current: PointValuePair
) -> bool:
    """Halt as soon as the objective value becomes negative.

    Used when searching for feasible points: if the objective is an upper bound on the
    largest constraint value, a negative objective certifies feasibility. It also lets
    us handle objectives with no finite minimum, like a single linear constraint.

    """
    return current[1] < 0.0


@dataclass
class OptimizationSettings:
    """Optimization settings.

    All values are validated on construction; invalid values raise
    InvalidArgumentError.

    Parameters
    ----------
    epsilon : float, default=1e-9
        Convergence tolerance, > 0. Newton's method stops when the Newton decrement
        squared is below 2 * epsilon (or the KKT residual is below epsilon, with
        equality constraints), or when the Newton step is shorter than epsilon. The
        barrier method stops when the duality gap m / t is at most epsilon. Backtracking
        line search gives up when the step size falls below epsilon.
    backtracking_alpha : float, default=0.25
        Fraction of the decrease predicted by linear extrapolation that backtracking
        line search accepts. Must be in (0, 0.5).
    backtracking_beta : float, default=0.8
        The factor used to reduce the step size in the backtracking line search. Must
        be in (0, 1).
    barrier_mu : float, default=15.0
        The factor by which the barrier parameter is multiplied at each outer iteration.
        Must be > 1.
    barrier_t0 : float, default=1.0
        Initial value of the barrier parameter. Must be > 0.
    max_iterations : int or None, default=10_000
        Maximum number of Newton steps (or feasibility search rounds). Needing more
        raises IterationLimitError. None means no limit.
    verbose : bool, default=False
        If True, print status along with how long it took to execute each step.

    """

    epsilon: float = 1e-9
    backtracking_alpha: float = 0.25
    backtracking_beta: float = 0.8
    barrier_mu: float = 15.0
    barrier_t0: float = 1.0
    max_iterations: Optional[int] = 10_000
    verbose: bool = False

    def __post_init__(self) -> None:
        if not self.epsilon > 0.0:
            raise InvalidArgumentError("epsilon must be > 0")
        if not 0.0 < self.backtracking_alpha < 0.5:
            raise InvalidArgumentError("backtracking_alpha must be on (0, 1/2)")
        if not 0.0 < self.backtracking_beta < 1.0:
            raise InvalidArgumentError("backtracking_beta must be on (0, 1)")
        if not self.barrier_mu > 1.0:
            raise InvalidArgumentError("barrier_mu must be > 1")
        if not self.barrier_t0 > 0.0:
            raise InvalidArgumentError("barrier_t0 must be > 0")
        if self.max_iterations is not None and self.max_iterations < 1:
            raise InvalidArgumentError("max_iterations must be >= 1")


@dataclass
class OptimizationResult:
    """Wrapper for generic optimization result."""

    solution: npt.NDArray[np.float64]
    objective_value: float


@dataclass
class NewtonResult(OptimizationResult):
    """Wrapper for the results of Newton's method.

    Parameters
    ----------
     solution : vector
        The solution.
     objective_value : float
        Objective value.
     nits : int
        Number of iterations.
     objective_values : List[float]
        Objective value at the starting point and after each step.
     status : [0, 1, 2]
        Solution status:
          0 : method converged to the desired tolerance
          1 : line search could not find a step that made progress, which we treat as
              reaching the minimum
          2 : halting condition was satisfied
     message : str
          Summary of result.

    """

    nits: int
    objective_values: List[float]
    status: Literal[0, 1, 2]
    message: str

    def plot_convergence(self, ax: Optional[Axes] = None) -> Axes:
        """Plot convergence."""
        if ax is None:
            _, ax = plt.subplots()

        ax.plot(
            [ii for ii in range(len(self.objective_values))],
            self.objective_values,
            marker="o",
        )
        ax.set_xlabel("Iteration")
        ax.set_ylabel("Objective")
        return ax


@dataclass
class BarrierResult(OptimizationResult):
    """Wrapper for the results of the barrier method.

    Parameters
    ----------
     solution : vector
        The solution.
     objective_value : float
        Objective value (without the barrier penalty).
     duality_gaps : List[float]
        Bound on suboptimality, m / t, after each centering step.
     nits : int
        The number of centering steps.
     inner_nits : List[int]
        Number of Newton iterations performed during each centering step.
     status : [0, 1, 2]
        Solution status:
          0 : method completed successfully to the desired tolerance
          1 : the final centering step stopped on a line search stall or its halting
              condition
          2 : halting condition was satisfied
     message : str
          Summary of result.

    """

    duality_gaps: List[float]
    nits: int
    inner_nits: List[int]
    status: Literal[0, 1, 2]
    message: str

    def plot_convergence(self, ax: Optional[Axes] = None) -> Axes:
        """Plot convergence."""
        if ax is None:
            _, ax = plt.subplots()

        ax.stairs(
            values=self.duality_gaps,
            edges=np.concatenate(([0], np.cumsum(self.inner_nits))),
            baseline=None,
        )
        ax.set_yscale("log")
        ax.set_xlabel("Newton Iterations")
        ax.set_ylabel("Duality Gap")
        return ax


@dataclass
class FeasibilityResult:
    """Wrapper for the results of a feasible point search.

    Parameters
    ----------
     solution : vector
        A feasible point, or the point "nearest to feasible" in the sense of minimizing
        the largest constraint value.
     max_violation : float
        max_k fk(solution). Negative when solution is strictly feasible; otherwise the
        constraints could not be satisfied simultaneously.
     nits : int
        Number of smooth-max minimizations performed.
     max_violations : List[float]
        max_k fk(x) at the starting point and after each round.

    """

    solution: npt.NDArray[np.float64]
    max_violation: float
    nits: int
    max_violations: List[float]

    @property
    def is_feasible(self) -> bool:
        """Whether solution strictly satisfies every constraint."""
        return self.max_violation < 0.0

    def plot_convergence(self, ax: Optional[Axes] = None) -> Axes:
        """Plot convergence."""
        if ax is None:
            _, ax = plt.subplots()

        ax.plot(
            [ii for ii in range(len(self.max_violations))],
            self.max_violations,
            marker="o",
        )
        ax.axhline(0.0, color="k", linestyle="--")
        ax.set_xlabel("Iteration")
        ax.set_ylabel("Max Constraint Value")
        return ax


def check_equality_constraint(
    equality_constraint: Optional[EqualityConstraint], n: int
) -> None:
    """Verify equality constraints are compatible with a domain of dimension n."""
    if equality_constraint is None:
        return

    k = equality_constraint.num_constraints
    if k >= n:
        raise InvalidArgumentError("Rank of constraints must be < domain dimension")
    if k > 0 and equality_constraint.dimension != n:
        raise DimensionMismatchError(
            "Equality constraints have the wrong dimension",
            actual=equality_constraint.dimension,
            expected=n,
        )


class Optimizer(ABC):
    """Base class for an optimizer."""

    def __init__(self, settings: Optional[OptimizationSettings] = None) -> None:
        """Initialize optimizer."""
        if settings is None:
            self.settings: OptimizationSettings = OptimizationSettings()
        else:
            self.settings = settings

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Problem dimension."""

    @property
    @abstractmethod
    def num_eq_constraints(self) -> int:
        """Count equality constraints."""

    @property
    @abstractmethod
    def num_ineq_constraints(self) -> int:
        """Count inequality constraints."""

    @abstractmethod
    def solve(self, x0: Optional[ArrayLike] = None):
        """Solve optimization problem.

        Parameters
        ----------
         x0 : vector, optional
            Initial guess. Defaults to the zero vector.

        """

    def initial_point(self, x0: Optional[ArrayLike]) -> npt.NDArray[np.float64]:
        """Validate x0, or construct the default initial guess."""
        if x0 is None:
            return np.zeros(self.dimension)

        x = np.array(x0, dtype=np.float64)
        if x.ndim != 1 or x.shape[0] != self.dimension:
            raise DimensionMismatchError(
                "Initial guess has the wrong dimension",
                actual=x.shape[0] if x.ndim == 1 else x.size,
                expected=self.dimension,
            )
        return x

    def check_iteration_limit(self, nit: int, x: npt.NDArray[np.float64]) -> None:
        """Raise IterationLimitError if taking step nit would exceed the budget.

        Called after the stopping tests, so reaching the optimum in exactly
        max_iterations steps does not raise.

        """
        max_iterations = self.settings.max_iterations
        if max_iterations is not None and nit > max_iterations:
            raise IterationLimitError(
                f"{type(self).__name__} did not converge.",
                last_iterate=x,
                nits=nit - 1,
            )


class PhaseISolver(Optimizer):
    """Base class for a solver that finds strictly feasible points."""

    @abstractmethod
    def solve(self, x0: Optional[ArrayLike] = None) -> FeasibilityResult:
        """Find x with fi(x) < 0 for every inequality constraint.

        Parameters
        ----------
         x0 : vector, optional
            Initial guess. Defaults to the zero vector.

        Returns
        -------
         res : FeasibilityResult
            The point found, and the largest constraint value there.

        """


class NewtonOptimizer(Optimizer):
    """Minimize a convex function, possibly subject to A * x = b, by Newton's method.

    Parameters
    ----------
     objective : ConvexFunction
        Function to minimize.
     equality_constraint : EqualityConstraint, optional
        Linear equality constraints, A * x = b. A must have fewer rows than the
        objective dimension. The initial guess need not satisfy the constraints.
     settings : OptimizationSettings, optional
        Optimization settings.
     kkt_solver : KKTSolver, optional
        Strategy for calculating Newton steps. Defaults to CholeskySchurKKTSolver.
     halting : Callable, optional
        Called after each step with (iteration, (x_prev, f(x_prev)), (x, f(x))).
        Returning True stops the iteration early.

    """

    def __init__(
        self,
        objective: ConvexFunction,
        equality_constraint: Optional[EqualityConstraint] = None,
        settings: Optional[OptimizationSettings] = None,
        kkt_solver: Optional[KKTSolver] = None,
        halting: Optional[HaltingCondition] = None,
    ) -> None:
        super().__init__(settings=settings)
        if not isinstance(objective, ConvexFunction):
            raise InvalidArgumentError("objective must be a ConvexFunction")
        check_equality_constraint(equality_constraint, objective.dimension)

        self.objective = objective
        self.equality_constraint = equality_constraint
        self.kkt_solver: KKTSolver = (
            CholeskySchurKKTSolver() if kkt_solver is None else kkt_solver
        )
        self.halting = halting

    @property
    def dimension(self) -> int:
        """Problem dimension."""
        return self.objective.dimension

    @property
    def num_eq_constraints(self) -> int:
        """Count equality constraints."""
        if self.equality_constraint is None:
            return 0
        return self.equality_constraint.num_constraints

    @property
    def num_ineq_constraints(self) -> int:
        """Count inequality constraints."""
        return 0

    def solve(self, x0: Optional[ArrayLike] = None) -> NewtonResult:
        """Minimize the objective.

        Parameters
        ----------
         x0 : vector, optional
            Initial guess. Defaults to the zero vector. If the objective is not finite
            at x0 (e.g. a barrier objective at an infeasible point), x0 is returned
            as-is.

        Returns
        -------
         res : NewtonResult
            The solution, wrapped with convergence info.

        Raises
        ------
         NewtonStepError: if the KKT solver could not calculate a Newton step.
         IterationLimitError: if the iteration budget is exhausted.

        """
        x = self.initial_point(x0)
        v = self.objective.value(x)
        if not np.isfinite(v):
            return NewtonResult(
                solution=x,
                objective_value=v,
                nits=0,
                objective_values=[v],
                status=1,
                message="Objective was not finite at the initial guess.",
            )

        if self.num_eq_constraints == 0:
            return self._solve_unconstrained(x, v)
        return self._solve_equality_constrained(x, v)

    def _solve_unconstrained(
        self, x: npt.NDArray[np.float64], v: float
    ) -> NewtonResult:
        """Newton's method (Algorithm 9.5)."""
        f = self.objective
        epsilon = self.settings.epsilon
        objective_values = [v]
        status: Literal[0, 1, 2] = 0
        message = "Newton's method completed successfully to the desired tolerance."
        nit = 0
        while True:
            nit += 1
            if self.settings.verbose:
                start_time = time.time()

            grad = f.gradient(x)
            sol = self.kkt_solver.solve(f.hessian(x), grad)

            if self.settings.verbose:
                end_time = time.time()
                print(
                    f"    {nit:02d} Newton step calculated in "
                    f"{1000 * (end_time - start_time):.03f} ms; "
                    f"lambda^2 = {sol.lambda_squared}"
                )

            if sol.lambda_squared <= 2.0 * epsilon:
                break

            # If the step direction becomes very small that indicates minimum
            delta_x = sol.delta_x
            if np.linalg.norm(delta_x) < epsilon:
                break

            self.check_iteration_limit(nit, x)
            step = self.backtracking_line_search(x, v, delta_x, np.dot(grad, delta_x))
            if step is None:
                status = 1
                message = (
                    "Backtracking line search could not find a step that decreased the "
                    "objective; treating the current point as the minimum."
                )
                break

            x_prev, v_prev = x, v
            x, v = step
            objective_values.append(v)
            if self.halting is not None and self.halting(nit, (x_prev, v_prev), (x, v)):
                status = 2
                message = "Halting condition was satisfied."
                break

        return NewtonResult(
            solution=x,
            objective_value=v,
            nits=nit,
            objective_values=objective_values,
            status=status,
            message=message,
        )

    def _solve_equality_constrained(
        self, x: npt.NDArray[np.float64], v: float
    ) -> NewtonResult:
        """Infeasible start Newton method (Algorithm 10.2)."""
        f = self.objective
        A = self.equality_constraint.A
        b = self.equality_constraint.b
        epsilon = self.settings.epsilon
        alpha = self.settings.backtracking_alpha
        beta = self.settings.backtracking_beta

        nu = np.zeros(A.shape[0])
        objective_values = [v]
        status: Literal[0, 1, 2] = 0
        message = "Newton's method completed successfully to the desired tolerance."
        nit = 0
        while True:
            nit += 1
            if self.settings.verbose:
                start_time = time.time()

            grad = f.gradient(x)
            r_norm = self.residual_norm(x, nu, grad)
            if r_norm <= epsilon:
                if self.settings.verbose:
                    print(f"    {nit:02d} Residual {r_norm} within tolerance")
                break

            sol = self.kkt_solver.solve(f.hessian(x), grad, A, A @ x - b)
            delta_x = sol.delta_x
            delta_nu = sol.nu_plus - nu

            if self.settings.verbose:
                end_time = time.time()
                print(
                    f"    {nit:02d} Newton step calculated in "
                    f"{1000 * (end_time - start_time):.03f} ms; residual = {r_norm}"
                )

            # If step direction becomes sufficiently small it indicates minimum
            if np.linalg.norm(delta_x) + np.linalg.norm(delta_nu) < epsilon:
                break

            self.check_iteration_limit(nit, x)
            found_step = False
            s = 1.0
            while s >= epsilon:
                x_new = x + s * delta_x
                v_new = f.value(x_new)
                if np.isfinite(v_new):
                    nu_new = nu + s * delta_nu
                    r_new = self.residual_norm(x_new, nu_new, f.gradient(x_new))
                    if r_new <= (1.0 - alpha * s) * r_norm:
                        found_step = True
                        break
                s *= beta

            if not found_step:
                status = 1
                message = (
                    "Backtracking line search could not find a step that decreased the "
                    "residual; treating the current point as the minimum."
                )
                break

            x_prev, v_prev = x, v
            x, nu, v = x_new, nu_new, v_new
            objective_values.append(v)
            if self.halting is not None and self.halting(nit, (x_prev, v_prev), (x, v)):
                status = 2
                message = "Halting condition was satisfied."
                break

        return NewtonResult(
            solution=x,
            objective_value=v,
            nits=nit,
            objective_values=objective_values,
            status=status,
            message=message,
        )

    def backtracking_line_search(
        self,
        x: npt.NDArray[np.float64],
        v: float,
        delta_x: npt.NDArray[np.float64],
        grad_dot_delta_x: float,
    ) -> Optional[Tuple[npt.NDArray[np.float64], float]]:
        """Perform backtracking line search.

        Parameters
        ----------
         x : npt.NDArray[np.float64]
            Current estimate.
         v : float
            Objective value at x.
         delta_x : npt.NDArray[np.float64]
            Descent direction.
         grad_dot_delta_x : float
            Directional derivative along delta_x. Negative for a descent direction.

        Returns
        -------
         x_new, v_new : vector, float
            The accepted point and its objective value, or None if no step size down to
            epsilon decreased the objective sufficiently.

        """
        alpha = self.settings.backtracking_alpha
        beta = self.settings.backtracking_beta
        s = 1.0
        while s >= self.settings.epsilon:
            x_new = x + s * delta_x
            v_new = self.objective.value(x_new)
            # Points outside the domain (e.g. infeasible under a barrier) are skipped.
            if np.isfinite(v_new) and v_new <= v + s * alpha * grad_dot_delta_x:
                return x_new, v_new
            s *= beta
        return None

    def residual_norm(
        self,
        x: npt.NDArray[np.float64],
        nu: npt.NDArray[np.float64],
        grad: npt.NDArray[np.float64],
    ) -> float:
        """Calculate the norm of the primal and dual residuals.

        The primal residual is A * x - b; the dual residual is grad_f + A^T * nu.

        """
        A = self.equality_constraint.A
        r_primal = A @ x - self.equality_constraint.b
        r_dual = grad + A.T @ nu
        return float(np.sqrt(np.dot(r_primal, r_primal) + np.dot(r_dual, r_dual)))


class BarrierOptimizer(Optimizer):
    """Minimize a convex function subject to convex inequality constraints.

    Parameters
    ----------
     objective : ConvexFunction
        Function to minimize.
     inequality_constraints : list of ConvexFunction or LinearInequalityConstraint
        Constraints, fi(x) < 0.
     equality_constraint : EqualityConstraint, optional
        Linear equality constraints, passed through to each centering step.
     settings : OptimizationSettings, optional
        Optimization settings.
     inner_settings : OptimizationSettings, optional
        Settings for the Newton's method centering steps. Defaults to `settings`.
     kkt_solver : KKTSolver, optional
        Strategy for calculating Newton steps.
     halting : Callable, optional
        Called after each centering step with (iteration, (x_prev, f0(x_prev)),
        (x, f0(x))). Returning True stops the iteration early.
     inner_halting : Callable, optional
        Halting condition for the Newton's method centering steps, called with the
        barrier objective values. Returning True ends the current centering step.
     phase1_solver : PhaseISolver, optional
        Used to find a strictly feasible starting point when the initial guess is not
        strictly feasible.

    """

    def __init__(
        self,
        objective: ConvexFunction,
        inequality_constraints: Union[
            LinearInequalityConstraint,
            ConvexFunction,
            Sequence[Union[LinearInequalityConstraint, ConvexFunction]],
        ] = (),
        equality_constraint: Optional[EqualityConstraint] = None,
        settings: Optional[OptimizationSettings] = None,
        inner_settings: Optional[OptimizationSettings] = None,
        kkt_solver: Optional[KKTSolver] = None,
        halting: Optional[HaltingCondition] = None,
        inner_halting: Optional[HaltingCondition] = None,
        phase1_solver: Optional[PhaseISolver] = None,
    ) -> None:
        super().__init__(settings=settings)
        if not isinstance(objective, ConvexFunction):
            raise InvalidArgumentError("objective must be a ConvexFunction")

        n = objective.dimension
        constraints = flatten_inequality_constraints(inequality_constraints)
        for fi in constraints:
            if fi.dimension != n:
                raise DimensionMismatchError(
                    "Inequality constraint has the wrong dimension",
                    actual=fi.dimension,
                    expected=n,
                )
        check_equality_constraint(equality_constraint, n)

        self.objective = objective
        self.constraints: List[ConvexFunction] = constraints
        self.equality_constraint = equality_constraint
        self.inner_settings = self.settings if inner_settings is None else inner_settings
        self.kkt_solver = kkt_solver
        self.halting = halting
        self.inner_halting = inner_halting
        self.phase1_solver = phase1_solver

    @property
    def dimension(self) -> int:
        """Problem dimension."""
        return self.objective.dimension

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

    def is_strictly_feasible(self, x: npt.NDArray[np.float64]) -> bool:
        """Determine whether fi(x) < 0 for every inequality constraint."""
        return all(fi.value(x) < 0.0 for fi in self.constraints)

    def solve(self, x0: Optional[ArrayLike] = None) -> BarrierResult:
        """Solve optimization problem.

        Parameters
        ----------
         x0 : vector, optional
            Initial guess. Defaults to the zero vector. Must be strictly feasible with
            respect to the inequality constraints unless a Phase I solver was given.

        Returns
        -------
         res : BarrierResult
            The solution, wrapped with convergence info.

        Raises
        ------
         ProblemInfeasibleError: if the Phase I solver could not find a strictly
            feasible point.

        """
        x = self.initial_point(x0)
        m = self.num_ineq_constraints
        if m == 0:
            # Without inequality constraints, use Newton's method directly.
            result = self._newton(self.objective).solve(x)
            return BarrierResult(
                solution=result.solution,
                objective_value=result.objective_value,
                duality_gaps=[],
                nits=0,
                inner_nits=[result.nits],
                status=0 if result.status == 0 else 1,
                message=result.message,
            )

        if not self.is_strictly_feasible(x):
            x = self.find_feasible_point(x)

        if self.settings.verbose:
            overall_start_time = time.time()
            print("  Starting barrier method")

        epsilon = self.settings.epsilon
        mu = self.settings.barrier_mu
        t = self.settings.barrier_t0
        duality_gaps = []
        inner_nits = []
        status: Literal[0, 1, 2] = 0
        message = "Barrier method completed successfully to the desired tolerance."
        nit = 0
        while t * epsilon < m:
            nit += 1
            if self.settings.verbose:
                print(f"  {nit:02d} Beginning centering step with {t=:}")
                start_time = time.time()

            result = self._newton(
                LogBarrierFunction(t, self.objective, self.constraints)
            ).solve(x)

            if self.settings.verbose:
                end_time = time.time()
                print(
                    f"  {nit:02d} Centering step completed in "
                    f"{1000 * (end_time - start_time):.03f} ms"
                )

            x_prev = x
            x = result.solution
            inner_nits.append(result.nits)
            duality_gaps.append(m / t)
            status = 0 if result.status == 0 else 1
            t *= mu

            if self.halting is not None and self.halting(
                nit,
                (x_prev, self.objective.value(x_prev)),
                (x, self.objective.value(x)),
            ):
                status = 2
                message = "Halting condition was satisfied."
                break

        if status == 1:
            message = (
                "Barrier method completed, but the last centering step stopped before "
                "reaching the desired tolerance."
            )

        if self.settings.verbose:
            overall_end_time = time.time()
            print(
                f"  Barrier method completed in "
                f"{1000 * (overall_end_time - overall_start_time):.03f} ms"
            )

        return BarrierResult(
            solution=x,
            objective_value=self.objective.value(x),
            duality_gaps=duality_gaps,
            nits=nit,
            inner_nits=inner_nits,
            status=status,
            message=message,
        )

    def find_feasible_point(
        self, x0: npt.NDArray[np.float64]
    ) -> npt.NDArray[np.float64]:
        """Find a strictly feasible starting point using the Phase I solver.

        Without a Phase I solver, x0 is returned unchanged; the first centering step
        will then stop immediately, since the barrier objective is +inf at x0.

        """
        if self.phase1_solver is None:
            if self.settings.verbose:
                print("  Initial guess was not strictly feasible")
            return x0

        if self.settings.verbose:
            print("  Initial guess was not strictly feasible; starting Phase I")
        phase1_res = self.phase1_solver.solve(x0)
        if not phase1_res.is_feasible or not self.is_strictly_feasible(
            phase1_res.solution
        ):
            raise ProblemInfeasibleError(
                message=(
                    "Phase I could not find a strictly feasible point: largest "
                    f"constraint value was {phase1_res.max_violation}"
                ),
                result=phase1_res,
            )
        return phase1_res.solution

    def _newton(self, objective: ConvexFunction) -> NewtonOptimizer:
        return NewtonOptimizer(
            objective,
            equality_constraint=self.equality_constraint,
            settings=self.inner_settings,
            kkt_solver=self.kkt_solver,
            halting=self.inner_halting,
        )
