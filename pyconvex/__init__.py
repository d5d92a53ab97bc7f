"""Convex optimization with Newton's method and the barrier method."""

from .composite_functions import (
    FeasiblePointConstraintFunction,
    FeasiblePointObjectiveFunction,
    LogBarrierFunction,
    SmoothMaxFunction,
    slack_formulation,
)
from .constraints import EqualityConstraint, LinearInequalityConstraint
from .exceptions import (
    DimensionMismatchError,
    InvalidArgumentError,
    IterationLimitError,
    NewtonStepError,
    NumericalFailureError,
    OptimizationError,
    ProblemInfeasibleError,
)
from .functions import (
    ConvexFunction,
    LinearFunction,
    LinearTransformFunction,
    QuadraticFunction,
)
from .numerical_helpers import (
    CholeskySchurKKTSolver,
    KKTSolution,
    KKTSolver,
    SVDSchurKKTSolver,
)
from .optimization import (
    BarrierOptimizer,
    BarrierResult,
    FeasibilityResult,
    NewtonOptimizer,
    NewtonResult,
    OptimizationResult,
    OptimizationSettings,
    Optimizer,
    PhaseISolver,
    negative_value_halting,
)
from .phase1solvers import FeasibilitySolver

__all__ = [
    "ConvexFunction",
    "LinearFunction",
    "QuadraticFunction",
    "LinearTransformFunction",
    "LogBarrierFunction",
    "SmoothMaxFunction",
    "FeasiblePointObjectiveFunction",
    "FeasiblePointConstraintFunction",
    "slack_formulation",
    "EqualityConstraint",
    "LinearInequalityConstraint",
    "KKTSolution",
    "KKTSolver",
    "CholeskySchurKKTSolver",
    "SVDSchurKKTSolver",
    "OptimizationSettings",
    "OptimizationResult",
    "NewtonResult",
    "BarrierResult",
    "FeasibilityResult",
    "Optimizer",
    "PhaseISolver",
    "NewtonOptimizer",
    "BarrierOptimizer",
    "FeasibilitySolver",
    "negative_value_halting",
    "DimensionMismatchError",
    "InvalidArgumentError",
    "IterationLimitError",
    "NewtonStepError",
    "NumericalFailureError",
    "OptimizationError",
    "ProblemInfeasibleError",
]
