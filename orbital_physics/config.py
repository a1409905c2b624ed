from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .constants import FIXED_ITERATIONS, KEPLER_TOL, KEPLER_MAX_ITER

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_SOLVER = "fixed"
DEFAULT_REDUCTION = "truncate"
DEFAULT_STEPS = 360

SOLVER_MODES = ("fixed", "converged")
REDUCTION_MODES = ("truncate", "floor")


@dataclass(frozen=True, slots=True)
class PropagatorConfig:
    """
    Settings for the Kepler propagator.

    Instances are hashable so they can be passed to jitted functions as static arguments.

    Attributes:
        solver: ``"fixed"`` runs exactly ``iterations`` Newton-Raphson steps with no
            convergence check. ``"converged"`` iterates until |dE| < ``tol`` or
            ``max_iter`` steps.
        iterations: Step count for the fixed solver.
        tol: Convergence tolerance on the eccentric anomaly update (rad).
        max_iter: Iteration cap for the converged solver.
        reduction: Mean anomaly reduction, ``"truncate"`` or ``"floor"``.
    """
    solver: str = DEFAULT_SOLVER
    iterations: int = FIXED_ITERATIONS
    tol: float = KEPLER_TOL
    max_iter: int = KEPLER_MAX_ITER
    reduction: str = DEFAULT_REDUCTION

    def __post_init__(self):
        if self.solver not in SOLVER_MODES:
            raise ValueError(f"Invalid solver '{self.solver}'. Must be one of: {', '.join(SOLVER_MODES)}")
        if self.reduction not in REDUCTION_MODES:
            raise ValueError(f"Invalid reduction '{self.reduction}'. Must be one of: {', '.join(REDUCTION_MODES)}")
        if self.iterations < 0:
            raise ValueError(f"iterations must be non-negative, got {self.iterations}")
        if self.max_iter < 1:
            raise ValueError(f"max_iter must be at least 1, got {self.max_iter}")
        if self.tol <= 0.0:
            raise ValueError(f"tol must be positive, got {self.tol}")


@dataclass(frozen=True, slots=True)
class SamplerConfig:
    steps: int = DEFAULT_STEPS
    closed: bool = False

    def __post_init__(self):
        if self.steps < 0:
            raise ValueError(f"steps must be non-negative, got {self.steps}")


DEFAULT_PROPAGATOR_CONFIG = PropagatorConfig()


def make_propagator_config(
    solver: Optional[str] = None,
    reduction: Optional[str] = None,
    *,
    iterations: Optional[int] = None,
    tol: Optional[float] = None,
    max_iter: Optional[int] = None,
) -> PropagatorConfig:
    """Normalize CLI-style inputs into a PropagatorConfig."""
    return PropagatorConfig(
        solver=solver.lower() if solver else DEFAULT_SOLVER,
        iterations=FIXED_ITERATIONS if iterations is None else iterations,
        tol=KEPLER_TOL if tol is None else tol,
        max_iter=KEPLER_MAX_ITER if max_iter is None else max_iter,
        reduction=reduction.lower() if reduction else DEFAULT_REDUCTION,
    )
