"""Equations and their Jacobian, as handed to the nonlinear solver."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy.optimize import approx_fprime

from .deps import depends_on, param_bit, params_used, referenced_params, resolve_params
from .expr import Expr
from .logging_utils import apply_debug_logging
from .params import ParamList
from .simplify import fold_constants
from .types import MULTIPLE_PARAMS, NO_PARAMS, EquationHandle, ParamHandle
from .vector import ExprQuaternion

logger = logging.getLogger(__name__)


@dataclass
class Equation:
    """One residual: the solver drives ``expr`` to zero."""

    h: EquationHandle
    expr: Expr


@dataclass
class EquationClasses:
    # no unknowns: a numeric consistency check
    closed: List[Equation] = field(default_factory=list)
    # exactly one unknown: solvable directly for it
    single: Dict[ParamHandle, List[Equation]] = field(default_factory=dict)
    # several unknowns: needs the Jacobian
    coupled: List[Equation] = field(default_factory=list)


def quaternion_normalization(h: EquationHandle, q: ExprQuaternion) -> Equation:
    """Return the equation ``|q| - 1 = 0`` that keeps ``q`` a unit quaternion."""

    return Equation(h, q.magnitude().minus(Expr.from_value(1)))


def classify_equations(equations: Sequence[Equation], unknowns: Sequence[ParamHandle]) -> EquationClasses:
    within = set(unknowns)
    out = EquationClasses()
    for eq in equations:
        r = referenced_params(eq.expr, within=within)
        if r is NO_PARAMS:
            out.closed.append(eq)
        elif r is MULTIPLE_PARAMS:
            out.coupled.append(eq)
        else:
            out.single.setdefault(r, []).append(eq)
    logger.debug(
        "Classified %d equations: closed=%d single=%d coupled=%d",
        len(equations),
        len(out.closed),
        sum(len(v) for v in out.single.values()),
        len(out.coupled),
    )
    return out


class SymbolicJacobian:
    """Residuals and partial derivatives of a set of equations.

    Each equation is resolved against ``params`` (then ``fallback``), folded,
    and differentiated once per unknown it may depend on. Evaluation then only
    walks the folded trees, reading current parameter values through direct
    references, so neither store may be structurally changed while this
    object is in use.
    """

    def __init__(
        self,
        equations: Sequence[Equation],
        unknowns: Sequence[ParamHandle],
        params: ParamList,
        fallback: Optional[ParamList] = None,
    ):
        self.equations = list(equations)
        self.unknowns = list(unknowns)
        self.params = params
        self.fallback = fallback
        self.residual_exprs: List[Expr] = []
        # (row, column) -> folded partial derivative; absent entries are zero
        self.partials: Dict[Tuple[int, int], Expr] = {}

        for row, eq in enumerate(self.equations):
            f = fold_constants(resolve_params(eq.expr, params, fallback))
            self.residual_exprs.append(f)
            scoreboard = params_used(f)
            for col, h in enumerate(self.unknowns):
                if not scoreboard & param_bit(h):
                    continue
                if not depends_on(f, h):
                    continue
                pd = fold_constants(f.partial_wrt(h))
                if pd.is_constant(0.0):
                    continue
                self.partials[(row, col)] = pd
        logger.debug(
            "Built Jacobian %dx%d with %d nonzero symbolic entries",
            len(self.equations),
            len(self.unknowns),
            len(self.partials),
        )

    @property
    def shape(self) -> Tuple[int, int]:
        return len(self.equations), len(self.unknowns)

    def residuals(self) -> np.ndarray:
        return np.array([f.eval() for f in self.residual_exprs], dtype=float)

    def evaluate(self) -> np.ndarray:
        jac = np.zeros(self.shape, dtype=float)
        for (row, col), pd in self.partials.items():
            jac[row, col] = pd.eval()
        return jac

    def sparsity(self) -> np.ndarray:
        mask = np.zeros(self.shape, dtype=bool)
        for row, col in self.partials:
            mask[row, col] = True
        return mask

    def is_finite(self) -> bool:
        """Return ``False`` when any residual or derivative is inf or NaN."""

        ok = bool(np.all(np.isfinite(self.residuals())) and np.all(np.isfinite(self.evaluate())))
        if not ok:
            logger.warning("Non-finite residual or Jacobian entry at current parameter values")
        return ok

    def _store_for(self, h: ParamHandle) -> ParamList:
        if h in self.params:
            return self.params
        if self.fallback is not None and h in self.fallback:
            return self.fallback
        return self.params  # get() below raises MissingParamError

    def current_values(self) -> np.ndarray:
        return np.array([self._store_for(h).get(h).val for h in self.unknowns], dtype=float)

    def set_values(self, x: Sequence[float]) -> None:
        for h, v in zip(self.unknowns, x):
            self._store_for(h).get(h).val = float(v)

    def finite_difference(self, step: float = 1e-7) -> np.ndarray:
        """Estimate the Jacobian numerically; parameter values are restored."""

        x0 = self.current_values()

        def _residuals_at(x: np.ndarray) -> np.ndarray:
            self.set_values(x)
            return self.residuals()

        try:
            with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
                jac = approx_fprime(x0, _residuals_at, step)
        finally:
            self.set_values(x0)
        return np.atleast_2d(np.asarray(jac, dtype=float)).reshape(self.shape)


apply_debug_logging(globals(), logger=logger)


__all__ = [
    "Equation",
    "EquationClasses",
    "SymbolicJacobian",
    "classify_equations",
    "quaternion_normalization",
]
