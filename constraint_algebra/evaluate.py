"""Numeric evaluation of expression trees.

Arithmetic runs on ``numpy.float64`` so that division by zero, the square
root of a negative number and ``asin``/``acos`` outside [-1, 1] produce
inf/NaN instead of raising. Rejecting non-finite results is the solver's job.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

import numpy as np

from .expr import Expr, Op, ParamValues, walk_up
from .params import ParamList
from .types import InvalidExprError, MissingParamError, ParamHandle

TOL_EPSILON = 0.001

_BINARY: Dict[Op, Callable[[np.float64, np.float64], np.float64]] = {
    Op.PLUS: np.add,
    Op.MINUS: np.subtract,
    Op.TIMES: np.multiply,
    Op.DIV: np.divide,
}

_UNARY: Dict[Op, Callable[[np.float64], np.float64]] = {
    Op.NEGATE: np.negative,
    Op.SQRT: np.sqrt,
    Op.SQUARE: np.square,
    Op.SIN: np.sin,
    Op.COS: np.cos,
    Op.ASIN: np.arcsin,
    Op.ACOS: np.arccos,
}


def tol(a: float, b: float) -> bool:
    return abs(a - b) < TOL_EPSILON


def _lookup(params: Optional[ParamValues], h: ParamHandle) -> float:
    if params is None:
        raise MissingParamError(h, f"parameter {h} referenced by handle but no store given")
    if isinstance(params, ParamList):
        return params.get(h).val
    try:
        return float(params[h])
    except KeyError:
        raise MissingParamError(h, f"parameter {h} not in store") from None


def _eval(e: Expr, params: Optional[ParamValues]) -> np.float64:
    def visit(n: Expr, a: Optional[np.float64], b: Optional[np.float64]) -> np.float64:
        op = n.op
        if op == Op.CONSTANT:
            return np.float64(n.value)
        if op == Op.PARAM:
            return np.float64(_lookup(params, n.param))
        if op == Op.PARAM_PTR:
            return np.float64(n.ref.param.val)
        fn = _BINARY.get(op)
        if fn is not None:
            return fn(a, b)
        fn1 = _UNARY.get(op)
        if fn1 is not None:
            return fn1(a)
        raise InvalidExprError(f"cannot evaluate {op.name} node")

    return walk_up(e, visit)


def evaluate(expr: Expr, params: Optional[ParamValues] = None) -> float:
    """Return the value of ``expr`` for the current parameter values.

    ``params`` is a :class:`ParamList` or a mapping from handle to value and is
    consulted only for parameters referenced by handle.
    """

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return float(_eval(expr, params))


def apply_op(op: Op, a: float, b: Optional[float] = None) -> float:
    """Apply a single operator to already-evaluated operands."""

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        if b is None:
            return float(_UNARY[op](np.float64(a)))
        return float(_BINARY[op](np.float64(a), np.float64(b)))


__all__ = ["TOL_EPSILON", "tol", "evaluate", "apply_op"]
