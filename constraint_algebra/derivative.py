"""Exact symbolic partial derivatives.

The result is a new, unfolded tree that shares no nodes with its input; run
it through :func:`fold_constants` before evaluating it repeatedly.
"""

from __future__ import annotations

from typing import Optional

from .expr import Expr, Op, walk_up
from .types import InvalidExprError, ParamHandle


def _const(v: float) -> Expr:
    return Expr.from_value(v)


def _copy(e: Expr) -> Expr:
    return e.deep_copy()


def partial_wrt(e: Expr, h: ParamHandle) -> Expr:
    """Return d(e)/d(h)."""

    def visit(n: Expr, da: Optional[Expr], db: Optional[Expr]) -> Expr:
        return _rule(n, da, db, h)

    return walk_up(e, visit)


def _rule(e: Expr, da: Optional[Expr], db: Optional[Expr], h: ParamHandle) -> Expr:
    # da and db are the derivatives of e.a and e.b, built already
    op = e.op
    if op == Op.CONSTANT:
        return _const(0)
    if op == Op.PARAM:
        return _const(1 if e.param == h else 0)
    if op == Op.PARAM_PTR:
        return _const(1 if e.ref.h == h else 0)

    if op in (Op.POINT, Op.ENTITY) or e.a is None:
        raise InvalidExprError(f"cannot differentiate {op.name} node")

    a = e.a

    if op == Op.PLUS:
        return da.plus(db)
    if op == Op.MINUS:
        return da.minus(db)
    if op == Op.TIMES:
        b = e.b
        return da.times(_copy(b)).plus(_copy(a).times(db))
    if op == Op.DIV:
        b = e.b
        # (a'*b - a*b') / b^2
        return da.times(_copy(b)).minus(_copy(a).times(db)).div(_copy(b).square())

    if op == Op.NEGATE:
        return da.negate()
    if op == Op.SQRT:
        return da.div(_const(2).times(_copy(a).sqrt()))
    if op == Op.SQUARE:
        return _const(2).times(_copy(a)).times(da)
    if op == Op.SIN:
        return _copy(a).cos().times(da)
    if op == Op.COS:
        return _copy(a).sin().times(da).negate()
    if op == Op.ASIN:
        return da.div(_const(1).minus(_copy(a).square()).sqrt())
    if op == Op.ACOS:
        return da.div(_const(1).minus(_copy(a).square()).sqrt()).negate()

    raise InvalidExprError(f"cannot differentiate {op.name} node")


__all__ = ["partial_wrt"]
