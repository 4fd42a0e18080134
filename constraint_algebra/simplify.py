from __future__ import annotations

from typing import Optional

from .config import fold_identities_enabled
from .evaluate import apply_op
from .expr import BINARY_OPS, LEAF_OPS, UNARY_OPS, Expr, Op, rebuild, walk_up
from .types import InvalidExprError


def _prune_identity(op: Op, a: Expr, b: Expr) -> Optional[Expr]:
    if op == Op.PLUS:
        if b.is_constant(0.0):
            return a
        if a.is_constant(0.0):
            return b
    elif op == Op.MINUS:
        if b.is_constant(0.0):
            return a
    elif op == Op.TIMES:
        if b.is_constant(1.0):
            return a
        if a.is_constant(1.0):
            return b
    elif op == Op.DIV:
        if b.is_constant(1.0):
            return a
    return None


def fold_constants(e: Expr, *, identities: Optional[bool] = None) -> Expr:
    """Return a copy of ``e`` with every all-constant subtree evaluated.

    With ``identities`` (default from the engine config) additive zeros and
    multiplicative ones are dropped too. Multiplication by zero is left alone
    so NaN and inf keep propagating.
    """

    if identities is None:
        identities = fold_identities_enabled()
    return _fold(e, identities)


def _fold(e: Expr, identities: bool) -> Expr:
    def visit(n: Expr, a: Optional[Expr], b: Optional[Expr]) -> Expr:
        op = n.op
        if op in LEAF_OPS:
            return rebuild(n)
        if op in BINARY_OPS:
            if a.op == Op.CONSTANT and b.op == Op.CONSTANT:
                return Expr.from_value(apply_op(op, a.value, b.value))
            if identities:
                pruned = _prune_identity(op, a, b)
                if pruned is not None:
                    return pruned
            return Expr(op, a=a, b=b)
        if op in UNARY_OPS:
            if a.op == Op.CONSTANT:
                return Expr.from_value(apply_op(op, a.value))
            return Expr(op, a=a)
        raise InvalidExprError(f"cannot fold {op.name} node")

    return walk_up(e, visit)


__all__ = ["fold_constants"]
