import math
from typing import Callable, Mapping, Optional, Tuple, Union

from .expr import Expr, Op, walk_up
from .types import InvalidExprError, ParamHandle

ParamNames = Union[Mapping[ParamHandle, str], Callable[[ParamHandle], str]]

_SYMBOLS = {Op.PLUS: '+', Op.MINUS: '-', Op.TIMES: '*', Op.DIV: '/'}
_FUNCTIONS = {Op.SQRT: 'sqrt', Op.SIN: 'sin', Op.COS: 'cos', Op.ASIN: 'asin', Op.ACOS: 'acos'}

_PREC_SUM = 10
_PREC_PRODUCT = 20
_PREC_UNARY = 30
_PREC_ATOM = 40


def default_param_name(h: ParamHandle) -> str:
    return f"p{h}"


def format_number(v: float) -> str:
    """Render a constant as a literal the parser reads back to the same value."""

    if math.isnan(v):
        return "(0 / 0)"
    if math.isinf(v):
        # overflows to inf when parsed
        return "1e999" if v > 0 else "-1e999"
    if v == 0 and math.copysign(1.0, v) < 0:
        return "-0"
    if v == int(v) and abs(v) < 1e15:
        return str(int(v))
    return repr(float(v))


def _param_name(names: Optional[ParamNames], h: ParamHandle) -> str:
    if names is None:
        return default_param_name(h)
    if callable(names):
        return names(h)
    return names.get(h, default_param_name(h))


def _wrap(text: str, prec: int, need: int) -> str:
    return f"({text})" if prec < need else text


def _render(e: Expr, names: Optional[ParamNames]) -> Tuple[str, int]:
    def visit(n: Expr, a: Optional[Tuple[str, int]], b: Optional[Tuple[str, int]]) -> Tuple[str, int]:
        return _render_node(n, a, b, names)

    return walk_up(e, visit)


def _render_node(
    e: Expr,
    left: Optional[Tuple[str, int]],
    right: Optional[Tuple[str, int]],
    names: Optional[ParamNames],
) -> Tuple[str, int]:
    op = e.op
    if op == Op.CONSTANT:
        text = format_number(e.value)
        if text.startswith('-'):
            return text, _PREC_UNARY
        return text, _PREC_ATOM
    if op == Op.PARAM:
        return _param_name(names, e.param), _PREC_ATOM
    if op == Op.PARAM_PTR:
        return _param_name(names, e.ref.h), _PREC_ATOM
    if op == Op.POINT:
        return f"point{e.entity}", _PREC_ATOM
    if op == Op.ENTITY:
        return f"entity{e.entity}", _PREC_ATOM

    if op in _SYMBOLS:
        prec = _PREC_SUM if op in (Op.PLUS, Op.MINUS) else _PREC_PRODUCT
        (lt, lp), (rt, rp) = left, right
        # operators are left-associative: a right operand of equal
        # precedence needs parentheses
        return f"{_wrap(lt, lp, prec)} {_SYMBOLS[op]} {_wrap(rt, rp, prec + 1)}", prec
    if op == Op.SQUARE:
        inner, ip = left
        inner = _wrap(inner, ip, _PREC_PRODUCT + 1)
        return f"{inner} * {inner}", _PREC_PRODUCT
    if op == Op.NEGATE:
        inner, ip = left
        return f"-{_wrap(inner, ip, _PREC_ATOM)}", _PREC_UNARY
    if op in _FUNCTIONS:
        inner, _ = left
        return f"{_FUNCTIONS[op]}({inner})", _PREC_ATOM
    raise InvalidExprError(f"cannot print {op.name} node")


def print_expr(e: Expr, names: Optional[ParamNames] = None) -> str:
    """Render ``e`` as infix text that :func:`parse_expr` reads back.

    Parameters print as ``p<handle>`` unless ``names`` (a mapping or callable)
    names them. Squares print as products.
    """

    text, _ = _render(e, names)
    return text


__all__ = ["print_expr", "format_number", "default_param_name", "ParamNames"]
