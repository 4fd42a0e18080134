"""Expression nodes of the symbolic algebra system.

An :class:`Expr` is a tagged record: ``op`` selects the kind, the kind fixes
the number of children (``a`` and ``b``) and which payload field is
meaningful. Builder methods adopt their operands, so a subtree that is needed
twice must be passed through :meth:`Expr.deep_copy` first.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Callable, Dict, List, Mapping, Optional, Set, Tuple, TypeVar, Union

from .params import ParamList, ParamRef
from .types import EntityHandle, InvalidExprError, ParamHandle, ReferencedParams

if TYPE_CHECKING:  # pragma: no cover
    from .config import ParseOptions


class Op(IntEnum):
    # a parameter, by handle
    PARAM = 0
    # a parameter, by direct reference into a stable store
    PARAM_PTR = 1

    POINT = 10
    ENTITY = 11

    CONSTANT = 20

    PLUS = 100
    MINUS = 101
    TIMES = 102
    DIV = 103
    NEGATE = 104
    SQRT = 105
    SQUARE = 106
    SIN = 107
    COS = 108
    ASIN = 109
    ACOS = 110

    # parser-only kinds, never present in a finished expression
    ALL_RESOLVED = 1000
    PAREN = 1001
    BINARY_OP = 1002
    UNARY_OP = 1003


LEAF_OPS = frozenset({Op.PARAM, Op.PARAM_PTR, Op.POINT, Op.ENTITY, Op.CONSTANT})
BINARY_OPS = frozenset({Op.PLUS, Op.MINUS, Op.TIMES, Op.DIV})
UNARY_OPS = frozenset(
    {Op.NEGATE, Op.SQRT, Op.SQUARE, Op.SIN, Op.COS, Op.ASIN, Op.ACOS}
)
PARSER_OPS = frozenset({Op.ALL_RESOLVED, Op.PAREN, Op.BINARY_OP, Op.UNARY_OP})

ParamValues = Union[ParamList, Mapping[ParamHandle, float]]


def arity(op: Op) -> int:
    if op in BINARY_OPS:
        return 2
    if op in UNARY_OPS:
        return 1
    return 0


@dataclass(eq=False)
class Expr:
    op: Op
    a: Optional["Expr"] = None
    b: Optional["Expr"] = None
    value: float = 0.0
    param: Optional[ParamHandle] = None
    ref: Optional[ParamRef] = None
    entity: Optional[EntityHandle] = None
    # operator character while parsing
    symbol: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.op, Op):
            try:
                self.op = Op(self.op)
            except ValueError:
                raise InvalidExprError(f"unknown expression kind {self.op!r}") from None
        n = arity(self.op)
        if (self.a is not None) != (n >= 1) or (self.b is not None) != (n >= 2):
            raise InvalidExprError(
                f"{self.op.name} takes {n} operand(s), got a={self.a is not None} b={self.b is not None}"
            )
        payloads = {
            Op.PARAM: self.param is not None,
            Op.PARAM_PTR: self.ref is not None,
            Op.POINT: self.entity is not None,
            Op.ENTITY: self.entity is not None,
        }
        for kind, present in payloads.items():
            if present and self.op != kind and not (
                kind in (Op.POINT, Op.ENTITY) and self.op in (Op.POINT, Op.ENTITY)
            ):
                raise InvalidExprError(f"{self.op.name} node carries a {kind.name} payload")
            if self.op == kind and not present:
                raise InvalidExprError(f"{kind.name} node without its payload")

    # -- leaves ---------------------------------------------------------

    @classmethod
    def from_value(cls, v: float) -> "Expr":
        return cls(Op.CONSTANT, value=float(v))

    @classmethod
    def from_param(cls, h: ParamHandle) -> "Expr":
        return cls(Op.PARAM, param=h)

    @classmethod
    def from_ref(cls, ref: ParamRef) -> "Expr":
        return cls(Op.PARAM_PTR, ref=ref)

    @classmethod
    def from_point(cls, h: EntityHandle) -> "Expr":
        return cls(Op.POINT, entity=h)

    @classmethod
    def from_entity(cls, h: EntityHandle) -> "Expr":
        return cls(Op.ENTITY, entity=h)

    @classmethod
    def from_text(
        cls,
        text: str,
        references: Optional[Mapping[str, object]] = None,
        *,
        options: Optional["ParseOptions"] = None,
    ) -> "Expr":
        from .parser import parse_expr

        return parse_expr(text, references, options=options)

    # -- builders -------------------------------------------------------

    def any_op(self, op: Op, b: Optional["Expr"] = None) -> "Expr":
        return Expr(op, a=self, b=b)

    def plus(self, b: "Expr") -> "Expr":
        return self.any_op(Op.PLUS, b)

    def minus(self, b: "Expr") -> "Expr":
        return self.any_op(Op.MINUS, b)

    def times(self, b: "Expr") -> "Expr":
        return self.any_op(Op.TIMES, b)

    def div(self, b: "Expr") -> "Expr":
        return self.any_op(Op.DIV, b)

    def negate(self) -> "Expr":
        return self.any_op(Op.NEGATE)

    def sqrt(self) -> "Expr":
        return self.any_op(Op.SQRT)

    def square(self) -> "Expr":
        return self.any_op(Op.SQUARE)

    def sin(self) -> "Expr":
        return self.any_op(Op.SIN)

    def cos(self) -> "Expr":
        return self.any_op(Op.COS)

    def asin(self) -> "Expr":
        return self.any_op(Op.ASIN)

    def acos(self) -> "Expr":
        return self.any_op(Op.ACOS)

    def __add__(self, other: Union["Expr", float]) -> "Expr":
        return self.plus(_coerce(other))

    def __radd__(self, other: float) -> "Expr":
        return _coerce(other).plus(self)

    def __sub__(self, other: Union["Expr", float]) -> "Expr":
        return self.minus(_coerce(other))

    def __rsub__(self, other: float) -> "Expr":
        return _coerce(other).minus(self)

    def __mul__(self, other: Union["Expr", float]) -> "Expr":
        return self.times(_coerce(other))

    def __rmul__(self, other: float) -> "Expr":
        return _coerce(other).times(self)

    def __truediv__(self, other: Union["Expr", float]) -> "Expr":
        return self.div(_coerce(other))

    def __rtruediv__(self, other: float) -> "Expr":
        return _coerce(other).div(self)

    def __neg__(self) -> "Expr":
        return self.negate()

    # -- structure ------------------------------------------------------

    def children(self) -> int:
        """Number of child nodes: 0 (e.g. constant), 1 (sqrt) or 2 (plus)."""

        return arity(self.op)

    def nodes(self) -> int:
        """Total number of nodes in the tree."""

        from .deps import count_nodes

        return count_nodes(self)

    def deep_copy(self) -> "Expr":
        return walk_up(self, rebuild)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expr):
            return NotImplemented
        stack = [(self, other)]
        while stack:
            x, y = stack.pop()
            if x is y:
                continue
            if _payload(x) != _payload(y):
                return False
            if (x.a is None) != (y.a is None) or (x.b is None) != (y.b is None):
                return False
            if x.a is not None:
                stack.append((x.a, y.a))
            if x.b is not None:
                stack.append((x.b, y.b))
        return True

    __hash__ = None  # type: ignore[assignment]

    def is_constant(self, v: Optional[float] = None) -> bool:
        return self.op == Op.CONSTANT and (v is None or self.value == v)

    # -- algorithms, implemented in their own modules -------------------

    def eval(self, params: Optional[ParamValues] = None) -> float:
        from .evaluate import evaluate

        return evaluate(self, params)

    def partial_wrt(self, h: ParamHandle) -> "Expr":
        from .derivative import partial_wrt

        return partial_wrt(self, h)

    def fold_constants(self, *, identities: Optional[bool] = None) -> "Expr":
        from .simplify import fold_constants

        return fold_constants(self, identities=identities)

    def depends_on(self, h: ParamHandle) -> bool:
        from .deps import depends_on

        return depends_on(self, h)

    def params_used(self) -> int:
        from .deps import params_used

        return params_used(self)

    def referenced_params(
        self,
        within: Optional[object] = None,
        into: Optional[Set[ParamHandle]] = None,
    ) -> ReferencedParams:
        from .deps import referenced_params

        return referenced_params(self, within=within, into=into)

    def substitute(self, old: ParamHandle, new: ParamHandle) -> None:
        from .deps import substitute

        substitute(self, old, new)

    def deep_copy_with_params_as_refs(
        self, first: ParamList, then: Optional[ParamList] = None
    ) -> "Expr":
        from .deps import resolve_params

        return resolve_params(self, first, then)

    def print(self, names: Optional[Union[Mapping[ParamHandle, str], Callable[[ParamHandle], str]]] = None) -> str:
        from .printer import print_expr

        return print_expr(self, names)

    def __str__(self) -> str:
        return self.print()


def _coerce(value: Union[Expr, float]) -> Expr:
    if isinstance(value, Expr):
        return value
    if isinstance(value, (int, float)):
        return Expr.from_value(value)
    raise TypeError(f"cannot combine Expr with {type(value).__name__}")


def _payload(e: Expr) -> tuple:
    return (e.op, e.value, e.param, e.ref, e.entity, e.symbol)


def rebuild(e: Expr, a: Optional[Expr] = None, b: Optional[Expr] = None) -> Expr:
    """Return a node like ``e`` (same kind and payload) over children ``a``, ``b``."""

    return Expr(
        e.op,
        a=a,
        b=b,
        value=e.value,
        param=e.param,
        ref=e.ref,
        entity=e.entity,
        symbol=e.symbol,
    )


T = TypeVar("T")


def walk_up(e: Expr, visit: Callable[[Expr, Optional[T], Optional[T]], T]) -> T:
    """Combine a tree bottom-up without recursion.

    ``visit(node, a_result, b_result)`` runs once per node, after both of its
    children; missing children pass ``None``. Trees of any depth are handled,
    so long sums parsed from text never hit the interpreter's recursion limit.
    """

    results: List[T] = []
    stack: List[Tuple[Expr, bool]] = [(e, False)]
    while stack:
        n, children_done = stack.pop()
        if children_done:
            rb = results.pop() if n.b is not None else None
            ra = results.pop() if n.a is not None else None
            results.append(visit(n, ra, rb))
            continue
        stack.append((n, True))
        if n.b is not None:
            stack.append((n.b, False))
        if n.a is not None:
            stack.append((n.a, False))
    return results[0]


# name -> kind for the unary functions accepted in text
FUNCTIONS: Dict[str, Op] = {
    "sqrt": Op.SQRT,
    "sin": Op.SIN,
    "cos": Op.COS,
    "asin": Op.ASIN,
    "acos": Op.ACOS,
}


__all__ = [
    "Op",
    "Expr",
    "ParamValues",
    "arity",
    "LEAF_OPS",
    "BINARY_OPS",
    "UNARY_OPS",
    "PARSER_OPS",
    "FUNCTIONS",
    "rebuild",
    "walk_up",
]
