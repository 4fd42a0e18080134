"""Parameter-reference queries and rewrites."""

from __future__ import annotations

import logging
from typing import Callable, Collection, Iterator, Optional, Set

from .expr import Expr, Op, rebuild, walk_up
from .params import ParamList, ParamRef
from .types import (
    MULTIPLE_PARAMS,
    NO_PARAMS,
    MissingParamError,
    ParamHandle,
    ReferencedParams,
)

logger = logging.getLogger(__name__)

# params_used() hashes handles into this many bits of a 64-bit word
PARAMS_USED_SLOTS = 61
PARAMS_USED_ALL = (1 << 64) - 1


def iter_nodes(e: Expr) -> Iterator[Expr]:
    """Yield every node of ``e``, parents before children."""

    stack = [e]
    while stack:
        n = stack.pop()
        yield n
        if n.b is not None:
            stack.append(n.b)
        if n.a is not None:
            stack.append(n.a)


def count_nodes(e: Expr) -> int:
    return sum(1 for _ in iter_nodes(e))


def _leaf_handle(e: Expr) -> Optional[ParamHandle]:
    if e.op == Op.PARAM:
        return e.param
    if e.op == Op.PARAM_PTR:
        return e.ref.h
    return None


def depends_on(e: Expr, h: ParamHandle) -> bool:
    return any(_leaf_handle(n) == h for n in iter_nodes(e))


def referenced_params(
    e: Expr,
    within: Optional[Collection[ParamHandle]] = None,
    into: Optional[Set[ParamHandle]] = None,
) -> ReferencedParams:
    """Classify ``e`` by the distinct parameters it references.

    Returns ``NO_PARAMS``, ``MULTIPLE_PARAMS`` or the one handle referenced.
    Only handles in ``within`` count when it is given; counted handles are
    added to ``into`` when it is given.
    """

    found: Set[ParamHandle] = set()
    for n in iter_nodes(e):
        h = _leaf_handle(n)
        if h is None:
            continue
        if within is not None and h not in within:
            continue
        found.add(h)
    if into is not None:
        into.update(found)
    if not found:
        return NO_PARAMS
    if len(found) > 1:
        return MULTIPLE_PARAMS
    return next(iter(found))


def params_used(e: Expr) -> int:
    """Return a bitmask summary of the parameters referenced by ``e``.

    Handle ``h`` sets bit ``h % PARAMS_USED_SLOTS``, so distinct handles can
    share a bit; a clear bit proves independence, a set bit does not prove
    dependence. Past ``PARAMS_USED_SLOTS`` distinct handles the summary
    saturates to every bit set.
    """

    r = 0
    seen: Set[ParamHandle] = set()
    for n in iter_nodes(e):
        h = _leaf_handle(n)
        if h is None or h in seen:
            continue
        seen.add(h)
        if len(seen) > PARAMS_USED_SLOTS:
            return PARAMS_USED_ALL
        r |= 1 << (h % PARAMS_USED_SLOTS)
    return r


def param_bit(h: ParamHandle) -> int:
    return 1 << (h % PARAMS_USED_SLOTS)


def substitute(e: Expr, old: ParamHandle, new: ParamHandle) -> None:
    """Rewrite, in place, every leaf that references ``old`` to reference ``new``."""

    for n in iter_nodes(e):
        if n.op == Op.PARAM and n.param == old:
            n.param = new
        elif n.op == Op.PARAM_PTR and n.ref.h == old:
            # the store may not hold ``new``; fall back to the handle form
            n.op = Op.PARAM
            n.ref = None
            n.param = new


def resolve_params(e: Expr, first: ParamList, then: Optional[ParamList] = None) -> Expr:
    """Copy ``e`` with handle leaves turned into direct references.

    Each handle is looked up in ``first``, then in ``then``. A handle found in
    neither is a fatal inconsistency between the equations and the parameter
    tables.
    """

    resolved = _resolve(e, first, then)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Resolved %d-node expression against %d+%d parameters",
            count_nodes(resolved),
            len(first),
            len(then) if then is not None else 0,
        )
    return resolved


def _resolve(e: Expr, first: ParamList, then: Optional[ParamList]) -> Expr:
    def visit(n: Expr, a: Optional[Expr], b: Optional[Expr]) -> Expr:
        if n.op != Op.PARAM:
            return rebuild(n, a, b)
        h = n.param
        if h in first:
            return Expr.from_ref(ParamRef.to(first, h))
        if then is not None and h in then:
            return Expr.from_ref(ParamRef.to(then, h))
        raise MissingParamError(h, f"parameter {h} not found in any parameter table")

    return walk_up(e, visit)


def replace_entities(e: Expr, resolve: Callable[[Expr], Expr]) -> Expr:
    """Copy ``e`` with every point/entity leaf replaced by ``resolve(leaf)``."""

    def visit(n: Expr, a: Optional[Expr], b: Optional[Expr]) -> Expr:
        if n.op in (Op.POINT, Op.ENTITY):
            return resolve(n)
        return rebuild(n, a, b)

    return walk_up(e, visit)


__all__ = [
    "PARAMS_USED_SLOTS",
    "PARAMS_USED_ALL",
    "iter_nodes",
    "count_nodes",
    "depends_on",
    "referenced_params",
    "params_used",
    "param_bit",
    "substitute",
    "resolve_params",
    "replace_entities",
]
