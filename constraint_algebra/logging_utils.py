"""DEBUG-level call tracing for module-level engine functions."""

from __future__ import annotations

import inspect
import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Iterable, Mapping, MutableMapping, Optional, TypeVar, cast

import numpy as np

from .expr import Expr
from .params import ParamList

F = TypeVar("F", bound=Callable[..., Any])

_short = reprlib.Repr()
_short.maxother = 160
_short.maxlist = 8
_short.maxtuple = 8

_EXPR_TEXT_LIMIT = 120
_ARRAY_INLINE_LIMIT = 5


def _describe_expr(e: Expr) -> str:
    try:
        text = e.print()
    except Exception as exc:  # pragma: no cover - printing a malformed tree
        text = f"<unprintable {exc.__class__.__name__}>"
    if len(text) > _EXPR_TEXT_LIMIT:
        text = text[:_EXPR_TEXT_LIMIT] + "..."
    return f"Expr(nodes={e.nodes()}, text={text!r})"


def _describe_array(arr: np.ndarray) -> str:
    head = f"ndarray(shape={tuple(arr.shape)}, dtype={arr.dtype})"
    if arr.size == 0:
        return head
    if arr.size <= _ARRAY_INLINE_LIMIT:
        return f"{head}, values={_short.repr(arr.tolist())}"
    with np.errstate(invalid="ignore"):
        lo = float(np.nanmin(arr))
        hi = float(np.nanmax(arr))
    return f"{head}, min={lo:.6g}, max={hi:.6g}"


def _safe_repr(value: Any, *, limit: int = 400) -> str:
    """Short, bounded rendering of a traced argument or result."""

    if isinstance(value, Expr):
        return _describe_expr(value)
    if isinstance(value, np.ndarray):
        return _describe_array(value)
    if isinstance(value, ParamList):
        return repr(value)
    if isinstance(value, (list, tuple)):
        shown = [_safe_repr(v) for v in value[:_ARRAY_INLINE_LIMIT]]
        if len(value) > _ARRAY_INLINE_LIMIT:
            shown.append(f"... ({len(value)} total)")
        body = ", ".join(shown)
        return f"({body})" if isinstance(value, tuple) else f"[{body}]"
    text = _short.repr(value)
    return text if len(text) <= limit else text[:limit] + "... (truncated)"


def _describe_call(args: Iterable[Any], kwargs: Mapping[str, Any]) -> str:
    rendered = [_safe_repr(a) for a in args]
    rendered.extend(f"{k}={_safe_repr(v)}" for k, v in kwargs.items())
    return ", ".join(rendered)


def debug_log_call(
    logger: logging.Logger, *, name: Optional[str] = None, log_result: bool = True
) -> Callable[[F], F]:
    """Decorate a function so that its calls, results and failures are logged at DEBUG."""

    def decorator(func: F) -> F:
        if getattr(func, "_debug_logging_wrapped", False):
            return func
        label = name or getattr(func, "__qualname__", func.__name__)

        @wraps(func)
        def traced(*args: Any, **kwargs: Any):
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)
            logger.debug("Entering %s(%s)", label, _describe_call(args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception:
                logger.exception("Exception in %s", label)
                raise
            logger.debug("Exiting %s -> %s", label, _safe_repr(result) if log_result else "...")
            return result

        setattr(traced, "_debug_logging_wrapped", True)
        return cast(F, traced)

    return decorator


def apply_debug_logging(
    namespace: MutableMapping[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
    skip: Iterable[str] = (),
) -> None:
    """Trace every public function defined in the module owning ``namespace``."""

    module = namespace.get("__name__")
    logger = logger or logging.getLogger(module or __name__)
    skipped = set(skip)
    for attr, value in list(namespace.items()):
        if attr.startswith("_") or attr in skipped:
            continue
        if inspect.isfunction(value) and value.__module__ == module:
            namespace[attr] = debug_log_call(logger, name=attr)(value)


__all__ = ["debug_log_call", "apply_debug_logging"]
