from __future__ import annotations

from enum import Enum
from typing import Union

ParamHandle = int
EntityHandle = int
EquationHandle = int


class ParamSentinel(Enum):
    """Non-handle results of :func:`referenced_params`."""

    NO_PARAMS = "no-params"
    MULTIPLE_PARAMS = "multiple-params"

    def __repr__(self) -> str:
        return f"<{self.name}>"


NO_PARAMS = ParamSentinel.NO_PARAMS
MULTIPLE_PARAMS = ParamSentinel.MULTIPLE_PARAMS

ReferencedParams = Union[ParamHandle, ParamSentinel]


class ExprInvariantError(RuntimeError):
    """Raised when an expression tree or its parameter store is in a state that
    only a programming defect can produce. Not meant to be recovered from."""


class InvalidExprError(ExprInvariantError):
    """Raised when a node kind reaches an operation that cannot handle it."""


class MissingParamError(ExprInvariantError, KeyError):
    """Raised when a referenced parameter handle is absent from every store."""

    def __init__(self, h: ParamHandle, message: str):
        super().__init__(message)
        self.h = h

    def __str__(self) -> str:
        return str(self.args[0])


class StaleParamRefError(ExprInvariantError):
    """Raised when a resolved reference outlives the layout of its store."""


__all__ = [
    "ParamHandle",
    "EntityHandle",
    "EquationHandle",
    "ParamSentinel",
    "NO_PARAMS",
    "MULTIPLE_PARAMS",
    "ReferencedParams",
    "ExprInvariantError",
    "InvalidExprError",
    "MissingParamError",
    "StaleParamRefError",
]
