"""User-entered constraints that live as text and are re-parsed on load."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .config import ParseOptions
from .expr import Expr
from .parser import parse_expr
from .printer import ParamNames, print_expr

logger = logging.getLogger(__name__)


@dataclass
class ExpressionConstraint:
    text: str
    expr: Expr

    @classmethod
    def from_text(
        cls,
        text: str,
        references: Optional[Mapping[str, object]] = None,
        options: Optional[ParseOptions] = None,
    ) -> "ExpressionConstraint":
        return cls(text, parse_expr(text, references, options=options))

    def edit(
        self,
        text: str,
        references: Optional[Mapping[str, object]] = None,
        options: Optional[ParseOptions] = None,
    ) -> None:
        """Replace the constraint's text; on a parse error nothing changes."""

        expr = parse_expr(text, references, options=options)
        logger.debug("Constraint text %r replaced by %r", self.text, text)
        self.text = text
        self.expr = expr

    def render(self, names: Optional[ParamNames] = None) -> str:
        return print_expr(self.expr, names)

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text}

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        references: Optional[Mapping[str, object]] = None,
        options: Optional[ParseOptions] = None,
    ) -> "ExpressionConstraint":
        text = data.get("text")
        if not isinstance(text, str):
            raise ValueError(f"constraint record needs a text field, got {data!r}")
        return cls.from_text(text, references, options)


__all__ = ["ExpressionConstraint"]
