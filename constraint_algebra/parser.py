import logging
import math
import re
from typing import List, Mapping, Optional

from .config import ParseOptions
from .expr import FUNCTIONS, Expr, Op
from .lexer import Token, tokenize

logger = logging.getLogger(__name__)

_ERROR_LOC_RE = re.compile(r"\[col (\d+)\]")

_BINARY = {'+': Op.PLUS, '-': Op.MINUS, '*': Op.TIMES, '/': Op.DIV}

_DEG = math.pi / 180.0


def precedence(e: Expr) -> int:
    if e.op == Op.ALL_RESOLVED:
        return -1
    if e.op == Op.PAREN:
        return 0
    if e.op == Op.BINARY_OP:
        return 10 if e.symbol in '+-' else 20
    if e.op == Op.UNARY_OP:
        return 30
    raise SyntaxError(f'unexpected {e.op.name} on operator stack')


class Reducer:
    """Operand and operator stacks of one parse attempt."""

    def __init__(self, tokens: List[Token], references: Mapping[str, object], options: ParseOptions):
        self.toks = tokens
        self.i = 0
        self.references = references
        self.degrees = options.effective_angle_unit() == 'degrees'
        self.allow_pi = options.allow_pi
        self.operands: List[Expr] = []
        self.operators: List[Expr] = []

    def peek(self) -> Optional[Token]:
        return self.toks[self.i] if self.i < len(self.toks) else None

    def col(self) -> int:
        t = self.peek()
        if t:
            return t[2]
        if self.toks:
            last = self.toks[-1]
            return last[2] + len(last[1])
        return 1

    def pop_operand(self) -> Expr:
        if not self.operands:
            raise SyntaxError(f'[col {self.col()}] missing operand')
        return self.operands.pop()

    def reduce(self) -> None:
        op = self.operators.pop()
        if op.op == Op.UNARY_OP:
            a = self.pop_operand()
            n = self._unary(op.symbol, a)
        elif op.op == Op.BINARY_OP:
            b = self.pop_operand()
            a = self.pop_operand()
            n = Expr(_BINARY[op.symbol], a=a, b=b)
        elif op.op == Op.PAREN:
            raise SyntaxError(f'[col {self.col()}] unmatched "("')
        else:
            raise SyntaxError(f'[col {self.col()}] unmatched ")"')
        self.operands.append(n)

    def reduce_and_push(self, n: Expr) -> None:
        while precedence(n) <= precedence(self.operators[-1]):
            self.reduce()
        self.operators.append(n)

    def _unary(self, name: str, a: Expr) -> Expr:
        if name == '-':
            return a.negate()
        kind = FUNCTIONS[name]
        if self.degrees:
            if kind in (Op.SIN, Op.COS):
                return Expr(kind, a=a.times(Expr.from_value(_DEG)))
            if kind in (Op.ASIN, Op.ACOS):
                return Expr(kind, a=a).times(Expr.from_value(1.0 / _DEG))
        return Expr(kind, a=a)

    def operand(self, tok: Token) -> Expr:
        kind, val, col = tok
        if kind == 'NUMBER':
            return Expr.from_value(float(val))
        ref = self.references.get(val)
        if ref is None:
            if val == 'pi' and self.allow_pi:
                return Expr.from_value(math.pi)
            raise SyntaxError(f'[col {col}] unknown name {val!r}')
        if isinstance(ref, Expr):
            return ref.deep_copy()
        if isinstance(ref, bool):
            raise SyntaxError(f'[col {col}] name {val!r} is bound to a boolean')
        if isinstance(ref, float):
            return Expr.from_value(ref)
        if isinstance(ref, int):
            return Expr.from_param(ref)
        raise SyntaxError(f'[col {col}] name {val!r} is bound to unsupported {type(ref).__name__}')

    def parse(self) -> Expr:
        if not self.toks:
            raise SyntaxError('[col 1] empty expression')
        self.operators.append(Expr(Op.ALL_RESOLVED))
        expect_operand = True
        while True:
            t = self.peek()
            if t is None:
                break
            kind, val, col = t
            if kind in ('NUMBER', 'NAME'):
                if not expect_operand:
                    raise SyntaxError(f'[col {col}] missing operator before {val!r}')
                self.operands.append(self.operand(t))
                expect_operand = False
            elif kind == 'LPAREN':
                if not expect_operand:
                    raise SyntaxError(f'[col {col}] missing operator before "("')
                self.operators.append(Expr(Op.PAREN, symbol='('))
            elif kind == 'RPAREN':
                if expect_operand:
                    raise SyntaxError(f'[col {col}] missing operand before ")"')
                while self.operators[-1].op != Op.PAREN:
                    if self.operators[-1].op == Op.ALL_RESOLVED:
                        raise SyntaxError(f'[col {col}] unmatched ")"')
                    self.reduce()
                self.operators.pop()
            elif kind in ('PLUS', 'MINUS', 'STAR', 'SLASH'):
                if expect_operand:
                    raise SyntaxError(f'[col {col}] missing operand before {val!r}')
                self.reduce_and_push(Expr(Op.BINARY_OP, symbol=val))
                expect_operand = True
            elif kind == 'NEG':
                self.operators.append(Expr(Op.UNARY_OP, symbol='-'))
            elif kind == 'POS':
                pass
            elif kind == 'FUNC':
                nxt = self.toks[self.i + 1] if self.i + 1 < len(self.toks) else None
                if not nxt or nxt[0] != 'LPAREN':
                    raise SyntaxError(f'[col {col}] expected "(" after {val}')
                self.operators.append(Expr(Op.UNARY_OP, symbol=val))
            else:  # pragma: no cover - lexer emits no other kinds
                raise SyntaxError(f'[col {col}] unexpected token {kind}')
            self.i += 1

        if expect_operand:
            raise SyntaxError(f'[col {self.col()}] missing operand at end of expression')
        while self.operators[-1].op != Op.ALL_RESOLVED:
            self.reduce()
        self.operators.pop()
        result = self.pop_operand()
        if self.operands:  # pragma: no cover - guarded by expect_operand
            raise SyntaxError(f'[col {self.col()}] dangling operand')
        return result


def _augment_syntax_error(err: SyntaxError, text: str) -> Optional[SyntaxError]:
    message = str(err)
    if not text or "\n" in text or "\n" in message:
        return None
    match = _ERROR_LOC_RE.search(message)
    if not match:
        return None
    col = max(int(match.group(1)), 1)
    caret_line = " " * (col - 1) + "^"
    snippet = f"    {text.rstrip()}\n    {caret_line}"
    return SyntaxError(f"{message}\n{snippet}")


def parse_expr(
    text: str,
    references: Optional[Mapping[str, object]] = None,
    *,
    options: Optional[ParseOptions] = None,
) -> Expr:
    """Parse ``text`` into an expression tree.

    ``references`` maps reference tokens to what they stand for: an
    :class:`Expr` leaf (copied on every use), a parameter handle (``int``) or
    a number (``float``). Raises :class:`SyntaxError` with a caret diagnostic
    on malformed input.
    """

    options = options or ParseOptions()
    try:
        tokens = tokenize(text)
        result = Reducer(tokens, references or {}, options).parse()
    except SyntaxError as err:
        augmented = _augment_syntax_error(err, text)
        if augmented is None:
            raise
        raise augmented from None
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Parsed %r into %d-node expression", text, result.nodes())
    return result


__all__ = ["parse_expr", "precedence", "Reducer"]
