import re
from typing import List, Tuple

Token = Tuple[str, str, int]  # (type, value, col)

SYMBOLS = {
    '+': 'PLUS',
    '-': 'MINUS',
    '*': 'STAR',
    '/': 'SLASH',
    '(': 'LPAREN',
    ')': 'RPAREN',
}

FUNCTION_NAMES = ('sqrt', 'sin', 'cos', 'asin', 'acos')

# after one of these (or at the start) a sign is unary
_OPERAND_EXPECTED = {'PLUS', 'MINUS', 'STAR', 'SLASH', 'LPAREN', 'NEG', 'POS'}

WS = ' \t\r\n'

_name_re = re.compile(r'[A-Za-z_][A-Za-z0-9_.]*')
_num_re = re.compile(r'(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?')


def tokenize(s: str) -> List[Token]:
    tokens: List[Token] = []
    i = 0
    n = len(s)
    while i < n:
        ch = s[i]
        col = i + 1
        if ch in WS:
            i += 1
            continue
        m = _num_re.match(s, i)
        if m:
            tokens.append(('NUMBER', m.group(0), col))
            i = m.end()
            continue
        m = _name_re.match(s, i)
        if m:
            val = m.group(0)
            kind = 'FUNC' if val in FUNCTION_NAMES else 'NAME'
            tokens.append((kind, val, col))
            i = m.end()
            continue
        if ch in SYMBOLS:
            kind = SYMBOLS[ch]
            if kind in ('PLUS', 'MINUS'):
                prev = tokens[-1][0] if tokens else None
                if prev is None or prev in _OPERAND_EXPECTED:
                    kind = 'NEG' if kind == 'MINUS' else 'POS'
            tokens.append((kind, ch, col))
            i += 1
            continue
        raise SyntaxError(f'[col {col}] unexpected character: {ch!r}')
    return tokens
