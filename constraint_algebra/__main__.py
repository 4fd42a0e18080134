import argparse
import logging
import sys
from typing import Dict, List, Optional, Sequence, Tuple

from constraint_algebra import (
    MULTIPLE_PARAMS,
    NO_PARAMS,
    ParamList,
    ParseOptions,
    fold_constants,
    parse_expr,
    print_expr,
)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _parse_assignment(value: str) -> Tuple[str, float]:
    name, sep, raw = value.partition("=")
    name = name.strip()
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {value!r}")
    try:
        return name, float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid value for {name}: {raw!r}") from None


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Evaluate, differentiate and fold a constraint expression"
    )
    parser.add_argument("expression", help="Expression text, e.g. 'sqrt(x*x + y*y)'")
    parser.add_argument(
        "--param",
        action="append",
        default=[],
        type=_parse_assignment,
        metavar="NAME=VALUE",
        help="Bind a reference name to a parameter with the given value (repeatable)",
    )
    parser.add_argument("--wrt", help="Differentiate with respect to this parameter name")
    parser.add_argument(
        "--fold",
        action="store_true",
        help="Fold constant subtrees before printing",
    )
    parser.add_argument(
        "--degrees",
        action="store_true",
        help="Read sin/cos arguments and asin/acos results in degrees",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    params = ParamList()
    references: Dict[str, int] = {}
    names: Dict[int, str] = {}
    assignments: List[Tuple[str, float]] = args.param
    for h, (name, value) in enumerate(assignments, start=1):
        params.add(h, value)
        references[name] = h
        names[h] = name
    logger.info("Bound %d parameter(s): %s", len(references), ", ".join(references) or "(none)")

    options = ParseOptions(angle_unit="degrees" if args.degrees else "radians")
    try:
        expr = parse_expr(args.expression, references, options=options)
    except SyntaxError as err:
        print(f"error: {err}", file=sys.stderr)
        return 2

    if args.fold:
        expr = fold_constants(expr)

    print(f"Expression: {print_expr(expr, names)}")
    print(f"Nodes: {expr.nodes()}")
    print(f"Value: {expr.eval(params)!r}")

    referenced = expr.referenced_params()
    if referenced is NO_PARAMS:
        print("Parameters: none")
    elif referenced is MULTIPLE_PARAMS:
        print("Parameters: multiple")
    else:
        print(f"Parameters: {names.get(referenced, referenced)}")

    if args.wrt:
        if args.wrt not in references:
            print(f"error: unknown parameter {args.wrt!r}", file=sys.stderr)
            return 2
        derivative = fold_constants(expr.partial_wrt(references[args.wrt]))
        print(f"d/d{args.wrt}: {print_expr(derivative, names)}")
        print(f"d/d{args.wrt} value: {derivative.eval(params)!r}")

    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
