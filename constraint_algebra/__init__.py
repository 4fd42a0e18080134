from .types import (
    NO_PARAMS,
    MULTIPLE_PARAMS,
    ParamSentinel,
    ExprInvariantError,
    InvalidExprError,
    MissingParamError,
    StaleParamRefError,
)
from .params import Param, ParamList, ParamRef
from .expr import Expr, Op
from .evaluate import evaluate, tol, TOL_EPSILON
from .derivative import partial_wrt
from .simplify import fold_constants
from .deps import (
    count_nodes,
    depends_on,
    params_used,
    referenced_params,
    replace_entities,
    resolve_params,
    substitute,
)
from .lexer import tokenize
from .parser import parse_expr
from .printer import print_expr
from .vector import ExprVector, ExprQuaternion
from .config import EngineConfig, ParseOptions, get_engine_config, set_engine_config
from .equations import (
    Equation,
    EquationClasses,
    SymbolicJacobian,
    classify_equations,
    quaternion_normalization,
)
from .constraint import ExpressionConstraint

__all__ = [
    'NO_PARAMS',
    'MULTIPLE_PARAMS',
    'ParamSentinel',
    'ExprInvariantError',
    'InvalidExprError',
    'MissingParamError',
    'StaleParamRefError',
    'Param',
    'ParamList',
    'ParamRef',
    'Expr',
    'Op',
    'evaluate',
    'tol',
    'TOL_EPSILON',
    'partial_wrt',
    'fold_constants',
    'count_nodes',
    'depends_on',
    'params_used',
    'referenced_params',
    'replace_entities',
    'resolve_params',
    'substitute',
    'tokenize',
    'parse_expr',
    'print_expr',
    'ExprVector',
    'ExprQuaternion',
    'EngineConfig',
    'ParseOptions',
    'get_engine_config',
    'set_engine_config',
    'Equation',
    'EquationClasses',
    'SymbolicJacobian',
    'classify_equations',
    'quaternion_normalization',
    'ExpressionConstraint',
]
