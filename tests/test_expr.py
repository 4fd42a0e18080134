import math

import pytest

from constraint_algebra import (
    Expr,
    InvalidExprError,
    MissingParamError,
    Op,
    ParamList,
    evaluate,
    parse_expr,
    tol,
)
from constraint_algebra.params import ParamRef


def test_leaf_constructors_set_only_their_payload():
    c = Expr.from_value(2)
    assert c.op == Op.CONSTANT and c.value == 2.0 and c.param is None
    p = Expr.from_param(5)
    assert p.op == Op.PARAM and p.param == 5
    pt = Expr.from_point(3)
    assert pt.op == Op.POINT and pt.entity == 3
    en = Expr.from_entity(4)
    assert en.op == Op.ENTITY and en.entity == 4


@pytest.mark.parametrize(
    'kwargs',
    [
        {'op': Op.PLUS, 'a': Expr.from_value(1)},
        {'op': Op.SQRT},
        {'op': Op.SQRT, 'a': Expr.from_value(1), 'b': Expr.from_value(1)},
        {'op': Op.CONSTANT, 'a': Expr.from_value(1)},
        {'op': Op.PARAM},
        {'op': Op.CONSTANT, 'param': 3},
        {'op': 999},
    ],
)
def test_arity_and_payload_are_checked(kwargs):
    with pytest.raises(InvalidExprError):
        Expr(**kwargs)


def test_integer_op_is_converted_to_enum():
    assert Expr(102, a=Expr.from_value(2), b=Expr.from_value(3)).op is Op.TIMES


def test_children_and_nodes():
    e = Expr.from_value(1).plus(Expr.from_param(1).sqrt())
    assert e.children() == 2
    assert e.b.children() == 1
    assert e.a.children() == 0
    assert e.nodes() == 4


def test_builders_and_operator_overloads_agree():
    p = {1: 3.0}
    built = Expr.from_param(1).times(Expr.from_value(2)).minus(Expr.from_value(1)).div(Expr.from_value(5))
    overloaded = (Expr.from_param(1) * 2 - 1) / 5
    assert built == overloaded
    assert overloaded.eval(p) == pytest.approx(1.0)
    assert (1 - Expr.from_param(1)).eval(p) == -2.0
    assert (6 / Expr.from_param(1)).eval(p) == 2.0
    assert (2 + Expr.from_param(1)).eval(p) == 5.0
    assert (2 * Expr.from_param(1)).eval(p) == 6.0
    assert (-Expr.from_param(1)).eval(p) == -3.0


def test_overload_rejects_unsupported_operand():
    with pytest.raises(TypeError):
        Expr.from_value(1) + 'x'


@pytest.mark.parametrize(
    'build, expected',
    [
        (lambda x: x.sqrt(), 2.0),
        (lambda x: x.square(), 16.0),
        (lambda x: x.negate(), -4.0),
        (lambda x: x.sin(), math.sin(4.0)),
        (lambda x: x.cos(), math.cos(4.0)),
        (lambda x: x.div(Expr.from_value(8)).asin(), math.asin(0.5)),
        (lambda x: x.div(Expr.from_value(8)).acos(), math.acos(0.5)),
    ],
)
def test_unary_evaluation(build, expected):
    assert build(Expr.from_param(1)).eval({1: 4.0}) == pytest.approx(expected)


def test_eval_by_handle_and_by_reference_agree():
    params = ParamList([(10, 1.5), (11, -2.0)])
    e = Expr.from_param(10).times(Expr.from_param(11)).plus(Expr.from_value(1))
    resolved = e.deep_copy_with_params_as_refs(params)
    assert e.eval(params) == resolved.eval() == pytest.approx(-2.0)
    params[10].val = 4.0
    assert e.eval(params) == resolved.eval() == pytest.approx(-7.0)


def test_domain_errors_propagate_as_ieee_values():
    zero = Expr.from_value(0)
    assert math.isinf(Expr.from_value(1).div(zero).eval())
    assert math.isnan(zero.deep_copy().div(Expr.from_value(0)).eval())
    assert math.isnan(Expr.from_value(-1).sqrt().eval())
    assert math.isnan(Expr.from_value(2).asin().eval())
    assert math.isnan(Expr.from_value(-2).acos().eval())
    assert math.isnan(Expr.from_value(1).div(Expr.from_value(0)).times(Expr.from_value(0)).eval())


def test_missing_param_by_handle_is_fatal():
    e = Expr.from_param(42)
    with pytest.raises(MissingParamError) as excinfo:
        e.eval({1: 0.0})
    assert excinfo.value.h == 42
    with pytest.raises(MissingParamError):
        e.eval()
    with pytest.raises(MissingParamError):
        e.eval(ParamList())


def test_entity_leaves_cannot_be_evaluated():
    with pytest.raises(InvalidExprError):
        Expr.from_point(1).eval()
    with pytest.raises(InvalidExprError):
        evaluate(Expr.from_entity(1).plus(Expr.from_value(1)))


def test_parser_kinds_cannot_be_evaluated():
    with pytest.raises(InvalidExprError):
        Expr(Op.BINARY_OP, symbol='+').eval()


def test_deep_copy_is_independent():
    e = Expr.from_param(1).plus(Expr.from_param(2).sin())
    copy = e.deep_copy()
    assert copy == e
    assert copy.a is not e.a and copy.b.a is not e.b.a
    copy.substitute(1, 3)
    assert e.a.param == 1


def test_deep_copy_keeps_resolved_reference():
    params = ParamList([(1, 2.0)])
    e = Expr.from_ref(ParamRef.to(params, 1))
    assert e.deep_copy().ref == e.ref


def test_tol():
    assert tol(1.0, 1.0005)
    assert not tol(1.0, 1.01)
    assert tol(-3.0, -3.0)


def test_str_renders_infix():
    assert str(Expr.from_param(1).plus(Expr.from_value(2))) == 'p1 + 2'


def long_sum(n, name='x'):
    return parse_expr(' + '.join([name] * n), {name: 1})


def test_long_sum_evaluates_without_recursion_limit():
    e = long_sum(2500)
    assert e.nodes() == 4999
    assert e.eval({1: 1.0}) == 2500.0
    assert e.eval(ParamList([(1, 0.5)])) == 1250.0


def test_long_sum_copies_and_compares():
    e = long_sum(2500)
    copy = e.deep_copy()
    assert copy is not e
    assert copy == e
    copy.substitute(1, 2)
    assert copy != e
    assert e.depends_on(1) and not copy.depends_on(1)
