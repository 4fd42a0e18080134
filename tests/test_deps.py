import pytest

from constraint_algebra import (
    MULTIPLE_PARAMS,
    NO_PARAMS,
    Expr,
    MissingParamError,
    Op,
    ParamList,
    count_nodes,
    depends_on,
    params_used,
    parse_expr,
    referenced_params,
    replace_entities,
    resolve_params,
    substitute,
)
from constraint_algebra.deps import PARAMS_USED_ALL, PARAMS_USED_SLOTS, param_bit


def sum_of_params(handles):
    e = Expr.from_param(handles[0])
    for h in handles[1:]:
        e = e.plus(Expr.from_param(h))
    return e


def test_depends_on():
    e = parse_expr('a * sin(b) + 3', {'a': 1, 'b': 2})
    assert depends_on(e, 1)
    assert depends_on(e, 2)
    assert not depends_on(e, 3)
    assert not depends_on(parse_expr('2 + 2'), 1)


def test_depends_on_sees_resolved_references():
    params = ParamList([(5, 1.0)])
    e = resolve_params(Expr.from_param(5).sqrt(), params)
    assert e.a.op == Op.PARAM_PTR
    assert depends_on(e, 5)
    assert not depends_on(e, 6)


def test_referenced_params_tri_state():
    assert referenced_params(parse_expr('1 + 2 * sqrt(3)')) is NO_PARAMS
    assert referenced_params(parse_expr('x * x + x', {'x': 7})) == 7
    assert referenced_params(parse_expr('x + y', {'x': 7, 'y': 8})) is MULTIPLE_PARAMS


def test_referenced_params_handle_zero_is_a_handle():
    assert referenced_params(Expr.from_param(0).square()) == 0


def test_referenced_params_restricted_to_list():
    e = parse_expr('x + y * z', {'x': 1, 'y': 2, 'z': 3})
    assert referenced_params(e, within={2}) == 2
    assert referenced_params(e, within=[4]) is NO_PARAMS
    assert referenced_params(e, within=ParamList([(1, 0.0), (3, 0.0)])) is MULTIPLE_PARAMS


def test_referenced_params_collects_into_caller_set():
    found = {99}
    result = parse_expr('x + y', {'x': 1, 'y': 2}).referenced_params(into=found)
    assert result is MULTIPLE_PARAMS
    assert found == {1, 2, 99}


def test_params_used_sets_hashed_bits():
    e = parse_expr('x * y', {'x': 3, 'y': 65})
    assert params_used(e) == (1 << 3) | (1 << (65 % PARAMS_USED_SLOTS))
    assert params_used(parse_expr('4')) == 0
    assert e.params_used() & param_bit(3)
    assert not e.params_used() & param_bit(5)


def test_params_used_collisions_are_conservative():
    e = Expr.from_param(2)
    # 63 hashes onto the same slot as 2
    assert params_used(e) & param_bit(2 + PARAMS_USED_SLOTS)


def test_params_used_saturates_past_slot_count():
    e = sum_of_params(list(range(PARAMS_USED_SLOTS + 1)))
    assert params_used(e) == PARAMS_USED_ALL
    exact = sum_of_params(list(range(PARAMS_USED_SLOTS)))
    assert params_used(exact) == (1 << PARAMS_USED_SLOTS) - 1


def test_substitute_moves_dependency():
    e = parse_expr('x * x + sin(x) - y', {'x': 1, 'y': 2})
    assert not depends_on(e, 5)
    substitute(e, 1, 5)
    assert not depends_on(e, 1)
    assert depends_on(e, 5)
    assert depends_on(e, 2)


def test_substitute_rewrites_resolved_references_to_handles():
    params = ParamList([(1, 2.0), (2, 3.0)])
    e = resolve_params(parse_expr('x + y', {'x': 1, 'y': 2}), params)
    e.substitute(1, 2)
    assert e.a == Expr.from_param(2)
    assert e.eval(params) == 6.0


def test_resolve_uses_first_then_fallback_store():
    first = ParamList([(1, 10.0)])
    then = ParamList([(1, -1.0), (2, 5.0)])
    e = resolve_params(parse_expr('x - y', {'x': 1, 'y': 2}), first, then)
    assert e.a.ref.store is first
    assert e.b.ref.store is then
    assert e.eval() == 5.0


def test_resolve_missing_param_is_fatal():
    first = ParamList([(1, 1.0)])
    with pytest.raises(MissingParamError) as excinfo:
        resolve_params(parse_expr('x + y', {'x': 1, 'y': 2}), first, ParamList())
    assert excinfo.value.h == 2
    assert isinstance(excinfo.value, KeyError)


def test_resolve_leaves_input_untouched():
    e = parse_expr('x * 2', {'x': 1})
    resolved = e.deep_copy_with_params_as_refs(ParamList([(1, 4.0)]))
    assert e.a.op == Op.PARAM
    assert resolved.a.op == Op.PARAM_PTR
    assert resolved.eval() == 8.0


def test_replace_entities():
    e = Expr.from_point(10).plus(Expr.from_entity(20).times(Expr.from_value(2)))

    def resolve(leaf):
        return Expr.from_param(leaf.entity)

    replaced = replace_entities(e, resolve)
    assert replaced.eval({10: 1.0, 20: 3.0}) == 7.0
    assert e.a.op == Op.POINT


def test_count_nodes():
    assert count_nodes(parse_expr('1 + 2 * sqrt(3)')) == 6


def test_deep_trees_resolve_and_replace():
    e = parse_expr(' - '.join(['x'] * 2000), {'x': 1})
    resolved = resolve_params(e, ParamList([(1, 1.0)]))
    assert resolved.eval() == -1998.0
    assert referenced_params(resolved) == 1
    assert depends_on(resolved, 1)

    points = Expr.from_point(1)
    for _ in range(1999):
        points = points.plus(Expr.from_point(1))
    replaced = replace_entities(points, lambda leaf: Expr.from_value(2))
    assert replaced.eval() == 4000.0
