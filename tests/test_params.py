import pytest

from constraint_algebra import Expr, MissingParamError, ParamList, StaleParamRefError
from constraint_algebra.params import Param, ParamRef


def test_add_find_and_get():
    params = ParamList([(1, 2.0)])
    params.add(5, 7)
    assert params.find(5) == Param(5, 7.0)
    assert params.find(6) is None
    assert params[1].val == 2.0
    assert 5 in params and 6 not in params
    assert params.handles() == [1, 5]
    assert params.values() == {1: 2.0, 5: 7.0}
    assert len(params) == 2


def test_duplicate_handle_rejected():
    params = ParamList([(1, 0.0)])
    with pytest.raises(ValueError):
        params.add(1, 3.0)


def test_missing_handle_raises():
    with pytest.raises(MissingParamError):
        ParamList().get(3)
    with pytest.raises(MissingParamError):
        ParamList().index_of(3)


def test_remove_reindexes():
    params = ParamList([(1, 1.0), (2, 2.0), (3, 3.0)])
    params.remove(2)
    assert params.handles() == [1, 3]
    assert params.index_of(3) == 1


def test_structural_changes_bump_generation():
    params = ParamList()
    g0 = params.generation
    params.add(1)
    g1 = params.generation
    params[1].val = 4.0
    assert params.generation == g1 > g0
    params.remove(1)
    assert params.generation > g1
    g2 = params.generation
    params.clear()
    assert params.generation > g2


def test_reference_follows_value_edits():
    params = ParamList([(1, 1.0), (2, 2.0)])
    ref = ParamRef.to(params, 2)
    assert ref.h == 2
    params[2].val = 9.0
    assert ref.param.val == 9.0


def test_reference_goes_stale_after_layout_change():
    params = ParamList([(1, 1.0)])
    e = Expr.from_param(1).deep_copy_with_params_as_refs(params)
    assert e.eval() == 1.0
    params.add(2, 0.0)
    with pytest.raises(StaleParamRefError):
        e.eval()
