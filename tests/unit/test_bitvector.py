import pytest

from fuzzsmt.core.bitvector import DivisionGuards, adapt, reconcile
from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.expr import App, app, sort_of
from fuzzsmt.core.ops import Op
from fuzzsmt.core.sorts import BOOL, BitVecSort
from fuzzsmt.core.terms import Term


@pytest.mark.parametrize("target", [1, 3, 8, 12, 16])
def test_adapt_reaches_target_width(session, target):
    x = Term(0, BitVecSort(8), "x")
    for _ in range(10):
        assert sort_of(adapt(session, x, target)) == BitVecSort(target)


def test_adapt_keeps_matching_width(session):
    x = Term(0, BitVecSort(8), "x")
    assert adapt(session, x, 8) is x


def test_reconcile_extends_the_narrower_operand(session):
    x = Term(0, BitVecSort(3), "x")
    y = Term(1, BitVecSort(7), "y")
    a, b, extended = reconcile(session, x, y)
    assert extended == 0
    assert b is y
    assert isinstance(a, App) and a.op in (Op.ZERO_EXTEND, Op.SIGN_EXTEND)
    assert sort_of(a) == sort_of(b) == BitVecSort(7)
    a, b, extended = reconcile(session, y, y)
    assert extended is None


def test_guard_upgrades_unsigned_to_signed_only():
    d = Term(0, BitVecSort(4), "d")
    guards = DivisionGuards()
    guards.record(d, Op.BVUDIV)
    guards.record(d, Op.BVSREM)
    assert guards.kind_of(d) is Op.BVSREM
    guards.record(d, Op.BVUREM)
    assert guards.kind_of(d) is Op.BVSREM
    assert len(guards) == 1


def test_guard_rejects_non_division():
    with pytest.raises(GenerationError):
        DivisionGuards().record(Term(0, BitVecSort(4), "d"), Op.BVADD)


def test_inject_adds_one_conjunct_per_unsigned_and_two_per_signed(formula_session):
    x = formula_session.declare_variable(BitVecSort(2))
    root = formula_session.bind(app(Op.EQ, x, x))
    u = formula_session.declare_variable(BitVecSort(4))
    s = formula_session.declare_variable(BitVecSort(4))
    guards = DivisionGuards()
    guards.record(u, Op.BVUDIV)
    guards.record(s, Op.BVSDIV)
    before = formula_session.bound_count
    new_root = guards.inject(formula_session, root)
    assert formula_session.bound_count - before == 3
    assert new_root.sort == BOOL
    assert new_root != root
