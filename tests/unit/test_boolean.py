import pytest

from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.expr import App, app
from fuzzsmt.core.ops import Op
from fuzzsmt.core.sorts import BOOL, INT
from fuzzsmt.generator.boolean import CompositionMode, compose, cnf, reduce_random, top_level
from fuzzsmt.generator.inputs import declare_variables


def _formulas(session, n):
    x = declare_variables(session, INT, 1)[0]
    return [session.bind(app(Op.LE, x, x)) for _ in range(n)]


@pytest.mark.parametrize("n", [1, 2, 3, 7, 20])
def test_random_reduction_leaves_one_formula(formula_session, n):
    bools = _formulas(formula_session, n)
    root = reduce_random(formula_session, bools)
    assert bools == [root]
    assert root.sort == BOOL


def test_random_reduction_uses_distinct_operands(formula_session):
    bools = _formulas(formula_session, 12)
    before = len(formula_session.sink.bindings)
    reduce_random(formula_session, bools)
    for bind in formula_session.sink.bindings[before:]:
        args = bind.expr.args
        assert len(set(a.id for a in args)) == len(args)


def test_if_then_else_needs_three_formulas(formula_session):
    bools = _formulas(formula_session, 2)
    before = len(formula_session.sink.bindings)
    reduce_random(formula_session, bools)
    ops = {b.expr.op for b in formula_session.sink.bindings[before:]}
    assert Op.IF_THEN_ELSE not in ops


def test_empty_pool_is_an_error(formula_session):
    with pytest.raises(GenerationError):
        reduce_random(formula_session, [])


@pytest.mark.parametrize("op", [Op.AND, Op.OR])
def test_top_level_binds_one_nary_node(formula_session, op):
    bools = _formulas(formula_session, 5)
    root = top_level(formula_session, list(bools), op)
    last = formula_session.sink.bindings[-1]
    assert last.term == root
    assert last.expr.op is op
    assert list(last.expr.args) == bools


@pytest.mark.parametrize("n,factor,clauses", [(4, 1.0, 4), (4, 0.0, 2), (10, 0.5, 5), (3, 2.0, 6)])
def test_cnf_shape(formula_session, n, factor, clauses):
    bools = _formulas(formula_session, n)
    pool = list(bools)
    root = cnf(formula_session, pool, factor)
    expr = formula_session.sink.bindings[-1].expr
    assert formula_session.sink.bindings[-1].term == root
    assert expr.op is Op.AND
    assert len(expr.args) == clauses
    for clause in expr.args:
        assert isinstance(clause, App) and clause.op is Op.OR
        assert len(clause.args) == 3
        for literal in clause.args:
            if isinstance(literal, App):
                assert literal.op is Op.NOT
                literal = literal.args[0]
            assert literal in bools


def test_cnf_single_formula_binds_nothing(formula_session):
    bools = _formulas(formula_session, 1)
    before = len(formula_session.sink.bindings)
    assert cnf(formula_session, list(bools), 1.0) == bools[0]
    assert len(formula_session.sink.bindings) == before


def test_compose_does_not_touch_callers_pool(formula_session):
    bools = _formulas(formula_session, 4)
    snapshot = list(bools)
    compose(formula_session, bools, CompositionMode.RANDOM)
    assert bools == snapshot
