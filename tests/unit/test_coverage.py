import pytest

from fuzzsmt.core.coverage import CoverageLayer, CoverageMap
from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.expr import app
from fuzzsmt.core.ops import Op
from fuzzsmt.core.sorts import INT
from fuzzsmt.core.terms import Term


def _terms(n):
    return [Term(i, INT, f"v{i}") for i in range(n)]


def test_map_drops_satisfied_items():
    a, b = _terms(2)
    cov = CoverageMap([a, b], 2)
    assert cov.outstanding() == 4
    assert cov.use(a)
    assert cov.use(a)
    assert a not in cov
    assert not cov.use(a)
    assert cov.pending() == [b]
    assert cov.remaining(b) == 2


def test_map_ignores_duplicates():
    (a,) = _terms(1)
    cov = CoverageMap([a, a], 1)
    assert len(cov) == 1


def test_map_rejects_zero_refs():
    with pytest.raises(GenerationError):
        CoverageMap(_terms(1), 0)


class _PlusLayer(CoverageLayer):
    name = "plus layer"

    def __init__(self, session, pool, min_refs):
        super().__init__(session, min_refs)
        self.pool = pool
        self.nodes = self.track(list(pool))

    def step(self):
        n1 = self.pick(self.pool, self.nodes)
        n2 = self.pick(self.pool)
        self.use(n1, n2)
        self.pool.append(self.bind(app(Op.PLUS, n1, n2)))


def test_layer_runs_until_covered(formula_session):
    pool = [formula_session.declare_variable(INT) for _ in range(4)]
    originals = list(pool)
    layer = _PlusLayer(formula_session, pool, 3)
    generated = layer.run()
    assert layer.done()
    assert generated
    bound = formula_session.sink.bindings
    for term in originals:
        uses = sum(b.expr.args.count(term) for b in bound)
        assert uses >= 3


class _StuckLayer(CoverageLayer):
    name = "stuck layer"

    def __init__(self, session, pool):
        super().__init__(session, 1)
        self.pool = pool
        self.track(pool)
        self.steps = 0

    def step(self):
        self.steps += 1


def test_stalled_layer_fails_when_forcing_makes_no_progress(formula_session):
    pool = [formula_session.declare_variable(INT)]
    layer = _StuckLayer(formula_session, pool)
    with pytest.raises(GenerationError):
        layer.run()
    assert layer.forcing


def test_pick_prefers_pending_items_when_forcing(formula_session):
    pool = [formula_session.declare_variable(INT) for _ in range(5)]
    layer = _PlusLayer(formula_session, list(pool), 1)
    for term in pool[:4]:
        layer.use(term)
    layer.forcing = True
    assert all(layer.pick(layer.pool, layer.nodes) == pool[4] for _ in range(20))
