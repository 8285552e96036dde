import io
import random
from collections import Counter

import pytest

from fuzzsmt.config.defaults import default_ranges
from fuzzsmt.config.generation_config import resolve
from fuzzsmt.config.logics import Logic
from fuzzsmt.core.bitvector import DivisionMode
from fuzzsmt.core.events import (
    BeginAssumption,
    BeginFormula,
    Bind,
    CloseAssumption,
    DeclareFunction,
    DeclareSort,
    DeclareVariable,
    Goal,
    RecordingSink,
)
from fuzzsmt.core.expr import App, BVLiteral, Numeral, applied_symbols, referenced_terms, subexpressions
from fuzzsmt.core.fuzzer import BenchmarkGenerator, generate_benchmark
from fuzzsmt.core.ops import BV_DIVISIONS, Op
from fuzzsmt.core.session import GenerationSession
from fuzzsmt.core.sorts import BOOL, BitVecSort, is_bitvec, width_of
from fuzzsmt.core.terms import TermKind
from fuzzsmt.generator.boolean import CompositionMode
from fuzzsmt.printer.smtlib2 import SMTLib2Printer


def _generate(config, seed=0):
    sink = RecordingSink()
    generator = BenchmarkGenerator(config, GenerationSession(random.Random(seed), sink))
    root = generator.run()
    return generator, sink, root


@pytest.mark.parametrize("logic", list(Logic))
@pytest.mark.parametrize("seed", range(3))
def test_every_logic_ends_in_one_bool_goal(logic, seed):
    config = resolve(default_ranges(logic), logic, random.Random(seed))
    _, sink, root = _generate(config, seed)
    assert sink.goal == root
    assert root.sort == BOOL
    assert len(sink.of_type(BeginFormula)) == 1
    assert isinstance(sink.events[-1], Goal)


@pytest.mark.parametrize("logic", [Logic.QF_BV, Logic.QF_ABV, Logic.QF_UFBV, Logic.QF_AUFBV])
def test_bitvector_widths_stay_bounded(logic):
    for seed in range(4):
        config = resolve(default_ranges(logic), logic, random.Random(seed))
        _, sink, _ = _generate(config, seed)
        high = config.bounds("bw")[1]
        for bind in sink.bindings:
            if is_bitvec(bind.term.sort):
                assert width_of(bind.term.sort) <= high


def test_bitvector_scenario_without_division():
    ranges = default_ranges(Logic.QF_BV)
    ranges.bounds.update(vars=(2, 2), consts=(1, 1), bw=(4, 8))
    ranges.div_mode = DivisionMode.OFF
    config = resolve(ranges, Logic.QF_BV, random.Random(5))
    generator, sink, root = _generate(config, 5)

    declared = sink.of_type(DeclareVariable)
    assert len(declared) == 2
    after_formula = sink.events[sink.events.index(sink.of_type(BeginFormula)[0]) + 1]
    assert isinstance(after_formula, Bind) and isinstance(after_formula.expr, BVLiteral)
    literal_binds = [b for b in sink.bindings if isinstance(b.expr, BVLiteral)]
    assert len(literal_binds) == 1

    ops = {n.op for b in sink.bindings for n in subexpressions(b.expr) if isinstance(n, App)}
    assert not ops & set(BV_DIVISIONS)
    assert len(sink.of_type(Goal)) == 1
    assert len(generator.guards) == 0


def test_guarded_bitvector_goal_includes_guards():
    for seed in range(10):
        ranges = default_ranges(Logic.QF_BV)
        ranges.bounds.update(vars=(3, 3), bw=(2, 6))
        ranges.min_refs = 3
        config = resolve(ranges, Logic.QF_BV, random.Random(seed))
        generator, sink, root = _generate(config, seed)
        divisions = [
            b for b in sink.bindings if isinstance(b.expr, App) and b.expr.op in BV_DIVISIONS
        ]
        assert len(divisions) == 0 or len(generator.guards) > 0
        for bind in divisions:
            assert generator.guards.kind_of(bind.expr.args[1]) is not None


def test_array_scenario_single_read():
    ranges = default_ranges(Logic.QF_A)
    ranges.bounds.update(writes=(0, 0), reads=(1, 1))
    config = resolve(ranges, Logic.QF_A, random.Random(9))
    _, sink, _ = _generate(config, 9)

    sorts = sink.of_type(DeclareSort)
    assert [s.sort.name for s in sorts] == ["Index", "Element"]
    assert all(s.logic_defined for s in sorts)

    stores = [b for b in sink.bindings if isinstance(b.expr, App) and b.expr.op is Op.STORE]
    selects = [b for b in sink.bindings if isinstance(b.expr, App) and b.expr.op is Op.SELECT]
    assert stores == []
    assert len(selects) == 1
    array, index = selects[0].expr.args
    assert array.kind is TermKind.DECLARED and array in [d.term for d in sink.of_type(DeclareVariable)]
    assert index.kind is TermKind.DECLARED and index.sort.name == "Index"
    assert selects[0].term.sort.name == "Element"


def test_qf_ax_compares_arrays():
    for seed in range(5):
        config = resolve(default_ranges(Logic.QF_AX), Logic.QF_AX, random.Random(seed))
        _, sink, _ = _generate(config, seed)
        equalities = [
            b for b in sink.bindings
            if isinstance(b.expr, App) and b.expr.op in (Op.EQ, Op.DISTINCT)
            and hasattr(b.expr.args[0].sort, "index")
        ]
        assert equalities


@pytest.mark.parametrize("mode", list(CompositionMode))
def test_composition_modes(mode):
    ranges = default_ranges(Logic.QF_LIA)
    ranges.bool_mode = mode
    ranges.cnf_factor = 1.5
    config = resolve(ranges, Logic.QF_LIA, random.Random(2))
    _, sink, root = _generate(config, 2)
    assert sink.goal == root


def test_same_seed_same_benchmark():
    outputs = []
    for _ in range(2):
        rng = random.Random(42)
        config = resolve(default_ranges(Logic.AUFLIRA), Logic.AUFLIRA, rng)
        out = io.StringIO()
        generate_benchmark(config, rng, SMTLib2Printer(out))
        outputs.append(out.getvalue())
    assert outputs[0] == outputs[1]


def test_uf_logic_declares_sorts_and_symbols():
    config = resolve(default_ranges(Logic.QF_UF), Logic.QF_UF, random.Random(3))
    _, sink, _ = _generate(config, 3)
    sorts = sink.of_type(DeclareSort)
    assert 1 <= len(sorts) <= 3
    assert not any(s.logic_defined for s in sorts)
    assert config.count("funcs") == 5 and config.count("preds") == 5


def test_quantified_logic_emits_assumptions():
    ranges = default_ranges(Logic.AUFLIA)
    ranges.bounds.update(qformulas_int=(2, 2))
    config = resolve(ranges, Logic.AUFLIA, random.Random(4))
    _, sink, _ = _generate(config, 4)
    assert len(sink.of_type(BeginAssumption)) == len(sink.of_type(CloseAssumption)) >= 2
    first_formula = sink.events.index(sink.of_type(BeginFormula)[0])
    last_close = max(i for i, e in enumerate(sink.events) if isinstance(e, CloseAssumption))
    assert last_close < first_formula


def test_bitvector_arrays_map_bitvectors():
    config = resolve(default_ranges(Logic.QF_ABV), Logic.QF_ABV, random.Random(1))
    _, sink, _ = _generate(config, 1)
    arrays = [d.term for d in sink.of_type(DeclareVariable) if not is_bitvec(d.term.sort)]
    assert arrays
    for array in arrays:
        assert isinstance(array.sort.index, BitVecSort)
        assert isinstance(array.sort.value, BitVecSort)


def test_uninterpreted_bitvector_symbols_are_applied(make_config):
    config = make_config(Logic.QF_UFBV, funcs=(2, 2), preds=(2, 2))
    _, sink, _ = _generate(config, 6)
    from_declarations = {d.symbol.id for d in sink.of_type(DeclareFunction)}
    applied = {s.id for b in sink.bindings for s in applied_symbols(b.expr)}
    assert len(from_declarations) == 4
    assert from_declarations <= applied


@pytest.mark.parametrize("logic", [
    Logic.QF_UF, Logic.QF_UFIDL, Logic.QF_UFLIA, Logic.AUFLIA, Logic.QF_UFBV,
])
@pytest.mark.parametrize("seed", range(3))
def test_declared_inputs_meet_min_refs(logic, seed):
    ranges = default_ranges(logic)
    ranges.min_refs = 3
    config = resolve(ranges, logic, random.Random(seed))
    _, sink, _ = _generate(config, seed)

    term_refs = Counter(t.id for b in sink.bindings for t in referenced_terms(b.expr))
    symbol_refs = Counter(s.id for b in sink.bindings for s in applied_symbols(b.expr))
    inputs = [d.term for d in sink.of_type(DeclareVariable)]
    inputs += [b.term for b in sink.bindings if isinstance(b.expr, (Numeral, BVLiteral))]
    assert inputs
    for term in inputs:
        assert term_refs[term.id] >= 3, term
    symbols = [d.symbol for d in sink.of_type(DeclareFunction)]
    assert symbols
    for symbol in symbols:
        assert symbol_refs[symbol.id] >= 3, symbol
