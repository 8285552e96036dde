import io
import random

import pytest

from fuzzsmt.config.defaults import default_ranges
from fuzzsmt.config.generation_config import resolve
from fuzzsmt.config.logics import Logic
from fuzzsmt.core.events import (
    BeginFormula,
    Bind,
    DeclareSort,
    DeclareVariable,
    Goal,
    Header,
)
from fuzzsmt.core.expr import App, BVLiteral, Numeral, app
from fuzzsmt.core.fuzzer import generate_benchmark
from fuzzsmt.core.ops import Op
from fuzzsmt.core.sorts import BOOL, INT, REAL, ArraySort, BitVecSort, UninterpretedSort
from fuzzsmt.core.terms import Term, TermKind
from fuzzsmt.printer.smtlib1 import SMTLib1Printer
from fuzzsmt.printer.smtlib2 import SMTLib2Printer


def _render(printer_cls, logic, seed, smtlib1=False):
    rng = random.Random(seed)
    config = resolve(default_ranges(logic), logic, rng, smtlib1=smtlib1)
    out = io.StringIO()
    generate_benchmark(config, rng, printer_cls(out))
    return out.getvalue()


def _balanced(text):
    depth = 0
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


@pytest.mark.parametrize("logic", list(Logic))
def test_smtlib2_output_is_balanced(logic):
    for seed in range(3):
        text = _render(SMTLib2Printer, logic, seed)
        lines = text.splitlines()
        assert lines[0] == "(set-info :source |fuzzsmt 0.3|)"
        assert lines[1] == f"(set-logic {logic.value})"
        assert lines[2] == "(set-info :status unknown)"
        assert lines[-1] == "(check-sat)"
        assert _balanced(text)


@pytest.mark.parametrize("logic", list(Logic))
def test_smtlib1_output_is_balanced(logic):
    for seed in range(3):
        text = _render(SMTLib1Printer, logic, seed, smtlib1=True)
        lines = text.splitlines()
        assert lines[:3] == ["(benchmark fuzzsmt0.3", f":logic {logic.value}", ":status unknown"]
        assert ":formula" in lines
        assert _balanced(text)


@pytest.mark.parametrize("logic", list(Logic))
def test_smtlib2_output_parses_with_z3(logic):
    z3 = pytest.importorskip("z3")
    text = _render(SMTLib2Printer, logic, 7)
    body = "\n".join(
        line for line in text.splitlines()
        if not line.startswith("(set-") and not line.startswith("(check-sat")
    )
    assertions = z3.parse_smt2_string(body)
    assert len(assertions) >= 1


def _feed(printer, events):
    for event in events:
        printer.emit(event)
    return printer.out.getvalue()


def _small_benchmark(var_sort, expr_of):
    x = Term(0, var_sort, "v0")
    e = Term(1, BOOL, "e1", TermKind.BOUND)
    return [
        Header("QF_TEST"),
        DeclareVariable(x),
        BeginFormula(),
        Bind(e, expr_of(x)),
        Goal(e),
    ]


def test_smtlib2_let_chain():
    events = _small_benchmark(INT, lambda x: app(Op.LE, x, Numeral(3, INT)))
    text = _feed(SMTLib2Printer(io.StringIO()), events)
    assert "(declare-fun v0 () Int)\n" in text
    assert "(assert\n(let ((e1 (<= v0 3)))\ne1\n))\n(check-sat)\n" in text


def test_smtlib1_flet_chain():
    events = _small_benchmark(INT, lambda x: app(Op.LE, x, Numeral(3, INT)))
    text = _feed(SMTLib1Printer(io.StringIO()), events)
    assert ":extrafuns ((v0 Int))\n" in text
    assert text.endswith(":formula\n(flet ($e1 (<= v0 3))\n$e1\n)\n)\n")


def test_real_numerals_carry_a_fraction():
    for printer_cls in (SMTLib1Printer, SMTLib2Printer):
        printer = printer_cls(io.StringIO())
        assert printer.render(Numeral(4, REAL)) == "4.0"
        assert printer.render(Numeral(4, INT)) == "4"


def test_dialect_spellings():
    x = Term(0, BOOL, "b0")
    y = Term(1, BOOL, "b1")
    n = Term(2, INT, "n")
    v = Term(3, BitVecSort(8), "bv")
    smt1, smt2 = SMTLib1Printer(io.StringIO()), SMTLib2Printer(io.StringIO())

    assert smt1.render(app(Op.IFF, x, y)) == "(iff b0 b1)"
    assert smt2.render(app(Op.IFF, x, y)) == "(= b0 b1)"
    assert smt1.render(app(Op.UNMINUS, n)) == "(~ n)"
    assert smt2.render(app(Op.UNMINUS, n)) == "(- n)"
    assert smt1.render(app(Op.IMPLIES, x, y)) == "(implies b0 b1)"
    assert smt2.render(app(Op.IMPLIES, x, y)) == "(=> b0 b1)"
    assert smt1.render(BVLiteral(5, 4)) == "bv5[4]"
    assert smt2.render(BVLiteral(5, 4)) == "(_ bv5 4)"

    extract = app(Op.EXTRACT, v, indices=(5, 2))
    assert smt1.render(extract) == "(extract[5:2] bv)"
    assert smt2.render(extract) == "((_ extract 5 2) bv)"


def test_smtlib1_sort_names():
    printer = SMTLib1Printer(io.StringIO())
    array1 = ArraySort(INT, REAL)
    assert printer.sort_name(BitVecSort(3)) == "BitVec[3]"
    assert printer.sort_name(ArraySort(BitVecSort(2), BitVecSort(5))) == "Array[2:5]"
    assert printer.sort_name(ArraySort(INT, INT)) == "Array"
    assert printer.sort_name(array1) == "Array1"
    assert printer.sort_name(ArraySort(INT, array1)) == "Array2"
    index, element = UninterpretedSort("Index"), UninterpretedSort("Element")
    assert printer.sort_name(ArraySort(index, element)) == "Array"
    with pytest.raises(TypeError):
        printer.sort_name(BOOL)


def test_smtlib2_sort_names():
    printer = SMTLib2Printer(io.StringIO())
    assert printer.sort_name(BitVecSort(3)) == "(_ BitVec 3)"
    assert printer.sort_name(ArraySort(INT, ArraySort(INT, REAL))) == "(Array Int (Array Int Real))"


def test_logic_defined_sorts():
    index = UninterpretedSort("Index")
    s0 = UninterpretedSort("S0")
    events = [DeclareSort(index, logic_defined=True), DeclareSort(s0)]
    smt1 = _feed(SMTLib1Printer(io.StringIO()), events)
    smt2 = _feed(SMTLib2Printer(io.StringIO()), events)
    assert smt1 == ":extrasorts (S0)\n"
    assert smt2 == "(declare-sort Index 0)\n(declare-sort S0 0)\n"


def test_smtlib1_prefixes():
    printer = SMTLib1Printer(io.StringIO())
    assert printer.term_name(Term(0, INT, "v0")) == "v0"
    assert printer.term_name(Term(1, BOOL, "e1", TermKind.BOUND)) == "$e1"
    assert printer.term_name(Term(2, INT, "e2", TermKind.BOUND)) == "?e2"


def test_unknown_expression_is_rejected():
    with pytest.raises(TypeError):
        SMTLib2Printer(io.StringIO()).render(object())


def test_boolean_ite_spelling():
    x, y, z = (Term(i, BOOL, f"b{i}") for i in range(3))
    expr = app(Op.IF_THEN_ELSE, x, y, z)
    assert isinstance(expr, App)
    assert SMTLib1Printer(io.StringIO()).render(expr) == "(if_then_else b0 b1 b2)"
    assert SMTLib2Printer(io.StringIO()).render(expr) == "(ite b0 b1 b2)"
