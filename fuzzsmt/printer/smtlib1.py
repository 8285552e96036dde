"""SMT-LIB 1.2 renderer.

Formulas and terms live in separate syntactic classes in this dialect:
Boolean intermediates are ``flet``-bound ``$`` variables, all others
``let``-bound ``?`` variables. Array sorts are the fixed names of the
array theories.
"""

from __future__ import annotations

from fuzzsmt.constants import ARRAY_LOGIC_SORTS, PROGRAM_NAME, STATUS, VERSION
from fuzzsmt.core.events import (
    BeginAssumption,
    BeginFormula,
    Bind,
    DeclareFunction,
    DeclareSort,
    DeclareVariable,
    Goal,
    Header,
    OpenQuantifier,
)
from fuzzsmt.core.expr import App, BVLiteral
from fuzzsmt.core.ops import Op
from fuzzsmt.core.sorts import (
    BOOL,
    INT,
    REAL,
    ArraySort,
    BitVecSort,
    BoolSort,
    IntSort,
    RealSort,
    Sort,
    UninterpretedSort,
)
from fuzzsmt.core.terms import Term, TermKind, UninterpretedPredicate
from fuzzsmt.printer.base import COMMON_OP_NAMES, SMTPrinter

_ARRAY1 = ArraySort(INT, REAL)

_THEORY_ARRAYS = {
    ArraySort(INT, INT): "Array",
    _ARRAY1: "Array1",
    ArraySort(INT, _ARRAY1): "Array2",
}


class SMTLib1Printer(SMTPrinter):
    op_names = {
        **COMMON_OP_NAMES,
        Op.IMPLIES: "implies",
        Op.IFF: "iff",
        Op.IF_THEN_ELSE: "if_then_else",
        Op.UNMINUS: "~",
    }

    def term_name(self, term: Term) -> str:
        if term.kind is TermKind.DECLARED:
            return term.name
        if term.kind is TermKind.BOUND and term.sort == BOOL:
            return "$" + term.name
        return "?" + term.name

    def sort_name(self, sort: Sort) -> str:
        if isinstance(sort, IntSort):
            return "Int"
        if isinstance(sort, RealSort):
            return "Real"
        if isinstance(sort, BitVecSort):
            return f"BitVec[{sort.width}]"
        if isinstance(sort, ArraySort):
            if isinstance(sort.index, BitVecSort) and isinstance(sort.value, BitVecSort):
                return f"Array[{sort.index.width}:{sort.value.width}]"
            if sort in _THEORY_ARRAYS:
                return _THEORY_ARRAYS[sort]
            if getattr(sort.index, "name", None) in ARRAY_LOGIC_SORTS:
                return "Array"
        if isinstance(sort, UninterpretedSort):
            return sort.name
        if isinstance(sort, BoolSort):
            raise TypeError("Bool is not a sort in SMT-LIB 1.2")
        raise TypeError(f"no SMT-LIB 1.2 name for {sort!r}")

    def bv_literal(self, literal: BVLiteral) -> str:
        return f"bv{literal.value}[{literal.width}]"

    def indexed(self, expr: App) -> str:
        indices = ":".join(str(i) for i in expr.indices)
        return f"({self.op_names[expr.op]}[{indices}] {self.render(expr.args[0])})"

    # --- Events ---

    def header(self, event: Header) -> None:
        self.write(f"(benchmark {PROGRAM_NAME}{VERSION}\n")
        self.write(f":logic {event.logic}\n")
        self.write(f":status {STATUS}\n")

    def declare_sort(self, event: DeclareSort) -> None:
        if not event.logic_defined:
            self.write(f":extrasorts ({event.sort.name})\n")

    def declare_variable(self, event: DeclareVariable) -> None:
        term = event.term
        self.write(f":extrafuns (({term.name} {self.sort_name(term.sort)}))\n")

    def declare_function(self, event: DeclareFunction) -> None:
        symbol = event.symbol
        sorts = [self.sort_name(s) for s in symbol.operands]
        if isinstance(symbol, UninterpretedPredicate):
            self.write(f":extrapreds (({' '.join([symbol.name] + sorts)}))\n")
        else:
            sorts.append(self.sort_name(symbol.result))
            self.write(f":extrafuns (({' '.join([symbol.name] + sorts)}))\n")

    def begin_assumption(self, event: BeginAssumption) -> None:
        self.write(":assumption\n")

    def open_quantifier(self, event: OpenQuantifier) -> None:
        bound = " ".join(f"({self.term_name(v)} {self.sort_name(v.sort)})" for v in event.variables)
        self.open_scope(f"({event.quantifier.value} {bound}\n")

    def bind(self, event: Bind) -> None:
        keyword = "flet" if event.term.sort == BOOL else "let"
        self.open_scope(f"({keyword} ({self.term_name(event.term)} {self.render(event.expr)})\n")

    def begin_formula(self, event: BeginFormula) -> None:
        self.write(":formula\n")

    def goal(self, event: Goal) -> None:
        self.close_scopes(event.term)
        # closes the benchmark
        self.write(")\n")
