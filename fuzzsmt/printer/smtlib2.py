"""SMT-LIB 2 renderer."""

from __future__ import annotations

from fuzzsmt.constants import PROGRAM_NAME, STATUS, VERSION
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
from fuzzsmt.core.sorts import ArraySort, BitVecSort, BoolSort, IntSort, RealSort, Sort, UninterpretedSort
from fuzzsmt.printer.base import COMMON_OP_NAMES, SMTPrinter


class SMTLib2Printer(SMTPrinter):
    op_names = {
        **COMMON_OP_NAMES,
        Op.IMPLIES: "=>",
        Op.IFF: "=",
        Op.IF_THEN_ELSE: "ite",
        Op.UNMINUS: "-",
    }

    def sort_name(self, sort: Sort) -> str:
        if isinstance(sort, BoolSort):
            return "Bool"
        if isinstance(sort, IntSort):
            return "Int"
        if isinstance(sort, RealSort):
            return "Real"
        if isinstance(sort, BitVecSort):
            return f"(_ BitVec {sort.width})"
        if isinstance(sort, ArraySort):
            return f"(Array {self.sort_name(sort.index)} {self.sort_name(sort.value)})"
        if isinstance(sort, UninterpretedSort):
            return sort.name
        raise TypeError(f"no SMT-LIB 2 name for {sort!r}")

    def bv_literal(self, literal: BVLiteral) -> str:
        return f"(_ bv{literal.value} {literal.width})"

    def indexed(self, expr: App) -> str:
        indices = " ".join(str(i) for i in expr.indices)
        return f"((_ {self.op_names[expr.op]} {indices}) {self.render(expr.args[0])})"

    # --- Events ---

    def header(self, event: Header) -> None:
        self.write(f"(set-info :source |{PROGRAM_NAME} {VERSION}|)\n")
        self.write(f"(set-logic {event.logic})\n")
        self.write(f"(set-info :status {STATUS})\n")

    def declare_sort(self, event: DeclareSort) -> None:
        self.write(f"(declare-sort {event.sort.name} 0)\n")

    def declare_variable(self, event: DeclareVariable) -> None:
        term = event.term
        self.write(f"(declare-fun {term.name} () {self.sort_name(term.sort)})\n")

    def declare_function(self, event: DeclareFunction) -> None:
        symbol = event.symbol
        operands = " ".join(self.sort_name(s) for s in symbol.operands)
        self.write(f"(declare-fun {symbol.name} ({operands}) {self.sort_name(symbol.result)})\n")

    def begin_assumption(self, event: BeginAssumption) -> None:
        self.open_scope("(assert\n")

    def open_quantifier(self, event: OpenQuantifier) -> None:
        bound = " ".join(f"({v.name} {self.sort_name(v.sort)})" for v in event.variables)
        self.open_scope(f"({event.quantifier.value} ({bound})\n")

    def bind(self, event: Bind) -> None:
        self.open_scope(f"(let (({event.term.name} {self.render(event.expr)}))\n")

    def begin_formula(self, event: BeginFormula) -> None:
        self.open_scope("(assert\n")

    def goal(self, event: Goal) -> None:
        self.close_scopes(event.term)
        self.write("(check-sat)\n")
