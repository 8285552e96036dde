"""Shared machinery of the SMT-LIB renderers.

A printer is an :class:`EventSink` that writes each event as soon as it
arrives. Every assertion is a chain of nested scopes (quantifiers and
``let`` bindings); the printer counts the scopes it opens and closes all
of them when the assertion ends, so the output is always balanced.
"""

from __future__ import annotations

from typing import Callable, Dict, TextIO, Type

from fuzzsmt.core.events import (
    BeginAssumption,
    BeginFormula,
    Bind,
    CloseAssumption,
    DeclareFunction,
    DeclareSort,
    DeclareVariable,
    Event,
    EventSink,
    Goal,
    Header,
    OpenQuantifier,
)
from fuzzsmt.core.expr import App, Apply, BVLiteral, Expr, Numeral
from fuzzsmt.core.ops import INDEXED, Op
from fuzzsmt.core.sorts import REAL, Sort
from fuzzsmt.core.terms import Term

# Spellings shared by both dialects; each printer overrides the rest.
COMMON_OP_NAMES: Dict[Op, str] = {
    Op.NOT: "not",
    Op.AND: "and",
    Op.OR: "or",
    Op.XOR: "xor",
    Op.LT: "<",
    Op.GT: ">",
    Op.LE: "<=",
    Op.GE: ">=",
    Op.EQ: "=",
    Op.DISTINCT: "distinct",
    Op.PLUS: "+",
    Op.BINMINUS: "-",
    Op.MUL: "*",
    Op.DIV: "/",
    Op.SELECT: "select",
    Op.STORE: "store",
    Op.ITE: "ite",
    Op.EXTRACT: "extract",
    Op.REPEAT: "repeat",
    Op.ZERO_EXTEND: "zero_extend",
    Op.SIGN_EXTEND: "sign_extend",
    Op.ROTATE_LEFT: "rotate_left",
    Op.ROTATE_RIGHT: "rotate_right",
    Op.CONCAT: "concat",
}
# bvadd, bvult, ... are spelled like their kind in both dialects
COMMON_OP_NAMES.update({op: op.name.lower() for op in Op if op.name.startswith("BV")})


class SMTPrinter(EventSink):
    """Base class of the dialect printers."""

    op_names: Dict[Op, str] = COMMON_OP_NAMES

    def __init__(self, out: TextIO) -> None:
        self.out = out
        self.open_scopes = 0
        self._handlers: Dict[Type, Callable] = {
            Header: self.header,
            DeclareSort: self.declare_sort,
            DeclareVariable: self.declare_variable,
            DeclareFunction: self.declare_function,
            BeginAssumption: self.begin_assumption,
            OpenQuantifier: self.open_quantifier,
            Bind: self.bind,
            CloseAssumption: self.close_assumption,
            BeginFormula: self.begin_formula,
            Goal: self.goal,
        }

    def emit(self, event: Event) -> None:
        self._handlers[type(event)](event)

    # --- Output helpers ---

    def write(self, text: str) -> None:
        self.out.write(text)

    def open_scope(self, text: str) -> None:
        self.write(text)
        self.open_scopes += 1

    def close_scopes(self, result: Term) -> None:
        """Write the body *result* and close every open scope."""
        self.write(self.term_name(result) + "\n")
        self.write(")" * self.open_scopes + "\n")
        self.open_scopes = 0

    # --- Expressions ---

    def render(self, expr: Expr) -> str:
        if isinstance(expr, Term):
            return self.term_name(expr)
        if isinstance(expr, BVLiteral):
            return self.bv_literal(expr)
        if isinstance(expr, Numeral):
            return f"{expr.value}.0" if expr.sort == REAL else str(expr.value)
        if isinstance(expr, Apply):
            return self._application(expr.symbol.name, expr.args)
        if isinstance(expr, App):
            if expr.op in INDEXED:
                return self.indexed(expr)
            return self._application(self.op_names[expr.op], expr.args)
        raise TypeError(f"cannot render {expr!r}")

    def _application(self, head: str, args) -> str:
        return "(" + " ".join([head] + [self.render(a) for a in args]) + ")"

    # --- Dialect hooks ---

    def term_name(self, term: Term) -> str:
        return term.name

    def sort_name(self, sort: Sort) -> str:
        raise NotImplementedError

    def bv_literal(self, literal: BVLiteral) -> str:
        raise NotImplementedError

    def indexed(self, expr: App) -> str:
        raise NotImplementedError

    # --- Events ---

    def header(self, event: Header) -> None:
        raise NotImplementedError

    def declare_sort(self, event: DeclareSort) -> None:
        raise NotImplementedError

    def declare_variable(self, event: DeclareVariable) -> None:
        raise NotImplementedError

    def declare_function(self, event: DeclareFunction) -> None:
        raise NotImplementedError

    def begin_assumption(self, event: BeginAssumption) -> None:
        raise NotImplementedError

    def open_quantifier(self, event: OpenQuantifier) -> None:
        raise NotImplementedError

    def bind(self, event: Bind) -> None:
        raise NotImplementedError

    def close_assumption(self, event: CloseAssumption) -> None:
        self.close_scopes(event.result)

    def begin_formula(self, event: BeginFormula) -> None:
        raise NotImplementedError

    def goal(self, event: Goal) -> None:
        raise NotImplementedError
