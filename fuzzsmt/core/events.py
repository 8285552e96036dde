"""Structured generation events.

The generator describes a benchmark as an append-only stream of events.
Printers in :mod:`fuzzsmt.printer` turn the stream into SMT-LIB text;
tests record it with :class:`RecordingSink` and inspect it directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Type, TypeVar, Union

from fuzzsmt.core.expr import Expr
from fuzzsmt.core.sorts import UninterpretedSort
from fuzzsmt.core.terms import Term, UninterpretedFunction


class Quantifier(Enum):
    FORALL = "forall"
    EXISTS = "exists"


@dataclass(frozen=True)
class Header:
    logic: str


@dataclass(frozen=True)
class DeclareSort:
    sort: UninterpretedSort
    logic_defined: bool = False  # predeclared by the logic itself


@dataclass(frozen=True)
class DeclareVariable:
    term: Term


@dataclass(frozen=True)
class DeclareFunction:
    """Declaration of an uninterpreted function or predicate."""

    symbol: UninterpretedFunction


@dataclass(frozen=True)
class BeginAssumption:
    pass


@dataclass(frozen=True)
class OpenQuantifier:
    quantifier: Quantifier
    variables: Tuple[Term, ...]


@dataclass(frozen=True)
class Bind:
    term: Term
    expr: Expr


@dataclass(frozen=True)
class CloseAssumption:
    result: Term


@dataclass(frozen=True)
class BeginFormula:
    pass


@dataclass(frozen=True)
class Goal:
    term: Term


Event = Union[
    Header, DeclareSort, DeclareVariable, DeclareFunction, BeginAssumption,
    OpenQuantifier, Bind, CloseAssumption, BeginFormula, Goal,
]

E = TypeVar("E")


class EventSink:
    """Receives generation events in emission order."""

    def emit(self, event: Event) -> None:
        raise NotImplementedError


class RecordingSink(EventSink):
    """Keeps every event in memory."""

    def __init__(self) -> None:
        self.events: List[Event] = []

    def emit(self, event: Event) -> None:
        self.events.append(event)

    def of_type(self, cls: Type[E]) -> List[E]:
        return [e for e in self.events if isinstance(e, cls)]

    @property
    def bindings(self) -> List[Bind]:
        return self.of_type(Bind)

    @property
    def goal(self) -> Term:
        goals = self.of_type(Goal)
        if len(goals) != 1:
            raise AssertionError(f"expected exactly one goal, found {len(goals)}")
        return goals[0].term
