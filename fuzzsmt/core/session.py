"""Per-benchmark generation state.

A :class:`GenerationSession` owns everything that must start fresh for
each benchmark: the name counters, the id allocator and the scope
bookkeeping. The random stream is handed in so that bulk export can keep
drawing from one seeded stream across files.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Optional, Sequence, Tuple, TypeVar

from fuzzsmt.constants import NO_BLOWUP_BIAS
from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.events import (
    BeginAssumption,
    BeginFormula,
    Bind,
    CloseAssumption,
    DeclareFunction,
    DeclareSort,
    DeclareVariable,
    EventSink,
    Goal,
    Header,
    OpenQuantifier,
    Quantifier,
)
from fuzzsmt.core.expr import Expr, sort_of
from fuzzsmt.core.sorts import BOOL, Sort, UninterpretedSort
from fuzzsmt.core.terms import (
    Signature,
    Term,
    TermKind,
    UninterpretedFunction,
    UninterpretedPredicate,
)

log = logging.getLogger(__name__)

T = TypeVar("T")


class GenerationSession:
    """Counters, scopes and the event sink of one benchmark."""

    def __init__(self, rng: random.Random, sink: EventSink) -> None:
        self.rng = rng
        self.sink = sink
        self._next_id = 0
        self._node_counter = 0
        self._func_counter = 0
        self._pred_counter = 0
        self._sort_counter = 0
        self._in_assumption = False
        self._in_formula = False
        self.bound_count = 0

    # --- Random helpers ---

    def coin(self) -> bool:
        return self.rng.random() < 0.5

    def biased(self, probability: float = NO_BLOWUP_BIAS) -> bool:
        return self.rng.random() < probability

    def rand_range(self, low: int, high: int) -> int:
        """Uniform integer in ``[low, high]``."""
        if high < low:
            raise GenerationError(f"empty range [{low}, {high}]")
        return self.rng.randint(low, high)

    def randrange(self, n: int) -> int:
        """Uniform integer in ``[0, n)``."""
        if n <= 0:
            raise GenerationError(f"empty range [0, {n})")
        return self.rng.randrange(n)

    def choice(self, pool: Sequence[T], what: str = "pool") -> T:
        if not pool:
            raise GenerationError(f"cannot choose from an empty {what}")
        return pool[self.rng.randrange(len(pool))]

    # --- Ids and names ---

    def _allocate_id(self) -> int:
        ident = self._next_id
        self._next_id += 1
        return ident

    def _node_name(self, prefix: str) -> str:
        name = f"{prefix}{self._node_counter}"
        self._node_counter += 1
        return name

    # --- Declarations ---

    def header(self, logic: str) -> None:
        self.sink.emit(Header(logic))

    def declare_sort(self, name: Optional[str] = None, *, logic_defined: bool = False) -> UninterpretedSort:
        if name is None:
            name = f"S{self._sort_counter}"
            self._sort_counter += 1
        sort = UninterpretedSort(name)
        self.sink.emit(DeclareSort(sort, logic_defined))
        return sort

    def declare_variable(self, sort: Sort, prefix: str = "v") -> Term:
        term = Term(self._allocate_id(), sort, self._node_name(prefix), TermKind.DECLARED)
        self.sink.emit(DeclareVariable(term))
        return term

    def declare_function(self, operands: Sequence[Sort], result: Sort) -> UninterpretedFunction:
        func = UninterpretedFunction(
            self._allocate_id(), f"f{self._func_counter}", Signature(tuple(operands), result)
        )
        self._func_counter += 1
        self.sink.emit(DeclareFunction(func))
        return func

    def declare_predicate(self, operands: Sequence[Sort]) -> UninterpretedPredicate:
        pred = UninterpretedPredicate(
            self._allocate_id(), f"p{self._pred_counter}", Signature(tuple(operands), BOOL)
        )
        self._pred_counter += 1
        self.sink.emit(DeclareFunction(pred))
        return pred

    # --- Assertions ---

    def begin_assumption(self) -> None:
        if self._in_assumption or self._in_formula:
            raise GenerationError("assumption opened inside another assertion")
        self._in_assumption = True
        self.sink.emit(BeginAssumption())

    def open_quantifier(
        self, quantifier: Quantifier, sort: Sort, count: int, namer: Callable[[], str]
    ) -> Tuple[Term, ...]:
        if not self._in_assumption:
            raise GenerationError("quantifier outside an assumption")
        variables = tuple(
            Term(self._allocate_id(), sort, namer(), TermKind.QUANTIFIED) for _ in range(count)
        )
        self.sink.emit(OpenQuantifier(quantifier, variables))
        return variables

    def close_assumption(self, result: Term) -> None:
        if not self._in_assumption:
            raise GenerationError("no assumption to close")
        self._in_assumption = False
        self.sink.emit(CloseAssumption(result))

    def begin_formula(self) -> None:
        if self._in_formula:
            raise GenerationError("formula already started")
        self._in_formula = True
        self.sink.emit(BeginFormula())

    def bind(self, expr: Expr, name: Optional[str] = None) -> Term:
        """Bind *expr* to a fresh term and return it.

        The sort of the new term is inferred from *expr*; an ill-sorted
        expression raises ``GenerationError`` before anything is emitted.
        """
        if not (self._in_formula or self._in_assumption):
            raise GenerationError("binding outside an assertion")
        sort = sort_of(expr)
        if name is None:
            name = self._node_name("e")
        term = Term(self._allocate_id(), sort, name, TermKind.BOUND)
        self.bound_count += 1
        self.sink.emit(Bind(term, expr))
        return term

    def goal(self, term: Term) -> None:
        if not self._in_formula:
            raise GenerationError("goal outside the formula")
        if term.sort != BOOL:
            raise GenerationError(f"goal {term.name} is not Bool")
        log.debug("goal %s after %d bindings", term.name, self.bound_count)
        self.sink.emit(Goal(term))
