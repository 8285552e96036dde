"""Uninterpreted-function term layer and uninterpreted-predicate layer."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from fuzzsmt.core.coverage import CoverageLayer
from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.expr import app, apply
from fuzzsmt.core.ops import Op
from fuzzsmt.core.session import GenerationSession
from fuzzsmt.core.sorts import Sort
from fuzzsmt.core.terms import Term, UninterpretedFunction, UninterpretedPredicate


class TermIndex:
    """The terms of a pool grouped by sort, each group in pool order."""

    def __init__(self, terms: Iterable[Term] = ()) -> None:
        self._by_sort: Dict[Sort, List[Term]] = {}
        for term in terms:
            self.add(term)

    def add(self, term: Term) -> None:
        self._by_sort.setdefault(term.sort, []).append(term)

    def of_sort(self, sort: Sort) -> List[Term]:
        matching = self._by_sort.get(sort)
        if not matching:
            raise GenerationError(f"no term of sort {sort!r} in the pool")
        return matching


class UninterpretedTermLayer(CoverageLayer):
    """Applies uninterpreted functions until every function and node is used.

    Steps alternate between applying any function and applying a function
    that takes a pending node's sort, with that node in the matching
    argument slots.
    """

    name = "uninterpreted term layer"

    def __init__(
        self,
        session: GenerationSession,
        pool: List[Term],
        funcs: Sequence[UninterpretedFunction],
        min_refs: int,
    ) -> None:
        super().__init__(session, min_refs)
        if not pool or not funcs:
            raise GenerationError("uninterpreted term layer needs terms and functions")
        self.pool = pool
        self.funcs = list(funcs)
        self._by_operand: Dict[Sort, List[UninterpretedFunction]] = {}
        for func in self.funcs:
            for sort in dict.fromkeys(func.operands):
                self._by_operand.setdefault(sort, []).append(func)
        self.index = TermIndex(pool)
        self.nodes = self.track(list(pool))
        self.pending_funcs = self.track(self.funcs)

    def _any_function(self) -> None:
        if self.forcing and self.pending_funcs:
            func = self.session.choice(self.pending_funcs.pending())
        else:
            func = self.session.choice(self.funcs)
        args = [self.session.choice(self.index.of_sort(sort)) for sort in func.operands]
        self._emit(func, args)

    def _pending_node(self) -> None:
        selected = self.session.choice(self.nodes.pending())
        candidates = self._by_operand.get(selected.sort)
        if not candidates:
            raise GenerationError(f"no function takes an argument of sort {selected.sort!r}")
        func = self.session.choice(candidates)
        args = []
        placing = True
        for sort in func.operands:
            if placing and sort == selected.sort:
                args.append(selected)
                if self.session.coin():
                    placing = False
            else:
                args.append(self.session.choice(self.index.of_sort(sort)))
        self._emit(func, args)

    def _emit(self, func: UninterpretedFunction, args: List[Term]) -> None:
        self.use(func, *args)
        term = self.bind(apply(func, *args))
        self.pool.append(term)
        self.index.add(term)

    def step(self) -> None:
        if not self.nodes or (not self.forcing and self.session.coin()):
            self._any_function()
        else:
            self._pending_node()


class PredicateLayer(CoverageLayer):
    """Builds predicate applications and equalities over a fixed pool."""

    name = "uninterpreted predicate layer"

    def __init__(
        self,
        session: GenerationSession,
        pool: Sequence[Term],
        bools: List[Term],
        preds: Sequence[UninterpretedPredicate],
        min_refs: int,
    ) -> None:
        super().__init__(session, min_refs)
        if not pool or not preds:
            raise GenerationError("predicate layer needs terms and predicates")
        self.pool = list(pool)
        self.bools = bools
        self.preds = list(preds)
        self.index = TermIndex(self.pool)
        self.nodes = self.track(self.pool)
        self.pending_preds = self.track(self.preds)

    def step(self) -> None:
        if not self.nodes or (not self.forcing and self.session.coin()):
            if self.forcing and self.pending_preds:
                pred = self.session.choice(self.pending_preds.pending())
            else:
                pred = self.session.choice(self.preds)
            args = [self.session.choice(self.index.of_sort(sort)) for sort in pred.operands]
            self.use(pred, *args)
            expr = apply(pred, *args)
        else:
            op = Op.EQ if self.session.coin() else Op.DISTINCT
            n1 = self.session.choice(self.nodes.pending())
            n2 = self.session.choice(self.index.of_sort(n1.sort))
            self.use(n1, n2)
            expr = app(op, n1, n2)
        self.bools.append(self.bind(expr))
