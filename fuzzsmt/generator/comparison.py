"""Comparison layer: relations and predicate applications over one pool."""

from __future__ import annotations

from enum import Enum
from typing import List, Sequence

from fuzzsmt.core.coverage import CoverageLayer
from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.expr import app, apply
from fuzzsmt.core.ops import EQUALITIES, RELATIONS, Op
from fuzzsmt.core.session import GenerationSession
from fuzzsmt.core.terms import Term, UninterpretedPredicate
from fuzzsmt.generator.uninterpreted import TermIndex


class ComparisonMode(Enum):
    OFF = "off"    # predicate applications only
    EQ = "eq"      # = and distinct
    FULL = "full"  # orderings as well


_MODE_KINDS = {
    ComparisonMode.OFF: (),
    ComparisonMode.EQ: EQUALITIES,
    ComparisonMode.FULL: RELATIONS,
}


class ComparisonLayer(CoverageLayer):
    name = "comparison layer"

    def __init__(
        self,
        session: GenerationSession,
        pool: Sequence[Term],
        bools: List[Term],
        min_refs: int,
        *,
        mode: ComparisonMode,
        preds: Sequence[UninterpretedPredicate] = (),
        no_blowup: bool = False,
    ) -> None:
        super().__init__(session, min_refs, no_blowup=no_blowup)
        if not pool:
            raise GenerationError("comparison layer needs a non-empty pool")
        self.pool = list(pool)
        self.bools = bools
        self.preds = list(preds)
        kinds = list(_MODE_KINDS[mode])
        if self.preds:
            kinds.append(Op.UPRED)
        if not kinds:
            raise GenerationError("comparison layer has neither relations nor predicates")
        self.kinds = tuple(kinds)
        self.index = TermIndex(self.pool)
        self.nodes = self.track(self.pool)
        self.pending_preds = self.track(self.preds)

    def _predicate(self, n1: Term):
        if self.pending_preds and (self.forcing or self.session.coin()):
            pred = self.session.choice(self.pending_preds.pending())
        else:
            pred = self.session.choice(self.preds)
        args = []
        placed = False
        for sort in pred.operands:
            if not placed and n1.sort == sort:
                args.append(n1)
                placed = True
            else:
                args.append(self.session.choice(self.index.of_sort(sort)))
        self.use(pred, *args)
        return apply(pred, *args)

    def step(self) -> None:
        n1 = self.pick(self.pool, self.nodes, bias=self.no_blowup)
        if self.forcing and self.pending_preds and not self.nodes:
            kind = Op.UPRED
        else:
            kind = self.session.choice(self.kinds)

        if kind is Op.UPRED:
            expr = self._predicate(n1)
        else:
            n2 = self.session.choice(self.index.of_sort(n1.sort))
            self.use(n1, n2)
            expr = app(kind, n1, n2)
        self.bools.append(self.bind(expr))
