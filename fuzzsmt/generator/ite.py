"""If-then-else layer over a term pool."""

from __future__ import annotations

from typing import List, Sequence

from fuzzsmt.core.coverage import CoverageLayer
from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.expr import app
from fuzzsmt.core.ops import Op
from fuzzsmt.core.session import GenerationSession
from fuzzsmt.core.terms import Term
from fuzzsmt.generator.uninterpreted import TermIndex


class IteLayer(CoverageLayer):
    """Binds ``ite(f, t1, t2)`` until every formula and term is used.

    The condition and the first branch are each drawn from their pending
    items on an independent coin flip; the second branch has the sort of
    the first. New terms join *pool*.
    """

    name = "ite layer"

    def __init__(
        self,
        session: GenerationSession,
        pool: List[Term],
        bools: Sequence[Term],
        min_refs: int,
    ) -> None:
        super().__init__(session, min_refs)
        if not pool or not bools:
            raise GenerationError("ite layer needs terms and formulas")
        self.pool = pool
        self.bools = list(bools)
        self.index = TermIndex(pool)
        self.nodes = self.track(list(pool))
        self.pending_bools = self.track(self.bools)

    def step(self) -> None:
        cond = self.pick(self.bools, self.pending_bools)
        n1 = self.pick(self.pool, self.nodes)
        n2 = self.session.choice(self.index.of_sort(n1.sort))
        self.use(cond, n1, n2)
        term = self.bind(app(Op.ITE, cond, n1, n2))
        self.pool.append(term)
        self.index.add(term)
