"""Quantified assumptions over uninterpreted functions and predicates."""

from __future__ import annotations

import logging
from itertools import count
from typing import List, Sequence

from fuzzsmt.core.coverage import CoverageLayer
from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.events import Quantifier
from fuzzsmt.core.expr import app, apply
from fuzzsmt.core.ops import EQUALITIES, RELATIONS
from fuzzsmt.core.session import GenerationSession
from fuzzsmt.core.sorts import Sort
from fuzzsmt.core.terms import Term, UninterpretedFunction, UninterpretedPredicate
from fuzzsmt.generator.boolean import reduce_random

log = logging.getLogger(__name__)


class _AtomLayer(CoverageLayer):
    """Atoms over the bound variables of one quantified formula."""

    name = "quantified atom layer"

    def __init__(
        self,
        session: GenerationSession,
        qvars: Sequence[Term],
        funcs: Sequence[UninterpretedFunction],
        preds: Sequence[UninterpretedPredicate],
        min_refs: int,
        *,
        only_eq: bool,
        namer,
    ) -> None:
        super().__init__(session, min_refs)
        self.qvars = list(qvars)
        self.funcs = list(funcs)
        self.preds = list(preds)
        self.kinds = EQUALITIES if only_eq else RELATIONS
        self.namer = namer
        self.atoms: List[Term] = []
        self.todo = self.track(self.qvars)

    def _arguments(self, symbol: UninterpretedFunction) -> List[Term]:
        args = [self.pick(self.qvars, self.todo, bias=False) for _ in symbol.operands]
        self.use(*args)
        return args

    def step(self) -> None:
        if (self.funcs and self.session.coin()) or not self.preds:
            kind = self.session.choice(self.kinds)
            sides = []
            for _ in range(2):
                func = self.session.choice(self.funcs)
                sides.append(apply(func, *self._arguments(func)))
            expr = app(kind, *sides)
        else:
            pred = self.session.choice(self.preds)
            expr = apply(pred, *self._arguments(pred))
        self.atoms.append(self.bind(expr, self.namer()))


def quantified_formulas(
    session: GenerationSession,
    sort: Sort,
    funcs: Sequence[UninterpretedFunction],
    preds: Sequence[UninterpretedPredicate],
    num_formulas: int,
    *,
    min_nestings: int,
    max_nestings: int,
    min_vars: int,
    max_vars: int,
    min_refs: int,
    only_eq: bool,
) -> int:
    """Emit *num_formulas* quantified assumptions over *sort*.

    Every formula opens ``nestings + 1`` quantifiers, each binding fresh
    variables, then builds atoms until every bound variable is used
    ``min_refs`` times and reduces the atoms to one body. Functions must
    map *sort* to *sort*; predicates must take *sort* only.

    Returns:
        The number of bound formulas, atoms and connectives together.
    """
    if num_formulas == 0:
        return 0
    if not funcs and not preds:
        raise GenerationError(f"quantified formulas over {sort!r} need functions or predicates")
    for symbol in list(funcs) + list(preds):
        if any(s != sort for s in symbol.operands) or not symbol.operands:
            raise GenerationError(f"{symbol.name} does not take {sort!r} only")
    for func in funcs:
        if func.result != sort:
            raise GenerationError(f"{func.name} does not return {sort!r}")
    if min_vars < 1:
        raise GenerationError("quantifiers need at least one variable")

    qvar_ids = count()
    formula_ids = count()

    def qvar_name() -> str:
        return f"qvar{next(qvar_ids)}"

    def formula_name() -> str:
        return f"qf{next(formula_ids)}"

    generated = 0
    for _ in range(num_formulas):
        session.begin_assumption()
        nestings = session.rand_range(min_nestings, max_nestings)
        qvars: List[Term] = []
        for _ in range(nestings + 1):
            quantifier = Quantifier.FORALL if session.coin() else Quantifier.EXISTS
            qvars.extend(
                session.open_quantifier(
                    quantifier, sort, session.rand_range(min_vars, max_vars), qvar_name
                )
            )
        layer = _AtomLayer(
            session, qvars, funcs, preds, min_refs, only_eq=only_eq, namer=formula_name
        )
        layer.run()
        before = session.bound_count
        body = reduce_random(session, layer.atoms, formula_name)
        generated += len(layer.generated) + session.bound_count - before
        session.close_assumption(body)
    log.debug("%d quantified formulas over %r, %d bindings", num_formulas, sort, generated)
    return generated
