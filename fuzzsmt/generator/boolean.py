"""Boolean composition: reduce a pool of formulas to a single root."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional, Sequence

from fuzzsmt.constants import CNF_CLAUSE_SIZE, MIN_CNF_CLAUSES
from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.expr import Expr, app
from fuzzsmt.core.ops import BOOL_CONNECTIVES, BOOL_CONNECTIVES_WITH_ITE, Op
from fuzzsmt.core.session import GenerationSession
from fuzzsmt.core.terms import Term

log = logging.getLogger(__name__)


class CompositionMode(Enum):
    RANDOM = "random"
    AND = "and"
    OR = "or"
    CNF = "cnf"


def _take(session: GenerationSession, bools: List[Term], count: int) -> List[Term]:
    """Remove *count* distinct members from *bools* and return them."""
    positions = session.rng.sample(range(len(bools)), count)
    taken = [bools[i] for i in positions]
    for i in sorted(positions, reverse=True):
        del bools[i]
    return taken


def reduce_random(
    session: GenerationSession,
    bools: List[Term],
    namer: Optional[Callable[[], str]] = None,
) -> Term:
    """Combine random members of *bools* until one formula is left.

    Each step replaces its operands with the new formula, so the pool
    shrinks by the arity minus one. ``if_then_else`` is only eligible
    while at least three formulas remain.
    """
    if not bools:
        raise GenerationError("nothing to compose")
    while len(bools) > 1:
        kinds = BOOL_CONNECTIVES_WITH_ITE if len(bools) >= 3 else BOOL_CONNECTIVES
        kind = session.choice(kinds)
        arity = kind.arity if kind.arity > 0 else 2
        operands = _take(session, bools, arity)
        name = namer() if namer is not None else None
        bools.append(session.bind(app(kind, *operands), name))
    return bools[0]


def top_level(session: GenerationSession, bools: List[Term], op: Op) -> Term:
    """Bind one n-ary ``and``/``or`` over the whole pool."""
    if not bools:
        raise GenerationError("nothing to compose")
    if len(bools) == 1:
        return bools[0]
    root = session.bind(app(op, *bools))
    bools[:] = [root]
    return root


def _literal(session: GenerationSession, term: Term) -> Expr:
    return term if session.coin() else app(Op.NOT, term)


def cnf(session: GenerationSession, bools: List[Term], factor: float) -> Term:
    """Bind a conjunction of ``max(2, int(len(bools) * factor))`` clauses.

    Every clause is a disjunction of three literals drawn with replacement
    from the pool, each negated on a coin flip.
    """
    if not bools:
        raise GenerationError("nothing to compose")
    if factor < 0:
        raise GenerationError(f"CNF factor must be >= 0, got {factor}")
    if len(bools) == 1:
        return bools[0]
    num_clauses = max(MIN_CNF_CLAUSES, int(len(bools) * factor))
    clauses = [
        app(Op.OR, *(_literal(session, session.choice(bools)) for _ in range(CNF_CLAUSE_SIZE)))
        for _ in range(num_clauses)
    ]
    root = session.bind(app(Op.AND, *clauses))
    bools[:] = [root]
    return root


def compose(
    session: GenerationSession,
    bools: Sequence[Term],
    mode: CompositionMode,
    factor: float = 1.0,
) -> Term:
    pool = list(bools)
    log.debug("composing %d formulas in %s mode", len(pool), mode.value)
    if mode is CompositionMode.AND:
        return top_level(session, pool, Op.AND)
    if mode is CompositionMode.OR:
        return top_level(session, pool, Op.OR)
    if mode is CompositionMode.CNF:
        return cnf(session, pool, factor)
    return reduce_random(session, pool)
