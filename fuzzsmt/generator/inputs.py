"""Declarations and constants that seed the term pools.

Everything here runs before or right at the start of the formula: free
variables, arrays, uninterpreted sorts, functions and predicates are
declared; constants are ``let``-bound literals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Set

from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.expr import BVLiteral, Numeral
from fuzzsmt.core.session import GenerationSession
from fuzzsmt.core.sorts import ArraySort, BitVecSort, Sort, UninterpretedSort
from fuzzsmt.core.terms import Term, UninterpretedFunction, UninterpretedPredicate


@dataclass
class ConstantPool:
    """Bound numeric constants plus the ids of those that are zero."""

    terms: List[Term] = field(default_factory=list)
    zero_ids: Set[int] = field(default_factory=set)

    def nonzero(self) -> List[Term]:
        return [t for t in self.terms if t.id not in self.zero_ids]


# ---------------------------------------------------------------------------
# Variables
# ---------------------------------------------------------------------------

def declare_variables(session: GenerationSession, sort: Sort, count: int, prefix: str = "v") -> List[Term]:
    return [session.declare_variable(sort, prefix) for _ in range(count)]


def declare_bitvector_variables(
    session: GenerationSession, count: int, min_bw: int, max_bw: int
) -> List[Term]:
    return [
        session.declare_variable(BitVecSort(session.rand_range(min_bw, max_bw)))
        for _ in range(count)
    ]


def declare_bitvector_arrays(
    session: GenerationSession, count: int, min_bw: int, max_bw: int
) -> List[Term]:
    arrays = []
    for _ in range(count):
        index_width = session.rand_range(min_bw, max_bw)
        value_width = session.rand_range(min_bw, max_bw)
        sort = ArraySort(BitVecSort(index_width), BitVecSort(value_width))
        arrays.append(session.declare_variable(sort, prefix="a"))
    return arrays


def declare_sorts(session: GenerationSession, count: int) -> List[UninterpretedSort]:
    return [session.declare_sort() for _ in range(count)]


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

def bitvector_constants(
    session: GenerationSession, count: int, min_bw: int, max_bw: int
) -> List[Term]:
    consts = []
    for _ in range(count):
        width = session.rand_range(min_bw, max_bw)
        consts.append(session.bind(BVLiteral(session.rng.getrandbits(width), width)))
    return consts


def _random_numeral_value(session: GenerationSession, max_bw: int) -> int:
    width = session.randrange(max_bw) + 1
    return session.rng.getrandbits(width)


def numeric_constants(session: GenerationSession, count: int, max_bw: int, sort: Sort) -> ConstantPool:
    """Bind *count* numerals of at most *max_bw* bits."""
    pool = ConstantPool()
    for _ in range(count):
        value = _random_numeral_value(session, max_bw)
        term = session.bind(Numeral(value, sort))
        pool.terms.append(term)
        if value == 0:
            pool.zero_ids.add(term.id)
    return pool


def nonzero_numeric_constants(
    session: GenerationSession, count: int, max_bw: int, sort: Sort
) -> ConstantPool:
    """Like :func:`numeric_constants`, but the first constant is never zero.

    Division layers pick their divisors from :meth:`ConstantPool.nonzero`,
    which is therefore never empty.
    """
    if count < 1:
        raise GenerationError("at least one constant is needed as a divisor")
    first = 0
    while first == 0:
        first = _random_numeral_value(session, max_bw)
    pool = ConstantPool()
    pool.terms.append(session.bind(Numeral(first, sort)))
    rest = numeric_constants(session, count - 1, max_bw, sort)
    pool.terms.extend(rest.terms)
    pool.zero_ids.update(rest.zero_ids)
    return pool


# ---------------------------------------------------------------------------
# Uninterpreted symbols
# ---------------------------------------------------------------------------

def declare_functions(
    session: GenerationSession,
    sorts: Sequence[Sort],
    min_count: int,
    min_args: int,
    max_args: int,
) -> List[UninterpretedFunction]:
    """Declare at least *min_count* functions over *sorts*.

    Declaration continues until every sort appeared at least once as a
    result sort and once as an operand sort.
    """
    if not sorts:
        raise GenerationError("functions need at least one sort")
    todo_result = set(sorts)
    todo_arg = set(sorts)
    funcs: List[UninterpretedFunction] = []
    while todo_result or todo_arg or len(funcs) < min_count:
        operands = [session.choice(sorts) for _ in range(session.rand_range(min_args, max_args))]
        todo_arg.difference_update(operands)
        result = session.choice(sorts)
        todo_result.discard(result)
        funcs.append(session.declare_function(operands, result))
    return funcs


def declare_predicates(
    session: GenerationSession,
    sorts: Sequence[Sort],
    min_count: int,
    min_args: int,
    max_args: int,
) -> List[UninterpretedPredicate]:
    """Declare at least *min_count* predicates; every sort is an operand somewhere."""
    if not sorts:
        raise GenerationError("predicates need at least one sort")
    todo = set(sorts)
    preds: List[UninterpretedPredicate] = []
    while todo or len(preds) < min_count:
        operands = [session.choice(sorts) for _ in range(session.rand_range(min_args, max_args))]
        todo.difference_update(operands)
        preds.append(session.declare_predicate(operands))
    return preds


def declare_bitvector_functions(
    session: GenerationSession, count: int, min_args: int, max_args: int, min_bw: int, max_bw: int
) -> List[UninterpretedFunction]:
    funcs = []
    for _ in range(count):
        num_args = session.rand_range(min_args, max_args)
        operands = [BitVecSort(session.rand_range(min_bw, max_bw)) for _ in range(num_args)]
        result = BitVecSort(session.rand_range(min_bw, max_bw))
        funcs.append(session.declare_function(operands, result))
    return funcs


def declare_bitvector_predicates(
    session: GenerationSession, count: int, min_args: int, max_args: int, min_bw: int, max_bw: int
) -> List[UninterpretedPredicate]:
    preds = []
    for _ in range(count):
        num_args = session.rand_range(min_args, max_args)
        operands = [BitVecSort(session.rand_range(min_bw, max_bw)) for _ in range(num_args)]
        preds.append(session.declare_predicate(operands))
    return preds
