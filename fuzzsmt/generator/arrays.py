"""Read, write and equality passes over arrays with theory index/element sorts.

Unlike the coverage layers these passes bind a fixed number of terms.
Operands are drawn from pools that keep growing, so later passes can
read from arrays that earlier passes wrote.
"""

from __future__ import annotations

from typing import List, Sequence

from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.expr import app
from fuzzsmt.core.ops import Op
from fuzzsmt.core.session import GenerationSession
from fuzzsmt.core.sorts import ArraySort, Sort
from fuzzsmt.core.terms import Term


def _of_sort(pool: Sequence[Term], sort: Sort, what: str) -> List[Term]:
    matching = [t for t in pool if t.sort == sort]
    if not matching:
        raise GenerationError(f"no {what} of sort {sort!r}")
    return matching


def _array_sort(array: Term) -> ArraySort:
    if not isinstance(array.sort, ArraySort):
        raise GenerationError(f"{array.name} is not an array")
    return array.sort


def writes(
    session: GenerationSession,
    arrays: List[Term],
    indices: Sequence[Term],
    elements: Sequence[Term],
    count: int,
) -> int:
    """Bind *count* stores; each new array joins *arrays*."""
    for _ in range(count):
        array = session.choice(arrays, "array pool")
        sort = _array_sort(array)
        index = session.choice(_of_sort(indices, sort.index, "index"))
        element = session.choice(_of_sort(elements, sort.value, "element"))
        arrays.append(session.bind(app(Op.STORE, array, index, element)))
    return count


def reads(
    session: GenerationSession,
    arrays: Sequence[Term],
    indices: Sequence[Term],
    elements: List[Term],
    count: int,
) -> int:
    """Bind *count* selects; each result joins *elements*."""
    for _ in range(count):
        array = session.choice(arrays, "array pool")
        index = session.choice(_of_sort(indices, _array_sort(array).index, "index"))
        elements.append(session.bind(app(Op.SELECT, array, index)))
    return count


def array_equalities(session: GenerationSession, arrays: Sequence[Term], bools: List[Term], count: int) -> int:
    """Bind *count* equalities between arrays of the same sort."""
    for _ in range(count):
        a1 = session.choice(arrays, "array pool")
        a2 = session.choice([a for a in arrays if a.sort == a1.sort])
        bools.append(session.bind(app(Op.EQ, a1, a2)))
    return count


def halves(count: int) -> List[int]:
    """Split *count* into the shrinking batch sizes of the interleaved passes.

    ``halves(10) == [5, 3, 1, 1]``: each batch is the rounded-up half of
    what is left.
    """
    batches = []
    while count > 0:
        batches.append((count >> 1) + (count & 1))
        count >>= 1
    return batches
