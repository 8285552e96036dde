"""Expression nodes and sort inference.

Layers never state the sort of what they build. The session asks
:func:`sort_of` for it when an expression is bound, so a layer that
combines operands of the wrong sorts fails immediately with a
``GenerationError`` instead of producing an ill-typed benchmark.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple, Union

from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.ops import (
    BV_COMPARISONS,
    INDEXED,
    ORDERINGS,
    Op,
)
from fuzzsmt.core.sorts import (
    BOOL,
    REAL,
    ArraySort,
    BitVecSort,
    Sort,
    is_bitvec,
    is_numeric,
)
from fuzzsmt.core.terms import Term, UninterpretedFunction


@dataclass(frozen=True)
class BVLiteral:
    value: int
    width: int

    def __post_init__(self) -> None:
        if self.width <= 0:
            raise ValueError(f"literal width must be positive, got {self.width}")
        if not 0 <= self.value < (1 << self.width):
            raise ValueError(f"literal {self.value} does not fit in {self.width} bits")

    @property
    def sort(self) -> BitVecSort:
        return BitVecSort(self.width)

    @classmethod
    def zero(cls, width: int) -> "BVLiteral":
        return cls(0, width)

    @classmethod
    def ones(cls, width: int) -> "BVLiteral":
        return cls((1 << width) - 1, width)


@dataclass(frozen=True)
class Numeral:
    """Non-negative integer numeral, typed Int or Real by its context."""

    value: int
    sort: Sort

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("numerals are non-negative; negate with UNMINUS")
        if not is_numeric(self.sort):
            raise ValueError(f"numeral sort must be Int or Real, got {self.sort!r}")


@dataclass(frozen=True)
class App:
    op: Op
    args: Tuple["Expr", ...]
    indices: Tuple[int, ...] = ()


@dataclass(frozen=True)
class Apply:
    symbol: UninterpretedFunction
    args: Tuple["Expr", ...]


Expr = Union[Term, BVLiteral, Numeral, App, Apply]


def app(op: Op, *args: Expr, indices: Tuple[int, ...] = ()) -> App:
    return App(op, tuple(args), tuple(indices))


def apply(symbol: UninterpretedFunction, *args: Expr) -> Apply:
    return Apply(symbol, tuple(args))


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------

def subexpressions(expr: Expr) -> Iterator[Expr]:
    """Yield *expr* and every node below it, pre-order."""
    stack = [expr]
    while stack:
        node = stack.pop()
        yield node
        if isinstance(node, (App, Apply)):
            stack.extend(reversed(node.args))


def referenced_terms(expr: Expr) -> Iterator[Term]:
    for node in subexpressions(expr):
        if isinstance(node, Term):
            yield node


def applied_symbols(expr: Expr) -> Iterator[UninterpretedFunction]:
    for node in subexpressions(expr):
        if isinstance(node, Apply):
            yield node.symbol


# ---------------------------------------------------------------------------
# Sort inference
# ---------------------------------------------------------------------------

def _fail(op: Op, detail: str) -> GenerationError:
    return GenerationError(f"ill-sorted {op.name}: {detail}")


def _same_sort(op: Op, sorts: Tuple[Sort, ...]) -> Sort:
    first = sorts[0]
    for other in sorts[1:]:
        if other != first:
            raise _fail(op, f"operand sorts differ ({first!r} vs {other!r})")
    return first


def _check_arity(op: Op, sorts: Tuple[Sort, ...]) -> None:
    if op.arity >= 0:
        if len(sorts) != op.arity:
            raise _fail(op, f"expected {op.arity} operands, got {len(sorts)}")
    elif len(sorts) < 2:
        raise _fail(op, f"expected at least 2 operands, got {len(sorts)}")


def _indexed_sort(op: Op, indices: Tuple[int, ...], operand: Sort) -> Sort:
    if not is_bitvec(operand):
        raise _fail(op, f"operand is {operand!r}")
    if len(indices) != (2 if op is Op.EXTRACT else 1):
        raise _fail(op, f"bad indices {indices}")
    width = operand.width
    if op is Op.EXTRACT:
        upper, lower = indices
        if not width > upper >= lower >= 0:
            raise _fail(op, f"bounds [{upper}:{lower}] outside width {width}")
        return BitVecSort(upper - lower + 1)
    (amount,) = indices
    if op is Op.REPEAT:
        if amount < 1:
            raise _fail(op, f"repeat count {amount}")
        return BitVecSort(width * amount)
    if amount < 0:
        raise _fail(op, f"negative amount {amount}")
    if op in (Op.ZERO_EXTEND, Op.SIGN_EXTEND):
        return BitVecSort(width + amount)
    return operand


def _app_sort(op: Op, indices: Tuple[int, ...], sorts: Tuple[Sort, ...]) -> Sort:
    if op in (Op.UFUNC, Op.UPRED):
        raise _fail(op, "layer kind used as an operator")
    _check_arity(op, sorts)

    if op in INDEXED:
        return _indexed_sort(op, indices, sorts[0])
    if indices:
        raise _fail(op, "operator takes no indices")

    if op in (Op.NOT, Op.AND, Op.OR, Op.IMPLIES, Op.XOR, Op.IFF, Op.IF_THEN_ELSE):
        if any(s != BOOL for s in sorts):
            raise _fail(op, "operands must be Bool")
        return BOOL

    if op in (Op.EQ, Op.DISTINCT):
        _same_sort(op, sorts)
        return BOOL

    if op in ORDERINGS:
        sort = _same_sort(op, sorts)
        if not is_numeric(sort):
            raise _fail(op, f"operands are {sort!r}")
        return BOOL

    if op in (Op.PLUS, Op.UNMINUS, Op.BINMINUS, Op.MUL):
        sort = _same_sort(op, sorts)
        if not is_numeric(sort):
            raise _fail(op, f"operands are {sort!r}")
        return sort

    if op is Op.DIV:
        if _same_sort(op, sorts) != REAL:
            raise _fail(op, "operands must be Real")
        return REAL

    if op is Op.CONCAT:
        if not all(is_bitvec(s) for s in sorts):
            raise _fail(op, "operands must be bit-vectors")
        return BitVecSort(sorts[0].width + sorts[1].width)

    if op.name.startswith("BV"):
        sort = _same_sort(op, sorts)
        if not is_bitvec(sort):
            raise _fail(op, f"operands are {sort!r}")
        if op in BV_COMPARISONS:
            return BOOL
        if op is Op.BVCOMP:
            return BitVecSort(1)
        return sort

    if op is Op.SELECT:
        array, index = sorts
        if not isinstance(array, ArraySort) or array.index != index:
            raise _fail(op, f"cannot select {index!r} from {array!r}")
        return array.value

    if op is Op.STORE:
        array, index, value = sorts
        if not isinstance(array, ArraySort) or array.index != index or array.value != value:
            raise _fail(op, f"cannot store {value!r} at {index!r} in {array!r}")
        return array

    if op is Op.ITE:
        if sorts[0] != BOOL:
            raise _fail(op, f"condition is {sorts[0]!r}")
        return _same_sort(op, sorts[1:])

    raise _fail(op, "unknown operator")


def sort_of(expr: Expr) -> Sort:
    """Return the result sort of *expr*.

    Raises:
        GenerationError: if any node below *expr* is ill-sorted.
    """
    if isinstance(expr, Term):
        return expr.sort
    if isinstance(expr, (BVLiteral, Numeral)):
        return expr.sort
    if isinstance(expr, Apply):
        symbol = expr.symbol
        sorts = tuple(sort_of(a) for a in expr.args)
        if sorts != symbol.operands:
            raise GenerationError(
                f"ill-sorted application of {symbol.name}: "
                f"expected {symbol.operands!r}, got {sorts!r}"
            )
        return symbol.result
    if isinstance(expr, App):
        return _app_sort(expr.op, expr.indices, tuple(sort_of(a) for a in expr.args))
    raise GenerationError(f"not an expression: {expr!r}")
