"""Terms, signatures and uninterpreted symbols.

A term is a *handle*: it names a declared variable, a ``let``-bound
intermediate or a quantified variable, together with its sort. The
expression that produced a bound term lives only in the ``Bind`` event.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.sorts import BOOL, Sort


class TermKind(Enum):
    DECLARED = "declared"
    BOUND = "bound"
    QUANTIFIED = "quantified"


@dataclass(frozen=True)
class Term:
    id: int
    sort: Sort
    name: str
    kind: TermKind = TermKind.DECLARED


@dataclass(frozen=True)
class Signature:
    """Ordered operand sorts plus one result sort."""

    operands: Tuple[Sort, ...]
    result: Sort

    @property
    def arity(self) -> int:
        return len(self.operands)


@dataclass(frozen=True)
class UninterpretedFunction:
    id: int
    name: str
    signature: Signature

    @property
    def operands(self) -> Tuple[Sort, ...]:
        return self.signature.operands

    @property
    def result(self) -> Sort:
        return self.signature.result

    @property
    def arity(self) -> int:
        return self.signature.arity


@dataclass(frozen=True)
class UninterpretedPredicate(UninterpretedFunction):
    def __post_init__(self) -> None:
        if self.signature.result != BOOL:
            raise GenerationError(
                f"predicate {self.name} must return Bool, not {self.signature.result!r}"
            )
