"""
Sort system.

Sorts are frozen dataclasses, so equality and hashing are structural:
``BitVecSort(8) == BitVecSort(8)`` and both hash alike, while two
uninterpreted sorts with different names are different sorts. Pools and
signatures compare sorts by value only.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Sort:
    """Base class of every sort."""


@dataclass(frozen=True)
class BoolSort(Sort):
    pass


@dataclass(frozen=True)
class IntSort(Sort):
    pass


@dataclass(frozen=True)
class RealSort(Sort):
    pass


@dataclass(frozen=True)
class BitVecSort(Sort):
    width: int

    def __post_init__(self) -> None:
        if isinstance(self.width, bool) or not isinstance(self.width, int):
            raise ValueError(f"bit-vector width must be an integer, got {self.width!r}")
        if self.width <= 0:
            raise ValueError(f"bit-vector width must be positive, got {self.width}")


@dataclass(frozen=True)
class ArraySort(Sort):
    index: Sort
    value: Sort

    def __post_init__(self) -> None:
        if not isinstance(self.index, Sort) or not isinstance(self.value, Sort):
            raise ValueError("array index and value must both be sorts")


@dataclass(frozen=True)
class UninterpretedSort(Sort):
    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("uninterpreted sort needs a name")


BOOL = BoolSort()
INT = IntSort()
REAL = RealSort()


def is_bitvec(sort: Sort) -> bool:
    return isinstance(sort, BitVecSort)


def width_of(sort: Sort) -> int:
    """Return the width of a bit-vector sort.

    Raises:
        TypeError: if *sort* is not a bit-vector sort.
    """
    if not isinstance(sort, BitVecSort):
        raise TypeError(f"{sort!r} is not a bit-vector sort")
    return sort.width


def is_numeric(sort: Sort) -> bool:
    return sort == INT or sort == REAL
