"""Operator kinds and the named kind sets the layers draw from.

Kinds carry an arity only. How a kind is spelled is decided by the
printers in :mod:`fuzzsmt.printer`. Kind sets are tuples so that a random
draw over them is reproducible for a fixed seed.
"""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Tuple


class Op(Enum):
    """Operator kinds. ``arity`` is -1 for n-ary kinds."""

    def __new__(cls, arity: int):
        obj = object.__new__(cls)
        obj._value_ = len(cls.__members__) + 1
        obj.arity = arity
        return obj

    # --- Boolean ---
    NOT = 1
    AND = -1
    OR = -1
    IMPLIES = 2
    XOR = 2
    IFF = 2
    IF_THEN_ELSE = 3  # on formulas

    # --- Bit-vector, unary ---
    BVNOT = 1
    BVNEG = 1
    EXTRACT = 1
    REPEAT = 1
    ZERO_EXTEND = 1
    SIGN_EXTEND = 1
    ROTATE_LEFT = 1
    ROTATE_RIGHT = 1

    # --- Bit-vector, binary ---
    BVAND = 2
    BVNAND = 2
    BVOR = 2
    BVNOR = 2
    BVXOR = 2
    BVXNOR = 2
    BVADD = 2
    BVMUL = 2
    BVCOMP = 2
    BVULT = 2
    BVULE = 2
    BVUGT = 2
    BVUGE = 2
    BVSLT = 2
    BVSLE = 2
    BVSGT = 2
    BVSGE = 2
    BVSHL = 2
    BVLSHR = 2
    BVASHR = 2
    BVSUB = 2
    BVUDIV = 2
    BVUREM = 2
    BVSDIV = 2
    BVSREM = 2
    BVSMOD = 2
    CONCAT = 2

    # --- Relations ---
    LT = 2
    GT = 2
    LE = 2
    GE = 2
    EQ = -1
    DISTINCT = -1

    # --- Arithmetic ---
    PLUS = -1
    UNMINUS = 1
    BINMINUS = 2
    MUL = 2
    DIV = 2

    # --- Arrays ---
    SELECT = 2
    STORE = 3

    # --- Terms ---
    ITE = 3

    # Layer kinds standing for an uninterpreted function or predicate
    # application. They never appear inside an expression node.
    UFUNC = -1
    UPRED = -1


# -- Boolean -----------------------------------------------------------------

BOOL_CONNECTIVES: Tuple[Op, ...] = (Op.NOT, Op.AND, Op.OR, Op.IMPLIES, Op.XOR, Op.IFF)
BOOL_CONNECTIVES_WITH_ITE: Tuple[Op, ...] = BOOL_CONNECTIVES + (Op.IF_THEN_ELSE,)

# -- Bit-vector --------------------------------------------------------------

BV_UNARY: Tuple[Op, ...] = (
    Op.BVNOT, Op.BVNEG, Op.EXTRACT, Op.REPEAT,
    Op.ZERO_EXTEND, Op.SIGN_EXTEND, Op.ROTATE_LEFT, Op.ROTATE_RIGHT,
)

BV_COMMUTATIVE: Tuple[Op, ...] = (
    Op.BVAND, Op.BVNAND, Op.BVOR, Op.BVNOR, Op.BVXOR, Op.BVXNOR,
    Op.BVADD, Op.BVMUL, Op.BVCOMP,
)

BV_COMPARISONS: Tuple[Op, ...] = (
    Op.BVULT, Op.BVULE, Op.BVUGT, Op.BVUGE,
    Op.BVSLT, Op.BVSLE, Op.BVSGT, Op.BVSGE,
)

BV_SHIFTS: Tuple[Op, ...] = (Op.BVSHL, Op.BVLSHR, Op.BVASHR, Op.BVSUB)

BV_DIVISIONS: Tuple[Op, ...] = (Op.BVUDIV, Op.BVUREM, Op.BVSDIV, Op.BVSREM, Op.BVSMOD)

BV_BINARY: Tuple[Op, ...] = (
    BV_COMMUTATIVE + BV_COMPARISONS + BV_SHIFTS + BV_DIVISIONS + (Op.CONCAT,)
)

SIGNED_DIVISIONS: FrozenSet[Op] = frozenset({Op.BVSDIV, Op.BVSREM, Op.BVSMOD})
UNSIGNED_DIVISIONS: FrozenSet[Op] = frozenset({Op.BVUDIV, Op.BVUREM})

INDEXED: FrozenSet[Op] = frozenset({
    Op.EXTRACT, Op.REPEAT, Op.ZERO_EXTEND, Op.SIGN_EXTEND,
    Op.ROTATE_LEFT, Op.ROTATE_RIGHT,
})

# -- Relations and arithmetic ------------------------------------------------

ORDERINGS: Tuple[Op, ...] = (Op.LT, Op.GT, Op.LE, Op.GE)
EQUALITIES: Tuple[Op, ...] = (Op.EQ, Op.DISTINCT)
RELATIONS: Tuple[Op, ...] = ORDERINGS + EQUALITIES

ARITHMETIC: Tuple[Op, ...] = (Op.PLUS, Op.UNMINUS, Op.BINMINUS, Op.MUL)
