"""Bit-vector width adaptation and division guards."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterator, Optional, Tuple

from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.expr import BVLiteral, Expr, app, sort_of
from fuzzsmt.core.ops import SIGNED_DIVISIONS, UNSIGNED_DIVISIONS, Op
from fuzzsmt.core.session import GenerationSession
from fuzzsmt.core.sorts import width_of
from fuzzsmt.core.terms import Term


class DivisionMode(Enum):
    OFF = "off"            # no division kinds at all
    GUARDED = "guarded"    # divisors are guarded against zero
    FULL = "full"          # division without guards


def extend(session: GenerationSession, expr: Expr, amount: int) -> Expr:
    """Zero- or sign-extend *expr* by *amount* bits, chosen by a coin flip."""
    if amount == 0:
        return expr
    op = Op.ZERO_EXTEND if session.coin() else Op.SIGN_EXTEND
    return app(op, expr, indices=(amount,))


def adapt(session: GenerationSession, expr: Expr, target: int) -> Expr:
    """Return an expression of width *target* derived from *expr*.

    Narrower operands are extended; wider ones have exactly *target* bits
    extracted at a uniformly chosen offset.
    """
    width = width_of(sort_of(expr))
    if width == target:
        return expr
    if width < target:
        return extend(session, expr, target - width)
    lower = session.randrange(width - target + 1)
    return app(Op.EXTRACT, expr, indices=(lower + target - 1, lower))


def reconcile(session: GenerationSession, a: Expr, b: Expr) -> Tuple[Expr, Expr, Optional[int]]:
    """Extend the narrower of *a* and *b* to the width of the other.

    Returns both operands and the position (0 or 1) of the extended one,
    or None when the widths already agree.
    """
    wa = width_of(sort_of(a))
    wb = width_of(sort_of(b))
    if wa < wb:
        return extend(session, a, wb - wa), b, 0
    if wb < wa:
        return a, extend(session, b, wa - wb), 1
    return a, b, None


class DivisionGuards:
    """Divisors seen in guarded mode, in insertion order."""

    def __init__(self) -> None:
        self._divisors: Dict[int, Term] = {}
        self._kinds: Dict[int, Op] = {}

    def __len__(self) -> int:
        return len(self._divisors)

    def __iter__(self) -> Iterator[Tuple[Term, Op]]:
        for ident, term in self._divisors.items():
            yield term, self._kinds[ident]

    def kind_of(self, divisor: Term) -> Optional[Op]:
        return self._kinds.get(divisor.id)

    def record(self, divisor: Term, op: Op) -> None:
        """Remember *divisor*; an unsigned entry may be upgraded, a signed one stays."""
        if op not in SIGNED_DIVISIONS and op not in UNSIGNED_DIVISIONS:
            raise GenerationError(f"{op.name} is not a division")
        current = self._kinds.get(divisor.id)
        if current is None:
            self._divisors[divisor.id] = divisor
            self._kinds[divisor.id] = op
        elif current in UNSIGNED_DIVISIONS:
            self._kinds[divisor.id] = op

    def inject(self, session: GenerationSession, root: Term) -> Term:
        """Conjoin the guard conditions onto *root* and return the new root."""
        current = root
        for divisor, op in self:
            width = width_of(divisor.sort)
            zero = BVLiteral.zero(width)
            current = session.bind(app(Op.AND, current, app(Op.NOT, app(Op.EQ, divisor, zero))))
            if op in SIGNED_DIVISIONS:
                current = session.bind(
                    app(Op.AND, current, app(Op.NOT, app(Op.EQ, divisor, app(Op.BVNOT, zero))))
                )
        return current
