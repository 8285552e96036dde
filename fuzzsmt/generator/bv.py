"""Bit-vector term, predicate and array layers."""

from __future__ import annotations

from typing import List, Optional, Sequence

from fuzzsmt.constants import ROTATE_OVERSHOOT
from fuzzsmt.core.bitvector import DivisionGuards, DivisionMode, adapt, reconcile
from fuzzsmt.core.coverage import CoverageLayer
from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.expr import BVLiteral, Expr, app, apply
from fuzzsmt.core.ops import BV_BINARY, BV_COMPARISONS, BV_DIVISIONS, BV_UNARY, Op
from fuzzsmt.core.session import GenerationSession
from fuzzsmt.core.sorts import ArraySort, width_of
from fuzzsmt.core.terms import Term, UninterpretedFunction, UninterpretedPredicate


def as_bit(condition: Expr) -> Expr:
    """Encode a formula as a 1-bit vector."""
    return app(Op.ITE, condition, BVLiteral(1, 1), BVLiteral(0, 1))


def _same_sort(arrays: Sequence[Term], array: Term) -> List[Term]:
    return [a for a in arrays if a.sort == array.sort]


class BitVectorLayer(CoverageLayer):
    """Grows a pool of bit-vector terms until every original member is used.

    Comparisons and uninterpreted predicates are encoded into the term
    pool as ``ite(cond, #b1, #b0)``. No result ever exceeds ``max_bw``.
    """

    name = "bit-vector layer"

    def __init__(
        self,
        session: GenerationSession,
        pool: List[Term],
        min_refs: int,
        *,
        max_bw: int,
        div_mode: DivisionMode = DivisionMode.GUARDED,
        guards: Optional[DivisionGuards] = None,
        funcs: Sequence[UninterpretedFunction] = (),
        preds: Sequence[UninterpretedPredicate] = (),
        no_blowup: bool = False,
        wide_rotations: bool = True,
    ) -> None:
        super().__init__(session, min_refs, no_blowup=no_blowup)
        if not pool:
            raise GenerationError("bit-vector layer needs a non-empty pool")
        if div_mode is DivisionMode.GUARDED and guards is None:
            raise GenerationError("guarded division needs a guard table")
        self.pool = pool
        self.max_bw = max_bw
        self.div_mode = div_mode
        self.guards = guards
        self.funcs = list(funcs)
        self.preds = list(preds)
        self.wide_rotations = wide_rotations

        kinds = list(BV_UNARY + BV_BINARY + (Op.EQ, Op.DISTINCT, Op.ITE))
        if div_mode is DivisionMode.OFF:
            kinds = [k for k in kinds if k not in BV_DIVISIONS]
        if self.funcs:
            kinds.append(Op.UFUNC)
        if self.preds:
            kinds.append(Op.UPRED)
        self.kinds = tuple(kinds)
        self._concat_fallback = tuple(
            k for k in self.kinds if (k in BV_BINARY or k is Op.EQ) and k is not Op.CONCAT
        )

        self.nodes = self.track(list(pool))
        self.pending_funcs = self.track(self.funcs)
        self.pending_preds = self.track(self.preds)

    # --- Kinds ---

    def _choose_kind(self) -> Op:
        if self.pending_funcs and (self.forcing or self.session.coin()):
            return Op.UFUNC
        if self.pending_preds and (self.forcing or self.session.coin()):
            return Op.UPRED
        return self.session.choice(self.kinds)

    def _unary(self, kind: Op, n1: Term) -> Expr:
        width = width_of(n1.sort)
        rnd = self.session
        if kind in (Op.BVNOT, Op.BVNEG):
            return app(kind, n1)
        if kind is Op.EXTRACT:
            upper = rnd.randrange(width)
            lower = rnd.randrange(upper + 1)
            return app(kind, n1, indices=(upper, lower))
        if kind in (Op.ROTATE_LEFT, Op.ROTATE_RIGHT):
            limit = width + ROTATE_OVERSHOOT if self.wide_rotations else width
            return app(kind, n1, indices=(rnd.randrange(limit),))
        if kind in (Op.ZERO_EXTEND, Op.SIGN_EXTEND):
            return app(kind, n1, indices=(rnd.randrange(self.max_bw - width + 1),))
        # REPEAT
        return app(kind, n1, indices=(rnd.randrange(self.max_bw // width) + 1,))

    def _binary(self, kind: Op, n1: Term) -> Expr:
        n2 = self.pick(self.pool)
        w1, w2 = width_of(n1.sort), width_of(n2.sort)
        if kind is Op.CONCAT and w1 + w2 > self.max_bw:
            kind = self.session.choice(self._concat_fallback)
        self.use(n1, n2)

        if kind in BV_COMPARISONS or kind in (Op.EQ, Op.DISTINCT):
            a, b, _ = reconcile(self.session, n1, n2)
            return as_bit(app(kind, a, b))
        if kind is Op.CONCAT:
            return app(kind, n1, n2)
        if kind in BV_DIVISIONS and self.div_mode is DivisionMode.GUARDED:
            if w1 > w2:
                n1, n2 = n2, n1
            # n2 is at least as wide as n1, so it reaches the operator unchanged
            self.guards.record(n2, kind)
        a, b, _ = reconcile(self.session, n1, n2)
        return app(kind, a, b)

    def _ite(self, n1: Term) -> Expr:
        n2 = self.pick(self.pool)
        n3 = self.pick(self.pool)
        pos = self.session.randrange(width_of(n1.sort))
        cond = app(Op.EQ, BVLiteral(1, 1), app(Op.EXTRACT, n1, indices=(pos, pos)))
        self.use(n1, n2, n3)
        a, b, _ = reconcile(self.session, n2, n3)
        return app(Op.ITE, cond, a, b)

    def _arguments(self, symbol: UninterpretedFunction, n1: Term) -> List[Expr]:
        args = [adapt(self.session, n1, width_of(symbol.operands[0]))]
        self.use(n1)
        for sort in symbol.operands[1:]:
            n2 = self.pick(self.pool)
            args.append(adapt(self.session, n2, width_of(sort)))
            self.use(n2)
        return args

    def _symbol(self, candidates: Sequence[UninterpretedFunction], pending) -> UninterpretedFunction:
        if pending and (self.forcing or self.session.coin()):
            return self.session.choice(pending.pending())
        return self.session.choice(candidates)

    # --- Loop ---

    def step(self) -> None:
        kind = self._choose_kind()
        n1 = self.pick(self.pool, self.nodes, bias=self.no_blowup)

        if kind in BV_UNARY:
            expr = self._unary(kind, n1)
            self.use(n1)
        elif kind is Op.ITE:
            expr = self._ite(n1)
        elif kind is Op.UFUNC:
            func = self._symbol(self.funcs, self.pending_funcs)
            self.use(func)
            expr = apply(func, *self._arguments(func, n1))
        elif kind is Op.UPRED:
            pred = self._symbol(self.preds, self.pending_preds)
            self.use(pred)
            expr = as_bit(apply(pred, *self._arguments(pred, n1)))
        else:
            expr = self._binary(kind, n1)

        term = self.bind(expr)
        if width_of(term.sort) > self.max_bw:
            raise GenerationError(
                f"{term.name} has width {width_of(term.sort)}, maximum is {self.max_bw}"
            )
        self.pool.append(term)


class BitVectorPredicateLayer(CoverageLayer):
    """Builds formulas over a bit-vector pool and appends them to *bools*."""

    name = "bit-vector predicate layer"

    def __init__(
        self,
        session: GenerationSession,
        pool: Sequence[Term],
        bools: List[Term],
        min_refs: int,
        preds: Sequence[UninterpretedPredicate] = (),
    ) -> None:
        super().__init__(session, min_refs)
        if not pool:
            raise GenerationError("bit-vector predicate layer needs a non-empty pool")
        self.pool = list(pool)
        self.bools = bools
        self.preds = list(preds)
        kinds = list(BV_COMPARISONS + (Op.EQ, Op.DISTINCT))
        if self.preds:
            kinds.append(Op.UPRED)
        self.kinds = tuple(kinds)
        self.nodes = self.track(self.pool)
        self.pending_preds = self.track(self.preds)

    def step(self) -> None:
        if self.pending_preds and (self.forcing or self.session.coin()):
            kind = Op.UPRED
        else:
            kind = self.session.choice(self.kinds)

        if kind is Op.UPRED:
            if self.pending_preds and (self.forcing or self.session.coin()):
                pred = self.session.choice(self.pending_preds.pending())
            else:
                pred = self.session.choice(self.preds)
            self.use(pred)
            args = []
            for sort in pred.operands:
                node = self.pick(self.pool, self.nodes, bias=False)
                args.append(adapt(self.session, node, width_of(sort)))
                self.use(node)
            expr: Expr = apply(pred, *args)
        else:
            n1 = self.pick(self.pool, self.nodes, bias=False)
            n2 = self.pick(self.pool)
            a, b, _ = reconcile(self.session, n1, n2)
            self.use(n1, n2)
            expr = app(kind, a, b)

        self.bools.append(self.bind(expr))


# ---------------------------------------------------------------------------
# Arrays over bit-vectors
# ---------------------------------------------------------------------------

def bitvector_writes(session: GenerationSession, arrays: List[Term], bvs: Sequence[Term], count: int) -> int:
    """Bind *count* stores; each new array joins *arrays*."""
    for _ in range(count):
        array = session.choice(arrays, "array pool")
        sort = array.sort
        index = session.choice(bvs)
        value = session.choice(bvs)
        expr = app(
            Op.STORE,
            array,
            adapt(session, index, width_of(sort.index)),
            adapt(session, value, width_of(sort.value)),
        )
        arrays.append(session.bind(expr))
    return count


def bitvector_reads(session: GenerationSession, arrays: Sequence[Term], bvs: List[Term], count: int) -> int:
    """Bind *count* selects; each result joins *bvs*."""
    for _ in range(count):
        array = session.choice(arrays, "array pool")
        index = session.choice(bvs)
        expr = app(Op.SELECT, array, adapt(session, index, width_of(array.sort.index)))
        bvs.append(session.bind(expr))
    return count


def bitvector_array_equalities(
    session: GenerationSession, arrays: Sequence[Term], bvs: List[Term], count: int
) -> int:
    """Bind *count* array equalities encoded as 1-bit vectors."""
    for _ in range(count):
        a1 = session.choice(arrays, "array pool")
        if not isinstance(a1.sort, ArraySort):
            raise GenerationError(f"{a1.name} is not an array")
        a2 = session.choice(_same_sort(arrays, a1))
        bvs.append(session.bind(as_bit(app(Op.EQ, a1, a2))))
    return count
