"""Integer and real arithmetic layers, including difference logic."""

from __future__ import annotations

from typing import List, Sequence

from fuzzsmt.core.coverage import CoverageLayer
from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.expr import Expr, Numeral, app, apply
from fuzzsmt.core.ops import ARITHMETIC, RELATIONS, Op
from fuzzsmt.core.session import GenerationSession
from fuzzsmt.core.sorts import REAL, Sort, is_numeric
from fuzzsmt.core.terms import Term, UninterpretedFunction, UninterpretedPredicate
from fuzzsmt.generator.inputs import ConstantPool


def _maybe_negated(session: GenerationSession, expr: Expr) -> Expr:
    return expr if session.coin() else app(Op.UNMINUS, expr)


class ArithmeticLayer(CoverageLayer):
    """Grows a pool of Int or Real terms.

    In linear mode every product has a constant factor. Real pools also
    get division of a constant by a nonzero constant.
    """

    name = "arithmetic layer"

    def __init__(
        self,
        session: GenerationSession,
        pool: List[Term],
        consts: ConstantPool,
        min_refs: int,
        *,
        sort: Sort,
        linear: bool = True,
        funcs: Sequence[UninterpretedFunction] = (),
        preds: Sequence[UninterpretedPredicate] = (),
        no_blowup: bool = False,
    ) -> None:
        super().__init__(session, min_refs, no_blowup=no_blowup)
        if not is_numeric(sort):
            raise GenerationError(f"arithmetic over {sort!r}")
        if not pool:
            raise GenerationError("arithmetic layer needs a non-empty pool")
        if not consts.terms:
            raise GenerationError("arithmetic layer needs at least one constant")
        self.sort = sort
        self.pool = pool
        self.consts = consts
        self.linear = linear
        self.funcs = list(funcs)
        self.preds = list(preds)

        kinds = list(ARITHMETIC)
        if sort == REAL:
            kinds.append(Op.DIV)
        if self.funcs:
            kinds.append(Op.UFUNC)
        if self.preds:
            kinds.append(Op.UPRED)
        self.kinds = tuple(kinds)

        self.nodes = self.track(list(pool))
        self.pending_consts = self.track(consts.terms)
        self.pending_funcs = self.track(self.funcs)
        self.pending_preds = self.track(self.preds)

    def _choose_kind(self) -> Op:
        if not self.forcing:
            return self.session.choice(self.kinds)
        if self.pending_funcs:
            return Op.UFUNC
        if self.pending_preds:
            return Op.UPRED
        if self.pending_consts and not self.nodes:
            return Op.MUL
        return self.session.choice([k for k in self.kinds if k is not Op.DIV])

    def _numeral(self, value: int) -> Numeral:
        return Numeral(value, self.sort)

    def _arguments(self, symbol: UninterpretedFunction, n1: Term) -> List[Term]:
        args = [n1]
        for _ in symbol.operands[1:]:
            args.append(self.pick(self.pool))
        self.use(*args)
        return args

    def _symbol(self, candidates, pending):
        if pending and (self.forcing or self.session.coin()):
            return self.session.choice(pending.pending())
        return self.session.choice(candidates)

    def _product(self, n1: Term) -> Expr:
        if self.linear or self.forcing or self.session.coin():
            c = self.pick(self.consts.terms, self.pending_consts, bias=False)
            self.use(n1, c)
            variant = self.session.randrange(4)
            if variant == 0:
                return app(Op.MUL, n1, c)
            if variant == 1:
                return app(Op.MUL, c, n1)
            if variant == 2:
                return app(Op.MUL, n1, app(Op.UNMINUS, c))
            return app(Op.MUL, app(Op.UNMINUS, c), n1)
        n2 = self.pick(self.pool)
        self.use(n1, n2)
        return app(Op.MUL, n1, n2)

    def _quotient(self) -> Expr:
        c1 = self.pick(self.consts.terms, self.pending_consts, bias=self.no_blowup)
        c2 = self.session.choice(self.consts.nonzero(), "nonzero constant pool")
        self.use(c1, c2)
        return app(Op.DIV, c1, _maybe_negated(self.session, c2))

    def step(self) -> None:
        kind = self._choose_kind()
        if kind is Op.DIV:
            expr = self._quotient()
        else:
            n1 = self.pick(self.pool, self.nodes, bias=self.no_blowup)
            if kind in (Op.PLUS, Op.BINMINUS):
                n2 = self.pick(self.pool)
                self.use(n1, n2)
                expr = app(kind, n1, n2)
            elif kind is Op.MUL:
                expr = self._product(n1)
            elif kind is Op.UNMINUS:
                self.use(n1)
                expr = app(kind, n1)
            elif kind is Op.UFUNC:
                func = self._symbol(self.funcs, self.pending_funcs)
                self.use(func)
                expr = apply(func, *self._arguments(func, n1))
            else:
                pred = self._symbol(self.preds, self.pending_preds)
                self.use(pred)
                cond = apply(pred, *self._arguments(pred, n1))
                expr = app(Op.ITE, cond, self._numeral(1), self._numeral(0))
        self.pool.append(self.bind(expr))


class IntegerDifferenceLayer(CoverageLayer):
    """Atoms ``(op (- v1 v2) c)`` and ``(op v1 v2)`` over Int variables."""

    name = "integer difference layer"

    def __init__(
        self,
        session: GenerationSession,
        variables: Sequence[Term],
        consts: Sequence[Term],
        bools: List[Term],
        min_refs: int,
    ) -> None:
        super().__init__(session, min_refs)
        if not variables or not consts:
            raise GenerationError("difference logic needs variables and constants")
        self.variables = list(variables)
        self.consts = list(consts)
        self.bools = bools
        self.todo = self.track(self.variables + self.consts)

    def step(self) -> None:
        kind = self.session.choice(RELATIONS)
        v1 = self.pick(self.variables, self.todo, bias=False)
        v2 = self.pick(self.variables)
        c = self.pick(self.consts, self.todo, bias=False)
        if (self.forcing and c in self.todo) or self.session.coin():
            expr = app(kind, app(Op.BINMINUS, v1, v2), _maybe_negated(self.session, c))
            self.use(v1, v2, c)
        else:
            expr = app(kind, v1, v2)
            self.use(v1, v2)
        self.bools.append(self.bind(expr))


class RealDifferenceLayer(CoverageLayer):
    """Real difference atoms, including scaled and rational variants.

    The scaled form ``(- (+ v1 v1 ...) (+ v2 v1 ...))`` repeats each
    variable up to ``2**max_bw - 1`` extra times.
    """

    name = "real difference layer"

    def __init__(
        self,
        session: GenerationSession,
        variables: Sequence[Term],
        consts: ConstantPool,
        bools: List[Term],
        min_refs: int,
        *,
        max_bw: int,
    ) -> None:
        super().__init__(session, min_refs)
        if not variables or not consts.terms:
            raise GenerationError("difference logic needs variables and constants")
        self.variables = list(variables)
        self.consts = consts
        self.bools = bools
        self.max_bw = max_bw
        self.todo = self.track(self.variables + consts.terms)

    def _bound(self, c1: Term) -> Expr:
        if self.session.coin():
            self.use(c1)
            return _maybe_negated(self.session, c1)
        c2 = self.session.choice(self.consts.nonzero(), "nonzero constant pool")
        self.use(c1, c2)
        return app(Op.DIV, c1, _maybe_negated(self.session, c2))

    def step(self) -> None:
        kind = self.session.choice(RELATIONS)
        v1 = self.pick(self.variables, self.todo, bias=False)
        v2 = self.pick(self.variables)
        c1 = self.pick(self.consts.terms, self.todo, bias=False)
        need_const = self.forcing and c1 in self.todo
        self.use(v1, v2)

        if self.session.coin():
            if need_const or self.session.coin():
                expr = app(kind, app(Op.BINMINUS, v1, v2), self._bound(c1))
            else:
                expr = app(kind, v1, v2)
        else:
            extra = self.session.rng.getrandbits(self.max_bw)
            left = app(Op.PLUS, v1, v1, *([v1] * extra))
            right = app(Op.PLUS, v2, v1, *([v2] * extra))
            self.use(c1)
            expr = app(kind, app(Op.BINMINUS, left, right), _maybe_negated(self.session, c1))
        self.bools.append(self.bind(expr))
