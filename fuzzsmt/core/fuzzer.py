"""Benchmark assembly: one generation pipeline per logic family.

A pipeline declares the inputs, opens the formula, runs the theory layers
in a fixed order and leaves its formulas in ``self.bools``.
:meth:`BenchmarkGenerator.run` then composes them into a single root,
conjoins the division guards and emits the goal.
"""

from __future__ import annotations

import logging
import random
from itertools import zip_longest
from typing import Callable, Dict, List, Sequence, Tuple

from fuzzsmt.config.generation_config import GenerationConfig
from fuzzsmt.config.logics import Family
from fuzzsmt.constants import ELEMENT_SORT_NAME, FUZZER_LOGGER, INDEX_SORT_NAME
from fuzzsmt.core.bitvector import DivisionGuards, DivisionMode
from fuzzsmt.core.events import EventSink
from fuzzsmt.core.session import GenerationSession
from fuzzsmt.core.sorts import INT, REAL, ArraySort, Sort
from fuzzsmt.core.terms import Term, UninterpretedFunction, UninterpretedPredicate
from fuzzsmt.generator import arrays as array_ops
from fuzzsmt.generator.arithmetic import ArithmeticLayer, IntegerDifferenceLayer, RealDifferenceLayer
from fuzzsmt.generator.boolean import compose
from fuzzsmt.generator.bv import (
    BitVectorLayer,
    BitVectorPredicateLayer,
    bitvector_array_equalities,
    bitvector_reads,
    bitvector_writes,
)
from fuzzsmt.generator.comparison import ComparisonLayer, ComparisonMode
from fuzzsmt.generator.inputs import (
    declare_bitvector_arrays,
    declare_bitvector_functions,
    declare_bitvector_predicates,
    declare_bitvector_variables,
    declare_functions,
    declare_predicates,
    declare_sorts,
    declare_variables,
    bitvector_constants,
    nonzero_numeric_constants,
    numeric_constants,
)
from fuzzsmt.generator.ite import IteLayer
from fuzzsmt.generator.quantifier import quantified_formulas
from fuzzsmt.generator.uninterpreted import PredicateLayer, UninterpretedTermLayer

# ---------------------------------------------------------------------------
# Debug infrastructure, activated by ``-debug`` on the command line.
# ---------------------------------------------------------------------------
_FUZZER_DEBUG = False
_fuzzer_logger = logging.getLogger(FUZZER_LOGGER)


def enable_fuzzer_debug() -> None:
    """Turn on verbose debug logging for benchmark generation."""
    global _FUZZER_DEBUG
    _FUZZER_DEBUG = True
    _fuzzer_logger.setLevel(logging.DEBUG)
    if not _fuzzer_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s [DEBUG] %(message)s"))
        _fuzzer_logger.addHandler(handler)


def _debug_enabled() -> bool:
    return _FUZZER_DEBUG


def _debug_log(msg: str, *args) -> None:
    if _FUZZER_DEBUG:
        _fuzzer_logger.debug(msg, *args)


def _split(count: int) -> Tuple[int, int]:
    """Larger half first: ``_split(5) == (3, 2)``."""
    return (count >> 1) + (count & 1), count >> 1


class BenchmarkGenerator:
    """Generates one benchmark for *config* into *session*."""

    def __init__(self, config: GenerationConfig, session: GenerationSession) -> None:
        self.config = config
        self.session = session
        self.min_refs = config.min_refs
        self.bools: List[Term] = []
        self.guards = DivisionGuards()

    # --- Shared helpers ---

    def _max_bw(self) -> int:
        return self.config.bounds("bw")[1]

    def _functions(self, sorts: Sequence[Sort], key: str) -> List[UninterpretedFunction]:
        count = self.config.count(key)
        if count == 0:
            return []
        min_args, max_args = self.config.bounds("args")
        return declare_functions(self.session, sorts, count, min_args, max_args)

    def _predicates(self, sorts: Sequence[Sort], key: str) -> List[UninterpretedPredicate]:
        count = self.config.count(key)
        if count == 0:
            return []
        min_args, max_args = self.config.bounds("args")
        return declare_predicates(self.session, sorts, count, min_args, max_args)

    def _quantified(self, sort: Sort, funcs, preds, key: str, *, only_eq: bool) -> None:
        count = self.config.count(key)
        if count == 0 or not (funcs or preds):
            return
        min_vars, max_vars = self.config.bounds("qvars")
        min_nest, max_nest = self.config.bounds("qnestings")
        quantified_formulas(
            self.session, sort, funcs, preds, count,
            min_nestings=min_nest, max_nestings=max_nest,
            min_vars=min_vars, max_vars=max_vars,
            min_refs=self.min_refs, only_eq=only_eq,
        )

    def _bv_layer(self, pool: List[Term], funcs, preds, *, no_blowup: bool) -> None:
        BitVectorLayer(
            self.session, pool, self.min_refs,
            max_bw=self._max_bw(),
            div_mode=self.config.div_mode,
            guards=self.guards,
            funcs=funcs,
            preds=preds,
            no_blowup=no_blowup,
            wide_rotations=self.config.wide_rotations,
        ).run()

    def _compare(self, pool: List[Term], mode: ComparisonMode, preds=(), *, no_blowup: bool) -> None:
        ComparisonLayer(
            self.session, pool, self.bools, self.min_refs,
            mode=mode, preds=preds, no_blowup=no_blowup,
        ).run()

    def _ite(self, pool: List[Term], min_refs: int = 0) -> None:
        IteLayer(self.session, pool, self.bools, min_refs or self.min_refs).run()

    def _read_write(self, arrays: List[Term], indices: List[Term], elements: List[Term],
                    num_writes: int, num_reads: int) -> None:
        batches = zip_longest(
            array_ops.halves(num_writes), array_ops.halves(num_reads), fillvalue=0
        )
        for writes, reads in batches:
            array_ops.writes(self.session, arrays, indices, elements, writes)
            array_ops.reads(self.session, arrays, indices, elements, reads)

    # --- Bit-vectors ---

    def _bitvector(self) -> None:
        cfg, session = self.config, self.session
        min_bw, max_bw = cfg.bounds("bw")
        min_args, max_args = cfg.bounds("args")
        funcs = declare_bitvector_functions(session, cfg.count("funcs"), min_args, max_args, min_bw, max_bw)
        preds = declare_bitvector_predicates(session, cfg.count("preds"), min_args, max_args, min_bw, max_bw)
        bvs = declare_bitvector_variables(session, cfg.count("vars"), min_bw, max_bw)
        session.begin_formula()
        bvs.extend(bitvector_constants(session, cfg.count("consts"), min_bw, max_bw))
        self._bv_layer(bvs, funcs, preds, no_blowup=False)
        BitVectorPredicateLayer(session, bvs, self.bools, self.min_refs, preds).run()

    def _bitvector_array(self) -> None:
        cfg, session = self.config, self.session
        min_bw, max_bw = cfg.bounds("bw")
        min_args, max_args = cfg.bounds("args")
        funcs = declare_bitvector_functions(session, cfg.count("funcs"), min_args, max_args, min_bw, max_bw)
        preds = declare_bitvector_predicates(session, cfg.count("preds"), min_args, max_args, min_bw, max_bw)
        bvs = declare_bitvector_variables(session, cfg.count("vars"), min_bw, max_bw)
        arrays = declare_bitvector_arrays(session, cfg.count("arrays"), min_bw, max_bw)
        session.begin_formula()

        # half of the array equalities feed the bit-vector pool, half the formulas
        ext_bv, ext_bool = _split(cfg.count("ext"))

        bvs.extend(bitvector_constants(session, cfg.count("consts"), min_bw, max_bw))
        self._bv_layer(bvs, funcs, preds, no_blowup=True)
        batches = zip_longest(
            array_ops.halves(cfg.count("writes")),
            array_ops.halves(ext_bv),
            array_ops.halves(cfg.count("reads")),
            fillvalue=0,
        )
        for writes, equalities, reads in batches:
            bitvector_writes(session, arrays, bvs, writes)
            bitvector_array_equalities(session, arrays, bvs, equalities)
            bitvector_reads(session, arrays, bvs, reads)
        # reads and equalities become operands of bit-vector terms too
        self._bv_layer(bvs, funcs, preds, no_blowup=True)
        BitVectorPredicateLayer(session, bvs, self.bools, self.min_refs, preds).run()
        array_ops.array_equalities(session, arrays, self.bools, ext_bool)

    # --- Arrays over Index and Element ---

    def _array(self) -> None:
        cfg, session = self.config, self.session
        index = session.declare_sort(INDEX_SORT_NAME, logic_defined=True)
        element = session.declare_sort(ELEMENT_SORT_NAME, logic_defined=True)
        arrays = declare_variables(session, ArraySort(index, element), cfg.count("arrays"))
        indices = declare_variables(session, index, cfg.count("indices"))
        elements = declare_variables(session, element, cfg.count("elements"))
        session.begin_formula()

        first_writes, second_writes = _split(cfg.count("writes"))
        first_reads, second_reads = _split(cfg.count("reads"))
        with_arrays = cfg.profile.array_equalities

        self._read_write(arrays, indices, elements, first_writes, first_reads)
        if with_arrays:
            self._compare(arrays, ComparisonMode.EQ, no_blowup=False)
        self._compare(indices, ComparisonMode.EQ, no_blowup=False)
        self._compare(elements, ComparisonMode.EQ, no_blowup=False)
        self._ite(arrays)
        self._ite(indices)
        self._ite(elements)
        self._read_write(arrays, indices, elements, second_writes, second_reads)
        if with_arrays:
            self._compare(arrays, ComparisonMode.EQ, no_blowup=False)
        self._compare(indices, ComparisonMode.EQ, no_blowup=False)
        self._compare(elements, ComparisonMode.EQ, no_blowup=False)

    # --- Arrays over integers ---

    def _int_array(self) -> None:
        cfg, session = self.config, self.session
        array_sort = ArraySort(INT, INT)
        int_funcs = self._functions([INT], "funcs_int")
        array_funcs = self._functions([array_sort], "funcs_array")
        int_preds = self._predicates([INT], "preds_int")
        array_preds = self._predicates([array_sort], "preds_array")
        ints = declare_variables(session, INT, cfg.count("vars"))
        arrays = declare_variables(session, array_sort, cfg.count("arrays"))
        self._quantified(INT, int_funcs, int_preds, "qformulas_int", only_eq=False)
        self._quantified(array_sort, array_funcs, array_preds, "qformulas_array", only_eq=True)
        session.begin_formula()

        consts = numeric_constants(session, cfg.count("consts"), self._max_bw(), INT)
        first_writes, second_writes = _split(cfg.count("writes"))
        first_reads, second_reads = _split(cfg.count("reads"))
        array_mode = ComparisonMode.EQ if cfg.compare_arrays else ComparisonMode.OFF
        compare_arrays = cfg.compare_arrays or bool(array_preds)

        def int_layer() -> None:
            ArithmeticLayer(
                session, ints, consts, self.min_refs, sort=INT, linear=True,
                funcs=int_funcs, preds=int_preds, no_blowup=True,
            ).run()

        def comparisons() -> None:
            if compare_arrays:
                self._compare(arrays, array_mode, array_preds, no_blowup=True)
            self._compare(ints, ComparisonMode.FULL, int_preds, no_blowup=True)

        int_layer()
        self._read_write(arrays, ints, ints, first_writes, first_reads)
        if array_funcs:
            UninterpretedTermLayer(session, arrays, array_funcs, self.min_refs).run()
        comparisons()
        self._ite(arrays)
        self._ite(ints)
        self._read_write(arrays, ints, ints, second_writes, second_reads)
        if array_funcs:
            UninterpretedTermLayer(session, arrays, array_funcs, self.min_refs).run()
        int_layer()
        comparisons()

    # --- Arrays over integers and reals ---

    def _mixed_array(self) -> None:
        cfg, session = self.config, self.session
        array1 = ArraySort(INT, REAL)
        array2 = ArraySort(INT, array1)
        funcs = {
            sort: self._functions([sort], key)
            for sort, key in ((INT, "funcs_int"), (REAL, "funcs_real"),
                              (array1, "funcs_array1"), (array2, "funcs_array2"))
        }
        preds = {
            sort: self._predicates([sort], key)
            for sort, key in ((INT, "preds_int"), (REAL, "preds_real"),
                              (array1, "preds_array1"), (array2, "preds_array2"))
        }
        ints = declare_variables(session, INT, cfg.count("vars_int"))
        reals = declare_variables(session, REAL, cfg.count("vars_real"))
        arrays1 = declare_variables(session, array1, cfg.count("arrays1"))
        arrays2 = declare_variables(session, array2, cfg.count("arrays2"))
        self._quantified(INT, funcs[INT], preds[INT], "qformulas_int", only_eq=False)
        self._quantified(REAL, funcs[REAL], preds[REAL], "qformulas_real", only_eq=False)
        self._quantified(array1, funcs[array1], preds[array1], "qformulas_array1", only_eq=True)
        self._quantified(array2, funcs[array2], preds[array2], "qformulas_array2", only_eq=True)
        session.begin_formula()

        int_consts = numeric_constants(session, cfg.count("consts_int"), self._max_bw(), INT)
        real_consts = nonzero_numeric_constants(session, cfg.count("consts_real"), self._max_bw(), REAL)

        def int_layer() -> None:
            ArithmeticLayer(
                session, ints, int_consts, self.min_refs, sort=INT, linear=True,
                funcs=funcs[INT], preds=preds[INT], no_blowup=True,
            ).run()

        int_layer()
        ArithmeticLayer(
            session, reals, real_consts, self.min_refs, sort=REAL, linear=cfg.linear,
            funcs=funcs[REAL], preds=preds[REAL], no_blowup=False,
        ).run()

        w1 = _split(cfg.count("writes1"))
        r1 = _split(cfg.count("reads1"))
        w2 = _split(cfg.count("writes2"))
        r2 = _split(cfg.count("reads2"))

        def read_write(phase: int) -> None:
            batches = zip_longest(
                array_ops.halves(w1[phase]), array_ops.halves(r1[phase]),
                array_ops.halves(w2[phase]), array_ops.halves(r2[phase]),
                fillvalue=0,
            )
            for writes1, reads1, writes2, reads2 in batches:
                array_ops.writes(session, arrays1, ints, reals, writes1)
                array_ops.reads(session, arrays1, ints, reals, reads1)
                array_ops.writes(session, arrays2, ints, arrays1, writes2)
                array_ops.reads(session, arrays2, ints, arrays1, reads2)

        def uninterpreted_arrays() -> None:
            for pool, sort in ((arrays1, array1), (arrays2, array2)):
                if funcs[sort]:
                    UninterpretedTermLayer(session, pool, funcs[sort], self.min_refs).run()

        def comparisons() -> None:
            for pool, sort, compare in ((arrays1, array1, cfg.compare_arrays1),
                                        (arrays2, array2, cfg.compare_arrays2)):
                if compare or preds[sort]:
                    mode = ComparisonMode.EQ if compare else ComparisonMode.OFF
                    self._compare(pool, mode, preds[sort], no_blowup=True)
            self._compare(ints, ComparisonMode.FULL, preds[INT], no_blowup=True)
            self._compare(reals, ComparisonMode.FULL, preds[REAL], no_blowup=True)

        read_write(0)
        uninterpreted_arrays()
        comparisons()
        for pool in (arrays1, arrays2, ints, reals):
            self._ite(pool)
        read_write(1)
        uninterpreted_arrays()
        int_layer()
        comparisons()

    # --- Difference logic ---

    def _difference(self, sort: Sort) -> None:
        cfg, session = self.config, self.session
        variables = declare_variables(session, sort, cfg.count("vars"))
        funcs = self._functions([sort], "funcs")
        preds = self._predicates([sort], "preds")
        session.begin_formula()
        if sort == INT:
            consts = numeric_constants(session, cfg.count("consts"), self._max_bw(), INT)
            IntegerDifferenceLayer(session, variables, consts.terms, self.bools, self.min_refs).run()
        else:
            consts = nonzero_numeric_constants(session, cfg.count("consts"), self._max_bw(), REAL)
            RealDifferenceLayer(
                session, variables, consts, self.bools, self.min_refs, max_bw=self._max_bw()
            ).run()
        if not cfg.profile.uninterpreted:
            return
        if funcs:
            UninterpretedTermLayer(session, variables, funcs, self.min_refs).run()
        if preds:
            PredicateLayer(session, variables, self.bools, preds, self.min_refs).run()
        self._compare(variables, ComparisonMode.FULL, preds, no_blowup=True)

    def _integer_difference(self) -> None:
        self._difference(INT)

    def _real_difference(self) -> None:
        self._difference(REAL)

    # --- Integer and real arithmetic ---

    def _arithmetic(self, sort: Sort) -> None:
        cfg, session = self.config, self.session
        funcs = self._functions([sort], "funcs")
        preds = self._predicates([sort], "preds")
        nodes = declare_variables(session, sort, cfg.count("vars"))
        session.begin_formula()
        if sort == INT:
            consts = numeric_constants(session, cfg.count("consts"), self._max_bw(), INT)
        else:
            consts = nonzero_numeric_constants(session, cfg.count("consts"), self._max_bw(), REAL)
        ArithmeticLayer(
            session, nodes, consts, self.min_refs, sort=sort, linear=cfg.linear,
            funcs=funcs, preds=preds, no_blowup=False,
        ).run()
        self._compare(nodes, ComparisonMode.FULL, preds, no_blowup=False)
        self._ite(nodes)
        self._compare(nodes, ComparisonMode.FULL, preds, no_blowup=False)

    def _integer(self) -> None:
        self._arithmetic(INT)

    def _real(self) -> None:
        self._arithmetic(REAL)

    # --- Uninterpreted sorts ---

    def _uninterpreted(self) -> None:
        cfg, session = self.config, self.session
        sorts = declare_sorts(session, cfg.count("sorts"))
        nodes: List[Term] = []
        for sort in sorts:
            nodes.extend(declare_variables(session, sort, cfg.count("vars")))
        min_args, max_args = cfg.bounds("args")
        funcs = declare_functions(session, sorts, cfg.count("funcs"), min_args, max_args)
        preds = declare_predicates(session, sorts, cfg.count("preds"), min_args, max_args)
        session.begin_formula()
        UninterpretedTermLayer(session, nodes, funcs, self.min_refs).run()
        PredicateLayer(session, nodes, self.bools, preds, self.min_refs).run()
        self._ite(nodes, min_refs=1)
        PredicateLayer(session, nodes, self.bools, preds, self.min_refs).run()

    _PIPELINES: Dict[Family, Callable[["BenchmarkGenerator"], None]] = {
        Family.BV: _bitvector,
        Family.BV_ARRAY: _bitvector_array,
        Family.ARRAY: _array,
        Family.INT_ARRAY: _int_array,
        Family.MIXED_ARRAY: _mixed_array,
        Family.IDL: _integer_difference,
        Family.RDL: _real_difference,
        Family.INT: _integer,
        Family.REAL: _real,
        Family.UF: _uninterpreted,
    }

    # --- Assembly ---

    def run(self) -> Term:
        """Emit the whole benchmark and return its goal term."""
        cfg = self.config
        self.session.header(cfg.logic.value)
        _debug_log("generating %s benchmark", cfg.logic.value)
        if _debug_enabled():
            _debug_log("configuration %s", cfg.to_dict())
        self._PIPELINES[cfg.profile.family](self)
        _debug_log("%d formulas before composition, %d bindings so far",
                   len(self.bools), self.session.bound_count)

        root = compose(self.session, self.bools, cfg.bool_mode, cfg.cnf_factor)
        if cfg.profile.guarded_division and cfg.div_mode is DivisionMode.GUARDED and len(self.guards):
            _debug_log("conjoining guards for %d divisors", len(self.guards))
            root = self.guards.inject(self.session, root)
        self.session.goal(root)
        _debug_log("goal %s after %d bindings", root.name, self.session.bound_count)
        return root


def generate_benchmark(config: GenerationConfig, rng: random.Random, sink: EventSink) -> Term:
    """Generate one benchmark into *sink* with a fresh session."""
    return BenchmarkGenerator(config, GenerationSession(rng, sink)).run()
