"""Per-logic option tables.

Every size parameter is a ``[min, max]`` range that is resolved to a
concrete count once per benchmark. :data:`RANGE_OPTIONS` lists them with
their command-line flag (``-m<flag>`` / ``-M<flag>``); :data:`LOGIC_OPTIONS`
says which of them a logic reads, and :func:`default_ranges` returns the
defaults the command line starts from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from fuzzsmt.config.logics import Logic
from fuzzsmt.core.bitvector import DivisionMode
from fuzzsmt.core.errors import ConfigurationError
from fuzzsmt.generator.boolean import CompositionMode


@dataclass(frozen=True)
class RangeOption:
    key: str
    flag: str
    noun: str
    min_val: int = 1
    counted: bool = True  # "number of <noun>" in messages
    range_noun: Optional[str] = None

    def invalid(self, bound: str) -> str:
        what = f"number of {self.noun}" if self.counted else self.noun
        return f"invalid {bound} {what}"

    def reversed_range(self) -> str:
        return f"minimum number of {self.range_noun or self.noun} must be <= maximum"


RANGE_OPTIONS: Tuple[RangeOption, ...] = (
    RangeOption("vars", "v", "variables"),
    RangeOption("vars_int", "vi", "integer variables"),
    RangeOption("vars_real", "vr", "real variables"),
    RangeOption("consts", "c", "constants"),
    RangeOption("consts_int", "ci", "integer constants"),
    RangeOption("consts_real", "cr", "integer constants in real context"),
    RangeOption("sorts", "s", "sorts"),
    RangeOption("funcs", "f", "uninterpreted functions", min_val=0),
    RangeOption("funcs_int", "fi", "uninterpreted integer functions", min_val=0),
    RangeOption("funcs_real", "fr", "uninterpreted real functions", min_val=0),
    RangeOption("funcs_array", "far", "uninterpreted array functions", min_val=0),
    RangeOption("funcs_array1", "far1", "uninterpreted array1 functions", min_val=0),
    RangeOption("funcs_array2", "far2", "uninterpreted array2 functions", min_val=0),
    RangeOption("preds", "p", "uninterpreted predicates", min_val=0),
    RangeOption("preds_int", "pi", "uninterpreted integer predicates", min_val=0),
    RangeOption("preds_real", "pr", "uninterpreted real predicates", min_val=0),
    RangeOption("preds_array", "par", "uninterpreted array predicates", min_val=0),
    RangeOption("preds_array1", "par1", "uninterpreted array1 predicates", min_val=0),
    RangeOption("preds_array2", "par2", "uninterpreted array2 predicates", min_val=0),
    RangeOption("args", "a", "arguments"),
    RangeOption("qformulas_int", "qfi", "quantified formulas over integers", min_val=0),
    RangeOption("qformulas_real", "qfr", "quantified formulas over reals", min_val=0),
    RangeOption("qformulas_array", "qfar", "quantified formulas over arrays", min_val=0),
    RangeOption("qformulas_array1", "qfar1", "quantified formulas over arrays of type array1", min_val=0),
    RangeOption("qformulas_array2", "qfar2", "quantified formulas over arrays of type array2", min_val=0),
    RangeOption("qvars", "qv", "quantified variables"),
    RangeOption("qnestings", "qn", "quantifier nestings", min_val=0),
    RangeOption("arrays", "ar", "arrays"),
    RangeOption("arrays1", "ar1", "arrays of type array1"),
    RangeOption("arrays2", "ar2", "arrays of type array2"),
    RangeOption("indices", "i", "indices"),
    RangeOption("elements", "e", "elements"),
    RangeOption("reads", "r", "reads"),
    RangeOption("reads1", "r1", "reads on arrays of type array1"),
    RangeOption("reads2", "r2", "reads on arrays of type array2"),
    RangeOption("writes", "w", "writes", min_val=0),
    RangeOption("writes1", "w1", "writes on arrays of type array1", min_val=0),
    RangeOption("writes2", "w2", "writes on arrays of type array2", min_val=0),
    RangeOption("ext", "xn", "array equalities", min_val=0),
    RangeOption("bw", "bw", "bit-width", counted=False, range_noun="bits"),
)

OPTIONS_BY_KEY: Dict[str, RangeOption] = {opt.key: opt for opt in RANGE_OPTIONS}

# Ranges that are passed on as ranges instead of being drawn once.
PER_USE_RANGES = frozenset({"args", "qvars", "qnestings", "bw"})


# ---------------------------------------------------------------------------
# Which options each logic reads
# ---------------------------------------------------------------------------

_UF_EXTRAS = ("funcs", "preds", "args")
_MIXED_ARRAY_KEYS = (
    "vars_int", "vars_real", "consts_int", "consts_real",
    "funcs_int", "funcs_real", "funcs_array1", "funcs_array2",
    "preds_int", "preds_real", "preds_array1", "preds_array2", "args",
    "qformulas_int", "qformulas_real", "qformulas_array1", "qformulas_array2",
    "qvars", "qnestings",
    "arrays1", "arrays2", "reads1", "reads2", "writes1", "writes2", "bw",
)
_INT_ARRAY_KEYS = (
    "vars", "consts", "funcs_int", "funcs_array", "preds_int", "preds_array", "args",
    "arrays", "reads", "writes", "bw",
)
_QUANTIFIER_KEYS = ("qformulas_int", "qformulas_array", "qvars", "qnestings")

LOGIC_OPTIONS: Dict[Logic, Tuple[str, ...]] = {
    Logic.QF_A: ("arrays", "indices", "elements", "reads", "writes"),
    Logic.QF_AX: ("arrays", "indices", "elements", "reads", "writes"),
    Logic.QF_ABV: ("vars", "consts", "arrays", "reads", "writes", "ext", "bw", "args"),
    Logic.QF_AUFBV: ("vars", "consts", "arrays", "reads", "writes", "ext", "bw") + _UF_EXTRAS,
    Logic.QF_AUFLIA: _INT_ARRAY_KEYS,
    Logic.AUFLIA: _INT_ARRAY_KEYS + _QUANTIFIER_KEYS,
    Logic.AUFLIRA: _MIXED_ARRAY_KEYS,
    Logic.AUFNIRA: _MIXED_ARRAY_KEYS,
    Logic.QF_BV: ("vars", "consts", "bw"),
    Logic.QF_UFBV: ("vars", "consts", "bw") + _UF_EXTRAS,
    Logic.QF_IDL: ("vars", "consts", "bw"),
    Logic.QF_UFIDL: ("vars", "consts", "bw") + _UF_EXTRAS,
    Logic.QF_RDL: ("vars", "consts", "bw"),
    Logic.QF_UFRDL: ("vars", "consts", "bw") + _UF_EXTRAS,
    Logic.QF_LIA: ("vars", "consts", "bw"),
    Logic.QF_UFLIA: ("vars", "consts", "bw") + _UF_EXTRAS,
    Logic.QF_NIA: ("vars", "consts", "bw"),
    Logic.QF_UFNIA: ("vars", "consts", "bw") + _UF_EXTRAS,
    Logic.QF_LRA: ("vars", "consts", "bw"),
    Logic.QF_UFLRA: ("vars", "consts", "bw") + _UF_EXTRAS,
    Logic.LRA: ("vars", "consts", "bw"),
    Logic.QF_NRA: ("vars", "consts", "bw"),
    Logic.QF_UFNRA: ("vars", "consts", "bw") + _UF_EXTRAS,
    Logic.QF_UF: ("vars", "sorts") + _UF_EXTRAS,
}


# ---------------------------------------------------------------------------
# Default ranges
# ---------------------------------------------------------------------------

_BASE: Dict[str, Tuple[int, int]] = {
    "vars": (1, 1), "vars_int": (1, 1), "vars_real": (1, 1),
    "consts": (1, 1), "consts_int": (1, 1), "consts_real": (1, 1),
    "sorts": (1, 1),
    "funcs": (0, 0), "funcs_int": (0, 0), "funcs_real": (0, 0),
    "funcs_array": (0, 0), "funcs_array1": (0, 0), "funcs_array2": (0, 0),
    "preds": (0, 0), "preds_int": (0, 0), "preds_real": (0, 0),
    "preds_array": (0, 0), "preds_array1": (0, 0), "preds_array2": (0, 0),
    "args": (1, 3),
    "qformulas_int": (0, 0), "qformulas_real": (0, 0), "qformulas_array": (0, 0),
    "qformulas_array1": (0, 0), "qformulas_array2": (0, 0),
    "qvars": (1, 1), "qnestings": (0, 0),
    "arrays": (1, 1), "arrays1": (1, 1), "arrays2": (1, 1),
    "indices": (1, 1), "elements": (1, 1),
    "reads": (1, 1), "reads1": (1, 1), "reads2": (1, 1),
    "writes": (0, 0), "writes1": (0, 0), "writes2": (0, 0),
    "ext": (0, 0),
    "bw": (1, 1),
}

_UF_DEFAULTS = {"funcs": (1, 2), "preds": (1, 2), "args": (1, 3)}
_BV_DEFAULTS = {"vars": (1, 5), "consts": (1, 2), "bw": (1, 16)}
_BV_ARRAY_DEFAULTS = {**_BV_DEFAULTS, "arrays": (1, 3), "reads": (1, 5), "writes": (0, 5)}
_DL_DEFAULTS = {"vars": (1, 8), "consts": (1, 6), "bw": (1, 4)}
_ARITH_DEFAULTS = {"vars": (1, 3), "consts": (1, 3), "bw": (1, 4)}
_ARRAY_DEFAULTS = {
    "arrays": (1, 3), "indices": (1, 5), "elements": (1, 5), "reads": (1, 10), "writes": (0, 10),
}
_INT_ARRAY_DEFAULTS = {
    "vars": (1, 3), "consts": (1, 3), "arrays": (1, 3), "reads": (1, 5), "writes": (0, 5),
    "funcs_int": (1, 1), "funcs_array": (1, 1), "preds_int": (1, 1), "preds_array": (1, 1),
    "bw": (1, 4),
}
_QUANTIFIER_DEFAULTS = {"qvars": (1, 3), "qnestings": (0, 1)}
_MIXED_ARRAY_DEFAULTS = {
    "vars_int": (1, 2), "vars_real": (1, 2), "consts_int": (1, 3), "consts_real": (1, 3),
    "arrays1": (1, 2), "arrays2": (1, 2), "reads1": (1, 4), "reads2": (1, 4),
    "writes1": (0, 3), "writes2": (0, 3),
    "funcs_int": (1, 1), "funcs_real": (1, 1), "funcs_array1": (1, 1), "funcs_array2": (1, 1),
    "preds_int": (1, 1), "preds_real": (1, 1), "preds_array1": (1, 1), "preds_array2": (1, 1),
    "qformulas_int": (1, 1), "qformulas_real": (1, 1),
    "bw": (1, 4),
    **_QUANTIFIER_DEFAULTS,
}

_OVERRIDES: Dict[Logic, Dict[str, Tuple[int, int]]] = {
    Logic.QF_A: _ARRAY_DEFAULTS,
    Logic.QF_AX: _ARRAY_DEFAULTS,
    Logic.QF_ABV: _BV_ARRAY_DEFAULTS,
    Logic.QF_AUFBV: {**_BV_ARRAY_DEFAULTS, "funcs": (0, 2), "preds": (0, 2)},
    Logic.QF_AUFLIA: _INT_ARRAY_DEFAULTS,
    Logic.AUFLIA: {**_INT_ARRAY_DEFAULTS, "qformulas_int": (1, 1), **_QUANTIFIER_DEFAULTS},
    Logic.AUFLIRA: _MIXED_ARRAY_DEFAULTS,
    Logic.AUFNIRA: _MIXED_ARRAY_DEFAULTS,
    Logic.QF_BV: _BV_DEFAULTS,
    Logic.QF_UFBV: {**_BV_DEFAULTS, **_UF_DEFAULTS},
    Logic.QF_IDL: _DL_DEFAULTS,
    Logic.QF_UFIDL: {**_DL_DEFAULTS, **_UF_DEFAULTS},
    Logic.QF_RDL: _DL_DEFAULTS,
    Logic.QF_UFRDL: {**_DL_DEFAULTS, **_UF_DEFAULTS},
    Logic.QF_LIA: _ARITH_DEFAULTS,
    Logic.QF_UFLIA: {**_ARITH_DEFAULTS, **_UF_DEFAULTS},
    Logic.QF_NIA: _ARITH_DEFAULTS,
    Logic.QF_UFNIA: {**_ARITH_DEFAULTS, **_UF_DEFAULTS},
    Logic.QF_LRA: _ARITH_DEFAULTS,
    Logic.QF_UFLRA: {**_ARITH_DEFAULTS, **_UF_DEFAULTS},
    Logic.LRA: _ARITH_DEFAULTS,
    Logic.QF_NRA: _ARITH_DEFAULTS,
    Logic.QF_UFNRA: {**_ARITH_DEFAULTS, **_UF_DEFAULTS},
    # QF_UF reads only the minimum of funcs and preds
    Logic.QF_UF: {"vars": (1, 3), "sorts": (1, 3), "funcs": (5, 5), "preds": (5, 5), "args": (1, 3)},
}

# Difference logic needs more references to produce interesting atoms.
_MIN_REFS: Dict[Logic, int] = {
    Logic.QF_IDL: 5, Logic.QF_UFIDL: 5, Logic.QF_RDL: 5, Logic.QF_UFRDL: 5,
}


@dataclass
class OptionRanges:
    """Unresolved options: ranges and scalar switches as set on the command line."""

    bounds: Dict[str, Tuple[int, int]] = field(default_factory=lambda: dict(_BASE))
    min_refs: int = 1
    div_mode: DivisionMode = DivisionMode.GUARDED
    bool_mode: CompositionMode = CompositionMode.RANDOM
    cnf_factor: float = 1.0
    compare_arrays: bool = False
    compare_arrays1: bool = False
    compare_arrays2: bool = False

    def get(self, key: str) -> Tuple[int, int]:
        if key not in OPTIONS_BY_KEY:
            raise ConfigurationError(f"unknown option: {key}")
        return self.bounds[key]

    def set_min(self, key: str, value: int) -> None:
        _, high = self.get(key)
        self.bounds[key] = (value, high)

    def set_max(self, key: str, value: int) -> None:
        low, _ = self.get(key)
        self.bounds[key] = (low, value)


def default_ranges(logic: Logic) -> OptionRanges:
    bounds = dict(_BASE)
    bounds.update(_OVERRIDES[logic])
    return OptionRanges(bounds=bounds, min_refs=_MIN_REFS.get(logic, 1))
