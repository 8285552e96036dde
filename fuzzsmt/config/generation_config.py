"""Resolution of option ranges into the concrete configuration of one benchmark."""

from __future__ import annotations

import logging
import random
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Tuple

from fuzzsmt.config.defaults import LOGIC_OPTIONS, OPTIONS_BY_KEY, PER_USE_RANGES, OptionRanges
from fuzzsmt.config.logics import Family, Logic, LogicProfile, profile_of
from fuzzsmt.core.bitvector import DivisionMode
from fuzzsmt.core.errors import ConfigurationError
from fuzzsmt.generator.boolean import CompositionMode

log = logging.getLogger(__name__)

# quantified-formula option -> (function option, predicate option)
_QUANTIFIED_SYMBOLS = {
    "qformulas_int": ("funcs_int", "preds_int"),
    "qformulas_real": ("funcs_real", "preds_real"),
    "qformulas_array": ("funcs_array", "preds_array"),
    "qformulas_array1": ("funcs_array1", "preds_array1"),
    "qformulas_array2": ("funcs_array2", "preds_array2"),
}


@dataclass(frozen=True)
class GenerationConfig:
    """Everything one benchmark is generated from.

    ``counts`` holds the drawn quantities; ``ranges`` the options that stay
    ranges (argument counts, quantified variables, nesting and bit-width).
    """

    logic: Logic
    counts: Dict[str, int] = field(default_factory=dict)
    ranges: Dict[str, Tuple[int, int]] = field(default_factory=dict)
    min_refs: int = 1
    div_mode: DivisionMode = DivisionMode.GUARDED
    linear: bool = True
    bool_mode: CompositionMode = CompositionMode.RANDOM
    cnf_factor: float = 1.0
    compare_arrays: bool = False
    compare_arrays1: bool = False
    compare_arrays2: bool = False
    smtlib1: bool = False

    @property
    def profile(self) -> LogicProfile:
        return profile_of(self.logic)

    @property
    def wide_rotations(self) -> bool:
        # SMT-LIB 1.2 requires rotation amounts below the width
        return not self.smtlib1

    def count(self, key: str) -> int:
        return self.counts.get(key, 0)

    def bounds(self, key: str) -> Tuple[int, int]:
        return self.ranges[key]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def validate(ranges: OptionRanges, logic: Logic) -> None:
    """Reject inconsistent options for *logic* with a :class:`ConfigurationError`."""
    if ranges.min_refs < 1:
        raise ConfigurationError("invalid minimum number of references")
    if ranges.cnf_factor < 0:
        raise ConfigurationError("invalid CNF factor")
    keys = LOGIC_OPTIONS[logic]
    for key in keys:
        opt = OPTIONS_BY_KEY[key]
        low, high = ranges.get(key)
        if low < opt.min_val:
            raise ConfigurationError(opt.invalid("minimum"))
        if high < opt.min_val:
            raise ConfigurationError(opt.invalid("maximum"))
        # QF_UF only reads the minimum number of functions and predicates
        if logic is Logic.QF_UF and key in ("funcs", "preds"):
            continue
        if high < low:
            raise ConfigurationError(opt.reversed_range())
    if logic is Logic.QF_UF:
        if ranges.get("funcs")[0] == 0:
            raise ConfigurationError("number of uninterpreted functions must be > 0")
        if ranges.get("preds")[0] == 0:
            raise ConfigurationError("number of uninterpreted predicates must be > 0")


def resolve(
    ranges: OptionRanges,
    logic: Logic,
    rng: random.Random,
    *,
    smtlib1: bool = False,
) -> GenerationConfig:
    """Validate *ranges* and draw the concrete counts for one benchmark.

    Counts are drawn from *rng* in a fixed order, so a fixed seed
    gives the same configuration.
    """
    validate(ranges, logic)
    profile = profile_of(logic)
    counts: Dict[str, int] = {}
    per_use = {key: ranges.get(key) for key in sorted(PER_USE_RANGES)}
    for key in LOGIC_OPTIONS[logic]:
        low, high = ranges.get(key)
        if key in PER_USE_RANGES:
            continue
        if logic is Logic.QF_UF and key in ("funcs", "preds"):
            counts[key] = low
        else:
            counts[key] = rng.randint(low, high)

    for qkey, (fkey, pkey) in _QUANTIFIED_SYMBOLS.items():
        if counts.get(qkey, 0) > 0 and counts.get(fkey, 0) == 0 and counts.get(pkey, 0) == 0:
            log.debug("dropping %d %s: no symbols to quantify over", counts[qkey], qkey)
            counts[qkey] = 0

    config = GenerationConfig(
        logic=logic,
        counts=counts,
        ranges=per_use,
        min_refs=ranges.min_refs,
        div_mode=ranges.div_mode if profile.family in (Family.BV, Family.BV_ARRAY) else DivisionMode.OFF,
        linear=profile.linear,
        bool_mode=ranges.bool_mode,
        cnf_factor=ranges.cnf_factor,
        compare_arrays=ranges.compare_arrays,
        compare_arrays1=ranges.compare_arrays1,
        compare_arrays2=ranges.compare_arrays2,
        smtlib1=smtlib1,
    )
    log.debug("resolved %s: %s", logic.value, counts)
    return config
