"""
Command-line argument parsing for FuzzSMT.

The tool keeps the single-dash option style of the classic fuzzsmt
command line (``fuzzsmt QF_BV -mv 2 -Mv 4 -seed 7``). Parsed values land
in a :class:`FuzzArgs` dataclass; options that are not given stay
``None`` so that the per-logic defaults apply.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from fuzzsmt.config.defaults import RANGE_OPTIONS, OptionRanges, default_ranges
from fuzzsmt.config.logics import Logic
from fuzzsmt.core.bitvector import DivisionMode
from fuzzsmt.core.errors import ConfigurationError
from fuzzsmt.generator.boolean import CompositionMode


@dataclass
class FuzzArgs:
    """Container for parsed CLI arguments."""

    logic: Optional[str] = None
    help: bool = False
    version: bool = False
    seed: Optional[int] = None
    min_refs: Optional[int] = None
    div_mode: Optional[DivisionMode] = None
    compare_arrays: bool = False
    compare_arrays1: bool = False
    compare_arrays2: bool = False
    bool_mode: Optional[CompositionMode] = None
    cnf_factor: Optional[float] = None
    smtlib1: bool = False
    bulk_export: int = 0
    bulk_prefix: str = ""
    debug: bool = False
    # option key -> (minimum, maximum) as given; None where not given
    bounds: Dict[str, Tuple[Optional[int], Optional[int]]] = field(default_factory=dict)

    def option_ranges(self, logic: Logic) -> OptionRanges:
        """Per-logic defaults with every given option applied on top."""
        ranges = default_ranges(logic)
        for key, (low, high) in self.bounds.items():
            if low is not None:
                ranges.set_min(key, low)
            if high is not None:
                ranges.set_max(key, high)
        if self.min_refs is not None:
            ranges.min_refs = self.min_refs
        if self.div_mode is not None:
            ranges.div_mode = self.div_mode
        if self.bool_mode is not None:
            ranges.bool_mode = self.bool_mode
        if self.cnf_factor is not None:
            ranges.cnf_factor = self.cnf_factor
        ranges.compare_arrays = self.compare_arrays
        ranges.compare_arrays1 = self.compare_arrays1
        ranges.compare_arrays2 = self.compare_arrays2
        return ranges


class _FuzzArgumentParser(argparse.ArgumentParser):
    """Reports problems as :class:`ConfigurationError` instead of exiting."""

    def error(self, message: str):
        if "expected one argument" in message:
            raise ConfigurationError("option argument missing")
        raise ConfigurationError(message)


def _number(convert: Callable[[str], Any], min_val, message: str) -> Callable[[str], Any]:
    def parse(text: str):
        try:
            value = convert(text)
        except ValueError:
            raise ConfigurationError(message) from None
        if value < min_val:
            raise ConfigurationError(message)
        return value

    return parse


class _CnfAction(argparse.Action):
    """``-bool-cnf <f>`` selects CNF composition and sets its factor."""

    def __call__(self, parser, namespace, values, option_string=None):
        namespace.cnf_factor = values
        namespace.bool_mode = CompositionMode.CNF


def _build_parser() -> argparse.ArgumentParser:
    """Construct the ``ArgumentParser`` (no side-effects)."""
    parser = _FuzzArgumentParser(prog="fuzzsmt", add_help=False, allow_abbrev=False)
    parser.add_argument("logic", nargs="?", default=None)
    parser.add_argument("-h", dest="help", action="store_true")
    parser.add_argument("-V", dest="version", action="store_true")
    parser.add_argument("-seed", type=_number(int, 0, "invalid seed"), default=None)
    parser.add_argument(
        "-ref", dest="min_refs",
        type=_number(int, 1, "invalid minimum number of references"), default=None,
    )
    parser.add_argument("-g", dest="div_mode", action="store_const", const=DivisionMode.FULL)
    parser.add_argument("-n", dest="div_mode", action="store_const", const=DivisionMode.OFF)
    parser.add_argument("-x", dest="compare_arrays", action="store_true")
    parser.add_argument("-x1", dest="compare_arrays1", action="store_true")
    parser.add_argument("-x2", dest="compare_arrays2", action="store_true")
    parser.add_argument("-bool-random", dest="bool_mode", action="store_const", const=CompositionMode.RANDOM)
    parser.add_argument("-bool-and", dest="bool_mode", action="store_const", const=CompositionMode.AND)
    parser.add_argument("-bool-or", dest="bool_mode", action="store_const", const=CompositionMode.OR)
    parser.add_argument(
        "-bool-cnf", action=_CnfAction, dest="cnf_factor",
        type=_number(float, 0.0, "invalid CNF factor"),
    )
    parser.add_argument("-smtlib1", action="store_true")
    parser.add_argument(
        "-bulk-export", dest="bulk_export",
        type=_number(int, 1, "invalid bulk export amount"), default=0,
    )
    parser.add_argument("-bulk-prefix", dest="bulk_prefix", default="")
    parser.add_argument("-debug", action="store_true")
    for opt in RANGE_OPTIONS:
        parser.add_argument(
            f"-m{opt.flag}", dest=f"min_{opt.key}",
            type=_number(int, opt.min_val, opt.invalid("minimum")), default=None,
        )
        parser.add_argument(
            f"-M{opt.flag}", dest=f"max_{opt.key}",
            type=_number(int, opt.min_val, opt.invalid("maximum")), default=None,
        )
    return parser


def parse_args(argv=None) -> FuzzArgs:
    """Parse *argv* (or ``sys.argv``) and return a :class:`FuzzArgs`.

    Raises:
        ConfigurationError: on an unknown option or an invalid value.
    """
    ns, extras = _build_parser().parse_known_args(argv)
    if extras:
        raise ConfigurationError(f"invalid option: {extras[0]}")
    bounds = {}
    for opt in RANGE_OPTIONS:
        low = getattr(ns, f"min_{opt.key}")
        high = getattr(ns, f"max_{opt.key}")
        if low is not None or high is not None:
            bounds[opt.key] = (low, high)
    return FuzzArgs(
        logic=ns.logic,
        help=ns.help,
        version=ns.version,
        seed=ns.seed,
        min_refs=ns.min_refs,
        div_mode=ns.div_mode,
        compare_arrays=ns.compare_arrays,
        compare_arrays1=ns.compare_arrays1,
        compare_arrays2=ns.compare_arrays2,
        bool_mode=ns.bool_mode,
        cnf_factor=ns.cnf_factor,
        smtlib1=ns.smtlib1,
        bulk_export=ns.bulk_export,
        bulk_prefix=ns.bulk_prefix,
        debug=ns.debug,
        bounds=bounds,
    )
