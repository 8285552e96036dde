"""Usage text, built from the option tables so that it never drifts from them."""

from __future__ import annotations

from typing import Dict, List, Tuple

from fuzzsmt.config.defaults import LOGIC_OPTIONS, OPTIONS_BY_KEY, default_ranges
from fuzzsmt.config.logics import Family, Logic, logic_names, profile_of
from fuzzsmt.constants import PROGRAM_NAME, VERSION

_RULE = "*" * 80


def _banner_line(text: str) -> str:
    return f"*{' ' * 14}{text:<64}*"


BANNER = "\n".join([
    _RULE,
    _banner_line(f"FuzzSMT {VERSION}"),
    _banner_line("Fuzzing Tool for SMT-LIB 2.0 & SMT-LIB 1.2 Benchmarks"),
    _RULE,
])

GENERAL_OPTIONS: List[Tuple[str, str]] = [
    ("-h", "print usage information and exit"),
    ("-V", "print version and exit"),
    ("-smtlib1", "output smtlib1 format instead of smtlib2"),
    ("-seed <seed>", "initialize random number generator with <seed>"),
    ("-bulk-export <num>", "create <num> instances in the current directory"),
    ("-bulk-prefix <string>", "prepend <string> to the file names created"),
    ("-bool-random", "generate a random boolean layer (default)"),
    ("-bool-and", "use an n-ary AND for the boolean layer"),
    ("-bool-or", "use an n-ary OR for the boolean layer"),
    ("-bool-cnf <f>", "generate a boolean CNF layer with <f> * <literals> clauses"),
    ("-debug", "log generation progress to stderr"),
]


def _row(flag: str, text: str) -> str:
    return f"  {flag:<21}{text}"


def _wrap_names(names: List[str], width: int = 76) -> List[str]:
    lines, line = [], ""
    for name in names:
        piece = name if not line else f" {name}"
        if len(line) + len(piece) > width:
            lines.append(line)
            line = name
        else:
            line += piece
    if line:
        lines.append(line)
    return ["  " + text for text in lines]


def _logic_rows(logic: Logic) -> List[str]:
    ranges = default_ranges(logic)
    rows = []
    for key in LOGIC_OPTIONS[logic]:
        opt = OPTIONS_BY_KEY[key]
        low, high = ranges.get(key)
        noun = opt.noun
        rows.append(_row(f"-m{opt.flag} <n>", f"use min <n> {noun} (default {low})"))
        if logic is Logic.QF_UF and key in ("funcs", "preds"):
            continue
        rows.append(_row(f"-M{opt.flag} <n>", f"use max <n> {noun} (default {high})"))
    family = profile_of(logic).family
    if family in (Family.BV, Family.BV_ARRAY):
        rows.append(_row("-g", "do not guard divisions by zero"))
        rows.append(_row("-n", "do not generate divisions"))
    if family is Family.INT_ARRAY:
        rows.append(_row("-x", "generate equalities between arrays"))
    if family is Family.MIXED_ARRAY:
        rows.append(_row("-x1", "generate equalities between arrays of type array1"))
        rows.append(_row("-x2", "generate equalities between arrays of type array2"))
    rows.append(_row("-ref <refs>", f"min number of references per term (default {ranges.min_refs})"))
    return rows


def _sections() -> List[str]:
    """One section per group of logics with identical options and defaults."""
    groups: Dict[Tuple[str, ...], List[str]] = {}
    for name in logic_names():
        rows = tuple(_logic_rows(Logic(name)))
        groups.setdefault(rows, []).append(name)
    lines = []
    for rows, names in groups.items():
        if len(names) == 1:
            title = names[0]
        else:
            title = ", ".join(names[:-1]) + " and " + names[-1]
        lines.append("")
        lines.append(f"{title} options:")
        lines.extend(rows)
    return lines


def usage() -> str:
    lines = [
        BANNER,
        "",
        f"usage: {PROGRAM_NAME} <logic> [option...]",
        "",
        "  <logic> is one of the following:",
        *_wrap_names([f"{name}," for name in logic_names()[:-1]] + [f"{logic_names()[-1]}."]),
        "",
        "  general options:",
        "",
        *(_row(flag, text) for flag, text in GENERAL_OPTIONS),
        *_sections(),
    ]
    return "\n".join(lines) + "\n"


def version() -> str:
    return VERSION
