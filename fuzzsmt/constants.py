"""
Global constants used across FuzzSMT.

Guidelines
----------
* Every constant is typed and immutable (``Final`` / ``frozenset``).
* User-tunable quantities belong in the per-logic option tables
  (:mod:`fuzzsmt.config.defaults`), not here.
* Values here only shape *how* random choices are made, never *what*
  sort a generated term has.
"""

from __future__ import annotations

from typing import Final, FrozenSet

# -- Identity ----------------------------------------------------------------

VERSION: Final[str] = "0.3"
PROGRAM_NAME: Final[str] = "fuzzsmt"

# -- Generation heuristics ---------------------------------------------------

# Probability of drawing an operand from the unsatisfied subset of a
# coverage map instead of from the whole pool.
NO_BLOWUP_BIAS: Final[float] = 0.5

# Consecutive iterations without coverage progress before a layer starts
# forcing pending items into every step.
STALL_LIMIT: Final[int] = 64

# SMT-LIB 2 rotates modulo the width, so amounts may exceed it.
ROTATE_OVERSHOOT: Final[int] = 2

CNF_CLAUSE_SIZE: Final[int] = 3
MIN_CNF_CLAUSES: Final[int] = 2

# -- Output ------------------------------------------------------------------

SMTLIB2_SUFFIX: Final[str] = ".smt2"
SMTLIB1_SUFFIX: Final[str] = ".smt"
DEFAULT_BULK_PREFIX: Final[str] = ""
BULK_FILE_INFIX: Final[str] = "_file_"
STATUS: Final[str] = "unknown"

# -- Logger names ------------------------------------------------------------

FUZZER_LOGGER: Final[str] = "fuzzsmt.fuzzer"

# -- Sort names fixed by the array logics ------------------------------------

INDEX_SORT_NAME: Final[str] = "Index"
ELEMENT_SORT_NAME: Final[str] = "Element"

ARRAY_LOGIC_SORTS: FrozenSet[str] = frozenset({INDEX_SORT_NAME, ELEMENT_SORT_NAME})
