"""
Output targets for generated benchmarks.

A benchmark goes either to an already open stream (stdout) or, in bulk
mode, to one file per benchmark named after its position in the batch.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, TextIO

from fuzzsmt.constants import BULK_FILE_INFIX, SMTLIB1_SUFFIX, SMTLIB2_SUFFIX


def bulk_file_name(prefix: str, index: int, smtlib1: bool = False) -> str:
    """Return ``<prefix>_file_<index>.smt2`` (``.smt`` for SMT-LIB 1.2)."""
    if index < 0:
        raise ValueError("file index must be non-negative")
    suffix = SMTLIB1_SUFFIX if smtlib1 else SMTLIB2_SUFFIX
    return f"{prefix}{BULK_FILE_INFIX}{index}{suffix}"


@contextmanager
def benchmark_writer(path: str) -> Iterator[TextIO]:
    """Open *path* for writing one benchmark; the file is closed on exit."""
    target = Path(path)
    if target.parent != Path("."):
        target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as handle:
        yield handle


@contextmanager
def stdout_writer() -> Iterator[TextIO]:
    """Yield stdout and flush it afterwards without closing it."""
    try:
        yield sys.stdout
    finally:
        sys.stdout.flush()
