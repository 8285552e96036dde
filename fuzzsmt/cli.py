"""Command-line entry point: ``fuzzsmt <logic> [option...]``."""

from __future__ import annotations

import logging
import random
import sys
from typing import List, Optional

from fuzzsmt.argument_parser.parser import FuzzArgs, parse_args
from fuzzsmt.argument_parser.usage import usage, version
from fuzzsmt.config.generation_config import resolve, validate
from fuzzsmt.config.logics import Logic, parse_logic
from fuzzsmt.core.errors import ConfigurationError
from fuzzsmt.core.fuzzer import enable_fuzzer_debug, generate_benchmark
from fuzzsmt.printer.base import SMTPrinter
from fuzzsmt.printer.smtlib1 import SMTLib1Printer
from fuzzsmt.printer.smtlib2 import SMTLib2Printer
from fuzzsmt.utils.file_handlers import benchmark_writer, bulk_file_name, stdout_writer

log = logging.getLogger(__name__)


def _printer(out, smtlib1: bool) -> SMTPrinter:
    return SMTLib1Printer(out) if smtlib1 else SMTLib2Printer(out)


def run(args: FuzzArgs, logic: Logic) -> None:
    """Generate one benchmark to stdout, or ``-bulk-export`` files."""
    ranges = args.option_ranges(logic)
    validate(ranges, logic)
    rng = random.Random(args.seed)

    if args.bulk_export == 0:
        config = resolve(ranges, logic, rng, smtlib1=args.smtlib1)
        with stdout_writer() as out:
            generate_benchmark(config, rng, _printer(out, args.smtlib1))
        return

    # every file gets fresh counts, all drawn from the one stream
    for index in range(args.bulk_export):
        config = resolve(ranges, logic, rng, smtlib1=args.smtlib1)
        path = bulk_file_name(args.bulk_prefix, index, args.smtlib1)
        with benchmark_writer(path) as out:
            generate_benchmark(config, rng, _printer(out, args.smtlib1))
        log.debug("wrote %s", path)


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        print(usage())
        return 0
    try:
        args = parse_args(argv)
        if args.help:
            print(usage())
            return 0
        if args.version:
            print(version())
            return 0
        if args.logic is None:
            print(usage())
            return 0
        logic = parse_logic(args.logic)
        if args.debug:
            enable_fuzzer_debug()
        run(args, logic)
    except ConfigurationError as exc:
        print(exc, file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"cannot write benchmark: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
