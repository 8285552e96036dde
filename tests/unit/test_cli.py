import logging

import pytest

from fuzzsmt.argument_parser.parser import parse_args
from fuzzsmt.argument_parser.usage import usage, version
from fuzzsmt.cli import main
from fuzzsmt.config.logics import Logic
from fuzzsmt.constants import FUZZER_LOGGER
from fuzzsmt.core import fuzzer
from fuzzsmt.core.bitvector import DivisionMode
from fuzzsmt.core.errors import ConfigurationError
from fuzzsmt.generator.boolean import CompositionMode
from fuzzsmt.utils.file_handlers import bulk_file_name


def test_no_arguments_prints_usage(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "FuzzSMT 0.3" in out
    assert "QF_BV" in out


def test_help_and_version(capsys):
    assert main(["-h"]) == 0
    assert capsys.readouterr().out.strip() == usage().strip()
    assert main(["-V"]) == 0
    out = capsys.readouterr().out
    assert out.strip() == version()
    assert "0.3" in out


def test_invalid_logic(capsys):
    assert main(["QF_XX"]) == 1
    assert "invalid logic: QF_XX" in capsys.readouterr().err


@pytest.mark.parametrize("argv,message", [
    (["QF_BV", "-mv", "0"], "invalid minimum number of variables"),
    (["QF_BV", "-Mv", "x"], "invalid maximum number of variables"),
    (["QF_BV", "-mv", "5", "-Mv", "2"], "minimum number of variables must be <= maximum"),
    (["QF_BV", "-foo"], "invalid option: -foo"),
    (["QF_BV", "-seed", "abc"], "invalid seed"),
    (["QF_BV", "-bool-cnf", "-1.5"], "invalid CNF factor"),
    (["QF_BV", "-bulk-export", "0"], "invalid bulk export amount"),
    (["QF_BV", "-mv"], "option argument missing"),
    (["QF_UF", "-mf", "0"], "number of uninterpreted functions must be > 0"),
    (["QF_UF", "-mp", "0"], "number of uninterpreted predicates must be > 0"),
    (["QF_BV", "-ref", "0"], "invalid minimum number of references"),
])
def test_invalid_options_exit_with_one(capsys, argv, message):
    assert main(argv) == 1
    captured = capsys.readouterr()
    assert message in captured.err
    assert captured.out == ""


def test_generates_to_stdout(capsys):
    assert main(["QF_BV", "-seed", "3"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("(set-info :source |fuzzsmt 0.3|)\n(set-logic QF_BV)\n")
    assert out.rstrip().endswith("(check-sat)")


def test_same_seed_same_output(capsys):
    main(["QF_AUFLIA", "-seed", "11"])
    first = capsys.readouterr().out
    main(["QF_AUFLIA", "-seed", "11"])
    assert capsys.readouterr().out == first


def test_smtlib1_output(capsys):
    assert main(["QF_LIA", "-seed", "2", "-smtlib1"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("(benchmark fuzzsmt0.3\n:logic QF_LIA\n")


def test_bulk_export_writes_numbered_files(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["QF_IDL", "-seed", "1", "-bulk-export", "3", "-bulk-prefix", "run"]) == 0
    assert capsys.readouterr().out == ""
    names = sorted(p.name for p in tmp_path.iterdir())
    assert names == ["run_file_0.smt2", "run_file_1.smt2", "run_file_2.smt2"]
    for name in names:
        text = (tmp_path / name).read_text()
        assert text.startswith("(set-info :source |fuzzsmt 0.3|)\n(set-logic QF_IDL)\n")


def test_bulk_export_smtlib1_suffix(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["QF_UF", "-bulk-export", "2", "-smtlib1"]) == 0
    assert sorted(p.name for p in tmp_path.iterdir()) == ["_file_0.smt", "_file_1.smt"]


def test_bulk_file_name():
    assert bulk_file_name("run", 0) == "run_file_0.smt2"
    assert bulk_file_name("x", 12, smtlib1=True) == "x_file_12.smt"
    with pytest.raises(ValueError):
        bulk_file_name("run", -1)


def test_parse_args_collects_bounds_and_switches():
    args = parse_args(["QF_BV", "-mv", "2", "-Mbw", "8", "-n", "-bool-cnf", "0.5", "-ref", "3"])
    assert args.logic == "QF_BV"
    assert args.bounds == {"vars": (2, None), "bw": (None, 8)}
    assert args.div_mode is DivisionMode.OFF
    assert args.bool_mode is CompositionMode.CNF
    assert args.cnf_factor == 0.5
    assert args.min_refs == 3

    ranges = args.option_ranges(Logic.QF_BV)
    assert ranges.get("vars") == (2, 5)
    assert ranges.get("bw") == (1, 8)
    assert ranges.min_refs == 3
    assert ranges.div_mode is DivisionMode.OFF


def test_parse_args_rejects_stray_positionals():
    with pytest.raises(ConfigurationError, match="invalid option: extra"):
        parse_args(["QF_BV", "extra"])


def test_last_composition_flag_wins():
    args = parse_args(["QF_LRA", "-bool-cnf", "2", "-bool-and"])
    assert args.bool_mode is CompositionMode.AND
    assert args.cnf_factor == 2.0


def test_debug_flag_enables_logging(capsys, monkeypatch):
    monkeypatch.setattr(fuzzer, "_FUZZER_DEBUG", False)
    logger = logging.getLogger(FUZZER_LOGGER)
    monkeypatch.setattr(logger, "handlers", [])
    monkeypatch.setattr(logger, "level", logging.NOTSET)
    assert main(["QF_NRA", "-seed", "5", "-debug"]) == 0
    assert fuzzer._debug_enabled()
    assert logger.handlers
    captured = capsys.readouterr()
    assert "(check-sat)" in captured.out
    assert "configuration" in captured.err
    assert "QF_NRA" in captured.err


def test_usage_lists_logic_options():
    text = usage()
    assert "-mbw <n>" in text
    assert "-x1" in text
    assert "-bool-cnf <f>" in text


def test_unwritable_bulk_export_reports_once(tmp_path, monkeypatch, capsys, caplog):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "blocked").write_text("")
    with caplog.at_level(logging.DEBUG):
        assert main(["QF_LIA", "-bulk-export", "1", "-bulk-prefix", "blocked/run"]) == 1
    err = capsys.readouterr().err
    assert err.count("cannot write benchmark") == 1
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]
