"""Tests for the command-line entry point."""

import json
import logging

import pytest

from jscriptor.cli import main


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    """Run each test from an empty directory and undo main()'s logging setup."""
    monkeypatch.chdir(tmp_path)
    logger = logging.getLogger("jscriptor")
    saved = (logger.level, logger.propagate, list(logger.handlers))
    yield
    logger.setLevel(saved[0])
    logger.propagate = saved[1]
    logger.handlers[:] = saved[2]


def test_help(capsys):
    assert main(["--help"]) == 0
    assert "--format" in capsys.readouterr().out


@pytest.mark.parametrize("argv", [["--bogus"], ["--config"]])
def test_bad_flags(capsys, argv):
    assert main(argv) == 2
    assert capsys.readouterr().err.startswith("jscriptor: ")


def test_clean_file(capsys, write_file):
    write_file("ok.js", "const x = 1;\n")
    assert main(["ok.js"]) == 0
    assert "checked 1 file: no errors" in capsys.readouterr().err


def test_type_error(capsys, write_file):
    write_file("bad.js", 'const x = 5 + "a";\n')
    assert main(["bad.js"]) == 1
    err = capsys.readouterr().err
    assert "bad.js:1:11: error[E_BIN_ADD_MISMATCH]" in err
    assert "checked 1 file: 1 error" in err


def test_syntax_errors(capsys, write_file):
    write_file("a.js", "const = 1;\n")
    write_file("b.js", 'const s = "open\n')
    assert main(["a.js", "b.js"]) == 1
    err = capsys.readouterr().err
    assert "a.js:1:7: syntax error" in err
    assert "b.js:1:11: syntax error: unterminated string" in err


def test_format(capsys, write_file):
    write_file("f.js", "const   x=1")
    assert main(["--format", "f.js"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "const x = 1;\n"
    assert "checked" not in captured.err


def test_format_uses_configured_indent(capsys, write_file):
    write_file("jscriptor.yaml", "format:\n  indent_size: 4\n")
    write_file("f.js", "const f = () => { return 1; };")
    assert main(["--format", "f.js"]) == 0
    assert "\n    return 1;\n" in capsys.readouterr().out


def test_types(capsys, write_file):
    write_file("t.js", "const x = 1; const s = 'a'; const p = {a: true};")
    assert main(["--types", "t.js"]) == 0
    out = capsys.readouterr().out
    assert out == "x: Number\ns: String\np: {a: Boolean}\n"


def test_json(capsys, write_file):
    write_file("bad.js", "const x = 5 ? 1 : 2;")
    assert main(["--json", "bad.js"]) == 1
    captured = capsys.readouterr()
    report = json.loads(captured.out)
    assert len(report) == 1
    assert report[0]["code"] == "E_TERNARY_TEST_NOT_BOOL"
    assert report[0]["file"] == "bad.js"
    assert report[0]["position"] == 10
    assert "error[" not in captured.err


def test_missing_file(capsys):
    assert main(["absent.js"]) == 1
    assert "absent.js: No such file or directory" in capsys.readouterr().err


def test_no_input_files(capsys):
    assert main([]) == 2
    assert "no input files" in capsys.readouterr().err


def test_discovers_files_from_config(capsys, write_file):
    write_file("src/a.js", "const a = 1;")
    write_file("src/b.js", "const b = true;")
    assert main([]) == 0
    assert "checked 2 files: no errors" in capsys.readouterr().err


def test_config_error(capsys, write_file):
    write_file("jscriptor.yaml", "- not\n- a mapping\n")
    assert main(["x.js"]) == 2
    assert "config error" in capsys.readouterr().err


def test_verbose_logs_to_stderr(capsys, write_file):
    write_file("ok.js", "const x = 1;")
    assert main(["--verbose", "ok.js"]) == 0
    assert "DEBUG | jscriptor.cli | checking 1 file(s)" in capsys.readouterr().err
