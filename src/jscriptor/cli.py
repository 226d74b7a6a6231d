"""JScriptor CLI: type-check or format source files."""

from __future__ import annotations

import json
import logging
import logging.config
import sys
from pathlib import Path

from . import parse
from .ast import ConstDeclaration, Program
from .check import CheckerContractError, CheckResult, type_check
from .config import Config, ConfigError, load_config, resolve_files
from .emit import to_source
from .report import render, render_parse_error, summary
from .tokens import TokenizeError

logger = logging.getLogger(__name__)

USAGE: str = """\
jscriptor [OPTIONS] [FILE ...]

Type-check JScriptor source files. With no FILE, check the files selected by
the include/exclude patterns of the configuration.

Options:
  --config PATH   Read configuration from PATH (default: ./jscriptor.yaml)
  --format        Print formatted source instead of checking
  --types         Print the inferred type of each top-level const
  --json          Print diagnostics as JSON
  --verbose       Enable debug logging
  --help          Show this help message
"""


def _configure_logging(level: str) -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {"format": "%(levelname)s | %(name)s | %(message)s"},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "standard",
                }
            },
            "loggers": {
                "jscriptor": {
                    "level": level,
                    "handlers": ["console"],
                    "propagate": False,
                }
            },
        }
    )


def _read_source(path: Path) -> str | None:
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        print("jscriptor: " + str(path) + ": No such file or directory", file=sys.stderr)
        return None
    except OSError as e:
        print("jscriptor: " + str(path) + ": " + str(e), file=sys.stderr)
        return None
    try:
        return raw.decode("utf-8")
    except ValueError:
        print("jscriptor: " + str(path) + ": invalid utf-8", file=sys.stderr)
        return None


def _print_types(program: Program, result: CheckResult) -> None:
    for stmt in program.body:
        if isinstance(stmt, ConstDeclaration):
            described = result.describe(stmt.id)
            print(stmt.id.name + ": " + (described or "?"))


def _check_file(
    path: Path, config: Config, fmt: bool, types: bool, as_json: bool, report: list
) -> int:
    """Process one file. Returns its error count, or -1 if it could not be read."""
    source = _read_source(path)
    if source is None:
        return -1
    name = str(path)
    try:
        program = parse(source)
    except TokenizeError as e:
        print(render_parse_error(e, source, name), file=sys.stderr)
        return 1
    errors = len(program.errors)
    for err in program.errors:
        print(render_parse_error(err, source, name), file=sys.stderr)

    if fmt:
        sys.stdout.write(to_source(program, config.indent))
        return errors

    try:
        result = type_check(program)
    except CheckerContractError as e:
        print("jscriptor: " + name + ": internal error: " + str(e), file=sys.stderr)
        return errors + 1
    for diag in result.errors:
        if as_json:
            entry = diag.to_dict()
            entry["file"] = name
            report.append(entry)
        else:
            print(render(diag, source, name), file=sys.stderr)
    if types:
        _print_types(program, result)
    return errors + len(result.errors)


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    files: list[str] = []
    config_path: str | None = None
    fmt = False
    types = False
    as_json = False
    verbose = False
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--config":
            if i + 1 >= len(args):
                print("jscriptor: --config requires a path", file=sys.stderr)
                return 2
            config_path = args[i + 1]
            i += 2
        elif arg == "--format":
            fmt = True
            i += 1
        elif arg == "--types":
            types = True
            i += 1
        elif arg == "--json":
            as_json = True
            i += 1
        elif arg == "--verbose":
            verbose = True
            i += 1
        elif arg.startswith("-"):
            print("jscriptor: unknown flag '" + arg + "'", file=sys.stderr)
            return 2
        else:
            files.append(arg)
            i += 1

    try:
        config = load_config(config_path)
    except ConfigError as e:
        print("jscriptor: config error: " + str(e), file=sys.stderr)
        return 2
    _configure_logging("DEBUG" if verbose else config.log_level)

    paths = [Path(f) for f in files] if files else resolve_files(config)
    if not paths:
        print("jscriptor: no input files", file=sys.stderr)
        return 2
    logger.debug("checking %d file(s)", len(paths))

    total = 0
    failed = False
    report: list[dict] = []
    for path in paths:
        count = _check_file(path, config, fmt, types, as_json, report)
        if count < 0:
            failed = True
            continue
        total += count
    if as_json:
        print(json.dumps(report, indent=2))
    if not fmt:
        print(summary(len(paths), total), file=sys.stderr)
    if failed or total > 0:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
