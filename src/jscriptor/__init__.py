"""JScriptor parser and type checker: public API."""

from __future__ import annotations

from .ast import Program
from .check import CheckResult, CheckerContractError, type_check
from .diagnostics import Diagnostic as Diagnostic
from .emit import to_source
from .parse import ParseError as ParseError, Parser
from .tokens import TokenizeError as TokenizeError, tokenize


def parse(source: str) -> Program:
    """Parse JScriptor source into a Program. Recovered errors land in `errors`."""
    tokens = tokenize(source)
    parser = Parser(tokens)
    return parser.parse_program()


def check(source: str) -> CheckResult:
    """Parse and type-check JScriptor source. Parse errors are not included."""
    return type_check(parse(source))


def emit(program: Program, indent: str = "  ") -> str:
    """Emit a Program AST as formatted JScriptor source."""
    return to_source(program, indent)


__all__ = [
    "CheckResult",
    "CheckerContractError",
    "Diagnostic",
    "ParseError",
    "Program",
    "TokenizeError",
    "check",
    "emit",
    "parse",
    "tokenize",
    "type_check",
]
