"""Render diagnostics and parse errors as compiler-style text."""

from __future__ import annotations

from .diagnostics import (
    E_ARRAY_ELEMENT_MISMATCH,
    E_BIN_ADD_MISMATCH,
    E_BIN_MUL_OPERAND,
    E_BIN_OPERANDS_MISMATCH,
    E_OBJECT_FIELD_MISSING,
    E_TERNARY_BRANCH_MISMATCH,
    E_TERNARY_TEST_NOT_BOOL,
    E_UNIFY_MISMATCH,
    E_UNION_NO_MATCH,
    Diagnostic,
)

HINTS: dict[str, str] = {
    E_BIN_ADD_MISMATCH: "both operands of '+' must have the same type",
    E_BIN_MUL_OPERAND: "'*' only accepts Number operands",
    E_BIN_OPERANDS_MISMATCH: "both operands must have the same type",
    E_TERNARY_TEST_NOT_BOOL: "use a Boolean expression as the ternary condition",
    E_TERNARY_BRANCH_MISMATCH: "make both ternary branches produce the same type",
    E_ARRAY_ELEMENT_MISMATCH: "array literals must hold elements of a single type",
    E_OBJECT_FIELD_MISSING: "add the missing field to the object literal",
    E_UNION_NO_MATCH: "the value must match one of the union's member types",
    E_UNIFY_MISMATCH: "check the declared annotation against the inferred type",
}


def line_col(source: str, offset: int) -> tuple[int, int]:
    """1-indexed (line, col) of a character offset."""
    if offset < 0:
        offset = 0
    if offset > len(source):
        offset = len(source)
    line = source.count("\n", 0, offset) + 1
    last_nl = source.rfind("\n", 0, offset)
    return line, offset - last_nl


def _source_line(source: str, line: int) -> str:
    lines = source.split("\n")
    if 1 <= line <= len(lines):
        return lines[line - 1].rstrip("\r")
    return ""


def _excerpt(source: str, line: int, col: int) -> list[str]:
    text = _source_line(source, line)
    if text == "":
        return []
    gutter = str(line) + " | "
    caret = " " * (len(gutter) + col - 1) + "^"
    return [gutter + text, caret]


def render(diag: Diagnostic, source: str, filename: str) -> str:
    """file:line:col: error[CODE]: message, with a source excerpt and hint."""
    if diag.position is None:
        out = [filename + ": error[" + diag.code + "]: " + diag.message]
    else:
        line, col = line_col(source, diag.position)
        out = [
            filename
            + ":"
            + str(line)
            + ":"
            + str(col)
            + ": error["
            + diag.code
            + "]: "
            + diag.message
        ]
        out.extend(_excerpt(source, line, col))
    hint = HINTS.get(diag.code)
    if hint is not None:
        out.append("  hint: " + hint)
    return "\n".join(out)


def render_parse_error(err: Exception, source: str, filename: str) -> str:
    """Parse and tokenize errors carry line/col directly."""
    line = getattr(err, "line", 0)
    col = getattr(err, "col", 0)
    msg = getattr(err, "msg", str(err))
    out = [filename + ":" + str(line) + ":" + str(col) + ": syntax error: " + msg]
    out.extend(_excerpt(source, line, col))
    return "\n".join(out)


def summary(n_files: int, n_errors: int) -> str:
    files = str(n_files) + (" file" if n_files == 1 else " files")
    if n_errors == 0:
        return "checked " + files + ": no errors"
    errors = str(n_errors) + (" error" if n_errors == 1 else " errors")
    return "checked " + files + ": " + errors
