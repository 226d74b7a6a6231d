"""Data-driven runner for the parser and checker .tests files.

Each file holds cases of the form:

    === test name
    source code
    ---
    ok | error: <substring> | path = value (one per line)
    ---
"""

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from jscriptor import parse as js_parse, type_check
from jscriptor.ast import (
    ArrayLiteral,
    ArrayTypeAnnotation,
    ArrowFunctionExpression,
    BinaryExpression,
    BlockStatement,
    BooleanLiteral,
    CallExpression,
    ConditionalExpression,
    ConstDeclaration,
    FunctionTypeAnnotation,
    Identifier,
    NumericLiteral,
    ObjectLiteral,
    ObjectTypeAnnotation,
    ReturnStatement,
    StringLiteral,
    TypeAnnotation,
    UnionTypeAnnotation,
)

TESTS_DIR = Path(__file__).parent

TESTS = {
    "parse": {"dir": "parser"},
    "check": {"dir": "checker"},
}


# ---------------------------------------------------------------------------
# Test file parsing
# ---------------------------------------------------------------------------


def parse_spec_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse a .tests file into (name, input, expected) tuples."""
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            test_input = "\n".join(input_lines)
            expected = "\n".join(expected_lines).strip()
            result.append((test_name, test_input, expected))
        else:
            i += 1
    return result


def discover_specs(test_dir: Path) -> list[tuple[str, str, str]]:
    """Glob *.tests in test_dir, return (test_id, input, expected) tuples."""
    results = []
    for test_file in sorted(test_dir.glob("*.tests")):
        for name, input_code, expected in parse_spec_file(test_file):
            results.append((f"{test_file.stem}/{name}", input_code, expected))
    return results


# ---------------------------------------------------------------------------
# AST shape rendering
# ---------------------------------------------------------------------------


def shape_type(t) -> str:
    if isinstance(t, TypeAnnotation):
        return t.value_type
    if isinstance(t, ArrayTypeAnnotation):
        return "Array<" + shape_type(t.element_type) + ">"
    if isinstance(t, FunctionTypeAnnotation):
        params = ",".join(p.name + ":" + shape_type(p.type_annotation) for p in t.param_types)
        return "(" + params + ")=>" + shape_type(t.return_type)
    if isinstance(t, ObjectTypeAnnotation):
        fields = ",".join(f.name + ":" + shape_type(f.type_annotation) for f in t.fields)
        return "{" + fields + "}"
    if isinstance(t, UnionTypeAnnotation):
        return "|".join(shape_type(m) for m in t.types)
    raise TypeError(type(t).__name__)


def shape(node) -> str:
    """Compact s-expression of a node, for structural assertions."""
    if isinstance(node, Identifier):
        if node.type_annotation is not None:
            return node.name + ":" + shape_type(node.type_annotation)
        return node.name
    if isinstance(node, NumericLiteral):
        return node.raw
    if isinstance(node, StringLiteral):
        return '"' + node.value + '"'
    if isinstance(node, BooleanLiteral):
        return "true" if node.value else "false"
    if isinstance(node, BinaryExpression):
        return "(" + node.operator + " " + shape(node.left) + " " + shape(node.right) + ")"
    if isinstance(node, ConditionalExpression):
        parts = [shape(node.test), shape(node.consequent), shape(node.alternate)]
        return "(? " + " ".join(parts) + ")"
    if isinstance(node, CallExpression):
        parts = [shape(node.callee)] + [shape(a) for a in node.arguments]
        return "(call " + " ".join(parts) + ")"
    if isinstance(node, ArrayLiteral):
        return "(array" + "".join(" " + shape(e) for e in node.elements) + ")"
    if isinstance(node, ObjectLiteral):
        props = "".join(" " + p.key + ":" + shape(p.value) for p in node.properties)
        return "(object" + props + ")"
    if isinstance(node, ArrowFunctionExpression):
        params = " ".join(shape(p) for p in node.params)
        head = "(fn (" + params + ")"
        if node.return_type is not None:
            head += ":" + shape_type(node.return_type)
        return head + " " + shape(node.body) + ")"
    if isinstance(node, BlockStatement):
        return "(block" + "".join(" " + shape(s) for s in node.body) + ")"
    if isinstance(node, ReturnStatement):
        if node.argument is None:
            return "(return)"
        return "(return " + shape(node.argument) + ")"
    if isinstance(node, ConstDeclaration):
        name = node.id.name
        if node.type_annotation is not None:
            name += ":" + shape_type(node.type_annotation)
        return "(const " + name + " " + shape(node.init) + ")"
    raise TypeError(type(node).__name__)


# ---------------------------------------------------------------------------
# Phase result + assertion checker
# ---------------------------------------------------------------------------


@dataclass
class PhaseResult:
    errors: list[str] = field(default_factory=list)
    data: dict | None = None


def resolve_dotpath(obj: object, path: str) -> object:
    """Resolve a dot-separated path against a nested dict/list structure."""
    current = obj
    for part in path.split("."):
        if part == "length":
            return len(current)
        if isinstance(current, list):
            current = current[int(part)]
        elif isinstance(current, dict):
            current = current[part]
        else:
            raise KeyError(f"cannot traverse {type(current).__name__} with key {part!r}")
    return current


def to_comparable(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def assert_expected(expected: str, result: PhaseResult, phase: str) -> None:
    if expected == "ok":
        if result.errors:
            pytest.fail(f"Expected ok, got error: {result.errors[0]}")
        return
    if expected.startswith("error:"):
        expected_msg = expected[6:].strip()
        if not result.errors:
            pytest.fail(f"Expected error containing '{expected_msg}', got ok")
        found = any(expected_msg.lower() in e.lower() for e in result.errors)
        if not found:
            pytest.fail(f"Expected error containing '{expected_msg}', got: {result.errors}")
        return
    # Dotpath assertions
    assert result.data is not None, f"No data returned from {phase}"
    for line in expected.split("\n"):
        line = line.strip()
        if not line:
            continue
        if " = " not in line:
            pytest.fail(f"Bad assertion (no ' = '): {line}")
        path, expected_val = line.split(" = ", 1)
        path = path.strip()
        expected_val = expected_val.strip()
        try:
            actual = resolve_dotpath(result.data, path)
        except (KeyError, IndexError, TypeError) as e:
            pytest.fail(f"Path '{path}' not found in result: {e}")
        actual_str = to_comparable(actual)
        if actual_str != expected_val:
            pytest.fail(
                f"Assertion failed: {path}\n"
                f"  expected: {expected_val!r}\n"
                f"  actual:   {actual_str!r}"
            )


# ---------------------------------------------------------------------------
# Phase runners
# ---------------------------------------------------------------------------


def run_parse(source: str) -> PhaseResult:
    try:
        program = js_parse(source)
    except Exception as e:
        return PhaseResult(errors=[str(e)])
    return PhaseResult(
        errors=[str(e) for e in program.errors],
        data={
            "count": len(program.body),
            "shape": [shape(s) for s in program.body],
            "errors": [e.msg for e in program.errors],
        },
    )


def run_check(source: str) -> PhaseResult:
    try:
        program = js_parse(source)
        if program.errors:
            return PhaseResult(errors=["parse: " + str(e) for e in program.errors])
        result = type_check(program)
    except Exception as e:
        return PhaseResult(errors=[str(e)])
    types: dict[str, str | None] = {}
    for stmt in program.body:
        if isinstance(stmt, ConstDeclaration):
            types[stmt.id.name] = result.describe(stmt.id)
    return PhaseResult(
        errors=[d.message for d in result.errors],
        data={
            "types": types,
            "codes": [d.code for d in result.errors],
            "messages": [d.message for d in result.errors],
        },
    )


RUNNERS = {
    "parse": run_parse,
    "check": run_check,
}


# ---------------------------------------------------------------------------
# Parametrization
# ---------------------------------------------------------------------------


def pytest_generate_tests(metafunc):
    for name, cfg in TESTS.items():
        fixture = f"{name}_input"
        if fixture in metafunc.fixturenames:
            specs = discover_specs(TESTS_DIR / cfg["dir"])
            params = [pytest.param(inp, exp, id=tid) for tid, inp, exp in specs]
            metafunc.parametrize(f"{fixture},{name}_expected", params)


# ---------------------------------------------------------------------------
# Test functions
# ---------------------------------------------------------------------------


def test_parse(parse_input, parse_expected):
    assert_expected(parse_expected, run_parse(parse_input), "parse")


def test_check(check_input, check_expected):
    assert_expected(check_expected, run_check(check_input), "check")
