"""Tests for the source emitter."""

import pytest

from jscriptor import emit, parse


def _fmt(source: str) -> str:
    program = parse(source)
    assert program.errors == []
    return emit(program)


def test_const_with_annotation():
    assert _fmt("const   x:number=1") == "const x: number = 1;\n"


def test_numbers_and_strings():
    out = _fmt("const a = 2.50; const b = 'say \"hi\"';")
    assert out == 'const a = 2.5;\nconst b = "say \\"hi\\"";\n'


def test_arrow_function_block_is_indented():
    out = _fmt("const f = (a: number, b): string => { const c = a; return c; };")
    assert out == (
        "const f = (a: number, b): string => {\n"
        "  const c = a;\n"
        "  return c;\n"
        "};\n"
    )


def test_nested_blocks_indent_further():
    out = _fmt("const f = () => { return () => { return 1; }; };")
    assert out == (
        "const f = () => {\n"
        "  return () => {\n"
        "    return 1;\n"
        "  };\n"
        "};\n"
    )


def test_empty_body_and_bare_return():
    assert _fmt("const f = () => {}; return;") == "const f = () => {};\nreturn;\n"


def test_custom_indent():
    program = parse("const f = () => { return 1; };")
    assert emit(program, "\t") == "const f = () => {\n\treturn 1;\n};\n"


@pytest.mark.parametrize(
    "source,expected",
    [
        ("const x = a + b * c;", "const x = a + b * c;\n"),
        ("const x = a + (b * c);", "const x = a + (b * c);\n"),
        ("const x = (a ? b : c) + 1;", "const x = (a ? b : c) + 1;\n"),
        ("const x = a ? b : c ? d : e;", "const x = a ? b : c ? d : e;\n"),
        ("const x = (a ? b : c) ? d : e;", "const x = (a ? b : c) ? d : e;\n"),
    ],
)
def test_parentheses_preserve_structure(source, expected):
    assert _fmt(source) == expected


def test_literals():
    out = _fmt('const x = f([1, 2], {a: true, "b c": "d"});')
    assert out == 'const x = f([1, 2], { a: true, "b c": "d" });\n'


@pytest.mark.parametrize(
    "annotation,expected",
    [
        ("number[]", "Array<number>"),
        ("Array<string>", "Array<string>"),
        ("number | string", "number | string"),
        ("(a: number) => void", "(a: number) => void"),
        ("{a: number, b: string}", "{a: number, b: string}"),
        ("((a: number) => void) | string", "((a: number) => void) | string"),
    ],
)
def test_type_annotations(annotation, expected):
    assert _fmt("const x: " + annotation + " = y;") == "const x: " + expected + " = y;\n"


def test_formatting_is_stable():
    source = (
        "const add = (a: number, b: number): number => { return a + b; };\n"
        "const p: {x: number} = { x: add(1, 2) };\n"
        "const v: number | string = true ? 1 : 2;\n"
    )
    once = _fmt(source)
    assert _fmt(once) == once


def test_empty_program():
    assert _fmt("") == ""
