"""JScriptor emitter: converts the AST back into formatted source.

Total over the node kinds in `ast.py`; a new node kind must be added here too.
"""

from __future__ import annotations

from .ast import (
    ArrayLiteral,
    ArrayTypeAnnotation,
    ArrowFunctionExpression,
    BinaryExpression,
    BlockStatement,
    BooleanLiteral,
    CallExpression,
    ConditionalExpression,
    ConstDeclaration,
    Expr,
    FunctionTypeAnnotation,
    Identifier,
    NumericLiteral,
    ObjectLiteral,
    ObjectTypeAnnotation,
    Program,
    ReturnStatement,
    Stmt,
    StringLiteral,
    TypeAnnotation,
    TypeNode,
    UnionTypeAnnotation,
)


def to_source(program: Program | list[Stmt], indent: str = "  ") -> str:
    """Emit a Program (or a list of statements) as formatted source."""
    if isinstance(program, Program):
        program = program.body
    return _Emitter(indent).emit_statements(program)


class _Emitter:
    _PREC_TERNARY = 1
    _PREC_BINARY = 2
    _PREC_PRIMARY = 3

    _ESCAPES: dict[str, str] = {
        "\\": "\\\\",
        '"': '\\"',
        "\n": "\\n",
        "\r": "\\r",
        "\t": "\\t",
        "\0": "\\0",
    }

    def __init__(self, indent: str) -> None:
        self._indent: str = indent
        self._indent_level: int = 0
        self._lines: list[str] = []

    def emit_statements(self, stmts: list[Stmt]) -> str:
        for stmt in stmts:
            self._emit_line(self._render_stmt(stmt))
        if not self._lines:
            return ""
        return "\n".join(self._lines) + "\n"

    # ── Lines / Blocks ──────────────────────────────────────

    def _emit_line(self, line: str) -> None:
        self._lines.append(self._indent * self._indent_level + line)

    def _render_block(self, block: BlockStatement) -> str:
        if not block.body:
            return "{}"
        self._indent_level += 1
        inner: list[str] = []
        for stmt in block.body:
            inner.append(self._indent * self._indent_level + self._render_stmt(stmt))
        self._indent_level -= 1
        closing = self._indent * self._indent_level + "}"
        return "{\n" + "\n".join(inner) + "\n" + closing

    # ── Stmts ───────────────────────────────────────────────

    def _render_stmt(self, stmt: Stmt) -> str:
        if isinstance(stmt, ConstDeclaration):
            line = "const " + stmt.id.name
            if stmt.type_annotation is not None:
                line += ": " + self._render_type(stmt.type_annotation)
            return line + " = " + self._render_expr(stmt.init, self._PREC_TERNARY) + ";"
        if isinstance(stmt, ReturnStatement):
            if stmt.argument is None:
                return "return;"
            return "return " + self._render_expr(stmt.argument, self._PREC_TERNARY) + ";"
        if isinstance(stmt, BlockStatement):
            return self._render_block(stmt)
        raise TypeError("unhandled stmt type: " + type(stmt).__name__)

    # ── Exprs ───────────────────────────────────────────────

    def _expr_prec(self, expr: Expr) -> int:
        if isinstance(expr, ConditionalExpression):
            return self._PREC_TERNARY
        if isinstance(expr, BinaryExpression):
            return self._PREC_BINARY
        return self._PREC_PRIMARY

    def _render_expr(self, expr: Expr, parent_prec: int, side: str = "") -> str:
        text = self._render_expr_inner(expr)
        prec = self._expr_prec(expr)
        # Binary operators share one left-associative tier
        if prec < parent_prec or (
            prec == parent_prec and prec == self._PREC_BINARY and side == "right"
        ):
            return "(" + text + ")"
        return text

    def _render_expr_inner(self, expr: Expr) -> str:
        if isinstance(expr, Identifier):
            return expr.name
        if isinstance(expr, StringLiteral):
            return self._quote_string(expr.value)
        if isinstance(expr, NumericLiteral):
            return _format_number(expr.value)
        if isinstance(expr, BooleanLiteral):
            return "true" if expr.value else "false"
        if isinstance(expr, BinaryExpression):
            left = self._render_expr(expr.left, self._PREC_BINARY, "left")
            right = self._render_expr(expr.right, self._PREC_BINARY, "right")
            return left + " " + expr.operator + " " + right
        if isinstance(expr, ConditionalExpression):
            # The test is parsed at binary level, so a nested ternary needs parens
            test = self._render_expr(expr.test, self._PREC_BINARY)
            cons = self._render_expr(expr.consequent, self._PREC_TERNARY)
            alt = self._render_expr(expr.alternate, self._PREC_TERNARY)
            return test + " ? " + cons + " : " + alt
        if isinstance(expr, CallExpression):
            args: list[str] = []
            for a in expr.arguments:
                args.append(self._render_expr(a, self._PREC_TERNARY))
            callee = self._render_expr(expr.callee, self._PREC_PRIMARY)
            return callee + "(" + ", ".join(args) + ")"
        if isinstance(expr, ArrayLiteral):
            elems: list[str] = []
            for e in expr.elements:
                elems.append(self._render_expr(e, self._PREC_TERNARY))
            return "[" + ", ".join(elems) + "]"
        if isinstance(expr, ObjectLiteral):
            if not expr.properties:
                return "{}"
            props: list[str] = []
            for p in expr.properties:
                key = p.key if _is_ident(p.key) else self._quote_string(p.key)
                props.append(key + ": " + self._render_expr(p.value, self._PREC_TERNARY))
            return "{ " + ", ".join(props) + " }"
        if isinstance(expr, ArrowFunctionExpression):
            params: list[str] = []
            for p in expr.params:
                if p.type_annotation is None:
                    params.append(p.name)
                else:
                    params.append(p.name + ": " + self._render_type(p.type_annotation))
            head = "(" + ", ".join(params) + ")"
            if expr.return_type is not None:
                head += ": " + self._render_type(expr.return_type)
            return head + " => " + self._render_block(expr.body)
        raise TypeError("unhandled expr type: " + type(expr).__name__)

    # ── Types ───────────────────────────────────────────────

    def _render_type(self, typ: TypeNode) -> str:
        if isinstance(typ, TypeAnnotation):
            return typ.value_type
        if isinstance(typ, ArrayTypeAnnotation):
            return "Array<" + self._render_type(typ.element_type) + ">"
        if isinstance(typ, FunctionTypeAnnotation):
            params: list[str] = []
            for p in typ.param_types:
                params.append(p.name + ": " + self._render_type(p.type_annotation))
            return "(" + ", ".join(params) + ") => " + self._render_type(typ.return_type)
        if isinstance(typ, ObjectTypeAnnotation):
            fields: list[str] = []
            for f in typ.fields:
                fields.append(f.name + ": " + self._render_type(f.type_annotation))
            return "{" + ", ".join(fields) + "}"
        if isinstance(typ, UnionTypeAnnotation):
            members: list[str] = []
            for t in typ.types:
                text = self._render_type(t)
                # A function type's return would swallow the rest of the union
                if isinstance(t, FunctionTypeAnnotation):
                    text = "(" + text + ")"
                members.append(text)
            return " | ".join(members)
        raise TypeError("unhandled type node: " + type(typ).__name__)

    # ── Literals ────────────────────────────────────────────

    def _quote_string(self, s: str) -> str:
        out: list[str] = []
        for ch in s:
            out.append(self._ESCAPES.get(ch, ch))
        return '"' + "".join(out) + '"'


def _format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _is_ident(s: str) -> bool:
    if s == "" or not (s[0].isalpha() or s[0] in "_$"):
        return False
    for ch in s:
        if not (ch.isalnum() or ch in "_$"):
            return False
    return True
