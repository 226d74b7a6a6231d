"""JScriptor AST: parse-time node definitions.

Nodes compare and hash by identity so analysis passes can key side tables
on them without mutating the tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field


# ============================================================
# POSITION
# ============================================================


@dataclass
class Pos:
    """Source position: 0-indexed character offset, 1-indexed line and col."""

    offset: int
    line: int
    col: int


# ============================================================
# TYPE ANNOTATIONS
# ============================================================


@dataclass(eq=False)
class TypeNode:
    """Base for all type annotation nodes."""

    pos: Pos


@dataclass(eq=False)
class TypeAnnotation(TypeNode):
    """Named type: number, string, boolean, void, Array, or a user name."""

    value_type: str


@dataclass(eq=False)
class ArrayTypeAnnotation(TypeNode):
    """Array<T> or T[]."""

    element_type: TypeNode


@dataclass(eq=False)
class ParamType:
    """One named parameter inside a function type."""

    pos: Pos
    name: str
    type_annotation: TypeNode


@dataclass(eq=False)
class FunctionTypeAnnotation(TypeNode):
    """(a: T, ...) => R."""

    param_types: list[ParamType]
    return_type: TypeNode


@dataclass(eq=False)
class FieldType:
    """One field inside an object type."""

    pos: Pos
    name: str
    type_annotation: TypeNode


@dataclass(eq=False)
class ObjectTypeAnnotation(TypeNode):
    """{a: T, b: U}."""

    fields: list[FieldType]


@dataclass(eq=False)
class UnionTypeAnnotation(TypeNode):
    """A | B | C, always flat."""

    types: list[TypeNode]


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass(eq=False)
class Expr:
    """Base for all expression nodes."""

    pos: Pos


@dataclass(eq=False)
class Identifier(Expr):
    """Variable reference, declared name, or function parameter."""

    name: str
    type_annotation: TypeNode | None = None


@dataclass(eq=False)
class StringLiteral(Expr):
    value: str


@dataclass(eq=False)
class NumericLiteral(Expr):
    value: float
    raw: str = ""


@dataclass(eq=False)
class BooleanLiteral(Expr):
    value: bool


@dataclass(eq=False)
class BinaryExpression(Expr):
    """left + right, left * right."""

    operator: str
    left: Expr
    right: Expr


@dataclass(eq=False)
class ConditionalExpression(Expr):
    """test ? consequent : alternate."""

    test: Expr
    consequent: Expr
    alternate: Expr


@dataclass(eq=False)
class CallExpression(Expr):
    callee: Expr
    arguments: list[Expr]


@dataclass(eq=False)
class ArrayLiteral(Expr):
    elements: list[Expr]


@dataclass(eq=False)
class Property:
    """key: value inside an object literal."""

    pos: Pos
    key: str
    value: Expr


@dataclass(eq=False)
class ObjectLiteral(Expr):
    properties: list[Property]


@dataclass(eq=False)
class ArrowFunctionExpression(Expr):
    """(params): R => { body }."""

    params: list[Identifier]
    body: BlockStatement
    return_type: TypeNode | None = None


# ============================================================
# STATEMENTS
# ============================================================


@dataclass(eq=False)
class Stmt:
    """Base for all statement nodes."""

    pos: Pos


@dataclass(eq=False)
class ConstDeclaration(Stmt):
    """const id: T = init."""

    id: Identifier
    init: Expr
    type_annotation: TypeNode | None = None


@dataclass(eq=False)
class ReturnStatement(Stmt):
    argument: Expr | None = None


@dataclass(eq=False)
class BlockStatement(Stmt):
    body: list[Stmt]


# ============================================================
# PROGRAM
# ============================================================


@dataclass(eq=False)
class Program:
    """Top-level statements plus the parse errors recovered along the way."""

    body: list[Stmt]
    errors: list = field(default_factory=list)


Node = Expr | Stmt | TypeNode | Property | ParamType | FieldType


def node_type(node: object) -> str:
    """Node kind name as reported in diagnostics."""
    return type(node).__name__
