"""JScriptor parser: recursive descent, one method per grammar production."""

from __future__ import annotations

import logging

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
    FieldType,
    FunctionTypeAnnotation,
    Identifier,
    NumericLiteral,
    ObjectLiteral,
    ObjectTypeAnnotation,
    ParamType,
    Pos,
    Program,
    Property,
    ReturnStatement,
    Stmt,
    StringLiteral,
    TypeAnnotation,
    TypeNode,
    UnionTypeAnnotation,
)
from .tokens import TK_EOF, TK_IDENT, TK_NUMBER, TK_STRING, Token

logger = logging.getLogger(__name__)

BINARY_OPS: set[str] = {"+", "*"}


class ParseError(Exception):
    """Parse error with location info."""

    def __init__(self, msg: str, line: int, col: int, offset: int = 0):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        self.offset: int = offset
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class Parser:
    """Recursive descent parser for JScriptor.

    Statement-level errors are recorded in `errors` and parsing resumes at
    the next statement boundary, so one bad statement does not hide the rest.
    """

    def __init__(self, tokens: list[Token]):
        self.tokens: list[Token] = tokens
        self.pos: int = 0
        self.errors: list[ParseError] = []

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[len(self.tokens) - 1]
        return self.tokens[idx]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != TK_EOF:
            self.pos += 1
        return tok

    def at(self, value: str) -> bool:
        tok = self.current()
        return tok.type != TK_STRING and tok.value == value

    def at_type(self, type_: str) -> bool:
        return self.current().type == type_

    def at_ident(self) -> bool:
        return self.current().type == TK_IDENT

    def at_eof(self) -> bool:
        return self.current().type == TK_EOF

    def expect(self, value: str) -> Token:
        tok = self.current()
        if not self.at(value):
            raise self.error("expected '" + value + "', got " + _describe(tok))
        return self.advance()

    def expect_ident(self) -> Token:
        tok = self.current()
        if tok.type != TK_IDENT:
            raise self.error("expected identifier, got " + _describe(tok))
        return self.advance()

    def error(self, msg: str) -> ParseError:
        tok = self.current()
        return ParseError(msg, tok.line, tok.col, tok.offset)

    def _pos(self) -> Pos:
        tok = self.current()
        return Pos(tok.offset, tok.line, tok.col)

    def _record(self, err: ParseError, where: str) -> None:
        self.errors.append(err)
        logger.warning("parse error in %s: %s", where, err)

    # ── Top Level ────────────────────────────────────────────

    def parse_program(self) -> Program:
        """Program = Statement* EOF"""
        body: list[Stmt] = []
        while not self.at_eof():
            try:
                body.append(self.parse_statement())
            except ParseError as e:
                self._record(e, "program")
                # Resynchronize at the next ';'
                while not self.at_eof() and not self.at(";"):
                    self.advance()
                if self.at(";"):
                    self.advance()
        return Program(body, self.errors)

    def parse_statement(self) -> Stmt:
        """Statement = ( ConstDecl | Return ) ';'?"""
        if self.at_type("const"):
            stmt: Stmt = self.parse_const_declaration()
        elif self.at_type("return"):
            stmt = self.parse_return_statement()
        else:
            raise self.error("unexpected " + _describe(self.current()))
        if self.at(";"):
            self.advance()
        return stmt

    def parse_const_declaration(self) -> ConstDeclaration:
        """ConstDecl = 'const' IDENT ( ':' Type )? '=' Expr"""
        pos = self._pos()
        self.advance()
        name_pos = self._pos()
        name = self.expect_ident().value
        annotation: TypeNode | None = None
        if self.at(":"):
            self.advance()
            annotation = self.parse_type_annotation()
        self.expect("=")
        init = self.parse_expression()
        return ConstDeclaration(pos, Identifier(name_pos, name), init, annotation)

    def parse_return_statement(self) -> ReturnStatement:
        """Return = 'return' Expr?"""
        pos = self._pos()
        self.advance()
        if self.at(";") or self.at("}") or self.at_eof():
            return ReturnStatement(pos, None)
        return ReturnStatement(pos, self.parse_expression())

    def parse_block(self) -> BlockStatement:
        """Block = '{' Statement* '}'"""
        pos = self._pos()
        self.expect("{")
        body: list[Stmt] = []
        while not self.at("}") and not self.at_eof():
            try:
                body.append(self.parse_statement())
            except ParseError as e:
                self._record(e, "function body")
                while not self.at_eof() and not self.at(";") and not self.at("}"):
                    self.advance()
                if self.at(";"):
                    self.advance()
        self.expect("}")
        return BlockStatement(pos, body)

    # ── Expressions ──────────────────────────────────────────

    def parse_expression(self) -> Expr:
        """Expr = Binary ( '?' Expr ':' Expr )?"""
        expr = self.parse_binary()
        if self.at("?"):
            self.advance()
            consequent = self.parse_expression()
            self.expect(":")
            alternate = self.parse_expression()
            return ConditionalExpression(expr.pos, expr, consequent, alternate)
        return expr

    def parse_binary(self) -> Expr:
        """Binary = Primary ( ('+' | '*') Primary )*  -- one tier, left to right"""
        left = self.parse_primary()
        while self.current().type != TK_STRING and self.current().value in BINARY_OPS:
            op = self.advance().value
            right = self.parse_primary()
            left = BinaryExpression(left.pos, op, left, right)
        return left

    def parse_primary(self) -> Expr:
        pos = self._pos()
        tok = self.current()
        if self.at("("):
            if self._is_arrow_function():
                return self.parse_arrow_function()
            self.advance()
            expr = self.parse_expression()
            self.expect(")")
            return expr
        if tok.type == TK_STRING:
            self.advance()
            return StringLiteral(pos, tok.value)
        if tok.type == TK_NUMBER:
            self.advance()
            return NumericLiteral(pos, float(tok.value), tok.value)
        if tok.type == "true" or tok.type == "false":
            self.advance()
            return BooleanLiteral(pos, tok.type == "true")
        if tok.type == TK_IDENT:
            self.advance()
            ident = Identifier(pos, tok.value)
            if self.at("("):
                return self.parse_call(ident)
            return ident
        if self.at("["):
            return self.parse_array_literal()
        if self.at("{"):
            return self.parse_object_literal()
        raise self.error("unexpected " + _describe(tok) + " in expression")

    def parse_call(self, callee: Expr) -> CallExpression:
        """Call = Callee '(' ( Expr ( ',' Expr )* )? ')'"""
        self.expect("(")
        args: list[Expr] = []
        while not self.at(")"):
            args.append(self.parse_expression())
            if not self.at(","):
                break
            self.advance()
        self.expect(")")
        return CallExpression(callee.pos, callee, args)

    def parse_array_literal(self) -> ArrayLiteral:
        """ArrayLit = '[' ( Expr ( ',' Expr )* ','? )? ']'"""
        pos = self._pos()
        self.expect("[")
        elements: list[Expr] = []
        while not self.at("]"):
            elements.append(self.parse_expression())
            if not self.at(","):
                break
            self.advance()
        self.expect("]")
        return ArrayLiteral(pos, elements)

    def parse_object_literal(self) -> ObjectLiteral:
        """ObjectLit = '{' ( Key ':' Expr ( ',' Key ':' Expr )* ','? )? '}'"""
        pos = self._pos()
        self.expect("{")
        props: list[Property] = []
        while not self.at("}"):
            key_pos = self._pos()
            key = self._expect_key("property")
            self.expect(":")
            props.append(Property(key_pos, key, self.parse_expression()))
            if not self.at(","):
                break
            self.advance()
        self.expect("}")
        return ObjectLiteral(pos, props)

    def _expect_key(self, what: str) -> str:
        tok = self.current()
        if tok.type != TK_IDENT and tok.type != TK_STRING:
            raise self.error("expected " + what + " name, got " + _describe(tok))
        self.advance()
        return tok.value

    # ── Arrow functions ──────────────────────────────────────

    def _is_arrow_function(self) -> bool:
        """Speculative scan: does this '(' open an arrow function head?"""
        nxt = self.peek(1)
        if nxt.type != TK_STRING and nxt.value == ")":
            return True
        after = self.peek(2)
        if nxt.type == TK_IDENT and after.type != TK_STRING and after.value in (":", ","):
            return True
        saved = self.pos
        try:
            self._parse_arrow_head()
            return self.at("=>")
        except ParseError:
            return False
        finally:
            self.pos = saved

    def _parse_arrow_head(
        self,
    ) -> tuple[list[Identifier], TypeNode | None]:
        """ArrowHead = '(' ( Param ( ',' Param )* )? ')' ( ':' Type )?"""
        self.expect("(")
        params: list[Identifier] = []
        while not self.at(")"):
            pos = self._pos()
            name = self.expect_ident().value
            annotation: TypeNode | None = None
            if self.at(":"):
                self.advance()
                annotation = self.parse_type_annotation()
            params.append(Identifier(pos, name, annotation))
            if not self.at(","):
                break
            self.advance()
        self.expect(")")
        return_type: TypeNode | None = None
        if self.at(":"):
            self.advance()
            return_type = self.parse_type_annotation()
        return params, return_type

    def parse_arrow_function(self) -> ArrowFunctionExpression:
        """Arrow = ArrowHead '=>' Block"""
        pos = self._pos()
        params, return_type = self._parse_arrow_head()
        self.expect("=>")
        if not self.at("{"):
            raise self.error(
                "Arrow functions only support block bodies with curly braces"
            )
        body = self.parse_block()
        return ArrowFunctionExpression(pos, params, body, return_type)

    # ── Types ────────────────────────────────────────────────

    def parse_type_annotation(self) -> TypeNode:
        """Type = PrimaryType ( '|' PrimaryType )*  -- flattened"""
        first = self.parse_primary_type()
        if not self.at("|"):
            return first
        members: list[TypeNode] = _union_members(first)
        while self.at("|"):
            self.advance()
            members.extend(_union_members(self.parse_primary_type()))
        return UnionTypeAnnotation(first.pos, members)

    def parse_primary_type(self) -> TypeNode:
        """PrimaryType = BaseType ( '[' ']' )*"""
        pos = self._pos()
        typ = self.parse_base_type()
        while self.at("[") and self.peek(1).value == "]":
            self.advance()
            self.advance()
            typ = ArrayTypeAnnotation(pos, typ)
        return typ

    def parse_base_type(self) -> TypeNode:
        """BaseType = Name | 'Array' '<' Type '>' | FunctionType | ObjectType | '(' Type ')'"""
        pos = self._pos()
        tok = self.current()
        if self.at("("):
            if self._is_function_type():
                return self.parse_function_type()
            self.advance()
            inner = self.parse_type_annotation()
            self.expect(")")
            return inner
        if self.at("{"):
            return self.parse_object_type()
        if tok.type != TK_IDENT:
            raise self.error("expected type, got " + _describe(tok))
        if tok.value == "any":
            raise self.error("The 'any' type is not supported")
        self.advance()
        if tok.value == "Array" and self.at("<"):
            self.advance()
            element = self.parse_type_annotation()
            self.expect(">")
            return ArrayTypeAnnotation(pos, element)
        return TypeAnnotation(pos, tok.value)

    def _is_function_type(self) -> bool:
        nxt = self.peek(1)
        if nxt.value == ")":
            return True
        return nxt.type == TK_IDENT and self.peek(2).value == ":"

    def parse_function_type(self) -> FunctionTypeAnnotation:
        """FunctionType = '(' ( IDENT ':' Type ( ',' IDENT ':' Type )* )? ')' '=>' Type"""
        pos = self._pos()
        self.expect("(")
        params: list[ParamType] = []
        while not self.at(")"):
            param_pos = self._pos()
            name = self.expect_ident().value
            self.expect(":")
            params.append(ParamType(param_pos, name, self.parse_type_annotation()))
            if not self.at(","):
                break
            self.advance()
        self.expect(")")
        self.expect("=>")
        return FunctionTypeAnnotation(pos, params, self.parse_type_annotation())

    def parse_object_type(self) -> ObjectTypeAnnotation:
        """ObjectType = '{' ( Key ':' Type ( (',' | ';') Key ':' Type )* )? '}'"""
        pos = self._pos()
        self.expect("{")
        fields: list[FieldType] = []
        while not self.at("}"):
            field_pos = self._pos()
            name = self._expect_key("field")
            self.expect(":")
            fields.append(FieldType(field_pos, name, self.parse_type_annotation()))
            if not self.at(",") and not self.at(";"):
                break
            self.advance()
        self.expect("}")
        return ObjectTypeAnnotation(pos, fields)


def _union_members(typ: TypeNode) -> list[TypeNode]:
    if isinstance(typ, UnionTypeAnnotation):
        return list(typ.types)
    return [typ]


def _describe(tok: Token) -> str:
    if tok.type == TK_EOF:
        return "end of input"
    if tok.type == TK_STRING:
        return "string " + repr(tok.value)
    return "'" + tok.value + "'"
