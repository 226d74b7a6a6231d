"""JScriptor type checker: HM-style inference with unification over a type store.

Each run owns its own store, scope stack and diagnostics. Inferred types are
recorded in side tables keyed by node identity; the AST is never mutated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .annotations import type_from_annotation
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
    FunctionTypeAnnotation,
    Identifier,
    NumericLiteral,
    ObjectLiteral,
    ObjectTypeAnnotation,
    Program,
    ReturnStatement,
    StringLiteral,
    UnionTypeAnnotation,
    node_type,
)
from .diagnostics import (
    E_ARRAY_ELEMENT_MISMATCH,
    E_BIN_ADD_MISMATCH,
    E_BIN_MUL_OPERAND,
    E_BIN_OPERANDS_MISMATCH,
    E_OBJECT_FIELD_MISSING,
    E_TERNARY_BRANCH_MISMATCH,
    E_TERNARY_TEST_NOT_BOOL,
    E_TYPECHECK,
    E_UNION_NO_MATCH,
    Diagnostic,
    Diagnostics,
)
from .scope import ScopeStack
from .store import ARRAY, BOOLEAN, FUNCTION, NUMBER, STRING, VOID, TypeStore
from .unify import Unifier

logger = logging.getLogger(__name__)


class CheckerContractError(Exception):
    """A node is missing a child the checker requires. Fatal for the run."""

    def __init__(self, msg: str, node: object):
        self.msg: str = msg
        self.node: object = node
        pos = getattr(node, "pos", None)
        if pos is None:
            super().__init__(msg)
        else:
            super().__init__(
                msg + " at line " + str(pos.line) + " col " + str(pos.col)
            )


# ============================================================
# RESULT
# ============================================================


@dataclass
class CheckResult:
    """Diagnostics plus the inferred-type side tables of one run."""

    errors: list[Diagnostic]
    store: TypeStore
    node_types: dict[object, int] = field(default_factory=dict)
    return_types: dict[ArrowFunctionExpression, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return len(self.errors) == 0

    def type_of(self, node: object) -> int | None:
        return self.node_types.get(node)

    def return_type_of(self, fn: ArrowFunctionExpression) -> int | None:
        return self.return_types.get(fn)

    def concrete_name_of(self, node: object) -> str | None:
        tid = self.node_types.get(node)
        if tid is None:
            return None
        return self.store.concrete_name(tid)

    def describe(self, node: object) -> str | None:
        tid = self.node_types.get(node)
        if tid is None:
            return None
        return self.store.describe(tid)


# ============================================================
# CHECKER
# ============================================================


class Checker:
    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Drop all state from a previous run. Ids restart at 0."""
        self.store: TypeStore = TypeStore()
        self.scopes: ScopeStack = ScopeStack()
        self.diagnostics: Diagnostics = Diagnostics()
        self.unifier: Unifier = Unifier(self.store, self.diagnostics)
        self.node_types: dict[object, int] = {}
        self.return_types: dict[ArrowFunctionExpression, int] = {}

    def error(self, msg: str, node: object | None, code: str = E_TYPECHECK) -> None:
        self.diagnostics.report(msg, node, code)

    def unify(self, a: int, b: int, node: object | None) -> bool:
        return self.unifier.unify(a, b, node)

    def concrete_name(self, type_id: int) -> str | None:
        return self.store.concrete_name(type_id)

    def _require(self, node: object, child: object, name: str) -> None:
        if child is None:
            raise CheckerContractError(
                node_type(node) + " is missing required '" + name + "'", node
            )

    # ── Entry point ───────────────────────────────────────────

    def check_statements(self, statements: list) -> CheckResult:
        self.reset()
        logger.debug("type check: %d top-level statements", len(statements))
        for stmt in statements:
            self.visit(stmt)
        logger.debug(
            "type check done: %d diagnostics, %d type cells",
            len(self.diagnostics),
            len(self.store),
        )
        return CheckResult(
            list(self.diagnostics.items),
            self.store,
            self.node_types,
            self.return_types,
        )

    # ── Dispatch ──────────────────────────────────────────────

    def visit(self, node: object) -> int:
        """Infer the type of a node, record it in the side table, return its id."""
        tid = self._dispatch(node)
        self.node_types[node] = tid
        return tid

    def _dispatch(self, node: object) -> int:
        if isinstance(node, StringLiteral):
            return self.store.concrete(STRING)
        if isinstance(node, NumericLiteral):
            return self.store.concrete(NUMBER)
        if isinstance(node, BooleanLiteral):
            return self.store.concrete(BOOLEAN)
        if isinstance(node, Identifier):
            return self.visit_identifier(node)
        if isinstance(node, BinaryExpression):
            return self.visit_binary(node)
        if isinstance(node, ConditionalExpression):
            return self.visit_conditional(node)
        if isinstance(node, CallExpression):
            return self.visit_call(node)
        if isinstance(node, ArrowFunctionExpression):
            return self.visit_arrow_function(node)
        if isinstance(node, ArrayLiteral):
            return self.visit_array_literal(node)
        if isinstance(node, ObjectLiteral):
            return self.visit_object_literal(node)
        if isinstance(node, ConstDeclaration):
            return self.visit_const_declaration(node)
        if isinstance(node, BlockStatement):
            return self.visit_block(node)
        if isinstance(node, ReturnStatement):
            return self.visit_return(node)
        if node is None:
            raise CheckerContractError("cannot type-check a missing node", node)
        self.error(
            "Unknown node type during type checking: " + node_type(node), node
        )
        return self.store.fresh()

    # ── Identifiers ───────────────────────────────────────────

    def visit_identifier(self, node: Identifier) -> int:
        found = self.scopes.lookup(node.name)
        if found is not None:
            return found
        # Free identifier: one fresh variable per node, reused on revisits
        cached = self.node_types.get(node)
        if cached is not None:
            return cached
        return self.store.fresh()

    # ── Operators ─────────────────────────────────────────────

    def visit_binary(self, node: BinaryExpression) -> int:
        self._require(node, node.left, "left")
        self._require(node, node.right, "right")
        left = self.visit(node.left)
        right = self.visit(node.right)
        left_name = self.concrete_name(left)
        right_name = self.concrete_name(right)

        if node.operator == "+":
            if left_name and right_name and left_name != right_name:
                self.error(
                    "Type mismatch in binary operation: cannot add "
                    + left_name
                    + " to "
                    + right_name,
                    node,
                    E_BIN_ADD_MISMATCH,
                )
                return self.store.concrete(NUMBER)
            if not self.unify(left, right, node):
                self.error(
                    "Type mismatch in binary operation: cannot add "
                    + (left_name or "unknown")
                    + " to "
                    + (right_name or "unknown"),
                    node,
                    E_BIN_ADD_MISMATCH,
                )
                return self.store.concrete(NUMBER)
            return left

        if node.operator == "*":
            number = self.store.concrete(NUMBER)
            if left_name and left_name != NUMBER:
                self.error(
                    "Type mismatch: expected Number for left operand of '*' operator, got "
                    + left_name,
                    node.left,
                    E_BIN_MUL_OPERAND,
                )
            if right_name and right_name != NUMBER:
                self.error(
                    "Type mismatch: expected Number for right operand of '*' operator, got "
                    + right_name,
                    node.right,
                    E_BIN_MUL_OPERAND,
                )
            if not left_name:
                self.unify(left, number, node.left)
            if not right_name:
                self.unify(right, number, node.right)
            return number

        if left_name and right_name and left_name != right_name:
            self.error(
                "Type mismatch in binary operation: operands must have the same type, got "
                + left_name
                + " and "
                + right_name,
                node,
                E_BIN_OPERANDS_MISMATCH,
            )
        elif not self.unify(left, right, node):
            self.error(
                "Type mismatch in binary operation: operands must have the same type",
                node,
                E_BIN_OPERANDS_MISMATCH,
            )
        return left

    def visit_conditional(self, node: ConditionalExpression) -> int:
        self._require(node, node.test, "test")
        self._require(node, node.consequent, "consequent")
        self._require(node, node.alternate, "alternate")
        test = self.visit(node.test)
        consequent = self.visit(node.consequent)
        alternate = self.visit(node.alternate)
        boolean = self.store.concrete(BOOLEAN)
        test_name = self.concrete_name(test)
        if test_name and test_name != BOOLEAN:
            self.error(
                "Type mismatch in ternary: condition must be Boolean, got " + test_name,
                node.test,
                E_TERNARY_TEST_NOT_BOOL,
            )
        else:
            self.unify(test, boolean, node.test)
        cons_name = self.concrete_name(consequent)
        alt_name = self.concrete_name(alternate)
        if cons_name and alt_name and cons_name != alt_name:
            self.error(
                "Type mismatch in ternary: branches must have the same type, got "
                + cons_name
                + " and "
                + alt_name,
                node,
                E_TERNARY_BRANCH_MISMATCH,
            )
        else:
            self.unify(consequent, alternate, node)
        return consequent

    # ── Calls and functions ───────────────────────────────────

    def visit_call(self, node: CallExpression) -> int:
        self._require(node, node.callee, "callee")
        self.visit(node.callee)
        ret = self.store.fresh()
        arg_types: list[int] = []
        for arg in node.arguments:
            arg_types.append(self.visit(arg))
        # Unary calls to a bound identifier thread the argument through
        if (
            len(arg_types) == 1
            and isinstance(node.callee, Identifier)
            and self.scopes.lookup(node.callee.name) is not None
        ):
            self.unify(ret, arg_types[0], node)
        return ret

    def visit_arrow_function(self, node: ArrowFunctionExpression) -> int:
        self._require(node, node.body, "body")
        self.scopes.push()
        try:
            for param in node.params:
                if param.type_annotation is not None:
                    param_type = type_from_annotation(self.store, param.type_annotation)
                else:
                    param_type = self.store.fresh()
                self.node_types[param] = param_type
                self.scopes.define(param.name, param_type)
            body_type = self.visit(node.body)
            self.return_types[node] = body_type
            if node.return_type is not None:
                annotated = type_from_annotation(self.store, node.return_type)
                self.unify(body_type, annotated, node)
        finally:
            self.scopes.pop()
        return self.store.concrete(FUNCTION)

    # ── Literals ──────────────────────────────────────────────

    def visit_array_literal(self, node: ArrayLiteral) -> int:
        if len(node.elements) == 0:
            return self.store.concrete(ARRAY)
        first = self.visit(node.elements[0])
        first_name = self.concrete_name(first)
        i = 1
        while i < len(node.elements):
            elem = node.elements[i]
            elem_type = self.visit(elem)
            elem_name = self.concrete_name(elem_type)
            if first_name and elem_name and first_name != elem_name:
                self.error(
                    "Type mismatch in array literal: array elements must have consistent types, found "
                    + first_name
                    + " and "
                    + elem_name,
                    elem,
                    E_ARRAY_ELEMENT_MISMATCH,
                )
            elif not self.unify(first, elem_type, elem):
                self.error(
                    "Type mismatch in array literal: array elements must have consistent types",
                    elem,
                    E_ARRAY_ELEMENT_MISMATCH,
                )
            i += 1
        return self.store.concrete(ARRAY)

    def visit_object_literal(self, node: ObjectLiteral) -> int:
        fields: dict[str, int] = {}
        for prop in node.properties:
            self._require(prop, prop.value, "value")
            fields[prop.key] = self.visit(prop.value)
            self.node_types[prop] = fields[prop.key]
        return self.store.object(fields)

    # ── Statements ────────────────────────────────────────────

    def visit_block(self, node: BlockStatement) -> int:
        last = self.store.concrete(VOID)
        self.scopes.push()
        try:
            for stmt in node.body:
                last = self.visit(stmt)
        finally:
            self.scopes.pop()
        return last

    def visit_return(self, node: ReturnStatement) -> int:
        if node.argument is not None:
            return self.visit(node.argument)
        return self.store.concrete(VOID)

    def visit_const_declaration(self, node: ConstDeclaration) -> int:
        self._require(node, node.id, "id")
        self._require(node, node.init, "init")
        init_type = self.visit(node.init)
        self.node_types[node.id] = init_type
        self.scopes.define(node.id.name, init_type)

        ann = node.type_annotation
        if ann is None:
            return init_type
        if isinstance(ann, FunctionTypeAnnotation) and isinstance(
            node.init, ArrowFunctionExpression
        ):
            self._check_function_annotation(node, ann, node.init, init_type)
        elif isinstance(ann, ObjectTypeAnnotation) and isinstance(
            node.init, ObjectLiteral
        ):
            self._check_object_annotation(node, ann, node.init, init_type)
        elif isinstance(ann, UnionTypeAnnotation):
            self._check_union_annotation(node, ann, init_type)
        elif isinstance(ann, ArrayTypeAnnotation) and isinstance(
            node.init, ArrayLiteral
        ):
            self._check_array_annotation(node, ann, node.init, init_type)
        else:
            annotated = type_from_annotation(self.store, ann)
            self.unify(init_type, annotated, node)
        return init_type

    def _check_function_annotation(
        self,
        node: ConstDeclaration,
        ann: FunctionTypeAnnotation,
        fn: ArrowFunctionExpression,
        init_type: int,
    ) -> None:
        annotated_ret = type_from_annotation(self.store, ann.return_type)
        inferred_ret = self.return_types.get(fn)
        if inferred_ret is not None:
            self.unify(inferred_ret, annotated_ret, node)
        # Extra parameters on either side are ignored
        n = min(len(ann.param_types), len(fn.params))
        for i in range(n):
            param_ann = type_from_annotation(
                self.store, ann.param_types[i].type_annotation
            )
            param = fn.params[i]
            param_type = self.node_types.get(param)
            if param_type is None:
                param_type = self.store.fresh()
                self.node_types[param] = param_type
            self.unify(param_type, param_ann, node)
        self.unify(init_type, self.store.concrete(FUNCTION), node)

    def _check_object_annotation(
        self,
        node: ConstDeclaration,
        ann: ObjectTypeAnnotation,
        obj: ObjectLiteral,
        init_type: int,
    ) -> None:
        annotated = type_from_annotation(self.store, ann)
        props = {}
        for prop in obj.properties:
            props[prop.key] = prop
        for f in ann.fields:
            prop = props.get(f.name)
            if prop is None:
                self.error(
                    "Type mismatch: missing field '" + f.name + "' in object literal",
                    node,
                    E_OBJECT_FIELD_MISSING,
                )
                continue
            prop_type = self._type_of_visited(prop.value)
            field_type = type_from_annotation(self.store, f.type_annotation)
            self.unify(prop_type, field_type, prop.value)
        self.unify(init_type, annotated, node)

    def _check_union_annotation(
        self, node: ConstDeclaration, ann: UnionTypeAnnotation, init_type: int
    ) -> None:
        init_name = self.concrete_name(init_type)
        chosen: int | None = None
        for option in ann.types:
            option_type = type_from_annotation(self.store, option)
            option_name = self.concrete_name(option_type)
            if init_name and option_name and init_name != option_name:
                continue
            chosen = option_type
            break
        if chosen is None:
            self.error(
                "Type mismatch: value does not match any type in the union",
                node,
                E_UNION_NO_MATCH,
            )
            return
        self.unify(init_type, chosen, node)

    def _check_array_annotation(
        self,
        node: ConstDeclaration,
        ann: ArrayTypeAnnotation,
        arr: ArrayLiteral,
        init_type: int,
    ) -> None:
        element_ann = type_from_annotation(self.store, ann.element_type)
        for elem in arr.elements:
            self.unify(self._type_of_visited(elem), element_ann, elem)
        annotated = type_from_annotation(self.store, ann)
        self.unify(init_type, annotated, node)

    def _type_of_visited(self, node: object) -> int:
        """Type id recorded when the initializer was visited."""
        tid = self.node_types.get(node)
        if tid is None:
            return self.visit(node)
        return tid


# ============================================================
# PUBLIC API
# ============================================================


def type_check(statements: Program | list) -> CheckResult:
    """Type-check top-level statements with fresh state. Returns a CheckResult."""
    if isinstance(statements, Program):
        statements = statements.body
    return Checker().check_statements(statements)
