"""Structured type-check diagnostics and their stable error codes."""

from __future__ import annotations

from dataclasses import dataclass

from .ast import node_type


# Stable codes, one per mismatch category
E_TYPECHECK = "E_TYPECHECK"
E_UNIFY_MISMATCH = "E_UNIFY_MISMATCH"
E_BIN_ADD_MISMATCH = "E_BIN_ADD_MISMATCH"
E_BIN_MUL_OPERAND = "E_BIN_MUL_OPERAND"
E_BIN_OPERANDS_MISMATCH = "E_BIN_OPERANDS_MISMATCH"
E_TERNARY_TEST_NOT_BOOL = "E_TERNARY_TEST_NOT_BOOL"
E_TERNARY_BRANCH_MISMATCH = "E_TERNARY_BRANCH_MISMATCH"
E_ARRAY_ELEMENT_MISMATCH = "E_ARRAY_ELEMENT_MISMATCH"
E_OBJECT_FIELD_MISSING = "E_OBJECT_FIELD_MISSING"
E_UNION_NO_MATCH = "E_UNION_NO_MATCH"

ALL_CODES: tuple[str, ...] = (
    E_TYPECHECK,
    E_UNIFY_MISMATCH,
    E_BIN_ADD_MISMATCH,
    E_BIN_MUL_OPERAND,
    E_BIN_OPERANDS_MISMATCH,
    E_TERNARY_TEST_NOT_BOOL,
    E_TERNARY_BRANCH_MISMATCH,
    E_ARRAY_ELEMENT_MISMATCH,
    E_OBJECT_FIELD_MISSING,
    E_UNION_NO_MATCH,
)


@dataclass
class Diagnostic:
    """One non-fatal type error.

    `position` is a character offset into the source, not a byte offset.
    """

    code: str
    message: str
    node: object | None = None
    position: int | None = None

    @property
    def node_type(self) -> str | None:
        if self.node is None:
            return None
        return node_type(self.node)

    def to_dict(self) -> dict[str, object]:
        return {
            "code": self.code,
            "message": self.message,
            "nodeType": self.node_type,
            "position": self.position,
        }

    def __str__(self) -> str:
        return self.message


class Diagnostics:
    """Accumulates diagnostics for one type-check run."""

    def __init__(self) -> None:
        self.items: list[Diagnostic] = []

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def reset(self) -> None:
        self.items = []

    def report(
        self, message: str, node: object | None = None, code: str = E_TYPECHECK
    ) -> Diagnostic:
        position = None
        pos = getattr(node, "pos", None)
        if pos is not None:
            position = pos.offset
        diag = Diagnostic(code, message, node, position)
        self.items.append(diag)
        return diag
