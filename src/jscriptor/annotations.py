"""Translate parsed type annotations into type-store entries."""

from __future__ import annotations

from .ast import (
    ArrayTypeAnnotation,
    FunctionTypeAnnotation,
    ObjectTypeAnnotation,
    TypeAnnotation,
    TypeNode,
)
from .store import ARRAY, BOOLEAN, FUNCTION, NUMBER, STRING, VOID, TypeStore

BUILTIN_NAMES: dict[str, str] = {
    "number": NUMBER,
    "string": STRING,
    "boolean": BOOLEAN,
    "void": VOID,
    "Void": VOID,
    "Array": ARRAY,
}


def canonical_name(value_type: str) -> str:
    """Canonical concrete name for a named annotation.

    Unrecognized names are used as nominal types with the first letter
    upper-cased, so `float` and `Float` name the same type.
    """
    if value_type in BUILTIN_NAMES:
        return BUILTIN_NAMES[value_type]
    if value_type == "":
        return "Unknown"
    return value_type[0].upper() + value_type[1:]


def type_from_annotation(store: TypeStore, node: TypeNode | None) -> int:
    """Allocate a type id for an annotation. Absent or union => fresh variable.

    Array and function annotations erase to their nominal cell; element and
    signature types are only consulted from the annotation node itself.
    """
    if node is None:
        return store.fresh()
    if isinstance(node, TypeAnnotation):
        return store.concrete(canonical_name(node.value_type))
    if isinstance(node, ArrayTypeAnnotation):
        return store.concrete(ARRAY)
    if isinstance(node, FunctionTypeAnnotation):
        return store.concrete(FUNCTION)
    if isinstance(node, ObjectTypeAnnotation):
        fields: dict[str, int] = {}
        for f in node.fields:
            fields[f.name] = type_from_annotation(store, f.type_annotation)
        return store.object(fields)
    return store.fresh()
