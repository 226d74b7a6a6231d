"""Type store: append-only table of type cells with union-find resolution."""

from __future__ import annotations

from dataclasses import dataclass


NUMBER = "Number"
STRING = "String"
BOOLEAN = "Boolean"
VOID = "Void"
ARRAY = "Array"
FUNCTION = "Function"


# ============================================================
# CELLS
# ============================================================


@dataclass(frozen=True)
class Cell:
    """Base for all type cells."""


@dataclass(frozen=True)
class Unbound(Cell):
    """Fresh type variable with no constraints yet."""


@dataclass(frozen=True)
class Symlink(Cell):
    """Forwarded to another cell."""

    target: int


@dataclass(frozen=True)
class Concrete(Cell):
    """Nominal base type."""

    name: str


@dataclass(frozen=True)
class ObjectType(Cell):
    """Minimal structural record: field name -> type id."""

    fields: dict[str, int]

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.fields.items())))


UNBOUND = Unbound()


# ============================================================
# STORE
# ============================================================


class TypeStore:
    """Growth-only cell table. Ids are list indices, allocated from 0."""

    def __init__(self) -> None:
        self.cells: list[Cell] = []

    def __len__(self) -> int:
        return len(self.cells)

    def _alloc(self, cell: Cell) -> int:
        self.cells.append(cell)
        return len(self.cells) - 1

    def fresh(self) -> int:
        return self._alloc(UNBOUND)

    def concrete(self, name: str) -> int:
        return self._alloc(Concrete(name))

    def object(self, fields: dict[str, int]) -> int:
        return self._alloc(ObjectType(dict(fields)))

    def entry(self, type_id: int) -> Cell:
        return self.cells[type_id]

    def set_entry(self, type_id: int, cell: Cell) -> None:
        self.cells[type_id] = cell

    def resolve(self, type_id: int) -> int:
        """Follow symlinks to the representative id, compressing the path."""
        root = type_id
        cell = self.cells[root]
        while isinstance(cell, Symlink):
            root = cell.target
            cell = self.cells[root]
        # Second pass: point every hop straight at the root
        cur = type_id
        cell = self.cells[cur]
        while isinstance(cell, Symlink) and cell.target != root:
            self.cells[cur] = Symlink(root)
            cur = cell.target
            cell = self.cells[cur]
        return root

    def concrete_name(self, type_id: int) -> str | None:
        """Name of the representative cell if it is concrete, else None."""
        cell = self.cells[self.resolve(type_id)]
        if isinstance(cell, Concrete):
            return cell.name
        return None

    def describe(self, type_id: int) -> str:
        """Human-readable rendering of a type id."""
        return self._describe(type_id, set())

    def _describe(self, type_id: int, seen: set[int]) -> str:
        root = self.resolve(type_id)
        cell = self.cells[root]
        if isinstance(cell, Concrete):
            return cell.name
        if isinstance(cell, ObjectType):
            if root in seen:
                return "{...}"
            seen.add(root)
            parts: list[str] = []
            for name, fid in cell.fields.items():
                parts.append(name + ": " + self._describe(fid, seen))
            seen.discard(root)
            return "{" + ", ".join(parts) + "}"
        return "'t" + str(root)
