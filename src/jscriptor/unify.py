"""Unifier: equality-constraint solver over the type store."""

from __future__ import annotations

from .diagnostics import E_UNIFY_MISMATCH, Diagnostics
from .store import Concrete, Symlink, TypeStore, Unbound


class Unifier:
    def __init__(self, store: TypeStore, diagnostics: Diagnostics) -> None:
        self.store: TypeStore = store
        self.diagnostics: Diagnostics = diagnostics

    def unify(self, a: int, b: int, node: object | None = None) -> bool:
        """Assert that a and b denote the same type.

        Returns False and leaves the store untouched when both sides resolve
        to different concrete types. Otherwise links one representative to
        the other: an unbound side always points at the bound side, and a
        concrete side wins over any other bound cell.
        """
        ra = self.store.resolve(a)
        rb = self.store.resolve(b)
        if ra == rb:
            return True
        ca = self.store.entry(ra)
        cb = self.store.entry(rb)
        if isinstance(ca, Concrete) and isinstance(cb, Concrete):
            if ca.name != cb.name:
                self.report_mismatch(ra, rb, node)
                return False
            # Same name, distinct cells
            self.store.set_entry(ra, Symlink(rb))
            return True
        if isinstance(ca, Unbound):
            self.store.set_entry(ra, Symlink(rb))
            return True
        if isinstance(cb, Unbound):
            self.store.set_entry(rb, Symlink(ra))
            return True
        if isinstance(ca, Concrete):
            self.store.set_entry(rb, Symlink(ra))
        else:
            self.store.set_entry(ra, Symlink(rb))
        return True

    def report_mismatch(self, a: int, b: int, node: object | None) -> None:
        a_name = self.store.concrete_name(a) or "unknown"
        b_name = self.store.concrete_name(b) or "unknown"
        self.diagnostics.report(
            "Type mismatch: cannot unify " + a_name + " with " + b_name,
            node,
            E_UNIFY_MISMATCH,
        )
