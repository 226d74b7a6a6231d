"""Lexical scope stack mapping identifier names to type ids."""

from __future__ import annotations


class ScopeStack:
    """Stack of name -> type id frames. The outermost frame is the global scope."""

    def __init__(self) -> None:
        self.frames: list[dict[str, int]] = [{}]

    @property
    def depth(self) -> int:
        return len(self.frames)

    def reset(self) -> None:
        self.frames = [{}]

    def push(self) -> None:
        self.frames.append({})

    def pop(self) -> None:
        if len(self.frames) == 1:
            raise RuntimeError("cannot pop the global scope")
        self.frames.pop()

    def define(self, name: str, type_id: int) -> None:
        self.frames[-1][name] = type_id

    def lookup(self, name: str) -> int | None:
        # Search scopes innermost-out
        i = len(self.frames) - 1
        while i >= 0:
            if name in self.frames[i]:
                return self.frames[i][name]
            i -= 1
        return None
