"""Tracking of nested OP_IF/OP_ELSE/OP_ENDIF execution state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class ConditionStack:
    """A stack of booleans, one per nested conditional, stored compactly.

    Individual values cannot be observed; only whether the stack is empty and
    whether any false value is present. Only the size and the position of the
    first false value are kept.
    """

    size: int = 0
    first_false_pos: Optional[int] = None

    def empty(self) -> bool:
        return self.size == 0

    def all_true(self) -> bool:
        return self.first_false_pos is None

    def push_back(self, f: bool) -> None:
        if self.first_false_pos is None and not f:
            self.first_false_pos = self.size
        self.size += 1

    def pop_back(self) -> None:
        if self.size == 0:
            raise IndexError("pop from empty condition stack")
        self.size -= 1
        if self.first_false_pos == self.size:
            self.first_false_pos = None

    def toggle_top(self) -> None:
        if self.size == 0:
            raise IndexError("toggle on empty condition stack")
        top = self.size - 1
        if self.first_false_pos is None:
            self.first_false_pos = top
        elif self.first_false_pos == top:
            self.first_false_pos = None
        # A false below the top makes toggling the top unobservable.