"""The main stack of a symbolic script execution."""

from __future__ import annotations

from .expr import StackExpr


class Stack:
    """A stack of expressions that grows downwards on demand.

    Reading below the bottom of the stack materializes unknown initial stack
    items, numbered from the top of the initial stack starting at 0.
    """

    def __init__(self) -> None:
        self._elements: list = []
        self._next_element_id = 0

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self):
        return iter(self._elements)

    def __repr__(self) -> str:
        return f"Stack({self._elements!r})"

    def items_used(self) -> int:
        """How many items of the initial stack were touched."""
        return self._next_element_id

    def _grow_to(self, min_len: int) -> None:
        missing = min_len - len(self._elements)
        if missing <= 0:
            return
        self._next_element_id += missing
        top_id = self._next_element_id
        self._elements[:0] = [StackExpr(top_id - i - 1) for i in range(missing)]

    @staticmethod
    def _check_index(index: int) -> None:
        if index < 0:
            raise IndexError(f"negative stack index: {index}")

    def get_back(self, index: int):
        """The element ``index`` places below the top."""
        self._check_index(index)
        self._grow_to(index + 1)
        return self._elements[-1 - index]

    def push(self, value) -> None:
        self._elements.append(value)

    def extend_from_within_back(self, amount: int, offset: int) -> None:
        """Copy ``amount`` elements lying ``offset`` below the top onto the top."""
        self._check_index(amount)
        self._check_index(offset)
        self._grow_to(amount + offset)
        end = len(self._elements) - offset
        self._elements.extend(self._elements[end - amount : end])

    def remove_back(self, index: int):
        """Remove and return the element ``index`` places below the top."""
        self._check_index(index)
        self._grow_to(index + 1)
        return self._elements.pop(len(self._elements) - 1 - index)

    def swap_back(self, a: int, b: int) -> None:
        """Swap the elements ``a`` and ``b`` places below the top."""
        self._check_index(a)
        self._check_index(b)
        self._grow_to(max(a, b) + 1)
        last = len(self._elements) - 1
        items = self._elements
        items[last - a], items[last - b] = items[last - b], items[last - a]

    def pop(self, n: int) -> list:
        """Remove the top ``n`` elements, returned bottom first."""
        self._check_index(n)
        self._grow_to(n)
        split = len(self._elements) - n
        popped = self._elements[split:]
        del self._elements[split:]
        return popped

    def copy(self) -> Stack:
        """An independent copy of this stack."""
        other = Stack()
        other._elements = list(self._elements)
        other._next_element_id = self._next_element_id
        return other