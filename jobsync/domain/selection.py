from __future__ import annotations

from typing import Iterable


class SelectionTracker:
    """Field names the user has armed for the next extraction call.

    Insertion ordered so the submitted ``selected_columns`` follow the order
    in which the user picked them.
    """

    def __init__(self, initial: Iterable[str] = ()):
        self._items: list[str] = []
        for name in initial:
            if name not in self._items:
                self._items.append(name)

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    @property
    def items(self) -> tuple[str, ...]:
        return tuple(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def toggle(self, name: str) -> bool:
        """Flip membership of ``name``; return True when it is now selected."""
        if name in self._items:
            self._items.remove(name)
            return False
        self._items.append(name)
        return True

    def discard(self, name: str) -> None:
        if name in self._items:
            self._items.remove(name)

    def clear(self) -> None:
        self._items.clear()

    def snapshot(self) -> tuple[str, ...]:
        return tuple(self._items)
