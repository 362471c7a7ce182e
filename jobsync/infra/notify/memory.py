from __future__ import annotations

import itertools
from dataclasses import dataclass

from jobsync.infra.ports.notifier import NotifierPort


@dataclass(frozen=True)
class Notice:
    level: str  # loading | success | error
    message: str
    toast_id: str


class MemoryNotifier(NotifierPort):
    def __init__(self):
        self.notices: list[Notice] = []
        self._ids = itertools.count(1)

    def _next_id(self) -> str:
        return f"toast_{next(self._ids)}"

    def loading(self, message: str) -> str:
        toast_id = self._next_id()
        self.notices.append(Notice("loading", message, toast_id))
        return toast_id

    def success(self, message: str, *, toast_id: str | None = None) -> None:
        self.notices.append(Notice("success", message, toast_id or self._next_id()))

    def error(self, message: str, *, toast_id: str | None = None) -> None:
        self.notices.append(Notice("error", message, toast_id or self._next_id()))

    def levels(self) -> list[str]:
        return [notice.level for notice in self.notices]

    def messages(self, level: str | None = None) -> list[str]:
        return [notice.message for notice in self.notices if level is None or notice.level == level]
