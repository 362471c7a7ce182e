from __future__ import annotations

import itertools
import logging

from jobsync.infra.ports.notifier import NotifierPort


class LoggingNotifier(NotifierPort):
    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger("jobsync.notify")
        self._ids = itertools.count(1)

    def loading(self, message: str) -> str:
        toast_id = f"toast_{next(self._ids)}"
        self._logger.info("[%s] %s", toast_id, message)
        return toast_id

    def success(self, message: str, *, toast_id: str | None = None) -> None:
        self._logger.info("[%s] %s", toast_id or "-", message)

    def error(self, message: str, *, toast_id: str | None = None) -> None:
        self._logger.warning("[%s] %s", toast_id or "-", message)
