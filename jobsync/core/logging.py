from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: int | str = logging.INFO) -> None:
    """Install a single stream handler on the ``jobsync`` logger tree."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger("jobsync")
    root.setLevel(level)
    if any(getattr(handler, "_jobsync_handler", False) for handler in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._jobsync_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
