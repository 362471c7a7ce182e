"""Job identifiers handed out by the sandbox backend."""

from ulid import ULID

JOB_ID_PREFIX = "vid_"


def new_job_id(prefix: str = JOB_ID_PREFIX) -> str:
    """Return a time-ordered job id such as ``vid_01J5K...``."""
    return f"{prefix}{ULID()}"
