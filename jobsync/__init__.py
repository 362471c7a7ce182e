"""Status synchronization and extraction workflow for media processing jobs."""

__version__ = "1.0.0"
