"""Error types raised by the task store and the command dispatcher."""

from typing import Optional


class TaskerError(Exception):
    """Base class for every error the CLI reports before exiting with 1."""

    exit_code = 1


class UsageError(TaskerError):
    """Missing or malformed command-line arguments."""

    def __init__(self, message: str, show_usage: bool = False):
        super().__init__(message)
        self.show_usage = show_usage


class NotFoundError(TaskerError):
    """No task carries the requested id."""

    def __init__(self, message: str = "Task not found."):
        super().__init__(message)


class StorageError(TaskerError):
    """Reading or writing the data file failed for a reason other than absence."""

    def __init__(self, message: str, cause: Optional[OSError] = None):
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.cause = cause


class ParseError(TaskerError):
    """The data file exists but does not hold a valid task list."""
