"""Error kinds and exit codes for varlink-cli."""

from __future__ import annotations

from enum import IntEnum


class CliError(IntEnum):
    PANIC = 1
    CANCELED = 2
    MISSING_COMMAND = 3
    COMMAND_NOT_FOUND = 4
    INVALID_ARGUMENT = 5
    MISSING_ARGUMENT = 6
    INVALID_JSON = 7
    CANNOT_RESOLVE = 8
    CANNOT_CONNECT = 9
    CALL_FAILED = 10
    REMOTE_ERROR = 11
    CONNECTION_CLOSED = 12

    def describe(self) -> str:
        return self.name.replace("_", " ").capitalize()


class CliFailure(RuntimeError):
    """Carries a ``CliError`` from the place it is detected to the command."""

    def __init__(self, error: CliError, message: str = "") -> None:
        super().__init__(message or error.describe())
        self.error = error


def exit_code(error: CliError) -> int:
    """Exit status for ``error``; cancellation is an ordinary termination."""
    if error is CliError.CANCELED:
        return 0
    return int(error)


__all__ = ["CliError", "CliFailure", "exit_code"]
