"""Exception hierarchy for the append core.

Each exception carries the :class:`ErrorKind` tag the service facade uses when
converting it into a :class:`models.results.Failure`.
"""

from __future__ import annotations

from typing import List

from models.results import ErrorKind


class AppendToFileError(Exception):
    kind: ErrorKind = ErrorKind.IO

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class EmptyInputError(AppendToFileError):
    kind = ErrorKind.VALIDATION

    def __init__(self, message: str = "Nothing to append. Text is empty.") -> None:
        super().__init__(message)


class PolicyBlockedError(AppendToFileError):
    """Raised when a target path fails the extension allowlist."""

    kind = ErrorKind.POLICY

    def __init__(self, path: str, allowed: List[str]) -> None:
        super().__init__(
            f"Blocked by extension filter: '{path}' is not in your allowed "
            f"extensions. Allowed: {', '.join(allowed)}"
        )
        self.path = path
        self.allowed = list(allowed)


class NoHistoryError(AppendToFileError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str = "No append operation to undo yet.") -> None:
        super().__init__(message)


class FileGoneError(AppendToFileError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, path: str) -> None:
        super().__init__(
            f"The file no longer exists, so undo cannot be safely applied: {path}"
        )
        self.path = path


class MissingBackupError(AppendToFileError):
    kind = ErrorKind.NOT_FOUND


class StaleStateError(AppendToFileError):
    kind = ErrorKind.STALE_STATE

    def __init__(
        self, message: str = "Undo blocked: file changed after the last append."
    ) -> None:
        super().__init__(message)


class StorageError(AppendToFileError):
    kind = ErrorKind.IO


class IndexUnavailableError(AppendToFileError):
    """A content index could not search one root."""

    kind = ErrorKind.IO

    def __init__(self, root: str, reason: str) -> None:
        super().__init__(f"Content index failed for {root}: {reason}")
        self.root = root
        self.reason = reason


__all__ = [
    "AppendToFileError",
    "EmptyInputError",
    "FileGoneError",
    "IndexUnavailableError",
    "MissingBackupError",
    "NoHistoryError",
    "PolicyBlockedError",
    "StaleStateError",
    "StorageError",
]
