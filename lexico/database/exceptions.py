class StorageError(Exception):
    """Base exception for persistence failures.

    Carries the uncommitted records (``pending``) when raised from the
    analysis service, so a caller can retry the commit without recomputing.
    """

    kind = "storage_error"
    retryable = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.reason = message
        self.pending: object | None = None


class StorageConflictError(StorageError):
    """Raised when a commit violates a uniqueness constraint."""

    kind = "storage_conflict"
    retryable = True


class StorageUnavailableError(StorageError):
    """Raised on transient backend failures, timeouts included."""

    kind = "storage_unavailable"
    retryable = True


class InvalidCommitError(StorageError):
    """Raised when the records handed to a commit are inconsistent."""

    kind = "invalid_commit"
