from abc import ABC, abstractmethod
from collections.abc import Sequence

from lexico.analysis.models import Analysis, CommitId, Document, ProcessingLogEntry
from lexico.database.exceptions import InvalidCommitError


class BasePersistenceGateway(ABC):
    """Transactional boundary for Document + Analysis + processing log.

    Implementations store every record of one call or none of them. Both
    ``StorageConflictError`` and ``StorageUnavailableError`` leave storage
    untouched, so the caller may retry with the very same records.
    """

    @abstractmethod
    def commit(
        self,
        document: Document,
        analysis: Analysis,
        log_entries: Sequence[ProcessingLogEntry],
    ) -> CommitId:
        """Atomically store a new document, its analysis and its log entries.

        Raises:
            StorageConflictError: on a uniqueness violation.
            StorageUnavailableError: on a transient backend failure or timeout.
            InvalidCommitError: if the records do not reference each other.
        """

    @abstractmethod
    def commit_analysis(
        self,
        analysis: Analysis,
        log_entries: Sequence[ProcessingLogEntry],
    ) -> CommitId:
        """Atomically store a new analysis of an already stored document."""

    @abstractmethod
    def find_document(self, document_id: str) -> Document | None:
        """Return a stored document, or None."""

    def describe(self) -> str:
        """Backend name reported by the health payload."""
        return type(self).__name__

    @staticmethod
    def check_unit(
        document_id: str,
        analysis: Analysis,
        log_entries: Sequence[ProcessingLogEntry],
    ) -> None:
        """Reject record sets that would break cross-record references."""
        if analysis.document_id != document_id:
            raise InvalidCommitError(
                f"Analysis {analysis.id} references document {analysis.document_id}, "
                f"expected {document_id}"
            )
        if not log_entries:
            raise InvalidCommitError(f"Analysis {analysis.id} has no processing log entries")
        for entry in log_entries:
            if entry.document_id != document_id or entry.analysis_id != analysis.id:
                raise InvalidCommitError(
                    f"Log entry {entry.id} does not belong to analysis {analysis.id}"
                )
