import threading
from collections.abc import Sequence

from lexico.analysis.models import (
    Analysis,
    CommitId,
    Document,
    ProcessingLogEntry,
    new_id,
)
from lexico.database.exceptions import InvalidCommitError, StorageConflictError
from lexico.persistence.base import BasePersistenceGateway


class InMemoryPersistenceGateway(BasePersistenceGateway):
    """Process-local storage with the same all-or-nothing contract as PostgreSQL.

    Every conflict check runs before the first write, under one lock, so a
    rejected commit leaves no record behind.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._documents: dict[str, Document] = {}
        self._analyses: dict[str, Analysis] = {}
        self._log_entries: dict[str, ProcessingLogEntry] = {}
        self._commits: dict[CommitId, str] = {}

    def commit(
        self,
        document: Document,
        analysis: Analysis,
        log_entries: Sequence[ProcessingLogEntry],
    ) -> CommitId:
        self.check_unit(document.id, analysis, log_entries)
        with self._lock:
            if document.id in self._documents:
                raise StorageConflictError(f"Document {document.id} already exists")
            self._check_conflicts(analysis, log_entries)
            self._documents[document.id] = document
            return self._apply(analysis, log_entries)

    def commit_analysis(
        self,
        analysis: Analysis,
        log_entries: Sequence[ProcessingLogEntry],
    ) -> CommitId:
        self.check_unit(analysis.document_id, analysis, log_entries)
        with self._lock:
            if analysis.document_id not in self._documents:
                raise InvalidCommitError(f"Document {analysis.document_id} does not exist")
            self._check_conflicts(analysis, log_entries)
            return self._apply(analysis, log_entries)

    def find_document(self, document_id: str) -> Document | None:
        return self._documents.get(document_id)

    def describe(self) -> str:
        return "memory"

    def documents(self) -> list[Document]:
        with self._lock:
            return list(self._documents.values())

    def analyses(self, document_id: str | None = None) -> list[Analysis]:
        with self._lock:
            return [
                analysis
                for analysis in self._analyses.values()
                if document_id is None or analysis.document_id == document_id
            ]

    def log_entries(self, document_id: str | None = None) -> list[ProcessingLogEntry]:
        with self._lock:
            return [
                entry
                for entry in self._log_entries.values()
                if document_id is None or entry.document_id == document_id
            ]

    def _check_conflicts(
        self,
        analysis: Analysis,
        log_entries: Sequence[ProcessingLogEntry],
    ) -> None:
        if analysis.id in self._analyses:
            raise StorageConflictError(f"Analysis {analysis.id} already exists")
        seen: set[str] = set()
        for entry in log_entries:
            if entry.id in self._log_entries or entry.id in seen:
                raise StorageConflictError(f"Log entry {entry.id} already exists")
            seen.add(entry.id)

    def _apply(
        self,
        analysis: Analysis,
        log_entries: Sequence[ProcessingLogEntry],
    ) -> CommitId:
        self._analyses[analysis.id] = analysis
        for entry in log_entries:
            self._log_entries[entry.id] = entry
        commit_id = CommitId(new_id())
        self._commits[commit_id] = analysis.id
        return commit_id
