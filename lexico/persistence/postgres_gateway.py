from collections.abc import Callable, Sequence
from typing import Any

import psycopg
from psycopg.types.json import Jsonb

from lexico.analysis.models import (
    Analysis,
    CommitId,
    Document,
    ProcessingLogEntry,
    new_id,
)
from lexico.database.connection import get_connection
from lexico.database.exceptions import (
    InvalidCommitError,
    StorageConflictError,
    StorageError,
    StorageUnavailableError,
)
from lexico.database.repositories.documents_repository import DocumentsRepository
from lexico.logging.logger import Log
from lexico.persistence.base import BasePersistenceGateway


class PostgresPersistenceGateway(BasePersistenceGateway):
    """Writes each unit in a single PostgreSQL transaction.

    The transaction is opened only once every record is computed and is
    rolled back on any error, so readers never see a partial unit.
    """

    def __init__(self, documents_repo: DocumentsRepository | None = None) -> None:
        self._documents_repo = documents_repo or DocumentsRepository()

    def commit(
        self,
        document: Document,
        analysis: Analysis,
        log_entries: Sequence[ProcessingLogEntry],
    ) -> CommitId:
        self.check_unit(document.id, analysis, log_entries)
        commit_id = CommitId(new_id())

        def write(conn: psycopg.Connection[Any]) -> None:
            self._insert_document(conn, document)
            self._insert_analysis(conn, analysis, commit_id)
            self._insert_log_entries(conn, log_entries)

        self._run_transaction(write, analysis.id)
        Log.info(
            f"Committed document {document.id} with analysis {analysis.id}",
            commit_id=commit_id,
        )
        return commit_id

    def commit_analysis(
        self,
        analysis: Analysis,
        log_entries: Sequence[ProcessingLogEntry],
    ) -> CommitId:
        self.check_unit(analysis.document_id, analysis, log_entries)
        commit_id = CommitId(new_id())

        def write(conn: psycopg.Connection[Any]) -> None:
            self._insert_analysis(conn, analysis, commit_id)
            self._insert_log_entries(conn, log_entries)

        self._run_transaction(write, analysis.id)
        Log.info(
            f"Committed analysis {analysis.id} for document {analysis.document_id}",
            commit_id=commit_id,
        )
        return commit_id

    def find_document(self, document_id: str) -> Document | None:
        try:
            return self._documents_repo.find_by_id(document_id)
        except psycopg.OperationalError as exc:
            raise StorageUnavailableError(f"Database unavailable: {exc}") from exc

    def describe(self) -> str:
        return "postgres"

    def _run_transaction(
        self,
        write: Callable[[psycopg.Connection[Any]], None],
        analysis_id: str,
    ) -> None:
        try:
            with get_connection() as conn:
                with conn.transaction():
                    write(conn)
        except psycopg.errors.UniqueViolation as exc:
            raise StorageConflictError(
                f"Uniqueness violation while committing analysis {analysis_id}: {exc}"
            ) from exc
        except psycopg.errors.ForeignKeyViolation as exc:
            raise InvalidCommitError(
                f"Analysis {analysis_id} references a missing record: {exc}"
            ) from exc
        except psycopg.OperationalError as exc:
            raise StorageUnavailableError(
                f"Database unavailable while committing analysis {analysis_id}: {exc}"
            ) from exc
        except (psycopg.DataError, psycopg.IntegrityError) as exc:
            raise InvalidCommitError(
                f"Database rejected the records of analysis {analysis_id}: {exc}"
            ) from exc
        except psycopg.Error as exc:
            raise StorageError(f"Commit of analysis {analysis_id} failed: {exc}") from exc

    def _insert_document(self, conn: psycopg.Connection[Any], document: Document) -> None:
        conn.execute(
            """
            INSERT INTO documentos
                (id, text, language_code, size_chars, content_sha256, ingested_at)
            VALUES (%s, %s, %s, %s, %s, %s)
            """,
            (
                document.id,
                document.text,
                document.language_code,
                document.size_chars,
                document.content_sha256,
                document.ingested_at,
            ),
        )

    def _insert_analysis(
        self,
        conn: psycopg.Connection[Any],
        analysis: Analysis,
        commit_id: CommitId,
    ) -> None:
        conn.execute(
            """
            INSERT INTO analisis
                (id, document_id, configuration_id, configuration_version,
                 language_code, status, metrics, commit_id, computed_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
            """,
            (
                analysis.id,
                analysis.document_id,
                analysis.configuration_id,
                analysis.configuration_version,
                analysis.language_code,
                analysis.status.value,
                Jsonb(analysis.metrics),
                commit_id,
                analysis.computed_at,
            ),
        )

    def _insert_log_entries(
        self,
        conn: psycopg.Connection[Any],
        log_entries: Sequence[ProcessingLogEntry],
    ) -> None:
        with conn.cursor() as cur:
            cur.executemany(
                """
                INSERT INTO log_procesamiento
                    (id, document_id, analysis_id, sequence, stage,
                     outcome, reason, duration_ms, created_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                [
                    (
                        entry.id,
                        entry.document_id,
                        entry.analysis_id,
                        entry.sequence,
                        entry.stage,
                        entry.outcome.value,
                        entry.reason,
                        entry.duration_ms,
                        entry.created_at,
                    )
                    for entry in log_entries
                ],
            )
