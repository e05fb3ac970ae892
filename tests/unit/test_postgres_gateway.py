from collections.abc import Iterator
from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import psycopg
import pytest
from psycopg_pool import PoolTimeout

from lexico.analysis.models import (
    Analysis,
    AnalysisStatus,
    Document,
    ProcessingLogEntry,
    StageOutcome,
    new_id,
)
from lexico.config.settings import Settings
from lexico.database import connection
from lexico.database.connection import build_conninfo, get_connection
from lexico.database.exceptions import (
    InvalidCommitError,
    StorageConflictError,
    StorageError,
    StorageUnavailableError,
)
from lexico.persistence.postgres_gateway import PostgresPersistenceGateway


def _unit() -> tuple[Document, Analysis, list[ProcessingLogEntry]]:
    document = Document.create("the quick brown fox", "en")
    analysis = Analysis(
        id=new_id(),
        document_id=document.id,
        configuration_id="default",
        configuration_version=1,
        language_code="en",
        status=AnalysisStatus.SUCCEEDED,
    )
    entries = [
        ProcessingLogEntry(
            id=new_id(),
            document_id=document.id,
            analysis_id=analysis.id,
            sequence=sequence,
            stage=stage,
            outcome=StageOutcome.OK,
            duration_ms=0.1,
        )
        for sequence, stage in enumerate(("tokenization", "frequency"), start=1)
    ]
    return document, analysis, entries


def _mock_connection() -> MagicMock:
    conn = MagicMock()
    conn.transaction.return_value.__exit__ = MagicMock(return_value=False)
    conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    return conn


def _patch_connection(conn: MagicMock):  # type: ignore[no-untyped-def]
    @contextmanager
    def fake_get_connection() -> Iterator[MagicMock]:
        yield conn

    return patch(
        "lexico.persistence.postgres_gateway.get_connection", side_effect=fake_get_connection
    )


def _gateway() -> PostgresPersistenceGateway:
    return PostgresPersistenceGateway(documents_repo=MagicMock())


class TestCommit:
    def test_writes_all_records_in_one_transaction(self) -> None:
        conn = _mock_connection()
        document, analysis, entries = _unit()

        with _patch_connection(conn):
            commit_id = _gateway().commit(document, analysis, entries)

        assert commit_id
        conn.transaction.assert_called_once()
        assert conn.execute.call_count == 2
        cursor = conn.cursor.return_value.__enter__.return_value
        rows = cursor.executemany.call_args[0][1]
        assert [row[3] for row in rows] == [1, 2]

    def test_commit_analysis_skips_document_insert(self) -> None:
        conn = _mock_connection()
        _document, analysis, entries = _unit()

        with _patch_connection(conn):
            _gateway().commit_analysis(analysis, entries)

        assert conn.execute.call_count == 1
        assert "INSERT INTO analisis" in conn.execute.call_args[0][0]

    def test_unique_violation_maps_to_conflict(self) -> None:
        conn = _mock_connection()
        conn.execute.side_effect = psycopg.errors.UniqueViolation("duplicate key")

        with _patch_connection(conn), pytest.raises(StorageConflictError):
            _gateway().commit(*_unit())

    def test_foreign_key_violation_maps_to_invalid_commit(self) -> None:
        conn = _mock_connection()
        conn.execute.side_effect = psycopg.errors.ForeignKeyViolation("missing parent")

        with _patch_connection(conn), pytest.raises(InvalidCommitError):
            _gateway().commit(*_unit())

    def test_nul_in_text_maps_to_invalid_commit(self) -> None:
        conn = _mock_connection()
        conn.execute.side_effect = psycopg.DataError(
            "PostgreSQL text fields cannot contain NUL (0x00) bytes"
        )

        with _patch_connection(conn), pytest.raises(InvalidCommitError, match="NUL"):
            _gateway().commit(*_unit())

    def test_check_violation_maps_to_invalid_commit(self) -> None:
        conn = _mock_connection()
        conn.execute.side_effect = psycopg.errors.CheckViolation("size_chars must be positive")

        with _patch_connection(conn), pytest.raises(InvalidCommitError):
            _gateway().commit(*_unit())

    def test_trigger_exception_maps_to_storage_error(self) -> None:
        conn = _mock_connection()
        conn.execute.side_effect = psycopg.errors.RaiseException("analisis rows are write-once")

        with _patch_connection(conn), pytest.raises(StorageError) as exc_info:
            _gateway().commit(*_unit())

        assert exc_info.value.retryable is False

    def test_other_database_error_maps_to_storage_error(self) -> None:
        conn = _mock_connection()
        conn.execute.side_effect = psycopg.InternalError("unexpected backend state")

        with _patch_connection(conn), pytest.raises(StorageError) as exc_info:
            _gateway().commit(*_unit())

        assert type(exc_info.value) is StorageError
        assert isinstance(exc_info.value.__cause__, psycopg.InternalError)

    def test_operational_error_maps_to_unavailable(self) -> None:
        conn = _mock_connection()
        conn.execute.side_effect = psycopg.OperationalError("server closed the connection")

        with _patch_connection(conn), pytest.raises(StorageUnavailableError) as exc_info:
            _gateway().commit(*_unit())

        assert exc_info.value.retryable is True

    def test_pool_timeout_propagates_as_unavailable(self) -> None:
        with patch(
            "lexico.persistence.postgres_gateway.get_connection",
            side_effect=StorageUnavailableError("timed out"),
        ), pytest.raises(StorageUnavailableError):
            _gateway().commit(*_unit())

    def test_invalid_unit_never_opens_a_connection(self) -> None:
        document, analysis, _entries = _unit()
        with patch("lexico.persistence.postgres_gateway.get_connection") as mock_get:
            with pytest.raises(InvalidCommitError):
                _gateway().commit(document, analysis, [])
        mock_get.assert_not_called()


class TestFindDocument:
    def test_delegates_to_repository(self) -> None:
        repo = MagicMock()
        document = Document.create("text", "en")
        repo.find_by_id.return_value = document

        assert PostgresPersistenceGateway(repo).find_document(document.id) == document

    def test_operational_error_maps_to_unavailable(self) -> None:
        repo = MagicMock()
        repo.find_by_id.side_effect = psycopg.OperationalError("down")

        with pytest.raises(StorageUnavailableError):
            PostgresPersistenceGateway(repo).find_document(new_id())


class TestConnection:
    def test_conninfo_carries_timeouts(self) -> None:
        settings = Settings(_env_file=None, storage_timeout_seconds=2.5, db_host="db")

        conninfo = build_conninfo(settings)

        assert "host=db" in conninfo
        assert "connect_timeout=2" in conninfo
        assert "statement_timeout=2500" in conninfo

    def test_uninitialized_pool(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(connection, "_pool", None)
        with pytest.raises(RuntimeError, match="not initialized"):
            with get_connection():
                pass

    def test_pool_timeout_maps_to_unavailable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        pool = MagicMock()
        pool.connection.side_effect = PoolTimeout("no connection available")
        monkeypatch.setattr(connection, "_pool", pool)

        with pytest.raises(StorageUnavailableError, match="Timed out"):
            with get_connection():
                pass
