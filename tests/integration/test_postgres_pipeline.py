from dataclasses import replace
from typing import Any

import psycopg
import pytest

from lexico.analysis.models import AnalysisStatus, Document, new_id
from lexico.analysis.service import AnalysisService
from lexico.config.settings import Settings
from lexico.database.exceptions import InvalidCommitError, StorageConflictError
from lexico.database.repositories.analysis_repository import AnalysisRepository
from lexico.database.repositories.configuration_repository import ConfigurationRepository
from lexico.database.repositories.documents_repository import DocumentsRepository
from lexico.database.repositories.processing_log_repository import ProcessingLogRepository
from lexico.languages.factory import LanguageRegistryFactory
from lexico.persistence.postgres_gateway import PostgresPersistenceGateway

pytestmark = pytest.mark.integration

_TEXT = "The quick brown fox jumps over the lazy dog. The dog sleeps."


@pytest.fixture
def gateway(integration_pool: None) -> PostgresPersistenceGateway:
    return PostgresPersistenceGateway()


@pytest.fixture
def pg_service(
    test_settings: Settings, gateway: PostgresPersistenceGateway
) -> AnalysisService:
    return AnalysisService(
        LanguageRegistryFactory.create(test_settings),
        ConfigurationRepository(),
        gateway,
        test_settings,
    )


class TestAnalyzeAndPersist:
    def test_unit_is_stored(self, pg_service: AnalysisService) -> None:
        outcome = pg_service.analyze(_TEXT, language_hint="en")

        stored = DocumentsRepository().find_by_id(outcome.document.id)
        assert stored is not None
        assert stored.content_sha256 == outcome.document.content_sha256

        [analysis] = AnalysisRepository().list_for_document(outcome.document.id)
        assert analysis.status is AnalysisStatus.SUCCEEDED
        assert analysis.configuration_id == "default"
        assert analysis.metrics["frequency"]["token_count"] == 12

        entries = ProcessingLogRepository().list_for_analysis(outcome.analysis.id)
        assert [entry.sequence for entry in entries] == [1, 2, 3, 4]

    def test_records_are_readable_by_id(self, pg_service: AnalysisService) -> None:
        outcome = pg_service.analyze(_TEXT, language_hint="en")

        stored = AnalysisRepository().find_by_id(outcome.analysis.id)
        assert stored is not None
        assert stored.metrics == outcome.analysis.metrics
        recent = DocumentsRepository().list_recent(limit=10)
        assert outcome.document.id in [document.id for document in recent]

    def test_reanalyze_appends_analysis(self, pg_service: AnalysisService) -> None:
        first = pg_service.analyze(_TEXT, language_hint="en")

        pg_service.reanalyze(first.document.id)

        assert len(AnalysisRepository().list_for_document(first.document.id)) == 2
        assert len(ProcessingLogRepository().list_for_document(first.document.id)) == 8


class TestAtomicity:
    def test_failed_log_insert_rolls_back_document(
        self, pg_service: AnalysisService, gateway: PostgresPersistenceGateway
    ) -> None:
        template = pg_service.analyze(_TEXT, language_hint="en")
        document = Document.create(_TEXT, "en")
        analysis = replace(template.analysis, id=new_id(), document_id=document.id)
        entry = replace(
            template.log_entries[0],
            id=new_id(),
            document_id=document.id,
            analysis_id=analysis.id,
        )

        with pytest.raises(StorageConflictError):
            gateway.commit(document, analysis, [entry, entry])

        assert DocumentsRepository().find_by_id(document.id) is None

    def test_duplicate_document_is_a_conflict(
        self, pg_service: AnalysisService, gateway: PostgresPersistenceGateway
    ) -> None:
        outcome = pg_service.analyze(_TEXT, language_hint="en")

        with pytest.raises(StorageConflictError):
            gateway.commit(outcome.document, outcome.analysis, outcome.log_entries)

    def test_unknown_configuration_is_rejected(
        self, pg_service: AnalysisService, gateway: PostgresPersistenceGateway
    ) -> None:
        template = pg_service.analyze(_TEXT, language_hint="en")
        document = Document.create(_TEXT, "en")
        analysis = replace(
            template.analysis,
            id=new_id(),
            document_id=document.id,
            configuration_id="does-not-exist",
        )
        entries = [
            replace(entry, id=new_id(), document_id=document.id, analysis_id=analysis.id)
            for entry in template.log_entries
        ]

        with pytest.raises(InvalidCommitError):
            gateway.commit(document, analysis, entries)

        assert DocumentsRepository().find_by_id(document.id) is None


class TestWriteOnce:
    def test_analysis_rows_reject_update(
        self, pg_service: AnalysisService, db_conn: psycopg.Connection[Any]
    ) -> None:
        outcome = pg_service.analyze(_TEXT, language_hint="en")

        with pytest.raises(psycopg.errors.RaiseException):
            db_conn.execute(
                "UPDATE analisis SET status = 'failed' WHERE id = %s", (outcome.analysis.id,)
            )
        db_conn.rollback()

    def test_log_rows_reject_update(
        self, pg_service: AnalysisService, db_conn: psycopg.Connection[Any]
    ) -> None:
        outcome = pg_service.analyze(_TEXT, language_hint="en")

        with pytest.raises(psycopg.errors.RaiseException):
            db_conn.execute(
                "UPDATE log_procesamiento SET reason = 'edited' WHERE analysis_id = %s",
                (outcome.analysis.id,),
            )
        db_conn.rollback()
