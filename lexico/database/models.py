"""Row -> domain record conversion for dict rows read with psycopg."""

from typing import Any

from lexico.analysis.models import (
    Analysis,
    AnalysisStatus,
    Document,
    ProcessingLogEntry,
    StageOutcome,
)
from lexico.configuration.models import AnalysisConfiguration, configuration_from_dict
from lexico.languages.models import LanguageProfile, LexicalRule


def document_from_row(row: dict[str, Any]) -> Document:
    return Document(
        id=str(row["id"]),
        text=row["text"],
        language_code=row["language_code"],
        size_chars=row["size_chars"],
        content_sha256=row["content_sha256"],
        ingested_at=row["ingested_at"],
    )


def analysis_from_row(row: dict[str, Any]) -> Analysis:
    return Analysis(
        id=str(row["id"]),
        document_id=str(row["document_id"]),
        configuration_id=row["configuration_id"],
        configuration_version=row["configuration_version"],
        language_code=row["language_code"],
        status=AnalysisStatus(row["status"]),
        metrics=row["metrics"] or {},
        computed_at=row["computed_at"],
    )


def log_entry_from_row(row: dict[str, Any]) -> ProcessingLogEntry:
    return ProcessingLogEntry(
        id=str(row["id"]),
        document_id=str(row["document_id"]),
        analysis_id=str(row["analysis_id"]),
        sequence=row["sequence"],
        stage=row["stage"],
        outcome=StageOutcome(row["outcome"]),
        reason=row["reason"],
        duration_ms=row["duration_ms"],
        created_at=row["created_at"],
    )


def language_from_row(row: dict[str, Any]) -> LanguageProfile:
    return LanguageProfile(
        code=row["code"],
        name=row["name"],
        stop_words=frozenset(row["stop_words"] or []),
        tokenizer=row["tokenizer"],
        strip_diacritics=row["strip_diacritics"],
        rules=tuple(
            LexicalRule(name=rule["name"], pattern=rule["pattern"])
            for rule in row["rules"] or []
        ),
    )


def configuration_from_row(row: dict[str, Any]) -> AnalysisConfiguration:
    return configuration_from_dict(row)
