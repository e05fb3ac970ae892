"""Plain-mapping views of pipeline results for the calling transport layer."""

from typing import Any

from lexico.analysis.exceptions import PipelineError
from lexico.analysis.models import Analysis, AnalysisOutcome, ProcessingLogEntry
from lexico.database.exceptions import StorageError


def analysis_to_dict(analysis: Analysis) -> dict[str, Any]:
    return {
        "id": analysis.id,
        "document_id": analysis.document_id,
        "configuration": {
            "id": analysis.configuration_id,
            "version": analysis.configuration_version,
        },
        "language": analysis.language_code,
        "status": analysis.status.value,
        "metrics": {stage: dict(values) for stage, values in analysis.metrics.items()},
        "computed_at": analysis.computed_at.isoformat(),
    }


def log_entry_to_dict(entry: ProcessingLogEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "sequence": entry.sequence,
        "stage": entry.stage,
        "outcome": entry.outcome.value,
        "reason": entry.reason,
        "duration_ms": entry.duration_ms,
        "created_at": entry.created_at.isoformat(),
    }


def outcome_to_dict(outcome: AnalysisOutcome) -> dict[str, Any]:
    payload = analysis_to_dict(outcome.analysis)
    payload["commit_id"] = outcome.commit_id
    payload["document"] = {
        "id": outcome.document.id,
        "size_chars": outcome.document.size_chars,
        "content_sha256": outcome.document.content_sha256,
        "ingested_at": outcome.document.ingested_at.isoformat(),
    }
    payload["log"] = [log_entry_to_dict(entry) for entry in outcome.log_entries]
    return payload


def error_to_dict(error: PipelineError | StorageError) -> dict[str, Any]:
    """Structured error: machine-readable kind plus human-readable reason."""
    payload: dict[str, Any] = {"kind": error.kind, "reason": error.reason}
    if isinstance(error, StorageError):
        payload["retryable"] = error.retryable
    elif error.log_entries:
        payload["log"] = [log_entry_to_dict(entry) for entry in error.log_entries]
    return payload
