import hashlib
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, NewType

CommitId = NewType("CommitId", str)


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AnalysisStatus(str, Enum):
    SUCCEEDED = "succeeded"
    PARTIALLY_FAILED = "partially_failed"
    FAILED = "failed"


class StageOutcome(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class Document:
    """An ingested text (documentos). Never mutated once built."""

    id: str
    text: str
    language_code: str
    size_chars: int
    content_sha256: str
    ingested_at: datetime

    @classmethod
    def create(cls, text: str, language_code: str) -> "Document":
        return cls(
            id=new_id(),
            text=text,
            language_code=language_code,
            size_chars=len(text),
            content_sha256=hashlib.sha256(text.encode("utf-8")).hexdigest(),
            ingested_at=utc_now(),
        )


@dataclass(frozen=True)
class Analysis:
    """Write-once result of one pipeline run (analisis).

    ``metrics`` only holds stages that succeeded, keyed by stage name.
    """

    id: str
    document_id: str
    configuration_id: str
    configuration_version: int
    language_code: str
    status: AnalysisStatus
    metrics: dict[str, dict[str, Any]] = field(default_factory=dict)
    computed_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class ProcessingLogEntry:
    """Append-only audit record of one stage within one analysis attempt."""

    id: str
    document_id: str
    analysis_id: str
    sequence: int
    stage: str
    outcome: StageOutcome
    duration_ms: float
    reason: str | None = None
    created_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class PendingCommit:
    """Computed records waiting for the persistence gateway.

    ``new_document`` is False for a re-analysis of an already stored document.
    """

    document: Document
    analysis: Analysis
    log_entries: tuple[ProcessingLogEntry, ...]
    new_document: bool = True


@dataclass(frozen=True)
class AnalysisOutcome:
    """What a caller gets back from a successful ``analyze`` call."""

    document: Document
    analysis: Analysis
    log_entries: tuple[ProcessingLogEntry, ...]
    commit_id: CommitId
