from dataclasses import dataclass, field
from typing import Any

from lexico.analysis.models import (
    AnalysisStatus,
    Document,
    ProcessingLogEntry,
    StageOutcome,
    new_id,
)
from lexico.configuration.models import AnalysisConfiguration
from lexico.languages.models import LanguageProfile
from lexico.stages.models import TokenStream


@dataclass(slots=True)
class PipelineContext:
    """Accumulates metrics and log entries while one document moves through the stages.

    Lives only in memory: nothing here is visible to storage until the
    gateway commits the finished unit.
    """

    document: Document
    profile: LanguageProfile
    configuration: AnalysisConfiguration
    other_profiles: tuple[LanguageProfile, ...] = ()
    analysis_id: str = field(default_factory=new_id)
    tokens: TokenStream | None = None
    tokenization_failed: bool = False
    metrics: dict[str, dict[str, Any]] = field(default_factory=dict)
    log_entries: list[ProcessingLogEntry] = field(default_factory=list)
    succeeded: int = 0
    failed: int = 0

    def record(
        self,
        sequence: int,
        stage: str,
        outcome: StageOutcome,
        duration_ms: float = 0.0,
        reason: str | None = None,
    ) -> ProcessingLogEntry:
        entry = ProcessingLogEntry(
            id=new_id(),
            document_id=self.document.id,
            analysis_id=self.analysis_id,
            sequence=sequence,
            stage=stage,
            outcome=outcome,
            duration_ms=duration_ms,
            reason=reason,
        )
        self.log_entries.append(entry)
        if outcome is StageOutcome.OK:
            self.succeeded += 1
        elif outcome is StageOutcome.FAILED:
            self.failed += 1
        return entry

    def status(self) -> AnalysisStatus:
        """Overall status from the recorded outcomes.

        A failed tokenization fails the run even if some stage managed to
        produce metrics without tokens.
        """
        if self.tokenization_failed or self.succeeded == 0:
            return AnalysisStatus.FAILED
        if self.failed:
            return AnalysisStatus.PARTIALLY_FAILED
        return AnalysisStatus.SUCCEEDED
