from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from lexico.analysis.models import AnalysisOutcome
from lexico.analysis.service import AnalysisService
from lexico.config.settings import Settings
from lexico.logging.logger import Log
from lexico.worker.file_loader import FileLoader


@dataclass(frozen=True)
class BatchItemResult:
    """Outcome of one file: either an AnalysisOutcome or the error that stopped it."""

    path: Path
    outcome: AnalysisOutcome | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BatchRunner:
    """Analyze many documents; a failing document never blocks the others."""

    def __init__(
        self,
        service: AnalysisService,
        file_loader: FileLoader,
        settings: Settings,
    ) -> None:
        self._service = service
        self._file_loader = file_loader
        self._settings = settings

    def run(
        self,
        paths: Sequence[Path],
        language_hint: str | None = None,
        config_id: str | None = None,
        config_version: int | None = None,
    ) -> list[BatchItemResult]:
        """Analyze every path; results come back in input order."""
        Log.info(f"Batch started with {len(paths)} documents")

        def run_one(path: Path) -> BatchItemResult:
            return self._run_one(path, language_hint, config_id, config_version)

        workers = max(1, self._settings.batch_workers)
        if workers == 1 or len(paths) <= 1:
            results = [run_one(path) for path in paths]
        else:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(pool.map(run_one, paths))

        failed = sum(1 for result in results if not result.ok)
        Log.info(f"Batch finished: {len(results) - failed} analyzed, {failed} failed")
        return results

    def _run_one(
        self,
        path: Path,
        language_hint: str | None,
        config_id: str | None,
        config_version: int | None,
    ) -> BatchItemResult:
        try:
            text = self._file_loader.load(path)
            outcome = self._service.analyze(
                text,
                language_hint=language_hint,
                config_id=config_id,
                config_version=config_version,
            )
        except Exception as exc:
            Log.error(f"Document {path} failed: {exc}", error_type=type(exc).__name__)
            return BatchItemResult(path=path, error=exc)
        Log.info(
            f"Document {path} analyzed: {outcome.analysis.status.value}",
            analysis_id=outcome.analysis.id,
        )
        return BatchItemResult(path=path, outcome=outcome)
