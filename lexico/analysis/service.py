import threading
import time

from lexico.analysis.exceptions import (
    AnalysisCancelledError,
    ConfigurationUnavailableError,
    DocumentNotFoundError,
    DocumentTooLargeError,
    EmptyDocumentError,
    LanguageResolutionFailedError,
    UnsupportedTextError,
)
from lexico.analysis.models import (
    Analysis,
    AnalysisOutcome,
    Document,
    PendingCommit,
    ProcessingLogEntry,
    StageOutcome,
    new_id,
)
from lexico.analysis.pipeline import PipelineContext
from lexico.config.settings import Settings
from lexico.configuration.base import BaseConfigurationStore
from lexico.configuration.exceptions import ConfigError
from lexico.configuration.factory import ConfigurationStoreFactory
from lexico.configuration.models import AnalysisConfiguration, StageSetting
from lexico.database.exceptions import StorageError, StorageUnavailableError
from lexico.languages.exceptions import LanguageError
from lexico.languages.factory import LanguageRegistryFactory
from lexico.languages.models import LanguageProfile
from lexico.languages.registry import LanguageRegistry
from lexico.logging.logger import Log
from lexico.persistence.base import BasePersistenceGateway
from lexico.persistence.factory import PersistenceGatewayFactory
from lexico.stages.exceptions import StageError
from lexico.stages.models import StageInput
from lexico.stages.registry import TOKENIZATION, get_stage
from lexico.stages.tokenization import tokenize

LANGUAGE_RESOLUTION_STAGE = "language_resolution"


class AnalysisService:
    """Orchestrates the lexical-analysis pipeline for one document per call.

    Pipeline: validate -> resolve language -> resolve configuration ->
    run stages (in memory) -> commit Document + Analysis + log as one unit.

    The service holds no per-call state, so one instance can serve
    concurrent callers.
    """

    def __init__(
        self,
        registry: LanguageRegistry,
        config_store: BaseConfigurationStore,
        gateway: BasePersistenceGateway,
        settings: Settings,
    ) -> None:
        self._registry = registry
        self._config_store = config_store
        self._gateway = gateway
        self._settings = settings

    def analyze(
        self,
        raw_text: str,
        language_hint: str | None = None,
        config_id: str | None = None,
        config_version: int | None = None,
        cancel_event: threading.Event | None = None,
    ) -> AnalysisOutcome:
        """Analyze a new document and persist the result.

        Raises:
            InputError: empty, oversized or NUL-bearing text; nothing persisted.
            LanguageResolutionFailedError: nothing persisted.
            ConfigurationUnavailableError: nothing persisted.
            AnalysisCancelledError: ``cancel_event`` was set before commit.
            StorageError: commit failed; ``error.pending`` holds the records.
        """
        self._validate_input(raw_text)
        profile = self._resolve_language(language_hint, raw_text)
        configuration = self._resolve_configuration(config_id, config_version)

        document = Document.create(raw_text, profile.code)
        Log.info(
            f"Analyzing document {document.id} ({document.size_chars} chars) "
            f"as '{profile.code}' with {configuration.reference}"
        )
        pending = self._run_pipeline(document, profile, configuration, new_document=True)
        return self._commit(pending, cancel_event)

    def reanalyze(
        self,
        document_id: str,
        config_id: str | None = None,
        config_version: int | None = None,
        cancel_event: threading.Event | None = None,
    ) -> AnalysisOutcome:
        """Record a new Analysis for an already stored document.

        The document text and language are reused as stored; only a new
        Analysis and its log entries are written.

        Raises:
            DocumentNotFoundError: no document with that id is stored.
            LanguageResolutionFailedError: the stored language is no longer
                registered.
        """
        document = self._gateway.find_document(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        profile = self._stored_language(document)
        configuration = self._resolve_configuration(config_id, config_version)
        Log.info(f"Re-analyzing document {document.id} with {configuration.reference}")
        pending = self._run_pipeline(document, profile, configuration, new_document=False)
        return self._commit(pending, cancel_event)

    def retry_commit(self, pending: PendingCommit) -> AnalysisOutcome:
        """Commit records from a failed attempt again, without recomputing."""
        return self._commit(pending, None)

    def health(self) -> dict[str, object]:
        return {
            "status": "ok",
            "env": self._settings.app_env,
            "storage": self._gateway.describe(),
            "languages": self._registry.codes(),
        }

    def _validate_input(self, raw_text: str) -> None:
        if not raw_text or not raw_text.strip():
            raise EmptyDocumentError("Document is empty")
        if len(raw_text) > self._settings.max_document_chars:
            raise DocumentTooLargeError(
                f"Document has {len(raw_text)} characters "
                f"(max {self._settings.max_document_chars})"
            )
        nul_offset = raw_text.find("\x00")
        if nul_offset != -1:
            # Text columns reject NUL; usually a UTF-16 file read as UTF-8.
            raise UnsupportedTextError(f"Document contains a NUL character at offset {nul_offset}")

    def _resolve_language(self, hint: str | None, raw_text: str) -> LanguageProfile:
        started = time.perf_counter()
        try:
            return self._registry.resolve(hint, raw_text)
        except LanguageError as exc:
            entry = ProcessingLogEntry(
                id=new_id(),
                document_id=new_id(),
                analysis_id="",
                sequence=0,
                stage=LANGUAGE_RESOLUTION_STAGE,
                outcome=StageOutcome.FAILED,
                duration_ms=_elapsed_ms(started),
                reason=str(exc),
            )
            Log.warning(f"Language resolution failed: {exc}", hint=hint)
            raise LanguageResolutionFailedError(str(exc), log_entries=[entry]) from exc

    def _stored_language(self, document: Document) -> LanguageProfile:
        profile = self._registry.get(document.language_code)
        if profile is not None:
            return profile
        reason = (
            f"Language '{document.language_code}' of document {document.id} "
            f"is no longer registered"
        )
        entry = ProcessingLogEntry(
            id=new_id(),
            document_id=document.id,
            analysis_id="",
            sequence=0,
            stage=LANGUAGE_RESOLUTION_STAGE,
            outcome=StageOutcome.FAILED,
            duration_ms=0.0,
            reason=reason,
        )
        Log.warning(reason)
        raise LanguageResolutionFailedError(reason, log_entries=[entry])

    def _resolve_configuration(
        self,
        config_id: str | None,
        config_version: int | None,
    ) -> AnalysisConfiguration:
        try:
            if config_id is not None:
                return self._config_store.get(config_id, config_version)
            if config_version is not None:
                raise ConfigurationUnavailableError(
                    "A configuration version was given without a configuration id"
                )
            return self._config_store.get_active(self._settings.analysis_purpose)
        except (ConfigError, StorageError) as exc:
            Log.warning(f"Configuration unavailable: {exc}", error_type=type(exc).__name__)
            raise ConfigurationUnavailableError(str(exc)) from exc

    def _run_pipeline(
        self,
        document: Document,
        profile: LanguageProfile,
        configuration: AnalysisConfiguration,
        new_document: bool,
    ) -> PendingCommit:
        context = PipelineContext(
            document=document,
            profile=profile,
            configuration=configuration,
            other_profiles=tuple(
                other
                for code, other in self._registry.snapshot().items()
                if code != profile.code
            ),
        )
        for sequence, setting in enumerate(configuration.stages, start=1):
            self._run_stage(context, sequence, setting)

        analysis = Analysis(
            id=context.analysis_id,
            document_id=document.id,
            configuration_id=configuration.id,
            configuration_version=configuration.version,
            language_code=profile.code,
            status=context.status(),
            metrics=context.metrics,
        )
        Log.info(
            f"Analysis {analysis.id} finished with status {analysis.status.value}",
            succeeded=context.succeeded,
            failed=context.failed,
        )
        return PendingCommit(
            document=document,
            analysis=analysis,
            log_entries=tuple(context.log_entries),
            new_document=new_document,
        )

    def _run_stage(
        self,
        context: PipelineContext,
        sequence: int,
        setting: StageSetting,
    ) -> None:
        definition = get_stage(setting.name)
        if not setting.enabled:
            context.record(
                sequence, setting.name, StageOutcome.SKIPPED, reason="disabled by configuration"
            )
            return
        if definition.requires_tokens and context.tokenization_failed:
            context.record(
                sequence,
                setting.name,
                StageOutcome.SKIPPED,
                reason="tokenization did not produce tokens",
            )
            return

        started = time.perf_counter()
        try:
            if definition.requires_tokens and context.tokens is None:
                # Tokenization not enabled: derive tokens with default rules.
                context.tokens = tokenize(context.document.text, context.profile, {})
            output = definition.run(
                StageInput(
                    text=context.document.text,
                    profile=context.profile,
                    tokens=context.tokens,
                    other_profiles=context.other_profiles,
                ),
                context.configuration.params_for(setting.name),
            )
        except StageError as exc:
            # Stage failures are isolated: record, keep going.
            reason = str(exc) or type(exc).__name__
            if setting.name == TOKENIZATION:
                context.tokenization_failed = True
            context.record(
                sequence,
                setting.name,
                StageOutcome.FAILED,
                duration_ms=_elapsed_ms(started),
                reason=reason,
            )
            Log.warning(
                f"Stage '{setting.name}' failed for document {context.document.id}: {reason}",
                error_type=type(exc).__name__,
            )
            return

        context.metrics[setting.name] = output.metrics
        if output.tokens is not None:
            context.tokens = output.tokens
        context.record(
            sequence, setting.name, StageOutcome.OK, duration_ms=_elapsed_ms(started)
        )

    def _commit(
        self,
        pending: PendingCommit,
        cancel_event: threading.Event | None,
    ) -> AnalysisOutcome:
        attempts = max(1, self._settings.max_commit_attempts)
        attempt = 0
        while True:
            attempt += 1
            if cancel_event is not None and cancel_event.is_set():
                Log.info(f"Analysis {pending.analysis.id} cancelled before commit")
                raise AnalysisCancelledError(
                    "Request abandoned before commit; nothing was written",
                    log_entries=pending.log_entries,
                )
            try:
                if pending.new_document:
                    commit_id = self._gateway.commit(
                        pending.document, pending.analysis, pending.log_entries
                    )
                else:
                    commit_id = self._gateway.commit_analysis(
                        pending.analysis, pending.log_entries
                    )
            except StorageUnavailableError as exc:
                if attempt >= attempts:
                    exc.pending = pending
                    Log.error(
                        f"Commit of analysis {pending.analysis.id} failed after "
                        f"{attempt} attempts: {exc}"
                    )
                    raise
                Log.warning(
                    f"Storage unavailable for analysis {pending.analysis.id}, "
                    f"retrying (attempt {attempt + 1} of {attempts})"
                )
                time.sleep(self._settings.commit_retry_delay_seconds)
            except StorageError as exc:
                exc.pending = pending
                Log.error(f"Commit of analysis {pending.analysis.id} failed: {exc}")
                raise
            else:
                return AnalysisOutcome(
                    document=pending.document,
                    analysis=pending.analysis,
                    log_entries=pending.log_entries,
                    commit_id=commit_id,
                )


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 3)


def build_analysis_service(
    settings: Settings,
    gateway: BasePersistenceGateway | None = None,
) -> AnalysisService:
    """Build an AnalysisService with the adapters selected by settings."""
    return AnalysisService(
        registry=LanguageRegistryFactory.create(settings),
        config_store=ConfigurationStoreFactory.create(settings),
        gateway=gateway or PersistenceGatewayFactory.create(settings),
        settings=settings,
    )
