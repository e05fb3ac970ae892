from collections.abc import Iterable

from lexico.analysis.models import ProcessingLogEntry


class PipelineError(Exception):
    """Base exception for a failed ``analyze`` invocation.

    Every subclass has a machine-readable ``kind``; ``reason`` is the
    human-readable explanation.
    """

    kind = "pipeline_error"

    def __init__(
        self,
        reason: str,
        log_entries: Iterable[ProcessingLogEntry] = (),
    ) -> None:
        super().__init__(reason)
        self.reason = reason
        self.log_entries: tuple[ProcessingLogEntry, ...] = tuple(log_entries)


class InputError(PipelineError):
    """Raised when the input text is rejected before any stage runs."""

    kind = "input_error"


class EmptyDocumentError(InputError):
    kind = "empty_document"


class DocumentTooLargeError(InputError):
    kind = "document_too_large"


class UnsupportedTextError(InputError):
    """Raised for text that cannot be stored as-is, such as NUL characters."""

    kind = "unsupported_text"


class LanguageResolutionFailedError(PipelineError):
    """Raised when the language is unknown or undetectable. Nothing is persisted."""

    kind = "language_resolution_failed"


class ConfigurationUnavailableError(PipelineError):
    """Raised when the requested or active configuration cannot be loaded."""

    kind = "configuration_unavailable"


class AnalysisCancelledError(PipelineError):
    """Raised when the caller abandoned the request before commit."""

    kind = "cancelled"


class DocumentNotFoundError(PipelineError):
    """Raised when re-analysis targets a document that is not stored."""

    kind = "document_not_found"
