class StageError(Exception):
    """Base exception for a failed analysis stage. Never fatal to a run."""


class NoTokensError(StageError):
    """Raised when tokenization yields zero tokens (empty document)."""


class UnsupportedEncodingError(StageError):
    """Raised when the text carries replacement or control characters."""


class InvalidStageParameterError(StageError):
    """Raised when a configured stage parameter has an invalid value."""


class MissingTokensError(StageError):
    """Raised when a token-consuming stage runs without tokens."""


class UnknownStageError(KeyError):
    """Raised when a stage identifier is not in the stage registry."""
