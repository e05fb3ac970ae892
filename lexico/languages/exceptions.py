class LanguageError(Exception):
    """Base exception for language resolution errors."""


class UnsupportedLanguageError(LanguageError):
    """Raised when no registered language matches a hint or a text sample."""
