import re
import threading
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from lexico.languages.exceptions import UnsupportedLanguageError
from lexico.languages.models import LanguageProfile
from lexico.logging.logger import Log

_DETECTION_TOKEN_RE = re.compile(r"[^\W\d_]+")


class LanguageRegistry:
    """Registered languages, read through immutable snapshots.

    Readers never lock: every administrative change (``register``, ``reload``)
    builds a new mapping and swaps the reference, so a resolution that already
    started keeps working on the snapshot it grabbed.
    """

    def __init__(
        self,
        profiles: Iterable[LanguageProfile] = (),
        min_confidence: float = 0.1,
        sample_chars: int = 5000,
    ) -> None:
        if not 0.0 <= min_confidence < 1.0:
            raise ValueError("min_confidence must be in [0, 1)")
        if sample_chars <= 0:
            raise ValueError("sample_chars must be positive")
        self._min_confidence = min_confidence
        self._sample_chars = sample_chars
        self._write_lock = threading.Lock()
        self._snapshot: Mapping[str, LanguageProfile] = self._freeze(profiles)

    @property
    def min_confidence(self) -> float:
        return self._min_confidence

    def snapshot(self) -> Mapping[str, LanguageProfile]:
        """Current read-only view, in registration order."""
        return self._snapshot

    def codes(self) -> list[str]:
        return list(self._snapshot)

    def get(self, code: str) -> LanguageProfile | None:
        return self._snapshot.get(code)

    def resolve(self, hint: str | None, sample_text: str) -> LanguageProfile:
        """Return the profile named by ``hint`` or detect one from ``sample_text``.

        A hint is matched case-insensitively, falling back to its primary
        subtag ("en-US" -> "en"). Without a usable hint the language is
        detected by stop-word overlap.

        Raises:
            UnsupportedLanguageError: if no language scores above the
                minimum confidence.
        """
        snapshot = self._snapshot
        if hint:
            profile = self._match_hint(snapshot, hint)
            if profile is not None:
                return profile
            Log.debug(f"Unknown language hint '{hint}', falling back to detection")
        profile, _score = self._detect(snapshot, sample_text)
        return profile

    def detect(self, sample_text: str) -> tuple[LanguageProfile, float]:
        """Detect the language of a text sample and return it with its score."""
        return self._detect(self._snapshot, sample_text)

    def scores(self, sample_text: str) -> list[tuple[str, float]]:
        """Stop-word overlap score of every registered language."""
        return self._score_all(self._snapshot, sample_text)

    def register(self, profile: LanguageProfile) -> None:
        """Add or replace one language. Replacing keeps its original position."""
        with self._write_lock:
            profiles = dict(self._snapshot)
            profiles[profile.code] = profile
            self._snapshot = MappingProxyType(profiles)
        Log.info(f"Registered language '{profile.code}'")

    def reload(self, profiles: Iterable[LanguageProfile]) -> None:
        """Replace every registered language at once."""
        frozen = self._freeze(profiles)
        with self._write_lock:
            self._snapshot = frozen
        Log.info(f"Language registry reloaded with {len(frozen)} languages")

    def _detect(
        self,
        snapshot: Mapping[str, LanguageProfile],
        sample_text: str,
    ) -> tuple[LanguageProfile, float]:
        best_code: str | None = None
        best_score = 0.0
        for code, score in self._score_all(snapshot, sample_text):
            # Strictly greater: ties keep the earlier registered language.
            if best_code is None or score > best_score:
                best_code, best_score = code, score
        if best_code is None or best_score <= self._min_confidence:
            raise UnsupportedLanguageError(
                f"No registered language scored above {self._min_confidence} "
                f"(best: {best_code or 'none'} at {best_score:.4f})"
            )
        return snapshot[best_code], best_score

    def _score_all(
        self,
        snapshot: Mapping[str, LanguageProfile],
        sample_text: str,
    ) -> list[tuple[str, float]]:
        tokens = _DETECTION_TOKEN_RE.findall(sample_text[: self._sample_chars].lower())
        if not tokens:
            return [(code, 0.0) for code in snapshot]
        results: list[tuple[str, float]] = []
        for code, profile in snapshot.items():
            hits = sum(1 for token in tokens if token in profile.stop_words)
            results.append((code, hits / len(tokens)))
        return results

    @staticmethod
    def _match_hint(
        snapshot: Mapping[str, LanguageProfile],
        hint: str,
    ) -> LanguageProfile | None:
        normalized = hint.strip().lower().replace("_", "-")
        profile = snapshot.get(normalized)
        if profile is None and "-" in normalized:
            profile = snapshot.get(normalized.split("-", 1)[0])
        return profile

    @staticmethod
    def _freeze(profiles: Iterable[LanguageProfile]) -> Mapping[str, LanguageProfile]:
        table: dict[str, LanguageProfile] = {}
        for profile in profiles:
            if profile.code in table:
                raise ValueError(f"Duplicate language code '{profile.code}'")
            table[profile.code] = profile
        return MappingProxyType(table)
