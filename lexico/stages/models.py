from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from lexico.languages.folding import fold_diacritics
from lexico.languages.models import LanguageProfile
from lexico.stages.exceptions import MissingTokensError, NoTokensError

StageMetrics = dict[str, Any]


@dataclass(frozen=True)
class TokenStream:
    """Tokens of one document plus the normalization that produced them.

    Stop-word lookups must go through ``vocabulary`` so that word lists are
    normalized exactly like the tokens they are compared with.
    """

    tokens: tuple[str, ...]
    lowercase: bool = True
    strip_diacritics: bool = False

    def normalize(self, word: str) -> str:
        if self.strip_diacritics:
            word = fold_diacritics(word)
        if self.lowercase:
            word = word.lower()
        return word

    def vocabulary(self, words: Iterable[str]) -> frozenset[str]:
        return frozenset(self.normalize(word) for word in words)


@dataclass(frozen=True)
class StageInput:
    """Everything a stage may read. Stages never receive mutable state."""

    text: str
    profile: LanguageProfile
    tokens: TokenStream | None = None
    other_profiles: tuple[LanguageProfile, ...] = ()

    def require_tokens(self) -> TokenStream:
        if self.tokens is None:
            raise MissingTokensError("Stage requires tokens but none were produced")
        if not self.tokens.tokens:
            raise NoTokensError("Document produced zero tokens")
        return self.tokens


@dataclass(frozen=True)
class StageOutput:
    metrics: StageMetrics = field(default_factory=dict)
    tokens: TokenStream | None = None


StageFunction = Callable[[StageInput, Mapping[str, Any]], StageOutput]


@dataclass(frozen=True)
class StageDefinition:
    """A named pure stage function in the stage registry."""

    name: str
    run: StageFunction
    requires_tokens: bool = False
