from dataclasses import dataclass, field

TOKENIZER_VARIANTS = frozenset({"word", "elision", "whitespace"})


@dataclass(frozen=True)
class LexicalRule:
    """Language-specific pattern check reported by the rules stage."""

    name: str
    pattern: str


@dataclass(frozen=True)
class LanguageProfile:
    """Rule set of a registered language (a row of the idiomas table)."""

    code: str
    name: str
    stop_words: frozenset[str] = field(default_factory=frozenset)
    tokenizer: str = "word"
    strip_diacritics: bool = False
    rules: tuple[LexicalRule, ...] = ()

    def __post_init__(self) -> None:
        if not self.code or self.code != self.code.strip().lower():
            raise ValueError(f"Language code must be a lower-case tag, got {self.code!r}")
        if self.tokenizer not in TOKENIZER_VARIANTS:
            raise ValueError(
                f"Unknown tokenizer '{self.tokenizer}'. Choose from: {sorted(TOKENIZER_VARIANTS)}"
            )
