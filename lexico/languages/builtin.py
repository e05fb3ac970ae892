"""Languages available without an idiomas table (memory backend, tests).

Stop-words come from the NLTK stopwords corpus, downloaded on first import
when it is not installed yet.
"""

import nltk
from nltk.corpus import stopwords

from lexico.languages.models import LanguageProfile, LexicalRule

try:
    nltk.data.find("corpora/stopwords")
except LookupError:
    nltk.download("stopwords", quiet=True)


def _stop_words(language: str) -> frozenset[str]:
    return frozenset(stopwords.words(language))


ENGLISH = LanguageProfile(
    code="en",
    name="English",
    stop_words=_stop_words("english"),
    tokenizer="word",
    rules=(
        LexicalRule("contractions", r"(?i)\b\w+'(?:s|t|re|ve|ll|d|m)\b"),
        LexicalRule("passive_voice", r"(?i)\b(?:is|are|was|were|been|being)\s+\w+ed\b"),
    ),
)

SPANISH = LanguageProfile(
    code="es",
    name="Español",
    stop_words=_stop_words("spanish"),
    tokenizer="word",
    strip_diacritics=True,
    rules=(
        LexicalRule("inverted_punctuation", r"[¿¡]"),
        LexicalRule("missing_inverted_question", r"(?:^|[.!?]\s+)[^¿.!?]+\?"),
    ),
)

FRENCH = LanguageProfile(
    code="fr",
    name="Français",
    stop_words=_stop_words("french"),
    tokenizer="elision",
    strip_diacritics=True,
    rules=(
        LexicalRule("elisions", r"(?i)\b[cdjlmnst]'\w"),
        LexicalRule("guillemets", r"[«»]"),
    ),
)

GERMAN = LanguageProfile(
    code="de",
    name="Deutsch",
    stop_words=_stop_words("german"),
    tokenizer="word",
    rules=(
        LexicalRule("eszett", r"ß"),
        LexicalRule("long_compounds", r"\b\w{20,}\b"),
    ),
)

PORTUGUESE = LanguageProfile(
    code="pt",
    name="Português",
    stop_words=_stop_words("portuguese"),
    tokenizer="word",
    strip_diacritics=True,
    rules=(
        LexicalRule("nasal_vowels", r"[ãõ]"),
        LexicalRule("cedilla", r"ç"),
    ),
)

BUILTIN_PROFILES: tuple[LanguageProfile, ...] = (
    ENGLISH,
    SPANISH,
    FRENCH,
    GERMAN,
    PORTUGUESE,
)
