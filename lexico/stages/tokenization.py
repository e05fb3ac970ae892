"""Tokenization stage: split text into tokens using the language's rules.

Variants (``LanguageProfile.tokenizer``):
- ``word``: runs of letters/digits, keeping internal apostrophes ("don't").
- ``elision``: like ``word`` but apostrophes split tokens ("l'homme" -> "l", "homme").
- ``whitespace``: whitespace-separated chunks with edge punctuation trimmed.
"""

import re
import string
import unicodedata
from collections.abc import Mapping
from typing import Any

from lexico.languages.models import LanguageProfile
from lexico.stages.exceptions import NoTokensError, UnsupportedEncodingError
from lexico.stages.models import StageInput, StageOutput, TokenStream
from lexico.stages.params import get_bool, get_float, get_int

_WORD_RE = re.compile(r"[^\W_]+(?:['’][^\W_]+)*")
_ELISION_RE = re.compile(r"[^\W_]+")
_EDGE_PUNCTUATION = string.punctuation + "¿¡«»“”‘’…–—"
_ALLOWED_CONTROL = frozenset("\t\n\r\f\v")
_REPLACEMENT_CHAR = "\ufffd"


def invalid_char_ratio(text: str) -> float:
    """Share of characters that signal a decoding problem."""
    if not text:
        return 0.0
    invalid = sum(
        1
        for ch in text
        if ch == _REPLACEMENT_CHAR
        or (ch not in _ALLOWED_CONTROL and unicodedata.category(ch) == "Cc")
    )
    return invalid / len(text)


def split_tokens(text: str, tokenizer: str) -> list[str]:
    if tokenizer == "elision":
        return _ELISION_RE.findall(text)
    if tokenizer == "whitespace":
        chunks = (chunk.strip(_EDGE_PUNCTUATION) for chunk in text.split())
        return [chunk for chunk in chunks if chunk]
    return _WORD_RE.findall(text)


def tokenize(
    text: str,
    profile: LanguageProfile,
    params: Mapping[str, Any],
) -> TokenStream:
    """Turn raw text into a normalized token stream.

    Raises:
        UnsupportedEncodingError: if the text looks mis-decoded.
        InvalidStageParameterError: on bad parameter values.
    """
    lowercase = get_bool(params, "lowercase", True)
    strip_diacritics = get_bool(params, "strip_diacritics", profile.strip_diacritics)
    keep_numbers = get_bool(params, "keep_numbers", False)
    min_length = get_int(params, "min_token_length", 1, minimum=1)
    max_invalid = get_float(params, "max_invalid_char_ratio", 0.0, minimum=0.0, maximum=1.0)

    ratio = invalid_char_ratio(text)
    if ratio > max_invalid:
        raise UnsupportedEncodingError(
            f"Unsupported encoding detected: {ratio:.2%} of characters are "
            f"replacement or control characters"
        )

    stream = TokenStream(tokens=(), lowercase=lowercase, strip_diacritics=strip_diacritics)
    tokens: list[str] = []
    for raw in split_tokens(text, profile.tokenizer):
        if not keep_numbers and raw.isdigit():
            continue
        if len(raw) < min_length:
            continue
        tokens.append(stream.normalize(raw))
    return TokenStream(
        tokens=tuple(tokens),
        lowercase=lowercase,
        strip_diacritics=strip_diacritics,
    )


def run_tokenization(stage_input: StageInput, params: Mapping[str, Any]) -> StageOutput:
    stream = tokenize(stage_input.text, stage_input.profile, params)
    if not stream.tokens:
        raise NoTokensError("Document produced zero tokens")
    return StageOutput(
        metrics={
            "token_count": len(stream.tokens),
            "character_count": len(stage_input.text),
            "tokenizer": stage_input.profile.tokenizer,
            "lowercase": stream.lowercase,
            "diacritics_stripped": stream.strip_diacritics,
        },
        tokens=stream,
    )
