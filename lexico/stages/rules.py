"""Rule-based flags: mixed-language contamination and language-specific patterns."""

import re
from collections.abc import Mapping
from typing import Any

from lexico.stages.exceptions import InvalidStageParameterError
from lexico.stages.models import StageInput, StageOutput, TokenStream
from lexico.stages.params import get_float, get_int, precision_of

_ELONGATED_RE = re.compile(r"(\w)\1{2,}")


def _foreign_stopword_ratios(
    stage_input: StageInput,
    stream: TokenStream,
) -> list[tuple[str, float]]:
    """Per other language, share of tokens that are its stop-words but not ours."""
    own = stream.vocabulary(stage_input.profile.stop_words)
    total = len(stream.tokens)
    ratios: list[tuple[str, float]] = []
    for other in stage_input.other_profiles:
        if other.code == stage_input.profile.code:
            continue
        foreign = stream.vocabulary(other.stop_words) - own
        hits = sum(1 for token in stream.tokens if token in foreign)
        ratios.append((other.code, hits / total))
    return ratios


def _uppercase_ratio(text: str) -> float:
    letters = [ch for ch in text if ch.isalpha()]
    if not letters:
        return 0.0
    return sum(1 for ch in letters if ch.isupper()) / len(letters)


def _language_flags(stage_input: StageInput) -> dict[str, bool]:
    flags: dict[str, bool] = {}
    for rule in stage_input.profile.rules:
        try:
            pattern = re.compile(rule.pattern)
        except re.error as exc:
            raise InvalidStageParameterError(
                f"Rule '{rule.name}' of language '{stage_input.profile.code}' "
                f"has an invalid pattern: {exc}"
            ) from exc
        flags[rule.name] = pattern.search(stage_input.text) is not None
    return flags


def run_rules(stage_input: StageInput, params: Mapping[str, Any]) -> StageOutput:
    stream = stage_input.require_tokens()
    mixed_threshold = get_float(
        params, "mixed_language_threshold", 0.15, minimum=0.0, maximum=1.0
    )
    uppercase_threshold = get_float(
        params, "uppercase_threshold", 0.5, minimum=0.0, maximum=1.0
    )
    min_letters = get_int(params, "uppercase_min_letters", 20, minimum=0)
    precision = precision_of(params)

    foreign_code: str | None = None
    foreign_ratio = 0.0
    for code, ratio in _foreign_stopword_ratios(stage_input, stream):
        if ratio > foreign_ratio:
            foreign_code, foreign_ratio = code, ratio
    mixed = foreign_code is not None and foreign_ratio >= mixed_threshold

    letters = sum(1 for ch in stage_input.text if ch.isalpha())
    uppercase = _uppercase_ratio(stage_input.text)

    return StageOutput(
        metrics={
            "mixed_language": mixed,
            "foreign_language": foreign_code if mixed else None,
            "foreign_stopword_ratio": round(foreign_ratio, precision),
            "uppercase_ratio": round(uppercase, precision),
            "excessive_uppercase": letters >= min_letters and uppercase > uppercase_threshold,
            "elongated_tokens": sum(1 for t in stream.tokens if _ELONGATED_RE.search(t)),
            "contains_digits": any(ch.isdigit() for ch in stage_input.text),
            "flags": _language_flags(stage_input),
        }
    )
