import re
from collections.abc import Mapping
from typing import Any

from lexico.stages.models import StageInput, StageOutput
from lexico.stages.params import get_int, precision_of

_SENTENCE_BOUNDARY_RE = re.compile(r"[.!?…]+|\n\s*\n")
_WORD_CHAR_RE = re.compile(r"[^\W_]")


def count_sentences(text: str) -> int:
    """Number of segments between sentence terminators that contain a word."""
    segments = _SENTENCE_BOUNDARY_RE.split(text)
    return sum(1 for segment in segments if _WORD_CHAR_RE.search(segment))


def run_complexity(stage_input: StageInput, params: Mapping[str, Any]) -> StageOutput:
    stream = stage_input.require_tokens()
    long_min = get_int(params, "long_token_min_length", 7, minimum=1)
    precision = precision_of(params)

    tokens = stream.tokens
    total = len(tokens)
    stop_words = stream.vocabulary(stage_input.profile.stop_words)
    content = sum(1 for token in tokens if token not in stop_words)
    long_tokens = sum(1 for token in tokens if len(token) >= long_min)
    sentences = count_sentences(stage_input.text)

    return StageOutput(
        metrics={
            "average_token_length": round(sum(len(t) for t in tokens) / total, precision),
            "sentence_count": sentences,
            "average_sentence_length": round(total / sentences, precision) if sentences else 0.0,
            "lexical_density": round(content / total, precision),
            "long_token_ratio": round(long_tokens / total, precision),
        }
    )
