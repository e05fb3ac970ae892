from collections import Counter
from collections.abc import Mapping
from typing import Any

from lexico.stages.models import StageInput, StageOutput
from lexico.stages.params import get_int, precision_of


def run_frequency(stage_input: StageInput, params: Mapping[str, Any]) -> StageOutput:
    """Token/type counts, type-token ratio and the most frequent terms.

    ``top_terms`` is ordered by descending count, ties alphabetically, so the
    output is stable across runs.
    """
    stream = stage_input.require_tokens()
    top_n = get_int(params, "top_n", 10, minimum=0)
    precision = precision_of(params)

    counts = Counter(stream.tokens)
    token_count = len(stream.tokens)
    type_count = len(counts)
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:top_n]
    return StageOutput(
        metrics={
            "token_count": token_count,
            "type_count": type_count,
            "type_token_ratio": round(type_count / token_count, precision),
            "hapax_count": sum(1 for count in counts.values() if count == 1),
            "top_terms": [{"term": term, "count": count} for term, count in ranked],
        }
    )
