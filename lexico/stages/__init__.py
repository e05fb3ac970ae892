from lexico.stages.models import StageDefinition, StageInput, StageOutput, TokenStream
from lexico.stages.registry import (
    COMPLEXITY,
    FREQUENCY,
    RULES,
    STAGES,
    TOKENIZATION,
    get_stage,
)

__all__ = [
    "COMPLEXITY",
    "FREQUENCY",
    "RULES",
    "STAGES",
    "TOKENIZATION",
    "StageDefinition",
    "StageInput",
    "StageOutput",
    "TokenStream",
    "get_stage",
]
