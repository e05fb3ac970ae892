from collections.abc import Mapping
from types import MappingProxyType

from lexico.stages.complexity import run_complexity
from lexico.stages.exceptions import UnknownStageError
from lexico.stages.frequency import run_frequency
from lexico.stages.models import StageDefinition
from lexico.stages.rules import run_rules
from lexico.stages.tokenization import run_tokenization

TOKENIZATION = "tokenization"
FREQUENCY = "frequency"
COMPLEXITY = "complexity"
RULES = "rules"

STAGES: Mapping[str, StageDefinition] = MappingProxyType(
    {
        TOKENIZATION: StageDefinition(TOKENIZATION, run_tokenization),
        FREQUENCY: StageDefinition(FREQUENCY, run_frequency, requires_tokens=True),
        COMPLEXITY: StageDefinition(COMPLEXITY, run_complexity, requires_tokens=True),
        RULES: StageDefinition(RULES, run_rules, requires_tokens=True),
    }
)


def get_stage(name: str) -> StageDefinition:
    """Look up a stage by identifier.

    Raises:
        UnknownStageError: if no stage has this identifier.
    """
    try:
        return STAGES[name]
    except KeyError:
        raise UnknownStageError(
            f"Unknown stage '{name}'. Choose from: {list(STAGES)}"
        ) from None
