from lexico.configuration.models import AnalysisConfiguration, StageSetting
from lexico.stages.registry import COMPLEXITY, FREQUENCY, RULES, TOKENIZATION

DEFAULT_CONFIGURATION = AnalysisConfiguration(
    id="default",
    version=1,
    stages=(
        StageSetting(TOKENIZATION),
        StageSetting(FREQUENCY),
        StageSetting(COMPLEXITY),
        StageSetting(RULES),
    ),
    parameters={
        FREQUENCY: {"top_n": 10},
        COMPLEXITY: {"long_token_min_length": 7},
        RULES: {"mixed_language_threshold": 0.15},
    },
    purpose="default",
    active=True,
)
