import pytest

from lexico.stages.exceptions import UnknownStageError
from lexico.stages.registry import COMPLEXITY, FREQUENCY, RULES, STAGES, TOKENIZATION, get_stage


class TestStageRegistry:
    def test_known_stages(self) -> None:
        assert list(STAGES) == [TOKENIZATION, FREQUENCY, COMPLEXITY, RULES]

    def test_only_tokenization_produces_tokens_itself(self) -> None:
        assert get_stage(TOKENIZATION).requires_tokens is False
        assert all(get_stage(name).requires_tokens for name in (FREQUENCY, COMPLEXITY, RULES))

    def test_unknown_stage(self) -> None:
        with pytest.raises(UnknownStageError, match="sentiment"):
            get_stage("sentiment")

    def test_registry_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            STAGES["extra"] = STAGES[TOKENIZATION]  # type: ignore[index]
