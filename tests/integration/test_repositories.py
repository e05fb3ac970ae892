import uuid

import pytest

from lexico.configuration.exceptions import (
    ConfigNotFoundError,
    ConfigVersionConflictError,
    NoActiveConfigError,
)
from lexico.configuration.models import AnalysisConfiguration, StageSetting
from lexico.database.repositories.configuration_repository import ConfigurationRepository
from lexico.database.repositories.documents_repository import DocumentsRepository
from lexico.database.repositories.language_repository import LanguageRepository
from lexico.languages.models import LanguageProfile, LexicalRule

pytestmark = pytest.mark.integration


def _config(config_id: str, version: int, purpose: str, top_n: int) -> AnalysisConfiguration:
    return AnalysisConfiguration(
        id=config_id,
        version=version,
        stages=(StageSetting("tokenization"), StageSetting("frequency")),
        parameters={"frequency": {"top_n": top_n}},
        purpose=purpose,
    )


class TestLanguageRepository:
    def test_builtin_languages_are_seeded(self, integration_pool: None) -> None:
        codes = [profile.code for profile in LanguageRepository().load_all()]
        assert {"en", "es", "fr", "de", "pt"} <= set(codes)

    def test_upsert_round_trips_rules(self, integration_pool: None) -> None:
        code = f"t{uuid.uuid4().hex[:6]}"
        repo = LanguageRepository()
        profile = LanguageProfile(
            code=code,
            name="Test",
            stop_words=frozenset({"zz"}),
            tokenizer="whitespace",
            rules=(LexicalRule("has_zz", "zz"),),
        )

        repo.upsert(profile)

        [stored] = [p for p in repo.load_all() if p.code == code]
        assert stored == profile


class TestConfigurationRepository:
    def test_publish_and_read_versions(self, integration_pool: None) -> None:
        repo = ConfigurationRepository()
        config_id = f"cfg-{uuid.uuid4().hex[:8]}"

        repo.publish(_config(config_id, 1, config_id, top_n=3))
        repo.publish(_config(config_id, 2, config_id, top_n=5))

        assert repo.versions(config_id) == [1, 2]
        assert repo.get(config_id).version == 2
        assert repo.get(config_id, 1).params_for("frequency")["top_n"] == 3

    def test_version_gap_conflicts(self, integration_pool: None) -> None:
        repo = ConfigurationRepository()
        config_id = f"cfg-{uuid.uuid4().hex[:8]}"

        with pytest.raises(ConfigVersionConflictError):
            repo.publish(_config(config_id, 2, config_id, top_n=3))

    def test_activate_per_purpose(self, integration_pool: None) -> None:
        repo = ConfigurationRepository()
        config_id = f"cfg-{uuid.uuid4().hex[:8]}"
        repo.publish(_config(config_id, 1, config_id, top_n=3))
        repo.publish(_config(config_id, 2, config_id, top_n=5))

        with pytest.raises(NoActiveConfigError):
            repo.get_active(config_id)

        repo.activate(config_id, 1)
        repo.activate(config_id, 2)

        active = repo.get_active(config_id)
        assert active.version == 2
        assert active.active is True
        assert repo.get(config_id, 1).active is False

    def test_default_configuration_is_active(self, integration_pool: None) -> None:
        assert ConfigurationRepository().get_active("default").id == "default"

    def test_missing_configuration(self, integration_pool: None) -> None:
        with pytest.raises(ConfigNotFoundError):
            ConfigurationRepository().get("no-such-configuration")


class TestDocumentsRepository:
    def test_non_uuid_lookup_returns_none(self, integration_pool: None) -> None:
        assert DocumentsRepository().find_by_id("not-a-uuid") is None

    def test_unknown_document(self, integration_pool: None) -> None:
        assert DocumentsRepository().find_by_id(str(uuid.uuid4())) is None
