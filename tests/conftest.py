import pytest

from lexico.analysis.service import AnalysisService
from lexico.config.settings import Settings
from lexico.configuration.defaults import DEFAULT_CONFIGURATION
from lexico.configuration.models import AnalysisConfiguration, StageSetting
from lexico.configuration.store import ConfigurationStore
from lexico.languages.builtin import BUILTIN_PROFILES
from lexico.languages.registry import LanguageRegistry
from lexico.persistence.memory_gateway import InMemoryPersistenceGateway
from lexico.stages.registry import FREQUENCY, TOKENIZATION


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        storage_backend="memory",
        max_commit_attempts=3,
        commit_retry_delay_seconds=0.0,
        language_min_confidence=0.1,
    )


@pytest.fixture()
def registry() -> LanguageRegistry:
    return LanguageRegistry(BUILTIN_PROFILES, min_confidence=0.1)


@pytest.fixture()
def config_store() -> ConfigurationStore:
    """Default configuration (active) plus a two-stage 'basic' configuration."""
    store = ConfigurationStore([DEFAULT_CONFIGURATION])
    store.publish(
        AnalysisConfiguration(
            id="basic",
            version=1,
            stages=(StageSetting(TOKENIZATION), StageSetting(FREQUENCY)),
        )
    )
    return store


@pytest.fixture()
def gateway() -> InMemoryPersistenceGateway:
    return InMemoryPersistenceGateway()


@pytest.fixture()
def service(
    registry: LanguageRegistry,
    config_store: ConfigurationStore,
    gateway: InMemoryPersistenceGateway,
    settings: Settings,
) -> AnalysisService:
    return AnalysisService(registry, config_store, gateway, settings)
