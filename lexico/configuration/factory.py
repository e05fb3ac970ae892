from lexico.config.settings import Settings
from lexico.configuration.base import BaseConfigurationStore
from lexico.configuration.defaults import DEFAULT_CONFIGURATION
from lexico.configuration.store import ConfigurationStore
from lexico.database.repositories.configuration_repository import ConfigurationRepository


class ConfigurationStoreFactory:
    """Creates the configuration store for the configured storage backend."""

    @classmethod
    def create(cls, settings: Settings) -> BaseConfigurationStore:
        backend = settings.storage_backend.lower()
        if backend == "postgres":
            return ConfigurationRepository()
        if backend == "memory":
            return ConfigurationStore([DEFAULT_CONFIGURATION])
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: ['postgres', 'memory']"
        )
