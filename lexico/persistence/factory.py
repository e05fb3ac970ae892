from lexico.config.settings import Settings
from lexico.persistence.base import BasePersistenceGateway
from lexico.persistence.memory_gateway import InMemoryPersistenceGateway
from lexico.persistence.postgres_gateway import PostgresPersistenceGateway


class PersistenceGatewayFactory:
    """Creates the persistence gateway for the configured storage backend."""

    BACKENDS: dict[str, type[BasePersistenceGateway]] = {
        "postgres": PostgresPersistenceGateway,
        "memory": InMemoryPersistenceGateway,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePersistenceGateway:
        backend = settings.storage_backend.lower()
        gateway_cls = cls.BACKENDS.get(backend)
        if gateway_cls is None:
            raise ValueError(
                f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
            )
        return gateway_cls()
