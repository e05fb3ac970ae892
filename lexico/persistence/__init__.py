from lexico.persistence.base import BasePersistenceGateway
from lexico.persistence.factory import PersistenceGatewayFactory
from lexico.persistence.memory_gateway import InMemoryPersistenceGateway
from lexico.persistence.postgres_gateway import PostgresPersistenceGateway

__all__ = [
    "BasePersistenceGateway",
    "InMemoryPersistenceGateway",
    "PersistenceGatewayFactory",
    "PostgresPersistenceGateway",
]
