from abc import ABC, abstractmethod

from lexico.configuration.models import AnalysisConfiguration


class BaseConfigurationStore(ABC):
    """Contract for analysis configuration stores.

    Versions are append-only: once published, a snapshot stays retrievable
    by id + version so any past Analysis can be reproduced exactly.
    """

    @abstractmethod
    def get(self, config_id: str, version: int | None = None) -> AnalysisConfiguration:
        """Return one snapshot; the latest version when ``version`` is None.

        Raises:
            ConfigNotFoundError: if the id or version does not exist.
        """

    @abstractmethod
    def get_active(self, purpose: str = "default") -> AnalysisConfiguration:
        """Return the active snapshot for a purpose.

        Raises:
            NoActiveConfigError: if nothing is active for this purpose.
        """

    @abstractmethod
    def publish(self, configuration: AnalysisConfiguration) -> AnalysisConfiguration:
        """Append a new version. Activates it when ``configuration.active``.

        Raises:
            ConfigVersionConflictError: if the version is not latest + 1.
        """

    @abstractmethod
    def activate(self, config_id: str, version: int) -> AnalysisConfiguration:
        """Make one snapshot the active one for its purpose."""

    @abstractmethod
    def versions(self, config_id: str) -> list[int]:
        """All published versions of a configuration id, ascending."""
