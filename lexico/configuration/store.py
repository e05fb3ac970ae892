import threading
from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import datetime, timezone
from types import MappingProxyType

from lexico.configuration.base import BaseConfigurationStore
from lexico.configuration.exceptions import (
    ConfigNotFoundError,
    ConfigVersionConflictError,
    NoActiveConfigError,
)
from lexico.configuration.models import AnalysisConfiguration
from lexico.logging.logger import Log


class ConfigurationStore(BaseConfigurationStore):
    """In-memory, append-only configuration store.

    State lives in two immutable mappings that writers rebuild and swap under
    a lock (copy-on-write); readers take the current references without
    locking, so a concurrent publish never exposes a half-applied change.
    """

    def __init__(self, configurations: Iterable[AnalysisConfiguration] = ()) -> None:
        self._write_lock = threading.Lock()
        self._versions: Mapping[str, tuple[AnalysisConfiguration, ...]] = MappingProxyType({})
        self._active: Mapping[str, tuple[str, int]] = MappingProxyType({})
        for configuration in configurations:
            self.publish(configuration)

    def get(self, config_id: str, version: int | None = None) -> AnalysisConfiguration:
        history = self._versions.get(config_id)
        if not history:
            raise ConfigNotFoundError(f"Configuration '{config_id}' not found")
        if version is None:
            snapshot = history[-1]
        elif 1 <= version <= len(history):
            snapshot = history[version - 1]
        else:
            raise ConfigNotFoundError(f"Configuration '{config_id}' version {version} not found")
        return self._with_active_flag(snapshot, self._active)

    def get_active(self, purpose: str = "default") -> AnalysisConfiguration:
        active = self._active
        key = active.get(purpose)
        if key is None:
            raise NoActiveConfigError(f"No active configuration for purpose '{purpose}'")
        config_id, version = key
        return self._with_active_flag(self._versions[config_id][version - 1], active)

    def publish(self, configuration: AnalysisConfiguration) -> AnalysisConfiguration:
        stored = replace(
            configuration,
            active=False,
            created_at=configuration.created_at or datetime.now(timezone.utc),
        )
        with self._write_lock:
            history = self._versions.get(configuration.id, ())
            expected = len(history) + 1
            if configuration.version != expected:
                raise ConfigVersionConflictError(
                    f"Configuration '{configuration.id}': expected version {expected}, "
                    f"got {configuration.version}"
                )
            versions = dict(self._versions)
            versions[configuration.id] = (*history, stored)
            self._versions = MappingProxyType(versions)
        Log.info(f"Published configuration {stored.reference}")
        if configuration.active:
            return self.activate(configuration.id, configuration.version)
        return stored

    def activate(self, config_id: str, version: int) -> AnalysisConfiguration:
        snapshot = self.get(config_id, version)
        with self._write_lock:
            active = dict(self._active)
            active[snapshot.purpose] = (config_id, version)
            self._active = MappingProxyType(active)
        Log.info(f"Activated configuration {snapshot.reference} for '{snapshot.purpose}'")
        return snapshot.with_active(True)

    def versions(self, config_id: str) -> list[int]:
        return [snapshot.version for snapshot in self._versions.get(config_id, ())]

    @staticmethod
    def _with_active_flag(
        snapshot: AnalysisConfiguration,
        active: Mapping[str, tuple[str, int]],
    ) -> AnalysisConfiguration:
        is_active = active.get(snapshot.purpose) == (snapshot.id, snapshot.version)
        return snapshot.with_active(is_active) if is_active else snapshot
