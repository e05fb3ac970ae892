import copy
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Any

from lexico.configuration.exceptions import InvalidConfigurationError
from lexico.stages.exceptions import UnknownStageError
from lexico.stages.registry import TOKENIZATION, get_stage

_EMPTY_PARAMS: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True)
class StageSetting:
    """One declared stage of a configuration, in execution order."""

    name: str
    enabled: bool = True


@dataclass(frozen=True)
class AnalysisConfiguration:
    """Immutable, versioned snapshot of stage toggles and parameters.

    ``parameters`` maps a stage name to its parameter mapping. Both levels
    are copied and wrapped read-only on construction, so a snapshot cannot
    change after an Analysis has referenced it.
    """

    id: str
    version: int
    stages: tuple[StageSetting, ...]
    parameters: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    purpose: str = "default"
    active: bool = False
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "stages", tuple(self.stages))
        object.__setattr__(self, "parameters", _freeze_parameters(self.parameters))
        self._validate()

    @property
    def reference(self) -> str:
        return f"{self.id}@v{self.version}"

    @property
    def stage_names(self) -> tuple[str, ...]:
        return tuple(stage.name for stage in self.stages)

    @property
    def enabled_stages(self) -> tuple[str, ...]:
        return tuple(stage.name for stage in self.stages if stage.enabled)

    def params_for(self, stage_name: str) -> Mapping[str, Any]:
        return self.parameters.get(stage_name, _EMPTY_PARAMS)

    def next_version(self, **changes: Any) -> "AnalysisConfiguration":
        """Copy of this snapshot as version + 1, with ``changes`` applied."""
        changes.setdefault("active", False)
        changes.setdefault("created_at", None)
        return replace(self, version=self.version + 1, **changes)

    def with_active(self, active: bool) -> "AnalysisConfiguration":
        return replace(self, active=active)

    def _validate(self) -> None:
        if not self.id:
            raise InvalidConfigurationError("Configuration id must be non-empty")
        if self.version < 1:
            raise InvalidConfigurationError(
                f"Configuration {self.id}: version must be >= 1, got {self.version}"
            )
        names = self.stage_names
        if len(set(names)) != len(names):
            raise InvalidConfigurationError(f"Configuration {self.reference}: duplicate stages")
        if not self.enabled_stages:
            raise InvalidConfigurationError(
                f"Configuration {self.reference}: at least one stage must be enabled"
            )
        for position, name in enumerate(names):
            try:
                definition = get_stage(name)
            except UnknownStageError as exc:
                raise InvalidConfigurationError(
                    f"Configuration {self.reference}: {exc.args[0]}"
                ) from exc
            if (
                definition.requires_tokens
                and TOKENIZATION in names
                and names.index(TOKENIZATION) > position
            ):
                raise InvalidConfigurationError(
                    f"Configuration {self.reference}: stage '{name}' must come after "
                    f"'{TOKENIZATION}'"
                )
        unknown = set(self.parameters) - set(names)
        if unknown:
            raise InvalidConfigurationError(
                f"Configuration {self.reference}: parameters for undeclared stages "
                f"{sorted(unknown)}"
            )


def _freeze_parameters(
    parameters: Mapping[str, Mapping[str, Any]],
) -> Mapping[str, Mapping[str, Any]]:
    frozen: dict[str, Mapping[str, Any]] = {}
    for stage_name, params in parameters.items():
        if not isinstance(params, Mapping):
            raise InvalidConfigurationError(
                f"Parameters of stage '{stage_name}' must be a mapping"
            )
        frozen[stage_name] = MappingProxyType(copy.deepcopy(dict(params)))
    return MappingProxyType(frozen)


def configuration_from_dict(data: Mapping[str, Any]) -> AnalysisConfiguration:
    """Build a configuration from its stored/serialized form.

    ``stages`` accepts either names (all enabled) or ``{"name", "enabled"}``
    objects.
    """
    stages: list[StageSetting] = []
    for raw in data.get("stages", []):
        if isinstance(raw, str):
            stages.append(StageSetting(name=raw))
        elif isinstance(raw, Mapping) and isinstance(raw.get("name"), str):
            stages.append(StageSetting(name=raw["name"], enabled=bool(raw.get("enabled", True))))
        else:
            raise InvalidConfigurationError(f"Invalid stage declaration: {raw!r}")
    return AnalysisConfiguration(
        id=str(data["id"]),
        version=int(data["version"]),
        stages=tuple(stages),
        parameters=data.get("parameters") or {},
        purpose=str(data.get("purpose", "default")),
        active=bool(data.get("active", False)),
        created_at=data.get("created_at"),
    )


def configuration_to_dict(configuration: AnalysisConfiguration) -> dict[str, Any]:
    return {
        "id": configuration.id,
        "version": configuration.version,
        "purpose": configuration.purpose,
        "active": configuration.active,
        "stages": [
            {"name": stage.name, "enabled": stage.enabled} for stage in configuration.stages
        ],
        "parameters": {
            name: dict(params) for name, params in configuration.parameters.items()
        },
    }
