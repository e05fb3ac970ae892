"""Typed accessors for per-stage configuration parameters."""

from collections.abc import Mapping
from typing import Any

from lexico.stages.exceptions import InvalidStageParameterError


def get_bool(params: Mapping[str, Any], name: str, default: bool) -> bool:
    value = params.get(name, default)
    if not isinstance(value, bool):
        raise InvalidStageParameterError(f"Parameter '{name}' must be a boolean, got {value!r}")
    return value


def get_int(
    params: Mapping[str, Any],
    name: str,
    default: int,
    minimum: int | None = None,
) -> int:
    value = params.get(name, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidStageParameterError(f"Parameter '{name}' must be an integer, got {value!r}")
    if minimum is not None and value < minimum:
        raise InvalidStageParameterError(f"Parameter '{name}' must be >= {minimum}, got {value}")
    return value


def get_float(
    params: Mapping[str, Any],
    name: str,
    default: float,
    minimum: float | None = None,
    maximum: float | None = None,
) -> float:
    value = params.get(name, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidStageParameterError(f"Parameter '{name}' must be a number, got {value!r}")
    if minimum is not None and value < minimum:
        raise InvalidStageParameterError(f"Parameter '{name}' must be >= {minimum}, got {value}")
    if maximum is not None and value > maximum:
        raise InvalidStageParameterError(f"Parameter '{name}' must be <= {maximum}, got {value}")
    return float(value)


def precision_of(params: Mapping[str, Any]) -> int:
    """Decimal places used to round float metrics."""
    return get_int(params, "precision", 4, minimum=0)
