"""
params.py
--------------------
Intensity knobs that drive every stage of the pipeline.

  harshness   - noise density and fog / rain probability and strength
  light_aging - photometric distortion magnitude and glare probability
  dirtiness   - dirt / lens artifact density

Values are percentages. Anything outside [0, 100] is clamped silently since
the knobs are soft controls; values that are not numbers are rejected.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass

from .constants import (
    DEFAULT_DIRTINESS,
    DEFAULT_HARSHNESS,
    DEFAULT_LIGHT_AGING,
    KNOB_MAX,
    KNOB_MIN,
)
from .exceptions import InvalidParams


def _clamp_knob(name: str, value: object) -> float:
    if isinstance(value, bool):
        raise InvalidParams(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidParams(f"{name} must be a number, got {value!r}") from exc
    if math.isnan(number):
        raise InvalidParams(f"{name} must be a number, got NaN")
    return max(KNOB_MIN, min(KNOB_MAX, number))


@dataclass(frozen=True, slots=True)
class AugmentationParams:
    """Immutable knob settings for one batch."""

    harshness: float = DEFAULT_HARSHNESS
    light_aging: float = DEFAULT_LIGHT_AGING
    dirtiness: float = DEFAULT_DIRTINESS

    def __post_init__(self) -> None:
        for name in ("harshness", "light_aging", "dirtiness"):
            object.__setattr__(self, name, _clamp_knob(name, getattr(self, name)))

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> AugmentationParams:
        """Build params from a dict; accepts ``lightAging`` as an alias.

        Missing knobs take their defaults.
        """
        data = dict(values)
        if "lightAging" in data and "light_aging" not in data:
            data["light_aging"] = data.pop("lightAging")
        unknown = set(data) - {"harshness", "light_aging", "dirtiness", "lightAging"}
        if unknown:
            raise InvalidParams(f"Unknown parameters: {', '.join(sorted(unknown))}")
        data.pop("lightAging", None)
        return cls(**data)  # type: ignore[arg-type]

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def coerce_params(params: AugmentationParams | Mapping[str, object] | None) -> AugmentationParams:
    """Normalize whatever the caller passed into one immutable params object."""
    if params is None:
        return AugmentationParams()
    if isinstance(params, AugmentationParams):
        return params
    if isinstance(params, Mapping):
        return AugmentationParams.from_mapping(params)
    raise InvalidParams(f"Unsupported params type: {type(params).__name__}")
