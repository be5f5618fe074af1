"""Configuration for the capacity model and flow analysis."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, FrozenSet, Union

import yaml

from gasnet.errors import ValidationError
from gasnet.utils.yaml_utils import normalize_yaml_dict_keys


def _default_pipe_capacities() -> Dict[int, float]:
    # Nominal throughput per diameter in mm, conventional units
    return {500: 1000.0, 700: 2500.0, 1000: 5000.0, 1400: 10000.0}


@dataclass
class NetworkConfig:
    """Physical constants and numeric tolerances.

    Attributes:
        pipe_capacities: Base capacity per allowed pipe diameter (mm).
        capacity_adjustment: Scale factor ``k`` applied in the pipe capacity formula.
        station_capacity_factor: Capacity contributed per active workshop and class unit.
        flow_tolerance: Residual capacity at or below this value counts as no edge.
        bottleneck_threshold: Residual capacity below which a pipe is
            reported as a bottleneck after max-flow.
    """

    pipe_capacities: Dict[int, float] = field(default_factory=_default_pipe_capacities)
    capacity_adjustment: float = 0.01
    station_capacity_factor: float = 1000.0
    flow_tolerance: float = 1e-9
    bottleneck_threshold: float = 1.0

    @property
    def allowed_diameters(self) -> FrozenSet[int]:
        """Diameters that pipes may be built with."""
        return frozenset(self.pipe_capacities)

    def base_capacity(self, diameter: int) -> float:
        """Return the tabulated base capacity for ``diameter``.

        Raises:
            ValidationError: If the diameter is not in the capacity table.
        """
        try:
            return self.pipe_capacities[diameter]
        except KeyError:
            raise ValidationError(
                f"Diameter {diameter} mm is not allowed; "
                f"allowed: {format_diameters(self.allowed_diameters)}"
            ) from None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> NetworkConfig:
        """Build a config from a plain mapping, rejecting unknown keys."""
        data = normalize_yaml_dict_keys(data)
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValidationError(f"Unknown configuration keys: {', '.join(unknown)}")

        kwargs: Dict[str, Any] = {}
        if "pipe_capacities" in data:
            raw = data["pipe_capacities"]
            if not isinstance(raw, dict) or not raw:
                raise ValidationError("pipe_capacities must be a non-empty mapping")
            caps: Dict[int, float] = {}
            for diameter, capacity in raw.items():
                try:
                    caps[int(diameter)] = float(capacity)
                except (TypeError, ValueError):
                    raise ValidationError(
                        f"Invalid pipe_capacities entry {diameter!r}: {capacity!r}"
                    ) from None
                if caps[int(diameter)] <= 0:
                    raise ValidationError(
                        f"Base capacity for diameter {diameter} must be positive"
                    )
            kwargs["pipe_capacities"] = caps
        for name in (
            "capacity_adjustment",
            "station_capacity_factor",
            "flow_tolerance",
            "bottleneck_threshold",
        ):
            if name in data:
                try:
                    kwargs[name] = float(data[name])
                except (TypeError, ValueError):
                    raise ValidationError(
                        f"Configuration value '{name}' must be a number"
                    ) from None
        return cls(**kwargs)


def load_config(path: Union[str, Path]) -> NetworkConfig:
    """Load a ``NetworkConfig`` from a YAML file.

    Missing keys keep their defaults. An empty file yields the defaults.

    Args:
        path: YAML file with a top-level mapping.

    Returns:
        Parsed configuration.

    Raises:
        ValidationError: If the document is not a mapping or holds invalid values.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValidationError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return NetworkConfig()
    if not isinstance(data, dict):
        raise ValidationError(f"Configuration file {path} must contain a mapping")
    return NetworkConfig.from_dict(data)


def format_diameters(diameters: FrozenSet[int]) -> str:
    return ", ".join(str(d) for d in sorted(diameters))


# Global configuration instance
DEFAULT_CONFIG = NetworkConfig()
