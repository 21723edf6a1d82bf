"""Engine configuration with JSON loading and validation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Mapping

from .errors import ConfigInvalidError
from .utils.jsonio import read_json

EXECUTORS = ("auto", "jit", "numpy", "pillow")
"""Pixel executors accepted by :func:`symmetryAlign.core.filters.apply_curve`."""

EXPORT_FORMATS = ("PNG", "TIFF", "WEBP")
"""Lossless formats the output sink is allowed to produce."""


@dataclass(frozen=True)
class EngineConfig:
    """Tunable constants of the tone engine and its interaction layer."""

    sample_width: int | None = 300
    clip_fraction: float = 0.001
    hit_radius: float = 15.0
    track_width: float = 280.0
    executor: str = "auto"
    export_padding: float = 1.2
    export_format: str = "PNG"

    def validate(self) -> "EngineConfig":
        """Return ``self`` after checking every field, raising on invalid values."""

        if self.sample_width is not None and int(self.sample_width) <= 0:
            raise ConfigInvalidError("sample_width must be a positive integer or null")
        if not 0.0 <= float(self.clip_fraction) < 0.5:
            raise ConfigInvalidError("clip_fraction must lie in [0, 0.5)")
        if float(self.hit_radius) <= 0.0:
            raise ConfigInvalidError("hit_radius must be positive")
        if float(self.track_width) <= 0.0:
            raise ConfigInvalidError("track_width must be positive")
        if self.executor not in EXECUTORS:
            raise ConfigInvalidError(
                f"executor must be one of {', '.join(EXECUTORS)}, got {self.executor!r}"
            )
        if float(self.export_padding) < 1.0:
            raise ConfigInvalidError("export_padding must be at least 1.0")
        if self.export_format.upper() not in EXPORT_FORMATS:
            raise ConfigInvalidError(f"Unsupported export format: {self.export_format!r}")
        return self

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "EngineConfig":
        """Build a validated config from *data*, rejecting unknown keys."""

        known = {field.name for field in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigInvalidError(f"Unknown configuration keys: {', '.join(unknown)}")

        values = dict(data)
        try:
            if values.get("sample_width") is not None:
                values["sample_width"] = int(values["sample_width"])
            for key in ("clip_fraction", "hit_radius", "track_width", "export_padding"):
                if key in values:
                    values[key] = float(values[key])
            if "export_format" in values:
                values["export_format"] = str(values["export_format"]).upper()
            if "executor" in values:
                values["executor"] = str(values["executor"]).lower()
        except (TypeError, ValueError) as exc:
            raise ConfigInvalidError(f"Invalid configuration value: {exc}") from exc
        return cls(**values).validate()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


DEFAULT_CONFIG = EngineConfig()


def load_config(path: Path | None) -> EngineConfig:
    """Return the configuration stored at *path*, or the defaults when ``None``."""

    if path is None:
        return DEFAULT_CONFIG
    return EngineConfig.from_mapping(read_json(Path(path)))


__all__ = ["DEFAULT_CONFIG", "EXECUTORS", "EXPORT_FORMATS", "EngineConfig", "load_config"]
