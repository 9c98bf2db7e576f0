"""Process configuration for splice computation and segmentation."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Final

from .gcode.segmenter import (
    BRIM_LOOKBACK,
    BRIM_MARKERS,
    EMPTY_GRID_MARKERS,
    MARKER_LOOKBACK,
    PURGE_TAIL_LINES,
    TOOLCHANGE_MARKERS,
    MarkerPair,
)
from .gcode.splices import Splice

__all__ = [
    "DEFAULT_EXTRA_END_FILAMENT",
    "DEFAULT_LINEAR_PING",
    "DEFAULT_SPLICE_OFFSET",
    "ENV_PREFIX",
    "ProcessConfig",
    "configure",
    "get_config",
]

ENV_PREFIX: Final[str] = "GSPLICE_"
"""Prefix of environment variables overriding :class:`ProcessConfig` fields."""

DEFAULT_SPLICE_OFFSET: Final[float] = 50.0
"""Filament (mm) between the splicer output and the nozzle."""

DEFAULT_EXTRA_END_FILAMENT: Final[float] = 300.0
"""Filament (mm) appended to the final splice so the print can finish."""

DEFAULT_LINEAR_PING: Final[float] = 350.0
"""Extrusion distance (mm) between synchronisation pings."""


@dataclass(frozen=True, slots=True)
class ProcessConfig:
    """Fixed process constants consumed by the splice and segment passes."""

    splice_offset: float = DEFAULT_SPLICE_OFFSET
    extra_end_filament: float = DEFAULT_EXTRA_END_FILAMENT
    linear_ping: float = DEFAULT_LINEAR_PING
    brim_lookback: int = BRIM_LOOKBACK
    marker_lookback: int = MARKER_LOOKBACK
    purge_tail_lines: int = PURGE_TAIL_LINES

    def __post_init__(self) -> None:
        for spec in fields(self):
            value = getattr(self, spec.name)
            is_count = spec.type in (int, "int")
            if is_count and (isinstance(value, bool) or not isinstance(value, int)):
                raise ValueError(f"{spec.name} must be an integer (got {value!r})")
            if value < 0:
                raise ValueError(f"{spec.name} cannot be negative (got {value})")

    def markers(self) -> tuple[MarkerPair, ...]:
        """Return the purge marker pairs with the configured lookbacks."""

        return (
            BRIM_MARKERS.with_lookback(self.brim_lookback),
            EMPTY_GRID_MARKERS.with_lookback(self.marker_lookback),
            TOOLCHANGE_MARKERS.with_lookback(self.marker_lookback),
        )

    def splice_position(self, splice: Splice) -> float:
        """Return where *splice* ends on the physical filament."""

        return splice.end + self.splice_offset


_CONFIG: ProcessConfig | None = None


def get_config() -> ProcessConfig:
    """Return the cached :class:`ProcessConfig` instance."""

    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _build_config()
    return _CONFIG


def configure(**overrides: float | int | None) -> ProcessConfig:
    """Rebuild the global configuration with optional field overrides.

    ``None`` values are ignored so callers can forward optional CLI flags.
    """

    global _CONFIG
    _CONFIG = _build_config(**overrides)
    return _CONFIG


def _build_config(**overrides: float | int | None) -> ProcessConfig:
    known = {spec.name: spec.type for spec in fields(ProcessConfig)}
    values: dict[str, float | int] = {}

    for name, annotation in known.items():
        env_value = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
        if env_value:
            values[name] = _coerce(name, env_value, annotation)

    for name, value in overrides.items():
        if name not in known:
            raise TypeError(f"unknown configuration field {name!r}")
        if value is not None:
            values[name] = value

    return ProcessConfig(**values)


def _coerce(name: str, raw: str, annotation: object) -> float | int:
    text = raw.strip()
    try:
        if annotation in (int, "int"):
            return int(text)
        return float(text)
    except ValueError:
        raise ValueError(
            f"{ENV_PREFIX}{name.upper()} must be numeric (got {raw!r})"
        ) from None
