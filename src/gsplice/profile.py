"""Typed access to the slicer configuration embedded in G-code comments.

PrusaSlicer and Slic3r append their full configuration to the end of the
program as ``; key = value`` comment lines, after the ``; estimated
printing time`` summary line.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from os import PathLike
from types import MappingProxyType
from typing import Final

from .gcode.errors import GCodeError
from .source import open_gcode

__all__ = [
    "PROFILE_START_PREFIX",
    "ProfileError",
    "ProfileReader",
    "SlicerProfile",
]

logger = logging.getLogger(__name__)

PROFILE_START_PREFIX: Final[str] = "; estimated printing time"
"""Comment prefix after which the configuration block begins."""

_ENTRY_PREFIX = "; "
_SEPARATOR = " = "


class ProfileError(GCodeError):
    """Raised when a profile key is missing or holds an unusable value."""


@dataclass(frozen=True, slots=True)
class SlicerProfile:
    """Read-only ``key -> raw string`` view of a slicer configuration."""

    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def __contains__(self, key: object) -> bool:
        return key in self.values

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> SlicerProfile:
        reader = ProfileReader()
        for line in lines:
            reader.feed(line)
        return reader.profile()

    @classmethod
    def from_path(cls, path: str | PathLike[str]) -> SlicerProfile:
        with open_gcode(path) as lines:
            return cls.from_lines(text for _, text in lines)

    # ------------------------------------------------------------------
    # Typed lookups
    # ------------------------------------------------------------------
    def get_str(self, key: str) -> str:
        try:
            return self.values[key]
        except KeyError:
            raise ProfileError(f"profile key {key!r} is missing") from None

    def get_float(self, key: str) -> float:
        return _to_float(key, self.get_str(key))

    def get_float_array(self, key: str) -> tuple[float, ...]:
        return tuple(_to_float(key, token) for token in self.get_str(key).split(","))

    def get_string_array(self, key: str) -> tuple[str, ...]:
        return tuple(self.get_str(key).split(","))

    # ------------------------------------------------------------------
    # Named settings
    # ------------------------------------------------------------------
    def extrusion_width(self) -> float:
        return self.get_float("extrusion_width")

    def layer_height(self) -> float:
        return self.get_float("layer_height")

    def filament_diameter(self) -> tuple[float, ...]:
        return self.get_float_array("filament_diameter")

    def retract_length(self) -> tuple[float, ...]:
        return self.get_float_array("retract_length")

    def retract_speed(self) -> tuple[float, ...]:
        return self.get_float_array("retract_speed")

    def first_layer_bed_temperature(self) -> tuple[str, ...]:
        return self.get_string_array("first_layer_bed_temperature")

    def first_layer_temperature(self) -> tuple[str, ...]:
        return self.get_string_array("first_layer_temperature")

    def start_gcode(self) -> str:
        return self.get_str("start_gcode")

    def end_gcode(self) -> str:
        return self.get_str("end_gcode")

    def extruder_colours(self) -> tuple[str, ...]:
        """Return one colour per extruder, empty when the profile has none.

        Blank ``extruder_colour`` entries fall back to the matching
        ``filament_colour`` entry.
        """

        primary = _split_colours(self.values.get("extruder_colour", ""))
        fallback = _split_colours(self.values.get("filament_colour", ""))
        count = max(len(primary), len(fallback))
        colours: list[str] = []
        for index in range(count):
            colour = primary[index] if index < len(primary) else ""
            if not colour and index < len(fallback):
                colour = fallback[index]
            colours.append(colour)
        if not any(colours):
            return ()
        return tuple(colours)


class ProfileReader:
    """Collect profile entries from a stream of G-code lines."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def feed(self, line: str) -> None:
        text = line.rstrip("\r\n")
        if not self._active:
            if text.startswith(PROFILE_START_PREFIX):
                self._active = True
            return
        if not text.startswith(_ENTRY_PREFIX):
            return
        key, separator, value = text[len(_ENTRY_PREFIX):].partition(_SEPARATOR)
        if not separator:
            logger.debug("Skipping profile line without a value: %r", text)
            return
        self._values[key.strip()] = value

    def profile(self) -> SlicerProfile:
        return SlicerProfile(self._values)


def _to_float(key: str, token: str) -> float:
    try:
        return float(token.strip())
    except ValueError:
        raise ProfileError(f"profile key {key!r} holds a non-numeric value {token!r}") from None


def _split_colours(raw: str) -> tuple[str, ...]:
    if not raw.strip():
        return ()
    return tuple(part.strip().strip('"') for part in raw.split(";"))
