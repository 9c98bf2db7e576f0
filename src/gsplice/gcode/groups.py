"""Modal group classification for G-code command words.

Groups follow the NIST RS274/NGC modal groups as summarised by the g2core
project. Classification is purely per statement: nothing here tracks
which code is active on the machine, so the coolant quirk where ``M7`` and
``M8`` may be on at the same time is not modelled.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Final

__all__ = [
    "COMMAND_GROUPS",
    "GROUP_MEMBERSHIPS",
    "Group",
    "build_command_index",
    "classify",
]


class Group(Enum):
    """Modal group a command word belongs to."""

    UNKNOWN = "unknown"
    NON_MODAL = "non_modal"
    MOTION = "motion"
    PLANE_SELECTION = "plane_selection"
    DISTANCE_MODE = "distance_mode"
    FEED_RATE_MODE = "feed_rate_mode"
    UNITS = "units"
    CUTTER_RADIUS_COMP = "cutter_radius_comp"
    TOOL_LENGTH_OFFSET = "tool_length_offset"
    RETURN_MODE = "return_mode"
    COORDINATE_SYSTEM_SELECT = "coordinate_system_select"
    PATH_CONTROL_MODE = "path_control_mode"
    STOPPING = "stopping"
    TOOLCHANGE = "toolchange"
    SPINDLE_TURNING = "spindle_turning"
    COOLANT = "coolant"
    FEED_RATE_OVERRIDE = "feed_rate_override"


GROUP_MEMBERSHIPS: Final[Mapping[Group, tuple[str, ...]]] = MappingProxyType(
    {
        Group.NON_MODAL: ("G4", "G10", "G28", "G30", "G53", "G92", "G92.1", "G92.2", "G92.3"),
        Group.MOTION: (
            "G0", "G1", "G2", "G3", "G38.2",
            "G80", "G81", "G82", "G83", "G84", "G85", "G86", "G87", "G88", "G89",
        ),
        Group.PLANE_SELECTION: ("G17", "G18", "G19"),
        Group.DISTANCE_MODE: ("G90", "G91"),
        Group.FEED_RATE_MODE: ("G93", "G94"),
        Group.UNITS: ("G20", "G21"),
        Group.CUTTER_RADIUS_COMP: ("G40", "G41", "G42"),
        Group.TOOL_LENGTH_OFFSET: ("G43", "G49"),
        Group.RETURN_MODE: ("G98", "G99"),
        Group.COORDINATE_SYSTEM_SELECT: (
            "G54", "G55", "G56", "G57", "G58", "G59", "G59.1", "G59.2", "G59.3",
        ),
        Group.PATH_CONTROL_MODE: ("G61", "G61.1", "G64"),
        Group.STOPPING: ("M0", "M1", "M2", "M30", "M60"),
        Group.TOOLCHANGE: ("M6", "T"),
        Group.SPINDLE_TURNING: ("M3", "M4", "M5"),
        Group.COOLANT: ("M7", "M8", "M9"),
        Group.FEED_RATE_OVERRIDE: ("M48", "M49"),
    }
)
"""Command words listed per modal group."""


def build_command_index(
    memberships: Mapping[Group, Iterable[str]],
) -> Mapping[str, Group]:
    """Return a read-only ``command -> Group`` index built from *memberships*.

    Raises :class:`ValueError` when a command word is listed under more than
    one group.
    """

    index: dict[str, Group] = {}
    for group, commands in memberships.items():
        for command in commands:
            key = command.strip().upper()
            existing = index.get(key)
            if existing is not None and existing is not group:
                raise ValueError(
                    f"{key} is listed in both {existing.name} and {group.name}"
                )
            index[key] = group
    return MappingProxyType(index)


# Built once at import; the import lock serialises concurrent first imports.
COMMAND_GROUPS: Final[Mapping[str, Group]] = build_command_index(GROUP_MEMBERSHIPS)
"""Shared read-only reverse index used by :func:`classify`."""


def classify(command: str, table: Mapping[str, Group] = COMMAND_GROUPS) -> Group:
    """Return the :class:`Group` for *command*, ``Group.UNKNOWN`` when unlisted."""

    return table.get(command, Group.UNKNOWN)
