"""Tests for the modal group classification table."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from gsplice.gcode import COMMAND_GROUPS, Group, build_command_index, classify
from gsplice.gcode.groups import GROUP_MEMBERSHIPS


@pytest.mark.parametrize(
    ("command", "expected"),
    [
        ("G0", Group.MOTION),
        ("G38.2", Group.MOTION),
        ("G85", Group.MOTION),
        ("G92.3", Group.NON_MODAL),
        ("G17", Group.PLANE_SELECTION),
        ("G91", Group.DISTANCE_MODE),
        ("G93", Group.FEED_RATE_MODE),
        ("G21", Group.UNITS),
        ("G41", Group.CUTTER_RADIUS_COMP),
        ("G49", Group.TOOL_LENGTH_OFFSET),
        ("G98", Group.RETURN_MODE),
        ("G59.3", Group.COORDINATE_SYSTEM_SELECT),
        ("G61.1", Group.PATH_CONTROL_MODE),
        ("M30", Group.STOPPING),
        ("M6", Group.TOOLCHANGE),
        ("T", Group.TOOLCHANGE),
        ("M4", Group.SPINDLE_TURNING),
        ("M8", Group.COOLANT),
        ("M49", Group.FEED_RATE_OVERRIDE),
    ],
)
def test_known_codes_classify(command: str, expected: Group) -> None:
    assert classify(command) is expected


@pytest.mark.parametrize("command", ["", "M104", "G29", "G1.5", "O100", "X"])
def test_unlisted_codes_are_unknown(command: str) -> None:
    assert classify(command) is Group.UNKNOWN


def test_every_listed_code_maps_to_exactly_one_group() -> None:
    listed = [code for codes in GROUP_MEMBERSHIPS.values() for code in codes]

    assert len(listed) == len(set(listed)) == len(COMMAND_GROUPS)
    for group, codes in GROUP_MEMBERSHIPS.items():
        for code in codes:
            assert COMMAND_GROUPS[code] is group


def test_classification_is_deterministic_across_threads() -> None:
    commands = list(COMMAND_GROUPS) + ["M104", "G29"]

    with ThreadPoolExecutor(max_workers=8) as executor:
        rounds = list(executor.map(lambda _: [classify(c) for c in commands], range(32)))

    assert all(result == rounds[0] for result in rounds)


def test_command_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        COMMAND_GROUPS["G1"] = Group.UNKNOWN  # type: ignore[index]


def test_build_command_index_rejects_duplicates() -> None:
    with pytest.raises(ValueError):
        build_command_index({Group.MOTION: ["G1"], Group.UNITS: ["G1"]})


def test_injected_table_is_used() -> None:
    table = build_command_index({Group.TOOLCHANGE: ["m600"]})

    assert classify("M600", table) is Group.TOOLCHANGE
    assert classify("G1", table) is Group.UNKNOWN
