"""Tests for the embedded slicer configuration reader."""

from __future__ import annotations

from pathlib import Path

import pytest

from gsplice.profile import ProfileError, ProfileReader, SlicerProfile


def test_profile_from_fixture(multi_material_path: Path) -> None:
    profile = SlicerProfile.from_path(multi_material_path)

    assert profile.extrusion_width() == 0.45
    assert profile.layer_height() == 0.2
    assert profile.filament_diameter() == (1.75, 1.75)
    assert profile.retract_length() == (0.8, 0.8)
    assert profile.retract_speed() == (35.0, 35.0)
    assert profile.first_layer_bed_temperature() == ("60", "60")
    assert profile.first_layer_temperature() == ("215", "215")
    assert profile.start_gcode() == "M104 S[first_layer_temperature]\\nG28"
    assert profile.get_str("wipe_tower") == "1"


def test_entries_before_the_start_line_are_ignored(multi_material_path: Path) -> None:
    profile = SlicerProfile.from_path(multi_material_path)

    assert "filament used [mm]" not in profile
    assert "extrusion_width" in profile


def test_extruder_colours_fall_back_to_filament_colours(multi_material_path: Path) -> None:
    profile = SlicerProfile.from_path(multi_material_path)

    assert profile.extruder_colours() == ("#FF8000", "#0080FF")


def test_extruder_colours_empty_without_colour_keys() -> None:
    assert SlicerProfile({"layer_height": "0.2"}).extruder_colours() == ()
    assert SlicerProfile({"extruder_colour": '"";""'}).extruder_colours() == ()


def test_missing_key_raises() -> None:
    with pytest.raises(ProfileError, match="end_gcode"):
        SlicerProfile().end_gcode()


def test_non_numeric_value_raises() -> None:
    profile = SlicerProfile({"layer_height": "thin", "filament_diameter": "1.75,wide"})

    with pytest.raises(ProfileError):
        profile.layer_height()
    with pytest.raises(ProfileError):
        profile.filament_diameter()


def test_reader_skips_lines_without_values() -> None:
    reader = ProfileReader()
    reader.feed("; key = early")
    assert not reader.active
    reader.feed("; estimated printing time (normal mode) = 1h\r\n")
    reader.feed(";no space = skipped")
    reader.feed("; orphan line")
    reader.feed("; notes = a = b\n")
    reader.feed("; empty = ")

    assert reader.active
    assert dict(reader.profile().values) == {"notes": "a = b", "empty": ""}


def test_profile_values_are_read_only() -> None:
    profile = SlicerProfile.from_lines(["; estimated printing time = 1m", "; layer_height = 0.3"])

    assert len(profile) == 1
    assert list(profile) == ["layer_height"]
    with pytest.raises(TypeError):
        profile.values["layer_height"] = "0.1"  # type: ignore[index]
