"""Tests for tokenizing G-code lines and the statement queries."""

from __future__ import annotations

import pytest

from gsplice.gcode import (
    Group,
    ParseError,
    Params,
    Statement,
    ToolNumberError,
    parse_statement,
)

SAMPLE_LINES = [
    ("M0", Group.STOPPING),
    ("T0", Group.TOOLCHANGE),
    ("G4 S0 ; Dwell", Group.NON_MODAL),
    ("G1  Y142.400", Group.MOTION),
    ("G1 Z0.40 F10800", Group.MOTION),
    ("; --- P2PP Set wipe speed to 2000.0mm/s", Group.UNKNOWN),
    ("G1 F4000.0", Group.MOTION),
    ("G0 X230.082 Y142.4", Group.MOTION),
    ("; CP TOOLCHANGE WIPE", Group.UNKNOWN),
    ("G1  X181.000 E1.8654 F1600", Group.MOTION),
    ("G1  X180.250 Y142.900  E-0.0343", Group.MOTION),
    ("G1  X239.000 E2.2329 F1800", Group.MOTION),
]


def test_sample_extrusion_sums_to_expected_total() -> None:
    total = sum(parse_statement(line).moved("E") for line, _ in SAMPLE_LINES)

    assert total == pytest.approx(4.0640)


@pytest.mark.parametrize(("line", "expected"), SAMPLE_LINES)
def test_sample_lines_classify_into_groups(line: str, expected: Group) -> None:
    assert parse_statement(line).group() is expected


def test_parsing_is_case_insensitive() -> None:
    assert parse_statement("g1 x1.0") == parse_statement("G1 X1.0")
    assert parse_statement("g1 x1.0").command == "G1"


def test_parse_extracts_command_params_and_comment() -> None:
    statement = parse_statement("  G1 X10.5 Y-3 E.25 F1800 ; perimeter  \r\n")

    assert statement.command == "G1"
    assert dict(statement.params) == {"X": 10.5, "Y": -3.0, "E": 0.25, "F": 1800.0}
    assert list(statement.params) == ["X", "Y", "E", "F"]
    assert statement.comment == "perimeter"


def test_parameters_without_spaces_are_split() -> None:
    statement = parse_statement("G1X10Y20E0.5")

    assert statement.command == "G1"
    assert dict(statement.params) == {"X": 10.0, "Y": 20.0, "E": 0.5}


def test_repeated_parameter_overwrites_previous_value() -> None:
    statement = parse_statement("G1 X1 Y2 X3")

    assert statement.params["X"] == 3.0
    assert list(statement.params) == ["X", "Y"]


def test_fractional_command_codes_are_supported() -> None:
    statement = parse_statement("G92.2")

    assert statement.command == "G92.2"
    assert statement.group() is Group.NON_MODAL


def test_o_codes_are_commands() -> None:
    statement = parse_statement("o100 sub")

    assert statement.command == "O100"
    assert statement.group() is Group.UNKNOWN


@pytest.mark.parametrize("line", ["", "   ", "; only a comment", ";"])
def test_blank_and_comment_lines_have_no_command(line: str) -> None:
    statement = parse_statement(line)

    assert statement.command == ""
    assert len(statement.params) == 0
    assert statement.group() is Group.UNKNOWN


def test_comment_is_split_at_first_semicolon() -> None:
    statement = parse_statement("M117 Hello; first; second")

    assert statement.command == "M117"
    assert statement.comment == "first; second"


def test_toolchange_shorthand() -> None:
    statement = parse_statement("t3 ; switch")

    assert statement.command == "T"
    assert statement.params["T"] == 3.0
    assert statement.tool() == 3
    assert statement.is_toolchange()
    assert statement.comment == "switch"


@pytest.mark.parametrize("line", ["T", "TX", "T1A", "T-1", "T200"])
def test_bad_tool_numbers_raise(line: str) -> None:
    with pytest.raises(ToolNumberError):
        parse_statement(line)


@pytest.mark.parametrize("line", ["X10 Y10", "G", "GX1", "G1.", "G1.2.3", "Q5", "N10 G1"])
def test_malformed_command_words_raise(line: str) -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_statement(line, line_number=7)

    assert excinfo.value.line == line
    assert excinfo.value.line_number == 7
    assert str(excinfo.value).startswith("line 7:")


@pytest.mark.parametrize("line", ["G1 X0.1.2", "G1 E.", "G1 X1 Y-."])
def test_malformed_numbers_raise(line: str) -> None:
    with pytest.raises(ParseError):
        parse_statement(line)


def test_tool_number_error_is_a_parse_error() -> None:
    with pytest.raises(ParseError):
        parse_statement("Tfoo")


def test_tool_is_negative_for_non_toolchanges() -> None:
    assert parse_statement("M104 S200 T1").tool() == -1
    assert parse_statement("G1 X1").tool() == -1


def test_m6_is_a_toolchange_without_tool_parameter() -> None:
    statement = parse_statement("M6")

    assert statement.is_toolchange()
    assert statement.tool() == -1
    assert parse_statement("M6 T2").tool() == 2


def test_moved_ignores_non_motion_commands() -> None:
    assert parse_statement("M221 E5").moved("E") == 0.0
    assert parse_statement("G92 E0").moved("E") == 0.0
    assert parse_statement("G1 X5 F100").moved("E") == 0.0
    assert parse_statement("G1 X5 E1.25").moved("E") == 1.25
    assert parse_statement("G1 X5 E1.25").moved("e") == 1.25


def test_statements_are_immutable_and_hashable() -> None:
    statement = parse_statement("G1 X1")

    with pytest.raises(AttributeError):
        statement.command = "G0"  # type: ignore[misc]
    assert hash(statement) == hash(parse_statement("g1 x1"))


def test_render_produces_gcode() -> None:
    assert parse_statement("G1 X1 E0.5 ; move").render() == "G1 X1.0000 E0.5000 ; move"
    assert str(parse_statement("T2")) == "T2"
    assert parse_statement("; note").render() == "; note"
    assert parse_statement("").render() == ""


def test_params_mapping_behaviour() -> None:
    params = Params([("X", 1), ("E", 2.5)])

    assert "X" in params
    assert "Y" not in params
    assert "x" not in params
    assert "XY" not in params
    assert params.get("Q") is None
    assert params == {"X": 1.0, "E": 2.5}
    assert params == Params([("X", 1.0), ("E", 2.5)])
    with pytest.raises(KeyError):
        params["Z"]
    with pytest.raises(KeyError):
        Params([("1", 1.0)])


def test_default_statement_is_empty() -> None:
    statement = Statement()

    assert statement.command == ""
    assert statement.comment == ""
    assert len(statement.params) == 0
