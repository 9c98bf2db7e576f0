"""Tokenizer and query helpers for single G-code statements."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Final

from .errors import ParseError, ToolNumberError
from .groups import Group, classify

__all__ = [
    "MAX_TOOL_NUMBER",
    "PARAMETER_LETTERS",
    "Params",
    "Statement",
    "parse_statement",
]

PARAMETER_LETTERS: Final[str] = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
"""Alphabet of single-letter parameter names."""

MAX_TOOL_NUMBER: Final[int] = 127
"""Largest tool index accepted by the ``T<n>`` shorthand."""

_TOOLCHANGE_PATTERN = re.compile(r"^T(\S*)")
_TOOL_DIGITS_PATTERN = re.compile(r"[0-9]+")
# Command word: G, M or O followed by digits and an optional fraction
# (``G92.2``). Anything glued on afterwards must not extend the number.
_COMMAND_PATTERN = re.compile(r"^([GMO][0-9]+(?:\.[0-9]+)?)(?![0-9.])(.*)$")
# ``X0.1.2`` matches here; float() rejects it during parsing.
_PARAM_PATTERN = re.compile(r"([A-Z])\s*([-+]?[0-9.]+)")


class Params(Mapping[str, float]):
    """Read-only ``letter -> value`` mapping backed by a fixed 26-slot table.

    Assigning the same letter twice keeps the latest value while the letter
    retains its original position in iteration order.
    """

    __slots__ = ("_slots", "_order")

    def __init__(self, items: Iterable[tuple[str, float]] = ()) -> None:
        slots: list[float | None] = [None] * len(PARAMETER_LETTERS)
        order: list[str] = []
        for letter, value in items:
            index = _slot_index(letter)
            if index is None:
                raise KeyError(letter)
            if slots[index] is None:
                order.append(PARAMETER_LETTERS[index])
            slots[index] = float(value)
        self._slots = tuple(slots)
        self._order = tuple(order)

    def __getitem__(self, key: str) -> float:
        index = _slot_index(key)
        if index is None:
            raise KeyError(key)
        value = self._slots[index]
        if value is None:
            raise KeyError(key)
        return value

    def __contains__(self, key: object) -> bool:
        index = _slot_index(key)
        return index is not None and self._slots[index] is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Params):
            return self._slots == other._slots
        return Mapping.__eq__(self, other)

    def __hash__(self) -> int:
        return hash(self._slots)

    def __repr__(self) -> str:
        body = ", ".join(f"{letter}={self[letter]!r}" for letter in self._order)
        return f"Params({body})"


def _slot_index(key: object) -> int | None:
    if not isinstance(key, str) or len(key) != 1:
        return None
    index = ord(key) - ord("A")
    if 0 <= index < len(PARAMETER_LETTERS):
        return index
    return None


@dataclass(frozen=True, slots=True)
class Statement:
    """One parsed line of G-code.

    ``command`` is the upper-case command word (``"G1"``, ``"M104"``,
    ``"T"``) or an empty string for blank and comment-only lines.
    """

    command: str = ""
    params: Params = field(default_factory=Params)
    comment: str = ""

    def group(self) -> Group:
        return classify(self.command)

    def is_motion(self) -> bool:
        return self.group() is Group.MOTION

    def is_toolchange(self) -> bool:
        return self.group() is Group.TOOLCHANGE

    def tool(self) -> int:
        """Return the tool selected by a toolchange, ``-1`` for anything else."""

        if not self.is_toolchange():
            return -1
        value = self.params.get("T")
        if value is None:
            return -1
        return int(value)

    def moved(self, axis: str) -> float:
        """Return the *axis* parameter of a motion command, else ``0.0``.

        Non-motion commands can carry parameters with axis names (an
        ``M``-code with an ``E`` word, for instance); those never count as
        movement.
        """

        if not self.is_motion():
            return 0.0
        return self.params.get(axis.upper(), 0.0)

    def render(self) -> str:
        """Return the statement as output-ready G-code."""

        words: list[str] = []
        if self.command:
            if self.command == "T" and self.is_toolchange():
                words.append(f"T{self.tool()}")
            else:
                words.append(self.command)
                words.extend(f"{letter}{value:.4f}" for letter, value in self.params.items())
        if self.comment:
            words.append(f"; {self.comment}")
        return " ".join(words)

    def __str__(self) -> str:
        return self.render()


def parse_statement(line: str, *, line_number: int | None = None) -> Statement:
    """Parse a raw G-code *line* into a :class:`Statement`.

    Command and parameter letters are case-insensitive. A line holding only
    a comment, or nothing at all, yields a statement with an empty command.

    Raises
    ------
    ToolNumberError
        When a ``T`` word is not followed by a usable tool number.
    ParseError
        When the command word or a parameter value is malformed.
    """

    code = line.strip()
    comment = ""
    if ";" in code:
        code, comment = code.split(";", 1)
        code = code.strip()
        comment = comment.strip()

    code = code.upper()
    if not code:
        return Statement(comment=comment)

    toolchange = _TOOLCHANGE_PATTERN.match(code)
    if toolchange is not None:
        digits = toolchange.group(1)
        if not _TOOL_DIGITS_PATTERN.fullmatch(digits):
            raise ToolNumberError(
                f"unparsable tool number {digits!r}",
                line=line,
                line_number=line_number,
            )
        tool = int(digits)
        if tool > MAX_TOOL_NUMBER:
            raise ToolNumberError(
                f"tool number {tool} exceeds {MAX_TOOL_NUMBER}",
                line=line,
                line_number=line_number,
            )
        return Statement(command="T", params=Params([("T", tool)]), comment=comment)

    match = _COMMAND_PATTERN.match(code)
    if match is None:
        raise ParseError(
            f"unrecognized command word in {line.strip()!r}",
            line=line,
            line_number=line_number,
        )

    command, remainder = match.groups()
    values: list[tuple[str, float]] = []
    for letter, number in _PARAM_PATTERN.findall(remainder):
        try:
            value = float(number)
        except ValueError:
            raise ParseError(
                f"bad parameter {letter}{number} in {line.strip()!r}",
                line=line,
                line_number=line_number,
            ) from None
        values.append((letter, value))

    return Statement(command=command, params=Params(values), comment=comment)
