"""Read G-code files as lazily produced, numbered lines."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from os import PathLike
from pathlib import Path

from .gcode.statement import Statement, parse_statement

__all__ = [
    "GCodeSourceError",
    "NumberedLine",
    "iter_statements",
    "number_lines",
    "open_gcode",
]

logger = logging.getLogger(__name__)

NumberedLine = tuple[int, str]
"""A 1-based line number paired with the line text (without CR/LF)."""


class GCodeSourceError(RuntimeError):
    """Raised when a G-code file cannot be read."""


def number_lines(lines: Iterable[str], *, start: int = 1) -> Iterator[NumberedLine]:
    """Pair each entry of *lines* with its line number, trimming CR/LF."""

    for number, line in enumerate(lines, start):
        yield number, line.rstrip("\r\n")


@contextmanager
def open_gcode(path: str | PathLike[str]) -> Iterator[Iterator[NumberedLine]]:
    """Open *path* and yield its numbered lines one at a time.

    The file is closed when the ``with`` block exits, whether it completes
    or raises. Unreadable files and invalid UTF-8 raise
    :class:`GCodeSourceError`.
    """

    source = Path(path)
    try:
        handle = source.open("r", encoding="utf-8", newline="")
    except OSError as exc:
        raise GCodeSourceError(f"Unable to read {source!s}: {exc}") from exc

    logger.debug("Opened %s", source)
    try:
        yield _guarded(number_lines(handle), source)
    finally:
        handle.close()


def _guarded(lines: Iterator[NumberedLine], source: Path) -> Iterator[NumberedLine]:
    try:
        yield from lines
    except UnicodeDecodeError as exc:
        raise GCodeSourceError(f"{source!s} is not valid UTF-8: {exc}") from exc
    except OSError as exc:
        raise GCodeSourceError(f"Unable to read {source!s}: {exc}") from exc


def iter_statements(lines: Iterable[NumberedLine]) -> Iterator[Statement]:
    """Tokenize numbered *lines*; parse errors carry the failing line number."""

    for number, text in lines:
        yield parse_statement(text, line_number=number)
