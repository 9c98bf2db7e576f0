"""Derive filament splices from the extrusion between toolchanges."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .statement import Statement

__all__ = ["Splice", "SpliceCalculator", "compute_splices"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Splice:
    """Length of filament extruded by *tool*, starting at *start* mm."""

    tool: int
    start: float
    length: float

    @property
    def end(self) -> float:
        return self.start + self.length


class SpliceCalculator:
    """Accumulate ``E`` moves and cut a splice at every toolchange.

    A toolchange reached with nothing extruded since the previous boundary
    (the first toolchange of a file, typically) only switches the current
    tool. Extrusion after the last toolchange is held back until
    :meth:`flush` is called.
    """

    def __init__(self) -> None:
        self._splices: list[Splice] = []
        self._extruded = 0.0
        self._current_tool = -1

    @property
    def splices(self) -> tuple[Splice, ...]:
        return tuple(self._splices)

    @property
    def current_tool(self) -> int:
        return self._current_tool

    @property
    def pending_length(self) -> float:
        """Extrusion accumulated since the last emitted splice."""

        return self._extruded

    def feed(self, statement: Statement) -> Splice | None:
        """Consume *statement*, returning the splice it closed, if any."""

        if not statement.is_toolchange():
            self._extruded += statement.moved("E")
            return None

        splice = None
        if self._extruded != 0.0:
            splice = self._emit(self._extruded)
        self._current_tool = statement.tool()
        return splice

    def flush(self, extra: float = 0.0) -> Splice | None:
        """Attribute pending extrusion to the current tool as a final splice.

        *extra* pads the final splice, e.g. with filament needed to finish
        unloading. Nothing is emitted when no extrusion is pending.
        """

        if self._extruded == 0.0:
            return None
        return self._emit(self._extruded + extra)

    def _emit(self, length: float) -> Splice:
        start = self._splices[-1].end if self._splices else 0.0
        splice = Splice(self._current_tool, start, length)
        self._splices.append(splice)
        self._extruded = 0.0
        logger.debug("Splice tool=%d start=%.4f length=%.4f", splice.tool, splice.start, splice.length)
        return splice


def compute_splices(
    statements: Iterable[Statement],
    *,
    flush: bool = False,
    extra: float = 0.0,
) -> tuple[Splice, ...]:
    """Return the splices for *statements* in order.

    Trailing extrusion after the final toolchange is only included when
    *flush* is set, padded by *extra*.
    """

    calculator = SpliceCalculator()
    for statement in statements:
        calculator.feed(statement)
    if flush:
        calculator.flush(extra)
    return calculator.splices
