"""Single-pass analysis producing both the document and the splice list."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from os import PathLike

from .config import ProcessConfig, get_config
from .gcode.document import Document
from .gcode.segmenter import Segmenter
from .gcode.splices import Splice, SpliceCalculator
from .gcode.statement import parse_statement
from .profile import ProfileReader, SlicerProfile
from .source import NumberedLine, number_lines, open_gcode

__all__ = ["GCodeAnalysis", "analyze_gcode_file", "analyze_lines"]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class GCodeAnalysis:
    """Everything derived from one pass over a multi-material program."""

    document: Document
    splices: tuple[Splice, ...]
    profile: SlicerProfile
    statement_count: int
    total_extrusion: float
    tools: tuple[int, ...]

    @property
    def splice_length(self) -> float:
        return self.splices[-1].end if self.splices else 0.0

    @property
    def has_splices(self) -> bool:
        return bool(self.splices)


def analyze_lines(
    lines: Iterable[str],
    *,
    config: ProcessConfig | None = None,
    flush: bool = False,
    last_layer: bool = False,
) -> GCodeAnalysis:
    """Analyse raw G-code *lines*; see :func:`analyze_gcode_file`."""

    return _analyze(number_lines(lines), config or get_config(), flush, last_layer)


def analyze_gcode_file(
    path: str | PathLike[str],
    *,
    config: ProcessConfig | None = None,
    flush: bool = False,
    last_layer: bool = False,
) -> GCodeAnalysis:
    """Parse *path* once, feeding every statement to the segmenter and splice calculator.

    With ``flush=True`` the lines after the final layer marker are kept as
    the trailer (or as one more layer when *last_layer* is set) and the
    extrusion after the final toolchange becomes a last splice padded by
    ``config.extra_end_filament``. The first malformed line aborts the pass.
    """

    with open_gcode(path) as lines:
        analysis = _analyze(lines, config or get_config(), flush, last_layer)
    logger.info(
        "Analysed %s: %d layer(s), %d splice(s)",
        path,
        analysis.document.layer_count,
        len(analysis.splices),
    )
    return analysis


def _analyze(
    lines: Iterable[NumberedLine],
    config: ProcessConfig,
    flush: bool,
    last_layer: bool,
) -> GCodeAnalysis:
    segmenter = Segmenter(config.markers(), tail_lines=config.purge_tail_lines)
    calculator = SpliceCalculator()
    profile_reader = ProfileReader()
    statement_count = 0
    total_extrusion = 0.0
    tools: set[int] = set()

    for number, text in lines:
        statement = parse_statement(text, line_number=number)
        segmenter.feed(text, statement, line_number=number)
        calculator.feed(statement)
        profile_reader.feed(text)

        statement_count += 1
        total_extrusion += statement.moved("E")
        if statement.is_toolchange() and statement.tool() >= 0:
            tools.add(statement.tool())

    document = segmenter.finish(flush=flush, last_layer=last_layer)
    if flush:
        calculator.flush(config.extra_end_filament)
    elif calculator.pending_length:
        logger.debug(
            "%.4f mm extruded after the last toolchange is not attributed to a splice",
            calculator.pending_length,
        )

    return GCodeAnalysis(
        document=document,
        splices=calculator.splices,
        profile=profile_reader.profile(),
        statement_count=statement_count,
        total_extrusion=total_extrusion,
        tools=tuple(sorted(tools)),
    )
