"""Split slicer output into a header, per-layer model/purge blocks and a trailer.

Layers are delimited by ``; LAYER <n>`` comments. Within a layer the wipe
tower is bracketed by ``; CP ... START`` / ``; CP ... END`` comment pairs
emitted by PrusaSlicer. The slicer places a retract and reposition move
just before each START marker, so a few lines preceding the marker are
pulled into the purge region. Those lookback counts are tuned to one
slicer's preamble and are kept overridable through :class:`MarkerPair`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Final, NamedTuple

from .document import Block, BlockKind, Document, Layer
from .errors import SegmentationError
from .statement import Statement, parse_statement

__all__ = [
    "BRIM_LOOKBACK",
    "BRIM_MARKERS",
    "DEFAULT_MARKERS",
    "EMPTY_GRID_MARKERS",
    "MARKER_LOOKBACK",
    "MarkerPair",
    "PURGE_TAIL_LINES",
    "Segmenter",
    "SourceLine",
    "TOOLCHANGE_MARKERS",
    "segment",
    "segment_layer",
]

logger = logging.getLogger(__name__)

BRIM_LOOKBACK: Final[int] = 6
"""Lines before the brim START marker that belong to the purge region."""

MARKER_LOOKBACK: Final[int] = 1
"""Lines before the empty-grid and toolchange START markers that belong to the purge region."""

PURGE_TAIL_LINES: Final[int] = 1
"""Lines after an END marker that still belong to the purge region."""

_LAYER_MARKER_PATTERN = re.compile(r"^;\s*LAYER\b(.*)$")
_LAYER_INDEX_PATTERN = re.compile(r"\s+([0-9]+)")


@dataclass(frozen=True, slots=True)
class MarkerPair:
    """Exact START/END comment lines bracketing a purge region."""

    name: str
    start: str
    end: str
    lookback: int = MARKER_LOOKBACK

    def with_lookback(self, lookback: int) -> MarkerPair:
        return replace(self, lookback=lookback)


BRIM_MARKERS: Final[MarkerPair] = MarkerPair(
    "wipe tower brim",
    "; CP WIPE TOWER FIRST LAYER BRIM START",
    "; CP WIPE TOWER FIRST LAYER BRIM END",
    BRIM_LOOKBACK,
)
EMPTY_GRID_MARKERS: Final[MarkerPair] = MarkerPair(
    "empty grid",
    "; CP EMPTY GRID START",
    "; CP EMPTY GRID END",
)
TOOLCHANGE_MARKERS: Final[MarkerPair] = MarkerPair(
    "toolchange",
    "; CP TOOLCHANGE START",
    "; CP TOOLCHANGE END",
)

DEFAULT_MARKERS: Final[tuple[MarkerPair, ...]] = (
    BRIM_MARKERS,
    EMPTY_GRID_MARKERS,
    TOOLCHANGE_MARKERS,
)
"""Marker pairs recognised in PrusaSlicer wipe tower output."""


class SourceLine(NamedTuple):
    """A raw line together with its parsed statement."""

    line_number: int
    text: str
    statement: Statement


def _build_block(kind: BlockKind, lines: Sequence[SourceLine]) -> Block:
    first_line = lines[0].line_number if lines else None
    return Block(kind, tuple(source.statement for source in lines), first_line)


def _check_count(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer line count (got {value!r})")
    if value < 0:
        raise ValueError(f"{name} cannot be negative")


def _validate_markers(markers: Sequence[MarkerPair], tail_lines: int) -> None:
    _check_count("tail_lines", tail_lines)
    seen: set[str] = set()
    for marker in markers:
        _check_count(f"lookback for {marker.name}", marker.lookback)
        for text in (marker.start, marker.end):
            if text in seen:
                raise ValueError(f"marker text {text!r} is used more than once")
            seen.add(text)


def segment_layer(
    lines: Iterable[SourceLine],
    index: int,
    *,
    markers: Sequence[MarkerPair] = DEFAULT_MARKERS,
    tail_lines: int = PURGE_TAIL_LINES,
) -> Layer:
    """Split the buffered *lines* of one layer into model and purge blocks.

    Raises :class:`SegmentationError` for an END without a matching START,
    a START while another region is still open, or a region left open when
    the layer ends.
    """

    _validate_markers(markers, tail_lines)
    starts = {marker.start: marker for marker in markers}
    ends = {marker.end: marker for marker in markers}

    blocks: list[Block] = []
    pending: list[SourceLine] = []
    open_marker: MarkerPair | None = None
    open_line: int | None = None
    tail_remaining = 0

    def emit(kind: BlockKind) -> None:
        nonlocal pending
        if pending:
            blocks.append(_build_block(kind, pending))
        pending = []

    for source in lines:
        text = source.text
        is_marker = text in starts or text in ends

        if tail_remaining:
            if not is_marker:
                pending.append(source)
                tail_remaining -= 1
                if not tail_remaining:
                    emit(BlockKind.PURGE)
                continue
            # Another region starts before the tail is complete.
            tail_remaining = 0
            emit(BlockKind.PURGE)

        marker = starts.get(text)
        if marker is not None:
            if open_marker is not None:
                raise SegmentationError(
                    f"{marker.name} START inside the {open_marker.name} region "
                    f"opened at line {open_line}",
                    line_number=source.line_number,
                )
            split = max(0, len(pending) - marker.lookback)
            carried = pending[split:]
            pending = pending[:split]
            emit(BlockKind.MODEL)
            pending = carried + [source]
            open_marker = marker
            open_line = source.line_number
            continue

        marker = ends.get(text)
        if marker is not None:
            if open_marker is None:
                raise SegmentationError(
                    f"{marker.name} END without a matching START",
                    line_number=source.line_number,
                )
            if marker != open_marker:
                raise SegmentationError(
                    f"{marker.name} END while the {open_marker.name} region "
                    f"opened at line {open_line} is still open",
                    line_number=source.line_number,
                )
            pending.append(source)
            open_marker = None
            open_line = None
            if tail_lines:
                tail_remaining = tail_lines
            else:
                emit(BlockKind.PURGE)
            continue

        pending.append(source)

    if open_marker is not None:
        raise SegmentationError(
            f"{open_marker.name} START is never closed in layer {index}",
            line_number=open_line,
        )

    emit(BlockKind.PURGE if tail_remaining else BlockKind.MODEL)
    layer = Layer(index, tuple(blocks))
    logger.debug(
        "Layer %d: %d block(s) %s",
        index,
        len(layer.blocks),
        "/".join(kind.value for kind in layer.kinds),
    )
    return layer


class Segmenter:
    """Incrementally build a :class:`Document` from a stream of lines.

    The slicer writes no end-of-document marker, so lines after the last
    ``; LAYER`` marker stay buffered until :meth:`finish` is called. Pass
    ``flush=True`` to keep them as the trailer block; otherwise they are
    dropped.
    """

    def __init__(
        self,
        markers: Sequence[MarkerPair] = DEFAULT_MARKERS,
        *,
        tail_lines: int = PURGE_TAIL_LINES,
    ) -> None:
        _validate_markers(markers, tail_lines)
        self._markers = tuple(markers)
        self._tail_lines = tail_lines
        self._buffer: list[SourceLine] = []
        self._header: Block | None = None
        self._layers: list[Layer] = []
        self._line_count = 0
        self._finished = False

    @property
    def layer_count(self) -> int:
        return len(self._layers)

    def feed(
        self,
        line: str,
        statement: Statement | None = None,
        *,
        line_number: int | None = None,
    ) -> None:
        """Consume one line, parsing it unless *statement* is supplied."""

        if self._finished:
            raise SegmentationError(
                "cannot feed a segmenter after finish() or a segmentation error"
            )

        self._line_count += 1
        number = line_number if line_number is not None else self._line_count
        text = line.rstrip("\r\n")

        layer_index = self._match_layer_marker(text, number)
        if statement is None:
            statement = parse_statement(text, line_number=number)
        if layer_index is not None:
            try:
                self._close_buffer(layer_index, number)
            except SegmentationError:
                # The buffered layer is gone; refuse further input.
                self._finished = True
                raise
        self._buffer.append(SourceLine(number, text, statement))

    def finish(self, *, flush: bool = False, last_layer: bool = False) -> Document:
        """Return the assembled :class:`Document`.

        With ``flush=True`` the lines after the final layer marker become
        the trailer block, or one more layer when *last_layer* is also set.
        Without a flush those lines are discarded.
        """

        if self._finished:
            raise SegmentationError("segmenter has already finished")
        self._finished = True

        buffer, self._buffer = self._buffer, []
        header = self._header
        layers = list(self._layers)
        trailer = Block(BlockKind.MODEL)

        if not flush:
            if buffer:
                logger.debug("Dropping %d unflushed line(s) after the last layer marker", len(buffer))
            if header is None:
                header = Block(BlockKind.MODEL)
        elif header is None:
            header = _build_block(BlockKind.MODEL, buffer)
        elif last_layer:
            layers.append(self._segment_layer(buffer, len(layers)))
        else:
            trailer = _build_block(BlockKind.MODEL, buffer)

        return Document(header, tuple(layers), trailer)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _match_layer_marker(self, text: str, line_number: int) -> int | None:
        match = _LAYER_MARKER_PATTERN.match(text)
        if match is None:
            return None
        suffix = _LAYER_INDEX_PATTERN.fullmatch(match.group(1))
        if suffix is None:
            raise SegmentationError(
                f"malformed layer marker {text!r}",
                line_number=line_number,
            )
        return int(suffix.group(1))

    def _close_buffer(self, layer_index: int, line_number: int) -> None:
        buffer, self._buffer = self._buffer, []

        if layer_index == 0:
            if self._header is not None:
                raise SegmentationError("duplicate LAYER 0 marker", line_number=line_number)
            self._header = _build_block(BlockKind.MODEL, buffer)
            logger.debug("Header closed with %d line(s)", len(buffer))
            return

        if self._header is None:
            raise SegmentationError(
                f"LAYER {layer_index} appears before LAYER 0",
                line_number=line_number,
            )
        expected = len(self._layers) + 1
        if layer_index != expected:
            raise SegmentationError(
                f"expected LAYER {expected}, found LAYER {layer_index}",
                line_number=line_number,
            )
        self._layers.append(self._segment_layer(buffer, layer_index - 1))

    def _segment_layer(self, lines: Sequence[SourceLine], index: int) -> Layer:
        return segment_layer(lines, index, markers=self._markers, tail_lines=self._tail_lines)


def segment(
    lines: Iterable[str],
    *,
    flush: bool = False,
    last_layer: bool = False,
    markers: Sequence[MarkerPair] = DEFAULT_MARKERS,
    tail_lines: int = PURGE_TAIL_LINES,
) -> Document:
    """Segment *lines* into a :class:`Document` in a single pass."""

    segmenter = Segmenter(markers, tail_lines=tail_lines)
    for line in lines:
        segmenter.feed(line)
    return segmenter.finish(flush=flush, last_layer=last_layer)
