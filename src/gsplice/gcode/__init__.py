"""Tokenizing, classifying and segmenting multi-material G-code."""

from .document import Block, BlockKind, Document, Layer
from .errors import GCodeError, ParseError, SegmentationError, ToolNumberError
from .groups import COMMAND_GROUPS, Group, build_command_index, classify
from .segmenter import (
    BRIM_LOOKBACK,
    DEFAULT_MARKERS,
    MARKER_LOOKBACK,
    PURGE_TAIL_LINES,
    MarkerPair,
    Segmenter,
    segment,
)
from .splices import Splice, SpliceCalculator, compute_splices
from .statement import Params, Statement, parse_statement

__all__ = [
    "BRIM_LOOKBACK",
    "COMMAND_GROUPS",
    "DEFAULT_MARKERS",
    "MARKER_LOOKBACK",
    "PURGE_TAIL_LINES",
    "Block",
    "BlockKind",
    "Document",
    "GCodeError",
    "Group",
    "Layer",
    "MarkerPair",
    "ParseError",
    "Params",
    "SegmentationError",
    "Segmenter",
    "Splice",
    "SpliceCalculator",
    "Statement",
    "ToolNumberError",
    "build_command_index",
    "classify",
    "compute_splices",
    "parse_statement",
    "segment",
]
