"""Command line entry point: summarise layers and splices of a G-code file."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from . import __version__
from .analysis import GCodeAnalysis, analyze_gcode_file
from .config import ProcessConfig, configure
from .gcode.errors import GCodeError
from .preview import SplicePreviewError, save_splice_preview
from .source import GCodeSourceError

__all__ = ["build_parser", "main"]

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gsplice",
        description=(
            "Split a multi-material G-code file into model and purge tower blocks "
            "and list the filament splices between toolchanges."
        ),
    )
    parser.add_argument("path", type=Path, help="G-code file produced by the slicer.")
    parser.add_argument(
        "--flush",
        action="store_true",
        help=(
            "Keep the code after the last layer marker as a trailer and turn the "
            "extrusion after the last toolchange into a final splice."
        ),
    )
    parser.add_argument(
        "--last-layer",
        action="store_true",
        help="With --flush, segment the trailing code as one more layer instead of a trailer.",
    )
    parser.add_argument(
        "--splice-offset",
        type=float,
        default=None,
        help="Filament between splicer and nozzle in mm (default: configured value).",
    )
    parser.add_argument(
        "--extra-end",
        type=float,
        default=None,
        help="Filament appended to the final splice in mm when flushing.",
    )
    parser.add_argument(
        "--layers",
        action="store_true",
        help="List the block sequence of every layer.",
    )
    parser.add_argument(
        "--preview",
        type=Path,
        default=None,
        help="Write a PNG filament strip of the splices to this path.",
    )
    parser.add_argument("--json", action="store_true", help="Print the report as JSON.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.last_layer and not args.flush:
        parser.error("--last-layer requires --flush")
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = configure(
            splice_offset=args.splice_offset,
            extra_end_filament=args.extra_end,
        )
        analysis = analyze_gcode_file(
            args.path,
            config=config,
            flush=args.flush,
            last_layer=args.last_layer,
        )
    except (GCodeError, GCodeSourceError, ValueError) as exc:
        print(f"gsplice: {exc}", file=sys.stderr)
        return 1

    if args.json:
        json.dump(_report(analysis, config), sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        _print_summary(analysis, config, show_layers=args.layers, stream=sys.stdout)

    if args.preview is not None:
        try:
            written = save_splice_preview(
                analysis.splices,
                args.preview,
                colors=analysis.profile.extruder_colours(),
            )
        except SplicePreviewError as exc:
            print(f"gsplice: {exc}", file=sys.stderr)
            return 1
        logger.info("Wrote splice preview to %s", written)

    return 0


def _report(analysis: GCodeAnalysis, config: ProcessConfig) -> dict[str, object]:
    document = analysis.document
    return {
        "statements": analysis.statement_count,
        "total_extrusion": analysis.total_extrusion,
        "tools": list(analysis.tools),
        "header_lines": len(document.header),
        "trailer_lines": len(document.trailer),
        "layers": [
            {"index": layer.index, "blocks": [kind.value for kind in layer.kinds]}
            for layer in document.layers
        ],
        "splices": [
            {
                "tool": splice.tool,
                "start": splice.start,
                "length": splice.length,
                "end": splice.end,
                "position": config.splice_position(splice),
            }
            for splice in analysis.splices
        ],
    }


def _print_summary(
    analysis: GCodeAnalysis,
    config: ProcessConfig,
    *,
    show_layers: bool,
    stream: TextIO,
) -> None:
    document = analysis.document
    purge_blocks = sum(len(layer.purge_blocks) for layer in document.layers)
    print(f"Statements: {analysis.statement_count}", file=stream)
    print(
        f"Layers: {document.layer_count} ({purge_blocks} purge block(s)), "
        f"header {len(document.header)} line(s), trailer {len(document.trailer)} line(s)",
        file=stream,
    )
    tools = ", ".join(f"T{tool}" for tool in analysis.tools) or "none"
    print(f"Tools: {tools}", file=stream)
    print(f"Total extrusion: {analysis.total_extrusion:.4f} mm", file=stream)

    if show_layers:
        for layer in document.layers:
            kinds = " ".join(kind.value for kind in layer.kinds) or "(empty)"
            print(f"  layer {layer.index}: {kinds}", file=stream)

    if not analysis.splices:
        print("No splices.", file=stream)
        return

    print(f"{'tool':>4}  {'start':>12}  {'length':>12}  {'end':>12}  {'position':>12}", file=stream)
    for splice in analysis.splices:
        print(
            f"{splice.tool:>4}  {splice.start:>12.4f}  {splice.length:>12.4f}  "
            f"{splice.end:>12.4f}  {config.splice_position(splice):>12.4f}",
            file=stream,
        )


if __name__ == "__main__":
    sys.exit(main())
