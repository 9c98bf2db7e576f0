"""Render splice lists as a filament strip preview image."""

from __future__ import annotations

import math
from collections.abc import Sequence
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from .gcode.splices import Splice

__all__ = [
    "DEFAULT_SPLICE_PREVIEW_SIZE",
    "DEFAULT_TOOL_COLORS",
    "SplicePreviewError",
    "SplicePreviewRenderer",
    "save_splice_preview",
]

Color = tuple[int, int, int, int]

DEFAULT_SPLICE_PREVIEW_SIZE: tuple[int, int] = (1024, 240)
"""Default pixel dimensions for generated splice previews."""

DEFAULT_TOOL_COLORS: tuple[Color, ...] = (
    (230, 140, 60, 255),
    (80, 140, 220, 255),
    (80, 200, 120, 255),
    (220, 60, 60, 255),
    (160, 100, 200, 255),
    (230, 210, 80, 255),
    (160, 160, 160, 255),
    (240, 240, 240, 255),
)
"""Palette used for tools without a profile colour."""


class SplicePreviewError(RuntimeError):
    """Raised when a splice preview cannot be produced."""


class SplicePreviewRenderer:
    """Draw splices as coloured bands proportional to their length."""

    def __init__(
        self,
        *,
        background: Color = (12, 16, 22, 255),
        separator_color: Color = (200, 200, 210, 160),
        palette: Sequence[Color] = DEFAULT_TOOL_COLORS,
    ) -> None:
        self._background = background
        self._separator_color = separator_color
        self._palette = tuple(palette) or DEFAULT_TOOL_COLORS

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def render(
        self,
        splices: Sequence[Splice],
        *,
        colors: Sequence[str] | None = None,
        size: tuple[int, int] = DEFAULT_SPLICE_PREVIEW_SIZE,
    ) -> Image.Image:
        """Return a Pillow image of *splices*.

        *colors* holds one ``#RRGGBB`` string per tool, as found in the
        slicer profile; missing or unparsable entries use the palette.
        """

        if not splices:
            raise SplicePreviewError("No splices to render.")

        total = splices[-1].end
        if not math.isfinite(total) or total <= 0:
            raise SplicePreviewError(f"Splice list has no usable length ({total!r}).")

        width, height = size
        width = max(1, int(width))
        height = max(1, int(height))
        image = Image.new("RGBA", (width, height), self._background)
        draw = ImageDraw.Draw(image, "RGBA")

        padding = max(12, min(width, height) // 12)
        bar_top = padding
        bar_bottom = max(bar_top + 1, height // 2)
        available = max(1.0, width - padding * 2)
        scale = available / total

        for splice in splices:
            left = padding + splice.start * scale
            right = padding + splice.end * scale
            fill = self._tool_color(splice.tool, colors)
            draw.rectangle([left, bar_top, max(left, right - 1), bar_bottom], fill=fill)
            draw.line([(right, bar_top), (right, bar_bottom)], fill=self._separator_color, width=1)

        font = ImageFont.load_default()
        text_color = (240, 240, 240, 255) if self._background[0] < 200 else (20, 20, 20, 255)
        lines = [f"Splices: {len(splices)}  |  Filament: {total:.1f} mm"]
        for tool, (count, length) in sorted(_tool_totals(splices).items()):
            lines.append(f"T{tool}: {length:.1f} mm in {count} splice(s)")

        y = bar_bottom + padding // 2
        for line in lines:
            if y >= height:
                break
            draw.text((padding, y), line, fill=text_color, font=font)
            y += _measure_text_height(font, line) + 2

        return image

    def _tool_color(self, tool: int, colors: Sequence[str] | None) -> Color:
        default = self._palette[tool % len(self._palette)] if tool >= 0 else self._separator_color
        if colors and 0 <= tool < len(colors):
            return _resolve_color(colors[tool], default)
        return default


def save_splice_preview(
    splices: Sequence[Splice],
    destination: Path,
    *,
    colors: Sequence[str] | None = None,
    size: tuple[int, int] = DEFAULT_SPLICE_PREVIEW_SIZE,
    renderer: SplicePreviewRenderer | None = None,
) -> Path:
    """Render *splices* to a PNG at *destination* and return the path."""

    image = (renderer or SplicePreviewRenderer()).render(splices, colors=colors, size=size)
    destination = Path(destination).expanduser()
    destination.parent.mkdir(parents=True, exist_ok=True)
    try:
        image.save(destination, format="PNG")
    except OSError as exc:
        raise SplicePreviewError(f"Unable to write {destination!s}: {exc}") from exc
    return destination


def _tool_totals(splices: Sequence[Splice]) -> dict[int, tuple[int, float]]:
    totals: dict[int, tuple[int, float]] = {}
    for splice in splices:
        count, length = totals.get(splice.tool, (0, 0.0))
        totals[splice.tool] = (count + 1, length + splice.length)
    return totals


def _resolve_color(value: str | None, default: Color) -> Color:
    if not value:
        return default
    text = value.strip()
    if not text.startswith("#"):
        return default
    hex_value = text[1:]
    if len(hex_value) not in {6, 8}:
        return default
    try:
        r = int(hex_value[0:2], 16)
        g = int(hex_value[2:4], 16)
        b = int(hex_value[4:6], 16)
        a = int(hex_value[6:8], 16) if len(hex_value) == 8 else default[3]
    except ValueError:
        return default
    return (r, g, b, a)


def _measure_text_height(font: ImageFont.ImageFont, text: str) -> int:
    bbox = font.getbbox(text)
    return int(bbox[3] - bbox[1])
