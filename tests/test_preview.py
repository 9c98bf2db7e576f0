"""Tests for the splice preview renderer."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from gsplice.gcode import Splice
from gsplice.preview import (
    DEFAULT_SPLICE_PREVIEW_SIZE,
    DEFAULT_TOOL_COLORS,
    SplicePreviewError,
    SplicePreviewRenderer,
    save_splice_preview,
)

SPLICES = (Splice(0, 0.0, 5.0), Splice(1, 5.0, 5.0))


def test_render_uses_profile_colours() -> None:
    image = SplicePreviewRenderer().render(SPLICES, colors=["#FF0000", "#00FF00"])

    assert image.size == DEFAULT_SPLICE_PREVIEW_SIZE
    assert image.getpixel((100, 60)) == (255, 0, 0, 255)
    assert image.getpixel((800, 60)) == (0, 255, 0, 255)


def test_render_falls_back_to_palette() -> None:
    image = SplicePreviewRenderer().render(SPLICES, colors=["not a colour"])

    assert image.getpixel((100, 60)) == DEFAULT_TOOL_COLORS[0]
    assert image.getpixel((800, 60)) == DEFAULT_TOOL_COLORS[1]


def test_render_respects_size() -> None:
    image = SplicePreviewRenderer().render(SPLICES, size=(300, 80))

    assert image.size == (300, 80)


@pytest.mark.parametrize("splices", [(), (Splice(0, 0.0, 0.0),)])
def test_render_rejects_unusable_splices(splices: tuple[Splice, ...]) -> None:
    with pytest.raises(SplicePreviewError):
        SplicePreviewRenderer().render(splices)


def test_save_splice_preview_writes_png(tmp_path: Path) -> None:
    destination = tmp_path / "nested" / "splices.png"

    written = save_splice_preview(SPLICES, destination, colors=("#FF8000", "#0080FF"))

    assert written == destination
    assert destination.read_bytes().startswith(b"\x89PNG")
    with Image.open(destination) as image:
        assert image.size == DEFAULT_SPLICE_PREVIEW_SIZE
