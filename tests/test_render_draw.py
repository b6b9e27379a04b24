import asyncio
import base64
import io

import numpy as np
from PIL import Image as PILImage

from docexport.docs.buffer import OffscreenSurface
from docexport.docs.model import (
    BulletList,
    DocumentTree,
    Heading,
    Image,
    ListItem,
    Mark,
    OrderedList,
    Paragraph,
    Table,
    TableCell,
    TableRow,
    TextRun,
)
from docexport.render.draw import PillowRasterizer, load_font, render_surface
from docexport.render.style import SurfaceStyle, VisualSurface

STYLE = SurfaceStyle(scale=1.0)


def _render(tmp_path, *blocks, style=STYLE):
    surface = VisualSurface(tree=DocumentTree(blocks=tuple(blocks)))
    with OffscreenSurface(surface, style, base_dir=str(tmp_path)) as clone:
        return render_surface(clone)


def _png_data_uri(color, size=(40, 20)) -> str:
    buf = io.BytesIO()
    PILImage.new("RGB", size, color).save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def test_render_empty_tree_is_blank_padding_only(tmp_path):
    out = _render(tmp_path)
    assert out.dtype == np.uint8
    assert out.shape == (2 * STYLE.padding_px, STYLE.width_px, 3)
    assert (out == 255).all()


def test_render_text_draws_pixels(tmp_path):
    out = _render(
        tmp_path,
        Heading(level=1, content=(TextRun("Document Title"),)),
        Paragraph(content=(TextRun("Hello "), TextRun("world", marks=frozenset({Mark.BOLD, Mark.UNDERLINE})))),
    )
    assert out.shape[1] == STYLE.width_px
    assert out.shape[0] > 2 * STYLE.padding_px
    assert (out < 128).any()


def test_render_scale_multiplies_width(tmp_path):
    out = _render(tmp_path, Paragraph(content=(TextRun("x"),)), style=SurfaceStyle(scale=2.0))
    assert out.shape[1] == 2 * 794


def test_longer_documents_render_taller(tmp_path):
    short = _render(tmp_path, Paragraph(content=(TextRun("one"),)))
    words = " ".join(["lorem"] * 400)
    tall = _render(tmp_path, Paragraph(content=(TextRun(words),)), Paragraph())
    assert tall.shape[0] > short.shape[0]


def test_render_lists_and_tables(tmp_path):
    item = ListItem(blocks=(Paragraph(content=(TextRun("entry"),)),))
    table = Table(rows=(
        TableRow(cells=(TableCell(blocks=(Paragraph(content=(TextRun("H"),)),), header=True), TableCell())),
        TableRow(cells=(TableCell(blocks=(Paragraph(content=(TextRun("v"),)),)), TableCell())),
    ))
    out = _render(tmp_path, BulletList(items=(item, item)), OrderedList(items=(item,)), table)
    # header fill colour #f9fafb
    assert (out == np.array([0xF9, 0xFA, 0xFB], dtype=np.uint8)).all(axis=2).any()


def test_render_embedded_image(tmp_path):
    out = _render(tmp_path, Image(src=_png_data_uri((255, 0, 0))))
    red = (out[:, :, 0] > 200) & (out[:, :, 1] < 50) & (out[:, :, 2] < 50)
    assert red.sum() >= 40 * 20 * 0.9


def test_render_unresolvable_image_is_skipped(tmp_path):
    out = _render(tmp_path, Image(src="https://example.com/cat.png"))
    assert (out == 255).all()


def test_pillow_rasterizer_runs_async(tmp_path):
    surface = VisualSurface(tree=DocumentTree(blocks=(Paragraph(content=(TextRun("async"),)),)))
    with OffscreenSurface(surface, STYLE, base_dir=str(tmp_path)) as clone:
        out = asyncio.run(PillowRasterizer().render(clone))
    assert out.shape[1] == STYLE.width_px


def test_load_font_always_returns_a_font():
    font = load_font("No Such Family", 16, bold=True)
    assert font.getlength("abc") > 0
