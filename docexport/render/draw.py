"""Rasterize an off-screen document surface into one tall RGB image.

Layout is a simple block flow with the normalized print style: headings,
paragraphs with styled runs, bullet/ordered lists, bordered tables and
images scaled to the content width. Text is drawn with PIL; images are
decoded and resized with OpenCV. The result is a numpy RGB array.
"""

from __future__ import annotations

import asyncio
import functools
import math
import os
import re
from typing import Any, Callable, List, Optional, Sequence, Tuple

import cv2
import numpy as np
from PIL import Image, ImageDraw, ImageFont

from ..docs.buffer import OffscreenSurface
from ..docs.marks import resolve_style
from ..docs.model import (
    BlockNode,
    BulletList,
    Heading,
    Image as ImageNode,
    ListItem,
    OrderedList,
    Paragraph,
    Table,
    TextRun,
    UnsupportedNode,
)
from .style import (
    CELL_PADDING,
    HEADING_STYLES,
    IMAGE_MARGIN,
    LIST_INDENT,
    LIST_ITEM_MARGIN,
    LIST_MARGIN,
    PARAGRAPH_MARGIN,
    TABLE_BORDER,
    TABLE_BORDER_COLOR,
    TABLE_HEADER_FILL,
    TABLE_MARGIN,
    SurfaceStyle,
)

_ROOT_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
_CONFIG_FONTS_DIR = os.path.join(_ROOT_DIR, "config", "fonts")

# family (lower-case) -> candidate files for (regular, bold, italic, bold italic)
_FAMILY_FILES = {
    "times new roman": ("times.ttf", "timesbd.ttf", "timesi.ttf", "timesbi.ttf"),
    "arial": ("arial.ttf", "arialbd.ttf", "ariali.ttf", "arialbi.ttf"),
    "georgia": ("georgia.ttf", "georgiab.ttf", "georgiai.ttf", "georgiaz.ttf"),
    "verdana": ("verdana.ttf", "verdanab.ttf", "verdanai.ttf", "verdanaz.ttf"),
    "courier new": ("cour.ttf", "courbd.ttf", "couri.ttf", "courbi.ttf"),
}
_SERIF_FALLBACK = (
    ("LiberationSerif-Regular.ttf", "DejaVuSerif.ttf"),
    ("LiberationSerif-Bold.ttf", "DejaVuSerif-Bold.ttf"),
    ("LiberationSerif-Italic.ttf", "DejaVuSerif-Italic.ttf"),
    ("LiberationSerif-BoldItalic.ttf", "DejaVuSerif-BoldItalic.ttf"),
)


@functools.lru_cache(maxsize=1)
def _font_dirs() -> Tuple[str, ...]:
    dirs: List[str] = [p for p in os.environ.get("FONT_PATH", "").split(os.pathsep) if p.strip()]
    windir = os.environ.get("WINDIR") or os.environ.get("SystemRoot")
    if windir:
        dirs.append(os.path.join(windir, "Fonts"))
    dirs += ["/usr/share/fonts", "/usr/local/share/fonts", os.path.expanduser("~/.fonts"), "/Library/Fonts"]
    dirs.append(_CONFIG_FONTS_DIR)
    return tuple(d for d in dirs if os.path.isdir(d))


@functools.lru_cache(maxsize=256)
def _find_font_path(name: str) -> Optional[str]:
    if os.path.isabs(name) and os.path.exists(name):
        return name
    wanted = name.lower()
    for base in _font_dirs():
        for dirpath, _dirs, files in os.walk(base):
            for fname in files:
                if fname.lower() == wanted:
                    return os.path.join(dirpath, fname)
    return None


@functools.lru_cache(maxsize=256)
def load_font(family: Optional[str], size: int, bold: bool = False, italic: bool = False) -> ImageFont.ImageFont:
    """Load a TrueType font for a CSS font family, falling back to a serif face.

    Doxygen:
    - @param family: CSS font-family (first entry is used), or None.
    - @param size: Pixel size.
    - @param bold: Bold variant.
    - @param italic: Italic variant.
    - @return: PIL font; Pillow's built-in font when nothing is installed.
    """
    variant = (2 if italic else 0) + (1 if bold else 0)
    key = (family or "").split(",")[0].strip().strip("'\"").lower()
    candidates: List[str] = []
    if key in _FAMILY_FILES:
        candidates.append(_FAMILY_FILES[key][variant])
    elif key:
        candidates.append(f"{key}.ttf")
    candidates.extend(_SERIF_FALLBACK[variant])
    for name in candidates:
        path = _find_font_path(name)
        if not path:
            continue
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


class _Layout:
    """Two-pass layout: blocks append draw ops with absolute coordinates."""

    def __init__(self, surface: OffscreenSurface, style: SurfaceStyle) -> None:
        self.surface = surface
        self.style = style
        self.ops: List[Callable[[Image.Image, ImageDraw.ImageDraw], None]] = []

    def px(self, css: float) -> float:
        return css * self.style.scale

    # -- text ---------------------------------------------------------------

    def _pieces(self, runs: Sequence[TextRun], size: int, force_bold: bool) -> List[Tuple[str, Any, bool]]:
        pieces: List[Tuple[str, Any, bool]] = []
        for run in runs:
            rs = resolve_style(run.marks, run.font_family)
            font = load_font(rs.font_name or self.style.font_family, size, rs.bold or force_bold, rs.italic)
            for token in re.split(r"(\s+)", run.text):
                if token:
                    pieces.append((token, font, rs.underline is not None))
        return pieces

    def text_block(
        self,
        runs: Sequence[TextRun],
        x: float,
        y: float,
        width: float,
        size_css: int,
        color: str,
        bold: bool = False,
    ) -> float:
        size = max(1, int(round(self.px(size_css))))
        line_h = size * self.style.line_height
        lines: List[List[Tuple[float, str, Any, bool]]] = [[]]
        cur_x = 0.0
        pending_space: Optional[Tuple[str, Any, bool]] = None
        for token, font, underline in self._pieces(runs, size, bold):
            if token.isspace():
                if lines[-1]:
                    pending_space = (" ", font, underline)
                continue
            w = font.getlength(token)
            space_w = pending_space[1].getlength(" ") if pending_space else 0.0
            if lines[-1] and cur_x + space_w + w > width:
                lines.append([])
                cur_x, space_w, pending_space = 0.0, 0.0, None
            if pending_space:
                lines[-1].append((cur_x, " ", pending_space[1], pending_space[2]))
                cur_x += space_w
                pending_space = None
            lines[-1].append((cur_x, token, font, underline))
            cur_x += w

        for li, line in enumerate(lines):
            ty = y + li * line_h + (line_h - size) / 2
            for off, token, font, underline in line:
                self.ops.append(functools.partial(_draw_text, x + off, ty, token, font, color, underline, size))
        return y + len(lines) * line_h

    # -- blocks -------------------------------------------------------------

    def margins(self, node: BlockNode) -> Tuple[float, float]:
        if isinstance(node, Heading):
            _size, top, bottom, _color = HEADING_STYLES.get(node.level, (self.style.font_size_px, PARAGRAPH_MARGIN, PARAGRAPH_MARGIN, self.style.color))
            return self.px(top), self.px(bottom)
        if isinstance(node, (BulletList, OrderedList)):
            return self.px(LIST_MARGIN), self.px(LIST_MARGIN)
        if isinstance(node, Table):
            return self.px(TABLE_MARGIN), self.px(TABLE_MARGIN)
        if isinstance(node, ImageNode):
            return self.px(IMAGE_MARGIN), self.px(IMAGE_MARGIN)
        if isinstance(node, UnsupportedNode):
            return 0.0, 0.0
        return self.px(PARAGRAPH_MARGIN), self.px(PARAGRAPH_MARGIN)

    def blocks(self, nodes: Sequence[BlockNode], x: float, y: float, width: float, item_margin: Optional[float] = None) -> float:
        pending = 0.0
        for i, node in enumerate(nodes):
            top, bottom = self.margins(node)
            if item_margin is not None:
                top, bottom = item_margin, item_margin
            # adjacent vertical margins collapse
            y += top if i == 0 else max(pending, top)
            y = self.block(node, x, y, width)
            pending = bottom
        return y + pending

    def block(self, node: BlockNode, x: float, y: float, width: float) -> float:
        if isinstance(node, Heading):
            size, _top, _bottom, color = HEADING_STYLES.get(node.level, (self.style.font_size_px, 0, 0, self.style.color))
            return self.text_block(node.content, x, y, width, size, color, bold=True)
        if isinstance(node, Paragraph):
            if not node.content:
                return y + self.px(self.style.font_size_px) * self.style.line_height
            return self.text_block(node.content, x, y, width, self.style.font_size_px, self.style.color)
        if isinstance(node, (BulletList, OrderedList)):
            return self.list_items(node, x, y, width)
        if isinstance(node, Table):
            return self.table(node, x, y, width)
        if isinstance(node, ImageNode):
            return self.image(node, x, y, width)
        return y

    def list_items(self, node, x: float, y: float, width: float) -> float:
        indent = self.px(LIST_INDENT)
        size = int(round(self.px(self.style.font_size_px)))
        font = load_font(self.style.font_family, size)
        for i, item in enumerate(node.items):
            if i:
                y += self.px(LIST_ITEM_MARGIN)
            marker = f"{node.start + i}." if isinstance(node, OrderedList) else "•"
            mw = font.getlength(marker)
            line_h = size * self.style.line_height
            self.ops.append(
                functools.partial(_draw_text, x + indent - mw - self.px(6), y + (line_h - size) / 2, marker, font, self.style.color, False, size)
            )
            y = self._item(item, x + indent, y, width - indent)
        return y

    def _item(self, item: ListItem, x: float, y: float, width: float) -> float:
        if not item.blocks:
            return y + self.px(self.style.font_size_px) * self.style.line_height
        # li > p keeps only the item spacing
        return self.blocks(item.blocks, x, y, width, item_margin=0.0)

    def table(self, node: Table, x: float, y: float, width: float) -> float:
        ncols = max((len(r.cells) for r in node.rows), default=0)
        if not ncols:
            return y
        col_w = width / ncols
        pad_v, pad_h = self.px(CELL_PADDING[0]), self.px(CELL_PADDING[1])
        border = max(1, int(round(self.px(TABLE_BORDER))))
        for row in node.rows:
            mark = len(self.ops)
            row_h = 0.0
            for ci, cell in enumerate(row.cells):
                cx = x + ci * col_w
                end = self.blocks(cell.blocks, cx + pad_h, y + pad_v, col_w - 2 * pad_h, item_margin=0.0)
                row_h = max(row_h, end - y + pad_v)
            row_h = max(row_h, 2 * pad_v + self.px(self.style.font_size_px) * self.style.line_height)
            fills = []
            for ci, cell in enumerate(row.cells):
                box = (x + ci * col_w, y, x + (ci + 1) * col_w, y + row_h)
                if cell.header:
                    fills.append(functools.partial(_draw_rect, box, TABLE_HEADER_FILL, None, 0))
                self.ops.append(functools.partial(_draw_rect, box, None, TABLE_BORDER_COLOR, border))
            self.ops[mark:mark] = fills
            y += row_h
        return y

    def image(self, node: ImageNode, x: float, y: float, width: float) -> float:
        path = self.surface.image_path(node.src)
        if not path:
            return y
        bgr = cv2.imread(path, cv2.IMREAD_COLOR)
        if bgr is None:
            print(f"Warning: failed to load image for rasterization: {path}")
            return y
        h, w = bgr.shape[:2]
        target_w = min(self.px(w), width)
        factor = target_w / w
        size = (max(1, int(round(w * factor))), max(1, int(round(h * factor))))
        resized = cv2.resize(bgr, size, interpolation=cv2.INTER_AREA if factor < 1 else cv2.INTER_LINEAR)
        pil = Image.fromarray(cv2.cvtColor(resized, cv2.COLOR_BGR2RGB))
        self.ops.append(functools.partial(_paste, pil, x, y))
        return y + size[1]


def _draw_text(x, y, text, font, fill, underline, size, img, draw) -> None:
    draw.text((x, y), text, font=font, fill=fill)
    if underline:
        uy = y + size * 1.05
        draw.line([(x, uy), (x + font.getlength(text), uy)], fill=fill, width=max(1, size // 14))


def _draw_rect(box, fill, outline, width, img, draw) -> None:
    draw.rectangle([int(round(v)) for v in box], fill=fill, outline=outline, width=width)


def _paste(pil, x, y, img, draw) -> None:
    img.paste(pil, (int(round(x)), int(round(y))))


def render_surface(surface: OffscreenSurface, style: Optional[SurfaceStyle] = None) -> np.ndarray:
    """Render the whole surface to a single RGB image array (rows x cols x 3).

    Doxygen:
    - @param surface: Open off-screen clone of the editor surface.
    - @param style: Print style; defaults to the surface's style.
    - @return: uint8 RGB array, width = style.width_px * style.scale.
    """
    style = style or surface.style
    layout = _Layout(surface, style)
    pad = layout.px(style.padding_px)
    width = int(round(layout.px(style.width_px)))
    end = layout.blocks(surface.tree.blocks, pad, pad, width - 2 * pad)
    height = int(math.ceil(end + pad))

    canvas = Image.new("RGB", (width, height), style.background)
    draw = ImageDraw.Draw(canvas)
    for op in layout.ops:
        op(canvas, draw)
    return np.array(canvas)


class PillowRasterizer:
    """Visual rasterizer: renders off the event loop and returns the pixel buffer."""

    def __init__(self, style: Optional[SurfaceStyle] = None) -> None:
        self.style = style

    async def render(self, surface: OffscreenSurface) -> np.ndarray:
        return await asyncio.to_thread(render_surface, surface, self.style)
