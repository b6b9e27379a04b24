from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from ..docs.model import DocumentTree


@dataclass(frozen=True)
class VisualSurface:
    """Laid-out document handed over by the editor for rasterization."""

    tree: DocumentTree


@dataclass(frozen=True)
class SurfaceStyle:
    """Normalized print styling applied to the off-screen clone (CSS px)."""

    width_px: int = 794
    padding_px: int = 32
    scale: float = 2.0
    font_family: str = "Times New Roman"
    font_size_px: int = 16
    line_height: float = 1.6
    color: str = "#000000"
    background: str = "#ffffff"


# level -> (font px, margin top, margin bottom, color)
HEADING_STYLES: Dict[int, Tuple[int, int, int, str]] = {
    1: (32, 24, 16, "#1f2937"),
    2: (24, 20, 12, "#374151"),
    3: (20, 16, 8, "#4b5563"),
}
PARAGRAPH_MARGIN = 12
LIST_MARGIN = 12
LIST_INDENT = 24
LIST_ITEM_MARGIN = 4
TABLE_MARGIN = 16
TABLE_BORDER = 2
TABLE_BORDER_COLOR = "#e5e7eb"
TABLE_HEADER_FILL = "#f9fafb"
CELL_PADDING = (8, 12)
IMAGE_MARGIN = 16
