"""Pagination slicer: split one tall raster image into page-sized slices.

Images are numpy arrays (rows x cols x channels). The planning step works
purely on dimensions so it can be tested without pixels.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np

from ..config import PageGeometry
from ..errors import EmptySurface

# Printed residue (mm) below which no further page is started.
_EPSILON_MM = 1e-6


@dataclass(frozen=True)
class PageSlice:
    page_index: int
    source_y: int
    source_height: int
    x_mm: float
    y_mm: float
    width_mm: float
    height_mm: float

    @property
    def source_end(self) -> int:
        return self.source_y + self.source_height


def plan_slices(width_px: int, height_px: int, geometry: PageGeometry) -> List[PageSlice]:
    """Compute page slices for a ``width_px`` x ``height_px`` image.

    Doxygen:
    - @param width_px: Source image width in pixels.
    - @param height_px: Source image height in pixels.
    - @param geometry: Page size and margin in millimeters.
    - @return: Ordered slices whose source rows cover [0, height_px) exactly.
    - @throws EmptySurface: If either dimension is zero.
    """
    if width_px <= 0 or height_px <= 0:
        raise EmptySurface(f"Cannot paginate a {width_px}x{height_px} surface")
    geometry.validate()

    pw = geometry.printable_width_mm
    ph = geometry.printable_height_mm
    scale = pw / width_px
    remaining = height_px * scale
    source_y = 0.0

    boundaries = [0.0]
    printed: List[float] = []
    while remaining > _EPSILON_MM:
        slice_mm = min(remaining, ph)
        source_y += slice_mm * width_px / pw
        remaining -= slice_mm
        boundaries.append(source_y)
        printed.append(slice_mm)

    # whole pixel rows; the last boundary is clamped rather than recomputed
    rows = [int(round(b)) for b in boundaries[:-1]] + [height_px]
    rows = [min(r, height_px) for r in rows]

    slices: List[PageSlice] = []
    for start, end, slice_mm in zip(rows, rows[1:], printed):
        # only when one page spans under a source pixel (images a few px wide);
        # its rows merge into the neighbouring slice, coverage stays exact
        if end <= start:
            continue
        slices.append(
            PageSlice(
                page_index=len(slices),
                source_y=start,
                source_height=end - start,
                x_mm=geometry.margin_mm,
                y_mm=geometry.margin_mm,
                width_mm=pw,
                height_mm=slice_mm,
            )
        )
    return slices


def slice_image(img: np.ndarray, slices: List[PageSlice]) -> List[np.ndarray]:
    """Extract each slice's pixel rows from ``img`` (full width, copied)."""
    return [img[s.source_y:s.source_end].copy() for s in slices]
