from __future__ import annotations

import io
from typing import List, Sequence

import numpy as np
from PIL import Image
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import Canvas

from ..config import PageGeometry
from ..image.processing import PageSlice, plan_slices, slice_image


def write_pdf(slices: Sequence[PageSlice], pixels: Sequence[np.ndarray], geometry: PageGeometry) -> bytes:
    """Write one page per slice and return the PDF bytes.

    Each slice is drawn at its (x_mm, y_mm) offset from the top-left corner
    with its printed size. ReportLab stores the RGB data Flate-compressed,
    so pages are lossless.

    Doxygen:
    - @param slices: Page plan from `plan_slices`.
    - @param pixels: Pixel rows for each slice, aligned with `slices`.
    - @param geometry: Page geometry used for the plan.
    - @return: Serialized PDF.
    """
    if len(slices) != len(pixels):
        raise ValueError(f"Got {len(pixels)} pixel slices for {len(slices)} planned pages")

    out = io.BytesIO()
    canvas = Canvas(out, pagesize=(geometry.width_mm * mm, geometry.height_mm * mm))
    for page, arr in zip(slices, pixels):
        # PDF origin is bottom-left
        bottom = geometry.height_mm - page.y_mm - page.height_mm
        canvas.drawImage(
            ImageReader(Image.fromarray(arr)),
            page.x_mm * mm,
            bottom * mm,
            width=page.width_mm * mm,
            height=page.height_mm * mm,
        )
        canvas.showPage()
    canvas.save()
    return out.getvalue()


def paginate_image(img: np.ndarray, geometry: PageGeometry) -> bytes:
    """Plan, slice and write a tall image as a multi-page PDF.

    Raises EmptySurface for zero-sized images; nothing is written then.
    """
    height, width = img.shape[:2]
    slices: List[PageSlice] = plan_slices(width, height, geometry)
    return write_pdf(slices, slice_image(img, slices), geometry)
