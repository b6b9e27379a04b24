"""Raster pagination (page planning and pixel slicing)."""

from .processing import (
    PageSlice,
    plan_slices,
    slice_image,
)

__all__ = [
    "PageSlice",
    "plan_slices",
    "slice_image",
]
