"""Mark-to-style mapping for text runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from docx.enum.text import WD_UNDERLINE

from .model import Mark


@dataclass(frozen=True)
class RunStyle:
    bold: bool = False
    italic: bool = False
    # None means "no underline"; WD_UNDERLINE.SINGLE is the default underline
    underline: Optional[WD_UNDERLINE] = None
    font_name: Optional[str] = None


def resolve_style(marks: Iterable[Mark], font_family: Optional[str] = None) -> RunStyle:
    """Map a run's mark set and font family onto a python-docx run style.

    Doxygen:
    - @param marks: Marks attached to the run (duplicates and order are irrelevant).
    - @param font_family: Optional font family from the run's text style.
    - @return: Immutable RunStyle; absent marks resolve to False/None.
    """
    mark_set = frozenset(marks)
    return RunStyle(
        bold=Mark.BOLD in mark_set,
        italic=Mark.ITALIC in mark_set,
        underline=WD_UNDERLINE.SINGLE if Mark.UNDERLINE in mark_set else None,
        font_name=font_family or None,
    )
