from __future__ import annotations

import io
from typing import Sequence

from docx import Document as DocxDocument

from ..errors import PackagingFailure
from .elements import BulletLine, StructuredElement, StyledParagraph


def _add_styled_paragraph(d, element: StyledParagraph) -> None:
    if element.heading_level is not None:
        # add_heading resolves "Heading N" for us
        d.add_heading(element.text, level=element.heading_level)
        return
    p = d.add_paragraph()
    for span in element.spans:
        run = p.add_run(span.text)
        run.bold = span.style.bold
        run.italic = span.style.italic
        if span.style.underline is not None:
            run.underline = span.style.underline
        if span.style.font_name:
            run.font.name = span.style.font_name


def write_docx(elements: Sequence[StructuredElement]) -> bytes:
    """Package structured elements into a .docx container and return its bytes.

    Doxygen:
    - @param elements: Non-empty sequence from `build_elements`.
    - @return: Serialized word-processing package.
    - @throws PackagingFailure: If python-docx rejects any element.
    """
    if not elements:
        raise PackagingFailure("Refusing to package an empty element sequence")
    try:
        d = DocxDocument()
        for element in elements:
            if isinstance(element, StyledParagraph):
                _add_styled_paragraph(d, element)
            elif isinstance(element, BulletLine):
                d.add_paragraph(element.text)
            else:
                raise TypeError(f"Unsupported structured element: {type(element).__name__}")
        out = io.BytesIO()
        d.save(out)
    except Exception as e:
        raise PackagingFailure(f"Could not package document: {e}") from e
    return out.getvalue()
