"""Translate a DocumentTree into packager-ready structured elements.

The translation is order preserving: every block maps to zero or more
elements emitted in source order. List items are flattened to one bullet
line per paragraph using only the paragraph's first run; nested lists and
run styling inside lists are not carried over.
"""

from __future__ import annotations

from typing import List, Tuple

from .elements import (
    BULLET_GLYPH,
    EMPTY_DOCUMENT_TEXT,
    BulletLine,
    StructuredElement,
    StyledParagraph,
    StyledSpan,
)
from .marks import resolve_style
from .model import (
    BLOCK_TYPES,
    BlockNode,
    BulletList,
    DocumentTree,
    Heading,
    Image,
    ListItem,
    OrderedList,
    Paragraph,
    Table,
    TextRun,
    UnsupportedNode,
)

# python-docx style names for heading levels 1..6
HEADING_STYLES: Tuple[str, ...] = (
    "Heading 1",
    "Heading 2",
    "Heading 3",
    "Heading 4",
    "Heading 5",
    "Heading 6",
)


def heading_level(level: int) -> int:
    """Return a valid heading level; anything outside 1..6 becomes 1."""
    if isinstance(level, int) and 1 <= level <= len(HEADING_STYLES):
        return level
    return 1


def _first_text(runs: Tuple[TextRun, ...]) -> str:
    return runs[0].text if runs else ""


def _heading(node: Heading) -> List[StructuredElement]:
    text = _first_text(node.content)
    return [StyledParagraph(spans=(StyledSpan(text),), heading_level=heading_level(node.level))]


def _paragraph(node: Paragraph) -> List[StructuredElement]:
    if not node.content:
        # empty placeholder keeps the vertical spacing
        return [StyledParagraph()]
    spans = tuple(StyledSpan(run.text, resolve_style(run.marks, run.font_family)) for run in node.content)
    return [StyledParagraph(spans=spans)]


def _list_lines(items: Tuple[ListItem, ...]) -> List[StructuredElement]:
    out: List[StructuredElement] = []
    for item in items:
        for block in item.blocks:
            if not isinstance(block, Paragraph) or not block.content:
                continue
            out.append(BulletLine(f"{BULLET_GLYPH} {_first_text(block.content)}"))
    return out


def build_block(node: BlockNode) -> List[StructuredElement]:
    """Dispatch a single block node to its structured elements.

    Tables, images and unknown tags produce nothing. A value that is not a
    block node at all is a programming error and raises TypeError.
    """
    if isinstance(node, Heading):
        return _heading(node)
    if isinstance(node, Paragraph):
        return _paragraph(node)
    if isinstance(node, (BulletList, OrderedList)):
        return _list_lines(node.items)
    if isinstance(node, (Table, Image, UnsupportedNode)):
        return []
    raise TypeError(f"Not a document block node: {type(node).__name__} (expected one of {[t.__name__ for t in BLOCK_TYPES]})")


def build_elements(tree: DocumentTree) -> List[StructuredElement]:
    """Build the structured element sequence for a whole tree.

    Doxygen:
    - @param tree: Document tree snapshot.
    - @return: Non-empty list of elements; an "Empty document" paragraph when nothing maps.
    """
    elements: List[StructuredElement] = []
    for node in tree.blocks:
        elements.extend(build_block(node))
    if not elements:
        elements.append(StyledParagraph(spans=(StyledSpan(EMPTY_DOCUMENT_TEXT),)))
    return elements
