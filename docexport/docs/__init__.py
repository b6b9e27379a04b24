"""Document layer: tree model, structured elements and the .docx/.pdf writers.

Exposes:
- Data model: DocumentTree and its block/inline node types, tree_from_dict
- Style resolver: resolve_style, RunStyle
- Builder: build_elements (tree -> structured elements)
- Writers: write_docx (python-docx), write_pdf / paginate_image (reportlab)
"""

from .model import (
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
    UnsupportedNode,
    tree_from_dict,
)
from .marks import RunStyle, resolve_style
from .elements import BulletLine, StructuredElement, StyledParagraph, StyledSpan
from .builder import build_elements
from .docx_io import write_docx

__all__ = [
    "BulletList",
    "DocumentTree",
    "Heading",
    "Image",
    "ListItem",
    "Mark",
    "OrderedList",
    "Paragraph",
    "Table",
    "TableCell",
    "TableRow",
    "TextRun",
    "UnsupportedNode",
    "tree_from_dict",
    "RunStyle",
    "resolve_style",
    "BulletLine",
    "StructuredElement",
    "StyledParagraph",
    "StyledSpan",
    "build_elements",
    "write_docx",
]
