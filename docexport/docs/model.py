from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


class Mark(str, enum.Enum):
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"


@dataclass(frozen=True)
class TextRun:
    text: str
    marks: frozenset = field(default_factory=frozenset)
    font_family: Optional[str] = None


@dataclass(frozen=True)
class Heading:
    level: int
    content: Tuple[TextRun, ...] = ()


@dataclass(frozen=True)
class Paragraph:
    content: Tuple[TextRun, ...] = ()


@dataclass(frozen=True)
class ListItem:
    blocks: Tuple["BlockNode", ...] = ()


@dataclass(frozen=True)
class BulletList:
    items: Tuple[ListItem, ...] = ()


@dataclass(frozen=True)
class OrderedList:
    items: Tuple[ListItem, ...] = ()
    start: int = 1


@dataclass(frozen=True)
class TableCell:
    blocks: Tuple["BlockNode", ...] = ()
    header: bool = False


@dataclass(frozen=True)
class TableRow:
    cells: Tuple[TableCell, ...] = ()


@dataclass(frozen=True)
class Table:
    rows: Tuple[TableRow, ...] = ()


@dataclass(frozen=True)
class Image:
    """Embedded ``data:`` URI or external source path."""

    src: str
    alt: Optional[str] = None


@dataclass(frozen=True)
class UnsupportedNode:
    """Any block tag outside the known set; kept so it can be skipped explicitly."""

    type_name: str


BlockNode = Union[Heading, Paragraph, BulletList, OrderedList, Table, Image, UnsupportedNode]

BLOCK_TYPES = (Heading, Paragraph, BulletList, OrderedList, Table, Image, UnsupportedNode)


@dataclass(frozen=True)
class DocumentTree:
    blocks: Tuple[BlockNode, ...] = ()

    def __len__(self) -> int:
        return len(self.blocks)

    def __iter__(self):
        return iter(self.blocks)


def _inline(nodes: Optional[List[Dict[str, Any]]]) -> Tuple[TextRun, ...]:
    runs: List[TextRun] = []
    for node in nodes or []:
        # hard breaks, mentions etc. carry no text payload
        if node.get("type") != "text":
            continue
        marks = set()
        font_family = None
        for mark in node.get("marks") or []:
            mtype = mark.get("type")
            if mtype == "textStyle":
                font_family = (mark.get("attrs") or {}).get("fontFamily") or font_family
                continue
            try:
                marks.add(Mark(mtype))
            except ValueError:
                continue
        runs.append(TextRun(text=node.get("text") or "", marks=frozenset(marks), font_family=font_family))
    return tuple(runs)


def _blocks(nodes: Optional[List[Dict[str, Any]]]) -> Tuple[BlockNode, ...]:
    return tuple(block_from_dict(n) for n in nodes or [])


def _list_items(nodes: Optional[List[Dict[str, Any]]]) -> Tuple[ListItem, ...]:
    return tuple(ListItem(blocks=_blocks(n.get("content"))) for n in nodes or [] if n.get("type") == "listItem")


def block_from_dict(node: Dict[str, Any]) -> BlockNode:
    """Convert one JSON block node (editor snapshot format) into a typed node."""
    ntype = node.get("type")
    attrs = node.get("attrs") or {}
    content = node.get("content")
    if ntype == "heading":
        try:
            level = int(attrs.get("level", 1))
        except (TypeError, ValueError):
            level = 1
        return Heading(level=level, content=_inline(content))
    if ntype == "paragraph":
        return Paragraph(content=_inline(content))
    if ntype == "bulletList":
        return BulletList(items=_list_items(content))
    if ntype == "orderedList":
        try:
            start = int(attrs.get("start") or 1)
        except (TypeError, ValueError):
            start = 1
        return OrderedList(items=_list_items(content), start=start)
    if ntype == "table":
        rows = []
        for row in content or []:
            cells = tuple(
                TableCell(blocks=_blocks(c.get("content")), header=c.get("type") == "tableHeader")
                for c in row.get("content") or []
            )
            rows.append(TableRow(cells=cells))
        return Table(rows=tuple(rows))
    if ntype == "image":
        return Image(src=str(attrs.get("src") or ""), alt=attrs.get("alt"))
    return UnsupportedNode(type_name=str(ntype))


def tree_from_dict(doc: Dict[str, Any]) -> DocumentTree:
    """Build a DocumentTree from a ``{"type": "doc", "content": [...]}`` snapshot."""
    return DocumentTree(blocks=_blocks(doc.get("content")))
