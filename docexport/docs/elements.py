from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .marks import RunStyle

BULLET_GLYPH = "•"
EMPTY_DOCUMENT_TEXT = "Empty document"


@dataclass(frozen=True)
class StyledSpan:
    text: str
    style: RunStyle = RunStyle()


@dataclass(frozen=True)
class StyledParagraph:
    spans: Tuple[StyledSpan, ...] = ()
    heading_level: Optional[int] = None

    @property
    def text(self) -> str:
        return "".join(s.text for s in self.spans)


@dataclass(frozen=True)
class BulletLine:
    text: str


StructuredElement = Union[StyledParagraph, BulletLine]
