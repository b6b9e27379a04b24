"""Interfaces of the external collaborators around the export engine.

The editor supplies snapshots, the saver receives finished artifacts and the
notifier shows user-facing messages. Console/directory implementations are
used by the CLI.
"""

from __future__ import annotations

import asyncio
import json
import os
from typing import Any, Dict, Optional, Protocol, Sequence

import numpy as np

from docexport.docs.buffer import OffscreenSurface
from docexport.docs.docx_io import write_docx
from docexport.docs.elements import StructuredElement
from docexport.docs.model import DocumentTree, tree_from_dict
from docexport.render.style import VisualSurface


class EditorCollaborator(Protocol):
    def get_document_tree(self) -> DocumentTree: ...

    def get_visual_surface(self) -> Optional[VisualSurface]: ...


class Notifier(Protocol):
    def notify(self, message: str) -> None: ...


class FileSaver(Protocol):
    def save(self, file_name: str, data: bytes) -> str: ...


class Packager(Protocol):
    async def pack(self, elements: Sequence[StructuredElement]) -> bytes: ...


class Rasterizer(Protocol):
    async def render(self, surface: OffscreenSurface) -> np.ndarray: ...


class ConsoleNotifier:
    def notify(self, message: str) -> None:
        print(message)


class DirectorySaver:
    """Save artifacts under a fixed output directory."""

    def __init__(self, out_dir: str) -> None:
        self.out_dir = out_dir

    def save(self, file_name: str, data: bytes) -> str:
        os.makedirs(self.out_dir, exist_ok=True)
        out_path = os.path.join(self.out_dir, file_name)
        with open(out_path, "wb") as f:
            f.write(data)
        return out_path


class SnapshotEditor:
    """Editor stand-in backed by a JSON snapshot (dict or file path).

    A file is re-read on every request so each export sees a fresh snapshot.
    """

    def __init__(self, source: Any) -> None:
        self.source = source

    def _load(self) -> Dict[str, Any]:
        if isinstance(self.source, dict):
            return self.source
        with open(self.source, "r", encoding="utf-8") as f:
            return json.load(f)

    def get_document_tree(self) -> DocumentTree:
        return tree_from_dict(self._load())

    def get_visual_surface(self) -> Optional[VisualSurface]:
        return VisualSurface(tree=self.get_document_tree())


class DocxPackager:
    """Container packager: python-docx serialization run off the event loop."""

    async def pack(self, elements: Sequence[StructuredElement]) -> bytes:
        return await asyncio.to_thread(write_docx, list(elements))
