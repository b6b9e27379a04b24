from __future__ import annotations

import base64
import binascii
import os
import shutil
import tempfile
import time
from typing import Dict, Iterable, Optional

from ..render.style import SurfaceStyle, VisualSurface
from .model import BlockNode, BulletList, DocumentTree, Image, OrderedList, Table

_MIME_EXT = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
}


def _iter_images(blocks: Iterable[BlockNode]):
    for node in blocks:
        if isinstance(node, Image):
            yield node
        elif isinstance(node, (BulletList, OrderedList)):
            for item in node.items:
                yield from _iter_images(item.blocks)
        elif isinstance(node, Table):
            for row in node.rows:
                for cell in row.cells:
                    yield from _iter_images(cell.blocks)


def decode_data_uri(src: str) -> Optional[tuple]:
    """Return (mime, bytes) for a base64 ``data:`` URI, or None if ``src`` is not one."""
    if not src.startswith("data:") or "," not in src:
        return None
    header, payload = src[5:].split(",", 1)
    parts = header.split(";")
    if "base64" not in parts[1:]:
        return None
    try:
        return parts[0].lower(), base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError):
        return None


class OffscreenSurface:
    """Scoped off-screen clone of a visual surface.

    Lives in a buffer directory under config/buffer/<timestamp>; embedded
    images are written there so the rasterizer can load them from disk.
    Debug mode keeps the buffer on disk; otherwise it is removed on exit,
    including when rendering fails.
    """

    def __init__(
        self,
        surface: VisualSurface,
        style: SurfaceStyle = SurfaceStyle(),
        base_dir: Optional[str] = None,
        debug: bool = False,
    ) -> None:
        self.tree: DocumentTree = surface.tree
        self.style = style
        self.debug = bool(debug)
        root = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
        self._base = base_dir or os.path.join(root, "config", "buffer")
        self.base_dir: Optional[str] = None
        self._images: Dict[str, Optional[str]] = {}

    def __enter__(self) -> "OffscreenSurface":
        os.makedirs(self._base, exist_ok=True)
        ts = time.strftime("%Y%m%d-%H%M%S")
        self.base_dir = tempfile.mkdtemp(prefix=f"{ts}-", dir=self._base)
        try:
            self._materialize_images()
        except BaseException:
            # __exit__ is not called when __enter__ fails
            self.cleanup()
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    @property
    def is_open(self) -> bool:
        return self.base_dir is not None and os.path.isdir(self.base_dir)

    def path(self, *parts: str) -> str:
        if self.base_dir is None:
            raise RuntimeError("Off-screen surface is not open")
        p = os.path.join(self.base_dir, *parts)
        os.makedirs(os.path.dirname(p), exist_ok=True)
        return p

    def image_path(self, src: str) -> Optional[str]:
        """Local file for an image source, or None when it cannot be resolved offline."""
        return self._images.get(src)

    def _materialize_images(self) -> None:
        for order, node in enumerate(_iter_images(self.tree.blocks)):
            if node.src in self._images:
                continue
            decoded = decode_data_uri(node.src)
            if decoded is not None:
                mime, blob = decoded
                out_path = self.path(f"surface-img-{order:04d}{_MIME_EXT.get(mime, '.bin')}")
                with open(out_path, "wb") as f:
                    f.write(blob)
                self._images[node.src] = out_path
            elif node.src and os.path.isfile(node.src):
                self._images[node.src] = node.src
            else:
                # remote sources are not fetched
                self._images[node.src] = None

    def cleanup(self) -> None:
        if self.base_dir is not None and not self.debug:
            shutil.rmtree(self.base_dir, ignore_errors=True)
            self.base_dir = None
