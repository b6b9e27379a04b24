"""Export orchestration: single-flight control over both export paths.

`ExportOrchestrator.export_structured` builds and packages a .docx;
`ExportOrchestrator.export_raster` renders the editor surface off-screen,
paginates it and writes a .pdf. Each call returns ``Ok`` or ``Err`` and never
raises: failures are logged, shown once through the notifier and nothing is
saved.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Union

import numpy as np

from docexport.config import ExportConfig
from docexport.docs.buffer import OffscreenSurface
from docexport.docs.builder import build_elements
from docexport.docs.pdf_io import paginate_image
from docexport.errors import (
    ConcurrentExportRejected,
    EmptySurface,
    ExportError,
    MissingEditorSurface,
    PackagingFailure,
)
from docexport.render.draw import PillowRasterizer
from docexport.render.style import SurfaceStyle

from .collaborators import (
    ConsoleNotifier,
    DocxPackager,
    EditorCollaborator,
    FileSaver,
    Notifier,
    Packager,
    Rasterizer,
)


class ExportState(enum.Enum):
    IDLE = "idle"
    EXPORTING = "exporting"


@dataclass(frozen=True)
class Ok:
    artifact: bytes
    file_name: str
    saved_to: Optional[str] = None


@dataclass(frozen=True)
class Err:
    reason: ExportError


ExportResult = Union[Ok, Err]


class ExportOrchestrator:
    """Coordinates the structured and raster export paths.

    At most one export is in flight; a second request while exporting is
    rejected immediately. There is no timeout, so a collaborator that never
    completes keeps the orchestrator in EXPORTING.
    """

    def __init__(
        self,
        editor: EditorCollaborator,
        saver: FileSaver,
        notifier: Optional[Notifier] = None,
        packager: Optional[Packager] = None,
        rasterizer: Optional[Rasterizer] = None,
        config: Optional[ExportConfig] = None,
        buffer_dir: Optional[str] = None,
    ) -> None:
        self.editor = editor
        self.saver = saver
        self.notifier = notifier or ConsoleNotifier()
        self.packager = packager or DocxPackager()
        self.rasterizer = rasterizer or PillowRasterizer()
        self.config = config or ExportConfig()
        self.buffer_dir = buffer_dir
        self._state = ExportState.IDLE

    @property
    def state(self) -> ExportState:
        return self._state

    async def export_structured(self) -> ExportResult:
        return await self._run(
            "Word document",
            self._structured_pipeline,
            self.config.docx_file_name,
            started="Generating Word document...",
            succeeded="Word document exported successfully!",
            failed="Error exporting Word document. Please try again.",
        )

    async def export_raster(self) -> ExportResult:
        return await self._run(
            "PDF",
            self._raster_pipeline,
            self.config.pdf_file_name,
            started="Generating PDF...",
            succeeded="PDF exported successfully!",
            failed="Error exporting PDF. Please try again.",
        )

    async def _structured_pipeline(self) -> bytes:
        tree = self.editor.get_document_tree()
        elements = build_elements(tree)
        try:
            return await self.packager.pack(elements)
        except ExportError:
            raise
        except Exception as e:
            raise PackagingFailure(f"Packager rejected the document: {e}") from e

    async def _raster_pipeline(self) -> bytes:
        surface = self.editor.get_visual_surface()
        if surface is None:
            raise MissingEditorSurface("Editor content not found")

        style = SurfaceStyle(width_px=self.config.surface_width_px, scale=self.config.render_scale)
        with OffscreenSurface(surface, style, base_dir=self.buffer_dir, debug=self.config.buffer_debug) as clone:
            pixels = await self.rasterizer.render(clone)

        pixels = np.asarray(pixels) if pixels is not None else np.zeros((0, 0, 3), dtype=np.uint8)
        if pixels.ndim < 2 or pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise EmptySurface(f"Rasterizer produced an empty image of shape {pixels.shape}")
        return await asyncio.to_thread(paginate_image, pixels, self.config.geometry)

    def _notify(self, message: str) -> None:
        try:
            self.notifier.notify(message)
        except Exception as e:
            print(f"Warning: notification failed: {e}")

    async def _run(
        self,
        label: str,
        pipeline: Callable[[], Awaitable[bytes]],
        file_name: str,
        started: str,
        succeeded: str,
        failed: str,
    ) -> ExportResult:
        # check-and-set happens before the first await, so it cannot interleave
        if self._state is ExportState.EXPORTING:
            reason = ConcurrentExportRejected(f"{label} export requested while another export is in progress")
            print(f"Warning: {reason}")
            self._notify(reason.user_message)
            return Err(reason)
        self._state = ExportState.EXPORTING
        try:
            self._notify(started)
            artifact = await pipeline()
            saved_to = self.saver.save(file_name, artifact)
        except Exception as e:
            reason = e if isinstance(e, ExportError) else ExportError(f"{label} export failed: {e}")
            if reason is not e:
                reason.__cause__ = e
            print(f"Error exporting {label}: {reason}")
            self._notify(reason.user_message or failed)
            return Err(reason)
        else:
            self._notify(succeeded)
        finally:
            self._state = ExportState.IDLE
        return Ok(artifact=artifact, file_name=file_name, saved_to=saved_to)
