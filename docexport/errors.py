"""Export error taxonomy.

Every failure that can end an export call is one of these; the orchestrator
catches them at its boundary and turns them into a single notification.
"""

from __future__ import annotations

from typing import Optional


class ExportError(RuntimeError):
    """Base class for all export failures."""

    # notification text; None falls back to the export path's generic message
    user_message: Optional[str] = None


class MissingEditorSurface(ExportError):
    """The editor did not provide a visual surface to rasterize."""

    user_message = "Editor content not found."


class EmptySurface(ExportError):
    """The rendered surface has zero width or height."""

    user_message = "Nothing to export: the document surface is empty."


class PackagingFailure(ExportError):
    """The container packager rejected the structured sequence."""

    user_message = "Error exporting Word document. Please try again."


class ConcurrentExportRejected(ExportError):
    """Another export is already in flight."""

    user_message = "An export is already in progress."
