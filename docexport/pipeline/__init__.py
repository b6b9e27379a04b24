"""Export orchestration and collaborator interfaces."""

from .process import (
    Err,
    ExportOrchestrator,
    ExportResult,
    ExportState,
    Ok,
)
from .collaborators import (
    ConsoleNotifier,
    DirectorySaver,
    DocxPackager,
    SnapshotEditor,
)

__all__ = [
    "Err",
    "ExportOrchestrator",
    "ExportResult",
    "ExportState",
    "Ok",
    "ConsoleNotifier",
    "DirectorySaver",
    "DocxPackager",
    "SnapshotEditor",
]
