"""
Entry point and compatibility facade for the document export engine.

Packages:
- docexport.docs: Document tree model, mark resolver, builder, .docx/.pdf writers
- docexport.image: Pagination slicer (page planning and pixel slicing)
- docexport.render: Off-screen surface rasterizer
- docexport.pipeline: Export orchestrator and collaborator interfaces
"""

from __future__ import annotations

import asyncio
import os
from typing import Dict

from docexport.config import (
    CONFIG_PATH as CONFIG_PATH,
    ExportConfig,
    PageGeometry,
    load_export_config,
)
from docexport.errors import (
    ConcurrentExportRejected,
    EmptySurface,
    ExportError,
    MissingEditorSurface,
    PackagingFailure,
)

# Document tree and structured export
from docexport.docs import (
    DocumentTree,
    build_elements,
    resolve_style,
    tree_from_dict,
    write_docx,
)
from docexport.docs.pdf_io import paginate_image, write_pdf

# Pagination and rasterization
from docexport.image import PageSlice, plan_slices, slice_image
from docexport.render.draw import PillowRasterizer, render_surface
from docexport.render.style import SurfaceStyle, VisualSurface

# Orchestration
from docexport.pipeline import (
    ConsoleNotifier,
    DirectorySaver,
    Err,
    ExportOrchestrator,
    ExportState,
    Ok,
    SnapshotEditor,
)

__all__ = [
    # config/errors
    "CONFIG_PATH",
    "ExportConfig",
    "PageGeometry",
    "load_export_config",
    "ConcurrentExportRejected",
    "EmptySurface",
    "ExportError",
    "MissingEditorSurface",
    "PackagingFailure",
    # structured export
    "DocumentTree",
    "build_elements",
    "resolve_style",
    "tree_from_dict",
    "write_docx",
    # raster export
    "PageSlice",
    "plan_slices",
    "slice_image",
    "paginate_image",
    "write_pdf",
    "PillowRasterizer",
    "render_surface",
    "SurfaceStyle",
    "VisualSurface",
    # orchestration
    "ConsoleNotifier",
    "DirectorySaver",
    "Err",
    "ExportOrchestrator",
    "ExportState",
    "Ok",
    "SnapshotEditor",
    "export_snapshot",
]


async def export_snapshot(
    tree_path: str,
    out_dir: str,
    out_format: str = "both",
    config: ExportConfig | None = None,
    buffer_dir: str | None = None,
) -> Dict[str, str]:
    """Export a JSON editor snapshot to document.docx and/or document.pdf.

    Doxygen:
    - @param tree_path: Path to the snapshot ({"type": "doc", "content": [...]}).
    - @param out_dir: Directory receiving the artifacts.
    - @param out_format: docx|pdf|both.
    - @param config: Export settings; defaults to config/export.json.
    - @param buffer_dir: Parent directory of the off-screen buffer (default config/buffer).
    - @return: Mapping of format to saved path, or to "<format>_error" messages.
    """
    orchestrator = ExportOrchestrator(
        editor=SnapshotEditor(tree_path),
        saver=DirectorySaver(out_dir),
        config=config or load_export_config(),
        buffer_dir=buffer_dir,
    )
    out: Dict[str, str] = {}
    if out_format in ("docx", "both"):
        result = await orchestrator.export_structured()
        if isinstance(result, Ok):
            out["docx"] = result.saved_to or result.file_name
        else:
            out["docx_error"] = str(result.reason)
    if out_format in ("pdf", "both"):
        result = await orchestrator.export_raster()
        if isinstance(result, Ok):
            out["pdf"] = result.saved_to or result.file_name
        else:
            out["pdf_error"] = str(result.reason)
    return out


def _cli() -> None:
    """CLI for snapshot export or direct pagination of a tall image.

    Snapshot mode:
    --tree / -t: Path to editor snapshot JSON
    --format / -f: docx|pdf|both (default: both)
    --out-dir / -o: Output directory (default: current directory)
    --config: Path to export.json (default: config/export.json)
    --debug-buffer: Keep the off-screen surface buffer on disk

    Image mode:
    --image / -i: Path to a tall rendered image to paginate into a PDF
    """
    import argparse
    from dataclasses import replace

    import cv2

    parser = argparse.ArgumentParser(description="Export an editor snapshot to DOCX and paginated PDF.")
    parser.add_argument("--tree", "-t", type=str, help="Path to editor snapshot JSON")
    parser.add_argument("--format", "-f", type=str, default="both", choices=["docx", "pdf", "both"], help="Output format (default: both)")
    parser.add_argument("--out-dir", "-o", type=str, default=".", help="Output directory (default: .)")
    parser.add_argument("--config", type=str, default=CONFIG_PATH, help="Path to export.json")
    parser.add_argument("--debug-buffer", action="store_true", help="Keep the off-screen buffer under config/buffer")
    parser.add_argument("--image", "-i", type=str, help="Paginate an already rendered tall image into a PDF")

    args = parser.parse_args()

    try:
        config = load_export_config(args.config)
    except ValueError as e:
        print(str(e))
        raise SystemExit(2)
    if args.debug_buffer:
        config = replace(config, buffer_debug=True)

    if args.image:
        bgr = cv2.imread(args.image, cv2.IMREAD_COLOR)
        if bgr is None:
            print(f"Failed to load image: {args.image}")
            raise SystemExit(1)
        try:
            data = paginate_image(cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB), config.geometry)
        except ExportError as e:
            print(f"Error exporting PDF: {e}")
            raise SystemExit(1)
        saved = DirectorySaver(args.out_dir).save(config.pdf_file_name, data)
        print(f"pdf: {saved}")
        return

    if not args.tree:
        print("Please provide either --tree (snapshot JSON) or --image (tall raster) to export.")
        print("Examples:\n  python main.py --tree doc.json --format docx\n  python main.py --image page.png -o out")
        raise SystemExit(2)

    if not os.path.exists(args.tree):
        print(f"Snapshot not found: {args.tree}")
        raise SystemExit(2)

    result = asyncio.run(export_snapshot(args.tree, args.out_dir, out_format=args.format, config=config))
    for k, v in result.items():
        print(f"{k}: {v}")
    if any(k.endswith("_error") for k in result):
        raise SystemExit(1)


if __name__ == "__main__":
    _cli()
