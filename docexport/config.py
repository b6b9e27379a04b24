import json
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict

_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
CONFIG_PATH = os.path.join(_PROJECT_ROOT, "config", "export.json")


@dataclass(frozen=True)
class PageGeometry:
    """Physical page size and uniform margin, in millimeters."""

    width_mm: float = 210.0
    height_mm: float = 297.0
    margin_mm: float = 10.0

    @property
    def printable_width_mm(self) -> float:
        return self.width_mm - 2 * self.margin_mm

    @property
    def printable_height_mm(self) -> float:
        return self.height_mm - 2 * self.margin_mm

    def validate(self) -> "PageGeometry":
        if self.margin_mm < 0:
            raise ValueError(f"Page margin must not be negative: {self.margin_mm}")
        if self.printable_width_mm <= 0 or self.printable_height_mm <= 0:
            raise ValueError(
                f"Margins of {self.margin_mm}mm leave no printable area on a {self.width_mm}x{self.height_mm}mm page"
            )
        return self


A4 = PageGeometry()


@dataclass(frozen=True)
class ExportConfig:
    geometry: PageGeometry = A4
    # rasterizer: CSS-pixel width of the off-screen surface and device scale
    surface_width_px: int = 794
    render_scale: float = 2.0
    docx_file_name: str = "document.docx"
    pdf_file_name: str = "document.pdf"
    buffer_debug: bool = False


_GEOMETRY_KEYS = {"page_width_mm": "width_mm", "page_height_mm": "height_mm", "margin_mm": "margin_mm"}


def config_from_dict(data: Dict[str, Any]) -> ExportConfig:
    """Build an ExportConfig from a parsed export.json mapping; unknown keys are ignored."""
    geometry = replace(A4, **{attr: float(data[key]) for key, attr in _GEOMETRY_KEYS.items() if key in data})
    known = {f.name for f in fields(ExportConfig)} - {"geometry"}
    overrides = {k: v for k, v in data.items() if k in known}
    cfg = replace(ExportConfig(), geometry=geometry.validate(), **overrides)
    if cfg.surface_width_px <= 0 or cfg.render_scale <= 0:
        raise ValueError("surface_width_px and render_scale must be positive")
    return cfg


def load_export_config(path: str = CONFIG_PATH) -> ExportConfig:
    """Load export settings from config/export.json, falling back to A4 defaults.

    A missing or unreadable file only produces a warning; a geometry that
    leaves no printable area raises ValueError.
    """
    if not os.path.exists(path):
        print(f"Warning: export config not found at {path}, using defaults")
        return ExportConfig()

    try:
        with open(path, "r", encoding="utf-8") as cfg_file:
            data = json.load(cfg_file) or {}
    except (OSError, json.JSONDecodeError) as exc:
        print(f"Warning: Could not load export settings from {path}: {exc}")
        return ExportConfig()

    if not isinstance(data, dict):
        print(f"Warning: export config at {path} must be a JSON object, using defaults")
        return ExportConfig()
    return config_from_dict(data)
