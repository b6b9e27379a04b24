"""Off-screen rendering of the document surface into a raster image.

Modules:
- style: VisualSurface handle and the normalized print style
- draw: layout + PIL drawing (render_surface, PillowRasterizer)
"""
