# =============================================================================
# Rendering Library
# =============================================================================
# Static (matplotlib) and interactive (folium/Leaflet) map rendering.
# =============================================================================

"""
Map rendering for the tutorial workflows.

This library provides:
- MapLayer / render_static_map / choropleth / save_figure: layered static maps
- render_interactive_map / save_interactive_map: Leaflet web maps
"""

from .static import MapLayer, choropleth, render_static_map, save_figure
from .interactive import (
    WEB_CRS,
    build_colormap,
    render_interactive_map,
    save_interactive_map,
)

__all__ = [
    "MapLayer",
    "choropleth",
    "render_static_map",
    "save_figure",
    "WEB_CRS",
    "build_colormap",
    "render_interactive_map",
    "save_interactive_map",
]
