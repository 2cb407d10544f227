# =============================================================================
# Interactive Map Rendering
# =============================================================================
# Leaflet web maps via folium. Leaflet tiles are in Web Mercator and expect
# WGS 84 lon/lat input, so every layer is reprojected to EPSG:4326 first.
# =============================================================================

import logging
import math
from pathlib import Path
from typing import Optional, Sequence, Union

import folium
import geopandas as gpd
import matplotlib
import numpy as np
from branca.colormap import LinearColormap
from matplotlib.colors import to_hex

from geotutor.models import Bounds
from geotutor.spatial_utils.crs import reproject

__all__ = [
    "WEB_CRS",
    "build_colormap",
    "render_interactive_map",
    "save_interactive_map",
]

logger = logging.getLogger(__name__)

WEB_CRS = "EPSG:4326"
_MISSING_FILL = "#cccccc"


def _to_web(gdf: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    if gdf.crs is None:
        raise ValueError("Interactive maps need a CRS to place features; call set_crs() first")
    return reproject(gdf, WEB_CRS)


def build_colormap(
    values,
    cmap: str = "YlOrRd",
    caption: Optional[str] = None,
    steps: int = 9,
) -> LinearColormap:
    """
    Build a branca colormap spanning the finite range of ``values``.

    Colours are sampled from the matplotlib colormap of the same name so
    static and interactive maps share a palette.
    """
    finite = np.asarray(values, dtype=float)
    finite = finite[np.isfinite(finite)]
    vmin, vmax = (float(finite.min()), float(finite.max())) if finite.size else (0.0, 1.0)
    if vmin == vmax:
        vmax = vmin + 1.0

    palette = matplotlib.colormaps[cmap]
    colors = [to_hex(palette(x)) for x in np.linspace(0, 1, steps)]
    return LinearColormap(colors, vmin=vmin, vmax=vmax, caption=caption or "")


def render_interactive_map(
    gdf: gpd.GeoDataFrame,
    *,
    column: Optional[str] = None,
    tooltip_fields: Optional[Sequence[str]] = None,
    tiles: str = "OpenStreetMap",
    cmap: str = "YlOrRd",
    zoom_start: Optional[int] = None,
    fill_opacity: float = 0.7,
    points: Optional[gpd.GeoDataFrame] = None,
    point_popup_field: Optional[str] = None,
    point_radius: float = 3.0,
) -> folium.Map:
    """
    Render a layer (and optional point overlay) as a Leaflet map.

    Args:
        gdf: Polygon (or any) layer, any CRS
        column: Attribute shaded with a colormap; None for a flat style
        tooltip_fields: Attributes shown on hover
        tiles: Basemap tile set name understood by folium
        cmap: Matplotlib colormap name for ``column``
        zoom_start: Initial zoom; None fits the map to the data
        fill_opacity: Polygon fill opacity
        points: Optional point layer drawn as circle markers
        point_popup_field: Attribute shown in each marker's popup
        point_radius: Marker radius in pixels

    Returns:
        folium.Map

    Raises:
        ValueError: If the layer has no CRS or no features
        KeyError: If a referenced attribute does not exist
    """
    data = _to_web(gdf)
    if data.empty:
        raise ValueError("Cannot render an empty layer on an interactive map")
    for field in [column, *(tooltip_fields or [])]:
        if field is not None and field not in data.columns:
            raise KeyError(f"Column '{field}' not found. Available columns: {list(data.columns)}")

    bounds = Bounds.from_total_bounds(data.total_bounds)
    center_x, center_y = bounds.center
    fmap = folium.Map(location=[center_y, center_x], tiles=tiles, zoom_start=zoom_start or 4)

    colormap = None
    if column is not None:
        colormap = build_colormap(data[column], cmap=cmap, caption=column)

    def style(feature):
        fill = "#3388ff"
        if colormap is not None:
            value = feature["properties"].get(column)
            missing = value is None or (isinstance(value, float) and math.isnan(value))
            fill = _MISSING_FILL if missing else colormap(value)
        return {"fillColor": fill, "color": "#555555", "weight": 1, "fillOpacity": fill_opacity}

    tooltip = folium.GeoJsonTooltip(fields=list(tooltip_fields)) if tooltip_fields else None
    # Non-geometry columns folium cannot serialize (timestamps) are not needed for styling
    keep = [c for c in dict.fromkeys([column, *(tooltip_fields or [])]) if c is not None]
    folium.GeoJson(
        data[[*keep, data.geometry.name]],
        name="features",
        style_function=style,
        tooltip=tooltip,
    ).add_to(fmap)

    if colormap is not None:
        colormap.add_to(fmap)

    if points is not None:
        point_data = _to_web(points)
        if point_popup_field is not None and point_popup_field not in point_data.columns:
            raise KeyError(f"Column '{point_popup_field}' not found in point layer")
        group = folium.FeatureGroup(name="points")
        for _, row in point_data.iterrows():
            geom = row.geometry
            if geom is None or geom.is_empty:
                continue
            popup = str(row[point_popup_field]) if point_popup_field else None
            folium.CircleMarker(
                location=[geom.y, geom.x],
                radius=point_radius,
                popup=popup,
                color="#222222",
                fill=True,
                fill_opacity=0.9,
            ).add_to(group)
        group.add_to(fmap)

    if zoom_start is None:
        fmap.fit_bounds([[bounds.miny, bounds.minx], [bounds.maxy, bounds.maxx]])

    logger.info(f"Rendered interactive map with {len(data)} feature(s)")
    return fmap


def save_interactive_map(fmap: folium.Map, path: Union[str, Path]) -> Path:
    """Write the map as a standalone HTML page."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fmap.save(str(path))
    logger.info(f"Saved interactive map: {path}")
    return path
