# =============================================================================
# Static Map Rendering
# =============================================================================
# Layered static maps with matplotlib. Layers are drawn bottom-up in the
# order given, each mapping an attribute to colour or line width.
# =============================================================================

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import geopandas as gpd
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib.patches import Patch

from geotutor.models import MapOutputFormat
from geotutor.spatial_utils.crs import reproject

__all__ = ["MapLayer", "render_static_map", "choropleth", "save_figure"]

logger = logging.getLogger(__name__)


@dataclass
class MapLayer:
    """
    One layer of a static map.

    Attributes:
        data: Features to draw
        column: Attribute mapped to fill colour (choropleth); None for a flat colour
        color: Flat colour when ``column`` is None
        edgecolor: Outline colour for polygons
        linewidth: Line width (maximum width when ``linewidth_column`` is set)
        linewidth_column: Attribute mapped to line width, scaled to ``linewidth``
        alpha: Opacity
        cmap: Matplotlib colormap name for ``column``
        markersize: Point size
        legend: Draw a colorbar / category legend for ``column``
        label: Entry for the layer legend
        legend_kwds: Extra keywords for geopandas' legend
    """

    data: gpd.GeoDataFrame
    column: Optional[str] = None
    color: Optional[str] = None
    edgecolor: Optional[str] = None
    linewidth: float = 1.0
    linewidth_column: Optional[str] = None
    alpha: float = 1.0
    cmap: str = "viridis"
    markersize: Optional[float] = None
    legend: bool = False
    label: Optional[str] = None
    legend_kwds: Optional[dict] = None

    def plot_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"alpha": self.alpha, "linewidth": self.linewidth}
        if self.column is not None:
            if self.column not in self.data.columns:
                raise KeyError(f"Layer column '{self.column}' not found in data")
            kwargs.update(column=self.column, cmap=self.cmap, legend=self.legend)
            if self.legend_kwds:
                kwargs["legend_kwds"] = self.legend_kwds
        elif self.color is not None:
            kwargs["color"] = self.color
        if self.edgecolor is not None:
            kwargs["edgecolor"] = self.edgecolor
        if self.markersize is not None:
            kwargs["markersize"] = self.markersize
        if self.linewidth_column is not None:
            if self.linewidth_column not in self.data.columns:
                raise KeyError(f"Line width column '{self.linewidth_column}' not found in data")
            values = self.data[self.linewidth_column].astype(float)
            top = values.max()
            kwargs["linewidth"] = (values / top * self.linewidth).tolist() if top > 0 else self.linewidth
        return kwargs

    def legend_handle(self) -> Optional[Union[Patch, Line2D]]:
        if self.label is None:
            return None
        geom_types = set(self.data.geom_type.dropna())
        color = self.color or "grey"
        if geom_types and geom_types <= {"LineString", "MultiLineString"}:
            return Line2D([0], [0], color=color, linewidth=self.linewidth, label=self.label)
        if geom_types and geom_types <= {"Point", "MultiPoint"}:
            return Line2D([0], [0], marker="o", linestyle="", color=color, label=self.label)
        return Patch(facecolor=color, edgecolor=self.edgecolor or color, alpha=self.alpha, label=self.label)


def render_static_map(
    layers: Sequence[MapLayer],
    *,
    title: Optional[str] = None,
    figsize: tuple[float, float] = (8, 6),
    crs: Any = None,
    axis_off: bool = True,
) -> Figure:
    """
    Draw layers onto a single set of axes.

    Every layer is reprojected to ``crs`` (default: the first layer's CRS)
    so they line up.

    Args:
        layers: Layers, bottom first
        title: Map title
        figsize: Figure size in inches
        crs: Display CRS
        axis_off: Hide the coordinate axes

    Returns:
        Matplotlib Figure (caller saves or closes it)

    Raises:
        ValueError: If no layers are given or a layer has no CRS
    """
    if not layers:
        raise ValueError("At least one layer is required to render a map")

    target_crs = crs if crs is not None else layers[0].data.crs
    if target_crs is None and any(layer.data.crs is not None for layer in layers):
        raise ValueError("Cannot align a layer without a CRS; call set_crs() first")
    fig, ax = plt.subplots(figsize=figsize)

    handles = []
    for layer in layers:
        data = layer.data
        if target_crs is not None:
            if data.crs is None:
                plt.close(fig)
                raise ValueError("Cannot align a layer without a CRS; call set_crs() first")
            data = reproject(data, target_crs)
        if data.empty:
            logger.warning(f"Skipping empty layer {layer.label or layer.column or ''}".rstrip())
            continue
        data.plot(ax=ax, **layer.plot_kwargs())
        handle = layer.legend_handle()
        if handle is not None:
            handles.append(handle)

    if handles:
        ax.legend(handles=handles, loc="best")
    if title:
        ax.set_title(title)
    if axis_off:
        ax.set_axis_off()

    logger.info(f"Rendered static map with {len(layers)} layer(s)")
    return fig


def choropleth(
    gdf: gpd.GeoDataFrame,
    column: str,
    *,
    cmap: str = "viridis",
    title: Optional[str] = None,
    legend_label: Optional[str] = None,
    edgecolor: str = "white",
    figsize: tuple[float, float] = (8, 6),
) -> Figure:
    """Single-layer map shading polygons by ``column``."""
    legend_kwds = {"label": legend_label} if legend_label else None
    layer = MapLayer(
        data=gdf,
        column=column,
        cmap=cmap,
        edgecolor=edgecolor,
        linewidth=0.5,
        legend=True,
        legend_kwds=legend_kwds,
    )
    return render_static_map([layer], title=title, figsize=figsize)


def save_figure(fig: Figure, path: Union[str, Path], dpi: int = 150) -> Path:
    """
    Save a figure, inferring the format from the suffix, then close it.

    Raises:
        ValueError: If the suffix is not png, svg or pdf
    """
    path = Path(path)
    fmt = MapOutputFormat(path.suffix.lstrip(".").lower() or "png")
    if fmt is MapOutputFormat.HTML:
        raise ValueError("Static maps cannot be saved as HTML; use save_interactive_map()")

    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        fig.savefig(path, format=fmt.value, dpi=dpi, bbox_inches="tight")
    finally:
        plt.close(fig)
    logger.info(f"Saved static map: {path}")
    return path
