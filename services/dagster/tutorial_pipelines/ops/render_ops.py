# =============================================================================
# Render Ops - Regional Population Maps
# =============================================================================
# Static (matplotlib) and interactive (folium) maps of the regional summary.
# =============================================================================

from pathlib import Path
from typing import Any, Dict

from dagster import In, OpExecutionContext, Out, op

from geotutor.models import RegionalPopulationConfig
from geotutor.rendering import (
    MapLayer,
    render_interactive_map,
    render_static_map,
    save_figure,
    save_interactive_map,
)

from .spatial_ops import AREA_COLUMN, DENSITY_COLUMN

__all__ = ["render_regional_maps"]


def _render_regional_maps(
    summary_info: Dict[str, Any],
    points_info: Dict[str, Any],
    log,
) -> Dict[str, Any]:
    """
    Render the regional summary as a PNG and an HTML map.

    The static map shades regions by population density with the points
    drawn on top; the interactive map adds tooltips with the region name,
    total population, area and density.

    Args:
        summary_info: Output of join_and_summarize
        points_info: Output of load_population_points
        log: Logger instance (context.log)

    Returns:
        Dict with static_map and interactive_map paths
    """
    config = RegionalPopulationConfig(**summary_info["config"])
    aggregation = config.aggregation
    output_dir = Path(config.output_dir)
    summary = summary_info["summary"]
    points = points_info["points"]

    fig = render_static_map(
        [
            MapLayer(
                data=summary,
                column=DENSITY_COLUMN,
                cmap="YlOrRd",
                edgecolor="white",
                linewidth=0.5,
                legend=True,
                legend_kwds={"label": "people per km²"},
            ),
            MapLayer(data=points, color="black", markersize=2, alpha=0.6, label="Population points"),
        ],
        title=f"Population density by {config.region_column}",
    )
    static_path = save_figure(fig, output_dir / "regional_population.png")
    log.info(f"Static map written to {static_path}")

    fmap = render_interactive_map(
        summary,
        column=DENSITY_COLUMN,
        tooltip_fields=[config.region_column, aggregation.output_column, AREA_COLUMN, DENSITY_COLUMN],
    )
    html_path = save_interactive_map(fmap, output_dir / "regional_population.html")
    log.info(f"Interactive map written to {html_path}")

    return {"static_map": str(static_path), "interactive_map": str(html_path)}


@op(
    ins={
        "summary_info": In(dagster_type=dict),
        "points_info": In(dagster_type=dict),
    },
    out={"map_info": Out(dagster_type=dict)},
)
def render_regional_maps(context: OpExecutionContext, summary_info: dict, points_info: dict) -> dict:
    """
    Render static and interactive maps of population density per region.

    Returns:
        Dict with static_map and interactive_map paths
    """
    return _render_regional_maps(
        summary_info=summary_info,
        points_info=points_info,
        log=context.log,
    )
