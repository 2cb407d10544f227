"""Regional population workflow (op-based)."""

from dagster import job

from ..ops import (
    export_regional_summary,
    join_and_summarize,
    load_population_points,
    load_regions,
    render_regional_maps,
    validate_regional_config,
)


@job(
    name="regional_population_job",
    description="Join population points to region polygons in an equal-area CRS, summarize population and density per region, export GeoPackage and render maps",
)
def regional_population_job():
    """
    Regional population pipeline.

    Flow:
    1. validate_regional_config: Validates the RegionalPopulationConfig from run config
    2. load_regions / load_population_points: Read both layers into the analysis CRS
    3. join_and_summarize: Point-in-polygon join, population, area and density per region
    4. export_regional_summary: Writes GeoPackage output (plus optional dissolved layer)
    5. render_regional_maps: Writes a static PNG and an interactive HTML map
    """
    workflow_config = validate_regional_config()
    regions_info = load_regions(workflow_config)
    points_info = load_population_points(workflow_config)
    summary_info = join_and_summarize(regions_info, points_info)
    export_regional_summary(summary_info)
    render_regional_maps(summary_info, points_info)
