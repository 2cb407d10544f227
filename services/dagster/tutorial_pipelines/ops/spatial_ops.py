# =============================================================================
# Spatial Ops - Regional Population Workflow
# =============================================================================
# Regions (polygons) and population points (CSV) are loaded, reprojected to
# an equal-area CRS, joined by containment, summarized per region and
# exported. Core logic lives in _functions taking a `log` for unit testing.
# =============================================================================

from pathlib import Path
from typing import Any, Dict

from dagster import In, OpExecutionContext, Out, op

from geotutor.models import Bounds, RegionalPopulationConfig
from geotutor.normalization import describe_columns
from geotutor.spatial_utils import (
    add_area,
    add_density,
    attach_summary,
    crs_label,
    dissolve_by,
    read_points_csv,
    read_vector,
    reproject,
    spatial_join,
    summarize_by,
    write_vector,
)
from geotutor.transformations import RecipeRegistry, apply_recipe

__all__ = [
    "validate_regional_config",
    "load_regions",
    "load_population_points",
    "join_and_summarize",
    "export_regional_summary",
]

SUMMARY_FILENAME = "regional_population.gpkg"
DENSITY_COLUMN = "density"
AREA_COLUMN = "area_km2"


def _validate_regional_config(workflow_config: Dict[str, Any], log) -> Dict[str, Any]:
    """
    Validate the workflow config and log its key fields.

    Args:
        workflow_config: RegionalPopulationConfig fields (from run config)
        log: Logger instance (context.log)

    Returns:
        Validated config dict (defaults filled in)

    Raises:
        pydantic.ValidationError: If the config is invalid
    """
    config = RegionalPopulationConfig(**workflow_config)

    log.info(f"Regions: {config.regions_path}")
    log.info(f"Points: {config.points_path} ({config.lon_column}/{config.lat_column}, {config.points_crs})")
    log.info(f"Analysis CRS: {config.analysis_crs}, recipe: {config.intent}")
    log.info(
        f"Join: points {config.join.predicate} regions ({config.join.how}), "
        f"summing '{config.population_column}' by '{config.region_column}'"
    )
    if config.dissolve_column:
        log.info(f"Dissolve by: {config.dissolve_column}")

    return config.model_dump()


def _load_regions(workflow_config: Dict[str, Any], log) -> Dict[str, Any]:
    """
    Read region polygons and run the configured transformation recipe.

    Args:
        workflow_config: Validated config dict
        log: Logger instance (context.log)

    Returns:
        Dict with config, regions (GeoDataFrame), crs, feature_count

    Raises:
        FileNotFoundError: If the regions file does not exist
        KeyError: If the region column is missing
    """
    config = RegionalPopulationConfig(**workflow_config)

    regions = read_vector(config.regions_path)
    if config.region_column not in regions.columns:
        raise KeyError(
            f"Region column '{config.region_column}' not found in {config.regions_path}. "
            f"Available columns: {list(regions.columns)}"
        )
    log.info(f"Loaded {len(regions)} region(s) in {crs_label(regions.crs)}")

    steps = RecipeRegistry.get_vector_recipe(config.intent, analysis_crs=config.analysis_crs)
    log.info(f"Applying '{config.intent}' recipe ({len(steps)} steps)")
    regions = apply_recipe(regions, steps, log=log)

    return {
        "config": config.model_dump(),
        "regions": regions,
        "crs": crs_label(regions.crs),
        "feature_count": len(regions),
    }


def _load_population_points(workflow_config: Dict[str, Any], log) -> Dict[str, Any]:
    """
    Build population points from the CSV and reproject them for analysis.

    Returns:
        Dict with points (GeoDataFrame), crs, feature_count

    Raises:
        FileNotFoundError: If the CSV does not exist
        KeyError: If a coordinate or population column is missing
    """
    config = RegionalPopulationConfig(**workflow_config)

    points = read_points_csv(
        config.points_path,
        lon_column=config.lon_column,
        lat_column=config.lat_column,
        crs=config.points_crs,
    )
    if config.population_column not in points.columns:
        raise KeyError(
            f"Population column '{config.population_column}' not found in {config.points_path}"
        )

    points = reproject(points, config.analysis_crs)
    log.info(f"Loaded {len(points)} point(s), reprojected to {crs_label(points.crs)}")

    return {
        "points": points,
        "crs": crs_label(points.crs),
        "feature_count": len(points),
    }


def _join_and_summarize(
    regions_info: Dict[str, Any],
    points_info: Dict[str, Any],
    log,
) -> Dict[str, Any]:
    """
    Join points to regions and compute population, area and density.

    Regions are brought back to the analysis CRS first, since display
    recipes may have left them in another CRS.

    Returns:
        Dict with config, summary (GeoDataFrame), schema, crs, bounds,
        feature_count, joined_count, unmatched_count

    Raises:
        CRSMismatchError: If the layers end up in different CRSs
    """
    config = RegionalPopulationConfig(**regions_info["config"])
    aggregation = config.aggregation

    regions = reproject(regions_info["regions"], config.analysis_crs)
    points = points_info["points"]

    joined = spatial_join(points, regions, config.join)
    # Only inner joins drop points outside every region
    unmatched = 0
    if config.join.how == "inner":
        unmatched = len(points) - joined.index.nunique()
    if unmatched:
        log.warning(f"{unmatched} point(s) fall outside every region")

    summary = summarize_by(joined, aggregation)
    result = attach_summary(regions, summary, key=config.region_column)
    result = add_area(result, column=AREA_COLUMN)
    result = add_density(
        result,
        value_column=aggregation.output_column,
        area_column=AREA_COLUMN,
        output_column=DENSITY_COLUMN,
    )

    schema = describe_columns(result)
    bounds = None if result.empty else Bounds.from_total_bounds(result.total_bounds)
    columns = ", ".join(f"{name}:{info['type_name']}" for name, info in schema.items())
    log.info(f"Summarized {len(joined)} joined point(s) into {len(result)} region(s)")
    log.info(f"Output columns: {columns}")

    return {
        "config": config.model_dump(),
        "summary": result,
        "schema": schema,
        "crs": crs_label(result.crs),
        "bounds": bounds.model_dump() if bounds is not None else None,
        "feature_count": len(result),
        "joined_count": len(joined),
        "unmatched_count": unmatched,
    }


def _export_regional_summary(summary_info: Dict[str, Any], log) -> Dict[str, Any]:
    """
    Write the regional summary (and an optional dissolved layer) as GeoPackage.

    Returns:
        Dict with summary_path and, when dissolving, dissolved_path

    Raises:
        KeyError: If the dissolve column is missing
    """
    config = RegionalPopulationConfig(**summary_info["config"])
    aggregation = config.aggregation
    output_dir = Path(config.output_dir)
    summary = summary_info["summary"]

    outputs = {"summary_path": str(write_vector(summary, output_dir / SUMMARY_FILENAME))}

    if config.dissolve_column:
        dissolved = dissolve_by(
            summary,
            config.dissolve_column,
            value_columns=[aggregation.output_column],
        )
        dissolved = add_area(dissolved, column=AREA_COLUMN)
        dissolved = add_density(
            dissolved,
            value_column=aggregation.output_column,
            area_column=AREA_COLUMN,
            output_column=DENSITY_COLUMN,
        )
        path = write_vector(dissolved, output_dir / f"{config.dissolve_column}_population.gpkg")
        outputs["dissolved_path"] = str(path)
        log.info(f"Dissolved {len(summary)} region(s) into {len(dissolved)} by '{config.dissolve_column}'")

    log.info(f"Exported regional summary to {output_dir}")
    return outputs


@op(
    ins={"workflow_config": In(dagster_type=dict)},
    out={"validated_config": Out(dagster_type=dict)},
)
def validate_regional_config(context: OpExecutionContext, workflow_config: dict) -> dict:
    """
    Validate the regional population run config.

    The config is supplied through run config, e.g.
    ``{"ops": {"validate_regional_config": {"inputs": {"workflow_config": {"value": {...}}}}}}``.
    """
    return _validate_regional_config(workflow_config=workflow_config, log=context.log)


@op(
    ins={"workflow_config": In(dagster_type=dict)},
    out={"regions_info": Out(dagster_type=dict)},
)
def load_regions(context: OpExecutionContext, workflow_config: dict) -> dict:
    """
    Read region polygons and apply the transformation recipe for the intent.

    Returns:
        Dict with config, regions, crs, feature_count
    """
    return _load_regions(workflow_config=workflow_config, log=context.log)


@op(
    ins={"workflow_config": In(dagster_type=dict)},
    out={"points_info": Out(dagster_type=dict)},
)
def load_population_points(context: OpExecutionContext, workflow_config: dict) -> dict:
    """
    Build population points from the CSV in the analysis CRS.

    Returns:
        Dict with points, crs, feature_count
    """
    return _load_population_points(workflow_config=workflow_config, log=context.log)


@op(
    ins={
        "regions_info": In(dagster_type=dict),
        "points_info": In(dagster_type=dict),
    },
    out={"summary_info": Out(dagster_type=dict)},
)
def join_and_summarize(context: OpExecutionContext, regions_info: dict, points_info: dict) -> dict:
    """
    Point-in-polygon join, population per region, area and density.

    Returns:
        Dict with config, summary, schema, crs, bounds and counts
    """
    return _join_and_summarize(
        regions_info=regions_info,
        points_info=points_info,
        log=context.log,
    )


@op(
    ins={"summary_info": In(dagster_type=dict)},
    out={"export_info": Out(dagster_type=dict)},
)
def export_regional_summary(context: OpExecutionContext, summary_info: dict) -> dict:
    """
    Write the regional summary to the output directory.

    Returns:
        Dict with the written paths
    """
    return _export_regional_summary(summary_info=summary_info, log=context.log)
