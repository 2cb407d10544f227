# =============================================================================
# Recipe Registry
# =============================================================================
# Intent-based recipe lookup for transformation steps.
# =============================================================================

import logging
from typing import List, Optional, Union

import geopandas as gpd

from .base import VectorStep
from .vector import (
    CreateSpatialIndexStep,
    MakeValidStep,
    NormalizeCRSStep,
    SimplifyGeometryStep,
)

__all__ = ["RecipeRegistry", "apply_recipe"]

logger = logging.getLogger(__name__)


class RecipeRegistry:
    """
    Registry for transformation recipes by intent.

    Maps a workflow intent to a list of transformation steps.
    Unknown intents fall back to the equal-area analysis recipe.
    """

    DEFAULT_INTENT = "equal_area_analysis"

    @staticmethod
    def get_vector_recipe(
        intent: str,
        analysis_crs: Union[int, str] = 3338,
    ) -> List[VectorStep]:
        """
        Get vector transformation recipe for given intent.

        Returns a list of step instances that will be executed in order.
        Steps are instantiated fresh each time (no shared state).

        Args:
            intent: Workflow intent (e.g., "equal_area_analysis", "web_display")
            analysis_crs: Equal-area CRS for analysis recipes (default: Alaska Albers)

        Returns:
            List of VectorStep instances to execute
        """
        # Repair before reprojecting; area and containment need valid polygons
        equal_area_recipe = [
            MakeValidStep(),
            NormalizeCRSStep(target_crs=analysis_crs),
            CreateSpatialIndexStep(),
        ]

        # Leaflet tiles expect WGS 84; 0.001 degrees is roughly 100 m
        web_display_recipe = [
            NormalizeCRSStep(target_crs=4326),
            SimplifyGeometryStep(tolerance=0.001),
            CreateSpatialIndexStep(),
        ]

        # Tolerance in metres of the analysis CRS
        static_display_recipe = [
            NormalizeCRSStep(target_crs=analysis_crs),
            SimplifyGeometryStep(tolerance=1000.0),
        ]

        recipes = {
            "equal_area_analysis": equal_area_recipe,
            "web_display": web_display_recipe,
            "static_display": static_display_recipe,
        }

        if intent not in recipes:
            logger.warning(
                f"Unknown recipe intent '{intent}', using '{RecipeRegistry.DEFAULT_INTENT}'"
            )
        return recipes.get(intent, equal_area_recipe)


def apply_recipe(
    gdf: gpd.GeoDataFrame,
    steps: List[VectorStep],
    log: Optional[logging.Logger] = None,
) -> gpd.GeoDataFrame:
    """
    Run steps in order, each on the previous step's output.

    Args:
        gdf: Input layer
        steps: Steps from RecipeRegistry (or hand-built)
        log: Logger to report progress on (default: module logger)

    Returns:
        Output of the last step (the input itself when ``steps`` is empty)
    """
    log = log or logger
    for i, step in enumerate(steps, start=1):
        log.info(f"Step {i}/{len(steps)}: {step.describe()}")
        gdf = step.apply(gdf)
    return gdf
