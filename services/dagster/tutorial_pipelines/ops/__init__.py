"""Dagster Ops - Reusable Computation Units."""

from .spatial_ops import (
    validate_regional_config,
    load_regions,
    load_population_points,
    join_and_summarize,
    export_regional_summary,
)
from .render_ops import render_regional_maps
from .repository_ops import search_repository, download_search_results

__all__ = [
    "validate_regional_config",
    "load_regions",
    "load_population_points",
    "join_and_summarize",
    "export_regional_summary",
    "render_regional_maps",
    "search_repository",
    "download_search_results",
]
