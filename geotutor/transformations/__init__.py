# =============================================================================
# Transformations Library
# =============================================================================
# Recipe-based transformation architecture for GeoDataFrames.
# =============================================================================

"""
Transformations library for the tutorial workflows.

This library provides:
- TransformStep: Base class for all transformation steps
- VectorStep: Base class for vector transformation steps
- Vector transformation steps: NormalizeCRSStep, SimplifyGeometryStep,
  MakeValidStep, CreateSpatialIndexStep
- RecipeRegistry: Intent-based recipe lookup
- apply_recipe: Run a list of steps in order
"""

from .base import TransformStep, VectorStep
from .vector import (
    NormalizeCRSStep,
    SimplifyGeometryStep,
    MakeValidStep,
    CreateSpatialIndexStep,
)
from .registry import RecipeRegistry, apply_recipe

__all__ = [
    "TransformStep",
    "VectorStep",
    "NormalizeCRSStep",
    "SimplifyGeometryStep",
    "MakeValidStep",
    "CreateSpatialIndexStep",
    "RecipeRegistry",
    "apply_recipe",
]
