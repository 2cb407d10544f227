# =============================================================================
# Base Classes for Transformation Steps
# =============================================================================
# Abstract base classes for all transformation steps.
# =============================================================================

from abc import ABC, abstractmethod

import geopandas as gpd

__all__ = ["TransformStep", "VectorStep"]


class TransformStep(ABC):
    """
    Base class for all transformation steps.

    All transformation steps must implement the `apply` method, which takes
    a GeoDataFrame and returns a new (or the same, for side-effect-only
    steps) GeoDataFrame. Steps never mutate their input.
    """

    @abstractmethod
    def apply(self, gdf: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
        """
        Apply this transformation step.

        Args:
            gdf: Input layer

        Returns:
            Transformed layer
        """
        pass

    def describe(self) -> str:
        """One-line description used in log messages."""
        params = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({params})"


class VectorStep(TransformStep):
    """
    Base class for vector transformation steps.

    Marker class for type hints and future extensibility.
    No additional methods beyond TransformStep interface.
    """
    pass
