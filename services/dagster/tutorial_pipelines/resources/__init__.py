"""Dagster Resources - External Service Connections."""

from .repository_resource import RepositoryResource

__all__ = [
    "RepositoryResource",
]
