"""Dagster Jobs - Executable Workflows."""

from .regional_population_job import regional_population_job
from .repository_download_job import repository_download_job

__all__ = ["regional_population_job", "repository_download_job"]
