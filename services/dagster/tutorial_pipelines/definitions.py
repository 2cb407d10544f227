"""Dagster Definitions - Repository Configuration.

Defines jobs and resources for the tutorial workflows.
"""

from dagster import Definitions

from geotutor.models import RepositorySettings

from .jobs import regional_population_job, repository_download_job
from .resources import RepositoryResource


# =============================================================================
# Definitions
# =============================================================================

defs = Definitions(
    jobs=[
        regional_population_job,
        repository_download_job,
    ],
    resources={
        # REPOSITORY_* variables are optional; unset ones fall back to defaults
        "repository": RepositoryResource.from_settings(RepositorySettings()),
    },
    schedules=[],
    sensors=[],
)
