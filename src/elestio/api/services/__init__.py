"""
Elestio API Services.

High-level wrappers over the request executor.
"""

from __future__ import annotations

from elestio.api.services.actions import ActionsService
from elestio.api.services.backups import BackupsService
from elestio.api.services.catalog import CatalogService
from elestio.api.services.pipelines import PipelinesService
from elestio.api.services.projects import ProjectsService
from elestio.api.services.servers import ServicesService
from elestio.api.services.volumes import VolumesService

__all__ = [
    "ActionsService",
    "BackupsService",
    "CatalogService",
    "PipelinesService",
    "ProjectsService",
    "ServicesService",
    "VolumesService",
]
