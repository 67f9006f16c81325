"""
Elestio API Client.

Usage:
    >>> from elestio.api import ElestioAPI
    >>>
    >>> async with ElestioAPI() as api:
    ...     projects = await api.projects.list()
    ...     service = await api.services.wait_for_deployment("12345")
"""

from __future__ import annotations

# Main unified client
from elestio.api.client import ElestioAPI

# Configuration
from elestio.api.config import BASE_URL, get_base_url

# Core pipeline
from elestio.api.executor import RequestExecutor
from elestio.api.session import SessionManager
from elestio.api.signals import DEFAULT_AUTH_FAILURE_SIGNALS, is_auth_failure

# Services (high-level wrappers)
from elestio.api.services import (
    ActionsService,
    BackupsService,
    CatalogService,
    PipelinesService,
    ProjectsService,
    ServicesService,
    VolumesService,
)

__all__ = [
    # Main client
    "ElestioAPI",
    # Config
    "BASE_URL",
    "get_base_url",
    # Core pipeline
    "RequestExecutor",
    "SessionManager",
    "DEFAULT_AUTH_FAILURE_SIGNALS",
    "is_auth_failure",
    # Services
    "ActionsService",
    "BackupsService",
    "CatalogService",
    "PipelinesService",
    "ProjectsService",
    "ServicesService",
    "VolumesService",
]
