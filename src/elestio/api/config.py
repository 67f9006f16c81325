"""
Elestio API configuration.

Base URL and endpoint paths used by the client.
"""

from __future__ import annotations

BASE_URL = "https://api.elest.io"

# Authentication
AUTH_ENDPOINT = "/api/auth/checkAPIToken"

# Projects
PROJECTS_LIST = "/api/projects/getList"

# Servers
SERVICES_LIST = "/api/servers/getServices"
SERVICE_DETAILS = "/api/servers/getServerDetails"
SERVICE_CREATE = "/api/servers/createServer"
SERVICE_DELETE = "/api/servers/deleteServer"
SERVICE_ACTION = "/api/servers/DoActionOnServer"

# Public catalog
TEMPLATES_LIST = "/api/servers/getTemplates"
SIZES_LIST = "/api/servers/getServerSizes"

# Volumes
VOLUMES_LIST = "/api/volumes/getVolumes"
VOLUME_CREATE = "/api/volumes/createVolume"

# Backups
TEMPLATE_ACTION = "/api/servers/templateAction"
BACKUPS_LIST = "/api/backups/GetBackupList"
BACKUP_START = "/api/backups/StartManualBackup"
BACKUP_RESTORE = "/api/backups/RestoreBackup"
BACKUP_AUTO_SETUP = "/api/backups/SetupAutoBackups"
BACKUP_AUTO_DISABLE = "/api/backups/DisableAutoBackups"

# CI/CD
CICD_SERVICES = "/api/cicd/getCICDServices"
CICD_PIPELINES = "/api/cicd/getServicePipelines"
CICD_PIPELINE_DETAILS = "/api/cicd/getPipelineDetails"
CICD_PIPELINE_ACTION = "/api/cicd/doActionOnPipeline"
CICD_PIPELINE_LOG = "/api/cicd/viewPipelineLog"
CICD_CREATE = "/api/cicd/createCiCdExistServer"
CICD_REGISTRIES = "/api/cicd/getDockerRegistry"
CICD_REGISTRY_ADD = "/api/cicd/addDockerRegistry"

# Application id expected by the servers endpoints
APP_ID = "Cloudxx"


def get_base_url(base_url: str | None = None) -> str:
    """
    Normalize the API base URL.

    Args:
        base_url: Custom base URL, or None for the default.

    Returns:
        Base URL without trailing slash.

    Example:
        >>> get_base_url()
        'https://api.elest.io'
        >>> get_base_url("http://localhost:8000/")
        'http://localhost:8000'
    """
    return (base_url or BASE_URL).rstrip("/")


__all__ = [
    "BASE_URL",
    "AUTH_ENDPOINT",
    "PROJECTS_LIST",
    "SERVICES_LIST",
    "SERVICE_DETAILS",
    "SERVICE_CREATE",
    "SERVICE_DELETE",
    "SERVICE_ACTION",
    "TEMPLATES_LIST",
    "SIZES_LIST",
    "VOLUMES_LIST",
    "VOLUME_CREATE",
    "TEMPLATE_ACTION",
    "BACKUPS_LIST",
    "BACKUP_START",
    "BACKUP_RESTORE",
    "BACKUP_AUTO_SETUP",
    "BACKUP_AUTO_DISABLE",
    "CICD_SERVICES",
    "CICD_PIPELINES",
    "CICD_PIPELINE_DETAILS",
    "CICD_PIPELINE_ACTION",
    "CICD_PIPELINE_LOG",
    "CICD_CREATE",
    "CICD_REGISTRIES",
    "CICD_REGISTRY_ADD",
    "APP_ID",
    "get_base_url",
]
