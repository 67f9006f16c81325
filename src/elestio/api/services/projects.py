"""
Projects service for Elestio API.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from elestio.api.config import PROJECTS_LIST
from elestio.api.services._helpers import ensure_ok, nested
from elestio.exceptions import ConfigurationError
from elestio.logging import get_logger

if TYPE_CHECKING:
    from elestio.api.executor import RequestExecutor
    from elestio.store import ConfigStore

logger = get_logger(__name__)


class ProjectsService:
    """
    High-level projects service.

    Example:
        >>> async with ElestioAPI() as api:
        ...     projects = await api.projects.list()
    """

    def __init__(self, executor: RequestExecutor, config_store: ConfigStore) -> None:
        self._executor = executor
        self._config_store = config_store

    async def list(self) -> list[dict[str, Any]]:
        """
        List projects of the account.

        Raises:
            APIError: The API did not answer ``status: OK``.
        """
        response = ensure_ok(
            await self._executor.request(PROJECTS_LIST),
            "Failed to list projects",
        )
        return nested(response, "data", "projects") or []

    async def default_project(self) -> str:
        """
        Configured default project, else the first project of the account.

        The first project is saved as default when picked.
        """
        config = self._config_store.load()
        if config.default_project:
            return config.default_project

        projects = await self.list()
        if not projects:
            raise ConfigurationError("No projects found. Create a project first.")

        first = projects[0]
        config.default_project = str(first.get("projectID"))
        self._config_store.save(config)
        logger.info(
            f'Using project "{first.get("project_name")}" ({config.default_project}) as default'
        )
        return config.default_project
