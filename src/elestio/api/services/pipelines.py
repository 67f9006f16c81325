"""
CI/CD pipelines service for Elestio API.

Pipelines run on CI/CD target services; every call is scoped to a project
and the target's vmID.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from elestio.api.config import (
    CICD_CREATE,
    CICD_PIPELINE_ACTION,
    CICD_PIPELINE_DETAILS,
    CICD_PIPELINE_LOG,
    CICD_PIPELINES,
    CICD_REGISTRIES,
    CICD_REGISTRY_ADD,
    CICD_SERVICES,
)
from elestio.api.services._helpers import ensure_ok, nested, require_project
from elestio.exceptions import APIError, ElestioError
from elestio.logging import get_logger
from elestio.models.request import HttpMethod

if TYPE_CHECKING:
    from elestio.api.executor import RequestExecutor
    from elestio.store import ConfigStore

logger = get_logger(__name__)


class PipelinesService:
    """
    CI/CD targets, pipelines and Docker registries.

    Example:
        >>> async with ElestioAPI() as api:
        ...     pipelines = await api.pipelines.list(12345)
        ...     await api.pipelines.restart(12345, pipelines[0]["id"])
    """

    def __init__(self, executor: RequestExecutor, config_store: ConfigStore) -> None:
        self._executor = executor
        self._config_store = config_store

    async def targets(self, project_id: str | int | None = None) -> list[dict[str, Any]]:
        """
        CI/CD target services of a project.

        Raises:
            APIError: The API answered ``KO``.
        """
        pid = require_project(project_id, self._config_store)
        response = await self._executor.request(CICD_SERVICES, params={"projectID": pid})
        if isinstance(response, list):
            return response
        if isinstance(response, dict) and response.get("status") == "KO":
            raise APIError(response.get("message") or "Failed to list CI/CD targets", response=response)
        return nested(response, "data", "services") or []

    async def list(
        self, vm_id: str | int, project_id: str | int | None = None
    ) -> list[dict[str, Any]]:
        """Pipelines running on a CI/CD target."""
        pid = require_project(project_id, self._config_store)
        response = ensure_ok(
            await self._executor.request(
                CICD_PIPELINES, params={"projectID": pid, "vmID": str(vm_id)}
            ),
            "Failed to list pipelines",
        )
        data = response.get("data")
        if isinstance(data, list):
            return data
        return nested(data, "pipelines") or []

    async def get(
        self,
        vm_id: str | int,
        pipeline_id: str | int,
        project_id: str | int | None = None,
    ) -> dict[str, Any]:
        pid = require_project(project_id, self._config_store)
        response = ensure_ok(
            await self._executor.request(
                CICD_PIPELINE_DETAILS,
                params={"vmID": str(vm_id), "projectID": pid, "pipelineID": int(pipeline_id)},
            ),
            "Failed to get pipeline details",
        )
        return response.get("data") or {}

    async def do_action(
        self,
        vm_id: str | int,
        pipeline_id: str | int,
        action: str,
        project_id: str | int | None = None,
        **params: Any,
    ) -> dict[str, Any]:
        """
        Run an action on a pipeline.

        Raises:
            APIError: Neither ``status: OK`` nor an ``action`` came back.
        """
        pid = require_project(project_id, self._config_store)
        response = await self._executor.request(
            CICD_PIPELINE_ACTION,
            params={
                "vmID": str(vm_id),
                "projectID": pid,
                "pipelineID": int(pipeline_id),
                "action": action,
                **params,
            },
        )
        if not isinstance(response, dict) or (
            response.get("status") != "OK" and not response.get("action")
        ):
            message = response.get("message") if isinstance(response, dict) else None
            raise APIError(message or f'Action "{action}" failed', response=response)
        return response

    async def restart(
        self, vm_id: str | int, pipeline_id: str | int, project_id: str | int | None = None
    ) -> dict[str, Any]:
        return await self.do_action(vm_id, pipeline_id, "restartAppStack", project_id)

    async def stop(
        self, vm_id: str | int, pipeline_id: str | int, project_id: str | int | None = None
    ) -> dict[str, Any]:
        return await self.do_action(vm_id, pipeline_id, "stopAppStack", project_id)

    async def resync(
        self, vm_id: str | int, pipeline_id: str | int, project_id: str | int | None = None
    ) -> dict[str, Any]:
        return await self.do_action(vm_id, pipeline_id, "reSyncPipeline", project_id)

    async def delete(
        self,
        vm_id: str | int,
        pipeline_id: str | int,
        project_id: str | int | None = None,
        force: bool = False,
    ) -> dict[str, Any]:
        """
        Delete a pipeline.

        Raises:
            ElestioError: ``force`` not set.
        """
        if not force:
            raise ElestioError("Requires --force flag")
        logger.warning(f"Deleting pipeline {pipeline_id} on {vm_id}...")
        return await self.do_action(vm_id, pipeline_id, "deletePipeline", project_id)

    async def logs(
        self, vm_id: str | int, pipeline_id: str | int, project_id: str | int | None = None
    ) -> str:
        """Output of the running pipeline."""
        result = await self.do_action(vm_id, pipeline_id, "pipelineRunningLogs", project_id)
        return result.get("logs") or ""

    async def history(
        self, vm_id: str | int, pipeline_id: str | int, project_id: str | int | None = None
    ) -> list[dict[str, Any]]:
        result = await self.do_action(vm_id, pipeline_id, "getHistory", project_id)
        return nested(result, "data", "history") or result.get("history") or []

    async def view_log(
        self,
        vm_id: str | int,
        pipeline_id: str | int,
        filepath: str,
        project_id: str | int | None = None,
    ) -> str:
        """Content of one build log from :meth:`history`."""
        pid = require_project(project_id, self._config_store)
        response = ensure_ok(
            await self._executor.request(
                CICD_PIPELINE_LOG,
                params={
                    "vmID": str(vm_id),
                    "projectID": pid,
                    "pipelineID": int(pipeline_id),
                    "filepath": filepath,
                },
            ),
            "Failed to read pipeline log",
        )
        return nested(response, "data", "content") or response.get("content") or ""

    async def domains(
        self, vm_id: str | int, pipeline_id: str | int, project_id: str | int | None = None
    ) -> list[str]:
        result = await self.do_action(vm_id, pipeline_id, "SSLDomainsList", project_id)
        return nested(result, "data", "domains") or result.get("domains") or []

    async def add_domain(
        self,
        vm_id: str | int,
        pipeline_id: str | int,
        domain: str,
        project_id: str | int | None = None,
    ) -> dict[str, Any]:
        logger.info(f"Adding domain {domain}...")
        return await self.do_action(vm_id, pipeline_id, "SSLDomainsAdd", project_id, domain=domain)

    async def remove_domain(
        self,
        vm_id: str | int,
        pipeline_id: str | int,
        domain: str,
        project_id: str | int | None = None,
    ) -> dict[str, Any]:
        logger.info(f"Removing domain {domain}...")
        return await self.do_action(vm_id, pipeline_id, "SSLDomainsRemove", project_id, domain=domain)

    async def create(self, pipeline_config: dict[str, Any]) -> dict[str, Any]:
        """
        Create a pipeline from a full pipeline definition.

        Raises:
            APIError: Neither ``status: OK`` nor a ``providerServerID`` came back.
        """
        response = await self._executor.request(CICD_CREATE, params=pipeline_config)
        if not isinstance(response, dict) or (
            response.get("status") != "OK" and not response.get("providerServerID")
        ):
            message = response.get("message") if isinstance(response, dict) else None
            raise APIError(message or "Failed to create pipeline", response=response)
        return response

    async def registries(self, project_id: str | int | None = None) -> list[dict[str, Any]]:
        """Docker registries known to the project."""
        pid = require_project(project_id, self._config_store)
        response = ensure_ok(
            await self._executor.request(
                CICD_REGISTRIES, method=HttpMethod.GET, params={"projectID": pid}
            ),
            "Failed to list Docker registries",
        )
        return nested(response, "data", "registries") or []

    async def add_registry(
        self,
        name: str,
        username: str,
        password: str,
        url: str,
        project_id: str | int | None = None,
    ) -> dict[str, Any]:
        pid = require_project(project_id, self._config_store)
        return ensure_ok(
            await self._executor.request(
                CICD_REGISTRY_ADD,
                params={
                    "projectID": pid,
                    "identityName": name,
                    "username": username,
                    "password": password,
                    "url": url,
                },
            ),
            "Failed to add Docker registry",
        )
