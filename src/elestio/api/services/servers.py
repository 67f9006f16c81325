"""
Services (servers) service for Elestio API.

Listing, inspecting, deploying and deleting services in a project.
"""

from __future__ import annotations

import asyncio
import re
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from elestio.api.config import (
    APP_ID,
    SERVICE_CREATE,
    SERVICE_DELETE,
    SERVICE_DETAILS,
    SERVICES_LIST,
)
from elestio.api.services._helpers import nested, require_project
from elestio.exceptions import (
    ActionNotAllowedError,
    APIError,
    ElestioError,
    ServiceNotFoundError,
    TemplateNotFoundError,
)
from elestio.logging import get_logger
from elestio.services.deployment import AsyncDeploymentPoller

if TYPE_CHECKING:
    from elestio.api.executor import RequestExecutor
    from elestio.api.services.catalog import CatalogService
    from elestio.config import SDKSettings
    from elestio.services.deployment._aio import StatusCallback
    from elestio.store import ConfigStore, CredentialStore

logger = get_logger(__name__)

_SERVER_NAME_RE = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def validate_server_name(name: str) -> None:
    """
    Check a server name: 1-63 lowercase letters, digits or hyphens,
    starting and ending with a letter or digit.

    Raises:
        ElestioError: Name is invalid.
    """
    if not _SERVER_NAME_RE.match(name):
        raise ElestioError(
            f'Invalid server name "{name}": use 1-63 lowercase letters, digits '
            "or hyphens, not starting or ending with a hyphen"
        )


def _base36(value: int) -> str:
    digits = ""
    while value:
        value, rem = divmod(value, 36)
        digits = _BASE36[rem] + digits
    return digits or "0"


def default_server_name(template_title: str) -> str:
    """Template title slug plus a base-36 timestamp suffix."""
    slug = re.sub(r"[^a-z0-9]", "-", template_title.lower())
    return f"{slug}-{_base36(int(time.time() * 1000))}"


def _services_from(response: Any) -> list[dict[str, Any]]:
    if not isinstance(response, dict):
        return []
    return response.get("servers") or nested(response, "data", "services") or []


class ServicesService:
    """
    High-level services wrapper.

    Example:
        >>> async with ElestioAPI() as api:
        ...     services = await api.services.list()
        ...     result = await api.services.deploy("postgres", size="MEDIUM-2C-4G")
    """

    def __init__(
        self,
        executor: RequestExecutor,
        catalog: CatalogService,
        config_store: ConfigStore,
        credential_store: CredentialStore,
        settings: SDKSettings,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._executor = executor
        self._catalog = catalog
        self._config_store = config_store
        self._credential_store = credential_store
        self._settings = settings
        self._clock = clock
        self._sleep = sleep

    async def list_raw(self, project_id: str | int | None = None) -> list[dict[str, Any]]:
        """Services of a project, without error checking."""
        pid = require_project(project_id, self._config_store)
        response = await self._executor.request(
            SERVICES_LIST,
            params={"appid": APP_ID, "projectId": pid, "isActiveService": "true"},
        )
        return _services_from(response)

    async def list(self, project_id: str | int | None = None) -> list[dict[str, Any]]:
        """
        Services of a project.

        Raises:
            APIError: Request refused (``KO`` or ``AccessDenied``).
        """
        pid = require_project(project_id, self._config_store)
        response = await self._executor.request(
            SERVICES_LIST,
            params={"appid": APP_ID, "projectId": pid, "isActiveService": "true"},
        )
        if isinstance(response, dict) and (
            response.get("status") == "KO" or response.get("code") == "AccessDenied"
        ):
            raise APIError(response.get("message") or "Access denied.", response=response)
        return _services_from(response)

    async def find(
        self,
        vm_id: str | int,
        project_id: str | int | None = None,
    ) -> dict[str, Any] | None:
        """Service with the given vmID from the project listing."""
        services = await self.list_raw(project_id)
        return next((s for s in services if str(s.get("vmID")) == str(vm_id)), None)

    async def get(
        self,
        vm_id: str | int,
        project_id: str | int | None = None,
    ) -> dict[str, Any]:
        """
        Detailed service record.

        Raises:
            ServiceNotFoundError: No details returned.
            APIError: The API reported an error.
        """
        pid = require_project(project_id, self._config_store)
        response = await self._executor.request(
            SERVICE_DETAILS,
            params={"vmID": str(vm_id), "projectID": pid},
        )
        if not isinstance(response, dict):
            raise ServiceNotFoundError(str(vm_id))

        infos = response.get("serviceInfos")
        if infos:
            return infos[0]
        if response.get("status") == "OK" and response.get("data"):
            return response["data"]
        if response.get("status") == "KO" or response.get("message"):
            raise APIError(
                response.get("message") or "Failed to get service details",
                response=response,
            )
        raise ServiceNotFoundError(str(vm_id))

    async def deploy(
        self,
        template: str | int,
        project_id: str | int | None = None,
        name: str | None = None,
        size: str | None = None,
        region: str | None = None,
        provider: str | None = None,
        support: str | None = None,
        admin_email: str | None = None,
        version: str | None = None,
        pipeline_name: str | None = None,
        dry_run: bool = False,
        wait: bool = True,
        timeout: float | None = None,
        on_status: StatusCallback | None = None,
    ) -> dict[str, Any]:
        """
        Deploy a service from a catalog template.

        Unset options fall back to the local defaults (provider, datacenter,
        server type, support level).

        Args:
            template: Template id, alias or title.
            dry_run: Return the resolved payload without deploying.
            wait: Poll until the deployment completes.
            timeout: Seconds to wait when ``wait`` is set.
            on_status: Callback for deployment status changes.

        Returns:
            Preview (dry run), creation response (no wait), or the deployed
            service record.
        """
        found = await self._catalog.find_template(template)
        if not found:
            raise TemplateNotFoundError(str(template))

        pid = require_project(project_id, self._config_store)
        defaults = self._config_store.load().defaults
        credential = self._credential_store.load()

        title = found.get("title") or str(template)
        server_name = name or default_server_name(title)
        validate_server_name(server_name)

        is_cicd = "ci-cd" in title.lower() or str(template).lower() == "cicd"
        preview = {
            "template": title,
            "templateId": found.get("id"),
            "version": version or found.get("dockerhub_default_tag") or "latest",
            "projectId": pid,
            "serverName": server_name,
            "provider": provider or defaults.provider,
            "datacenter": region or defaults.datacenter,
            "serverType": size or defaults.server_type,
            "support": support or defaults.support,
            "adminEmail": admin_email or (credential.identity if credential else None),
            "serviceType": "CICD" if is_cicd else "Service",
        }

        if dry_run:
            return {"dryRun": True, **preview}

        logger.info(f"Deploying {title} (ID: {found.get('id')})")
        logger.info(f"  Project: {pid} | Name: {server_name}")
        logger.info(
            f"  Provider: {preview['provider']} | Size: {preview['serverType']} "
            f"@ {preview['datacenter']}"
        )

        payload: dict[str, Any] = {
            "templateID": str(found.get("id")),
            "serverType": preview["serverType"],
            "datacenter": preview["datacenter"],
            "providerName": preview["provider"],
            "serverName": server_name,
            "appid": APP_ID,
            "data": "data",
            "support": preview["support"],
            "projectId": pid,
            "version": preview["version"],
            "adminEmail": preview["adminEmail"],
            "deploymentServiceType": "normal",
            "serviceType": preview["serviceType"],
        }
        if is_cicd:
            payload["cicdPayload"] = {"pipelineName": pipeline_name or server_name}

        response = await self._executor.request(SERVICE_CREATE, params=payload)
        if not isinstance(response, dict) or (
            not response.get("providerServerID") and not response.get("action")
        ):
            message = response.get("message") if isinstance(response, dict) else None
            raise APIError(message or "Failed to create service", response=response)

        logger.info(f"Deployment started! Provider Server ID: {response.get('providerServerID')}")

        if not wait:
            return response
        if not response.get("providerServerID"):
            logger.warning("Cannot wait for deployment: no providerServerID in response")
            return response

        return await self.wait_for_deployment(
            response["providerServerID"],
            project_id=pid,
            timeout=timeout,
            on_status=on_status,
        )

    async def wait_for_deployment(
        self,
        vm_id: str | int,
        project_id: str | int | None = None,
        timeout: float | None = None,
        on_status: StatusCallback | None = None,
    ) -> dict[str, Any]:
        """
        Block until the service is deployed and running.

        Raises:
            DeploymentTimeoutError: Not complete within ``timeout`` seconds.
        """
        pid = require_project(project_id, self._config_store)
        poller = AsyncDeploymentPoller(
            lambda: self.list_raw(pid),
            poll_interval=self._settings.deploy_poll_interval,
            not_found_interval=self._settings.deploy_not_found_interval,
            clock=self._clock,
            sleep=self._sleep,
            on_status=on_status,
        )
        return await poller.wait_for(
            vm_id,
            timeout=timeout if timeout is not None else self._settings.deploy_timeout,
        )

    async def delete(
        self,
        vm_id: str | int,
        project_id: str | int | None = None,
        force: bool = False,
        with_backups: bool = False,
    ) -> dict[str, Any]:
        """
        Delete a service.

        Raises:
            ActionNotAllowedError: ``force`` not set.
            APIError: Deletion refused.
        """
        if not force:
            raise ActionNotAllowedError("Deleting a service requires --force flag")

        pid = require_project(project_id, self._config_store)
        response = await self._executor.request(
            SERVICE_DELETE,
            params={
                "vmID": str(vm_id),
                "projectID": pid,
                "isDeleteServiceWithBackup": "true" if with_backups else "false",
            },
        )
        if not isinstance(response, dict) or (
            response.get("status") != "OK" and not response.get("action")
        ):
            message = response.get("message") if isinstance(response, dict) else None
            raise APIError(message or "Failed to delete service", response=response)

        logger.info(f"Service {vm_id} deletion initiated")
        return response
