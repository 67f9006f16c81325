"""
Server actions service for Elestio API.

Power management, termination protection and resizing all go through the
``DoActionOnServer`` endpoint.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from elestio.api.config import SERVICE_ACTION
from elestio.exceptions import ActionNotAllowedError, APIError, ElestioError
from elestio.logging import get_logger

if TYPE_CHECKING:
    from elestio.api.executor import RequestExecutor
    from elestio.api.services.servers import ServicesService
    from elestio.services.sizing import SizeResolver

logger = get_logger(__name__)

MANAGED_DB_TEMPLATES = [
    "postgresql",
    "mysql",
    "mariadb",
    "mongodb",
    "redis",
    "memcached",
    "keydb",
    "clickhouse",
    "couchdb",
    "elasticsearch",
    "opensearch",
    "meilisearch",
    "typesense",
    "ferretdb",
]

# CLI name -> API action
POWER_ACTIONS = {
    "reboot": "reboot",
    "reset": "reset",
    "shutdown": "shutdown",
    "poweroff": "powerOff",
    "poweron": "powerOn",
    "restart-stack": "restartAppStack",
    "lock": "lock",
    "unlock": "unlock",
}


class ActionsService:
    """
    Server actions.

    Example:
        >>> async with ElestioAPI() as api:
        ...     await api.actions.reboot(12345)
        ...     await api.actions.resize(12345, "LARGE")
    """

    def __init__(
        self,
        executor: RequestExecutor,
        services: ServicesService,
        resolver: SizeResolver,
    ) -> None:
        self._executor = executor
        self._services = services
        self._resolver = resolver

    async def do_action(self, vm_id: str | int, action: str, **params: Any) -> dict[str, Any]:
        """
        Run an action on a VM.

        Raises:
            APIError: The API answered ``KO`` or ``error``.
        """
        response = await self._executor.request(
            SERVICE_ACTION,
            params={"vmID": str(vm_id), "action": action, **params},
        )
        if isinstance(response, list):
            return {"data": response, "status": "OK"}
        if not isinstance(response, dict):
            raise APIError(f'Action "{action}" failed', response=response)
        if response.get("status") in ("KO", "error"):
            raise APIError(response.get("message") or f'Action "{action}" failed', response=response)
        return response

    async def run(self, vm_id: str | int, name: str, project_id: str | int | None = None) -> dict[str, Any]:
        """Run a power action by its CLI name (see ``POWER_ACTIONS``)."""
        if name not in POWER_ACTIONS:
            raise ElestioError(
                f'Unknown action "{name}". Available: {", ".join(POWER_ACTIONS)}'
            )
        if name == "shutdown":
            return await self.shutdown(vm_id, project_id=project_id)
        return await self.do_action(vm_id, POWER_ACTIONS[name])

    async def reboot(self, vm_id: str | int) -> dict[str, Any]:
        return await self.do_action(vm_id, "reboot")

    async def reset(self, vm_id: str | int) -> dict[str, Any]:
        return await self.do_action(vm_id, "reset")

    async def shutdown(self, vm_id: str | int, project_id: str | int | None = None) -> dict[str, Any]:
        """
        Graceful shutdown; refused for managed databases.

        Raises:
            ActionNotAllowedError: The service runs a managed database.
        """
        try:
            service = await self._services.get(vm_id, project_id)
        except ElestioError as e:
            logger.debug(f"Could not inspect {vm_id} before shutdown: {e}")
        else:
            label = service.get("templateName") or service.get("displayName") or ""
            if any(db in label.lower() for db in MANAGED_DB_TEMPLATES):
                raise ActionNotAllowedError(
                    f'Cannot shutdown managed database "{label}". Use "reboot" instead.'
                )
        return await self.do_action(vm_id, "shutdown")

    async def power_off(self, vm_id: str | int) -> dict[str, Any]:
        return await self.do_action(vm_id, "powerOff")

    async def power_on(self, vm_id: str | int) -> dict[str, Any]:
        return await self.do_action(vm_id, "powerOn")

    async def restart_stack(self, vm_id: str | int) -> dict[str, Any]:
        return await self.do_action(vm_id, "restartAppStack")

    async def lock(self, vm_id: str | int) -> dict[str, Any]:
        return await self.do_action(vm_id, "lock")

    async def unlock(self, vm_id: str | int) -> dict[str, Any]:
        return await self.do_action(vm_id, "unlock")

    async def resize(
        self,
        vm_id: str | int,
        size: str,
        project_id: str | int | None = None,
        provider: str | None = None,
        region: str | None = None,
        cpu_ram_only: bool = True,
    ) -> dict[str, Any] | None:
        """
        Resize a VM to another plan.

        The requested size is resolved against the catalog of the service's
        provider and region.

        Args:
            vm_id: Service vmID.
            size: Full or partial size title, e.g. "LARGE-4C-8G" or "LARGE".
            project_id: Project of the service.
            provider: Used when the service record lacks one.
            region: Used when the service record lacks one.
            cpu_ram_only: Keep the disk size unchanged.

        Returns:
            Action response, or None when the service already has that size.

        Raises:
            SizeNotAvailableError: Size unknown for the provider/region.
            AmbiguousSizeError: Size prefix matches several plans.
            UnsupportedDowngradeError: Provider cannot downgrade.
        """
        if not size:
            raise ElestioError("New server type required (e.g., LARGE-4C-8G)")

        service = await self._services.get(vm_id, project_id)
        provider_name = service.get("provider") or service.get("providerName") or provider or "netcup"
        datacenter = service.get("datacenter") or region or "nbg"
        current = service.get("serverType") or "unknown"

        resolved = await self._resolver.resolve_size(size, provider_name, datacenter, current)

        if resolved.title == current:
            logger.warning(f"Service is already {current}")
            return None

        logger.info(f"Resizing VM {vm_id}: {current} -> {resolved.title}...")
        return await self.do_action(
            vm_id,
            "changeType",
            newType=resolved.title,
            region=datacenter,
            providerName=provider_name,
            upgradeCPURAMOnly=cpu_ram_only,
        )
