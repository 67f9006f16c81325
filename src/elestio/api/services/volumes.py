"""
Block storage volumes service for Elestio API.

Project volumes have their own endpoints; volumes attached to a service are
managed through ``DoActionOnServer``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from elestio.api.config import VOLUME_CREATE, VOLUMES_LIST
from elestio.api.services._helpers import ensure_ok, nested, require_project
from elestio.exceptions import APIError, ElestioError
from elestio.logging import get_logger

if TYPE_CHECKING:
    from elestio.api.executor import RequestExecutor
    from elestio.api.services.actions import ActionsService
    from elestio.store import ConfigStore

logger = get_logger(__name__)

MIN_VOLUME_SIZE_GB = 10
DEFAULT_STORAGE_TYPE = "NVME"
# Monthly price per GB sent along with a creation request
PRICE_PER_GB = 0.05


class VolumesService:
    """
    Block storage volumes.

    Example:
        >>> async with ElestioAPI() as api:
        ...     volumes = await api.volumes.list()
        ...     await api.volumes.create_attached(12345, "data", size=20)
    """

    def __init__(
        self,
        executor: RequestExecutor,
        actions: ActionsService,
        config_store: ConfigStore,
    ) -> None:
        self._executor = executor
        self._actions = actions
        self._config_store = config_store

    async def list(self, project_id: str | int | None = None) -> list[dict[str, Any]]:
        """
        List volumes of a project.

        Raises:
            ConfigurationError: No project given and no default set.
            APIError: The API did not answer ``status: OK``.
        """
        pid = require_project(project_id, self._config_store)
        response = ensure_ok(
            await self._executor.request(VOLUMES_LIST, params={"projectID": pid}),
            "Failed to list volumes",
        )
        return nested(response, "data", "volumes") or []

    async def create(
        self,
        name: str,
        size: int = MIN_VOLUME_SIZE_GB,
        project_id: str | int | None = None,
        provider: str | None = None,
        datacenter: str | None = None,
        storage_type: str = DEFAULT_STORAGE_TYPE,
        server_id: str | int | None = None,
    ) -> dict[str, Any]:
        """
        Create a project volume, optionally attached to a server.

        Provider and datacenter fall back to the configured deploy defaults.

        Raises:
            ElestioError: Missing volume name.
            APIError: Creation refused.
        """
        if not name:
            raise ElestioError("Volume name required")
        pid = require_project(project_id, self._config_store)
        defaults = self._config_store.load().defaults

        payload: dict[str, Any] = {
            "projectID": pid,
            "providerName": provider or defaults.provider,
            "datacenter": datacenter or defaults.datacenter,
            "volumeName": name,
            "price": f"{size * PRICE_PER_GB:.2f}",
            "isMoveData": False,
            "volume": size,
            "blockStorageType": storage_type,
        }
        if server_id:
            payload["selectedServerID"] = str(server_id)

        logger.info(f'Creating volume "{name}" ({size}GB)...')
        response = await self._executor.request(VOLUME_CREATE, params=payload)
        if not isinstance(response, dict) or (
            response.get("status") != "OK" and not response.get("volumeID")
        ):
            message = response.get("message") if isinstance(response, dict) else None
            raise APIError(message or "Failed to create volume", response=response)
        return response

    async def for_service(self, vm_id: str | int) -> list[dict[str, Any]]:
        """Volumes attached to a service."""
        result = await self._actions.do_action(vm_id, "getServiceVolume")
        data = result.get("data")
        if isinstance(data, list):
            return data
        return nested(data, "volumes") or result.get("volumes") or []

    async def create_attached(
        self,
        vm_id: str | int,
        name: str,
        size: int = MIN_VOLUME_SIZE_GB,
        storage_type: str = DEFAULT_STORAGE_TYPE,
    ) -> dict[str, Any]:
        """Create a volume and attach it to a service."""
        if not name:
            raise ElestioError("Volume name required")
        return await self._actions.do_action(
            vm_id,
            "createServiceVolume",
            volumeName=name,
            volume=size,
            blockStorageType=storage_type,
            isMoveData=False,
        )

    async def resize(self, vm_id: str | int, volume_id: str | int, size: int) -> dict[str, Any]:
        """
        Grow a service volume.

        Raises:
            ElestioError: Size below the 10GB minimum.
        """
        if not size or size < MIN_VOLUME_SIZE_GB:
            raise ElestioError(f"New size must be at least {MIN_VOLUME_SIZE_GB}GB")
        return await self._actions.do_action(
            vm_id,
            "resizeServiceVolume",
            volumeID=str(volume_id),
            volume=size,
            volumeName="",
            isMoveData=False,
            currentSize=0,
        )

    async def detach(
        self, vm_id: str | int, volume_id: str | int, keep: bool = True
    ) -> dict[str, Any]:
        """Detach a volume; ``keep=False`` also deletes it."""
        return await self._actions.do_action(
            vm_id,
            "detachServiceVolume",
            volumeID=str(volume_id),
            isKeepVolume=keep,
            isMoveData=False,
        )

    async def delete(self, vm_id: str | int, volume_id: str | int) -> dict[str, Any]:
        return await self._actions.do_action(
            vm_id, "deleteServiceVolume", volumeID=str(volume_id)
        )

    async def set_protection(
        self, vm_id: str | int, volume_id: str | int, enabled: bool = True
    ) -> dict[str, Any]:
        """Toggle deletion protection on a service volume."""
        return await self._actions.do_action(
            vm_id,
            "manageServiceVolumeProtection",
            volumeID=str(volume_id),
            isVolumeProtection=enabled,
        )
