"""
Backups service for Elestio API.

Four backup families exist per service:

- local backups: scripts run on the VM through ``templateAction``;
- remote backups: Elestio-managed storage under ``/api/backups``;
- snapshots: provider disk snapshots through ``DoActionOnServer``;
- S3 backups: an external bucket, also through ``DoActionOnServer``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from elestio.api.config import (
    BACKUP_AUTO_DISABLE,
    BACKUP_AUTO_SETUP,
    BACKUP_RESTORE,
    BACKUP_START,
    BACKUPS_LIST,
    TEMPLATE_ACTION,
)
from elestio.api.services._helpers import ensure_ok, nested
from elestio.exceptions import APIError, ElestioError
from elestio.logging import get_logger

if TYPE_CHECKING:
    from elestio.api.executor import RequestExecutor
    from elestio.api.services.actions import ActionsService

logger = get_logger(__name__)

DEFAULT_BACKUP_PATH = "/backup/"
DEFAULT_BACKUP_HOUR = "03:00"


class BackupsService:
    """
    Service backups and snapshots.

    Example:
        >>> async with ElestioAPI() as api:
        ...     await api.backups.take_remote(12345)
        ...     snapshots = await api.backups.list_snapshots(12345)
    """

    def __init__(self, executor: RequestExecutor, actions: ActionsService) -> None:
        self._executor = executor
        self._actions = actions

    # =========================================================================
    # Local backups
    # =========================================================================

    async def template_action(
        self,
        vm_id: str | int,
        action: str,
        param1: str = "",
        param2: str = "",
        param3: str = "",
    ) -> dict[str, Any]:
        """
        Run a template script on the VM.

        Raises:
            APIError: Neither ``status: OK`` nor any data came back.
        """
        response = await self._executor.request(
            TEMPLATE_ACTION,
            params={
                "vmID": str(vm_id),
                "action": action,
                "param1": param1,
                "param2": param2,
                "param3": param3,
            },
        )
        if not isinstance(response, dict) or (
            response.get("status") != "OK" and not response.get("data")
        ):
            message = response.get("message") if isinstance(response, dict) else None
            raise APIError(message or f'Action "{action}" failed', response=response)
        return response

    async def list_local(self, vm_id: str | int) -> list[Any]:
        """Backup archives on the VM; empty when the script reports none."""
        try:
            response = await self.template_action(vm_id, "scriptBackupsList")
        except APIError as e:
            logger.debug(f"No local backups for VM {vm_id}: {e}")
            return []
        return nested(response, "data", "backups") or response.get("backups") or []

    async def take_local(self, vm_id: str | int) -> dict[str, Any]:
        return await self.template_action(vm_id, "scriptBackup")

    async def restore_local(self, vm_id: str | int, backup_path: str) -> dict[str, Any]:
        if not backup_path:
            raise ElestioError("Backup path required")
        return await self.template_action(vm_id, "scriptRestore", backup_path)

    async def delete_local(self, vm_id: str | int, backup_path: str) -> dict[str, Any]:
        if not backup_path:
            raise ElestioError("Backup path required")
        return await self.template_action(vm_id, "scriptBackupDelete", backup_path)

    # =========================================================================
    # Remote backups
    # =========================================================================

    async def list_remote(self, vm_id: str | int) -> list[Any]:
        """Remote backups; a non-OK answer means there are none."""
        response = await self._executor.request(BACKUPS_LIST, params={"serverID": str(vm_id)})
        if not isinstance(response, dict) or response.get("status") != "OK":
            return []
        return nested(response, "data", "backups") or []

    async def take_remote(self, vm_id: str | int) -> dict[str, Any]:
        logger.info(f"Starting remote backup of VM {vm_id}...")
        return ensure_ok(
            await self._executor.request(BACKUP_START, params={"serverID": str(vm_id)}),
            "Failed to start remote backup",
        )

    async def restore_remote(self, vm_id: str | int, snapshot_name: str) -> dict[str, Any]:
        if not snapshot_name:
            raise ElestioError("Snapshot name required")
        return ensure_ok(
            await self._executor.request(
                BACKUP_RESTORE,
                params={"serverID": str(vm_id), "snapshotName": snapshot_name},
            ),
            "Failed to restore",
        )

    async def setup_auto(
        self,
        vm_id: str | int,
        backup_path: str = DEFAULT_BACKUP_PATH,
        backup_hour: str = DEFAULT_BACKUP_HOUR,
    ) -> dict[str, Any]:
        """Schedule a daily remote backup at ``backup_hour`` (HH:MM)."""
        return ensure_ok(
            await self._executor.request(
                BACKUP_AUTO_SETUP,
                params={
                    "serverID": str(vm_id),
                    "backupPath": backup_path,
                    "backupHour": backup_hour,
                },
            ),
            "Failed to setup automatic backups",
        )

    async def disable_auto(self, vm_id: str | int) -> dict[str, Any]:
        return ensure_ok(
            await self._executor.request(BACKUP_AUTO_DISABLE, params={"serverID": str(vm_id)}),
            "Failed to disable automatic backups",
        )

    # =========================================================================
    # Snapshots
    # =========================================================================

    async def list_snapshots(self, vm_id: str | int) -> list[Any]:
        result = await self._actions.do_action(vm_id, "listSnapshot")
        return nested(result, "data", "snapshots") or result.get("snapshots") or []

    async def take_snapshot(self, vm_id: str | int) -> dict[str, Any]:
        return await self._actions.do_action(vm_id, "takeSnapshot")

    async def restore_snapshot(self, vm_id: str | int, order_id: str | int = 0) -> dict[str, Any]:
        """Restore a snapshot by order id; 0 is the most recent."""
        if order_id is None or order_id == "":
            raise ElestioError("Snapshot order ID required (0 = most recent)")
        return await self._actions.do_action(
            vm_id, "restoreSnapshot", snapshotOrderID=str(order_id)
        )

    async def delete_snapshot(self, vm_id: str | int, snapshot_id: str | int) -> dict[str, Any]:
        if not snapshot_id:
            raise ElestioError("Snapshot ID required")
        return await self._actions.do_action(vm_id, "deleteSnapshot", snapshotID=str(snapshot_id))

    async def enable_auto_snapshots(self, vm_id: str | int) -> dict[str, Any]:
        return await self._actions.do_action(vm_id, "enableBackup")

    async def disable_auto_snapshots(self, vm_id: str | int) -> dict[str, Any]:
        return await self._actions.do_action(vm_id, "disableBackup")

    # =========================================================================
    # S3 backups
    # =========================================================================

    async def verify_s3(self, vm_id: str | int, **target: str) -> dict[str, Any]:
        """Check bucket credentials without enabling anything."""
        return await self._actions.do_action(
            vm_id, "verifyExternalBackupConfig", **_s3_target(**target)
        )

    async def enable_s3(self, vm_id: str | int, **target: str) -> dict[str, Any]:
        """
        Send backups to an S3 bucket.

        Args:
            vm_id: Service vmID.
            **target: ``api_key``, ``secret_key``, ``bucket``, ``endpoint``
                and optionally ``prefix`` and ``provider_type``.

        Raises:
            ElestioError: A required bucket setting is missing.
        """
        return await self._actions.do_action(vm_id, "enableExternalBackup", **_s3_target(**target))

    async def disable_s3(self, vm_id: str | int) -> dict[str, Any]:
        return await self._actions.do_action(vm_id, "disableExternalBackup")

    async def take_s3(self, vm_id: str | int) -> dict[str, Any]:
        return await self._actions.do_action(vm_id, "takeExternalBackup")

    async def list_s3(self, vm_id: str | int) -> list[Any]:
        result = await self._actions.do_action(vm_id, "listExternalBackup")
        return nested(result, "data", "backups") or result.get("backups") or []

    async def restore_s3(self, vm_id: str | int, key: str) -> dict[str, Any]:
        if not key:
            raise ElestioError("Restore key required")
        return await self._actions.do_action(vm_id, "restoreExternalBackup", restoreKey=key)

    async def delete_s3(self, vm_id: str | int, key: str) -> dict[str, Any]:
        if not key:
            raise ElestioError("Delete key required")
        return await self._actions.do_action(vm_id, "deleteExternalBackup", deleteKey=key)


def _s3_target(
    api_key: str = "",
    secret_key: str = "",
    bucket: str = "",
    endpoint: str = "",
    prefix: str = "",
    provider_type: str = "s3",
) -> dict[str, str]:
    if not (api_key and secret_key and bucket and endpoint):
        raise ElestioError("Required: --key, --secret, --bucket, --endpoint")
    return {
        "apiKey": api_key,
        "secretKey": secret_key,
        "bucketName": bucket,
        "endPoint": endpoint,
        "prefix": prefix,
        "providerType": provider_type,
    }
