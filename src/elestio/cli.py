"""
Elestio CLI.

Usage:
    elestio login --email me@example.com --token xxx
    elestio services list --project 1234
    elestio deploy postgres --size MEDIUM-2C-4G
    elestio resize 98765 LARGE
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable

import click
import httpx

from elestio.api import ElestioAPI
from elestio.api.services.actions import POWER_ACTIONS
from elestio.config import get_settings
from elestio.exceptions import ElestioError
from elestio.logging import setup_logging
from elestio.presenter import Presenter
from elestio.services.deployment import is_deployed
from elestio.store import ConfigStore, CredentialStore

Handler = Callable[[ElestioAPI, Presenter], Awaitable[Any]]


def _presenter(ctx: click.Context) -> Presenter:
    return ctx.obj["presenter"]


def _config_dir(ctx: click.Context) -> Path:
    return ctx.obj.get("config_dir") or get_settings().config_dir


def _project(ctx: click.Context, project: str | None) -> str | None:
    return project or ctx.obj.get("project")


def run_api(ctx: click.Context, handler: Handler) -> Any:
    """Run an async handler against a fresh client, mapping errors to exit 1."""
    presenter = _presenter(ctx)

    async def _runner() -> Any:
        async with ElestioAPI(config_dir=_config_dir(ctx)) as api:
            return await handler(api, presenter)

    try:
        return asyncio.run(_runner())
    except ElestioError as e:
        presenter.error(e.message)
        raise SystemExit(1)
    except httpx.HTTPError as e:
        presenter.error(f"Network error: {e}")
        raise SystemExit(1)


def _done(out: Presenter, result: Any, message: str) -> None:
    if out.json_output:
        out.json(result)
        return
    out.success(message)


def _lines(out: Presenter, items: list[Any], empty: str) -> None:
    if out.json_output:
        out.json(items)
        return
    if not items:
        out.info(empty)
        return
    for item in items:
        out.console.print(f"  {item}")


@click.group()
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.option("--project", "-p", help="Project ID (overrides the default project)")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for credentials and config (default ~/.elestio)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs")
@click.version_option(package_name="elestio-cli")
@click.pass_context
def main(
    ctx: click.Context,
    json_output: bool,
    project: str | None,
    config_dir: Path | None,
    verbose: bool,
) -> None:
    """Elestio CLI: deploy and manage services on the Elestio DevOps platform."""
    settings = get_settings()
    setup_logging("DEBUG" if verbose else settings.log_level, settings.log_json)

    ctx.ensure_object(dict)
    ctx.obj["presenter"] = Presenter(json_output=json_output)
    ctx.obj["project"] = project
    ctx.obj["config_dir"] = config_dir


# =============================================================================
# Auth & Config
# =============================================================================


@main.command()
@click.option("--email", required=True, help="Account email")
@click.option("--token", required=True, help="API token")
@click.pass_context
def login(ctx: click.Context, email: str, token: str) -> None:
    """Verify and save credentials."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        out.info("Testing authentication...")
        await api.session.login(email, token)
        if out.json_output:
            out.json({"status": "ok", "email": email})
            return
        out.success(f"Configured for {email}")
        out.info(f"Credentials saved to {api.credential_store.path}")

    run_api(ctx, handler)


@main.command()
@click.pass_context
def whoami(ctx: click.Context) -> None:
    """Show the configured account."""
    out = _presenter(ctx)
    credential = CredentialStore(_config_dir(ctx)).load()
    if credential is None:
        out.error("Not logged in. Run: elestio login")
        raise SystemExit(1)

    config = ConfigStore(_config_dir(ctx)).load()
    out.record(
        {
            "email": credential.identity,
            "defaultProject": config.default_project,
            "provider": config.defaults.provider,
            "datacenter": config.defaults.datacenter,
        },
        [
            ("email", "Logged in as"),
            ("defaultProject", "Default project"),
            ("provider", "Provider"),
            ("datacenter", "Datacenter"),
        ],
    )


@main.group()
def auth() -> None:
    """Authentication commands."""


@auth.command("test")
@click.pass_context
def auth_test(ctx: click.Context) -> None:
    """Authenticate with the saved credentials."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        session = await api.session.refresh()
        expiry = session.expiry.isoformat() if session.expiry else None
        if out.json_output:
            out.json({"status": "ok", "jwtExpiry": expiry})
            return
        out.success("Authenticated")
        out.info(f"Token valid until {expiry}")

    run_api(ctx, handler)


@main.group()
def config() -> None:
    """Show or update local configuration."""


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show configuration."""
    out = _presenter(ctx)
    credential = CredentialStore(_config_dir(ctx)).load()
    cfg = ConfigStore(_config_dir(ctx)).load()
    session_expiry = None
    if cfg.jwt_expiry:
        session_expiry = datetime.fromtimestamp(cfg.jwt_expiry / 1000, tz=timezone.utc).isoformat()

    out.record(
        {
            "email": credential.identity if credential else None,
            "hasToken": credential is not None,
            "hasJwt": bool(cfg.jwt),
            "jwtExpiry": session_expiry,
            "defaultProject": cfg.default_project,
            "provider": cfg.defaults.provider,
            "datacenter": cfg.defaults.datacenter,
            "serverType": cfg.defaults.server_type,
            "support": cfg.defaults.support,
        },
        [
            ("email", "Email"),
            ("hasToken", "API token"),
            ("hasJwt", "Session"),
            ("jwtExpiry", "Session expiry"),
            ("defaultProject", "Default project"),
            ("provider", "Provider"),
            ("datacenter", "Datacenter"),
            ("serverType", "Server type"),
            ("support", "Support"),
        ],
        title="Elestio Configuration",
    )


@config.command("set-default-project")
@click.argument("project_id")
@click.pass_context
def config_set_default_project(ctx: click.Context, project_id: str) -> None:
    """Set the default project."""
    store = ConfigStore(_config_dir(ctx))
    cfg = store.load()
    cfg.default_project = str(project_id)
    store.save(cfg)
    _presenter(ctx).success(f"Default project set to {project_id}")


@config.command("set-defaults")
@click.option("--provider", help="Default provider")
@click.option("--datacenter", help="Default datacenter / region")
@click.option("--server-type", help="Default server size")
@click.option("--support", help="Default support level")
@click.pass_context
def config_set_defaults(
    ctx: click.Context,
    provider: str | None,
    datacenter: str | None,
    server_type: str | None,
    support: str | None,
) -> None:
    """Update deployment defaults."""
    store = ConfigStore(_config_dir(ctx))
    cfg = store.load()
    if provider:
        cfg.defaults.provider = provider
    if datacenter:
        cfg.defaults.datacenter = datacenter
    if server_type:
        cfg.defaults.server_type = server_type
    if support:
        cfg.defaults.support = support
    store.save(cfg)
    _presenter(ctx).success("Defaults updated")


# =============================================================================
# Projects
# =============================================================================


@main.group()
def projects() -> None:
    """Project commands."""


@projects.command("list")
@click.pass_context
def projects_list(ctx: click.Context) -> None:
    """List projects."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        rows = await api.projects.list()
        out.table(
            rows,
            [("projectID", "ID"), ("project_name", "Name"), ("role", "Role"), ("networkCIDR", "Network CIDR")],
            title=f"Projects ({len(rows)})",
            empty="No projects found",
        )

    run_api(ctx, handler)


# =============================================================================
# Services
# =============================================================================


@main.group()
def services() -> None:
    """Service commands."""


@services.command("list")
@click.option("--project", "-p", help="Project ID")
@click.pass_context
def services_list(ctx: click.Context, project: str | None) -> None:
    """List services in a project."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        rows = await api.services.list(_project(ctx, project))
        out.table(
            rows,
            [
                ("displayName", "Name"),
                ("templateName", "Software"),
                ("status", "Status"),
                ("deploymentStatus", "Deploy"),
                ("vmID", "vmID"),
                ("ipv4", "IP"),
            ],
            title=f"Services ({len(rows)})",
            empty="No services in project",
        )

    run_api(ctx, handler)


@services.command("show")
@click.argument("vm_id")
@click.option("--project", "-p", help="Project ID")
@click.pass_context
def services_show(ctx: click.Context, vm_id: str, project: str | None) -> None:
    """Show service details."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        out.service(await api.services.get(vm_id, _project(ctx, project)))

    run_api(ctx, handler)


@main.command()
@click.argument("template")
@click.option("--project", "-p", help="Project ID")
@click.option("--name", help="Server name")
@click.option("--size", help="Server size, e.g. MEDIUM-2C-4G")
@click.option("--region", help="Datacenter")
@click.option("--provider", help="Provider")
@click.option("--support", help="Support level")
@click.option("--version", "version_tag", help="Software version")
@click.option("--pipeline-name", help="Pipeline name (CI/CD targets)")
@click.option("--dry-run", is_flag=True, help="Show the deployment without running it")
@click.option("--wait/--no-wait", default=True, help="Wait for the deployment to finish")
@click.option("--timeout", type=float, help="Seconds to wait")
@click.pass_context
def deploy(
    ctx: click.Context,
    template: str,
    project: str | None,
    name: str | None,
    size: str | None,
    region: str | None,
    provider: str | None,
    support: str | None,
    version_tag: str | None,
    pipeline_name: str | None,
    dry_run: bool,
    wait: bool,
    timeout: float | None,
) -> None:
    """Deploy a service from a template."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        result = await api.services.deploy(
            template,
            project_id=_project(ctx, project),
            name=name,
            size=size,
            region=region,
            provider=provider,
            support=support,
            version=version_tag,
            pipeline_name=pipeline_name,
            dry_run=dry_run,
            wait=wait,
            timeout=timeout,
        )
        if dry_run:
            out.record(
                result,
                [
                    ("template", "Software"),
                    ("version", "Version"),
                    ("projectId", "Project"),
                    ("serverName", "Name"),
                    ("provider", "Provider"),
                    ("datacenter", "Region"),
                    ("serverType", "Size"),
                    ("support", "Support"),
                    ("adminEmail", "Admin"),
                ],
                title="Deployment Preview (--dry-run)",
            )
        elif wait and is_deployed(result):
            out.success("Deployment complete!")
            out.service(result)
        elif out.json_output:
            out.json(result)
        else:
            out.success("Deployment started")

    run_api(ctx, handler)


@main.command()
@click.argument("vm_id")
@click.option("--project", "-p", help="Project ID")
@click.option("--timeout", type=float, help="Seconds to wait")
@click.pass_context
def wait(ctx: click.Context, vm_id: str, project: str | None, timeout: float | None) -> None:
    """Wait for a deployment to complete."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        service = await api.services.wait_for_deployment(
            vm_id, project_id=_project(ctx, project), timeout=timeout
        )
        out.success("Deployment complete!")
        out.service(service)

    run_api(ctx, handler)


@main.command("delete-service")
@click.argument("vm_id")
@click.option("--project", "-p", help="Project ID")
@click.option("--force", is_flag=True, help="Confirm deletion")
@click.option("--with-backups", is_flag=True, help="Delete backups too")
@click.pass_context
def delete_service(
    ctx: click.Context,
    vm_id: str,
    project: str | None,
    force: bool,
    with_backups: bool,
) -> None:
    """Delete a service."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        await api.services.delete(
            vm_id, project_id=_project(ctx, project), force=force, with_backups=with_backups
        )
        out.success(f"Service {vm_id} deletion initiated")

    run_api(ctx, handler)


# =============================================================================
# Server actions
# =============================================================================


@main.command()
@click.argument("vm_id")
@click.argument("name", type=click.Choice(list(POWER_ACTIONS)))
@click.option("--project", "-p", help="Project ID")
@click.pass_context
def action(ctx: click.Context, vm_id: str, name: str, project: str | None) -> None:
    """Run a server action (reboot, shutdown, lock, ...)."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        result = await api.actions.run(vm_id, name, project_id=_project(ctx, project))
        if out.json_output:
            out.json(result)
            return
        out.success(f"{name} initiated on {vm_id}")

    run_api(ctx, handler)


@main.command()
@click.argument("vm_id")
@click.argument("size")
@click.option("--project", "-p", help="Project ID")
@click.option("--cpu-ram-only/--with-disk", default=True, help="Keep the disk size unchanged")
@click.pass_context
def resize(
    ctx: click.Context,
    vm_id: str,
    size: str,
    project: str | None,
    cpu_ram_only: bool,
) -> None:
    """Resize a VM to another plan."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        result = await api.actions.resize(
            vm_id, size, project_id=_project(ctx, project), cpu_ram_only=cpu_ram_only
        )
        if result is None:
            if out.json_output:
                out.json({"status": "unchanged", "size": size})
            return
        if out.json_output:
            out.json(result)
            return
        out.success(f"VM {vm_id} resize initiated")

    run_api(ctx, handler)


# =============================================================================
# Volumes
# =============================================================================


_VOLUME_COLUMNS = [
    ("volumeID", "ID"),
    ("volumeName", "Name"),
    ("volume", "Size GB"),
    ("providerName", "Provider"),
    ("datacenter", "Region"),
    ("serverID", "Server"),
]


@main.group()
def volumes() -> None:
    """Block storage volumes."""


@volumes.command("list")
@click.option("--project", "-p", help="Project ID")
@click.pass_context
def volumes_list(ctx: click.Context, project: str | None) -> None:
    """List volumes in a project."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        rows = await api.volumes.list(_project(ctx, project))
        out.table(rows, _VOLUME_COLUMNS, title=f"Volumes ({len(rows)})", empty="No volumes found")

    run_api(ctx, handler)


@volumes.command("create")
@click.argument("name")
@click.option("--size", type=int, default=10, show_default=True, help="Size in GB")
@click.option("--project", "-p", help="Project ID")
@click.option("--provider", help="Provider")
@click.option("--region", help="Datacenter")
@click.option("--storage-type", default="NVME", show_default=True, help="Block storage type")
@click.option("--server", "server_id", help="Attach to this server ID")
@click.pass_context
def volumes_create(
    ctx: click.Context,
    name: str,
    size: int,
    project: str | None,
    provider: str | None,
    region: str | None,
    storage_type: str,
    server_id: str | None,
) -> None:
    """Create a project volume."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        result = await api.volumes.create(
            name,
            size=size,
            project_id=_project(ctx, project),
            provider=provider,
            datacenter=region,
            storage_type=storage_type,
            server_id=server_id,
        )
        _done(out, result, f'Volume "{name}" created')

    run_api(ctx, handler)


@volumes.command("attached")
@click.argument("vm_id")
@click.pass_context
def volumes_attached(ctx: click.Context, vm_id: str) -> None:
    """List volumes attached to a service."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        rows = await api.volumes.for_service(vm_id)
        out.table(rows, _VOLUME_COLUMNS, title=f"Volumes on {vm_id}", empty="No attached volumes")

    run_api(ctx, handler)


@volumes.command("attach")
@click.argument("vm_id")
@click.argument("name")
@click.option("--size", type=int, default=10, show_default=True, help="Size in GB")
@click.option("--storage-type", default="NVME", show_default=True, help="Block storage type")
@click.pass_context
def volumes_attach(ctx: click.Context, vm_id: str, name: str, size: int, storage_type: str) -> None:
    """Create a volume attached to a service."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        result = await api.volumes.create_attached(vm_id, name, size=size, storage_type=storage_type)
        _done(out, result, f'Volume "{name}" attached to {vm_id}')

    run_api(ctx, handler)


@volumes.command("resize")
@click.argument("vm_id")
@click.argument("volume_id")
@click.argument("size", type=int)
@click.pass_context
def volumes_resize(ctx: click.Context, vm_id: str, volume_id: str, size: int) -> None:
    """Grow a service volume to SIZE GB."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        result = await api.volumes.resize(vm_id, volume_id, size)
        _done(out, result, f"Volume {volume_id} resizing to {size}GB")

    run_api(ctx, handler)


@volumes.command("detach")
@click.argument("vm_id")
@click.argument("volume_id")
@click.option("--delete", "delete_volume", is_flag=True, help="Delete the volume after detaching")
@click.pass_context
def volumes_detach(ctx: click.Context, vm_id: str, volume_id: str, delete_volume: bool) -> None:
    """Detach a volume from a service."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        result = await api.volumes.detach(vm_id, volume_id, keep=not delete_volume)
        _done(out, result, f"Volume {volume_id} detached")

    run_api(ctx, handler)


@volumes.command("delete")
@click.argument("vm_id")
@click.argument("volume_id")
@click.pass_context
def volumes_delete(ctx: click.Context, vm_id: str, volume_id: str) -> None:
    """Delete a service volume."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        result = await api.volumes.delete(vm_id, volume_id)
        _done(out, result, f"Volume {volume_id} deleted")

    run_api(ctx, handler)


@volumes.command("protect")
@click.argument("vm_id")
@click.argument("volume_id")
@click.option("--off", is_flag=True, help="Remove protection")
@click.pass_context
def volumes_protect(ctx: click.Context, vm_id: str, volume_id: str, off: bool) -> None:
    """Toggle deletion protection on a volume."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        result = await api.volumes.set_protection(vm_id, volume_id, enabled=not off)
        _done(out, result, f"Protection {'disabled' if off else 'enabled'} on volume {volume_id}")

    run_api(ctx, handler)


# =============================================================================
# Backups & Snapshots
# =============================================================================

BACKUP_KINDS = ["local", "remote", "s3"]


@main.group()
def backups() -> None:
    """Service backups (local, remote, S3)."""


@backups.command("list")
@click.argument("vm_id")
@click.option("--kind", type=click.Choice(BACKUP_KINDS), default="remote", show_default=True)
@click.pass_context
def backups_list(ctx: click.Context, vm_id: str, kind: str) -> None:
    """List backups of a service."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        listing = {
            "local": api.backups.list_local,
            "remote": api.backups.list_remote,
            "s3": api.backups.list_s3,
        }[kind]
        items = await listing(vm_id)
        if out.json_output:
            out.json(items)
            return
        _lines(out, [_backup_label(item) for item in items], f"No {kind} backups found")

    run_api(ctx, handler)


def _backup_label(item: Any) -> str:
    if isinstance(item, dict):
        return str(item.get("snapshotName") or item.get("key") or item.get("name") or item)
    return str(item)


@backups.command("take")
@click.argument("vm_id")
@click.option("--kind", type=click.Choice(BACKUP_KINDS), default="remote", show_default=True)
@click.pass_context
def backups_take(ctx: click.Context, vm_id: str, kind: str) -> None:
    """Start a backup now."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        take = {
            "local": api.backups.take_local,
            "remote": api.backups.take_remote,
            "s3": api.backups.take_s3,
        }[kind]
        _done(out, await take(vm_id), f"{kind.capitalize()} backup started on {vm_id}")

    run_api(ctx, handler)


@backups.command("restore")
@click.argument("vm_id")
@click.argument("target")
@click.option("--kind", type=click.Choice(BACKUP_KINDS), default="remote", show_default=True)
@click.pass_context
def backups_restore(ctx: click.Context, vm_id: str, target: str, kind: str) -> None:
    """Restore a backup (path, snapshot name or S3 key)."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        restore = {
            "local": api.backups.restore_local,
            "remote": api.backups.restore_remote,
            "s3": api.backups.restore_s3,
        }[kind]
        _done(out, await restore(vm_id, target), f"Restoring {target} on {vm_id}")

    run_api(ctx, handler)


@backups.command("delete")
@click.argument("vm_id")
@click.argument("target")
@click.option("--kind", type=click.Choice(["local", "s3"]), default="local", show_default=True)
@click.pass_context
def backups_delete(ctx: click.Context, vm_id: str, target: str, kind: str) -> None:
    """Delete a local backup (path) or S3 backup (key)."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        delete = api.backups.delete_local if kind == "local" else api.backups.delete_s3
        _done(out, await delete(vm_id, target), f"Backup {target} deleted")

    run_api(ctx, handler)


@backups.command("auto-enable")
@click.argument("vm_id")
@click.option("--path", "backup_path", default="/backup/", show_default=True, help="Path to back up")
@click.option("--hour", "backup_hour", default="03:00", show_default=True, help="Daily time (HH:MM)")
@click.pass_context
def backups_auto_enable(ctx: click.Context, vm_id: str, backup_path: str, backup_hour: str) -> None:
    """Schedule daily remote backups."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        result = await api.backups.setup_auto(vm_id, backup_path=backup_path, backup_hour=backup_hour)
        _done(out, result, f"Automatic backups enabled at {backup_hour}")

    run_api(ctx, handler)


@backups.command("auto-disable")
@click.argument("vm_id")
@click.pass_context
def backups_auto_disable(ctx: click.Context, vm_id: str) -> None:
    """Stop daily remote backups."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        _done(out, await api.backups.disable_auto(vm_id), "Automatic backups disabled")

    run_api(ctx, handler)


def _s3_options(func: Callable[..., Any]) -> Callable[..., Any]:
    for option in reversed(
        [
            click.option("--key", "api_key", required=True, help="Access key"),
            click.option("--secret", "secret_key", required=True, help="Secret key"),
            click.option("--bucket", required=True, help="Bucket name"),
            click.option("--endpoint", required=True, help="S3 endpoint"),
            click.option("--prefix", default="", help="Key prefix"),
            click.option("--provider-type", default="s3", show_default=True),
        ]
    ):
        func = option(func)
    return func


@backups.command("s3-verify")
@click.argument("vm_id")
@_s3_options
@click.pass_context
def backups_s3_verify(ctx: click.Context, vm_id: str, **target: str) -> None:
    """Check S3 bucket settings."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        _done(out, await api.backups.verify_s3(vm_id, **target), "S3 configuration is valid")

    run_api(ctx, handler)


@backups.command("s3-enable")
@click.argument("vm_id")
@_s3_options
@click.pass_context
def backups_s3_enable(ctx: click.Context, vm_id: str, **target: str) -> None:
    """Send backups to an S3 bucket."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        _done(out, await api.backups.enable_s3(vm_id, **target), "S3 backups enabled")

    run_api(ctx, handler)


@backups.command("s3-disable")
@click.argument("vm_id")
@click.pass_context
def backups_s3_disable(ctx: click.Context, vm_id: str) -> None:
    """Stop S3 backups."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        _done(out, await api.backups.disable_s3(vm_id), "S3 backups disabled")

    run_api(ctx, handler)


@main.group()
def snapshots() -> None:
    """Provider disk snapshots."""


@snapshots.command("list")
@click.argument("vm_id")
@click.pass_context
def snapshots_list(ctx: click.Context, vm_id: str) -> None:
    """List snapshots of a service."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        rows = await api.backups.list_snapshots(vm_id)
        out.table(
            [row if isinstance(row, dict) else {"name": row} for row in rows],
            [("id", "ID"), ("orderID", "Order"), ("name", "Name"), ("created", "Created")],
            title=f"Snapshots ({len(rows)})",
            empty="No snapshots found",
        )

    run_api(ctx, handler)


@snapshots.command("take")
@click.argument("vm_id")
@click.pass_context
def snapshots_take(ctx: click.Context, vm_id: str) -> None:
    """Take a snapshot now."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        _done(out, await api.backups.take_snapshot(vm_id), f"Snapshot started on {vm_id}")

    run_api(ctx, handler)


@snapshots.command("restore")
@click.argument("vm_id")
@click.argument("order_id", default="0")
@click.pass_context
def snapshots_restore(ctx: click.Context, vm_id: str, order_id: str) -> None:
    """Restore a snapshot (0 = most recent)."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        _done(out, await api.backups.restore_snapshot(vm_id, order_id), f"Restoring snapshot {order_id}")

    run_api(ctx, handler)


@snapshots.command("delete")
@click.argument("vm_id")
@click.argument("snapshot_id")
@click.pass_context
def snapshots_delete(ctx: click.Context, vm_id: str, snapshot_id: str) -> None:
    """Delete a snapshot."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        _done(out, await api.backups.delete_snapshot(vm_id, snapshot_id), f"Snapshot {snapshot_id} deleted")

    run_api(ctx, handler)


@snapshots.command("auto")
@click.argument("vm_id")
@click.option("--off", is_flag=True, help="Disable automatic snapshots")
@click.pass_context
def snapshots_auto(ctx: click.Context, vm_id: str, off: bool) -> None:
    """Enable or disable automatic snapshots."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        if off:
            result = await api.backups.disable_auto_snapshots(vm_id)
        else:
            result = await api.backups.enable_auto_snapshots(vm_id)
        _done(out, result, f"Automatic snapshots {'disabled' if off else 'enabled'}")

    run_api(ctx, handler)


# =============================================================================
# CI/CD pipelines
# =============================================================================


@main.group()
def pipelines() -> None:
    """CI/CD pipelines."""


@pipelines.command("targets")
@click.option("--project", "-p", help="Project ID")
@click.pass_context
def pipelines_targets(ctx: click.Context, project: str | None) -> None:
    """List CI/CD target services."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        rows = await api.pipelines.targets(_project(ctx, project))
        out.table(
            rows,
            [("vmID", "vmID"), ("displayName", "Name"), ("status", "Status"), ("ipv4", "IP")],
            title=f"CI/CD Targets ({len(rows)})",
            empty="No CI/CD targets found",
        )

    run_api(ctx, handler)


@pipelines.command("list")
@click.argument("vm_id")
@click.option("--project", "-p", help="Project ID")
@click.pass_context
def pipelines_list(ctx: click.Context, vm_id: str, project: str | None) -> None:
    """List pipelines on a CI/CD target."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        rows = await api.pipelines.list(vm_id, _project(ctx, project))
        out.table(
            rows,
            [("id", "ID"), ("pipelineName", "Name"), ("status", "Status"), ("cname", "CNAME")],
            title=f"Pipelines on {vm_id}",
            empty=f"No pipelines on {vm_id}",
        )

    run_api(ctx, handler)


@pipelines.command("show")
@click.argument("vm_id")
@click.argument("pipeline_id", type=int)
@click.option("--project", "-p", help="Project ID")
@click.pass_context
def pipelines_show(ctx: click.Context, vm_id: str, pipeline_id: int, project: str | None) -> None:
    """Show pipeline details."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        pipeline = await api.pipelines.get(vm_id, pipeline_id, _project(ctx, project))
        out.record(
            pipeline,
            [("pipelineName", "Name"), ("status", "Status"), ("branch", "Branch"), ("cname", "CNAME")],
            title=f"Pipeline {pipeline_id}",
        )

    run_api(ctx, handler)


PIPELINE_ACTIONS = ["restart", "stop", "resync"]


@pipelines.command("action")
@click.argument("vm_id")
@click.argument("pipeline_id", type=int)
@click.argument("name", type=click.Choice(PIPELINE_ACTIONS))
@click.option("--project", "-p", help="Project ID")
@click.pass_context
def pipelines_action(ctx: click.Context, vm_id: str, pipeline_id: int, name: str, project: str | None) -> None:
    """Restart, stop or resync a pipeline."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        run = getattr(api.pipelines, name)
        result = await run(vm_id, pipeline_id, _project(ctx, project))
        _done(out, result, f"{name} initiated on pipeline {pipeline_id}")

    run_api(ctx, handler)


@pipelines.command("delete")
@click.argument("vm_id")
@click.argument("pipeline_id", type=int)
@click.option("--project", "-p", help="Project ID")
@click.option("--force", is_flag=True, help="Confirm deletion")
@click.pass_context
def pipelines_delete(ctx: click.Context, vm_id: str, pipeline_id: int, project: str | None, force: bool) -> None:
    """Delete a pipeline."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        result = await api.pipelines.delete(vm_id, pipeline_id, _project(ctx, project), force=force)
        _done(out, result, f"Pipeline {pipeline_id} deleted")

    run_api(ctx, handler)


@pipelines.command("logs")
@click.argument("vm_id")
@click.argument("pipeline_id", type=int)
@click.option("--project", "-p", help="Project ID")
@click.option("--file", "filepath", help="Build log from history instead of the running output")
@click.pass_context
def pipelines_logs(
    ctx: click.Context, vm_id: str, pipeline_id: int, project: str | None, filepath: str | None
) -> None:
    """Show pipeline logs."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        pid = _project(ctx, project)
        if filepath:
            text = await api.pipelines.view_log(vm_id, pipeline_id, filepath, pid)
        else:
            text = await api.pipelines.logs(vm_id, pipeline_id, pid)
        if out.json_output:
            out.json({"logs": text})
            return
        out.console.print(text, markup=False, highlight=False)

    run_api(ctx, handler)


@pipelines.command("history")
@click.argument("vm_id")
@click.argument("pipeline_id", type=int)
@click.option("--project", "-p", help="Project ID")
@click.pass_context
def pipelines_history(ctx: click.Context, vm_id: str, pipeline_id: int, project: str | None) -> None:
    """List builds of a pipeline."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        rows = await api.pipelines.history(vm_id, pipeline_id, _project(ctx, project))
        out.table(rows, [("filepath", "Log file"), ("status", "Status")], title="Build History", empty="No build history")

    run_api(ctx, handler)


@pipelines.command("domains")
@click.argument("vm_id")
@click.argument("pipeline_id", type=int)
@click.option("--add", "add_domain", help="Domain to add")
@click.option("--remove", "remove_domain", help="Domain to remove")
@click.option("--project", "-p", help="Project ID")
@click.pass_context
def pipelines_domains(
    ctx: click.Context,
    vm_id: str,
    pipeline_id: int,
    add_domain: str | None,
    remove_domain: str | None,
    project: str | None,
) -> None:
    """List, add or remove custom domains of a pipeline."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        pid = _project(ctx, project)
        if add_domain:
            result = await api.pipelines.add_domain(vm_id, pipeline_id, add_domain, pid)
            _done(out, result, f"Domain {add_domain} added")
        elif remove_domain:
            result = await api.pipelines.remove_domain(vm_id, pipeline_id, remove_domain, pid)
            _done(out, result, f"Domain {remove_domain} removed")
        else:
            _lines(out, await api.pipelines.domains(vm_id, pipeline_id, pid), "No custom domains")

    run_api(ctx, handler)


@pipelines.command("create")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def pipelines_create(ctx: click.Context, config_file: Path) -> None:
    """Create a pipeline from a JSON definition file."""
    try:
        pipeline_config = json.loads(config_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        _presenter(ctx).error(f"Invalid JSON in {config_file}: {e}")
        raise SystemExit(1)

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        _done(out, await api.pipelines.create(pipeline_config), "Pipeline created")

    run_api(ctx, handler)


@pipelines.command("registries")
@click.option("--project", "-p", help="Project ID")
@click.pass_context
def pipelines_registries(ctx: click.Context, project: str | None) -> None:
    """List Docker registries."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        rows = await api.pipelines.registries(_project(ctx, project))
        out.table(rows, [("identityName", "Name"), ("username", "User"), ("url", "URL")], empty="No Docker registries")

    run_api(ctx, handler)


@pipelines.command("add-registry")
@click.argument("name")
@click.option("--username", required=True)
@click.option("--password", required=True)
@click.option("--url", required=True, help="Registry URL")
@click.option("--project", "-p", help="Project ID")
@click.pass_context
def pipelines_add_registry(
    ctx: click.Context, name: str, username: str, password: str, url: str, project: str | None
) -> None:
    """Add a Docker registry to the project."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        result = await api.pipelines.add_registry(name, username, password, url, _project(ctx, project))
        _done(out, result, f'Registry "{name}" added')

    run_api(ctx, handler)


# =============================================================================
# Catalog
# =============================================================================


@main.group()
def templates() -> None:
    """Browse software templates."""


_TEMPLATE_COLUMNS = [("id", "ID"), ("title", "Name"), ("category", "Category"), ("version", "Version")]


@templates.command("list")
@click.option("--category", help="Filter by category")
@click.pass_context
def templates_list(ctx: click.Context, category: str | None) -> None:
    """List templates."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        rows = await api.catalog.search_templates(category=category)
        out.table(rows, _TEMPLATE_COLUMNS, title=f"Templates ({len(rows)})")

    run_api(ctx, handler)


@templates.command("search")
@click.argument("query")
@click.option("--category", help="Filter by category")
@click.pass_context
def templates_search(ctx: click.Context, query: str, category: str | None) -> None:
    """Search templates by name or description."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        rows = await api.catalog.search_templates(query, category)
        out.table(rows, _TEMPLATE_COLUMNS, title=f'Templates matching "{query}"', empty="No templates found")

    run_api(ctx, handler)


@main.command()
@click.option("--provider", help="Filter by provider")
@click.option("--country", help="Filter by country name or code")
@click.pass_context
def sizes(ctx: click.Context, provider: str | None, country: str | None) -> None:
    """List server sizes and pricing."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        entries = await api.catalog.filter_sizes(provider, country)
        rows = [
            {
                "provider": s.provider,
                "region": s.region,
                "location": s.location,
                "size": s.title,
                "cpu": s.cpu,
                "ramGB": s.ram_gb,
                "storageGB": s.storage_gb,
                "pricePerHour": s.price_per_hour,
                "priceMonthly": round(s.price_monthly) if s.price_monthly is not None else None,
            }
            for s in entries
        ]
        out.table(
            rows,
            [
                ("provider", "Provider"),
                ("region", "Region"),
                ("location", "Location"),
                ("size", "Size"),
                ("cpu", "CPU"),
                ("ramGB", "RAM GB"),
                ("storageGB", "Storage GB"),
                ("priceMonthly", "$/mo"),
            ],
            title=f"Server Sizes ({len(rows)} options)",
        )

    run_api(ctx, handler)


@main.command()
@click.pass_context
def categories(ctx: click.Context) -> None:
    """List template categories."""

    async def handler(api: ElestioAPI, out: Presenter) -> None:
        names = await api.catalog.categories()
        if out.json_output:
            out.json(names)
            return
        for name in names:
            out.console.print(f"  {name}")

    run_api(ctx, handler)


# =============================================================================
# Entry Point
# =============================================================================


if __name__ == "__main__":
    main()
