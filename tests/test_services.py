"""
Tests for the high-level API service wrappers.
"""

from __future__ import annotations

import json
from unittest.mock import patch

import httpx
import pytest

from elestio.api.config import (
    BACKUP_AUTO_SETUP,
    BACKUP_START,
    BACKUPS_LIST,
    CICD_CREATE,
    CICD_PIPELINE_ACTION,
    CICD_PIPELINE_LOG,
    CICD_PIPELINES,
    CICD_REGISTRIES,
    CICD_SERVICES,
    PROJECTS_LIST,
    SERVICE_ACTION,
    SERVICE_CREATE,
    SERVICE_DELETE,
    SERVICE_DETAILS,
    SERVICES_LIST,
    SIZES_LIST,
    TEMPLATES_LIST,
    TEMPLATE_ACTION,
    VOLUME_CREATE,
    VOLUMES_LIST,
)
from elestio.exceptions import (
    ActionNotAllowedError,
    APIError,
    ConfigurationError,
    DeploymentTimeoutError,
    ElestioError,
    ServiceNotFoundError,
    TemplateNotFoundError,
    UnsupportedDowngradeError,
)
from elestio.models.config import LocalConfig


def ok(**data):
    return httpx.Response(200, json={"status": "OK", **data})


def sent(fake_api, path, index=0):
    return json.loads(fake_api.calls_to(path)[index].content)


@pytest.fixture
def api(make_api):
    return make_api()


@pytest.fixture
def with_project(config_store):
    config_store.save(LocalConfig(default_project="100"))


@pytest.fixture
def catalog_routes(fake_api, sample_templates, sample_sizes):
    fake_api.on(TEMPLATES_LIST, httpx.Response(200, json={"instances": sample_templates}))
    fake_api.on(SIZES_LIST, httpx.Response(200, json={"instances": sample_sizes}))


# ============================================================================
# Projects
# ============================================================================


class TestProjectsService:
    """Tests for ProjectsService."""

    @pytest.mark.asyncio
    async def test_list(self, api, fake_api):
        projects = [{"projectID": 1, "project_name": "prod"}]
        fake_api.on(PROJECTS_LIST, ok(data={"projects": projects}))

        assert await api.projects.list() == projects

    @pytest.mark.asyncio
    async def test_list_ko(self, api, fake_api):
        fake_api.on(PROJECTS_LIST, httpx.Response(200, json={"status": "KO", "message": "Denied"}))

        with pytest.raises(APIError, match="Denied"):
            await api.projects.list()

    @pytest.mark.asyncio
    async def test_default_project_configured(self, api, fake_api, with_project):
        assert await api.projects.default_project() == "100"
        assert not fake_api.calls_to(PROJECTS_LIST)

    @pytest.mark.asyncio
    async def test_default_project_picks_first(self, api, fake_api, config_store):
        fake_api.on(
            PROJECTS_LIST,
            ok(data={"projects": [{"projectID": 7, "project_name": "a"}, {"projectID": 8}]}),
        )

        assert await api.projects.default_project() == "7"
        assert config_store.load().default_project == "7"

    @pytest.mark.asyncio
    async def test_default_project_none(self, api, fake_api):
        fake_api.on(PROJECTS_LIST, ok(data={"projects": []}))

        with pytest.raises(ConfigurationError, match="No projects found"):
            await api.projects.default_project()


# ============================================================================
# Services
# ============================================================================


class TestServicesService:
    """Tests for ServicesService listing and details."""

    @pytest.mark.asyncio
    async def test_requires_project(self, api):
        with pytest.raises(ConfigurationError, match="Project ID required"):
            await api.services.list()

    @pytest.mark.asyncio
    async def test_list_uses_default_project(self, api, fake_api, with_project):
        fake_api.on(SERVICES_LIST, httpx.Response(200, json={"servers": [{"vmID": 1}]}))

        assert await api.services.list() == [{"vmID": 1}]
        body = sent(fake_api, SERVICES_LIST)
        assert body["projectId"] == "100"
        assert body["appid"] == "Cloudxx"
        assert body["isActiveService"] == "true"

    @pytest.mark.asyncio
    async def test_list_nested_services(self, api, fake_api):
        fake_api.on(SERVICES_LIST, ok(data={"services": [{"vmID": 2}]}))

        assert await api.services.list(project_id=5) == [{"vmID": 2}]
        assert sent(fake_api, SERVICES_LIST)["projectId"] == "5"

    @pytest.mark.asyncio
    async def test_list_access_denied(self, api, fake_api, with_project):
        fake_api.on(SERVICES_LIST, httpx.Response(200, json={"code": "AccessDenied"}))

        with pytest.raises(APIError, match="Access denied"):
            await api.services.list()

    @pytest.mark.asyncio
    async def test_find(self, api, fake_api, with_project):
        fake_api.on(SERVICES_LIST, httpx.Response(200, json={"servers": [{"vmID": 1}, {"vmID": 2}]}))

        assert await api.services.find("2") == {"vmID": 2}
        assert await api.services.find(3) is None

    @pytest.mark.asyncio
    async def test_get_service_infos(self, api, fake_api, with_project):
        fake_api.on(SERVICE_DETAILS, httpx.Response(200, json={"serviceInfos": [{"vmID": 9}]}))

        assert await api.services.get(9) == {"vmID": 9}
        assert sent(fake_api, SERVICE_DETAILS)["vmID"] == "9"

    @pytest.mark.asyncio
    async def test_get_data_fallback(self, api, fake_api, with_project):
        fake_api.on(SERVICE_DETAILS, ok(data={"vmID": 9}))

        assert await api.services.get(9) == {"vmID": 9}

    @pytest.mark.asyncio
    async def test_get_ko(self, api, fake_api, with_project):
        fake_api.on(SERVICE_DETAILS, httpx.Response(200, json={"status": "KO", "message": "No access"}))

        with pytest.raises(APIError, match="No access"):
            await api.services.get(9)

    @pytest.mark.asyncio
    async def test_get_missing(self, api, fake_api, with_project):
        fake_api.on(SERVICE_DETAILS, httpx.Response(200, json={"serviceInfos": []}))

        with pytest.raises(ServiceNotFoundError):
            await api.services.get(9)


class TestDeploy:
    """Tests for ServicesService.deploy()."""

    @pytest.mark.asyncio
    async def test_dry_run_uses_defaults(self, api, fake_api, with_project, catalog_routes):
        preview = await api.services.deploy("pg", name="db-1", dry_run=True)

        assert preview["dryRun"] is True
        assert preview["template"] == "PostgreSQL"
        assert preview["templateId"] == 11
        assert preview["version"] == "16"
        assert preview["provider"] == "netcup"
        assert preview["datacenter"] == "nbg"
        assert preview["serverType"] == "MEDIUM-2C-4G"
        assert preview["adminEmail"] == "dev@example.com"
        assert preview["serviceType"] == "Service"
        assert not fake_api.calls_to(SERVICE_CREATE)

    @pytest.mark.asyncio
    async def test_generated_name_is_valid(self, api, with_project, catalog_routes):
        preview = await api.services.deploy("CI-CD-Target", dry_run=True)

        assert preview["serverName"].startswith("ci-cd-target-")
        assert preview["serviceType"] == "CICD"

    @pytest.mark.asyncio
    async def test_invalid_name(self, api, with_project, catalog_routes):
        with pytest.raises(ElestioError, match="Invalid server name"):
            await api.services.deploy("pg", name="Bad_Name", dry_run=True)

    @pytest.mark.asyncio
    async def test_unknown_template(self, api, with_project, catalog_routes):
        with pytest.raises(TemplateNotFoundError):
            await api.services.deploy("nosuchthing")

    @pytest.mark.asyncio
    async def test_deploy_without_wait(self, api, fake_api, with_project, catalog_routes):
        fake_api.on(SERVICE_CREATE, ok(providerServerID=555))

        result = await api.services.deploy(
            "wordpress", name="blog", size="LARGE-4C-8G", provider="hetzner", wait=False
        )

        assert result["providerServerID"] == 555
        body = sent(fake_api, SERVICE_CREATE)
        assert body["templateID"] == "12"
        assert body["serverType"] == "LARGE-4C-8G"
        assert body["providerName"] == "hetzner"
        assert body["serverName"] == "blog"
        assert body["version"] == "latest"
        assert body["jwt"] == "jwt-1"
        assert "cicdPayload" not in body
        assert not fake_api.calls_to(SERVICES_LIST)

    @pytest.mark.asyncio
    async def test_cicd_payload(self, api, fake_api, with_project, catalog_routes):
        fake_api.on(SERVICE_CREATE, ok(action="created"))

        await api.services.deploy("cicd", name="runner", pipeline_name="main", wait=False)

        body = sent(fake_api, SERVICE_CREATE)
        assert body["serviceType"] == "CICD"
        assert body["cicdPayload"] == {"pipelineName": "main"}

    @pytest.mark.asyncio
    async def test_create_failure(self, api, fake_api, with_project, catalog_routes):
        fake_api.on(SERVICE_CREATE, httpx.Response(200, json={"status": "KO", "message": "Quota exceeded"}))

        with pytest.raises(APIError, match="Quota exceeded"):
            await api.services.deploy("pg", name="db", wait=False)

    @pytest.mark.asyncio
    async def test_wait_without_provider_server_id(self, api, fake_api, fake_clock, with_project, catalog_routes):
        fake_api.on(SERVICE_CREATE, httpx.Response(200, json={"action": "queued"}))

        with patch("elestio.api.services.servers.logger") as log:
            result = await api.services.deploy("pg", name="db", wait=True)

        assert result == {"action": "queued"}
        assert not fake_api.calls_to(SERVICES_LIST)
        assert fake_clock.sleeps == []
        assert "no providerServerID" in log.warning.call_args.args[0]

    @pytest.mark.asyncio
    async def test_deploy_and_wait(self, api, fake_api, fake_clock, with_project, catalog_routes):
        fake_api.on(SERVICE_CREATE, ok(providerServerID=555))
        fake_api.on(
            SERVICES_LIST,
            httpx.Response(200, json={"servers": []}),
            httpx.Response(200, json={"servers": [{"vmID": 1, "providerServerID": 555, "deploymentStatus": "Deploying", "status": "stopped"}]}),
            httpx.Response(200, json={"servers": [{"vmID": 1, "providerServerID": 555, "deploymentStatus": "Deployed", "status": "running"}]}),
        )
        seen = []

        service = await api.services.deploy(
            "pg", name="db", on_status=lambda status, _: seen.append(status)
        )

        assert service["vmID"] == 1
        assert seen == ["Deploying", "Deployed"]
        assert fake_clock.sleeps == [10, 15]

    @pytest.mark.asyncio
    async def test_wait_timeout(self, api, fake_api, fake_clock, with_project):
        fake_api.on(SERVICES_LIST, httpx.Response(200, json={"servers": []}))

        with pytest.raises(DeploymentTimeoutError):
            await api.services.wait_for_deployment(555, timeout=30)
        assert fake_clock.sleeps == [10, 10, 10]


class TestDelete:
    """Tests for ServicesService.delete()."""

    @pytest.mark.asyncio
    async def test_requires_force(self, api, fake_api, with_project):
        with pytest.raises(ActionNotAllowedError, match="--force"):
            await api.services.delete(9)
        assert not fake_api.requests

    @pytest.mark.asyncio
    async def test_delete(self, api, fake_api, with_project):
        fake_api.on(SERVICE_DELETE, ok())

        await api.services.delete(9, force=True, with_backups=True)

        body = sent(fake_api, SERVICE_DELETE)
        assert body["vmID"] == "9"
        assert body["projectID"] == "100"
        assert body["isDeleteServiceWithBackup"] == "true"

    @pytest.mark.asyncio
    async def test_delete_refused(self, api, fake_api, with_project):
        fake_api.on(SERVICE_DELETE, httpx.Response(200, json={"status": "KO", "message": "Locked"}))

        with pytest.raises(APIError, match="Locked"):
            await api.services.delete(9, force=True)


# ============================================================================
# Catalog
# ============================================================================


class TestCatalogService:
    """Tests for CatalogService."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "query, expected",
        [
            (11, "PostgreSQL"),
            ("12", "Wordpress"),
            ("postgres", "PostgreSQL"),
            ("WP", "Wordpress"),
            ("redis", "Redis"),
            ("press", "Wordpress"),
        ],
    )
    async def test_find_template(self, api, catalog_routes, query, expected):
        template = await api.catalog.find_template(query)

        assert template["title"] == expected

    @pytest.mark.asyncio
    async def test_find_template_missing(self, api, catalog_routes):
        assert await api.catalog.find_template("mysql") is None

    @pytest.mark.asyncio
    async def test_search_and_categories(self, api, catalog_routes):
        found = await api.catalog.search_templates("cache")

        assert [t["title"] for t in found] == ["Redis"]
        assert [t["title"] for t in await api.catalog.search_templates(category="databases")] == [
            "PostgreSQL",
            "Redis",
        ]
        assert await api.catalog.categories() == ["CMS", "Databases", "DevOps"]

    @pytest.mark.asyncio
    async def test_public_endpoints_skip_auth(self, api, fake_api, catalog_routes):
        await api.catalog.templates()
        await api.catalog.sizes()

        assert fake_api.auth_calls == 0
        assert fake_api.calls_to(SIZES_LIST)[0].method == "GET"

    @pytest.mark.asyncio
    async def test_sizes_cached_until_refresh(self, api, fake_api, catalog_routes):
        await api.catalog.sizes()
        await api.catalog.sizes()
        assert len(fake_api.calls_to(SIZES_LIST)) == 1

        await api.catalog.refresh()
        assert len(fake_api.calls_to(SIZES_LIST)) == 2

    @pytest.mark.asyncio
    async def test_sizes_skip_untitled(self, api, fake_api):
        fake_api.on(SIZES_LIST, httpx.Response(200, json={"instances": [{"title": ""}, {"title": "A-1C-1G"}]}))

        assert [s.title for s in await api.catalog.sizes()] == ["A-1C-1G"]

    @pytest.mark.asyncio
    async def test_filter_sizes(self, api, fake_api):
        fake_api.on(
            SIZES_LIST,
            httpx.Response(200, json={"instances": [
                {"title": "A-1C-1G", "providerName": "netcup", "Country": "Germany", "CountryCode": "DE"},
                {"title": "B-1C-1G", "providerName": "hetzner", "Country": "Finland", "CountryCode": "FI"},
            ]}),
        )

        assert [s.title for s in await api.catalog.filter_sizes(provider="Hetzner")] == ["B-1C-1G"]
        assert [s.title for s in await api.catalog.filter_sizes(country="de")] == ["A-1C-1G"]
        assert [s.title for s in await api.catalog.filter_sizes(country="germ")] == ["A-1C-1G"]


# ============================================================================
# Actions
# ============================================================================


class TestActionsService:
    """Tests for ActionsService."""

    @pytest.mark.asyncio
    async def test_do_action(self, api, fake_api):
        fake_api.on(SERVICE_ACTION, ok())

        await api.actions.reboot(9)

        body = sent(fake_api, SERVICE_ACTION)
        assert body["vmID"] == "9"
        assert body["action"] == "reboot"

    @pytest.mark.asyncio
    async def test_list_response_wrapped(self, api, fake_api):
        fake_api.on(SERVICE_ACTION, httpx.Response(200, json=[{"id": 1}]))

        assert await api.actions.lock(9) == {"data": [{"id": 1}], "status": "OK"}

    @pytest.mark.asyncio
    async def test_action_error(self, api, fake_api):
        fake_api.on(SERVICE_ACTION, httpx.Response(200, json={"status": "error", "message": "VM busy"}))

        with pytest.raises(APIError, match="VM busy"):
            await api.actions.power_on(9)

    @pytest.mark.asyncio
    async def test_run_maps_cli_names(self, api, fake_api):
        fake_api.on(SERVICE_ACTION, ok())

        await api.actions.run(9, "restart-stack")

        assert sent(fake_api, SERVICE_ACTION)["action"] == "restartAppStack"

    @pytest.mark.asyncio
    async def test_run_unknown(self, api):
        with pytest.raises(ElestioError, match="Unknown action"):
            await api.actions.run(9, "explode")

    @pytest.mark.asyncio
    async def test_shutdown_refused_for_managed_db(self, api, fake_api, with_project):
        fake_api.on(SERVICE_DETAILS, httpx.Response(200, json={"serviceInfos": [{"templateName": "PostgreSQL 16"}]}))

        with pytest.raises(ActionNotAllowedError, match="managed database"):
            await api.actions.shutdown(9)
        assert not fake_api.calls_to(SERVICE_ACTION)

    @pytest.mark.asyncio
    async def test_shutdown_proceeds_when_lookup_fails(self, api, fake_api, with_project):
        fake_api.on(SERVICE_DETAILS, httpx.Response(200, json={"serviceInfos": []}))
        fake_api.on(SERVICE_ACTION, ok())

        await api.actions.shutdown(9)

        assert sent(fake_api, SERVICE_ACTION)["action"] == "shutdown"

    @pytest.mark.asyncio
    async def test_resize(self, api, fake_api, with_project, catalog_routes):
        fake_api.on(
            SERVICE_DETAILS,
            httpx.Response(200, json={"serviceInfos": [
                {"provider": "netcup", "datacenter": "nbg", "serverType": "MEDIUM-2C-4G"}
            ]}),
        )
        fake_api.on(SERVICE_ACTION, ok())

        await api.actions.resize(9, "LARGE")

        body = sent(fake_api, SERVICE_ACTION)
        assert body["action"] == "changeType"
        assert body["newType"] == "LARGE-2C-4G"
        assert body["region"] == "nbg"
        assert body["providerName"] == "netcup"
        assert body["upgradeCPURAMOnly"] is True

    @pytest.mark.asyncio
    async def test_resize_same_size_is_noop(self, api, fake_api, with_project, catalog_routes):
        fake_api.on(
            SERVICE_DETAILS,
            httpx.Response(200, json={"serviceInfos": [
                {"provider": "netcup", "datacenter": "nbg", "serverType": "LARGE-4C-8G"}
            ]}),
        )

        assert await api.actions.resize(9, "large-4c-8g") is None
        assert not fake_api.calls_to(SERVICE_ACTION)

    @pytest.mark.asyncio
    async def test_resize_downgrade_refused(self, api, fake_api, with_project, catalog_routes):
        fake_api.on(
            SERVICE_DETAILS,
            httpx.Response(200, json={"serviceInfos": [
                {"providerName": "hetzner", "datacenter": "fsn1", "serverType": "LARGE-4C-8G"}
            ]}),
        )

        with pytest.raises(UnsupportedDowngradeError):
            await api.actions.resize(9, "SMALL-1C-1G")
        assert not fake_api.calls_to(SERVICE_ACTION)


# ============================================================================
# Volumes
# ============================================================================


class TestVolumesService:
    """Tests for VolumesService."""

    @pytest.mark.asyncio
    async def test_list(self, api, fake_api, with_project):
        fake_api.on(VOLUMES_LIST, ok(data={"volumes": [{"volumeID": 7, "volumeName": "data"}]}))

        volumes = await api.volumes.list()

        assert volumes == [{"volumeID": 7, "volumeName": "data"}]
        assert sent(fake_api, VOLUMES_LIST)["projectID"] == "100"

    @pytest.mark.asyncio
    async def test_create_uses_deploy_defaults(self, api, fake_api, with_project):
        fake_api.on(VOLUME_CREATE, httpx.Response(200, json={"volumeID": 8}))

        result = await api.volumes.create("data", size=20, server_id=55)

        assert result == {"volumeID": 8}
        body = sent(fake_api, VOLUME_CREATE)
        assert body["providerName"] == "netcup"
        assert body["datacenter"] == "nbg"
        assert body["price"] == "1.00"
        assert body["volume"] == 20
        assert body["blockStorageType"] == "NVME"
        assert body["selectedServerID"] == "55"

    @pytest.mark.asyncio
    async def test_create_refused(self, api, fake_api, with_project):
        fake_api.on(VOLUME_CREATE, httpx.Response(200, json={"status": "KO", "message": "No quota"}))

        with pytest.raises(APIError, match="No quota"):
            await api.volumes.create("data")

    @pytest.mark.asyncio
    async def test_create_requires_name(self, api, with_project):
        with pytest.raises(ElestioError, match="Volume name required"):
            await api.volumes.create("")

    @pytest.mark.asyncio
    async def test_for_service_accepts_list_body(self, api, fake_api):
        fake_api.on(SERVICE_ACTION, httpx.Response(200, json=[{"volumeID": 1}]))

        assert await api.volumes.for_service(9) == [{"volumeID": 1}]
        assert sent(fake_api, SERVICE_ACTION)["action"] == "getServiceVolume"

    @pytest.mark.asyncio
    async def test_resize_minimum(self, api, fake_api):
        with pytest.raises(ElestioError, match="at least 10GB"):
            await api.volumes.resize(9, 7, 5)
        assert not fake_api.calls_to(SERVICE_ACTION)

    @pytest.mark.asyncio
    async def test_resize(self, api, fake_api):
        fake_api.on(SERVICE_ACTION, ok())

        await api.volumes.resize(9, 7, 50)

        body = sent(fake_api, SERVICE_ACTION)
        assert body["action"] == "resizeServiceVolume"
        assert body["volumeID"] == "7"
        assert body["volume"] == 50

    @pytest.mark.asyncio
    async def test_detach_can_delete_volume(self, api, fake_api):
        fake_api.on(SERVICE_ACTION, ok())

        await api.volumes.detach(9, 7, keep=False)

        body = sent(fake_api, SERVICE_ACTION)
        assert body["action"] == "detachServiceVolume"
        assert body["isKeepVolume"] is False


# ============================================================================
# Backups
# ============================================================================


class TestBackupsService:
    """Tests for BackupsService."""

    @pytest.mark.asyncio
    async def test_list_local(self, api, fake_api):
        fake_api.on(TEMPLATE_ACTION, ok(data={"backups": ["/backup/a.tgz"]}))

        assert await api.backups.list_local(9) == ["/backup/a.tgz"]
        body = sent(fake_api, TEMPLATE_ACTION)
        assert body["vmID"] == "9"
        assert body["action"] == "scriptBackupsList"

    @pytest.mark.asyncio
    async def test_list_local_failure_is_empty(self, api, fake_api):
        fake_api.on(TEMPLATE_ACTION, httpx.Response(200, json={"status": "KO"}))

        assert await api.backups.list_local(9) == []

    @pytest.mark.asyncio
    async def test_restore_local_passes_path(self, api, fake_api):
        fake_api.on(TEMPLATE_ACTION, ok())

        await api.backups.restore_local(9, "/backup/a.tgz")

        body = sent(fake_api, TEMPLATE_ACTION)
        assert body["action"] == "scriptRestore"
        assert body["param1"] == "/backup/a.tgz"

    @pytest.mark.asyncio
    async def test_list_remote_not_ok_is_empty(self, api, fake_api):
        fake_api.on(BACKUPS_LIST, httpx.Response(200, json={"status": "KO"}))

        assert await api.backups.list_remote(9) == []
        assert sent(fake_api, BACKUPS_LIST)["serverID"] == "9"

    @pytest.mark.asyncio
    async def test_take_remote_failure(self, api, fake_api):
        fake_api.on(BACKUP_START, httpx.Response(200, json={"status": "KO", "message": "Busy"}))

        with pytest.raises(APIError, match="Busy"):
            await api.backups.take_remote(9)

    @pytest.mark.asyncio
    async def test_setup_auto_defaults(self, api, fake_api):
        fake_api.on(BACKUP_AUTO_SETUP, ok())

        await api.backups.setup_auto(9)

        body = sent(fake_api, BACKUP_AUTO_SETUP)
        assert body["backupPath"] == "/backup/"
        assert body["backupHour"] == "03:00"

    @pytest.mark.asyncio
    async def test_restore_latest_snapshot(self, api, fake_api):
        fake_api.on(SERVICE_ACTION, ok())

        await api.backups.restore_snapshot(9, 0)

        body = sent(fake_api, SERVICE_ACTION)
        assert body["action"] == "restoreSnapshot"
        assert body["snapshotOrderID"] == "0"

    @pytest.mark.asyncio
    async def test_enable_s3(self, api, fake_api):
        fake_api.on(SERVICE_ACTION, ok())

        await api.backups.enable_s3(9, api_key="k", secret_key="s", bucket="b", endpoint="s3.example.com")

        body = sent(fake_api, SERVICE_ACTION)
        assert body["action"] == "enableExternalBackup"
        assert body["bucketName"] == "b"
        assert body["endPoint"] == "s3.example.com"
        assert body["providerType"] == "s3"

    @pytest.mark.asyncio
    async def test_enable_s3_requires_bucket_settings(self, api, fake_api):
        with pytest.raises(ElestioError, match="--bucket"):
            await api.backups.enable_s3(9, api_key="k", secret_key="s")
        assert not fake_api.calls_to(SERVICE_ACTION)


# ============================================================================
# Pipelines
# ============================================================================


class TestPipelinesService:
    """Tests for PipelinesService."""

    @pytest.mark.asyncio
    async def test_targets_accepts_list_body(self, api, fake_api, with_project):
        fake_api.on(CICD_SERVICES, httpx.Response(200, json=[{"vmID": 3}]))

        assert await api.pipelines.targets() == [{"vmID": 3}]

    @pytest.mark.asyncio
    async def test_targets_ko(self, api, fake_api, with_project):
        fake_api.on(CICD_SERVICES, httpx.Response(200, json={"status": "KO", "message": "Denied"}))

        with pytest.raises(APIError, match="Denied"):
            await api.pipelines.targets()

    @pytest.mark.asyncio
    async def test_list(self, api, fake_api, with_project):
        fake_api.on(CICD_PIPELINES, ok(data={"pipelines": [{"id": 4}]}))

        assert await api.pipelines.list(3) == [{"id": 4}]
        body = sent(fake_api, CICD_PIPELINES)
        assert body == {"projectID": "100", "vmID": "3", "jwt": "jwt-1"}

    @pytest.mark.asyncio
    async def test_action_sends_numeric_pipeline_id(self, api, fake_api, with_project):
        fake_api.on(CICD_PIPELINE_ACTION, httpx.Response(200, json={"action": "restartAppStack"}))

        await api.pipelines.restart(3, "4")

        body = sent(fake_api, CICD_PIPELINE_ACTION)
        assert body["pipelineID"] == 4
        assert body["action"] == "restartAppStack"

    @pytest.mark.asyncio
    async def test_action_failure(self, api, fake_api, with_project):
        fake_api.on(CICD_PIPELINE_ACTION, httpx.Response(200, json={"status": "KO"}))

        with pytest.raises(APIError, match='Action "stopAppStack" failed'):
            await api.pipelines.stop(3, 4)

    @pytest.mark.asyncio
    async def test_delete_requires_force(self, api, fake_api, with_project):
        with pytest.raises(ElestioError, match="--force"):
            await api.pipelines.delete(3, 4)
        assert not fake_api.calls_to(CICD_PIPELINE_ACTION)

    @pytest.mark.asyncio
    async def test_add_domain(self, api, fake_api, with_project):
        fake_api.on(CICD_PIPELINE_ACTION, ok())

        await api.pipelines.add_domain(3, 4, "app.example.com")

        body = sent(fake_api, CICD_PIPELINE_ACTION)
        assert body["action"] == "SSLDomainsAdd"
        assert body["domain"] == "app.example.com"

    @pytest.mark.asyncio
    async def test_view_log(self, api, fake_api, with_project):
        fake_api.on(CICD_PIPELINE_LOG, ok(data={"content": "build ok"}))

        assert await api.pipelines.view_log(3, 4, "/logs/1.log") == "build ok"
        assert sent(fake_api, CICD_PIPELINE_LOG)["filepath"] == "/logs/1.log"

    @pytest.mark.asyncio
    async def test_create_accepts_provider_server_id(self, api, fake_api):
        fake_api.on(CICD_CREATE, httpx.Response(200, json={"providerServerID": 77}))

        result = await api.pipelines.create({"pipelineName": "web"})

        assert result["providerServerID"] == 77
        assert sent(fake_api, CICD_CREATE)["pipelineName"] == "web"

    @pytest.mark.asyncio
    async def test_registries_use_get(self, api, fake_api, with_project):
        fake_api.on(CICD_REGISTRIES, ok(data={"registries": [{"identityName": "hub"}]}))

        assert await api.pipelines.registries() == [{"identityName": "hub"}]
        request = fake_api.calls_to(CICD_REGISTRIES)[0]
        assert request.method == "GET"
        assert request.url.params["projectID"] == "100"
