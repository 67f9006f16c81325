"""
Tests for CLI module.
"""

from __future__ import annotations

import functools
from unittest.mock import patch

import httpx
import pytest
from click.testing import CliRunner

from elestio.api.client import ElestioAPI
from elestio.api.config import (
    PROJECTS_LIST,
    SERVICE_ACTION,
    SERVICE_CREATE,
    SERVICE_DETAILS,
    SIZES_LIST,
    TEMPLATES_LIST,
    TEMPLATE_ACTION,
    VOLUMES_LIST,
)
from elestio.cli import main
from elestio.store import ConfigStore, CredentialStore


@pytest.fixture
def runner(reset_sdk_settings):
    return CliRunner()


@pytest.fixture
def fake_client(fake_api, settings):
    """Route the CLI's client through the fake API."""
    factory = functools.partial(ElestioAPI, settings=settings, transport=fake_api.transport)
    with patch("elestio.cli.ElestioAPI", factory):
        yield fake_api


class TestCLIMain:
    """Test main CLI group."""

    def test_help(self, runner):
        """--help shows usage."""
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Elestio CLI" in result.output

    def test_version(self, runner):
        """--version shows version."""
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "version" in result.output

    @pytest.mark.parametrize(
        "command",
        [
            ["deploy", "--help"],
            ["resize", "--help"],
            ["services", "list", "--help"],
            ["config", "set-defaults", "--help"],
            ["volumes", "create", "--help"],
            ["backups", "s3-enable", "--help"],
            ["snapshots", "restore", "--help"],
            ["pipelines", "domains", "--help"],
        ],
    )
    def test_subcommand_help(self, runner, command):
        result = runner.invoke(main, command)
        assert result.exit_code == 0
        assert "Usage" in result.output


class TestCLIAuth:
    """Test login / whoami / auth test."""

    def test_whoami_not_logged_in(self, runner, tmp_path):
        result = runner.invoke(main, ["--config-dir", str(tmp_path), "whoami"])
        assert result.exit_code == 1
        assert "Not logged in" in result.output

    def test_whoami(self, runner, credential_store, config_dir):
        result = runner.invoke(main, ["--config-dir", str(config_dir), "whoami"])
        assert result.exit_code == 0
        assert "dev@example.com" in result.output

    def test_login_requires_options(self, runner):
        result = runner.invoke(main, ["login", "--email", "me@example.com"])
        assert result.exit_code == 2
        assert "--token" in result.output

    def test_login_saves_credentials(self, runner, fake_client, tmp_path):
        config_dir = tmp_path / "cfg"

        result = runner.invoke(
            main,
            ["--config-dir", str(config_dir), "login", "--email", "me@example.com", "--token", "t0k"],
        )

        assert result.exit_code == 0, result.output
        credential = CredentialStore(config_dir).load()
        assert credential.identity == "me@example.com"
        assert ConfigStore(config_dir).load().jwt == "jwt-1"

    def test_login_rejected(self, runner, fake_client, tmp_path):
        fake_client.auth_reply = httpx.Response(200, json={"status": "KO", "message": "Invalid API token"})
        config_dir = tmp_path / "cfg"

        result = runner.invoke(
            main,
            ["--config-dir", str(config_dir), "login", "--email", "me@example.com", "--token", "bad"],
        )

        assert result.exit_code == 1
        assert "Invalid API token" in result.output
        assert CredentialStore(config_dir).load() is None

    def test_auth_test_without_credentials(self, runner, fake_client, tmp_path):
        result = runner.invoke(main, ["--config-dir", str(tmp_path), "auth", "test"])
        assert result.exit_code == 1
        assert "elestio login" in result.output


class TestCLIConfig:
    """Test config commands."""

    def test_set_default_project(self, runner, tmp_path):
        result = runner.invoke(main, ["--config-dir", str(tmp_path), "config", "set-default-project", "4242"])

        assert result.exit_code == 0
        assert ConfigStore(tmp_path).load().default_project == "4242"

    def test_set_defaults(self, runner, tmp_path):
        result = runner.invoke(
            main,
            ["--config-dir", str(tmp_path), "config", "set-defaults", "--provider", "hetzner", "--server-type", "SMALL-1C-2G"],
        )

        assert result.exit_code == 0
        defaults = ConfigStore(tmp_path).load().defaults
        assert defaults.provider == "hetzner"
        assert defaults.server_type == "SMALL-1C-2G"
        assert defaults.datacenter == "nbg"

    def test_show_json(self, runner, credential_store, config_dir):
        result = runner.invoke(main, ["--json", "--config-dir", str(config_dir), "config", "show"])

        assert result.exit_code == 0
        assert '"email": "dev@example.com"' in result.output
        assert "api-token-123" not in result.output


class TestCLICommands:
    """Commands that reach the API."""

    def test_projects_list_json(self, runner, fake_client, credential_store, config_dir):
        fake_client.on(
            PROJECTS_LIST,
            httpx.Response(200, json={"status": "OK", "data": {"projects": [{"projectID": 1, "project_name": "prod"}]}}),
        )

        result = runner.invoke(main, ["--json", "--config-dir", str(config_dir), "projects", "list"])

        assert result.exit_code == 0, result.output
        assert '"project_name": "prod"' in result.output

    def test_services_list_without_project(self, runner, fake_client, credential_store, config_dir):
        result = runner.invoke(main, ["--config-dir", str(config_dir), "services", "list"])

        assert result.exit_code == 1
        assert "Project ID required" in result.output

    def test_deploy_dry_run(self, runner, fake_client, credential_store, config_dir, sample_templates):
        fake_client.on(TEMPLATES_LIST, httpx.Response(200, json={"instances": sample_templates}))

        result = runner.invoke(
            main,
            ["--json", "--config-dir", str(config_dir), "-p", "100", "deploy", "redis", "--name", "cache-1", "--dry-run"],
        )

        assert result.exit_code == 0, result.output
        assert '"serverName": "cache-1"' in result.output
        assert '"projectId": "100"' in result.output

    def test_deploy_reports_started_when_it_cannot_wait(
        self, runner, fake_client, credential_store, config_dir, sample_templates
    ):
        fake_client.on(TEMPLATES_LIST, httpx.Response(200, json={"instances": sample_templates}))
        fake_client.on(SERVICE_CREATE, httpx.Response(200, json={"action": "queued"}))

        result = runner.invoke(
            main, ["--config-dir", str(config_dir), "-p", "100", "deploy", "redis", "--name", "cache-1"]
        )

        assert result.exit_code == 0, result.output
        assert "Deployment started" in result.output
        assert "Deployment complete" not in result.output

    def test_resize_to_current_size_json(
        self, runner, fake_client, credential_store, config_dir, sample_sizes
    ):
        fake_client.on(SIZES_LIST, httpx.Response(200, json={"instances": sample_sizes}))
        fake_client.on(
            SERVICE_DETAILS,
            httpx.Response(200, json={"serviceInfos": [
                {"provider": "netcup", "datacenter": "nbg", "serverType": "LARGE-4C-8G"}
            ]}),
        )

        result = runner.invoke(
            main, ["--json", "--config-dir", str(config_dir), "-p", "100", "resize", "9", "LARGE-4C-8G"]
        )

        assert result.exit_code == 0, result.output
        assert '"status": "unchanged"' in result.output
        assert '"size": "LARGE-4C-8G"' in result.output
        assert not fake_client.calls_to(SERVICE_ACTION)

    def test_delete_requires_force(self, runner, fake_client, credential_store, config_dir):
        result = runner.invoke(main, ["--config-dir", str(config_dir), "-p", "1", "delete-service", "9"])

        assert result.exit_code == 1
        assert "--force" in result.output

    def test_action_rejects_unknown_name(self, runner):
        result = runner.invoke(main, ["action", "9", "explode"])

        assert result.exit_code == 2

    def test_volumes_list_json(self, runner, fake_client, credential_store, config_dir):
        fake_client.on(
            VOLUMES_LIST,
            httpx.Response(200, json={"status": "OK", "data": {"volumes": [{"volumeID": 7, "volumeName": "data"}]}}),
        )

        result = runner.invoke(main, ["--json", "--config-dir", str(config_dir), "-p", "100", "volumes", "list"])

        assert result.exit_code == 0, result.output
        assert '"volumeName": "data"' in result.output

    def test_local_backups_list(self, runner, fake_client, credential_store, config_dir):
        fake_client.on(
            TEMPLATE_ACTION,
            httpx.Response(200, json={"status": "OK", "data": {"backups": ["/backup/2026-10-01.tgz"]}}),
        )

        result = runner.invoke(main, ["--config-dir", str(config_dir), "backups", "list", "9", "--kind", "local"])

        assert result.exit_code == 0, result.output
        assert "/backup/2026-10-01.tgz" in result.output

    def test_pipeline_delete_requires_force(self, runner, fake_client, credential_store, config_dir):
        result = runner.invoke(
            main, ["--config-dir", str(config_dir), "-p", "100", "pipelines", "delete", "3", "4"]
        )

        assert result.exit_code == 1
        assert "--force" in result.output

    def test_pipeline_create_rejects_invalid_json(self, runner, tmp_path):
        config_file = tmp_path / "pipeline.json"
        config_file.write_text("{not json")

        result = runner.invoke(main, ["pipelines", "create", str(config_file)])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.output
