"""
Tests for idempotent repository provisioning.

Feature: repo-operator
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from repo_operator.exceptions import NotFoundError, ServerError
from repo_operator.provisioning import (
    CONFLICT_STATE,
    CONFLICT_STATUS_CODE,
    OK_STATE,
    OK_STATUS_CODE,
    CleanupReport,
    RepositoryProvisioner,
    local_repository_config,
    virtual_repository_config,
)
from repo_operator.testing import MockRepositoryService
from repo_operator.types.repos import LocalRepositoryConfig, VirtualRepositoryConfig

repo_type_strategy = st.sampled_from(["npm", "pypi", "helm", "gradle", "go"])
name_strategy = st.text(
    alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz0123456789"),
    min_size=1,
    max_size=20,
)


# ============================================================================
# Repository documents
# ============================================================================


class TestLocalRepositoryConfig:
    def test_maven_snapshot(self) -> None:
        config = local_repository_config("app-maven-snapshot", "maven", "team-a")

        assert config.key == "app-maven-snapshot-local"
        assert config.layout_ref == "maven-2-default"
        assert config.handle_snapshots is True
        assert config.handle_releases is False

    def test_maven_release(self) -> None:
        config = local_repository_config("app-maven-release", "maven", "team-a")

        assert config.handle_snapshots is False
        assert config.handle_releases is True

    def test_maven_release_for_name_containing_snapshot(self) -> None:
        config = local_repository_config("ci-snapshot-maven-release", "maven", "team-a")

        assert config.handle_snapshots is False
        assert config.handle_releases is True

    def test_docker_uses_simple_layout(self) -> None:
        config = local_repository_config("app-docker", "docker", "team-a")

        assert config.layout_ref == "simple-default"
        assert config.handle_releases is None
        assert config.xray_index is True

    def test_description_names_namespace(self) -> None:
        config = local_repository_config("app-npm", "npm", "team-a")

        assert config.description == "Local repository for team-a namespace in-house libraries"


@given(name=name_strategy, repo_type=repo_type_strategy)
@settings(max_examples=100)
def test_property_other_types_use_default_layout(name: str, repo_type: str) -> None:
    """Any type other than maven or docker uses the "<type>-default" layout."""
    config = local_repository_config(f"{name}-{repo_type}", repo_type, "ns")

    assert config.layout_ref == f"{repo_type}-default"
    assert config.key == f"{name}-{repo_type}-local"
    assert config.package_type == repo_type


def test_virtual_config_aggregates_remotes_and_local() -> None:
    config = virtual_repository_config(["npmjs", "npm-mirror"], "app-npm", "npm", "team-a")

    assert config.repositories == ["npmjs", "npm-mirror", "app-npm-local"]
    assert config.default_deployment_repo == "app-npm-local"
    assert config.layout_ref == "simple-default"
    assert config.property_sets == ["artifactory"]
    assert config.description == "virtual repository for team-a namespace and required remote libraries"


# ============================================================================
# Ensure-exists
# ============================================================================


class TestEnsure:
    def test_ensure_local_creates_missing(self, mock_service: MockRepositoryService) -> None:
        provisioner = RepositoryProvisioner(mock_service)

        result = provisioner.ensure_local("app-npm", "npm", "team-a")

        assert not result.existed
        assert result.status_code == 201
        assert isinstance(mock_service.repos.store["app-npm-local"], LocalRepositoryConfig)

    def test_ensure_local_skips_existing(self, mock_service: MockRepositoryService) -> None:
        provisioner = RepositoryProvisioner(mock_service)
        provisioner.ensure_local("app-npm", "npm", "team-a")
        mock_service.reset_calls()

        result = provisioner.ensure_local("app-npm", "npm", "team-a")

        assert result.existed
        assert mock_service.mutating_calls() == []

    def test_ensure_virtual_uses_remotes_of_same_type(self, mock_service: MockRepositoryService) -> None:
        mock_service.add_remote("npmjs", "npm")
        mock_service.add_remote("docker-hub", "docker")
        provisioner = RepositoryProvisioner(mock_service)

        provisioner.ensure_virtual("app-npm", "npm", "team-a")

        config = mock_service.repos.store["app-npm"]
        assert isinstance(config, VirtualRepositoryConfig)
        assert config.repositories == ["npmjs", "app-npm-local"]

    def test_fetch_error_propagates_without_create(self, mock_service: MockRepositoryService) -> None:
        mock_service.configure_error("repos.get_local", ServerError("BAD_GATEWAY", "down", 502))
        provisioner = RepositoryProvisioner(mock_service)

        with pytest.raises(ServerError):
            provisioner.ensure_local("app-npm", "npm", "team-a")

        assert not mock_service.was_called("repos.create")

    def test_create_error_propagates(self, mock_service: MockRepositoryService) -> None:
        mock_service.configure_error("repos.create", ServerError("INTERNAL_SERVER_ERROR", "boom", 500))
        provisioner = RepositoryProvisioner(mock_service)

        with pytest.raises(ServerError):
            provisioner.ensure_repositories("app-npm", "npm", "team-a", 0)


class TestEnsureRepositories:
    def test_first_run_is_ok(self, mock_service: MockRepositoryService) -> None:
        result = RepositoryProvisioner(mock_service).ensure_repositories("app-npm", "npm", "team-a", 0)

        assert (result.status_code, result.state) == (OK_STATUS_CODE, OK_STATE)
        assert not result.conflict
        assert mock_service.call_count("repos.create") == 2

    def test_rerun_after_ok_is_ok_and_quiet(self, mock_service: MockRepositoryService) -> None:
        provisioner = RepositoryProvisioner(mock_service)
        provisioner.ensure_repositories("app-npm", "npm", "team-a", 0)
        mock_service.reset_calls()

        result = provisioner.ensure_repositories("app-npm", "npm", "team-a", OK_STATUS_CODE)

        assert result.state == OK_STATE
        assert mock_service.mutating_calls() == []

    def test_foreign_repositories_conflict(self, mock_service: MockRepositoryService) -> None:
        provisioner = RepositoryProvisioner(mock_service)
        provisioner.ensure_repositories("app-npm", "npm", "other-namespace", 0)

        result = provisioner.ensure_repositories("app-npm", "npm", "team-a", 0)

        assert (result.status_code, result.state) == (CONFLICT_STATUS_CODE, CONFLICT_STATE)
        assert result.conflict

    def test_half_existing_pair_is_completed(self, mock_service: MockRepositoryService) -> None:
        provisioner = RepositoryProvisioner(mock_service)
        provisioner.ensure_local("app-npm", "npm", "team-a")

        result = provisioner.ensure_repositories("app-npm", "npm", "team-a", 0)

        assert result.state == OK_STATE
        assert "app-npm" in mock_service.repos.store


def test_create_repository_user(mock_service: MockRepositoryService) -> None:
    password = RepositoryProvisioner(mock_service).create_repository_user("app")

    user = mock_service.users.store["app-repo-user"]
    assert user.password == password
    assert user.email == "app-repo-user@internal.com"
    assert user.realm == "Internal"
    assert user.disable_ui_access is True
    assert len(password) == 8


# ============================================================================
# Cleanup
# ============================================================================


class TestCleanup:
    def test_delete_repositories(self, mock_service: MockRepositoryService) -> None:
        provisioner = RepositoryProvisioner(mock_service)
        provisioner.ensure_repositories("app-npm", "npm", "team-a", 0)

        report = provisioner.delete_repositories("app-npm")

        assert report.ok
        assert report.attempted == ["repository app-npm-local", "repository app-npm"]
        assert mock_service.repos.store == {}

    def test_delete_missing_is_reported_not_raised(self, mock_service: MockRepositoryService) -> None:
        report = RepositoryProvisioner(mock_service).delete_repositories("ghost-npm")

        assert not report.ok
        assert len(report.errors) == 2
        assert all(isinstance(e, NotFoundError) for e in report.errors)

    def test_every_deletion_attempted_after_failure(self, mock_service: MockRepositoryService) -> None:
        mock_service.add_user("app-repo-user")
        mock_service.configure_error("permissions.delete", ServerError("INTERNAL_SERVER_ERROR", "boom", 500))
        provisioner = RepositoryProvisioner(mock_service)

        report = provisioner.delete_permission_target("app-docker-repo-permission")
        report.merge(provisioner.delete_user("app"))

        assert len(report.errors) == 1
        assert "app-repo-user" not in mock_service.users.store

    def test_unexpected_exceptions_are_not_swallowed(self) -> None:
        report = CleanupReport()

        def broken() -> None:
            raise ValueError("bug")

        with pytest.raises(ValueError):
            report.run("something", broken)
