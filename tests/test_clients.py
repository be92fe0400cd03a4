"""
Tests for the repository service resource clients.

Feature: repo-operator
"""

from unittest.mock import MagicMock

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from repo_operator.clients.permissions import PermissionsClient
from repo_operator.clients.repos import ReposClient
from repo_operator.clients.users import UsersClient, generate_random_password
from repo_operator.exceptions import NotFoundError
from repo_operator.transport import APIResponse, HTTPTransport
from repo_operator.types.permissions import PermissionTarget
from repo_operator.types.repos import (
    LOCAL_REPO_MIME_TYPE,
    VIRTUAL_REPO_MIME_TYPE,
    LocalRepositoryConfig,
    RemoteRepositoryConfig,
    VirtualRepositoryConfig,
    parse_repository_config,
)
from repo_operator.types.users import UserDetails


def make_transport(response: APIResponse) -> MagicMock:
    transport = MagicMock(spec=HTTPTransport)
    transport.request.return_value = response
    return transport


# ============================================================================
# Repositories
# ============================================================================


class TestReposClient:
    def test_get_local_parses_config(self) -> None:
        transport = make_transport(APIResponse(200, "OK", {
            "key": "app-docker-local",
            "rclass": "local",
            "packageType": "docker",
            "repoLayoutRef": "simple-default",
            "xrayIndex": True,
        }))

        config = ReposClient(transport).get_local("app-docker-local")

        transport.request.assert_called_once_with("GET", "/api/repositories/app-docker-local")
        assert config.key == "app-docker-local"
        assert config.package_type == "docker"
        assert config.layout_ref == "simple-default"
        assert config.xray_index is True

    def test_get_local_soft_400_has_empty_key(self) -> None:
        transport = make_transport(APIResponse(400, "Bad Request", "Bad request"))

        config = ReposClient(transport).get_local("missing-local")

        assert config.key == ""

    def test_get_virtual_parses_repositories(self) -> None:
        transport = make_transport(APIResponse(200, "OK", {
            "key": "app-docker",
            "rclass": "virtual",
            "repositories": ["docker-hub", "app-docker-local"],
            "defaultDeploymentRepo": "app-docker-local",
        }))

        config = ReposClient(transport).get_virtual("app-docker")

        assert config.repositories == ["docker-hub", "app-docker-local"]
        assert config.default_deployment_repo == "app-docker-local"

    def test_list_remote_filters_by_package_type(self) -> None:
        transport = make_transport(APIResponse(200, "OK", [
            {"key": "maven-central", "type": "REMOTE", "url": "https://repo1.maven.org/maven2", "packageType": "Maven"},
        ]))

        remotes = ReposClient(transport).list_remote("maven")

        transport.request.assert_called_once_with(
            "GET", "/api/repositories", params={"type": "remote", "packageType": "maven"}
        )
        assert [r.key for r in remotes] == ["maven-central"]
        assert remotes[0].url == "https://repo1.maven.org/maven2"

    def test_create_local_uses_local_mime_type(self) -> None:
        transport = make_transport(APIResponse(200, "OK"))
        config = LocalRepositoryConfig(key="app-npm-local", package_type="npm", xray_index=True)

        ReposClient(transport).create("app-npm-local", config)

        transport.request.assert_called_once_with(
            "PUT",
            "/api/repositories/app-npm-local",
            body={"key": "app-npm-local", "rclass": "local", "packageType": "npm", "xrayIndex": True},
            content_type=LOCAL_REPO_MIME_TYPE,
        )

    def test_create_virtual_always_sends_repositories(self) -> None:
        transport = make_transport(APIResponse(200, "OK"))
        config = VirtualRepositoryConfig(key="app-npm", package_type="npm")

        ReposClient(transport).create("app-npm", config)

        _, kwargs = transport.request.call_args
        assert kwargs["body"]["repositories"] == []
        assert kwargs["body"]["rclass"] == "virtual"
        assert kwargs["content_type"] == VIRTUAL_REPO_MIME_TYPE

    def test_delete(self) -> None:
        transport = make_transport(APIResponse(200, "OK"))

        ReposClient(transport).delete("app-npm")

        transport.request.assert_called_once_with("DELETE", "/api/repositories/app-npm")


# ============================================================================
# Users
# ============================================================================


class TestUsersClient:
    def test_get_parses_user(self) -> None:
        transport = make_transport(APIResponse(200, "OK", {
            "name": "alice",
            "email": "alice@example.com",
            "admin": True,
            "realm": "internal",
            "groups": ["readers"],
        }))

        user = UsersClient(transport).get("alice")

        transport.request.assert_called_once_with("GET", "/api/security/users/alice")
        assert user.name == "alice"
        assert user.admin is True
        assert user.groups == ["readers"]

    def test_get_soft_400_raises_not_found(self) -> None:
        transport = make_transport(APIResponse(400, "Bad Request"))

        with pytest.raises(NotFoundError):
            UsersClient(transport).get("ghost")

    def test_create_generates_password(self) -> None:
        transport = make_transport(APIResponse(201, "Created"))
        details = UserDetails(name="app-repo-user", email="app-repo-user@internal.com", password="")

        password, response = UsersClient(transport).create(details)

        assert len(password) == 8
        assert response.status_code == 201
        _, kwargs = transport.request.call_args
        assert kwargs["body"]["password"] == password
        assert kwargs["body"]["name"] == "app-repo-user"

    def test_create_keeps_given_password(self) -> None:
        transport = make_transport(APIResponse(201, "Created"))
        details = UserDetails(name="bob", email="bob@example.com", password="s3cret!")

        password, _ = UsersClient(transport).create(details)

        assert password == "s3cret!"

    def test_delete(self) -> None:
        transport = make_transport(APIResponse(200, "OK"))

        UsersClient(transport).delete("bob")

        transport.request.assert_called_once_with("DELETE", "/api/security/users/bob")


@given(length=st.integers(min_value=2, max_value=64))
@settings(max_examples=100)
def test_property_generated_password_has_digit_and_special(length: int) -> None:
    """Every generated password has the requested length, a digit and a special character."""
    password = generate_random_password(length)

    assert len(password) == length
    assert any(c.isdigit() for c in password)
    assert any(c in "~=+%^*/()[]{}/!@#$?|" for c in password)


# ============================================================================
# Permission targets
# ============================================================================


class TestPermissionsClient:
    def test_get_parses_principals(self) -> None:
        transport = make_transport(APIResponse(200, "OK", {
            "name": "app-docker-repo-permission",
            "includesPattern": "**",
            "repositories": ["app-docker-local"],
            "principals": {"users": {"bob": ["r"], "alice": ["r", "w"]}, "groups": {}},
        }))

        target = PermissionsClient(transport).get("app-docker-repo-permission")

        transport.request.assert_called_once_with(
            "GET", "/api/security/permissions/app-docker-repo-permission"
        )
        assert target.principal_names == ["alice", "bob"]
        assert target.repositories == ["app-docker-local"]

    def test_get_soft_400_raises_not_found(self) -> None:
        transport = make_transport(APIResponse(400, "Bad Request"))

        with pytest.raises(NotFoundError):
            PermissionsClient(transport).get("missing")

    def test_create_sends_principals(self) -> None:
        transport = make_transport(APIResponse(201, "Created"))
        target = PermissionTarget(
            name="app-npm-repo-permission",
            repositories=["app-npm-local"],
            users={"alice": ["r", "d", "w", "n", "m"]},
        )

        PermissionsClient(transport).create(target)

        transport.request.assert_called_once_with(
            "PUT",
            "/api/security/permissions/app-npm-repo-permission",
            body={
                "name": "app-npm-repo-permission",
                "includesPattern": "**",
                "excludesPattern": "",
                "repositories": ["app-npm-local"],
                "principals": {"users": {"alice": ["r", "d", "w", "n", "m"]}, "groups": {}},
            },
        )

    def test_delete(self) -> None:
        transport = make_transport(APIResponse(200, "OK"))

        PermissionsClient(transport).delete("app-npm-repo-permission")

        transport.request.assert_called_once_with(
            "DELETE", "/api/security/permissions/app-npm-repo-permission"
        )


def test_parse_repository_config_dispatches_on_rclass() -> None:
    config = parse_repository_config({"key": "npmjs", "rclass": "remote", "url": "https://registry.npmjs.org"})

    assert isinstance(config, RemoteRepositoryConfig)
    assert config.url == "https://registry.npmjs.org"

    with pytest.raises(ValueError):
        parse_repository_config({"key": "x", "rclass": "federated"})
