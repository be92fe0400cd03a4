"""
Permission target synchronization.

Keeps one permission target per Repository granting full access over its
local repositories to every eligible user. Only the set of principal names
is compared with what the service holds; drift in granted actions or in the
repository list is not detected.
"""

from enum import Enum
from typing import TYPE_CHECKING

from repo_operator.exceptions import RepoOperatorError
from repo_operator.logging import get_logger
from repo_operator.naming import permission_target_name
from repo_operator.types.permissions import FULL_ACCESS_ACTIONS, PermissionTarget

if TYPE_CHECKING:
    from repo_operator.service import RepositoryService

logger = get_logger("permissions")


class SyncOutcome(str, Enum):
    SKIPPED = "skipped"  # no eligible users
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


class PermissionSynchronizer:
    """Creates or replaces a Repository's permission target when its members change."""

    def __init__(self, service: "RepositoryService") -> None:
        self.service = service

    def eligible_users(self, candidates: list[str]) -> list[str]:
        """
        Resolve candidate users against the service.

        Administrators and users whose lookup fails are dropped.
        """
        eligible: list[str] = []
        for user in dict.fromkeys(candidates):
            try:
                details = self.service.users.get(user)
            except RepoOperatorError as e:
                logger.error(f"Failed to get user {user} - not adding to permission target: {e}")
                continue
            if details.admin:
                logger.info(f"User {user} is an administrator - not adding to permission target")
                continue
            eligible.append(user)
        return eligible

    def desired_target(
        self, name: str, repo_type: str, users: list[str], repository_keys: list[str]
    ) -> PermissionTarget:
        return PermissionTarget(
            name=permission_target_name(name, repo_type),
            includes_pattern="**",
            excludes_pattern="",
            repositories=list(repository_keys),
            users={user: list(FULL_ACCESS_ACTIONS) for user in users},
        )

    def sync(
        self,
        name: str,
        repo_type: str,
        namespace: str,
        candidate_users: list[str],
        repository_keys: list[str],
    ) -> SyncOutcome:
        """
        Converge the permission target for one Repository.

        Args:
            name: Repository name
            repo_type: Repository type
            namespace: Repository namespace (for logging)
            candidate_users: Users requested on the Repository
            repository_keys: Local repository keys to grant access to

        Returns:
            What was done

        Raises:
            RepoOperatorError: If creating or replacing the target fails
        """
        target_name = permission_target_name(name, repo_type)
        users = self.eligible_users(candidate_users)
        if not users:
            logger.info(f"No users to add - not creating permission target {target_name} in {namespace}")
            return SyncOutcome.SKIPPED

        desired = self.desired_target(name, repo_type, users, repository_keys)

        try:
            existing = self.service.permissions.get(target_name)
        except RepoOperatorError:
            logger.info(f"Permission target {target_name} does not exist - it will be created")
            self.service.permissions.create(desired)
            return SyncOutcome.CREATED

        if existing.principal_names == desired.principal_names:
            logger.info(f"No changes in user list for {target_name} - skip update")
            return SyncOutcome.UNCHANGED

        logger.info(f"Changes in the user list detected - updating permission target {target_name}")
        self.service.permissions.create(desired)
        return SyncOutcome.UPDATED
