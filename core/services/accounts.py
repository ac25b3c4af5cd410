# core/services/accounts.py
import logging
from typing import Any, Dict, List, Optional

from core.errors import NotFound
from core.policy import Operation, Resource
from core.sa.models import AppRole, DEFAULT_ROLE, Profile, UserRole
from core.services.base import BaseService

logger = logging.getLogger(__name__)


def _parse_role(role: str) -> AppRole:
    try:
        return AppRole(role)
    except ValueError:
        raise ValueError(f"Unknown role '{role}'") from None


class AccountService(BaseService):
    """Profiles and role grants.

    ``register`` is the identity provider's sign-up hook. It always grants the
    default student role, so every registered actor holds at least one role.
    """

    def register(self, user_id: str, email: str, full_name: Optional[str] = None) -> Profile:
        """Create the profile and default role for a new identity.
        
        Raises:
            ValueError: If the identity is already registered
        """
        with self.transaction():
            if self.users.get_by_id(user_id) is not None:
                raise ValueError(f"User {user_id} is already registered")
            profile = self.users.create_profile(user_id, email, full_name)
            self.users.add_role(user_id, DEFAULT_ROLE.value)

        logger.info("Registered %s <%s> as %s", user_id, email, DEFAULT_ROLE.value)
        return profile

    def get_profile(self, actor_id: str, user_id: str) -> Profile:
        profile = self.users.get_by_id(user_id)
        if profile is None:
            raise NotFound(f"User {user_id} not found")
        self.authorize(actor_id, Operation.READ, Resource.PROFILE, profile)
        return profile

    def update_profile(self, actor_id: str, user_id: str, changes: Dict[str, Any]) -> Profile:
        with self.transaction():
            profile = self.users.get_by_id(user_id)
            if profile is None:
                raise NotFound(f"User {user_id} not found")
            self.authorize(actor_id, Operation.UPDATE, Resource.PROFILE, profile)
            self.users.update_profile(profile, changes)
        return profile

    def list_users(self, actor_id: str, limit: int = 100, offset: int = 0) -> List[Profile]:
        """Profiles with their roles, for the admin role-management page."""
        self.authorize(actor_id, Operation.READ, Resource.USER_ROLE)
        return self.users.list_profiles(limit=limit, offset=offset)

    def list_roles(self, actor_id: str, user_id: str) -> List[str]:
        self.authorize(actor_id, Operation.READ, Resource.USER_ROLE, {"user_id": user_id})
        return sorted(self.users.get_roles(user_id))

    def grant_role(self, actor_id: str, user_id: str, role: str) -> UserRole:
        """Grant a role; admins only.
        
        Raises:
            Unauthorized: If the caller is not an admin
            ValueError: If the role is unknown or already held
            NotFound: If the user does not exist
        """
        app_role = _parse_role(role)
        with self.transaction():
            self.authorize(actor_id, Operation.CREATE, Resource.USER_ROLE, {"user_id": user_id})
            if self.users.get_by_id(user_id) is None:
                raise NotFound(f"User {user_id} not found")
            if self.users.get_role(user_id, app_role.value) is not None:
                raise ValueError(f"User already has the {app_role.value} role")
            grant = self.users.add_role(user_id, app_role.value)

        logger.info("Granted %s to %s (by %s)", app_role.value, user_id, actor_id)
        return grant

    def revoke_role(self, actor_id: str, user_id: str, role: str) -> None:
        """Revoke a role; admins only."""
        app_role = _parse_role(role)
        with self.transaction():
            self.authorize(actor_id, Operation.DELETE, Resource.USER_ROLE, {"user_id": user_id})
            if not self.users.remove_role(user_id, app_role.value):
                raise NotFound(f"User {user_id} does not have the {app_role.value} role")

        logger.info("Revoked %s from %s (by %s)", app_role.value, user_id, actor_id)
