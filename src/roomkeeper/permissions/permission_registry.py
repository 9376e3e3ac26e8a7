"""
Owner and moderator membership, and role resolution derived from it.

Persisted as the ``roles`` document: ``{"owners": [ids], "mods": [ids]}``.
Promoting a user to owner removes them from the mod list so the two sets stay
disjoint; every mutation is flushed to the store before returning.
"""

from __future__ import annotations

from typing import List

from roomkeeper.datatypes.permission_datatypes import Role, RoleChange
from roomkeeper.storage.json_store import JsonStore
from roomkeeper.util.logger import get_logger

logger = get_logger("permission_registry")

ROLES_DOCUMENT = "roles"


class PermissionRegistry:
    """
    Role lookups and role mutations for room users.

    Attributes:
        owners (List[str]): User ids holding the owner role, in grant order.
        mods (List[str]): User ids holding the mod role, in grant order.
    """

    def __init__(self, store: JsonStore) -> None:
        self.store = store
        self.owners: List[str] = []
        self.mods: List[str] = []

    def load(self) -> None:
        """Load the roles document, writing back defaults for missing keys."""
        data = self.store.load(ROLES_DOCUMENT)
        self.owners = [str(uid) for uid in data.get("owners", []) if uid]
        self.mods = [str(uid) for uid in data.get("mods", []) if uid and str(uid) not in self.owners]
        if "owners" not in data or "mods" not in data:
            self.save()
        logger.info("[PERMISSIONS] Loaded %d owners and %d mods", len(self.owners), len(self.mods))

    def save(self) -> None:
        self.store.save(ROLES_DOCUMENT, {"owners": list(self.owners), "mods": list(self.mods)})

    # ========== Queries ==========

    def role_of(self, user_id: str) -> Role:
        if user_id in self.owners:
            return Role.OWNER
        if user_id in self.mods:
            return Role.MOD
        return Role.BASIC

    def is_at_least(self, user_id: str, role: Role) -> bool:
        """Basic is always satisfied; mod accepts mod or owner; owner only owner."""
        return self.role_of(user_id) >= role

    def is_protected(self, user_id: str) -> bool:
        """Mods and owners are shielded from punitive commands."""
        return self.role_of(user_id) >= Role.MOD

    # ========== Mutations ==========

    def promote(self, user_id: str) -> RoleChange:
        """Grant the mod role. Owners are left untouched."""
        if user_id in self.owners:
            return RoleChange.PROTECTED
        if user_id in self.mods:
            return RoleChange.ALREADY
        self.mods.append(user_id)
        self.save()
        logger.info("[PERMISSIONS] %s promoted to mod", user_id)
        return RoleChange.CHANGED

    def demote(self, user_id: str) -> RoleChange:
        """Remove the mod role. Owners cannot be demoted this way."""
        if user_id in self.owners:
            return RoleChange.PROTECTED
        if user_id not in self.mods:
            return RoleChange.NOT_HELD
        self.mods.remove(user_id)
        self.save()
        logger.info("[PERMISSIONS] %s removed from mods", user_id)
        return RoleChange.CHANGED

    def grant_owner(self, user_id: str) -> RoleChange:
        """Grant the owner role, dropping the user from the mod list."""
        if user_id in self.owners:
            return RoleChange.ALREADY
        self.owners.append(user_id)
        if user_id in self.mods:
            self.mods.remove(user_id)
        self.save()
        logger.info("[PERMISSIONS] %s granted owner", user_id)
        return RoleChange.CHANGED

    def revoke_owner(self, actor_id: str, user_id: str) -> RoleChange:
        """Revoke the owner role. An actor can never revoke themselves."""
        if actor_id == user_id:
            return RoleChange.SELF
        if user_id not in self.owners:
            return RoleChange.NOT_HELD
        self.owners.remove(user_id)
        self.save()
        logger.info("[PERMISSIONS] %s revoked owner from %s", actor_id, user_id)
        return RoleChange.CHANGED
