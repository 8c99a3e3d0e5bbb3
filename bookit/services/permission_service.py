"""Permission queries backed by roles and role assignments."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookit.models.role import Role, RoleAssignment

logger = logging.getLogger(__name__)

MANAGE_BOOKABLES = "manage-bookables"
MANAGE_BOOKINGS = "manage-bookings"


class PermissionOracle:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def has_permission(
        self,
        user_id: str | None,
        tenant_id: str,
        resource: str,
        access_level: str,
    ) -> bool:
        """Return True if any role the user holds in the tenant grants ``access_level`` on ``resource``."""
        if not user_id:
            return False

        result = await self.db.execute(
            select(Role)
            .join(RoleAssignment, RoleAssignment.role_pk == Role.pk)
            .where(
                RoleAssignment.user_id == user_id,
                RoleAssignment.tenant_id == tenant_id,
                Role.tenant_id == tenant_id,
            )
        )
        return any(role.allows(resource, access_level) for role in result.scalars().all())

    async def users_with_roles(self, tenant_id: str, role_ids: list[str]) -> list[str]:
        """Ids of all users holding at least one of ``role_ids`` in the tenant."""
        if not role_ids:
            return []

        result = await self.db.execute(
            select(RoleAssignment.user_id)
            .join(Role, RoleAssignment.role_pk == Role.pk)
            .where(
                Role.tenant_id == tenant_id,
                Role.id.in_(role_ids),
                RoleAssignment.tenant_id == tenant_id,
            )
            .distinct()
        )
        return list(result.scalars().all())
