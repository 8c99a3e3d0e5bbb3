"""Role models: backing store for permission queries."""

import uuid

from sqlalchemy import JSON, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookit.database import Base, StorageKeyMixin


class Role(StorageKeyMixin, Base):
    """A named set of permissions, e.g. ``{"manage-bookables": ["readAny"]}``."""

    __tablename__ = "roles"

    id: Mapped[str] = mapped_column(String(64), nullable=False)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    permissions: Mapped[dict] = mapped_column(JSON, default=dict)

    assignments: Mapped[list["RoleAssignment"]] = relationship(
        back_populates="role",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    __table_args__ = (UniqueConstraint("tenant_id", "id", name="uq_roles_tenant_id"),)

    def allows(self, resource: str, access_level: str) -> bool:
        return access_level in (self.permissions or {}).get(resource, [])

    def __repr__(self) -> str:
        return f"<Role(id={self.id!r}, tenant={self.tenant_id!r})>"


class RoleAssignment(StorageKeyMixin, Base):
    """Grants a role to a user within one tenant."""

    __tablename__ = "role_assignments"

    role_pk: Mapped[uuid.UUID] = mapped_column(ForeignKey("roles.pk", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)

    role: Mapped["Role"] = relationship(back_populates="assignments", lazy="selectin")

    __table_args__ = (UniqueConstraint("role_pk", "user_id", name="uq_role_assignments_user"),)

    def __repr__(self) -> str:
        return f"<RoleAssignment(user_id={self.user_id!r})>"
