"""
Permission and RolePermission models for organization-scoped RBAC.

A Permission is a named `resource.action` pair. A RolePermission states that a
membership role may perform a permission at a scope: a specific organization,
or global when `organization_id` is NULL. NULL is the only encoding of global
scope; see `normalize_scope`.
"""
from typing import Optional
from sqlalchemy import String, ForeignKey, Text, Index, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from orgguard.core.database.base import Base, TimestampMixin, generate_ulid


GLOBAL_SCOPE_ALIASES = ("", "global")


def normalize_scope(organization_id: Optional[str]) -> Optional[str]:
    """Map every spelling of "global" to None; pass organization ids through."""
    if organization_id is None or organization_id in GLOBAL_SCOPE_ALIASES:
        return None
    return organization_id


class Permission(Base, TimestampMixin):
    """
    Permission model defining one action on one resource.

    Examples:
    - name="organization.update", resource="organization", action="update"
    - name="member.manage", resource="member", action="manage" (wildcard)
    """
    __tablename__ = "permissions"

    # Primary key using ULID
    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    # Permission definition
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    resource: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Permission(id={self.id}, name={self.name!r})>"


class RolePermission(Base, TimestampMixin):
    """
    Grant of a permission to a membership role at a scope.

    Unique per (role, permission_id, scope). The partial index covers global
    rows, since SQL treats NULLs as distinct in an ordinary unique key.
    """
    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint("role", "permission_id", "organization_id", name="uq_role_permissions_scoped"),
        Index(
            "uq_role_permissions_global",
            "role",
            "permission_id",
            unique=True,
            sqlite_where=text("organization_id IS NULL"),
            postgresql_where=text("organization_id IS NULL"),
        ),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    role: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    permission_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("permissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    # NULL = global scope
    organization_id: Mapped[str | None] = mapped_column(String(26), nullable=True, index=True)

    def __repr__(self) -> str:
        scope = self.organization_id or "global"
        return f"<RolePermission(role={self.role!r}, permission_id={self.permission_id}, scope={scope})>"
