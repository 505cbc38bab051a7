"""
Organization membership model.

Membership rows are created and changed by organization management elsewhere;
this package only reads them to find a user's role in an organization.
"""
from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from orgguard.core.database.base import Base, TimestampMixin, generate_ulid


class OrganizationMember(Base, TimestampMixin):
    """One user's role in one organization (owner, admin, member, ...)."""
    __tablename__ = "organization_members"
    __table_args__ = (
        UniqueConstraint("user_id", "organization_id", name="uq_organization_members_user_org"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    user_id: Mapped[str] = mapped_column(String(26), nullable=False, index=True)
    organization_id: Mapped[str] = mapped_column(String(26), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(50), nullable=False, default="member")

    def __repr__(self) -> str:
        return f"<OrganizationMember(user_id={self.user_id}, org_id={self.organization_id}, role={self.role!r})>"
