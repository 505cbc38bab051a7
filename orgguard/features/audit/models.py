"""
Audit trail model: structured before/after record of resource mutations.
"""
from sqlalchemy import String, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from orgguard.core.database.base import Base, CreatedAtMixin, generate_ulid


class AuditTrail(Base, CreatedAtMixin):
    """
    Compliance record of one create/update/delete.

    Tracks who changed what, from where, and the snapshots either side of the
    change (`changes` holds JSON text `{"before": ..., "after": ...}`).
    Rows are inserted once and never updated.
    """
    __tablename__ = "audit_trails"
    __table_args__ = (
        Index("ix_audit_trails_resource", "resource_type", "resource_id"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    # Actor and context
    user_id: Mapped[str] = mapped_column(String(26), nullable=False, index=True)
    organization_id: Mapped[str | None] = mapped_column(String(26), nullable=True, index=True)

    # Mutation
    action: Mapped[str] = mapped_column(String(10), nullable=False)
    resource_type: Mapped[str] = mapped_column(String(50), nullable=False)
    resource_id: Mapped[str] = mapped_column(String(64), nullable=False)
    changes: Mapped[str | None] = mapped_column(Text, nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Client
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<AuditTrail(id={self.id}, action={self.action}, resource={self.resource_type}:{self.resource_id})>"
