"""
Activity log model: free-form, append-only trace of user actions.
"""
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from orgguard.core.database.base import Base, CreatedAtMixin, generate_ulid


class ActivityLog(Base, CreatedAtMixin):
    """
    One action performed by a user, optionally within an organization.

    `metadata` holds JSON text. Rows are inserted once and never updated.
    """
    __tablename__ = "activity_logs"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    # Actor and context
    user_id: Mapped[str] = mapped_column(String(26), nullable=False, index=True)
    organization_id: Mapped[str | None] = mapped_column(String(26), nullable=True, index=True)

    # Action details
    action: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    resource_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    resource_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    metadata_: Mapped[str | None] = mapped_column("metadata", Text, nullable=True)

    # Client
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<ActivityLog(id={self.id}, user_id={self.user_id}, action={self.action})>"
