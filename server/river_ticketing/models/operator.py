"""Operator model definition."""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


class OperatorStatus(str, Enum):
    """Operator status enumeration."""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class Operator(Base):
    """A person operationally linked to at most one vessel."""

    __tablename__ = "operators"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    status: Mapped[OperatorStatus] = mapped_column(
        String(20),
        nullable=False,
        default=OperatorStatus.ACTIVE,
        index=True
    )

    assigned_vessel_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("vessels.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    assigned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    def __repr__(self) -> str:
        return (
            f"<Operator(id={self.id}, name='{self.full_name}', status={self.status}, "
            f"vessel={self.assigned_vessel_id})>"
        )
