"""Vessel model definition."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .assignment import VesselAssignment


class VesselStatus(str, Enum):
    """Operational status of a vessel."""
    ACTIVE = "ACTIVE"
    MAINTENANCE = "MAINTENANCE"
    INACTIVE = "INACTIVE"


class Vessel(Base):
    """A boat with a fixed passenger capacity."""

    __tablename__ = "vessels"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    name: Mapped[str] = mapped_column(String(120), nullable=False, unique=True, index=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    vessel_type: Mapped[str] = mapped_column(String(60), nullable=False, default="LANCHA")
    status: Mapped[VesselStatus] = mapped_column(
        String(20),
        nullable=False,
        default=VesselStatus.ACTIVE,
        index=True
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_vessel_capacity_positive"),
        CheckConstraint("length(name) > 0", name="ck_vessel_name_not_empty"),
    )

    assignments: Mapped[list["VesselAssignment"]] = relationship(
        "VesselAssignment",
        back_populates="vessel",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Vessel(id={self.id}, name='{self.name}', capacity={self.capacity}, status={self.status})>"
