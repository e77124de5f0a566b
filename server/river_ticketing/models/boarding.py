"""Boarding record model definition."""

from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Date, DateTime, ForeignKey, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .sale import Sale


class BoardingStatus(str, Enum):
    """Boarding status of a sale's passengers."""
    PENDING = "PENDING"
    BOARDED = "BOARDED"
    NOT_BOARDED = "NOT_BOARDED"


class BoardingRecord(Base):
    """
    Boarding control entry for one confirmed sale.

    Created as PENDING the first time the departure's passenger list is
    opened, then marked by the operator of the vessel.
    """

    __tablename__ = "boarding_records"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    sale_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("sales.id", ondelete="CASCADE"),
        nullable=False,
        unique=True
    )
    operator_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("operators.id", ondelete="SET NULL"),
        nullable=True
    )
    vessel_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("vessels.id"),
        nullable=False
    )
    route_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("routes.id"),
        nullable=False
    )

    travel_date: Mapped[date] = mapped_column(Date, nullable=False)
    departure_time: Mapped[str] = mapped_column(String(5), nullable=False)

    status: Mapped[BoardingStatus] = mapped_column(
        String(20),
        nullable=False,
        default=BoardingStatus.PENDING,
        index=True
    )
    recorded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_boarding_records_departure", "vessel_id", "travel_date", "departure_time"),
    )

    sale: Mapped["Sale"] = relationship("Sale")

    def __repr__(self) -> str:
        return f"<BoardingRecord(sale_id={self.sale_id}, status={self.status})>"
