"""Vessel assignment model definition."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, ForeignKey, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .route import Route
    from .vessel import Vessel


class VesselAssignment(Base):
    """
    Binding of a vessel to a route.

    Carries the departure clock times ("HH:MM", in configured order) and the
    weekdays the vessel sails the route. Weekday names are stored normalized
    (uppercase, no diacritics), e.g. "MIERCOLES".
    """

    __tablename__ = "vessel_assignments"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    route_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("routes.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    vessel_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("vessels.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    departure_times: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    operating_days: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("route_id", "vessel_id", name="uq_vessel_assignment_route_vessel"),
    )

    route: Mapped["Route"] = relationship("Route", back_populates="assignments")
    vessel: Mapped["Vessel"] = relationship("Vessel", back_populates="assignments")

    def __repr__(self) -> str:
        return (
            f"<VesselAssignment(id={self.id}, route_id={self.route_id}, vessel_id={self.vessel_id}, "
            f"days={self.operating_days}, times={self.departure_times})>"
        )
