"""Route model definition."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .assignment import VesselAssignment


class Route(Base):
    """A named origin-destination pair with a catalog price."""

    __tablename__ = "routes"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    name: Mapped[str] = mapped_column(String(160), nullable=False, unique=True, index=True)
    origin_port: Mapped[str] = mapped_column(String(120), nullable=False)
    destination_port: Mapped[str] = mapped_column(String(120), nullable=False)

    # Catalog price in minor units (céntimos)
    price_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    price_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="PEN")

    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("price_amount >= 0", name="ck_route_price_amount_non_negative"),
        CheckConstraint("length(price_currency) = 3", name="ck_route_price_currency_length"),
        CheckConstraint("origin_port != destination_port", name="ck_route_ports_differ"),
    )

    assignments: Mapped[list["VesselAssignment"]] = relationship(
        "VesselAssignment",
        back_populates="route",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return (
            f"<Route(id={self.id}, name='{self.name}', "
            f"{self.origin_port} -> {self.destination_port}, active={self.active})>"
        )
