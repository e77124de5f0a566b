"""Sale and sale annulment model definitions."""

from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .client import Client
    from .route import Route
    from .vessel import Vessel


class SaleStatus(str, Enum):
    """Sale status enumeration."""
    CONFIRMED = "CONFIRMED"
    VOIDED = "VOIDED"
    REFUNDED = "REFUNDED"


class PaymentType(str, Enum):
    """How the sale total was paid."""
    UNICO = "UNICO"
    HIBRIDO = "HIBRIDO"


class AnnulmentKind(str, Enum):
    """Kind of annulment applied to a confirmed sale."""
    VOID = "VOID"
    REFUND = "REFUND"


class Sale(Base):
    """
    A ticket purchase for one departure instance.

    The departure instance is the (route_id, vessel_id, travel_date,
    departure_time) tuple. Only CONFIRMED sales count against capacity.
    """

    __tablename__ = "sales"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    sale_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)

    client_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("clients.id"),
        nullable=False,
        index=True
    )
    route_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("routes.id"),
        nullable=False
    )
    vessel_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("vessels.id"),
        nullable=False
    )
    seller_ref: Mapped[str] = mapped_column(String(128), nullable=False)

    embarkation_port: Mapped[str] = mapped_column(String(120), nullable=False)
    origin_port: Mapped[str] = mapped_column(String(120), nullable=False)
    destination_port: Mapped[str] = mapped_column(String(120), nullable=False)

    travel_date: Mapped[date] = mapped_column(Date, nullable=False)
    departure_time: Mapped[str] = mapped_column(String(5), nullable=False)
    boarding_time: Mapped[str] = mapped_column(String(5), nullable=False)

    passenger_count: Mapped[int] = mapped_column(Integer, nullable=False)
    # Amounts in minor units
    unit_price_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="PEN")

    payment_type: Mapped[PaymentType] = mapped_column(String(10), nullable=False)
    payment_methods: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[SaleStatus] = mapped_column(
        String(20),
        nullable=False,
        default=SaleStatus.CONFIRMED,
        index=True
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("passenger_count > 0", name="ck_sale_passenger_count_positive"),
        CheckConstraint("unit_price_amount >= 0", name="ck_sale_unit_price_non_negative"),
        CheckConstraint("total_amount = unit_price_amount * passenger_count", name="ck_sale_total_matches"),
        Index("ix_sales_departure_instance", "route_id", "vessel_id", "travel_date", "departure_time"),
    )

    client: Mapped["Client"] = relationship("Client")
    route: Mapped["Route"] = relationship("Route")
    vessel: Mapped["Vessel"] = relationship("Vessel")

    def __repr__(self) -> str:
        return (
            f"<Sale(number='{self.sale_number}', route_id={self.route_id}, vessel_id={self.vessel_id}, "
            f"date={self.travel_date}, time={self.departure_time}, seats={self.passenger_count}, "
            f"status={self.status})>"
        )


class SaleAnnulment(Base):
    """Record of a void or refund applied to a sale."""

    __tablename__ = "sale_annulments"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    sale_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("sales.id", ondelete="CASCADE"),
        nullable=False,
        unique=True
    )

    kind: Mapped[AnnulmentKind] = mapped_column(String(10), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    refund_amount: Mapped[int | None] = mapped_column(Integer, nullable=True)
    seats_released: Mapped[int] = mapped_column(Integer, nullable=False)
    actor: Mapped[str] = mapped_column(String(128), nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint("seats_released > 0", name="ck_annulment_seats_released_positive"),
        CheckConstraint(
            "refund_amount IS NULL OR refund_amount > 0",
            name="ck_annulment_refund_amount_positive"
        ),
    )

    sale: Mapped["Sale"] = relationship("Sale")

    def __repr__(self) -> str:
        return f"<SaleAnnulment(sale_id={self.sale_id}, kind={self.kind}, seats={self.seats_released})>"
