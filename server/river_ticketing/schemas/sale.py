"""Sale-related Pydantic schemas."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from .common import Money, PaginatedResponse, normalize_clock_time


class SaleStatus(str, Enum):
    """Sale status enumeration."""
    CONFIRMED = "CONFIRMED"
    VOIDED = "VOIDED"
    REFUNDED = "REFUNDED"


class PaymentType(str, Enum):
    """Payment type enumeration."""
    UNICO = "UNICO"
    HIBRIDO = "HIBRIDO"


class AnnulmentKind(str, Enum):
    """Annulment kind enumeration."""
    VOID = "VOID"
    REFUND = "REFUND"


class CheckAvailabilityRequest(BaseModel):
    """Request schema for checking seats on a departure instance."""

    route_id: str = Field(..., description="Route ID")
    vessel_id: str = Field(..., description="Vessel ID")
    travel_date: date = Field(..., description="Travel date (ISO 8601)")
    departure_time: str = Field(..., description="Departure time (HH:MM)")
    quantity: int = Field(1, ge=1, le=500, description="Seats wanted")

    @field_validator("departure_time")
    @classmethod
    def validate_departure_time(cls, v: str) -> str:
        return normalize_clock_time(v)


class AvailabilityResponse(BaseModel):
    """Seat availability of a departure instance."""

    capacity_total: int = Field(..., ge=0, description="Vessel capacity")
    sold: int = Field(..., ge=0, description="Seats held by confirmed sales")
    available: int = Field(..., description="Seats left (capacity minus sold)")
    can_sell: bool = Field(..., description="Whether the requested quantity fits")
    message: str = Field(..., description="Human-readable summary")
    operating_days: list[str] = Field(default_factory=list, description="Operating weekdays of the assignment")


class PaymentMethodEntry(BaseModel):
    """One method of a (possibly split) payment."""

    method: str = Field(..., min_length=1, max_length=40, description="Payment method, e.g. EFECTIVO, YAPE")
    amount: int = Field(..., ge=0, description="Amount paid with this method, in minor units")


class ClientData(BaseModel):
    """Client details captured at the point of sale."""

    dni: str = Field(..., min_length=1, max_length=20, description="National ID number")
    first_name: str = Field(..., min_length=1, max_length=120, description="First name")
    last_name: str = Field(..., min_length=1, max_length=120, description="Last name")
    phone: str = Field("", max_length=30, description="Phone number")
    email: str = Field("", max_length=255, description="Email address")
    nationality: str | None = Field(None, max_length=60, description="Nationality (defaults to Peruana)")

    @field_validator("dni", "first_name", "last_name")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field cannot be blank")
        return v


class CreateSaleRequest(BaseModel):
    """Request schema for creating a sale."""

    client: ClientData = Field(..., description="Buyer details")
    route_id: str = Field(..., description="Route ID")
    vessel_id: str = Field(..., description="Vessel ID")
    embarkation_port: str = Field(..., min_length=1, max_length=120, description="Port where passengers board")
    origin_port: str | None = Field(None, max_length=120, description="Override of the route origin")
    destination_port: str | None = Field(None, max_length=120, description="Override of the route destination")
    travel_date: date = Field(..., description="Travel date (ISO 8601)")
    departure_time: str = Field(..., description="Departure time (HH:MM)")
    boarding_time: str = Field(..., description="Boarding time (HH:MM)")
    passenger_count: int = Field(..., ge=1, le=500, description="Number of passengers")
    unit_price: int | None = Field(None, ge=0, description="Per-passenger price in minor units; route price if omitted")
    payment_type: PaymentType = Field(PaymentType.UNICO, description="Single or split payment")
    payment_method: str | None = Field(None, max_length=40, description="Method for a single payment")
    payment_methods: list[PaymentMethodEntry] = Field(default_factory=list, description="Methods for a split payment")
    notes: str | None = Field(None, max_length=2000, description="Free-form notes")

    @field_validator("departure_time", "boarding_time")
    @classmethod
    def validate_clock_time(cls, v: str) -> str:
        return normalize_clock_time(v)


class GetSaleRequest(BaseModel):
    """Request schema for getting a sale by ID or sale number."""

    sale_id: str | None = Field(None, description="Sale ID")
    sale_number: str | None = Field(None, description="Human-facing sale number")


class VoidSaleRequest(BaseModel):
    """Request schema for voiding or refunding a sale."""

    sale_id: str = Field(..., description="Sale to annul")
    kind: AnnulmentKind = Field(AnnulmentKind.VOID, description="Void or refund")
    reason: str = Field(..., max_length=500, description="Why the sale is annulled (at least 3 characters)")
    refund_amount: int | None = Field(None, description="Refunded amount in minor units, for refunds")
    notes: str | None = Field(None, max_length=2000, description="Additional notes")


class SearchSalesRequest(BaseModel):
    """Request schema for searching sales."""

    status: SaleStatus | None = Field(None, description="Filter by status")
    route_id: str | None = Field(None, description="Filter by route ID")
    vessel_id: str | None = Field(None, description="Filter by vessel ID")
    seller_ref: str | None = Field(None, description="Filter by seller")
    date_from: date | None = Field(None, description="Earliest travel date")
    date_to: date | None = Field(None, description="Latest travel date")
    query: str | None = Field(None, max_length=64, description="Sale number or client DNI fragment")
    cursor: str | None = Field(None, description="Pagination cursor")
    limit: int = Field(20, ge=1, le=100, description="Results per page")


class Sale(BaseModel):
    """Sale response schema."""

    id: str = Field(..., description="Unique sale ID")
    sale_number: str = Field(..., description="Human-facing sale number")
    client_id: str = Field(..., description="Buyer ID")
    route_id: str = Field(..., description="Route ID")
    vessel_id: str = Field(..., description="Vessel ID")
    seller_ref: str = Field(..., description="Seller who registered the sale")
    embarkation_port: str = Field(..., description="Boarding port")
    origin_port: str = Field(..., description="Origin port")
    destination_port: str = Field(..., description="Destination port")
    travel_date: date = Field(..., description="Travel date")
    departure_time: str = Field(..., description="Departure time (HH:MM)")
    boarding_time: str = Field(..., description="Boarding time (HH:MM)")
    passenger_count: int = Field(..., ge=1, description="Number of passengers")
    unit_price: Money = Field(..., description="Per-passenger price")
    total: Money = Field(..., description="Sale total")
    payment_type: PaymentType = Field(..., description="Single or split payment")
    payment_methods: list[PaymentMethodEntry] = Field(..., description="Payment breakdown")
    notes: str | None = Field(None, description="Free-form notes")
    status: SaleStatus = Field(..., description="Sale status")
    created_at: datetime = Field(..., description="Sale creation time (ISO 8601)")

    class Config:
        from_attributes = True


class SaleAnnulment(BaseModel):
    """Sale annulment response schema."""

    id: str = Field(..., description="Unique annulment ID")
    sale_id: str = Field(..., description="Annulled sale ID")
    kind: AnnulmentKind = Field(..., description="Void or refund")
    reason: str = Field(..., description="Annulment reason")
    notes: str | None = Field(None, description="Additional notes")
    refund_amount: int | None = Field(None, description="Refunded amount in minor units")
    seats_released: int = Field(..., ge=1, description="Seats returned to the departure")
    actor: str = Field(..., description="Who annulled the sale")

    class Config:
        from_attributes = True


class VoidSaleResponse(BaseModel):
    """Response schema for a void or refund."""

    sale: Sale = Field(..., description="Sale after the transition")
    annulment: SaleAnnulment = Field(..., description="Annulment record")


class SearchSalesResponse(PaginatedResponse):
    """Response schema for sale search."""

    items: list[Sale] = Field(..., description="Matching sales")
