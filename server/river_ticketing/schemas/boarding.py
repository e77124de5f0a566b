"""Boarding control Pydantic schemas."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from .common import normalize_clock_time


class BoardingStatus(str, Enum):
    """Boarding status enumeration."""
    PENDING = "PENDING"
    BOARDED = "BOARDED"
    NOT_BOARDED = "NOT_BOARDED"


class DepartureBoardingRequest(BaseModel):
    """Request schema for a departure of the operator's vessel."""

    operator_id: str = Field(..., description="Operator running boarding control")
    travel_date: date = Field(..., description="Travel date (ISO 8601)")
    departure_time: str = Field(..., description="Departure time (HH:MM)")

    @field_validator("departure_time")
    @classmethod
    def validate_departure_time(cls, v: str) -> str:
        return normalize_clock_time(v)


class SetBoardingStatusRequest(BaseModel):
    """Request schema for marking a passenger. PENDING clears a previous mark."""

    operator_id: str = Field(..., description="Operator running boarding control")
    record_id: str = Field(..., description="Boarding record to update")
    status: BoardingStatus = Field(..., description="New boarding status")
    notes: str | None = Field(None, max_length=500, description="Operator notes")


class BoardingPassenger(BaseModel):
    """One confirmed sale on the passenger list."""

    record_id: str = Field(..., description="Boarding record ID")
    sale_id: str = Field(..., description="Sale ID")
    sale_number: str = Field(..., description="Human-facing sale number")
    passenger_count: int = Field(..., description="Passengers on the sale")
    client_dni: str = Field(..., description="Client national ID")
    client_name: str = Field(..., description="Client full name")
    client_phone: str = Field("", description="Client phone")
    embarkation_port: str = Field(..., description="Embarkation port")
    status: BoardingStatus = Field(..., description="Boarding status")
    recorded_at: datetime | None = Field(None, description="When the status was last marked")
    notes: str | None = Field(None, description="Operator notes")


class PassengerListResponse(BaseModel):
    """Passenger list of a departure."""

    vessel_id: str = Field(..., description="Operator's vessel")
    vessel_name: str = Field(..., description="Vessel name")
    travel_date: date = Field(..., description="Travel date")
    departure_time: str = Field(..., description="Departure time")
    items: list[BoardingPassenger] = Field(..., description="Confirmed sales, pending first")


class BoardingStats(BaseModel):
    """Boarding progress of a departure."""

    vessel_name: str = Field(..., description="Vessel name")
    capacity_total: int = Field(..., description="Vessel capacity")
    total: int = Field(..., description="Confirmed sales on the departure")
    boarded: int = Field(..., description="Sales marked BOARDED")
    pending: int = Field(..., description="Sales not yet marked")
    not_boarded: int = Field(..., description="Sales marked NOT_BOARDED")
    boarded_passengers: int = Field(..., description="Passengers on BOARDED sales")
    boarded_percent: int = Field(..., ge=0, le=100, description="Share of sales boarded, rounded")
    capacity_available: int = Field(..., description="Capacity minus boarded passengers")
