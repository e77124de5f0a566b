"""Vessel assignment Pydantic schemas."""

from datetime import date

from pydantic import BaseModel, Field, field_validator

from .common import normalize_clock_time


class CreateAssignmentRequest(BaseModel):
    """Request schema for assigning a vessel to a route."""

    route_id: str = Field(..., description="Route to serve")
    vessel_id: str = Field(..., description="Vessel serving the route")
    departure_times: list[str] = Field(..., min_length=1, description="Departure times (HH:MM), in display order")
    operating_days: list[str] = Field(..., min_length=1, description="Weekdays the vessel sails, e.g. LUNES, Miércoles")

    @field_validator("departure_times")
    @classmethod
    def validate_departure_times(cls, v: list[str]) -> list[str]:
        """Normalize times and reject duplicates, keeping configured order."""
        times = [normalize_clock_time(t) for t in v]
        if len(set(times)) != len(times):
            raise ValueError("Departure times must be unique")
        return times


class ListAssignmentsRequest(BaseModel):
    """Request schema for listing vessel assignments."""

    route_id: str | None = Field(None, description="Filter by route ID")
    vessel_id: str | None = Field(None, description="Filter by vessel ID")
    active_only: bool = Field(True, description="Only return active assignments")


class CheckVesselRequest(BaseModel):
    """Request schema for checking whether a vessel can be assigned."""

    vessel_id: str = Field(..., description="Vessel to check")
    exclude_route_id: str | None = Field(None, description="Route being edited, ignored in the report")


class OperatingDayRequest(BaseModel):
    """Request schema for validating a travel date against an assignment."""

    route_id: str = Field(..., description="Route ID")
    vessel_id: str = Field(..., description="Vessel ID")
    travel_date: date = Field(..., description="Travel date (ISO 8601)")


class VesselAssignment(BaseModel):
    """Vessel assignment response schema."""

    id: str = Field(..., description="Unique assignment ID")
    route_id: str = Field(..., description="Route ID")
    vessel_id: str = Field(..., description="Vessel ID")
    departure_times: list[str] = Field(..., description="Departure times (HH:MM)")
    operating_days: list[str] = Field(..., description="Normalized weekday names")
    operating_days_display: list[str] = Field(..., description="Weekday names for display")
    active: bool = Field(..., description="Whether the assignment is in service")

    class Config:
        from_attributes = True


class ListAssignmentsResponse(BaseModel):
    """Response schema for listing vessel assignments."""

    items: list[VesselAssignment] = Field(..., description="Matching assignments")


class VesselCheckResponse(BaseModel):
    """Whether a vessel can take a new route assignment."""

    available: bool = Field(..., description="Whether the vessel can be assigned")
    reason: str | None = Field(None, description="Why the vessel cannot be assigned")
    vessel_name: str | None = Field(None, description="Vessel name")
    assigned_routes: list[str] = Field(default_factory=list, description="Other active routes the vessel serves")
    message: str = Field(..., description="Human-readable summary")


class OperatingDayResponse(BaseModel):
    """Result of validating a travel date against an assignment."""

    valid: bool = Field(..., description="Whether the vessel sails the route on that date")
    weekday: str = Field(..., description="Normalized weekday of the travel date")
    operating_days: list[str] = Field(..., description="Normalized operating weekdays")
    departure_times: list[str] = Field(..., description="Departure times on operating days")
    message: str = Field(..., description="Human-readable summary")
