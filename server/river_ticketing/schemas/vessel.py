"""Vessel-related Pydantic schemas."""

from enum import Enum

from pydantic import BaseModel, Field


class VesselStatus(str, Enum):
    """Vessel status enumeration."""
    ACTIVE = "ACTIVE"
    MAINTENANCE = "MAINTENANCE"
    INACTIVE = "INACTIVE"


class CreateVesselRequest(BaseModel):
    """Request schema for creating a vessel."""

    name: str = Field(..., min_length=1, max_length=120, description="Vessel name")
    capacity: int = Field(..., ge=1, le=2000, description="Passenger capacity")
    vessel_type: str = Field("LANCHA", min_length=1, max_length=60, description="Vessel type")


class GetVesselRequest(BaseModel):
    """Request schema for getting a vessel."""

    vessel_id: str = Field(..., description="Vessel to retrieve")


class SetVesselStatusRequest(BaseModel):
    """Request schema for changing a vessel's status."""

    vessel_id: str = Field(..., description="Vessel to update")
    status: VesselStatus = Field(..., description="New status")


class Vessel(BaseModel):
    """Vessel response schema."""

    id: str = Field(..., description="Unique vessel ID")
    name: str = Field(..., description="Vessel name")
    capacity: int = Field(..., ge=1, description="Passenger capacity")
    vessel_type: str = Field(..., description="Vessel type")
    status: VesselStatus = Field(..., description="Operational status")

    class Config:
        from_attributes = True
