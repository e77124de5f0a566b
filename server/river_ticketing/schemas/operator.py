"""Operator-related Pydantic schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class OperatorStatus(str, Enum):
    """Operator status enumeration."""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class CreateOperatorRequest(BaseModel):
    """Request schema for creating an operator."""

    full_name: str = Field(..., min_length=1, max_length=200, description="Operator full name")
    email: str = Field(..., max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", description="Operator email")
    status: OperatorStatus = Field(OperatorStatus.ACTIVE, description="Initial status")
    vessel_id: str | None = Field(None, description="Vessel to assign on creation")


class VesselOccupancyRequest(BaseModel):
    """Request schema for checking whether a vessel already has an active operator."""

    vessel_id: str = Field(..., description="Vessel to check")
    exclude_operator_id: str | None = Field(None, description="Operator being edited, ignored in the check")


class AssignVesselRequest(BaseModel):
    """Request schema for assigning (or clearing) an operator's vessel."""

    operator_id: str = Field(..., description="Operator to update")
    vessel_id: str | None = Field(None, description="Vessel to assign; null clears the assignment")


class SetOperatorStatusRequest(BaseModel):
    """Request schema for activating or deactivating an operator."""

    operator_id: str = Field(..., description="Operator to update")
    status: OperatorStatus = Field(..., description="New status")


class VesselOccupancy(BaseModel):
    """Advisory result of an occupancy check."""

    occupied: bool = Field(..., description="Whether another active operator claims the vessel")
    operator_id: str | None = Field(None, description="Claiming operator ID")
    operator_name: str | None = Field(None, description="Claiming operator name")
    message: str = Field(..., description="Human-readable summary")


class Operator(BaseModel):
    """Operator response schema."""

    id: str = Field(..., description="Unique operator ID")
    full_name: str = Field(..., description="Operator full name")
    email: str = Field(..., description="Operator email")
    status: OperatorStatus = Field(..., description="Operator status")
    assigned_vessel_id: str | None = Field(None, description="Assigned vessel ID")
    assigned_at: datetime | None = Field(None, description="When the vessel was assigned")

    class Config:
        from_attributes = True
