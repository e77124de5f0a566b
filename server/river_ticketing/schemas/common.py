"""Common Pydantic schemas."""

import re
from typing import List, Optional

from pydantic import BaseModel, Field

_CLOCK_TIME = re.compile(r"^(\d{1,2}):(\d{2})$")


def normalize_clock_time(value: str) -> str:
    """
    Normalize a departure/boarding time to zero-padded ``HH:MM``.

    Raises:
        ValueError: If the value is not a valid 24h clock time
    """
    match = _CLOCK_TIME.match(value.strip())
    if not match:
        raise ValueError(f"'{value}' is not a time in HH:MM format")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"'{value}' is not a valid time of day")
    return f"{hours:02d}:{minutes:02d}"


class Money(BaseModel):
    """Money representation with amount in minor units."""

    amount: int = Field(..., ge=0, description="Amount in minor units (céntimos)")
    currency: str = Field("PEN", min_length=3, max_length=3, pattern=r"^[A-Z]{3}$", description="ISO 4217 currency code")


class Violation(BaseModel):
    """Validation error violation."""

    path: str = Field(..., description="JSON path to the invalid field")
    message: str = Field(..., description="Validation error message")


class Problem(BaseModel):
    """RFC 9457 Problem Details response."""

    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="URI reference for this occurrence")
    code: Optional[str] = Field(None, description="Application-specific error code")
    retryable: Optional[bool] = Field(None, description="Whether the operation can be retried")
    violations: Optional[List[Violation]] = Field(None, description="Validation errors")


class PaginatedResponse(BaseModel):
    """Base class for paginated responses."""

    next_cursor: Optional[str] = Field(None, description="Cursor for next page")
