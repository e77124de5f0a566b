"""Custom exceptions following RFC 9457 Problem Details for HTTP APIs."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

PROBLEM_BASE_URI = "https://river-ticketing.example/problems"


def _format_money(amount: int) -> str:
    """Render minor units as a sol amount, e.g. 2550 -> 'S/ 25.50'."""
    return f"S/ {amount / 100:.2f}"


class ProblemDetailsException(HTTPException):
    """
    Base exception class following RFC 9457 Problem Details for HTTP APIs.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: str | None = None,
        type_uri: str | None = None,
        instance: str | None = None,
        extensions: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: HTTP status code
            title: Short, human-readable summary of the problem type
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            extensions: Additional problem-specific information
            headers: HTTP headers to include in response
        """
        self.title = title
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        self.problem_details: dict[str, Any] = {
            "type": self.type_uri,
            "title": self.title,
            "status": status_code,
        }
        if detail:
            self.problem_details["detail"] = detail
        if instance:
            self.problem_details["instance"] = instance
        self.problem_details.update(self.extensions)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(ProblemDetailsException):
    """Malformed or inconsistent input that the caller must correct."""

    def __init__(
        self,
        detail: str = "The request data failed validation",
        errors: dict[str, Any] | None = None,
        instance: str | None = None,
        extensions: dict[str, Any] | None = None,
    ):
        extensions = dict(extensions or {})
        extensions.setdefault("code", "VALIDATION_ERROR")
        if errors:
            extensions["errors"] = errors

        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/validation-error",
            instance=instance,
            extensions=extensions,
        )


class NotFoundError(ProblemDetailsException):
    """Exception for resource not found errors."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: str | None = None,
        detail: str | None = None,
        instance: str | None = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions = {"code": "NOT_FOUND", "resource_type": resource_type}
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/resource-not-found",
            instance=instance,
            extensions=extensions,
        )


class ConflictError(ProblemDetailsException):
    """Exception for resource conflict errors."""

    def __init__(
        self,
        detail: str = "The request conflicts with the current state of the resource",
        conflicting_resource: dict[str, Any] | None = None,
        instance: str | None = None,
    ):
        extensions: dict[str, Any] = {"code": "CONFLICT"}
        if conflicting_resource:
            extensions["conflicting_resource"] = conflicting_resource

        super().__init__(
            status_code=409,
            title="Resource Conflict",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/resource-conflict",
            instance=instance,
            extensions=extensions,
        )


# Business logic exceptions

class PaymentMismatchError(ValidationError):
    """Split payment amounts do not add up to the sale total."""

    def __init__(self, declared_total: int, expected_total: int):
        difference = declared_total - expected_total
        super().__init__(
            detail=(
                f"The payment methods total ({_format_money(declared_total)}) does not match "
                f"the sale total ({_format_money(expected_total)})"
            ),
            extensions={
                "code": "PAYMENT_MISMATCH",
                "declared_total": declared_total,
                "expected_total": expected_total,
                "difference": difference,
            },
        )
        self.declared_total = declared_total
        self.expected_total = expected_total


class CapacityExceededError(ProblemDetailsException):
    """Requested seats exceed what is left on a departure."""

    def __init__(self, available: int, requested: int, capacity_total: int):
        available_now = max(available, 0)
        super().__init__(
            status_code=409,
            title="Capacity Exceeded",
            detail=f"Only {available_now} seat(s) available, {requested} requested",
            type_uri=f"{PROBLEM_BASE_URI}/capacity-exceeded",
            extensions={
                "code": "CAPACITY_EXCEEDED",
                "retryable": False,
                "available": available_now,
                "requested": requested,
                "capacity_total": capacity_total,
            },
        )
        self.available = available_now
        self.requested = requested


class ScheduleMismatchError(ProblemDetailsException):
    """Travel date or time does not match the vessel assignment's schedule."""

    def __init__(
        self,
        detail: str,
        operating_days: list[str] | None = None,
        departure_times: list[str] | None = None,
    ):
        super().__init__(
            status_code=422,
            title="Schedule Mismatch",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/schedule-mismatch",
            extensions={
                "code": "SCHEDULE_MISMATCH",
                "operating_days": list(operating_days or []),
                "departure_times": list(departure_times or []),
            },
        )
        self.operating_days = list(operating_days or [])
        self.departure_times = list(departure_times or [])


class OperatorVesselConflictError(ConflictError):
    """Vessel is already claimed by another active operator."""

    def __init__(self, vessel_id: str, operator_id: str, operator_name: str | None = None):
        holder = f"operator '{operator_name}'" if operator_name else f"operator {operator_id}"
        super().__init__(
            detail=f"Vessel {vessel_id} already has an active operator assigned ({holder})",
            conflicting_resource={"vessel_id": vessel_id, "operator_id": operator_id},
        )
        self.problem_details.update({
            "code": "VESSEL_OCCUPIED",
            "retryable": False,
            "vessel_id": vessel_id,
            "operator_id": operator_id,
        })


class OperatorNotOnDutyError(ProblemDetailsException):
    """Operator cannot run boarding control for the requested vessel."""

    def __init__(self, detail: str, operator_id: str):
        super().__init__(
            status_code=403,
            title="Operator Not On Duty",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/operator-not-on-duty",
            extensions={"code": "OPERATOR_NOT_ON_DUTY", "operator_id": operator_id},
        )


class InvalidSaleTransitionError(ConflictError):
    """Sale is not in a state that allows the requested transition."""

    def __init__(self, sale_number: str, current_status: str, target_status: str):
        super().__init__(
            detail=f"Sale {sale_number} cannot move from {current_status} to {target_status}"
        )
        self.problem_details.update({
            "code": "INVALID_SALE_TRANSITION",
            "retryable": False,
            "current_status": current_status,
        })


class SaleNumberConflictError(ConflictError):
    """Generated sale number collided with an existing one."""

    def __init__(self, sale_number: str):
        super().__init__(
            detail=f"Sale number {sale_number} is already taken; the sale was not recorded"
        )
        self.problem_details.update({
            "code": "SALE_NUMBER_CONFLICT",
            "retryable": True,
            "sale_number": sale_number,
        })


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """
    Exception handler for Problem Details exceptions.

    Args:
        request: FastAPI request object
        exc: Problem Details exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.problem_details,
        headers=exc.headers,
        media_type="application/problem+json",
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render body/query validation failures as a 422 problem with violations."""
    violations = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={
            "type": f"{PROBLEM_BASE_URI}/request-validation",
            "title": "Request Validation Failed",
            "status": 422,
            "detail": "The request body failed validation",
            "code": "REQUEST_VALIDATION",
            "violations": violations,
        },
        media_type="application/problem+json",
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic exception handler that converts unhandled exceptions to Problem Details format.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    error_id = str(uuid.uuid4())
    logger.error(
        "Unhandled exception",
        extra={"error_id": error_id, "path": request.url.path},
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content={
            "type": f"{PROBLEM_BASE_URI}/internal-server-error",
            "title": "Internal Server Error",
            "status": 500,
            "detail": "An unexpected error occurred while processing the request",
            "instance": str(request.url),
            "error_id": error_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        media_type="application/problem+json",
    )


def parse_uuid(value: str, field: str) -> UUID:
    """Parse an identifier from a request body, rejecting malformed values."""
    try:
        return UUID(str(value))
    except (ValueError, TypeError):
        raise ValidationError(
            detail=f"'{value}' is not a valid identifier",
            errors={field: "must be a UUID"},
        )
