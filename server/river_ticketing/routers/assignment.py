"""Vessel assignment router: which vessel sails which route, and when."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.exceptions import ProblemDetailsException, parse_uuid
from ..schemas.assignment import (
    CheckVesselRequest,
    CreateAssignmentRequest,
    ListAssignmentsRequest,
    ListAssignmentsResponse,
    OperatingDayRequest,
    OperatingDayResponse,
    VesselAssignment,
    VesselCheckResponse,
)
from ..services.assignment_service import AssignmentService
from ..services.schedule import departure_times_for, display_weekday

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/assignment", tags=["assignment"])


def _convert_assignment_to_schema(assignment_model) -> VesselAssignment:
    return VesselAssignment(
        id=str(assignment_model.id),
        route_id=str(assignment_model.route_id),
        vessel_id=str(assignment_model.vessel_id),
        departure_times=departure_times_for(assignment_model),
        operating_days=list(assignment_model.operating_days),
        operating_days_display=[display_weekday(d) for d in assignment_model.operating_days],
        active=assignment_model.active,
    )


@router.post("/create", response_model=VesselAssignment)
async def create_assignment(
    request: CreateAssignmentRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """
    Assign a vessel to a route.

    Weekday names may be given with or without accents and in any case; they
    are stored normalized.
    """
    assignment_service = AssignmentService(db)

    try:
        assignment = await assignment_service.create_assignment(request)
        return JSONResponse(
            status_code=200,
            content=_convert_assignment_to_schema(assignment).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in assignment creation",
            extra={"route_id": request.route_id, "vessel_id": request.vessel_id, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error during assignment creation")


@router.post("/list", response_model=ListAssignmentsResponse)
async def list_assignments(
    request: ListAssignmentsRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    assignment_service = AssignmentService(db)
    assignments = await assignment_service.list_assignments(request)
    response_data = ListAssignmentsResponse(
        items=[_convert_assignment_to_schema(a) for a in assignments]
    )
    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )


@router.post("/check-vessel", response_model=VesselCheckResponse)
async def check_vessel(
    request: CheckVesselRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Report whether a vessel can take a route, and which routes it already serves."""
    assignment_service = AssignmentService(db)
    exclude_route_id = parse_uuid(request.exclude_route_id, "exclude_route_id") if request.exclude_route_id else None
    response_data = await assignment_service.check_vessel_for_assignment(
        parse_uuid(request.vessel_id, "vessel_id"),
        exclude_route_id
    )
    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )


@router.post("/operating-day", response_model=OperatingDayResponse)
async def check_operating_day(
    request: OperatingDayRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Check a travel date against the assignment's operating weekdays."""
    assignment_service = AssignmentService(db)
    response_data = await assignment_service.check_operating_day(
        parse_uuid(request.route_id, "route_id"),
        parse_uuid(request.vessel_id, "vessel_id"),
        request.travel_date
    )
    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )
