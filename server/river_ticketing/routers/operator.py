"""Operator router, including the vessel occupancy guard."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.exceptions import ProblemDetailsException, parse_uuid
from ..models.operator import OperatorStatus
from ..schemas.operator import (
    AssignVesselRequest,
    CreateOperatorRequest,
    Operator,
    SetOperatorStatusRequest,
    VesselOccupancy,
    VesselOccupancyRequest,
)
from ..services.operator_service import OperatorService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/operator", tags=["operator"])


def _convert_operator_to_schema(operator_model) -> Operator:
    return Operator(
        id=str(operator_model.id),
        full_name=operator_model.full_name,
        email=operator_model.email,
        status=operator_model.status,
        assigned_vessel_id=str(operator_model.assigned_vessel_id) if operator_model.assigned_vessel_id else None,
        assigned_at=operator_model.assigned_at,
    )


@router.post("/create", response_model=Operator)
async def create_operator(
    request: CreateOperatorRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    operator_service = OperatorService(db)

    try:
        operator = await operator_service.create_operator(request)
        return JSONResponse(
            status_code=200,
            content=_convert_operator_to_schema(operator).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in operator creation",
            extra={"vessel_id": request.vessel_id, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error during operator creation")


@router.post("/vessel-occupancy", response_model=VesselOccupancy)
async def vessel_occupancy(
    request: VesselOccupancyRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """
    Advisory check used by edit forms.

    Never fails on an occupied vessel; assignment and activation are where
    the rule is enforced.
    """
    operator_service = OperatorService(db)
    exclude_operator_id = (
        parse_uuid(request.exclude_operator_id, "exclude_operator_id")
        if request.exclude_operator_id else None
    )
    response_data = await operator_service.is_vessel_occupied(
        parse_uuid(request.vessel_id, "vessel_id"),
        exclude_operator_id
    )
    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )


@router.post("/assign-vessel", response_model=Operator)
async def assign_vessel(
    request: AssignVesselRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Assign a vessel to an operator; rejected if another active operator holds it."""
    operator_service = OperatorService(db)

    try:
        vessel_id = parse_uuid(request.vessel_id, "vessel_id") if request.vessel_id else None
        operator = await operator_service.assign_vessel(
            parse_uuid(request.operator_id, "operator_id"),
            vessel_id
        )
        return JSONResponse(
            status_code=200,
            content=_convert_operator_to_schema(operator).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in vessel assignment",
            extra={"operator_id": request.operator_id, "vessel_id": request.vessel_id, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error during vessel assignment")


@router.post("/set-status", response_model=Operator)
async def set_operator_status(
    request: SetOperatorStatusRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    operator_service = OperatorService(db)
    operator = await operator_service.set_status(
        parse_uuid(request.operator_id, "operator_id"),
        OperatorStatus(request.status.value)
    )
    return JSONResponse(
        status_code=200,
        content=_convert_operator_to_schema(operator).model_dump(mode="json")
    )
