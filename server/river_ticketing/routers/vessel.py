"""Vessel router for fleet catalog operations."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.exceptions import ProblemDetailsException, parse_uuid
from ..models.vessel import VesselStatus
from ..schemas.vessel import CreateVesselRequest, GetVesselRequest, SetVesselStatusRequest, Vessel
from ..services.vessel_service import VesselService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/vessel", tags=["vessel"])


def _convert_vessel_to_schema(vessel_model) -> Vessel:
    return Vessel(
        id=str(vessel_model.id),
        name=vessel_model.name,
        capacity=vessel_model.capacity,
        vessel_type=vessel_model.vessel_type,
        status=vessel_model.status,
    )


@router.post("/create", response_model=Vessel)
async def create_vessel(
    request: CreateVesselRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Register a vessel in the fleet."""
    vessel_service = VesselService(db)

    try:
        vessel = await vessel_service.create_vessel(request)
        return JSONResponse(
            status_code=200,
            content=_convert_vessel_to_schema(vessel).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in vessel creation",
            extra={"vessel_name": request.name, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error during vessel creation")


@router.post("/get", response_model=Vessel)
async def get_vessel(
    request: GetVesselRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Get a vessel by ID."""
    vessel_service = VesselService(db)
    vessel = await vessel_service.get_vessel_by_id_or_raise(parse_uuid(request.vessel_id, "vessel_id"))
    return JSONResponse(
        status_code=200,
        content=_convert_vessel_to_schema(vessel).model_dump(mode="json")
    )


@router.post("/set-status", response_model=Vessel)
async def set_vessel_status(
    request: SetVesselStatusRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Put a vessel in service, in maintenance, or out of service."""
    vessel_service = VesselService(db)

    try:
        vessel = await vessel_service.set_status(
            parse_uuid(request.vessel_id, "vessel_id"),
            VesselStatus(request.status.value)
        )
        return JSONResponse(
            status_code=200,
            content=_convert_vessel_to_schema(vessel).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error changing vessel status",
            extra={"vessel_id": request.vessel_id, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error during vessel update")
