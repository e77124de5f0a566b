"""Boarding control router: passenger lists and boarding marks."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import RequiredAuth
from ..core.exceptions import ProblemDetailsException, parse_uuid
from ..schemas.boarding import (
    BoardingPassenger,
    BoardingStats,
    DepartureBoardingRequest,
    PassengerListResponse,
    SetBoardingStatusRequest,
)
from ..services.boarding_service import BoardingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/boarding", tags=["boarding"])


def _convert_passenger_to_schema(sale_model, record_model) -> BoardingPassenger:
    client = sale_model.client
    return BoardingPassenger(
        record_id=str(record_model.id),
        sale_id=str(sale_model.id),
        sale_number=sale_model.sale_number,
        passenger_count=sale_model.passenger_count,
        client_dni=client.dni,
        client_name=f"{client.first_name} {client.last_name}",
        client_phone=client.phone,
        embarkation_port=sale_model.embarkation_port,
        status=record_model.status,
        recorded_at=record_model.recorded_at,
        notes=record_model.notes,
    )


@router.post("/passengers", response_model=PassengerListResponse)
async def passenger_list(
    request: DepartureBoardingRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """
    Passenger list of a departure of the operator's vessel.

    Opens a PENDING boarding record for every confirmed sale not seen before.
    """
    boarding_service = BoardingService(db)
    vessel, entries = await boarding_service.passenger_list(
        parse_uuid(request.operator_id, "operator_id"),
        request.travel_date,
        request.departure_time,
    )
    response_data = PassengerListResponse(
        vessel_id=str(vessel.id),
        vessel_name=vessel.name,
        travel_date=request.travel_date,
        departure_time=request.departure_time,
        items=[_convert_passenger_to_schema(sale, record) for sale, record in entries],
    )
    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )


@router.post("/set-status", response_model=BoardingPassenger)
async def set_boarding_status(
    request: SetBoardingStatusRequest,
    db: AsyncSession = Depends(get_db),
    current_user: dict = RequiredAuth
) -> JSONResponse:
    """Mark a passenger as BOARDED or NOT_BOARDED, or reset to PENDING."""
    boarding_service = BoardingService(db)

    try:
        sale, record = await boarding_service.set_status(
            parse_uuid(request.operator_id, "operator_id"),
            parse_uuid(request.record_id, "record_id"),
            request.status,
            request.notes,
        )
        return JSONResponse(
            status_code=200,
            content=_convert_passenger_to_schema(sale, record).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in boarding status change",
            extra={"record_id": request.record_id, "user_id": current_user["user_id"], "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error during boarding status change")


@router.post("/stats", response_model=BoardingStats)
async def boarding_stats(
    request: DepartureBoardingRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    boarding_service = BoardingService(db)
    stats = await boarding_service.departure_stats(
        parse_uuid(request.operator_id, "operator_id"),
        request.travel_date,
        request.departure_time,
    )
    return JSONResponse(
        status_code=200,
        content=stats.model_dump(mode="json")
    )
