"""Sale router: availability, admission, lookup and annulment."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import RequiredAuth
from ..core.exceptions import ProblemDetailsException
from ..schemas.common import Money
from ..schemas.sale import (
    AvailabilityResponse,
    CheckAvailabilityRequest,
    CreateSaleRequest,
    GetSaleRequest,
    PaymentMethodEntry,
    Sale,
    SaleAnnulment,
    SearchSalesRequest,
    SearchSalesResponse,
    VoidSaleRequest,
    VoidSaleResponse,
)
from ..services.availability_service import AvailabilityService
from ..services.sale_service import SaleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/sale", tags=["sale"])


def _convert_sale_to_schema(sale_model) -> Sale:
    """Convert sale model to schema with Money conversion."""
    return Sale(
        id=str(sale_model.id),
        sale_number=sale_model.sale_number,
        client_id=str(sale_model.client_id),
        route_id=str(sale_model.route_id),
        vessel_id=str(sale_model.vessel_id),
        seller_ref=sale_model.seller_ref,
        embarkation_port=sale_model.embarkation_port,
        origin_port=sale_model.origin_port,
        destination_port=sale_model.destination_port,
        travel_date=sale_model.travel_date,
        departure_time=sale_model.departure_time,
        boarding_time=sale_model.boarding_time,
        passenger_count=sale_model.passenger_count,
        unit_price=Money(amount=sale_model.unit_price_amount, currency=sale_model.currency),
        total=Money(amount=sale_model.total_amount, currency=sale_model.currency),
        payment_type=sale_model.payment_type,
        payment_methods=[PaymentMethodEntry(**entry) for entry in sale_model.payment_methods],
        notes=sale_model.notes,
        status=sale_model.status,
        created_at=sale_model.created_at,
    )


def _convert_annulment_to_schema(annulment_model) -> SaleAnnulment:
    return SaleAnnulment(
        id=str(annulment_model.id),
        sale_id=str(annulment_model.sale_id),
        kind=annulment_model.kind,
        reason=annulment_model.reason,
        notes=annulment_model.notes,
        refund_amount=annulment_model.refund_amount,
        seats_released=annulment_model.seats_released,
        actor=annulment_model.actor,
    )


@router.post("/availability", response_model=AvailabilityResponse)
async def check_availability(
    request: CheckAvailabilityRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """
    Seats left on a departure.

    The travel date is checked against the vessel's operating days first; a
    date the vessel does not sail is a schedule mismatch, not zero seats.
    """
    availability_service = AvailabilityService(db)
    response_data = await availability_service.check_departure(request)
    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )


@router.post("/create", response_model=Sale)
async def create_sale(
    request: CreateSaleRequest,
    db: AsyncSession = Depends(get_db),
    current_user: dict = RequiredAuth
) -> JSONResponse:
    """
    Sell tickets on a departure.

    Seats are recounted and the sale written under a per-departure lock, so
    concurrent sales can never oversell a vessel.
    """
    sale_service = SaleService(db)

    try:
        sale = await sale_service.create_sale(request, seller_ref=current_user["user_id"])
        return JSONResponse(
            status_code=200,
            content=_convert_sale_to_schema(sale).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in sale creation",
            extra={
                "route_id": request.route_id,
                "vessel_id": request.vessel_id,
                "travel_date": request.travel_date.isoformat(),
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error during sale creation")


@router.post("/get", response_model=Sale)
async def get_sale(
    request: GetSaleRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Get a sale by ID or by sale number."""
    sale_service = SaleService(db)
    sale = await sale_service.get_sale(request)
    return JSONResponse(
        status_code=200,
        content=_convert_sale_to_schema(sale).model_dump(mode="json")
    )


@router.post("/search", response_model=SearchSalesResponse)
async def search_sales(
    request: SearchSalesRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    sale_service = SaleService(db)
    sales, next_cursor = await sale_service.search_sales(request)
    response_data = SearchSalesResponse(
        items=[_convert_sale_to_schema(s) for s in sales],
        next_cursor=next_cursor
    )
    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )


@router.post("/void", response_model=VoidSaleResponse)
async def void_sale(
    request: VoidSaleRequest,
    db: AsyncSession = Depends(get_db),
    current_user: dict = RequiredAuth
) -> JSONResponse:
    """Void or refund a confirmed sale, returning its seats to the departure."""
    sale_service = SaleService(db)

    try:
        sale, annulment = await sale_service.void_sale(request, actor=current_user["user_id"])
        response_data = VoidSaleResponse(
            sale=_convert_sale_to_schema(sale),
            annulment=_convert_annulment_to_schema(annulment)
        )
        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in sale annulment",
            extra={"sale_id": request.sale_id, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error during sale annulment")
