"""Route router for route catalog operations."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.exceptions import ProblemDetailsException, parse_uuid
from ..schemas.common import Money
from ..schemas.route import CreateRouteRequest, GetRouteRequest, ListRoutesResponse, Route
from ..services.route_service import RouteService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/route", tags=["route"])


def _convert_route_to_schema(route_model) -> Route:
    """Convert route model to schema with Money conversion."""
    return Route(
        id=str(route_model.id),
        name=route_model.name,
        origin_port=route_model.origin_port,
        destination_port=route_model.destination_port,
        price=Money(
            amount=route_model.price_amount,
            currency=route_model.price_currency
        ),
        active=route_model.active,
    )


@router.post("/create", response_model=Route)
async def create_route(
    request: CreateRouteRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Create a route with its catalog price."""
    route_service = RouteService(db)

    try:
        route = await route_service.create_route(request)
        return JSONResponse(
            status_code=200,
            content=_convert_route_to_schema(route).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in route creation",
            extra={"route_name": request.name, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error during route creation")


@router.post("/get", response_model=Route)
async def get_route(
    request: GetRouteRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    route_service = RouteService(db)
    route = await route_service.get_route_by_id_or_raise(parse_uuid(request.route_id, "route_id"))
    return JSONResponse(
        status_code=200,
        content=_convert_route_to_schema(route).model_dump(mode="json")
    )


@router.post("/list-active", response_model=ListRoutesResponse)
async def list_active_routes(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """List routes open for sale, by name."""
    route_service = RouteService(db)
    routes = await route_service.list_active_routes()
    response_data = ListRoutesResponse(items=[_convert_route_to_schema(r) for r in routes])
    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )
