"""Route service for catalog operations."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..models.route import Route
from ..schemas.route import CreateRouteRequest

logger = logging.getLogger(__name__)


class RouteService:
    """Service for route-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_route(self, request: CreateRouteRequest) -> Route:
        """
        Create a new route.

        Raises:
            ValidationError: If origin and destination are the same port, or the
                price is not in the configured currency
            ConflictError: If a route with the same name already exists
        """
        if request.origin_port.strip().casefold() == request.destination_port.strip().casefold():
            raise ValidationError(
                detail="Origin and destination ports must differ",
                errors={"destination_port": "same as origin_port"},
            )

        if request.price.currency != settings.currency:
            raise ValidationError(
                detail=f"Route prices must be in {settings.currency}",
                errors={"price.currency": f"expected {settings.currency}"},
            )

        existing_route = await self.get_route_by_name(request.name)
        if existing_route:
            logger.warning(
                "Route creation failed - name already exists",
                extra={"route_name": request.name, "existing_route_id": str(existing_route.id)}
            )
            raise ConflictError(
                detail=f"Route '{request.name}' already exists",
                conflicting_resource={"id": str(existing_route.id), "name": existing_route.name}
            )

        route = Route(
            name=request.name,
            origin_port=request.origin_port.strip(),
            destination_port=request.destination_port.strip(),
            price_amount=request.price.amount,
            price_currency=request.price.currency,
        )

        try:
            self.db.add(route)
            await self.db.commit()
            await self.db.refresh(route)
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Route creation failed due to integrity constraint",
                extra={"route_name": request.name, "error": str(e)}
            )
            raise ConflictError(detail=f"Route '{request.name}' could not be created")

        logger.info(
            "Route created successfully",
            extra={
                "route_id": str(route.id),
                "route_name": route.name,
                "price_amount": route.price_amount
            }
        )
        return route

    async def list_active_routes(self) -> list[Route]:
        stmt = select(Route).where(Route.active.is_(True)).order_by(Route.name)
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def get_route_by_id(self, route_id: UUID) -> Optional[Route]:
        stmt = select(Route).where(Route.id == route_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_route_by_name(self, name: str) -> Optional[Route]:
        stmt = select(Route).where(Route.name == name)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_route_by_id_or_raise(self, route_id: UUID) -> Route:
        """
        Get route by ID or raise NotFoundError.

        Raises:
            NotFoundError: If route not found
        """
        route = await self.get_route_by_id(route_id)
        if not route:
            logger.warning("Route not found", extra={"route_id": str(route_id)})
            raise NotFoundError(resource_type="route", resource_id=str(route_id))
        return route
