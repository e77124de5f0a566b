"""Vessel assignment service: which vessel sails which route, and when."""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError, ValidationError, parse_uuid
from ..models.assignment import VesselAssignment
from ..models.route import Route
from ..models.vessel import VesselStatus
from ..schemas.assignment import (
    CreateAssignmentRequest,
    ListAssignmentsRequest,
    OperatingDayResponse,
    VesselCheckResponse,
)
from .route_service import RouteService
from .schedule import (
    departure_times_for,
    display_weekday,
    is_operating_day,
    normalize_operating_days,
    weekday_for_date,
)
from .vessel_service import VesselService

logger = logging.getLogger(__name__)


class AssignmentService:
    """Service for vessel assignment operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.route_service = RouteService(db)
        self.vessel_service = VesselService(db)

    async def create_assignment(self, request: CreateAssignmentRequest) -> VesselAssignment:
        """
        Assign a vessel to a route.

        Operating days are normalized here and stored only in normalized form.

        Raises:
            NotFoundError: If route or vessel not found
            ValidationError: If an operating day is not a weekday
            ConflictError: If the vessel is already assigned to the route
        """
        route_id = parse_uuid(request.route_id, "route_id")
        vessel_id = parse_uuid(request.vessel_id, "vessel_id")
        await self.route_service.get_route_by_id_or_raise(route_id)
        await self.vessel_service.get_vessel_by_id_or_raise(vessel_id)

        try:
            operating_days = normalize_operating_days(request.operating_days)
        except ValueError as e:
            raise ValidationError(detail=str(e), errors={"operating_days": str(e)})

        existing = await self.get_assignment(route_id, vessel_id, active_only=False)
        if existing:
            logger.warning(
                "Assignment creation failed - vessel already serves route",
                extra={"route_id": str(route_id), "vessel_id": str(vessel_id)}
            )
            raise ConflictError(
                detail="This vessel is already assigned to the route",
                conflicting_resource={"id": str(existing.id), "route_id": str(route_id), "vessel_id": str(vessel_id)}
            )

        assignment = VesselAssignment(
            route_id=route_id,
            vessel_id=vessel_id,
            departure_times=list(request.departure_times),
            operating_days=operating_days,
            active=True,
        )

        try:
            self.db.add(assignment)
            await self.db.commit()
            await self.db.refresh(assignment)
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Assignment creation failed due to integrity constraint",
                extra={"route_id": str(route_id), "vessel_id": str(vessel_id), "error": str(e)}
            )
            raise ConflictError(detail="This vessel is already assigned to the route")

        logger.info(
            "Vessel assigned to route",
            extra={
                "assignment_id": str(assignment.id),
                "route_id": str(route_id),
                "vessel_id": str(vessel_id),
                "operating_days": operating_days,
                "departure_times": assignment.departure_times
            }
        )
        return assignment

    async def list_assignments(self, request: ListAssignmentsRequest) -> list[VesselAssignment]:
        stmt = select(VesselAssignment)
        conditions = []
        if request.route_id:
            conditions.append(VesselAssignment.route_id == parse_uuid(request.route_id, "route_id"))
        if request.vessel_id:
            conditions.append(VesselAssignment.vessel_id == parse_uuid(request.vessel_id, "vessel_id"))
        if request.active_only:
            conditions.append(VesselAssignment.active.is_(True))
        if conditions:
            stmt = stmt.where(and_(*conditions))

        result = await self.db.execute(stmt.order_by(VesselAssignment.created_at, VesselAssignment.id))
        return list(result.scalars())

    async def get_assignment(
        self,
        route_id: UUID,
        vessel_id: UUID,
        active_only: bool = True
    ) -> Optional[VesselAssignment]:
        stmt = select(VesselAssignment).where(
            VesselAssignment.route_id == route_id,
            VesselAssignment.vessel_id == vessel_id,
        )
        if active_only:
            stmt = stmt.where(VesselAssignment.active.is_(True))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_active_assignment_or_raise(self, route_id: UUID, vessel_id: UUID) -> VesselAssignment:
        """
        Get the active assignment of a vessel to a route.

        Raises:
            NotFoundError: If the vessel does not serve the route
        """
        assignment = await self.get_assignment(route_id, vessel_id)
        if not assignment:
            logger.warning(
                "Vessel assignment not found",
                extra={"route_id": str(route_id), "vessel_id": str(vessel_id)}
            )
            raise NotFoundError(
                resource_type="vessel_assignment",
                detail="The selected vessel is not assigned to this route"
            )
        return assignment

    async def check_operating_day(self, route_id: UUID, vessel_id: UUID, travel_date: date) -> OperatingDayResponse:
        """Report whether the vessel sails the route on the given date."""
        assignment = await self.get_active_assignment_or_raise(route_id, vessel_id)
        weekday = weekday_for_date(travel_date)
        valid = is_operating_day(assignment.operating_days, travel_date)

        if valid:
            message = f"The vessel sails on {display_weekday(weekday)}"
        else:
            days = ", ".join(display_weekday(day) for day in assignment.operating_days)
            message = f"The vessel does not sail on {display_weekday(weekday)}. Operating days: {days}"

        return OperatingDayResponse(
            valid=valid,
            weekday=weekday,
            operating_days=list(assignment.operating_days),
            departure_times=departure_times_for(assignment) if valid else [],
            message=message,
        )

    async def check_vessel_for_assignment(
        self,
        vessel_id: UUID,
        exclude_route_id: UUID | None = None
    ) -> VesselCheckResponse:
        """
        Check whether a vessel can take a route assignment.

        A vessel serving other routes is still available; those routes are
        reported so the caller can decide.
        """
        vessel = await self.vessel_service.get_vessel_by_id(vessel_id)
        if not vessel:
            return VesselCheckResponse(
                available=False,
                reason="VESSEL_NOT_FOUND",
                message="Vessel not found",
            )

        if vessel.status != VesselStatus.ACTIVE:
            status_value = VesselStatus(vessel.status).value
            return VesselCheckResponse(
                available=False,
                reason="VESSEL_NOT_ACTIVE",
                vessel_name=vessel.name,
                message=f"Vessel '{vessel.name}' is {status_value} and cannot be assigned",
            )

        stmt = (
            select(Route.name)
            .join(VesselAssignment, VesselAssignment.route_id == Route.id)
            .where(VesselAssignment.vessel_id == vessel_id, VesselAssignment.active.is_(True))
            .order_by(Route.name)
        )
        if exclude_route_id:
            stmt = stmt.where(VesselAssignment.route_id != exclude_route_id)
        result = await self.db.execute(stmt)
        route_names = list(result.scalars())

        if route_names:
            message = f"Vessel '{vessel.name}' also serves: {', '.join(route_names)}"
        else:
            message = f"Vessel '{vessel.name}' is available"

        return VesselCheckResponse(
            available=True,
            vessel_name=vessel.name,
            assigned_routes=route_names,
            message=message,
        )
