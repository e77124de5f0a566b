"""Seat availability of departure instances."""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ScheduleMismatchError, ValidationError, parse_uuid
from ..core.observability import metrics_collector
from ..models.sale import Sale, SaleStatus
from ..schemas.sale import AvailabilityResponse, CheckAvailabilityRequest
from .assignment_service import AssignmentService
from .schedule import (
    departure_times_for,
    display_weekday,
    is_operating_day,
    today_local,
    weekday_for_date,
)
from .vessel_service import VesselService

logger = logging.getLogger(__name__)


class AvailabilityService:
    """
    Computes seats left on a departure instance.

    Nothing is stored per departure: capacity comes from the vessel and the
    sold count is summed from CONFIRMED sales every time it is needed.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.vessel_service = VesselService(db)
        self.assignment_service = AssignmentService(db)

    async def sold_seats(
        self,
        route_id: UUID,
        vessel_id: UUID,
        travel_date: date,
        departure_time: str
    ) -> int:
        """Sum of passengers over confirmed sales of the departure instance."""
        stmt = select(func.coalesce(func.sum(Sale.passenger_count), 0)).where(
            Sale.route_id == route_id,
            Sale.vessel_id == vessel_id,
            Sale.travel_date == travel_date,
            Sale.departure_time == departure_time,
            Sale.status == SaleStatus.CONFIRMED,
        )
        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def check_availability(
        self,
        route_id: UUID,
        vessel_id: UUID,
        travel_date: date,
        departure_time: str,
        requested_quantity: int = 1
    ) -> AvailabilityResponse:
        """
        Compute capacity, sold and available seats for a departure instance.

        Read-only; does not look at the weekday.

        Raises:
            NotFoundError: If the vessel does not exist
        """
        vessel = await self.vessel_service.get_vessel_by_id_or_raise(vessel_id)
        sold = await self.sold_seats(route_id, vessel_id, travel_date, departure_time)
        available = vessel.capacity - sold
        can_sell = available >= requested_quantity

        if can_sell:
            message = f"{available} seat(s) available"
        elif available <= 0:
            message = "Departure is sold out"
        else:
            message = f"Only {available} seat(s) available, {requested_quantity} requested"

        logger.debug(
            "Availability computed",
            extra={
                "route_id": str(route_id),
                "vessel_id": str(vessel_id),
                "travel_date": travel_date.isoformat(),
                "departure_time": departure_time,
                "capacity_total": vessel.capacity,
                "sold": sold,
                "requested": requested_quantity
            }
        )

        metrics_collector.set_departure_utilization(
            route_id=str(route_id),
            vessel_id=str(vessel_id),
            travel_date=travel_date.isoformat(),
            departure_time=departure_time,
            sold=sold,
            capacity=vessel.capacity,
        )

        return AvailabilityResponse(
            capacity_total=vessel.capacity,
            sold=sold,
            available=available,
            can_sell=can_sell,
            message=message,
        )

    async def check_departure(self, request: CheckAvailabilityRequest) -> AvailabilityResponse:
        """
        Availability as shown at the point of sale.

        Rejects past dates and dates the vessel does not sail before counting
        seats, and reports the assignment's operating days.

        Raises:
            ValidationError: If the travel date is in the past
            NotFoundError: If the vessel does not serve the route
            ScheduleMismatchError: If the vessel does not sail on that weekday
                or at that time
        """
        route_id = parse_uuid(request.route_id, "route_id")
        vessel_id = parse_uuid(request.vessel_id, "vessel_id")

        if request.travel_date < today_local():
            raise ValidationError(
                detail="Travel date cannot be earlier than today",
                errors={"travel_date": "in the past"},
            )

        assignment = await self.assignment_service.get_active_assignment_or_raise(route_id, vessel_id)
        if not is_operating_day(assignment.operating_days, request.travel_date):
            weekday = display_weekday(weekday_for_date(request.travel_date))
            days = ", ".join(display_weekday(day) for day in assignment.operating_days)
            raise ScheduleMismatchError(
                detail=f"The vessel does not sail on {weekday}. Operating days: {days}",
                operating_days=assignment.operating_days,
                departure_times=assignment.departure_times,
            )

        times = departure_times_for(assignment)
        if times and request.departure_time not in times:
            raise ScheduleMismatchError(
                detail=(
                    f"No departure at {request.departure_time}. "
                    f"Departure times: {', '.join(times)}"
                ),
                operating_days=assignment.operating_days,
                departure_times=times,
            )

        response = await self.check_availability(
            route_id,
            vessel_id,
            request.travel_date,
            request.departure_time,
            request.quantity,
        )
        response.operating_days = list(assignment.operating_days)
        return response
