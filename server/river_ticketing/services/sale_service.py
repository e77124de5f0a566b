"""Sale admission gate and the void/refund workflow."""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import (
    CapacityExceededError,
    InvalidSaleTransitionError,
    NotFoundError,
    PaymentMismatchError,
    ProblemDetailsException,
    SaleNumberConflictError,
    ScheduleMismatchError,
    ValidationError,
    parse_uuid,
)
from ..core.locks import departure_key, exclusive
from ..core.observability import metrics_collector
from ..models.client import Client
from ..models.sale import AnnulmentKind, PaymentType, Sale, SaleAnnulment, SaleStatus
from ..models.vessel import VesselStatus
from ..schemas.sale import (
    CreateSaleRequest,
    GetSaleRequest,
    PaymentMethodEntry,
    SearchSalesRequest,
    VoidSaleRequest,
)
from .assignment_service import AssignmentService
from .availability_service import AvailabilityService
from .client_service import ClientService
from .route_service import RouteService
from .schedule import (
    departure_times_for,
    display_weekday,
    is_operating_day,
    today_local,
    weekday_for_date,
)
from .vessel_service import VesselService

logger = logging.getLogger(__name__)

MIN_ANNULMENT_REASON_LENGTH = 3


def validate_payment(
    payment_type: PaymentType,
    payment_method: str | None,
    payment_methods: list[PaymentMethodEntry],
    expected_total: int,
) -> list[dict]:
    """
    Check a payment breakdown against the sale total.

    A single payment needs one method and is recorded for the full total.
    A split payment needs at least one method, every amount positive, and
    amounts adding up exactly to the total (in minor units).

    Returns:
        The breakdown to store on the sale

    Raises:
        ValidationError: If methods are missing or an amount is not positive
        PaymentMismatchError: If split amounts do not add up to the total
    """
    if payment_type == PaymentType.UNICO:
        method = payment_method
        if not method and len(payment_methods) == 1:
            method = payment_methods[0].method
        if not method:
            raise ValidationError(
                detail="A payment method is required for a single payment",
                errors={"payment_method": "required"},
            )
        return [{"method": method, "amount": expected_total}]

    if not payment_methods:
        raise ValidationError(
            detail="A split payment needs at least one payment method",
            errors={"payment_methods": "required"},
        )

    errors = {
        f"payment_methods[{index}].amount": "must be greater than zero"
        for index, entry in enumerate(payment_methods)
        if entry.amount <= 0
    }
    if errors:
        raise ValidationError(
            detail="Every payment method amount must be greater than zero",
            errors=errors,
        )

    declared_total = sum(entry.amount for entry in payment_methods)
    if declared_total != expected_total:
        raise PaymentMismatchError(declared_total=declared_total, expected_total=expected_total)

    return [{"method": entry.method, "amount": entry.amount} for entry in payment_methods]


class SaleService:
    """Service for sale operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.route_service = RouteService(db)
        self.vessel_service = VesselService(db)
        self.assignment_service = AssignmentService(db)
        self.availability_service = AvailabilityService(db)
        self.client_service = ClientService(db)

    async def _generate_sale_number(self, on: date) -> str:
        """Next sequential number for the day, e.g. V250802-007."""
        prefix = f"{settings.sale_number_prefix}{on:%y%m%d}-"
        stmt = select(func.count(Sale.id)).where(Sale.sale_number.like(f"{prefix}%"))
        result = await self.db.execute(stmt)
        return f"{prefix}{result.scalar_one() + 1:03d}"

    async def create_sale(self, request: CreateSaleRequest, seller_ref: str) -> Sale:
        """
        Admit a sale for a departure instance.

        Payment and date checks run first, without touching the database.
        Everything after that runs under the departure lock: the schedule is
        checked, seats are recounted and the sale is inserted and committed
        before another admission for the same departure can read the count.

        Args:
            request: Sale creation request
            seller_ref: Seller registering the sale

        Returns:
            Created sale in CONFIRMED status

        Raises:
            ValidationError: Malformed payment, past travel date, inactive route
            PaymentMismatchError: Split payment does not add up to the total
            NotFoundError: Route, vessel or assignment not found
            ScheduleMismatchError: Vessel does not sail on that day or time
            CapacityExceededError: Not enough seats left
            SaleNumberConflictError: Generated sale number already taken
        """
        route_id = parse_uuid(request.route_id, "route_id")
        vessel_id = parse_uuid(request.vessel_id, "vessel_id")

        try:
            self._check_request(request)
        except ProblemDetailsException as e:
            self._record_rejection(e, request)
            raise

        key = departure_key(route_id, vessel_id, request.travel_date, request.departure_time)
        async with exclusive(self.db, key):
            try:
                sale = await self._admit(request, route_id, vessel_id, seller_ref)
            except ProblemDetailsException as e:
                await self.db.rollback()
                self._record_rejection(e, request)
                raise
            except Exception:
                await self.db.rollback()
                raise

        metrics_collector.record_sale_confirmed(str(route_id), sale.passenger_count)
        return sale

    def _check_request(self, request: CreateSaleRequest) -> None:
        """Checks that need no database access."""
        # Total is only known once the route price is loaded; a custom price
        # can be validated up front.
        if request.unit_price is not None:
            validate_payment(
                request.payment_type,
                request.payment_method,
                request.payment_methods,
                request.unit_price * request.passenger_count,
            )

        if request.travel_date < today_local():
            raise ValidationError(
                detail="Travel date cannot be earlier than today",
                errors={"travel_date": "in the past"},
            )

    async def _admit(
        self,
        request: CreateSaleRequest,
        route_id: UUID,
        vessel_id: UUID,
        seller_ref: str
    ) -> Sale:
        route = await self.route_service.get_route_by_id_or_raise(route_id)
        if not route.active:
            raise ValidationError(
                detail=f"Route '{route.name}' is not open for sale",
                errors={"route_id": "inactive"},
            )

        vessel = await self.vessel_service.get_vessel_by_id_or_raise(vessel_id)
        if vessel.status != VesselStatus.ACTIVE:
            status_value = VesselStatus(vessel.status).value
            if settings.block_unavailable_vessel_sales:
                raise ValidationError(
                    detail=f"Vessel '{vessel.name}' is {status_value} and cannot sail",
                    errors={"vessel_id": status_value.lower()},
                )
            logger.warning(
                "Sale admitted on a vessel that is not active",
                extra={"vessel_id": str(vessel_id), "vessel_status": status_value}
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

        unit_price = request.unit_price if request.unit_price is not None else route.price_amount
        total_amount = unit_price * request.passenger_count
        payment_methods = validate_payment(
            request.payment_type,
            request.payment_method,
            request.payment_methods,
            total_amount,
        )

        availability = await self.availability_service.check_availability(
            route_id,
            vessel_id,
            request.travel_date,
            request.departure_time,
            request.passenger_count,
        )
        if not availability.can_sell:
            raise CapacityExceededError(
                available=availability.available,
                requested=request.passenger_count,
                capacity_total=availability.capacity_total,
            )

        client = await self.client_service.find_or_create(request.client)
        sale_number = await self._generate_sale_number(today_local())

        sale = Sale(
            sale_number=sale_number,
            client_id=client.id,
            route_id=route_id,
            vessel_id=vessel_id,
            seller_ref=seller_ref,
            embarkation_port=request.embarkation_port,
            origin_port=request.origin_port or route.origin_port,
            destination_port=request.destination_port or route.destination_port,
            travel_date=request.travel_date,
            departure_time=request.departure_time,
            boarding_time=request.boarding_time,
            passenger_count=request.passenger_count,
            unit_price_amount=unit_price,
            total_amount=total_amount,
            currency=route.price_currency,
            payment_type=request.payment_type,
            payment_methods=payment_methods,
            notes=request.notes,
            status=SaleStatus.CONFIRMED,
        )
        self.db.add(sale)

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if await self.get_sale_by_number(sale_number):
                logger.error(
                    "Sale number collision",
                    extra={"sale_number": sale_number, "error": str(e)}
                )
                raise SaleNumberConflictError(sale_number)
            raise

        await self.db.refresh(sale)

        sold_after = availability.sold + sale.passenger_count
        metrics_collector.set_departure_utilization(
            route_id=str(route_id),
            vessel_id=str(vessel_id),
            travel_date=request.travel_date.isoformat(),
            departure_time=request.departure_time,
            sold=sold_after,
            capacity=availability.capacity_total,
        )

        logger.info(
            "Sale confirmed",
            extra={
                "sale_id": str(sale.id),
                "sale_number": sale.sale_number,
                "route_id": str(route_id),
                "vessel_id": str(vessel_id),
                "travel_date": request.travel_date.isoformat(),
                "departure_time": request.departure_time,
                "passenger_count": sale.passenger_count,
                "remaining_seats": availability.capacity_total - sold_after,
                "seller_ref": seller_ref
            }
        )
        return sale

    def _record_rejection(self, error: ProblemDetailsException, request: CreateSaleRequest) -> None:
        reason = str(error.problem_details.get("code", "UNKNOWN")).lower()
        metrics_collector.record_admission_rejected(reason)
        logger.warning(
            "Sale rejected",
            extra={
                "reason": reason,
                "route_id": request.route_id,
                "vessel_id": request.vessel_id,
                "travel_date": request.travel_date.isoformat(),
                "departure_time": request.departure_time,
                "passenger_count": request.passenger_count,
                "detail": error.detail
            }
        )

    async def void_sale(self, request: VoidSaleRequest, actor: str) -> tuple[Sale, SaleAnnulment]:
        """
        Void or refund a confirmed sale, releasing its seats.

        Runs under the sale's departure lock so the freed seats and a
        concurrent admission never interleave.

        Raises:
            ValidationError: Reason too short or refund amount out of range
            NotFoundError: If the sale does not exist
            InvalidSaleTransitionError: If the sale is not CONFIRMED
        """
        reason = request.reason.strip()
        if len(reason) < MIN_ANNULMENT_REASON_LENGTH:
            raise ValidationError(
                detail=f"The annulment reason must have at least {MIN_ANNULMENT_REASON_LENGTH} characters",
                errors={"reason": "too short"},
            )

        sale_id = parse_uuid(request.sale_id, "sale_id")
        sale = await self.get_sale_by_id_or_raise(sale_id)
        target_status = SaleStatus.REFUNDED if request.kind == AnnulmentKind.REFUND else SaleStatus.VOIDED

        key = departure_key(sale.route_id, sale.vessel_id, sale.travel_date, sale.departure_time)
        async with exclusive(self.db, key):
            try:
                await self.db.refresh(sale)
                annulment = self._annul(sale, request, reason, target_status, actor)
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        await self.db.refresh(sale)
        await self.db.refresh(annulment)

        metrics_collector.record_sale_annulled(AnnulmentKind(request.kind).value)
        logger.info(
            "Sale annulled",
            extra={
                "sale_id": str(sale.id),
                "sale_number": sale.sale_number,
                "kind": AnnulmentKind(request.kind).value,
                "seats_released": annulment.seats_released,
                "refund_amount": annulment.refund_amount,
                "actor": actor
            }
        )
        return sale, annulment

    def _annul(
        self,
        sale: Sale,
        request: VoidSaleRequest,
        reason: str,
        target_status: SaleStatus,
        actor: str
    ) -> SaleAnnulment:
        if sale.status != SaleStatus.CONFIRMED:
            raise InvalidSaleTransitionError(
                sale_number=sale.sale_number,
                current_status=SaleStatus(sale.status).value,
                target_status=target_status.value,
            )

        refund_amount = None
        if request.kind == AnnulmentKind.REFUND:
            refund_amount = request.refund_amount
            if refund_amount is None or refund_amount <= 0 or refund_amount > sale.total_amount:
                raise ValidationError(
                    detail=f"The refund amount must be greater than zero and at most {sale.total_amount}",
                    errors={"refund_amount": "out of range"},
                )

        annulment = SaleAnnulment(
            sale_id=sale.id,
            kind=request.kind,
            reason=reason,
            notes=request.notes,
            refund_amount=refund_amount,
            seats_released=sale.passenger_count,
            actor=actor,
        )
        sale.status = target_status
        self.db.add(annulment)
        return annulment

    async def get_sale(self, request: GetSaleRequest) -> Sale:
        """
        Get a sale by ID or by sale number.

        Raises:
            ValidationError: If neither identifier is given
            NotFoundError: If the sale does not exist
        """
        if request.sale_id:
            return await self.get_sale_by_id_or_raise(parse_uuid(request.sale_id, "sale_id"))

        if request.sale_number:
            sale = await self.get_sale_by_number(request.sale_number)
            if not sale:
                raise NotFoundError(resource_type="sale", resource_id=request.sale_number)
            return sale

        raise ValidationError(
            detail="Either sale_id or sale_number is required",
            errors={"sale_id": "required"},
        )

    async def search_sales(self, request: SearchSalesRequest) -> tuple[list[Sale], str | None]:
        """
        Search sales based on criteria.

        Args:
            request: Search criteria

        Returns:
            Page of sales and the cursor of the next page, if any
        """
        stmt = select(Sale)
        conditions = []

        if request.status:
            conditions.append(Sale.status == request.status)
        if request.route_id:
            conditions.append(Sale.route_id == parse_uuid(request.route_id, "route_id"))
        if request.vessel_id:
            conditions.append(Sale.vessel_id == parse_uuid(request.vessel_id, "vessel_id"))
        if request.seller_ref:
            conditions.append(Sale.seller_ref == request.seller_ref)
        if request.date_from:
            conditions.append(Sale.travel_date >= request.date_from)
        if request.date_to:
            conditions.append(Sale.travel_date <= request.date_to)
        if request.query:
            pattern = f"%{request.query.strip()}%"
            stmt = stmt.join(Client, Client.id == Sale.client_id)
            conditions.append(or_(Sale.sale_number.ilike(pattern), Client.dni.ilike(pattern)))

        if conditions:
            stmt = stmt.where(and_(*conditions))

        if request.cursor:
            try:
                cursor_id = UUID(request.cursor)
                stmt = stmt.where(Sale.id > cursor_id)
            except (ValueError, TypeError):
                logger.warning(
                    "Invalid cursor provided in sale search",
                    extra={"cursor": request.cursor}
                )

        # Fetch one extra row to detect a next page
        stmt = stmt.order_by(Sale.id).limit(request.limit + 1)
        result = await self.db.execute(stmt)
        sales = list(result.scalars())

        has_next_page = len(sales) > request.limit
        if has_next_page:
            sales = sales[:-1]

        next_cursor = str(sales[-1].id) if has_next_page and sales else None

        logger.info(
            "Sale search completed",
            extra={
                "total_found": len(sales),
                "has_next_page": has_next_page,
                "filters": {
                    "status": request.status.value if request.status else None,
                    "route_id": request.route_id,
                    "date_from": request.date_from.isoformat() if request.date_from else None,
                    "date_to": request.date_to.isoformat() if request.date_to else None,
                    "query": request.query
                }
            }
        )

        return sales, next_cursor

    async def get_sale_by_id(self, sale_id: UUID) -> Optional[Sale]:
        stmt = select(Sale).where(Sale.id == sale_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_sale_by_number(self, sale_number: str) -> Optional[Sale]:
        stmt = select(Sale).where(Sale.sale_number == sale_number)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_sale_by_id_or_raise(self, sale_id: UUID) -> Sale:
        """Get sale by ID or raise NotFoundError."""
        sale = await self.get_sale_by_id(sale_id)
        if not sale:
            logger.warning("Sale not found", extra={"sale_id": str(sale_id)})
            raise NotFoundError(resource_type="sale", resource_id=str(sale_id))
        return sale
