"""Boarding control for the departures of an operator's vessel."""

import logging
from datetime import date, datetime, time
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.exceptions import NotFoundError, OperatorNotOnDutyError, ValidationError
from ..core.locks import boarding_key, exclusive
from ..models.boarding import BoardingRecord, BoardingStatus
from ..models.operator import Operator, OperatorStatus
from ..models.sale import Sale, SaleStatus
from ..models.vessel import Vessel
from ..schemas.boarding import BoardingStats
from .operator_service import OperatorService
from .schedule import now_local
from .vessel_service import VesselService

logger = logging.getLogger(__name__)


class BoardingService:
    """
    Service for boarding control.

    An operator only ever works the vessel assigned to them, so the vessel
    is taken from the operator rather than from the request. Every
    CONFIRMED sale of the departure gets one boarding record.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.operator_service = OperatorService(db)
        self.vessel_service = VesselService(db)

    async def _operator_on_duty(self, operator_id: UUID) -> Operator:
        operator = await self.operator_service.get_operator_by_id_or_raise(operator_id)

        if operator.status != OperatorStatus.ACTIVE:
            raise OperatorNotOnDutyError(
                detail=f"Operator '{operator.full_name}' is inactive",
                operator_id=str(operator.id),
            )
        if operator.assigned_vessel_id is None:
            raise OperatorNotOnDutyError(
                detail=f"Operator '{operator.full_name}' has no vessel assigned",
                operator_id=str(operator.id),
            )
        return operator

    async def _confirmed_sales(self, vessel_id: UUID, travel_date: date, departure_time: str) -> list[Sale]:
        stmt = (
            select(Sale)
            .where(
                Sale.vessel_id == vessel_id,
                Sale.travel_date == travel_date,
                Sale.departure_time == departure_time,
                Sale.status == SaleStatus.CONFIRMED,
            )
            .options(selectinload(Sale.client))
            .order_by(Sale.sale_number)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def _records_by_sale(self, sale_ids: list[UUID]) -> dict[UUID, BoardingRecord]:
        if not sale_ids:
            return {}
        stmt = (
            select(BoardingRecord)
            .where(BoardingRecord.sale_id.in_(sale_ids))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return {record.sale_id: record for record in result.scalars()}

    async def passenger_list(
        self,
        operator_id: UUID,
        travel_date: date,
        departure_time: str
    ) -> tuple[Vessel, list[tuple[Sale, BoardingRecord]]]:
        """
        Confirmed sales of a departure of the operator's vessel.

        Sales seen for the first time get a PENDING boarding record. Pending
        passengers are listed first, then by sale number.

        Raises:
            NotFoundError: If the operator or the vessel does not exist
            OperatorNotOnDutyError: If the operator is inactive or has no vessel
        """
        operator = await self._operator_on_duty(operator_id)
        vessel = await self.vessel_service.get_vessel_by_id_or_raise(operator.assigned_vessel_id)

        key = boarding_key(vessel.id, travel_date, departure_time)
        async with exclusive(self.db, key):
            try:
                sales = await self._confirmed_sales(vessel.id, travel_date, departure_time)
                records = await self._records_by_sale([sale.id for sale in sales])

                missing = [sale for sale in sales if sale.id not in records]
                for sale in missing:
                    record = BoardingRecord(
                        sale_id=sale.id,
                        operator_id=operator.id,
                        vessel_id=vessel.id,
                        route_id=sale.route_id,
                        travel_date=travel_date,
                        departure_time=departure_time,
                        status=BoardingStatus.PENDING,
                    )
                    self.db.add(record)
                    records[sale.id] = record

                if missing:
                    await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        if missing:
            logger.info(
                "Boarding records opened",
                extra={
                    "vessel_id": str(vessel.id),
                    "travel_date": travel_date.isoformat(),
                    "departure_time": departure_time,
                    "opened": len(missing)
                }
            )

        entries = [(sale, records[sale.id]) for sale in sales]
        entries.sort(key=lambda entry: entry[1].status != BoardingStatus.PENDING)
        return vessel, entries

    async def set_status(
        self,
        operator_id: UUID,
        record_id: UUID,
        status: BoardingStatus,
        notes: str | None = None,
        now: datetime | None = None
    ) -> tuple[Sale, BoardingRecord]:
        """
        Mark a passenger as boarded or not boarded, or reset to PENDING.

        Marks are accepted from the departure time until the end of the
        travel date. Resetting to PENDING clears the mark time and notes.

        Raises:
            NotFoundError: If the operator or the record does not exist
            OperatorNotOnDutyError: If the record belongs to another vessel
            ValidationError: Outside the boarding window, cancelled sale, or
                the passenger already has that status
        """
        operator = await self._operator_on_duty(operator_id)
        record = await self.get_record_by_id_or_raise(record_id)

        if record.vessel_id != operator.assigned_vessel_id:
            raise OperatorNotOnDutyError(
                detail=f"Operator '{operator.full_name}' does not control this vessel",
                operator_id=str(operator.id),
            )

        sale = record.sale
        if sale.status != SaleStatus.CONFIRMED:
            raise ValidationError(
                detail=f"Sale {sale.sale_number} is {SaleStatus(sale.status).value} and cannot board",
                errors={"record_id": "sale not confirmed"},
            )

        now = now or now_local()
        if record.travel_date < now.date():
            raise ValidationError(
                detail="Past departures cannot be modified",
                errors={"record_id": "departure in the past"},
            )

        opens_at = datetime.combine(record.travel_date, time.fromisoformat(record.departure_time), tzinfo=now.tzinfo)
        if now < opens_at:
            raise ValidationError(
                detail=f"Boarding opens at {record.departure_time}",
                errors={"record_id": "boarding not open"},
            )

        if status == record.status:
            raise ValidationError(
                detail=f"Passenger is already marked as {BoardingStatus(status).value}",
                errors={"status": "unchanged"},
            )

        if status == BoardingStatus.PENDING:
            record.recorded_at = None
            record.notes = None
        else:
            record.recorded_at = now
            record.notes = notes or None
        record.status = status
        record.operator_id = operator.id

        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Boarding status changed",
            extra={
                "record_id": str(record.id),
                "sale_number": sale.sale_number,
                "status": BoardingStatus(status).value,
                "operator_id": str(operator.id)
            }
        )
        return sale, record

    async def departure_stats(self, operator_id: UUID, travel_date: date, departure_time: str) -> BoardingStats:
        """
        Boarding progress of a departure of the operator's vessel.

        Read-only: sales without a record yet count as pending.
        """
        operator = await self._operator_on_duty(operator_id)
        vessel = await self.vessel_service.get_vessel_by_id_or_raise(operator.assigned_vessel_id)

        sales = await self._confirmed_sales(vessel.id, travel_date, departure_time)
        records = await self._records_by_sale([sale.id for sale in sales])

        counts = {status: 0 for status in BoardingStatus}
        boarded_passengers = 0
        for sale in sales:
            record = records.get(sale.id)
            status = BoardingStatus(record.status) if record else BoardingStatus.PENDING
            counts[status] += 1
            if status == BoardingStatus.BOARDED:
                boarded_passengers += sale.passenger_count

        total = len(sales)
        boarded = counts[BoardingStatus.BOARDED]
        return BoardingStats(
            vessel_name=vessel.name,
            capacity_total=vessel.capacity,
            total=total,
            boarded=boarded,
            pending=counts[BoardingStatus.PENDING],
            not_boarded=counts[BoardingStatus.NOT_BOARDED],
            boarded_passengers=boarded_passengers,
            boarded_percent=round(boarded / total * 100) if total else 0,
            capacity_available=vessel.capacity - boarded_passengers,
        )

    async def get_record_by_id(self, record_id: UUID) -> Optional[BoardingRecord]:
        stmt = (
            select(BoardingRecord)
            .where(BoardingRecord.id == record_id)
            .options(selectinload(BoardingRecord.sale).selectinload(Sale.client))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_record_by_id_or_raise(self, record_id: UUID) -> BoardingRecord:
        """Get boarding record by ID or raise NotFoundError."""
        record = await self.get_record_by_id(record_id)
        if not record:
            logger.warning("Boarding record not found", extra={"record_id": str(record_id)})
            raise NotFoundError(resource_type="boarding_record", resource_id=str(record_id))
        return record
