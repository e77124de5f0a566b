"""Tests for boarding control on an operator's vessel."""

from datetime import datetime, time, timedelta
from uuid import UUID, uuid4
from zoneinfo import ZoneInfo

import pytest

from river_ticketing.core.config import settings
from river_ticketing.core.exceptions import NotFoundError, OperatorNotOnDutyError, ValidationError
from river_ticketing.models.boarding import BoardingStatus
from river_ticketing.schemas.operator import CreateOperatorRequest
from river_ticketing.schemas.sale import VoidSaleRequest
from river_ticketing.services.boarding_service import BoardingService
from river_ticketing.services.operator_service import OperatorService
from river_ticketing.services.sale_service import SaleService


def _at(travel_date, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(travel_date, time(hour, minute), tzinfo=ZoneInfo(settings.timezone))


async def _operator(session, vessel_id=None, status="ACTIVE", email="carlos.rios@example.pe"):
    operator = await OperatorService(session).create_operator(
        CreateOperatorRequest(
            full_name="Carlos Rios",
            email=email,
            status=status,
            vessel_id=str(vessel_id) if vessel_id else None,
        )
    )
    return operator.id


@pytest.fixture
def departure(test_session, catalog_factory, sale_request_factory, travel_date_on):
    """A Wednesday 08:00 departure with confirmed sales and an operator on the vessel."""

    async def _create(quantities=(2, 1, 3)):
        catalog = await catalog_factory(capacity=20)
        wednesday = travel_date_on("MIERCOLES")
        sale_service = SaleService(test_session)
        sale_ids = []
        for index, quantity in enumerate(quantities):
            sale = await sale_service.create_sale(
                sale_request_factory(catalog, wednesday, quantity=quantity, dni=f"4587321{index}"),
                seller_ref="seller-001",
            )
            sale_ids.append(sale.id)
        operator_id = await _operator(test_session, vessel_id=catalog["vessel_id"])
        return {
            "catalog": catalog,
            "travel_date": wednesday,
            "departure_time": catalog["departure_times"][0],
            "sale_ids": sale_ids,
            "operator_id": operator_id,
        }

    return _create


async def _records(session, dep):
    _, entries = await BoardingService(session).passenger_list(
        dep["operator_id"], dep["travel_date"], dep["departure_time"]
    )
    return {sale.id: record.id for sale, record in entries}


@pytest.mark.asyncio
async def test_passenger_list_opens_pending_records(test_session, departure):
    dep = await departure()

    vessel, entries = await BoardingService(test_session).passenger_list(
        dep["operator_id"], dep["travel_date"], dep["departure_time"]
    )

    assert str(vessel.id) == dep["catalog"]["vessel_id"]
    assert [sale.id for sale, _ in entries] == dep["sale_ids"]
    assert all(record.status == BoardingStatus.PENDING for _, record in entries)
    assert all(record.recorded_at is None for _, record in entries)


@pytest.mark.asyncio
async def test_passenger_list_is_stable_across_calls(test_session, departure):
    dep = await departure()

    first = await _records(test_session, dep)
    second = await _records(test_session, dep)

    assert first == second


@pytest.mark.asyncio
async def test_voided_sale_is_not_listed(test_session, departure):
    dep = await departure()
    await SaleService(test_session).void_sale(
        VoidSaleRequest(sale_id=str(dep["sale_ids"][1]), reason="Cliente desistió"),
        actor="seller-001",
    )

    _, entries = await BoardingService(test_session).passenger_list(
        dep["operator_id"], dep["travel_date"], dep["departure_time"]
    )

    assert [sale.id for sale, _ in entries] == [dep["sale_ids"][0], dep["sale_ids"][2]]


@pytest.mark.asyncio
async def test_other_departure_times_are_not_listed(test_session, departure):
    dep = await departure()

    _, entries = await BoardingService(test_session).passenger_list(
        dep["operator_id"], dep["travel_date"], dep["catalog"]["departure_times"][1]
    )

    assert entries == []


@pytest.mark.asyncio
async def test_operator_without_vessel_is_not_on_duty(test_session, departure):
    dep = await departure()
    idle = await _operator(test_session, email="maria.torres@example.pe")

    with pytest.raises(OperatorNotOnDutyError) as exc_info:
        await BoardingService(test_session).passenger_list(idle, dep["travel_date"], dep["departure_time"])

    assert exc_info.value.status_code == 403
    assert exc_info.value.problem_details["operator_id"] == str(idle)


@pytest.mark.asyncio
async def test_inactive_operator_is_not_on_duty(test_session, catalog_factory, travel_date_on):
    catalog = await catalog_factory()
    inactive = await _operator(test_session, vessel_id=catalog["vessel_id"], status="INACTIVE")

    with pytest.raises(OperatorNotOnDutyError):
        await BoardingService(test_session).departure_stats(inactive, travel_date_on("MIERCOLES"), "08:00")


@pytest.mark.asyncio
async def test_unknown_operator_not_found(test_session, travel_date_on):
    with pytest.raises(NotFoundError):
        await BoardingService(test_session).passenger_list(uuid4(), travel_date_on("MIERCOLES"), "08:00")


@pytest.mark.asyncio
async def test_mark_boarded_records_time_and_notes(test_session, departure):
    dep = await departure()
    records = await _records(test_session, dep)
    now = _at(dep["travel_date"], 8, 5)

    sale, record = await BoardingService(test_session).set_status(
        dep["operator_id"], records[dep["sale_ids"][0]], BoardingStatus.BOARDED, "Con equipaje", now=now
    )

    assert sale.id == dep["sale_ids"][0]
    assert record.status == BoardingStatus.BOARDED
    assert record.recorded_at == now
    assert record.notes == "Con equipaje"
    assert record.operator_id == dep["operator_id"]


@pytest.mark.asyncio
async def test_reset_to_pending_clears_mark(test_session, departure):
    dep = await departure()
    record_id = (await _records(test_session, dep))[dep["sale_ids"][0]]
    service = BoardingService(test_session)
    await service.set_status(
        dep["operator_id"], record_id, BoardingStatus.NOT_BOARDED, "No se presentó", now=_at(dep["travel_date"], 8, 30)
    )

    _, record = await service.set_status(
        dep["operator_id"], record_id, BoardingStatus.PENDING, now=_at(dep["travel_date"], 8, 40)
    )

    assert record.status == BoardingStatus.PENDING
    assert record.recorded_at is None
    assert record.notes is None


@pytest.mark.asyncio
async def test_boarding_not_open_before_departure_time(test_session, departure):
    dep = await departure()
    record_id = (await _records(test_session, dep))[dep["sale_ids"][0]]

    with pytest.raises(ValidationError) as exc_info:
        await BoardingService(test_session).set_status(
            dep["operator_id"], record_id, BoardingStatus.BOARDED, now=_at(dep["travel_date"], 7, 59)
        )

    assert "08:00" in exc_info.value.detail


@pytest.mark.asyncio
async def test_past_departure_cannot_be_modified(test_session, departure):
    dep = await departure()
    record_id = (await _records(test_session, dep))[dep["sale_ids"][0]]

    with pytest.raises(ValidationError) as exc_info:
        await BoardingService(test_session).set_status(
            dep["operator_id"],
            record_id,
            BoardingStatus.BOARDED,
            now=_at(dep["travel_date"] + timedelta(days=1), 6),
        )

    assert "Past departures" in exc_info.value.detail


@pytest.mark.asyncio
async def test_same_status_is_rejected(test_session, departure):
    dep = await departure()
    record_id = (await _records(test_session, dep))[dep["sale_ids"][0]]

    with pytest.raises(ValidationError) as exc_info:
        await BoardingService(test_session).set_status(
            dep["operator_id"], record_id, BoardingStatus.PENDING, now=_at(dep["travel_date"], 9)
        )

    assert exc_info.value.problem_details["errors"] == {"status": "unchanged"}


@pytest.mark.asyncio
async def test_voided_sale_cannot_board(test_session, departure):
    dep = await departure()
    record_id = (await _records(test_session, dep))[dep["sale_ids"][0]]
    await SaleService(test_session).void_sale(
        VoidSaleRequest(sale_id=str(dep["sale_ids"][0]), reason="Error de digitación"),
        actor="seller-001",
    )

    with pytest.raises(ValidationError):
        await BoardingService(test_session).set_status(
            dep["operator_id"], record_id, BoardingStatus.BOARDED, now=_at(dep["travel_date"], 9)
        )


@pytest.mark.asyncio
async def test_operator_of_another_vessel_cannot_mark(test_session, departure, catalog_factory):
    dep = await departure()
    record_id = (await _records(test_session, dep))[dep["sale_ids"][0]]
    other_catalog = await catalog_factory()
    other = await _operator(test_session, vessel_id=other_catalog["vessel_id"], email="maria.torres@example.pe")

    with pytest.raises(OperatorNotOnDutyError):
        await BoardingService(test_session).set_status(
            other, record_id, BoardingStatus.BOARDED, now=_at(dep["travel_date"], 9)
        )


@pytest.mark.asyncio
async def test_departure_stats(test_session, departure):
    dep = await departure(quantities=(2, 1, 3))
    records = await _records(test_session, dep)
    service = BoardingService(test_session)
    now = _at(dep["travel_date"], 8, 15)
    await service.set_status(dep["operator_id"], records[dep["sale_ids"][0]], BoardingStatus.BOARDED, now=now)
    await service.set_status(dep["operator_id"], records[dep["sale_ids"][1]], BoardingStatus.NOT_BOARDED, now=now)

    stats = await service.departure_stats(dep["operator_id"], dep["travel_date"], dep["departure_time"])

    assert stats.capacity_total == 20
    assert (stats.total, stats.boarded, stats.pending, stats.not_boarded) == (3, 1, 1, 1)
    assert stats.boarded_passengers == 2
    assert stats.boarded_percent == 33
    assert stats.capacity_available == 18


@pytest.mark.asyncio
async def test_stats_count_unopened_sales_as_pending(test_session, departure):
    dep = await departure(quantities=(4,))

    stats = await BoardingService(test_session).departure_stats(
        dep["operator_id"], dep["travel_date"], dep["departure_time"]
    )

    assert (stats.total, stats.pending, stats.boarded) == (1, 1, 0)
    assert stats.boarded_percent == 0
    assert stats.capacity_available == 20


@pytest.mark.asyncio
async def test_unknown_record_not_found(test_session, departure):
    dep = await departure()

    with pytest.raises(NotFoundError):
        await BoardingService(test_session).set_status(
            dep["operator_id"], UUID(int=0), BoardingStatus.BOARDED, now=_at(dep["travel_date"], 9)
        )
