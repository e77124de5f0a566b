"""Concurrency tests for the sale admission gate."""

import asyncio
import uuid
from uuid import UUID

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from river_ticketing.core.database import Base
from river_ticketing.core.exceptions import (
    CapacityExceededError,
    InvalidSaleTransitionError,
    SaleNumberConflictError,
)
from river_ticketing.core.locks import active_lock_count
from river_ticketing.schemas.assignment import CreateAssignmentRequest
from river_ticketing.schemas.common import Money
from river_ticketing.schemas.route import CreateRouteRequest
from river_ticketing.schemas.sale import VoidSaleRequest
from river_ticketing.schemas.vessel import CreateVesselRequest
from river_ticketing.services.assignment_service import AssignmentService
from river_ticketing.services.availability_service import AvailabilityService
from river_ticketing.services.route_service import RouteService
from river_ticketing.services.sale_service import SaleService
from river_ticketing.services.vessel_service import VesselService


@pytest_asyncio.fixture
async def request_sessions(tmp_path):
    """
    Session factory backed by a file database.

    Each simulated request gets its own session and connection, as it would
    behind the API.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'concurrency.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


async def _create_catalog(sessions, capacity: int) -> dict:
    suffix = uuid.uuid4().hex[:8]
    async with sessions() as session:
        route = await RouteService(session).create_route(
            CreateRouteRequest(
                name=f"Iquitos - Pantoja {suffix}",
                origin_port="Iquitos",
                destination_port="Pantoja",
                price=Money(amount=4000, currency="PEN"),
            )
        )
        vessel = await VesselService(session).create_vessel(
            CreateVesselRequest(name=f"Napo {suffix}", capacity=capacity)
        )
        await AssignmentService(session).create_assignment(
            CreateAssignmentRequest(
                route_id=str(route.id),
                vessel_id=str(vessel.id),
                departure_times=["06:00"],
                operating_days=["LUNES", "MIERCOLES"],
            )
        )
        return {
            "route_id": str(route.id),
            "vessel_id": str(vessel.id),
            "capacity": capacity,
            "departure_times": ["06:00"],
        }


async def _sold(sessions, catalog, travel_date) -> int:
    async with sessions() as session:
        availability = await AvailabilityService(session).check_availability(
            UUID(catalog["route_id"]),
            UUID(catalog["vessel_id"]),
            travel_date,
            catalog["departure_times"][0],
        )
        return availability.sold


@pytest.mark.asyncio
async def test_concurrent_sales_never_overbook(request_sessions, sale_request_factory, travel_date_on):
    """Thirty sellers race for a ten-seat departure."""
    catalog = await _create_catalog(request_sessions, capacity=10)
    travel_date = travel_date_on("LUNES")

    async def sell(index: int):
        async with request_sessions() as session:
            sale = await SaleService(session).create_sale(
                sale_request_factory(catalog, travel_date, quantity=1, dni=f"4{index:07d}"),
                seller_ref=f"seller-{index % 3}",
            )
            return sale.passenger_count

    results = await asyncio.gather(*(sell(i) for i in range(30)), return_exceptions=True)

    accepted = [r for r in results if isinstance(r, int)]
    rejected = [r for r in results if isinstance(r, Exception)]

    assert len(accepted) == 10
    assert len(rejected) == 20
    assert all(isinstance(e, CapacityExceededError) for e in rejected)
    assert await _sold(request_sessions, catalog, travel_date) == 10


@pytest.mark.asyncio
async def test_concurrent_mixed_seat_counts(request_sessions, sale_request_factory, travel_date_on):
    catalog = await _create_catalog(request_sessions, capacity=12)
    travel_date = travel_date_on("MIERCOLES")
    seat_requests = [5, 4, 3, 2, 6, 1, 4, 3]

    async def sell(index: int, seats: int):
        async with request_sessions() as session:
            sale = await SaleService(session).create_sale(
                sale_request_factory(catalog, travel_date, quantity=seats, dni=f"5{index:07d}"),
                seller_ref="seller-001",
            )
            return sale.passenger_count

    results = await asyncio.gather(
        *(sell(i, seats) for i, seats in enumerate(seat_requests)),
        return_exceptions=True,
    )

    sold = sum(r for r in results if isinstance(r, int))
    assert sold <= 12
    assert all(isinstance(r, (int, CapacityExceededError)) for r in results)
    assert await _sold(request_sessions, catalog, travel_date) == sold


@pytest.mark.asyncio
async def test_voids_interleaved_with_sales(request_sessions, sale_request_factory, travel_date_on):
    """Seats freed by voids are resold without the count drifting."""
    catalog = await _create_catalog(request_sessions, capacity=6)
    travel_date = travel_date_on("LUNES", weeks_ahead=1)

    sale_ids = []
    async with request_sessions() as session:
        service = SaleService(session)
        for index in range(6):
            sale = await service.create_sale(
                sale_request_factory(catalog, travel_date, quantity=1, dni=f"6{index:07d}"),
                seller_ref="seller-001",
            )
            sale_ids.append(str(sale.id))

    async def void(sale_id: str):
        async with request_sessions() as session:
            sale, _ = await SaleService(session).void_sale(
                VoidSaleRequest(sale_id=sale_id, kind="VOID", reason="Pasajero no viaja"),
                actor="supervisor-01",
            )
            return ("void", sale.passenger_count)

    async def sell(index: int):
        async with request_sessions() as session:
            sale = await SaleService(session).create_sale(
                sale_request_factory(catalog, travel_date, quantity=1, dni=f"7{index:07d}"),
                seller_ref="seller-002",
            )
            return ("sale", sale.passenger_count)

    tasks = []
    for index in range(6):
        tasks.append(sell(index))
        if index < 3:
            tasks.append(void(sale_ids[index]))

    results = await asyncio.gather(*tasks, return_exceptions=True)

    voided = sum(seats for kind, seats in (r for r in results if isinstance(r, tuple)) if kind == "void")
    resold = sum(seats for kind, seats in (r for r in results if isinstance(r, tuple)) if kind == "sale")
    failures = [r for r in results if isinstance(r, Exception)]

    assert voided == 3
    assert all(isinstance(e, CapacityExceededError) for e in failures)
    assert resold <= voided
    assert await _sold(request_sessions, catalog, travel_date) == 6 - voided + resold


@pytest.mark.asyncio
async def test_concurrent_voids_of_one_sale(request_sessions, sale_request_factory, travel_date_on):
    """Only one of several simultaneous annulments of a sale wins."""
    catalog = await _create_catalog(request_sessions, capacity=4)
    travel_date = travel_date_on("MIERCOLES", weeks_ahead=1)

    async with request_sessions() as session:
        sale = await SaleService(session).create_sale(
            sale_request_factory(catalog, travel_date, quantity=3),
            seller_ref="seller-001",
        )
        sale_id = str(sale.id)

    async def void():
        async with request_sessions() as session:
            annulled, _ = await SaleService(session).void_sale(
                VoidSaleRequest(sale_id=sale_id, kind="VOID", reason="Duplicada"),
                actor="supervisor-01",
            )
            return annulled.passenger_count

    results = await asyncio.gather(*(void() for _ in range(4)), return_exceptions=True)

    assert sum(1 for r in results if isinstance(r, int)) == 1
    assert all(isinstance(r, InvalidSaleTransitionError) for r in results if not isinstance(r, int))
    assert await _sold(request_sessions, catalog, travel_date) == 0


@pytest.mark.asyncio
async def test_lock_map_returns_to_baseline_after_sales(request_sessions, sale_request_factory, travel_date_on):
    """Sales across many departures leave no lock entries behind."""
    catalog = await _create_catalog(request_sessions, capacity=2)
    baseline = active_lock_count()

    async def sell(index: int):
        async with request_sessions() as session:
            sale = await SaleService(session).create_sale(
                sale_request_factory(
                    catalog,
                    travel_date_on("LUNES", weeks_ahead=index % 10),
                    quantity=1,
                    dni=f"8{index:07d}",
                ),
                seller_ref="seller-001",
            )
            return sale.passenger_count

    results = await asyncio.gather(*(sell(i) for i in range(30)), return_exceptions=True)

    # Admissions for different departures share the daily sale-number sequence
    assert sum(1 for r in results if isinstance(r, int)) <= 20
    assert all(
        isinstance(r, (CapacityExceededError, SaleNumberConflictError))
        for r in results
        if not isinstance(r, int)
    )
    assert active_lock_count() == baseline
