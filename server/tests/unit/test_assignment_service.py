"""Tests for route, vessel and assignment catalog operations."""

import pytest

from river_ticketing.core.exceptions import ConflictError, NotFoundError, ValidationError
from river_ticketing.models.vessel import VesselStatus
from river_ticketing.schemas.assignment import CreateAssignmentRequest
from river_ticketing.schemas.common import Money
from river_ticketing.schemas.route import CreateRouteRequest
from river_ticketing.schemas.vessel import CreateVesselRequest
from river_ticketing.services.assignment_service import AssignmentService
from river_ticketing.services.route_service import RouteService
from river_ticketing.services.vessel_service import VesselService


async def _route(session, name="Iquitos - Pevas"):
    return await RouteService(session).create_route(
        CreateRouteRequest(
            name=name,
            origin_port="Iquitos",
            destination_port="Pevas",
            price=Money(amount=6000, currency="PEN"),
        )
    )


async def _vessel(session, name="Don José", capacity=40):
    return await VesselService(session).create_vessel(CreateVesselRequest(name=name, capacity=capacity))


@pytest.mark.asyncio
async def test_create_assignment_normalizes_days_and_times(test_session):
    route = await _route(test_session)
    vessel = await _vessel(test_session)

    assignment = await AssignmentService(test_session).create_assignment(
        CreateAssignmentRequest(
            route_id=str(route.id),
            vessel_id=str(vessel.id),
            departure_times=["6:00", "14:30"],
            operating_days=["Miércoles", "sábado", "MIERCOLES"],
        )
    )

    assert assignment.operating_days == ["MIERCOLES", "SABADO"]
    assert assignment.departure_times == ["06:00", "14:30"]
    assert assignment.active is True


@pytest.mark.asyncio
async def test_create_assignment_rejects_unknown_weekday(test_session):
    route = await _route(test_session)
    vessel = await _vessel(test_session)

    with pytest.raises(ValidationError):
        await AssignmentService(test_session).create_assignment(
            CreateAssignmentRequest(
                route_id=str(route.id),
                vessel_id=str(vessel.id),
                departure_times=["06:00"],
                operating_days=["Moonday"],
            )
        )


@pytest.mark.asyncio
async def test_duplicate_assignment_conflicts(test_session):
    route = await _route(test_session)
    vessel = await _vessel(test_session)
    service = AssignmentService(test_session)
    request = CreateAssignmentRequest(
        route_id=str(route.id),
        vessel_id=str(vessel.id),
        departure_times=["06:00"],
        operating_days=["LUNES"],
    )
    await service.create_assignment(request)

    with pytest.raises(ConflictError):
        await service.create_assignment(request)


@pytest.mark.asyncio
async def test_assignment_requires_existing_vessel(test_session):
    route = await _route(test_session)

    with pytest.raises(NotFoundError):
        await AssignmentService(test_session).create_assignment(
            CreateAssignmentRequest(
                route_id=str(route.id),
                vessel_id="3f0b8a9e-1c2d-4e5f-8a7b-6c5d4e3f2a1b",
                departure_times=["06:00"],
                operating_days=["LUNES"],
            )
        )


@pytest.mark.asyncio
async def test_check_vessel_reports_other_routes(test_session):
    first = await _route(test_session, "Iquitos - Pevas")
    second = await _route(test_session, "Iquitos - Caballococha")
    vessel = await _vessel(test_session)
    service = AssignmentService(test_session)
    for route in (first, second):
        await service.create_assignment(
            CreateAssignmentRequest(
                route_id=str(route.id),
                vessel_id=str(vessel.id),
                departure_times=["06:00"],
                operating_days=["LUNES"],
            )
        )

    result = await service.check_vessel_for_assignment(vessel.id, exclude_route_id=first.id)

    assert result.available is True
    assert result.assigned_routes == ["Iquitos - Caballococha"]


@pytest.mark.asyncio
async def test_check_vessel_unavailable_when_not_active(test_session):
    vessel = await _vessel(test_session)
    await VesselService(test_session).set_status(vessel.id, VesselStatus.MAINTENANCE)

    result = await AssignmentService(test_session).check_vessel_for_assignment(vessel.id)

    assert result.available is False
    assert result.reason == "VESSEL_NOT_ACTIVE"


@pytest.mark.asyncio
async def test_check_vessel_missing(test_session):
    from uuid import uuid4

    result = await AssignmentService(test_session).check_vessel_for_assignment(uuid4())

    assert result.available is False
    assert result.reason == "VESSEL_NOT_FOUND"


@pytest.mark.asyncio
async def test_route_ports_must_differ(test_session):
    with pytest.raises(ValidationError):
        await RouteService(test_session).create_route(
            CreateRouteRequest(
                name="Loop",
                origin_port="Iquitos",
                destination_port="iquitos ",
                price=Money(amount=1000, currency="PEN"),
            )
        )


@pytest.mark.asyncio
async def test_duplicate_vessel_name_conflicts(test_session):
    await _vessel(test_session, "Gran Diego")
    with pytest.raises(ConflictError):
        await _vessel(test_session, "Gran Diego")
