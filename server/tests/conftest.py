"""Test configuration and fixtures."""

import os

# Settings are read at import time; point them at SQLite before anything loads.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

import uuid  # noqa: E402
from datetime import date, datetime, timedelta, timezone  # noqa: E402

import jwt  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from river_ticketing.core.config import settings  # noqa: E402
from river_ticketing.core.database import Base, get_db  # noqa: E402
from river_ticketing.models import *  # noqa: E402,F403 - Import all models
from river_ticketing.schemas.assignment import CreateAssignmentRequest  # noqa: E402
from river_ticketing.schemas.common import Money  # noqa: E402
from river_ticketing.schemas.route import CreateRouteRequest  # noqa: E402
from river_ticketing.schemas.sale import ClientData, CreateSaleRequest  # noqa: E402
from river_ticketing.schemas.vessel import CreateVesselRequest  # noqa: E402
from river_ticketing.services.assignment_service import AssignmentService  # noqa: E402
from river_ticketing.services.route_service import RouteService  # noqa: E402
from river_ticketing.services.schedule import WEEKDAYS, normalize_weekday, today_local  # noqa: E402
from river_ticketing.services.vessel_service import VesselService  # noqa: E402

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ROUTE_PRICE = 2500  # S/ 25.00


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory for tests that need one session per simulated request."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def test_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session):
    """The real application, with the database dependency pointed at the test session."""
    from river_ticketing.main import create_app

    app = create_app()

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers():
    """Bearer token for a seller."""
    token = jwt.encode(
        {
            "sub": "seller-001",
            "username": "taquilla.iquitos",
            "roles": ["VENDEDOR"],
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        },
        settings.bearer_token_secret,
        algorithm="HS256",
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def travel_date_on():
    """Build a future date falling on a given weekday, e.g. travel_date_on("MIERCOLES")."""

    def _travel_date_on(weekday: str, weeks_ahead: int = 0) -> date:
        target = WEEKDAYS.index(normalize_weekday(weekday))
        start = today_local() + timedelta(days=1)
        offset = (target - start.weekday()) % 7
        return start + timedelta(days=offset + 7 * weeks_ahead)

    return _travel_date_on


@pytest.fixture
def catalog_factory(test_session):
    """
    Create a route, a vessel and their assignment.

    Returns a dict of plain ids and schedule data, safe to use after
    rollbacks expire ORM instances.
    """

    async def _create(
        capacity: int = 20,
        operating_days: list[str] | None = None,
        departure_times: list[str] | None = None,
        price: int = ROUTE_PRICE,
    ) -> dict:
        suffix = uuid.uuid4().hex[:8]
        route = await RouteService(test_session).create_route(
            CreateRouteRequest(
                name=f"Iquitos - Santa Rosa {suffix}",
                origin_port="Iquitos",
                destination_port="Santa Rosa",
                price=Money(amount=price, currency="PEN"),
            )
        )
        vessel = await VesselService(test_session).create_vessel(
            CreateVesselRequest(name=f"Amazonas {suffix}", capacity=capacity)
        )
        assignment = await AssignmentService(test_session).create_assignment(
            CreateAssignmentRequest(
                route_id=str(route.id),
                vessel_id=str(vessel.id),
                departure_times=departure_times or ["08:00", "14:00"],
                operating_days=operating_days or ["LUNES", "MIERCOLES"],
            )
        )
        return {
            "route_id": str(route.id),
            "vessel_id": str(vessel.id),
            "assignment_id": str(assignment.id),
            "capacity": capacity,
            "price": price,
            "departure_times": list(assignment.departure_times),
            "operating_days": list(assignment.operating_days),
        }

    return _create


@pytest.fixture
def sale_request_factory():
    """Build a CreateSaleRequest for a catalog created by catalog_factory."""

    def _build(catalog: dict, travel_date: date, quantity: int = 1, **overrides) -> CreateSaleRequest:
        data = {
            "client": ClientData(
                dni=overrides.pop("dni", "45873216"),
                first_name="Rosa",
                last_name="Huaman",
                phone="965123456",
            ),
            "route_id": catalog["route_id"],
            "vessel_id": catalog["vessel_id"],
            "embarkation_port": "Iquitos",
            "travel_date": travel_date,
            "departure_time": catalog["departure_times"][0],
            "boarding_time": "07:30",
            "passenger_count": quantity,
            "payment_type": "UNICO",
            "payment_method": "EFECTIVO",
        }
        data.update(overrides)
        return CreateSaleRequest(**data)

    return _build


@pytest.fixture
def sale_payload():
    """JSON body for /v1/sale/create."""

    def _payload(catalog: dict, travel_date: date, quantity: int = 1, **overrides) -> dict:
        body = {
            "client": {"dni": "70125489", "first_name": "Luis", "last_name": "Pacaya"},
            "route_id": catalog["route_id"],
            "vessel_id": catalog["vessel_id"],
            "embarkation_port": "Iquitos",
            "travel_date": travel_date.isoformat(),
            "departure_time": catalog["departure_times"][0],
            "boarding_time": "07:30",
            "passenger_count": quantity,
            "payment_type": "UNICO",
            "payment_method": "EFECTIVO",
        }
        body.update(overrides)
        return body

    return _payload
