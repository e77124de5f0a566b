#!/usr/bin/env python3
"""Setup script for the river ticketing API."""

import asyncio
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

from river_ticketing.core.database import async_session_factory, close_db
from river_ticketing.core.exceptions import ConflictError
from river_ticketing.schemas.assignment import CreateAssignmentRequest
from river_ticketing.schemas.common import Money
from river_ticketing.schemas.route import CreateRouteRequest
from river_ticketing.schemas.vessel import CreateVesselRequest
from river_ticketing.services.assignment_service import AssignmentService
from river_ticketing.services.route_service import RouteService
from river_ticketing.services.vessel_service import VesselService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

server_dir = Path(__file__).parent.parent / "server"

SAMPLE_ROUTES = [
    ("Iquitos - Santa Rosa", "Iquitos", "Santa Rosa", 17000),
    ("Iquitos - Yurimaguas", "Iquitos", "Yurimaguas", 12000),
]

SAMPLE_VESSELS = [
    ("Amazonas I", 60, "RAPIDO"),
    ("Ucayali", 120, "LANCHA"),
]


def run_migrations() -> None:
    """Apply Alembic migrations up to head."""
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))

    logger.info("Running database migrations...")
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_sample_data() -> None:
    """Create a small catalog of routes, vessels and assignments."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        route_service = RouteService(db)
        vessel_service = VesselService(db)

        if await route_service.list_active_routes():
            logger.info("Sample data already exists, skipping...")
            return

        routes = []
        for name, origin, destination, price in SAMPLE_ROUTES:
            routes.append(await route_service.create_route(
                CreateRouteRequest(
                    name=name,
                    origin_port=origin,
                    destination_port=destination,
                    price=Money(amount=price, currency="PEN"),
                )
            ))

        vessels = []
        for name, capacity, vessel_type in SAMPLE_VESSELS:
            vessels.append(await vessel_service.create_vessel(
                CreateVesselRequest(name=name, capacity=capacity, vessel_type=vessel_type)
            ))

        assignment_service = AssignmentService(db)
        schedules = [
            (["06:00"], ["LUNES", "MIERCOLES", "VIERNES"]),
            (["18:00"], ["MARTES", "SABADO"]),
        ]
        for route, vessel, (times, days) in zip(routes, vessels, schedules):
            try:
                await assignment_service.create_assignment(
                    CreateAssignmentRequest(
                        route_id=str(route.id),
                        vessel_id=str(vessel.id),
                        departure_times=times,
                        operating_days=days,
                    )
                )
            except ConflictError:
                logger.info("Assignment already exists for %s", route.name)

    logger.info("Sample data created successfully!")


async def main():
    """Main setup function."""
    logger.info("Starting river ticketing API setup...")

    # Alembic's async env.py runs its own event loop
    await asyncio.to_thread(run_migrations)
    await create_sample_data()
    await close_db()

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: uvicorn river_ticketing.main:app --reload")


if __name__ == "__main__":
    asyncio.run(main())
