"""Vessel service for catalog operations."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError
from ..models.vessel import Vessel, VesselStatus
from ..schemas.vessel import CreateVesselRequest

logger = logging.getLogger(__name__)


class VesselService:
    """Service for vessel-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_vessel(self, request: CreateVesselRequest) -> Vessel:
        """
        Create a new vessel.

        Args:
            request: Vessel creation request

        Returns:
            Created vessel entity

        Raises:
            ConflictError: If a vessel with the same name already exists
        """
        existing_vessel = await self.get_vessel_by_name(request.name)
        if existing_vessel:
            logger.warning(
                "Vessel creation failed - name already exists",
                extra={"vessel_name": request.name, "existing_vessel_id": str(existing_vessel.id)}
            )
            raise ConflictError(
                detail=f"Vessel '{request.name}' already exists",
                conflicting_resource={"id": str(existing_vessel.id), "name": existing_vessel.name}
            )

        vessel = Vessel(
            name=request.name,
            capacity=request.capacity,
            vessel_type=request.vessel_type,
            status=VesselStatus.ACTIVE,
        )

        try:
            self.db.add(vessel)
            await self.db.commit()
            await self.db.refresh(vessel)
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Vessel creation failed due to integrity constraint",
                extra={"vessel_name": request.name, "error": str(e)}
            )
            raise ConflictError(detail=f"Vessel '{request.name}' could not be created")

        logger.info(
            "Vessel created successfully",
            extra={"vessel_id": str(vessel.id), "vessel_name": vessel.name, "capacity": vessel.capacity}
        )
        return vessel

    async def set_status(self, vessel_id: UUID, status: VesselStatus) -> Vessel:
        """Change a vessel's operational status."""
        vessel = await self.get_vessel_by_id_or_raise(vessel_id)
        previous_status = vessel.status
        vessel.status = status
        await self.db.commit()
        await self.db.refresh(vessel)

        logger.info(
            "Vessel status changed",
            extra={
                "vessel_id": str(vessel.id),
                "from_status": VesselStatus(previous_status).value,
                "to_status": VesselStatus(status).value
            }
        )
        return vessel

    async def get_vessel_by_id(self, vessel_id: UUID) -> Optional[Vessel]:
        stmt = select(Vessel).where(Vessel.id == vessel_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_vessel_by_name(self, name: str) -> Optional[Vessel]:
        stmt = select(Vessel).where(Vessel.name == name)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_vessel_by_id_or_raise(self, vessel_id: UUID) -> Vessel:
        """
        Get vessel by ID or raise NotFoundError.

        Raises:
            NotFoundError: If vessel not found
        """
        vessel = await self.get_vessel_by_id(vessel_id)
        if not vessel:
            logger.warning("Vessel not found", extra={"vessel_id": str(vessel_id)})
            raise NotFoundError(resource_type="vessel", resource_id=str(vessel_id))
        return vessel
