"""Operator service and the one-active-operator-per-vessel guard."""

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError, OperatorVesselConflictError, parse_uuid
from ..core.locks import exclusive, vessel_key
from ..models.operator import Operator, OperatorStatus
from ..schemas.operator import CreateOperatorRequest, VesselOccupancy
from .vessel_service import VesselService

logger = logging.getLogger(__name__)


class OperatorService:
    """
    Service for operator operations.

    A vessel may be claimed by at most one ACTIVE operator. The occupancy
    query is advisory and safe to call from forms; assignment and activation
    enforce the rule under a per-vessel lock.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.vessel_service = VesselService(db)

    async def is_vessel_occupied(
        self,
        vessel_id: UUID,
        exclude_operator_id: UUID | None = None
    ) -> VesselOccupancy:
        """
        Check whether another ACTIVE operator claims the vessel.

        Args:
            vessel_id: Vessel to check
            exclude_operator_id: Operator being edited, whose own claim is ignored

        Returns:
            Occupancy result naming the claiming operator, if any
        """
        holder = await self._active_holder(vessel_id, exclude_operator_id)
        if holder is None:
            return VesselOccupancy(occupied=False, message="Vessel has no active operator")

        return VesselOccupancy(
            occupied=True,
            operator_id=str(holder.id),
            operator_name=holder.full_name,
            message=f"Vessel is already operated by {holder.full_name}",
        )

    async def _active_holder(self, vessel_id: UUID, exclude_operator_id: UUID | None) -> Optional[Operator]:
        stmt = select(Operator).where(
            Operator.assigned_vessel_id == vessel_id,
            Operator.status == OperatorStatus.ACTIVE,
        )
        if exclude_operator_id is not None:
            stmt = stmt.where(Operator.id != exclude_operator_id)
        result = await self.db.execute(stmt.order_by(Operator.assigned_at).limit(1))
        return result.scalar_one_or_none()

    async def _ensure_vessel_free(self, vessel_id: UUID, operator_id: UUID | None) -> None:
        holder = await self._active_holder(vessel_id, operator_id)
        if holder is not None:
            logger.warning(
                "Vessel already has an active operator",
                extra={
                    "vessel_id": str(vessel_id),
                    "holder_operator_id": str(holder.id),
                    "operator_id": str(operator_id) if operator_id else None
                }
            )
            raise OperatorVesselConflictError(
                vessel_id=str(vessel_id),
                operator_id=str(holder.id),
                operator_name=holder.full_name,
            )

    async def create_operator(self, request: CreateOperatorRequest) -> Operator:
        """
        Create an operator, optionally claiming a vessel.

        Raises:
            ConflictError: If the email is taken
            NotFoundError: If the vessel does not exist
            OperatorVesselConflictError: If an active operator is created on an occupied vessel
        """
        existing = await self.get_operator_by_email(request.email)
        if existing:
            raise ConflictError(
                detail=f"Operator with email '{request.email}' already exists",
                conflicting_resource={"id": str(existing.id), "email": existing.email}
            )

        vessel_id = parse_uuid(request.vessel_id, "vessel_id") if request.vessel_id else None
        operator = Operator(
            full_name=request.full_name,
            email=request.email,
            status=request.status,
        )

        if vessel_id is None:
            await self._insert(operator)
            return operator

        await self.vessel_service.get_vessel_by_id_or_raise(vessel_id)
        async with exclusive(self.db, vessel_key(vessel_id)):
            try:
                if request.status == OperatorStatus.ACTIVE:
                    await self._ensure_vessel_free(vessel_id, None)
                operator.assigned_vessel_id = vessel_id
                operator.assigned_at = datetime.now(timezone.utc)
                await self._insert(operator)
            except Exception:
                await self.db.rollback()
                raise
        return operator

    async def _insert(self, operator: Operator) -> None:
        try:
            self.db.add(operator)
            await self.db.commit()
            await self.db.refresh(operator)
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Operator creation failed due to integrity constraint",
                extra={"email": operator.email, "error": str(e)}
            )
            raise ConflictError(detail=f"Operator with email '{operator.email}' could not be created")

        logger.info(
            "Operator created",
            extra={
                "operator_id": str(operator.id),
                "status": OperatorStatus(operator.status).value,
                "vessel_id": str(operator.assigned_vessel_id) if operator.assigned_vessel_id else None
            }
        )

    async def assign_vessel(self, operator_id: UUID, vessel_id: UUID | None) -> Operator:
        """
        Assign a vessel to an operator, or clear the assignment.

        Raises:
            NotFoundError: If operator or vessel not found
            OperatorVesselConflictError: If another active operator claims the vessel
        """
        operator = await self.get_operator_by_id_or_raise(operator_id)

        if vessel_id is None:
            operator.assigned_vessel_id = None
            operator.assigned_at = None
            await self.db.commit()
            await self.db.refresh(operator)
            logger.info("Operator vessel cleared", extra={"operator_id": str(operator_id)})
            return operator

        await self.vessel_service.get_vessel_by_id_or_raise(vessel_id)

        async with exclusive(self.db, vessel_key(vessel_id)):
            try:
                await self._ensure_vessel_free(vessel_id, operator_id)
                operator.assigned_vessel_id = vessel_id
                operator.assigned_at = datetime.now(timezone.utc)
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        await self.db.refresh(operator)
        logger.info(
            "Vessel assigned to operator",
            extra={"operator_id": str(operator_id), "vessel_id": str(vessel_id)}
        )
        return operator

    async def set_status(self, operator_id: UUID, status: OperatorStatus) -> Operator:
        """
        Activate or deactivate an operator.

        Activating an operator whose vessel is claimed by another active
        operator is rejected.

        Raises:
            NotFoundError: If operator not found
            OperatorVesselConflictError: If activation would double-claim the vessel
        """
        operator = await self.get_operator_by_id_or_raise(operator_id)
        vessel_id = operator.assigned_vessel_id

        if status != OperatorStatus.ACTIVE or vessel_id is None:
            operator.status = status
            await self.db.commit()
            await self.db.refresh(operator)
        else:
            async with exclusive(self.db, vessel_key(vessel_id)):
                try:
                    await self._ensure_vessel_free(vessel_id, operator_id)
                    operator.status = status
                    await self.db.commit()
                except Exception:
                    await self.db.rollback()
                    raise
            await self.db.refresh(operator)

        logger.info(
            "Operator status changed",
            extra={"operator_id": str(operator_id), "status": OperatorStatus(status).value}
        )
        return operator

    async def get_operator_by_id(self, operator_id: UUID) -> Optional[Operator]:
        stmt = select(Operator).where(Operator.id == operator_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_operator_by_email(self, email: str) -> Optional[Operator]:
        stmt = select(Operator).where(Operator.email == email)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_operator_by_id_or_raise(self, operator_id: UUID) -> Operator:
        """Get operator by ID or raise NotFoundError."""
        operator = await self.get_operator_by_id(operator_id)
        if not operator:
            logger.warning("Operator not found", extra={"operator_id": str(operator_id)})
            raise NotFoundError(resource_type="operator", resource_id=str(operator_id))
        return operator
