"""Client registry keyed by national ID (DNI)."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.client import Client
from ..schemas.sale import ClientData

logger = logging.getLogger(__name__)

DEFAULT_NATIONALITY = "Peruana"


class ClientService:
    """Service for client lookups at the point of sale."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_client_by_dni(self, dni: str) -> Optional[Client]:
        stmt = select(Client).where(Client.dni == dni)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def find_or_create(self, data: ClientData) -> Client:
        """
        Return the client with the given DNI, creating it if needed.

        An existing client's name is refreshed, and its phone and email are
        updated when new values are given. Changes are flushed but not
        committed, so they land in the caller's transaction.
        """
        client = await self.get_client_by_dni(data.dni)

        if client is None:
            client = Client(
                dni=data.dni,
                first_name=data.first_name,
                last_name=data.last_name,
                phone=data.phone or "",
                email=data.email or "",
                nationality=data.nationality or DEFAULT_NATIONALITY,
            )
            self.db.add(client)
            await self.db.flush()
            logger.info("Client registered", extra={"client_id": str(client.id), "dni": client.dni})
            return client

        if data.phone or data.email:
            client.phone = data.phone or client.phone
            client.email = data.email or client.email
            client.first_name = data.first_name
            client.last_name = data.last_name
            await self.db.flush()
            logger.debug("Client contact details updated", extra={"client_id": str(client.id)})

        return client
