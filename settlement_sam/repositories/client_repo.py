"""
Client repository.
"""
import uuid
from typing import Optional, List

from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import update

from settlement_sam.models.client import Client
from settlement_sam.repositories.base import BaseRepository
from settlement_sam.repositories.interfaces import ClientRepositoryInterface


class ClientRepository(BaseRepository[Client], ClientRepositoryInterface):

    def __init__(self, session: AsyncSession):
        super().__init__(Client, session)

    async def get_by_email(self, email: str) -> Optional[Client]:
        return await self.get_by_field("email", email.lower())

    async def list_all(self) -> List[Client]:
        return await self.list()

    async def increment(self, id: uuid.UUID, **deltas: float) -> None:
        """column = column + delta, evaluated by the database."""
        values = {
            field: getattr(Client, field) + delta
            for field, delta in deltas.items()
        }
        await self.session.execute(update(Client).where(Client.id == id).values(**values))
        await self.session.commit()
