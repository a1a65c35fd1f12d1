"""
Delivery audit repository.
"""
import uuid
from typing import List

from sqlmodel import select, col
from sqlmodel.ext.asyncio.session import AsyncSession

from settlement_sam.models.delivery import Delivery
from settlement_sam.repositories.base import BaseRepository
from settlement_sam.repositories.interfaces import DeliveryRepositoryInterface


class DeliveryRepository(BaseRepository[Delivery], DeliveryRepositoryInterface):

    def __init__(self, session: AsyncSession):
        super().__init__(Delivery, session)

    async def list_for_lead(self, lead_id: uuid.UUID) -> List[Delivery]:
        result = await self.session.exec(
            select(Delivery)
            .where(Delivery.lead_id == lead_id)
            .order_by(col(Delivery.delivered_at).desc())
        )
        return list(result.all())
