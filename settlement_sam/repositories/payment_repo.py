"""
Payment repository.
"""
import logging
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy.exc import IntegrityError

from settlement_sam.models.payment import Payment
from settlement_sam.repositories.base import BaseRepository
from settlement_sam.repositories.interfaces import PaymentRepositoryInterface

logger = logging.getLogger(__name__)


class PaymentRepository(BaseRepository[Payment], PaymentRepositoryInterface):

    def __init__(self, session: AsyncSession):
        super().__init__(Payment, session)

    async def record(self, obj_in: dict) -> Optional[Payment]:
        """The unique invoice id decides which webhook delivery wins."""
        try:
            return await self.create(obj_in)
        except IntegrityError:
            await self.session.rollback()
            logger.info("Invoice %s already recorded", obj_in.get("stripe_invoice_id"))
            return None

    async def get_by_invoice(self, stripe_invoice_id: str) -> Optional[Payment]:
        return await self.get_by_field("stripe_invoice_id", stripe_invoice_id)
