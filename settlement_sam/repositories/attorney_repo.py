"""
Attorney inquiry repository.
"""
from typing import Optional, List

from sqlmodel.ext.asyncio.session import AsyncSession

from settlement_sam.models.attorney import AttorneyInquiry
from settlement_sam.repositories.base import BaseRepository
from settlement_sam.repositories.interfaces import AttorneyInquiryRepositoryInterface


class AttorneyInquiryRepository(BaseRepository[AttorneyInquiry], AttorneyInquiryRepositoryInterface):

    def __init__(self, session: AsyncSession):
        super().__init__(AttorneyInquiry, session)

    async def list_all(self, contacted: Optional[bool] = None) -> List[AttorneyInquiry]:
        return await self.list({"contacted": contacted})
