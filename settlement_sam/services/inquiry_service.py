"""
Attorney inquiry service.
"""
import logging
import uuid
from typing import List, Optional

from settlement_sam.core.exceptions import NotFoundError
from settlement_sam.models.attorney import AttorneyInquiry
from settlement_sam.repositories.factory import Repositories
from settlement_sam.schemas.client import AttorneyInquiryCreate

logger = logging.getLogger(__name__)


class InquiryService:

    def __init__(self, repos: Repositories):
        self.inquiries = repos.inquiries

    async def submit(self, data: AttorneyInquiryCreate) -> AttorneyInquiry:
        values = data.model_dump()
        values["email"] = values["email"].lower()
        inquiry = await self.inquiries.create(values)
        logger.info("Attorney inquiry from %s (%s)", inquiry.firm, inquiry.email)
        return inquiry

    async def list(self, contacted: Optional[bool] = None) -> List[AttorneyInquiry]:
        return await self.inquiries.list_all(contacted)

    async def update(self, inquiry_id: uuid.UUID, contacted: Optional[bool], notes: Optional[str]) -> AttorneyInquiry:
        updated = await self.inquiries.update(inquiry_id, {"contacted": contacted, "notes": notes})
        if not updated:
            raise NotFoundError("Attorney inquiry", str(inquiry_id))
        return updated
