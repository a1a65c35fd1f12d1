"""
Attorney inquiry API routes.
"""
from fastapi import APIRouter, Depends

from settlement_sam.api.deps import get_repositories
from settlement_sam.repositories.factory import Repositories
from settlement_sam.schemas.client import AttorneyInquiryCreate, AttorneyInquiryResponse
from settlement_sam.services.inquiry_service import InquiryService

router = APIRouter(prefix="/api", tags=["attorneys"])


@router.post("/attorney-inquiry", response_model=AttorneyInquiryResponse, status_code=201)
async def submit_inquiry(
    request: AttorneyInquiryCreate,
    repos: Repositories = Depends(get_repositories)
):
    """Law firm interest form from the attorneys page."""
    return await InquiryService(repos).submit(request)
