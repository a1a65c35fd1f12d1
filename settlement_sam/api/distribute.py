"""
Lead distribution API routes.
"""
from fastapi import APIRouter, Depends

from settlement_sam.api.deps import get_repositories, require_admin
from settlement_sam.config import settings
from settlement_sam.repositories.factory import Repositories
from settlement_sam.schemas.delivery import (
    DistributeRequest, DeliveryOutcome, SheetsPushRequest, SheetsPushResponse
)
from settlement_sam.services.distribution_service import DistributionService

router = APIRouter(prefix="/api/distribute", tags=["distribute"])


@router.post("", response_model=DeliveryOutcome)
async def distribute_lead(
    request: DistributeRequest,
    _: str = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    """Deliver one lead to a client by email, sheet or both."""
    service = DistributionService(repos, settings)
    return await service.deliver(request.lead_id, request.client_id, request.method)


@router.post("/sheets", response_model=SheetsPushResponse)
async def push_to_sheet(
    request: SheetsPushRequest,
    _: str = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    """Append every verified lead assigned to the client to their sheet."""
    pushed = await DistributionService(repos, settings).push_verified_leads_to_sheet(request.client_id)
    return SheetsPushResponse(pushed=pushed)
