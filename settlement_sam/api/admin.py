"""
Admin back office API routes.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from settlement_sam.api.deps import get_repositories, require_admin, get_client_ip
from settlement_sam.config import settings
from settlement_sam.repositories.factory import Repositories
from settlement_sam.schemas.auth import AdminLoginRequest, TokenResponse, SetupStatus
from settlement_sam.schemas.client import (
    ClientCreate, ClientResponse, AttorneyInquiryUpdate, AttorneyInquiryResponse
)
from settlement_sam.schemas.delivery import ScheduleCreate, DeliveryScheduleRecord
from settlement_sam.schemas.lead import LeadFilter, LeadResponse, LeadUpdate
from settlement_sam.schemas.common import ErrorResponse, PaginatedResponse
from settlement_sam.schemas.stats import PipelineStats, SmsStats
from settlement_sam.services.admin_auth_service import AdminAuthService
from settlement_sam.services.client_service import ClientService
from settlement_sam.services.inquiry_service import InquiryService
from settlement_sam.services.lead_service import LeadService
from settlement_sam.services.stats_service import StatsService

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    responses={401: {"model": ErrorResponse}},
)


# =============================================================================
# Auth
# =============================================================================

@router.post("/login", response_model=TokenResponse)
async def login(
    request: AdminLoginRequest,
    http_request: Request,
    repos: Repositories = Depends(get_repositories)
):
    """Exchange admin credentials for a 24 hour token."""
    token = await AdminAuthService(repos, settings).login(
        request.username, request.password, get_client_ip(http_request)
    )
    return TokenResponse(token=token)


@router.get("/check-setup", response_model=SetupStatus)
async def check_setup(repos: Repositories = Depends(get_repositories)):
    """Whether admin credentials have been configured."""
    return await AdminAuthService(repos, settings).check_setup()


# =============================================================================
# Leads
# =============================================================================

@router.get("/leads", response_model=PaginatedResponse[LeadResponse])
async def list_leads(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    tier: Optional[str] = None,
    source: Optional[str] = None,
    verified: Optional[bool] = None,
    delivered: Optional[bool] = None,
    client_id: Optional[uuid.UUID] = None,
    search: Optional[str] = None,
    _: str = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    """List leads with filtering and pagination."""
    filters = LeadFilter(
        tier=tier,
        source=source,
        verified=verified,
        delivered=delivered,
        client_id=client_id,
        search=search
    )
    result = await LeadService(repos, settings).list(filters, page, limit)
    result["items"] = [LeadResponse.model_validate(lead) for lead in result["items"]]
    return result


@router.get("/leads/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: uuid.UUID,
    _: str = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    """Get a lead by ID."""
    return await LeadService(repos, settings).get(lead_id)


@router.patch("/leads/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_id: uuid.UUID,
    lead_data: LeadUpdate,
    _: str = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    """Rescore, flag or assign a lead."""
    return await LeadService(repos, settings).update(lead_id, lead_data)


# =============================================================================
# Clients
# =============================================================================

@router.get("/clients", response_model=List[ClientResponse])
async def list_clients(
    _: str = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    return await ClientService(repos).list()


@router.post("/clients", response_model=ClientResponse, status_code=201)
async def create_client(
    client_data: ClientCreate,
    _: str = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    """Add a law firm client."""
    return await ClientService(repos).create(client_data)


@router.post("/clients/{client_id}/schedule", response_model=DeliveryScheduleRecord, status_code=201)
async def create_schedule(
    client_id: uuid.UUID,
    schedule_data: ScheduleCreate,
    _: str = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    """Plan daily delivery targets for a package outside of Stripe."""
    return await ClientService(repos).create_schedule(
        client_id, schedule_data.quantity, schedule_data.mode, schedule_data.start_date
    )


# =============================================================================
# Dashboards
# =============================================================================

@router.get("/stats", response_model=PipelineStats)
async def pipeline_stats(
    _: str = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    return await StatsService(repos).pipeline()


@router.get("/sms-stats", response_model=SmsStats)
async def sms_stats(
    _: str = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    return await StatsService(repos).sms()


# =============================================================================
# Attorney inquiries
# =============================================================================

@router.get("/attorney-inquiries", response_model=List[AttorneyInquiryResponse])
async def list_inquiries(
    contacted: Optional[bool] = None,
    _: str = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    return await InquiryService(repos).list(contacted)


@router.patch("/attorney-inquiries", response_model=AttorneyInquiryResponse)
async def update_inquiry(
    request: AttorneyInquiryUpdate,
    _: str = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    """Mark an inquiry contacted or add notes."""
    return await InquiryService(repos).update(request.id, request.contacted, request.notes)
