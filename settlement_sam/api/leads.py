"""
Public lead API routes.
"""
import uuid

from fastapi import APIRouter, Depends

from settlement_sam.api.deps import get_repositories, require_phone_token, require_lead_session
from settlement_sam.config import settings
from settlement_sam.core.exceptions import UnauthorizedError
from settlement_sam.core.security import create_lead_session_token
from settlement_sam.repositories.factory import Repositories
from settlement_sam.schemas.common import MessageResponse
from settlement_sam.schemas.lead import (
    LeadSubmission, VerifyCodeRequest, LeadSessionResponse, ContactPreferenceUpdate
)
from settlement_sam.services import sms
from settlement_sam.services.lead_service import LeadService
from settlement_sam.services.otp_service import OTPService

router = APIRouter(prefix="/api", tags=["leads"])


async def _store_lead(repos: Repositories, phone: str, data: LeadSubmission) -> LeadSessionResponse:
    lead = await LeadService(repos, settings).create_verified(phone, data)
    token = create_lead_session_token(phone, lead.id, lead.source, settings)
    return LeadSessionResponse(token=token, lead_id=lead.id)


@router.post("/verify-code", response_model=LeadSessionResponse, status_code=201)
async def verify_and_store(
    request: VerifyCodeRequest,
    repos: Repositories = Depends(get_repositories)
):
    """Verify the OTP and store the lead in one call."""
    otp = OTPService(repos, settings)
    # Rejected submissions must not spend the code
    LeadService(repos, settings).build_lead(otp.normalize(request.phone), request)

    result = await otp.verify(request.phone, request.code)
    return await _store_lead(repos, result.phone, request)


@router.post("/leads", response_model=LeadSessionResponse, status_code=201)
async def submit_lead(
    request: LeadSubmission,
    phone: str = Depends(require_phone_token),
    repos: Repositories = Depends(get_repositories)
):
    """Store a lead for a phone proven by /api/sms/verify."""
    if sms.normalize_phone(request.phone) != phone:
        raise UnauthorizedError("Phone does not match the verified number")
    return await _store_lead(repos, phone, request)


@router.patch("/leads/contact-preference", response_model=MessageResponse)
async def update_contact_preference(
    request: ContactPreferenceUpdate,
    session: dict = Depends(require_lead_session),
    repos: Repositories = Depends(get_repositories)
):
    """Record when the claimant would like a call."""
    await LeadService(repos, settings).set_contact_preference(uuid.UUID(session["lead_id"]), request)
    return MessageResponse(message="Contact preference saved.")
