"""
SMS verification API routes.
"""
from fastapi import APIRouter, Depends

from settlement_sam.api.deps import get_repositories
from settlement_sam.config import settings
from settlement_sam.repositories.factory import Repositories
from settlement_sam.schemas.auth import SendCodeRequest, VerifyPhoneRequest, PhoneTokenResponse
from settlement_sam.services.otp_service import OTPService

router = APIRouter(prefix="/api/sms", tags=["sms"])


@router.post("/send")
async def send_code(
    request: SendCodeRequest,
    repos: Repositories = Depends(get_repositories)
):
    """Text a verification code to the claimant."""
    issued = await OTPService(repos, settings).issue(request.phone, request.carrier, request.name)

    response = {
        "success": True,
        "message": "Verification code sent.",
        "expires_at": issued.expires_at,
    }
    # Only in dev mode so the flow can be tested without a handset
    if settings.DEV_MODE:
        response["_dev_code"] = issued.code
    return response


@router.post("/verify", response_model=PhoneTokenResponse)
async def verify_code(
    request: VerifyPhoneRequest,
    repos: Repositories = Depends(get_repositories)
):
    """Check a code and hand back a short-lived phone token."""
    result = await OTPService(repos, settings).verify(request.phone, request.code)
    return PhoneTokenResponse(phone_token=result.phone_token)
