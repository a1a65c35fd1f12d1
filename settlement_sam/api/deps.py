"""
API dependencies - shared across all routes.
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel.ext.asyncio.session import AsyncSession

from settlement_sam.config import settings
from settlement_sam.core.exceptions import UnauthorizedError
from settlement_sam.core.security import verify_token
from settlement_sam.database import get_session
from settlement_sam.repositories.factory import Repositories, build_repositories


bearer_scheme = HTTPBearer(auto_error=False)


async def get_repositories(session: AsyncSession = Depends(get_session)) -> Repositories:
    """Repositories for the configured datastore."""
    return build_repositories(session, settings)


def _bearer_payload(credentials: Optional[HTTPAuthorizationCredentials], token_type: str) -> dict:
    if credentials is None:
        raise UnauthorizedError("Missing bearer token")
    payload = verify_token(credentials.credentials, token_type, settings)
    if not payload:
        raise UnauthorizedError("Could not validate credentials")
    return payload


async def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> str:
    """Admin username from a valid admin token."""
    payload = _bearer_payload(credentials, "admin")
    if payload.get("role") != "admin":
        raise UnauthorizedError("Admin access required")
    return payload["sub"]


async def require_phone_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> str:
    """Verified phone number from a phone token."""
    payload = _bearer_payload(credentials, "phone")
    if not payload.get("verified") or not payload.get("phone"):
        raise UnauthorizedError("Phone not verified")
    return payload["phone"]


async def require_lead_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> dict:
    """Lead session claims; the token must name a lead."""
    payload = _bearer_payload(credentials, "lead")
    if not payload.get("lead_id"):
        raise UnauthorizedError("Session has no lead")
    return payload


def get_client_ip(request: Request) -> Optional[str]:
    """Client IP, preferring proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else None
