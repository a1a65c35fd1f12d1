"""
Billing API routes.
"""
from fastapi import APIRouter, Depends, Request

from settlement_sam.api.deps import get_repositories, require_admin
from settlement_sam.config import settings
from settlement_sam.repositories.factory import Repositories
from settlement_sam.schemas.billing import InvoiceCreate, InvoiceResponse, WebhookAck
from settlement_sam.services.billing_service import BillingService

router = APIRouter(prefix="/api/billing", tags=["billing"])


@router.post("/invoice", response_model=InvoiceResponse)
async def create_invoice(
    request: InvoiceCreate,
    _: str = Depends(require_admin),
    repos: Repositories = Depends(get_repositories)
):
    """Invoice a client for a prepaid package."""
    return await BillingService(repos, settings).create_invoice(
        request.client_id, request.quantity, request.throttle_mode
    )


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    repos: Repositories = Depends(get_repositories)
):
    """Stripe events; the raw body is needed for the signature check."""
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature", "")
    handled = await BillingService(repos, settings).handle_webhook(payload, sig_header)
    return WebhookAck(handled=handled)
