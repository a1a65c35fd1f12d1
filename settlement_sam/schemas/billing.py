"""
Billing schemas.
"""
import uuid
from typing import Optional
from pydantic import BaseModel, Field

from settlement_sam.schemas.delivery import ThrottleMode


class InvoiceCreate(BaseModel):
    client_id: uuid.UUID
    quantity: int = Field(gt=0)
    throttle_mode: ThrottleMode = "standard"


class InvoiceResponse(BaseModel):
    success: bool = True
    invoice_id: str
    invoice_url: Optional[str] = None
    tier_name: str
    price_per_case: int
    total_dollars: int


class WebhookAck(BaseModel):
    received: bool = True
    handled: Optional[str] = None
