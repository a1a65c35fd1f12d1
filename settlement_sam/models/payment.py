"""
Payment model - one paid Stripe invoice.
"""
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field


class Payment(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    client_id: uuid.UUID = Field(foreign_key="client.id", index=True)

    # Unique so a replayed webhook cannot credit twice
    stripe_invoice_id: str = Field(unique=True, index=True)
    amount_cents: int
    lead_quantity: int
    tier_name: str
    throttle_mode: str = Field(default="standard")

    paid_at: datetime = Field(default_factory=datetime.utcnow)
