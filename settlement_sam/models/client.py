"""
Client model - a law firm buying lead packages.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class Client(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    name: str
    firm: str
    email: str = Field(unique=True, index=True)

    # Balance is in dollars
    balance: float = Field(default=0)

    leads_purchased: int = Field(default=0)
    leads_delivered: int = Field(default=0)
    leads_replaced: int = Field(default=0)

    sheets_id: Optional[str] = None
    stripe_customer_id: Optional[str] = Field(default=None, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
