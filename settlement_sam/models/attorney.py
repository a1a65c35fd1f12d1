"""
Attorney inquiry - a law firm asking about buying leads.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class AttorneyInquiry(SQLModel, table=True):
    __tablename__ = "attorney_inquiry"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    name: str
    firm: str
    email: str = Field(index=True)
    phone: Optional[str] = None
    state: Optional[str] = None
    case_volume: Optional[str] = None
    bar_number: Optional[str] = None
    source: str = Field(default="attorneys_page")

    contacted: bool = Field(default=False, index=True)
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
