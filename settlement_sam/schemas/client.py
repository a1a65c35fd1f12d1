"""
Client (law firm) and attorney inquiry schemas.
"""
import uuid
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field


class ClientCreate(BaseModel):
    name: str = Field(min_length=1)
    firm: str = Field(min_length=1)
    email: EmailStr
    sheets_id: Optional[str] = None


class ClientResponse(BaseModel):
    id: uuid.UUID
    name: str
    firm: str
    email: str
    balance: float
    leads_purchased: int
    leads_delivered: int
    leads_replaced: int
    sheets_id: Optional[str]
    stripe_customer_id: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class AttorneyInquiryCreate(BaseModel):
    name: str = Field(min_length=1)
    firm: str = Field(min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    state: Optional[str] = None
    case_volume: Optional[str] = None
    bar_number: Optional[str] = None
    source: str = "attorneys_page"


class AttorneyInquiryUpdate(BaseModel):
    id: uuid.UUID
    contacted: Optional[bool] = None
    notes: Optional[str] = None


class AttorneyInquiryResponse(BaseModel):
    id: uuid.UUID
    name: str
    firm: str
    email: str
    phone: Optional[str]
    state: Optional[str]
    case_volume: Optional[str]
    bar_number: Optional[str]
    source: str
    contacted: bool
    notes: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True
