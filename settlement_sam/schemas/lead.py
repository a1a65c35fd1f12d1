"""
Lead schemas.
"""
import uuid
from typing import Optional, Literal
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from settlement_sam.schemas.quiz import QuizAnswers, IncidentType, IncidentTimeframe


class LeadSubmission(BaseModel):
    """
    Lead details sent after the claimant proves their phone.
    Quiz submissions carry the raw answers; score and estimate are
    always computed server-side.
    """
    name: str = Field(min_length=1, max_length=120)
    phone: str
    carrier: Optional[str] = None
    email: Optional[EmailStr] = None
    state: Optional[str] = None
    source: Literal["widget", "quiz"] = "widget"

    # Widget inputs
    injury_type: str = "soft_tissue"
    surgery: bool = False
    hospitalized: bool = False
    still_in_treatment: bool = False
    missed_work: bool = False
    lost_wages: float = Field(default=0, ge=0)
    has_attorney: bool = False
    insurance_contacted: bool = False
    incident_type: Optional[IncidentType] = None
    incident_timeframe: Optional[IncidentTimeframe] = None

    # Quiz inputs
    answers: Optional[QuizAnswers] = None

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Jane Doe",
                "phone": "(555) 123-4567",
                "carrier": "vtext.com",
                "source": "widget",
                "injury_type": "fracture",
                "surgery": False,
                "lost_wages": 6000
            }
        }


class VerifyCodeRequest(LeadSubmission):
    """Verify the OTP and store the lead in one call."""
    code: str = Field(min_length=4, max_length=6)


class LeadSessionResponse(BaseModel):
    success: bool = True
    token: str
    lead_id: uuid.UUID


class ContactPreferenceUpdate(BaseModel):
    timing: Literal["asap", "later_today", "tomorrow"]
    time_slot: Optional[Literal["morning", "afternoon", "evening"]] = None


class LeadUpdate(BaseModel):
    """Admin update. `delivered` is deliberately absent."""
    score: Optional[int] = Field(default=None, ge=0)
    tier: Optional[Literal["HOT", "WARM", "COLD"]] = None
    disputed: Optional[bool] = None
    replaced: Optional[bool] = None
    client_id: Optional[uuid.UUID] = None


class LeadFilter(BaseModel):
    """Lead filter parameters."""
    tier: Optional[str] = None
    source: Optional[str] = None
    verified: Optional[bool] = None
    delivered: Optional[bool] = None
    client_id: Optional[uuid.UUID] = None
    search: Optional[str] = None  # name or phone


class LeadResponse(BaseModel):
    """Lead as seen by admins."""
    id: uuid.UUID
    name: str
    phone: str
    carrier: Optional[str]
    email: Optional[str]
    state: Optional[str]
    injury_type: str
    surgery: bool
    hospitalized: bool
    still_in_treatment: bool
    missed_work: bool
    lost_wages: int
    has_attorney: bool
    insurance_contacted: bool
    incident_type: Optional[str]
    incident_timeframe: Optional[str]
    score: int
    tier: str
    estimate_low: int
    estimate_high: int
    verified: bool
    delivered: bool
    disputed: bool
    replaced: bool
    client_id: Optional[uuid.UUID]
    exclusive_until: Optional[datetime]
    source: str
    contact_timing: Optional[str]
    contact_time_slot: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True
