"""
Lead model - a claimant's verified case record.
Score, tier and estimate are computed server-side at submission.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class Tiers:
    """Lead quality tiers derived from score."""
    HOT = "HOT"
    WARM = "WARM"
    COLD = "COLD"


class LeadSources:
    WIDGET = "widget"
    QUIZ = "quiz"


class Lead(SQLModel, table=True):
    """
    Lead entity - one OTP-verified claimant.
    `delivered` only ever moves from False to True.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # Identity
    name: str = Field(index=True)
    phone: str = Field(index=True)
    carrier: Optional[str] = None
    email: Optional[str] = None
    state: Optional[str] = None

    # Injury facts
    injury_type: str = Field(default="soft_tissue")  # soft_tissue, fracture, spinal, tbi, other
    surgery: bool = Field(default=False)
    hospitalized: bool = Field(default=False)
    still_in_treatment: bool = Field(default=False)
    missed_work: bool = Field(default=False)
    lost_wages: int = Field(default=0)
    has_attorney: bool = Field(default=False)
    insurance_contacted: bool = Field(default=False)
    incident_type: Optional[str] = None
    incident_timeframe: Optional[str] = None

    # Computed
    score: int = Field(default=0, index=True)
    tier: str = Field(default=Tiers.COLD, index=True)
    estimate_low: int = Field(default=0)
    estimate_high: int = Field(default=0)

    # Lifecycle
    verified: bool = Field(default=False, index=True)
    delivered: bool = Field(default=False, index=True)
    disputed: bool = Field(default=False)
    replaced: bool = Field(default=False)

    # Assignment
    client_id: Optional[uuid.UUID] = Field(default=None, foreign_key="client.id", index=True)
    exclusive_until: Optional[datetime] = None

    source: str = Field(default=LeadSources.WIDGET, index=True)

    # Contact preference
    contact_timing: Optional[str] = None  # asap, later_today, tomorrow
    contact_time_slot: Optional[str] = None  # morning, afternoon, evening

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
