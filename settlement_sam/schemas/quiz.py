"""
Quiz and estimate schemas.
"""
from typing import Optional, List, Literal
from pydantic import BaseModel, Field


IncidentType = Literal["motor_vehicle", "slip_fall", "workplace", "med_mal", "other"]
IncidentTimeframe = Literal["under_6_months", "6_to_12_months", "1_to_2_years", "over_2_years"]
TreatmentStatus = Literal["er_doctor", "self_treated", "none"]
TreatmentOngoing = Literal["yes", "no", "sometimes"]
MissedWorkStatus = Literal["yes_missed", "yes_cant_work", "no"]
InsuranceContactStatus = Literal["they_contacted", "got_letter", "not_yet"]
AttorneyStatus = Literal["yes", "no"]
InjuryType = Literal["soft_tissue", "fracture", "spinal", "tbi", "other"]
Tier = Literal["HOT", "WARM", "COLD"]


class QuizAnswers(BaseModel):
    """The 11 quiz answers. Unanswered questions contribute nothing."""
    incident_type: Optional[IncidentType] = None
    state: Optional[str] = None
    incident_timeframe: Optional[IncidentTimeframe] = None
    at_fault: Optional[bool] = None
    received_treatment: Optional[TreatmentStatus] = None
    hospitalized: Optional[bool] = None
    has_surgery: Optional[bool] = None
    still_in_treatment: Optional[TreatmentOngoing] = None
    missed_work: Optional[MissedWorkStatus] = None
    lost_wages: float = Field(default=0, ge=0)
    insurance_contact: Optional[InsuranceContactStatus] = None
    has_attorney: Optional[AttorneyStatus] = None

    class Config:
        json_schema_extra = {
            "example": {
                "incident_type": "motor_vehicle",
                "state": "TX",
                "incident_timeframe": "under_6_months",
                "at_fault": False,
                "received_treatment": "er_doctor",
                "hospitalized": True,
                "has_surgery": False,
                "still_in_treatment": "yes",
                "missed_work": "yes_missed",
                "lost_wages": 4000,
                "insurance_contact": "got_letter",
                "has_attorney": "no"
            }
        }


class EstimateRange(BaseModel):
    low: int
    high: int


class KeyFactor(BaseModel):
    label: str
    points: str


class QuizOutcome(BaseModel):
    """
    Result of scoring a quiz.
    A disqualified outcome carries no score, tier or estimate.
    """
    disqualified: bool = False
    disqualify_reason: Optional[str] = None
    headline: Optional[str] = None
    message: Optional[str] = None
    soft_exit: bool = False
    score: Optional[int] = None
    tier: Optional[Tier] = None
    estimate: Optional[EstimateRange] = None
    key_factors: List[KeyFactor] = []


class EstimateRequest(BaseModel):
    """Widget estimate input."""
    injury_type: str = "soft_tissue"
    surgery: bool = False
    lost_wages: float = Field(default=0, ge=0)


class EstimateResponse(BaseModel):
    low: int
    high: int
    low_display: str
    high_display: str
    summary: str
