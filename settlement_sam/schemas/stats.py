"""
Dashboard statistics schemas.
"""
from typing import Dict
from pydantic import BaseModel


class PipelineStats(BaseModel):
    total: int
    verified: int
    hot: int
    warm: int
    cold: int
    delivered: int
    disputed: int
    recent_7d: int
    sms_sent: int
    sms_used: int
    avg_score: float
    conversion_rate: float


class SmsStats(BaseModel):
    total: int
    verified: int
    expired: int
    pending: int
    conversion_rate: float
    carrier_breakdown: Dict[str, int]
    recent_failed: int
