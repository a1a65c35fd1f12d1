"""
Delivery and schedule schemas.
"""
import uuid
from datetime import datetime, date
from typing import Optional, List, Dict, Literal
from pydantic import BaseModel, Field


DeliveryMethod = Literal["email", "sheets", "both"]
ThrottleMode = Literal["conservative", "standard", "aggressive"]


class DeliveryScheduleRecord(BaseModel):
    """A stored schedule with its per-day targets and delivered counts."""
    id: uuid.UUID
    client_id: uuid.UUID
    mode: str
    quantity: int
    start_date: date
    created_at: datetime
    targets: Dict[str, int] = {}
    delivered_by_date: Dict[str, int] = {}

    def delivered_on(self, day: date) -> int:
        return self.delivered_by_date.get(day.isoformat(), 0)


class DistributeRequest(BaseModel):
    lead_id: uuid.UUID
    client_id: Optional[uuid.UUID] = None
    method: DeliveryMethod = "email"


class DeliveryOutcome(BaseModel):
    success: bool = True
    delivery_id: uuid.UUID
    method: str
    exclusive_until: Optional[datetime] = None
    errors: Optional[List[str]] = None


class SheetsPushRequest(BaseModel):
    client_id: uuid.UUID


class SheetsPushResponse(BaseModel):
    success: bool = True
    pushed: int


class ScheduleCreate(BaseModel):
    quantity: int = Field(gt=0)
    mode: ThrottleMode = "standard"
    start_date: Optional[date] = None
