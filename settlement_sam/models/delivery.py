"""
Delivery audit records and per-client delivery schedules.
"""
import uuid
from datetime import datetime, date
from typing import Optional

from sqlmodel import SQLModel, Field


class Delivery(SQLModel, table=True):
    """One lead sent to one client."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    lead_id: uuid.UUID = Field(foreign_key="lead.id", index=True)
    client_id: uuid.UUID = Field(foreign_key="client.id", index=True)

    method: str  # email, sheets, both
    status: str = Field(default="delivered")
    delivered_at: datetime = Field(default_factory=datetime.utcnow)
    exclusive_until: Optional[datetime] = None


class DeliverySchedule(SQLModel, table=True):
    """
    Throttle plan for one purchased package.
    Daily targets live in ScheduleDay rows.
    """
    __tablename__ = "delivery_schedule"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    client_id: uuid.UUID = Field(foreign_key="client.id", index=True)

    mode: str = Field(default="standard")  # conservative, standard, aggressive
    quantity: int
    start_date: date

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)


class ScheduleDay(SQLModel, table=True):
    __tablename__ = "schedule_day"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    schedule_id: uuid.UUID = Field(foreign_key="delivery_schedule.id", index=True)
    day: date = Field(index=True)
    target: int = Field(default=0)
    delivered: int = Field(default=0)
