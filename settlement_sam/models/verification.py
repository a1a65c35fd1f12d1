"""
One-time verification codes sent by email-to-SMS.
"""
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field


class VerificationCode(SQLModel, table=True):
    """
    A code is active while unused and unexpired.
    Issuing a new code for the same phone marks older ones used.
    """
    __tablename__ = "verification_code"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    phone: str = Field(index=True)
    code: str
    carrier: str = Field(default="MULTI_BLAST")

    attempts: int = Field(default=0)
    used: bool = Field(default=False)

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    expires_at: datetime
