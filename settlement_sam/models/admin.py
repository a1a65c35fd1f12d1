"""
Admin credentials and login audit trail.
"""
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field


class AdminUser(SQLModel, table=True):
    __tablename__ = "admin_user"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    username: str = Field(unique=True, index=True)
    password_hash: str

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class LoginAttempt(SQLModel, table=True):
    """
    One admin login attempt.
    identifier is "username::ip".
    """
    __tablename__ = "login_attempt"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    identifier: str = Field(index=True)
    success: bool = Field(default=False)
    attempted_at: datetime = Field(default_factory=datetime.utcnow, index=True)
