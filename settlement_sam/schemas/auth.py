"""
Admin auth and phone verification schemas.
"""
from typing import Optional
from pydantic import BaseModel, Field


class AdminLoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    success: bool = True
    token: str


class SetupStatus(BaseModel):
    configured: bool
    source: Optional[str] = None  # database, environment


class SendCodeRequest(BaseModel):
    phone: str
    carrier: Optional[str] = None
    name: Optional[str] = Field(default=None, max_length=120)


class VerifyPhoneRequest(BaseModel):
    phone: str
    code: str = Field(min_length=4, max_length=6)


class PhoneTokenResponse(BaseModel):
    success: bool = True
    phone_token: str
