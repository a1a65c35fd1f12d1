"""
Security utilities for Settlement Sam API.
Consolidated JWT, password hashing and one-time code generation.
"""
from datetime import datetime, timedelta
from typing import Optional, Literal
import uuid
import secrets

import jwt
import bcrypt

from settlement_sam.config import Settings, settings as default_settings


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError:
        # Malformed stored hash
        return False


def get_password_hash(password: str) -> str:
    """Hash a password."""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


# Token types
TokenType = Literal["admin", "lead", "phone"]


def create_token(
    data: dict,
    token_type: TokenType,
    expires_delta: timedelta,
    settings: Settings = default_settings
) -> str:
    """
    Create a JWT token.

    Args:
        data: Payload data
        token_type: 'admin', 'lead' or 'phone'
        expires_delta: Lifetime of the token

    Returns:
        Encoded JWT string
    """
    to_encode = data.copy()
    now = datetime.utcnow()

    to_encode.update({
        "exp": now + expires_delta,
        "iat": now,
        "type": token_type,
        "jti": str(uuid.uuid4())
    })

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_admin_token(username: str, settings: Settings = default_settings) -> str:
    """Create an admin session token."""
    return create_token(
        {"sub": username, "role": "admin"},
        token_type="admin",
        expires_delta=timedelta(hours=settings.ADMIN_TOKEN_EXPIRE_HOURS),
        settings=settings,
    )


def create_phone_token(phone: str, settings: Settings = default_settings) -> str:
    """Short-lived token proving ownership of a phone number."""
    return create_token(
        {"sub": phone, "phone": phone, "verified": True},
        token_type="phone",
        expires_delta=timedelta(minutes=settings.PHONE_TOKEN_EXPIRE_MINUTES),
        settings=settings,
    )


def create_lead_session_token(
    phone: str,
    lead_id: Optional[uuid.UUID],
    source: str,
    settings: Settings = default_settings
) -> str:
    """Session token handed to a claimant after their lead is stored."""
    return create_token(
        {
            "sub": phone,
            "phone": phone,
            "lead_id": str(lead_id) if lead_id else None,
            "role": "lead",
            "source": source,
        },
        token_type="lead",
        expires_delta=timedelta(hours=settings.LEAD_SESSION_EXPIRE_HOURS),
        settings=settings,
    )


def decode_token(token: str, settings: Settings = default_settings) -> Optional[dict]:
    """
    Decode and validate a JWT token.

    Returns:
        Decoded payload dict or None if invalid
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def verify_token(token: str, token_type: TokenType, settings: Settings = default_settings) -> Optional[dict]:
    """
    Verify a token and check its type.

    Returns:
        Decoded payload if valid and correct type, None otherwise
    """
    payload = decode_token(token, settings)
    if payload and payload.get("type") == token_type:
        return payload
    return None


def generate_secure_token(length: int = 32) -> str:
    """Generate a secure random hex token."""
    return secrets.token_hex(length)


def generate_verification_code(length: int = 6) -> str:
    """Generate a zero-padded numeric verification code of 4-6 digits."""
    if not 4 <= length <= 6:
        raise ValueError("verification codes are 4 to 6 digits long")
    return str(secrets.randbelow(10 ** length)).zfill(length)
