"""
OTP service - rate-limited phone verification codes.

Per phone a code moves: active -> used (matched, or superseded by a newer
send) or expired (TTL elapsed). Wrong guesses count against the code; once
the cap is hit only a fresh code helps.
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from pydantic import BaseModel

from settlement_sam.config import Settings, settings as default_settings
from settlement_sam.core.exceptions import (
    InvalidInputError,
    TooManyRequestsError,
    TooManyAttemptsError,
    CodeExpiredError,
    InvalidCodeError,
)
from settlement_sam.core.security import generate_verification_code, create_phone_token
from settlement_sam.repositories.factory import Repositories
from settlement_sam.services import sms
from settlement_sam.services.email_service import EmailService, get_email_service

logger = logging.getLogger(__name__)


class IssuedCode(BaseModel):
    code: str
    expires_at: datetime


class VerificationResult(BaseModel):
    ok: bool
    phone: str
    phone_token: Optional[str] = None


class OTPService:
    """Issue and verify phone codes."""

    def __init__(
        self,
        repos: Repositories,
        settings: Settings = default_settings,
        email_service: Optional[EmailService] = None,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        self.codes = repos.codes
        self.settings = settings
        self.email_service = email_service or get_email_service()
        self.clock = clock

    def normalize(self, raw_phone: str) -> str:
        phone = sms.normalize_phone(raw_phone)
        if not sms.is_valid_phone(phone):
            raise InvalidInputError("Please enter a valid 10-digit US phone number.")
        return phone

    async def issue(self, raw_phone: str, carrier: Optional[str] = None, name: Optional[str] = None) -> IssuedCode:
        """
        Store a fresh code and text it.

        Raises:
            InvalidInputError: bad phone or unknown carrier gateway
            TooManyRequestsError: send limit for the window reached
            SendFailedError: no gateway accepted the message
        """
        phone = self.normalize(raw_phone)
        gateway = sms.resolve_carrier(carrier)
        if gateway is None:
            raise InvalidInputError("Please select a valid carrier.")

        now = self.clock()
        code = generate_verification_code(self.settings.OTP_CODE_LENGTH)
        record = await self.codes.issue(
            phone=phone,
            code=code,
            carrier=gateway,
            now=now,
            expires_at=now + timedelta(minutes=self.settings.OTP_TTL_MINUTES),
            window_start=now - timedelta(minutes=self.settings.OTP_RATE_WINDOW_MINUTES),
            max_sends=self.settings.OTP_MAX_SENDS_PER_WINDOW,
        )
        if record is None:
            logger.warning("OTP rate limit hit for %s", phone)
            raise TooManyRequestsError()

        try:
            if gateway == sms.MULTI_BLAST:
                await sms.send_sms_code_multi(self.email_service, phone, code, name)
            else:
                await sms.send_sms_code(self.email_service, phone, gateway, code, name)
        except Exception:
            # A failed send must not count against the rate limit
            await self.codes.delete(record.id)
            raise

        logger.info("Code sent to %s via %s", phone, gateway)
        return IssuedCode(code=code, expires_at=record.expires_at)

    async def verify(self, raw_phone: str, code: str) -> VerificationResult:
        """
        Check a code against the phone's active one.

        Raises:
            CodeExpiredError: nothing active for the phone
            TooManyAttemptsError: attempt cap reached
            InvalidCodeError: mismatch, carries remaining attempts
        """
        phone = self.normalize(raw_phone)
        max_attempts = self.settings.OTP_MAX_ATTEMPTS

        record = await self.codes.get_active(phone, self.clock())
        if record is None:
            raise CodeExpiredError()

        if record.attempts >= max_attempts:
            raise TooManyAttemptsError()

        if record.code != str(code).strip():
            attempts = await self.codes.increment_attempts(record.id, max_attempts)
            if attempts is None:
                raise TooManyAttemptsError()
            logger.info("Wrong code for %s (%d/%d)", phone, attempts, max_attempts)
            raise InvalidCodeError(max_attempts - attempts)

        if not await self.codes.mark_used(record.id):
            # Another request consumed it first
            raise CodeExpiredError()

        logger.info("Phone %s verified", phone)
        return VerificationResult(
            ok=True,
            phone=phone,
            phone_token=create_phone_token(phone, self.settings),
        )
