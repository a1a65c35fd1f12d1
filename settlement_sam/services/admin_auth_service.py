"""
Admin authentication with brute-force lockout.
"""
import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Optional

from settlement_sam.config import Settings, settings as default_settings
from settlement_sam.core.exceptions import InvalidCredentialsError, LockedError
from settlement_sam.core.security import verify_password, create_admin_token
from settlement_sam.repositories.factory import Repositories
from settlement_sam.schemas.auth import SetupStatus

logger = logging.getLogger(__name__)


class AdminAuthService:
    """Service for admin login."""

    def __init__(
        self,
        repos: Repositories,
        settings: Settings = default_settings,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        self.admins = repos.admins
        self.attempts = repos.login_attempts
        self.settings = settings
        self.clock = clock

    async def _password_hash_for(self, username: str) -> Optional[str]:
        """Stored hash, from the admin table or the environment fallback."""
        admin = await self.admins.get_by_username(username)
        if admin:
            return admin.password_hash
        if (
            self.settings.ADMIN_USERNAME
            and self.settings.ADMIN_PASSWORD_HASH
            and username == self.settings.ADMIN_USERNAME.strip().lower()
        ):
            return self.settings.ADMIN_PASSWORD_HASH
        return None

    async def login(self, username: str, password: str, ip: Optional[str]) -> str:
        """
        Check credentials and return an admin token.

        Raises:
            LockedError: too many failures for username::ip in the window
            InvalidCredentialsError: unknown user or wrong password
        """
        username = (username or "").strip().lower()
        if not username:
            raise InvalidCredentialsError("Username is required.")

        identifier = f"{username}::{ip or 'unknown'}"
        now = self.clock()
        lockout = timedelta(minutes=self.settings.LOGIN_LOCKOUT_MINUTES)
        max_attempts = self.settings.LOGIN_MAX_ATTEMPTS

        failures = await self.attempts.recent_failures(identifier, now - lockout)
        if len(failures) >= max_attempts:
            retry_after = math.ceil((failures[0] + lockout - now).total_seconds())
            logger.warning("Admin login locked for %s", identifier)
            raise LockedError(max(1, retry_after))

        password_hash = await self._password_hash_for(username)
        if not password_hash or not verify_password(password or "", password_hash):
            await self.attempts.record(identifier, False, now)
            remaining = max_attempts - (len(failures) + 1)
            logger.warning("Failed admin login for %s (%d left)", identifier, max(0, remaining))
            if remaining > 0:
                raise InvalidCredentialsError(
                    f"Invalid username or password. {remaining} attempt{'s' if remaining != 1 else ''} remaining."
                )
            raise InvalidCredentialsError(
                f"Invalid username or password. Account is now locked for "
                f"{self.settings.LOGIN_LOCKOUT_MINUTES} minutes."
            )

        await self.attempts.record(identifier, True, now)
        logger.info("Admin %s logged in from %s", username, ip)
        return create_admin_token(username, self.settings)

    async def check_setup(self) -> SetupStatus:
        """Whether any admin credentials exist."""
        if await self.admins.count() > 0:
            return SetupStatus(configured=True, source="database")
        if self.settings.ADMIN_USERNAME and self.settings.ADMIN_PASSWORD_HASH:
            return SetupStatus(configured=True, source="environment")
        return SetupStatus(configured=False)
