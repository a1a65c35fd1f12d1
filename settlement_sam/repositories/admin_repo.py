"""
Admin user and login attempt repositories.
"""
from typing import Optional, List
from datetime import datetime

from sqlmodel import select, col
from sqlmodel.ext.asyncio.session import AsyncSession

from settlement_sam.models.admin import AdminUser, LoginAttempt
from settlement_sam.repositories.base import BaseRepository
from settlement_sam.repositories.interfaces import (
    AdminRepositoryInterface, LoginAttemptRepositoryInterface
)


class AdminRepository(BaseRepository[AdminUser], AdminRepositoryInterface):

    def __init__(self, session: AsyncSession):
        super().__init__(AdminUser, session)

    async def get_by_username(self, username: str) -> Optional[AdminUser]:
        return await self.get_by_field("username", username)

    async def upsert(self, username: str, password_hash: str) -> AdminUser:
        admin = await self.get_by_username(username)
        if admin:
            return await self.update(admin.id, {"password_hash": password_hash})
        return await self.create({"username": username, "password_hash": password_hash})


class LoginAttemptRepository(BaseRepository[LoginAttempt], LoginAttemptRepositoryInterface):

    def __init__(self, session: AsyncSession):
        super().__init__(LoginAttempt, session)

    async def record(self, identifier: str, success: bool, attempted_at: datetime) -> None:
        await self.create({
            "identifier": identifier,
            "success": success,
            "attempted_at": attempted_at
        })

    async def recent_failures(self, identifier: str, since: datetime) -> List[datetime]:
        result = await self.session.exec(
            select(LoginAttempt.attempted_at)
            .where(
                LoginAttempt.identifier == identifier,
                LoginAttempt.success == False,  # noqa: E712
                LoginAttempt.attempted_at > since
            )
            .order_by(col(LoginAttempt.attempted_at))
        )
        return list(result.all())
