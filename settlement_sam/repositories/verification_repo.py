"""
Verification code repository.
"""
import uuid
from typing import Optional, List, Dict, Any
from datetime import datetime

from sqlmodel import select, col
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import update, func

from settlement_sam.models.verification import VerificationCode
from settlement_sam.repositories.base import BaseRepository
from settlement_sam.repositories.interfaces import VerificationCodeRepositoryInterface


class VerificationCodeRepository(BaseRepository[VerificationCode], VerificationCodeRepositoryInterface):

    def __init__(self, session: AsyncSession):
        super().__init__(VerificationCode, session)

    async def issue(
        self,
        phone: str,
        code: str,
        carrier: str,
        now: datetime,
        expires_at: datetime,
        window_start: datetime,
        max_sends: int
    ) -> Optional[VerificationCode]:
        """
        Count, invalidate and insert in one transaction.
        The window rows are locked FOR UPDATE on PostgreSQL; SQLite
        serializes writers on its own.
        """
        session = self.session
        try:
            recent = await session.exec(
                select(VerificationCode.id)
                .where(
                    VerificationCode.phone == phone,
                    VerificationCode.created_at >= window_start
                )
                .with_for_update()
            )
            if len(recent.all()) >= max_sends:
                await session.rollback()
                return None

            await session.execute(
                update(VerificationCode)
                .where(
                    VerificationCode.phone == phone,
                    VerificationCode.used == False  # noqa: E712
                )
                .values(used=True)
            )

            record = VerificationCode(
                phone=phone,
                code=code,
                carrier=carrier,
                created_at=now,
                expires_at=expires_at,
            )
            session.add(record)
            await session.commit()
        except Exception:
            await session.rollback()
            raise

        await session.refresh(record)
        return record

    async def delete(self, id: uuid.UUID) -> None:
        await super().delete(id)

    async def get_active(self, phone: str, now: datetime) -> Optional[VerificationCode]:
        query = (
            select(VerificationCode)
            .where(
                VerificationCode.phone == phone,
                VerificationCode.used == False,  # noqa: E712
                VerificationCode.expires_at > now
            )
            .order_by(col(VerificationCode.created_at).desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(query)
        return result.first()

    async def increment_attempts(self, id: uuid.UUID, max_attempts: int) -> Optional[int]:
        matched = await self.conditional_update(
            [
                VerificationCode.id == id,
                VerificationCode.used == False,  # noqa: E712
                VerificationCode.attempts < max_attempts
            ],
            {"attempts": VerificationCode.attempts + 1},
        )
        if not matched:
            return None
        record = await self.get(id)
        return record.attempts

    async def mark_used(self, id: uuid.UUID) -> bool:
        return await self.conditional_update(
            [VerificationCode.id == id, VerificationCode.used == False],  # noqa: E712
            {"used": True},
        )

    async def list_all(self) -> List[VerificationCode]:
        return await self.list()

    async def _count_where(self, *where) -> int:
        result = await self.session.exec(
            select(func.count()).select_from(VerificationCode).where(*where)
        )
        return result.one()

    async def stats(self, now: datetime, since: datetime, failed_threshold: int) -> Dict[str, Any]:
        total = await self.count()
        used = await self.count({"used": True})
        expired = await self._count_where(
            VerificationCode.used == False,  # noqa: E712
            VerificationCode.expires_at <= now
        )
        recent_failed = await self._count_where(
            VerificationCode.attempts > failed_threshold,
            VerificationCode.created_at >= since
        )

        result = await self.session.exec(
            select(VerificationCode.carrier, func.count()).group_by(VerificationCode.carrier)
        )
        carriers = {carrier: n for carrier, n in result.all()}

        return {
            "total": total,
            "used": used,
            "expired": expired,
            "pending": total - used - expired,
            "recent_failed": recent_failed,
            "carriers": carriers,
        }

