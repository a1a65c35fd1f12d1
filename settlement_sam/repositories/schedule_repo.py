"""
Delivery schedule repository.
Daily targets are rows so a slot can be reserved with one conditional UPDATE.
"""
import uuid
from typing import Optional, Dict
from datetime import date, datetime

from sqlmodel import select, col
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import update

from settlement_sam.models.delivery import DeliverySchedule, ScheduleDay
from settlement_sam.repositories.base import BaseRepository
from settlement_sam.repositories.interfaces import ScheduleRepositoryInterface
from settlement_sam.schemas.delivery import DeliveryScheduleRecord


class ScheduleRepository(BaseRepository[DeliverySchedule], ScheduleRepositoryInterface):

    def __init__(self, session: AsyncSession):
        super().__init__(DeliverySchedule, session)

    async def create(
        self,
        client_id: uuid.UUID,
        mode: str,
        quantity: int,
        start_date: date,
        targets: Dict[str, int]
    ) -> DeliveryScheduleRecord:
        schedule = DeliverySchedule(
            client_id=client_id,
            mode=mode,
            quantity=quantity,
            start_date=start_date,
            created_at=datetime.utcnow(),
        )
        self.session.add(schedule)
        for day, target in targets.items():
            self.session.add(ScheduleDay(
                schedule_id=schedule.id,
                day=date.fromisoformat(day),
                target=target,
            ))
        await self.session.commit()
        await self.session.refresh(schedule)
        return await self._to_record(schedule)

    async def get_latest(self, client_id: uuid.UUID) -> Optional[DeliveryScheduleRecord]:
        query = (
            select(DeliverySchedule)
            .where(DeliverySchedule.client_id == client_id)
            .order_by(col(DeliverySchedule.created_at).desc())
            .limit(1)
        )
        result = await self.session.exec(query)
        schedule = result.first()
        if not schedule:
            return None
        return await self._to_record(schedule)

    async def reserve_slot(self, schedule_id: uuid.UUID, day: date) -> bool:
        stmt = (
            update(ScheduleDay)
            .where(
                ScheduleDay.schedule_id == schedule_id,
                ScheduleDay.day == day,
                ScheduleDay.delivered < ScheduleDay.target
            )
            .values(delivered=ScheduleDay.delivered + 1)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0

    async def release_slot(self, schedule_id: uuid.UUID, day: date) -> None:
        stmt = (
            update(ScheduleDay)
            .where(
                ScheduleDay.schedule_id == schedule_id,
                ScheduleDay.day == day,
                ScheduleDay.delivered > 0
            )
            .values(delivered=ScheduleDay.delivered - 1)
        )
        await self.session.execute(stmt)
        await self.session.commit()

    async def _to_record(self, schedule: DeliverySchedule) -> DeliveryScheduleRecord:
        result = await self.session.exec(
            select(ScheduleDay)
            .where(ScheduleDay.schedule_id == schedule.id)
            .order_by(col(ScheduleDay.day))
            .execution_options(populate_existing=True)
        )
        days = result.all()
        return DeliveryScheduleRecord(
            id=schedule.id,
            client_id=schedule.client_id,
            mode=schedule.mode,
            quantity=schedule.quantity,
            start_date=schedule.start_date,
            created_at=schedule.created_at,
            targets={d.day.isoformat(): d.target for d in days},
            delivered_by_date={d.day.isoformat(): d.delivered for d in days},
        )
