"""
Lead repository with search and delivery claim.
"""
import uuid
from typing import Optional, List, Dict, Any
from datetime import datetime

from sqlmodel import select, or_, col
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func

from settlement_sam.models.lead import Lead, Tiers
from settlement_sam.repositories.base import BaseRepository
from settlement_sam.repositories.interfaces import LeadRepositoryInterface
from settlement_sam.schemas.lead import LeadFilter


class LeadRepository(BaseRepository[Lead], LeadRepositoryInterface):
    """Repository for Lead operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Lead, session)

    async def search(
        self,
        filters: Optional[LeadFilter] = None,
        page: int = 1,
        limit: int = 20
    ) -> dict:
        """Search leads with filtering."""
        query = select(Lead)

        if filters:
            if filters.tier:
                query = query.where(Lead.tier == filters.tier)
            if filters.source:
                query = query.where(Lead.source == filters.source)
            if filters.verified is not None:
                query = query.where(Lead.verified == filters.verified)
            if filters.delivered is not None:
                query = query.where(Lead.delivered == filters.delivered)
            if filters.client_id:
                query = query.where(Lead.client_id == filters.client_id)
            if filters.search:
                search_term = f"%{filters.search}%"
                query = query.where(
                    or_(
                        col(Lead.name).ilike(search_term),
                        col(Lead.phone).ilike(search_term)
                    )
                )

        return await self.list_paginated(query, page, limit)

    async def list_verified_for_client(self, client_id: uuid.UUID) -> List[Lead]:
        query = (
            select(Lead)
            .where(Lead.verified == True, Lead.client_id == client_id)  # noqa: E712
            .order_by(col(Lead.created_at).desc())
        )
        result = await self.session.exec(query)
        return list(result.all())

    async def claim_delivery(
        self,
        id: uuid.UUID,
        client_id: uuid.UUID,
        exclusive_until: datetime
    ) -> bool:
        return await self.conditional_update(
            [Lead.id == id, Lead.delivered == False],  # noqa: E712
            {"delivered": True, "client_id": client_id, "exclusive_until": exclusive_until},
        )

    async def stats(self, since: datetime) -> Dict[str, Any]:
        """Get lead statistics for dashboard."""
        total = await self.count()
        verified = await self.count({"verified": True})
        delivered = await self.count({"delivered": True})
        disputed = await self.count({"disputed": True})

        by_tier = {}
        for tier in (Tiers.HOT, Tiers.WARM, Tiers.COLD):
            by_tier[tier] = await self.count({"tier": tier})

        result = await self.session.exec(
            select(func.count()).select_from(Lead).where(Lead.created_at >= since)
        )
        recent = result.one()

        result = await self.session.exec(select(func.avg(Lead.score)))
        avg_score = result.one() or 0

        return {
            "total": total,
            "verified": verified,
            "hot": by_tier[Tiers.HOT],
            "warm": by_tier[Tiers.WARM],
            "cold": by_tier[Tiers.COLD],
            "delivered": delivered,
            "disputed": disputed,
            "recent": recent,
            "avg_score": round(float(avg_score), 1),
        }
