"""
Dashboard statistics.
"""
import math
from datetime import datetime, timedelta
from typing import Callable

from settlement_sam.repositories.factory import Repositories
from settlement_sam.schemas.stats import PipelineStats, SmsStats

RECENT_DAYS = 7
# Codes with more wrong guesses than this show up as recent failures
FAILED_ATTEMPTS_THRESHOLD = 2


def _rate(part: int, whole: int) -> float:
    """Whole percent, half-up."""
    return float(math.floor(part / whole * 100 + 0.5)) if whole else 0.0


class StatsService:

    def __init__(self, repos: Repositories, clock: Callable[[], datetime] = datetime.utcnow):
        self.repos = repos
        self.clock = clock

    async def pipeline(self) -> PipelineStats:
        now = self.clock()
        counts = await self.repos.leads.stats(now - timedelta(days=RECENT_DAYS))
        sms_sent = await self.repos.codes.count()
        sms_used = await self.repos.codes.count({"used": True})

        return PipelineStats(
            total=counts["total"],
            verified=counts["verified"],
            hot=counts["hot"],
            warm=counts["warm"],
            cold=counts["cold"],
            delivered=counts["delivered"],
            disputed=counts["disputed"],
            recent_7d=counts["recent"],
            sms_sent=sms_sent,
            sms_used=sms_used,
            avg_score=counts["avg_score"],
            conversion_rate=_rate(counts["verified"], counts["total"]),
        )

    async def sms(self) -> SmsStats:
        """
        Codes are verified when used, expired when unused past TTL, pending
        when still active.
        """
        now = self.clock()
        codes = await self.repos.codes.stats(
            now, now - timedelta(days=RECENT_DAYS), FAILED_ATTEMPTS_THRESHOLD
        )

        return SmsStats(
            total=codes["total"],
            verified=codes["used"],
            expired=codes["expired"],
            pending=codes["pending"],
            conversion_rate=_rate(codes["used"], codes["total"]),
            carrier_breakdown=codes["carriers"],
            recent_failed=codes["recent_failed"],
        )
