"""
Repository interfaces.

One interface per entity, implemented by the SQL adapters (SQLModel) and the
Firestore adapters. Services only ever talk to these. Methods documented as
atomic must check and write in one step so concurrent requests cannot both
pass the same limit.
"""
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, date
from typing import Optional, List, Dict, Any

from settlement_sam.models import (
    Lead, Client, VerificationCode, Delivery, Payment,
    AdminUser, AttorneyInquiry,
)
from settlement_sam.schemas.delivery import DeliveryScheduleRecord
from settlement_sam.schemas.lead import LeadFilter


class LeadRepositoryInterface(ABC):

    @abstractmethod
    async def create(self, obj_in: dict) -> Lead:
        pass

    @abstractmethod
    async def get(self, id: uuid.UUID) -> Optional[Lead]:
        pass

    @abstractmethod
    async def update(self, id: uuid.UUID, obj_in: dict) -> Optional[Lead]:
        """Set the given fields. None values are skipped."""
        pass

    @abstractmethod
    async def search(self, filters: Optional[LeadFilter], page: int = 1, limit: int = 20) -> dict:
        """Newest first, paginated."""
        pass

    @abstractmethod
    async def list_verified_for_client(self, client_id: uuid.UUID) -> List[Lead]:
        pass

    @abstractmethod
    async def claim_delivery(
        self,
        id: uuid.UUID,
        client_id: uuid.UUID,
        exclusive_until: datetime
    ) -> bool:
        """
        Atomic: flip delivered False -> True and assign the client.
        False when the lead was already delivered.
        """
        pass

    @abstractmethod
    async def stats(self, since: datetime) -> Dict[str, Any]:
        """
        Counts for the pipeline dashboard:
        total, verified, hot, warm, cold, delivered, disputed, recent, avg_score.
        """
        pass


class ClientRepositoryInterface(ABC):

    @abstractmethod
    async def create(self, obj_in: dict) -> Client:
        pass

    @abstractmethod
    async def get(self, id: uuid.UUID) -> Optional[Client]:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Client]:
        pass

    @abstractmethod
    async def list_all(self) -> List[Client]:
        pass

    @abstractmethod
    async def update(self, id: uuid.UUID, obj_in: dict) -> Optional[Client]:
        pass

    @abstractmethod
    async def increment(self, id: uuid.UUID, **deltas: float) -> None:
        """Atomic counter increments, e.g. increment(id, leads_delivered=1)."""
        pass


class VerificationCodeRepositoryInterface(ABC):

    @abstractmethod
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
        Atomic: when fewer than max_sends codes were created for the phone
        since window_start, mark its active codes used and store the new one.
        None when rate limited.
        """
        pass

    @abstractmethod
    async def delete(self, id: uuid.UUID) -> None:
        pass

    @abstractmethod
    async def get_active(self, phone: str, now: datetime) -> Optional[VerificationCode]:
        """Most recent unused, unexpired code."""
        pass

    @abstractmethod
    async def increment_attempts(self, id: uuid.UUID, max_attempts: int) -> Optional[int]:
        """
        Atomic: attempts + 1 while unused and under max_attempts.
        Returns the new count, or None when the cap was already reached.
        """
        pass

    @abstractmethod
    async def mark_used(self, id: uuid.UUID) -> bool:
        """Atomic: used False -> True. False when another request won."""
        pass

    @abstractmethod
    async def list_all(self) -> List[VerificationCode]:
        pass

    @abstractmethod
    async def count(self, filters: Optional[dict] = None) -> int:
        pass

    @abstractmethod
    async def stats(self, now: datetime, since: datetime, failed_threshold: int) -> Dict[str, Any]:
        """
        Counts for the SMS dashboard: total, used, expired, pending,
        recent_failed (attempts over failed_threshold since `since`) and
        per-carrier counts under "carriers".
        """
        pass


class ScheduleRepositoryInterface(ABC):

    @abstractmethod
    async def create(
        self,
        client_id: uuid.UUID,
        mode: str,
        quantity: int,
        start_date: date,
        targets: Dict[str, int]
    ) -> DeliveryScheduleRecord:
        pass

    @abstractmethod
    async def get_latest(self, client_id: uuid.UUID) -> Optional[DeliveryScheduleRecord]:
        pass

    @abstractmethod
    async def reserve_slot(self, schedule_id: uuid.UUID, day: date) -> bool:
        """Atomic: delivered + 1 for the day while delivered < target."""
        pass

    @abstractmethod
    async def release_slot(self, schedule_id: uuid.UUID, day: date) -> None:
        """Undo a reservation whose delivery did not go through."""
        pass


class DeliveryRepositoryInterface(ABC):

    @abstractmethod
    async def create(self, obj_in: dict) -> Delivery:
        pass

    @abstractmethod
    async def list_for_lead(self, lead_id: uuid.UUID) -> List[Delivery]:
        pass


class PaymentRepositoryInterface(ABC):

    @abstractmethod
    async def record(self, obj_in: dict) -> Optional[Payment]:
        """Store a payment once per invoice. None when already recorded."""
        pass

    @abstractmethod
    async def get_by_invoice(self, stripe_invoice_id: str) -> Optional[Payment]:
        pass


class AdminRepositoryInterface(ABC):

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[AdminUser]:
        pass

    @abstractmethod
    async def upsert(self, username: str, password_hash: str) -> AdminUser:
        pass

    @abstractmethod
    async def count(self) -> int:
        pass


class LoginAttemptRepositoryInterface(ABC):

    @abstractmethod
    async def record(self, identifier: str, success: bool, attempted_at: datetime) -> None:
        pass

    @abstractmethod
    async def recent_failures(self, identifier: str, since: datetime) -> List[datetime]:
        """Timestamps of failed attempts after since, oldest first."""
        pass


class AttorneyInquiryRepositoryInterface(ABC):

    @abstractmethod
    async def create(self, obj_in: dict) -> AttorneyInquiry:
        pass

    @abstractmethod
    async def get(self, id: uuid.UUID) -> Optional[AttorneyInquiry]:
        pass

    @abstractmethod
    async def list_all(self, contacted: Optional[bool] = None) -> List[AttorneyInquiry]:
        pass

    @abstractmethod
    async def update(self, id: uuid.UUID, obj_in: dict) -> Optional[AttorneyInquiry]:
        pass
