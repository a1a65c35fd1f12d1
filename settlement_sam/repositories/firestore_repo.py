"""
Firestore adapters for every repository interface.

Documents use the record id as document id. UUIDs and dates are stored as
strings, timestamps as Firestore timestamps (read back as naive UTC).
Check-and-increment operations run inside Firestore transactions.
"""
import logging
import uuid
from datetime import datetime, date
from typing import Optional, List, Dict, Any, Type, TypeVar, Generic

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.cloud.firestore_v1.field_path import FieldPath
from sqlmodel import SQLModel

from settlement_sam.core.pagination import paginate_list
from settlement_sam.models import (
    Lead, Tiers, Client, VerificationCode, Delivery, Payment,
    AdminUser, LoginAttempt, AttorneyInquiry,
)
from settlement_sam.repositories.interfaces import (
    LeadRepositoryInterface,
    ClientRepositoryInterface,
    VerificationCodeRepositoryInterface,
    ScheduleRepositoryInterface,
    DeliveryRepositoryInterface,
    PaymentRepositoryInterface,
    AdminRepositoryInterface,
    LoginAttemptRepositoryInterface,
    AttorneyInquiryRepositoryInterface,
)
from settlement_sam.schemas.delivery import DeliveryScheduleRecord
from settlement_sam.schemas.lead import LeadFilter

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)

DESC = firestore.Query.DESCENDING


def to_document(data: Dict[str, Any]) -> Dict[str, Any]:
    """Python values -> Firestore-safe values."""
    doc = {}
    for key, value in data.items():
        if isinstance(value, uuid.UUID):
            value = str(value)
        elif isinstance(value, date) and not isinstance(value, datetime):
            value = value.isoformat()
        doc[key] = value
    return doc


def from_document(data: Dict[str, Any]) -> Dict[str, Any]:
    """Firestore timestamps come back tz-aware; models use naive UTC."""
    return {
        key: value.replace(tzinfo=None) if isinstance(value, datetime) else value
        for key, value in data.items()
    }


class FirestoreRepository(Generic[ModelType]):
    """Generic CRUD over one collection."""

    def __init__(self, model: Type[ModelType], collection: str, client: firestore.AsyncClient):
        self.model = model
        self.client = client
        self.collection = client.collection(collection)

    def _doc(self, id: Any):
        return self.collection.document(str(id))

    def _load(self, snapshot) -> Optional[ModelType]:
        if not snapshot.exists:
            return None
        return self.model.model_validate(from_document(snapshot.to_dict()))

    async def _query(self, query) -> List[ModelType]:
        return [self._load(snap) async for snap in query.stream()]

    async def create(self, obj_in: dict) -> ModelType:
        obj = self.model.model_validate(obj_in)
        await self._doc(obj.id).set(to_document(obj.model_dump()))
        return obj

    async def get(self, id: uuid.UUID) -> Optional[ModelType]:
        return self._load(await self._doc(id).get())

    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        query = self.collection.where(filter=FieldFilter(field, "==", to_document({field: value})[field])).limit(1)
        results = await self._query(query)
        return results[0] if results else None

    async def list(self, filters: Optional[dict] = None, order_by: str = "created_at") -> List[ModelType]:
        query = self.collection
        for field, value in (filters or {}).items():
            if value is not None:
                query = query.where(filter=FieldFilter(field, "==", value))
        return await self._query(query.order_by(order_by, direction=DESC))

    async def update(self, id: uuid.UUID, obj_in: dict) -> Optional[ModelType]:
        values = {k: v for k, v in obj_in.items() if v is not None}
        if hasattr(self.model, "updated_at"):
            values["updated_at"] = datetime.utcnow()
        ref = self._doc(id)
        if not (await ref.get()).exists:
            return None
        if values:
            await ref.update(to_document(values))
        return await self.get(id)

    async def delete(self, id: uuid.UUID) -> None:
        await self._doc(id).delete()

    async def count(self, filters: Optional[dict] = None) -> int:
        query = self.collection
        for field, value in (filters or {}).items():
            if value is not None:
                query = query.where(filter=FieldFilter(field, "==", value))
        results = await query.count().get()
        return int(results[0][0].value)


class FirestoreLeadRepository(FirestoreRepository[Lead], LeadRepositoryInterface):

    def __init__(self, client: firestore.AsyncClient):
        super().__init__(Lead, "leads", client)

    async def search(self, filters: Optional[LeadFilter] = None, page: int = 1, limit: int = 20) -> dict:
        query = self.collection
        if filters:
            for field in ("tier", "source", "verified", "delivered", "client_id"):
                value = getattr(filters, field)
                if value is not None:
                    query = query.where(filter=FieldFilter(field, "==", to_document({field: value})[field]))
        leads = await self._query(query.order_by("created_at", direction=DESC))

        # Firestore has no substring match
        if filters and filters.search:
            term = filters.search.lower()
            leads = [l for l in leads if term in l.name.lower() or term in l.phone]

        return paginate_list(leads, page, limit)

    async def list_verified_for_client(self, client_id: uuid.UUID) -> List[Lead]:
        query = (
            self.collection
            .where(filter=FieldFilter("verified", "==", True))
            .where(filter=FieldFilter("client_id", "==", str(client_id)))
            .order_by("created_at", direction=DESC)
        )
        return await self._query(query)

    async def claim_delivery(self, id: uuid.UUID, client_id: uuid.UUID, exclusive_until: datetime) -> bool:
        ref = self._doc(id)

        @firestore.async_transactional
        async def claim(transaction) -> bool:
            snapshot = await ref.get(transaction=transaction)
            if not snapshot.exists or snapshot.get("delivered"):
                return False
            transaction.update(ref, {
                "delivered": True,
                "client_id": str(client_id),
                "exclusive_until": exclusive_until,
            })
            return True

        return await claim(self.client.transaction())

    async def stats(self, since: datetime) -> Dict[str, Any]:
        leads = await self._query(self.collection)
        total = len(leads)
        return {
            "total": total,
            "verified": sum(1 for l in leads if l.verified),
            "hot": sum(1 for l in leads if l.tier == Tiers.HOT),
            "warm": sum(1 for l in leads if l.tier == Tiers.WARM),
            "cold": sum(1 for l in leads if l.tier == Tiers.COLD),
            "delivered": sum(1 for l in leads if l.delivered),
            "disputed": sum(1 for l in leads if l.disputed),
            "recent": sum(1 for l in leads if l.created_at >= since),
            "avg_score": round(sum(l.score for l in leads) / total, 1) if total else 0.0,
        }


class FirestoreClientRepository(FirestoreRepository[Client], ClientRepositoryInterface):

    def __init__(self, client: firestore.AsyncClient):
        super().__init__(Client, "clients", client)

    async def get_by_email(self, email: str) -> Optional[Client]:
        return await self.get_by_field("email", email.lower())

    async def list_all(self) -> List[Client]:
        return await self.list()

    async def increment(self, id: uuid.UUID, **deltas: float) -> None:
        await self._doc(id).update({
            field: firestore.Increment(delta) for field, delta in deltas.items()
        })


class FirestoreVerificationCodeRepository(FirestoreRepository[VerificationCode], VerificationCodeRepositoryInterface):

    def __init__(self, client: firestore.AsyncClient):
        super().__init__(VerificationCode, "verification_codes", client)

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
        record = VerificationCode(
            phone=phone, code=code, carrier=carrier,
            created_at=now, expires_at=expires_at,
        )
        phone_query = self.collection.where(filter=FieldFilter("phone", "==", phone))

        @firestore.async_transactional
        async def issue_code(transaction) -> bool:
            snapshots = await phone_query.get(transaction=transaction)
            recent = [
                s for s in snapshots
                if from_document(s.to_dict())["created_at"] >= window_start
            ]
            if len(recent) >= max_sends:
                return False
            for snap in snapshots:
                if not snap.get("used"):
                    transaction.update(snap.reference, {"used": True})
            transaction.set(self._doc(record.id), to_document(record.model_dump()))
            return True

        if not await issue_code(self.client.transaction()):
            return None
        return record

    async def get_active(self, phone: str, now: datetime) -> Optional[VerificationCode]:
        query = (
            self.collection
            .where(filter=FieldFilter("phone", "==", phone))
            .where(filter=FieldFilter("used", "==", False))
        )
        codes = [c for c in await self._query(query) if c.expires_at > now]
        if not codes:
            return None
        return max(codes, key=lambda c: c.created_at)

    async def increment_attempts(self, id: uuid.UUID, max_attempts: int) -> Optional[int]:
        ref = self._doc(id)

        @firestore.async_transactional
        async def bump(transaction) -> Optional[int]:
            snapshot = await ref.get(transaction=transaction)
            if not snapshot.exists or snapshot.get("used"):
                return None
            attempts = snapshot.get("attempts")
            if attempts >= max_attempts:
                return None
            transaction.update(ref, {"attempts": attempts + 1})
            return attempts + 1

        return await bump(self.client.transaction())

    async def mark_used(self, id: uuid.UUID) -> bool:
        ref = self._doc(id)

        @firestore.async_transactional
        async def consume(transaction) -> bool:
            snapshot = await ref.get(transaction=transaction)
            if not snapshot.exists or snapshot.get("used"):
                return False
            transaction.update(ref, {"used": True})
            return True

        return await consume(self.client.transaction())

    async def list_all(self) -> List[VerificationCode]:
        return await self.list()

    async def stats(self, now: datetime, since: datetime, failed_threshold: int) -> Dict[str, Any]:
        total = await self.count()
        used = await self.count({"used": True})
        expired_query = (
            self.collection
            .where(filter=FieldFilter("used", "==", False))
            .where(filter=FieldFilter("expires_at", "<=", now))
        )
        expired = int((await expired_query.count().get())[0][0].value)

        # One range field per query; attempts are checked on the projection
        recent = self.collection.where(filter=FieldFilter("created_at", ">=", since)).select(["attempts"])
        recent_failed = 0
        async for snap in recent.stream():
            if (snap.get("attempts") or 0) > failed_threshold:
                recent_failed += 1

        carriers: Dict[str, int] = {}
        async for snap in self.collection.select(["carrier"]).stream():
            carrier = snap.get("carrier")
            carriers[carrier] = carriers.get(carrier, 0) + 1

        return {
            "total": total,
            "used": used,
            "expired": expired,
            "pending": total - used - expired,
            "recent_failed": recent_failed,
            "carriers": carriers,
        }


class FirestoreScheduleRepository(ScheduleRepositoryInterface):
    """One document per schedule holding the targets and delivered maps."""

    def __init__(self, client: firestore.AsyncClient):
        self.client = client
        self.collection = client.collection("delivery_schedules")

    def _load(self, snapshot) -> DeliveryScheduleRecord:
        return DeliveryScheduleRecord.model_validate(from_document(snapshot.to_dict()))

    async def create(
        self,
        client_id: uuid.UUID,
        mode: str,
        quantity: int,
        start_date: date,
        targets: Dict[str, int]
    ) -> DeliveryScheduleRecord:
        record = DeliveryScheduleRecord(
            id=uuid.uuid4(),
            client_id=client_id,
            mode=mode,
            quantity=quantity,
            start_date=start_date,
            created_at=datetime.utcnow(),
            targets=targets,
            delivered_by_date={},
        )
        await self.collection.document(str(record.id)).set(to_document(record.model_dump()))
        return record

    async def get_latest(self, client_id: uuid.UUID) -> Optional[DeliveryScheduleRecord]:
        query = (
            self.collection
            .where(filter=FieldFilter("client_id", "==", str(client_id)))
            .order_by("created_at", direction=DESC)
            .limit(1)
        )
        snapshots = await query.get()
        return self._load(snapshots[0]) if snapshots else None

    async def reserve_slot(self, schedule_id: uuid.UUID, day: date) -> bool:
        ref = self.collection.document(str(schedule_id))
        key = day.isoformat()
        path = FieldPath("delivered_by_date", key).to_api_repr()

        @firestore.async_transactional
        async def reserve(transaction) -> bool:
            snapshot = await ref.get(transaction=transaction)
            if not snapshot.exists:
                return False
            data = snapshot.to_dict()
            target = data.get("targets", {}).get(key, 0)
            delivered = data.get("delivered_by_date", {}).get(key, 0)
            if delivered >= target:
                return False
            transaction.update(ref, {path: delivered + 1})
            return True

        return await reserve(self.client.transaction())

    async def release_slot(self, schedule_id: uuid.UUID, day: date) -> None:
        path = FieldPath("delivered_by_date", day.isoformat()).to_api_repr()
        await self.collection.document(str(schedule_id)).update({path: firestore.Increment(-1)})


class FirestoreDeliveryRepository(FirestoreRepository[Delivery], DeliveryRepositoryInterface):

    def __init__(self, client: firestore.AsyncClient):
        super().__init__(Delivery, "deliveries", client)

    async def list_for_lead(self, lead_id: uuid.UUID) -> List[Delivery]:
        query = self.collection.where(filter=FieldFilter("lead_id", "==", str(lead_id)))
        deliveries = await self._query(query)
        return sorted(deliveries, key=lambda d: d.delivered_at, reverse=True)


class FirestorePaymentRepository(FirestoreRepository[Payment], PaymentRepositoryInterface):
    """Keyed by invoice id so a replayed webhook hits the same document."""

    def __init__(self, client: firestore.AsyncClient):
        super().__init__(Payment, "payments", client)

    async def record(self, obj_in: dict) -> Optional[Payment]:
        payment = Payment.model_validate(obj_in)
        ref = self._doc(payment.stripe_invoice_id)

        @firestore.async_transactional
        async def store(transaction) -> bool:
            snapshot = await ref.get(transaction=transaction)
            if snapshot.exists:
                return False
            transaction.set(ref, to_document(payment.model_dump()))
            return True

        if not await store(self.client.transaction()):
            logger.info("Invoice %s already recorded", payment.stripe_invoice_id)
            return None
        return payment

    async def get_by_invoice(self, stripe_invoice_id: str) -> Optional[Payment]:
        return self._load(await self._doc(stripe_invoice_id).get())


class FirestoreAdminRepository(FirestoreRepository[AdminUser], AdminRepositoryInterface):

    def __init__(self, client: firestore.AsyncClient):
        super().__init__(AdminUser, "admins", client)

    async def get_by_username(self, username: str) -> Optional[AdminUser]:
        return await self.get_by_field("username", username)

    async def upsert(self, username: str, password_hash: str) -> AdminUser:
        admin = await self.get_by_username(username)
        if admin:
            return await self.update(admin.id, {"password_hash": password_hash})
        return await self.create({"username": username, "password_hash": password_hash})


class FirestoreLoginAttemptRepository(FirestoreRepository[LoginAttempt], LoginAttemptRepositoryInterface):

    def __init__(self, client: firestore.AsyncClient):
        super().__init__(LoginAttempt, "login_attempts", client)

    async def record(self, identifier: str, success: bool, attempted_at: datetime) -> None:
        await self.create({"identifier": identifier, "success": success, "attempted_at": attempted_at})

    async def recent_failures(self, identifier: str, since: datetime) -> List[datetime]:
        query = (
            self.collection
            .where(filter=FieldFilter("identifier", "==", identifier))
            .where(filter=FieldFilter("success", "==", False))
        )
        attempts = await self._query(query)
        return sorted(a.attempted_at for a in attempts if a.attempted_at > since)


class FirestoreAttorneyInquiryRepository(FirestoreRepository[AttorneyInquiry], AttorneyInquiryRepositoryInterface):

    def __init__(self, client: firestore.AsyncClient):
        super().__init__(AttorneyInquiry, "attorney_inquiries", client)

    async def list_all(self, contacted: Optional[bool] = None) -> List[AttorneyInquiry]:
        return await self.list({"contacted": contacted})
