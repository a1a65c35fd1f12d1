"""
Repository bundle - picks the SQL or Firestore adapters.
"""
import logging
from typing import Optional

from google.cloud import firestore
from sqlmodel.ext.asyncio.session import AsyncSession

from settlement_sam.config import Settings, settings as default_settings
from settlement_sam.repositories import firestore_repo as fs
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
from settlement_sam.repositories.lead_repo import LeadRepository
from settlement_sam.repositories.client_repo import ClientRepository
from settlement_sam.repositories.verification_repo import VerificationCodeRepository
from settlement_sam.repositories.schedule_repo import ScheduleRepository
from settlement_sam.repositories.delivery_repo import DeliveryRepository
from settlement_sam.repositories.payment_repo import PaymentRepository
from settlement_sam.repositories.admin_repo import AdminRepository, LoginAttemptRepository
from settlement_sam.repositories.attorney_repo import AttorneyInquiryRepository

logger = logging.getLogger(__name__)


class Repositories:
    """Every repository a request may need, backed by one datastore."""

    leads: LeadRepositoryInterface
    clients: ClientRepositoryInterface
    codes: VerificationCodeRepositoryInterface
    schedules: ScheduleRepositoryInterface
    deliveries: DeliveryRepositoryInterface
    payments: PaymentRepositoryInterface
    admins: AdminRepositoryInterface
    login_attempts: LoginAttemptRepositoryInterface
    inquiries: AttorneyInquiryRepositoryInterface

    @classmethod
    def for_session(cls, session: AsyncSession) -> "Repositories":
        """SQL adapters sharing one session."""
        repos = cls()
        repos.leads = LeadRepository(session)
        repos.clients = ClientRepository(session)
        repos.codes = VerificationCodeRepository(session)
        repos.schedules = ScheduleRepository(session)
        repos.deliveries = DeliveryRepository(session)
        repos.payments = PaymentRepository(session)
        repos.admins = AdminRepository(session)
        repos.login_attempts = LoginAttemptRepository(session)
        repos.inquiries = AttorneyInquiryRepository(session)
        return repos

    @classmethod
    def for_firestore(cls, client: firestore.AsyncClient) -> "Repositories":
        """Firestore adapters sharing one AsyncClient."""
        repos = cls()
        repos.leads = fs.FirestoreLeadRepository(client)
        repos.clients = fs.FirestoreClientRepository(client)
        repos.codes = fs.FirestoreVerificationCodeRepository(client)
        repos.schedules = fs.FirestoreScheduleRepository(client)
        repos.deliveries = fs.FirestoreDeliveryRepository(client)
        repos.payments = fs.FirestorePaymentRepository(client)
        repos.admins = fs.FirestoreAdminRepository(client)
        repos.login_attempts = fs.FirestoreLoginAttemptRepository(client)
        repos.inquiries = fs.FirestoreAttorneyInquiryRepository(client)
        return repos


_firestore_client = None


def get_firestore_client(settings: Settings = default_settings) -> firestore.AsyncClient:
    """Lazily create the shared Firestore AsyncClient."""
    global _firestore_client

    if _firestore_client is None:
        logger.info("Connecting to Firestore (project=%s)", settings.FIRESTORE_PROJECT_ID or "default")
        _firestore_client = firestore.AsyncClient(project=settings.FIRESTORE_PROJECT_ID)
    return _firestore_client


def build_repositories(
    session: Optional[AsyncSession] = None,
    settings: Settings = default_settings
) -> Repositories:
    if settings.DATASTORE == "firestore":
        return Repositories.for_firestore(get_firestore_client(settings))
    if session is None:
        raise ValueError("SQL datastore needs a session")
    return Repositories.for_session(session)
