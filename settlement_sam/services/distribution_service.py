"""
Distribution service - sends verified leads to clients.

deliver() runs, in order: lead lookup, duplicate check, client resolution,
throttle reservation, channel dispatch, delivery claim and audit record.
Nothing is written before dispatch except the throttle reservation, which
is released again on every failure path after it.
"""
import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from settlement_sam.config import Settings, settings as default_settings
from settlement_sam.core.exceptions import (
    NotFoundError,
    AlreadyDeliveredError,
    NoClientError,
    ThrottleExceededError,
    DeliveryFailedError,
    InvalidInputError,
)
from settlement_sam.models.client import Client
from settlement_sam.models.lead import Lead
from settlement_sam.repositories.factory import Repositories
from settlement_sam.schemas.delivery import DeliveryOutcome
from settlement_sam.services import delivery_schedule
from settlement_sam.services.email_service import EmailService, get_email_service
from settlement_sam.services.integrations.base import SheetsProvider
from settlement_sam.services.integrations.sheets import get_sheets_provider

logger = logging.getLogger(__name__)

METHODS = ("email", "sheets", "both")


class DistributionService:
    """Service for lead delivery."""

    def __init__(
        self,
        repos: Repositories,
        settings: Settings = default_settings,
        email_service: Optional[EmailService] = None,
        sheets_provider: Optional[SheetsProvider] = None,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        self.repos = repos
        self.settings = settings
        self.email_service = email_service or get_email_service()
        self._sheets_provider = sheets_provider
        self.clock = clock

    @property
    def sheets(self) -> SheetsProvider:
        # Resolved lazily so email-only deliveries never need Google credentials
        if self._sheets_provider is None:
            self._sheets_provider = get_sheets_provider()
        return self._sheets_provider

    async def deliver(
        self,
        lead_id: uuid.UUID,
        client_id: Optional[uuid.UUID] = None,
        method: str = "email"
    ) -> DeliveryOutcome:
        if method not in METHODS:
            raise InvalidInputError(f"method must be one of {', '.join(METHODS)}", field="method")

        lead = await self.repos.leads.get(lead_id)
        if not lead:
            raise NotFoundError("Lead", str(lead_id))

        if lead.delivered:
            raise AlreadyDeliveredError(lead.id)

        resolved_client_id = client_id or lead.client_id
        if not resolved_client_id:
            raise NoClientError()

        client = await self.repos.clients.get(resolved_client_id)
        if not client:
            raise NotFoundError("Client", str(resolved_client_id))

        now = self.clock()
        today = now.date()

        schedule = await self.repos.schedules.get_latest(client.id)
        if schedule is not None:
            if not await self.repos.schedules.reserve_slot(schedule.id, today):
                target = delivery_schedule.today_target(schedule.targets, today)
                logger.warning("Throttle reached for client %s (target %d)", client.id, target)
                raise ThrottleExceededError(client.id, target)

        errors = await self._dispatch(lead, client, method)
        if errors and (method != "both" or len(errors) == 2):
            await self._release(schedule, today)
            logger.error("Delivery of lead %s to client %s failed: %s", lead.id, client.id, errors)
            raise DeliveryFailedError(errors)

        exclusive_until = now + timedelta(days=self.settings.EXCLUSIVITY_DAYS)
        if not await self.repos.leads.claim_delivery(lead.id, client.id, exclusive_until):
            await self._release(schedule, today)
            raise AlreadyDeliveredError(lead.id)

        await self.repos.clients.increment(client.id, leads_delivered=1)
        delivery = await self.repos.deliveries.create({
            "lead_id": lead.id,
            "client_id": client.id,
            "method": method,
            "status": "delivered",
            "delivered_at": now,
            "exclusive_until": exclusive_until,
        })

        logger.info("Lead %s delivered to client %s via %s", lead.id, client.id, method)
        return DeliveryOutcome(
            delivery_id=delivery.id,
            method=method,
            exclusive_until=exclusive_until,
            errors=errors or None,
        )

    async def _dispatch(self, lead: Lead, client: Client, method: str) -> List[str]:
        """Send on each requested channel, collecting failures as strings."""
        errors = []

        if method in ("email", "both"):
            try:
                await self.email_service.send_lead_email(lead, client)
            except Exception as e:
                errors.append(f"Email: {e}")

        if method in ("sheets", "both"):
            if not client.sheets_id:
                errors.append("Sheets: client has no Google Sheets ID configured")
            else:
                try:
                    await self.sheets.append_lead(client.sheets_id, lead)
                except Exception as e:
                    errors.append(f"Sheets: {e}")

        return errors

    async def _release(self, schedule, today) -> None:
        if schedule is not None:
            await self.repos.schedules.release_slot(schedule.id, today)

    async def push_verified_leads_to_sheet(self, client_id: uuid.UUID) -> int:
        """Bulk push every verified lead assigned to the client."""
        client = await self.repos.clients.get(client_id)
        if not client:
            raise NotFoundError("Client", str(client_id))
        if not client.sheets_id:
            raise InvalidInputError("Client has no Google Sheets ID configured.", field="sheets_id")

        leads = await self.repos.leads.list_verified_for_client(client.id)
        pushed = await self.sheets.push_leads(client.sheets_id, leads)
        logger.info("Pushed %d leads to sheet for client %s", pushed, client.id)
        return pushed
