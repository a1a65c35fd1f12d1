"""
Client service - law firm accounts and their delivery schedules.
"""
import logging
import random
import uuid
from datetime import date, datetime
from typing import Callable, List, Optional

from settlement_sam.core.exceptions import AlreadyExistsError, NotFoundError
from settlement_sam.models.client import Client
from settlement_sam.repositories.factory import Repositories
from settlement_sam.schemas.client import ClientCreate
from settlement_sam.schemas.delivery import DeliveryScheduleRecord
from settlement_sam.services.delivery_schedule import generate_delivery_schedule

logger = logging.getLogger(__name__)


class ClientService:
    """Service for client operations."""

    def __init__(
        self,
        repos: Repositories,
        clock: Callable[[], datetime] = datetime.utcnow,
        rng: Optional[random.Random] = None
    ):
        self.repos = repos
        self.clock = clock
        self.rng = rng

    async def create(self, data: ClientCreate) -> Client:
        email = data.email.lower()
        if await self.repos.clients.get_by_email(email):
            raise AlreadyExistsError("Client", "email", email)

        client = await self.repos.clients.create({
            "name": data.name.strip(),
            "firm": data.firm.strip(),
            "email": email,
            "sheets_id": data.sheets_id,
        })
        logger.info("Client created: %s (%s)", client.firm, client.id)
        return client

    async def get(self, client_id: uuid.UUID) -> Client:
        client = await self.repos.clients.get(client_id)
        if not client:
            raise NotFoundError("Client", str(client_id))
        return client

    async def list(self) -> List[Client]:
        return await self.repos.clients.list_all()

    async def create_schedule(
        self,
        client_id: uuid.UUID,
        quantity: int,
        mode: str = "standard",
        start_date: Optional[date] = None
    ) -> DeliveryScheduleRecord:
        """Plan deliveries for a package; it becomes the client's active schedule."""
        client = await self.get(client_id)
        start = start_date or self.clock().date()
        targets = generate_delivery_schedule(quantity, start, mode, self.rng)

        schedule = await self.repos.schedules.create(client.id, mode, quantity, start, targets)
        logger.info(
            "Schedule for client %s: %d leads over %d days (%s)",
            client.id, quantity, len(targets), mode
        )
        return schedule
