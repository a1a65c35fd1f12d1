"""
Billing service - Stripe invoices for prepaid lead packages.

An invoice carries the package details in its metadata. When Stripe reports
it paid, the webhook credits the client and plans the delivery schedule.
"""
import asyncio
import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

import stripe

from settlement_sam.config import Settings, settings as default_settings
from settlement_sam.core.exceptions import (
    InvalidInputError,
    NotConfiguredError,
    InvalidSignatureError,
    ExternalServiceError,
)
from settlement_sam.repositories.factory import Repositories
from settlement_sam.schemas.billing import InvoiceResponse
from settlement_sam.services.client_service import ClientService
from settlement_sam.services.delivery_schedule import THROTTLE_RANGES, DEFAULT_MODE
from settlement_sam.services.pricing import MIN_ORDER, calculate_order_price

logger = logging.getLogger(__name__)

CLIENT_ID_KEY = "settlement_sam_client_id"

INVOICE_FOOTER = (
    "Payment is due upon receipt. Verified cases will be delivered according "
    "to your selected throttle schedule once payment clears."
)


class BillingService:
    """Service for Stripe invoicing and webhooks."""

    def __init__(
        self,
        repos: Repositories,
        settings: Settings = default_settings,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        self.repos = repos
        self.settings = settings
        self.clock = clock
        self.clients = ClientService(repos, clock=clock)

    async def create_invoice(
        self,
        client_id: uuid.UUID,
        quantity: int,
        throttle_mode: str = DEFAULT_MODE
    ) -> InvoiceResponse:
        if quantity < MIN_ORDER:
            raise InvalidInputError(f"Minimum purchase is {MIN_ORDER} verified cases.", field="quantity")
        if throttle_mode not in THROTTLE_RANGES:
            raise InvalidInputError(
                "throttle_mode must be conservative, standard, or aggressive.",
                field="throttle_mode"
            )
        if not self.settings.STRIPE_SECRET_KEY:
            raise NotConfiguredError("Stripe", "Set STRIPE_SECRET_KEY in .env")

        client = await self.clients.get(client_id)
        quote = calculate_order_price(quantity)
        api_key = self.settings.STRIPE_SECRET_KEY

        try:
            customer_id = client.stripe_customer_id
            if not customer_id:
                customer = await asyncio.to_thread(
                    stripe.Customer.create,
                    api_key=api_key,
                    name=f"{client.name} - {client.firm}",
                    email=client.email,
                    metadata={CLIENT_ID_KEY: str(client.id)},
                )
                customer_id = customer.id
                await self.repos.clients.update(client.id, {"stripe_customer_id": customer_id})

            invoice = await asyncio.to_thread(
                stripe.Invoice.create,
                api_key=api_key,
                customer=customer_id,
                collection_method="send_invoice",
                days_until_due=0,
                auto_advance=False,
                metadata={
                    CLIENT_ID_KEY: str(client.id),
                    "lead_quantity": str(quantity),
                    "tier_name": quote.tier_name,
                    "price_per_case": str(quote.price_per_case),
                    "throttle_mode": throttle_mode,
                },
                footer=INVOICE_FOOTER,
            )
            await asyncio.to_thread(
                stripe.InvoiceItem.create,
                api_key=api_key,
                customer=customer_id,
                invoice=invoice.id,
                amount=quote.total_cents,
                currency="usd",
                description=(
                    f"{quantity} SMS-verified personal injury cases - {quote.tier_name} package "
                    f"(${quote.price_per_case}/case) - Settlement Sam"
                ),
            )
            finalized = await asyncio.to_thread(stripe.Invoice.finalize_invoice, invoice.id, api_key=api_key)
            await asyncio.to_thread(stripe.Invoice.send_invoice, finalized.id, api_key=api_key)
        except stripe.StripeError as e:
            logger.error("Stripe invoice for client %s failed: %s", client.id, e)
            raise ExternalServiceError("Stripe", str(e))

        logger.info(
            "Invoice %s -> client %s: $%d for %d cases (%s @ $%d/case, %s throttle)",
            finalized.id, client.id, quote.total_dollars, quantity,
            quote.tier_name, quote.price_per_case, throttle_mode
        )
        return InvoiceResponse(
            invoice_id=finalized.id,
            invoice_url=finalized.hosted_invoice_url,
            tier_name=quote.tier_name,
            price_per_case=quote.price_per_case,
            total_dollars=quote.total_dollars,
        )

    def construct_event(self, payload: bytes, sig_header: str):
        if not self.settings.STRIPE_SECRET_KEY or not self.settings.STRIPE_WEBHOOK_SECRET:
            raise NotConfiguredError("Stripe webhook", "Set STRIPE_SECRET_KEY and STRIPE_WEBHOOK_SECRET in .env")
        try:
            return stripe.Webhook.construct_event(payload, sig_header, self.settings.STRIPE_WEBHOOK_SECRET)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning("Stripe signature verification failed: %s", e)
            raise InvalidSignatureError(str(e) or "Invalid signature")

    async def handle_webhook(self, payload: bytes, sig_header: str) -> Optional[str]:
        """
        Verify and process a Stripe event.

        Returns the event type when it was acted on, None when ignored.
        """
        event = self.construct_event(payload, sig_header)
        event_type = event["type"]
        invoice = event["data"]["object"]

        if event_type == "invoice.payment_succeeded":
            if await self._payment_succeeded(invoice):
                return event_type
        elif event_type == "invoice.payment_failed":
            logger.warning(
                "Payment FAILED - invoice %s, customer %s",
                invoice.get("id"), invoice.get("customer")
            )
            return event_type
        else:
            logger.debug("Unhandled Stripe event: %s", event_type)
        return None

    async def _payment_succeeded(self, invoice) -> bool:
        invoice_id = invoice.get("id")
        metadata = invoice.get("metadata") or {}

        raw_client_id = metadata.get(CLIENT_ID_KEY)
        if not raw_client_id:
            logger.warning("Invoice %s has no %s metadata, skipping", invoice_id, CLIENT_ID_KEY)
            return False

        try:
            client_id = uuid.UUID(str(raw_client_id))
            quantity = int(metadata.get("lead_quantity") or 0)
        except ValueError:
            logger.warning("Invoice %s has malformed metadata %s, skipping", invoice_id, dict(metadata))
            return False

        amount_cents = int(invoice.get("amount_paid") or 0)
        if quantity <= 0 or amount_cents <= 0:
            logger.warning("Invoice %s: invalid qty=%d or amount=%d", invoice_id, quantity, amount_cents)
            return False

        client = await self.repos.clients.get(client_id)
        if not client:
            logger.warning("Invoice %s references unknown client %s", invoice_id, client_id)
            return False

        mode = metadata.get("throttle_mode") or DEFAULT_MODE
        if mode not in THROTTLE_RANGES:
            mode = DEFAULT_MODE

        paid_at = self._paid_at(invoice)
        payment = await self.repos.payments.record({
            "client_id": client.id,
            "stripe_invoice_id": invoice_id,
            "amount_cents": amount_cents,
            "lead_quantity": quantity,
            "tier_name": metadata.get("tier_name") or calculate_order_price(quantity).tier_name,
            "throttle_mode": mode,
            "paid_at": paid_at,
        })
        if payment is None:
            # Stripe retries deliveries; the first one already credited the client
            return False

        await self.repos.clients.increment(client.id, balance=amount_cents / 100, leads_purchased=quantity)
        await self.clients.create_schedule(client.id, quantity, mode, paid_at.date())

        logger.info(
            "Payment received - client %s | +%d leads | +$%.2f balance",
            client.id, quantity, amount_cents / 100
        )
        return True

    def _paid_at(self, invoice) -> datetime:
        transitions = invoice.get("status_transitions") or {}
        paid_ts = transitions.get("paid_at")
        if paid_ts:
            return datetime.utcfromtimestamp(int(paid_ts))
        return self.clock()
