from datetime import datetime
from types import SimpleNamespace

import pytest
import stripe

from settlement_sam.core.exceptions import InvalidInputError, InvalidSignatureError, NotConfiguredError
from settlement_sam.services.billing_service import BillingService

PAID_AT = datetime(2025, 3, 5, 12, 0, 0)


@pytest.fixture
def billing(repos, test_settings, clock):
    return BillingService(repos, test_settings, clock)


@pytest.fixture
def stripe_calls(monkeypatch):
    """Record Stripe API calls instead of making them."""
    calls = []

    def record(name, result):
        def fake(*args, **kwargs):
            calls.append((name, args, kwargs))
            return result
        return fake

    monkeypatch.setattr(stripe.Customer, "create", record("customer", SimpleNamespace(id="cus_1")))
    monkeypatch.setattr(stripe.Invoice, "create", record("invoice", SimpleNamespace(id="in_1")))
    monkeypatch.setattr(stripe.InvoiceItem, "create", record("item", SimpleNamespace(id="ii_1")))
    monkeypatch.setattr(
        stripe.Invoice, "finalize_invoice",
        record("finalize", SimpleNamespace(id="in_1", hosted_invoice_url="https://pay.example/in_1"))
    )
    monkeypatch.setattr(stripe.Invoice, "send_invoice", record("send", SimpleNamespace(id="in_1")))
    return calls


def paid_event(client_id, quantity=25, amount_cents=625_000, invoice_id="in_1", mode="conservative"):
    return {
        "type": "invoice.payment_succeeded",
        "data": {"object": {
            "id": invoice_id,
            "customer": "cus_1",
            "amount_paid": amount_cents,
            "status_transitions": {"paid_at": int((PAID_AT - datetime(1970, 1, 1)).total_seconds())},
            "metadata": {
                "settlement_sam_client_id": str(client_id),
                "lead_quantity": str(quantity),
                "tier_name": "Starter",
                "throttle_mode": mode,
            },
        }},
    }


def use_event(monkeypatch, event):
    monkeypatch.setattr(stripe.Webhook, "construct_event", lambda payload, sig, secret: event)


async def test_create_invoice(billing, repos, law_client, stripe_calls):
    result = await billing.create_invoice(law_client.id, 120, "aggressive")

    assert result.invoice_id == "in_1"
    assert result.invoice_url == "https://pay.example/in_1"
    assert result.tier_name == "Growth"
    assert result.total_dollars == 27_000

    names = [name for name, _, _ in stripe_calls]
    assert names == ["customer", "invoice", "item", "finalize", "send"]
    invoice_kwargs = stripe_calls[1][2]
    assert invoice_kwargs["metadata"] == {
        "settlement_sam_client_id": str(law_client.id),
        "lead_quantity": "120",
        "tier_name": "Growth",
        "price_per_case": "225",
        "throttle_mode": "aggressive",
    }
    assert stripe_calls[2][2]["amount"] == 2_700_000
    assert (await repos.clients.get(law_client.id)).stripe_customer_id == "cus_1"


async def test_existing_customer_is_reused(billing, repos, law_client, stripe_calls):
    await repos.clients.update(law_client.id, {"stripe_customer_id": "cus_existing"})
    await billing.create_invoice(law_client.id, 25)

    assert "customer" not in [name for name, _, _ in stripe_calls]
    assert stripe_calls[0][2]["customer"] == "cus_existing"


async def test_invoice_below_minimum(billing, law_client):
    with pytest.raises(InvalidInputError):
        await billing.create_invoice(law_client.id, 24)


async def test_invoice_needs_stripe_key(repos, test_settings, law_client):
    settings = test_settings.model_copy(update={"STRIPE_SECRET_KEY": ""})
    with pytest.raises(NotConfiguredError):
        await BillingService(repos, settings).create_invoice(law_client.id, 25)


async def test_payment_credits_client_and_plans_schedule(billing, repos, law_client, monkeypatch):
    use_event(monkeypatch, paid_event(law_client.id))

    assert await billing.handle_webhook(b"{}", "t=1,v1=sig") == "invoice.payment_succeeded"

    client = await repos.clients.get(law_client.id)
    assert client.balance == 6_250
    assert client.leads_purchased == 25

    payment = await repos.payments.get_by_invoice("in_1")
    assert payment.amount_cents == 625_000
    assert payment.paid_at == PAID_AT

    schedule = await repos.schedules.get_latest(law_client.id)
    assert schedule.mode == "conservative"
    assert schedule.start_date == PAID_AT.date()
    assert sum(schedule.targets.values()) == 25


async def test_replayed_payment_credits_once(billing, repos, law_client, monkeypatch):
    # The duplicate insert rolls the session back and expires loaded rows
    client_id = law_client.id
    use_event(monkeypatch, paid_event(client_id))

    await billing.handle_webhook(b"{}", "sig")
    assert await billing.handle_webhook(b"{}", "sig") is None

    client = await repos.clients.get(client_id)
    assert client.balance == 6_250
    assert client.leads_purchased == 25


async def test_payment_without_metadata_is_skipped(billing, repos, law_client, monkeypatch):
    event = paid_event(law_client.id)
    event["data"]["object"]["metadata"] = {}
    use_event(monkeypatch, event)

    assert await billing.handle_webhook(b"{}", "sig") is None
    assert await repos.payments.get_by_invoice("in_1") is None


async def test_failed_payment_is_logged(billing, monkeypatch, caplog):
    use_event(monkeypatch, {
        "type": "invoice.payment_failed",
        "data": {"object": {"id": "in_9", "customer": "cus_9"}},
    })
    assert await billing.handle_webhook(b"{}", "sig") == "invoice.payment_failed"
    assert "in_9" in caplog.text


async def test_other_events_ignored(billing, monkeypatch):
    use_event(monkeypatch, {"type": "customer.created", "data": {"object": {}}})
    assert await billing.handle_webhook(b"{}", "sig") is None


async def test_bad_signature(billing, monkeypatch):
    def reject(payload, sig, secret):
        raise stripe.SignatureVerificationError("No signatures found", sig)

    monkeypatch.setattr(stripe.Webhook, "construct_event", reject)
    with pytest.raises(InvalidSignatureError):
        await billing.handle_webhook(b"{}", "bad")
