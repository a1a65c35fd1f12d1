import re
import uuid

import pytest

from settlement_sam.config import settings
from settlement_sam.core.security import create_admin_token, get_password_hash

PHONE = "555-123-4567"


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {create_admin_token('admin', settings)}"}


def sent_code(email_service) -> str:
    return re.search(r"code is (\d+)", email_service.get_last_email()["body"]).group(1)


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_estimate(client):
    response = await client.post("/api/estimate", json={"injury_type": "fracture", "surgery": False, "lost_wages": 6000})
    data = response.json()
    assert response.status_code == 200
    assert (data["low"], data["high"]) == (26_000, 81_000)
    assert data["low_display"] == "$26k"
    assert "broken bone" in data["summary"]


async def test_quiz_score_disqualified(client):
    response = await client.post("/api/quiz/score", json={"at_fault": True, "has_surgery": True})
    data = response.json()
    assert data["disqualified"]
    assert data["score"] is None


async def test_quiz_score_invalid_answer(client):
    response = await client.post("/api/quiz/score", json={"missed_work": "sometimes"})
    assert response.status_code == 422


async def test_verify_code_stores_lead_and_sets_preference(client, email_service, repos):
    response = await client.post("/api/sms/send", json={"phone": PHONE, "carrier": "vtext.com", "name": "Ana"})
    assert response.status_code == 200

    response = await client.post("/api/verify-code", json={
        "name": "Ana Ruiz",
        "phone": PHONE,
        "carrier": "vtext.com",
        "source": "widget",
        "injury_type": "spinal",
        "surgery": True,
        "code": sent_code(email_service),
    })
    assert response.status_code == 201
    session = response.json()

    lead = await repos.leads.get(uuid.UUID(session["lead_id"]))
    assert lead.phone == "5551234567"
    assert lead.tier == "WARM"

    response = await client.patch(
        "/api/leads/contact-preference",
        json={"timing": "tomorrow", "time_slot": "morning"},
        headers={"Authorization": f"Bearer {session['token']}"},
    )
    assert response.status_code == 200
    assert (await repos.leads.get(lead.id)).contact_timing == "tomorrow"


async def test_wrong_code_error_body(client, email_service):
    await client.post("/api/sms/send", json={"phone": PHONE, "carrier": "vtext.com"})
    code = sent_code(email_service)
    wrong = "000000" if code != "000000" else "111111"

    response = await client.post("/api/sms/verify", json={"phone": PHONE, "code": wrong})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "invalid_code"
    assert body["remaining_attempts"] == 4


async def test_phone_token_flow(client, email_service):
    await client.post("/api/sms/send", json={"phone": PHONE})
    response = await client.post("/api/sms/verify", json={"phone": PHONE, "code": sent_code(email_service)})
    token = response.json()["phone_token"]
    headers = {"Authorization": f"Bearer {token}"}

    mismatch = await client.post("/api/leads", json={"name": "Eve", "phone": "5550000000"}, headers=headers)
    assert mismatch.status_code == 401

    response = await client.post("/api/leads", json={"name": "Ana", "phone": PHONE}, headers=headers)
    assert response.status_code == 201
    assert response.json()["token"]


async def test_rate_limited_send(client):
    for _ in range(3):
        assert (await client.post("/api/sms/send", json={"phone": PHONE})).status_code == 200
    response = await client.post("/api/sms/send", json={"phone": PHONE})
    assert response.status_code == 429
    assert response.json()["error"] == "too_many_requests"


async def test_attorney_inquiry(client):
    response = await client.post("/api/attorney-inquiry", json={
        "name": "Morgan Hale", "firm": "Hale & Cole", "email": "morgan@halecole.com",
    })
    assert response.status_code == 201
    assert response.json()["source"] == "attorneys_page"


async def test_admin_routes_require_token(client):
    response = await client.get("/api/admin/leads")
    assert response.status_code == 401
    assert response.json()["error"] == "unauthorized"
    assert response.headers["www-authenticate"] == "Bearer"


async def test_admin_login(client, repos):
    await repos.admins.upsert("admin", get_password_hash("s3cret-pass"))

    bad = await client.post("/api/admin/login", json={"username": "admin", "password": "wrong"})
    assert bad.status_code == 401
    assert bad.json()["error"] == "invalid_credentials"

    good = await client.post("/api/admin/login", json={"username": "admin", "password": "s3cret-pass"})
    assert good.status_code == 200
    token = good.json()["token"]

    leads = await client.get("/api/admin/leads", headers={"Authorization": f"Bearer {token}"})
    assert leads.status_code == 200


async def test_admin_clients(client, admin_headers):
    payload = {"name": "Dana Reyes", "firm": "Reyes Injury Law", "email": "dana@reyeslaw.com"}
    created = await client.post("/api/admin/clients", json=payload, headers=admin_headers)
    assert created.status_code == 201

    duplicate = await client.post("/api/admin/clients", json=payload, headers=admin_headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "duplicate"

    listed = await client.get("/api/admin/clients", headers=admin_headers)
    assert [c["email"] for c in listed.json()] == ["dana@reyeslaw.com"]


async def test_admin_lead_update(client, admin_headers, lead):
    response = await client.patch(f"/api/admin/leads/{lead.id}", json={"score": 80}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["tier"] == "HOT"

    response = await client.patch(f"/api/admin/leads/{lead.id}", json={"tier": "COLD"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_input"


async def test_admin_lead_list_is_paginated(client, admin_headers, lead):
    response = await client.get("/api/admin/leads?limit=1&tier=COLD", headers=admin_headers)
    data = response.json()

    assert response.status_code == 200
    assert [item["id"] for item in data["items"]] == [str(lead.id)]
    assert (data["total"], data["page"], data["pages"]) == (1, 1, 1)
    assert not data["has_next"] and not data["has_prev"]

    schema = (await client.get("/openapi.json")).json()
    unauthorized = schema["paths"]["/api/admin/leads"]["get"]["responses"]["401"]
    assert unauthorized["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")


async def test_distribute_twice(client, admin_headers, lead, law_client, email_service):
    body = {"lead_id": str(lead.id), "client_id": str(law_client.id), "method": "email"}

    first = await client.post("/api/distribute", json=body, headers=admin_headers)
    assert first.status_code == 200
    assert first.json()["method"] == "email"

    second = await client.post("/api/distribute", json=body, headers=admin_headers)
    assert second.status_code == 409
    assert second.json()["error"] == "already_delivered"
    assert len(email_service.sent_emails) == 1


async def test_distribute_without_client(client, admin_headers, lead):
    response = await client.post("/api/distribute", json={"lead_id": str(lead.id)}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "no_client"


async def test_schedule_endpoint(client, admin_headers, law_client):
    response = await client.post(
        f"/api/admin/clients/{law_client.id}/schedule",
        json={"quantity": 30, "mode": "conservative", "start_date": "2025-04-01"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert sum(data["targets"].values()) == 30
    assert "2025-04-01" in data["targets"]


async def test_dashboards(client, admin_headers, lead):
    stats = await client.get("/api/admin/stats", headers=admin_headers)
    assert stats.json()["total"] == 1

    sms_stats = await client.get("/api/admin/sms-stats", headers=admin_headers)
    assert sms_stats.json()["total"] == 0


async def test_webhook_requires_configuration(client, monkeypatch):
    monkeypatch.setattr(settings, "STRIPE_WEBHOOK_SECRET", "")
    response = await client.post("/api/billing/webhook", content=b"{}", headers={"stripe-signature": "x"})
    assert response.status_code == 503
    assert response.json()["error"] == "not_configured"
