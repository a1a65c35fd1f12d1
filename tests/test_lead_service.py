import uuid

import pytest

from settlement_sam.core.exceptions import InvalidInputError, NotFoundError
from settlement_sam.schemas.lead import LeadSubmission, LeadUpdate, LeadFilter, ContactPreferenceUpdate
from settlement_sam.schemas.quiz import QuizAnswers
from settlement_sam.services.lead_service import LeadService


@pytest.fixture
def leads(repos, test_settings):
    return LeadService(repos, test_settings)


def widget_submission(**overrides):
    data = {
        "name": "  Ana Ruiz ",
        "phone": "(555) 222-3333",
        "carrier": "tmomail.net",
        "source": "widget",
        "injury_type": "fracture",
        "surgery": True,
        "hospitalized": True,
        "lost_wages": 12_000,
    }
    data.update(overrides)
    return LeadSubmission(**data)


async def test_widget_lead_scored_server_side(leads):
    lead = await leads.create_verified("5552223333", widget_submission())

    assert lead.name == "Ana Ruiz"
    assert lead.verified
    assert lead.score == 105
    assert lead.tier == "HOT"
    assert (lead.estimate_low, lead.estimate_high) == (112_000, 387_000)


async def test_widget_unknown_injury_stored_as_soft_tissue(leads):
    lead = await leads.create_verified("5552223333", widget_submission(injury_type="bruise", surgery=False))
    assert lead.injury_type == "soft_tissue"
    assert lead.estimate_low == 20_000


async def test_quiz_lead_uses_answers(leads):
    answers = QuizAnswers(
        at_fault=False,
        received_treatment="er_doctor",
        hospitalized=True,
        still_in_treatment="yes",
        missed_work="yes_missed",
        lost_wages=3_000,
        insurance_contact="they_contacted",
        has_attorney="no",
        state="TX",
    )
    lead = await leads.create_verified("5552223333", widget_submission(source="quiz", answers=answers))

    assert lead.source == "quiz"
    assert lead.score == 85
    assert lead.tier == "HOT"
    assert lead.injury_type == "fracture"
    assert lead.insurance_contacted
    assert lead.state == "TX"


async def test_quiz_requires_answers(leads):
    with pytest.raises(InvalidInputError):
        leads.build_lead("5552223333", widget_submission(source="quiz"))


async def test_at_fault_quiz_rejected(leads):
    answers = QuizAnswers(at_fault=True, has_surgery=True)
    with pytest.raises(InvalidInputError):
        leads.build_lead("5552223333", widget_submission(source="quiz", answers=answers))


async def test_update_score_recomputes_tier(leads, lead):
    updated = await leads.update(lead.id, LeadUpdate(score=60))
    assert updated.score == 60
    assert updated.tier == "WARM"


async def test_update_rejects_mismatched_tier(leads, lead):
    with pytest.raises(InvalidInputError):
        await leads.update(lead.id, LeadUpdate(score=90, tier="COLD"))
    with pytest.raises(InvalidInputError):
        await leads.update(lead.id, LeadUpdate(tier="HOT"))


async def test_update_replaced_counts_once(leads, repos, lead, law_client):
    await leads.update(lead.id, LeadUpdate(client_id=law_client.id))
    await leads.update(lead.id, LeadUpdate(replaced=True))
    await leads.update(lead.id, LeadUpdate(replaced=True))

    assert (await repos.clients.get(law_client.id)).leads_replaced == 1


async def test_update_unknown_client(leads, lead):
    with pytest.raises(NotFoundError):
        await leads.update(lead.id, LeadUpdate(client_id=uuid.uuid4()))


async def test_list_filters(leads, lead):
    await leads.create_verified("5552223333", widget_submission())

    hot = await leads.list(LeadFilter(tier="HOT"))
    assert hot["total"] == 1
    assert hot["items"][0].name == "Ana Ruiz"

    found = await leads.list(LeadFilter(search="Jordan"))
    assert [l.id for l in found["items"]] == [lead.id]


async def test_contact_preference(leads, lead):
    updated = await leads.set_contact_preference(
        lead.id, ContactPreferenceUpdate(timing="later_today", time_slot="evening")
    )
    assert updated.contact_timing == "later_today"
    assert updated.contact_time_slot == "evening"
