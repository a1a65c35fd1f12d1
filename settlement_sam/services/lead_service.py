"""
Lead service - verified lead intake and admin triage.
"""
import logging
import uuid
from typing import Optional

from settlement_sam.config import Settings, settings as default_settings
from settlement_sam.core.exceptions import InvalidInputError, NotFoundError
from settlement_sam.models.lead import Lead, LeadSources
from settlement_sam.repositories.factory import Repositories
from settlement_sam.schemas.lead import LeadSubmission, LeadUpdate, LeadFilter, ContactPreferenceUpdate
from settlement_sam.schemas.quiz import QuizAnswers
from settlement_sam.services import estimator, quiz_scoring

logger = logging.getLogger(__name__)


def answers_from_widget(data: LeadSubmission) -> QuizAnswers:
    """Widget leads are scored on the facts the widget collects."""
    return QuizAnswers(
        has_surgery=data.surgery,
        hospitalized=data.hospitalized,
        still_in_treatment="yes" if data.still_in_treatment else None,
        missed_work="yes_missed" if data.missed_work else None,
        lost_wages=data.lost_wages,
        insurance_contact="they_contacted" if data.insurance_contacted else None,
        has_attorney="yes" if data.has_attorney else "no",
        incident_type=data.incident_type,
        incident_timeframe=data.incident_timeframe,
        state=data.state,
    )


class LeadService:
    """Service for lead operations."""

    def __init__(self, repos: Repositories, settings: Settings = default_settings):
        self.repos = repos
        self.settings = settings

    def build_lead(self, phone: str, data: LeadSubmission) -> dict:
        """
        Lead fields with score, tier and estimate computed here.
        At-fault quiz answers are rejected.
        """
        if data.source == LeadSources.QUIZ:
            if data.answers is None:
                raise InvalidInputError("Quiz submissions must include answers", field="answers")
            answers = data.answers
            if quiz_scoring.check_disqualifier(answers):
                raise InvalidInputError("At-fault cases cannot be submitted", field="answers")

            score = quiz_scoring.calculate_score(answers)
            estimate = quiz_scoring.calculate_quiz_estimate(answers)
            facts = {
                "injury_type": quiz_scoring.infer_injury_type(answers),
                "surgery": bool(answers.has_surgery),
                "hospitalized": bool(answers.hospitalized),
                "still_in_treatment": answers.still_in_treatment == "yes",
                "missed_work": answers.missed_work in ("yes_missed", "yes_cant_work"),
                "lost_wages": int(answers.lost_wages),
                "has_attorney": answers.has_attorney == "yes",
                "insurance_contacted": answers.insurance_contact in quiz_scoring.INSURANCE_CONTACTED,
                "incident_type": answers.incident_type,
                "incident_timeframe": answers.incident_timeframe,
                "state": answers.state or data.state,
            }
        else:
            answers = answers_from_widget(data)
            injury_type = estimator.resolve_injury_type(data.injury_type)
            score = quiz_scoring.calculate_score(answers)
            estimate = estimator.estimate(injury_type, data.surgery, data.lost_wages)
            facts = {
                "injury_type": injury_type,
                "surgery": data.surgery,
                "hospitalized": data.hospitalized,
                "still_in_treatment": data.still_in_treatment,
                "missed_work": data.missed_work,
                "lost_wages": int(data.lost_wages),
                "has_attorney": data.has_attorney,
                "insurance_contacted": data.insurance_contacted,
                "incident_type": data.incident_type,
                "incident_timeframe": data.incident_timeframe,
                "state": data.state,
            }

        return {
            "name": data.name.strip(),
            "phone": phone,
            "carrier": data.carrier,
            "email": data.email,
            "source": data.source,
            "score": score,
            "tier": quiz_scoring.score_tier(score),
            "estimate_low": estimate.low,
            "estimate_high": estimate.high,
            "verified": True,
            **facts,
        }

    async def create_verified(self, phone: str, data: LeadSubmission) -> Lead:
        """Store a lead whose phone has just been verified."""
        lead = await self.repos.leads.create(self.build_lead(phone, data))
        logger.info(
            "%s lead verified: %s (%s) score=%d tier=%s",
            lead.source.upper(), lead.name, phone, lead.score, lead.tier
        )
        return lead

    async def get(self, lead_id: uuid.UUID) -> Lead:
        lead = await self.repos.leads.get(lead_id)
        if not lead:
            raise NotFoundError("Lead", str(lead_id))
        return lead

    async def list(self, filters: Optional[LeadFilter] = None, page: int = 1, limit: int = 20) -> dict:
        return await self.repos.leads.search(filters, page, limit)

    async def update(self, lead_id: uuid.UUID, data: LeadUpdate) -> Lead:
        """
        Admin update. A new score re-derives the tier; an explicit tier
        must agree with the score it will be stored against.
        """
        lead = await self.get(lead_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        score = changes.get("score", lead.score)
        expected_tier = quiz_scoring.score_tier(score)
        if "tier" in changes and changes["tier"] != expected_tier:
            raise InvalidInputError(
                f"Tier {changes['tier']} does not match score {score} ({expected_tier})",
                field="tier"
            )
        if "score" in changes or "tier" in changes:
            changes["tier"] = expected_tier

        if "client_id" in changes:
            if not await self.repos.clients.get(changes["client_id"]):
                raise NotFoundError("Client", str(changes["client_id"]))

        newly_replaced = changes.get("replaced") is True and not lead.replaced
        updated = await self.repos.leads.update(lead_id, changes)

        if newly_replaced and updated.client_id:
            await self.repos.clients.increment(updated.client_id, leads_replaced=1)

        logger.info("Lead %s updated: %s", lead_id, sorted(changes))
        return updated

    async def set_contact_preference(self, lead_id: uuid.UUID, data: ContactPreferenceUpdate) -> Lead:
        await self.get(lead_id)
        return await self.repos.leads.update(lead_id, {
            "contact_timing": data.timing,
            "contact_time_slot": data.time_slot,
        })
