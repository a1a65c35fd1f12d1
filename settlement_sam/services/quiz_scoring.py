"""
Quiz scoring - disqualification, point score, tier and estimate.

Score -> tier:
    HOT  >= 75
    WARM >= 50
    COLD  < 50

Weights:
    Surgery           +50
    Hospitalization   +30
    Lost wages >$10k  +25
    Still treating    +20
    Insurance contact +15
    ER/doctor visit   +10
    Can't work        +15
    Missed work       +10  (only when "can't work" does not apply)

The sum is not clamped; every weight at once scores 165.
"""
from typing import List, Optional

from settlement_sam.models.lead import Tiers
from settlement_sam.schemas.quiz import QuizAnswers, QuizOutcome, EstimateRange, KeyFactor
from settlement_sam.services import estimator

HOT_THRESHOLD = 75
WARM_THRESHOLD = 50
LOST_WAGES_THRESHOLD = 10_000

INSURANCE_CONTACTED = ("they_contacted", "got_letter")

DISQUALIFIER_MESSAGES = {
    "at_fault": {
        "headline": "Sam can't help with this one.",
        "body": (
            "Cases where you were at fault are very difficult to settle. If you believe "
            "there's any shared fault involved, consider talking to an attorney. Some "
            "situations are more nuanced than they first appear."
        ),
    },
}

SOFT_EXIT_MESSAGE = (
    "Looks like you already have an attorney. Sam recommends sticking with them "
    "and sharing this estimate at your next check-in."
)


def check_disqualifier(answers: QuizAnswers) -> Optional[str]:
    """Reason the lead is unworkable, or None. At fault is the only hard stop."""
    if answers.at_fault is True:
        return "at_fault"
    return None


def check_soft_exit(answers: QuizAnswers) -> bool:
    """Already represented. Scoring continues, the caller changes its message."""
    return answers.has_attorney == "yes"


def calculate_score(answers: QuizAnswers) -> int:
    """Point score for a non-disqualified quiz."""
    score = 0

    if answers.has_surgery:
        score += 50
    if answers.hospitalized:
        score += 30
    if answers.lost_wages > LOST_WAGES_THRESHOLD:
        score += 25
    if answers.still_in_treatment == "yes":
        score += 20
    if answers.insurance_contact in INSURANCE_CONTACTED:
        score += 15
    if answers.received_treatment == "er_doctor":
        score += 10
    if answers.missed_work == "yes_cant_work":
        score += 15
    elif answers.missed_work == "yes_missed":
        score += 10

    return score


def score_tier(score: int) -> str:
    if score >= HOT_THRESHOLD:
        return Tiers.HOT
    if score >= WARM_THRESHOLD:
        return Tiers.WARM
    return Tiers.COLD


def infer_injury_type(answers: QuizAnswers) -> str:
    """
    The quiz never asks for an injury type, so pick a bucket:
    surgery -> spinal, hospitalized -> fracture, else soft_tissue.
    """
    if answers.has_surgery:
        return "spinal"
    if answers.hospitalized:
        return "fracture"
    return "soft_tissue"


def calculate_quiz_estimate(answers: QuizAnswers) -> EstimateRange:
    return estimator.estimate(
        infer_injury_type(answers),
        bool(answers.has_surgery),
        answers.lost_wages,
    )


def get_key_factors(answers: QuizAnswers) -> List[KeyFactor]:
    """Scoring factors that applied, for the results screen."""
    factors = []
    if answers.has_surgery:
        factors.append(KeyFactor(label="Surgery documented", points="+50 pts"))
    if answers.hospitalized:
        factors.append(KeyFactor(label="Hospitalization documented", points="+30 pts"))
    if answers.lost_wages > LOST_WAGES_THRESHOLD:
        factors.append(KeyFactor(label="Significant lost wages", points="+25 pts"))
    if answers.still_in_treatment == "yes":
        factors.append(KeyFactor(label="Ongoing treatment", points="+20 pts"))
    if answers.insurance_contact in INSURANCE_CONTACTED:
        factors.append(KeyFactor(label="Insurance already contacted you", points="+15 pts"))
    if answers.missed_work == "yes_cant_work":
        factors.append(KeyFactor(label="Unable to work", points="+15 pts"))
    elif answers.missed_work == "yes_missed":
        factors.append(KeyFactor(label="Missed work documented", points="+10 pts"))
    if answers.received_treatment == "er_doctor":
        factors.append(KeyFactor(label="ER / physician visit on record", points="+10 pts"))
    return factors


def score_quiz(answers: QuizAnswers) -> QuizOutcome:
    """Run disqualification, then scoring."""
    reason = check_disqualifier(answers)
    if reason:
        copy = DISQUALIFIER_MESSAGES[reason]
        return QuizOutcome(
            disqualified=True,
            disqualify_reason=reason,
            headline=copy["headline"],
            message=copy["body"],
        )

    score = calculate_score(answers)
    soft_exit = check_soft_exit(answers)
    return QuizOutcome(
        soft_exit=soft_exit,
        message=SOFT_EXIT_MESSAGE if soft_exit else None,
        score=score,
        tier=score_tier(score),
        estimate=calculate_quiz_estimate(answers),
        key_factors=get_key_factors(answers),
    )
