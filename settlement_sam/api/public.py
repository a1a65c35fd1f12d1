"""
Public scoring API routes - widget estimate and quiz outcome.
"""
from fastapi import APIRouter

from settlement_sam.schemas.quiz import EstimateRequest, EstimateResponse, QuizAnswers, QuizOutcome
from settlement_sam.services import estimator, quiz_scoring

router = APIRouter(prefix="/api", tags=["public"])


@router.post("/estimate", response_model=EstimateResponse)
async def estimate(request: EstimateRequest):
    """Settlement range for the homepage widget."""
    result = estimator.estimate(request.injury_type, request.surgery, request.lost_wages)
    return EstimateResponse(
        low=result.low,
        high=result.high,
        low_display=estimator.format_currency(result.low),
        high_display=estimator.format_currency(result.high),
        summary=estimator.build_summary_text(request.injury_type, request.surgery, request.lost_wages),
    )


@router.post("/quiz/score", response_model=QuizOutcome)
async def score_quiz(answers: QuizAnswers):
    """Score a completed quiz."""
    return quiz_scoring.score_quiz(answers)
