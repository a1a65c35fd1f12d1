from itertools import product

from settlement_sam.schemas.quiz import QuizAnswers
from settlement_sam.services import quiz_scoring

MAXIMAL = QuizAnswers(
    at_fault=False,
    received_treatment="er_doctor",
    hospitalized=True,
    has_surgery=True,
    still_in_treatment="yes",
    missed_work="yes_cant_work",
    lost_wages=25_000,
    insurance_contact="got_letter",
    has_attorney="no",
)


def test_empty_answers_score_zero():
    assert quiz_scoring.calculate_score(QuizAnswers()) == 0


def test_maximal_answers_are_not_clamped():
    assert quiz_scoring.calculate_score(MAXIMAL) == 165
    assert quiz_scoring.score_tier(165) == "HOT"


def test_cant_work_replaces_missed_work():
    cant = QuizAnswers(missed_work="yes_cant_work")
    missed = QuizAnswers(missed_work="yes_missed")
    assert quiz_scoring.calculate_score(cant) == 15
    assert quiz_scoring.calculate_score(missed) == 10


def test_lost_wages_threshold_is_exclusive():
    assert quiz_scoring.calculate_score(QuizAnswers(lost_wages=10_000)) == 0
    assert quiz_scoring.calculate_score(QuizAnswers(lost_wages=10_001)) == 25


def test_score_is_deterministic():
    assert quiz_scoring.calculate_score(MAXIMAL) == quiz_scoring.calculate_score(MAXIMAL.model_copy())


def test_tier_boundaries():
    assert quiz_scoring.score_tier(0) == "COLD"
    assert quiz_scoring.score_tier(49) == "COLD"
    assert quiz_scoring.score_tier(50) == "WARM"
    assert quiz_scoring.score_tier(74) == "WARM"
    assert quiz_scoring.score_tier(75) == "HOT"


def test_every_score_maps_to_exactly_one_tier():
    for score in range(0, 200):
        tier = quiz_scoring.score_tier(score)
        matches = [
            score >= 75,
            50 <= score < 75,
            score < 50,
        ]
        assert matches.count(True) == 1
        assert tier == ("HOT", "WARM", "COLD")[matches.index(True)]


def test_at_fault_is_disqualified_without_score():
    answers = MAXIMAL.model_copy(update={"at_fault": True})
    assert quiz_scoring.check_disqualifier(answers) == "at_fault"

    outcome = quiz_scoring.score_quiz(answers)
    assert outcome.disqualified
    assert outcome.disqualify_reason == "at_fault"
    assert outcome.score is None
    assert outcome.tier is None
    assert outcome.estimate is None


def test_disqualifier_only_fires_for_at_fault():
    for at_fault, attorney in product([False, None], ["yes", "no", None]):
        answers = QuizAnswers(at_fault=at_fault, has_attorney=attorney)
        assert quiz_scoring.check_disqualifier(answers) is None


def test_soft_exit_still_scores():
    answers = QuizAnswers(has_attorney="yes", hospitalized=True, has_surgery=True)
    outcome = quiz_scoring.score_quiz(answers)
    assert outcome.soft_exit
    assert outcome.message == quiz_scoring.SOFT_EXIT_MESSAGE
    assert outcome.score == 80
    assert outcome.tier == "HOT"


def test_estimate_uses_inferred_injury_bucket():
    assert quiz_scoring.infer_injury_type(QuizAnswers(has_surgery=True, hospitalized=True)) == "spinal"
    assert quiz_scoring.infer_injury_type(QuizAnswers(hospitalized=True)) == "fracture"
    assert quiz_scoring.infer_injury_type(QuizAnswers()) == "soft_tissue"

    estimate = quiz_scoring.calculate_quiz_estimate(QuizAnswers(has_surgery=True, lost_wages=5_000))
    assert (estimate.low, estimate.high) == (255_000, 1_005_000)


def test_key_factors_follow_scoring():
    factors = quiz_scoring.get_key_factors(QuizAnswers(hospitalized=True, missed_work="yes_missed"))
    assert [(f.label, f.points) for f in factors] == [
        ("Hospitalization documented", "+30 pts"),
        ("Missed work documented", "+10 pts"),
    ]
