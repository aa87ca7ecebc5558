"""Eligibility endpoint."""
from __future__ import annotations

from fastapi import APIRouter

from ...engine import set_a_reminder
from ...models import Policy
from ..schemas.requests import AnswersRequest
from ..schemas.responses import EligibilityResponse, PolicyEligibility, PolicyOption
from ..state import EngineState

router = APIRouter(prefix="/eligibility", tags=["Eligibility"])

# Shared engine state (set by main.py)
engine: EngineState = None


def set_engine(state: EngineState) -> None:
    global engine
    engine = state


@router.post("", response_model=EligibilityResponse)
def evaluate_eligibility(request: AnswersRequest):
    """
    Classify an answer snapshot under each policy in the journey.

    Returns each policy's status, ineligibility reason and award amount, the
    journey-wide status, and the policies the claimant would be offered.
    """
    journey = engine.journey_for_request(request)
    aggregate = engine.build_aggregate(request, journey)

    results = []
    for claim in aggregate.claims:
        evaluator = engine.evaluators.for_claim(claim)
        reason = evaluator.ineligibility_reason(claim)
        later_year = None
        if claim.policy == Policy.EARLY_CAREER_PAYMENTS and evaluator.is_eligible_later(claim):
            later_year = evaluator.eligible_later_year(claim)
        results.append(PolicyEligibility(
            policy=claim.policy.value,
            status=evaluator.status(claim).value,
            ineligibility_reason=reason.value if reason else None,
            award_amount=str(evaluator.award_amount(claim)),
            eligible_later_year=str(later_year) if later_year else None,
        ))

    main_record = aggregate.main_record
    reminder_eligible = None
    if main_record.policy.combinable:
        reminder_eligible = set_a_reminder(
            policy_year=main_record.academic_year,
            itt_academic_year=main_record.eligibility.itt_academic_year,
            final_policy_year=engine.evaluators.settings.final_policy_year,
        )

    return EligibilityResponse(
        journey=journey.value,
        claim_academic_year=str(main_record.academic_year),
        status=aggregate.eligibility_status().value,
        main_policy=main_record.policy.value,
        policies=results,
        policy_options=[
            PolicyOption(policy=option["policy"], award_amount=str(option["award_amount"]))
            for option in aggregate.policy_options_provided()
        ],
        reminder_eligible=reminder_eligible,
    )
