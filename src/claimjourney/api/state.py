"""Engine objects shared by the API routes, and answer snapshot handling."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..configuration import StaticPolicyConfigurationProvider
from ..engine import ClaimAggregate, EvaluatorRegistry
from ..exceptions import JourneyValidationError
from ..models import AcademicYear, AwardTable, ClaimRecord, JourneyType, Policy, School
from .schemas.requests import AnswersRequest, SchoolInput

JOURNEY_POLICIES: dict[JourneyType, tuple[Policy, ...]] = {
    JourneyType.ADDITIONAL_PAYMENTS: (
        Policy.EARLY_CAREER_PAYMENTS,
        Policy.LEVELLING_UP_PREMIUM_PAYMENTS,
    ),
    JourneyType.STUDENT_LOANS: (Policy.STUDENT_LOANS,),
}


def _school(school: SchoolInput) -> School:
    return School(
        id=school.id,
        name=school.name,
        eligible_for_early_career_payments=school.eligible_for_early_career_payments,
        eligible_for_early_career_payments_as_uplift=school.eligible_for_early_career_payments_as_uplift,
        levelling_up_premium_payments_award_amount=school.levelling_up_premium_payments_award_amount,
        eligible_for_student_loans=school.eligible_for_student_loans,
    )


def _journey_for(policies: Iterable[Policy]) -> JourneyType:
    journeys = {
        journey
        for policy in policies
        for journey, members in JOURNEY_POLICIES.items()
        if policy in members
    }
    if len(journeys) != 1:
        raise JourneyValidationError(
            message="Policies must all belong to the same journey",
            details={"policies": [p.value for p in policies]},
        )
    return journeys.pop()


@dataclass
class EngineState:
    """Reference data and services loaded at startup."""
    award_table: AwardTable
    evaluators: EvaluatorRegistry
    policy_configuration: StaticPolicyConfigurationProvider

    def build_aggregate(
        self,
        request: AnswersRequest,
        journey: JourneyType = JourneyType.ADDITIONAL_PAYMENTS,
    ) -> ClaimAggregate:
        """
        Claim records for the request's policies with its answers applied.

        Raises:
            JourneyValidationError: If a policy is unknown or outside the journey
        """
        try:
            policies = [Policy(name) for name in request.policies] or list(JOURNEY_POLICIES[journey])
        except ValueError as e:
            raise JourneyValidationError(
                message=str(e), details={"policies": request.policies}
            ) from e
        if _journey_for(policies) != journey:
            raise JourneyValidationError(
                message=f"Policies do not belong to the {journey.value} journey",
                details={"journey": journey.value, "policies": [p.value for p in policies]},
            )

        records = [ClaimRecord.create(policy, AcademicYear.none()) for policy in policies]
        aggregate = ClaimAggregate(
            claims=records,
            evaluators=self.evaluators,
            selected_policy=request.selected_policy,
            policy_configuration=self.policy_configuration,
        )
        if request.claim_academic_year:
            claim_year = AcademicYear.parse(request.claim_academic_year)
            if claim_year.is_none:
                raise JourneyValidationError(
                    message="Claim academic year cannot be None",
                    details={"claim_academic_year": request.claim_academic_year},
                )
        else:
            claim_year = aggregate.policy_academic_year()
        for record in records:
            record.academic_year = claim_year

        eligibility = dict(request.eligibility)
        if request.current_school is not None:
            eligibility["current_school"] = _school(request.current_school)
        if request.claim_school is not None:
            eligibility["claim_school"] = _school(request.claim_school)

        attrs = dict(request.claim)
        if eligibility:
            attrs["eligibility_attributes"] = eligibility
        aggregate.assign_attributes(attrs)
        return aggregate

    def journey_for_request(self, request: AnswersRequest) -> JourneyType:
        if not request.policies:
            return JourneyType.ADDITIONAL_PAYMENTS
        try:
            return _journey_for([Policy(name) for name in request.policies])
        except ValueError as e:
            raise JourneyValidationError(
                message=str(e), details={"policies": request.policies}
            ) from e
