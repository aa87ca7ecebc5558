"""
Pytest configuration and fixtures for ClaimJourney tests.

Provides helper factories and common fixtures matching actual model definitions.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

import pytest

from claimjourney.configuration import EngineSettings, StaticPolicyConfigurationProvider
from claimjourney.engine import ClaimAggregate, EvaluatorRegistry
from claimjourney.interfaces import InMemoryClaimStore
from claimjourney.models import (
    AcademicYear,
    AwardTable,
    ClaimRecord,
    Policy,
    School,
)
from claimjourney.packs import default_award_table


# =============================================================================
# Answer Sets
# =============================================================================

# Maths teacher who trained in 2018/2019, not a supply teacher, in good standing
ELIGIBLE_ECP_ANSWERS: dict[str, Any] = {
    "nqt_in_academic_year_after_itt": True,
    "employed_as_supply_teacher": False,
    "subject_to_formal_performance_action": False,
    "subject_to_disciplinary_action": False,
    "qualification": "postgraduate_itt",
    "eligible_itt_subject": "mathematics",
    "itt_academic_year": "2018/2019",
    "teaching_subject_now": True,
}

ELIGIBLE_STUDENT_LOANS_ANSWERS: dict[str, Any] = {
    "qts_award_year": "on_or_after_cut_off_date",
    "employment_status": "claim_school",
    "taught_eligible_subjects": True,
    "had_leadership_position": False,
    "student_loan_repayment_amount": "1987.65",
}


# =============================================================================
# Factory Helpers
# =============================================================================

def make_school(
    id: str = "118575",
    name: str = "Penistone Grammar School",
    ecp: bool = True,
    uplift: bool = False,
    lup_award_amount: Optional[str] = None,
    student_loans: bool = False,
) -> School:
    """Create a School with eligibility flags."""
    return School(
        id=id,
        name=name,
        eligible_for_early_career_payments=ecp,
        eligible_for_early_career_payments_as_uplift=uplift,
        levelling_up_premium_payments_award_amount=(
            Decimal(lup_award_amount) if lup_award_amount is not None else None
        ),
        eligible_for_student_loans=student_loans,
    )


def make_claim(
    policy: Policy = Policy.EARLY_CAREER_PAYMENTS,
    claim_year: AcademicYear = AcademicYear(2021),
    eligibility: Optional[dict[str, Any]] = None,
    school: Optional[School] = None,
    **answers: Any,
) -> ClaimRecord:
    """
    Create a claim with eligibility answers applied.

    Change tracking is cleared afterwards, as if the claim had been loaded
    from a store.
    """
    claim = ClaimRecord.create(policy, claim_year)
    attrs = dict(eligibility or {})
    if school is not None:
        key = "claim_school" if policy == Policy.STUDENT_LOANS else "current_school"
        attrs[key] = school
    if attrs:
        claim.eligibility.assign_attributes(attrs)
    for name, value in answers.items():
        setattr(claim, name, value)
    claim.eligibility.mark_clean()
    return claim


def make_ecp_claim(
    claim_year: AcademicYear = AcademicYear(2021),
    school: Optional[School] = None,
    **overrides: Any,
) -> ClaimRecord:
    """Create an early-career payment claim that is eligible unless overridden."""
    return make_claim(
        Policy.EARLY_CAREER_PAYMENTS,
        claim_year,
        eligibility={**ELIGIBLE_ECP_ANSWERS, **overrides},
        school=school or make_school(),
    )


def make_lup_claim(
    claim_year: AcademicYear = AcademicYear(2022),
    school: Optional[School] = None,
    **overrides: Any,
) -> ClaimRecord:
    """Create a levelling up premium claim; eligible at an LUP school."""
    answers = {**ELIGIBLE_ECP_ANSWERS, "itt_academic_year": "2020/2021", **overrides}
    return make_claim(
        Policy.LEVELLING_UP_PREMIUM_PAYMENTS,
        claim_year,
        eligibility=answers,
        school=school or make_school(lup_award_amount="2000"),
    )


def make_student_loans_claim(
    claim_year: AcademicYear = AcademicYear(2022),
    school: Optional[School] = None,
    **overrides: Any,
) -> ClaimRecord:
    """Create a student loans claim that is eligible unless overridden."""
    return make_claim(
        Policy.STUDENT_LOANS,
        claim_year,
        eligibility={**ELIGIBLE_STUDENT_LOANS_ANSWERS, **overrides},
        school=school or make_school(ecp=False, student_loans=True),
    )


def make_registry(award_table: Optional[AwardTable] = None) -> EvaluatorRegistry:
    """Create an EvaluatorRegistry over the packaged award table."""
    return EvaluatorRegistry(award_table or default_award_table())


def make_aggregate(
    *claims: ClaimRecord,
    registry: Optional[EvaluatorRegistry] = None,
    selected_policy: Optional[Policy] = None,
    years: Optional[dict[Policy, Any]] = None,
    **kwargs: Any,
) -> ClaimAggregate:
    """Create a ClaimAggregate; policy years default to each claim's year."""
    if years is None:
        years = {claim.policy: claim.academic_year for claim in claims}
    return ClaimAggregate(
        claims=list(claims),
        evaluators=registry or make_registry(),
        selected_policy=selected_policy,
        policy_configuration=StaticPolicyConfigurationProvider.from_mapping(years),
        **kwargs,
    )


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def award_table() -> AwardTable:
    """The packaged early-career payment award table."""
    return default_award_table()


@pytest.fixture
def settings(award_table: AwardTable) -> EngineSettings:
    return EngineSettings.from_award_table(award_table)


@pytest.fixture
def registry(award_table: AwardTable, settings: EngineSettings) -> EvaluatorRegistry:
    return EvaluatorRegistry(award_table, settings)


@pytest.fixture
def store() -> InMemoryClaimStore:
    return InMemoryClaimStore()
