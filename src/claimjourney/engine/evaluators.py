"""
ClaimJourney Eligibility Evaluators

One evaluator per policy classifies a claim record:
- status: eligible now, eligible later, ineligible or undetermined
- ineligibility reason shown on the ineligible page
- award amount

Status precedence is the same for every policy, highest first:

    ELIGIBLE_NOW > ELIGIBLE_LATER > INELIGIBLE > UNDETERMINED

Evaluators never cache: every call reads the record's current answers, so
classification stays correct while the claimant changes answers.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, ClassVar, Optional, Protocol, runtime_checkable

from ..configuration import EngineSettings
from ..exceptions import AwardAmountOutOfRangeError, ClaimNotAmendableError, MissingAnswerError
from ..models import (
    AcademicYear,
    AwardAmount,
    AwardTable,
    ClaimRecord,
    EligibilityStatus,
    EmploymentStatus,
    IneligibilityReason,
    Policy,
    QtsAwardYear,
    StudentLoansEligibility,
)
from .subject_eligibility import LEVELLING_UP_PREMIUM_SUBJECTS, SubjectEligibilityChecker

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

# ITT cohorts that can never claim an early-career payment
EXCLUDED_ITT_ACADEMIC_YEARS = frozenset({AcademicYear.none(), AcademicYear(2017)})


# =============================================================================
# Protocol
# =============================================================================

@runtime_checkable
class EligibilityEvaluator(Protocol):
    """Classification of a claim record under one policy."""

    policy: Policy

    def status(self, claim: ClaimRecord) -> EligibilityStatus:
        ...

    def award_amount(self, claim: ClaimRecord) -> Decimal:
        ...

    def ineligibility_reason(self, claim: ClaimRecord) -> Optional[IneligibilityReason]:
        ...

    def is_ineligible(self, claim: ClaimRecord) -> bool:
        ...

    def is_eligible_now(self, claim: ClaimRecord) -> bool:
        ...

    def is_eligible_later(self, claim: ClaimRecord) -> bool:
        ...

    def freeze_award_amount(self, claim: ClaimRecord) -> Decimal:
        ...

    def validate_award_amount(self, amount: Optional[Decimal]) -> Decimal:
        ...

    def check_answers(self, eligibility_values: dict[str, Any]) -> None:
        ...

    def amend_award_amount(self, claim: ClaimRecord, amount: Optional[Decimal]) -> Decimal:
        ...


# =============================================================================
# Shared Behaviour
# =============================================================================

@dataclass
class BaseEvaluator:
    """
    Status precedence and award bounds shared by every policy.

    Subclasses implement the three predicates, award_amount() and
    ineligibility_reason().
    """
    POLICY: ClassVar[Policy]
    # Eligibility attribute holding the award once frozen or amended
    AWARD_ATTRIBUTE: ClassVar[str] = "award_amount"

    settings: EngineSettings = field(default_factory=EngineSettings)

    @property
    def policy(self) -> Policy:
        return self.POLICY

    def status(self, claim: ClaimRecord) -> EligibilityStatus:
        if self.is_eligible_now(claim):
            return EligibilityStatus.ELIGIBLE_NOW
        if self.is_eligible_later(claim):
            return EligibilityStatus.ELIGIBLE_LATER
        if self.is_ineligible(claim):
            return EligibilityStatus.INELIGIBLE
        return EligibilityStatus.UNDETERMINED

    def is_eligible_now(self, claim: ClaimRecord) -> bool:
        raise NotImplementedError

    def is_eligible_later(self, claim: ClaimRecord) -> bool:
        return False

    def is_ineligible(self, claim: ClaimRecord) -> bool:
        raise NotImplementedError

    def ineligibility_reason(self, claim: ClaimRecord) -> Optional[IneligibilityReason]:
        raise NotImplementedError

    def award_amount(self, claim: ClaimRecord) -> Decimal:
        raise NotImplementedError

    def freeze_award_amount(self, claim: ClaimRecord) -> Decimal:
        """Store the current award amount on the record; returns it."""
        amount = self.award_amount(claim)
        claim.eligibility.award_amount = amount
        return amount

    @property
    def max_award_amount(self) -> Decimal:
        return self.settings.max_award_amount_for(self.POLICY)

    def validate_award_amount(self, amount: Optional[Decimal]) -> Decimal:
        """
        Check an award amount (e.g. an admin amendment) is within bounds.

        Raises:
            MissingAnswerError: If no amount is given
            AwardAmountOutOfRangeError: Unless 0 <= amount <= the policy maximum
        """
        if amount is None:
            raise MissingAnswerError(
                message="Enter an award amount",
                details={"policy": self.POLICY.value, "attribute": "award_amount"},
            )
        amount = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        maximum = self.max_award_amount
        if amount < 0 or amount > maximum:
            raise AwardAmountOutOfRangeError(
                message=f"Enter a positive amount up to {maximum:,.2f} (inclusive)",
                details={
                    "policy": self.POLICY.value,
                    "amount": str(amount),
                    "max_amount": str(maximum),
                },
            )
        return amount

    def check_answers(self, eligibility_values: dict[str, Any]) -> None:
        """
        Check converted claimant answers against policy bounds.

        Raises:
            AwardAmountOutOfRangeError: If a claimant-entered award is out of bounds
        """
        if eligibility_values.get(self.AWARD_ATTRIBUTE) is not None:
            self.validate_award_amount(eligibility_values[self.AWARD_ATTRIBUTE])

    def amend_award_amount(self, claim: ClaimRecord, amount: Optional[Decimal]) -> Decimal:
        """
        Admin amendment of a submitted claim's award amount.

        Raises:
            ClaimNotAmendableError: If the claim is unsubmitted or already paid
            MissingAnswerError: If no amount is given
            AwardAmountOutOfRangeError: Unless 0 <= amount <= the policy maximum
        """
        if not claim.submitted or claim.payrolled:
            raise ClaimNotAmendableError(
                message="Only submitted claims that have not been paid can be amended",
                details={"attribute": self.AWARD_ATTRIBUTE, "payment_id": claim.payment_id},
                claim_id=claim.id,
            )
        amount = self.validate_award_amount(amount)
        previous = getattr(claim.eligibility, self.AWARD_ATTRIBUTE)
        setattr(claim.eligibility, self.AWARD_ATTRIBUTE, amount)
        logger.info(
            "Claim %s %s amended from %s to %s",
            claim.reference, self.AWARD_ATTRIBUTE, previous, amount,
        )
        return amount

    @staticmethod
    def _first_reason(
        checks: list[tuple[IneligibilityReason, Callable[[], bool]]],
    ) -> Optional[IneligibilityReason]:
        for reason, check in checks:
            if check():
                return reason
        return None


# =============================================================================
# Early-Career Payments
# =============================================================================

@dataclass
class EarlyCareerPaymentsEvaluator(BaseEvaluator):
    """
    Early-career payment eligibility.

    A claim is eligible now when the award table holds exactly one entry for
    its (subject, ITT year, claim year) and nothing rules it out. It is
    eligible later when the cohort has entries in later claim years.

    Usage:
        evaluator = EarlyCareerPaymentsEvaluator(award_table=award_table, settings=settings)
        evaluator.status(claim)
    """
    POLICY: ClassVar[Policy] = Policy.EARLY_CAREER_PAYMENTS

    award_table: AwardTable = field(default_factory=AwardTable)
    settings: EngineSettings = field(default_factory=EngineSettings)

    # -------------------------------------------------------------------------
    # Award table lookups
    # -------------------------------------------------------------------------

    def exact_entries(self, claim: ClaimRecord) -> list[AwardAmount]:
        e = claim.eligibility
        return self.award_table.find_exact(e.eligible_itt_subject, e.itt_academic_year, claim.academic_year)

    def partial_entries(self, claim: ClaimRecord) -> list[AwardAmount]:
        e = claim.eligibility
        return self.award_table.find_all_partial(e.eligible_itt_subject, e.itt_academic_year)

    def later_entries(self, claim: ClaimRecord) -> list[AwardAmount]:
        """Cohort entries in claim years after the claim's."""
        if claim.academic_year.is_none:
            return []
        return [
            entry for entry in self.partial_entries(claim)
            if entry.claim_academic_year > claim.academic_year
        ]

    def eligible_later_year(self, claim: ClaimRecord) -> Optional[AcademicYear]:
        """First later claim year the cohort can claim in."""
        later = self.later_entries(claim)
        return later[0].claim_academic_year if later else None

    def first_eligible_itt_academic_year(self, claim: ClaimRecord) -> Optional[AcademicYear]:
        entry = self.award_table.find_first_for_claim_year(
            claim.eligibility.eligible_itt_subject, claim.academic_year
        )
        return entry.itt_academic_year if entry else None

    # -------------------------------------------------------------------------
    # Predicates
    # -------------------------------------------------------------------------

    def trainee_teacher_with_itt_subject_none_of_the_above(self, claim: ClaimRecord) -> bool:
        e = claim.eligibility
        return e.is_trainee_teacher and e.itt_subject_none_of_the_above

    def ineligible_current_school(self, claim: ClaimRecord) -> bool:
        school = claim.eligibility.current_school
        return school is not None and not school.eligible_for(self.POLICY)

    def itt_subject_ineligible(self, claim: ClaimRecord) -> bool:
        if claim.academic_year.is_none:
            return False
        e = claim.eligibility
        checker = SubjectEligibilityChecker(self.award_table, claim.academic_year)
        return checker.subject_ineligible(self.POLICY, e.eligible_itt_subject, e.itt_academic_year)

    def ineligible_cohort(self, claim: ClaimRecord) -> bool:
        e = claim.eligibility
        if e.itt_academic_year in EXCLUDED_ITT_ACADEMIC_YEARS:
            return True
        if e.without_cohort:
            return False
        if self.later_entries(claim):
            return False
        return not self.exact_entries(claim)

    def generic_ineligibility(self, claim: ClaimRecord) -> bool:
        e = claim.eligibility
        return (
            e.no_entire_term_contract
            or e.not_employed_directly
            or e.poor_performance
            or self.ineligible_cohort(claim)
        )

    def itt_subject_none_of_the_above(self, claim: ClaimRecord) -> bool:
        return claim.eligibility.itt_subject_none_of_the_above or self.itt_subject_ineligible(claim)

    def is_ineligible(self, claim: ClaimRecord) -> bool:
        e = claim.eligibility
        return (
            self.trainee_teacher_with_itt_subject_none_of_the_above(claim)
            or self.ineligible_current_school(claim)
            or e.no_entire_term_contract
            or e.not_employed_directly
            or e.poor_performance
            or self.itt_subject_ineligible(claim)
            or e.not_teaching_now_in_eligible_itt_subject
            or self.ineligible_cohort(claim)
        )

    def is_eligible_now(self, claim: ClaimRecord) -> bool:
        return len(self.exact_entries(claim)) == 1 and not self.is_ineligible(claim)

    def is_eligible_later(self, claim: ClaimRecord) -> bool:
        if self.is_eligible_now(claim) or self.is_ineligible(claim):
            return False
        return bool(self.later_entries(claim))

    def ineligibility_reason(self, claim: ClaimRecord) -> Optional[IneligibilityReason]:
        if not self.is_ineligible(claim):
            return None
        return self._first_reason([
            (IneligibilityReason.GENERIC_INELIGIBILITY, lambda: self.generic_ineligibility(claim)),
            (IneligibilityReason.ITT_SUBJECT_NONE_OF_THE_ABOVE, lambda: self.itt_subject_none_of_the_above(claim)),
            (IneligibilityReason.INELIGIBLE_CURRENT_SCHOOL, lambda: self.ineligible_current_school(claim)),
            (
                IneligibilityReason.NOT_TEACHING_NOW_IN_ELIGIBLE_ITT_SUBJECT,
                lambda: claim.eligibility.not_teaching_now_in_eligible_itt_subject,
            ),
        ])

    # -------------------------------------------------------------------------
    # Award
    # -------------------------------------------------------------------------

    def award_amount(self, claim: ClaimRecord) -> Decimal:
        """
        Stored amount once frozen; otherwise from the award table.

        Zero without a school or a cohort match. An exact entry wins; when
        the cohort can only claim later, the cohort's first entry is used.
        """
        e = claim.eligibility
        if e.award_amount is not None:
            return self.validate_award_amount(e.award_amount)
        if e.current_school is None or e.without_cohort:
            return ZERO

        entries = self.exact_entries(claim)
        if not entries and self.later_entries(claim):
            entries = self.partial_entries(claim)
        if not entries:
            return ZERO
        return entries[0].amount_for(e.current_school.uplift_for(self.POLICY))


# =============================================================================
# Levelling Up Premium Payments
# =============================================================================

@dataclass
class LevellingUpPremiumPaymentsEvaluator(BaseEvaluator):
    """
    Levelling up premium payment eligibility.

    The award is the school's amount. Claimants whose ITT subject is not on
    the list can still qualify with a degree in an eligible subject. There is
    no eligible-later outcome.
    """
    POLICY: ClassVar[Policy] = Policy.LEVELLING_UP_PREMIUM_PAYMENTS

    settings: EngineSettings = field(default_factory=EngineSettings)

    def subject_off_list(self, claim: ClaimRecord) -> bool:
        subject = claim.eligibility.eligible_itt_subject
        return subject is not None and subject not in LEVELLING_UP_PREMIUM_SUBJECTS

    def ineligible_current_school(self, claim: ClaimRecord) -> bool:
        school = claim.eligibility.current_school
        return school is not None and not school.eligible_for(self.POLICY)

    def ineligible_itt_subject(self, claim: ClaimRecord) -> bool:
        return self.subject_off_list(claim) and claim.eligibility.eligible_degree_subject is False

    def itt_year_in_window(self, claim: ClaimRecord) -> bool:
        itt_year = claim.eligibility.itt_academic_year
        if itt_year is None or itt_year.is_none or claim.academic_year.is_none:
            return False
        return claim.academic_year - 5 <= itt_year < claim.academic_year

    def generic_ineligibility(self, claim: ClaimRecord) -> bool:
        e = claim.eligibility
        itt_year = e.itt_academic_year
        return (
            e.no_entire_term_contract
            or e.not_employed_directly
            or e.poor_performance
            or (itt_year is not None and itt_year.is_none)
        )

    def is_ineligible(self, claim: ClaimRecord) -> bool:
        return (
            self.generic_ineligibility(claim)
            or self.ineligible_current_school(claim)
            or self.ineligible_itt_subject(claim)
            or claim.eligibility.not_teaching_now_in_eligible_itt_subject
        )

    def is_eligible_now(self, claim: ClaimRecord) -> bool:
        e = claim.eligibility
        if self.is_ineligible(claim):
            return False
        if e.current_school is None or not e.current_school.eligible_for(self.POLICY):
            return False
        if not self.itt_year_in_window(claim):
            return False
        subject_ok = (
            e.eligible_itt_subject in LEVELLING_UP_PREMIUM_SUBJECTS
            or e.eligible_degree_subject is True
        )
        return subject_ok and e.teaching_subject_now is True

    def ineligibility_reason(self, claim: ClaimRecord) -> Optional[IneligibilityReason]:
        if not self.is_ineligible(claim):
            return None
        return self._first_reason([
            (IneligibilityReason.GENERIC_INELIGIBILITY, lambda: self.generic_ineligibility(claim)),
            (IneligibilityReason.ITT_SUBJECT_NONE_OF_THE_ABOVE, lambda: self.ineligible_itt_subject(claim)),
            (IneligibilityReason.INELIGIBLE_CURRENT_SCHOOL, lambda: self.ineligible_current_school(claim)),
            (
                IneligibilityReason.NOT_TEACHING_NOW_IN_ELIGIBLE_ITT_SUBJECT,
                lambda: claim.eligibility.not_teaching_now_in_eligible_itt_subject,
            ),
        ])

    def award_amount(self, claim: ClaimRecord) -> Decimal:
        e = claim.eligibility
        if e.award_amount is not None:
            return self.validate_award_amount(e.award_amount)
        if not self.is_eligible_now(claim):
            return ZERO
        return e.current_school.levelling_up_premium_payments_award_amount


# =============================================================================
# Student Loans
# =============================================================================

@dataclass
class StudentLoansEvaluator(BaseEvaluator):
    """Teachers' student loan reimbursement eligibility."""
    POLICY: ClassVar[Policy] = Policy.STUDENT_LOANS
    AWARD_ATTRIBUTE: ClassVar[str] = "student_loan_repayment_amount"

    settings: EngineSettings = field(default_factory=EngineSettings)

    def _checks(self, e: StudentLoansEligibility) -> list[tuple[IneligibilityReason, Callable[[], bool]]]:
        return [
            (
                IneligibilityReason.INELIGIBLE_QTS_AWARD_YEAR,
                lambda: e.qts_award_year == QtsAwardYear.BEFORE_CUT_OFF_DATE,
            ),
            (
                IneligibilityReason.INELIGIBLE_CLAIM_SCHOOL,
                lambda: e.claim_school is not None and not e.claim_school.eligible_for(self.POLICY),
            ),
            (
                IneligibilityReason.EMPLOYED_AT_NO_SCHOOL,
                lambda: e.employment_status == EmploymentStatus.NO_SCHOOL,
            ),
            (
                IneligibilityReason.NOT_TAUGHT_ELIGIBLE_SUBJECTS,
                lambda: e.taught_eligible_subjects is False,
            ),
            (
                IneligibilityReason.MADE_MOSTLY_LEADERSHIP_DUTIES,
                lambda: e.mostly_performed_leadership_duties is True,
            ),
        ]

    def answered(self, claim: ClaimRecord) -> bool:
        """Every answer needed to decide eligibility has been given."""
        e = claim.eligibility
        required: list[Any] = [
            e.qts_award_year,
            e.claim_school,
            e.employment_status,
            e.taught_eligible_subjects,
            e.had_leadership_position,
        ]
        if e.employment_status == EmploymentStatus.DIFFERENT_SCHOOL:
            required.append(e.current_school)
        if e.had_leadership_position:
            required.append(e.mostly_performed_leadership_duties)
        return all(answer is not None for answer in required)

    def is_ineligible(self, claim: ClaimRecord) -> bool:
        return self._first_reason(self._checks(claim.eligibility)) is not None

    def is_eligible_now(self, claim: ClaimRecord) -> bool:
        return self.answered(claim) and not self.is_ineligible(claim)

    def ineligibility_reason(self, claim: ClaimRecord) -> Optional[IneligibilityReason]:
        return self._first_reason(self._checks(claim.eligibility))

    def award_amount(self, claim: ClaimRecord) -> Decimal:
        amount = claim.eligibility.student_loan_repayment_amount
        return self.validate_award_amount(amount) if amount is not None else ZERO

    def freeze_award_amount(self, claim: ClaimRecord) -> Decimal:
        # The repayment amount is the award; nothing to freeze
        return self.award_amount(claim)


# =============================================================================
# Registry
# =============================================================================

class EvaluatorRegistry:
    """
    Evaluator lookup by policy, sharing one award table and settings.

    Usage:
        registry = EvaluatorRegistry(award_table, settings)
        registry.for_claim(claim).status(claim)
    """

    def __init__(self, award_table: AwardTable, settings: Optional[EngineSettings] = None):
        self.award_table = award_table
        self.settings = settings or EngineSettings.from_award_table(award_table)
        self._evaluators: dict[Policy, BaseEvaluator] = {
            Policy.EARLY_CAREER_PAYMENTS: EarlyCareerPaymentsEvaluator(
                award_table=award_table, settings=self.settings
            ),
            Policy.LEVELLING_UP_PREMIUM_PAYMENTS: LevellingUpPremiumPaymentsEvaluator(settings=self.settings),
            Policy.STUDENT_LOANS: StudentLoansEvaluator(settings=self.settings),
        }

    def for_policy(self, policy: Policy) -> BaseEvaluator:
        return self._evaluators[Policy(policy)]

    def for_claim(self, claim: ClaimRecord) -> BaseEvaluator:
        return self.for_policy(claim.policy)
