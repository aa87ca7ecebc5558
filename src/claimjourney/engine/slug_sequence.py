"""
ClaimJourney Slug Sequences

The pages ("slugs") a claimant visits depend on their answers so far. Each
journey has a master template; the sequence for a claim is the template
with the slugs that do not apply removed.

Properties of every computed sequence:
- a subsequence of the template, in template order
- deterministic for a given set of answers
- missing answers remove dependent pages rather than raise
"""
from __future__ import annotations

from typing import ClassVar, Optional

from ..exceptions import SlugNotInSequenceError
from ..models import (
    SINGLE_PLAN_STUDENT_LOAN_COUNTRIES,
    ClaimRecord,
    EligibilityStatus,
    EmploymentStatus,
    IttSubject,
    JourneyType,
    PaymentMethod,
    Policy,
)
from .aggregate import ClaimAggregate


# =============================================================================
# Shared Personal, Payment and Student Loan Pages
# =============================================================================

PERSONAL_DETAILS_SLUGS = (
    "information-provided",
    "personal-details",
    "postcode-search",
    "select-home-address",
    "address",
    "email-address",
    "email-verification",
    "provide-mobile-number",
    "mobile-number",
    "mobile-verification",
    "bank-or-building-society",
    "personal-bank-account",
    "building-society-account",
    "gender",
    "teacher-reference-number",
    "student-loan",
    "student-loan-country",
    "student-loan-how-many-courses",
    "student-loan-start-date",
    "masters-doctoral-loan",
    "masters-loan",
    "doctoral-loan",
)


def personal_details_removals(claim: ClaimRecord) -> set[str]:
    """Personal, payment and loan pages that do not apply to the claim."""
    removed: set[str] = set()

    if claim.provide_mobile_number is not True:
        removed.update({"mobile-number", "mobile-verification"})

    if claim.bank_or_building_society == PaymentMethod.PERSONAL_BANK_ACCOUNT:
        removed.add("building-society-account")
    elif claim.bank_or_building_society == PaymentMethod.BUILDING_SOCIETY:
        removed.add("personal-bank-account")
    else:
        removed.update({"personal-bank-account", "building-society-account"})

    if claim.has_student_loan is True:
        if claim.student_loan_country in SINGLE_PLAN_STUDENT_LOAN_COUNTRIES:
            removed.update({"student-loan-how-many-courses", "student-loan-start-date"})
        removed.add("masters-doctoral-loan")
    else:
        removed.update({
            "student-loan-country",
            "student-loan-how-many-courses",
            "student-loan-start-date",
        })
        if claim.has_student_loan is False:
            if claim.has_masters_doctoral_loan is not True:
                removed.update({"masters-loan", "doctoral-loan"})
        else:
            removed.update({"masters-doctoral-loan", "masters-loan", "doctoral-loan"})

    return removed


# =============================================================================
# Base Sequence
# =============================================================================

class SlugSequence:
    """
    Ordered pages of a journey for one aggregate.

    Subclasses set SLUGS (the master template) and LAST_ELIGIBILITY_SLUG,
    and implement removals().
    """
    JOURNEY: ClassVar[JourneyType]
    SLUGS: ClassVar[tuple[str, ...]] = ()
    LAST_ELIGIBILITY_SLUG: ClassVar[str] = ""

    def __init__(self, aggregate: ClaimAggregate):
        self.aggregate = aggregate

    @property
    def claim(self) -> ClaimRecord:
        return self.aggregate.main_record

    def eligibility_slugs(self) -> tuple[str, ...]:
        return self.SLUGS[: self.SLUGS.index(self.LAST_ELIGIBILITY_SLUG) + 1]

    def removals(self, status: EligibilityStatus) -> set[str]:
        raise NotImplementedError

    def slugs(self) -> list[str]:
        status = self.aggregate.eligibility_status()
        removed = self.removals(status)

        if status == EligibilityStatus.INELIGIBLE:
            eligibility_slugs = set(self.eligibility_slugs())
            removed.update(s for s in self.SLUGS if s not in eligibility_slugs and s != "ineligible")
        else:
            removed.add("ineligible")

        return [slug for slug in self.SLUGS if slug not in removed]

    def _neighbour(self, current: str, offset: int) -> Optional[str]:
        sequence = self.slugs()
        if current not in sequence:
            raise SlugNotInSequenceError(
                message=f"Page '{current}' is not part of this journey",
                details={"slug": current, "journey": self.JOURNEY.value},
            )
        index = sequence.index(current) + offset
        if 0 <= index < len(sequence):
            return sequence[index]
        return None

    def next_slug(self, current: str) -> Optional[str]:
        """Page after current, or None on the last page."""
        return self._neighbour(current, 1)

    def previous_slug(self, current: str) -> Optional[str]:
        """Page before current, or None on the first page."""
        return self._neighbour(current, -1)


# =============================================================================
# Additional Payments (ECP + LUP)
# =============================================================================

class AdditionalPaymentsSlugSequence(SlugSequence):
    """
    Combined early-career payment and levelling up premium journey.

    Trainee teachers (not yet in the year after ITT) get a four-page journey
    that only asks their subject, then shows future eligibility or the
    ineligible page.
    """
    JOURNEY: ClassVar[JourneyType] = JourneyType.ADDITIONAL_PAYMENTS
    SLUGS: ClassVar[tuple[str, ...]] = (
        "current-school",
        "nqt-in-academic-year-after-itt",
        "supply-teacher",
        "entire-term-contract",
        "employed-directly",
        "poor-performance",
        "qualification",
        "itt-year",
        "eligible-itt-subject",
        "eligible-degree-subject",
        "future-eligibility",
        "teaching-subject-now",
        "check-your-answers-part-one",
        "eligibility-confirmed",
        "eligible-later",
    ) + PERSONAL_DETAILS_SLUGS + (
        "check-your-answers",
        "ineligible",
    )
    LAST_ELIGIBILITY_SLUG: ClassVar[str] = "eligible-later"

    TRAINEE_SLUGS: ClassVar[tuple[str, ...]] = (
        "nqt-in-academic-year-after-itt",
        "eligible-itt-subject",
        "future-eligibility",
        "ineligible",
    )

    def slugs(self) -> list[str]:
        if self.claim.eligibility.is_trainee_teacher:
            return self.trainee_slugs()
        return super().slugs()

    def trainee_slugs(self) -> list[str]:
        """The four trainee pages; callers route to future-eligibility or ineligible by status."""
        return list(self.TRAINEE_SLUGS)

    def degree_question_applies(self) -> bool:
        """Whether the levelling up premium degree question is asked."""
        lup_claim = self.aggregate.for_policy(Policy.LEVELLING_UP_PREMIUM_PAYMENTS)
        if lup_claim is None:
            return False
        e = lup_claim.eligibility
        school = e.current_school
        return (
            school is not None
            and school.eligible_for(Policy.LEVELLING_UP_PREMIUM_PAYMENTS)
            and e.eligible_itt_subject == IttSubject.NONE_OF_THE_ABOVE
        )

    def removals(self, status: EligibilityStatus) -> set[str]:
        e = self.claim.eligibility
        removed = {"future-eligibility"}

        if e.employed_as_supply_teacher is not True:
            removed.update({"entire-term-contract", "employed-directly"})

        if self.degree_question_applies():
            lup_claim = self.aggregate.for_policy(Policy.LEVELLING_UP_PREMIUM_PAYMENTS)
            if lup_claim.eligibility.eligible_degree_subject is not True:
                removed.add("teaching-subject-now")
        else:
            removed.add("eligible-degree-subject")

        if status != EligibilityStatus.ELIGIBLE_NOW:
            removed.add("eligibility-confirmed")
        if status != EligibilityStatus.ELIGIBLE_LATER:
            removed.add("eligible-later")

        removed.update(personal_details_removals(self.claim))
        return removed


# =============================================================================
# Student Loans
# =============================================================================

class StudentLoansSlugSequence(SlugSequence):
    """Teachers' student loan reimbursement journey."""
    JOURNEY: ClassVar[JourneyType] = JourneyType.STUDENT_LOANS
    SLUGS: ClassVar[tuple[str, ...]] = (
        "qts-year",
        "claim-school",
        "subjects-taught",
        "still-teaching",
        "current-school",
        "leadership-position",
        "mostly-performed-leadership-duties",
        "eligibility-confirmed",
    ) + PERSONAL_DETAILS_SLUGS + (
        "student-loan-amount",
        "check-your-answers",
        "ineligible",
    )
    LAST_ELIGIBILITY_SLUG: ClassVar[str] = "eligibility-confirmed"

    def removals(self, status: EligibilityStatus) -> set[str]:
        e = self.claim.eligibility
        removed: set[str] = set()

        if e.employment_status != EmploymentStatus.DIFFERENT_SCHOOL:
            removed.add("current-school")
        if e.had_leadership_position is not True:
            removed.add("mostly-performed-leadership-duties")
        if status != EligibilityStatus.ELIGIBLE_NOW:
            removed.add("eligibility-confirmed")

        removed.update(personal_details_removals(self.claim))
        return removed


SLUG_SEQUENCES: dict[JourneyType, type[SlugSequence]] = {
    JourneyType.ADDITIONAL_PAYMENTS: AdditionalPaymentsSlugSequence,
    JourneyType.STUDENT_LOANS: StudentLoansSlugSequence,
}


def slug_sequence_for(aggregate: ClaimAggregate) -> SlugSequence:
    """Sequence for the aggregate's journey."""
    return SLUG_SEQUENCES[aggregate.journey](aggregate)
