"""
ClaimJourney Enumerations

All enumeration types used throughout the ClaimJourney system.
Organized by domain area for clarity.

All enums inherit from (str, Enum) for JSON serialization compatibility.
"""
from __future__ import annotations

from enum import Enum


# =============================================================================
# Policies
# =============================================================================

class Policy(str, Enum):
    """Payment programs a claimant can claim under."""
    EARLY_CAREER_PAYMENTS = "early_career_payments"
    LEVELLING_UP_PREMIUM_PAYMENTS = "levelling_up_premium_payments"
    STUDENT_LOANS = "student_loans"

    @property
    def short_name(self) -> str:
        """Display name, also the alphabetical tie-break between policies."""
        return POLICY_SHORT_NAMES[self]

    @property
    def combinable(self) -> bool:
        """Whether the policy shares the additional payments journey."""
        return self in COMBINABLE_POLICIES


POLICY_SHORT_NAMES: dict[Policy, str] = {
    Policy.EARLY_CAREER_PAYMENTS: "Early-career payment",
    Policy.LEVELLING_UP_PREMIUM_PAYMENTS: "Levelling up premium payment",
    Policy.STUDENT_LOANS: "Student loans",
}

COMBINABLE_POLICIES = frozenset({
    Policy.EARLY_CAREER_PAYMENTS,
    Policy.LEVELLING_UP_PREMIUM_PAYMENTS,
})

# Main policy of a combined journey until one is selected
DEFAULT_COMBINED_POLICY = Policy.EARLY_CAREER_PAYMENTS


class JourneyType(str, Enum):
    """Claimant journeys; each has its own master slug template."""
    ADDITIONAL_PAYMENTS = "additional_payments"  # ECP + LUP combined
    STUDENT_LOANS = "student_loans"


# =============================================================================
# Eligibility
# =============================================================================

class EligibilityStatus(str, Enum):
    """
    Eligibility classification of a claim or aggregate.

    Precedence when more than one could apply, highest first:
    ELIGIBLE_NOW > ELIGIBLE_LATER > INELIGIBLE > UNDETERMINED
    """
    ELIGIBLE_NOW = "eligible_now"
    ELIGIBLE_LATER = "eligible_later"
    INELIGIBLE = "ineligible"
    UNDETERMINED = "undetermined"


class IneligibilityReason(str, Enum):
    """Reason surfaced to the claimant on the ineligible page."""
    GENERIC_INELIGIBILITY = "generic_ineligibility"
    ITT_SUBJECT_NONE_OF_THE_ABOVE = "itt_subject_none_of_the_above"
    INELIGIBLE_CURRENT_SCHOOL = "ineligible_current_school"
    NOT_TEACHING_NOW_IN_ELIGIBLE_ITT_SUBJECT = "not_teaching_now_in_eligible_itt_subject"
    # Student loans
    INELIGIBLE_QTS_AWARD_YEAR = "ineligible_qts_award_year"
    INELIGIBLE_CLAIM_SCHOOL = "ineligible_claim_school"
    EMPLOYED_AT_NO_SCHOOL = "employed_at_no_school"
    NOT_TAUGHT_ELIGIBLE_SUBJECTS = "not_taught_eligible_subjects"
    MADE_MOSTLY_LEADERSHIP_DUTIES = "made_mostly_leadership_duties"


class IttSubject(str, Enum):
    """Initial teacher training subject answers."""
    CHEMISTRY = "chemistry"
    COMPUTING = "computing"
    FOREIGN_LANGUAGES = "foreign_languages"
    MATHEMATICS = "mathematics"
    PHYSICS = "physics"
    NONE_OF_THE_ABOVE = "none_of_the_above"


class Qualification(str, Enum):
    """Route into teaching."""
    POSTGRADUATE_ITT = "postgraduate_itt"
    UNDERGRADUATE_ITT = "undergraduate_itt"
    ASSESSMENT_ONLY = "assessment_only"
    OVERSEAS_RECOGNITION = "overseas_recognition"


class QtsAwardYear(str, Enum):
    """Student loans: when qualified teacher status was awarded."""
    BEFORE_CUT_OFF_DATE = "before_cut_off_date"
    ON_OR_AFTER_CUT_OFF_DATE = "on_or_after_cut_off_date"


class EmploymentStatus(str, Enum):
    """Student loans: where the claimant teaches now."""
    CLAIM_SCHOOL = "claim_school"
    DIFFERENT_SCHOOL = "different_school"
    NO_SCHOOL = "no_school"


# =============================================================================
# Claimant Details
# =============================================================================

class PaymentMethod(str, Enum):
    """Where the claimant wants to be paid."""
    PERSONAL_BANK_ACCOUNT = "personal_bank_account"
    BUILDING_SOCIETY = "building_society"


class StudentLoanCountry(str, Enum):
    """Country the student loan was taken out in."""
    ENGLAND = "england"
    WALES = "wales"
    SCOTLAND = "scotland"
    NORTHERN_IRELAND = "northern_ireland"


# Countries whose loans have no course count or start date questions
SINGLE_PLAN_STUDENT_LOAN_COUNTRIES = frozenset({
    StudentLoanCountry.SCOTLAND,
    StudentLoanCountry.NORTHERN_IRELAND,
})


# =============================================================================
# Decisions
# =============================================================================

class DecisionResult(str, Enum):
    """Outcome of an admin decision."""
    APPROVED = "approved"
    REJECTED = "rejected"


class RejectedReason(str, Enum):
    """Reasons an admin can give for rejecting a claim."""
    INELIGIBLE_SUBJECT = "ineligible_subject"
    INELIGIBLE_YEAR = "ineligible_year"
    INELIGIBLE_SCHOOL = "ineligible_school"
    INELIGIBLE_QUALIFICATION = "ineligible_qualification"
    NO_QTS_OR_QTLS = "no_qts_or_qtls"
    DUPLICATE = "duplicate"
    NO_RESPONSE = "no_response"
    OTHER = "other"


# =============================================================================
# Notifications
# =============================================================================

class MessageType(str, Enum):
    """Named messages the engine may ask a NotificationSender to deliver."""
    REMINDER_SET = "reminder_set"
    REMINDER_DUE = "reminder_due"
    CLAIM_SUBMITTED = "claim_submitted"
    CLAIM_APPROVED = "claim_approved"
    CLAIM_REJECTED = "claim_rejected"
