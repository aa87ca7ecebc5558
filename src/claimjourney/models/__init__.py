"""
ClaimJourney Models

All domain models for the claim eligibility and journey engine.

    from claimjourney.models import (
        # Enums
        Policy, EligibilityStatus, IttSubject,
        # Values
        AcademicYear, School,
        # Award table
        AwardTable, AwardAmount, AwardKey,
        # Records
        ClaimRecord, EarlyCareerPaymentsEligibility, Decision, Reminder,
    )
"""
from __future__ import annotations

# =============================================================================
# Enums
# =============================================================================
from .enums import (
    COMBINABLE_POLICIES,
    DEFAULT_COMBINED_POLICY,
    POLICY_SHORT_NAMES,
    SINGLE_PLAN_STUDENT_LOAN_COUNTRIES,
    DecisionResult,
    EligibilityStatus,
    EmploymentStatus,
    IneligibilityReason,
    IttSubject,
    JourneyType,
    MessageType,
    PaymentMethod,
    Policy,
    QtsAwardYear,
    Qualification,
    RejectedReason,
    StudentLoanCountry,
)

# =============================================================================
# Values
# =============================================================================
from .academic_year import AcademicYear
from .school import School

# =============================================================================
# Award Table
# =============================================================================
from .award import AwardAmount, AwardKey, AwardTable

# =============================================================================
# Records
# =============================================================================
from .eligibility import (
    ELIGIBILITY_TYPES,
    EarlyCareerPaymentsEligibility,
    Eligibility,
    EligibilityBase,
    LevellingUpPremiumPaymentsEligibility,
    StudentLoansEligibility,
    new_eligibility,
)
from .decision import Decision
from .claim import ClaimRecord, generate_reference
from .reminder import Reminder

__all__ = [
    # Enums
    "COMBINABLE_POLICIES",
    "DEFAULT_COMBINED_POLICY",
    "POLICY_SHORT_NAMES",
    "SINGLE_PLAN_STUDENT_LOAN_COUNTRIES",
    "DecisionResult",
    "EligibilityStatus",
    "EmploymentStatus",
    "IneligibilityReason",
    "IttSubject",
    "JourneyType",
    "MessageType",
    "PaymentMethod",
    "Policy",
    "QtsAwardYear",
    "Qualification",
    "RejectedReason",
    "StudentLoanCountry",
    # Values
    "AcademicYear",
    "School",
    # Award table
    "AwardAmount",
    "AwardKey",
    "AwardTable",
    # Records
    "ELIGIBILITY_TYPES",
    "EarlyCareerPaymentsEligibility",
    "Eligibility",
    "EligibilityBase",
    "LevellingUpPremiumPaymentsEligibility",
    "StudentLoansEligibility",
    "new_eligibility",
    "Decision",
    "ClaimRecord",
    "generate_reference",
    "Reminder",
]
