"""
ClaimJourney - Claim Eligibility and Journey Engine for Teacher Payments

ClaimJourney decides which payments a teacher can claim and which questions
they need to answer to claim them.

Policies:
- Early-career payments (ECP)
- Levelling up premium payments (LUP)
- Teachers' student loan reimbursement (student loans)

Key Features:
- Per-policy eligibility: eligible now, eligible later, ineligible
- Award amounts from a versioned, pydantic-validated award table
- One combined journey over several policies, with atomic submission
- Page sequence recomputed from the answers on every step
- Append-only approve / reject / undo decisions

Quick Start:
    from claimjourney import (
        AcademicYear, ClaimAggregate, ClaimRecord, EvaluatorRegistry,
        InMemoryClaimStore, Policy, default_award_table, slug_sequence_for,
    )

    registry = EvaluatorRegistry(default_award_table())
    claims = [
        ClaimRecord.create(Policy.EARLY_CAREER_PAYMENTS, AcademicYear(2022)),
        ClaimRecord.create(Policy.LEVELLING_UP_PREMIUM_PAYMENTS, AcademicYear(2022)),
    ]
    aggregate = ClaimAggregate(claims, registry)
    aggregate.assign_attributes({"eligibility_attributes": {...}})
    slug_sequence_for(aggregate).slugs()

Version: 0.1.0
"""
from __future__ import annotations

__version__ = "0.1.0"
__author__ = "ClaimJourney Team"

# =============================================================================
# Core Models (Re-exported for convenience)
# =============================================================================
from .models import (
    # Enums
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
    # Values
    AcademicYear,
    School,
    # Award table
    AwardAmount,
    AwardKey,
    AwardTable,
    # Records
    ClaimRecord,
    Decision,
    EarlyCareerPaymentsEligibility,
    LevellingUpPremiumPaymentsEligibility,
    Reminder,
    StudentLoansEligibility,
)

# =============================================================================
# Configuration and Interfaces
# =============================================================================
from .configuration import (
    EngineSettings,
    PolicyConfiguration,
    StaticPolicyConfigurationProvider,
)
from .interfaces import (
    ClaimStore,
    InMemoryClaimStore,
    InMemorySchoolDirectory,
    NotificationSender,
    PolicyConfigurationProvider,
    RecordingNotificationSender,
    SchoolDirectory,
    claim_session_timed_out,
    clear_claim_session,
)

# =============================================================================
# Engine
# =============================================================================
from .engine import (
    ClaimAggregate,
    DecisionWorkflow,
    EvaluatorRegistry,
    ReminderService,
    set_a_reminder,
    slug_sequence_for,
)

# =============================================================================
# Reference Packs
# =============================================================================
from .packs import (
    default_award_table,
    default_policy_configurations,
    load_award_table,
    load_policy_configurations,
)

# =============================================================================
# Exceptions
# =============================================================================
from .exceptions import (
    ClaimJourneyError,
    ConfigurationError,
    IntegrityError,
    JourneyValidationError,
)

__all__ = [
    # Version
    "__version__",
    # Enums
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
    "ClaimRecord",
    "Decision",
    "EarlyCareerPaymentsEligibility",
    "LevellingUpPremiumPaymentsEligibility",
    "Reminder",
    "StudentLoansEligibility",
    # Configuration and interfaces
    "EngineSettings",
    "PolicyConfiguration",
    "StaticPolicyConfigurationProvider",
    "ClaimStore",
    "InMemoryClaimStore",
    "InMemorySchoolDirectory",
    "NotificationSender",
    "PolicyConfigurationProvider",
    "RecordingNotificationSender",
    "SchoolDirectory",
    "claim_session_timed_out",
    "clear_claim_session",
    # Engine
    "ClaimAggregate",
    "DecisionWorkflow",
    "EvaluatorRegistry",
    "ReminderService",
    "set_a_reminder",
    "slug_sequence_for",
    # Packs
    "default_award_table",
    "default_policy_configurations",
    "load_award_table",
    "load_policy_configurations",
    # Exceptions
    "ClaimJourneyError",
    "ConfigurationError",
    "IntegrityError",
    "JourneyValidationError",
]
