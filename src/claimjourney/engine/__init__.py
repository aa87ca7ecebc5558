"""
ClaimJourney Engine

Eligibility, journey and decision services.

Services:
- EvaluatorRegistry: Per-policy eligibility evaluators
- ClaimAggregate: Multi-policy claim wrapper with atomic submit
- SlugSequence: Pages of a journey for the current answers
- DecisionWorkflow: Approve / reject / undo
- ReminderService: Next-window reminders

Usage:
    from claimjourney.engine import (
        ClaimAggregate,
        DecisionWorkflow,
        EvaluatorRegistry,
        slug_sequence_for,
    )
"""
from __future__ import annotations

from .subject_eligibility import (
    LEVELLING_UP_PREMIUM_SUBJECTS,
    SELECTABLE_ITT_YEARS,
    SubjectEligibilityChecker,
    selectable_itt_years,
)
from .evaluators import (
    EXCLUDED_ITT_ACADEMIC_YEARS,
    BaseEvaluator,
    EarlyCareerPaymentsEvaluator,
    EligibilityEvaluator,
    EvaluatorRegistry,
    LevellingUpPremiumPaymentsEvaluator,
    StudentLoansEvaluator,
)
from .reminders import ReminderService, set_a_reminder
from .aggregate import ClaimAggregate, ClaimLike
from .slug_sequence import (
    AdditionalPaymentsSlugSequence,
    SlugSequence,
    StudentLoansSlugSequence,
    personal_details_removals,
    slug_sequence_for,
)
from .decision_workflow import (
    DecisionWorkflow,
    approvable,
    decision_undoable,
    rejectable,
)

__all__ = [
    # Subject eligibility
    "LEVELLING_UP_PREMIUM_SUBJECTS",
    "SELECTABLE_ITT_YEARS",
    "SubjectEligibilityChecker",
    "selectable_itt_years",
    # Evaluators
    "EXCLUDED_ITT_ACADEMIC_YEARS",
    "BaseEvaluator",
    "EarlyCareerPaymentsEvaluator",
    "EligibilityEvaluator",
    "EvaluatorRegistry",
    "LevellingUpPremiumPaymentsEvaluator",
    "StudentLoansEvaluator",
    # Reminders
    "ReminderService",
    "set_a_reminder",
    # Aggregate
    "ClaimAggregate",
    "ClaimLike",
    # Slug sequences
    "AdditionalPaymentsSlugSequence",
    "SlugSequence",
    "StudentLoansSlugSequence",
    "personal_details_removals",
    "slug_sequence_for",
    # Decisions
    "DecisionWorkflow",
    "approvable",
    "decision_undoable",
    "rejectable",
]
