"""
ClaimJourney Exception Hierarchy

Domain-specific exceptions for the claim eligibility and journey engine.
All exceptions include error codes for tracking and logging.

Three families, matching how callers are expected to react:
- ConfigurationError: fatal, surfaced to operators
- JourneyValidationError: recoverable, re-present the current step
- IntegrityError: fatal, never swallowed

Exception codes follow the pattern: CJ_<CATEGORY>_<SPECIFIC>
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ClaimJourneyError(Exception):
    """
    Base exception for all ClaimJourney errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (CJ_*)
        details: Additional context about the error
        claim_id: Associated claim ID if applicable
    """
    message: str
    code: str = "CJ_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    claim_id: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.claim_id:
            parts.append(f"(claim: {self.claim_id})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/API responses."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.claim_id:
            result["claim_id"] = self.claim_id
        return result


# =============================================================================
# Configuration Errors
# =============================================================================

@dataclass
class ConfigurationError(ClaimJourneyError):
    """Policy or reference data configuration is broken."""
    code: str = "CJ_CONFIG_ERROR"


@dataclass
class MissingPolicyYearError(ConfigurationError):
    """A policy in the journey has no current academic year configured."""
    code: str = "CJ_CONFIG_MISSING_POLICY_YEAR"


@dataclass
class AmbiguousPolicyYearError(ConfigurationError):
    """Policies in the same journey disagree on the current academic year."""
    code: str = "CJ_CONFIG_AMBIGUOUS_POLICY_YEAR"


@dataclass
class UnselectablePolicyError(ConfigurationError):
    """No rule resolves the main claim of an aggregate."""
    code: str = "CJ_CONFIG_UNSELECTABLE_POLICY"


@dataclass
class PolicyConfigurationError(ConfigurationError):
    """Policy configuration file could not be loaded or validated."""
    code: str = "CJ_CONFIG_POLICY_CONFIGURATION"


@dataclass
class AwardTableLoadError(ConfigurationError):
    """Failed to load an award table pack from file."""
    code: str = "CJ_CONFIG_AWARD_TABLE_LOAD"


@dataclass
class AwardTableValidationError(ConfigurationError):
    """Award table pack failed schema validation."""
    code: str = "CJ_CONFIG_AWARD_TABLE_INVALID"


# =============================================================================
# Validation Errors
# =============================================================================

@dataclass
class JourneyValidationError(ClaimJourneyError):
    """Claimant or admin input is not acceptable for the current step."""
    code: str = "CJ_VALIDATION_ERROR"


@dataclass
class MissingAnswerError(JourneyValidationError):
    """A required answer is missing for the current step."""
    code: str = "CJ_VALIDATION_MISSING_ANSWER"


@dataclass
class AwardAmountOutOfRangeError(JourneyValidationError):
    """Award amount is outside the policy-defined bounds."""
    code: str = "CJ_VALIDATION_AWARD_AMOUNT_RANGE"


@dataclass
class DecisionValidationError(JourneyValidationError):
    """Decision cannot be recorded as submitted."""
    code: str = "CJ_VALIDATION_DECISION"


@dataclass
class SlugNotInSequenceError(JourneyValidationError):
    """Requested page is not part of the computed journey."""
    code: str = "CJ_VALIDATION_SLUG_NOT_IN_SEQUENCE"


# =============================================================================
# Integrity Errors
# =============================================================================

@dataclass
class IntegrityError(ClaimJourneyError):
    """An operation would corrupt claim or audit state."""
    code: str = "CJ_INTEGRITY_ERROR"


@dataclass
class ClaimSubmittedError(IntegrityError):
    """Answers of a submitted claim cannot be changed."""
    code: str = "CJ_INTEGRITY_CLAIM_SUBMITTED"


@dataclass
class UnknownAttributeError(IntegrityError):
    """Assignment to an attribute the record does not have."""
    code: str = "CJ_INTEGRITY_UNKNOWN_ATTRIBUTE"


@dataclass
class ProtectedAttributeError(IntegrityError):
    """Claimant assignment to a value only an admin may amend."""
    code: str = "CJ_INTEGRITY_PROTECTED_ATTRIBUTE"


@dataclass
class ClaimNotAmendableError(IntegrityError):
    """The claim is not in a state where values can be amended."""
    code: str = "CJ_INTEGRITY_CLAIM_NOT_AMENDABLE"


@dataclass
class DecisionNotUndoableError(IntegrityError):
    """The active decision cannot be undone."""
    code: str = "CJ_INTEGRITY_DECISION_NOT_UNDOABLE"


@dataclass
class DecisionReadOnlyError(IntegrityError):
    """Persisted decisions are immutable."""
    code: str = "CJ_INTEGRITY_DECISION_READ_ONLY"
