"""Response schemas for the API."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Service liveness and loaded reference data."""
    status: str
    version: str
    award_table_version: str
    award_table_entries: int
    policies_configured: list[str]


class PolicyEligibility(BaseModel):
    """Classification of one policy's claim."""
    policy: str
    status: str  # eligible_now|eligible_later|ineligible|undetermined
    ineligibility_reason: Optional[str] = None
    award_amount: str
    eligible_later_year: Optional[str] = None


class PolicyOption(BaseModel):
    """A policy the claimant can choose between at the end of eligibility."""
    policy: str
    award_amount: str


class EligibilityResponse(BaseModel):
    """Per-policy and journey-wide eligibility."""
    journey: str
    claim_academic_year: str
    status: str
    main_policy: str
    policies: list[PolicyEligibility]
    policy_options: list[PolicyOption]
    reminder_eligible: Optional[bool] = None


class SlugsResponse(BaseModel):
    """Pages of the journey for the submitted answers."""
    journey: str
    status: str
    slugs: list[str]
    current_slug: Optional[str] = None
    next_slug: Optional[str] = None
    previous_slug: Optional[str] = None
