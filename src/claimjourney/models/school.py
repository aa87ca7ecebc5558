"""
ClaimJourney School Model

Schools as resolved by a SchoolDirectory. Only the eligibility flags the
engine needs are carried.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .enums import Policy


@dataclass(frozen=True)
class School:
    """
    A school and its per-policy eligibility flags.

    Attributes:
        id: Directory identifier
        name: Display name
        eligible_for_early_career_payments: School is on the ECP list
        eligible_for_early_career_payments_as_uplift: ECP award is uplifted
        levelling_up_premium_payments_award_amount: LUP award, None if not listed
        eligible_for_student_loans: School qualifies as a student loans claim school
    """
    id: str
    name: str
    eligible_for_early_career_payments: bool = False
    eligible_for_early_career_payments_as_uplift: bool = False
    levelling_up_premium_payments_award_amount: Optional[Decimal] = None
    eligible_for_student_loans: bool = False

    @property
    def eligible_for_levelling_up_premium_payments(self) -> bool:
        amount = self.levelling_up_premium_payments_award_amount
        return amount is not None and amount > 0

    def eligible_for(self, policy: Policy) -> bool:
        """Whether the school qualifies for the given policy."""
        if policy == Policy.EARLY_CAREER_PAYMENTS:
            return self.eligible_for_early_career_payments
        if policy == Policy.LEVELLING_UP_PREMIUM_PAYMENTS:
            return self.eligible_for_levelling_up_premium_payments
        return self.eligible_for_student_loans

    def uplift_for(self, policy: Policy) -> bool:
        """Whether the higher (uplift) award applies for the given policy."""
        if policy == Policy.EARLY_CAREER_PAYMENTS:
            return self.eligible_for_early_career_payments_as_uplift
        return False
