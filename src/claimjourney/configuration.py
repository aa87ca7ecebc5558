"""
ClaimJourney Configuration

Policy configuration (the academic year each policy currently accepts claims
for) and the engine-wide settings derived from reference data.

Nothing here is process-global: callers build a provider and settings once
and pass them to the aggregate, evaluators and services.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Union

from .models import AcademicYear, AwardTable, Policy


# =============================================================================
# Defaults
# =============================================================================

DEFAULT_FINAL_POLICY_YEAR = AcademicYear(2024)
DEFAULT_CLAIM_TIMEOUT_MINUTES = 30
DEFAULT_MAX_LUP_AWARD_AMOUNT = Decimal("3000")
DEFAULT_MAX_STUDENT_LOAN_AWARD_AMOUNT = Decimal("5000")


# =============================================================================
# Policy Configuration
# =============================================================================

@dataclass(frozen=True)
class PolicyConfiguration:
    """
    Per-policy service configuration.

    Attributes:
        policy: Policy configured
        current_academic_year: Year claims are made in, None if not set up
        open_for_submissions: Whether new claims are accepted
    """
    policy: Policy
    current_academic_year: Optional[AcademicYear] = None
    open_for_submissions: bool = True


class StaticPolicyConfigurationProvider:
    """
    PolicyConfigurationProvider backed by a fixed set of configurations.

    Usage:
        provider = StaticPolicyConfigurationProvider.from_mapping({
            Policy.EARLY_CAREER_PAYMENTS: "2021/2022",
        })
        provider.current_academic_year(Policy.EARLY_CAREER_PAYMENTS)
    """

    def __init__(self, configurations: Iterable[PolicyConfiguration] = ()):
        self._configurations: dict[Policy, PolicyConfiguration] = {
            c.policy: c for c in configurations
        }

    @classmethod
    def from_mapping(
        cls,
        years: Mapping[Policy, Union[AcademicYear, str, int, None]],
    ) -> StaticPolicyConfigurationProvider:
        """Build a provider from policy -> current academic year."""
        return cls(
            PolicyConfiguration(policy=Policy(policy), current_academic_year=AcademicYear.parse(year))
            for policy, year in years.items()
        )

    def configuration_for(self, policy: Policy) -> Optional[PolicyConfiguration]:
        return self._configurations.get(policy)

    def current_academic_year(self, policy: Policy) -> Optional[AcademicYear]:
        configuration = self._configurations.get(policy)
        if configuration is None:
            return None
        return configuration.current_academic_year

    def open_for_submissions(self, policy: Policy) -> bool:
        configuration = self._configurations.get(policy)
        return configuration is not None and configuration.open_for_submissions

    @property
    def policies(self) -> list[Policy]:
        return list(self._configurations)


# =============================================================================
# Engine Settings
# =============================================================================

@dataclass(frozen=True)
class EngineSettings:
    """
    Limits and timings the engine works to.

    Attributes:
        max_award_amount: Largest early-career payment award (table maximum)
        max_lup_award_amount: Largest levelling up premium award
        max_student_loan_award_amount: Largest student loan reimbursement
        final_policy_year: Last claim year reminders are offered for
        claim_timeout_minutes: Idle minutes before a claim session is cleared
    """
    max_award_amount: Decimal = Decimal("0")
    max_lup_award_amount: Decimal = DEFAULT_MAX_LUP_AWARD_AMOUNT
    max_student_loan_award_amount: Decimal = DEFAULT_MAX_STUDENT_LOAN_AWARD_AMOUNT
    final_policy_year: AcademicYear = DEFAULT_FINAL_POLICY_YEAR
    claim_timeout_minutes: int = DEFAULT_CLAIM_TIMEOUT_MINUTES

    @classmethod
    def from_award_table(
        cls,
        table: AwardTable,
        max_lup_award_amount: Decimal = DEFAULT_MAX_LUP_AWARD_AMOUNT,
        max_student_loan_award_amount: Decimal = DEFAULT_MAX_STUDENT_LOAN_AWARD_AMOUNT,
        final_policy_year: Optional[AcademicYear] = None,
        claim_timeout_minutes: int = DEFAULT_CLAIM_TIMEOUT_MINUTES,
    ) -> EngineSettings:
        """Settings whose ECP maximum is the table's largest uplift amount."""
        return cls(
            max_award_amount=table.max_uplift_amount,
            max_lup_award_amount=max_lup_award_amount,
            max_student_loan_award_amount=max_student_loan_award_amount,
            final_policy_year=final_policy_year or DEFAULT_FINAL_POLICY_YEAR,
            claim_timeout_minutes=claim_timeout_minutes,
        )

    def max_award_amount_for(self, policy: Policy) -> Decimal:
        if policy == Policy.EARLY_CAREER_PAYMENTS:
            return self.max_award_amount
        if policy == Policy.LEVELLING_UP_PREMIUM_PAYMENTS:
            return self.max_lup_award_amount
        return self.max_student_loan_award_amount
