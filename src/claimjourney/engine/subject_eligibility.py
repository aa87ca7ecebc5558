"""
ClaimJourney Subject Eligibility

Which ITT years a claimant can pick, and which ITT subjects can still lead to
a payment for a (claim year, ITT year) pair, per policy.

Early-career payment subjects come from the award table: a subject is
claimable if the cohort has an entry in the claim year or a later one.
Levelling up premium subjects are a fixed list.
"""
from __future__ import annotations

from typing import Optional

from ..models import AcademicYear, AwardTable, IttSubject, Policy

# Number of ITT years offered before the claim year
SELECTABLE_ITT_YEARS = 5

LEVELLING_UP_PREMIUM_SUBJECTS = (
    IttSubject.CHEMISTRY,
    IttSubject.COMPUTING,
    IttSubject.MATHEMATICS,
    IttSubject.PHYSICS,
)


def selectable_itt_years(claim_year: AcademicYear) -> list[AcademicYear]:
    """The five academic years before the claim year, oldest first."""
    return [claim_year - offset for offset in range(SELECTABLE_ITT_YEARS, 0, -1)]


class SubjectEligibilityChecker:
    """
    Answers subject questions for one claim year.

    Usage:
        checker = SubjectEligibilityChecker(award_table, AcademicYear(2022))
        checker.current_and_future_subjects(Policy.EARLY_CAREER_PAYMENTS, AcademicYear(2020))
    """

    def __init__(self, award_table: AwardTable, claim_year: AcademicYear):
        if claim_year.is_none:
            raise ValueError("Claim year cannot be the none academic year")
        self.award_table = award_table
        self.claim_year = claim_year

    def selectable_itt_years(self) -> list[AcademicYear]:
        return selectable_itt_years(self.claim_year)

    def itt_year_selectable(self, itt_year: Optional[AcademicYear]) -> bool:
        return itt_year is not None and itt_year in self.selectable_itt_years()

    def current_and_future_subjects(
        self,
        policy: Policy,
        itt_year: AcademicYear,
    ) -> list[IttSubject]:
        """
        Subjects that can be claimed for now or in a later claim year.

        Raises:
            ValueError: If the ITT year is not selectable for the claim year
        """
        if not self.itt_year_selectable(itt_year):
            raise ValueError(f"ITT year {itt_year} is not selectable in claim year {self.claim_year}")

        if policy == Policy.EARLY_CAREER_PAYMENTS:
            return self.award_table.subjects_for(itt_year, self.claim_year)
        if policy == Policy.LEVELLING_UP_PREMIUM_PAYMENTS:
            return list(LEVELLING_UP_PREMIUM_SUBJECTS)
        return []

    def subject_ineligible(
        self,
        policy: Policy,
        itt_subject: Optional[IttSubject],
        itt_year: Optional[AcademicYear],
    ) -> bool:
        """
        Whether the subject can never be claimed for.

        When the ITT year is unanswered or outside the window only "none of
        the above" is ruled out.
        """
        if itt_subject is None:
            return False
        if not self.itt_year_selectable(itt_year):
            return itt_subject == IttSubject.NONE_OF_THE_ABOVE
        return itt_subject not in self.current_and_future_subjects(policy, itt_year)
