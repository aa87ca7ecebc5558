"""
ClaimJourney Award Table

Static award amounts keyed by (ITT subject, ITT academic year, claim academic
year). The table is reference data: built once, never mutated.

Lookups come in three flavours used by the evaluators:
- exact: subject, ITT year and claim year all match
- partial (current cohort): subject and ITT year match, any claim year
- first for claim year: first entry in table order matching subject and
  claim year

Tables are authored in ascending claim year order, so "first" is the
earliest match.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Iterator, Optional

from .academic_year import AcademicYear
from .enums import IttSubject


@dataclass(frozen=True)
class AwardKey:
    """Composite key of an award table entry."""
    itt_subject: IttSubject
    itt_academic_year: AcademicYear
    claim_academic_year: AcademicYear


@dataclass(frozen=True)
class AwardAmount:
    """
    One row of the award table.

    Attributes:
        key: Subject / cohort / claim year the row applies to
        base_amount: Award in pounds
        uplift_amount: Award in pounds at uplift schools
    """
    key: AwardKey
    base_amount: Decimal
    uplift_amount: Decimal

    @property
    def itt_subject(self) -> IttSubject:
        return self.key.itt_subject

    @property
    def itt_academic_year(self) -> AcademicYear:
        return self.key.itt_academic_year

    @property
    def claim_academic_year(self) -> AcademicYear:
        return self.key.claim_academic_year

    def amount_for(self, uplift: bool) -> Decimal:
        return self.uplift_amount if uplift else self.base_amount


@dataclass(frozen=True)
class AwardTable:
    """
    Ordered, immutable collection of award amounts.

    Attributes:
        version: Reference pack version the table was loaded from
        entries: Rows in authored order
    """
    entries: tuple[AwardAmount, ...] = ()
    version: str = "unversioned"
    max_uplift_amount: Decimal = field(init=False, compare=False)

    def __post_init__(self) -> None:
        # Computed once; handed to EngineSettings rather than cached globally
        maximum = max((e.uplift_amount for e in self.entries), default=Decimal("0"))
        object.__setattr__(self, "max_uplift_amount", maximum)

    @classmethod
    def from_entries(cls, entries: Iterable[AwardAmount], version: str = "unversioned") -> AwardTable:
        return cls(entries=tuple(entries), version=version)

    def __iter__(self) -> Iterator[AwardAmount]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def find(
        self,
        itt_subject: Optional[IttSubject],
        itt_academic_year: Optional[AcademicYear],
        claim_academic_year: Optional[AcademicYear],
    ) -> Optional[AwardAmount]:
        """First entry matching all three keys, or None."""
        matches = self.find_exact(itt_subject, itt_academic_year, claim_academic_year)
        return matches[0] if matches else None

    def find_exact(
        self,
        itt_subject: Optional[IttSubject],
        itt_academic_year: Optional[AcademicYear],
        claim_academic_year: Optional[AcademicYear],
    ) -> list[AwardAmount]:
        """All entries matching subject, ITT year and claim year."""
        if itt_subject is None or itt_academic_year is None or claim_academic_year is None:
            return []
        key = AwardKey(itt_subject, itt_academic_year, claim_academic_year)
        return [e for e in self.entries if e.key == key]

    def find_all_partial(
        self,
        itt_subject: Optional[IttSubject],
        itt_academic_year: Optional[AcademicYear],
    ) -> list[AwardAmount]:
        """All entries for the claimant's cohort, whatever the claim year."""
        if itt_subject is None or itt_academic_year is None:
            return []
        return [
            e for e in self.entries
            if e.itt_subject == itt_subject and e.itt_academic_year == itt_academic_year
        ]

    def find_first_for_claim_year(
        self,
        itt_subject: Optional[IttSubject],
        claim_academic_year: Optional[AcademicYear],
    ) -> Optional[AwardAmount]:
        """First entry in table order for the subject in the claim year."""
        if itt_subject is None or claim_academic_year is None:
            return None
        for entry in self.entries:
            if entry.itt_subject == itt_subject and entry.claim_academic_year == claim_academic_year:
                return entry
        return None

    def subjects_for(
        self,
        itt_academic_year: AcademicYear,
        claim_academic_year: AcademicYear,
    ) -> list[IttSubject]:
        """
        Subjects claimable for the cohort in the claim year or any later one.

        Returned in table order without duplicates.
        """
        subjects: list[IttSubject] = []
        for entry in self.entries:
            if entry.itt_academic_year != itt_academic_year:
                continue
            if entry.claim_academic_year.is_none or entry.claim_academic_year < claim_academic_year:
                continue
            if entry.itt_subject not in subjects:
                subjects.append(entry.itt_subject)
        return subjects
