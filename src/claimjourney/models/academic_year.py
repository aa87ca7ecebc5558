"""
ClaimJourney Academic Year

Value type for an academic year such as "2020/2021".

The "none" academic year is a real answer in the questionnaire ("none of
the above" when asked which year training was completed) and is kept distinct
from an unanswered question (None).
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from functools import total_ordering
from typing import Optional, Union


_YEAR_PATTERN = re.compile(r"^(\d{4})\s*[/_-]\s*(\d{4})$")

# Academic years start on 1 September
ACADEMIC_YEAR_START_MONTH = 9


@total_ordering
@dataclass(frozen=True)
class AcademicYear:
    """
    An academic year identified by the calendar year it starts in.

    Attributes:
        start_year: First calendar year, or None for the "none" year
    """
    start_year: Optional[int] = None

    @classmethod
    def none(cls) -> AcademicYear:
        """The "none of the above" academic year."""
        return cls(None)

    @classmethod
    def for_date(cls, d: date) -> AcademicYear:
        """Academic year containing the given date."""
        if d.month >= ACADEMIC_YEAR_START_MONTH:
            return cls(d.year)
        return cls(d.year - 1)

    @classmethod
    def parse(cls, value: Union[str, int, AcademicYear, None]) -> Optional[AcademicYear]:
        """
        Parse "2020/2021", "2020_2021", 2020 or "None".

        Returns None for a missing value so callers can tell "unanswered"
        apart from AcademicYear.none().

        Raises:
            ValueError: If the value is not a recognisable academic year
        """
        if value is None:
            return None
        if isinstance(value, AcademicYear):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid academic year: {value!r}")
        if isinstance(value, int):
            return cls(value)

        text = str(value).strip()
        if text.lower() == "none":
            return cls.none()
        if text.isdigit():
            return cls(int(text))

        match = _YEAR_PATTERN.match(text)
        if not match:
            raise ValueError(f"Invalid academic year: {value!r}")
        start, end = int(match.group(1)), int(match.group(2))
        if end != start + 1:
            raise ValueError(f"Academic year must span consecutive years: {value!r}")
        return cls(start)

    @property
    def is_none(self) -> bool:
        return self.start_year is None

    @property
    def end_year(self) -> Optional[int]:
        if self.start_year is None:
            return None
        return self.start_year + 1

    def __add__(self, years: int) -> AcademicYear:
        if self.start_year is None:
            raise TypeError("Cannot do arithmetic on the none academic year")
        return AcademicYear(self.start_year + years)

    def __sub__(self, years: int) -> AcademicYear:
        return self + (-years)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, AcademicYear):
            return NotImplemented
        if self.start_year is None or other.start_year is None:
            raise TypeError("The none academic year is not ordered")
        return self.start_year < other.start_year

    def __str__(self) -> str:
        if self.start_year is None:
            return "None"
        return f"{self.start_year}/{self.start_year + 1}"

    def to_underscored(self) -> str:
        """Storage form used by the reference packs, e.g. "2020_2021"."""
        if self.start_year is None:
            return "None"
        return f"{self.start_year}_{self.start_year + 1}"
