"""
ClaimJourney Reminder Model

A claimant who is eligible later can ask to be reminded when the next claim
window opens.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import uuid4

from .academic_year import AcademicYear
from .enums import IttSubject


@dataclass
class Reminder:
    """
    A stored reminder request.

    Attributes:
        id: Unique identifier
        full_name: Claimant's name for the greeting
        email_address: Where to send the reminder
        itt_academic_year: Claimant's ITT cohort
        itt_subject: Claimant's ITT subject
        email_verified: Claimant confirmed the address with a one-time code
        sent_at: When the due reminder was sent
    """
    id: str
    full_name: str
    email_address: str
    itt_academic_year: Optional[AcademicYear] = None
    itt_subject: Optional[IttSubject] = None
    email_verified: bool = False
    sent_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        full_name: str,
        email_address: str,
        itt_academic_year: Optional[AcademicYear] = None,
        itt_subject: Optional[IttSubject] = None,
    ) -> Reminder:
        """Factory method to create a new, unverified Reminder."""
        return cls(
            id=str(uuid4()),
            full_name=full_name,
            email_address=email_address,
            itt_academic_year=itt_academic_year,
            itt_subject=itt_subject,
        )

    @property
    def sent(self) -> bool:
        return self.sent_at is not None
