"""
ClaimJourney Reminders

Claimants who are eligible later, or whose cohort can claim in the next
window, can ask for an email when that window opens.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from ..configuration import DEFAULT_FINAL_POLICY_YEAR, EngineSettings
from ..interfaces import NotificationSender
from ..models import AcademicYear, MessageType, Reminder
from .subject_eligibility import selectable_itt_years

logger = logging.getLogger(__name__)


def set_a_reminder(
    policy_year: AcademicYear,
    itt_academic_year: Optional[AcademicYear],
    final_policy_year: AcademicYear = DEFAULT_FINAL_POLICY_YEAR,
) -> bool:
    """
    Whether a reminder can be set for the claim year after policy_year.

    No reminders are offered from the final policy year on. Otherwise the
    ITT year must be one of those selectable in the next claim year.
    """
    if policy_year >= final_policy_year:
        return False
    if itt_academic_year is None or itt_academic_year.is_none:
        return False
    return itt_academic_year in selectable_itt_years(policy_year + 1)


class ReminderService:
    """
    Sends reminder emails through a NotificationSender.

    Usage:
        service = ReminderService(sender, settings)
        service.confirm(reminder)
        sent = service.send_due(reminders, policy_year=AcademicYear(2022))
    """

    def __init__(self, sender: NotificationSender, settings: Optional[EngineSettings] = None):
        self.sender = sender
        self.settings = settings or EngineSettings()

    def can_set(self, policy_year: AcademicYear, itt_academic_year: Optional[AcademicYear]) -> bool:
        return set_a_reminder(policy_year, itt_academic_year, self.settings.final_policy_year)

    def confirm(self, reminder: Reminder) -> None:
        """Tell the claimant their reminder has been set."""
        self.sender.send(
            reminder.email_address,
            MessageType.REMINDER_SET,
            self._personalisation(reminder),
        )
        logger.info("Reminder %s set", reminder.id)

    def is_due(self, reminder: Reminder, policy_year: AcademicYear) -> bool:
        if not reminder.email_verified or reminder.sent:
            return False
        itt_year = reminder.itt_academic_year
        if itt_year is None or itt_year.is_none:
            return False
        return itt_year in selectable_itt_years(policy_year)

    def send_due(
        self,
        reminders: Iterable[Reminder],
        policy_year: AcademicYear,
        now: Optional[datetime] = None,
    ) -> list[Reminder]:
        """
        Send every verified, unsent reminder whose cohort can claim now.

        Returns:
            The reminders sent, each stamped with sent_at
        """
        sent_at = now or datetime.now(timezone.utc)
        sent: list[Reminder] = []
        for reminder in reminders:
            if not self.is_due(reminder, policy_year):
                continue
            personalisation = self._personalisation(reminder)
            personalisation["claim_academic_year"] = str(policy_year)
            self.sender.send(reminder.email_address, MessageType.REMINDER_DUE, personalisation)
            reminder.sent_at = sent_at
            sent.append(reminder)
            logger.info("Reminder %s sent for %s", reminder.id, policy_year)
        return sent

    @staticmethod
    def _personalisation(reminder: Reminder) -> dict[str, str]:
        return {
            "first_name": reminder.full_name.split(" ")[0] if reminder.full_name else "",
            "full_name": reminder.full_name,
            "itt_academic_year": str(reminder.itt_academic_year) if reminder.itt_academic_year else "",
            "itt_subject": reminder.itt_subject.value if reminder.itt_subject else "",
        }
