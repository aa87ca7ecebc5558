"""
ClaimJourney Reminder Tests

Tests for when reminders can be set and sending reminders that are due.
"""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from claimjourney.configuration import EngineSettings
from claimjourney.engine import ReminderService, set_a_reminder
from claimjourney.interfaces import RecordingNotificationSender
from claimjourney.models import AcademicYear, IttSubject, MessageType, Reminder


def make_reminder(itt_year: AcademicYear = AcademicYear(2019), verified: bool = True) -> Reminder:
    reminder = Reminder.create(
        full_name="Jo Bloggs",
        email_address="jo.bloggs@example.com",
        itt_academic_year=itt_year,
        itt_subject=IttSubject.MATHEMATICS,
    )
    reminder.email_verified = verified
    return reminder


@pytest.fixture
def sender() -> RecordingNotificationSender:
    return RecordingNotificationSender()


class TestSetAReminder:
    """Tests for the set-a-reminder rule."""

    def test_itt_year_selectable_next_year(self) -> None:
        assert set_a_reminder(AcademicYear(2022), AcademicYear(2018))

    def test_itt_year_too_old_next_year(self) -> None:
        """2017/2018 drops out of the window for 2023/2024."""
        assert not set_a_reminder(AcademicYear(2022), AcademicYear(2017))

    def test_final_policy_year(self) -> None:
        assert not set_a_reminder(AcademicYear(2024), AcademicYear(2020))
        assert not set_a_reminder(AcademicYear(2022), AcademicYear(2020), final_policy_year=AcademicYear(2022))

    @pytest.mark.parametrize("itt_year", [None, AcademicYear.none()])
    def test_no_usable_itt_year(self, itt_year) -> None:
        assert not set_a_reminder(AcademicYear(2022), itt_year)


class TestReminderService:
    """Tests for reminder notifications."""

    def test_confirm(self, sender: RecordingNotificationSender) -> None:
        service = ReminderService(sender)
        service.confirm(make_reminder())

        [message] = sender.sent_of_type(MessageType.REMINDER_SET)
        assert message.recipient == "jo.bloggs@example.com"
        assert message.personalisation["first_name"] == "Jo"
        assert message.personalisation["itt_academic_year"] == "2019/2020"
        assert message.personalisation["itt_subject"] == "mathematics"

    def test_can_set_uses_settings(self, sender: RecordingNotificationSender) -> None:
        service = ReminderService(sender, EngineSettings(final_policy_year=AcademicYear(2022)))
        assert not service.can_set(AcademicYear(2022), AcademicYear(2020))
        assert service.can_set(AcademicYear(2021), AcademicYear(2020))

    def test_send_due(self, sender: RecordingNotificationSender) -> None:
        service = ReminderService(sender)
        now = datetime(2022, 9, 1, 8, 0, tzinfo=timezone.utc)
        due = make_reminder(AcademicYear(2019))
        unverified = make_reminder(AcademicYear(2019), verified=False)
        out_of_window = make_reminder(AcademicYear(2015))

        sent = service.send_due([due, unverified, out_of_window], AcademicYear(2022), now=now)

        assert sent == [due]
        assert due.sent_at == now
        assert unverified.sent_at is None
        [message] = sender.sent_of_type(MessageType.REMINDER_DUE)
        assert message.personalisation["claim_academic_year"] == "2022/2023"

    def test_reminder_sent_once(self, sender: RecordingNotificationSender) -> None:
        service = ReminderService(sender)
        reminder = make_reminder()
        service.send_due([reminder], AcademicYear(2022))
        service.send_due([reminder], AcademicYear(2022))
        assert len(sender.sent) == 1
