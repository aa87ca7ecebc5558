"""
ClaimJourney Interface Tests

Tests for the in-memory store, school directory, notification recorder,
policy configuration and claim session helpers.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from claimjourney.configuration import (
    EngineSettings,
    PolicyConfiguration,
    StaticPolicyConfigurationProvider,
)
from claimjourney.interfaces import (
    CLAIM_SESSION_KEYS,
    ClaimStore,
    InMemoryClaimStore,
    InMemorySchoolDirectory,
    NotificationSender,
    PolicyConfigurationProvider,
    RecordingNotificationSender,
    SchoolDirectory,
    claim_session_timed_out,
    clear_claim_session,
)
from claimjourney.models import AcademicYear, AwardTable, MessageType, Policy
from tests.conftest import make_ecp_claim, make_school


NOW = datetime(2022, 10, 3, 12, 0, tzinfo=timezone.utc)


class TestInMemoryClaimStore:
    """Tests for the in-memory ClaimStore."""

    def test_satisfies_protocol(self, store: InMemoryClaimStore) -> None:
        assert isinstance(store, ClaimStore)

    def test_round_trip_is_a_copy(self, store: InMemoryClaimStore) -> None:
        claim = make_ecp_claim()
        store.add(claim)

        claim.first_name = "Changed"
        loaded = store.get(claim.id)
        assert loaded.first_name is None
        assert loaded is not claim

        store.save(claim)
        assert store.get(claim.id).first_name == "Changed"

    def test_get_missing(self, store: InMemoryClaimStore) -> None:
        assert store.get("missing") is None

    def test_claims_for_skips_missing(self, store: InMemoryClaimStore) -> None:
        claim = make_ecp_claim()
        store.add(claim)
        assert [c.id for c in store.claims_for([claim.id, "missing"])] == [claim.id]

    def test_delete(self, store: InMemoryClaimStore) -> None:
        claim = make_ecp_claim()
        store.add(claim)
        store.delete(claim.id)
        assert claim.id not in store
        store.delete(claim.id)

    def test_transaction_rolls_back_on_error(self, store: InMemoryClaimStore) -> None:
        kept = make_ecp_claim()
        store.add(kept)

        with pytest.raises(RuntimeError):
            with store.transaction():
                store.add(make_ecp_claim())
                store.delete(kept.id)
                raise RuntimeError("boom")

        assert len(store) == 1
        assert kept.id in store

    def test_transaction_commits(self, store: InMemoryClaimStore) -> None:
        with store.transaction():
            store.add(make_ecp_claim())
        assert len(store) == 1


class TestCollaborators:
    """Tests for the school directory and notification recorder."""

    def test_school_directory(self) -> None:
        school = make_school()
        directory = InMemorySchoolDirectory([school])
        assert isinstance(directory, SchoolDirectory)
        assert directory.get(school.id) == school
        assert directory.get("000000") is None

    def test_recording_sender(self) -> None:
        sender = RecordingNotificationSender()
        assert isinstance(sender, NotificationSender)
        sender.send("jo@example.com", MessageType.CLAIM_SUBMITTED, {"ref": "ABC12345"})
        assert len(sender.sent_of_type(MessageType.CLAIM_SUBMITTED)) == 1
        assert sender.sent_of_type(MessageType.CLAIM_APPROVED) == []


class TestPolicyConfiguration:
    """Tests for policy configuration and engine settings."""

    def test_static_provider(self) -> None:
        provider = StaticPolicyConfigurationProvider.from_mapping({
            Policy.EARLY_CAREER_PAYMENTS: "2022/2023",
            "student_loans": 2021,
        })
        assert isinstance(provider, PolicyConfigurationProvider)
        assert provider.current_academic_year(Policy.EARLY_CAREER_PAYMENTS) == AcademicYear(2022)
        assert provider.current_academic_year(Policy.STUDENT_LOANS) == AcademicYear(2021)
        assert provider.current_academic_year(Policy.LEVELLING_UP_PREMIUM_PAYMENTS) is None

    def test_open_for_submissions(self) -> None:
        provider = StaticPolicyConfigurationProvider([
            PolicyConfiguration(Policy.STUDENT_LOANS, AcademicYear(2022), open_for_submissions=False),
        ])
        assert not provider.open_for_submissions(Policy.STUDENT_LOANS)
        assert not provider.open_for_submissions(Policy.EARLY_CAREER_PAYMENTS)

    def test_settings_from_award_table(self, award_table: AwardTable) -> None:
        settings = EngineSettings.from_award_table(award_table, final_policy_year=AcademicYear(2025))
        assert settings.max_award_amount_for(Policy.EARLY_CAREER_PAYMENTS) == award_table.max_uplift_amount
        assert settings.final_policy_year == AcademicYear(2025)

    def test_default_final_policy_year(self, award_table: AwardTable) -> None:
        assert EngineSettings.from_award_table(award_table).final_policy_year == AcademicYear(2024)


class TestClaimSession:
    """Tests for claim session timeout helpers."""

    def test_not_timed_out(self) -> None:
        assert not claim_session_timed_out(NOW - timedelta(minutes=29), NOW)

    def test_timed_out(self) -> None:
        assert claim_session_timed_out(NOW - timedelta(minutes=31), NOW)
        assert claim_session_timed_out(NOW - timedelta(minutes=11), NOW, timeout_minutes=10)

    def test_never_seen(self) -> None:
        assert not claim_session_timed_out(None, NOW)

    def test_clear_claim_session(self) -> None:
        session = {"claim_id": "abc", "slugs": ["current-school"], "csrf_token": "t"}
        removed = clear_claim_session(session)
        assert sorted(removed) == ["claim_id", "slugs"]
        assert session == {"csrf_token": "t"}

    def test_session_keys(self) -> None:
        assert "claim_id" in CLAIM_SESSION_KEYS
        assert len(CLAIM_SESSION_KEYS) == len(set(CLAIM_SESSION_KEYS))
