"""
ClaimJourney Claim Aggregate Tests

Tests for the multi-policy claim wrapper: main record selection, broadcast
mutations, journey status, policy year resolution and atomic submission.
"""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from claimjourney.engine import ClaimAggregate, ClaimLike
from claimjourney.exceptions import (
    AmbiguousPolicyYearError,
    AwardAmountOutOfRangeError,
    ClaimSubmittedError,
    IntegrityError,
    JourneyValidationError,
    MissingAnswerError,
    MissingPolicyYearError,
    ProtectedAttributeError,
    UnselectablePolicyError,
)
from claimjourney.interfaces import InMemoryClaimStore, InMemorySchoolDirectory
from claimjourney.models import (
    AcademicYear,
    ClaimRecord,
    EligibilityStatus,
    JourneyType,
    Policy,
    Qualification,
)
from tests.conftest import (
    make_aggregate,
    make_claim,
    make_ecp_claim,
    make_lup_claim,
    make_school,
    make_student_loans_claim,
)


SUBMITTED_AT = datetime(2022, 10, 3, 12, 0, tzinfo=timezone.utc)


def make_combined(school=None, **overrides) -> ClaimAggregate:
    """ECP and LUP claims for 2022/2023 with the same answers."""
    school = school or make_school(lup_award_amount="2000")
    answers = {"itt_academic_year": "2020/2021", **overrides}
    return make_aggregate(
        make_ecp_claim(AcademicYear(2022), school=school, **answers),
        make_lup_claim(AcademicYear(2022), school=school, **answers),
    )


class FailingDeleteStore(InMemoryClaimStore):
    """Store whose delete fails, after the submitted claim has been saved."""

    def delete(self, claim_id: str) -> None:
        raise IntegrityError(message="Database connection lost", claim_id=claim_id)


class RejectingSaveStore(InMemoryClaimStore):
    def save(self, claim: ClaimRecord) -> bool:
        return False


# =============================================================================
# Main Record
# =============================================================================

class TestMainRecord:
    """Tests for which record the journey reads from."""

    def test_single_record(self) -> None:
        aggregate = make_aggregate(make_student_loans_claim())
        assert aggregate.main_policy == Policy.STUDENT_LOANS
        assert aggregate.journey == JourneyType.STUDENT_LOANS

    def test_combined_defaults_to_early_career_payments(self) -> None:
        aggregate = make_combined()
        assert aggregate.main_policy == Policy.EARLY_CAREER_PAYMENTS
        assert aggregate.journey == JourneyType.ADDITIONAL_PAYMENTS

    def test_selected_policy_wins(self) -> None:
        aggregate = make_combined()
        aggregate.selected_policy = Policy.LEVELLING_UP_PREMIUM_PAYMENTS
        assert aggregate.main_record.policy == Policy.LEVELLING_UP_PREMIUM_PAYMENTS

    def test_reads_forward_to_main_record(self) -> None:
        aggregate = make_combined()
        ecp_claim = aggregate.for_policy(Policy.EARLY_CAREER_PAYMENTS)
        assert aggregate.id == ecp_claim.id
        assert aggregate.reference == ecp_claim.reference
        assert aggregate.eligibility is ecp_claim.eligibility
        assert aggregate.academic_year == AcademicYear(2022)
        assert not aggregate.submitted

    def test_satisfies_claim_protocol(self) -> None:
        aggregate = make_combined()
        assert isinstance(aggregate, ClaimLike)
        assert isinstance(aggregate.main_record, ClaimLike)

    def test_no_main_policy_for_unrelated_records(self) -> None:
        aggregate = make_aggregate(
            make_student_loans_claim(),
            make_student_loans_claim(),
        )
        with pytest.raises(UnselectablePolicyError):
            aggregate.main_policy

    def test_selected_policy_without_record(self) -> None:
        aggregate = make_combined()
        aggregate.selected_policy = Policy.STUDENT_LOANS
        with pytest.raises(UnselectablePolicyError):
            aggregate.main_record


# =============================================================================
# Broadcast Mutations
# =============================================================================

class TestBroadcastMutations:
    """Tests for answer writes reaching every record."""

    def test_assign_attributes_reaches_every_record(self) -> None:
        aggregate = make_combined()
        aggregate.assign_attributes({
            "first_name": "Jo",
            "eligibility_attributes": {"teaching_subject_now": False, "eligible_degree_subject": True},
        })
        for claim in aggregate.claims:
            assert claim.first_name == "Jo"
            assert claim.eligibility.teaching_subject_now is False
        lup_claim = aggregate.for_policy(Policy.LEVELLING_UP_PREMIUM_PAYMENTS)
        assert lup_claim.eligibility.eligible_degree_subject is True

    def test_school_ids_resolved_through_directory(self) -> None:
        other = make_school(id="100000", name="Other School", lup_award_amount="3000")
        aggregate = make_combined()
        aggregate.schools = InMemorySchoolDirectory([other])

        aggregate.assign_attributes({"eligibility_attributes": {"current_school_id": "100000"}})
        for claim in aggregate.claims:
            assert claim.eligibility.current_school == other

    def test_unknown_school_id(self) -> None:
        aggregate = make_combined()
        aggregate.schools = InMemorySchoolDirectory()
        with pytest.raises(MissingAnswerError):
            aggregate.assign_attributes({"eligibility_attributes": {"current_school_id": "999999"}})

    def test_rejected_answer_leaves_every_record_unchanged(self) -> None:
        aggregate = make_combined()
        with pytest.raises(ValueError):
            aggregate.assign_attributes({
                "bank_or_building_society": "carrier_pigeon",
                "eligibility_attributes": {"qualification": "assessment_only", "eligible_itt_subject": "bogus"},
            })
        for claim in aggregate.claims:
            assert claim.bank_or_building_society is None
            assert claim.eligibility.qualification == Qualification.POSTGRADUATE_ITT
            assert not claim.eligibility.changed_attributes

    def test_later_record_refusal_leaves_earlier_record_unchanged(self) -> None:
        aggregate = make_combined()
        lup_claim = aggregate.for_policy(Policy.LEVELLING_UP_PREMIUM_PAYMENTS)
        lup_claim.mark_submitted(SUBMITTED_AT)
        with pytest.raises(ClaimSubmittedError):
            aggregate.assign_attributes({
                "first_name": "Jo",
                "eligibility_attributes": {"teaching_subject_now": False},
            })
        ecp_claim = aggregate.for_policy(Policy.EARLY_CAREER_PAYMENTS)
        assert ecp_claim.first_name is None
        assert ecp_claim.eligibility.teaching_subject_now is True

    def test_award_amount_refused_for_every_record(self) -> None:
        aggregate = make_combined()
        with pytest.raises(ProtectedAttributeError):
            aggregate.assign_attributes({
                "first_name": "Jo",
                "eligibility_attributes": {"award_amount": "99999"},
            })
        for claim in aggregate.claims:
            assert claim.first_name is None
            assert claim.eligibility.award_amount is None

    def test_entered_repayment_amount_is_bounded(self) -> None:
        aggregate = make_aggregate(make_student_loans_claim())
        with pytest.raises(AwardAmountOutOfRangeError) as exc_info:
            aggregate.assign_attributes({"eligibility_attributes": {"student_loan_repayment_amount": "99999"}})
        assert exc_info.value.details["max_amount"] == "5000"
        assert aggregate.eligibility.student_loan_repayment_amount == Decimal("1987.65")

        aggregate.assign_attributes({"eligibility_attributes": {"student_loan_repayment_amount": "5000"}})
        assert aggregate.eligibility.student_loan_repayment_amount == Decimal("5000")

    def test_reset_dependent_answers_reaches_every_record(self) -> None:
        aggregate = make_combined()
        aggregate.assign_attributes({"eligibility_attributes": {"qualification": "assessment_only"}})
        aggregate.reset_dependent_answers()
        for claim in aggregate.claims:
            assert claim.eligibility.eligible_itt_subject is None
            assert claim.eligibility.teaching_subject_now is None

    def test_save_persists_every_record(self, store: InMemoryClaimStore) -> None:
        aggregate = make_combined()
        assert aggregate.save(store)
        assert len(store) == 2
        assert all(claim_id in store for claim_id in aggregate.claim_ids)

    def test_save_clears_change_tracking(self, store: InMemoryClaimStore) -> None:
        aggregate = make_combined()
        aggregate.assign_attributes({"eligibility_attributes": {"teaching_subject_now": False}})
        aggregate.save(store)
        assert all(not c.eligibility.changed_attributes for c in aggregate.claims)

    def test_editable_attributes_union(self) -> None:
        aggregate = make_combined()
        attributes = aggregate.editable_attributes()
        assert attributes[0] == "nqt_in_academic_year_after_itt"
        assert "eligible_degree_subject" in attributes
        assert len(attributes) == len(set(attributes))


# =============================================================================
# Journey Status
# =============================================================================

class TestJourneyStatus:
    """Tests for status across records."""

    def test_eligible_now_wins(self) -> None:
        """ECP eligible now, LUP ruled out by the school."""
        aggregate = make_combined(school=make_school())
        ecp_claim = aggregate.for_policy(Policy.EARLY_CAREER_PAYMENTS)
        lup_claim = aggregate.for_policy(Policy.LEVELLING_UP_PREMIUM_PAYMENTS)

        assert aggregate.status_for(ecp_claim) == EligibilityStatus.ELIGIBLE_NOW
        assert aggregate.status_for(lup_claim) == EligibilityStatus.INELIGIBLE
        assert aggregate.eligibility_status() == EligibilityStatus.ELIGIBLE_NOW
        assert aggregate.is_eligible_now()
        assert not aggregate.is_ineligible()

    def test_ineligible_needs_every_record(self) -> None:
        aggregate = make_combined(subject_to_disciplinary_action=True)
        assert aggregate.eligibility_status() == EligibilityStatus.INELIGIBLE
        assert aggregate.is_ineligible()

    def test_eligible_later(self) -> None:
        """The 2018 maths cohort can claim ECP in 2023/2024; LUP is undecided."""
        school = make_school(lup_award_amount="2000")
        aggregate = make_aggregate(
            make_ecp_claim(AcademicYear(2022), school=school),
            make_lup_claim(AcademicYear(2022), school=school, itt_academic_year="2016/2017"),
        )
        assert aggregate.eligibility_status() == EligibilityStatus.ELIGIBLE_LATER
        assert aggregate.is_eligible_later()

    def test_undetermined(self) -> None:
        aggregate = make_aggregate(
            ClaimRecord.create(Policy.EARLY_CAREER_PAYMENTS, AcademicYear(2022)),
            ClaimRecord.create(Policy.LEVELLING_UP_PREMIUM_PAYMENTS, AcademicYear(2022)),
        )
        assert aggregate.eligibility_status() == EligibilityStatus.UNDETERMINED

    def test_eligible_now_sorted_by_award_then_name(self) -> None:
        aggregate = make_combined(school=make_school(lup_award_amount="3000"))
        policies = [c.policy for c in aggregate.eligible_now_and_sorted()]
        assert policies == [Policy.LEVELLING_UP_PREMIUM_PAYMENTS, Policy.EARLY_CAREER_PAYMENTS]

    def test_equal_awards_sorted_by_name(self) -> None:
        aggregate = make_combined()
        policies = [c.policy for c in aggregate.eligible_now_and_sorted()]
        assert policies == [Policy.EARLY_CAREER_PAYMENTS, Policy.LEVELLING_UP_PREMIUM_PAYMENTS]

    def test_eligible_eligibility_skips_ruled_out_records(self) -> None:
        aggregate = make_combined(school=make_school())
        ecp_claim = aggregate.for_policy(Policy.EARLY_CAREER_PAYMENTS)
        assert aggregate.eligible_eligibility() is ecp_claim.eligibility

    def test_policy_options_only_list_eligible_now(self) -> None:
        aggregate = make_combined(school=make_school())
        assert aggregate.policy_options_provided() == [
            {"policy": "early_career_payments", "award_amount": Decimal("2000")},
        ]

    def test_no_policy_options_for_student_loans(self) -> None:
        aggregate = make_aggregate(make_student_loans_claim())
        assert aggregate.policy_options_provided() == []


# =============================================================================
# Policy Year
# =============================================================================

class TestPolicyAcademicYear:
    """Tests for resolving the journey's claim year."""

    def test_single_year(self) -> None:
        aggregate = make_combined()
        assert aggregate.policy_academic_year() == AcademicYear(2022)

    def test_disagreeing_years(self) -> None:
        aggregate = make_aggregate(
            make_ecp_claim(AcademicYear(2022)),
            make_lup_claim(AcademicYear(2022)),
            years={
                Policy.EARLY_CAREER_PAYMENTS: "2022/2023",
                Policy.LEVELLING_UP_PREMIUM_PAYMENTS: "2023/2024",
            },
        )
        with pytest.raises(AmbiguousPolicyYearError):
            aggregate.policy_academic_year()

    @pytest.mark.parametrize("year", [None, "None"])
    def test_missing_year(self, year) -> None:
        aggregate = make_aggregate(
            make_ecp_claim(AcademicYear(2022)),
            years={Policy.EARLY_CAREER_PAYMENTS: year},
        )
        with pytest.raises(MissingPolicyYearError):
            aggregate.policy_academic_year()

    def test_unconfigured_policy(self) -> None:
        aggregate = make_aggregate(make_ecp_claim(AcademicYear(2022)), years={})
        with pytest.raises(MissingPolicyYearError):
            aggregate.policy_academic_year()

    def test_reminder_eligible(self) -> None:
        """ITT 2020/2021 is selectable in the next claim year, 2023/2024."""
        aggregate = make_combined()
        assert aggregate.reminder_eligible()

    def test_reminder_not_offered_in_final_year(self) -> None:
        aggregate = make_aggregate(
            make_ecp_claim(AcademicYear(2024), itt_academic_year="2020/2021"),
        )
        assert not aggregate.reminder_eligible()


# =============================================================================
# Submission
# =============================================================================

class TestSubmit:
    """Tests for atomic submission."""

    def test_submit_collapses_to_chosen_record(self, store: InMemoryClaimStore) -> None:
        aggregate = make_combined(school=make_school())
        aggregate.save(store)
        lup_id = aggregate.for_policy(Policy.LEVELLING_UP_PREMIUM_PAYMENTS).id

        claim = aggregate.submit(store, now=SUBMITTED_AT)

        assert claim.policy == Policy.EARLY_CAREER_PAYMENTS
        assert claim.submitted_at == SUBMITTED_AT
        assert claim.eligibility.award_amount == Decimal("2000")
        assert claim.policy_options_provided == [
            {"policy": "early_career_payments", "award_amount": Decimal("2000")},
        ]
        assert aggregate.claims == [claim]
        assert aggregate.selected_policy == Policy.EARLY_CAREER_PAYMENTS
        assert lup_id not in store
        assert store.get(claim.id).submitted

    def test_submit_selected_policy(self, store: InMemoryClaimStore) -> None:
        aggregate = make_combined(school=make_school(lup_award_amount="3000"))
        aggregate.save(store)

        claim = aggregate.submit(store, policy=Policy.LEVELLING_UP_PREMIUM_PAYMENTS, now=SUBMITTED_AT)

        assert claim.eligibility.award_amount == Decimal("3000")
        assert [o["policy"] for o in claim.policy_options_provided] == [
            "levelling_up_premium_payments",
            "early_career_payments",
        ]
        assert len(store) == 1

    def test_failure_leaves_aggregate_and_store_unchanged(self) -> None:
        store = FailingDeleteStore()
        aggregate = make_combined(school=make_school())
        aggregate.save(store)
        original_ids = list(aggregate.claim_ids)

        with pytest.raises(IntegrityError):
            aggregate.submit(store, now=SUBMITTED_AT)

        assert aggregate.claim_ids == original_ids
        assert aggregate.selected_policy is None
        assert not any(c.submitted for c in aggregate.claims)
        assert all(c.eligibility.award_amount is None for c in aggregate.claims)
        assert len(store) == 2
        assert not store.get(original_ids[0]).submitted

    def test_rejected_save_rolls_back(self) -> None:
        store = RejectingSaveStore()
        aggregate = make_combined(school=make_school())

        with pytest.raises(IntegrityError):
            aggregate.submit(store, now=SUBMITTED_AT)

        assert len(aggregate.claims) == 2
        assert not aggregate.submitted

    def test_not_eligible_now(self, store: InMemoryClaimStore) -> None:
        aggregate = make_combined(subject_to_disciplinary_action=True)
        with pytest.raises(JourneyValidationError):
            aggregate.submit(store)
        assert len(aggregate.claims) == 2

    def test_policy_not_in_journey(self, store: InMemoryClaimStore) -> None:
        aggregate = make_combined()
        with pytest.raises(UnselectablePolicyError):
            aggregate.submit(store, policy=Policy.STUDENT_LOANS)

    def test_already_submitted(self, store: InMemoryClaimStore) -> None:
        aggregate = make_aggregate(make_ecp_claim(AcademicYear(2021)))
        aggregate.submit(store, now=SUBMITTED_AT)
        with pytest.raises(ClaimSubmittedError):
            aggregate.submit(store, now=SUBMITTED_AT)

    def test_student_loans_submission(self, store: InMemoryClaimStore) -> None:
        aggregate = make_aggregate(make_student_loans_claim())
        claim = aggregate.submit(store, now=SUBMITTED_AT)
        assert claim.policy_options_provided == []
        assert claim.submitted

    def test_undetermined_claim_cannot_submit(self, store: InMemoryClaimStore) -> None:
        aggregate = make_aggregate(make_claim(Policy.STUDENT_LOANS, AcademicYear(2022)))
        with pytest.raises(JourneyValidationError):
            aggregate.submit(store)
