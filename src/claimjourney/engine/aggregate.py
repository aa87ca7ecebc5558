"""
ClaimJourney Claim Aggregate

A claimant's journey may cover more than one policy: the additional payments
journey asks one set of questions for both early-career payments and
levelling up premium payments. ClaimAggregate wraps the per-policy claim
records so the journey reads and writes one claim.

Forwarding rules:
- answer mutations (assign_attributes, save, reset_dependent_answers) go to
  every member
- identity and answer reads come from the main record only

On submission the aggregate collapses to the submitted record; the others are
deleted in the same transaction.
"""
from __future__ import annotations

import copy
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Optional, Protocol, runtime_checkable

from ..exceptions import (
    AmbiguousPolicyYearError,
    ClaimSubmittedError,
    IntegrityError,
    JourneyValidationError,
    MissingAnswerError,
    MissingPolicyYearError,
    UnselectablePolicyError,
)
from ..interfaces import ClaimStore, PolicyConfigurationProvider, SchoolDirectory
from ..models import (
    DEFAULT_COMBINED_POLICY,
    AcademicYear,
    ClaimRecord,
    Eligibility,
    EligibilityStatus,
    JourneyType,
    Policy,
)
from .evaluators import EvaluatorRegistry
from .reminders import set_a_reminder

logger = logging.getLogger(__name__)

# Form keys resolved to School objects through the SchoolDirectory
SCHOOL_ID_ATTRIBUTES = {
    "current_school_id": "current_school",
    "claim_school_id": "claim_school",
}


@runtime_checkable
class ClaimLike(Protocol):
    """What journey code may read from a claim, single or aggregated."""

    id: str
    reference: str
    policy: Policy
    academic_year: AcademicYear
    eligibility: Eligibility
    submitted: bool

    def assign_attributes(self, attrs: dict[str, Any]) -> None:
        ...

    def reset_dependent_answers(self, reset_attrs: tuple[str, ...] = ()) -> None:
        ...


def _main_record_attribute(name: str) -> property:
    def getter(self: ClaimAggregate) -> Any:
        return getattr(self.main_record, name)
    getter.__name__ = name
    return property(getter, doc=f"{name} of the main record.")


class ClaimAggregate:
    """
    One or more per-policy claim records behaving as a single claim.

    Usage:
        aggregate = ClaimAggregate(
            claims=[ecp_claim, lup_claim],
            evaluators=EvaluatorRegistry(award_table),
        )
        aggregate.assign_attributes({"eligibility_attributes": {...}})
        aggregate.reset_dependent_answers()
        aggregate.save(store)
        if aggregate.eligibility_status() == EligibilityStatus.ELIGIBLE_NOW:
            aggregate.submit(store)
    """

    # Reads forwarded to the main record
    id = _main_record_attribute("id")
    reference = _main_record_attribute("reference")
    policy = _main_record_attribute("policy")
    academic_year = _main_record_attribute("academic_year")
    eligibility = _main_record_attribute("eligibility")
    submitted = _main_record_attribute("submitted")
    submitted_at = _main_record_attribute("submitted_at")
    first_name = _main_record_attribute("first_name")
    surname = _main_record_attribute("surname")
    date_of_birth = _main_record_attribute("date_of_birth")
    email_address = _main_record_attribute("email_address")
    provide_mobile_number = _main_record_attribute("provide_mobile_number")
    mobile_number = _main_record_attribute("mobile_number")
    bank_or_building_society = _main_record_attribute("bank_or_building_society")
    teacher_reference_number = _main_record_attribute("teacher_reference_number")
    has_student_loan = _main_record_attribute("has_student_loan")
    student_loan_country = _main_record_attribute("student_loan_country")
    student_loan_courses = _main_record_attribute("student_loan_courses")
    student_loan_start_date = _main_record_attribute("student_loan_start_date")
    has_masters_doctoral_loan = _main_record_attribute("has_masters_doctoral_loan")
    postgraduate_masters_loan = _main_record_attribute("postgraduate_masters_loan")
    postgraduate_doctoral_loan = _main_record_attribute("postgraduate_doctoral_loan")

    def __init__(
        self,
        claims: Iterable[ClaimRecord],
        evaluators: EvaluatorRegistry,
        selected_policy: Optional[Policy] = None,
        schools: Optional[SchoolDirectory] = None,
        policy_configuration: Optional[PolicyConfigurationProvider] = None,
    ):
        self.claims: list[ClaimRecord] = list(claims)
        self.evaluators = evaluators
        self.selected_policy = Policy(selected_policy) if selected_policy else None
        self.schools = schools
        self.policy_configuration = policy_configuration

    # -------------------------------------------------------------------------
    # Members
    # -------------------------------------------------------------------------

    def for_policy(self, policy: Policy) -> Optional[ClaimRecord]:
        for claim in self.claims:
            if claim.policy == policy:
                return claim
        return None

    @property
    def policies(self) -> list[Policy]:
        return [claim.policy for claim in self.claims]

    @property
    def claim_ids(self) -> list[str]:
        return [claim.id for claim in self.claims]

    @property
    def journey(self) -> JourneyType:
        if any(policy.combinable for policy in self.policies):
            return JourneyType.ADDITIONAL_PAYMENTS
        return JourneyType.STUDENT_LOANS

    @property
    def main_policy(self) -> Policy:
        """
        Policy of the record journey code acts on.

        - the only record of a single-policy journey
        - the selected policy once the claimant has chosen
        - early-career payments for a combined journey until then

        Raises:
            UnselectablePolicyError: If none of the rules applies
        """
        if len(self.claims) == 1:
            return self.claims[0].policy
        if self.selected_policy is not None:
            return self.selected_policy
        if any(policy.combinable for policy in self.policies):
            return DEFAULT_COMBINED_POLICY
        raise UnselectablePolicyError(
            message="Cannot select a main policy for the journey",
            details={"policies": [p.value for p in self.policies]},
        )

    @property
    def main_record(self) -> ClaimRecord:
        record = self.for_policy(self.main_policy)
        if record is None:
            raise UnselectablePolicyError(
                message=f"No claim for policy {self.main_policy.value} in the journey",
                details={"policies": [p.value for p in self.policies]},
            )
        return record

    # -------------------------------------------------------------------------
    # Eligibility
    # -------------------------------------------------------------------------

    def status_for(self, claim: ClaimRecord) -> EligibilityStatus:
        return self.evaluators.for_claim(claim).status(claim)

    def award_amount_for(self, claim: ClaimRecord) -> Decimal:
        return self.evaluators.for_claim(claim).award_amount(claim)

    def eligibility_status(self) -> EligibilityStatus:
        """
        Status of the journey as a whole.

        Eligible now wins over eligible later, which is only shown when
        nothing is eligible now. Ineligible needs every record ineligible.
        """
        statuses = [self.status_for(claim) for claim in self.claims]
        if EligibilityStatus.ELIGIBLE_NOW in statuses:
            return EligibilityStatus.ELIGIBLE_NOW
        if EligibilityStatus.ELIGIBLE_LATER in statuses:
            return EligibilityStatus.ELIGIBLE_LATER
        if statuses and all(s == EligibilityStatus.INELIGIBLE for s in statuses):
            return EligibilityStatus.INELIGIBLE
        return EligibilityStatus.UNDETERMINED

    def is_eligible_now(self) -> bool:
        return any(self.evaluators.for_claim(c).is_eligible_now(c) for c in self.claims)

    def is_eligible_later(self) -> bool:
        return any(self.evaluators.for_claim(c).is_eligible_later(c) for c in self.claims)

    def is_ineligible(self) -> bool:
        return all(self.evaluators.for_claim(c).is_ineligible(c) for c in self.claims)

    def eligible_now(self) -> list[ClaimRecord]:
        return [c for c in self.claims if self.status_for(c) == EligibilityStatus.ELIGIBLE_NOW]

    def eligible_now_and_sorted(self) -> list[ClaimRecord]:
        """Eligible-now records, highest award first, then by policy name."""
        return sorted(
            self.eligible_now(),
            key=lambda c: (-self.award_amount_for(c), c.policy.short_name),
        )

    def eligible_eligibility(self) -> Eligibility:
        """Eligibility of the first record not ruled out, else the main record's."""
        for claim in sorted(self.claims, key=lambda c: c.policy.value):
            if not self.evaluators.for_claim(claim).is_ineligible(claim):
                return claim.eligibility
        return self.main_record.eligibility

    def editable_attributes(self) -> list[str]:
        attributes: list[str] = []
        for claim in self.claims:
            for name in claim.eligibility.EDITABLE_ATTRIBUTES:
                if name not in attributes:
                    attributes.append(name)
        return attributes

    # -------------------------------------------------------------------------
    # Broadcast mutations
    # -------------------------------------------------------------------------

    def assign_attributes(self, attrs: dict[str, Any]) -> None:
        """
        Assign answers to every record in the journey.

        School IDs in the eligibility answers are resolved to schools first.
        Every record checks the answers before any record is written, so the
        records of a combined journey never disagree after a rejected answer.

        Raises:
            MissingAnswerError: If a school ID is not in the directory
            ClaimSubmittedError: If a record has been submitted
            UnknownAttributeError: If a key is not a known answer
            ProtectedAttributeError: If a key is only amendable by an admin
            AwardAmountOutOfRangeError: If an entered amount is out of bounds
            ValueError: If a value cannot be converted
        """
        attrs = dict(attrs)
        if "eligibility_attributes" in attrs and attrs["eligibility_attributes"]:
            attrs["eligibility_attributes"] = self._resolve_schools(dict(attrs["eligibility_attributes"]))

        prepared = []
        for claim in self.claims:
            values, eligibility_values = claim.prepare_attributes(attrs)
            self.evaluators.for_claim(claim).check_answers(eligibility_values)
            prepared.append((claim, values, eligibility_values))

        for claim, values, eligibility_values in prepared:
            claim.apply_attributes(values, eligibility_values)

    def _resolve_schools(self, eligibility_attrs: dict[str, Any]) -> dict[str, Any]:
        if self.schools is None:
            return eligibility_attrs
        for id_key, attribute in SCHOOL_ID_ATTRIBUTES.items():
            if id_key not in eligibility_attrs:
                continue
            school_id = eligibility_attrs.pop(id_key)
            school = self.schools.get(school_id) if school_id is not None else None
            if school_id is not None and school is None:
                raise MissingAnswerError(
                    message="Select a school from the list or search again for a different school",
                    details={"attribute": attribute, "school_id": school_id},
                )
            eligibility_attrs[attribute] = school
        return eligibility_attrs

    def reset_dependent_answers(self, reset_attrs: tuple[str, ...] = ()) -> None:
        for claim in self.claims:
            claim.reset_dependent_answers(reset_attrs)

    def save(self, store: ClaimStore) -> bool:
        """Persist every record; True only if all were saved."""
        results = [store.save(claim) for claim in self.claims]
        return all(results)

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    def policy_options_provided(self) -> list[dict[str, Any]]:
        """Eligible-now policies offered to the claimant, best award first."""
        if not self.main_record.policy.combinable:
            return []
        return [
            {"policy": claim.policy.value, "award_amount": self.award_amount_for(claim)}
            for claim in self.eligible_now_and_sorted()
        ]

    def submit(
        self,
        store: ClaimStore,
        policy: Optional[Policy] = None,
        now: Optional[datetime] = None,
    ) -> ClaimRecord:
        """
        Submit one record and discard the rest, all or nothing.

        The chosen record gets the policy options offered, its award amount
        frozen and its submission time; every other record is deleted. If
        anything fails the aggregate and the store are left as they were.

        Args:
            store: Where records are saved and deleted
            policy: Policy to submit under, defaults to the main record's
            now: Submission time, defaults to the current UTC time

        Returns:
            The submitted record

        Raises:
            UnselectablePolicyError: If the journey has no record for the policy
            ClaimSubmittedError: If the record was already submitted
            JourneyValidationError: If the record is not eligible now
        """
        policy = Policy(policy) if policy else self.main_record.policy
        claim = self.for_policy(policy)
        if claim is None:
            raise UnselectablePolicyError(
                message=f"No claim for policy {policy.value} in the journey",
                details={"policies": [p.value for p in self.policies]},
            )
        if claim.submitted:
            raise ClaimSubmittedError(message="Claim has already been submitted", claim_id=claim.id)

        evaluator = self.evaluators.for_claim(claim)
        if not evaluator.is_eligible_now(claim):
            raise JourneyValidationError(
                message=f"Claim is not eligible for {policy.short_name.lower()}",
                details={"policy": policy.value, "status": evaluator.status(claim).value},
                claim_id=claim.id,
            )

        snapshot_claims = copy.deepcopy(self.claims)
        snapshot_selected = self.selected_policy
        try:
            with store.transaction():
                claim.policy_options_provided = self.policy_options_provided()
                evaluator.freeze_award_amount(claim)
                claim.mark_submitted(now or datetime.now(timezone.utc))
                if not store.save(claim):
                    raise IntegrityError(
                        message="Submitted claim could not be saved",
                        claim_id=claim.id,
                    )
                for other in self.claims:
                    if other is not claim:
                        store.delete(other.id)
        except Exception:
            self.claims = snapshot_claims
            self.selected_policy = snapshot_selected
            logger.warning("Submission of claim %s rolled back", claim.id, exc_info=True)
            raise

        self.claims = [claim]
        self.selected_policy = policy
        logger.info(
            "Claim %s submitted under %s (award %s, %d option(s) offered)",
            claim.reference, policy.value, evaluator.award_amount(claim),
            len(claim.policy_options_provided),
        )
        return claim

    # -------------------------------------------------------------------------
    # Policy year and reminders
    # -------------------------------------------------------------------------

    def policy_academic_year(self) -> AcademicYear:
        """
        The academic year every policy in the journey is claimed in.

        Raises:
            MissingPolicyYearError: If a policy has no (or the none) year
            AmbiguousPolicyYearError: If the policies disagree
        """
        if self.policy_configuration is None:
            raise MissingPolicyYearError(message="No policy configuration provided")

        years: dict[Policy, Optional[AcademicYear]] = {
            policy: self.policy_configuration.current_academic_year(policy)
            for policy in self.policies
        }
        missing = [p.value for p, year in years.items() if year is None or year.is_none]
        if missing:
            raise MissingPolicyYearError(
                message=f"No current academic year configured for {', '.join(missing)}",
                details={"policies": missing},
            )

        distinct = set(years.values())
        if len(distinct) > 1:
            raise AmbiguousPolicyYearError(
                message="Have more than one policy year in the same journey",
                details={p.value: str(year) for p, year in years.items()},
            )
        if not distinct:
            raise MissingPolicyYearError(message="Have no policy year for the journey")
        return distinct.pop()

    def reminder_eligible(self) -> bool:
        """Whether the claimant can set a reminder for the next claim window."""
        if not self.claims:
            return False
        itt_academic_year = getattr(self.main_record.eligibility, "itt_academic_year", None)
        return set_a_reminder(
            policy_year=self.policy_academic_year(),
            itt_academic_year=itt_academic_year,
            final_policy_year=self.evaluators.settings.final_policy_year,
        )

    def __repr__(self) -> str:
        policies = ", ".join(p.value for p in self.policies)
        return f"ClaimAggregate(policies=[{policies}], selected_policy={self.selected_policy})"
