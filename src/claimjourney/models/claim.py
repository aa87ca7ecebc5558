"""
ClaimJourney Claim Records

One ClaimRecord exists per policy in play for a claimant. A record carries
the claimant's answers (personal, payment and student loan details), one
eligibility record matching its policy, and its lifecycle: submission,
holds, payroll link and admin decisions.

Answers may change freely until submission; afterwards only decisions and
amendable values change.
"""
from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, ClassVar, Optional
from uuid import uuid4

from ..exceptions import ClaimSubmittedError, UnknownAttributeError
from .academic_year import AcademicYear
from .decision import Decision
from .eligibility import Eligibility, new_eligibility
from .enums import PaymentMethod, Policy, StudentLoanCountry

_REFERENCE_ALPHABET = string.ascii_uppercase + string.digits


def generate_reference() -> str:
    """Eight character claim reference shown to claimants."""
    return "".join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(8))


@dataclass
class ClaimRecord:
    """
    A claim for one policy.

    Attributes:
        id: Unique identifier
        policy: Policy claimed under
        academic_year: Academic year the claim is made in
        eligibility: Policy-specific eligibility answers
        reference: Claimant-facing reference
        submitted_at: When the claim was submitted
        held: Admin hold blocks decisions
        payment_id: Payroll payment the claim was paid in
        policy_options_provided: Eligible policies offered at submission
        decisions: Admin decisions, oldest first, never rewritten
    """
    ANSWER_ATTRIBUTES: ClassVar[tuple[str, ...]] = (
        "first_name",
        "surname",
        "date_of_birth",
        "email_address",
        "provide_mobile_number",
        "mobile_number",
        "bank_or_building_society",
        "teacher_reference_number",
        "has_student_loan",
        "student_loan_country",
        "student_loan_courses",
        "student_loan_start_date",
        "has_masters_doctoral_loan",
        "postgraduate_masters_loan",
        "postgraduate_doctoral_loan",
    )

    id: str
    policy: Policy
    academic_year: AcademicYear
    eligibility: Eligibility
    reference: str = field(default_factory=generate_reference)

    # Personal details
    first_name: Optional[str] = None
    surname: Optional[str] = None
    date_of_birth: Optional[date] = None
    email_address: Optional[str] = None
    provide_mobile_number: Optional[bool] = None
    mobile_number: Optional[str] = None

    # Payment details
    bank_or_building_society: Optional[PaymentMethod] = None
    teacher_reference_number: Optional[str] = None

    # Student loan details
    has_student_loan: Optional[bool] = None
    student_loan_country: Optional[StudentLoanCountry] = None
    student_loan_courses: Optional[str] = None  # "one_course" / "two_or_more_courses"
    student_loan_start_date: Optional[str] = None
    has_masters_doctoral_loan: Optional[bool] = None
    postgraduate_masters_loan: Optional[bool] = None
    postgraduate_doctoral_loan: Optional[bool] = None

    # Lifecycle
    submitted_at: Optional[datetime] = None
    held: bool = False
    payment_id: Optional[str] = None
    policy_options_provided: list[dict[str, Any]] = field(default_factory=list)
    decisions: list[Decision] = field(default_factory=list)

    @classmethod
    def create(cls, policy: Policy, academic_year: AcademicYear) -> ClaimRecord:
        """Factory method to create an unanswered claim for a policy."""
        return cls(
            id=str(uuid4()),
            policy=policy,
            academic_year=academic_year,
            eligibility=new_eligibility(policy),
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def submitted(self) -> bool:
        return self.submitted_at is not None

    @property
    def payrolled(self) -> bool:
        return self.payment_id is not None

    @property
    def active_decision(self) -> Optional[Decision]:
        """Latest decision that has not been undone, if any."""
        undone_ids = {d.supersedes_id for d in self.decisions if d.undone}
        for decision in reversed(self.decisions):
            if decision.undone:
                continue
            if decision.id in undone_ids:
                continue
            return decision
        return None

    @property
    def no_student_loan(self) -> bool:
        return self.has_student_loan is False

    def mark_submitted(self, at: datetime) -> None:
        self.submitted_at = at

    # -------------------------------------------------------------------------
    # Answers
    # -------------------------------------------------------------------------

    def assign_attributes(self, attrs: dict[str, Any]) -> None:
        """
        Assign claimant answers.

        Keys are claim answer names; a nested "eligibility_attributes" dict is
        passed to the eligibility record. Nothing is written unless every
        answer is accepted.

        Raises:
            ClaimSubmittedError: If the claim has been submitted
            UnknownAttributeError: If a key is not a claim answer
            ProtectedAttributeError: If an eligibility key is admin-only
            ValueError: If a value cannot be converted
        """
        self.apply_attributes(*self.prepare_attributes(attrs))

    def prepare_attributes(self, attrs: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
        """Checked and converted (claim answers, eligibility answers), not yet assigned."""
        if self.submitted:
            raise ClaimSubmittedError(
                message="Cannot change answers of a submitted claim",
                claim_id=self.id,
            )

        attrs = dict(attrs)
        eligibility_attrs = attrs.pop("eligibility_attributes", None)
        unknown = sorted(k for k in attrs if k not in self.ANSWER_ATTRIBUTES)
        if unknown:
            raise UnknownAttributeError(
                message=f"Unknown claim attribute(s): {', '.join(unknown)}",
                details={"attributes": unknown},
                claim_id=self.id,
            )

        values = {name: _coerce_answer(name, value) for name, value in attrs.items()}
        eligibility_values = (
            self.eligibility.prepare_attributes(eligibility_attrs) if eligibility_attrs else {}
        )
        return values, eligibility_values

    def apply_attributes(self, values: dict[str, Any], eligibility_values: dict[str, Any]) -> None:
        """Write answers returned by prepare_attributes()."""
        if eligibility_values:
            self.eligibility.apply_attributes(eligibility_values)
        for name, value in values.items():
            setattr(self, name, value)

    def reset_dependent_answers(self, reset_attrs: tuple[str, ...] = ()) -> None:
        if self.submitted:
            raise ClaimSubmittedError(
                message="Cannot reset answers of a submitted claim",
                claim_id=self.id,
            )
        self.eligibility.reset_dependent_answers(reset_attrs)

    def answers(self) -> dict[str, Any]:
        """Claimant answers as a plain dict (no lifecycle fields)."""
        return {name: getattr(self, name) for name in self.ANSWER_ATTRIBUTES}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "reference": self.reference,
            "policy": self.policy.value,
            "academic_year": str(self.academic_year),
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
            "held": self.held,
            "payment_id": self.payment_id,
            "policy_options_provided": [
                {"policy": o["policy"], "award_amount": str(o["award_amount"])}
                for o in self.policy_options_provided
            ],
            "decisions": [d.to_dict() for d in self.decisions],
        }


_ANSWER_COERCIONS = {
    "bank_or_building_society": PaymentMethod,
    "student_loan_country": StudentLoanCountry,
}


def _coerce_answer(name: str, value: Any) -> Any:
    converter = _ANSWER_COERCIONS.get(name)
    if value is None or converter is None:
        return value
    return converter(value)

