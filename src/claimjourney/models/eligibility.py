"""
ClaimJourney Eligibility Records

One record shape per policy, holding the answers that drive eligibility.
The set of shapes is closed (see Eligibility below); each policy has exactly
one, created with new_eligibility().

Records only hold answers. Classification (status, award amount,
ineligibility reason) is done by the per-policy evaluators in
claimjourney.engine.evaluators, so a record never caches a derived value.

Change tracking:
- every write to a public attribute after construction is recorded
- reset_dependent_answers() clears the dependents of changed attributes
- mark_clean() forgets changes (called by stores after a save)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Any, Callable, ClassVar, Iterable, Optional, Union

from ..exceptions import ProtectedAttributeError, UnknownAttributeError
from .academic_year import AcademicYear
from .enums import (
    EmploymentStatus,
    IttSubject,
    Policy,
    QtsAwardYear,
    Qualification,
)
from .school import School

logger = logging.getLogger(__name__)


def _to_decimal(value: Any) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _to_amount(value: Any) -> Decimal:
    amount = _to_decimal(value)
    if amount < 0:
        raise ValueError(f"Amount cannot be negative: {amount}")
    return amount


# =============================================================================
# Shared Behaviour
# =============================================================================

@dataclass
class EligibilityBase:
    """
    Behaviour shared by every eligibility shape.

    Subclasses declare:
        POLICY: Policy the record belongs to
        EDITABLE_ATTRIBUTES: Answers the claimant can change
        AMENDABLE_ATTRIBUTES: Values an admin can amend after submission
        ATTRIBUTE_DEPENDENCIES: attribute -> dependents cleared when it changes
        IGNORED_ATTRIBUTES: Keys from sibling policies' forms that are skipped
        COERCIONS: attribute -> converter for raw form values
    """
    POLICY: ClassVar[Policy]
    EDITABLE_ATTRIBUTES: ClassVar[tuple[str, ...]] = ()
    AMENDABLE_ATTRIBUTES: ClassVar[tuple[str, ...]] = ()
    ATTRIBUTE_DEPENDENCIES: ClassVar[dict[str, tuple[str, ...]]] = {}
    IGNORED_ATTRIBUTES: ClassVar[frozenset[str]] = frozenset()
    COERCIONS: ClassVar[dict[str, Callable[[Any], Any]]] = {}

    def __post_init__(self) -> None:
        object.__setattr__(self, "_changed", set())

    def __setattr__(self, name: str, value: Any) -> None:
        tracking = "_changed" in self.__dict__ and not name.startswith("_")
        if tracking and getattr(self, name, None) != value:
            self._changed.add(name)
        super().__setattr__(name, value)

    @property
    def policy(self) -> Policy:
        return self.POLICY

    @property
    def changed_attributes(self) -> frozenset[str]:
        """Attributes written since construction or the last mark_clean()."""
        return frozenset(self._changed)

    def mark_clean(self) -> None:
        self._changed.clear()

    @classmethod
    def attribute_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    def assign_attributes(self, attrs: dict[str, Any]) -> None:
        """
        Assign several claimant answers at once.

        Every value is checked and converted before any is written, so a
        rejected answer leaves the record unchanged.

        Raises:
            UnknownAttributeError: If a key is neither known nor ignorable
            ProtectedAttributeError: If a key is only amendable by an admin
            ValueError: If a value cannot be converted
        """
        self.apply_attributes(self.prepare_attributes(attrs))

    def prepare_attributes(self, attrs: dict[str, Any]) -> dict[str, Any]:
        """
        Check and convert claimant answers without assigning them.

        Keys from sibling policies' forms are skipped only when every unknown
        key is on IGNORED_ATTRIBUTES; any other unknown key is an error.
        """
        protected = sorted(k for k in attrs if k in self.protected_attributes())
        if protected:
            raise ProtectedAttributeError(
                message=f"{', '.join(protected)} can only be amended by an admin",
                details={"policy": self.POLICY.value, "attributes": protected},
            )

        known = self.attribute_names()
        unknown = [k for k in attrs if k not in known]
        if unknown:
            offending = [k for k in unknown if k not in self.IGNORED_ATTRIBUTES]
            if offending:
                raise UnknownAttributeError(
                    message=f"Unknown {self.POLICY.value} eligibility attribute(s): {', '.join(sorted(offending))}",
                    details={"policy": self.POLICY.value, "attributes": sorted(offending)},
                )
            logger.debug("Ignoring %s attributes %s", self.POLICY.value, sorted(unknown))

        return {name: self._coerce(name, value) for name, value in attrs.items() if name in known}

    def apply_attributes(self, values: dict[str, Any]) -> None:
        """Write answers returned by prepare_attributes()."""
        for name, value in values.items():
            setattr(self, name, value)
        self._after_assign()

    @classmethod
    def protected_attributes(cls) -> frozenset[str]:
        """Amendable values the claimant never answers."""
        return frozenset(cls.AMENDABLE_ATTRIBUTES) - frozenset(cls.EDITABLE_ATTRIBUTES)

    def _coerce(self, name: str, value: Any) -> Any:
        if value is None:
            return None
        converter = self.COERCIONS.get(name)
        if converter is None:
            return value
        return converter(value)

    def _after_assign(self) -> None:
        """Hook for answers that imply other answers."""

    def reset_dependent_answers(self, reset_attrs: Iterable[str] = ()) -> None:
        """
        Clear answers invalidated by a change.

        Every transitive dependent of an attribute that changed, or that is
        named in reset_attrs, is set to None. Running it again with the same
        arguments clears nothing new.
        """
        governing = set(self._changed) | set(reset_attrs)
        to_clear: set[str] = set()
        pending = list(governing)
        while pending:
            attribute_name = pending.pop()
            for dependent in self.ATTRIBUTE_DEPENDENCIES.get(attribute_name, ()):
                if dependent not in to_clear:
                    to_clear.add(dependent)
                    pending.append(dependent)

        for dependent in sorted(to_clear):
            setattr(self, dependent, None)


# =============================================================================
# Early-Career Payments
# =============================================================================

@dataclass
class EarlyCareerPaymentsEligibility(EligibilityBase):
    """
    Answers for an early-career payment claim.

    Attributes:
        nqt_in_academic_year_after_itt: False means trainee teacher
        current_school: School the claimant teaches at
        employed_as_supply_teacher: Currently a supply teacher
        has_entire_term_contract: Supply contract for a term or longer
        employed_directly: Supply teacher employed directly by the school
        subject_to_formal_performance_action: Under formal performance action
        subject_to_disciplinary_action: Under disciplinary action
        qualification: Route into teaching
        eligible_itt_subject: ITT subject
        teaching_subject_now: At least half of hours teaching the subject
        itt_academic_year: Year ITT started / was completed
        award_amount: Frozen at submission or amended by an admin
    """
    POLICY: ClassVar[Policy] = Policy.EARLY_CAREER_PAYMENTS
    EDITABLE_ATTRIBUTES: ClassVar[tuple[str, ...]] = (
        "nqt_in_academic_year_after_itt",
        "current_school",
        "employed_as_supply_teacher",
        "has_entire_term_contract",
        "employed_directly",
        "subject_to_formal_performance_action",
        "subject_to_disciplinary_action",
        "qualification",
        "eligible_itt_subject",
        "teaching_subject_now",
        "itt_academic_year",
    )
    AMENDABLE_ATTRIBUTES: ClassVar[tuple[str, ...]] = ("award_amount",)
    ATTRIBUTE_DEPENDENCIES: ClassVar[dict[str, tuple[str, ...]]] = {
        "employed_as_supply_teacher": ("has_entire_term_contract", "employed_directly"),
        "qualification": ("eligible_itt_subject", "teaching_subject_now"),
        "eligible_itt_subject": ("teaching_subject_now",),
        "itt_academic_year": ("eligible_itt_subject",),
    }
    # Levelling up premium form fields seen during the combined journey
    IGNORED_ATTRIBUTES: ClassVar[frozenset[str]] = frozenset({"eligible_degree_subject"})
    COERCIONS: ClassVar[dict[str, Callable[[Any], Any]]] = {
        "qualification": Qualification,
        "eligible_itt_subject": IttSubject,
        "itt_academic_year": AcademicYear.parse,
        "award_amount": _to_amount,
    }

    nqt_in_academic_year_after_itt: Optional[bool] = None
    current_school: Optional[School] = None
    employed_as_supply_teacher: Optional[bool] = None
    has_entire_term_contract: Optional[bool] = None
    employed_directly: Optional[bool] = None
    subject_to_formal_performance_action: Optional[bool] = None
    subject_to_disciplinary_action: Optional[bool] = None
    qualification: Optional[Qualification] = None
    eligible_itt_subject: Optional[IttSubject] = None
    teaching_subject_now: Optional[bool] = None
    itt_academic_year: Optional[AcademicYear] = None
    award_amount: Optional[Decimal] = None

    @property
    def is_trainee_teacher(self) -> bool:
        return self.nqt_in_academic_year_after_itt is False

    @property
    def itt_subject_none_of_the_above(self) -> bool:
        return self.eligible_itt_subject == IttSubject.NONE_OF_THE_ABOVE

    @property
    def without_cohort(self) -> bool:
        return self.eligible_itt_subject is None or self.itt_academic_year is None

    @property
    def poor_performance(self) -> bool:
        return bool(self.subject_to_formal_performance_action or self.subject_to_disciplinary_action)

    @property
    def no_entire_term_contract(self) -> bool:
        return self.employed_as_supply_teacher is True and self.has_entire_term_contract is False

    @property
    def not_employed_directly(self) -> bool:
        return self.employed_as_supply_teacher is True and self.employed_directly is False

    @property
    def not_teaching_now_in_eligible_itt_subject(self) -> bool:
        return self.teaching_subject_now is False

    def _after_assign(self) -> None:
        # Trainee teachers are on a postgraduate ITT course by definition
        if self.is_trainee_teacher and "nqt_in_academic_year_after_itt" in self._changed:
            self.qualification = Qualification.POSTGRADUATE_ITT


# =============================================================================
# Levelling Up Premium Payments
# =============================================================================

@dataclass
class LevellingUpPremiumPaymentsEligibility(EarlyCareerPaymentsEligibility):
    """
    Answers for a levelling up premium payment claim.

    Same questions as early-career payments plus whether the claimant holds
    a degree in an eligible subject, asked when the ITT subject is not one.
    """
    POLICY: ClassVar[Policy] = Policy.LEVELLING_UP_PREMIUM_PAYMENTS
    EDITABLE_ATTRIBUTES: ClassVar[tuple[str, ...]] = (
        EarlyCareerPaymentsEligibility.EDITABLE_ATTRIBUTES + ("eligible_degree_subject",)
    )
    ATTRIBUTE_DEPENDENCIES: ClassVar[dict[str, tuple[str, ...]]] = {
        "employed_as_supply_teacher": ("has_entire_term_contract", "employed_directly"),
        "qualification": ("eligible_itt_subject", "teaching_subject_now"),
        "eligible_itt_subject": ("eligible_degree_subject", "teaching_subject_now"),
        "itt_academic_year": ("eligible_itt_subject",),
    }
    IGNORED_ATTRIBUTES: ClassVar[frozenset[str]] = frozenset()

    eligible_degree_subject: Optional[bool] = None


# =============================================================================
# Student Loans
# =============================================================================

@dataclass
class StudentLoansEligibility(EligibilityBase):
    """
    Answers for a teachers' student loan reimbursement claim.

    Attributes:
        qts_award_year: Whether QTS was awarded before the cut-off date
        claim_school: School taught at during the claim year
        current_school: School taught at now
        employment_status: Still at the claim school, elsewhere, or not teaching
        taught_eligible_subjects: Taught an eligible subject at the claim school
        had_leadership_position: Held a leadership position
        mostly_performed_leadership_duties: Spent over half the time on leadership
        student_loan_repayment_amount: Amount repaid in the claim year
    """
    POLICY: ClassVar[Policy] = Policy.STUDENT_LOANS
    EDITABLE_ATTRIBUTES: ClassVar[tuple[str, ...]] = (
        "qts_award_year",
        "claim_school",
        "current_school",
        "employment_status",
        "taught_eligible_subjects",
        "had_leadership_position",
        "mostly_performed_leadership_duties",
        "student_loan_repayment_amount",
    )
    AMENDABLE_ATTRIBUTES: ClassVar[tuple[str, ...]] = ("student_loan_repayment_amount",)
    ATTRIBUTE_DEPENDENCIES: ClassVar[dict[str, tuple[str, ...]]] = {
        "claim_school": ("taught_eligible_subjects", "employment_status"),
        "employment_status": ("current_school",),
        "had_leadership_position": ("mostly_performed_leadership_duties",),
    }
    COERCIONS: ClassVar[dict[str, Callable[[Any], Any]]] = {
        "qts_award_year": QtsAwardYear,
        "employment_status": EmploymentStatus,
        "student_loan_repayment_amount": _to_amount,
    }

    qts_award_year: Optional[QtsAwardYear] = None
    claim_school: Optional[School] = None
    current_school: Optional[School] = None
    employment_status: Optional[EmploymentStatus] = None
    taught_eligible_subjects: Optional[bool] = None
    had_leadership_position: Optional[bool] = None
    mostly_performed_leadership_duties: Optional[bool] = None
    student_loan_repayment_amount: Optional[Decimal] = None

    def _after_assign(self) -> None:
        if self.employment_status == EmploymentStatus.CLAIM_SCHOOL:
            self.current_school = self.claim_school


# =============================================================================
# Closed Union
# =============================================================================

Eligibility = Union[
    EarlyCareerPaymentsEligibility,
    LevellingUpPremiumPaymentsEligibility,
    StudentLoansEligibility,
]

ELIGIBILITY_TYPES: dict[Policy, type] = {
    Policy.EARLY_CAREER_PAYMENTS: EarlyCareerPaymentsEligibility,
    Policy.LEVELLING_UP_PREMIUM_PAYMENTS: LevellingUpPremiumPaymentsEligibility,
    Policy.STUDENT_LOANS: StudentLoansEligibility,
}


def new_eligibility(policy: Policy) -> Eligibility:
    """Create an empty eligibility record for the policy."""
    return ELIGIBILITY_TYPES[policy]()
