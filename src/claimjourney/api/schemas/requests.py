"""Request schemas for the API."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field


class SchoolInput(BaseModel):
    """A school and its eligibility flags, as known to the caller."""
    id: str = Field(..., description="School identifier, e.g. URN")
    name: str = Field(..., description="School name")
    eligible_for_early_career_payments: bool = False
    eligible_for_early_career_payments_as_uplift: bool = False
    levelling_up_premium_payments_award_amount: Optional[Decimal] = Field(
        default=None, description="LUP award in pounds; absent if the school is not listed"
    )
    eligible_for_student_loans: bool = False


class AnswersRequest(BaseModel):
    """Snapshot of a claimant's answers."""
    policies: list[str] = Field(
        default=[],
        description="Policies in the journey; defaults to every policy of the journey",
    )
    claim_academic_year: Optional[str] = Field(
        default=None,
        description="Claim year, e.g. '2022/2023'; defaults to the configured year",
    )
    selected_policy: Optional[str] = Field(default=None, description="Policy chosen by the claimant")
    eligibility: dict[str, Any] = Field(default={}, description="Eligibility answers")
    current_school: Optional[SchoolInput] = None
    claim_school: Optional[SchoolInput] = None
    claim: dict[str, Any] = Field(default={}, description="Personal, payment and loan answers")
    current_slug: Optional[str] = Field(default=None, description="Page to navigate from")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "policies": ["early_career_payments", "levelling_up_premium_payments"],
                    "claim_academic_year": "2021/2022",
                    "current_school": {
                        "id": "118575",
                        "name": "Penistone Grammar School",
                        "eligible_for_early_career_payments": True,
                    },
                    "eligibility": {
                        "nqt_in_academic_year_after_itt": True,
                        "employed_as_supply_teacher": False,
                        "subject_to_formal_performance_action": False,
                        "subject_to_disciplinary_action": False,
                        "qualification": "postgraduate_itt",
                        "eligible_itt_subject": "mathematics",
                        "itt_academic_year": "2018/2019",
                        "teaching_subject_now": True,
                    },
                    "claim": {"has_student_loan": False, "has_masters_doctoral_loan": False},
                }
            ]
        }
    }
