"""
ClaimJourney Reference Pack Schemas

Pydantic models for validating the YAML/JSON reference packs the engine is
configured from:
- award table packs (award amounts per subject / cohort / claim year)
- policy configuration packs (current academic year per policy)

Schema versioning:
- schema_version field tracks breaking changes
- Loaders check version compatibility
"""
from __future__ import annotations

import re
from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0.0"


# =============================================================================
# Enums as Literals (for YAML validation)
# =============================================================================

IttSubjectValue = Literal[
    "chemistry", "computing", "foreign_languages", "mathematics", "physics",
]

PolicyValue = Literal[
    "early_career_payments", "levelling_up_premium_payments", "student_loans",
]

_ACADEMIC_YEAR = re.compile(r"^\d{4}[/_]\d{4}$")


def _check_academic_year(value: str) -> str:
    if not _ACADEMIC_YEAR.match(value):
        raise ValueError(f"Academic year must look like '2021/2022', got '{value}'")
    start, end = int(value[:4]), int(value[5:])
    if end != start + 1:
        raise ValueError(f"Academic year must span consecutive years, got '{value}'")
    return value


# =============================================================================
# Award Table Schemas
# =============================================================================

class AwardAmountSchema(BaseModel):
    """Schema for one award table row."""
    itt_subject: IttSubjectValue = Field(..., description="ITT subject")
    itt_academic_year: str = Field(..., description="ITT cohort, e.g. '2018/2019'")
    claim_academic_year: str = Field(..., description="Claim year, e.g. '2021/2022'")
    base_amount: Decimal = Field(..., ge=0, description="Award in pounds")
    uplift_amount: Decimal = Field(..., ge=0, description="Award in pounds at uplift schools")

    @field_validator("itt_academic_year", "claim_academic_year")
    @classmethod
    def validate_academic_year(cls, v: str) -> str:
        return _check_academic_year(v)

    @model_validator(mode="after")
    def validate_amounts(self) -> "AwardAmountSchema":
        if self.uplift_amount < self.base_amount:
            raise ValueError("uplift_amount cannot be lower than base_amount")
        return self


class AwardTableSchema(BaseModel):
    """Root schema for an award table pack."""
    schema_version: str = Field(SCHEMA_VERSION, description="Pack schema version")
    policy: PolicyValue = Field(..., description="Policy the awards belong to")
    version: str = Field(..., description="Table version, e.g. '2024.1'")
    awards: list[AwardAmountSchema] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_unique_keys(self) -> "AwardTableSchema":
        seen: set[tuple[str, str, str]] = set()
        for award in self.awards:
            key = (
                award.itt_subject,
                award.itt_academic_year.replace("_", "/"),
                award.claim_academic_year.replace("_", "/"),
            )
            if key in seen:
                raise ValueError(f"Duplicate award entry for {key}")
            seen.add(key)
        return self


# =============================================================================
# Policy Configuration Schemas
# =============================================================================

class PolicyConfigurationSchema(BaseModel):
    """Schema for one policy's configuration."""
    policy: PolicyValue = Field(..., description="Policy identifier")
    current_academic_year: Optional[str] = Field(
        None, description="Academic year claims are currently made in"
    )
    open_for_submissions: bool = Field(True, description="Whether claims are accepted")

    @field_validator("current_academic_year")
    @classmethod
    def validate_academic_year(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "None":
            return v
        return _check_academic_year(v)


class PolicyConfigurationPackSchema(BaseModel):
    """Root schema for a policy configuration pack."""
    schema_version: str = Field(SCHEMA_VERSION, description="Pack schema version")
    policies: list[PolicyConfigurationSchema] = Field(..., min_length=1)
    final_policy_year: Optional[str] = Field(
        None, description="Last claim year reminders can be set for"
    )
    claim_timeout_minutes: int = Field(30, gt=0)

    @field_validator("final_policy_year")
    @classmethod
    def validate_final_year(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _check_academic_year(v)

    @model_validator(mode="after")
    def validate_unique_policies(self) -> "PolicyConfigurationPackSchema":
        names = [p.policy for p in self.policies]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate policy configuration: {', '.join(duplicates)}")
        return self


# =============================================================================
# Helpers
# =============================================================================

def check_schema_version(data: dict[str, Any]) -> bool:
    """Check whether a pack's major schema version is supported."""
    pack_version = str(data.get("schema_version", SCHEMA_VERSION))
    return pack_version.split(".")[0] == SCHEMA_VERSION.split(".")[0]


def validate_award_table(data: dict[str, Any]) -> AwardTableSchema:
    """Validate raw award table data."""
    return AwardTableSchema.model_validate(data)


def validate_policy_configuration_pack(data: dict[str, Any]) -> PolicyConfigurationPackSchema:
    """Validate raw policy configuration data."""
    return PolicyConfigurationPackSchema.model_validate(data)
