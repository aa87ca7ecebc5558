"""
ClaimJourney Reference Pack Loader

Loads and validates award tables and policy configurations from YAML or JSON
files.

Converts Pydantic schema models to ClaimJourney domain models.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from ..configuration import (
    DEFAULT_CLAIM_TIMEOUT_MINUTES,
    PolicyConfiguration,
    StaticPolicyConfigurationProvider,
)
from ..exceptions import (
    AwardTableLoadError,
    AwardTableValidationError,
    PolicyConfigurationError,
)
from ..models import AcademicYear, AwardAmount, AwardKey, AwardTable, IttSubject, Policy
from .schema import (
    SCHEMA_VERSION,
    AwardAmountSchema,
    AwardTableSchema,
    PolicyConfigurationPackSchema,
    PolicyConfigurationSchema,
    check_schema_version,
    validate_award_table,
    validate_policy_configuration_pack,
)

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
DEFAULT_AWARD_TABLE_PATH = DATA_DIR / "early_career_payments_awards.yaml"
DEFAULT_POLICY_CONFIGURATION_PATH = DATA_DIR / "policy_configurations.yaml"


@dataclass(frozen=True)
class LoadedPolicyConfigurations:
    """
    Result of loading a policy configuration pack.

    Attributes:
        provider: Provider answering current academic year per policy
        final_policy_year: Last claim year reminders are offered for
        claim_timeout_minutes: Idle minutes before a claim session is cleared
    """
    provider: StaticPolicyConfigurationProvider
    final_policy_year: Optional[AcademicYear] = None
    claim_timeout_minutes: int = DEFAULT_CLAIM_TIMEOUT_MINUTES


# =============================================================================
# Schema to Model Converters
# =============================================================================

def _convert_award_amount(schema: AwardAmountSchema) -> AwardAmount:
    """Convert AwardAmountSchema to AwardAmount model."""
    return AwardAmount(
        key=AwardKey(
            itt_subject=IttSubject(schema.itt_subject),
            itt_academic_year=AcademicYear.parse(schema.itt_academic_year),
            claim_academic_year=AcademicYear.parse(schema.claim_academic_year),
        ),
        base_amount=Decimal(schema.base_amount),
        uplift_amount=Decimal(schema.uplift_amount),
    )


def _convert_award_table(schema: AwardTableSchema) -> AwardTable:
    """Convert AwardTableSchema to AwardTable model, keeping row order."""
    return AwardTable.from_entries(
        (_convert_award_amount(a) for a in schema.awards),
        version=schema.version,
    )


def _convert_policy_configuration(schema: PolicyConfigurationSchema) -> PolicyConfiguration:
    """Convert PolicyConfigurationSchema to PolicyConfiguration model."""
    return PolicyConfiguration(
        policy=Policy(schema.policy),
        current_academic_year=AcademicYear.parse(schema.current_academic_year),
        open_for_submissions=schema.open_for_submissions,
    )


def _convert_policy_configuration_pack(
    schema: PolicyConfigurationPackSchema,
) -> LoadedPolicyConfigurations:
    return LoadedPolicyConfigurations(
        provider=StaticPolicyConfigurationProvider(
            _convert_policy_configuration(p) for p in schema.policies
        ),
        final_policy_year=AcademicYear.parse(schema.final_policy_year),
        claim_timeout_minutes=schema.claim_timeout_minutes,
    )


# =============================================================================
# File Loading
# =============================================================================

def _load_file(path: Path) -> dict[str, Any]:
    """Load data from YAML or JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(f)
        elif path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            # Try YAML first, then JSON
            content = f.read()
            try:
                data = yaml.safe_load(content)
            except yaml.YAMLError:
                data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top level, got {type(data).__name__}")
    return data


def load_award_table(path: Union[str, Path], strict_version: bool = True) -> AwardTable:
    """
    Load an award table pack from a file.

    Args:
        path: Path to YAML or JSON file
        strict_version: If True, reject packs with incompatible schema versions

    Returns:
        AwardTable with rows in authored order

    Raises:
        AwardTableLoadError: If the file cannot be read
        AwardTableValidationError: If validation or the version check fails
    """
    path = Path(path)

    try:
        data = _load_file(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise AwardTableLoadError(
            message=f"Failed to load award table: {e}",
            details={"path": str(path), "error": str(e)},
        ) from e

    if strict_version and not check_schema_version(data):
        pack_version = data.get("schema_version", "unknown")
        raise AwardTableValidationError(
            message=f"Schema version mismatch: pack has {pack_version}, expected {SCHEMA_VERSION}",
            details={
                "path": str(path),
                "pack_version": pack_version,
                "expected_version": SCHEMA_VERSION,
            },
        )

    try:
        schema = validate_award_table(data)
    except ValidationError as e:
        raise AwardTableValidationError(
            message=f"Award table validation failed: {e.error_count()} errors",
            details={"errors": e.errors(include_context=False), "path": str(path)},
        ) from e

    table = _convert_award_table(schema)
    logger.info(
        "Loaded award table %s from %s (%d entries, max uplift %s)",
        table.version, path, len(table), table.max_uplift_amount,
    )
    return table


def load_policy_configurations(
    path: Union[str, Path],
    strict_version: bool = True,
) -> LoadedPolicyConfigurations:
    """
    Load a policy configuration pack from a file.

    Raises:
        PolicyConfigurationError: If the file cannot be read or is invalid
    """
    path = Path(path)

    try:
        data = _load_file(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise PolicyConfigurationError(
            message=f"Failed to load policy configuration: {e}",
            details={"path": str(path), "error": str(e)},
        ) from e

    if strict_version and not check_schema_version(data):
        pack_version = data.get("schema_version", "unknown")
        raise PolicyConfigurationError(
            message=f"Schema version mismatch: pack has {pack_version}, expected {SCHEMA_VERSION}",
            details={"path": str(path), "pack_version": pack_version},
        )

    try:
        schema = validate_policy_configuration_pack(data)
    except ValidationError as e:
        raise PolicyConfigurationError(
            message=f"Policy configuration validation failed: {e.error_count()} errors",
            details={"errors": e.errors(include_context=False), "path": str(path)},
        ) from e

    loaded = _convert_policy_configuration_pack(schema)
    logger.info("Loaded policy configuration for %s from %s",
                ", ".join(p.value for p in loaded.provider.policies), path)
    return loaded


def default_award_table() -> AwardTable:
    """The early-career payment award table shipped with the package."""
    return load_award_table(DEFAULT_AWARD_TABLE_PATH)


def default_policy_configurations() -> LoadedPolicyConfigurations:
    """The policy configuration shipped with the package."""
    return load_policy_configurations(DEFAULT_POLICY_CONFIGURATION_PATH)
