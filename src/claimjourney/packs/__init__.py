"""
ClaimJourney Reference Packs

YAML/JSON reference data (award tables, policy configuration) validated with
pydantic and converted to domain models.

Usage:
    from claimjourney.packs import load_award_table, default_award_table

    table = default_award_table()
"""
from .loader import (
    DEFAULT_AWARD_TABLE_PATH,
    DEFAULT_POLICY_CONFIGURATION_PATH,
    LoadedPolicyConfigurations,
    default_award_table,
    default_policy_configurations,
    load_award_table,
    load_policy_configurations,
)
from .schema import (
    SCHEMA_VERSION,
    AwardAmountSchema,
    AwardTableSchema,
    PolicyConfigurationPackSchema,
    PolicyConfigurationSchema,
    check_schema_version,
)

__all__ = [
    # Loader
    "DEFAULT_AWARD_TABLE_PATH",
    "DEFAULT_POLICY_CONFIGURATION_PATH",
    "LoadedPolicyConfigurations",
    "default_award_table",
    "default_policy_configurations",
    "load_award_table",
    "load_policy_configurations",
    # Schema
    "SCHEMA_VERSION",
    "AwardAmountSchema",
    "AwardTableSchema",
    "PolicyConfigurationPackSchema",
    "PolicyConfigurationSchema",
    "check_schema_version",
]
