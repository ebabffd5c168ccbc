"""
Built-in risk rule catalog
"""

from typing import List

from risk_thinker.rules import (
    accidental_secret_leak,
    missing_authentication,
    missing_identity_store,
    missing_vault,
    unencrypted_communication,
    unguarded_direct_datastore_access,
    unnecessary_communication_link,
    unnecessary_data_asset,
    unnecessary_technical_asset,
    wrong_trust_boundary_content,
)
from risk_thinker.rules.base import BuiltInRiskGenerator, RiskGenerator, create_risk

# Execution order; keep alphabetical by category id.
BUILT_IN_RULE_MODULES = [
    accidental_secret_leak,
    missing_authentication,
    missing_identity_store,
    missing_vault,
    unencrypted_communication,
    unguarded_direct_datastore_access,
    unnecessary_communication_link,
    unnecessary_data_asset,
    unnecessary_technical_asset,
    wrong_trust_boundary_content,
]


def built_in_risk_generators() -> List[RiskGenerator]:
    return [BuiltInRiskGenerator(module) for module in BUILT_IN_RULE_MODULES]


__all__ = [
    "BUILT_IN_RULE_MODULES",
    "BuiltInRiskGenerator",
    "RiskGenerator",
    "built_in_risk_generators",
    "create_risk",
]
