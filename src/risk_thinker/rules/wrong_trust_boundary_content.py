"""
Non-container assets placed inside container-only trust boundaries
"""

from typing import List

from risk_thinker.models import Model, Risk, RiskCategory
from risk_thinker.rules.base import create_risk
from risk_thinker.vocabulary import (
    STRIDE,
    DataBreachProbability,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    RiskSeverity,
    TechnicalAssetMachine,
    TrustBoundaryType,
)

CATEGORY = RiskCategory(
    id="wrong-trust-boundary-content",
    title="Wrong Trust Boundary Content",
    description=(
        f"When a trust boundary of type {TrustBoundaryType.NETWORK_POLICY_NAMESPACE_ISOLATION.value} "
        "contains non-container assets it is likely to be a model failure."
    ),
    impact="If this potential model error is not fixed, some risks might not be visible.",
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Threat_Modeling_Cheat_Sheet.html",
    action="Model Consistency",
    mitigation="Try to model the correct types of trust boundaries and data assets.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic=(
        "Trust boundaries which should only contain containers, but have different assets inside."
    ),
    risk_assessment=RiskSeverity.LOW.value,
    false_positives="Usually no false positives as this looks like an incomplete model.",
    model_failure_possible_reason=True,
    cwe=1008,
)

SUPPORTED_TAGS: List[str] = []

_CONTAINER_MACHINES = (TechnicalAssetMachine.CONTAINER, TechnicalAssetMachine.SERVERLESS)


def generate_risks(model: Model) -> List[Risk]:
    risks: List[Risk] = []
    for boundary_id in sorted(model.trust_boundaries):
        boundary = model.trust_boundaries[boundary_id]
        if boundary.type != TrustBoundaryType.NETWORK_POLICY_NAMESPACE_ISOLATION:
            continue
        for asset_id in boundary.technical_assets_inside:
            asset = model.technical_assets[asset_id]
            if asset.machine in _CONTAINER_MACHINES:
                continue
            risks.append(
                create_risk(
                    model,
                    CATEGORY,
                    "<b>Wrong Trust Boundary Content</b> (non-container asset inside "
                    f"container trust boundary) at <b>{asset.title}</b>",
                    RiskExploitationLikelihood.UNLIKELY,
                    RiskExploitationImpact.LOW,
                    DataBreachProbability.IMPROBABLE,
                    data_breach_technical_asset_ids=[asset.id],
                    technical_asset_id=asset.id,
                )
            )
    return risks
