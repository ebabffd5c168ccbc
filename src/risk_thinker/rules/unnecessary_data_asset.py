"""
Data assets that nothing processes, stores or transfers
"""

from typing import List, Set

from risk_thinker.models import Model, Risk, RiskCategory
from risk_thinker.rules.base import create_risk
from risk_thinker.vocabulary import (
    STRIDE,
    DataBreachProbability,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    RiskSeverity,
)

CATEGORY = RiskCategory(
    id="unnecessary-data-asset",
    title="Unnecessary Data Asset",
    description=(
        "When a data asset is not processed or stored by any technical assets and also not "
        "transferred by any communication links, this is an indicator for an unnecessary data "
        "asset (or for an incomplete model)."
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to access unnecessary data "
        "assets using other vulnerabilities."
    ),
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Attack Surface Reduction",
    mitigation="Try to avoid having data assets that are not required/used.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic=(
        "Modelled data assets not processed or stored by any technical assets and also not "
        "transferred by any communication links."
    ),
    risk_assessment=RiskSeverity.LOW.value,
    false_positives="Usually no false positives as this looks like an incomplete model.",
    model_failure_possible_reason=True,
    cwe=1008,
)

SUPPORTED_TAGS: List[str] = []


def unused_data_asset_ids(model: Model) -> List[str]:
    unused: Set[str] = set(model.data_assets)
    for asset in model.technical_assets.values():
        unused.difference_update(asset.data_assets_processed)
        unused.difference_update(asset.data_assets_stored)
        for link in asset.communication_links:
            unused.difference_update(link.data_assets_sent)
            unused.difference_update(link.data_assets_received)
    return sorted(unused)


def generate_risks(model: Model) -> List[Risk]:
    risks: List[Risk] = []
    for data_asset_id in unused_data_asset_ids(model):
        data_asset = model.data_assets[data_asset_id]
        risks.append(
            create_risk(
                model,
                CATEGORY,
                f"<b>Unnecessary Data Asset</b> named <b>{data_asset.title}</b>",
                RiskExploitationLikelihood.UNLIKELY,
                RiskExploitationImpact.LOW,
                DataBreachProbability.IMPROBABLE,
                data_asset_id=data_asset.id,
            )
        )
    return risks
