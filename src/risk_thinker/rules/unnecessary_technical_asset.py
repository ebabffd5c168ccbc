"""
Technical assets that hold no data or have no connections
"""

from typing import List

from risk_thinker import graph
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
    id="unnecessary-technical-asset",
    title="Unnecessary Technical Asset",
    description=(
        "When a technical asset does not process or store any data assets, this is an "
        "indicator for an unnecessary technical asset (or for an incomplete model). This is "
        "also the case if the asset has no communication links (either outgoing or incoming)."
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to target unnecessary technical "
        "assets."
    ),
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Attack Surface Reduction",
    mitigation="Try to avoid using technical assets that do not process or store anything.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic=(
        "Technical assets not processing or storing any data assets or having no "
        "communication links at all."
    ),
    risk_assessment=RiskSeverity.LOW.value,
    false_positives="Usually no false positives as this looks like an incomplete model.",
    model_failure_possible_reason=True,
    cwe=1008,
)

SUPPORTED_TAGS: List[str] = []


def generate_risks(model: Model) -> List[Risk]:
    risks: List[Risk] = []
    for asset_id in graph.sorted_technical_asset_ids(model):
        asset = model.technical_assets[asset_id]
        holds_no_data = not asset.data_assets_processed and not asset.data_assets_stored
        unconnected = not asset.communication_links and not graph.incoming_communication_links(
            model, asset.id
        )
        if holds_no_data or unconnected:
            risks.append(
                create_risk(
                    model,
                    CATEGORY,
                    f"<b>Unnecessary Technical Asset</b> named <b>{asset.title}</b>",
                    RiskExploitationLikelihood.UNLIKELY,
                    RiskExploitationImpact.LOW,
                    DataBreachProbability.IMPROBABLE,
                    data_breach_technical_asset_ids=[asset.id],
                    technical_asset_id=asset.id,
                )
            )
    return risks
