"""
Communication links that transfer no data assets
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
    id="unnecessary-communication-link",
    title="Unnecessary Communication Link",
    description=(
        "When a technical communication link does not send or receive any data assets, this "
        "is an indicator for an unnecessary communication link (or for an incomplete model)."
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to target unnecessary "
        "communication links."
    ),
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Attack Surface Reduction",
    mitigation="Try to avoid using technical communication links that do not send or receive anything.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic=(
        "In-scope technical assets' technical communication links not sending or receiving "
        "any data assets."
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
        for link in graph.communication_links_sorted(asset):
            if link.data_assets_sent or link.data_assets_received:
                continue
            target = model.technical_assets[link.target_id]
            if asset.out_of_scope and target.out_of_scope:
                continue
            risks.append(
                create_risk(
                    model,
                    CATEGORY,
                    f"<b>Unnecessary Communication Link</b> titled <b>{link.title}</b> at "
                    f"technical asset <b>{asset.title}</b>",
                    RiskExploitationLikelihood.UNLIKELY,
                    RiskExploitationImpact.LOW,
                    DataBreachProbability.IMPROBABLE,
                    data_breach_technical_asset_ids=[asset.id],
                    technical_asset_id=asset.id,
                    communication_link_id=link.id,
                )
            )
    return risks
