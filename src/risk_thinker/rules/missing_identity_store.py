"""
Models using end user identity propagation without an identity store
"""

from typing import List, Optional

from risk_thinker import graph
from risk_thinker.models import Model, Risk, RiskCategory, TechnicalAsset
from risk_thinker.rules.base import create_risk
from risk_thinker.vocabulary import (
    STRIDE,
    Authorization,
    Confidentiality,
    Criticality,
    DataBreachProbability,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
)

CATEGORY = RiskCategory(
    id="missing-identity-store",
    title="Missing Identity Store",
    description=(
        "The modeled architecture does not contain an identity store, which might be the risk "
        "of a model missing critical assets (and thus not seeing their risks)."
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to exploit risks unseen in this "
        "threat model in the identity provider/store that is currently missing in the model."
    ),
    asvs="V2 - Authentication Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Authentication_Cheat_Sheet.html",
    action="Identity Store",
    mitigation=(
        "Include an identity store in the model if the application has a login."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.SPOOFING,
    detection_logic=(
        "Models with authenticated data-flows authorized via end user identity missing an "
        "in-scope identity store."
    ),
    risk_assessment=(
        "The risk rating depends on the sensitivity of the end user-identity authorized "
        "technical assets and their data assets processed and stored."
    ),
    false_positives=(
        "Models only offering data/services without any real authentication need can be "
        "considered as false positives after individual review."
    ),
    model_failure_possible_reason=True,
    cwe=287,
)

SUPPORTED_TAGS: List[str] = []


def has_in_scope_identity_store(model: Model) -> bool:
    return any(
        not asset.out_of_scope and asset.technology.is_identity_store
        for asset in model.technical_assets.values()
    )


def generate_risks(model: Model) -> List[Risk]:
    if has_in_scope_identity_store(model):
        return []

    risk_identified = False
    most_relevant: Optional[TechnicalAsset] = None
    impact = RiskExploitationImpact.LOW
    for asset_id in graph.sorted_technical_asset_ids(model):
        asset = model.technical_assets[asset_id]
        for link in graph.communication_links_sorted(asset):
            if link.authorization != Authorization.ENDUSER_IDENTITY_PROPAGATION:
                continue
            risk_identified = True
            target = model.technical_assets[link.target_id]
            if impact == RiskExploitationImpact.LOW:
                most_relevant = target
                if (
                    graph.highest_confidentiality(model, target) >= Confidentiality.CONFIDENTIAL
                    or graph.highest_integrity(model, target) >= Criticality.CRITICAL
                    or graph.highest_availability(model, target) >= Criticality.CRITICAL
                ):
                    impact = RiskExploitationImpact.MEDIUM
            if (
                target.confidentiality >= Confidentiality.CONFIDENTIAL
                or target.integrity >= Criticality.CRITICAL
                or target.availability >= Criticality.CRITICAL
            ):
                impact = RiskExploitationImpact.MEDIUM
            if graph.highest_sensitivity_score(asset) > graph.highest_sensitivity_score(
                most_relevant
            ):
                most_relevant = asset

    if not risk_identified:
        return []
    return [
        create_risk(
            model,
            CATEGORY,
            "<b>Missing Identity Store</b> in the threat model (referencing asset "
            f"<b>{most_relevant.title}</b> as an example)",
            RiskExploitationLikelihood.UNLIKELY,
            impact,
            DataBreachProbability.IMPROBABLE,
            technical_asset_id=most_relevant.id,
        )
    ]
