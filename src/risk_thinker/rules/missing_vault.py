"""
Models without a vault for config secrets
"""

from typing import List, Optional

from risk_thinker import graph
from risk_thinker.models import Model, Risk, RiskCategory, TechnicalAsset
from risk_thinker.rules.base import create_risk
from risk_thinker.vocabulary import (
    STRIDE,
    Confidentiality,
    Criticality,
    DataBreachProbability,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    TechnicalAssetTechnology,
)

CATEGORY = RiskCategory(
    id="missing-vault",
    title="Missing Vault (Secret Storage)",
    description=(
        "In order to avoid the risk of secret leakage via config files (when attacked through "
        "vulnerabilities being able to read files like Path-Traversal and others), it is best "
        "practice to use a separate hardened process with proper authentication, authorization, "
        "and audit logging to access config secrets (like credentials, private keys, client "
        "certificates, etc.). This component is usually some kind of Vault."
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to easier steal config secrets "
        "(like credentials, private keys, client certificates, etc.) once a vulnerability to "
        "access files is present and exploited."
    ),
    asvs="V6 - Stored Cryptography Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Cryptographic_Storage_Cheat_Sheet.html",
    action="Vault (Secret Storage)",
    mitigation=(
        "Consider using a Vault (Secret Storage) to securely store and access config secrets "
        "(like credentials, private keys, client certificates, etc.)."
    ),
    check="Is a Vault (Secret Storage) in place?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.INFORMATION_DISCLOSURE,
    detection_logic="Models without a Vault (Secret Storage).",
    risk_assessment=(
        "The risk rating depends on the sensitivity of the technical asset itself and of the "
        "data assets processed and stored."
    ),
    false_positives=(
        "Models where no technical assets have any kind of sensitive config data to protect "
        "can be considered as false positives after individual review."
    ),
    model_failure_possible_reason=True,
    cwe=522,
)

SUPPORTED_TAGS: List[str] = []


def _is_sensitive(confidentiality: Confidentiality, integrity: Criticality, availability: Criticality) -> bool:
    return (
        confidentiality >= Confidentiality.CONFIDENTIAL
        or integrity >= Criticality.CRITICAL
        or availability >= Criticality.CRITICAL
    )


def generate_risks(model: Model) -> List[Risk]:
    has_vault = False
    most_relevant: Optional[TechnicalAsset] = None
    impact = RiskExploitationImpact.LOW
    # sorted ids keep the example asset stable between runs
    for asset_id in graph.sorted_technical_asset_ids(model):
        asset = model.technical_assets[asset_id]
        if asset.technology == TechnicalAssetTechnology.VAULT:
            has_vault = True
        if _is_sensitive(
            graph.highest_confidentiality(model, asset),
            graph.highest_integrity(model, asset),
            graph.highest_availability(model, asset),
        ) or _is_sensitive(asset.confidentiality, asset.integrity, asset.availability):
            impact = RiskExploitationImpact.MEDIUM
        if most_relevant is None or graph.highest_sensitivity_score(
            asset
        ) > graph.highest_sensitivity_score(most_relevant):
            most_relevant = asset

    if has_vault:
        return []
    return [_create_risk(model, most_relevant, impact)]


def _create_risk(
    model: Model, asset: Optional[TechnicalAsset], impact: RiskExploitationImpact
) -> Risk:
    title = "<b>Missing Vault (Secret Storage)</b> in the threat model"
    if asset is not None:
        title += f" (referencing asset <b>{asset.title}</b> as an example)"
    return create_risk(
        model,
        CATEGORY,
        title,
        RiskExploitationLikelihood.UNLIKELY,
        impact,
        DataBreachProbability.IMPROBABLE,
        technical_asset_id=asset.id if asset else None,
    )
