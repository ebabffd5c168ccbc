"""
Secrets leaking through sourcecode repositories and artifact registries
"""

from typing import List

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
    id="accidental-secret-leak",
    title="Accidental Secret Leak",
    description=(
        "Sourcecode repositories (including their histories) as well as artifact registries can "
        "accidentally contain secrets like checked-in or packaged-in passwords, API tokens, "
        "certificates, crypto keys, etc."
    ),
    impact=(
        "If this risk is unmitigated, attackers which have access to affected sourcecode "
        "repositories or artifact registries might find secrets accidentally checked-in."
    ),
    asvs="V14 - Configuration Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Build Pipeline Hardening",
    mitigation=(
        "Establish measures preventing accidental check-in or package-in of secrets into "
        "sourcecode repositories and artifact registries. Start with good .gitignore and "
        ".dockerignore files and add pre-commit secret scanners such as git-secrets or "
        "Talisman. Regularly scan repositories for leaked secrets with tools like gitleaks."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.OPERATIONS,
    stride=STRIDE.INFORMATION_DISCLOSURE,
    detection_logic="In-scope sourcecode repositories and artifact registries.",
    risk_assessment=(
        "The risk rating depends on the sensitivity of the technical asset itself and of the "
        "data assets processed and stored."
    ),
    false_positives="Usually no false positives.",
    model_failure_possible_reason=False,
    cwe=200,
)

SUPPORTED_TAGS = ["git", "nexus"]

_REPOSITORY_TECHNOLOGIES = (
    TechnicalAssetTechnology.SOURCECODE_REPOSITORY,
    TechnicalAssetTechnology.ARTIFACT_REGISTRY,
)


def generate_risks(model: Model) -> List[Risk]:
    risks: List[Risk] = []
    for asset_id in graph.sorted_technical_asset_ids(model):
        asset = model.technical_assets[asset_id]
        if asset.out_of_scope or asset.technology not in _REPOSITORY_TECHNOLOGIES:
            continue
        if graph.is_tagged_with_any(asset, "git"):
            risks.append(_create_risk(model, asset, "Git", "Git Leak Prevention"))
        else:
            risks.append(_create_risk(model, asset, "", ""))
    return risks


def _create_risk(model: Model, asset: TechnicalAsset, prefix: str, details: str) -> Risk:
    if prefix:
        prefix = f" ({prefix})"
    title = f"<b>Accidental Secret Leak{prefix}</b> risk at <b>{asset.title}</b>"
    if details:
        title += f": <u>{details}</u>"

    confidentiality = graph.highest_confidentiality(model, asset)
    integrity = graph.highest_integrity(model, asset)
    availability = graph.highest_availability(model, asset)
    impact = RiskExploitationImpact.LOW
    if (
        confidentiality >= Confidentiality.CONFIDENTIAL
        or integrity >= Criticality.CRITICAL
        or availability >= Criticality.CRITICAL
    ):
        impact = RiskExploitationImpact.MEDIUM
    if (
        confidentiality == Confidentiality.STRICTLY_CONFIDENTIAL
        or integrity == Criticality.MISSION_CRITICAL
        or availability == Criticality.MISSION_CRITICAL
    ):
        impact = RiskExploitationImpact.HIGH

    return create_risk(
        model,
        CATEGORY,
        title,
        RiskExploitationLikelihood.UNLIKELY,
        impact,
        DataBreachProbability.PROBABLE,
        data_breach_technical_asset_ids=[asset.id],
        technical_asset_id=asset.id,
    )
