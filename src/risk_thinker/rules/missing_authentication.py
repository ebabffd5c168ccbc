"""
Sensitive assets reachable without authentication
"""

from typing import List

from risk_thinker import graph
from risk_thinker.models import CommunicationLink, Model, Risk, RiskCategory, TechnicalAsset
from risk_thinker.rules.base import create_risk
from risk_thinker.vocabulary import (
    STRIDE,
    Authentication,
    Confidentiality,
    Criticality,
    DataBreachProbability,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    TechnicalAssetType,
)

CATEGORY = RiskCategory(
    id="missing-authentication",
    title="Missing Authentication",
    description=(
        "Technical assets (especially multi-tenant systems) should authenticate incoming "
        "requests when the asset processes or stores sensitive data."
    ),
    impact=(
        "If this risk is unmitigated, attackers might be able to access or modify sensitive "
        "data in an unauthenticated way."
    ),
    asvs="V2 - Authentication Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Authentication_Cheat_Sheet.html",
    action="Authentication of Incoming Requests",
    mitigation=(
        "Apply an authentication method to the technical asset. To protect highly sensitive "
        "data consider the use of two-factor authentication for human users."
    ),
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic=(
        "In-scope technical assets (except load-balancer, reverse-proxy, service-registry, "
        "waf, ids, and ips and in-process calls) should authenticate incoming requests when "
        "the asset processes or stores sensitive data. This is especially the case for all "
        "multi-tenant assets (there even non-sensitive ones)."
    ),
    risk_assessment=(
        "The risk rating (medium or high) depends on the sensitivity of the data sent across "
        "the communication link. Monitoring callers are exempted from this risk."
    ),
    false_positives=(
        "Technical assets which do not process requests regarding functionality or data "
        "linked to end-users (customers) can be considered as false positives after "
        "individual review."
    ),
    model_failure_possible_reason=False,
    cwe=306,
)

SUPPORTED_TAGS: List[str] = []


def _needs_authentication(asset: TechnicalAsset) -> bool:
    return (
        asset.multi_tenant
        or asset.confidentiality >= Confidentiality.CONFIDENTIAL
        or asset.integrity >= Criticality.CRITICAL
        or asset.availability >= Criticality.CRITICAL
    )


def generate_risks(model: Model) -> List[Risk]:
    risks: List[Risk] = []
    for asset_id in graph.sorted_technical_asset_ids(model):
        asset = model.technical_assets[asset_id]
        if (
            asset.out_of_scope
            or asset.technology.is_traffic_forwarding
            or asset.technology.is_unprotected_communications_tolerated
        ):
            continue
        if not _needs_authentication(asset):
            continue
        for link in graph.incoming_communication_links_sorted(model, asset.id):
            caller = model.technical_assets[link.source_id]
            if (
                caller.technology.is_unprotected_communications_tolerated
                or caller.type == TechnicalAssetType.DATASTORE
            ):
                continue
            if link.authentication != Authentication.NONE or link.protocol.is_process_local:
                continue
            impact = RiskExploitationImpact.MEDIUM
            if (
                asset.confidentiality == Confidentiality.STRICTLY_CONFIDENTIAL
                or asset.integrity == Criticality.MISSION_CRITICAL
            ):
                impact = RiskExploitationImpact.HIGH
            elif (
                asset.confidentiality <= Confidentiality.INTERNAL
                and asset.integrity == Criticality.OPERATIONAL
            ):
                impact = RiskExploitationImpact.LOW
            risks.append(_create_risk(model, asset, link, caller, impact))
    return risks


def _create_risk(
    model: Model,
    asset: TechnicalAsset,
    link: CommunicationLink,
    caller: TechnicalAsset,
    impact: RiskExploitationImpact,
) -> Risk:
    likelihood = RiskExploitationLikelihood.LIKELY
    if caller.used_as_client_by_human:
        likelihood = RiskExploitationLikelihood.VERY_LIKELY
    return create_risk(
        model,
        CATEGORY,
        f"<b>Missing Authentication</b> covering communication link <b>{link.title}</b> "
        f"from <b>{caller.title}</b> to <b>{asset.title}</b>",
        likelihood,
        impact,
        DataBreachProbability.POSSIBLE,
        data_breach_technical_asset_ids=[asset.id],
        technical_asset_id=asset.id,
        communication_link_id=link.id,
    )
