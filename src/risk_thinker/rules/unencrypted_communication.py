"""
Sensitive data or credentials sent over unencrypted protocols
"""

from typing import List, Optional

from risk_thinker import graph
from risk_thinker.models import CommunicationLink, DataAsset, Model, Risk, RiskCategory
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
)

CATEGORY = RiskCategory(
    id="unencrypted-communication",
    title="Unencrypted Communication",
    description=(
        "Due to the confidentiality and/or integrity rating of the data assets transferred over "
        "the communication link this connection must be encrypted."
    ),
    impact=(
        "If this risk is unmitigated, network attackers might be able to to eavesdrop on "
        "unencrypted sensitive data sent between components."
    ),
    asvs="V9 - Communication Verification Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Transport_Layer_Protection_Cheat_Sheet.html",
    action="Encryption of Communication Links",
    mitigation="Apply transport layer encryption to the communication link.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.OPERATIONS,
    stride=STRIDE.INFORMATION_DISCLOSURE,
    detection_logic=(
        "Unencrypted technical communication links of in-scope technical assets (excluding "
        "monitoring traffic as well as local-file-access and in-process-library-call) "
        "transferring sensitive data."
    ),
    risk_assessment=(
        "Depending on the confidentiality rating of the transferred data-assets either medium "
        "or high risk."
    ),
    false_positives=(
        "When all sensitive data sent over the communication link is already fully encrypted "
        "on document or data level. Also intra-container/pod communication can be considered "
        "false positive when container orchestration platform handles encryption."
    ),
    model_failure_possible_reason=False,
    cwe=319,
)

SUPPORTED_TAGS: List[str] = []


def is_high_sensitivity(data_asset: DataAsset) -> bool:
    return (
        data_asset.confidentiality == Confidentiality.STRICTLY_CONFIDENTIAL
        or data_asset.integrity == Criticality.MISSION_CRITICAL
    )


def is_medium_sensitivity(data_asset: DataAsset) -> bool:
    return (
        data_asset.confidentiality == Confidentiality.CONFIDENTIAL
        or data_asset.integrity == Criticality.CRITICAL
    )


def _impact_of_transfer(
    model: Model, link: CommunicationLink, data_asset_ids: List[str]
) -> Optional[RiskExploitationImpact]:
    transferring_auth_data = link.authentication != Authentication.NONE
    for data_asset_id in data_asset_ids:
        data_asset = model.data_assets[data_asset_id]
        if is_high_sensitivity(data_asset) or transferring_auth_data:
            return RiskExploitationImpact.HIGH
        if not link.vpn and is_medium_sensitivity(data_asset):
            return RiskExploitationImpact.MEDIUM
    return None


def generate_risks(model: Model) -> List[Risk]:
    risks: List[Risk] = []
    for asset_id in graph.sorted_technical_asset_ids(model):
        source = model.technical_assets[asset_id]
        for link in graph.communication_links_sorted(source):
            target = model.technical_assets[link.target_id]
            if source.out_of_scope and target.out_of_scope:
                continue
            if link.protocol.is_encrypted or link.protocol.is_process_local:
                continue
            if (
                source.technology.is_unprotected_communications_tolerated
                or target.technology.is_unprotected_communications_tolerated
            ):
                continue
            impact = _impact_of_transfer(model, link, sorted(link.data_assets_sent))
            if impact is None:
                impact = _impact_of_transfer(model, link, sorted(link.data_assets_received))
            if impact is not None:
                risks.append(_create_risk(model, link, source.title, target.title, impact))
    return risks


def _create_risk(
    model: Model,
    link: CommunicationLink,
    source_title: str,
    target_title: str,
    impact: RiskExploitationImpact,
) -> Risk:
    title = (
        f"<b>Unencrypted Communication</b> named <b>{link.title}</b> between "
        f"<b>{source_title}</b> and <b>{target_title}</b>"
    )
    if link.authentication != Authentication.NONE:
        title += " transferring authentication data (like credentials, token, session-id, etc.)"
    if link.vpn:
        title += (
            " (even VPN-protected connections need to encrypt their data in-transit when "
            "confidentiality is rated strictly-confidential or integrity is rated mission-critical)"
        )
    return create_risk(
        model,
        CATEGORY,
        title,
        RiskExploitationLikelihood.LIKELY,
        impact,
        DataBreachProbability.POSSIBLE,
        data_breach_technical_asset_ids=[link.target_id],
        technical_asset_id=link.source_id,
        communication_link_id=link.id,
    )
