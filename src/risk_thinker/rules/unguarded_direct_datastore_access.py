"""
Datastores reached directly from another network segment
"""

from typing import List

from risk_thinker import graph
from risk_thinker.models import CommunicationLink, Model, Risk, RiskCategory, TechnicalAsset
from risk_thinker.rules.base import create_risk
from risk_thinker.vocabulary import (
    STRIDE,
    Confidentiality,
    Criticality,
    DataBreachProbability,
    Protocol,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    TechnicalAssetTechnology,
    TechnicalAssetType,
    Usage,
)

CATEGORY = RiskCategory(
    id="unguarded-direct-datastore-access",
    title="Unguarded Direct Datastore Access",
    description=(
        "Datastores accessed across trust boundaries must be guarded by some protecting "
        "service or application."
    ),
    impact="If this risk is unmitigated, attackers might be able to directly attack sensitive datastores without any protecting components in-between.",
    asvs="V1 - Architecture, Design and Threat Modeling Requirements",
    cheat_sheet="https://cheatsheetseries.owasp.org/cheatsheets/Attack_Surface_Analysis_Cheat_Sheet.html",
    action="Encapsulation of Datastore",
    mitigation="Encapsulate the datastore access behind a guarding service or application.",
    check="Are recommendations from the linked cheat sheet and referenced ASVS chapter applied?",
    function=RiskFunction.ARCHITECTURE,
    stride=STRIDE.ELEVATION_OF_PRIVILEGE,
    detection_logic=(
        "In-scope technical assets of type datastore (except identity-store-ldap when accessed "
        "from identity-provider and file-server when accessed via file transfer protocols) "
        "with confidentiality rating of confidential (or higher) or with integrity rating of "
        "critical (or higher) which have incoming data-flows from assets outside across a "
        "network trust-boundary. DevOps config and deployment access is excluded from this risk."
    ),
    risk_assessment=(
        "The matching technical assets are at low risk. When either the confidentiality rating "
        "is strictly-confidential or the integrity rating is mission-critical, the risk-rating "
        "is considered medium. For assets with RAA values higher than 40 % the risk-rating "
        "increases."
    ),
    false_positives=(
        "When the caller is considered fully trusted as if it was part of the datastore itself."
    ),
    model_failure_possible_reason=False,
    cwe=501,
)

SUPPORTED_TAGS: List[str] = []

_FILE_TRANSFER_PROTOCOLS = (Protocol.FTP, Protocol.FTPS, Protocol.SFTP)


def is_file_server_access_via_ftp(asset: TechnicalAsset, link: CommunicationLink) -> bool:
    return (
        asset.technology == TechnicalAssetTechnology.FILE_SERVER
        and link.protocol in _FILE_TRANSFER_PROTOCOLS
    )


def generate_risks(model: Model) -> List[Risk]:
    risks: List[Risk] = []
    for asset_id in graph.sorted_technical_asset_ids(model):
        datastore = model.technical_assets[asset_id]
        if datastore.out_of_scope or datastore.type != TechnicalAssetType.DATASTORE:
            continue
        if not (
            datastore.confidentiality >= Confidentiality.CONFIDENTIAL
            or datastore.integrity >= Criticality.CRITICAL
        ):
            continue
        for link in graph.incoming_communication_links_sorted(model, datastore.id):
            source = model.technical_assets[link.source_id]
            # identity providers talk to their own store
            if (
                datastore.technology.is_identity_store
                and source.technology == TechnicalAssetTechnology.IDENTITY_PROVIDER
            ):
                continue
            if (
                graph.is_across_trust_boundary_network_only(model, link)
                and not is_file_server_access_via_ftp(datastore, link)
                and link.usage != Usage.DEVOPS
                and not graph.is_sharing_same_parent_trust_boundary(
                    model, datastore.id, source.id
                )
            ):
                more_risky = (
                    datastore.confidentiality == Confidentiality.STRICTLY_CONFIDENTIAL
                    or datastore.integrity == Criticality.MISSION_CRITICAL
                )
                risks.append(_create_risk(model, datastore, link, source, more_risky))
    return risks


def _create_risk(
    model: Model,
    datastore: TechnicalAsset,
    link: CommunicationLink,
    client: TechnicalAsset,
    more_risky: bool,
) -> Risk:
    impact = RiskExploitationImpact.LOW
    if more_risky or datastore.raa > 40:
        impact = RiskExploitationImpact.MEDIUM
    return create_risk(
        model,
        CATEGORY,
        f"<b>Unguarded Direct Datastore Access</b> of <b>{datastore.title}</b> by "
        f"<b>{client.title}</b> via <b>{link.title}</b>",
        RiskExploitationLikelihood.LIKELY,
        impact,
        DataBreachProbability.IMPROBABLE,
        data_breach_technical_asset_ids=[datastore.id],
        technical_asset_id=datastore.id,
        communication_link_id=link.id,
    )
