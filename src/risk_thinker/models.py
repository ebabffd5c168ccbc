"""
Data models for Risk Thinker
"""

import datetime
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from risk_thinker.severity import SeverityWeights
from risk_thinker.vocabulary import (
    Authentication,
    Authorization,
    Confidentiality,
    Criticality,
    DataBreachProbability,
    DataFormat,
    EncryptionStyle,
    Protocol,
    Quantity,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    RiskSeverity,
    RiskStatus,
    STRIDE,
    TechnicalAssetMachine,
    TechnicalAssetSize,
    TechnicalAssetTechnology,
    TechnicalAssetType,
    TrustBoundaryType,
    Usage,
)


@dataclass
class DataAsset:
    id: str
    title: str
    description: str = ""
    usage: Usage = Usage.BUSINESS
    quantity: Quantity = Quantity.VERY_FEW
    confidentiality: Confidentiality = Confidentiality.PUBLIC
    integrity: Criticality = Criticality.ARCHIVE
    availability: Criticality = Criticality.ARCHIVE
    tags: List[str] = field(default_factory=list)
    origin: str = ""
    owner: str = ""
    justification_cia_rating: str = ""


@dataclass
class CommunicationLink:
    id: str  # derived: <source id>><slug of title>
    source_id: str
    target_id: str
    title: str
    description: str = ""
    protocol: Protocol = Protocol.UNKNOWN
    authentication: Authentication = Authentication.NONE
    authorization: Authorization = Authorization.NONE
    usage: Usage = Usage.BUSINESS
    vpn: bool = False
    ip_filtered: bool = False
    readonly: bool = False
    data_assets_sent: List[str] = field(default_factory=list)
    data_assets_received: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    # Diagram hints only, never read by risk rules
    diagram_tweak_weight: int = 1
    diagram_tweak_constraint: bool = True


@dataclass
class TechnicalAsset:
    id: str
    title: str
    description: str = ""
    type: TechnicalAssetType = TechnicalAssetType.PROCESS
    size: TechnicalAssetSize = TechnicalAssetSize.COMPONENT
    technology: TechnicalAssetTechnology = TechnicalAssetTechnology.UNKNOWN
    machine: TechnicalAssetMachine = TechnicalAssetMachine.VIRTUAL
    usage: Usage = Usage.BUSINESS
    encryption: EncryptionStyle = EncryptionStyle.NONE
    internet: bool = False
    multi_tenant: bool = False
    redundant: bool = False
    custom_developed_parts: bool = False
    used_as_client_by_human: bool = False
    out_of_scope: bool = False
    justification_out_of_scope: str = ""
    owner: str = ""
    confidentiality: Confidentiality = Confidentiality.PUBLIC
    integrity: Criticality = Criticality.ARCHIVE
    availability: Criticality = Criticality.ARCHIVE
    justification_cia_rating: str = ""
    data_assets_processed: List[str] = field(default_factory=list)
    data_assets_stored: List[str] = field(default_factory=list)
    data_formats_accepted: List[DataFormat] = field(default_factory=list)
    communication_links: List[CommunicationLink] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    raa: float = 0.0  # relative attacker attractiveness, computed elsewhere


@dataclass
class TrustBoundary:
    id: str
    title: str
    description: str = ""
    type: TrustBoundaryType = TrustBoundaryType.NETWORK_ON_PREM
    technical_assets_inside: List[str] = field(default_factory=list)
    trust_boundaries_nested: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)


@dataclass
class SharedRuntime:
    id: str
    title: str
    description: str = ""
    technical_assets_running: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)


@dataclass
class RiskCategory:
    id: str
    title: str
    description: str = ""
    impact: str = ""
    asvs: str = ""
    cheat_sheet: str = ""
    action: str = ""
    mitigation: str = ""
    check: str = ""
    detection_logic: str = ""
    risk_assessment: str = ""
    false_positives: str = ""
    function: RiskFunction = RiskFunction.ARCHITECTURE
    stride: STRIDE = STRIDE.SPOOFING
    model_failure_possible_reason: bool = False
    cwe: int = 0


@dataclass
class Risk:
    category_id: str
    severity: RiskSeverity
    exploitation_likelihood: RiskExploitationLikelihood
    exploitation_impact: RiskExploitationImpact
    title: str
    synthetic_id: str
    most_relevant_data_asset_id: Optional[str] = None
    most_relevant_technical_asset_id: Optional[str] = None
    most_relevant_communication_link_id: Optional[str] = None
    most_relevant_trust_boundary_id: Optional[str] = None
    most_relevant_shared_runtime_id: Optional[str] = None
    data_breach_probability: DataBreachProbability = DataBreachProbability.IMPROBABLE
    data_breach_technical_asset_ids: List[str] = field(default_factory=list)
    risk_status: RiskStatus = RiskStatus.UNCHECKED  # resolved after tracking


@dataclass
class RiskTracking:
    synthetic_risk_id: str  # may hold a wildcard pattern
    status: RiskStatus = RiskStatus.UNCHECKED
    justification: str = ""
    ticket: str = ""
    checked_by: str = ""
    date: Optional[datetime.date] = None


@dataclass
class Model:
    """
    Root aggregate of an assembled architecture.

    The two ``*_by_*`` lookup maps are rebuilt by assembly and must not be
    edited independently of the entity maps they are derived from.
    """

    title: str = ""
    author: str = ""
    date: Optional[datetime.date] = None
    business_criticality: Criticality = Criticality.IMPORTANT
    management_summary_comment: str = ""
    tags_available: List[str] = field(default_factory=list)
    data_assets: Dict[str, DataAsset] = field(default_factory=dict)
    technical_assets: Dict[str, TechnicalAsset] = field(default_factory=dict)
    communication_links: Dict[str, CommunicationLink] = field(default_factory=dict)
    trust_boundaries: Dict[str, TrustBoundary] = field(default_factory=dict)
    shared_runtimes: Dict[str, SharedRuntime] = field(default_factory=dict)
    individual_risk_categories: Dict[str, RiskCategory] = field(default_factory=dict)
    built_in_risk_categories: Dict[str, RiskCategory] = field(default_factory=dict)
    custom_risk_categories: Dict[str, RiskCategory] = field(default_factory=dict)
    risk_tracking: Dict[str, RiskTracking] = field(default_factory=dict)
    wildcard_risk_tracking: Dict[str, RiskTracking] = field(default_factory=dict)
    incoming_links_by_target_id: Dict[str, List[CommunicationLink]] = field(
        default_factory=dict
    )
    direct_containing_trust_boundary_by_asset_id: Dict[str, TrustBoundary] = field(
        default_factory=dict
    )
    generated_risks_by_category: Dict[str, List[Risk]] = field(default_factory=dict)
    generated_risks_by_synthetic_id: Dict[str, Risk] = field(default_factory=dict)
    all_supported_tags: Set[str] = field(default_factory=set)
    severity_weights: Optional[SeverityWeights] = None  # None means the default tables
