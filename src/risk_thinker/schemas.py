"""
Input records decoded from model files and custom rule output
"""

from __future__ import annotations

import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InputRecord(BaseModel):
    """Common settings for records decoded from a model file."""

    model_config = ConfigDict(coerce_numbers_to_str=True, populate_by_name=True)


def _date_to_text(value: Any) -> Any:
    # YAML decodes unquoted YYYY-MM-DD into a date object
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.strftime("%Y-%m-%d")
    return value


class AuthorInput(InputRecord):
    name: str = ""
    homepage: str = ""


class DataAssetInput(InputRecord):
    id: str = ""
    description: str = ""
    usage: str = ""
    tags: List[str] = Field(default_factory=list)
    origin: str = ""
    owner: str = ""
    quantity: str = ""
    confidentiality: str = ""
    integrity: str = ""
    availability: str = ""
    justification_cia_rating: str = ""


class CommunicationLinkInput(InputRecord):
    target: str = ""
    description: str = ""
    protocol: str = ""
    authentication: str = ""
    authorization: str = ""
    tags: List[str] = Field(default_factory=list)
    vpn: bool = False
    ip_filtered: bool = False
    readonly: bool = False
    usage: str = ""
    data_assets_sent: List[str] = Field(default_factory=list)
    data_assets_received: List[str] = Field(default_factory=list)
    diagram_tweak_weight: int = 0
    diagram_tweak_constraint: bool = False


class TechnicalAssetInput(InputRecord):
    id: str = ""
    description: str = ""
    type: str = ""
    usage: str = ""
    used_as_client_by_human: bool = False
    out_of_scope: bool = False
    justification_out_of_scope: str = ""
    size: str = ""
    technology: str = ""
    tags: List[str] = Field(default_factory=list)
    internet: bool = False
    machine: str = ""
    encryption: str = ""
    owner: str = ""
    confidentiality: str = ""
    integrity: str = ""
    availability: str = ""
    justification_cia_rating: str = ""
    multi_tenant: bool = False
    redundant: bool = False
    custom_developed_parts: bool = False
    data_assets_processed: List[str] = Field(default_factory=list)
    data_assets_stored: List[str] = Field(default_factory=list)
    data_formats_accepted: List[str] = Field(default_factory=list)
    communication_links: Dict[str, CommunicationLinkInput] = Field(
        default_factory=dict
    )
    raa: float = 0.0


class TrustBoundaryInput(InputRecord):
    id: str = ""
    description: str = ""
    type: str = ""
    tags: List[str] = Field(default_factory=list)
    technical_assets_inside: List[str] = Field(default_factory=list)
    trust_boundaries_nested: List[str] = Field(default_factory=list)


class SharedRuntimeInput(InputRecord):
    id: str = ""
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    technical_assets_running: List[str] = Field(default_factory=list)


class RiskIdentifiedInput(InputRecord):
    severity: str = ""
    exploitation_likelihood: str = ""
    exploitation_impact: str = ""
    data_breach_probability: str = ""
    data_breach_technical_assets: List[str] = Field(default_factory=list)
    most_relevant_data_asset: str = ""
    most_relevant_technical_asset: str = ""
    most_relevant_communication_link: str = ""
    most_relevant_trust_boundary: str = ""
    most_relevant_shared_runtime: str = ""


class RiskCategoryInput(InputRecord):
    id: str = ""
    description: str = ""
    impact: str = ""
    asvs: str = ""
    cheat_sheet: str = ""
    action: str = ""
    mitigation: str = ""
    check: str = ""
    function: str = ""
    stride: str = ""
    detection_logic: str = ""
    risk_assessment: str = ""
    false_positives: str = ""
    model_failure_possible_reason: bool = False
    cwe: int = 0
    risks_identified: Dict[str, RiskIdentifiedInput] = Field(default_factory=dict)


class RiskTrackingInput(InputRecord):
    status: str = ""
    justification: str = ""
    ticket: str = ""
    date: str = ""
    checked_by: str = ""

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value: Any) -> Any:
        return _date_to_text(value) if value is not None else ""


class ModelInput(InputRecord):
    """Decoded model file, keyed by entity title where the format does so."""

    title: str = ""
    author: AuthorInput = Field(default_factory=AuthorInput)
    date: str = ""
    business_criticality: str = ""
    management_summary_comment: str = ""
    tags_available: List[str] = Field(default_factory=list)
    data_assets: Dict[str, DataAssetInput] = Field(default_factory=dict)
    technical_assets: Dict[str, TechnicalAssetInput] = Field(default_factory=dict)
    trust_boundaries: Dict[str, TrustBoundaryInput] = Field(default_factory=dict)
    shared_runtimes: Dict[str, SharedRuntimeInput] = Field(default_factory=dict)
    individual_risk_categories: Dict[str, RiskCategoryInput] = Field(
        default_factory=dict
    )
    risk_tracking: Dict[str, RiskTrackingInput] = Field(default_factory=dict)

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value: Any) -> Any:
        return _date_to_text(value) if value is not None else ""

    @field_validator(
        "data_assets",
        "technical_assets",
        "trust_boundaries",
        "shared_runtimes",
        "individual_risk_categories",
        "risk_tracking",
        mode="before",
    )
    @classmethod
    def _empty_section(cls, value: Any) -> Any:
        return value or {}


class RiskCategoryRecord(BaseModel):
    """Category description reported by an external risk rule."""

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
    function: str = "architecture"
    stride: str = "spoofing"
    model_failure_possible_reason: bool = False
    cwe: int = 0


class CustomRuleInfo(BaseModel):
    category: RiskCategoryRecord
    supported_tags: List[str] = Field(default_factory=list)


class RiskRecord(BaseModel):
    """A single finding returned by an external risk rule."""

    title: str
    severity: Optional[str] = None
    exploitation_likelihood: str = "unlikely"
    exploitation_impact: str = "low"
    most_relevant_data_asset_id: Optional[str] = None
    most_relevant_technical_asset_id: Optional[str] = None
    most_relevant_communication_link_id: Optional[str] = None
    most_relevant_trust_boundary_id: Optional[str] = None
    most_relevant_shared_runtime_id: Optional[str] = None
    data_breach_probability: str = "improbable"
    data_breach_technical_asset_ids: List[str] = Field(default_factory=list)
