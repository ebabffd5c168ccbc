"""
Risk generator interface shared by built-in and external risk rules
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import ModuleType
from typing import List, Optional

from risk_thinker.models import Model, Risk, RiskCategory
from risk_thinker.severity import calculate_severity
from risk_thinker.tracking import create_synthetic_id
from risk_thinker.vocabulary import (
    DataBreachProbability,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
)


class RiskGenerator(ABC):
    """
    Something that inspects a model and reports findings of one category.

    ``generate_risks`` returns ``None`` to signal that generation failed; an
    empty list means the rule ran and found nothing.
    """

    is_built_in = False

    @property
    @abstractmethod
    def category(self) -> RiskCategory:
        ...

    @property
    def supported_tags(self) -> List[str]:
        return []

    @abstractmethod
    def generate_risks(self, model: Model) -> Optional[List[Risk]]:
        ...

    @property
    def id(self) -> str:
        return self.category.id

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id!r})"


class BuiltInRiskGenerator(RiskGenerator):
    """In-process generator backed by a rule module.

    A rule module exposes ``CATEGORY``, ``SUPPORTED_TAGS`` and
    ``generate_risks(model)``.
    """

    is_built_in = True

    def __init__(self, rule: ModuleType):
        self.rule = rule

    @property
    def category(self) -> RiskCategory:
        return self.rule.CATEGORY

    @property
    def supported_tags(self) -> List[str]:
        return list(self.rule.SUPPORTED_TAGS)

    def generate_risks(self, model: Model) -> Optional[List[Risk]]:
        return self.rule.generate_risks(model)


def create_risk(
    model: Model,
    category: RiskCategory,
    title: str,
    likelihood: RiskExploitationLikelihood,
    impact: RiskExploitationImpact,
    data_breach_probability: DataBreachProbability,
    data_breach_technical_asset_ids: Optional[List[str]] = None,
    technical_asset_id: Optional[str] = None,
    communication_link_id: Optional[str] = None,
    trust_boundary_id: Optional[str] = None,
    shared_runtime_id: Optional[str] = None,
    data_asset_id: Optional[str] = None,
) -> Risk:
    """Build a finding with its severity and synthetic id filled in."""
    return Risk(
        category_id=category.id,
        severity=calculate_severity(likelihood, impact, model.severity_weights),
        exploitation_likelihood=likelihood,
        exploitation_impact=impact,
        title=title,
        synthetic_id=create_synthetic_id(
            category.id,
            technical_asset_id=technical_asset_id,
            communication_link_id=communication_link_id,
            trust_boundary_id=trust_boundary_id,
            shared_runtime_id=shared_runtime_id,
            data_asset_id=data_asset_id,
        ),
        most_relevant_data_asset_id=data_asset_id,
        most_relevant_technical_asset_id=technical_asset_id,
        most_relevant_communication_link_id=communication_link_id,
        most_relevant_trust_boundary_id=trust_boundary_id,
        most_relevant_shared_runtime_id=shared_runtime_id,
        data_breach_probability=data_breach_probability,
        data_breach_technical_asset_ids=list(data_breach_technical_asset_ids or []),
    )
