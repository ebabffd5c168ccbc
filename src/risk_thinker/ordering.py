"""
Deterministic ordering of risks, categories and assets.

Every sort key ends with a title or id so results never depend on mapping
iteration order. Keys read the resolved ``risk_status`` of each finding, so
sort after tracking resolution.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from risk_thinker import graph
from risk_thinker.models import DataAsset, Model, Risk, RiskCategory, TechnicalAsset
from risk_thinker.severity import highest_severity
from risk_thinker.vocabulary import RiskSeverity


def risk_sort_key(risk: Risk) -> Tuple:
    return (
        -risk.severity.rank,
        risk.risk_status.rank,
        -risk.exploitation_impact.rank,
        -risk.exploitation_likelihood.rank,
        risk.title,
        risk.synthetic_id,
    )


def sort_risks(risks: Iterable[Risk]) -> List[Risk]:
    """Severity desc, status asc, impact desc, likelihood desc, title asc."""
    return sorted(risks, key=risk_sort_key)


def sort_risks_by_data_breach_probability(risks: Iterable[Risk]) -> List[Risk]:
    return sorted(
        risks,
        key=lambda risk: (-risk.data_breach_probability.rank,) + risk_sort_key(risk),
    )


def _highest_still_at_risk(risks: Iterable[Risk]) -> Optional[RiskSeverity]:
    return highest_severity(r.severity for r in risks if r.risk_status.is_still_at_risk)


def _severity_key(severity: Optional[RiskSeverity]) -> Tuple[int, int]:
    # anything still at risk sorts before categories or assets with nothing open
    if severity is None:
        return (1, 0)
    return (0, -severity.rank)


def sort_risk_categories(model: Model, categories: Iterable[RiskCategory]) -> List[RiskCategory]:
    """Highest still-at-risk severity desc, then title."""
    return sorted(
        categories,
        key=lambda category: _severity_key(
            _highest_still_at_risk(model.generated_risks_by_category.get(category.id, []))
        )
        + (category.title, category.id),
    )


def sort_risk_categories_by_title(categories: Iterable[RiskCategory]) -> List[RiskCategory]:
    return sorted(categories, key=lambda category: (category.title, category.id))


def generated_risk_categories(model: Model) -> List[RiskCategory]:
    """Categories that produced findings, in presentation order."""
    categories = []
    for category_id in model.generated_risks_by_category:
        category = graph.risk_category(model, category_id)
        if category is not None:
            categories.append(category)
    return sort_risk_categories(model, categories)


def sort_technical_assets_by_risk(
    model: Model, assets: Iterable[TechnicalAsset]
) -> List[TechnicalAsset]:
    """Like risks, but out-of-scope assets always come last, ordered by title only."""
    risks_by_asset: Dict[str, List[Risk]] = graph.risks_by_technical_asset(model)

    def key(asset: TechnicalAsset) -> Tuple:
        if asset.out_of_scope:
            return (True, 0, 0, asset.title, asset.id)
        severity = _highest_still_at_risk(risks_by_asset.get(asset.id, []))
        return (asset.out_of_scope,) + _severity_key(severity) + (asset.title, asset.id)

    return sorted(assets, key=key)


def sort_technical_assets_by_raa(assets: Iterable[TechnicalAsset]) -> List[TechnicalAsset]:
    return sorted(assets, key=lambda asset: (-asset.raa, asset.title, asset.id))


def sort_technical_assets_by_title(assets: Iterable[TechnicalAsset]) -> List[TechnicalAsset]:
    return sorted(assets, key=lambda asset: (asset.title, asset.id))


def sort_data_assets_by_breach_probability(
    model: Model, data_assets: Iterable[DataAsset]
) -> List[DataAsset]:
    """
    Highest still-at-risk breach probability first.

    On equal probability an asset with open findings sorts before one without.
    """

    def key(data_asset: DataAsset) -> Tuple:
        probability = graph.identified_data_breach_probability(
            model, data_asset, still_at_risk_only=True
        )
        open_risks = graph.identified_data_breach_risks(
            model, data_asset, still_at_risk_only=True
        )
        return (
            -probability.rank,
            0 if open_risks else 1,
            data_asset.title,
            data_asset.id,
        )

    return sorted(data_assets, key=key)


def sort_data_assets_by_title(data_assets: Iterable[DataAsset]) -> List[DataAsset]:
    return sorted(data_assets, key=lambda data_asset: (data_asset.title, data_asset.id))
