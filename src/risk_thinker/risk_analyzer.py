"""
Risk filtering and statistics functionality
"""

from typing import Callable, Dict, Iterable, List, Optional

from risk_thinker import graph
from risk_thinker.models import Model, Risk, RiskCategory
from risk_thinker.ordering import sort_risks
from risk_thinker.severity import highest_severity
from risk_thinker.vocabulary import STRIDE, RiskFunction, RiskSeverity, RiskStatus

RisksByCategory = Dict[str, List[Risk]]


def all_risks(model: Model) -> List[Risk]:
    """All generated risks in presentation order."""
    result: List[Risk] = []
    for risks in model.generated_risks_by_category.values():
        result.extend(risks)
    return sort_risks(result)


def filter_by_category(
    model: Model, predicate: Callable[[RiskCategory], bool]
) -> RisksByCategory:
    """
    Partition the generated risks by a predicate over their category.

    Args:
        model: Model with generated risks
        predicate: Called with each category; keeps its risks when truthy

    Returns:
        Mapping of category id to the category's risks
    """
    result: RisksByCategory = {}
    for category_id, risks in model.generated_risks_by_category.items():
        category = graph.risk_category(model, category_id)
        if category is not None and predicate(category):
            result[category_id] = list(risks)
    return result


def risks_by_stride(model: Model, stride: STRIDE) -> RisksByCategory:
    return filter_by_category(model, lambda category: category.stride == stride)


def risks_by_function(model: Model, function: RiskFunction) -> RisksByCategory:
    return filter_by_category(model, lambda category: category.function == function)


def model_failures(model: Model) -> RisksByCategory:
    """Findings whose category suggests the model itself is incomplete."""
    return filter_by_category(model, lambda category: category.model_failure_possible_reason)


def reduce_to_only_still_at_risk(risks: Iterable[Risk]) -> List[Risk]:
    return [risk for risk in risks if risk.risk_status.is_still_at_risk]


def reduce_to_only_severity(risks: Iterable[Risk], severity: RiskSeverity) -> List[Risk]:
    return [risk for risk in risks if risk.severity == severity]


def reduce_to_only_status(risks: Iterable[Risk], status: RiskStatus) -> List[Risk]:
    return [risk for risk in risks if risk.risk_status == status]


def filtered_by_severity(model: Model, severity: RiskSeverity) -> List[Risk]:
    return reduce_to_only_severity(all_risks(model), severity)


def filtered_by_status(model: Model, status: RiskStatus) -> List[Risk]:
    return reduce_to_only_status(all_risks(model), status)


def filtered_by_still_at_risk(model: Model) -> List[Risk]:
    return reduce_to_only_still_at_risk(all_risks(model))


def highest_severity_still_at_risk(risks: Iterable[Risk]) -> Optional[RiskSeverity]:
    return highest_severity(
        risk.severity for risk in risks if risk.risk_status.is_still_at_risk
    )


def categories_of_only_risks_with_highest_severity(
    model: Model, severity: RiskSeverity
) -> List[RiskCategory]:
    """
    Categories whose highest still-at-risk severity equals ``severity``.

    Args:
        model: Model with resolved risk tracking
        severity: Severity to select

    Returns:
        Matching categories sorted by title
    """
    result: List[RiskCategory] = []
    for category_id, risks in model.generated_risks_by_category.items():
        if highest_severity_still_at_risk(risks) != severity:
            continue
        category = graph.risk_category(model, category_id)
        if category is not None:
            result.append(category)
    return sorted(result, key=lambda category: (category.title, category.id))


def count_risks(risks_by_category: RisksByCategory) -> int:
    return sum(len(risks) for risks in risks_by_category.values())


def overall_risk_statistics(model: Model) -> Dict[str, Dict[str, int]]:
    """
    Count generated risks by severity and tracking status.

    Every severity and status appears in the result, with zero where nothing
    matched.
    """
    stats: Dict[str, Dict[str, int]] = {
        severity.value: {status.value: 0 for status in RiskStatus}
        for severity in RiskSeverity
    }
    for risks in model.generated_risks_by_category.values():
        for risk in risks:
            stats[risk.severity.value][risk.risk_status.value] += 1
    return stats


def total_risk_count(model: Model) -> int:
    return count_risks(model.generated_risks_by_category)
