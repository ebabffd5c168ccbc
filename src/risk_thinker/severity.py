"""
Severity calculation for risk findings
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from risk_thinker.constants import IMPACT_WEIGHTS, LIKELIHOOD_WEIGHTS, SEVERITY_BREAKPOINTS
from risk_thinker.vocabulary import (
    OrderedVocabulary,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskSeverity,
)


@dataclass
class SeverityWeights:
    """Weight tables used to score likelihood and impact."""

    likelihood: Dict[RiskExploitationLikelihood, int] = field(
        default_factory=lambda: dict(LIKELIHOOD_WEIGHTS)
    )
    impact: Dict[RiskExploitationImpact, int] = field(
        default_factory=lambda: dict(IMPACT_WEIGHTS)
    )

    def __post_init__(self):
        validate_weights(RiskExploitationLikelihood, self.likelihood)
        validate_weights(RiskExploitationImpact, self.impact)


def validate_weights(vocabulary, weights: Dict[OrderedVocabulary, int]) -> None:
    """
    Ensure a weight table covers every level with positive, strictly increasing integers.

    Raises:
        ValueError: when the table is incomplete or breaks the level ordering
    """
    previous = 0
    for level in vocabulary:
        if level not in weights:
            raise ValueError(f"missing weight for {vocabulary.__name__} '{level.value}'")
        weight = weights[level]
        if not isinstance(weight, int) or isinstance(weight, bool) or weight <= 0:
            raise ValueError(
                f"weight for {vocabulary.__name__} '{level.value}' must be a positive integer"
            )
        if weight <= previous:
            raise ValueError(
                f"weights for {vocabulary.__name__} must increase with the level "
                f"('{level.value}' has {weight})"
            )
        previous = weight


def severity_for_score(score: int) -> RiskSeverity:
    for upper_bound, severity in SEVERITY_BREAKPOINTS:
        if score <= upper_bound:
            return severity
    return RiskSeverity.CRITICAL


def calculate_severity(
    likelihood: RiskExploitationLikelihood,
    impact: RiskExploitationImpact,
    weights: Optional[SeverityWeights] = None,
) -> RiskSeverity:
    """Map likelihood and impact to a severity tier via their weight product."""
    likelihood_weights = weights.likelihood if weights else LIKELIHOOD_WEIGHTS
    impact_weights = weights.impact if weights else IMPACT_WEIGHTS
    return severity_for_score(likelihood_weights[likelihood] * impact_weights[impact])


def highest_severity(severities: Iterable[RiskSeverity]) -> Optional[RiskSeverity]:
    result: Optional[RiskSeverity] = None
    for severity in severities:
        if result is None or severity > result:
            result = severity
    return result
