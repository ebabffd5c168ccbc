"""
Tests for severity module
"""

import os
import sys

import pytest

# Add src to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from risk_thinker.constants import IMPACT_WEIGHTS, LIKELIHOOD_WEIGHTS
from risk_thinker.severity import (
    SeverityWeights,
    calculate_severity,
    highest_severity,
    severity_for_score,
)
from risk_thinker.vocabulary import (
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskSeverity,
)


class TestSeverityForScore:
    """Test cases for breakpoint mapping"""

    @pytest.mark.parametrize(
        "score,expected",
        [
            (1, RiskSeverity.LOW),
            (2, RiskSeverity.MEDIUM),
            (3, RiskSeverity.MEDIUM),
            (4, RiskSeverity.ELEVATED),
            (8, RiskSeverity.ELEVATED),
            (9, RiskSeverity.HIGH),
            (12, RiskSeverity.HIGH),
            (13, RiskSeverity.CRITICAL),
            (16, RiskSeverity.CRITICAL),
        ],
    )
    def test_breakpoints(self, score, expected):
        """Test each tier boundary"""
        assert severity_for_score(score) == expected


class TestCalculateSeverity:
    """Test cases for calculate_severity"""

    def test_likely_medium_is_elevated(self):
        """Test that weights 2 and 2 land in the elevated tier"""
        assert (
            calculate_severity(RiskExploitationLikelihood.LIKELY, RiskExploitationImpact.MEDIUM)
            == RiskSeverity.ELEVATED
        )

    def test_extremes(self):
        """Test lowest and highest combinations"""
        assert (
            calculate_severity(RiskExploitationLikelihood.UNLIKELY, RiskExploitationImpact.LOW)
            == RiskSeverity.LOW
        )
        assert (
            calculate_severity(
                RiskExploitationLikelihood.FREQUENT, RiskExploitationImpact.VERY_HIGH
            )
            == RiskSeverity.CRITICAL
        )

    def test_monotonic_in_both_arguments(self):
        """Test that raising likelihood or impact never lowers severity"""
        for impact in RiskExploitationImpact:
            previous = None
            for likelihood in RiskExploitationLikelihood:
                severity = calculate_severity(likelihood, impact)
                if previous is not None:
                    assert severity >= previous
                previous = severity
        for likelihood in RiskExploitationLikelihood:
            previous = None
            for impact in RiskExploitationImpact:
                severity = calculate_severity(likelihood, impact)
                if previous is not None:
                    assert severity >= previous
                previous = severity

    def test_custom_weights(self):
        """Test that configured weights change the score"""
        weights = SeverityWeights(
            likelihood={
                RiskExploitationLikelihood.UNLIKELY: 1,
                RiskExploitationLikelihood.LIKELY: 3,
                RiskExploitationLikelihood.VERY_LIKELY: 4,
                RiskExploitationLikelihood.FREQUENT: 5,
            }
        )
        # 3 * 3 = 9
        assert (
            calculate_severity(
                RiskExploitationLikelihood.LIKELY, RiskExploitationImpact.HIGH, weights
            )
            == RiskSeverity.HIGH
        )


class TestSeverityWeights:
    """Test cases for weight table validation"""

    def test_defaults_match_constants(self):
        """Test default tables"""
        weights = SeverityWeights()
        assert weights.likelihood == LIKELIHOOD_WEIGHTS
        assert weights.impact == IMPACT_WEIGHTS

    def test_missing_level_rejected(self):
        """Test that incomplete tables are rejected"""
        with pytest.raises(ValueError, match="missing weight"):
            SeverityWeights(impact={RiskExploitationImpact.LOW: 1})

    def test_non_increasing_rejected(self):
        """Test that tables must increase with the level"""
        table = dict(LIKELIHOOD_WEIGHTS)
        table[RiskExploitationLikelihood.VERY_LIKELY] = 2
        with pytest.raises(ValueError, match="must increase"):
            SeverityWeights(likelihood=table)

    def test_non_positive_rejected(self):
        """Test that zero weights are rejected"""
        table = dict(IMPACT_WEIGHTS)
        table[RiskExploitationImpact.LOW] = 0
        with pytest.raises(ValueError, match="positive integer"):
            SeverityWeights(impact=table)


class TestHighestSeverity:
    """Test cases for highest_severity"""

    def test_empty_is_none(self):
        """Test that no severities yields None"""
        assert highest_severity([]) is None

    def test_picks_maximum(self):
        """Test maximum selection"""
        assert (
            highest_severity([RiskSeverity.LOW, RiskSeverity.HIGH, RiskSeverity.MEDIUM])
            == RiskSeverity.HIGH
        )
