"""
Tests for risk_analyzer module
"""

import os
import sys

# Add src to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from risk_thinker import risk_analyzer
from risk_thinker.vocabulary import STRIDE, RiskFunction, RiskSeverity, RiskStatus

from model_builders import analyze, web_and_database


def _analyzed(**tracking):
    return analyze(risk_tracking=tracking, **web_and_database())


class TestRiskAnalyzer:
    """Test cases for risk filtering and statistics"""

    def test_all_risks_sorted(self):
        """Test that all risks come back in presentation order"""
        model = _analyzed()
        risks = risk_analyzer.all_risks(model)
        assert len(risks) == risk_analyzer.total_risk_count(model)
        ranks = [risk.severity.rank for risk in risks]
        assert ranks == sorted(ranks, reverse=True)

    def test_by_stride_and_function(self):
        """Test category based filters"""
        model = _analyzed()
        by_stride = risk_analyzer.risks_by_stride(model, STRIDE.ELEVATION_OF_PRIVILEGE)
        assert "unguarded-direct-datastore-access" in by_stride
        assert "missing-vault" not in by_stride
        by_function = risk_analyzer.risks_by_function(model, RiskFunction.ARCHITECTURE)
        assert "missing-vault" in by_function

    def test_model_failures(self):
        """Test model failure categories"""
        model = _analyzed()
        failures = risk_analyzer.model_failures(model)
        assert "missing-vault" in failures
        assert "unguarded-direct-datastore-access" not in failures

    def test_status_filters(self):
        """Test filtering by tracking status"""
        model = _analyzed(**{"missing-vault@db": {"status": "mitigated"}})
        mitigated = risk_analyzer.filtered_by_status(model, RiskStatus.MITIGATED)
        assert [risk.synthetic_id for risk in mitigated] == ["missing-vault@db"]
        still_open = risk_analyzer.filtered_by_still_at_risk(model)
        assert "missing-vault@db" not in [risk.synthetic_id for risk in still_open]

    def test_severity_filters(self):
        """Test filtering by severity"""
        model = _analyzed()
        elevated = risk_analyzer.filtered_by_severity(model, RiskSeverity.ELEVATED)
        assert "unguarded-direct-datastore-access@db@web>database-access" in [
            risk.synthetic_id for risk in elevated
        ]

    def test_highest_severity_categories(self):
        """Test categories selected by their highest open severity"""
        model = _analyzed()
        categories = risk_analyzer.categories_of_only_risks_with_highest_severity(
            model, RiskSeverity.ELEVATED
        )
        assert "unguarded-direct-datastore-access" in [category.id for category in categories]

    def test_highest_severity_ignores_closed(self):
        """Test that closed risks do not count"""
        model = _analyzed(**{"missing-vault@db": {"status": "false-positive"}})
        risks = model.generated_risks_by_category["missing-vault"]
        assert risk_analyzer.highest_severity_still_at_risk(risks) is None

    def test_overall_statistics(self):
        """Test the severity by status matrix"""
        model = _analyzed(**{"missing-vault@db": {"status": "accepted"}})
        stats = risk_analyzer.overall_risk_statistics(model)
        assert set(stats) == {severity.value for severity in RiskSeverity}
        for counts in stats.values():
            assert set(counts) == {status.value for status in RiskStatus}
        total = sum(sum(counts.values()) for counts in stats.values())
        assert total == risk_analyzer.total_risk_count(model)
        accepted = sum(counts["accepted"] for counts in stats.values())
        assert accepted == 1
