"""
Tests for ordering module
"""

import os
import sys

# Add src to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from risk_thinker.models import Model, Risk, RiskCategory, TechnicalAsset
from risk_thinker.ordering import (
    generated_risk_categories,
    sort_data_assets_by_breach_probability,
    sort_risk_categories,
    sort_risks,
    sort_risks_by_data_breach_probability,
    sort_technical_assets_by_raa,
    sort_technical_assets_by_risk,
)
from risk_thinker.vocabulary import (
    DataBreachProbability,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskSeverity,
    RiskStatus,
)

from model_builders import analyze, data_asset, web_and_database


def make_risk(
    title,
    severity=RiskSeverity.MEDIUM,
    status=RiskStatus.UNCHECKED,
    impact=RiskExploitationImpact.LOW,
    likelihood=RiskExploitationLikelihood.UNLIKELY,
    category_id="cat",
    asset_id=None,
    probability=DataBreachProbability.IMPROBABLE,
):
    return Risk(
        category_id=category_id,
        severity=severity,
        exploitation_likelihood=likelihood,
        exploitation_impact=impact,
        title=title,
        synthetic_id=f"{category_id}@{title.lower()}",
        most_relevant_technical_asset_id=asset_id,
        data_breach_probability=probability,
        risk_status=status,
    )


class TestSortRisks:
    """Test cases for risk ordering"""

    def test_severity_first(self):
        """Test that higher severity sorts first"""
        low = make_risk("a", severity=RiskSeverity.LOW)
        critical = make_risk("b", severity=RiskSeverity.CRITICAL)
        assert sort_risks([low, critical]) == [critical, low]

    def test_status_then_impact_then_likelihood(self):
        """Test the tie breakers after severity"""
        mitigated = make_risk("a", status=RiskStatus.MITIGATED)
        unchecked_low = make_risk("b")
        unchecked_high = make_risk("c", impact=RiskExploitationImpact.HIGH)
        unchecked_likely = make_risk("d", likelihood=RiskExploitationLikelihood.LIKELY)
        ordered = sort_risks([mitigated, unchecked_low, unchecked_high, unchecked_likely])
        assert ordered == [unchecked_high, unchecked_likely, unchecked_low, mitigated]

    def test_title_breaks_ties(self):
        """Test that identical ratings fall back to title"""
        second = make_risk("Zulu")
        first = make_risk("Alpha")
        assert sort_risks([second, first]) == [first, second]

    def test_input_order_irrelevant(self):
        """Test determinism across permutations"""
        risks = [make_risk(name, severity=severity) for name, severity in [
            ("x", RiskSeverity.HIGH),
            ("y", RiskSeverity.LOW),
            ("z", RiskSeverity.HIGH),
        ]]
        assert sort_risks(risks) == sort_risks(list(reversed(risks)))

    def test_by_data_breach_probability(self):
        """Test breach probability ordering"""
        possible = make_risk("a", severity=RiskSeverity.CRITICAL, probability=DataBreachProbability.POSSIBLE)
        probable = make_risk("b", severity=RiskSeverity.LOW, probability=DataBreachProbability.PROBABLE)
        assert sort_risks_by_data_breach_probability([possible, probable]) == [probable, possible]


class TestSortCategories:
    """Test cases for category ordering"""

    def _model(self):
        model = Model()
        for category_id, title in [("c1", "Bravo"), ("c2", "Alpha"), ("c3", "Charlie")]:
            model.built_in_risk_categories[category_id] = RiskCategory(id=category_id, title=title)
        model.generated_risks_by_category = {
            "c1": [make_risk("x", severity=RiskSeverity.HIGH, category_id="c1")],
            "c2": [make_risk("y", severity=RiskSeverity.LOW, category_id="c2")],
            "c3": [
                make_risk(
                    "z",
                    severity=RiskSeverity.CRITICAL,
                    status=RiskStatus.MITIGATED,
                    category_id="c3",
                )
            ],
        }
        return model

    def test_open_severity_then_title(self):
        """Test that mitigated-only categories sort last"""
        model = self._model()
        ordered = sort_risk_categories(model, model.built_in_risk_categories.values())
        assert [category.id for category in ordered] == ["c1", "c2", "c3"]

    def test_generated_categories(self):
        """Test listing categories with findings"""
        model = self._model()
        model.built_in_risk_categories["unused"] = RiskCategory(id="unused", title="Aaa")
        assert [category.id for category in generated_risk_categories(model)] == ["c1", "c2", "c3"]


class TestSortAssets:
    """Test cases for asset ordering"""

    def test_technical_assets_by_risk(self):
        """Test that out-of-scope assets come last"""
        model = Model()
        model.technical_assets = {
            "a": TechnicalAsset(id="a", title="A", out_of_scope=True),
            "b": TechnicalAsset(id="b", title="B"),
            "c": TechnicalAsset(id="c", title="C"),
        }
        model.generated_risks_by_category = {
            "cat": [
                make_risk("r1", severity=RiskSeverity.CRITICAL, asset_id="a"),
                make_risk("r2", severity=RiskSeverity.LOW, asset_id="b"),
                make_risk("r3", severity=RiskSeverity.HIGH, asset_id="c"),
            ]
        }
        ordered = sort_technical_assets_by_risk(model, model.technical_assets.values())
        assert [asset.id for asset in ordered] == ["c", "b", "a"]

    def test_out_of_scope_assets_by_title_only(self):
        """Test that out-of-scope assets ignore their risks and sort by title"""
        model = Model()
        model.technical_assets = {
            "web": TechnicalAsset(id="web", title="Web Server", out_of_scope=True),
            "db": TechnicalAsset(id="db", title="Database", out_of_scope=True),
            "alpha": TechnicalAsset(id="alpha", title="Alpha", out_of_scope=True),
            "api": TechnicalAsset(id="api", title="Zulu API"),
        }
        model.generated_risks_by_category = {
            "cat": [
                make_risk("r1", severity=RiskSeverity.CRITICAL, asset_id="web"),
                make_risk("r2", severity=RiskSeverity.LOW, asset_id="db"),
            ]
        }
        ordered = sort_technical_assets_by_risk(model, model.technical_assets.values())
        assert [asset.title for asset in ordered] == [
            "Zulu API",
            "Alpha",
            "Database",
            "Web Server",
        ]

    def test_technical_assets_by_raa(self):
        """Test attacker attractiveness ordering"""
        assets = [
            TechnicalAsset(id="a", title="A", raa=10.0),
            TechnicalAsset(id="b", title="B", raa=70.0),
        ]
        assert [asset.id for asset in sort_technical_assets_by_raa(assets)] == ["b", "a"]

    def test_data_assets_by_breach_probability(self):
        """Test that data with open breach risks sorts first"""
        sections = web_and_database()
        sections["data_assets"]["Archive"] = data_asset("archive")
        model = analyze(**sections)
        ordered = sort_data_assets_by_breach_probability(model, model.data_assets.values())
        assert [data.id for data in ordered] == ["customer", "archive"]
