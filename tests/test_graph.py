"""
Tests for graph module
"""

import os
import sys

# Add src to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from risk_thinker import graph
from risk_thinker.vocabulary import Confidentiality, Criticality, DataBreachProbability

from model_builders import (
    analyze,
    assemble,
    data_asset,
    link,
    technical_asset,
    trust_boundary,
    web_and_database,
)


def _nested_model():
    return assemble(
        tags_available=["pci"],
        technical_assets={
            "A": technical_asset("a"),
            "B": technical_asset("b"),
            "C": technical_asset("c"),
        },
        trust_boundaries={
            "Outer": trust_boundary("outer", inside=["b"], nested=["inner"], tags=["pci"]),
            "Inner": trust_boundary(
                "inner", inside=["a"], type="execution-environment"
            ),
            "Other": trust_boundary("other", inside=["c"]),
        },
    )


class TestTags:
    """Test cases for tag queries"""

    def test_tag_inherited_from_ancestor_boundary(self):
        """Test that tags are found by walking up nested boundaries"""
        model = _nested_model()
        asset = model.technical_assets["a"]
        assert not graph.is_tagged_with_any(asset, "pci")
        assert graph.is_tagged_with_any_traversing_up(model, asset, "pci")
        assert graph.is_tagged_with_any_traversing_up(model, asset, "PCI")
        assert not graph.is_tagged_with_any_traversing_up(
            model, model.technical_assets["c"], "pci"
        )

    def test_tag_from_shared_runtime(self):
        """Test that shared runtime tags count"""
        model = assemble(
            tags_available=["k8s"],
            technical_assets={"A": technical_asset("a")},
            shared_runtimes={
                "Cluster": {"id": "cluster", "tags": ["k8s"], "technical_assets_running": ["a"]}
            },
        )
        assert graph.is_tagged_with_any_traversing_up(model, model.technical_assets["a"], "k8s")

    def test_base_tag(self):
        """Test base tag matching with variants"""
        model = assemble(
            tags_available=["aws:s3", "aws", "awsome"],
            technical_assets={
                "A": technical_asset("a", tags=["aws:s3"]),
                "B": technical_asset("b", tags=["awsome"]),
            },
        )
        assert graph.is_tagged_with_base_tag(model.technical_assets["a"], "aws")
        assert not graph.is_tagged_with_base_tag(model.technical_assets["b"], "aws")

    def test_tags_actually_used(self):
        """Test that unused declared tags are left out"""
        model = assemble(
            tags_available=["used", "unused"],
            data_assets={"D": data_asset("d", tags=["used"])},
        )
        assert graph.tags_actually_used(model) == ["used"]

    def test_tagged_queries_sorted_by_id(self):
        """Test tagged entity queries"""
        model = assemble(
            tags_available=["x"],
            technical_assets={
                "Zeta": technical_asset("z", tags=["x"]),
                "Alpha": technical_asset("y", tags=["x"]),
            },
        )
        assert [a.id for a in graph.technical_assets_tagged_with_any(model, "x")] == ["y", "z"]


class TestTrustBoundaries:
    """Test cases for boundary queries"""

    def test_parents(self):
        """Test parent lookup and ancestor chain"""
        model = _nested_model()
        assert graph.parent_trust_boundary_id(model, "inner") == "outer"
        assert graph.parent_trust_boundary_id(model, "outer") is None
        assert graph.all_parent_trust_boundary_ids(model, "inner") == ["inner", "outer"]
        assert graph.all_ancestor_trust_boundary_ids(model, "inner") == ["outer"]

    def test_recursive_assets_inside(self):
        """Test collecting assets through nested boundaries"""
        model = _nested_model()
        inside = graph.recursively_all_technical_asset_ids_inside(
            model, model.trust_boundaries["outer"]
        )
        assert sorted(inside) == ["a", "b"]

    def test_network_only_skips_execution_environment(self):
        """Test that execution environments do not separate networks"""
        model = _nested_model()
        assert not graph.is_same_trust_boundary(model, "a", "b")
        assert graph.is_same_trust_boundary_network_only(model, "a", "b")
        assert not graph.is_same_trust_boundary_network_only(model, "a", "c")

    def test_same_execution_environment(self):
        """Test execution environment comparison"""
        model = _nested_model()
        assert graph.is_same_execution_environment(model, "a", "a")
        assert not graph.is_same_execution_environment(model, "a", "b")

    def test_sharing_parent(self):
        """Test shared ancestry"""
        model = _nested_model()
        assert graph.is_sharing_same_parent_trust_boundary(model, "a", "b")
        assert not graph.is_sharing_same_parent_trust_boundary(model, "a", "c")

    def test_across_boundary_network_only(self):
        """Test link crossing detection"""
        model = assemble(**web_and_database())
        crossing = model.communication_links["web>database-access"]
        assert graph.is_across_trust_boundary(model, crossing)
        assert graph.is_across_trust_boundary_network_only(model, crossing)

    def test_target_outside_any_network_boundary(self):
        """Test that a target without a network boundary is not crossed into"""
        sections = web_and_database()
        del sections["trust_boundaries"]["Backend"]
        model = assemble(**sections)
        crossing = model.communication_links["web>database-access"]
        assert not graph.is_across_trust_boundary_network_only(model, crossing)


class TestSensitivity:
    """Test cases for CIA aggregation"""

    def test_highest_ratings_include_data(self):
        """Test that processed data raises an asset's ratings"""
        model = assemble(**web_and_database())
        web = model.technical_assets["web"]
        assert web.confidentiality == Confidentiality.INTERNAL
        assert graph.highest_confidentiality(model, web) == Confidentiality.CONFIDENTIAL
        assert graph.highest_integrity(model, web) == Criticality.OPERATIONAL

    def test_link_ratings(self):
        """Test link ratings come from transferred data"""
        model = assemble(**web_and_database())
        crossing = model.communication_links["web>database-access"]
        assert graph.link_highest_confidentiality(model, crossing) == Confidentiality.CONFIDENTIAL

    def test_boundary_ratings(self):
        """Test boundary ratings cover contained assets"""
        model = assemble(**web_and_database())
        backend = model.trust_boundaries["backend"]
        assert (
            graph.boundary_highest_confidentiality(model, backend)
            == Confidentiality.STRICTLY_CONFIDENTIAL
        )
        assert graph.boundary_highest_integrity(model, backend) == Criticality.CRITICAL

    def test_highest_sensitivity_score(self):
        """Test attractiveness score of own ratings"""
        model = assemble(**web_and_database())
        assert graph.highest_sensitivity_score(model.technical_assets["web"]) == 13 + 8 + 8


class TestLinksAndData:
    """Test cases for link and data asset queries"""

    def test_incoming_and_direct_connection(self):
        """Test incoming link lookups"""
        model = assemble(**web_and_database())
        assert [lnk.id for lnk in graph.incoming_communication_links(model, "db")] == [
            "web>database-access"
        ]
        assert graph.incoming_communication_links(model, "web") == []
        assert graph.has_direct_connection(model, "web", "db")
        assert graph.has_direct_connection(model, "db", "web")

    def test_processed_stored_sent(self):
        """Test data asset usage queries"""
        model = assemble(**web_and_database())
        customer = model.data_assets["customer"]
        assert [a.id for a in graph.processed_by(model, customer)] == ["web"]
        assert [a.id for a in graph.stored_by(model, customer)] == ["db"]
        assert [lnk.id for lnk in graph.sent_via(model, customer)] == ["web>database-access"]
        assert graph.received_via(model, customer) == []

    def test_identified_data_breach_probability(self):
        """Test breach probability derived from generated risks"""
        model = analyze(**web_and_database())
        customer = model.data_assets["customer"]
        risks = graph.identified_data_breach_risks(model, customer)
        assert risks
        assert graph.identified_data_breach_probability(model, customer) in (
            DataBreachProbability.IMPROBABLE,
            DataBreachProbability.POSSIBLE,
            DataBreachProbability.PROBABLE,
        )

    def test_risk_category_lookup(self):
        """Test finding categories across catalogs"""
        model = assemble()
        assert graph.risk_category(model, "missing-vault").id == "missing-vault"
        assert graph.risk_category(model, "nope") is None

    def test_risks_by_technical_asset(self):
        """Test grouping risks by most relevant asset"""
        model = analyze(**web_and_database())
        grouped = graph.risks_by_technical_asset(model)
        assert set(grouped) == {"web", "db"}
        assert any(
            risk.category_id == "unguarded-direct-datastore-access" for risk in grouped["db"]
        )
