"""
Tests for assembly module
"""

import datetime
import os
import sys

import pytest

# Add src to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from risk_thinker.assembly import (
    ModelValidationError,
    assemble_model,
    check_id_syntax,
    create_communication_link_id,
)
from risk_thinker.rules import built_in_risk_generators
from risk_thinker.vocabulary import (
    Criticality,
    EncryptionStyle,
    RiskSeverity,
    RiskStatus,
    Usage,
)

from model_builders import (
    assemble,
    build_model_input,
    data_asset,
    link,
    technical_asset,
    trust_boundary,
    web_and_database,
)


class TestIdentifiers:
    """Test cases for id helpers"""

    def test_communication_link_id_slug(self):
        """Test that link ids combine source id and a title slug"""
        assert create_communication_link_id("web", "Database Access") == "web>database-access"
        assert create_communication_link_id("web", "  HTTP(S) / API  ") == "web>http-s-api"

    def test_valid_id_syntax(self):
        """Test accepted ids"""
        check_id_syntax("web-server-01")

    @pytest.mark.parametrize("bad_id", ["web server", "web_server", "", "a@b"])
    def test_invalid_id_syntax(self, bad_id):
        """Test rejected ids"""
        with pytest.raises(ModelValidationError, match="invalid id syntax"):
            check_id_syntax(bad_id)


class TestAssembleModel:
    """Test cases for assemble_model"""

    def test_overview_fields(self):
        """Test top-level fields and defaults"""
        model = assemble(business_criticality="")
        assert model.title == "Test Model"
        assert model.date == datetime.date(2024, 1, 15)
        assert model.business_criticality == Criticality.IMPORTANT

    def test_entities_and_links(self):
        """Test that entities are keyed by id and links are derived"""
        model = assemble(**web_and_database())
        assert set(model.technical_assets) == {"web", "db"}
        assert model.technical_assets["web"].title == "Web Server"
        link_ids = list(model.communication_links)
        assert link_ids == ["web>database-access"]
        incoming = model.incoming_links_by_target_id["db"]
        assert [item.source_id for item in incoming] == ["web"]
        assert model.direct_containing_trust_boundary_by_asset_id["db"].id == "backend"

    def test_defaults_for_optional_values(self):
        """Test defaults for usage, encryption and descriptions"""
        model = assemble(
            data_assets={"Logs": data_asset("logs", usage="")},
            technical_assets={"App": technical_asset("app", data_assets_processed=["logs"])},
        )
        assert model.data_assets["logs"].usage == Usage.BUSINESS
        assert model.data_assets["logs"].description == "Logs"
        assert model.technical_assets["app"].encryption == EncryptionStyle.NONE

    def test_unknown_enum_value(self):
        """Test error message for an unknown enumeration value"""
        with pytest.raises(ModelValidationError) as exc:
            assemble(technical_assets={"App": technical_asset("app", machine="mainframe-ish")})
        assert str(exc.value) == "unknown 'machine' value of technical asset 'App': mainframe-ish"

    def test_missing_data_asset_reference(self):
        """Test dangling data asset reference"""
        with pytest.raises(ModelValidationError, match="missing referenced data asset target"):
            assemble(technical_assets={"App": technical_asset("app", data_assets_stored=["nope"])})

    def test_missing_link_target(self):
        """Test dangling communication link target"""
        with pytest.raises(ModelValidationError, match="missing referenced technical asset target"):
            assemble(
                technical_assets={
                    "App": technical_asset("app", communication_links={"Call": link("ghost")})
                }
            )

    def test_duplicate_id(self):
        """Test duplicate ids across titles"""
        with pytest.raises(ModelValidationError, match="duplicate id used: app"):
            assemble(
                technical_assets={
                    "App One": technical_asset("app"),
                    "App Two": technical_asset("app"),
                }
            )

    def test_duplicate_link_id(self):
        """Test link titles that slug to the same id"""
        with pytest.raises(ModelValidationError, match="duplicate id used: app>call-db"):
            assemble(
                technical_assets={
                    "App": technical_asset(
                        "app",
                        communication_links={"Call DB": link("db"), "call-db": link("db")},
                    ),
                    "DB": technical_asset("db"),
                }
            )

    def test_unknown_tag(self):
        """Test that tags must be declared"""
        with pytest.raises(ModelValidationError, match="missing referenced tag in overall tag list"):
            assemble(technical_assets={"App": technical_asset("app", tags=["pci"])})

    def test_declared_and_rule_tags_accepted(self):
        """Test that declared tags and rule-supported tags pass validation"""
        model = assemble(
            tags_available=["PCI"],
            technical_assets={"Repo": technical_asset("repo", tags=[" pci ", "Git"])},
        )
        assert model.technical_assets["repo"].tags == ["pci", "git"]

    def test_rule_tags_need_rule(self):
        """Test that rule tags are unknown without the rule"""
        with pytest.raises(ModelValidationError):
            assemble(rules=[], technical_assets={"Repo": technical_asset("repo", tags=["git"])})

    def test_asset_in_two_boundaries(self):
        """Test that an asset may be inside only one trust boundary"""
        with pytest.raises(ModelValidationError, match="is modeled in multiple trust boundaries"):
            assemble(
                technical_assets={"App": technical_asset("app")},
                trust_boundaries={
                    "One": trust_boundary("one", inside=["app"]),
                    "Two": trust_boundary("two", inside=["app"]),
                },
            )

    def test_missing_asset_in_boundary(self):
        """Test unknown asset inside a boundary"""
        with pytest.raises(ModelValidationError, match="missing referenced technical asset ghost"):
            assemble(trust_boundaries={"One": trust_boundary("one", inside=["ghost"])})

    def test_missing_nested_boundary(self):
        """Test unknown nested boundary"""
        with pytest.raises(ModelValidationError, match="missing referenced nested trust boundary: ghost"):
            assemble(trust_boundaries={"One": trust_boundary("one", nested=["ghost"])})

    def test_nesting_cycle(self):
        """Test that nesting cycles are rejected"""
        with pytest.raises(ModelValidationError) as exc:
            assemble(
                trust_boundaries={
                    "A": trust_boundary("a", nested=["b"]),
                    "B": trust_boundary("b", nested=["a"]),
                }
            )
        assert str(exc.value) == "trust boundary nesting cycle detected: a -> b -> a"

    def test_multiple_parents(self):
        """Test that a boundary has at most one parent"""
        with pytest.raises(ModelValidationError, match="nested in multiple trust boundaries"):
            assemble(
                trust_boundaries={
                    "A": trust_boundary("a", nested=["c"]),
                    "B": trust_boundary("b", nested=["c"]),
                    "C": trust_boundary("c"),
                }
            )

    def test_rule_categories_registered(self):
        """Test that built-in rule categories are registered"""
        model = assemble()
        assert "missing-vault" in model.built_in_risk_categories
        assert not model.custom_risk_categories

    def test_assembly_is_deterministic(self):
        """Test that assembling twice gives identical indices"""
        first = assemble(**web_and_database())
        second = assemble(**web_and_database())
        assert list(first.communication_links) == list(second.communication_links)
        assert first.incoming_links_by_target_id == second.incoming_links_by_target_id


class TestRiskTrackingInput:
    """Test cases for risk tracking assembly"""

    def test_direct_and_wildcard_entries(self):
        """Test that wildcard keys are kept apart"""
        model = assemble(
            risk_tracking={
                "missing-vault@web": {"status": "accepted", "date": "2024-02-01"},
                "accidental-secret-leak@*": {"status": "mitigated"},
            }
        )
        assert model.risk_tracking["missing-vault@web"].status == RiskStatus.ACCEPTED
        assert model.risk_tracking["missing-vault@web"].date == datetime.date(2024, 2, 1)
        assert "accidental-secret-leak@*" in model.wildcard_risk_tracking
        assert "accidental-secret-leak@*" not in model.risk_tracking

    def test_yaml_date_objects(self):
        """Test that date objects decoded by YAML are accepted"""
        model = assemble(
            risk_tracking={"missing-vault": {"status": "accepted", "date": datetime.date(2024, 3, 5)}}
        )
        assert model.risk_tracking["missing-vault"].date == datetime.date(2024, 3, 5)

    def test_unknown_status(self):
        """Test that an unknown status is rejected"""
        with pytest.raises(ModelValidationError, match="unknown 'status' value"):
            assemble(risk_tracking={"missing-vault": {"status": "ignored"}})

    def test_bad_date(self):
        """Test that a malformed date is rejected"""
        with pytest.raises(ModelValidationError, match="unable to parse 'date'"):
            assemble(risk_tracking={"missing-vault": {"status": "accepted", "date": "05/03/2024"}})


class TestIndividualRisks:
    """Test cases for hand-authored risk categories"""

    def test_individual_risks_stored(self):
        """Test that individual risks get severity and synthetic id"""
        model = assemble(
            technical_assets={"App": technical_asset("app")},
            individual_risk_categories={
                "Manual Finding": {
                    "id": "manual-finding",
                    "function": "operations",
                    "stride": "tampering",
                    "risks_identified": {
                        "Weak config at App": {
                            "exploitation_likelihood": "likely",
                            "exploitation_impact": "medium",
                            "most_relevant_technical_asset": "app",
                            "data_breach_technical_assets": ["app"],
                        }
                    },
                }
            },
        )
        risks = model.generated_risks_by_category["manual-finding"]
        assert len(risks) == 1
        assert risks[0].synthetic_id == "manual-finding@app"
        assert risks[0].severity == RiskSeverity.ELEVATED
        assert "manual-finding" in model.individual_risk_categories

    def test_individual_risk_bad_reference(self):
        """Test that most relevant ids are checked"""
        with pytest.raises(ModelValidationError, match="missing referenced technical asset target"):
            assemble(
                individual_risk_categories={
                    "Manual Finding": {
                        "id": "manual-finding",
                        "function": "operations",
                        "stride": "tampering",
                        "risks_identified": {
                            "Broken": {
                                "exploitation_likelihood": "likely",
                                "exploitation_impact": "medium",
                                "most_relevant_technical_asset": "ghost",
                            }
                        },
                    }
                }
            )

    def test_assemble_model_accepts_rules_argument(self):
        """Test calling assemble_model directly"""
        model = assemble_model(build_model_input(), built_in_risk_generators())
        assert len(model.built_in_risk_categories) == 10
