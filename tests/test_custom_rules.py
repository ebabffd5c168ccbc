"""
Tests for custom risk rules run as external executables
"""

import json
import os
import subprocess
import sys

import pytest

# Add src to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from risk_thinker.engine import apply_risk_generation
from risk_thinker.rules import custom
from risk_thinker.rules.custom import (
    CustomRuleError,
    SubprocessRiskGenerator,
    serialize_model,
)
from risk_thinker.vocabulary import RiskSeverity, STRIDE

from model_builders import assemble, web_and_database

INFO = {
    "category": {
        "id": "custom-check",
        "title": "Custom Check",
        "function": "operations",
        "stride": "tampering",
        "cwe": 20,
    },
    "supported_tags": ["Custom-Tag"],
}


class FakeRun:
    """Stand-in for subprocess.run answering per operation"""

    def __init__(self, info=INFO, risks="[]", fail=None):
        self.info = info
        self.risks = risks
        self.fail = fail or {}
        self.calls = []

    def __call__(self, args, input=None, check=False, capture_output=False, text=False, timeout=None):
        self.calls.append((list(args), input, timeout))
        operation = args[-1]
        if operation in self.fail:
            raise self.fail[operation]
        if operation == "get-info":
            stdout = json.dumps(self.info) if isinstance(self.info, dict) else self.info
        else:
            stdout = self.risks if isinstance(self.risks, str) else json.dumps(self.risks)
        return subprocess.CompletedProcess(args, 0, stdout=stdout, stderr="")


@pytest.fixture
def fake_run(monkeypatch):
    def install(**kwargs):
        fake = FakeRun(**kwargs)
        monkeypatch.setattr(custom.subprocess, "run", fake)
        return fake

    return install


class TestSubprocessRiskGenerator:
    """Test cases for SubprocessRiskGenerator"""

    def test_loads_info(self, fake_run):
        """Test that category and tags come from get-info"""
        fake = fake_run()
        generator = SubprocessRiskGenerator("python3 my_rule.py --flag", timeout_seconds=5)
        assert fake.calls[0][0] == ["python3", "my_rule.py", "--flag", "get-info"]
        assert fake.calls[0][2] == 5
        assert generator.id == "custom-check"
        assert generator.category.stride == STRIDE.TAMPERING
        assert generator.supported_tags == ["Custom-Tag"]
        assert not generator.is_built_in

    def test_generates_risks(self, fake_run):
        """Test converting returned records into risks"""
        fake = fake_run(
            risks=[
                {
                    "title": "Custom finding at <b>Database</b>",
                    "exploitation_likelihood": "likely",
                    "exploitation_impact": "medium",
                    "most_relevant_technical_asset_id": "db",
                    "data_breach_technical_asset_ids": ["db"],
                    "data_breach_probability": "possible",
                }
            ]
        )
        model = assemble(**web_and_database())
        generator = SubprocessRiskGenerator(["my-rule"])
        risks = generator.generate_risks(model)
        assert len(risks) == 1
        assert risks[0].synthetic_id == "custom-check@db"
        assert risks[0].severity == RiskSeverity.ELEVATED
        args, stdin, _ = fake.calls[-1]
        assert args == ["my-rule", "generate-risks"]
        assert json.loads(stdin)["title"] == "Test Model"

    def test_explicit_severity_kept(self, fake_run):
        """Test that a reported severity is not recalculated"""
        fake_run(risks=[{"title": "x", "severity": "critical"}])
        risks = SubprocessRiskGenerator("my-rule").generate_risks(assemble())
        assert risks[0].severity == RiskSeverity.CRITICAL
        assert risks[0].synthetic_id == "custom-check"

    def test_empty_output(self, fake_run):
        """Test that empty output means no findings"""
        fake_run(risks="  \n")
        assert SubprocessRiskGenerator("my-rule").generate_risks(assemble()) == []

    def test_invalid_output(self, fake_run):
        """Test that malformed output counts as a failure"""
        fake_run(risks="not json")
        assert SubprocessRiskGenerator("my-rule").generate_risks(assemble()) is None

    def test_invalid_value_in_output(self, fake_run):
        """Test that unknown enumeration values count as a failure"""
        fake_run(risks=[{"title": "x", "exploitation_impact": "enormous"}])
        assert SubprocessRiskGenerator("my-rule").generate_risks(assemble()) is None

    def test_timeout_during_generation(self, fake_run):
        """Test that a timeout counts as a failure"""
        fake_run(fail={"generate-risks": subprocess.TimeoutExpired("my-rule", 1)})
        assert SubprocessRiskGenerator("my-rule").generate_risks(assemble()) is None

    def test_exit_code_during_generation(self, fake_run):
        """Test that a non-zero exit counts as a failure"""
        fake_run(fail={"generate-risks": subprocess.CalledProcessError(3, "my-rule")})
        assert SubprocessRiskGenerator("my-rule").generate_risks(assemble()) is None

    @pytest.mark.parametrize(
        "error,message",
        [
            (FileNotFoundError("my-rule"), "not found"),
            (subprocess.TimeoutExpired("my-rule", 1), "timed out"),
            (subprocess.CalledProcessError(2, "my-rule", stderr="bad"), "exit code 2"),
        ],
    )
    def test_info_failures(self, fake_run, error, message):
        """Test that get-info failures raise CustomRuleError"""
        fake_run(fail={"get-info": error})
        with pytest.raises(CustomRuleError, match=message):
            SubprocessRiskGenerator("my-rule")

    def test_invalid_info(self, fake_run):
        """Test that malformed info raises CustomRuleError"""
        fake_run(info='{"supported_tags": []}')
        with pytest.raises(CustomRuleError, match="invalid info"):
            SubprocessRiskGenerator("my-rule")

    def test_invalid_category_values(self, fake_run):
        """Test that unknown category values raise CustomRuleError"""
        info = {"category": {"id": "x", "title": "X", "stride": "sneaking"}}
        fake_run(info=info)
        with pytest.raises(CustomRuleError, match="invalid category"):
            SubprocessRiskGenerator("my-rule")

    def test_empty_command(self):
        """Test that an empty command is rejected"""
        with pytest.raises(CustomRuleError):
            SubprocessRiskGenerator("   ")

    def test_engine_registers_custom_tags(self, fake_run):
        """Test running a custom rule through the engine"""
        fake_run(risks=[{"title": "x", "most_relevant_data_asset_id": "customer"}])
        generator = SubprocessRiskGenerator("my-rule")
        model = assemble(rules=[generator], **web_and_database())
        apply_risk_generation(model, [generator])
        assert "custom-check" in model.custom_risk_categories
        assert "custom-tag" in model.all_supported_tags
        assert "custom-check@customer" in model.generated_risks_by_synthetic_id


class TestSerializeModel:
    """Test cases for serialize_model"""

    def test_json_document(self):
        """Test that the model serializes to plain JSON"""
        model = assemble(**web_and_database())
        model.all_supported_tags.update({"b", "a"})
        data = json.loads(serialize_model(model))
        assert data["date"] == "2024-01-15"
        assert data["technical_assets"]["db"]["type"] == "datastore"
        assert data["all_supported_tags"] == ["a", "b"]
        assert "incoming_links_by_target_id" not in data
        assert data["technical_assets"]["web"]["communication_links"][0]["id"] == (
            "web>database-access"
        )
