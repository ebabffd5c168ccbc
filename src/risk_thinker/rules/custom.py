"""
Risk rules implemented by an external executable.

The executable is called with a single operation argument:

* ``get-info`` prints the rule's category and supported tags as JSON.
* ``generate-risks`` reads the serialized model from stdin and prints a JSON
  list of risk records.
"""

from __future__ import annotations

import dataclasses
import datetime
import json
import logging
import shlex
import subprocess
from enum import Enum
from typing import Any, List, Optional, Sequence, Union

from pydantic import TypeAdapter, ValidationError

from risk_thinker.constants import (
    CUSTOM_RULE_GENERATE_ARG,
    CUSTOM_RULE_INFO_ARG,
    DEFAULT_CUSTOM_RULE_TIMEOUT_SECONDS,
)
from risk_thinker.models import Model, Risk, RiskCategory
from risk_thinker.rules.base import RiskGenerator
from risk_thinker.schemas import CustomRuleInfo, RiskRecord
from risk_thinker.severity import calculate_severity
from risk_thinker.tracking import create_synthetic_id
from risk_thinker.vocabulary import (
    STRIDE,
    DataBreachProbability,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    RiskSeverity,
)

logger = logging.getLogger(__name__)

_RISK_RECORDS = TypeAdapter(List[RiskRecord])


class CustomRuleError(RuntimeError):
    """Raised when a custom rule executable cannot describe itself."""


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_model(model: Model) -> str:
    """Render the model as JSON for an external rule."""
    data = dataclasses.asdict(model)
    # derived lookups duplicate entity data and carry no extra information
    data.pop("incoming_links_by_target_id", None)
    data.pop("direct_containing_trust_boundary_by_asset_id", None)
    data.pop("generated_risks_by_synthetic_id", None)
    return json.dumps(data, default=_json_default, sort_keys=True)


def category_from_record(info: CustomRuleInfo) -> RiskCategory:
    record = info.category
    return RiskCategory(
        id=record.id,
        title=record.title,
        description=record.description,
        impact=record.impact,
        asvs=record.asvs,
        cheat_sheet=record.cheat_sheet,
        action=record.action,
        mitigation=record.mitigation,
        check=record.check,
        detection_logic=record.detection_logic,
        risk_assessment=record.risk_assessment,
        false_positives=record.false_positives,
        function=RiskFunction.parse(record.function),
        stride=STRIDE.parse(record.stride),
        model_failure_possible_reason=record.model_failure_possible_reason,
        cwe=record.cwe,
    )


def risk_from_record(model: Model, category: RiskCategory, record: RiskRecord) -> Risk:
    """
    Convert a plugin risk record into a finding.

    The synthetic id is always rebuilt here so plugins cannot produce ids that
    disagree with the built-in naming scheme. A missing severity is derived
    from likelihood and impact.
    """
    likelihood = RiskExploitationLikelihood.parse(
        record.exploitation_likelihood, RiskExploitationLikelihood.UNLIKELY
    )
    impact = RiskExploitationImpact.parse(record.exploitation_impact, RiskExploitationImpact.LOW)
    if record.severity:
        severity = RiskSeverity.parse(record.severity)
    else:
        severity = calculate_severity(likelihood, impact, model.severity_weights)
    return Risk(
        category_id=category.id,
        severity=severity,
        exploitation_likelihood=likelihood,
        exploitation_impact=impact,
        title=record.title,
        synthetic_id=create_synthetic_id(
            category.id,
            technical_asset_id=record.most_relevant_technical_asset_id,
            communication_link_id=record.most_relevant_communication_link_id,
            trust_boundary_id=record.most_relevant_trust_boundary_id,
            shared_runtime_id=record.most_relevant_shared_runtime_id,
            data_asset_id=record.most_relevant_data_asset_id,
        ),
        most_relevant_data_asset_id=record.most_relevant_data_asset_id or None,
        most_relevant_technical_asset_id=record.most_relevant_technical_asset_id or None,
        most_relevant_communication_link_id=record.most_relevant_communication_link_id or None,
        most_relevant_trust_boundary_id=record.most_relevant_trust_boundary_id or None,
        most_relevant_shared_runtime_id=record.most_relevant_shared_runtime_id or None,
        data_breach_probability=DataBreachProbability.parse(
            record.data_breach_probability, DataBreachProbability.IMPROBABLE
        ),
        data_breach_technical_asset_ids=list(record.data_breach_technical_asset_ids),
    )


class SubprocessRiskGenerator(RiskGenerator):
    """Risk generator backed by an external executable."""

    def __init__(
        self,
        command: Union[str, Sequence[str]],
        timeout_seconds: float = DEFAULT_CUSTOM_RULE_TIMEOUT_SECONDS,
    ):
        self.command = shlex.split(command) if isinstance(command, str) else list(command)
        if not self.command:
            raise CustomRuleError("Custom rule command is empty")
        self.timeout_seconds = timeout_seconds
        self.info = self._load_info()
        try:
            self._category = category_from_record(self.info)
        except ValueError as exc:
            raise CustomRuleError(
                f"Custom rule {self.command[0]} returned invalid category: {exc}"
            ) from exc

    @property
    def category(self) -> RiskCategory:
        return self._category

    @property
    def supported_tags(self) -> List[str]:
        return list(self.info.supported_tags)

    def _run(self, operation: str, stdin: Optional[str] = None) -> subprocess.CompletedProcess:
        return subprocess.run(
            [*self.command, operation],
            input=stdin,
            check=True,
            capture_output=True,
            text=True,
            timeout=self.timeout_seconds,
        )

    def _load_info(self) -> CustomRuleInfo:
        try:
            completed = self._run(CUSTOM_RULE_INFO_ARG)
            return CustomRuleInfo.model_validate_json(completed.stdout)
        except FileNotFoundError as exc:
            raise CustomRuleError(f"Custom rule executable not found: {self.command[0]}") from exc
        except subprocess.TimeoutExpired as exc:
            raise CustomRuleError(
                f"Custom rule {self.command[0]} timed out after {self.timeout_seconds}s"
            ) from exc
        except subprocess.CalledProcessError as exc:
            raise CustomRuleError(
                f"Custom rule {self.command[0]} failed with exit code {exc.returncode}: "
                f"{(exc.stderr or '').strip()}"
            ) from exc
        except ValidationError as exc:
            raise CustomRuleError(
                f"Custom rule {self.command[0]} returned invalid info: {exc}"
            ) from exc

    def generate_risks(self, model: Model) -> Optional[List[Risk]]:
        try:
            completed = self._run(CUSTOM_RULE_GENERATE_ARG, serialize_model(model))
        except subprocess.TimeoutExpired:
            logger.error(
                "Custom rule %s timed out after %ss", self.id, self.timeout_seconds
            )
            return None
        except (OSError, subprocess.CalledProcessError) as exc:
            logger.error("Custom rule %s failed: %s", self.id, exc)
            return None

        if not completed.stdout.strip():
            return []
        try:
            records = _RISK_RECORDS.validate_json(completed.stdout)
        except ValidationError as exc:
            logger.error("Custom rule %s returned invalid risks: %s", self.id, exc)
            return None
        try:
            return [risk_from_record(model, self.category, record) for record in records]
        except ValueError as exc:
            logger.error("Custom rule %s returned invalid risks: %s", self.id, exc)
            return None
