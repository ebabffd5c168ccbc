"""
Configuration loader for `risk-thinker analyze`.

Keeps a minimal set of defaults while allowing environment variable expansion
inside YAML (e.g., `${RISK_THINKER_OUT_DIR}` or `${LOG_LEVEL:-info}`).
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from risk_thinker.constants import DEFAULT_CUSTOM_RULE_TIMEOUT_SECONDS
from risk_thinker.severity import SeverityWeights
from risk_thinker.vocabulary import RiskExploitationImpact, RiskExploitationLikelihood

DEFAULT_OUTPUT_FORMATS = ["json", "markdown"]
SUPPORTED_OUTPUT_FORMATS = {"json", "markdown"}
LOG_LEVELS = {"debug", "info", "warning", "error", "critical"}


@dataclass
class RiskConfig:
    skip_rules: List[str] = field(default_factory=list)
    ignore_orphaned_risk_tracking: bool = False
    likelihood_weights: Dict[str, int] = field(default_factory=dict)
    impact_weights: Dict[str, int] = field(default_factory=dict)


@dataclass
class CustomRuleConfig:
    command: str
    timeout_seconds: int = DEFAULT_CUSTOM_RULE_TIMEOUT_SECONDS


@dataclass
class OutputConfig:
    formats: List[str] = field(default_factory=lambda: list(DEFAULT_OUTPUT_FORMATS))
    out_dir: Optional[str] = None


@dataclass
class ObservabilityConfig:
    log_level: str = "info"


@dataclass
class AnalysisConfig:
    risk: RiskConfig = field(default_factory=RiskConfig)
    custom_rules: List[CustomRuleConfig] = field(default_factory=list)
    output: OutputConfig = field(default_factory=OutputConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    def severity_weights(self) -> Optional[SeverityWeights]:
        """Weight tables with configured overrides, or None when nothing is overridden."""
        if not self.risk.likelihood_weights and not self.risk.impact_weights:
            return None
        weights = SeverityWeights()
        likelihood = dict(weights.likelihood)
        for name, value in self.risk.likelihood_weights.items():
            likelihood[RiskExploitationLikelihood.parse(name)] = value
        impact = dict(weights.impact)
        for name, value in self.risk.impact_weights.items():
            impact[RiskExploitationImpact.parse(name)] = value
        return SeverityWeights(likelihood=likelihood, impact=impact)


def _expand_env(obj: Any) -> Any:
    """Recursively expand environment variables within strings.

    Supports ${VAR} and ${VAR:-default}. Unset variables without a default become "".
    """

    def _expand_string(value: str) -> str:
        pattern = re.compile(r"\$\{([^}:]+)(:-([^}]+))?\}")

        def repl(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default = match.group(3)
            return os.getenv(var_name, default or "")

        return pattern.sub(repl, os.path.expandvars(value))

    if isinstance(obj, str):
        return _expand_string(obj)
    if isinstance(obj, list):
        return [_expand_env(v) for v in obj]
    if isinstance(obj, dict):
        return {k: _expand_env(v) for k, v in obj.items()}
    return obj


def _coerce_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return [str(value).strip()]


def _coerce_bool(value: Any) -> bool:
    # env expansion turns booleans into strings
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _coerce_weights(value: Any, section: str) -> Dict[str, int]:
    if not value:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"risk.{section} must be a mapping of level to weight")
    weights: Dict[str, int] = {}
    for level, weight in value.items():
        try:
            weights[str(level)] = int(weight)
        except (TypeError, ValueError) as e:
            raise ValueError(f"risk.{section}.{level} must be an integer") from e
    return weights


def _load_yaml(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return _expand_env(data)


def _load_risk(data: Dict[str, Any]) -> RiskConfig:
    risk = data.get("risk", {}) or {}
    return RiskConfig(
        skip_rules=_coerce_list(risk.get("skip_rules")),
        ignore_orphaned_risk_tracking=_coerce_bool(
            risk.get("ignore_orphaned_risk_tracking", False)
        ),
        likelihood_weights=_coerce_weights(risk.get("likelihood_weights"), "likelihood_weights"),
        impact_weights=_coerce_weights(risk.get("impact_weights"), "impact_weights"),
    )


def _load_custom_rules(data: Dict[str, Any]) -> List[CustomRuleConfig]:
    rules = data.get("custom_rules", []) or []
    if not isinstance(rules, list):
        raise ValueError("custom_rules must be a list")
    result: List[CustomRuleConfig] = []
    for entry in rules:
        if isinstance(entry, str):
            entry = {"command": entry}
        command = str((entry or {}).get("command", "")).strip()
        if not command:
            raise ValueError("custom_rules entries require a command")
        result.append(
            CustomRuleConfig(
                command=command,
                timeout_seconds=int(
                    entry.get("timeout_seconds", DEFAULT_CUSTOM_RULE_TIMEOUT_SECONDS)
                ),
            )
        )
    return result


def _load_output(data: Dict[str, Any]) -> OutputConfig:
    out = data.get("output", {}) or {}
    formats = _coerce_list(out.get("formats") or list(DEFAULT_OUTPUT_FORMATS))
    return OutputConfig(
        formats=[f.lower() for f in formats],
        out_dir=out.get("out_dir") or None,
    )


def _load_observability(data: Dict[str, Any]) -> ObservabilityConfig:
    obs = data.get("observability", {}) or {}
    return ObservabilityConfig(log_level=str(obs.get("log_level", "info")).lower())


def load_config(path: str) -> AnalysisConfig:
    """
    Load analysis configuration from YAML file.

    Raises:
        FileNotFoundError: when path does not exist
        ValueError: when a section holds invalid values
    """
    data = _load_yaml(path)
    cfg = AnalysisConfig(
        risk=_load_risk(data),
        custom_rules=_load_custom_rules(data),
        output=_load_output(data),
        observability=_load_observability(data),
    )
    unknown_formats = sorted(set(cfg.output.formats) - SUPPORTED_OUTPUT_FORMATS)
    if unknown_formats:
        raise ValueError(f"Unsupported output formats: {', '.join(unknown_formats)}")
    if cfg.observability.log_level not in LOG_LEVELS:
        raise ValueError(f"Unsupported log level: {cfg.observability.log_level}")
    # surfaces bad weight tables at load time rather than mid-analysis
    cfg.severity_weights()
    return cfg
