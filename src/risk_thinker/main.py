#!/usr/bin/env python3
"""
Risk Thinker - CLI
"Describe your architecture, get a reproducible list of security risks."

Inputs:
- YAML model file (technical assets, data assets, trust boundaries, shared runtimes,
  communication links and the risk tracking ledger)
- Optional YAML analysis configuration

Outputs:
- JSON risks and statistics plus a Markdown summary.

Examples:
  risk-thinker analyze --model model.yaml --out-dir reports/
  risk-thinker analyze --model model.yaml --out-dir reports/ --skip-rules missing-vault,unnecessary-data-asset
  risk-thinker analyze --model model.yaml --out-dir reports/ --custom-rule "./rules/my-rule" --ignore-orphaned-risk-tracking
  risk-thinker analyze --model model.yaml --config analysis.yaml
  risk-thinker seed-risk-tracking --model model.yaml --out tracking.yaml
  risk-thinker list-risk-rules
  risk-thinker list-types
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

import yaml

from risk_thinker.assembly import ModelValidationError
from risk_thinker.cliui import ui, set_verbose
from risk_thinker.config import AnalysisConfig, CustomRuleConfig, load_config
from risk_thinker.engine import apply_risk_generation
from risk_thinker.exporters import export_md, export_risks_json, export_stats_json
from risk_thinker.model_loader import load_model
from risk_thinker.risk_analyzer import all_risks, overall_risk_statistics
from risk_thinker.rules import RiskGenerator, built_in_risk_generators
from risk_thinker.rules.custom import CustomRuleError, SubprocessRiskGenerator
from risk_thinker.tracking import RiskTrackingError, resolve_risk_tracking, seed_risk_tracking
from risk_thinker.vocabulary import ALL_VOCABULARIES

EXIT_USAGE = 1
EXIT_VALIDATION = 2


def _prepare_output_paths(model_file: str, out_dir: str) -> tuple[Path, Path, Path, Path]:
    """Return output directory and file paths for report exports."""
    target_dir = Path(out_dir).expanduser()
    target_dir.mkdir(parents=True, exist_ok=True)
    base_name = Path(model_file).stem or "model"
    risks_path = target_dir / f"{base_name}_risks.json"
    stats_path = target_dir / f"{base_name}_stats.json"
    md_path = target_dir / f"{base_name}_report.md"
    return target_dir, risks_path, stats_path, md_path


def _split_rule_ids(values: Optional[List[str]]) -> List[str]:
    result: List[str] = []
    for value in values or []:
        result.extend(v.strip() for v in value.split(",") if v.strip())
    return result


def _configure_logging(level_name: str, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


def _load_custom_rules(rules: List[CustomRuleConfig]) -> List[RiskGenerator]:
    generators: List[RiskGenerator] = []
    for rule in rules:
        generator = SubprocessRiskGenerator(rule.command, rule.timeout_seconds)
        ui.info(f"Loaded custom risk rule: {generator.id}")
        generators.append(generator)
    return generators


def _run_analyze(args: argparse.Namespace) -> None:
    start_time = time.time()
    set_verbose(args.verbose)
    ui.show_banner()
    ui.set_total_steps(5)  # Config, Model, Rules, Tracking, Export

    ui.step("Loading configuration")
    cfg = AnalysisConfig()
    if args.config:
        try:
            cfg = load_config(args.config)
        except (FileNotFoundError, ValueError) as e:
            ui.error("Failed to load configuration", str(e))
            sys.exit(EXIT_USAGE)
        ui.info(f"Using configuration from {args.config}")
    _configure_logging(cfg.observability.log_level, args.verbose)

    out_dir = args.out_dir or cfg.output.out_dir
    if not out_dir:
        ui.error("No output directory given", "Use --out-dir or output.out_dir in the config")
        sys.exit(EXIT_USAGE)
    skip_rules = cfg.risk.skip_rules + _split_rule_ids(args.skip_rules)
    ignore_orphaned = args.ignore_orphaned_risk_tracking or cfg.risk.ignore_orphaned_risk_tracking
    custom_rules = list(cfg.custom_rules) + [
        CustomRuleConfig(command=command) for command in (args.custom_rule or [])
    ]

    try:
        generators = built_in_risk_generators() + _load_custom_rules(custom_rules)
    except CustomRuleError as e:
        ui.error("Failed to load custom risk rule", str(e))
        sys.exit(EXIT_USAGE)

    ui.step("Loading and validating model")
    try:
        model = load_model(args.model, generators, cfg.severity_weights())
    except FileNotFoundError as e:
        ui.error("Failed to load model", str(e))
        sys.exit(EXIT_USAGE)
    except ModelValidationError as e:
        ui.error("Model validation failed", str(e))
        sys.exit(EXIT_VALIDATION)
    ui.success(
        f"Model '{model.title}' loaded",
        f"{len(model.technical_assets)} technical assets, "
        f"{len(model.data_assets)} data assets, "
        f"{len(model.communication_links)} communication links",
    )

    ui.step("Running risk rules")
    progress = ui.create_progress_bar(len(generators))
    apply_risk_generation(
        model, generators, skip_rules, on_rule_done=lambda _generator: progress.update()
    )
    progress.finish()

    ui.step("Resolving risk tracking")
    try:
        resolve_risk_tracking(model, ignore_orphaned)
    except RiskTrackingError as e:
        ui.error("Risk tracking check failed", str(e))
        sys.exit(EXIT_VALIDATION)

    ui.step("Generating reports")
    target_dir, risks_path, stats_path, md_path = _prepare_output_paths(args.model, out_dir)
    ui.info(f"Exporting reports to {target_dir}")
    try:
        if "json" in cfg.output.formats:
            risks_output = export_risks_json(model, str(risks_path))
            export_stats_json(model, str(stats_path))
            ui.success(f"JSON risks saved to: {risks_path}")
            ui.success(f"JSON statistics saved to: {stats_path}")
            ui.debug("JSON output", risks_output)
        if "markdown" in cfg.output.formats:
            md_output = export_md(model, str(md_path))
            ui.success(f"Markdown report saved to: {md_path}")
            ui.debug("Markdown output", md_output)
    except OSError as e:
        ui.error("Failed to export reports", str(e))
        sys.exit(EXIT_USAGE)

    risks = all_risks(model)
    ui.show_risks_preview(risks)
    ui.show_statistics(overall_risk_statistics(model))
    ui.show_summary(
        len(risks), len(model.generated_risks_by_category), time.time() - start_time
    )


def _run_seed_risk_tracking(args: argparse.Namespace) -> None:
    set_verbose(args.verbose)
    _configure_logging("warning", args.verbose)
    generators = built_in_risk_generators()
    try:
        model = load_model(args.model, generators)
    except FileNotFoundError as e:
        ui.error("Failed to load model", str(e))
        sys.exit(EXIT_USAGE)
    except ModelValidationError as e:
        ui.error("Model validation failed", str(e))
        sys.exit(EXIT_VALIDATION)

    apply_risk_generation(model, generators)
    seeded = seed_risk_tracking(model)
    data = {
        "risk_tracking": {
            synthetic_id: {
                "status": tracking.status.value,
                "justification": tracking.justification,
                "ticket": tracking.ticket,
                "checked_by": tracking.checked_by,
                "date": "",
            }
            for synthetic_id, tracking in seeded.items()
        }
    }
    output = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(output)
        ui.success(f"Seeded {len(seeded)} risk tracking entries to: {args.out}")
    else:
        print(output, end="")


def _run_list_risk_rules() -> None:
    for generator in built_in_risk_generators():
        print(f"{generator.id} --> {generator.category.title}")


def _run_list_types() -> None:
    for vocabulary in ALL_VOCABULARIES:
        print(f"{vocabulary.__name__}: {', '.join(vocabulary.values())}")


def main():
    p = argparse.ArgumentParser(prog="risk-thinker", description="Risk Thinker CLI")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_analyze = sub.add_parser("analyze", help="Validate a model and generate risks")
    p_analyze.add_argument("--model", type=str, required=True, help="Path to YAML model file")
    p_analyze.add_argument("--out-dir", type=str, help="Directory to write reports into")
    p_analyze.add_argument("--config", type=str, help="Optional YAML analysis config")
    p_analyze.add_argument(
        "--skip-rules",
        action="append",
        help="Comma-separated risk rule ids to skip (repeatable)",
    )
    p_analyze.add_argument(
        "--custom-rule",
        action="append",
        help="Executable implementing a custom risk rule (repeatable)",
    )
    p_analyze.add_argument(
        "--ignore-orphaned-risk-tracking",
        action="store_true",
        help="Warn instead of failing on risk tracking entries matching no risk",
    )
    p_analyze.add_argument("--verbose", action="store_true", help="Show debug output")

    p_seed = sub.add_parser(
        "seed-risk-tracking", help="Print unchecked tracking entries for untracked risks"
    )
    p_seed.add_argument("--model", type=str, required=True, help="Path to YAML model file")
    p_seed.add_argument("--out", type=str, help="Write the YAML to this file")
    p_seed.add_argument("--verbose", action="store_true", help="Show debug output")

    sub.add_parser("list-risk-rules", help="List built-in risk rules")
    sub.add_parser("list-types", help="List the values accepted for each model type")

    args = p.parse_args()

    if args.cmd == "analyze":
        _run_analyze(args)
    elif args.cmd == "seed-risk-tracking":
        _run_seed_risk_tracking(args)
    elif args.cmd == "list-risk-rules":
        _run_list_risk_rules()
    elif args.cmd == "list-types":
        _run_list_types()


if __name__ == "__main__":
    main()
