"""
Export functionality for analysis results
"""

import datetime
import json
import re
from typing import Any, Dict, List, Optional

from risk_thinker import graph
from risk_thinker.models import Model, Risk
from risk_thinker.ordering import generated_risk_categories, sort_risks
from risk_thinker.risk_analyzer import all_risks, overall_risk_statistics


def _generated_at() -> str:
    return datetime.datetime.now(datetime.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _write(content: str, out_path: Optional[str]) -> None:
    if out_path:
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(content)


def risk_to_dict(risk: Risk) -> Dict[str, Any]:
    return {
        "category": risk.category_id,
        "risk_status": risk.risk_status.value,
        "severity": risk.severity.value,
        "exploitation_likelihood": risk.exploitation_likelihood.value,
        "exploitation_impact": risk.exploitation_impact.value,
        "title": risk.title,
        "synthetic_id": risk.synthetic_id,
        "most_relevant_data_asset": risk.most_relevant_data_asset_id,
        "most_relevant_technical_asset": risk.most_relevant_technical_asset_id,
        "most_relevant_communication_link": risk.most_relevant_communication_link_id,
        "most_relevant_trust_boundary": risk.most_relevant_trust_boundary_id,
        "most_relevant_shared_runtime": risk.most_relevant_shared_runtime_id,
        "data_breach_probability": risk.data_breach_probability.value,
        "data_breach_technical_assets": list(risk.data_breach_technical_asset_ids),
    }


def export_risks_json(model: Model, out_path: Optional[str] = None) -> str:
    """
    Export generated risks to JSON.

    Args:
        model: Model with generated risks and resolved tracking
        out_path: Optional output file path

    Returns:
        JSON string representation
    """
    data = [risk_to_dict(risk) for risk in all_risks(model)]
    obj = {
        "generated_at": _generated_at(),
        "model": model.title,
        "count": len(data),
        "risks": data,
    }
    s = json.dumps(obj, ensure_ascii=False, indent=2)
    _write(s, out_path)
    return s


def export_stats_json(model: Model, out_path: Optional[str] = None) -> str:
    """Export risk counts by severity and tracking status."""
    obj = {"risks": overall_risk_statistics(model)}
    s = json.dumps(obj, ensure_ascii=False, indent=2)
    _write(s, out_path)
    return s


def _markdown_title(title: str) -> str:
    text = re.sub(r"</?b>", "**", title)
    return text.replace("|", "\\|")


def export_md(model: Model, output_file: Optional[str] = None) -> str:
    """
    Export risks to Markdown format
    """
    md_content = f"# Risk Analysis Report: {model.title}\n\n"

    categories = generated_risk_categories(model)
    if not categories:
        md_content += "No risks identified.\n"
        _write(md_content, output_file)
        return md_content

    md_content += "## Risk Summary\n\n"
    md_content += "| Severity | Category | Risk | Status |\n"
    md_content += "|----------|----------|------|--------|\n"
    for risk in all_risks(model):
        category = graph.risk_category(model, risk.category_id)
        category_title = category.title if category else risk.category_id
        md_content += (
            f"| {risk.severity} | {category_title} | {_markdown_title(risk.title)} "
            f"| {risk.risk_status} |\n"
        )

    md_content += "\n## Risk Categories\n\n"
    for category in categories:
        risks: List[Risk] = sort_risks(model.generated_risks_by_category[category.id])
        md_content += f"### {category.title}\n\n"
        md_content += f"**STRIDE:** {category.stride}\n\n"
        md_content += f"**Function:** {category.function}\n\n"
        if category.cwe:
            md_content += f"**CWE:** CWE-{category.cwe}\n\n"
        if category.description:
            md_content += f"{category.description}\n\n"
        if category.mitigation:
            md_content += f"**Mitigation:** {category.mitigation}\n\n"
        for risk in risks:
            md_content += f"- `{risk.synthetic_id}` ({risk.severity}, {risk.risk_status}): "
            md_content += f"{_markdown_title(risk.title)}\n"
        md_content += "\n---\n\n"

    _write(md_content, output_file)
    return md_content
