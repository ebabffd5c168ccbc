"""
Risk rule engine: runs generators over an assembled model
"""

import logging
from typing import Callable, Iterable, List, Optional, Set

from risk_thinker.models import Model, Risk
from risk_thinker.rules.base import RiskGenerator

logger = logging.getLogger(__name__)


def apply_risk(model: Model, generator: RiskGenerator, skipped: Set[str]) -> Optional[List[Risk]]:
    """
    Run a single generator and record its findings on the model.

    A suppressed rule is removed from ``skipped`` so leftovers can be reported
    as unknown. Failures (exceptions or a ``None`` result) are logged and count
    as no findings.
    """
    rule_id = generator.id
    if rule_id in skipped:
        logger.info("Skipping risk rule: %s", rule_id)
        skipped.discard(rule_id)
        return None

    model.all_supported_tags.update(tag.lower() for tag in generator.supported_tags)
    logger.debug("Executing risk rule: %s", rule_id)
    try:
        risks = generator.generate_risks(model)
    except Exception:  # noqa: BLE001
        logger.exception("Risk rule %s raised an error", rule_id)
        risks = None

    if risks is None:
        logger.error("Failed to generate risks for %s", rule_id)
        return None
    if risks:
        model.generated_risks_by_category[rule_id] = list(risks)
    return risks


def index_risks_by_synthetic_id(model: Model) -> None:
    """
    Rebuild the lower-cased synthetic id lookup; later duplicates win.

    Keys serve id lookup only. Risk tracking compares ledger keys against the
    original-case ``risk.synthetic_id`` (see ``tracking.generated_synthetic_ids``).
    """
    model.generated_risks_by_synthetic_id = {}
    for category_id in sorted(model.generated_risks_by_category):
        for risk in model.generated_risks_by_category[category_id]:
            model.generated_risks_by_synthetic_id[risk.synthetic_id.lower()] = risk


def apply_risk_generation(
    model: Model,
    generators: Iterable[RiskGenerator],
    skip_rules: Iterable[str] = (),
    on_rule_done: Optional[Callable[[RiskGenerator], None]] = None,
) -> None:
    """Run every generator in order, then index the findings."""
    skipped = {rule_id.strip() for rule_id in skip_rules if rule_id and rule_id.strip()}
    for generator in generators:
        apply_risk(model, generator, skipped)
        if on_rule_done is not None:
            on_rule_done(generator)

    if skipped:
        logger.warning("Unknown risk rules to skip: %s", ", ".join(sorted(skipped)))

    index_risks_by_synthetic_id(model)
    logger.info(
        "Generated %d risks in %d categories",
        len(model.generated_risks_by_synthetic_id),
        len(model.generated_risks_by_category),
    )
