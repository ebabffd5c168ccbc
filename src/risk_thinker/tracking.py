"""
Synthetic risk ids and risk tracking resolution
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Pattern

from risk_thinker.constants import SYNTHETIC_ID_SEPARATOR, WILDCARD_SEGMENT
from risk_thinker.models import Model, Risk, RiskTracking
from risk_thinker.vocabulary import RiskStatus

logger = logging.getLogger(__name__)


class RiskTrackingError(ValueError):
    """Raised when the tracking ledger references risks that were not generated."""


def create_synthetic_id(
    category_id: str,
    technical_asset_id: Optional[str] = None,
    communication_link_id: Optional[str] = None,
    trust_boundary_id: Optional[str] = None,
    shared_runtime_id: Optional[str] = None,
    data_asset_id: Optional[str] = None,
) -> str:
    """
    Build the @-delimited id of a finding.

    Segment order is fixed (category, technical asset, communication link,
    trust boundary, shared runtime, data asset) because persisted wildcard
    patterns are written against it. Absent segments are left out.
    """
    parts = [category_id]
    for part in (
        technical_asset_id,
        communication_link_id,
        trust_boundary_id,
        shared_runtime_id,
        data_asset_id,
    ):
        if part:
            parts.append(part)
    return SYNTHETIC_ID_SEPARATOR.join(parts)


def synthetic_id_of(risk: Risk) -> str:
    """Recompute the synthetic id from a risk's category and most relevant ids."""
    return create_synthetic_id(
        risk.category_id,
        technical_asset_id=risk.most_relevant_technical_asset_id,
        communication_link_id=risk.most_relevant_communication_link_id,
        trust_boundary_id=risk.most_relevant_trust_boundary_id,
        shared_runtime_id=risk.most_relevant_shared_runtime_id,
        data_asset_id=risk.most_relevant_data_asset_id,
    )


def compile_wildcard_pattern(pattern: str) -> Pattern[str]:
    """
    Compile a tracking key where each ``*`` stands for one or more non-@ characters.

    The expression is unanchored and is meant for ``search``, so
    ``category@*`` also covers ids with more than one segment after the
    category.
    """
    return re.compile(re.escape(pattern).replace(r"\*", WILDCARD_SEGMENT))


def generated_synthetic_ids(model: Model) -> List[str]:
    """
    Sorted synthetic ids of all generated risks, in their original case.

    Ledger keys and wildcard patterns are compared against these ids, so
    tracking is case-sensitive. The lower-cased index keys serve id lookup only.
    """
    return sorted(risk.synthetic_id for risk in model.generated_risks_by_synthetic_id.values())


def _matches_any_wildcard(model: Model, synthetic_id: str) -> bool:
    return any(
        compile_wildcard_pattern(pattern).search(synthetic_id)
        for pattern in model.wildcard_risk_tracking
    )


def apply_wildcard_risk_tracking(model: Model, ignore_orphaned: bool = False) -> None:
    """
    Copy wildcard ledger entries onto every matching generated risk.

    A wildcard never overrides a direct entry for the same id. When several
    patterns match one id the first pattern in sorted order wins.

    Raises:
        RiskTrackingError: when a pattern matches nothing and orphans are not tolerated
    """
    direct_ids = set(model.risk_tracking)
    candidates = generated_synthetic_ids(model)
    for pattern, tracking in sorted(model.wildcard_risk_tracking.items()):
        logger.info("Applying wildcard risk tracking for risk id: %s", pattern)
        expression = compile_wildcard_pattern(pattern)
        found_some = False
        for synthetic_id in candidates:
            if synthetic_id in direct_ids or not expression.search(synthetic_id):
                continue
            found_some = True
            if synthetic_id in model.risk_tracking:
                continue
            model.risk_tracking[synthetic_id] = RiskTracking(
                synthetic_risk_id=synthetic_id,
                status=tracking.status,
                justification=tracking.justification,
                ticket=tracking.ticket,
                checked_by=tracking.checked_by,
                date=tracking.date,
            )

        if not found_some:
            if ignore_orphaned:
                logger.warning(
                    "Wildcard risk tracking does not match any risk id: %s", pattern
                )
            else:
                raise RiskTrackingError(
                    f"wildcard risk tracking does not match any risk id: {pattern}"
                )


def check_risk_tracking(model: Model, ignore_orphaned: bool = False) -> None:
    """
    Ensure every ledger entry names a generated risk, then stamp each risk
    with its resolved status.

    Raises:
        RiskTrackingError: on an orphaned entry unless orphans are tolerated
    """
    known_ids = set(generated_synthetic_ids(model))
    for synthetic_id in sorted(model.risk_tracking):
        if synthetic_id in known_ids:
            continue
        if ignore_orphaned:
            logger.warning(
                "Risk tracking references unknown risk (risk id not found): %s",
                synthetic_id,
            )
        else:
            raise RiskTrackingError(
                "Risk tracking references unknown risk (risk id not found) - you "
                "might want to use the option --ignore-orphaned-risk-tracking: "
                + synthetic_id
            )

    for risks in model.generated_risks_by_category.values():
        for risk in risks:
            risk.risk_status = risk_tracking_status(model, risk)


def risk_tracking_of(model: Model, risk: Risk) -> Optional[RiskTracking]:
    return model.risk_tracking.get(risk.synthetic_id)


def risk_tracking_status(model: Model, risk: Risk) -> RiskStatus:
    tracking = risk_tracking_of(model, risk)
    return tracking.status if tracking else RiskStatus.UNCHECKED


def resolve_risk_tracking(model: Model, ignore_orphaned: bool = False) -> None:
    """Run wildcard evaluation and the ledger consistency check, in that order."""
    apply_wildcard_risk_tracking(model, ignore_orphaned)
    check_risk_tracking(model, ignore_orphaned)


def seed_risk_tracking(model: Model) -> Dict[str, RiskTracking]:
    """
    Return an unchecked ledger entry for every generated risk not yet tracked.

    Risks matched by a wildcard entry count as tracked.
    """
    seeded: Dict[str, RiskTracking] = {}
    for synthetic_id in generated_synthetic_ids(model):
        if synthetic_id in model.risk_tracking or _matches_any_wildcard(model, synthetic_id):
            continue
        seeded[synthetic_id] = RiskTracking(
            synthetic_risk_id=synthetic_id, status=RiskStatus.UNCHECKED
        )
    return seeded
