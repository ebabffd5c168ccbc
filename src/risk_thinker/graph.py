"""
Read-only queries over an assembled model.

All functions take the model explicitly. Trust boundary parents are looked
up by scanning the nested lists of every boundary, so results always follow
the current boundary definitions.
"""

from typing import Dict, Iterable, List, Optional, Sequence

from risk_thinker.constants import (
    CONFIDENTIALITY_ATTACKER_ATTRACTIVENESS,
    CRITICALITY_ATTACKER_ATTRACTIVENESS,
)
from risk_thinker.models import (
    CommunicationLink,
    DataAsset,
    Model,
    Risk,
    RiskCategory,
    SharedRuntime,
    TechnicalAsset,
    TrustBoundary,
)
from risk_thinker.vocabulary import (
    Confidentiality,
    Criticality,
    DataBreachProbability,
    TrustBoundaryType,
)


# -- tags ---------------------------------------------------------------


def _normalize_tags(tags: Iterable[str]) -> List[str]:
    return [tag.strip().lower() for tag in tags]


def contains_case_insensitive_any(candidates: Iterable[str], *tags: str) -> bool:
    wanted = set(_normalize_tags(tags))
    return any(candidate in wanted for candidate in _normalize_tags(candidates))


def is_tagged_with_any(entity, *tags: str) -> bool:
    """Return True if the entity itself carries one of the tags."""
    return contains_case_insensitive_any(entity.tags, *tags)


def is_tagged_with_base_tag(entity, base_tag: str) -> bool:
    """Return True for ``base_tag`` itself or any ``base_tag:<variant>`` tag."""
    base = base_tag.strip().lower()
    for tag in _normalize_tags(entity.tags):
        if tag == base or tag.startswith(base + ":"):
            return True
    return False


def technical_assets_tagged_with_any(model: Model, *tags: str) -> List[TechnicalAsset]:
    return [
        model.technical_assets[asset_id]
        for asset_id in sorted(model.technical_assets)
        if is_tagged_with_any(model.technical_assets[asset_id], *tags)
    ]


def communication_links_tagged_with_any(
    model: Model, *tags: str
) -> List[CommunicationLink]:
    return [
        model.communication_links[link_id]
        for link_id in sorted(model.communication_links)
        if is_tagged_with_any(model.communication_links[link_id], *tags)
    ]


def data_assets_tagged_with_any(model: Model, *tags: str) -> List[DataAsset]:
    return [
        model.data_assets[asset_id]
        for asset_id in sorted(model.data_assets)
        if is_tagged_with_any(model.data_assets[asset_id], *tags)
    ]


def trust_boundaries_tagged_with_any(model: Model, *tags: str) -> List[TrustBoundary]:
    return [
        model.trust_boundaries[boundary_id]
        for boundary_id in sorted(model.trust_boundaries)
        if is_tagged_with_any(model.trust_boundaries[boundary_id], *tags)
    ]


def shared_runtimes_tagged_with_any(model: Model, *tags: str) -> List[SharedRuntime]:
    return [
        model.shared_runtimes[runtime_id]
        for runtime_id in sorted(model.shared_runtimes)
        if is_tagged_with_any(model.shared_runtimes[runtime_id], *tags)
    ]


def tags_actually_used(model: Model) -> List[str]:
    """Return the available tags that at least one entity carries."""
    used: List[str] = []
    for tag in model.tags_available:
        if (
            technical_assets_tagged_with_any(model, tag)
            or communication_links_tagged_with_any(model, tag)
            or data_assets_tagged_with_any(model, tag)
            or trust_boundaries_tagged_with_any(model, tag)
            or shared_runtimes_tagged_with_any(model, tag)
        ):
            used.append(tag)
    return used


# -- trust boundaries ---------------------------------------------------


def parent_trust_boundary_id(model: Model, boundary_id: str) -> Optional[str]:
    """Return the id of the boundary that nests ``boundary_id``, if any."""
    for candidate_id in sorted(model.trust_boundaries):
        if boundary_id in model.trust_boundaries[candidate_id].trust_boundaries_nested:
            return candidate_id
    return None


def all_parent_trust_boundary_ids(model: Model, boundary_id: str) -> List[str]:
    """Return ``boundary_id`` followed by its ancestors, inner to outer."""
    result: List[str] = []
    current: Optional[str] = boundary_id
    # assembly rejects nesting cycles; the guard keeps hand-built models finite
    while current is not None and current not in result:
        result.append(current)
        current = parent_trust_boundary_id(model, current)
    return result


def all_ancestor_trust_boundary_ids(model: Model, boundary_id: str) -> List[str]:
    return all_parent_trust_boundary_ids(model, boundary_id)[1:]


def recursively_all_technical_asset_ids_inside(
    model: Model, boundary: TrustBoundary
) -> List[str]:
    """Return assets inside the boundary and, recursively, its nested boundaries."""
    result: List[str] = []
    seen_boundaries = set()

    def collect(current: TrustBoundary) -> None:
        if current.id in seen_boundaries:
            return
        seen_boundaries.add(current.id)
        for asset_id in current.technical_assets_inside:
            if asset_id not in result:
                result.append(asset_id)
        for nested_id in current.trust_boundaries_nested:
            nested = model.trust_boundaries.get(nested_id)
            if nested is not None:
                collect(nested)

    collect(boundary)
    return result


def direct_trust_boundary(model: Model, asset_id: str) -> Optional[TrustBoundary]:
    return model.direct_containing_trust_boundary_by_asset_id.get(asset_id)


def _direct_trust_boundary_id(model: Model, asset_id: str) -> Optional[str]:
    boundary = direct_trust_boundary(model, asset_id)
    return boundary.id if boundary else None


def nearest_network_trust_boundary(
    model: Model, boundary: Optional[TrustBoundary]
) -> Optional[TrustBoundary]:
    """Walk up from ``boundary`` (inclusive) to the first network-type boundary."""
    if boundary is None:
        return None
    for boundary_id in all_parent_trust_boundary_ids(model, boundary.id):
        candidate = model.trust_boundaries.get(boundary_id)
        if candidate is not None and candidate.type.is_network_boundary:
            return candidate
    return None


def boundary_is_tagged_with_any_traversing_up(
    model: Model, boundary: TrustBoundary, *tags: str
) -> bool:
    for boundary_id in all_parent_trust_boundary_ids(model, boundary.id):
        candidate = model.trust_boundaries.get(boundary_id)
        if candidate is not None and is_tagged_with_any(candidate, *tags):
            return True
    return False


def is_tagged_with_any_traversing_up(
    model: Model, asset: TechnicalAsset, *tags: str
) -> bool:
    """
    Return True if the asset, any boundary containing it (walking up through
    parents) or any shared runtime it runs on carries one of the tags.
    """
    if is_tagged_with_any(asset, *tags):
        return True
    boundary = direct_trust_boundary(model, asset.id)
    if boundary is not None and boundary_is_tagged_with_any_traversing_up(
        model, boundary, *tags
    ):
        return True
    for runtime_id in sorted(model.shared_runtimes):
        runtime = model.shared_runtimes[runtime_id]
        if asset.id in runtime.technical_assets_running and is_tagged_with_any(
            runtime, *tags
        ):
            return True
    return False


def is_same_trust_boundary(model: Model, asset_id: str, other_asset_id: str) -> bool:
    """Compare direct boundaries only; two assets outside all boundaries match."""
    return _direct_trust_boundary_id(model, asset_id) == _direct_trust_boundary_id(
        model, other_asset_id
    )


def is_same_execution_environment(
    model: Model, asset_id: str, other_asset_id: str
) -> bool:
    mine = direct_trust_boundary(model, asset_id)
    other = direct_trust_boundary(model, other_asset_id)
    if mine is None or other is None:
        return False
    return (
        mine.type == TrustBoundaryType.EXECUTION_ENVIRONMENT
        and other.type == TrustBoundaryType.EXECUTION_ENVIRONMENT
        and mine.id == other.id
    )


def is_same_trust_boundary_network_only(
    model: Model, asset_id: str, other_asset_id: str
) -> bool:
    """
    Compare the nearest network-type boundaries of both assets.

    Execution environments are skipped because they do not segment the network.
    """
    mine = nearest_network_trust_boundary(model, direct_trust_boundary(model, asset_id))
    other = nearest_network_trust_boundary(
        model, direct_trust_boundary(model, other_asset_id)
    )
    return (mine.id if mine else None) == (other.id if other else None)


def is_sharing_same_parent_trust_boundary(
    model: Model, asset_id: str, other_asset_id: str
) -> bool:
    mine = _direct_trust_boundary_id(model, asset_id)
    other = _direct_trust_boundary_id(model, other_asset_id)
    if mine is None and other is None:
        return True
    if mine is None or other is None:
        return False
    if mine == other:
        return True
    my_lineage = set(all_parent_trust_boundary_ids(model, mine))
    return any(
        boundary_id in my_lineage
        for boundary_id in all_parent_trust_boundary_ids(model, other)
    )


def is_across_trust_boundary(model: Model, link: CommunicationLink) -> bool:
    return not is_same_trust_boundary(model, link.source_id, link.target_id)


def is_across_trust_boundary_network_only(model: Model, link: CommunicationLink) -> bool:
    """True when the link enters a different network segment than it leaves."""
    source = nearest_network_trust_boundary(
        model, direct_trust_boundary(model, link.source_id)
    )
    target = nearest_network_trust_boundary(
        model, direct_trust_boundary(model, link.target_id)
    )
    if target is None:
        return False
    return source is None or source.id != target.id


# -- technical assets and links -----------------------------------------


def sorted_technical_asset_ids(model: Model) -> List[str]:
    return sorted(model.technical_assets)


def in_scope_technical_assets(model: Model) -> List[TechnicalAsset]:
    return [
        model.technical_assets[asset_id]
        for asset_id in sorted(model.technical_assets)
        if not model.technical_assets[asset_id].out_of_scope
    ]


def out_of_scope_technical_assets(model: Model) -> List[TechnicalAsset]:
    assets = [a for a in model.technical_assets.values() if a.out_of_scope]
    return sorted(assets, key=lambda a: a.title)


def communication_links_sorted(asset: TechnicalAsset) -> List[CommunicationLink]:
    return sorted(asset.communication_links, key=lambda link: link.title)


def incoming_communication_links(model: Model, asset_id: str) -> List[CommunicationLink]:
    return list(model.incoming_links_by_target_id.get(asset_id, []))


def incoming_communication_links_sorted(
    model: Model, asset_id: str
) -> List[CommunicationLink]:
    return sorted(incoming_communication_links(model, asset_id), key=lambda l: l.title)


def has_direct_connection(model: Model, asset_id: str, other_asset_id: str) -> bool:
    for link in incoming_communication_links(model, asset_id):
        if link.source_id == other_asset_id:
            return True
    for link in incoming_communication_links(model, other_asset_id):
        if link.source_id == asset_id:
            return True
    return False


def _data_assets(model: Model, ids: Iterable[str]) -> List[DataAsset]:
    return [model.data_assets[data_id] for data_id in ids if data_id in model.data_assets]


def highest_confidentiality(model: Model, asset: TechnicalAsset) -> Confidentiality:
    """Max of the asset's own rating and every data asset it processes or stores."""
    result = asset.confidentiality
    for data in _data_assets(model, asset.data_assets_processed + asset.data_assets_stored):
        if data.confidentiality > result:
            result = data.confidentiality
    return result


def highest_integrity(model: Model, asset: TechnicalAsset) -> Criticality:
    result = asset.integrity
    for data in _data_assets(model, asset.data_assets_processed + asset.data_assets_stored):
        if data.integrity > result:
            result = data.integrity
    return result


def highest_availability(model: Model, asset: TechnicalAsset) -> Criticality:
    result = asset.availability
    for data in _data_assets(model, asset.data_assets_processed + asset.data_assets_stored):
        if data.availability > result:
            result = data.availability
    return result


def link_highest_confidentiality(model: Model, link: CommunicationLink) -> Confidentiality:
    result = Confidentiality.PUBLIC
    for data in _data_assets(model, link.data_assets_sent + link.data_assets_received):
        if data.confidentiality > result:
            result = data.confidentiality
    return result


def link_highest_integrity(model: Model, link: CommunicationLink) -> Criticality:
    result = Criticality.ARCHIVE
    for data in _data_assets(model, link.data_assets_sent + link.data_assets_received):
        if data.integrity > result:
            result = data.integrity
    return result


def link_highest_availability(model: Model, link: CommunicationLink) -> Criticality:
    result = Criticality.ARCHIVE
    for data in _data_assets(model, link.data_assets_sent + link.data_assets_received):
        if data.availability > result:
            result = data.availability
    return result


def _assets(model: Model, ids: Sequence[str]) -> List[TechnicalAsset]:
    return [model.technical_assets[a] for a in ids if a in model.technical_assets]


def boundary_highest_confidentiality(
    model: Model, boundary: TrustBoundary
) -> Confidentiality:
    result = Confidentiality.PUBLIC
    inside = recursively_all_technical_asset_ids_inside(model, boundary)
    for asset in _assets(model, inside):
        result = max(result, highest_confidentiality(model, asset))
    return result


def boundary_highest_integrity(model: Model, boundary: TrustBoundary) -> Criticality:
    result = Criticality.ARCHIVE
    inside = recursively_all_technical_asset_ids_inside(model, boundary)
    for asset in _assets(model, inside):
        result = max(result, highest_integrity(model, asset))
    return result


def boundary_highest_availability(model: Model, boundary: TrustBoundary) -> Criticality:
    result = Criticality.ARCHIVE
    inside = recursively_all_technical_asset_ids_inside(model, boundary)
    for asset in _assets(model, inside):
        result = max(result, highest_availability(model, asset))
    return result


def runtime_highest_confidentiality(
    model: Model, runtime: SharedRuntime
) -> Confidentiality:
    result = Confidentiality.PUBLIC
    for asset in _assets(model, runtime.technical_assets_running):
        result = max(result, highest_confidentiality(model, asset))
    return result


def runtime_highest_integrity(model: Model, runtime: SharedRuntime) -> Criticality:
    result = Criticality.ARCHIVE
    for asset in _assets(model, runtime.technical_assets_running):
        result = max(result, highest_integrity(model, asset))
    return result


def runtime_highest_availability(model: Model, runtime: SharedRuntime) -> Criticality:
    result = Criticality.ARCHIVE
    for asset in _assets(model, runtime.technical_assets_running):
        result = max(result, highest_availability(model, asset))
    return result


def technical_asset_with_highest_raa(
    model: Model, runtime: SharedRuntime
) -> Optional[TechnicalAsset]:
    result: Optional[TechnicalAsset] = None
    for asset in _assets(model, sorted(runtime.technical_assets_running)):
        if result is None or asset.raa > result.raa:
            result = asset
    return result


def highest_sensitivity_score(asset: TechnicalAsset) -> int:
    """Attacker attractiveness of the asset's own CIA ratings."""
    return (
        CONFIDENTIALITY_ATTACKER_ATTRACTIVENESS[asset.confidentiality]
        + CRITICALITY_ATTACKER_ATTRACTIVENESS[asset.integrity]
        + CRITICALITY_ATTACKER_ATTRACTIVENESS[asset.availability]
    )


# -- data assets --------------------------------------------------------


def processed_by(model: Model, data_asset: DataAsset) -> List[TechnicalAsset]:
    assets = [
        a for a in model.technical_assets.values() if data_asset.id in a.data_assets_processed
    ]
    return sorted(assets, key=lambda a: a.title)


def stored_by(model: Model, data_asset: DataAsset) -> List[TechnicalAsset]:
    assets = [
        a for a in model.technical_assets.values() if data_asset.id in a.data_assets_stored
    ]
    return sorted(assets, key=lambda a: a.title)


def sent_via(model: Model, data_asset: DataAsset) -> List[CommunicationLink]:
    links = [
        link
        for link in model.communication_links.values()
        if data_asset.id in link.data_assets_sent
    ]
    return sorted(links, key=lambda link: link.title)


def received_via(model: Model, data_asset: DataAsset) -> List[CommunicationLink]:
    links = [
        link
        for link in model.communication_links.values()
        if data_asset.id in link.data_assets_received
    ]
    return sorted(links, key=lambda link: link.title)


def _all_risks(model: Model) -> List[Risk]:
    result: List[Risk] = []
    for category_id in sorted(model.generated_risks_by_category):
        result.extend(model.generated_risks_by_category[category_id])
    return result


def _risk_touches_data_asset(model: Model, risk: Risk, data_asset: DataAsset) -> bool:
    for asset_id in risk.data_breach_technical_asset_ids:
        asset = model.technical_assets.get(asset_id)
        if asset is None:
            continue
        if (
            data_asset.id in asset.data_assets_processed
            or data_asset.id in asset.data_assets_stored
        ):
            return True
    return False


def identified_data_breach_risks(
    model: Model, data_asset: DataAsset, still_at_risk_only: bool = False
) -> List[Risk]:
    """Risks whose breach-implicated assets process or store the data asset."""
    return [
        risk
        for risk in _all_risks(model)
        if (not still_at_risk_only or risk.risk_status.is_still_at_risk)
        and _risk_touches_data_asset(model, risk, data_asset)
    ]


def identified_data_breach_probability(
    model: Model, data_asset: DataAsset, still_at_risk_only: bool = False
) -> DataBreachProbability:
    result = DataBreachProbability.IMPROBABLE
    for risk in identified_data_breach_risks(model, data_asset, still_at_risk_only):
        if risk.data_breach_probability > result:
            result = risk.data_breach_probability
    return result


# -- categories and risks -----------------------------------------------


def risk_category(model: Model, category_id: str) -> Optional[RiskCategory]:
    for catalog in (
        model.individual_risk_categories,
        model.built_in_risk_categories,
        model.custom_risk_categories,
    ):
        if category_id in catalog:
            return catalog[category_id]
    return None


def generated_risks_of_technical_asset(model: Model, asset_id: str) -> List[Risk]:
    return [
        risk for risk in _all_risks(model) if risk.most_relevant_technical_asset_id == asset_id
    ]


def risks_by_technical_asset(model: Model) -> Dict[str, List[Risk]]:
    result: Dict[str, List[Risk]] = {asset_id: [] for asset_id in model.technical_assets}
    for risk in _all_risks(model):
        asset_id = risk.most_relevant_technical_asset_id
        if asset_id in result:
            result[asset_id].append(risk)
    return result
