"""
Model assembly and validation.

Turns decoded input records into a fully linked :class:`Model`. Every
reference is resolved while its owning entity is built, and the first bad
reference aborts assembly with a :class:`ModelValidationError` naming the
entity title, the field and the offending value.
"""

from __future__ import annotations

import datetime
import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence, Set, Type

from risk_thinker.constants import ID_PATTERN, TRACKING_DATE_FORMAT
from risk_thinker.models import (
    CommunicationLink,
    DataAsset,
    Model,
    Risk,
    RiskCategory,
    RiskTracking,
    SharedRuntime,
    TechnicalAsset,
    TrustBoundary,
)
from risk_thinker.schemas import (
    DataAssetInput,
    ModelInput,
    RiskCategoryInput,
    TechnicalAssetInput,
)
from risk_thinker.severity import SeverityWeights, calculate_severity
from risk_thinker.tracking import create_synthetic_id
from risk_thinker.vocabulary import (
    STRIDE,
    Authentication,
    Authorization,
    Confidentiality,
    Criticality,
    DataBreachProbability,
    DataFormat,
    EncryptionStyle,
    Protocol,
    Quantity,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskFunction,
    RiskSeverity,
    RiskStatus,
    TechnicalAssetMachine,
    TechnicalAssetSize,
    TechnicalAssetTechnology,
    TechnicalAssetType,
    TrustBoundaryType,
    Usage,
    Vocabulary,
)

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")


class ModelValidationError(ValueError):
    """Raised when the input model is inconsistent or references unknown ids."""


def lower_case_and_trim(tags: Iterable[str]) -> List[str]:
    return [str(tag).strip().lower() for tag in tags or []]


def with_default(value: Optional[str], default: str) -> str:
    value = (value or "").strip()
    return value if value else default


def create_communication_link_id(source_asset_id: str, title: str) -> str:
    """Derive a link id from its source asset id and a slug of its title."""
    slug = _NON_ALNUM.sub("-", title.lower()).strip("- ")
    return f"{source_asset_id}>{slug}"


def check_id_syntax(entity_id: str) -> None:
    if not ID_PATTERN.fullmatch(entity_id or ""):
        raise ModelValidationError(
            "invalid id syntax used (only letters, numbers, and hyphen allowed): "
            + str(entity_id)
        )


def _parse_value(
    vocabulary: Type[Vocabulary],
    value: Optional[str],
    field_name: str,
    where: str,
    default: Optional[Vocabulary] = None,
):
    try:
        return vocabulary.parse(value, default)
    except ValueError:
        raise ModelValidationError(
            f"unknown '{field_name}' value of {where}: {value}"
        ) from None


def _parse_date(value: str, message: str) -> Optional[datetime.date]:
    if not value:
        return None
    try:
        return datetime.datetime.strptime(value.strip(), TRACKING_DATE_FORMAT).date()
    except ValueError:
        raise ModelValidationError(message) from None


class _Assembler:
    """Single-use builder holding the partially assembled model."""

    def __init__(
        self,
        model_input: ModelInput,
        supported_tags: Iterable[str],
        severity_weights: Optional[SeverityWeights] = None,
    ):
        self.input = model_input
        self.model = Model(severity_weights=severity_weights)
        self.tag_whitelist: Set[str] = set(
            lower_case_and_trim(model_input.tags_available)
        )
        self.tag_whitelist.update(lower_case_and_trim(supported_tags))

    # -- reference checks -------------------------------------------------

    def check_tags(self, tags: Iterable[str], where: str) -> List[str]:
        used: List[str] = []
        for tag in lower_case_and_trim(tags):
            if tag not in self.tag_whitelist:
                raise ModelValidationError(
                    f"missing referenced tag in overall tag list at {where}: {tag}"
                )
            used.append(tag)
        return used

    def check_data_asset_target_exists(self, referenced: str, where: str) -> str:
        if referenced not in self.model.data_assets:
            raise ModelValidationError(
                f"missing referenced data asset target at {where}: {referenced}"
            )
        return referenced

    def check_technical_asset_exists(self, referenced: str, where: str) -> str:
        if referenced not in self.model.technical_assets:
            raise ModelValidationError(
                f"missing referenced technical asset target at {where}: {referenced}"
            )
        return referenced

    def check_communication_link_exists(self, referenced: str, where: str) -> str:
        if referenced not in self.model.communication_links:
            raise ModelValidationError(
                f"missing referenced communication link at {where}: {referenced}"
            )
        return referenced

    def check_trust_boundary_exists(self, referenced: str, where: str) -> str:
        if referenced not in self.model.trust_boundaries:
            raise ModelValidationError(
                f"missing referenced trust boundary at {where}: {referenced}"
            )
        return referenced

    def check_shared_runtime_exists(self, referenced: str, where: str) -> str:
        if referenced not in self.model.shared_runtimes:
            raise ModelValidationError(
                f"missing referenced shared runtime at {where}: {referenced}"
            )
        return referenced

    @staticmethod
    def check_unique(entity_id: str, existing: Dict[str, object]) -> None:
        check_id_syntax(entity_id)
        if entity_id in existing:
            raise ModelValidationError(f"duplicate id used: {entity_id}")

    # -- entity kinds -----------------------------------------------------

    def assemble_overview(self) -> None:
        model = self.model
        model.title = self.input.title
        model.author = self.input.author.name
        model.management_summary_comment = self.input.management_summary_comment
        model.tags_available = lower_case_and_trim(self.input.tags_available)
        try:
            model.business_criticality = Criticality.parse(
                self.input.business_criticality, Criticality.IMPORTANT
            )
        except ValueError:
            raise ModelValidationError(
                "unknown 'business_criticality' value of application: "
                + self.input.business_criticality
            ) from None
        model.date = _parse_date(
            self.input.date, "unable to parse 'date' value of model file"
        )

    def assemble_data_assets(self) -> None:
        for title, raw in sorted(self.input.data_assets.items()):
            self.model.data_assets[raw.id] = self._data_asset(title, raw)

    def _data_asset(self, title: str, raw: DataAssetInput) -> DataAsset:
        where = f"data asset '{title}'"
        asset = DataAsset(
            id=raw.id,
            title=title,
            description=with_default(raw.description, title),
            usage=_parse_value(Usage, raw.usage, "usage", where, Usage.BUSINESS),
            quantity=_parse_value(Quantity, raw.quantity, "quantity", where),
            confidentiality=_parse_value(
                Confidentiality, raw.confidentiality, "confidentiality", where
            ),
            integrity=_parse_value(Criticality, raw.integrity, "integrity", where),
            availability=_parse_value(
                Criticality, raw.availability, "availability", where
            ),
            origin=raw.origin,
            owner=raw.owner,
            justification_cia_rating=raw.justification_cia_rating,
        )
        self.check_unique(raw.id, self.model.data_assets)
        asset.tags = self.check_tags(raw.tags, where)
        return asset

    def assemble_technical_assets(self) -> None:
        for title, raw in sorted(self.input.technical_assets.items()):
            asset = self._technical_asset(title, raw)
            self.model.technical_assets[asset.id] = asset

        # link targets may be declared after their source, so check once all exist
        for asset_id in sorted(self.model.technical_assets):
            asset = self.model.technical_assets[asset_id]
            for link in asset.communication_links:
                self.check_technical_asset_exists(
                    link.target_id,
                    f"communication link '{link.title}' of technical asset '{asset.title}'",
                )

    def _technical_asset(self, title: str, raw: TechnicalAssetInput) -> TechnicalAsset:
        where = f"technical asset '{title}'"
        asset = TechnicalAsset(
            id=raw.id,
            title=title,
            description=with_default(raw.description, title),
            usage=_parse_value(Usage, raw.usage, "usage", where, Usage.BUSINESS),
            data_assets_processed=[
                self.check_data_asset_target_exists(str(ref), where)
                for ref in raw.data_assets_processed
            ],
            data_assets_stored=[
                self.check_data_asset_target_exists(str(ref), where)
                for ref in raw.data_assets_stored
            ],
            type=_parse_value(TechnicalAssetType, raw.type, "type", where),
            size=_parse_value(TechnicalAssetSize, raw.size, "size", where),
            technology=_parse_value(
                TechnicalAssetTechnology, raw.technology, "technology", where
            ),
            encryption=_parse_value(
                EncryptionStyle, raw.encryption, "encryption", where, EncryptionStyle.NONE
            ),
            machine=_parse_value(TechnicalAssetMachine, raw.machine, "machine", where),
            confidentiality=_parse_value(
                Confidentiality, raw.confidentiality, "confidentiality", where
            ),
            integrity=_parse_value(Criticality, raw.integrity, "integrity", where),
            availability=_parse_value(
                Criticality, raw.availability, "availability", where
            ),
            data_formats_accepted=[
                _parse_value(DataFormat, name, "data_formats_accepted", where)
                for name in raw.data_formats_accepted
            ],
            internet=raw.internet,
            multi_tenant=raw.multi_tenant,
            redundant=raw.redundant,
            custom_developed_parts=raw.custom_developed_parts,
            used_as_client_by_human=raw.used_as_client_by_human,
            out_of_scope=raw.out_of_scope,
            justification_out_of_scope=raw.justification_out_of_scope,
            owner=raw.owner,
            justification_cia_rating=raw.justification_cia_rating,
            raa=raw.raa,
        )

        for link_title, raw_link in sorted(raw.communication_links.items()):
            link_where = f"technical asset '{title}' communication link '{link_title}'"
            data_where = f"communication link '{link_title}' of technical asset '{title}'"
            link = CommunicationLink(
                id=create_communication_link_id(raw.id, link_title),
                source_id=raw.id,
                target_id=raw_link.target,
                title=link_title,
                description=with_default(raw_link.description, link_title),
                authentication=_parse_value(
                    Authentication, raw_link.authentication, "authentication", link_where
                ),
                authorization=_parse_value(
                    Authorization, raw_link.authorization, "authorization", link_where
                ),
                usage=_parse_value(
                    Usage, raw_link.usage, "usage", link_where, Usage.BUSINESS
                ),
                protocol=_parse_value(Protocol, raw_link.protocol, "protocol", link_where),
                vpn=raw_link.vpn,
                ip_filtered=raw_link.ip_filtered,
                readonly=raw_link.readonly,
                data_assets_sent=[
                    self.check_data_asset_target_exists(str(ref), data_where)
                    for ref in raw_link.data_assets_sent
                ],
                data_assets_received=[
                    self.check_data_asset_target_exists(str(ref), data_where)
                    for ref in raw_link.data_assets_received
                ],
                diagram_tweak_weight=max(raw_link.diagram_tweak_weight, 1),
                diagram_tweak_constraint=not raw_link.diagram_tweak_constraint,
            )
            link.tags = self.check_tags(raw_link.tags, data_where)
            if link.id in self.model.communication_links:
                raise ModelValidationError(f"duplicate id used: {link.id}")
            asset.communication_links.append(link)
            self.model.communication_links[link.id] = link

        self.check_unique(raw.id, self.model.technical_assets)
        asset.tags = self.check_tags(raw.tags, where)
        return asset

    def assemble_trust_boundaries(self) -> None:
        placed: Set[str] = set()
        for title, raw in sorted(self.input.trust_boundaries.items()):
            inside: List[str] = []
            for asset_id in raw.technical_assets_inside:
                asset_id = str(asset_id)
                if asset_id not in self.model.technical_assets:
                    raise ModelValidationError(
                        f"missing referenced technical asset {asset_id} "
                        f"at trust boundary '{title}'"
                    )
                if asset_id in placed:
                    raise ModelValidationError(
                        f"referenced technical asset {asset_id} at trust boundary "
                        f"'{title}' is modeled in multiple trust boundaries"
                    )
                placed.add(asset_id)
                inside.append(asset_id)

            where = f"trust boundary '{title}'"
            boundary = TrustBoundary(
                id=raw.id,
                title=title,
                description=with_default(raw.description, title),
                type=_parse_value(TrustBoundaryType, raw.type, "type", where),
                technical_assets_inside=inside,
                trust_boundaries_nested=[str(n) for n in raw.trust_boundaries_nested],
            )
            boundary.tags = self.check_tags(raw.tags, where)
            self.check_unique(raw.id, self.model.trust_boundaries)
            self.model.trust_boundaries[boundary.id] = boundary

        check_trust_boundary_nesting(self.model.trust_boundaries)

    def assemble_shared_runtimes(self) -> None:
        for title, raw in sorted(self.input.shared_runtimes.items()):
            where = f"shared runtime '{title}'"
            runtime = SharedRuntime(
                id=raw.id,
                title=title,
                description=with_default(raw.description, title),
                technical_assets_running=[
                    self.check_technical_asset_exists(str(ref), where)
                    for ref in raw.technical_assets_running
                ],
            )
            runtime.tags = self.check_tags(raw.tags, where)
            self.check_unique(raw.id, self.model.shared_runtimes)
            self.model.shared_runtimes[runtime.id] = runtime

    def assemble_individual_risk_categories(self) -> None:
        for title, raw in sorted(self.input.individual_risk_categories.items()):
            category = self._individual_category(title, raw)
            self.check_unique(category.id, self.model.individual_risk_categories)
            self.model.individual_risk_categories[category.id] = category
            for risk_title, raw_risk in sorted(raw.risks_identified.items()):
                risk = self._individual_risk(category, risk_title, raw_risk)
                self.model.generated_risks_by_category.setdefault(
                    category.id, []
                ).append(risk)

    def _individual_category(self, title: str, raw: RiskCategoryInput) -> RiskCategory:
        where = f"individual risk category '{title}'"
        return RiskCategory(
            id=raw.id,
            title=title,
            description=with_default(raw.description, title),
            impact=raw.impact,
            asvs=raw.asvs,
            cheat_sheet=raw.cheat_sheet,
            action=raw.action,
            mitigation=raw.mitigation,
            check=raw.check,
            detection_logic=raw.detection_logic,
            risk_assessment=raw.risk_assessment,
            false_positives=raw.false_positives,
            function=_parse_value(RiskFunction, raw.function, "function", where),
            stride=_parse_value(STRIDE, raw.stride, "stride", where),
            model_failure_possible_reason=raw.model_failure_possible_reason,
            cwe=raw.cwe,
        )

    def _individual_risk(self, category: RiskCategory, title: str, raw) -> Risk:
        where = f"individual risk instance '{title}'"
        ref_where = f"individual risk '{title}'"
        likelihood = _parse_value(
            RiskExploitationLikelihood,
            raw.exploitation_likelihood,
            "exploitation_likelihood",
            where,
        )
        impact = _parse_value(
            RiskExploitationImpact, raw.exploitation_impact, "exploitation_impact", where
        )
        if raw.severity:
            severity = _parse_value(RiskSeverity, raw.severity, "severity", where)
        else:
            severity = calculate_severity(likelihood, impact, self.model.severity_weights)

        data_asset_id = raw.most_relevant_data_asset or None
        if data_asset_id:
            self.check_data_asset_target_exists(data_asset_id, ref_where)
        technical_asset_id = raw.most_relevant_technical_asset or None
        if technical_asset_id:
            self.check_technical_asset_exists(technical_asset_id, ref_where)
        link_id = raw.most_relevant_communication_link or None
        if link_id:
            self.check_communication_link_exists(link_id, ref_where)
        boundary_id = raw.most_relevant_trust_boundary or None
        if boundary_id:
            self.check_trust_boundary_exists(boundary_id, ref_where)
        runtime_id = raw.most_relevant_shared_runtime or None
        if runtime_id:
            self.check_shared_runtime_exists(runtime_id, ref_where)

        breach_where = f"data breach technical assets of individual risk '{title}'"
        return Risk(
            category_id=category.id,
            severity=severity,
            exploitation_likelihood=likelihood,
            exploitation_impact=impact,
            title=title,
            synthetic_id=create_synthetic_id(
                category.id,
                technical_asset_id=technical_asset_id,
                communication_link_id=link_id,
                trust_boundary_id=boundary_id,
                shared_runtime_id=runtime_id,
                data_asset_id=data_asset_id,
            ),
            most_relevant_data_asset_id=data_asset_id,
            most_relevant_technical_asset_id=technical_asset_id,
            most_relevant_communication_link_id=link_id,
            most_relevant_trust_boundary_id=boundary_id,
            most_relevant_shared_runtime_id=runtime_id,
            data_breach_probability=_parse_value(
                DataBreachProbability,
                raw.data_breach_probability,
                "data_breach_probability",
                where,
                DataBreachProbability.IMPROBABLE,
            ),
            data_breach_technical_asset_ids=[
                self.check_technical_asset_exists(str(ref), breach_where)
                for ref in raw.data_breach_technical_assets
            ],
        )

    def assemble_risk_tracking(self) -> None:
        for key, raw in sorted(self.input.risk_tracking.items()):
            synthetic_risk_id = key.strip()
            date = _parse_date(
                raw.date,
                f"unable to parse 'date' of risk tracking '{synthetic_risk_id}': {raw.date}",
            )
            try:
                status = RiskStatus.parse(raw.status, RiskStatus.UNCHECKED)
            except ValueError:
                raise ModelValidationError(
                    f"unknown 'status' value of risk tracking '{synthetic_risk_id}': "
                    f"{raw.status}"
                ) from None
            ledger = (
                self.model.wildcard_risk_tracking
                if "*" in synthetic_risk_id
                else self.model.risk_tracking
            )
            ledger[synthetic_risk_id] = RiskTracking(
                synthetic_risk_id=synthetic_risk_id,
                status=status,
                justification=raw.justification,
                ticket=raw.ticket,
                checked_by=raw.checked_by,
                date=date,
            )


def check_trust_boundary_nesting(boundaries: Dict[str, TrustBoundary]) -> None:
    """
    Verify nested trust boundaries form a forest.

    Every nested id must resolve, a boundary may be nested in at most one
    parent, and following nested lists must never lead back to a boundary
    already on the current path.
    """
    parents: Dict[str, str] = {}
    for boundary_id in sorted(boundaries):
        for nested_id in boundaries[boundary_id].trust_boundaries_nested:
            if nested_id not in boundaries:
                raise ModelValidationError(
                    f"missing referenced nested trust boundary: {nested_id}"
                )
            previous = parents.setdefault(nested_id, boundary_id)
            if previous != boundary_id:
                raise ModelValidationError(
                    f"trust boundary {nested_id} is nested in multiple trust "
                    f"boundaries: {previous}, {boundary_id}"
                )

    done: Set[str] = set()
    path: List[str] = []

    def visit(boundary_id: str) -> None:
        if boundary_id in done:
            return
        if boundary_id in path:
            cycle = path[path.index(boundary_id):] + [boundary_id]
            raise ModelValidationError(
                "trust boundary nesting cycle detected: " + " -> ".join(cycle)
            )
        path.append(boundary_id)
        for nested_id in boundaries[boundary_id].trust_boundaries_nested:
            visit(nested_id)
        path.pop()
        done.add(boundary_id)

    for boundary_id in sorted(boundaries):
        visit(boundary_id)


def build_derived_indices(model: Model) -> Model:
    """(Re)build the incoming-link and containing-boundary lookups from scratch."""
    model.communication_links = {}
    model.incoming_links_by_target_id = {}
    for asset_id in sorted(model.technical_assets):
        for link in model.technical_assets[asset_id].communication_links:
            model.communication_links[link.id] = link
            model.incoming_links_by_target_id.setdefault(link.target_id, []).append(
                link
            )

    model.direct_containing_trust_boundary_by_asset_id = {}
    for boundary_id in sorted(model.trust_boundaries):
        boundary = model.trust_boundaries[boundary_id]
        for asset_id in boundary.technical_assets_inside:
            model.direct_containing_trust_boundary_by_asset_id[asset_id] = boundary
    return model


def assemble_model(
    model_input: ModelInput,
    rules: Sequence = (),
    severity_weights: Optional[SeverityWeights] = None,
) -> Model:
    """
    Assemble and validate a model.

    Args:
        model_input: Decoded model file
        rules: Risk generators whose categories and supported tags are
            registered with the model (their tags become valid input tags)
        severity_weights: Weight tables for severity; defaults when omitted

    Returns:
        Fully linked Model

    Raises:
        ModelValidationError: on the first schema or reference error
    """
    supported_tags: List[str] = []
    for rule in rules:
        supported_tags.extend(rule.supported_tags)

    assembler = _Assembler(model_input, supported_tags, severity_weights)
    assembler.assemble_overview()
    assembler.assemble_data_assets()
    assembler.assemble_technical_assets()
    assembler.assemble_trust_boundaries()
    assembler.assemble_shared_runtimes()
    assembler.assemble_individual_risk_categories()
    assembler.assemble_risk_tracking()

    model = build_derived_indices(assembler.model)
    for rule in rules:
        if rule.is_built_in:
            model.built_in_risk_categories[rule.category.id] = rule.category
        else:
            model.custom_risk_categories[rule.category.id] = rule.category

    logger.debug(
        "Assembled model '%s': %d data assets, %d technical assets, "
        "%d communication links, %d trust boundaries, %d shared runtimes",
        model.title,
        len(model.data_assets),
        len(model.technical_assets),
        len(model.communication_links),
        len(model.trust_boundaries),
        len(model.shared_runtimes),
    )
    return model
