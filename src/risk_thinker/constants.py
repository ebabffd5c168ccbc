"""
Lookup tables shared by severity calculation, scoring and validation
"""

import re
from typing import Dict, List, Tuple

from risk_thinker.vocabulary import (
    Confidentiality,
    Criticality,
    RiskExploitationImpact,
    RiskExploitationLikelihood,
    RiskSeverity,
)

LIKELIHOOD_WEIGHTS: Dict[RiskExploitationLikelihood, int] = {
    RiskExploitationLikelihood.UNLIKELY: 1,
    RiskExploitationLikelihood.LIKELY: 2,
    RiskExploitationLikelihood.VERY_LIKELY: 3,
    RiskExploitationLikelihood.FREQUENT: 4,
}

IMPACT_WEIGHTS: Dict[RiskExploitationImpact, int] = {
    RiskExploitationImpact.LOW: 1,
    RiskExploitationImpact.MEDIUM: 2,
    RiskExploitationImpact.HIGH: 3,
    RiskExploitationImpact.VERY_HIGH: 4,
}

# Upper bound (inclusive) of likelihood*impact for each tier; anything above is critical.
SEVERITY_BREAKPOINTS: List[Tuple[int, RiskSeverity]] = [
    (1, RiskSeverity.LOW),
    (3, RiskSeverity.MEDIUM),
    (8, RiskSeverity.ELEVATED),
    (12, RiskSeverity.HIGH),
]

CONFIDENTIALITY_ATTACKER_ATTRACTIVENESS: Dict[Confidentiality, int] = {
    Confidentiality.PUBLIC: 8,
    Confidentiality.INTERNAL: 13,
    Confidentiality.RESTRICTED: 21,
    Confidentiality.CONFIDENTIAL: 34,
    Confidentiality.STRICTLY_CONFIDENTIAL: 55,
}

CRITICALITY_ATTACKER_ATTRACTIVENESS: Dict[Criticality, int] = {
    Criticality.ARCHIVE: 5,
    Criticality.OPERATIONAL: 8,
    Criticality.IMPORTANT: 13,
    Criticality.CRITICAL: 21,
    Criticality.MISSION_CRITICAL: 34,
}

ID_PATTERN = re.compile(r"^[a-zA-Z0-9\-]+$")

SYNTHETIC_ID_SEPARATOR = "@"

# A wildcard segment never spans a separator.
WILDCARD_SEGMENT = "[^@]+"

TRACKING_DATE_FORMAT = "%Y-%m-%d"

CUSTOM_RULE_GENERATE_ARG = "generate-risks"
CUSTOM_RULE_INFO_ARG = "get-info"
DEFAULT_CUSTOM_RULE_TIMEOUT_SECONDS = 60
