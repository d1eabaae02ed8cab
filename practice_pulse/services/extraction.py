"""
Structured Extraction Adapter

Best-effort extraction of typed values from free-text CRM fields. This is the
only place in the engine that text-mines descriptions; everything downstream
consumes the typed results.

Extractions:
1. Advisor name from a household description, using label conventions in
   priority order: "Assigned Advisor:", "Advisor Name:", "Advisor:",
   "Rep:" / "Representative:", "Assigned To:".
2. Revenue directive from a household description:
   "Revenue Config: avgAum=3000000 bps=90 conversion=0.70 pipelineAum=2000000"
   Any subset of keys may be present. The first household carrying the
   directive wins for the whole computation.

The revenue directive exists for CRM orgs without a structured settings store;
callers that have typed overrides should pass RevenueOverrides directly.
"""

import re
from typing import Dict, Iterable, List, Optional, Pattern

from practice_pulse.models import HouseholdRecord, RevenueOverrides


# =============================================================================
# Advisor Label Patterns
# =============================================================================

# Order matters: "Advisor:" would also match inside "Assigned Advisor:".
ADVISOR_LABEL_PATTERNS: List[Pattern[str]] = [
    re.compile(r"Assigned Advisor:[ \t]*(.+)", re.IGNORECASE),
    re.compile(r"Advisor Name:[ \t]*(.+)", re.IGNORECASE),
    re.compile(r"Advisor:[ \t]*(.+)", re.IGNORECASE),
    re.compile(r"Rep(?:resentative)?:[ \t]*(.+)", re.IGNORECASE),
    re.compile(r"Assigned To:[ \t]*(.+)", re.IGNORECASE),
]

# =============================================================================
# Revenue Directive Patterns
# =============================================================================

REVENUE_DIRECTIVE_PATTERN: Pattern[str] = re.compile(r"Revenue Config:[ \t]*(.+)", re.IGNORECASE)

_AVG_AUM_PATTERN = re.compile(r"avgAum=(\d+)")
_BPS_PATTERN = re.compile(r"bps=(\d+)")
_CONVERSION_PATTERN = re.compile(r"conversion=(\d+(?:\.\d+)?|\.\d+)")
_PIPELINE_AUM_PATTERN = re.compile(r"pipelineAum=(\d+)")


def parse_advisor_from_description(description: Optional[str]) -> Optional[str]:
    """
    Parse an advisor name from a household description.

    Each label pattern is tried in priority order; the value is the rest of
    the first matching line, trimmed. A label with an empty value falls
    through to the next pattern.

    Args:
        description: Free-text household description (may be None)

    Returns:
        Advisor name, or None when no label carries a value
    """
    if not description:
        return None

    for pattern in ADVISOR_LABEL_PATTERNS:
        match = pattern.search(description)
        if match:
            name = match.group(1).splitlines()[0].strip()
            if name:
                return name

    return None


def parse_revenue_directive(description: Optional[str]) -> Optional[RevenueOverrides]:
    """
    Parse a "Revenue Config:" directive from a household description.

    Args:
        description: Free-text household description (may be None)

    Returns:
        RevenueOverrides with the keys present in the directive, or None when
        the description carries no directive. A directive whose conversion
        rate falls outside [0, 1] keeps the other keys and drops that one.
    """
    if not description:
        return None

    match = REVENUE_DIRECTIVE_PATTERN.search(description)
    if not match:
        return None

    config = match.group(1)
    values: Dict[str, float] = {}

    avg_aum = _AVG_AUM_PATTERN.search(config)
    if avg_aum:
        values["avgAumPerHousehold"] = int(avg_aum.group(1))

    bps = _BPS_PATTERN.search(config)
    if bps:
        values["feeScheduleBps"] = int(bps.group(1))

    conversion = _CONVERSION_PATTERN.search(config)
    if conversion:
        rate = float(conversion.group(1))
        if 0.0 <= rate <= 1.0:
            values["pipelineConversionRate"] = rate

    pipeline_aum = _PIPELINE_AUM_PATTERN.search(config)
    if pipeline_aum:
        values["pipelineAvgAum"] = int(pipeline_aum.group(1))

    return RevenueOverrides(**values)


def extract_revenue_directive(households: Iterable[HouseholdRecord]) -> Optional[RevenueOverrides]:
    """
    Return the revenue directive of the first household that carries one.

    Args:
        households: Household records in input order

    Returns:
        RevenueOverrides from the first directive found, or None
    """
    for household in households:
        overrides = parse_revenue_directive(household.description)
        if overrides is not None:
            return overrides
    return None


def extract_household_hints(households: Iterable[HouseholdRecord]) -> List[Optional[str]]:
    """
    Parse the advisor label of every household.

    Returns:
        One entry per household, in input order: the parsed advisor name, or
        None when the description carries no advisor label
    """
    return [parse_advisor_from_description(household.description) for household in households]
