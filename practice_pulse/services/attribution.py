"""
Advisor Attribution Service

Produces a total mapping from every household to exactly one advisor name.

Resolution order per household:
1. Advisor-of-record field, but only when the input as a whole shows diverse
   ownership (more than `diversity_threshold` distinct non-empty values).
   A single value across every household is an integration account, not an
   advisor.
2. Advisor name parsed from the household description (extraction adapter).
3. Round-robin over the injected roster. The counter is shared by every
   household that reaches this branch, in input order.

An empty roster yields the "Unassigned" bucket.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from practice_pulse.models import AttributionSource, HouseholdRecord
from practice_pulse.services.extraction import extract_household_hints


logger = logging.getLogger(__name__)

UNASSIGNED = "Unassigned"


@dataclass
class AdvisorAttribution:
    """
    Attribution result aligned with the input household list.

    Attributes:
        advisors: Advisor name per household (same order as the input)
        sources: How each advisor was determined
        used_advisor_field: Whether ownership was diverse enough to trust
            the advisor-of-record field
    """
    advisors: List[str] = field(default_factory=list)
    sources: List[AttributionSource] = field(default_factory=list)
    used_advisor_field: bool = False

    def advisor_for(self, household_index: Optional[int]) -> str:
        """Advisor of a household index; unknown households are Unassigned."""
        if household_index is None:
            return UNASSIGNED
        return self.advisors[household_index]

    def by_household_id(self, households: Sequence[HouseholdRecord]) -> Dict[str, str]:
        """household id -> advisor, first occurrence wins for duplicate ids."""
        mapping: Dict[str, str] = {}
        for household, advisor in zip(households, self.advisors):
            mapping.setdefault(household.id, advisor)
        return mapping

    def summary(self) -> Dict[AttributionSource, int]:
        """Household count per attribution source."""
        counts: Dict[AttributionSource, int] = {source: 0 for source in AttributionSource}
        for source in self.sources:
            counts[source] += 1
        return counts


def has_diverse_ownership(households: Sequence[HouseholdRecord], threshold: int = 1) -> bool:
    """True when more than `threshold` distinct non-empty advisor names appear."""
    distinct = {
        h.advisorName.strip()
        for h in households
        if h.advisorName and h.advisorName.strip()
    }
    return len(distinct) > threshold


def attribute_advisors(
    households: Sequence[HouseholdRecord],
    roster: Sequence[str],
    diversity_threshold: int = 1,
) -> AdvisorAttribution:
    """
    Attribute every household to exactly one advisor.

    Args:
        households: Household records in input order
        roster: Known advisors for the round-robin fallback
        diversity_threshold: Distinct advisor-field values that must be
            exceeded before the field is trusted

    Returns:
        AdvisorAttribution aligned with `households`
    """
    result = AdvisorAttribution(
        used_advisor_field=has_diverse_ownership(households, diversity_threshold)
    )
    hints = extract_household_hints(households)
    rr_index = 0

    for household, hint in zip(households, hints):
        field_value = (household.advisorName or "").strip()

        if result.used_advisor_field and field_value:
            result.advisors.append(field_value)
            result.sources.append(AttributionSource.ADVISOR_FIELD)
        elif hint:
            result.advisors.append(hint)
            result.sources.append(AttributionSource.DESCRIPTION)
        elif roster:
            result.advisors.append(roster[rr_index % len(roster)])
            result.sources.append(AttributionSource.ROUND_ROBIN)
            rr_index += 1
        else:
            result.advisors.append(UNASSIGNED)
            result.sources.append(AttributionSource.UNASSIGNED)

    logger.debug(
        f"Attributed {len(households)} households "
        f"(advisor field {'trusted' if result.used_advisor_field else 'ignored'}, "
        f"{rr_index} round-robin)"
    )
    return result
