"""
Health Score Calculator

Composite 0-100 practice health score from four weighted sub-scores:

| Factor                 | Sub-score                                           | Weight |
|------------------------|-----------------------------------------------------|--------|
| Compliance Coverage    | reviewed households / households                    | 30     |
| DocuSign Velocity      | 1 - (unsigned older than 7 days / unsigned)         | 25     |
| Tasks On Time          | 1 - min(overdue / (open + completed), 1)            | 25     |
| Meeting Coverage (90d) | households with a meeting note in 90 days / total   | 20     |

Empty denominators score 1.0 (nothing to be late on). Tasks On Time is 1.0
when no task has completed yet, since a brand new book has no track record.
Weights come from Settings and are validated to sum to 100.
"""

from typing import List, Tuple

from practice_pulse.core.config import Settings
from practice_pulse.models import HealthFactor
from practice_pulse.services.classification import (
    ClassifiedRecords,
    clamp_score,
    safe_ratio,
)


COMPLIANCE_LABEL = "Compliance Coverage"
DOCUSIGN_LABEL = "DocuSign Velocity"
TASKS_LABEL = "Tasks On Time"
MEETINGS_LABEL = "Meeting Coverage (90d)"


def compliance_coverage(records: ClassifiedRecords) -> float:
    return safe_ratio(len(records.reviewed_households), len(records.households))


def docusign_velocity(records: ClassifiedRecords, stale_days: int = 7) -> float:
    unsigned = records.unsigned
    if not unsigned:
        return 1.0
    stale = sum(1 for ct in unsigned if ct.age_days > stale_days)
    return 1.0 - stale / len(unsigned)


def tasks_on_time(records: ClassifiedRecords) -> float:
    if not records.completed_tasks:
        return 1.0
    total = len(records.open_tasks) + len(records.completed_tasks)
    return 1.0 - min(len(records.overdue) / total, 1.0)


def meeting_coverage(records: ClassifiedRecords) -> float:
    return safe_ratio(len(records.met_recently), len(records.households))


def calculate_health_score(
    records: ClassifiedRecords,
    settings: Settings,
) -> Tuple[int, List[HealthFactor]]:
    """
    Calculate the composite health score and its breakdown.

    Args:
        records: Classified task and household records
        settings: Engine settings (weights, DocuSign stale threshold)

    Returns:
        Tuple of (composite score, breakdown in display order)
    """
    factors = [
        (COMPLIANCE_LABEL, compliance_coverage(records), settings.health_weight_compliance),
        (DOCUSIGN_LABEL, docusign_velocity(records, settings.docusign_stale_days), settings.health_weight_docusign),
        (TASKS_LABEL, tasks_on_time(records), settings.health_weight_tasks),
        (MEETINGS_LABEL, meeting_coverage(records), settings.health_weight_meetings),
    ]

    breakdown = [
        HealthFactor(label=label, score=clamp_score(sub_score * 100), weight=weight)
        for label, sub_score, weight in factors
    ]

    composite = clamp_score(
        sum(factor.score * factor.weight for factor in breakdown) / 100
    )
    return composite, breakdown
