"""
Risk Radar Service

Detects practice risks with four independent rules, then sorts them into an
action queue.

| Rule           | Trigger                               | Severity                          |
|----------------|---------------------------------------|-----------------------------------|
| DocuSign       | unsigned envelope aged >= 5 days      | critical > 10d, else high         |
| Compliance     | unreviewed household aged >= 7 days   | critical > 30d, high > 14d, medium|
| Overdue Task   | overdue task with High priority       | critical > 7d past due, else high |
| Stale Account  | no task activity for >= 30 days       | critical > 60d, else medium       |

Ordering: severity rank (critical, high, medium), then days stale
descending; the sort is stable so ties keep detection order. The queue is
truncated to the configured limit after sorting.

Household risk scores roll the untruncated risks up per household:
    score = max(0, 100 - 25 * critical - 15 * high - 8 * medium)
Households with unsigned envelopes but no risks are listed at 100.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from practice_pulse.models import (
    HouseholdRiskScore,
    RiskAction,
    RiskCategory,
    RiskItem,
    RiskSeverity,
    RiskSignal,
    TaskSummary,
)
from practice_pulse.services.classification import (
    ClassifiedRecords,
    days_since,
    is_high_priority,
)


DOCUSIGN_MIN_DAYS = 5
DOCUSIGN_CRITICAL_DAYS = 10
COMPLIANCE_MIN_DAYS = 7
COMPLIANCE_HIGH_DAYS = 14
COMPLIANCE_CRITICAL_DAYS = 30
OVERDUE_CRITICAL_DAYS = 7
STALE_MIN_DAYS = 30
STALE_CRITICAL_DAYS = 60

SEVERITY_PENALTY = {
    RiskSeverity.CRITICAL: 25,
    RiskSeverity.HIGH: 15,
    RiskSeverity.MEDIUM: 8,
}


def record_url(instance_url: str, record_id: str) -> str:
    """Deep link to a CRM record."""
    return f"{(instance_url or '').rstrip('/')}/{record_id}"


# =============================================================================
# Detection Rules
# =============================================================================


def detect_docusign_risks(records: ClassifiedRecords, instance_url: str) -> List[RiskItem]:
    risks = []
    for ct in records.unsigned:
        days = ct.age_days
        if days < DOCUSIGN_MIN_DAYS:
            continue
        household, household_id = records.household_of(ct)
        risks.append(
            RiskItem(
                id=ct.task.id,
                label=f"DocuSign unsigned for {days} days",
                household=household,
                householdId=household_id,
                severity=RiskSeverity.CRITICAL if days > DOCUSIGN_CRITICAL_DAYS else RiskSeverity.HIGH,
                category=RiskCategory.DOCUSIGN,
                action=RiskAction.SEND_REMINDER,
                daysStale=days,
                url=record_url(instance_url, ct.task.id),
            )
        )
    return risks


def compliance_severity(days: int) -> RiskSeverity:
    if days > COMPLIANCE_CRITICAL_DAYS:
        return RiskSeverity.CRITICAL
    if days > COMPLIANCE_HIGH_DAYS:
        return RiskSeverity.HIGH
    return RiskSeverity.MEDIUM


def detect_compliance_risks(records: ClassifiedRecords, instance_url: str) -> List[RiskItem]:
    risks = []
    for ch in records.households:
        if ch.index in records.reviewed_households or ch.age_days < COMPLIANCE_MIN_DAYS:
            continue
        risks.append(
            RiskItem(
                id=ch.household.id,
                label="No compliance review on file",
                household=ch.household.name,
                householdId=ch.household.id,
                severity=compliance_severity(ch.age_days),
                category=RiskCategory.COMPLIANCE,
                action=RiskAction.RUN_REVIEW,
                daysStale=ch.age_days,
                url=record_url(instance_url, ch.household.id),
            )
        )
    return risks


def detect_overdue_risks(records: ClassifiedRecords, instance_url: str) -> List[RiskItem]:
    risks = []
    for ct in records.overdue:
        if not is_high_priority(ct.task.priority):
            continue
        days = days_since(ct.task.dueDate, records.now)
        household, household_id = records.household_of(ct)
        risks.append(
            RiskItem(
                id=ct.task.id,
                label=ct.task.subject,
                household=household,
                householdId=household_id,
                severity=RiskSeverity.CRITICAL if days > OVERDUE_CRITICAL_DAYS else RiskSeverity.HIGH,
                category=RiskCategory.OVERDUE_TASK,
                action=RiskAction.VIEW_TASK,
                daysStale=days,
                url=record_url(instance_url, ct.task.id),
            )
        )
    return risks


def last_activity_days(records: ClassifiedRecords) -> Dict[int, int]:
    """Days since the most recent task of each household that has tasks."""
    latest: Dict[int, int] = {}
    for ct in records.tasks:
        if ct.household_index is None:
            continue
        current = latest.get(ct.household_index)
        if current is None or ct.age_days < current:
            latest[ct.household_index] = ct.age_days
    return latest


def detect_stale_risks(records: ClassifiedRecords, instance_url: str) -> List[RiskItem]:
    risks = []
    latest = last_activity_days(records)
    for ch in records.households:
        stale = latest.get(ch.index, ch.age_days)
        if stale < STALE_MIN_DAYS:
            continue
        risks.append(
            RiskItem(
                id=ch.household.id,
                label=f"No activity in {stale} days",
                household=ch.household.name,
                householdId=ch.household.id,
                severity=RiskSeverity.CRITICAL if stale > STALE_CRITICAL_DAYS else RiskSeverity.MEDIUM,
                category=RiskCategory.STALE_ACCOUNT,
                action=RiskAction.VIEW_FAMILY,
                daysStale=stale,
                url=record_url(instance_url, ch.household.id),
            )
        )
    return risks


# =============================================================================
# Queue Assembly
# =============================================================================


def sort_risks(risks: List[RiskItem]) -> List[RiskItem]:
    """Stable sort: severity rank ascending, then days stale descending."""
    return sorted(risks, key=lambda r: (r.severity.rank, -r.daysStale))


def detect_risks(
    records: ClassifiedRecords,
    instance_url: str,
    limit: Optional[int] = None,
) -> Tuple[List[RiskItem], List[RiskItem]]:
    """
    Run every detection rule and build the risk queue.

    Args:
        records: Classified task and household records
        instance_url: CRM base URL for deep links
        limit: Maximum items in the returned queue (None = unlimited)

    Returns:
        Tuple of (truncated sorted queue, full sorted list)
    """
    detected = (
        detect_docusign_risks(records, instance_url)
        + detect_compliance_risks(records, instance_url)
        + detect_overdue_risks(records, instance_url)
        + detect_stale_risks(records, instance_url)
    )
    ordered = sort_risks(detected)
    queue = ordered if limit is None else ordered[:limit]
    return queue, ordered


def score_households(
    risks: List[RiskItem],
    unsigned_items: Sequence[TaskSummary] = (),
) -> List[HouseholdRiskScore]:
    """
    Composite risk score per household.

    Risks are grouped by household id (household name when the id is blank);
    risks without either are not attributable and are skipped. Households
    that only appear in `unsigned_items` (envelopes too recent to be a risk)
    are listed with a clean score of 100 and no signals.

    Returns:
        HouseholdRiskScore rows sorted by score ascending (riskiest first)
    """
    grouped: Dict[str, Tuple[str, str, List[RiskItem]]] = {}
    for risk in risks:
        key = risk.householdId or risk.household
        if not key:
            continue
        grouped.setdefault(key, (risk.household, risk.householdId, []))[2].append(risk)

    for item in unsigned_items:
        key = item.householdId or item.household
        if key and key not in grouped:
            grouped[key] = (item.household, item.householdId, [])

    scores = []
    for name, household_id, items in grouped.values():
        penalty = sum(SEVERITY_PENALTY[item.severity] for item in items)
        signals = [
            RiskSignal(label=item.label, severity=item.severity)
            for item in sorted(items, key=lambda r: r.severity.rank)
        ]
        scores.append(
            HouseholdRiskScore(
                name=name,
                id=household_id,
                score=max(0, 100 - penalty),
                signals=signals,
            )
        )

    scores.sort(key=lambda s: s.score)
    return scores
