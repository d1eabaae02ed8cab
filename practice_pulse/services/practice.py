"""
Practice Data Orchestrator

Single entry point of the engine: build_practice_data() turns two flat CRM
record collections into one internally consistent PracticeData snapshot.

Pipeline (leaves first):
1. Classify records (tags, ages, partitions, task-household links)
2. Attribute households to advisors
3. Health score
4. Pipeline stages
5. Advisor scoreboard and ops staff workload
6. Risk radar and household risk scores
7. Revenue estimates
8. Weekly trends, detail items and the ops workload queue

The function is synchronous, performs no I/O and never raises on malformed
records. Identical inputs with the same `now` produce equal snapshots.
"""

import logging
from datetime import datetime
from typing import List, Mapping, Optional, Sequence

from practice_pulse.core.config import Settings, get_settings
from practice_pulse.models import (
    CapacityLabel,
    HouseholdRecord,
    OpsWorkload,
    OpsWorkloadCategory,
    PracticeData,
    RevenueOverrides,
    RiskCategory,
    RiskItem,
    RiskSeverity,
    TaskRecord,
    TaskSummary,
)
from practice_pulse.services.attribution import attribute_advisors
from practice_pulse.services.classification import (
    ClassifiedRecords,
    ClassifiedTask,
    classify_records,
    days_since,
    ensure_aware,
    is_high_priority,
    round_half_up,
    round_int,
)
from practice_pulse.services.health_score import calculate_health_score
from practice_pulse.services.pipeline import classify_pipeline
from practice_pulse.services.revenue import build_revenue_data, resolve_assumptions
from practice_pulse.services.risk_radar import detect_risks, score_households
from practice_pulse.services.scoreboard import build_advisor_scoreboard, build_ops_staff
from practice_pulse.services.trends import build_weekly_comparison


logger = logging.getLogger(__name__)


# =============================================================================
# Ops Workload Queue
# =============================================================================

WORKDAY_MINUTES = 480

DOCUSIGN_FOLLOWUP_MINUTES = 5
COMPLIANCE_REVIEW_MINUTES = 15
OVERDUE_TASK_MINUTES = 10
STALE_ACCOUNT_MINUTES = 8

DOCUSIGN_URGENT_DAYS = 5
OVERDUE_URGENT_DAYS = 7

HEAVY_CAPACITY_PCT = 80
MODERATE_CAPACITY_PCT = 50


def capacity_label(capacity_pct: int) -> CapacityLabel:
    if capacity_pct >= HEAVY_CAPACITY_PCT:
        return CapacityLabel.HEAVY
    if capacity_pct >= MODERATE_CAPACITY_PCT:
        return CapacityLabel.MODERATE
    return CapacityLabel.LIGHT


def build_ops_workload(records: ClassifiedRecords, all_risks: Sequence[RiskItem]) -> OpsWorkload:
    """
    Estimate the ops queue against an 8-hour day.

    Args:
        records: Classified records
        all_risks: Every detected risk (before the queue limit)

    Returns:
        OpsWorkload with four categories and capacity totals
    """
    unsigned = records.unsigned
    unreviewed = len(records.households) - len(records.reviewed_households)
    critical_compliance = sum(
        1 for r in all_risks
        if r.category == RiskCategory.COMPLIANCE and r.severity == RiskSeverity.CRITICAL
    )
    high_overdue = [ct for ct in records.overdue if is_high_priority(ct.task.priority)]
    stale = [r for r in all_risks if r.category == RiskCategory.STALE_ACCOUNT]

    categories = [
        OpsWorkloadCategory(
            label="DocuSign Follow-up",
            count=len(unsigned),
            urgent=sum(1 for ct in unsigned if ct.age_days > DOCUSIGN_URGENT_DAYS),
            estMinutes=len(unsigned) * DOCUSIGN_FOLLOWUP_MINUTES,
        ),
        OpsWorkloadCategory(
            label="Compliance Reviews",
            count=unreviewed,
            urgent=critical_compliance,
            estMinutes=unreviewed * COMPLIANCE_REVIEW_MINUTES,
        ),
        OpsWorkloadCategory(
            label="Overdue Tasks",
            count=len(high_overdue),
            urgent=sum(
                1 for ct in high_overdue
                if days_since(ct.task.dueDate, records.now) > OVERDUE_URGENT_DAYS
            ),
            estMinutes=len(high_overdue) * OVERDUE_TASK_MINUTES,
        ),
        OpsWorkloadCategory(
            label="Stale Accounts",
            count=len(stale),
            urgent=sum(1 for r in stale if r.severity == RiskSeverity.CRITICAL),
            estMinutes=len(stale) * STALE_ACCOUNT_MINUTES,
        ),
    ]

    total_minutes = sum(c.estMinutes for c in categories)
    capacity_pct = min(round_int(total_minutes / WORKDAY_MINUTES * 100), 100)

    return OpsWorkload(
        categories=categories,
        totalItems=sum(c.count for c in categories),
        totalUrgent=sum(c.urgent for c in categories),
        totalHours=round_half_up(total_minutes / 60, 1),
        capacityPct=capacity_pct,
        capacityLabel=capacity_label(capacity_pct),
    )


# =============================================================================
# Detail Items
# =============================================================================


def to_summary(records: ClassifiedRecords, ct: ClassifiedTask) -> TaskSummary:
    household, household_id = records.household_of(ct)
    return TaskSummary(
        id=ct.task.id,
        subject=ct.task.subject,
        household=household,
        householdId=household_id,
        daysOld=ct.age_days,
        status=ct.task.status or "",
        priority=ct.task.priority or "",
    )


def detail_items(
    records: ClassifiedRecords,
    tasks: Sequence[ClassifiedTask],
    limit: int,
    oldest_first: bool,
) -> List[TaskSummary]:
    """Stable-sorted task summaries by age, capped at `limit`."""
    ordered = sorted(tasks, key=lambda ct: ct.age_days, reverse=oldest_first)
    return [to_summary(records, ct) for ct in ordered[:limit]]


# =============================================================================
# Entry Point
# =============================================================================


def build_practice_data(
    tasks: Sequence[TaskRecord],
    households: Sequence[HouseholdRecord],
    instance_url: str,
    revenue_overrides: Optional[RevenueOverrides] = None,
    *,
    real_aum_by_household: Optional[Mapping[str, float]] = None,
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
) -> PracticeData:
    """
    Build the complete practice metrics snapshot.

    Args:
        tasks: CRM task records
        households: CRM household records
        instance_url: CRM base URL used for risk deep links
        revenue_overrides: Explicit revenue assumptions; win over defaults
            and over any "Revenue Config:" directive
        real_aum_by_household: Actual balance per household id, for AUM blending
        settings: Engine settings (defaults to the process singleton)
        now: Reference instant for every day count (defaults to UTC now)

    Returns:
        PracticeData snapshot
    """
    settings = settings or get_settings()
    now = ensure_aware(now)

    records = classify_records(tasks, households, now, settings.meeting_window_days)

    attribution = attribute_advisors(
        households,
        roster=settings.known_advisors,
        diversity_threshold=settings.advisor_diversity_threshold,
    )
    health_score, health_breakdown = calculate_health_score(records, settings)
    pipeline = classify_pipeline(records)
    advisors = build_advisor_scoreboard(records, attribution)
    ops_staff = build_ops_staff(records, settings.staff_attribution_mode, settings.known_staff)
    risks, all_risks = detect_risks(records, instance_url, limit=settings.risk_limit)

    assumptions, directive_applied = resolve_assumptions(settings, households, revenue_overrides)
    revenue = build_revenue_data(records, attribution, pipeline, assumptions, real_aum_by_household)

    limit = settings.detail_item_limit
    unsigned_items = detail_items(records, records.unsigned, limit, oldest_first=True)
    snapshot = PracticeData(
        healthScore=health_score,
        healthBreakdown=health_breakdown,
        advisors=advisors,
        opsStaff=ops_staff,
        staffAttribution=settings.staff_attribution_mode,
        pipeline=pipeline,
        risks=risks,
        householdRiskScores=score_households(all_risks, unsigned_items),
        totalHouseholds=len(households),
        totalTasks=len(tasks),
        completedTasks=len(records.completed_tasks),
        openTasks=len(records.open_tasks),
        complianceReviews=len(records.compliance_reviews),
        meetingNotes=len(records.meeting_notes),
        unsigned=len(records.unsigned),
        revenue=revenue,
        assumptions=assumptions,
        weeklyComparison=build_weekly_comparison(records, settings.trend_weeks),
        opsWorkload=build_ops_workload(records, all_risks),
        openTaskItems=detail_items(records, records.open_tasks, limit, oldest_first=True),
        unsignedItems=unsigned_items,
        reviewItems=detail_items(records, records.compliance_reviews, limit, oldest_first=False),
        meetingItems=detail_items(records, records.meeting_notes, limit, oldest_first=False),
        householdAdvisors=attribution.by_household_id(households),
        attributionSummary=attribution.summary(),
        instanceUrl=instance_url,
        generatedAt=now,
    )

    logger.debug(
        f"Staff attribution {settings.staff_attribution_mode.value}; "
        f"revenue directive {'applied' if directive_applied else 'not applied'}"
    )
    logger.info(
        f"Built practice snapshot: {len(households)} households, {len(tasks)} tasks, "
        f"health {health_score}, {len(all_risks)} risks ({len(risks)} queued)"
    )
    return snapshot
