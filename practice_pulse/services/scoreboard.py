"""
Advisor Scoreboard & Ops Staff Workload

Per-entity rollups over the classified records.

Advisor score (0-100):
    round(compliance% * 0.3
          + max(0, 100 - overdue * 20) * 0.3
          + max(0, 100 - unsigned * 15) * 0.2
          + meeting coverage% * 0.2)

Ops staff score (0-100):
    100 - overdue * 20 - max(0, avgAge - 5) * 5 + completedThisWeek * 5

Staff attribution has two modes. SIMULATED round-robins every non-meeting
task across the known-staff roster; it exists for demo orgs without a staff
field and is labeled as such in the snapshot. FIELD groups tasks by their
real assignedStaff value. The two are never blended.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from practice_pulse.models import AdvisorScore, OpsStaffScore, StaffAttributionMode, TaskTag
from practice_pulse.services.attribution import UNASSIGNED, AdvisorAttribution
from practice_pulse.services.classification import (
    ClassifiedRecords,
    ClassifiedTask,
    clamp_score,
    round_int,
)


NO_ACTIVITY_WARNING = "No activity logged - may indicate missing data rather than inactivity"
NO_MEETINGS_WARNING = "0 meetings in 90 days - verify data completeness"

COMPLETED_THIS_WEEK_DAYS = 7
STAFF_AGE_GRACE_DAYS = 5


# =============================================================================
# Advisor Scoreboard
# =============================================================================


@dataclass
class _AdvisorBucket:
    households: Set[int] = field(default_factory=set)
    open_tasks: int = 0
    overdue: int = 0
    unsigned: int = 0
    reviewed: Set[int] = field(default_factory=set)
    met_recently: Set[int] = field(default_factory=set)


def advisor_composite_score(
    compliance_pct: int,
    overdue: int,
    unsigned: int,
    meeting_coverage_pct: float,
) -> int:
    """Weighted advisor score, clamped to [0, 100]."""
    return clamp_score(
        compliance_pct * 0.3
        + max(0, 100 - overdue * 20) * 0.3
        + max(0, 100 - unsigned * 15) * 0.2
        + meeting_coverage_pct * 0.2
    )


def advisor_data_warning(households: int, meetings: int, open_tasks: int) -> Optional[str]:
    """
    Flag advisors whose numbers look like missing data.

    Zero logged activity is ambiguous (missing data or a genuinely idle
    book); it is surfaced as a warning rather than resolved.
    """
    if households > 0 and meetings == 0 and open_tasks == 0:
        return NO_ACTIVITY_WARNING
    if households >= 2 and meetings == 0:
        return NO_MEETINGS_WARNING
    return None


def _has_household_reference(ct: ClassifiedTask) -> bool:
    return bool(ct.household_id or ct.household_name)


def build_advisor_scoreboard(
    records: ClassifiedRecords,
    attribution: AdvisorAttribution,
) -> List[AdvisorScore]:
    """
    Roll tasks and households up per advisor.

    Tasks follow their household's advisor; tasks naming a household that is
    not in the input land in "Unassigned". Buckets without households are
    omitted, so household counts sum to the total household count.

    Returns:
        AdvisorScore rows sorted by score descending
    """
    buckets: Dict[str, _AdvisorBucket] = {}

    for ch in records.households:
        advisor = attribution.advisor_for(ch.index)
        buckets.setdefault(advisor, _AdvisorBucket()).households.add(ch.index)

    for ct in records.tasks:
        if not _has_household_reference(ct):
            continue
        bucket = buckets.setdefault(attribution.advisor_for(ct.household_index), _AdvisorBucket())
        if ct.is_open:
            bucket.open_tasks += 1
            if ct.is_overdue:
                bucket.overdue += 1
            if ct.is_unsigned:
                bucket.unsigned += 1
        if ct.household_index is None:
            continue
        if TaskTag.COMPLIANCE_REVIEW in ct.tags:
            bucket.reviewed.add(ct.household_index)
        if TaskTag.MEETING_NOTE in ct.tags and ct.age_days <= records.meeting_window_days:
            bucket.met_recently.add(ct.household_index)

    advisors: List[AdvisorScore] = []
    for name, bucket in buckets.items():
        owned = len(bucket.households)
        if owned == 0:
            continue
        compliance_pct = round_int(len(bucket.reviewed) / owned * 100)
        meeting_pct = len(bucket.met_recently) / owned * 100
        advisors.append(
            AdvisorScore(
                name=name,
                households=owned,
                openTasks=bucket.open_tasks,
                overdueTasks=bucket.overdue,
                unsigned=bucket.unsigned,
                compliancePct=compliance_pct,
                meetingsLast90=len(bucket.met_recently),
                score=advisor_composite_score(
                    compliance_pct, bucket.overdue, bucket.unsigned, meeting_pct
                ),
                dataWarning=advisor_data_warning(owned, len(bucket.met_recently), bucket.open_tasks),
            )
        )

    advisors.sort(key=lambda a: a.score, reverse=True)
    return advisors


# =============================================================================
# Ops Staff Workload
# =============================================================================


@dataclass
class _StaffBucket:
    open_ages: List[int] = field(default_factory=list)
    overdue: int = 0
    completed_this_week: int = 0
    onboardings: int = 0
    docusign: int = 0


def staff_composite_score(overdue: int, avg_age_days: int, completed_this_week: int) -> int:
    """Ops staff score, clamped to [0, 100]."""
    return clamp_score(
        100
        - overdue * 20
        - max(0, avg_age_days - STAFF_AGE_GRACE_DAYS) * 5
        + completed_this_week * 5
    )


def assign_staff(
    records: ClassifiedRecords,
    mode: StaffAttributionMode,
    roster: Sequence[str],
) -> List[Tuple[str, ClassifiedTask]]:
    """
    Pair tasks with a staff member.

    SIMULATED: round-robin over every non-meeting task, in input order.
    An empty roster assigns everything to "Unassigned".
    FIELD: the task's assignedStaff value, "Unassigned" when blank.

    Returns:
        List of (staff name, ClassifiedTask)
    """
    pairs = []
    if mode == StaffAttributionMode.FIELD:
        for ct in records.tasks:
            staff = (ct.task.assignedStaff or "").strip() or UNASSIGNED
            pairs.append((staff, ct))
        return pairs

    rr_index = 0
    for ct in records.tasks:
        if TaskTag.MEETING_NOTE in ct.tags:
            continue
        staff = roster[rr_index % len(roster)] if roster else UNASSIGNED
        rr_index += 1
        pairs.append((staff, ct))
    return pairs


def build_ops_staff(
    records: ClassifiedRecords,
    mode: StaffAttributionMode,
    roster: Sequence[str],
) -> List[OpsStaffScore]:
    """
    Roll tasks up per ops staff member.

    In SIMULATED mode every roster member gets a row, even without tasks.

    Returns:
        OpsStaffScore rows sorted by score descending
    """
    buckets: Dict[str, _StaffBucket] = {}
    if mode == StaffAttributionMode.SIMULATED:
        for name in roster:
            buckets.setdefault(name, _StaffBucket())

    for staff, ct in assign_staff(records, mode, roster):
        bucket = buckets.setdefault(staff, _StaffBucket())
        if ct.is_open:
            bucket.open_ages.append(ct.age_days)
            if ct.is_overdue:
                bucket.overdue += 1
        elif ct.age_days <= COMPLETED_THIS_WEEK_DAYS:
            bucket.completed_this_week += 1
        if TaskTag.ACCOUNT_OPEN in ct.tags:
            bucket.onboardings += 1
        if TaskTag.DOCUSIGN_SENT in ct.tags:
            bucket.docusign += 1

    staff_rows: List[OpsStaffScore] = []
    for name, bucket in buckets.items():
        avg_age = round_int(sum(bucket.open_ages) / len(bucket.open_ages)) if bucket.open_ages else 0
        staff_rows.append(
            OpsStaffScore(
                name=name,
                openTasks=len(bucket.open_ages),
                overdueTasks=bucket.overdue,
                completedThisWeek=bucket.completed_this_week,
                avgTaskAgeDays=avg_age,
                onboardings=bucket.onboardings,
                docusign=bucket.docusign,
                score=staff_composite_score(bucket.overdue, avg_age, bucket.completed_this_week),
            )
        )

    staff_rows.sort(key=lambda s: s.score, reverse=True)
    return staff_rows
