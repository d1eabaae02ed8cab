"""
Record Classifier Service

Leaf of the practice engine. Tags each CRM task by its subject-line convention,
derives the age of every task and household, links tasks to households, and
partitions the task set (open, completed, unsigned, overdue) once so every
downstream component reads the same classification.

Subject-line conventions (case-insensitive substring match):
- COMPLIANCE REVIEW          -> compliance_review
- SEND DOCU / DocuSign       -> docusign_sent (+ docusign_completed when completed)
- MEETING NOTE               -> meeting_note
- Account opening / ACCOUNT  -> account_open

Date handling:
- days_since() is floor((now - t) / 1 day)
- Missing or unparseable timestamps count as 0 days elapsed; no exception
  ever leaves this module.

Shared numeric helpers (round_half_up, clamp_score, safe_ratio) live here so
every component rounds the way the dashboard does.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Tuple, Union

import pandas as pd

from practice_pulse.models import HouseholdRecord, TaskRecord, TaskTag


TimestampLike = Union[str, datetime, date, None]

ONE_DAY = timedelta(days=1)

COMPLETED_STATUS = "completed"
HIGH_PRIORITY = "high"

# Subject fragments per tag, compared upper-cased
COMPLIANCE_REVIEW_MARKERS = ("COMPLIANCE REVIEW",)
DOCUSIGN_MARKERS = ("SEND DOCU", "DOCUSIGN")
MEETING_NOTE_MARKERS = ("MEETING NOTE",)
ACCOUNT_OPEN_MARKERS = ("ACCOUNT OPENING", "ACCOUNT")


# =============================================================================
# Numeric Helpers
# =============================================================================


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round half away from negative infinity, like the dashboard's Math.round.

    Python's round() uses banker's rounding (round(2.5) == 2); scores must
    round 2.5 to 3.
    """
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    """round_half_up to an int."""
    return int(round_half_up(value))


def clamp_score(value: float, low: int = 0, high: int = 100) -> int:
    """Round and clamp a score to [low, high]."""
    return max(low, min(high, round_int(value)))


def safe_ratio(numerator: float, denominator: float, default: float = 1.0) -> float:
    """numerator / denominator, or `default` when there is nothing to measure."""
    if denominator <= 0:
        return default
    return numerator / denominator


# =============================================================================
# Date Helpers
# =============================================================================


def parse_timestamp(value: TimestampLike) -> Optional[datetime]:
    """
    Parse a CRM timestamp into an aware UTC datetime.

    Parsing is delegated to pandas, so ISO-8601 strings ("2026-01-02",
    "2026-01-02T10:00:00.000+0000", "+05:30" offsets), report-export dates
    ("01/05/2026", month first) and datetime/date objects are all accepted.
    Naive values are taken as UTC.

    Returns:
        Aware datetime, or None when the value is missing or unparseable
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None

    parsed = pd.to_datetime(value, utc=True, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def days_since(value: TimestampLike, now: datetime) -> int:
    """
    Whole days elapsed between `value` and `now`, floored.

    Future timestamps give negative values. Missing or unparseable
    timestamps give 0.
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return 0
    return (now - parsed) // ONE_DAY


def ensure_aware(now: Optional[datetime]) -> datetime:
    """Default `now` to the current UTC time and make naive values UTC."""
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


# =============================================================================
# Task Tagging
# =============================================================================


def is_completed_status(status: Optional[str]) -> bool:
    """A missing status is open."""
    return bool(status) and status.strip().lower() == COMPLETED_STATUS


def is_high_priority(priority: Optional[str]) -> bool:
    return bool(priority) and priority.strip().lower() == HIGH_PRIORITY


def _contains_any(subject_upper: str, markers: Sequence[str]) -> bool:
    return any(marker in subject_upper for marker in markers)


def classify_task(task: TaskRecord, now: datetime) -> FrozenSet[TaskTag]:
    """
    Assign semantic tags to a task.

    Args:
        task: The CRM task
        now: Reference instant for the overdue check

    Returns:
        Frozen set of TaskTag values (possibly empty)
    """
    subject = (task.subject or "").upper()
    completed = is_completed_status(task.status)
    tags: Set[TaskTag] = set()

    if _contains_any(subject, COMPLIANCE_REVIEW_MARKERS):
        tags.add(TaskTag.COMPLIANCE_REVIEW)

    if _contains_any(subject, DOCUSIGN_MARKERS):
        tags.add(TaskTag.DOCUSIGN_SENT)
        if completed:
            tags.add(TaskTag.DOCUSIGN_COMPLETED)

    if _contains_any(subject, MEETING_NOTE_MARKERS):
        tags.add(TaskTag.MEETING_NOTE)

    if _contains_any(subject, ACCOUNT_OPEN_MARKERS):
        tags.add(TaskTag.ACCOUNT_OPEN)

    if not completed:
        due = parse_timestamp(task.dueDate)
        if due is not None and due < now:
            tags.add(TaskTag.OVERDUE)

    return frozenset(tags)


# =============================================================================
# Classified Record Bundle
# =============================================================================


@dataclass(frozen=True)
class ClassifiedTask:
    """
    A task with its derived attributes.

    Attributes:
        task: The original record (never mutated)
        tags: Semantic tags from classify_task()
        completed: Whether the status is Completed
        age_days: Days since the task was created
        household_index: Index of the owning household in the input list,
            or None when the task references no known household
    """
    task: TaskRecord
    tags: FrozenSet[TaskTag]
    completed: bool
    age_days: int
    household_index: Optional[int]

    @property
    def is_open(self) -> bool:
        return not self.completed

    @property
    def is_unsigned(self) -> bool:
        return self.is_open and TaskTag.DOCUSIGN_SENT in self.tags

    @property
    def is_overdue(self) -> bool:
        return TaskTag.OVERDUE in self.tags

    @property
    def household_name(self) -> str:
        return self.task.householdName or ""

    @property
    def household_id(self) -> str:
        return self.task.householdId or ""


@dataclass(frozen=True)
class ClassifiedHousehold:
    household: HouseholdRecord
    index: int
    age_days: int


@dataclass
class ClassifiedRecords:
    """
    Read-only classification shared by every engine component.

    Household identity inside the engine is the household's position in the
    input list, so duplicate or blank ids never merge two households.
    """
    now: datetime
    tasks: List[ClassifiedTask]
    households: List[ClassifiedHousehold]
    meeting_window_days: int
    open_tasks: List[ClassifiedTask] = field(default_factory=list)
    completed_tasks: List[ClassifiedTask] = field(default_factory=list)
    compliance_reviews: List[ClassifiedTask] = field(default_factory=list)
    meeting_notes: List[ClassifiedTask] = field(default_factory=list)
    unsigned: List[ClassifiedTask] = field(default_factory=list)
    overdue: List[ClassifiedTask] = field(default_factory=list)
    reviewed_households: Set[int] = field(default_factory=set)
    met_recently: Set[int] = field(default_factory=set)

    def days_since(self, value: TimestampLike) -> int:
        return days_since(value, self.now)

    def household_of(self, ct: ClassifiedTask) -> Tuple[str, str]:
        """(name, id) of a task's household, falling back to the linked record."""
        name, household_id = ct.household_name, ct.household_id
        if ct.household_index is not None:
            linked = self.households[ct.household_index].household
            name = name or linked.name
            household_id = household_id or linked.id
        return name, household_id


def _household_lookup(households: Sequence[HouseholdRecord]) -> Tuple[Dict[str, int], Dict[str, int]]:
    by_id: Dict[str, int] = {}
    by_name: Dict[str, int] = {}
    for index, household in enumerate(households):
        if household.id and household.id not in by_id:
            by_id[household.id] = index
        if household.name and household.name not in by_name:
            by_name[household.name] = index
    return by_id, by_name


def classify_records(
    tasks: Sequence[TaskRecord],
    households: Sequence[HouseholdRecord],
    now: datetime,
    meeting_window_days: int = 90,
) -> ClassifiedRecords:
    """
    Classify every task and household once.

    Tasks link to households by householdId when it names a known household,
    otherwise by householdName.

    Args:
        tasks: CRM task records
        households: CRM household records
        now: Reference instant (aware)
        meeting_window_days: Lookback for "met recently" (default 90)

    Returns:
        ClassifiedRecords bundle
    """
    by_id, by_name = _household_lookup(households)

    classified_households = [
        ClassifiedHousehold(household=h, index=i, age_days=days_since(h.createdDate, now))
        for i, h in enumerate(households)
    ]

    classified_tasks: List[ClassifiedTask] = []
    for task in tasks:
        household_index = by_id.get(task.householdId or "")
        if household_index is None:
            household_index = by_name.get(task.householdName or "")
        classified_tasks.append(
            ClassifiedTask(
                task=task,
                tags=classify_task(task, now),
                completed=is_completed_status(task.status),
                age_days=days_since(task.createdDate, now),
                household_index=household_index,
            )
        )

    records = ClassifiedRecords(
        now=now,
        tasks=classified_tasks,
        households=classified_households,
        meeting_window_days=meeting_window_days,
    )

    for ct in classified_tasks:
        if ct.completed:
            records.completed_tasks.append(ct)
        else:
            records.open_tasks.append(ct)
        if TaskTag.COMPLIANCE_REVIEW in ct.tags:
            records.compliance_reviews.append(ct)
            if ct.household_index is not None:
                records.reviewed_households.add(ct.household_index)
        if TaskTag.MEETING_NOTE in ct.tags:
            records.meeting_notes.append(ct)
            if ct.household_index is not None and ct.age_days <= meeting_window_days:
                records.met_recently.add(ct.household_index)
        if ct.is_unsigned:
            records.unsigned.append(ct)
        if ct.is_overdue:
            records.overdue.append(ct)

    return records
