"""
Weekly Trend Builder

Non-overlapping 7-day windows counted backward from now, oldest first:

    window 0 (this week): days <= 7
    window k:             7k < days <= 7(k + 1)

Records with future or unparseable timestamps fall at 0 days and land in
the current window. Older records beyond the last window are dropped.
"""

from typing import Callable, Iterable, List, TypeVar

from practice_pulse.models import TaskTag, WeeklyMetric
from practice_pulse.services.classification import ClassifiedRecords, TimestampLike


T = TypeVar("T")

WEEK_DAYS = 7


def week_bucket(days: int) -> int:
    """Window index for a record `days` old (0 = current week)."""
    if days <= WEEK_DAYS:
        return 0
    return (days - 1) // WEEK_DAYS


def build_weekly_history(
    records: Iterable[T],
    created_of: Callable[[T], TimestampLike],
    days_since_fn: Callable[[TimestampLike], int],
    weeks: int = 12,
) -> List[int]:
    """
    Count records per 7-day window.

    Args:
        records: Any records
        created_of: Extracts the creation timestamp of a record
        days_since_fn: Maps a timestamp to whole days elapsed
        weeks: Number of windows

    Returns:
        `weeks` counts, oldest window first
    """
    counts = [0] * weeks
    for record in records:
        bucket = week_bucket(days_since_fn(created_of(record)))
        if bucket < weeks:
            counts[bucket] += 1
    return list(reversed(counts))


def _task_created(ct) -> TimestampLike:
    return ct.task.createdDate


def _metric(label: str, history: List[int]) -> WeeklyMetric:
    return WeeklyMetric(label=label, thisWeek=history[-1], lastWeek=history[-2], history=history)


def build_weekly_comparison(records: ClassifiedRecords, weeks: int = 12) -> List[WeeklyMetric]:
    """
    Weekly history of the four tracked record categories.

    Returns:
        Metrics in display order: Tasks Completed, Onboarded,
        Compliance Reviews, DocuSign Signed
    """
    signed = [ct for ct in records.completed_tasks if TaskTag.DOCUSIGN_COMPLETED in ct.tags]

    return [
        _metric(
            "Tasks Completed",
            build_weekly_history(records.completed_tasks, _task_created, records.days_since, weeks),
        ),
        _metric(
            "Onboarded",
            build_weekly_history(
                records.households, lambda ch: ch.household.createdDate, records.days_since, weeks
            ),
        ),
        _metric(
            "Compliance Reviews",
            build_weekly_history(records.compliance_reviews, _task_created, records.days_since, weeks),
        ),
        _metric(
            "DocuSign Signed",
            build_weekly_history(signed, _task_created, records.days_since, weeks),
        ),
    ]
