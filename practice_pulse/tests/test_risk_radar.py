"""
Pytest test module for the Risk Radar.

Covers:
- The four detection rules and their severity thresholds
- Deep links built from the CRM instance URL
- Queue ordering (severity, then days stale) and truncation
- Household risk score rollup
"""

import pytest

from practice_pulse.models import (
    RiskAction,
    RiskCategory,
    RiskItem,
    RiskSeverity,
    TaskSummary,
)
from practice_pulse.services.classification import classify_records
from practice_pulse.services.risk_radar import (
    compliance_severity,
    detect_compliance_risks,
    detect_docusign_risks,
    detect_overdue_risks,
    detect_risks,
    detect_stale_risks,
    record_url,
    score_households,
    sort_risks,
)
from practice_pulse.tests.conftest import INSTANCE_URL, NOW, build_household, build_task


def _risk(id, severity, days, household_id="H1", household="H1 Household", label="risk"):
    return RiskItem(
        id=id,
        label=label,
        household=household,
        householdId=household_id,
        severity=severity,
        category=RiskCategory.COMPLIANCE,
        action=RiskAction.RUN_REVIEW,
        daysStale=days,
        url=f"{INSTANCE_URL}/{id}",
    )


# =============================================================================
# Test Class: TestRecordUrl
# =============================================================================

class TestRecordUrl:

    def test_trailing_slash_is_stripped(self):
        assert record_url(INSTANCE_URL + "/", "001") == f"{INSTANCE_URL}/001"

    def test_empty_instance_url(self):
        assert record_url("", "001") == "/001"


# =============================================================================
# Test Class: TestDocuSignRule
# =============================================================================

class TestDocuSignRule:
    """Unsigned envelopes aged 5+ days; critical past 10."""

    @pytest.mark.parametrize("age,expected", [
        (4, None),
        (5, RiskSeverity.HIGH),
        (10, RiskSeverity.HIGH),
        (11, RiskSeverity.CRITICAL),
    ])
    def test_thresholds(self, age, expected):
        h1 = build_household(id="H1")
        task = build_task(id="T1", subject="SEND DOCU", age_days=age, household=h1)
        risks = detect_docusign_risks(classify_records([task], [h1], NOW), INSTANCE_URL)

        if expected is None:
            assert risks == []
        else:
            assert len(risks) == 1
            assert risks[0].severity == expected

    def test_risk_fields(self):
        h1 = build_household(id="H1", name="Smith Household")
        task = build_task(id="T1", subject="SEND DOCU", age_days=12, household=h1)
        risk = detect_docusign_risks(classify_records([task], [h1], NOW), INSTANCE_URL)[0]

        assert risk.label == "DocuSign unsigned for 12 days"
        assert risk.category == RiskCategory.DOCUSIGN
        assert risk.action == RiskAction.SEND_REMINDER
        assert risk.household == "Smith Household"
        assert risk.householdId == "H1"
        assert risk.daysStale == 12
        assert risk.url == f"{INSTANCE_URL}/T1"

    def test_signed_envelope_is_not_a_risk(self):
        task = build_task(subject="SEND DOCU", status="Completed", age_days=30)
        assert detect_docusign_risks(classify_records([task], [], NOW), INSTANCE_URL) == []


# =============================================================================
# Test Class: TestComplianceRule
# =============================================================================

class TestComplianceRule:
    """Unreviewed households aged 7+ days."""

    @pytest.mark.parametrize("days,expected", [
        (7, RiskSeverity.MEDIUM),
        (14, RiskSeverity.MEDIUM),
        (15, RiskSeverity.HIGH),
        (30, RiskSeverity.HIGH),
        (31, RiskSeverity.CRITICAL),
    ])
    def test_severity(self, days, expected):
        assert compliance_severity(days) == expected

    def test_young_household_is_not_flagged(self):
        records = classify_records([], [build_household(id="H1", age_days=6)], NOW)
        assert detect_compliance_risks(records, INSTANCE_URL) == []

    def test_reviewed_household_is_not_flagged(self):
        h1 = build_household(id="H1", age_days=40)
        task = build_task(subject="COMPLIANCE REVIEW", status="Completed", household=h1)
        records = classify_records([task], [h1], NOW)
        assert detect_compliance_risks(records, INSTANCE_URL) == []

    def test_risk_fields(self):
        records = classify_records([], [build_household(id="H1", name="Jones", age_days=20)], NOW)
        risk = detect_compliance_risks(records, INSTANCE_URL)[0]

        assert risk.label == "No compliance review on file"
        assert risk.severity == RiskSeverity.HIGH
        assert risk.action == RiskAction.RUN_REVIEW
        assert risk.url == f"{INSTANCE_URL}/H1"
        assert risk.daysStale == 20


# =============================================================================
# Test Class: TestOverdueRule
# =============================================================================

class TestOverdueRule:
    """Overdue High-priority tasks; critical more than 7 days past due."""

    def test_severity_by_days_past_due(self):
        tasks = [
            build_task(id="T1", subject="Rollover paperwork", priority="High", due_days_ago=8),
            build_task(id="T2", subject="Beneficiary update", priority="High", due_days_ago=3),
        ]
        risks = detect_overdue_risks(classify_records(tasks, [], NOW), INSTANCE_URL)

        assert [(r.id, r.severity, r.daysStale) for r in risks] == [
            ("T1", RiskSeverity.CRITICAL, 8),
            ("T2", RiskSeverity.HIGH, 3),
        ]
        assert risks[0].label == "Rollover paperwork"
        assert risks[0].action == RiskAction.VIEW_TASK

    def test_normal_priority_is_ignored(self):
        task = build_task(priority="Normal", due_days_ago=20)
        assert detect_overdue_risks(classify_records([task], [], NOW), INSTANCE_URL) == []

    def test_completed_task_is_ignored(self):
        task = build_task(priority="High", status="Completed", due_days_ago=20)
        assert detect_overdue_risks(classify_records([task], [], NOW), INSTANCE_URL) == []


# =============================================================================
# Test Class: TestStaleRule
# =============================================================================

class TestStaleRule:
    """No task activity for 30+ days; critical past 60."""

    def test_latest_task_sets_staleness(self):
        h1 = build_household(id="H1", age_days=200)
        tasks = [
            build_task(id="T1", age_days=120, household=h1),
            build_task(id="T2", age_days=35, household=h1),
        ]
        risks = detect_stale_risks(classify_records(tasks, [h1], NOW), INSTANCE_URL)

        assert len(risks) == 1
        assert risks[0].label == "No activity in 35 days"
        assert risks[0].severity == RiskSeverity.MEDIUM
        assert risks[0].action == RiskAction.VIEW_FAMILY

    def test_household_without_tasks_uses_its_age(self):
        records = classify_records([], [build_household(id="H1", age_days=61)], NOW)
        risks = detect_stale_risks(records, INSTANCE_URL)
        assert [(r.severity, r.daysStale) for r in risks] == [(RiskSeverity.CRITICAL, 61)]

    def test_recent_activity_is_not_stale(self):
        h1 = build_household(id="H1", age_days=200)
        task = build_task(age_days=10, household=h1)
        assert detect_stale_risks(classify_records([task], [h1], NOW), INSTANCE_URL) == []


# =============================================================================
# Test Class: TestQueue
# =============================================================================

class TestQueue:
    """Ordering, truncation and household scores."""

    def test_sort_by_severity_then_days_stale(self):
        risks = [
            _risk("A", RiskSeverity.MEDIUM, 40),
            _risk("B", RiskSeverity.CRITICAL, 12),
            _risk("C", RiskSeverity.HIGH, 9),
            _risk("D", RiskSeverity.CRITICAL, 45),
            _risk("E", RiskSeverity.HIGH, 9),
        ]
        assert [r.id for r in sort_risks(risks)] == ["D", "B", "C", "E", "A"]

    def test_detect_risks_limit(self):
        households = [build_household(id=f"H{i}", age_days=40 + i) for i in range(5)]
        queue, ordered = detect_risks(classify_records([], households, NOW), INSTANCE_URL, limit=3)

        # each household: critical compliance + medium stale
        assert len(ordered) == 10
        assert len(queue) == 3
        assert queue == ordered[:3]
        assert [r.daysStale for r in queue] == [44, 43, 42]

    def test_detect_risks_without_limit(self):
        households = [build_household(id="H1", age_days=40)]
        queue, ordered = detect_risks(classify_records([], households, NOW), INSTANCE_URL)
        assert queue == ordered
        assert [r.category for r in queue] == [RiskCategory.COMPLIANCE, RiskCategory.STALE_ACCOUNT]

    def test_score_households(self):
        risks = [
            _risk("A", RiskSeverity.MEDIUM, 40, label="stale"),
            _risk("B", RiskSeverity.CRITICAL, 40, label="no review"),
            _risk("C", RiskSeverity.HIGH, 9, household_id="H2", household="H2 Household"),
            _risk("D", RiskSeverity.HIGH, 9, household_id="", household=""),
        ]
        scores = score_households(risks)

        assert [(s.id, s.score) for s in scores] == [("H1", 67), ("H2", 85)]
        assert [sig.label for sig in scores[0].signals] == ["no review", "stale"]

    def test_score_floors_at_zero(self):
        risks = [_risk(f"R{i}", RiskSeverity.CRITICAL, 40) for i in range(5)]
        assert score_households(risks)[0].score == 0

    def test_unsigned_only_households_score_clean(self):
        risks = [_risk("A", RiskSeverity.HIGH, 9)]
        unsigned = [
            TaskSummary(
                id="T9", subject="SEND DOCU", household="H3 Household", householdId="H3",
                daysOld=2, status="Not Started", priority="Normal",
            ),
            TaskSummary(
                id="T8", subject="SEND DOCU", household="H1 Household", householdId="H1",
                daysOld=9, status="Not Started", priority="Normal",
            ),
        ]
        scores = score_households(risks, unsigned)

        assert [(s.id, s.score) for s in scores] == [("H1", 85), ("H3", 100)]
        assert scores[1].name == "H3 Household"
        assert scores[1].signals == []
