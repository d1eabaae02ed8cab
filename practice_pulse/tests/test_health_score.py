"""
Pytest test module for the health score calculator.

Covers each sub-score, the empty-denominator defaults, the weighted
composite and weight validation in Settings.
"""

import pydantic
import pytest

from practice_pulse.core.config import Settings
from practice_pulse.services.classification import classify_records
from practice_pulse.services.health_score import (
    COMPLIANCE_LABEL,
    DOCUSIGN_LABEL,
    MEETINGS_LABEL,
    TASKS_LABEL,
    calculate_health_score,
    docusign_velocity,
    tasks_on_time,
)
from practice_pulse.tests.conftest import NOW, build_household, build_task


def _scores(breakdown):
    return {factor.label: factor.score for factor in breakdown}


class TestSubScores:
    """Individual sub-score formulas."""

    def test_docusign_velocity_counts_envelopes_older_than_a_week(self):
        h1 = build_household(id="H1")
        tasks = [
            build_task(id="T1", subject="SEND DOCU", age_days=8, household=h1),
            build_task(id="T2", subject="SEND DOCU", age_days=7, household=h1),
            build_task(id="T3", subject="SEND DOCU", age_days=2, household=h1),
        ]
        records = classify_records(tasks, [h1], NOW)
        assert docusign_velocity(records) == pytest.approx(2 / 3)

    def test_signed_envelopes_do_not_hurt_velocity(self):
        task = build_task(subject="SEND DOCU", status="Completed", age_days=30)
        records = classify_records([task], [], NOW)
        assert docusign_velocity(records) == 1.0

    def test_tasks_on_time_full_credit_without_completed_tasks(self):
        tasks = [build_task(id=f"T{i}", due_days_ago=3) for i in range(4)]
        records = classify_records(tasks, [], NOW)
        assert tasks_on_time(records) == 1.0

    def test_tasks_on_time_ratio(self):
        tasks = [
            build_task(id="T1", due_days_ago=3),
            build_task(id="T2", status="Completed"),
            build_task(id="T3"),
            build_task(id="T4", status="Completed"),
        ]
        records = classify_records(tasks, [], NOW)
        assert tasks_on_time(records) == pytest.approx(0.75)


class TestCalculateHealthScore:
    """Composite score and breakdown."""

    def test_empty_inputs_score_full_marks(self, settings):
        records = classify_records([], [], NOW)
        score, breakdown = calculate_health_score(records, settings)

        assert score == 100
        assert [f.label for f in breakdown] == [
            COMPLIANCE_LABEL, DOCUSIGN_LABEL, TASKS_LABEL, MEETINGS_LABEL,
        ]
        assert all(f.score == 100 for f in breakdown)
        assert [f.weight for f in breakdown] == [30, 25, 25, 20]

    def test_weighted_composite(self, settings):
        h1 = build_household(id="H1")
        h2 = build_household(id="H2")
        tasks = [build_task(id="T1", subject="COMPLIANCE REVIEW", status="Completed", household=h1)]
        records = classify_records(tasks, [h1, h2], NOW)

        score, breakdown = calculate_health_score(records, settings)

        assert _scores(breakdown) == {
            COMPLIANCE_LABEL: 50,
            DOCUSIGN_LABEL: 100,
            TASKS_LABEL: 100,
            MEETINGS_LABEL: 0,
        }
        # (50*30 + 100*25 + 100*25 + 0*20) / 100
        assert score == 65

    def test_breakdown_scores_are_rounded(self, settings):
        households = [build_household(id=f"H{i}") for i in range(3)]
        tasks = [build_task(id="T1", subject="MEETING NOTE", household=households[0])]
        records = classify_records(tasks, households, NOW)

        _, breakdown = calculate_health_score(records, settings)
        assert _scores(breakdown)[MEETINGS_LABEL] == 33

    def test_custom_weights(self):
        settings = Settings(
            _env_file=None,
            health_weight_compliance=100,
            health_weight_docusign=0,
            health_weight_tasks=0,
            health_weight_meetings=0,
        )
        h1 = build_household(id="H1")
        h2 = build_household(id="H2")
        tasks = [build_task(id="T1", subject="COMPLIANCE REVIEW", household=h1)]
        records = classify_records(tasks, [h1, h2], NOW)

        score, _ = calculate_health_score(records, settings)
        assert score == 50

    def test_weights_must_sum_to_100(self):
        with pytest.raises(pydantic.ValidationError):
            Settings(_env_file=None, health_weight_compliance=50)
