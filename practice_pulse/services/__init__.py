"""
Practice Pulse Services Module

Business logic of the practice metrics engine. Every service is stateless,
synchronous and free of I/O.

Services:
- extraction: Best-effort advisor and revenue-directive text mining
- classification: Record classifier (task tags, ages, partitions)
- attribution: Household -> advisor attribution
- health_score: Composite practice health score
- pipeline: Onboarding pipeline stages
- scoreboard: Advisor scoreboard and ops staff workload
- risk_radar: Risk detection and household risk scores
- revenue: Revenue estimates and AUM coverage
- trends: Weekly trend histories
- practice: build_practice_data() orchestrator
- ingestion: CSV and raw CRM payload normalization

All services are designed to be consumed by the API layer (practice_pulse/api/)
and the export job (practice_pulse/jobs/).
"""

# =============================================================================
# Extraction Service Exports
# =============================================================================

from practice_pulse.services.extraction import (
    parse_advisor_from_description,
    parse_revenue_directive,
    extract_revenue_directive,
    extract_household_hints,
)

# =============================================================================
# Classification Service Exports
# =============================================================================

from practice_pulse.services.classification import (
    ClassifiedRecords,
    ClassifiedTask,
    ClassifiedHousehold,
    classify_records,
    classify_task,
    parse_timestamp,
    days_since,
    round_half_up,
)

# =============================================================================
# Attribution, Scoring and Pipeline Exports
# =============================================================================

from practice_pulse.services.attribution import (
    AdvisorAttribution,
    attribute_advisors,
    has_diverse_ownership,
    UNASSIGNED,
)

from practice_pulse.services.health_score import calculate_health_score

from practice_pulse.services.pipeline import classify_pipeline, stage_for

from practice_pulse.services.scoreboard import (
    build_advisor_scoreboard,
    build_ops_staff,
)

# =============================================================================
# Risk, Revenue and Trend Exports
# =============================================================================

from practice_pulse.services.risk_radar import detect_risks, score_households

from practice_pulse.services.revenue import (
    build_revenue_data,
    calculate_aum_coverage,
    resolve_assumptions,
)

from practice_pulse.services.trends import build_weekly_history, build_weekly_comparison

# =============================================================================
# Orchestrator and Ingestion Exports
# =============================================================================

from practice_pulse.services.practice import build_practice_data

from practice_pulse.services.ingestion import (
    normalize_crm_task,
    normalize_crm_household,
    normalize_crm_payload,
    ingest_tasks_csv,
    ingest_households_csv,
)


__all__ = [
    # Extraction
    "parse_advisor_from_description",
    "parse_revenue_directive",
    "extract_revenue_directive",
    "extract_household_hints",
    # Classification
    "ClassifiedRecords",
    "ClassifiedTask",
    "ClassifiedHousehold",
    "classify_records",
    "classify_task",
    "parse_timestamp",
    "days_since",
    "round_half_up",
    # Attribution
    "AdvisorAttribution",
    "attribute_advisors",
    "has_diverse_ownership",
    "UNASSIGNED",
    # Scoring
    "calculate_health_score",
    "classify_pipeline",
    "stage_for",
    "build_advisor_scoreboard",
    "build_ops_staff",
    # Risk, revenue, trends
    "detect_risks",
    "score_households",
    "build_revenue_data",
    "calculate_aum_coverage",
    "resolve_assumptions",
    "build_weekly_history",
    "build_weekly_comparison",
    # Orchestrator
    "build_practice_data",
    # Ingestion
    "normalize_crm_task",
    "normalize_crm_household",
    "normalize_crm_payload",
    "ingest_tasks_csv",
    "ingest_households_csv",
]
