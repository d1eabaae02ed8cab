"""
Package initialization file for Practice Pulse models.

Exports all Pydantic schemas and enumerations from schemas.py and enums.py so
other modules can import data models without knowing the internal layout.

Usage:
    from practice_pulse.models import (
        TaskRecord,
        HouseholdRecord,
        PracticeData,
        RiskSeverity,
    )
"""

# =============================================================================
# Enums
# =============================================================================

from practice_pulse.models.enums import (
    TaskTag,
    AttributionSource,
    StaffAttributionMode,
    PipelineStageKey,
    RiskSeverity,
    RiskCategory,
    RiskAction,
    AumCoverageMode,
    CapacityLabel,
)


# =============================================================================
# Schemas
# =============================================================================

from practice_pulse.models.schemas import (
    # Input records
    TaskRecord,
    HouseholdRecord,
    # Revenue assumptions
    RevenueAssumptions,
    RevenueOverrides,
    # Derived entities
    HealthFactor,
    AdvisorScore,
    OpsStaffScore,
    PipelineHousehold,
    PipelineStage,
    RiskItem,
    RiskSignal,
    HouseholdRiskScore,
    AdvisorRevenue,
    PipelineForecast,
    TrendPoint,
    AumCoverage,
    RevenueData,
    WeeklyMetric,
    TaskSummary,
    OpsWorkloadCategory,
    OpsWorkload,
    # Aggregate root
    PracticeData,
    # API models
    PracticeSnapshotRequest,
    CrmSnapshotRequest,
    CsvSnapshotRequest,
    EngineConfigSummary,
    # Ingestion
    ValidationError,
)


__all__ = [
    # Enums
    'TaskTag',
    'AttributionSource',
    'StaffAttributionMode',
    'PipelineStageKey',
    'RiskSeverity',
    'RiskCategory',
    'RiskAction',
    'AumCoverageMode',
    'CapacityLabel',
    # Input records
    'TaskRecord',
    'HouseholdRecord',
    'RevenueAssumptions',
    'RevenueOverrides',
    # Derived entities
    'HealthFactor',
    'AdvisorScore',
    'OpsStaffScore',
    'PipelineHousehold',
    'PipelineStage',
    'RiskItem',
    'RiskSignal',
    'HouseholdRiskScore',
    'AdvisorRevenue',
    'PipelineForecast',
    'TrendPoint',
    'AumCoverage',
    'RevenueData',
    'WeeklyMetric',
    'TaskSummary',
    'OpsWorkloadCategory',
    'OpsWorkload',
    'PracticeData',
    # API models
    'PracticeSnapshotRequest',
    'CrmSnapshotRequest',
    'CsvSnapshotRequest',
    'EngineConfigSummary',
    # Ingestion
    'ValidationError',
]
