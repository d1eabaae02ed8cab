"""
Pydantic models for the Practice Pulse engine and API.

This module provides type-safe data validation and serialization for:
- CRM input records (TaskRecord, HouseholdRecord)
- Revenue assumptions and overrides
- Derived snapshot entities (AdvisorScore, OpsStaffScore, PipelineStage, RiskItem, ...)
- The PracticeData aggregate root consumed by dashboard views
- API request bodies and ingestion validation errors

Field names are camelCase to keep the dashboard JSON contract unchanged.
All models use Pydantic v2 syntax.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from practice_pulse.models.enums import (
    AttributionSource,
    AumCoverageMode,
    CapacityLabel,
    PipelineStageKey,
    RiskAction,
    RiskCategory,
    RiskSeverity,
    StaffAttributionMode,
)


# =============================================================================
# Input Records
# =============================================================================

# Input records never reject a malformed value; the engine degrades it instead.
_LENIENT_RECORD = ConfigDict(
    extra='ignore',
    coerce_numbers_to_str=True,
    frozen=True,
)


class TaskRecord(BaseModel):
    """
    A CRM task (activity) record.

    Dates are kept as the raw strings the CRM returned; the record classifier
    parses them and treats unparseable values as 0 days elapsed.
    """
    model_config = ConfigDict(
        **_LENIENT_RECORD,
        json_schema_extra={
            "example": {
                "id": "00T5e000001",
                "subject": "SEND DOCU - Advisory Agreement",
                "status": "Not Started",
                "priority": "High",
                "description": "",
                "createdDate": "2026-01-02T15:04:05.000+0000",
                "dueDate": "2026-01-09",
                "householdId": "0015e000001",
                "householdName": "Smith Household",
            }
        },
    )

    id: str = ""
    subject: str = ""
    status: Optional[str] = None
    priority: Optional[str] = None
    description: str = ""
    createdDate: Optional[str] = None
    dueDate: Optional[str] = None
    householdId: Optional[str] = None
    householdName: Optional[str] = None
    assignedStaff: Optional[str] = Field(
        default=None,
        description="Real staff-assignment field; only read in 'field' staff attribution mode",
    )

    @field_validator("id", "subject", "description", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class HouseholdRecord(BaseModel):
    """
    A CRM household (account) record.

    The description is free text and may carry an advisor label
    ("Assigned Advisor: ...") and/or a "Revenue Config:" directive.
    """
    model_config = ConfigDict(
        **_LENIENT_RECORD,
        json_schema_extra={
            "example": {
                "id": "0015e000001",
                "name": "Smith Household",
                "createdDate": "2025-11-20T10:00:00.000+0000",
                "description": "Assigned Advisor: Amy Sato",
                "advisorName": None,
            }
        },
    )

    id: str = ""
    name: str = ""
    createdDate: Optional[str] = None
    description: Optional[str] = None
    advisorName: Optional[str] = Field(
        default=None,
        description="Advisor-of-record field (trusted only when ownership is diverse)",
    )

    @field_validator("id", "name", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


# =============================================================================
# Revenue Assumptions
# =============================================================================


class RevenueAssumptions(BaseModel):
    """Revenue model inputs used by the revenue estimator."""
    avgAumPerHousehold: float = Field(default=2_000_000, ge=0)
    feeScheduleBps: float = Field(default=85, ge=0)
    pipelineConversionRate: float = Field(default=0.65, ge=0.0, le=1.0)
    pipelineAvgAum: float = Field(default=1_500_000, ge=0)


class RevenueOverrides(BaseModel):
    """Partial RevenueAssumptions; unset fields keep the underlying value."""
    avgAumPerHousehold: Optional[float] = Field(default=None, ge=0)
    feeScheduleBps: Optional[float] = Field(default=None, ge=0)
    pipelineConversionRate: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    pipelineAvgAum: Optional[float] = Field(default=None, ge=0)

    def apply_to(self, assumptions: RevenueAssumptions) -> RevenueAssumptions:
        """Return a copy of `assumptions` with every set field replaced."""
        return assumptions.model_copy(update=self.model_dump(exclude_none=True))


# =============================================================================
# Health Score
# =============================================================================


class HealthFactor(BaseModel):
    """One weighted factor of the composite health score."""
    label: str
    score: int = Field(..., ge=0, le=100)
    weight: int = Field(..., ge=0, le=100)


# =============================================================================
# Scoreboards
# =============================================================================


class AdvisorScore(BaseModel):
    """Per-advisor scoreboard row."""
    name: str
    households: int = 0
    openTasks: int = 0
    overdueTasks: int = 0
    unsigned: int = 0
    compliancePct: int = 100
    meetingsLast90: int = 0
    score: int = Field(default=100, ge=0, le=100)
    dataWarning: Optional[str] = None


class OpsStaffScore(BaseModel):
    """Per-staff workload row."""
    name: str
    openTasks: int = 0
    overdueTasks: int = 0
    completedThisWeek: int = 0
    avgTaskAgeDays: int = 0
    onboardings: int = 0
    docusign: int = 0
    score: int = Field(default=100, ge=0, le=100)


# =============================================================================
# Pipeline
# =============================================================================


class PipelineHousehold(BaseModel):
    """A household's membership entry inside a pipeline stage."""
    name: str
    id: str
    days: int


class PipelineStage(BaseModel):
    """One stage of the onboarding pipeline funnel."""
    key: PipelineStageKey
    label: str
    count: int = 0
    stuck: int = 0
    households: List[PipelineHousehold] = Field(default_factory=list)
    avgDays: int = 0
    benchmarkDays: int = 0
    velocityRatio: float = 0.0
    conversionRate: int = 0


# =============================================================================
# Risk Radar
# =============================================================================


class RiskItem(BaseModel):
    """A single detected practice risk."""
    id: str
    label: str
    household: str
    householdId: str
    severity: RiskSeverity
    category: RiskCategory
    action: RiskAction
    daysStale: int
    url: str


class RiskSignal(BaseModel):
    label: str
    severity: RiskSeverity


class HouseholdRiskScore(BaseModel):
    """Composite per-household score derived from its risk items."""
    name: str
    id: str
    score: int = Field(..., ge=0, le=100)
    signals: List[RiskSignal] = Field(default_factory=list)


# =============================================================================
# Revenue
# =============================================================================


class AdvisorRevenue(BaseModel):
    name: str
    households: int
    estimatedAum: float
    annualFee: float


class PipelineForecast(BaseModel):
    totalPipelineAum: float = 0.0
    projectedNewAum: float = 0.0
    projectedNewRevenue: float = 0.0


class TrendPoint(BaseModel):
    label: str
    value: int


class AumCoverage(BaseModel):
    """Blend of real per-household balances and the average-AUM assumption."""
    mode: AumCoverageMode = AumCoverageMode.NONE
    actualAum: float = 0.0
    householdsWithRealAum: int = 0
    householdsWithoutRealAum: int = 0
    estimatedGapAum: float = 0.0
    blendedAum: float = 0.0


class RevenueData(BaseModel):
    """
    Revenue estimates.

    quarterlyTrend is reconstructed from household creation dates under the
    current assumptions; it is an approximation, not a ledger.
    """
    estimatedAum: float = 0.0
    annualFeeIncome: float = 0.0
    monthlyFeeIncome: float = 0.0
    revenuePerAdvisor: List[AdvisorRevenue] = Field(default_factory=list)
    pipelineForecast: PipelineForecast = Field(default_factory=PipelineForecast)
    quarterlyTrend: List[TrendPoint] = Field(default_factory=list)
    quarterlyTrendIsApproximation: bool = True
    aumCoverage: AumCoverage = Field(default_factory=AumCoverage)


# =============================================================================
# Weekly Trends, Detail Items, Workload
# =============================================================================


class WeeklyMetric(BaseModel):
    """A tracked record category with its 7-day-window history (oldest first)."""
    label: str
    thisWeek: int = 0
    lastWeek: int = 0
    history: List[int] = Field(default_factory=list)


class TaskSummary(BaseModel):
    """Detail-drawer entry behind a headline count."""
    id: str
    subject: str
    household: str
    householdId: str
    daysOld: int
    status: str
    priority: str


class OpsWorkloadCategory(BaseModel):
    label: str
    count: int = 0
    urgent: int = 0
    estMinutes: int = 0


class OpsWorkload(BaseModel):
    """Task queue by category with a capacity estimate against an 8-hour day."""
    categories: List[OpsWorkloadCategory] = Field(default_factory=list)
    totalItems: int = 0
    totalUrgent: int = 0
    totalHours: float = 0.0
    capacityPct: int = 0
    capacityLabel: CapacityLabel = CapacityLabel.LIGHT


# =============================================================================
# Aggregate Root
# =============================================================================


class PracticeData(BaseModel):
    """
    Complete practice metrics snapshot.

    Created fresh on every engine call; carries no identity beyond the call.
    """
    healthScore: int = Field(..., ge=0, le=100)
    healthBreakdown: List[HealthFactor]
    advisors: List[AdvisorScore]
    opsStaff: List[OpsStaffScore]
    staffAttribution: StaffAttributionMode
    pipeline: List[PipelineStage]
    risks: List[RiskItem]
    householdRiskScores: List[HouseholdRiskScore]
    totalHouseholds: int
    totalTasks: int
    completedTasks: int
    openTasks: int
    complianceReviews: int
    meetingNotes: int
    unsigned: int
    revenue: RevenueData
    assumptions: RevenueAssumptions
    weeklyComparison: List[WeeklyMetric]
    opsWorkload: OpsWorkload
    openTaskItems: List[TaskSummary]
    unsignedItems: List[TaskSummary]
    reviewItems: List[TaskSummary]
    meetingItems: List[TaskSummary]
    householdAdvisors: Dict[str, str]
    attributionSummary: Dict[AttributionSource, int]
    instanceUrl: str
    generatedAt: datetime


# =============================================================================
# API Request Models
# =============================================================================


class PracticeSnapshotRequest(BaseModel):
    """Request body for POST /practice/snapshot."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "tasks": [TaskRecord.model_config["json_schema_extra"]["example"]],
                "households": [HouseholdRecord.model_config["json_schema_extra"]["example"]],
                "instanceUrl": "https://example.my.salesforce.com",
                "revenueOverrides": {"feeScheduleBps": 90},
            }
        }
    )

    tasks: List[TaskRecord] = Field(default_factory=list)
    households: List[HouseholdRecord] = Field(default_factory=list)
    instanceUrl: str = ""
    revenueOverrides: Optional[RevenueOverrides] = None
    realAumByHousehold: Optional[Dict[str, float]] = None


class CrmSnapshotRequest(BaseModel):
    """Request body for POST /practice/snapshot/crm (raw CRM-shaped payloads)."""
    tasks: List[Dict[str, Any]] = Field(default_factory=list)
    households: List[Dict[str, Any]] = Field(default_factory=list)
    instanceUrl: str = ""
    revenueOverrides: Optional[RevenueOverrides] = None
    realAumByHousehold: Optional[Dict[str, float]] = None


class CsvSnapshotRequest(BaseModel):
    """Request body for POST /practice/snapshot/csv (CSV export text)."""
    tasksCsv: str = Field(..., description="Task export, CSV text with a header row")
    householdsCsv: str = Field(..., description="Household export, CSV text with a header row")
    instanceUrl: str = ""
    revenueOverrides: Optional[RevenueOverrides] = None
    realAumByHousehold: Optional[Dict[str, float]] = None


class EngineConfigSummary(BaseModel):
    """Active engine policy constants, as exposed by GET /practice/config."""
    healthWeights: Dict[str, int]
    knownAdvisors: List[str]
    knownStaff: List[str]
    advisorDiversityThreshold: int
    staffAttributionMode: StaffAttributionMode
    honorRevenueDirective: bool
    riskLimit: int
    trendWeeks: int


# =============================================================================
# Ingestion
# =============================================================================


class ValidationError(BaseModel):
    """A problem found while ingesting a CRM export."""
    field: str = Field(..., description="Column or input field with the problem")
    message: str = Field(..., description="Human-readable error message")
    row_number: Optional[int] = Field(default=None, description="1-based data row, when applicable")
