"""
FastAPI router module for practice snapshot endpoints.

This module implements endpoints for:
- Full practice snapshots from typed records, raw CRM payloads or CSV exports
- Risk queue and pipeline funnel slices of the snapshot
- Default revenue assumptions and the active engine configuration

The engine is synchronous and CPU-bound, so handlers are plain `def`
functions and run in FastAPI's threadpool. The engine never raises on
malformed records; request-body validation is handled by FastAPI (422) and
CSV problems are reported as 400 with the ingestion error list.
"""

import io
import logging
from typing import List

from fastapi import APIRouter, HTTPException

from practice_pulse.core.config import Settings
from practice_pulse.core.dependencies import SettingsDep
from practice_pulse.models import (
    CrmSnapshotRequest,
    CsvSnapshotRequest,
    EngineConfigSummary,
    PipelineStage,
    PracticeData,
    PracticeSnapshotRequest,
    RevenueAssumptions,
    RiskItem,
)
from practice_pulse.services.health_score import (
    COMPLIANCE_LABEL,
    DOCUSIGN_LABEL,
    MEETINGS_LABEL,
    TASKS_LABEL,
)
from practice_pulse.services.ingestion import (
    ingest_households_csv,
    ingest_tasks_csv,
    normalize_crm_payload,
)
from practice_pulse.services.practice import build_practice_data
from practice_pulse.services.revenue import default_assumptions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/practice", tags=["practice"])


def _build_snapshot(request: PracticeSnapshotRequest, settings: Settings) -> PracticeData:
    try:
        return build_practice_data(
            request.tasks,
            request.households,
            request.instanceUrl,
            request.revenueOverrides,
            real_aum_by_household=request.realAumByHousehold,
            settings=settings,
        )
    except Exception as e:
        logger.error(f"Error building practice snapshot: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error building practice snapshot: {str(e)}",
        )


# =============================================================================
# Snapshot Endpoints
# =============================================================================


@router.post("/snapshot", response_model=PracticeData)
def create_snapshot(request: PracticeSnapshotRequest, settings: SettingsDep) -> PracticeData:
    """
    Build a complete practice snapshot from typed task and household records.

    Args:
        request: Tasks, households, CRM instance URL and optional revenue
            overrides / real AUM balances

    Returns:
        PracticeData snapshot
    """
    return _build_snapshot(request, settings)


@router.post("/snapshot/crm", response_model=PracticeData)
def create_snapshot_from_crm(request: CrmSnapshotRequest, settings: SettingsDep) -> PracticeData:
    """
    Build a snapshot from raw CRM-shaped payloads.

    Task dicts use CRM field names (Id, Subject, Status, Priority,
    CreatedDate, ActivityDate, What.Name, ...); household dicts use Id, Name,
    CreatedDate, Description and Owner.Name.
    """
    tasks, households = normalize_crm_payload(request.tasks, request.households)
    logger.info(f"Normalized {len(tasks)} CRM tasks and {len(households)} CRM households")
    return _build_snapshot(
        PracticeSnapshotRequest(
            tasks=tasks,
            households=households,
            instanceUrl=request.instanceUrl,
            revenueOverrides=request.revenueOverrides,
            realAumByHousehold=request.realAumByHousehold,
        ),
        settings,
    )


@router.post("/snapshot/csv", response_model=PracticeData)
def create_snapshot_from_csv(request: CsvSnapshotRequest, settings: SettingsDep) -> PracticeData:
    """
    Build a snapshot from task and household CSV exports.

    Raises:
        HTTPException 400: If either export fails to parse or lacks a
            required column; the detail lists every ingestion error
    """
    tasks, task_errors = ingest_tasks_csv(io.StringIO(request.tasksCsv))
    households, household_errors = ingest_households_csv(io.StringIO(request.householdsCsv))

    errors = task_errors + household_errors
    if errors or tasks is None or households is None:
        raise HTTPException(
            status_code=400,
            detail=[error.model_dump() for error in errors],
        )

    return _build_snapshot(
        PracticeSnapshotRequest(
            tasks=tasks,
            households=households,
            instanceUrl=request.instanceUrl,
            revenueOverrides=request.revenueOverrides,
            realAumByHousehold=request.realAumByHousehold,
        ),
        settings,
    )


@router.post("/risks", response_model=List[RiskItem])
def list_risks(request: PracticeSnapshotRequest, settings: SettingsDep) -> List[RiskItem]:
    """Severity-sorted risk queue, capped at the configured risk limit."""
    return _build_snapshot(request, settings).risks


@router.post("/pipeline", response_model=List[PipelineStage])
def list_pipeline(request: PracticeSnapshotRequest, settings: SettingsDep) -> List[PipelineStage]:
    """The five onboarding pipeline stages in funnel order."""
    return _build_snapshot(request, settings).pipeline


# =============================================================================
# Configuration Endpoints
# =============================================================================


@router.get("/assumptions", response_model=RevenueAssumptions)
def get_default_assumptions(settings: SettingsDep) -> RevenueAssumptions:
    """Default revenue assumptions before any directive or override."""
    return default_assumptions(settings)


@router.get("/config", response_model=EngineConfigSummary)
def get_engine_config(settings: SettingsDep) -> EngineConfigSummary:
    """Active engine policy constants."""
    return EngineConfigSummary(
        healthWeights={
            COMPLIANCE_LABEL: settings.health_weight_compliance,
            DOCUSIGN_LABEL: settings.health_weight_docusign,
            TASKS_LABEL: settings.health_weight_tasks,
            MEETINGS_LABEL: settings.health_weight_meetings,
        },
        knownAdvisors=settings.known_advisors,
        knownStaff=settings.known_staff,
        advisorDiversityThreshold=settings.advisor_diversity_threshold,
        staffAttributionMode=settings.staff_attribution_mode,
        honorRevenueDirective=settings.honor_revenue_directive,
        riskLimit=settings.risk_limit,
        trendWeeks=settings.trend_weeks,
    )
