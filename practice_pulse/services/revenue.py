"""
Revenue Estimator

Pure arithmetic over household counts, advisor attribution, pipeline
membership and a small assumptions struct.

Assumption precedence (later wins):
    settings defaults <- "Revenue Config:" directive (if honored) <- explicit overrides

AUM blending:
    blendedAum = sum(real balances of covered households)
                 + avgAumPerHousehold * uncovered households
A household is covered when its id carries a positive real balance.

The quarterly trend is reconstructed from household creation dates under
today's assumptions. It is a retroactive approximation, not a ledger, and
RevenueData.quarterlyTrendIsApproximation is always True.
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from practice_pulse.core.config import Settings
from practice_pulse.models import (
    AdvisorRevenue,
    AumCoverage,
    AumCoverageMode,
    HouseholdRecord,
    PipelineForecast,
    PipelineStage,
    RevenueAssumptions,
    RevenueData,
    RevenueOverrides,
    TrendPoint,
)
from practice_pulse.services.attribution import AdvisorAttribution
from practice_pulse.services.classification import ClassifiedRecords, round_int
from practice_pulse.services.extraction import extract_revenue_directive
from practice_pulse.services.pipeline import pipeline_households


logger = logging.getLogger(__name__)

BPS_DIVISOR = 10_000
QUARTER_DAYS = 90
QUARTER_LABELS = ["Q-3", "Q-2", "Q-1", "Current"]


# =============================================================================
# Assumptions
# =============================================================================


def default_assumptions(settings: Settings) -> RevenueAssumptions:
    return RevenueAssumptions(
        avgAumPerHousehold=settings.default_avg_aum_per_household,
        feeScheduleBps=settings.default_fee_schedule_bps,
        pipelineConversionRate=settings.default_pipeline_conversion_rate,
        pipelineAvgAum=settings.default_pipeline_avg_aum,
    )


def resolve_assumptions(
    settings: Settings,
    households: Sequence[HouseholdRecord],
    overrides: Optional[RevenueOverrides] = None,
) -> Tuple[RevenueAssumptions, bool]:
    """
    Layer defaults, the embedded directive and explicit overrides.

    Returns:
        Tuple of (effective assumptions, whether a directive was applied)
    """
    assumptions = default_assumptions(settings)
    directive_applied = False

    if settings.honor_revenue_directive:
        directive = extract_revenue_directive(households)
        if directive is not None:
            assumptions = directive.apply_to(assumptions)
            directive_applied = True

    if overrides is not None:
        assumptions = overrides.apply_to(assumptions)

    return assumptions, directive_applied


def fee_for(aum: float, assumptions: RevenueAssumptions) -> float:
    return aum * assumptions.feeScheduleBps / BPS_DIVISOR


# =============================================================================
# AUM Coverage
# =============================================================================


def _real_balance(
    household: HouseholdRecord,
    real_aum_by_household: Optional[Mapping[str, float]],
) -> Optional[float]:
    if not real_aum_by_household or not household.id:
        return None
    balance = real_aum_by_household.get(household.id)
    if balance is None or balance <= 0:
        return None
    return float(balance)


def calculate_aum_coverage(
    households: Sequence[HouseholdRecord],
    assumptions: RevenueAssumptions,
    real_aum_by_household: Optional[Mapping[str, float]] = None,
) -> AumCoverage:
    """
    Blend real balances with the average-AUM assumption.

    Args:
        households: Household records
        assumptions: Effective revenue assumptions
        real_aum_by_household: Actual balance per household id (optional)

    Returns:
        AumCoverage with mode none / partial / full
    """
    actual = 0.0
    covered = 0
    for household in households:
        balance = _real_balance(household, real_aum_by_household)
        if balance is not None:
            actual += balance
            covered += 1

    uncovered = len(households) - covered
    gap = uncovered * assumptions.avgAumPerHousehold

    if covered == 0:
        mode = AumCoverageMode.NONE
    elif uncovered == 0:
        mode = AumCoverageMode.FULL
    else:
        mode = AumCoverageMode.PARTIAL

    return AumCoverage(
        mode=mode,
        actualAum=actual,
        householdsWithRealAum=covered,
        householdsWithoutRealAum=uncovered,
        estimatedGapAum=gap,
        blendedAum=actual + gap,
    )


# =============================================================================
# Revenue Data
# =============================================================================


def revenue_per_advisor(
    records: ClassifiedRecords,
    attribution: AdvisorAttribution,
    assumptions: RevenueAssumptions,
    real_aum_by_household: Optional[Mapping[str, float]] = None,
) -> List[AdvisorRevenue]:
    """Per-advisor AUM and fee, sorted by fee descending."""
    counts: Dict[str, int] = {}
    aum: Dict[str, float] = {}
    for ch in records.households:
        advisor = attribution.advisor_for(ch.index)
        balance = _real_balance(ch.household, real_aum_by_household)
        counts[advisor] = counts.get(advisor, 0) + 1
        aum[advisor] = aum.get(advisor, 0.0) + (
            balance if balance is not None else assumptions.avgAumPerHousehold
        )

    rows = [
        AdvisorRevenue(
            name=name,
            households=count,
            estimatedAum=aum[name],
            annualFee=fee_for(aum[name], assumptions),
        )
        for name, count in counts.items()
    ]
    rows.sort(key=lambda r: r.annualFee, reverse=True)
    return rows


def forecast_pipeline(
    stages: Sequence[PipelineStage],
    assumptions: RevenueAssumptions,
) -> PipelineForecast:
    """Projected AUM and revenue from every household in the pipeline."""
    total = pipeline_households(list(stages)) * assumptions.pipelineAvgAum
    projected = total * assumptions.pipelineConversionRate
    return PipelineForecast(
        totalPipelineAum=total,
        projectedNewAum=projected,
        projectedNewRevenue=fee_for(projected, assumptions),
    )


def quarterly_trend(records: ClassifiedRecords, assumptions: RevenueAssumptions) -> List[TrendPoint]:
    """
    Annual fee run-rate (in thousands) at each of four quarter boundaries.

    A household counts at a boundary when it was created on or before it.
    """
    points = []
    for i, label in enumerate(QUARTER_LABELS):
        quarters_back = len(QUARTER_LABELS) - 1 - i
        cutoff_days = quarters_back * QUARTER_DAYS
        count = sum(1 for ch in records.households if ch.age_days >= cutoff_days)
        value = fee_for(count * assumptions.avgAumPerHousehold, assumptions) / 1000
        points.append(TrendPoint(label=label, value=round_int(value)))
    return points


def build_revenue_data(
    records: ClassifiedRecords,
    attribution: AdvisorAttribution,
    stages: Sequence[PipelineStage],
    assumptions: RevenueAssumptions,
    real_aum_by_household: Optional[Mapping[str, float]] = None,
) -> RevenueData:
    """
    Assemble the revenue block of the practice snapshot.

    Args:
        records: Classified records
        attribution: Advisor per household
        stages: Pipeline stages (for the forecast)
        assumptions: Effective revenue assumptions
        real_aum_by_household: Actual balance per household id (optional)

    Returns:
        RevenueData
    """
    households = [ch.household for ch in records.households]
    coverage = calculate_aum_coverage(households, assumptions, real_aum_by_household)

    logger.debug(
        f"AUM coverage {coverage.mode.value}: "
        f"{coverage.householdsWithRealAum} real, {coverage.householdsWithoutRealAum} estimated"
    )

    annual = fee_for(coverage.blendedAum, assumptions)
    return RevenueData(
        estimatedAum=coverage.blendedAum,
        annualFeeIncome=annual,
        monthlyFeeIncome=annual / 12,
        revenuePerAdvisor=revenue_per_advisor(records, attribution, assumptions, real_aum_by_household),
        pipelineForecast=forecast_pipeline(stages, assumptions),
        quarterlyTrend=quarterly_trend(records, assumptions),
        quarterlyTrendIsApproximation=True,
        aumCoverage=coverage,
    )
