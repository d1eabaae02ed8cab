"""
Pipeline Stage Classifier

Places every household in exactly one onboarding stage, most advanced state
wins:

    Just Onboarded (7d) -> DocuSign Sent (5d) -> DocuSign Signed (10d)
        -> Compliance Done (14d) -> Fully Active (terminal)

Fully Active requires a compliance review, a signed envelope and a meeting
note. A non-terminal household whose age exceeds its stage benchmark is
counted as stuck.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from practice_pulse.models import PipelineHousehold, PipelineStage, PipelineStageKey, TaskTag
from practice_pulse.services.classification import ClassifiedRecords, round_half_up, round_int


# (key, label, benchmark days); declaration order is stage order
STAGE_DEFINITIONS: List[Tuple[PipelineStageKey, str, int]] = [
    (PipelineStageKey.JUST_ONBOARDED, "Just Onboarded", 7),
    (PipelineStageKey.DOCUSIGN_SENT, "DocuSign Sent", 5),
    (PipelineStageKey.DOCUSIGN_SIGNED, "DocuSign Signed", 10),
    (PipelineStageKey.COMPLIANCE_DONE, "Compliance Done", 14),
    (PipelineStageKey.FULLY_ACTIVE, "Fully Active", 0),
]

TERMINAL_STAGE = PipelineStageKey.FULLY_ACTIVE


@dataclass
class HouseholdProgress:
    """Onboarding milestones observed for one household."""
    has_compliance: bool = False
    has_docusign_sent: bool = False
    has_docusign_signed: bool = False
    has_meeting: bool = False
    has_account_open: bool = False


def collect_progress(records: ClassifiedRecords) -> Dict[int, HouseholdProgress]:
    """Milestones per household index, from the tags of its linked tasks."""
    progress = {ch.index: HouseholdProgress() for ch in records.households}
    for ct in records.tasks:
        if ct.household_index is None:
            continue
        hp = progress[ct.household_index]
        if TaskTag.COMPLIANCE_REVIEW in ct.tags:
            hp.has_compliance = True
        if TaskTag.DOCUSIGN_SENT in ct.tags:
            hp.has_docusign_sent = True
        if TaskTag.DOCUSIGN_COMPLETED in ct.tags:
            hp.has_docusign_signed = True
        if TaskTag.MEETING_NOTE in ct.tags:
            hp.has_meeting = True
        if TaskTag.ACCOUNT_OPEN in ct.tags:
            hp.has_account_open = True
    return progress


def stage_for(progress: HouseholdProgress) -> PipelineStageKey:
    """Most-advanced-state-wins stage of a household."""
    if progress.has_compliance and progress.has_docusign_signed and progress.has_meeting:
        return PipelineStageKey.FULLY_ACTIVE
    if progress.has_compliance:
        return PipelineStageKey.COMPLIANCE_DONE
    if progress.has_docusign_signed:
        return PipelineStageKey.DOCUSIGN_SIGNED
    if progress.has_docusign_sent:
        return PipelineStageKey.DOCUSIGN_SENT
    return PipelineStageKey.JUST_ONBOARDED


def velocity_ratio(avg_days: int, benchmark_days: int) -> float:
    """avgDays / benchmark rounded to one decimal; 0 without a benchmark."""
    if benchmark_days <= 0:
        return 0.0
    return round_half_up(avg_days / benchmark_days, 1)


def classify_pipeline(records: ClassifiedRecords) -> List[PipelineStage]:
    """
    Build the five ordered pipeline stages.

    Args:
        records: Classified task and household records

    Returns:
        Stages in funnel order; stage counts sum to the household count
    """
    stages = [
        PipelineStage(key=key, label=label, benchmarkDays=benchmark)
        for key, label, benchmark in STAGE_DEFINITIONS
    ]
    stage_index = {stage.key: i for i, stage in enumerate(stages)}
    progress = collect_progress(records)

    for ch in records.households:
        stage = stages[stage_index[stage_for(progress[ch.index])]]
        stage.count += 1
        stage.households.append(
            PipelineHousehold(name=ch.household.name, id=ch.household.id, days=ch.age_days)
        )
        if stage.key != TERMINAL_STAGE and ch.age_days > stage.benchmarkDays:
            stage.stuck += 1

    for stage in stages:
        if stage.households:
            stage.avgDays = round_int(
                sum(h.days for h in stage.households) / len(stage.households)
            )
            stage.velocityRatio = velocity_ratio(stage.avgDays, stage.benchmarkDays)

    total = max(len(records.households), 1)
    for i, stage in enumerate(stages):
        if stage.key == TERMINAL_STAGE:
            stage.conversionRate = 100
        else:
            beyond = sum(s.count for s in stages[i + 1:])
            stage.conversionRate = round_int(beyond / total * 100)

    return stages


def pipeline_households(stages: List[PipelineStage]) -> int:
    """Households placed across every stage, Fully Active included."""
    return sum(stage.count for stage in stages)
