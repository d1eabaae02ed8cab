"""
Practice Snapshot Export Job.

Reads a task CSV export and a household CSV export, builds the practice
snapshot and writes it as JSON. Intended for scheduled runs against nightly
CRM exports.

Idempotency:
- An existing output file is never overwritten unless force=True, so a
  re-run of the same nightly export does not clobber an earlier snapshot.

Usage:
    from practice_pulse.jobs.snapshot_export import export_snapshot

    result = export_snapshot(
        "exports/tasks.csv",
        "exports/households.csv",
        "https://example.my.salesforce.com",
        "snapshots/2026-01-15.json",
    )

    # Command line
    python -m practice_pulse.jobs.snapshot_export tasks.csv households.csv \
        --instance-url https://example.my.salesforce.com --output snapshot.json

See Also:
    - practice_pulse/services/ingestion.py: CSV parsing and validation
    - practice_pulse/services/practice.py: build_practice_data()
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from practice_pulse.core.config import Settings
from practice_pulse.models import RevenueOverrides, ValidationError
from practice_pulse.services.ingestion import ingest_households_csv, ingest_tasks_csv
from practice_pulse.services.practice import build_practice_data

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# =============================================================================
# Result Model
# =============================================================================

@dataclass
class ExportResult:
    """
    Outcome of one export run.

    Attributes:
        success: True when a snapshot was written
        output_path: Destination of the JSON snapshot
        skipped: True when the output already existed and force was not set
        households: Households in the snapshot
        tasks: Tasks in the snapshot
        health_score: Composite health score of the snapshot
        errors: Ingestion errors that prevented the export
    """
    success: bool
    output_path: str
    skipped: bool = False
    households: int = 0
    tasks: int = 0
    health_score: Optional[int] = None
    errors: List[ValidationError] = field(default_factory=list)


# =============================================================================
# Export
# =============================================================================

def export_snapshot(
    tasks_csv: PathLike,
    households_csv: PathLike,
    instance_url: str,
    output_path: PathLike,
    revenue_overrides: Optional[RevenueOverrides] = None,
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
    force: bool = False,
) -> ExportResult:
    """
    Build a practice snapshot from two CSV exports and write it as JSON.

    Args:
        tasks_csv: Path of the task export
        households_csv: Path of the household export
        instance_url: CRM base URL for deep links
        output_path: Destination JSON file (parent directories are created)
        revenue_overrides: Optional explicit revenue assumptions
        settings: Engine settings (defaults to the process singleton)
        now: Reference instant (defaults to UTC now)
        force: Overwrite an existing output file

    Returns:
        ExportResult describing what happened
    """
    output = Path(output_path)

    if output.exists() and not force:
        logger.info(f"Snapshot {output} already exists, skipping (use force to overwrite)")
        return ExportResult(success=False, output_path=str(output), skipped=True)

    tasks, task_errors = ingest_tasks_csv(str(tasks_csv))
    households, household_errors = ingest_households_csv(str(households_csv))
    errors = task_errors + household_errors

    if errors or tasks is None or households is None:
        for error in errors:
            logger.error(f"Ingestion error in {error.field}: {error.message}")
        return ExportResult(success=False, output_path=str(output), errors=errors)

    snapshot = build_practice_data(
        tasks,
        households,
        instance_url,
        revenue_overrides,
        settings=settings,
        now=now,
    )

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
    logger.info(f"Wrote practice snapshot to {output}")

    return ExportResult(
        success=True,
        output_path=str(output),
        households=snapshot.totalHouseholds,
        tasks=snapshot.totalTasks,
        health_score=snapshot.healthScore,
    )


# =============================================================================
# Command Line Entry Point
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Export a practice snapshot from CRM CSV exports")
    parser.add_argument("tasks_csv", help="Task export CSV")
    parser.add_argument("households_csv", help="Household export CSV")
    parser.add_argument("--instance-url", default="", help="CRM base URL for deep links")
    parser.add_argument("--output", default="practice_snapshot.json", help="Output JSON path")
    parser.add_argument("--force", action="store_true", help="Overwrite an existing output file")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    result = export_snapshot(
        args.tasks_csv,
        args.households_csv,
        args.instance_url,
        args.output,
        force=args.force,
    )
    if result.success or result.skipped:
        return 0
    return 1


if __name__ == "__main__":
    sys.exit(main())
