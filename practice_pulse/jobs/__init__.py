"""
Batch Jobs for Practice Pulse.

- snapshot_export: build a practice snapshot from CRM CSV exports and write
  it as JSON (runnable as `python -m practice_pulse.jobs.snapshot_export`)

Idempotency:
- An existing snapshot file is never overwritten unless force=True.
"""

from practice_pulse.jobs.snapshot_export import ExportResult, export_snapshot

__all__ = [
    "ExportResult",
    "export_snapshot",
]
