"""
CRM Record Ingestion Service

Turns CRM exports into typed TaskRecord / HouseholdRecord lists for the
practice engine. Two sources are supported:

1. Raw CRM REST payloads (dicts shaped like the CRM's SOQL results), mapped
   by normalize_crm_task() / normalize_crm_household(). Relationship fields
   may arrive nested ({"What": {"Name": ...}}) or flattened ("What.Name").
2. CSV exports parsed with pandas. Column names are matched
   case-insensitively against both the CRM field names (Id, Subject,
   ActivityDate, What.Name, ...) and the engine's own field names
   (id, subject, dueDate, householdName, ...).

Validation:
- Required columns: tasks need id and subject; households need id and name
- Missing cells become empty values; the engine degrades them downstream
- Problems are returned as ValidationError entries, never raised
"""

from typing import Any, BinaryIO, Dict, List, Mapping, Optional, TextIO, Tuple, Union
import io
import logging

import pandas as pd

from practice_pulse.models import HouseholdRecord, TaskRecord, ValidationError

# Configure module logger
logger = logging.getLogger(__name__)

CsvSource = Union[BinaryIO, TextIO, str]

# =============================================================================
# CONSTANTS - Column Mappings
# =============================================================================

# Lower-cased source column -> TaskRecord field
TASK_COLUMN_ALIASES: Dict[str, str] = {
    'id': 'id',
    'subject': 'subject',
    'status': 'status',
    'priority': 'priority',
    'description': 'description',
    'createddate': 'createdDate',
    'activitydate': 'dueDate',
    'duedate': 'dueDate',
    'what.id': 'householdId',
    'whatid': 'householdId',
    'householdid': 'householdId',
    'what.name': 'householdName',
    'householdname': 'householdName',
    'owner.name': 'assignedStaff',
    'assignedstaff': 'assignedStaff',
}

# Lower-cased source column -> HouseholdRecord field
HOUSEHOLD_COLUMN_ALIASES: Dict[str, str] = {
    'id': 'id',
    'name': 'name',
    'createddate': 'createdDate',
    'description': 'description',
    'owner.name': 'advisorName',
    'advisorname': 'advisorName',
}

TASK_REQUIRED_FIELDS: List[str] = ['id', 'subject']
HOUSEHOLD_REQUIRED_FIELDS: List[str] = ['id', 'name']


# =============================================================================
# RAW PAYLOAD NORMALIZATION
# =============================================================================

def _lookup(raw: Mapping[str, Any], path: str) -> Optional[Any]:
    """
    Read a possibly dotted CRM field from a payload.

    "What.Name" is resolved as raw["What"]["Name"] first, then as the
    flattened key raw["What.Name"].
    """
    head, _, tail = path.partition('.')
    if tail:
        nested = raw.get(head)
        if isinstance(nested, Mapping) and nested.get(tail) is not None:
            return nested.get(tail)
    return raw.get(path)


def _text(value: Any) -> Optional[str]:
    """Stringify a payload value; None and blank strings become None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_crm_task(raw: Mapping[str, Any]) -> TaskRecord:
    """
    Map a CRM Task payload to a TaskRecord.

    Args:
        raw: Task dict with CRM field names (Id, Subject, Status, Priority,
            Description, CreatedDate, ActivityDate, What.Id, What.Name,
            Owner.Name)

    Returns:
        TaskRecord (missing fields take their defaults)
    """
    return TaskRecord(
        id=_text(_lookup(raw, 'Id')) or '',
        subject=_text(_lookup(raw, 'Subject')) or '',
        status=_text(_lookup(raw, 'Status')),
        priority=_text(_lookup(raw, 'Priority')),
        description=_text(_lookup(raw, 'Description')) or '',
        createdDate=_text(_lookup(raw, 'CreatedDate')),
        dueDate=_text(_lookup(raw, 'ActivityDate')),
        householdId=_text(_lookup(raw, 'What.Id')) or _text(_lookup(raw, 'WhatId')),
        householdName=_text(_lookup(raw, 'What.Name')),
        assignedStaff=_text(_lookup(raw, 'Owner.Name')),
    )


def normalize_crm_household(raw: Mapping[str, Any]) -> HouseholdRecord:
    """
    Map a CRM household Account payload to a HouseholdRecord.

    The record owner (Owner.Name) is the advisor-of-record field; the engine
    only trusts it when ownership across the book is diverse.
    """
    return HouseholdRecord(
        id=_text(_lookup(raw, 'Id')) or '',
        name=_text(_lookup(raw, 'Name')) or '',
        createdDate=_text(_lookup(raw, 'CreatedDate')),
        description=_text(_lookup(raw, 'Description')),
        advisorName=_text(_lookup(raw, 'Owner.Name')),
    )


def normalize_crm_payload(
    tasks: List[Mapping[str, Any]],
    households: List[Mapping[str, Any]],
) -> Tuple[List[TaskRecord], List[HouseholdRecord]]:
    """Normalize raw task and household payload lists in one call."""
    return (
        [normalize_crm_task(t) for t in tasks],
        [normalize_crm_household(h) for h in households],
    )


# =============================================================================
# CSV INGESTION
# =============================================================================

def _read_csv(file: CsvSource) -> Tuple[Optional[pd.DataFrame], List[ValidationError]]:
    """
    Parse a CSV export into an all-string DataFrame.

    Returns:
        Tuple of (DataFrame or None, list of validation errors)
    """
    errors: List[ValidationError] = []

    try:
        if hasattr(file, 'read'):
            content = file.read()
            if isinstance(content, bytes):
                file_like = io.BytesIO(content)
            else:
                file_like = io.StringIO(content)
        else:
            file_like = file

        df = pd.read_csv(file_like, dtype=str, keep_default_na=False)

    except Exception as e:
        errors.append(ValidationError(
            field='file',
            message=f'Failed to parse CSV file: {str(e)}',
            row_number=None
        ))
        return None, errors

    logger.info(f"Parsed CSV with {len(df)} rows and {len(df.columns)} columns")
    return df, errors


def map_columns(df: pd.DataFrame, aliases: Mapping[str, str]) -> pd.DataFrame:
    """
    Rename recognized columns to record field names and drop the rest.

    When two source columns map to the same field, the first one wins.
    """
    renames: Dict[str, str] = {}
    seen = set()
    for column in df.columns:
        target = aliases.get(str(column).strip().lower())
        if target and target not in seen:
            renames[column] = target
            seen.add(target)
    return df[list(renames)].rename(columns=renames)


def validate_columns(
    df: pd.DataFrame,
    required_fields: List[str],
    record_type: str,
) -> List[ValidationError]:
    """
    Validate that all required fields are present after column mapping.

    Args:
        df: Column-mapped DataFrame
        required_fields: Record fields that must be present
        record_type: "task" or "household", for messages

    Returns:
        List of ValidationError objects for any missing columns
    """
    errors: List[ValidationError] = []
    for field_name in required_fields:
        if field_name not in df.columns:
            errors.append(ValidationError(
                field=field_name,
                message=f"Required column '{field_name}' is missing for {record_type} export",
                row_number=None
            ))
    return errors


def _row_values(row: Dict[str, str]) -> Dict[str, Optional[str]]:
    values: Dict[str, Optional[str]] = {}
    for key, value in row.items():
        text = value.strip() if isinstance(value, str) else value
        if text:
            values[key] = text
    return values


def _ingest_records(
    file: CsvSource,
    aliases: Mapping[str, str],
    required_fields: List[str],
    record_type: str,
    model: type,
) -> Tuple[Optional[list], List[ValidationError]]:
    df, errors = _read_csv(file)
    if df is None:
        return None, errors

    df = map_columns(df, aliases)
    column_errors = validate_columns(df, required_fields, record_type)
    if column_errors:
        return None, errors + column_errors

    records = []
    blank_ids = 0
    for row in df.to_dict(orient='records'):
        values = _row_values(row)
        if not values.get('id'):
            blank_ids += 1
        records.append(model(**values))

    if blank_ids:
        logger.warning(f"{blank_ids} {record_type} rows have no id")
    logger.info(f"Ingested {len(records)} {record_type} records")
    return records, errors


def ingest_tasks_csv(file: CsvSource) -> Tuple[Optional[List[TaskRecord]], List[ValidationError]]:
    """
    Parse and validate a task CSV export.

    Args:
        file: File object (binary or text) or path of the CSV export

    Returns:
        Tuple of (TaskRecords or None, list of validation errors)
    """
    return _ingest_records(file, TASK_COLUMN_ALIASES, TASK_REQUIRED_FIELDS, 'task', TaskRecord)


def ingest_households_csv(file: CsvSource) -> Tuple[Optional[List[HouseholdRecord]], List[ValidationError]]:
    """
    Parse and validate a household CSV export.

    Args:
        file: File object (binary or text) or path of the CSV export

    Returns:
        Tuple of (HouseholdRecords or None, list of validation errors)
    """
    return _ingest_records(
        file, HOUSEHOLD_COLUMN_ALIASES, HOUSEHOLD_REQUIRED_FIELDS, 'household', HouseholdRecord
    )
