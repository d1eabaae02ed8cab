"""
Pytest Configuration and Shared Fixtures for Practice Pulse Tests.

This module provides fixtures and configuration for all tests, supporting:
- A pinned reference instant (NOW) so every day count is deterministic
- Record factories that build tasks and households by age in days
- Engine settings with fixed rosters, independent of the environment

Dependencies:
- pytest
- pytest-asyncio (async API tests)
- httpx (AsyncClient over ASGITransport)
"""

from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional

import pytest

from practice_pulse.core.config import Settings
from practice_pulse.models import HouseholdRecord, TaskRecord


# ============================================================
# CONSTANTS
# ============================================================

NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

TEST_ADVISORS: List[str] = ["Alice Advisor", "Bob Advisor", "Cara Advisor"]
TEST_STAFF: List[str] = ["Sam Staff", "Tina Staff"]

INSTANCE_URL = "https://example.my.salesforce.com"


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Configure custom pytest markers for test organization.

    - scenario: end-to-end snapshot scenarios over the whole engine
    """
    config.addinivalue_line(
        'markers',
        'scenario: end-to-end practice snapshot scenarios'
    )


# ============================================================
# RECORD FACTORIES
# ============================================================

def days_ago(days: float) -> str:
    """ISO timestamp `days` before NOW (negative values are in the future)."""
    return (NOW - timedelta(days=days)).isoformat()


def build_task(
    id: str = "T1",
    subject: str = "Follow up",
    status: Optional[str] = "Not Started",
    priority: Optional[str] = "Normal",
    age_days: Optional[float] = 1,
    due_days_ago: Optional[float] = None,
    household: Optional[HouseholdRecord] = None,
    household_id: Optional[str] = None,
    household_name: Optional[str] = None,
    **extra: Any,
) -> TaskRecord:
    """
    Build a TaskRecord by age.

    `household` links the task by id and name; `household_id` /
    `household_name` override either. `due_days_ago` > 0 is a past due date.
    """
    return TaskRecord(
        id=id,
        subject=subject,
        status=status,
        priority=priority,
        createdDate=days_ago(age_days) if age_days is not None else None,
        dueDate=days_ago(due_days_ago) if due_days_ago is not None else None,
        householdId=household_id if household_id is not None else (household.id if household else None),
        householdName=household_name if household_name is not None else (household.name if household else None),
        **extra,
    )


def build_household(
    id: str = "H1",
    name: Optional[str] = None,
    age_days: Optional[float] = 1,
    description: Optional[str] = None,
    advisor_name: Optional[str] = None,
) -> HouseholdRecord:
    """Build a HouseholdRecord by age; the name defaults to '<id> Household'."""
    return HouseholdRecord(
        id=id,
        name=name if name is not None else f"{id} Household",
        createdDate=days_ago(age_days) if age_days is not None else None,
        description=description,
        advisorName=advisor_name,
    )


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def now() -> datetime:
    """The pinned reference instant."""
    return NOW


@pytest.fixture
def settings() -> Settings:
    """
    Engine settings with fixed rosters.

    The .env file is ignored and rosters are passed explicitly, so the
    developer's environment cannot change test outcomes.
    """
    return Settings(
        _env_file=None,
        known_advisors=list(TEST_ADVISORS),
        known_staff=list(TEST_STAFF),
    )
