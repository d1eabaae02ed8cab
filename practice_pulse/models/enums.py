"""
Enumeration definitions for the Practice Pulse engine.

All enums inherit from both `str` and `Enum` to ensure JSON serialization compatibility
with Pydantic models, enabling automatic serialization/deserialization in API responses.

Groups:
- Record classification: TaskTag
- Attribution: AttributionSource, StaffAttributionMode
- Pipeline: PipelineStageKey
- Risk Radar: RiskSeverity, RiskCategory, RiskAction
- Revenue: AumCoverageMode
- Workload: CapacityLabel
"""

from enum import Enum


class TaskTag(str, Enum):
    """
    Semantic tags assigned to a task by the record classifier.

    Tags come from subject-line conventions of the producing CRM:
    - compliance_review: "COMPLIANCE REVIEW"
    - docusign_sent: "SEND DOCU" or "DocuSign"
    - docusign_completed: a DocuSign task whose status is Completed
    - meeting_note: "MEETING NOTE"
    - account_open: "Account opening" or "ACCOUNT"
    - overdue: open task with a due date in the past
    """
    COMPLIANCE_REVIEW = "compliance_review"
    DOCUSIGN_SENT = "docusign_sent"
    DOCUSIGN_COMPLETED = "docusign_completed"
    MEETING_NOTE = "meeting_note"
    ACCOUNT_OPEN = "account_open"
    OVERDUE = "overdue"


class AttributionSource(str, Enum):
    """
    How a household's advisor was determined.

    - advisor_field: the advisor-of-record field (diverse ownership only)
    - description: parsed from the household description
    - round_robin: assigned from the known-advisor roster
    - unassigned: no roster available
    """
    ADVISOR_FIELD = "advisor_field"
    DESCRIPTION = "description"
    ROUND_ROBIN = "round_robin"
    UNASSIGNED = "unassigned"


class StaffAttributionMode(str, Enum):
    """
    Ops-staff attribution mechanism.

    - simulated: round-robin over non-meeting tasks (demo data only)
    - field: the task's real staff-assignment field
    """
    SIMULATED = "simulated"
    FIELD = "field"


class PipelineStageKey(str, Enum):
    """
    Ordered onboarding pipeline stages. Declaration order is stage order.
    """
    JUST_ONBOARDED = "just_onboarded"
    DOCUSIGN_SENT = "docusign_sent"
    DOCUSIGN_SIGNED = "docusign_signed"
    COMPLIANCE_DONE = "compliance_done"
    FULLY_ACTIVE = "fully_active"


class RiskSeverity(str, Enum):
    """
    Risk severity. Rank order: critical (0) < high (1) < medium (2).
    """
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    RiskSeverity.CRITICAL: 0,
    RiskSeverity.HIGH: 1,
    RiskSeverity.MEDIUM: 2,
}


class RiskCategory(str, Enum):
    """Risk Radar detection rule categories."""
    DOCUSIGN = "DocuSign"
    COMPLIANCE = "Compliance"
    OVERDUE_TASK = "Overdue Task"
    STALE_ACCOUNT = "Stale Account"


class RiskAction(str, Enum):
    """Suggested action attached to each risk category."""
    SEND_REMINDER = "Send Reminder"
    RUN_REVIEW = "Run Review"
    VIEW_TASK = "View Task"
    VIEW_FAMILY = "View Family"


class AumCoverageMode(str, Enum):
    """
    How much of the book has real (custodian-reported) AUM.

    - none: every household uses the average-AUM assumption
    - partial: some households have real balances
    - full: every household has a real balance
    """
    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"


class CapacityLabel(str, Enum):
    """Ops workload capacity band against an 8-hour day."""
    LIGHT = "Light"
    MODERATE = "Moderate"
    HEAVY = "Heavy"
