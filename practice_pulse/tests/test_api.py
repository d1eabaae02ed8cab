"""
Pytest test module for the Practice Pulse HTTP API.

Requests go through httpx.AsyncClient over ASGITransport, so no server is
started. Settings are injected with a dependency override; record dates are
far enough in the past that results do not depend on the wall clock.
"""

from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio

from practice_pulse import __version__
from practice_pulse.core.dependencies import get_settings_dependency
from practice_pulse.main import app
from practice_pulse.models import RiskSeverity


pytestmark = pytest.mark.asyncio

OLD_DATE = "2020-01-01T00:00:00.000+0000"

SNAPSHOT_BODY = {
    "tasks": [
        {
            "id": "T1",
            "subject": "SEND DOCU - agreement",
            "status": "Not Started",
            "priority": "High",
            "createdDate": OLD_DATE,
            "householdId": "H1",
            "householdName": "Smith",
        },
    ],
    "households": [
        {"id": "H1", "name": "Smith", "createdDate": OLD_DATE},
        {"id": "H2", "name": "Jones", "createdDate": OLD_DATE},
    ],
    "instanceUrl": "https://example.my.salesforce.com/",
    "revenueOverrides": {"feeScheduleBps": 100},
}


@pytest_asyncio.fixture
async def client(settings) -> AsyncGenerator[httpx.AsyncClient, None]:
    """AsyncClient bound to the app with test settings injected."""
    app.dependency_overrides[get_settings_dependency] = lambda: settings
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# =============================================================================
# Test Class: TestServiceEndpoints
# =============================================================================

class TestServiceEndpoints:

    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    async def test_root(self, client):
        response = await client.get("/")
        assert response.status_code == 200
        assert response.json()["version"] == __version__


# =============================================================================
# Test Class: TestSnapshotEndpoints
# =============================================================================

class TestSnapshotEndpoints:

    async def test_snapshot(self, client):
        response = await client.post("/practice/snapshot", json=SNAPSHOT_BODY)

        assert response.status_code == 200
        data = response.json()
        assert data["totalHouseholds"] == 2
        assert data["totalTasks"] == 1
        assert data["unsigned"] == 1
        assert data["assumptions"]["feeScheduleBps"] == 100
        assert data["staffAttribution"] == "simulated"
        assert sum(stage["count"] for stage in data["pipeline"]) == 2
        assert data["householdAdvisors"] == {"H1": "Alice Advisor", "H2": "Bob Advisor"}
        assert data["attributionSummary"]["round_robin"] == 2

    async def test_snapshot_deep_links(self, client):
        response = await client.post("/practice/snapshot", json=SNAPSHOT_BODY)
        risks = response.json()["risks"]

        docusign = next(r for r in risks if r["category"] == "DocuSign")
        assert docusign["url"] == "https://example.my.salesforce.com/T1"
        assert docusign["severity"] == RiskSeverity.CRITICAL.value

    async def test_empty_snapshot(self, client):
        response = await client.post("/practice/snapshot", json={})
        assert response.status_code == 200
        assert response.json()["healthScore"] == 100

    async def test_null_text_fields_degrade_to_empty(self, client):
        body = {
            "tasks": [
                *SNAPSHOT_BODY["tasks"],
                {"id": None, "subject": None, "description": None, "status": "Completed", "createdDate": OLD_DATE},
            ],
            "households": [
                *SNAPSHOT_BODY["households"],
                {"id": None, "name": None, "createdDate": OLD_DATE},
            ],
        }
        for path in ("/practice/snapshot", "/practice/risks", "/practice/pipeline"):
            response = await client.post(path, json=body)
            assert response.status_code == 200

        data = (await client.post("/practice/snapshot", json=body)).json()
        assert data["totalTasks"] == 2
        assert data["totalHouseholds"] == 3
        assert data["completedTasks"] == 1

    async def test_malformed_body_is_422(self, client):
        response = await client.post("/practice/snapshot", json={"tasks": "not a list"})
        assert response.status_code == 422

    async def test_out_of_range_override_is_422(self, client):
        body = {"revenueOverrides": {"pipelineConversionRate": 1.5}}
        response = await client.post("/practice/snapshot", json=body)
        assert response.status_code == 422

    async def test_crm_snapshot(self, client):
        body = {
            "tasks": [
                {
                    "Id": "T1",
                    "Subject": "COMPLIANCE REVIEW",
                    "Status": "Completed",
                    "CreatedDate": OLD_DATE,
                    "What": {"Id": "H1", "Name": "Smith"},
                },
            ],
            "households": [
                {"Id": "H1", "Name": "Smith", "CreatedDate": OLD_DATE, "Owner": {"Name": "Integration User"}},
            ],
        }
        response = await client.post("/practice/snapshot/crm", json=body)

        assert response.status_code == 200
        data = response.json()
        assert data["complianceReviews"] == 1
        assert data["pipeline"][3]["key"] == "compliance_done"
        assert data["pipeline"][3]["count"] == 1

    async def test_csv_snapshot(self, client):
        body = {
            "tasksCsv": "Id,Subject,Status,What.Id\nT1,MEETING NOTE,Completed,H1\n",
            "householdsCsv": f"Id,Name,CreatedDate\nH1,Smith,{OLD_DATE}\n",
        }
        response = await client.post("/practice/snapshot/csv", json=body)

        assert response.status_code == 200
        data = response.json()
        assert data["meetingNotes"] == 1
        assert data["totalHouseholds"] == 1

    async def test_csv_snapshot_missing_column_is_400(self, client):
        body = {"tasksCsv": "Id\nT1\n", "householdsCsv": "Id,Name\nH1,Smith\n"}
        response = await client.post("/practice/snapshot/csv", json=body)

        assert response.status_code == 400
        assert [e["field"] for e in response.json()["detail"]] == ["subject"]


# =============================================================================
# Test Class: TestSliceEndpoints
# =============================================================================

class TestSliceEndpoints:

    async def test_risks(self, client):
        response = await client.post("/practice/risks", json=SNAPSHOT_BODY)

        assert response.status_code == 200
        risks = response.json()
        assert len(risks) > 0
        assert all(r["severity"] == "critical" for r in risks)

    async def test_risks_respect_limit(self, client, settings):
        app.dependency_overrides[get_settings_dependency] = lambda: settings.model_copy(
            update={"risk_limit": 1}
        )
        response = await client.post("/practice/risks", json=SNAPSHOT_BODY)
        assert len(response.json()) == 1

    async def test_pipeline(self, client):
        response = await client.post("/practice/pipeline", json=SNAPSHOT_BODY)

        assert response.status_code == 200
        stages = response.json()
        assert [s["key"] for s in stages] == [
            "just_onboarded", "docusign_sent", "docusign_signed", "compliance_done", "fully_active",
        ]


# =============================================================================
# Test Class: TestConfigEndpoints
# =============================================================================

class TestConfigEndpoints:

    async def test_assumptions(self, client):
        response = await client.get("/practice/assumptions")
        assert response.status_code == 200
        assert response.json() == {
            "avgAumPerHousehold": 2_000_000,
            "feeScheduleBps": 85,
            "pipelineConversionRate": 0.65,
            "pipelineAvgAum": 1_500_000,
        }

    async def test_config(self, client):
        response = await client.get("/practice/config")

        assert response.status_code == 200
        data = response.json()
        assert data["healthWeights"] == {
            "Compliance Coverage": 30,
            "DocuSign Velocity": 25,
            "Tasks On Time": 25,
            "Meeting Coverage (90d)": 20,
        }
        assert data["knownAdvisors"] == ["Alice Advisor", "Bob Advisor", "Cara Advisor"]
        assert data["riskLimit"] == 30
