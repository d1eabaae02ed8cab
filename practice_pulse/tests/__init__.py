'''
Practice Pulse Test Suite

Test Modules:
-------------
- test_extraction.py: Advisor label and revenue directive parsing
- test_classification.py: Task tagging, date handling, record partitions
- test_attribution.py: Advisor attribution order and round-robin fallback
- test_health_score.py: Composite health score and breakdown
- test_pipeline.py: Onboarding stage placement, stuck counts, conversion
- test_scoreboard.py: Advisor scoreboard and ops staff workload
- test_risk_radar.py: Risk detection rules, ordering, household scores
- test_revenue.py: Assumption precedence, AUM blending, forecast, trend
- test_trends.py: 7-day window bucketing and weekly comparison
- test_practice.py: End-to-end snapshot properties and scenarios
- test_ingestion.py: CSV and raw CRM payload ingestion
- test_api.py: FastAPI endpoints over ASGI
- test_jobs.py: Snapshot export job idempotency

Running Tests:
--------------
    pip install -e ".[test]"
    pytest -v

Configuration:
--------------
See conftest.py for shared fixtures and record factories.
'''

__all__ = []
