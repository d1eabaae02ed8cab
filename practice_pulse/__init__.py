"""
Practice Pulse Package.

Practice-management metrics engine for financial-advisory firms. Turns raw CRM
task and household records into one practice snapshot: health score, risk
queue, onboarding pipeline, advisor and staff scoreboards, revenue estimates
and weekly trends.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration and dependencies
    - models: Pydantic schemas and enums
    - services: Engine services and CRM ingestion
    - jobs: Batch snapshot export
"""

__version__ = "1.0.0"
