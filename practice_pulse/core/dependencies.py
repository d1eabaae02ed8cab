"""
FastAPI dependency injection module for the Practice Pulse API.

Provides the engine settings to endpoint handlers through FastAPI's
dependency system, so tests can swap configuration with
`app.dependency_overrides[get_settings_dependency]`.

Usage Examples:
    @router.get("/practice/config")
    def engine_config(settings: SettingsDep) -> EngineConfigSummary:
        return EngineConfigSummary(riskLimit=settings.risk_limit, ...)

See Also:
    - practice_pulse/core/config.py: Settings management and environment variables
    - practice_pulse/api/practice.py: Endpoint handlers using these dependencies
"""

from typing import Annotated

from fastapi import Depends

from practice_pulse.core.config import Settings, get_settings


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    This is a thin wrapper around get_settings() to enable FastAPI's
    dependency override mechanism for testing:

        app.dependency_overrides[get_settings_dependency] = lambda: test_settings

    Returns:
        Settings: The cached Settings instance.
    """
    return get_settings()


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

# Usage: def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]
