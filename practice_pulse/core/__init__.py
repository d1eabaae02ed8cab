"""
Core infrastructure package for the Practice Pulse engine.

Provides:
- Configuration management via pydantic-settings
- FastAPI dependency injection utilities

Re-exports key components so other modules can write:

    from practice_pulse.core import get_settings, SettingsDep

Components Re-exported:
    Settings: Pydantic settings class with all engine policy constants
    get_settings: Function returning the cached Settings singleton
    get_settings_dependency: FastAPI dependency returning Settings
    SettingsDep: Type alias for Settings dependency injection
"""

# =============================================================================
# Re-exports from practice_pulse.core.config
# =============================================================================
from practice_pulse.core.config import Settings, get_settings

# =============================================================================
# Re-exports from practice_pulse.core.dependencies
# =============================================================================
from practice_pulse.core.dependencies import (
    get_settings_dependency,
    SettingsDep,
)

__all__ = [
    'Settings',
    'get_settings',
    'get_settings_dependency',
    'SettingsDep',
]
