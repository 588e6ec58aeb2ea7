"""Workspace state for DclLS."""
from .settings_cache import DocumentSettingsCache, Settings

__all__ = ['DocumentSettingsCache', 'Settings']
