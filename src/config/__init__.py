"""
rucksack configuration

RUCKSACK_* environment settings (root prefix, size limits, default plan
filename) exposed as the appsettings singleton.
"""

from .settings import appsettings, AppSettings

__all__ = ["appsettings", "AppSettings"]
