"""
Configuration adapter
"""
from .loader import Settings, SettingsLoader

__all__ = ["Settings", "SettingsLoader"]
