"""
Configuration package for the teams file organizer.
"""

from .settings import AiSettings, AppConfig, ContentSettings

__all__ = ["AiSettings", "AppConfig", "ContentSettings"]
