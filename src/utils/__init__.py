"""
Utility helpers for the teams file organizer.
"""

from .logging_setup import BASE_LOGGER, setup_logging

__all__ = ["BASE_LOGGER", "setup_logging"]
