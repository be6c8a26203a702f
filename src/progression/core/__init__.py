"""Core configuration and utilities for the progression engine."""

from progression.core.config import get_settings, settings
from progression.core.logging import get_logger, setup_logging

__all__ = ["settings", "get_settings", "setup_logging", "get_logger"]
