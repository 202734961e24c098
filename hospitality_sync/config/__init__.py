"""Configuration package."""

from hospitality_sync.config.logging import configure_logging, get_logger
from hospitality_sync.config.settings import Settings, settings

__all__ = ["settings", "Settings", "configure_logging", "get_logger"]
