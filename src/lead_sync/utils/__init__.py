"""Utility modules for Lead Sync."""

from lead_sync.utils.logger import get_logger, setup_logging

__all__ = ["setup_logging", "get_logger"]
