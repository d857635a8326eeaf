"""Lead Sync - Amplemarket lead lists to Instantly campaigns synchronization tool."""

__version__ = "1.0.0"
__author__ = "Lead Sync Contributors"

from lead_sync.config import Settings, load_settings

__all__ = ["Settings", "load_settings", "__version__"]
