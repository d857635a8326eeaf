"""API clients for Lead Sync."""

from lead_sync.connectors.amplemarket import AmplemarketClient
from lead_sync.connectors.instantly import InstantlyClient

__all__ = ["AmplemarketClient", "InstantlyClient"]
