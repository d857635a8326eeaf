"""Core sync engine components for Lead Sync."""

from lead_sync.core.engine import RunReport, SkipReason, SyncEngine
from lead_sync.core.matcher import EntityMatcher
from lead_sync.core.paginator import PageRequest, PaginatedFetcher, PaginationStyle
from lead_sync.core.tracker import IdempotencyTracker
from lead_sync.core.transformer import RecordTransformer
from lead_sync.core.writer import BatchWriter, WriteOutcome

__all__ = [
    "SyncEngine",
    "RunReport",
    "SkipReason",
    "EntityMatcher",
    "PaginatedFetcher",
    "PageRequest",
    "PaginationStyle",
    "IdempotencyTracker",
    "RecordTransformer",
    "BatchWriter",
    "WriteOutcome",
]
