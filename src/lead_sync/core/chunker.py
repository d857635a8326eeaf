"""
Lead Chunker - Count-bounded batching for the lead import API.

Instantly accepts at most 1000 leads per add call. Leads are split into
consecutive chunks that never exceed the configured maximum.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

from lead_sync.config import INSTANTLY_MAX_LEADS_PER_REQUEST
from lead_sync.core.models import DestinationRecord


@dataclass
class LeadChunk:
    """A chunk of leads ready for one import call."""

    records: list[DestinationRecord]
    start_offset: int
    end_offset: int

    @property
    def size(self) -> int:
        return len(self.records)


class LeadChunker:
    """
    Splits a lead sequence into size-bounded chunks.

    Example:
        chunker = LeadChunker(1000)

        for chunk in chunker.chunk(records):
            await client.add_leads(campaign_id, chunk.records)
    """

    def __init__(self, max_chunk_size: int = INSTANTLY_MAX_LEADS_PER_REQUEST) -> None:
        if max_chunk_size < 1:
            raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")
        self.max_chunk_size = max_chunk_size

    def chunk(self, records: Sequence[DestinationRecord]) -> Iterator[LeadChunk]:
        """Yield consecutive chunks covering every record exactly once."""
        for start in range(0, len(records), self.max_chunk_size):
            batch = list(records[start:start + self.max_chunk_size])
            yield LeadChunk(
                records=batch,
                start_offset=start,
                end_offset=start + len(batch) - 1,
            )

    def estimate_chunks_needed(self, total_records: int) -> int:
        """Number of import calls needed for ``total_records`` leads."""
        if total_records <= 0:
            return 0
        return (total_records + self.max_chunk_size - 1) // self.max_chunk_size
