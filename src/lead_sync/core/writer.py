"""
Batch Writer - Sends a list's leads to an Instantly campaign.

Chunks are sent one after another. A rejected chunk stops the remaining
chunks for that list; chunks already accepted stay in the campaign.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

import httpx

from lead_sync.core.chunker import LeadChunker
from lead_sync.core.models import DestinationRecord
from lead_sync.errors import WriteFailure
from lead_sync.utils.logger import get_logger

logger = get_logger(__name__)

NOTHING_TO_SEND = "No valid leads with email addresses found"


class LeadImporter(Protocol):
    """The destination capability the writer needs."""

    async def add_leads(
        self,
        campaign_id: str,
        leads: list[dict[str, Any]],
        skip_if_in_workspace: bool = True,
    ) -> httpx.Response: ...


@dataclass
class WriteOutcome:
    """Result of writing one list's leads."""

    chunks: int = 0
    total_leads: int = 0
    results: list[Any] = field(default_factory=list)
    message: str | None = None
    dry_run: bool = False

    def to_dict(self) -> dict[str, Any]:
        if self.message:
            return {"message": self.message}
        data: dict[str, Any] = {
            "chunks": self.chunks,
            "totalLeads": self.total_leads,
            "results": self.results,
        }
        if self.dry_run:
            data["dryRun"] = True
        return data


def _acknowledgment(response: httpx.Response) -> Any:
    """Decoded response body, or the raw text when it is not JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text


class BatchWriter:
    """
    Writes leads to a campaign in size-bounded chunks.

    Example:
        writer = BatchWriter(instantly, max_chunk_size=1000)
        outcome = await writer.write(campaign.id, records)
    """

    def __init__(
        self,
        importer: LeadImporter,
        max_chunk_size: int = 1000,
        skip_if_in_workspace: bool = True,
        dry_run: bool = False,
    ) -> None:
        self.importer = importer
        self.chunker = LeadChunker(max_chunk_size)
        self.skip_if_in_workspace = skip_if_in_workspace
        self.dry_run = dry_run

    async def write(
        self,
        campaign_id: str,
        records: Sequence[DestinationRecord],
    ) -> WriteOutcome:
        """
        Send every record to the campaign.

        Raises:
            WriteFailure: When a chunk is rejected; later chunks are not sent
        """
        if not records:
            return WriteOutcome(message=NOTHING_TO_SEND)

        outcome = WriteOutcome(dry_run=self.dry_run)

        for chunk in self.chunker.chunk(records):
            if self.dry_run:
                outcome.chunks += 1
                outcome.total_leads += chunk.size
                continue

            response = await self.importer.add_leads(
                campaign_id,
                [record.to_payload() for record in chunk.records],
                skip_if_in_workspace=self.skip_if_in_workspace,
            )
            if not response.is_success:
                logger.warning(
                    "Chunk %d-%d for campaign %s rejected with %s",
                    chunk.start_offset,
                    chunk.end_offset,
                    campaign_id,
                    response.status_code,
                )
                raise WriteFailure(
                    response.status_code,
                    response.text,
                    chunks_sent=outcome.chunks,
                )

            outcome.chunks += 1
            outcome.total_leads += chunk.size
            outcome.results.append(_acknowledgment(response))
            logger.debug(
                "Sent leads %d-%d to campaign %s",
                chunk.start_offset,
                chunk.end_offset,
                campaign_id,
            )

        return outcome
